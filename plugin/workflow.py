# =============================================================================
# VisualEyes Heatmap Client - Heatmap Workflow Orchestrator
# =============================================================================
# Sequences one analysis run over the selected artboard:
#
#   Idle → Validating → Rendering → Uploading → Applying → Done
#
# with Aborted reachable from every state.  Each step is a single blocking
# call (render, upload, download, file write); nothing runs concurrently.
#
#   1. Idle:       require a selected artboard and a stored API key
#   2. Validating: turn rectangles named "AOI" into AreaOfInterest records,
#                  hiding and relabelling the ones that do not qualify
#   3. Rendering:  rasterize the artboard and encode it as a data URL
#   4. Uploading:  call the prediction API
#   5. Applying:   lay the heatmap over the artboard and draw one locked
#                  score overlay group per area
#
# Errors are caught here, logged, and shown as a toast; scene changes made
# before the failure are kept.
# =============================================================================

import enum
import logging
import os
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
from urllib.parse import urlparse

from plugin import errors
from plugin.client import PredictionClient, PredictionFailure, PredictionSuccess
from plugin.codec import encode_to_data_url
from plugin.credentials import CredentialStore
from plugin.geometry import Classification, classify
from plugin.notify import Notifier
from plugin.render import render_artboard
from plugin.scene import (
    Artboard,
    Gradient,
    Group,
    ImageFill,
    Rectangle,
    SceneEditor,
    SolidColor,
    Stroke,
    Text,
)
from shared.schemas import AreaOfInterest

logger = logging.getLogger(__name__)

AOI_LAYER_NAME = "AOI"
HEATMAP_LAYER_NAME = "VisualEyes Heatmap"
SCORE_BADGE_SIZE = (70, 32)

_REJECTION_LABELS = {
    Classification.REJECTED_TOO_SMALL: (
        "🚨 Too small (minimum {w}x{h})",
        " 👎 One of your rectangles was not big enough (minimum {w}x{h} pixels)",
    ),
    Classification.REJECTED_OUT_OF_BOUNDS: (
        "🚨 Off the current Artboard",
        " 😱 One of your rectangles is outside the current Artboard.",
    ),
}


class WorkflowState(enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RENDERING = "rendering"
    UPLOADING = "uploading"
    APPLYING = "applying"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class WorkflowResult:
    """
    Outcome of one workflow run.

    Attributes:
        state:          DONE or ABORTED.
        areas:          Areas captured during validation (scores merged on
                        success).
        rejected:       (layer guid, classification) for every rejected AOI.
        heatmap_layer:  The full-artboard heatmap rectangle, when applied.
        overlay_groups: One locked group per scored area.
        error:          The failure that aborted the run.
    """

    state: WorkflowState = WorkflowState.IDLE
    areas: List[AreaOfInterest] = field(default_factory=list)
    rejected: List[Tuple[str, Classification]] = field(default_factory=list)
    heatmap_layer: Optional[Rectangle] = None
    overlay_groups: List[Group] = field(default_factory=list)
    error: Optional[errors.VisualEyesError] = None

    @property
    def ok(self) -> bool:
        return self.state is WorkflowState.DONE


def resolve_fill_color(layer: Rectangle, default: str) -> str:
    """
    Pick the overlay color for an AOI layer from its fill.

    Solid fills give their own color, gradients their first stop; missing,
    disabled, or image fills fall back to ``default``.
    """
    fill = layer.fill
    if fill is None or not layer.fill_enabled:
        return default
    if isinstance(fill, SolidColor):
        return fill.color or default
    if isinstance(fill, Gradient):
        return fill.stops[0].color or default
    return default


class HeatmapWorkflow:
    """
    Runs heatmap and AOI analyses against a scene.

    Args:
        editor:   Scene mutation capability for the open document.
        client:   Prediction API client.
        store:    Where the API key is read from.
        notifier: Toast sink for user messages.
        config:   The global Config instance.
        renderer: Rendering collaborator ``(artboard, path, scale, quality)``.
    """

    def __init__(
        self,
        editor: SceneEditor,
        client: PredictionClient,
        store: CredentialStore,
        notifier: Notifier,
        config,
        renderer: Callable[..., str] = render_artboard,
    ):
        self._editor = editor
        self._client = client
        self._store = store
        self._notifier = notifier
        self._config = config
        self._renderer = renderer

    # -----------------------------------------------------------------
    # Entry points
    # -----------------------------------------------------------------

    def generate_heatmap(self) -> WorkflowResult:
        """Plain heatmap for the selected artboard (no AOI scoring)."""
        return self._run(with_areas=False)

    def analyze_areas(self) -> WorkflowResult:
        """Heatmap plus attention scores for the artboard's AOI rectangles."""
        return self._run(with_areas=True)

    # -----------------------------------------------------------------
    # Run loop
    # -----------------------------------------------------------------

    def _transition(self, result: WorkflowResult, state: WorkflowState) -> None:
        logger.debug("Workflow %s → %s", result.state.value, state.value)
        result.state = state

    def _run(self, with_areas: bool) -> WorkflowResult:
        result = WorkflowResult()
        try:
            artboard, api_key = self._start()
            self._notifier.toast("🧠 Your heatmap is generating...")

            if with_areas:
                self._transition(result, WorkflowState.VALIDATING)
                self._collect_areas(artboard, result)

            self._transition(result, WorkflowState.RENDERING)
            image_data_url = self._render(artboard)

            self._transition(result, WorkflowState.UPLOADING)
            prediction = self._client.submit(image_data_url, api_key, result.areas)
            if isinstance(prediction, PredictionFailure):
                raise prediction.to_error()

            self._transition(result, WorkflowState.APPLYING)
            self._apply(artboard, prediction, result)

            self._transition(result, WorkflowState.DONE)
            self._notifier.toast("🎉 Bazinga!")
        except errors.VisualEyesError as exc:
            self._abort(result, exc)
        except Exception as exc:
            logger.exception("Unexpected failure in state %s", result.state.value)
            self._abort(result, errors.UnknownServiceError(cause=exc))
        return result

    def _abort(self, result: WorkflowResult, error: errors.VisualEyesError) -> None:
        if error.cause is not None:
            logger.warning(
                "Workflow aborted in state %s: %s (cause: %r)",
                result.state.value, type(error).__name__, error.cause,
            )
        else:
            logger.warning(
                "Workflow aborted in state %s: %s", result.state.value, type(error).__name__
            )
        result.error = error
        result.state = WorkflowState.ABORTED
        self._notifier.toast(error.message)

    # -----------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------

    def _start(self) -> Tuple[Artboard, str]:
        artboard = self._editor.selected_artboard()
        if artboard is None:
            raise errors.NoArtboardSelected()

        api_key = self._store.get()
        if not api_key:
            raise errors.MissingApiKey()

        return artboard, api_key

    def _collect_areas(self, artboard: Artboard, result: WorkflowResult) -> None:
        """
        Classify every rectangle named "AOI" directly under the artboard.

        Rejected layers are hidden and relabelled; accepted ones become
        AreaOfInterest records and are removed from the artboard so the
        rendition shows the plain design.
        """
        min_w, min_h = self._config.min_aoi_width, self._config.min_aoi_height
        candidates = [
            layer for layer in artboard.children
            if isinstance(layer, Rectangle) and layer.name == AOI_LAYER_NAME
        ]

        for layer in candidates:
            verdict = classify(layer.bounds, artboard.bounds, min_w, min_h)
            if verdict is not Classification.ACCEPTED:
                label, message = _REJECTION_LABELS[verdict]
                self._notifier.toast(message.format(w=f"{min_w:g}", h=f"{min_h:g}"))
                self._editor.hide(layer)
                self._editor.rename(layer, label.format(w=f"{min_w:g}", h=f"{min_h:g}"))
                result.rejected.append((layer.guid, verdict))
                logger.info("AOI %s rejected: %s", layer.guid, verdict.value)
                continue

            color = resolve_fill_color(layer, self._config.branding_color)
            self._editor.remove(layer)
            result.areas.append(
                AreaOfInterest(
                    id=layer.guid,
                    color=color,
                    x=layer.x,
                    y=layer.y,
                    width=layer.width,
                    height=layer.height,
                )
            )

        logger.info(
            "Collected %d area(s) of interest (%d rejected)",
            len(result.areas), len(result.rejected),
        )

    def _render(self, artboard: Artboard) -> str:
        path = os.path.join(self._config.temp_dir, "rendition.jpg")
        try:
            self._renderer(
                artboard,
                path,
                scale=self._config.rendition_scale,
                quality=self._config.rendition_quality,
            )
            with open(path, "rb") as f:
                binary = f.read()
        except OSError as exc:
            raise errors.UnknownServiceError(cause=exc) from exc

        return encode_to_data_url(binary, self._config.rendition_mime)

    def _persist_heatmap(self, url: str, data: bytes) -> str:
        extension = os.path.splitext(urlparse(url).path)[1] or ".jpg"
        path = os.path.join(self._config.temp_dir, f"heatmap-{uuid.uuid4().hex}{extension}")
        try:
            os.makedirs(self._config.temp_dir, exist_ok=True)
            with open(path, "wb") as f:
                f.write(data)
        except OSError as exc:
            raise errors.DecodeError(f"Couldn't store heatmap: {exc}", cause=exc) from exc
        return path

    def _apply(
        self,
        artboard: Artboard,
        prediction: PredictionSuccess,
        result: WorkflowResult,
    ) -> None:
        # Ids the request never sent are ignored; every sent id must come back.
        scores = {area.id: area.score for area in prediction.areas}
        missing = [area.id for area in result.areas if area.id not in scores]
        if missing:
            raise errors.UnknownServiceError(
                cause=KeyError(f"No score returned for area(s): {', '.join(missing)}")
            )

        data = self._client.fetch_heatmap(prediction.heatmap_url)
        heatmap_path = self._persist_heatmap(prediction.heatmap_url, data)

        layer = Rectangle(
            name=HEATMAP_LAYER_NAME,
            width=artboard.width,
            height=artboard.height,
            fill=ImageFill(path=heatmap_path),
        )
        self._editor.add_child(artboard, layer)
        self._editor.move_in_parent(layer, 0, 0)
        self._editor.lock(layer)
        result.heatmap_layer = layer

        for index, area in enumerate(result.areas):
            area.score = scores[area.id]
            result.overlay_groups.append(self._draw_area(artboard, area, index))

        self._editor.select(artboard.guid)

    def _draw_area(self, artboard: Artboard, area: AreaOfInterest, index: int) -> Group:
        """Draw the locked "AOI <n>" overlay: outline, score badge, score text."""
        background = Rectangle(
            name="Background",
            width=area.width,
            height=area.height,
            fill=SolidColor(color=area.color, alpha=0.2),
            stroke=Stroke(color=area.color, width=4),
        )
        badge = Rectangle(
            name="Score Background",
            width=SCORE_BADGE_SIZE[0],
            height=SCORE_BADGE_SIZE[1],
            fill=SolidColor(color=area.color),
        )
        label = Text(
            text=f"{area.score:g}%",
            fill=SolidColor(color="#FFFFFF"),
            font_size=18,
            font_style="bold",
        )

        for node in (background, badge, label):
            self._editor.add_child(artboard, node)
        self._editor.move_in_parent(background, area.x, area.y)
        self._editor.move_in_parent(badge, area.x, area.y)
        # Baseline 22px below the badge top.
        self._editor.move_in_parent(label, area.x + 12, area.y + 22 - label.font_size)

        group = self._editor.group([background, badge, label], name=f"AOI {index + 1}")
        self._editor.lock(group)
        return group
