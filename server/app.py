# =============================================================================
# VisualEyes Heatmap Client - Mock Prediction Server
# =============================================================================
# A local FastAPI stand-in for the VisualEyes prediction API, used for
# offline development and contract tests.  It honours the same wire format:
#
#   POST /predict/            multipart {isTransparent, platform, image, aoi?}
#                             Authorization: Token <key>
#   GET  /heatmaps/{name}     the generated heatmap image
#   GET  /health              liveness and storage stats
#
# Accounts decide the status code: unknown key → 401, AOI scoring on a free
# plan → 402, exhausted quota → 403.  In echo mode the uploaded image bytes
# are served back verbatim as the "heatmap".
# =============================================================================

import base64
import binascii
import io
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from PIL import Image, UnidentifiedImageError
from pydantic import TypeAdapter, ValidationError

from server.heatmap import area_scores, colorize, saliency_map
from shared.schemas import AoiPolygon, AreaScore, HealthResponse, PredictionEnvelope

logger = logging.getLogger(__name__)

_POLYGONS = TypeAdapter(List[AoiPolygon])

_EXTENSIONS = {"image/png": ".png", "image/jpeg": ".jpg", "image/jpg": ".jpg"}

# Rendered artboards travel as one base64 text field, well past the
# default 1 MB per-field limit.
MAX_FIELD_BYTES = 64 * 1024 * 1024


@dataclass
class Account:
    """
    A mock customer account.

    Attributes:
        plan:  "free" (plain heatmaps only) or "pro" (AOI scoring allowed).
        quota: Remaining predictions; each successful call uses one.
    """

    plan: str = "pro"
    quota: int = 100


def default_accounts() -> Dict[str, Account]:
    return {"demo-key": Account(plan="pro", quota=1000)}


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    envelope = PredictionEnvelope(code=code, message=message)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(exclude_none=True))


def _decode_image(data_url: str) -> Tuple[str, bytes]:
    """
    Split a ``data:<mime>;base64,<payload>`` form field into MIME and bytes.

    Raises:
        HTTPException: If the field is not a base64 data URL.
    """
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise HTTPException(status_code=400, detail="image must be a base64 data URL")
    try:
        return header[len("data:"):-len(";base64")], base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise HTTPException(status_code=400, detail=f"Failed to decode image: {exc}")


def _parse_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    return token if scheme == "Token" and token else None


def create_app(
    accounts: Optional[Dict[str, Account]] = None,
    echo: bool = False,
) -> FastAPI:
    """
    Build a mock prediction server.

    Args:
        accounts: API key → Account. Defaults to a single "demo-key" pro
                  account.
        echo:     Serve the uploaded image back unchanged instead of a
                  generated heatmap (all area scores are 0).

    Returns:
        The FastAPI application.
    """
    accounts = default_accounts() if accounts is None else accounts
    heatmaps: Dict[str, Tuple[bytes, str]] = {}
    start_time = time.time()

    app = FastAPI(
        title="VisualEyes Mock Prediction Server",
        description=(
            "Emulates the VisualEyes /predict/ API: accepts a rendered design "
            "as a base64 data URL, returns a saliency heatmap and per-area "
            "attention scores."
        ),
        version="1.0.0",
    )
    app.state.accounts = accounts
    app.state.heatmaps = heatmaps

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Liveness plus the number of heatmaps held in memory."""
        return HealthResponse(
            status="ok",
            heatmaps_stored=len(heatmaps),
            uptime_seconds=round(time.time() - start_time, 2),
        )

    @app.post("/predict/")
    async def predict(request: Request, authorization: Optional[str] = Header(None)):
        """
        Generate a heatmap for an uploaded design.

        Status codes mirror the real service: 401 unknown key, 402 AOI on a
        free plan, 403 quota exhausted.
        """
        token = _parse_token(authorization)
        account = accounts.get(token) if token else None
        if account is None:
            logger.info("Rejected prediction: invalid key")
            return _error(401, "invalid_key", "Your API key is not valid")

        form = await request.form(max_part_size=MAX_FIELD_BYTES)
        image = form.get("image")
        platform = form.get("platform", "")
        aoi = form.get("aoi")
        if not isinstance(image, str):
            raise HTTPException(status_code=400, detail="image field is required")

        try:
            polygons = _POLYGONS.validate_python(json.loads(aoi)) if aoi else []
        except (ValueError, ValidationError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid aoi field: {exc}")

        if polygons and account.plan != "pro":
            return _error(402, "upgrade_required", "AOI scoring requires an upgraded plan")
        if account.quota <= 0:
            return _error(403, "quota_exceeded", "Your heatmaps limit has been exceeded")

        mime_type, raw = _decode_image(image)
        transparent = str(form.get("isTransparent", "true")).lower() == "true"

        if echo:
            body, media_type = raw, mime_type
            scores = {polygon.id: 0 for polygon in polygons}
        else:
            try:
                with Image.open(io.BytesIO(raw)) as uploaded:
                    uploaded.load()
                    source = uploaded.convert("RGB")
            except (UnidentifiedImageError, OSError) as exc:
                raise HTTPException(status_code=400, detail=f"Unreadable image: {exc}")

            saliency = saliency_map(source)
            overlay = colorize(saliency, source.size, transparent=transparent)
            buffer = io.BytesIO()
            if transparent:
                overlay.save(buffer, format="PNG")
                media_type = "image/png"
            else:
                overlay.convert("RGB").save(buffer, format="JPEG", quality=90)
                media_type = "image/jpeg"
            body = buffer.getvalue()
            scores = area_scores(saliency, source.size, polygons)

        account.quota -= 1
        name = f"{uuid.uuid4().hex}{_EXTENSIONS.get(media_type, '')}"
        heatmaps[name] = (body, media_type)

        logger.info(
            "Prediction for %s (platform=%s, %d area(s), %d bytes) → %s",
            token, platform, len(polygons), len(body), name,
        )
        envelope = PredictionEnvelope(
            code="success",
            url=f"{request.base_url}heatmaps/{name}",
            aoi=[AreaScore(id=pid, score=score) for pid, score in scores.items()],
        )
        return envelope.model_dump(exclude_none=True)

    @app.get("/heatmaps/{name}")
    def get_heatmap(name: str):
        """Serve a stored heatmap image."""
        if name not in heatmaps:
            raise HTTPException(status_code=404, detail=f"Heatmap {name} not found")
        body, media_type = heatmaps[name]
        return Response(content=body, media_type=media_type)

    return app


app = create_app()
