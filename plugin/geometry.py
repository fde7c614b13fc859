# =============================================================================
# VisualEyes Heatmap Client - AOI Geometry Validation
# =============================================================================
# Decides whether a rectangle layer qualifies as an area-of-interest: it must
# be at least the minimum badge size and lie fully inside its artboard.
# Pure functions only; hiding or renaming rejected layers is the caller's job.
# =============================================================================

import enum
from typing import NamedTuple

MIN_WIDTH = 70
MIN_HEIGHT = 32


class Bounds(NamedTuple):
    """Axis-aligned box; layer bounds are in parent (artboard) coordinates."""

    x: float
    y: float
    width: float
    height: float


class Classification(enum.Enum):
    ACCEPTED = "accepted"
    REJECTED_TOO_SMALL = "rejected_too_small"
    REJECTED_OUT_OF_BOUNDS = "rejected_out_of_bounds"


def is_too_small(
    bounds: Bounds,
    min_width: float = MIN_WIDTH,
    min_height: float = MIN_HEIGHT,
) -> bool:
    return bounds.width < min_width or bounds.height < min_height


def is_inside(bounds: Bounds, artboard: Bounds) -> bool:
    """
    Check that ``bounds`` is fully contained in the artboard.

    Only the artboard's size matters: layer bounds are relative to the
    artboard's own origin.
    """
    return (
        bounds.x >= 0
        and bounds.y >= 0
        and bounds.x + bounds.width <= artboard.width
        and bounds.y + bounds.height <= artboard.height
    )


def classify(
    layer_bounds: Bounds,
    artboard_bounds: Bounds,
    min_width: float = MIN_WIDTH,
    min_height: float = MIN_HEIGHT,
) -> Classification:
    """
    Classify a candidate AOI layer.

    Rules are applied in order and the first match wins:
        1. Smaller than ``min_width`` x ``min_height`` → REJECTED_TOO_SMALL,
           wherever it sits.
        2. Not fully inside the artboard → REJECTED_OUT_OF_BOUNDS.
        3. Otherwise → ACCEPTED.

    Args:
        layer_bounds:    Bounding box of the layer in artboard coordinates.
        artboard_bounds: Bounds of the parent artboard.
        min_width:       Minimum accepted width in pixels.
        min_height:      Minimum accepted height in pixels.

    Returns:
        The Classification for the layer.
    """
    if is_too_small(layer_bounds, min_width, min_height):
        return Classification.REJECTED_TOO_SMALL
    if not is_inside(layer_bounds, artboard_bounds):
        return Classification.REJECTED_OUT_OF_BOUNDS
    return Classification.ACCEPTED
