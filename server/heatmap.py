# =============================================================================
# VisualEyes Heatmap Client - Mock Saliency Heatmaps
# =============================================================================
# A cheap stand-in for the real attention model, used by the mock server.
# Saliency is centre-surround luminance contrast: the absolute difference
# between the image and a heavily blurred copy, plus each pixel's distance
# from the global mean, smoothed and normalised to [0, 1].
#
# Area scores are the share of total saliency mass that falls inside each
# area's bounding box, as a whole percentage.
# =============================================================================

import logging
from typing import Dict, Sequence, Tuple

import numpy as np
from PIL import Image, ImageFilter

from shared.schemas import AoiPolygon

logger = logging.getLogger(__name__)

WORKING_SIZE = 256  # Longest side of the saliency map


def _to_float(image: Image.Image) -> np.ndarray:
    return np.asarray(image, dtype=np.float32) / 255.0


def saliency_map(image: Image.Image) -> np.ndarray:
    """
    Compute a normalised saliency map for an image.

    Args:
        image: Any PIL image; it is converted to grayscale and downscaled so
               its longest side is WORKING_SIZE.

    Returns:
        numpy float32 array of shape (h, w) with values in [0, 1].
    """
    scale = WORKING_SIZE / max(image.width, image.height)
    size = (max(1, int(image.width * scale)), max(1, int(image.height * scale)))
    gray_image = image.convert("L").resize(size, Image.BILINEAR)

    gray = _to_float(gray_image)
    surround = _to_float(gray_image.filter(ImageFilter.GaussianBlur(radius=8)))

    contrast = np.abs(gray - surround) + 0.5 * np.abs(gray - gray.mean())

    # Smooth into blobs so the heatmap reads as attention, not edges
    contrast_image = Image.fromarray(np.clip(contrast * 255.0, 0, 255).astype(np.uint8), "L")
    smoothed = _to_float(contrast_image.filter(ImageFilter.GaussianBlur(radius=6)))

    peak = smoothed.max()
    if peak <= 0:
        return np.zeros_like(smoothed)
    return smoothed / peak


def colorize(saliency: np.ndarray, size: Tuple[int, int], transparent: bool = True) -> Image.Image:
    """
    Render a saliency map as a blue→green→red heatmap at ``size``.

    With ``transparent`` the alpha channel follows the saliency, so the
    image can be laid directly over the design.
    """
    s = np.clip(saliency, 0.0, 1.0)
    red = np.clip(2.0 * s - 0.5, 0.0, 1.0)
    green = np.clip(1.5 - np.abs(4.0 * s - 2.0), 0.0, 1.0)
    blue = np.clip(1.0 - 2.0 * s, 0.0, 1.0)
    alpha = s * 0.75 if transparent else np.ones_like(s)

    rgba = np.stack([red, green, blue, alpha], axis=-1)
    image = Image.fromarray((rgba * 255.0).astype(np.uint8), "RGBA")
    return image.resize(size, Image.BILINEAR)


def area_scores(
    saliency: np.ndarray,
    image_size: Tuple[int, int],
    polygons: Sequence[AoiPolygon],
) -> Dict[str, int]:
    """
    Score each polygon by its share of the total saliency mass.

    Args:
        saliency:   Map from saliency_map().
        image_size: (width, height) of the original image, in the same units
                    as the polygon coordinates.
        polygons:   Areas to score.

    Returns:
        Mapping of polygon id → score in [0, 100].
    """
    height, width = saliency.shape
    sx = width / image_size[0]
    sy = height / image_size[1]
    total = float(saliency.sum())

    scores = {}
    for polygon in polygons:
        xs = [p.x for p in polygon.points]
        ys = [p.y for p in polygon.points]
        left = int(np.clip(np.floor(min(xs) * sx), 0, width))
        right = int(np.clip(np.ceil(max(xs) * sx), 0, width))
        top = int(np.clip(np.floor(min(ys) * sy), 0, height))
        bottom = int(np.clip(np.ceil(max(ys) * sy), 0, height))

        mass = float(saliency[top:bottom, left:right].sum())
        scores[polygon.id] = int(round(100.0 * mass / total)) if total > 0 else 0

    logger.debug("Scored %d area(s): %s", len(scores), scores)
    return scores
