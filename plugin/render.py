# =============================================================================
# VisualEyes Heatmap Client - Artboard Rendition
# =============================================================================
# Rasterizes an artboard of the scene model into a JPEG with Pillow.  This is
# the rendering collaborator the workflow uploads from: visible nodes are
# painted in document order (solid, gradient and image fills, strokes, text).
# =============================================================================

import logging
import os
from typing import Tuple

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

from plugin.scene import Artboard, Gradient, Group, ImageFill, Rectangle, SolidColor, Text

logger = logging.getLogger(__name__)


def _rgba(hex_color: str, alpha: float = 1.0) -> Tuple[int, int, int, int]:
    r, g, b = ImageColor.getrgb(hex_color)[:3]
    return r, g, b, int(round(255 * max(0.0, min(1.0, alpha))))


def _gradient_image(fill: Gradient, width: int, height: int) -> Image.Image:
    """
    Build a left-to-right linear gradient image from the fill's stops.
    """
    stops = sorted(fill.stops, key=lambda s: s.stop)
    positions = np.array([s.stop for s in stops], dtype=np.float32)
    colors = np.array([ImageColor.getrgb(s.color)[:3] for s in stops], dtype=np.float32)

    xs = np.linspace(0.0, 1.0, num=width, dtype=np.float32)
    row = np.stack([np.interp(xs, positions, colors[:, c]) for c in range(3)], axis=-1)
    pixels = np.repeat(row[np.newaxis, :, :], height, axis=0)
    return Image.fromarray(pixels.astype(np.uint8), "RGB").convert("RGBA")


def _composite_clipped(canvas: Image.Image, patch: Image.Image, left: int, top: int) -> None:
    """Alpha-composite ``patch`` at (left, top), dropping what falls off the canvas."""
    crop_left = max(0, -left)
    crop_top = max(0, -top)
    crop_right = min(patch.width, canvas.width - left)
    crop_bottom = min(patch.height, canvas.height - top)
    if crop_right <= crop_left or crop_bottom <= crop_top:
        return
    region = patch.crop((crop_left, crop_top, crop_right, crop_bottom))
    canvas.alpha_composite(region, dest=(left + crop_left, top + crop_top))


def _paint_fill(canvas: Image.Image, fill, box: Tuple[int, int, int, int]) -> None:
    left, top, right, bottom = box
    width, height = right - left, bottom - top
    if width <= 0 or height <= 0:
        return

    if isinstance(fill, SolidColor):
        patch = Image.new("RGBA", (width, height), _rgba(fill.color, fill.alpha))
    elif isinstance(fill, Gradient):
        patch = _gradient_image(fill, width, height)
    elif isinstance(fill, ImageFill):
        try:
            with Image.open(fill.path) as img:
                patch = img.convert("RGBA").resize((width, height), Image.BILINEAR)
        except OSError:
            logger.warning("Image fill %s could not be read; skipped", fill.path)
            return
    else:
        return

    _composite_clipped(canvas, patch, left, top)


def _paint_node(canvas: Image.Image, node, scale: float) -> None:
    if not node.visible:
        return

    if isinstance(node, Group):
        for child in node.children:
            _paint_node(canvas, child, scale)
        return

    if isinstance(node, Rectangle):
        box = (
            int(round(node.x * scale)),
            int(round(node.y * scale)),
            int(round((node.x + node.width) * scale)),
            int(round((node.y + node.height) * scale)),
        )
        if node.fill is not None and node.fill_enabled:
            _paint_fill(canvas, node.fill, box)
        if node.stroke is not None and node.stroke.width > 0 and box[2] > box[0] and box[3] > box[1]:
            ImageDraw.Draw(canvas).rectangle(
                [box[0], box[1], box[2] - 1, box[3] - 1],
                outline=_rgba(node.stroke.color),
                width=max(1, int(round(node.stroke.width * scale))),
            )
        return

    if isinstance(node, Text):
        color = _rgba(node.fill.color, node.fill.alpha) if node.fill else (0, 0, 0, 255)
        # The default font has no baseline anchor; draw from the top edge.
        top = (node.y - node.font_size) * scale
        ImageDraw.Draw(canvas).text(
            (node.x * scale, top), node.text, fill=color, font=ImageFont.load_default()
        )


def render_artboard(
    artboard: Artboard,
    output_path: str,
    scale: float = 1,
    quality: int = 100,
) -> str:
    """
    Render an artboard to a JPEG file.

    Args:
        artboard:    The artboard to rasterize.
        output_path: Destination file; parent directories are created.
        scale:       Pixel scale factor (1 = one pixel per design unit).
        quality:     JPEG quality, 1-100.

    Returns:
        str: ``output_path``.
    """
    size = (
        max(1, int(round(artboard.width * scale))),
        max(1, int(round(artboard.height * scale))),
    )
    canvas = Image.new("RGBA", size, (255, 255, 255, 255))

    if artboard.fill is not None:
        _paint_fill(canvas, artboard.fill, (0, 0, size[0], size[1]))
    for node in artboard.children:
        _paint_node(canvas, node, scale)

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    canvas.convert("RGB").save(output_path, format="JPEG", quality=quality)

    logger.debug(
        "Rendered artboard %r → %s (%dx%d, quality=%d)",
        artboard.name, output_path, size[0], size[1], quality,
    )
    return output_path
