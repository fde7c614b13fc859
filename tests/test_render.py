"""Tests for the Pillow artboard renderer."""

from PIL import Image

from plugin.render import render_artboard
from plugin.scene import Artboard, Gradient, Group, ImageFill, Rectangle, SolidColor, Stroke, Text
from tests.conftest import png_bytes


def _close(pixel, expected, tolerance=12):
    return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


def test_renders_jpeg_at_artboard_size(tmp_path):
    artboard = Artboard(name="Board", width=120, height=80)
    path = render_artboard(artboard, str(tmp_path / "out" / "board.jpg"))

    with Image.open(path) as img:
        assert img.format == "JPEG"
        assert img.size == (120, 80)
        assert _close(img.getpixel((60, 40)), (255, 255, 255))


def test_scale_multiplies_size(tmp_path):
    artboard = Artboard(width=50, height=20)
    with Image.open(render_artboard(artboard, str(tmp_path / "b.jpg"), scale=2)) as img:
        assert img.size == (100, 40)


def test_paints_visible_nodes_only(tmp_path):
    artboard = Artboard(
        width=200,
        height=100,
        children=[
            Rectangle(x=0, y=0, width=100, height=100, fill=SolidColor(color="#FF0000")),
            Rectangle(x=100, y=0, width=100, height=100, fill=SolidColor(color="#0000FF"), visible=False),
            Group(children=[Rectangle(x=150, y=50, width=50, height=50, fill=SolidColor(color="#00FF00"))]),
        ],
    )
    with Image.open(render_artboard(artboard, str(tmp_path / "b.jpg"))) as img:
        assert _close(img.getpixel((50, 50)), (255, 0, 0))
        assert _close(img.getpixel((125, 25)), (255, 255, 255))
        assert _close(img.getpixel((175, 75)), (0, 255, 0))


def test_disabled_fill_is_not_painted(tmp_path):
    artboard = Artboard(
        width=100,
        height=100,
        children=[Rectangle(width=100, height=100, fill=SolidColor(color="#000000"), fill_enabled=False)],
    )
    with Image.open(render_artboard(artboard, str(tmp_path / "b.jpg"))) as img:
        assert _close(img.getpixel((50, 50)), (255, 255, 255))


def test_gradient_image_and_stroke(tmp_path):
    heatmap = tmp_path / "heatmap.png"
    heatmap.write_bytes(png_bytes(color=(0, 0, 255, 255)))

    artboard = Artboard(
        width=300,
        height=100,
        children=[
            Rectangle(
                x=0, y=0, width=100, height=100,
                fill=Gradient(stops=[{"color": "#000000", "stop": 0}, {"color": "#FFFFFF", "stop": 1}]),
            ),
            Rectangle(x=100, y=0, width=100, height=100, fill=ImageFill(path=str(heatmap))),
            Rectangle(x=210, y=10, width=80, height=80, stroke=Stroke(color="#FF0000", width=4)),
            Text(x=220, y=60, text="77%", fill=SolidColor(color="#000000")),
        ],
    )
    with Image.open(render_artboard(artboard, str(tmp_path / "b.jpg"))) as img:
        left, right = img.getpixel((2, 50)), img.getpixel((97, 50))
        assert left[0] < 40 and right[0] > 215
        assert _close(img.getpixel((150, 50)), (0, 0, 255))
        stroke = img.getpixel((211, 50))
        assert stroke[0] > 200 and stroke[1] < 100


def test_nodes_off_the_artboard_are_clipped(tmp_path):
    artboard = Artboard(
        width=100,
        height=100,
        children=[Rectangle(x=-50, y=-50, width=100, height=100, fill=SolidColor(color="#00FF00"))],
    )
    with Image.open(render_artboard(artboard, str(tmp_path / "b.jpg"))) as img:
        assert _close(img.getpixel((20, 20)), (0, 255, 0))
        assert _close(img.getpixel((80, 80)), (255, 255, 255))


def test_missing_image_fill_is_skipped(tmp_path):
    artboard = Artboard(
        width=40,
        height=40,
        children=[Rectangle(width=40, height=40, fill=ImageFill(path=str(tmp_path / "gone.png")))],
    )
    with Image.open(render_artboard(artboard, str(tmp_path / "b.jpg"))) as img:
        assert _close(img.getpixel((20, 20)), (255, 255, 255))
