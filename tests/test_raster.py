from __future__ import annotations

import io
import sys
import unittest
from pathlib import Path

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from PIL import Image

from aasvg import RenderOptions, render_png

BOXES = "+-----+     +-----+\n|     |---->|     |\n+-----+     +-----+\n"


def _open(blob: bytes) -> Image.Image:
    return Image.open(io.BytesIO(blob)).convert("RGBA")


class RenderPngTests(unittest.TestCase):
    def test_png_signature_and_size(self) -> None:
        blob = render_png(BOXES)
        self.assertEqual(blob[:8], b"\x89PNG\r\n\x1a\n")
        self.assertEqual(_open(blob).size, (160, 64))

    def test_scale(self) -> None:
        self.assertEqual(_open(render_png(BOXES, scale=2)).size, (320, 128))
        self.assertEqual(_open(render_png(BOXES, scale=0.5)).size, (80, 32))

    def test_rejects_non_positive_scale(self) -> None:
        with self.assertRaises(ValueError):
            render_png(BOXES, scale=0)

    def test_empty_diagram(self) -> None:
        self.assertEqual(_open(render_png("")).size, (8, 16))

    def test_lines_are_drawn(self) -> None:
        image = _open(render_png("+--+\n|  |\n+--+"))
        # Top border runs along y=16 from x=8 to x=32.
        self.assertEqual(image.getpixel((20, 16))[3], 255)
        self.assertEqual(image.getpixel((20, 16))[:3], (0, 0, 0))
        # Interior stays transparent without a backdrop.
        self.assertEqual(image.getpixel((20, 32))[3], 0)

    def test_backdrop_fills_background(self) -> None:
        image = _open(render_png("+--+\n|  |\n+--+", options=RenderOptions(backdrop=True)))
        self.assertEqual(image.getpixel((20, 32)), (255, 255, 255, 255))

    def test_points(self) -> None:
        image = _open(render_png("* o"))
        self.assertEqual(image.getpixel((8, 16)), (0, 0, 0, 255))
        self.assertEqual(image.getpixel((24, 16)), (255, 255, 255, 255))

    def test_arrowhead_rotation(self) -> None:
        right = _open(render_png(">"))
        down = _open(render_png("v"))
        # Tip extends 8px past the center along the pointing axis.
        self.assertEqual(right.getpixel((12, 16))[3], 255)
        self.assertEqual(right.getpixel((8, 20))[3], 0)
        self.assertEqual(down.getpixel((8, 20))[3], 255)
        self.assertEqual(down.getpixel((12, 16))[3], 0)

    def test_text_is_drawn_unless_disabled(self) -> None:
        with_text = _open(render_png("W"))
        without_text = _open(render_png("W", options=RenderOptions(disable_text=True)))
        self.assertIsNotNone(with_text.getbbox())
        self.assertIsNone(without_text.getbbox())

    def test_grouped_text_renders(self) -> None:
        image = _open(render_png("Hi  There", options=RenderOptions(spaces=2, stretch=True)))
        self.assertEqual(image.size, (80, 32))
        self.assertIsNotNone(image.getbbox())


if __name__ == "__main__":
    unittest.main()
