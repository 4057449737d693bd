"""Rasterize ASCII-art diagrams to PNG with Pillow."""
from __future__ import annotations

import io
import math
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .aasvg import (
    POINT_RADIUS,
    Grid,
    PrimitiveSink,
    RenderOptions,
    arrow_polygon,
    scan_primitives,
)

FONT_SIZE = 13
BLACK = (0, 0, 0, 255)
WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)

MONOSPACE_FONTS = [
    "DejaVuSansMono.ttf",
    "LiberationMono-Regular.ttf",
    "Menlo.ttc",
    "Courier New.ttf",
    "cour.ttf",
]


def _load_font(size: int) -> ImageFont.ImageFont:
    for candidate in MONOSPACE_FONTS:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default()


def _rotate(point: Tuple[float, float], center: Tuple[float, float], degrees: float) -> Tuple[float, float]:
    # Same sense as SVG rotate(): clockwise on a y-down canvas.
    rad = math.radians(degrees)
    dx = point[0] - center[0]
    dy = point[1] - center[1]
    return (
        center[0] + dx * math.cos(rad) - dy * math.sin(rad),
        center[1] + dx * math.sin(rad) + dy * math.cos(rad),
    )


class PngPainter(PrimitiveSink):
    """Draws primitives onto a Pillow canvas scaled by ``scale``."""

    def __init__(self, width: int, height: int, *, scale: float = 1.0, backdrop: bool = False) -> None:
        self._scale = scale
        self._stroke = max(1, int(round(scale)))
        size = (max(1, int(round(width * scale))), max(1, int(round(height * scale))))
        self.image = Image.new("RGBA", size, WHITE if backdrop else TRANSPARENT)
        self._draw = ImageDraw.Draw(self.image)
        self._font = _load_font(max(1, int(round(FONT_SIZE * scale))))

    def _s(self, x: float, y: float) -> Tuple[float, float]:
        return x * self._scale, y * self._scale

    def line(self, x1: int, y1: int, x2: int, y2: int) -> None:
        self._draw.line([self._s(x1, y1), self._s(x2, y2)], fill=BLACK, width=self._stroke)

    def arrow(self, cx: int, cy: int, angle: int) -> None:
        corners: List[Tuple[float, float]] = [
            self._s(*_rotate(corner, (cx, cy), angle)) for corner in arrow_polygon(cx, cy)
        ]
        self._draw.polygon(corners, fill=BLACK)

    def point(self, cx: int, cy: int, filled: bool) -> None:
        x, y = self._s(cx, cy)
        r = POINT_RADIUS * self._scale
        box = [x - r, y - r, x + r, y + r]
        if filled:
            self._draw.ellipse(box, fill=BLACK)
        else:
            self._draw.ellipse(box, fill=WHITE, outline=BLACK, width=self._stroke)

    def text(self, x: int, y: int, text: str) -> None:
        px, py = self._s(x, y)
        if isinstance(self._font, ImageFont.FreeTypeFont):
            self._draw.text((px, py), text, fill=BLACK, font=self._font, anchor="ms")
            return
        # Bitmap fonts do not support anchors; center on the glyph box instead.
        left, _top, right, bottom = self._draw.textbbox((0, 0), text, font=self._font)
        self._draw.text((px - (right - left) / 2, py - bottom), text, fill=BLACK, font=self._font)

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()


def render_png(
    diagram: str,
    *,
    scale: float = 1.0,
    options: Optional[RenderOptions] = None,
) -> bytes:
    """Render an ASCII-art diagram straight to PNG bytes."""
    if scale <= 0:
        raise ValueError("scale must be > 0")
    options = options or RenderOptions()
    grid = Grid.from_diagram(diagram)
    width, height = grid.canvas_size()
    painter = PngPainter(width, height, scale=scale, backdrop=options.backdrop)
    scan_primitives(
        grid, painter, include_text=not options.disable_text, spaces=options.spaces
    )
    return painter.to_png()


__all__ = ["PngPainter", "render_png"]
