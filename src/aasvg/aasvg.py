"""ASCII-art diagram to SVG converter."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

SCALE = 8
ASPECT = 2
POINT_RADIUS = 6
TEXT_BASELINE_OFFSET = 4

ARROW_TIP = 8
ARROW_BACK = 4
ARROW_HALF_WIDTH = 3

VERTEX_CHARS = frozenset("+.'`,")
HLINE_CHARS = frozenset("-+")
VLINE_CHARS = frozenset("|+")
POINT_CHARS = frozenset("o*")
ARROW_ANGLES = {">": 0, "v": 90, "V": 90, "<": 180, "^": 270}

_SVG_HEADER = (
    '<svg xmlns="http://www.w3.org/2000/svg" version="1.1" width="{w}" height="{h}" '
    'viewBox="0 0 {w} {h}" class="diagram" text-anchor="middle" font-family="monospace" '
    'font-size="13px" stroke-linecap="round">\n'
)

# Characters that make a line blank. Unlike str.strip(), this excludes the
# \x1c-\x1f separators and \x85, and includes the byte-order mark.
_BLANK_CHARS = (
    "\t\n\v\f\r \u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006"
    "\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)

_ENTITIES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})


@dataclass
class RenderOptions:
    """Presentation switches that never affect how shapes are detected.

    ``spaces`` groups leftover glyphs into runs: a run ends at that many
    consecutive blanks. Zero keeps one text element per glyph. ``stretch``
    fits each text element to its cells with ``textLength``.
    """

    backdrop: bool = False
    disable_text: bool = False
    spaces: int = 0
    stretch: bool = False


class Grid:
    """Character lookup over the lines of a diagram.

    Cells past the end of a line, or outside the grid, read as a blank.
    A trailing empty line (left by a final newline) does not count towards
    the height.
    """

    def __init__(self, lines: Sequence[str]) -> None:
        self.lines = lines
        self.width = max((len(line) for line in lines), default=0)
        height = len(lines)
        if height > 0 and lines[-1] == "":
            height -= 1
        self.height = height

    @classmethod
    def from_diagram(cls, diagram: str) -> "Grid":
        return cls(normalize(diagram).split("\n"))

    def cell_at(self, x: int, y: int) -> str:
        if y < 0 or y >= len(self.lines):
            return " "
        line = self.lines[y]
        if x < 0 or x >= len(line):
            return " "
        return line[x]

    def canvas_size(self) -> Tuple[int, int]:
        return (self.width + 1) * SCALE, (self.height + 1) * SCALE * ASPECT


def is_vertex(ch: str) -> bool:
    return ch in VERTEX_CHARS


def is_hline(ch: str) -> bool:
    return ch in HLINE_CHARS


def is_vline(ch: str) -> bool:
    return ch in VLINE_CHARS


def is_arrowhead(ch: str) -> bool:
    return ch in ARROW_ANGLES


def is_point(ch: str) -> bool:
    return ch in POINT_CHARS


def normalize(diagram: str) -> str:
    """Strip the leading whitespace shared by every non-blank line.

    When anything is stripped, each line (the last included) is re-joined
    with a trailing newline.
    """
    lines = diagram.split("\n")
    minimum: Optional[int] = None
    for line in lines:
        if not line.strip(_BLANK_CHARS):
            continue
        indent = len(line) - len(line.lstrip(" \t"))
        if minimum is None or indent < minimum:
            minimum = indent
    if not minimum:
        return diagram
    return "".join(line[minimum:] + "\n" for line in lines)


def escape_text(text: str) -> str:
    return text.translate(_ENTITIES)


def arrow_polygon(cx: int, cy: int) -> List[Tuple[int, int]]:
    """Unrotated arrowhead triangle (pointing right) around a cell center."""
    back = cx - ARROW_BACK
    return [(cx + ARROW_TIP, cy), (back, cy - ARROW_HALF_WIDTH), (back, cy + ARROW_HALF_WIDTH)]


def _px(x: int) -> int:
    return (x + 1) * SCALE


def _py(y: int) -> int:
    return (y + 1) * SCALE * ASPECT


class PrimitiveSink:
    """Receives primitives in scan order as soon as they are detected."""

    def line(self, x1: int, y1: int, x2: int, y2: int) -> None:
        raise NotImplementedError

    def arrow(self, cx: int, cy: int, angle: int) -> None:
        raise NotImplementedError

    def point(self, cx: int, cy: int, filled: bool) -> None:
        raise NotImplementedError

    def begin_text(self) -> None:
        pass

    def text(self, x: int, y: int, text: str) -> None:
        raise NotImplementedError

    def end_text(self) -> None:
        pass


def _text_runs(grid: Grid, used: List[bool], y: int, spaces: int) -> Iterator[Tuple[int, str]]:
    """Yield ``(start column, text)`` for each run of leftover glyphs in row ``y``.

    With ``spaces`` of zero or less every glyph is its own run. Otherwise a
    run carries on across fewer than ``spaces`` consecutive blanks and stops
    at a consumed cell, a vertex marker, or the end of the row. Trailing
    blanks are never part of a run.
    """
    width = grid.width

    def is_text(x: int) -> bool:
        ch = grid.cell_at(x, y)
        return not used[y * width + x] and ch != " " and not is_vertex(ch)

    x = 0
    while x < width:
        if not is_text(x):
            x += 1
            continue
        start = end = x
        x += 1
        if spaces > 0:
            while x < width:
                if is_text(x):
                    end = x
                elif grid.cell_at(x, y) != " " or x - end >= spaces:
                    break
                x += 1
        yield start, "".join(grid.cell_at(i, y) for i in range(start, end + 1))


def scan_primitives(
    grid: Grid, sink: PrimitiveSink, *, include_text: bool = True, spaces: int = 0
) -> None:
    """Detect every primitive in ``grid`` and hand it to ``sink``.

    Passes run in a fixed order: horizontal runs, vertical runs, arrowheads,
    points, leftover text. A cell consumed by one pass is never reported as
    text, which is grouped into runs by ``spaces`` (see ``_text_runs``).
    Line characters are consumed even when their run is too short to draw,
    so an isolated ``-`` or ``|`` renders as nothing at all.
    """
    width, height = grid.width, grid.height
    used = [False] * (width * height)
    cell = grid.cell_at

    for y in range(height):
        x = 0
        while x < width:
            if not is_hline(cell(x, y)):
                x += 1
                continue
            start = x
            while x < width and is_hline(cell(x, y)):
                used[y * width + x] = True
                x += 1
            if x - start >= 2:
                sink.line(_px(start), _py(y), _px(x - 1), _py(y))

    for x in range(width):
        y = 0
        while y < height:
            if not is_vline(cell(x, y)):
                y += 1
                continue
            start = y
            while y < height and is_vline(cell(x, y)):
                used[y * width + x] = True
                y += 1
            if y - start >= 2:
                sink.line(_px(x), _py(start), _px(x), _py(y - 1))

    for y in range(height):
        for x in range(width):
            ch = cell(x, y)
            if is_arrowhead(ch):
                sink.arrow(_px(x), _py(y), ARROW_ANGLES[ch])
                used[y * width + x] = True

    for y in range(height):
        for x in range(width):
            ch = cell(x, y)
            if is_point(ch):
                sink.point(_px(x), _py(y), ch == "*")
                used[y * width + x] = True

    sink.begin_text()
    if include_text:
        for y in range(height):
            for start, text in _text_runs(grid, used, y, spaces):
                # Centered over the run: (start + 1 + (n - 1) / 2) * SCALE.
                x = (2 * start + len(text) + 1) * SCALE // 2
                sink.text(x, TEXT_BASELINE_OFFSET + _py(y), text)
    sink.end_text()


class SvgWriter(PrimitiveSink):
    """Assembles SVG markup by plain string concatenation."""

    def __init__(
        self, width: int, height: int, *, backdrop: bool = False, stretch: bool = False
    ) -> None:
        self._stretch = stretch
        self._parts: List[str] = [_SVG_HEADER.format(w=width, h=height)]
        if backdrop:
            self._parts.append(
                f'<rect x="0" y="0" width="{width}" height="{height}" fill="white"/>\n'
            )

    def line(self, x1: int, y1: int, x2: int, y2: int) -> None:
        self._parts.append(
            f'<line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" fill="none" stroke="black"/>\n'
        )

    def arrow(self, cx: int, cy: int, angle: int) -> None:
        points = " ".join(f"{px},{py}" for px, py in arrow_polygon(cx, cy))
        self._parts.append(
            f'<polygon points="{points}" fill="black" transform="rotate({angle},{cx},{cy})"/>\n'
        )

    def point(self, cx: int, cy: int, filled: bool) -> None:
        if filled:
            self._parts.append(f'<circle cx="{cx}" cy="{cy}" r="{POINT_RADIUS}" fill="black"/>\n')
        else:
            self._parts.append(
                f'<circle cx="{cx}" cy="{cy}" r="{POINT_RADIUS}" fill="white" stroke="black"/>\n'
            )

    def begin_text(self) -> None:
        self._parts.append('<g class="text">\n')

    def text(self, x: int, y: int, text: str) -> None:
        if self._stretch:
            self._parts.append(
                f'<text x="{x}" y="{y}" textLength="{len(text) * SCALE}" '
                f'lengthAdjust="spacingAndGlyphs">{escape_text(text)}</text>\n'
            )
        else:
            self._parts.append(f'<text x="{x}" y="{y}">{escape_text(text)}</text>\n')

    def end_text(self) -> None:
        self._parts.append("</g>\n")

    def to_string(self) -> str:
        return "".join(self._parts) + "</svg>"


def render_with_options(diagram: str, options: Optional[RenderOptions] = None) -> str:
    """Convert an ASCII-art diagram to SVG markup."""
    options = options or RenderOptions()
    grid = Grid.from_diagram(diagram)
    width, height = grid.canvas_size()
    writer = SvgWriter(width, height, backdrop=options.backdrop, stretch=options.stretch)
    scan_primitives(
        grid, writer, include_text=not options.disable_text, spaces=options.spaces
    )
    return writer.to_string()


def render(diagram: str) -> str:
    return render_with_options(diagram)


__all__ = [
    "ASPECT",
    "Grid",
    "PrimitiveSink",
    "RenderOptions",
    "SCALE",
    "SvgWriter",
    "normalize",
    "render",
    "render_with_options",
    "scan_primitives",
]
