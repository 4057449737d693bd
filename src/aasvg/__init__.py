"""Public API for aasvg."""
from .aasvg import Grid, RenderOptions, normalize, render, render_with_options
from .framing import FramingError, pack_string, render_buffer, unpack_string
from .raster import render_png

__all__ = [
    "FramingError",
    "Grid",
    "RenderOptions",
    "normalize",
    "pack_string",
    "render",
    "render_buffer",
    "render_png",
    "render_with_options",
    "unpack_string",
]
