"""Public API for Mandelbrot frame rendering."""

from .view import FrameConfig, MappingMode, ViewState, advance, zoom_after
from .evaluator import escape_time, evaluate, iteration_grid, map_pixel
from .renderer import colorize, colorize_grid, frame_array, render
from .host import FrameHost

__all__ = [
    "FrameConfig",
    "FrameHost",
    "MappingMode",
    "ViewState",
    "advance",
    "colorize",
    "colorize_grid",
    "escape_time",
    "evaluate",
    "frame_array",
    "iteration_grid",
    "map_pixel",
    "render",
    "zoom_after",
]
