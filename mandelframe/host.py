"""Buffer ownership and per-tick driving of the renderer."""

from __future__ import annotations

import numpy as np

from .renderer import BYTES_PER_PIXEL, frame_array, render
from .view import FrameConfig, ViewState, advance


class FrameHost:
    """Own the frame buffer for the current surface and drive the renderer.

    ``update`` is one input tick and advances the zoom of animated configs;
    ``redraw`` renders the current view into the buffer. The buffer is only
    reallocated by ``resize``.
    """

    def __init__(self, config: FrameConfig | None = None, view: ViewState | None = None):
        self.config = config if config is not None else FrameConfig()
        self.view = view if view is not None else ViewState()
        self.width = self.config.width
        self.height = self.config.height
        self.buffer = bytearray(self.width * self.height * BYTES_PER_PIXEL)
        self.ticks = 0
        self.frames = 0

    @property
    def animated(self) -> bool:
        return self.config.animated

    def resize(self, width: int, height: int) -> bool:
        """Reallocate the buffer for a new surface size; False if unchanged."""

        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}.")
        if (width, height) == (self.width, self.height):
            return False
        self.width = width
        self.height = height
        self.buffer = bytearray(width * height * BYTES_PER_PIXEL)
        return True

    def update(self) -> None:
        if self.animated:
            advance(self.view, self.config)
        self.ticks += 1

    def redraw(self) -> np.ndarray:
        render(self.buffer, self.width, self.height, self.view, self.config)
        self.frames += 1
        return self.frame()

    def frame(self) -> np.ndarray:
        return frame_array(self.buffer, self.width, self.height)
