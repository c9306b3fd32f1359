"""Rendering of Mandelbrot frames into RGBA8 pixel buffers."""

from __future__ import annotations

import numpy as np

from .evaluator import DEFAULT_CONFIG, iteration_grid
from .view import FrameConfig, ViewState

BYTES_PER_PIXEL = 4
INSIDE_COLOR = (0, 0, 0, 255)

# Gradient stops: red saturates at RED_STOP iterations, green at GREEN_STOP.
RED_STOP = 50
GREEN_STOP = 100


def colorize(n: int, max_iterations: int = DEFAULT_CONFIG.max_iterations) -> tuple[int, int, int, int]:
    """Map an iteration count to the red-yellow gradient."""

    if n == max_iterations:
        return INSIDE_COLOR
    return (min(255, n * 255 // RED_STOP), min(255, n * 255 // GREEN_STOP), 0, 255)


def colorize_grid(iterations: np.ndarray, max_iterations: int = DEFAULT_CONFIG.max_iterations) -> np.ndarray:
    """Vectorized :func:`colorize`; returns uint8 with a trailing RGBA axis."""

    n = np.asarray(iterations, dtype=np.int64)
    rgba = np.empty(n.shape + (BYTES_PER_PIXEL,), dtype=np.uint8)
    rgba[..., 0] = np.minimum(255, n * 255 // RED_STOP)
    rgba[..., 1] = np.minimum(255, n * 255 // GREEN_STOP)
    rgba[..., 2] = 0
    rgba[..., 3] = 255
    rgba[n == max_iterations] = INSIDE_COLOR
    return rgba


def frame_array(buffer, width: int, height: int) -> np.ndarray:
    """View ``buffer`` as a writable ``(height, width, 4)`` uint8 array without copying."""

    if width <= 0 or height <= 0:
        raise ValueError(f"Frame size must be positive, got {width}x{height}.")
    view = memoryview(buffer)
    if view.readonly:
        raise ValueError("Frame buffer is read-only.")
    expected = width * height * BYTES_PER_PIXEL
    if view.nbytes != expected:
        raise ValueError(
            f"Frame buffer holds {view.nbytes} bytes, expected {expected} for {width}x{height} RGBA."
        )
    flat = np.frombuffer(buffer, dtype=np.uint8)
    return flat.reshape(height, width, BYTES_PER_PIXEL)


def render(buffer, width: int, height: int, view: ViewState, config: FrameConfig = DEFAULT_CONFIG) -> None:
    """Overwrite every pixel of ``buffer`` with the colored frame for ``view``.

    ``buffer`` is a writable bytes-like object of exactly ``width * height * 4``
    bytes laid out as row-major RGBA8.
    """

    target = frame_array(buffer, width, height)
    iterations = iteration_grid(width, height, view, config)
    target[...] = colorize_grid(iterations, config.max_iterations)
