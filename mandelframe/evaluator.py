"""Escape-time evaluation of Mandelbrot pixels."""

from __future__ import annotations

import numpy as np
import tensorflow as tf

from .view import FrameConfig, MappingMode, ViewState

DEFAULT_CONFIG = FrameConfig()


def map_pixel(x, y, width: int, height: int, view: ViewState, config: FrameConfig = DEFAULT_CONFIG):
    """Place pixel ``(x, y)`` on the complex plane.

    ``x`` and ``y`` may be numbers or float64 arrays; both paths evaluate the
    same expressions in the same order, so results agree bit for bit.
    """

    if config.mapping is MappingMode.FIXED_WINDOW:
        re = config.x_min + (config.x_max - config.x_min) * x / width
        im = config.y_min + (config.y_max - config.y_min) * y / height
        return re, im

    zoom_width = config.base_width / view.zoom
    scale = zoom_width / width
    aspect = width / height
    re = view.x_center + (x - width / 2) * scale * aspect
    im = view.y_center + (y - height / 2) * scale
    return re, im


def escape_time(re: float, im: float, max_iterations: int, escape_radius: float = 2.0) -> int:
    """Number of ``z = z*z + c`` updates before ``|z|`` exceeds the radius."""

    limit = escape_radius * escape_radius
    zr = 0.0
    zi = 0.0
    for n in range(max_iterations):
        zr2 = zr * zr
        zi2 = zi * zi
        if zr2 + zi2 > limit:
            return n
        zi = 2.0 * zr * zi + im
        zr = zr2 - zi2 + re
    return max_iterations


def evaluate(x: int, y: int, width: int, height: int, view: ViewState, config: FrameConfig = DEFAULT_CONFIG) -> int:
    """Iteration count for one pixel; ``config.max_iterations`` means inside the set."""

    if width <= 0 or height <= 0:
        raise ValueError(f"Frame size must be positive, got {width}x{height}.")
    if not (0 <= x < width and 0 <= y < height):
        raise ValueError(f"Pixel ({x}, {y}) lies outside a {width}x{height} frame.")
    re, im = map_pixel(x, y, width, height, view, config)
    return escape_time(float(re), float(im), config.max_iterations, config.escape_radius)


@tf.function
def _escape_step(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    limit: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every point that has not escaped by one iteration."""

    zr2 = zr * zr
    zi2 = zi * zi
    active = tf.logical_and(active, tf.logical_not(zr2 + zi2 > limit))
    zi_new = 2.0 * zr * zi + ci
    zr_new = zr2 - zi2 + cr
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    return zr, zi, ns, active


@tf.function
def _escape_run(cr: tf.Tensor, ci: tf.Tensor, max_iterations: tf.Tensor, limit: tf.Tensor) -> tf.Tensor:
    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zr = tf.zeros_like(cr)
    zi = tf.zeros_like(ci)
    ns = tf.zeros(tf.shape(cr), tf.int32)
    active = tf.ones(tf.shape(cr), tf.bool)

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active, limit)
        return i + 1, zr, zi, ns, active

    _, _, _, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    return ns


def iteration_grid(width: int, height: int, view: ViewState, config: FrameConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Evaluate every pixel of a ``width`` x ``height`` frame.

    Returns an int32 array of shape ``(height, width)`` whose entry ``[y, x]``
    equals ``evaluate(x, y, width, height, view, config)``.
    """

    if width <= 0 or height <= 0:
        raise ValueError(f"Frame size must be positive, got {width}x{height}.")

    xs = np.arange(width, dtype=np.float64)[np.newaxis, :]
    ys = np.arange(height, dtype=np.float64)[:, np.newaxis]
    re, im = map_pixel(xs, ys, width, height, view, config)
    re = np.broadcast_to(np.asarray(re, dtype=np.float64), (height, width))
    im = np.broadcast_to(np.asarray(im, dtype=np.float64), (height, width))

    limit = np.float64(config.escape_radius) * np.float64(config.escape_radius)

    with tf.device("/CPU:0"):
        cr = tf.convert_to_tensor(np.ascontiguousarray(re), dtype=tf.float64)
        ci = tf.convert_to_tensor(np.ascontiguousarray(im), dtype=tf.float64)
        ns = _escape_run(
            cr,
            ci,
            tf.constant(config.max_iterations, dtype=tf.int32),
            tf.constant(limit, dtype=tf.float64),
        )

    return ns.numpy()
