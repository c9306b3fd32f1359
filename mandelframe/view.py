"""View state and frame configuration for Mandelbrot rendering."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import numpy as np

SEAHORSE_VALLEY = (-0.743643887037151, 0.131825904205330)


class MappingMode(enum.Enum):
    """How pixel coordinates are placed on the complex plane."""

    FIXED_WINDOW = "fixed"
    CENTERED_ZOOM = "zoom"


@dataclass(frozen=True)
class FrameConfig:
    """Constants that describe how a frame is sampled and colored."""

    width: int = 800
    height: int = 600
    max_iterations: int = 100
    zoom_speed: float = 1.01
    x_min: float = -2.0
    x_max: float = 0.8
    y_min: float = -1.4
    y_max: float = 1.4
    base_width: float = 2.5
    escape_radius: float = 2.0
    mapping: MappingMode = MappingMode.FIXED_WINDOW

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Frame size must be positive, got {self.width}x{self.height}.")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}.")
        if not self.zoom_speed > 1:
            raise ValueError(f"zoom_speed must be greater than 1 so the zoom keeps growing, got {self.zoom_speed}.")
        if not (self.x_min < self.x_max and self.y_min < self.y_max):
            raise ValueError(
                f"Empty framing window x=[{self.x_min}, {self.x_max}], y=[{self.y_min}, {self.y_max}]."
            )
        if not self.base_width > 0:
            raise ValueError(f"base_width must be positive, got {self.base_width}.")
        if not self.escape_radius > 0:
            raise ValueError(f"escape_radius must be positive, got {self.escape_radius}.")

    @property
    def animated(self) -> bool:
        return self.mapping is MappingMode.CENTERED_ZOOM


@dataclass
class ViewState:
    """Point of focus and magnification of the current frame.

    ``zoom`` grows between frames; the center is fixed once the view exists.
    """

    x_center: float = SEAHORSE_VALLEY[0]
    y_center: float = SEAHORSE_VALLEY[1]
    zoom: float = 1.0

    def __setattr__(self, name: str, value) -> None:
        if name in ("x_center", "y_center") and name in self.__dict__:
            raise AttributeError(f"{name} cannot be changed after construction")
        if name == "zoom" and not value > 0:
            raise ValueError(f"zoom must be positive, got {value}.")
        super().__setattr__(name, value)

    @property
    def center(self) -> tuple[float, float]:
        return self.x_center, self.y_center


def advance(view: ViewState, config: FrameConfig | None = None) -> ViewState:
    """Multiply the zoom of ``view`` by the configured speed, in place."""

    speed = FrameConfig.zoom_speed if config is None else config.zoom_speed
    view.zoom = view.zoom * speed
    return view


def zoom_after(ticks: int, config: FrameConfig | None = None, *, initial_zoom: float = 1.0) -> float:
    """Zoom reached after ``ticks`` calls to :func:`advance`."""

    if ticks < 0:
        raise ValueError(f"ticks must be non-negative, got {ticks}.")
    speed = FrameConfig.zoom_speed if config is None else config.zoom_speed
    return float(np.float64(initial_zoom) * np.power(np.float64(speed), ticks))
