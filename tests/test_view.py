import math

import pytest

from mandelframe import FrameConfig, MappingMode, ViewState, advance, zoom_after
from mandelframe.view import SEAHORSE_VALLEY


def test_frame_config_defaults():
    config = FrameConfig()
    assert (config.width, config.height) == (800, 600)
    assert config.max_iterations == 100
    assert config.zoom_speed == 1.01
    assert (config.x_min, config.x_max, config.y_min, config.y_max) == (-2.0, 0.8, -1.4, 1.4)
    assert config.base_width == 2.5
    assert config.mapping is MappingMode.FIXED_WINDOW
    assert not config.animated
    assert FrameConfig(mapping=MappingMode.CENTERED_ZOOM).animated


@pytest.mark.parametrize(
    "kwargs",
    [
        {"width": 0},
        {"height": -3},
        {"max_iterations": 0},
        {"zoom_speed": 0.0},
        {"x_min": 1.0, "x_max": 1.0},
        {"y_min": 2.0, "y_max": -2.0},
        {"base_width": 0.0},
        {"escape_radius": -1.0},
    ],
)
def test_frame_config_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        FrameConfig(**kwargs)


def test_view_state_defaults_to_seahorse_valley():
    view = ViewState()
    assert view.center == SEAHORSE_VALLEY
    assert view.zoom == 1.0


@pytest.mark.parametrize("zoom", [0.0, -1.0])
def test_view_state_requires_positive_zoom(zoom):
    with pytest.raises(ValueError):
        ViewState(zoom=zoom)


def test_view_state_center_is_fixed():
    view = ViewState(x_center=0.25, y_center=-0.5)
    with pytest.raises(AttributeError):
        view.x_center = 1.0
    with pytest.raises(AttributeError):
        view.y_center = 1.0
    view.zoom = 3.0
    assert view.center == (0.25, -0.5)
    assert view.zoom == 3.0


def test_advance_multiplies_zoom_in_place():
    view = ViewState()
    result = advance(view)
    assert result is view
    assert view.zoom == pytest.approx(1.01)
    assert view.center == SEAHORSE_VALLEY


@pytest.mark.parametrize("ticks", [0, 1, 10, 250])
def test_advance_is_geometric(ticks):
    view = ViewState()
    for _ in range(ticks):
        advance(view)
    assert view.zoom == pytest.approx(1.01 ** ticks, rel=1e-12)
    assert zoom_after(ticks) == pytest.approx(view.zoom, rel=1e-12)


def test_advance_uses_configured_speed():
    config = FrameConfig(zoom_speed=2.0)
    view = ViewState(zoom=0.5)
    for _ in range(3):
        advance(view, config)
    assert view.zoom == 4.0
    assert zoom_after(3, config, initial_zoom=0.5) == 4.0


def test_zoom_is_monotonic():
    view = ViewState()
    previous = view.zoom
    for _ in range(50):
        advance(view)
        assert view.zoom > previous
        previous = view.zoom
    assert math.isfinite(view.zoom)


def test_zoom_after_rejects_negative_ticks():
    with pytest.raises(ValueError):
        zoom_after(-1)


@pytest.mark.parametrize("zoom", [0.0, -1.0])
def test_view_state_rejects_non_positive_zoom_after_construction(zoom):
    view = ViewState(x_center=-0.5, y_center=0.0)
    with pytest.raises(ValueError):
        view.zoom = zoom
    assert view.zoom == 1.0


@pytest.mark.parametrize("speed", [1.0, 0.99, 0.5])
def test_frame_config_requires_growing_zoom(speed):
    with pytest.raises(ValueError):
        FrameConfig(zoom_speed=speed)
