import os

os.environ.setdefault("MPLBACKEND", "Agg")
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

import pytest

from mandelframe import FrameConfig, MappingMode, ViewState


@pytest.fixture
def zoom_config():
    return FrameConfig(mapping=MappingMode.CENTERED_ZOOM)


@pytest.fixture
def origin_view():
    return ViewState(x_center=0.0, y_center=0.0)
