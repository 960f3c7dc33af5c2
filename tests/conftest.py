from __future__ import annotations

import pytest

from schedule_detector.models import DetectorConfig
from schedule_detector.nodes.masks import build_precompute
from tests.synthetic import standard_week, to_pixels


@pytest.fixture
def seeded_config() -> DetectorConfig:
    return DetectorConfig(sample_seed=1234)


@pytest.fixture
def week_layout():
    return standard_week()


@pytest.fixture
def week_pixels(week_layout):
    return to_pixels(week_layout)


@pytest.fixture
def week_pre(week_pixels):
    return build_precompute(week_pixels)
