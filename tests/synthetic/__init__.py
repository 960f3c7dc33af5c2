"""Synthetic weekly-schedule images with known geometry.

Usage:
    from tests.synthetic import ScheduleLayout, render_schedule
    from tests.synthetic import standard_week, faded_lane_week, gray_tail_week
"""

from .presets import (
    busy_friday_week,
    faded_lane_week,
    gray_tail_week,
    lane_only_tail_week,
    standard_week,
    thinning_dividers_week,
)
from .renderer import CellFill, ScheduleLayout, cell_box, line_y, render_schedule, to_pixels

__all__ = [
    "CellFill",
    "ScheduleLayout",
    "busy_friday_week",
    "cell_box",
    "faded_lane_week",
    "gray_tail_week",
    "lane_only_tail_week",
    "line_y",
    "render_schedule",
    "standard_week",
    "thinning_dividers_week",
    "to_pixels",
]
