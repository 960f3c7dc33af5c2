"""Utility modules for schedule-detector."""

from schedule_detector.utils.image_io import load_image, save_rgb_image
from schedule_detector.utils.timeutil import (
    format_clock,
    normalize_clock,
    parse_clock,
    slot_index_for_time,
    slot_start_time,
    time_options,
    time_range,
)

__all__ = [
    # Image I/O
    "load_image",
    "save_rgb_image",
    # Clock helpers
    "parse_clock",
    "format_clock",
    "normalize_clock",
    "slot_start_time",
    "slot_index_for_time",
    "time_range",
    "time_options",
]
