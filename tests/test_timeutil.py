import pytest

from schedule_detector.models import ErrorKind, ProcessingError
from schedule_detector.utils import (
    format_clock,
    normalize_clock,
    parse_clock,
    slot_index_for_time,
    slot_start_time,
    time_options,
    time_range,
)


@pytest.mark.parametrize(
    ("label", "minutes"),
    [("8:00 AM", 480), ("12:00 AM", 0), ("12:30 PM", 750), ("5:30 pm", 1050), (" 9:05AM ", 545)],
)
def test_parse_clock(label, minutes):
    assert parse_clock(label) == minutes


@pytest.mark.parametrize("label", ["", "8 AM", "13:00 PM", "8:75 AM", "08:00"])
def test_parse_clock_rejects_bad_labels(label):
    result = parse_clock(label)
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INPUT_INVALID


def test_format_clock_wraps_midnight():
    assert format_clock(0) == "12:00 AM"
    assert format_clock(12 * 60) == "12:00 PM"
    assert format_clock(24 * 60 + 30) == "12:30 AM"


def test_slot_times_follow_anchor():
    assert slot_start_time("8:00 AM", 0) == "8:00 AM"
    assert slot_start_time("8:00 AM", 9) == "12:30 PM"
    assert slot_index_for_time("8:00 AM", "9:30 AM") == 3
    assert slot_index_for_time("8:00 AM", "7:30 AM") is None
    assert slot_index_for_time("8:00 AM", "8:15 AM") is None


def test_time_range_is_inclusive():
    assert time_range("9:00 AM", "10:00 AM") == ["9:00 AM", "9:30 AM", "10:00 AM"]
    assert time_range("10:00 AM", "9:00 AM") == []


def test_time_options_cover_six_to_half_past_five():
    options = time_options()
    assert options[0] == "6:00 AM"
    assert options[-1] == "5:30 PM"
    assert len(options) == 24


def test_normalize_clock():
    assert normalize_clock("8:00 am") == "8:00 AM"
