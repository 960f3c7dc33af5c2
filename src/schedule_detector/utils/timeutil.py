"""Wall-clock helpers for half-hour schedule slots ("8:00 AM" style labels)."""

import re

from schedule_detector import config
from schedule_detector.models import ErrorKind, ProcessingError, ProcessingStage

_CLOCK_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])\s*$")


def parse_clock(
    label: str,
    stage: ProcessingStage = ProcessingStage.FINALIZE,
) -> int | ProcessingError:
    """Minutes after midnight for a 12-hour clock label."""
    match = _CLOCK_RE.match(label or "")
    if match is None:
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Unrecognised time {label!r}; expected e.g. '8:00 AM'",
            details={"value": label},
        )
    hour, minute, ampm = int(match.group(1)), int(match.group(2)), match.group(3).upper()
    if not 1 <= hour <= 12 or minute >= 60:
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Time out of range: {label!r}",
            details={"value": label},
        )
    if ampm == "PM" and hour != 12:
        hour += 12
    if ampm == "AM" and hour == 12:
        hour = 0
    return hour * 60 + minute


def format_clock(total_minutes: int) -> str:
    total_minutes %= 24 * 60
    hour, minute = divmod(total_minutes, 60)
    ampm = "PM" if hour >= 12 else "AM"
    display_hour = 12 if hour % 12 == 0 else hour % 12
    return f"{display_hour}:{minute:02d} {ampm}"


def normalize_clock(label: str, stage: ProcessingStage = ProcessingStage.FINALIZE) -> str | ProcessingError:
    minutes = parse_clock(label, stage=stage)
    if isinstance(minutes, ProcessingError):
        return minutes
    return format_clock(minutes)


def slot_start_time(anchor_start_time: str, slot_index: int) -> str | ProcessingError:
    anchor = parse_clock(anchor_start_time)
    if isinstance(anchor, ProcessingError):
        return anchor
    return format_clock(anchor + slot_index * config.SLOT_MINUTES)


def slot_index_for_time(anchor_start_time: str, label: str) -> int | None | ProcessingError:
    """Slot index whose start is ``label``; None when off-grid or before the anchor."""
    anchor = parse_clock(anchor_start_time, stage=ProcessingStage.QUERY)
    if isinstance(anchor, ProcessingError):
        return anchor
    minutes = parse_clock(label, stage=ProcessingStage.QUERY)
    if isinstance(minutes, ProcessingError):
        return minutes
    delta = minutes - anchor
    if delta < 0 or delta % config.SLOT_MINUTES != 0:
        return None
    return delta // config.SLOT_MINUTES


def time_range(start: str, end: str) -> list[str] | ProcessingError:
    """Half-hour labels from ``start`` through ``end`` inclusive."""
    lo = parse_clock(start, stage=ProcessingStage.QUERY)
    if isinstance(lo, ProcessingError):
        return lo
    hi = parse_clock(end, stage=ProcessingStage.QUERY)
    if isinstance(hi, ProcessingError):
        return hi
    return [format_clock(m) for m in range(lo, hi + 1, config.SLOT_MINUTES)]


def time_options() -> list[str]:
    """Start times offered to the operator (6:00 AM through 5:30 PM)."""
    return [
        format_clock(m)
        for m in range(
            config.TIME_OPTIONS_FIRST_MINUTE,
            config.TIME_OPTIONS_END_MINUTE,
            config.SLOT_MINUTES,
        )
    ]
