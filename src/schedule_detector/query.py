"""Merge per-slot availability into free time ranges for a day window."""

from __future__ import annotations

from collections.abc import Iterable

from schedule_detector import config
from schedule_detector.models import (
    AvailabilityGrid,
    DayWindow,
    ErrorKind,
    PersonAvailability,
    ProcessingError,
    ProcessingStage,
    QueryResult,
    ScheduleRecord,
    SkippedPerson,
    TimeRange,
)
from schedule_detector.utils.timeutil import (
    format_clock,
    parse_clock,
    slot_index_for_time,
    slot_start_time,
    time_range,
)


def _query_error(message: str, **details) -> ProcessingError:
    return ProcessingError(
        stage=ProcessingStage.QUERY,
        error_type=ErrorKind.INPUT_INVALID,
        message=message,
        details=details,
    )


def _check_window(day: str, start: str, end: str) -> tuple[str, str] | ProcessingError:
    if day not in config.WEEKDAYS:
        return _query_error(f"Day must be Monday through Friday, got {day!r}", day=day)
    lo = parse_clock(start, stage=ProcessingStage.QUERY)
    if isinstance(lo, ProcessingError):
        return lo
    hi = parse_clock(end, stage=ProcessingStage.QUERY)
    if isinstance(hi, ProcessingError):
        return hi
    if lo > hi:
        return _query_error("Start time must not be after end time", start=start, end=end)
    return format_clock(lo), format_clock(hi)


def free_ranges(
    grid: AvailabilityGrid,
    day: str,
    start: str,
    end: str,
    count_work_as_free: bool = True,
) -> DayWindow | ProcessingError:
    """
    Free slots of ``day`` whose start time lies in [start, end], merged into
    contiguous ranges. Each range ends half an hour after its last free slot.

    A slot the grid does not map (before the anchor or past the last slot)
    counts as not free and clears ``covers_range``.
    """
    window = _check_window(day, start, end)
    if isinstance(window, ProcessingError):
        return window
    start, end = window
    labels = time_range(start, end)
    if isinstance(labels, ProcessingError):
        return labels

    covers = True
    runs: list[list[str]] = []
    current: list[str] = []
    for label in labels:
        idx = slot_index_for_time(grid.anchorStartTime, label)
        if isinstance(idx, ProcessingError):
            return idx
        if idx is None or idx >= grid.slots:
            covers = False
            free = False
        else:
            free = grid.is_free(day, idx)
            if free and not count_work_as_free and grid.is_work(day, idx):
                free = False
        if free:
            current.append(label)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)

    ranges = []
    for run in runs:
        last = parse_clock(run[-1], stage=ProcessingStage.QUERY)
        ranges.append(TimeRange(start=run[0], end=format_clock(last + config.SLOT_MINUTES)))

    last_mapped = None
    if grid.slots > 0:
        label = slot_start_time(grid.anchorStartTime, grid.slots - 1)
        if not isinstance(label, ProcessingError):
            last_mapped = label

    return DayWindow(
        day=day,
        start=start,
        end=end,
        free_ranges=ranges,
        covers_range=covers,
        slots_detected=grid.slots,
        last_mapped_time=last_mapped,
    )


def query_day_range(
    records: Iterable[ScheduleRecord],
    day: str,
    start: str,
    end: str,
) -> QueryResult | ProcessingError:
    """Who is free on ``day`` between ``start`` and ``end``."""
    window = _check_window(day, start, end)
    if isinstance(window, ProcessingError):
        return window
    start, end = window

    result = QueryResult(day=day, start=start, end=end)
    for record in records:
        found = free_ranges(record.availability, day, start, end)
        if isinstance(found, ProcessingError):
            result.skipped.append(SkippedPerson(person=record.person, reason=found.message))
            continue
        if found.free_ranges:
            result.available.append(
                PersonAvailability(
                    person=record.person,
                    free_ranges=found.free_ranges,
                    covers_range=found.covers_range,
                    last_mapped_time=found.last_mapped_time,
                )
            )
        elif not found.covers_range:
            reason = "schedule does not cover this window"
            if found.last_mapped_time:
                reason += f" (last mapped time {found.last_mapped_time})"
            result.skipped.append(SkippedPerson(person=record.person, reason=reason))
        else:
            result.skipped.append(SkippedPerson(person=record.person, reason="busy for the whole window"))
    return result
