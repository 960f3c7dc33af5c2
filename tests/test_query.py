import time

from schedule_detector.models import (
    AvailabilityGrid,
    BackgroundColor,
    DayRegion,
    ErrorKind,
    NavSnapshot,
    ProcessingError,
    ScheduleRecord,
    SlotBand,
    TimeRange,
)
from schedule_detector.query import free_ranges, query_day_range

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def _grid(monday: list[bool], work: list[bool] | None = None, anchor: str = "8:00 AM") -> AvailabilityGrid:
    n = len(monday)
    days = {d: [True] * n for d in DAYS}
    days["Monday"] = monday
    work_days = {d: [False] * n for d in DAYS}
    if work is not None:
        work_days["Monday"] = work
    return AvailabilityGrid(anchorStartTime=anchor, slots=n, days=days, workDays=work_days)


def _record(person: str, grid: AvailabilityGrid) -> ScheduleRecord:
    xs = [0, 10, 20, 30, 40, 50]
    nav = NavSnapshot(
        dayRegions={d: DayRegion(x0=xs[i], x1=xs[i + 1]) for i, d in enumerate(DAYS)},
        slotBands=[SlotBand(yStart=10 * i, yEnd=10 * i + 8) for i in range(grid.slots)],
        ticksForMap=[10 * i for i in range(grid.slots + 1)],
        dividerXs=xs,
        bgWhite=BackgroundColor(r=255, g=255, b=255, tol=34),
        anchorStartTime=grid.anchorStartTime,
    )
    return ScheduleRecord(person=person, nav=nav, availability=grid, saved_at=time.time())


def test_free_slots_merge_into_ranges():
    grid = _grid([True, True, False, True, True, True])
    window = free_ranges(grid, "Monday", "8:00 AM", "10:30 AM")

    assert window.free_ranges == [
        TimeRange(start="8:00 AM", end="9:00 AM"),
        TimeRange(start="9:30 AM", end="11:00 AM"),
    ]
    assert window.covers_range is True
    assert window.last_mapped_time == "10:30 AM"


def test_window_past_last_slot_is_not_covered():
    grid = _grid([True, True, True, True])
    window = free_ranges(grid, "Monday", "9:00 AM", "11:00 AM")

    assert window.covers_range is False
    assert window.free_ranges == [TimeRange(start="9:00 AM", end="10:00 AM")]


def test_work_counts_as_free_unless_excluded():
    grid = _grid([True, True, True], work=[False, True, False])

    assert len(free_ranges(grid, "Monday", "8:00 AM", "9:00 AM").free_ranges) == 1
    split = free_ranges(grid, "Monday", "8:00 AM", "9:00 AM", count_work_as_free=False)
    assert [r.start for r in split.free_ranges] == ["8:00 AM", "9:00 AM"]


def test_invalid_day_and_reversed_window():
    grid = _grid([True])
    bad_day = free_ranges(grid, "Saturday", "8:00 AM", "9:00 AM")
    reversed_window = free_ranges(grid, "Monday", "9:00 AM", "8:00 AM")

    assert isinstance(bad_day, ProcessingError)
    assert bad_day.error_type == ErrorKind.INPUT_INVALID
    assert isinstance(reversed_window, ProcessingError)


def test_query_lists_available_and_skipped_people():
    records = [
        _record("Ana", _grid([True, True, True, True])),
        _record("Ben", _grid([False, False, False, False])),
        _record("Cy", _grid([True, True], anchor="11:00 AM")),
    ]
    result = query_day_range(records, "Monday", "8:00 AM", "9:00 AM")

    assert [p.person for p in result.available] == ["Ana"]
    assert result.available[0].free_ranges == [TimeRange(start="8:00 AM", end="9:30 AM")]
    skipped = {s.person: s.reason for s in result.skipped}
    assert skipped["Ben"] == "busy for the whole window"
    assert "does not cover" in skipped["Cy"]
    assert "11:30 AM" in skipped["Cy"]


def test_query_normalizes_labels():
    result = query_day_range([], "Friday", "8:00 am", "9:00 am")
    assert (result.start, result.end) == ("8:00 AM", "9:00 AM")
    assert result.available == []
