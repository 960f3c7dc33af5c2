"""Named layouts used across the test suite."""

from __future__ import annotations

from .renderer import CellFill, ScheduleLayout

RED = (255, 0, 0)
PURPLE = (213, 43, 255)
PALE_BLUE = (150, 190, 255)
LIGHT_GRAY = (225, 225, 225)


def standard_week() -> ScheduleLayout:
    """840x600, rows every 30px from y=40, Tuesday slot 3 red, Friday slot 5 purple."""
    return ScheduleLayout(
        fills=[
            CellFill("Tuesday", 3, RED),
            CellFill("Friday", 5, PURPLE),
        ]
    )


def faded_lane_week(lane_marks: int = 10) -> ScheduleLayout:
    """Row marks vanish from the tick lane after ``lane_marks`` lines; table lines go on."""
    return ScheduleLayout(lane_marks=lane_marks)


def gray_tail_week(lane_marks: int = 10, n_lines: int = 15) -> ScheduleLayout:
    """Past the lane marks rows are light gray (never dark); the table ends at ``n_lines``."""
    return ScheduleLayout(lane_marks=lane_marks, n_lines=n_lines, tail_color=LIGHT_GRAY)


def busy_friday_week() -> ScheduleLayout:
    """Friday's eight bottom slots are all booked."""
    return ScheduleLayout(fills=[CellFill("Friday", slot, PALE_BLUE) for slot in range(10, 18)])


def thinning_dividers_week() -> ScheduleLayout:
    """Gray tail to y=550 where the four inner dividers stop at y=475."""
    return ScheduleLayout(
        lane_marks=10,
        n_lines=18,
        tail_color=LIGHT_GRAY,
        divider_stops={x: 475 for x in (168, 336, 504, 672)},
    )


def lane_only_tail_week() -> ScheduleLayout:
    """Table ends at y=312; below it only faint marks inside the tick lane."""
    layout = ScheduleLayout(n_lines=10, lane_mark_ys=(340, 370))
    layout.divider_stops = {x: 312 for x in layout.divider_xs}
    return layout
