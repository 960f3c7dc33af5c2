"""Numpy rendering of synthetic weekly schedules.

Draws full-width horizontal row lines, full-height day dividers and solid
event blocks. Blocks keep a small margin from the grid lines so that the
line geometry stays exactly where the layout says it is.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from schedule_detector.models import PixelBuffer

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")
RGB = tuple[int, int, int]


@dataclass(frozen=True)
class CellFill:
    day: str
    slot: int
    color: RGB


@dataclass
class ScheduleLayout:
    width: int = 840
    height: int = 600
    first_line: int = 40
    spacing: int = 30
    n_lines: int = 20
    line_thickness: int = 2
    line_color: RGB = (0, 0, 0)
    divider_xs: tuple[int, ...] = (0, 168, 336, 504, 672, 838)
    divider_thickness: int = 2
    divider_color: RGB = (0, 0, 0)
    background: RGB = (255, 255, 255)
    fills: list[CellFill] = field(default_factory=list)
    fill_margin: int = 3
    # Lines from this index on skip the tick lane (start at ``tail_x0``).
    lane_marks: int | None = None
    tail_x0: int = 60
    tail_color: RGB | None = None
    # Divider x -> y where that divider stops; unlisted dividers run full height.
    divider_stops: dict[int, int] = field(default_factory=dict)
    # Marks drawn only inside the tick lane, left of ``tail_x0``.
    lane_mark_ys: tuple[int, ...] = ()
    lane_mark_color: RGB = (225, 225, 225)


def line_y(layout: ScheduleLayout, k: int) -> int:
    return layout.first_line + k * layout.spacing


def cell_box(layout: ScheduleLayout, day: str, slot: int) -> tuple[int, int, int, int]:
    """[x0, y0, x1, y1) of the fillable interior of one cell."""
    i = DAYS.index(day)
    m = layout.fill_margin
    x0 = layout.divider_xs[i] + layout.divider_thickness + m
    x1 = layout.divider_xs[i + 1] - m
    y0 = line_y(layout, slot) + layout.line_thickness + m
    y1 = line_y(layout, slot + 1) - m
    return x0, y0, x1, y1


def render_schedule(layout: ScheduleLayout) -> np.ndarray:
    """HxWx3 uint8 RGB image of ``layout``."""
    img = np.empty((layout.height, layout.width, 3), dtype=np.uint8)
    img[:, :] = layout.background

    for fill in layout.fills:
        x0, y0, x1, y1 = cell_box(layout, fill.day, fill.slot)
        img[max(0, y0) : min(layout.height, y1), max(0, x0) : x1] = fill.color

    for k in range(layout.n_lines):
        y = line_y(layout, k)
        if y + layout.line_thickness > layout.height:
            break
        x0 = 0
        color = layout.line_color
        if layout.lane_marks is not None and k >= layout.lane_marks:
            x0 = layout.tail_x0
            color = layout.tail_color or layout.line_color
        img[y : y + layout.line_thickness, x0:] = color

    for y in layout.lane_mark_ys:
        img[y : y + layout.line_thickness, : layout.tail_x0] = layout.lane_mark_color

    for x in layout.divider_xs:
        bottom = layout.divider_stops.get(x, layout.height)
        img[:bottom, x : min(layout.width, x + layout.divider_thickness)] = layout.divider_color
    return img


def to_pixels(layout: ScheduleLayout) -> PixelBuffer:
    return PixelBuffer.from_array(render_schedule(layout))
