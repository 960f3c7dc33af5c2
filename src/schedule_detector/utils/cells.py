"""Cell rectangles and pixel sampling shared by calibration and classification."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from schedule_detector.models import DayRegion, PixelBuffer, SlotBand

Rect = tuple[int, int, int, int]


def cell_rect(
    region: DayRegion,
    band: SlotBand,
    inset_x: int,
    inset_y: int,
    trim: int = 0,
) -> Rect | None:
    """[x0, y0, x1, y1) sampling rectangle of one cell, or None when the insets eat it."""
    x0 = region.x0 + trim + inset_x
    x1 = region.x1 - trim - inset_x
    y0 = band.yStart + inset_y
    y1 = band.yEnd - inset_y
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def sample_pixels(
    pixels: PixelBuffer,
    rect: Rect,
    count: int,
    rng: np.random.Generator,
    exhaustive: bool = False,
) -> NDArray[np.int16]:
    """RGB samples from ``rect``: ``count`` uniform draws, or every pixel when exhaustive."""
    x0, y0, x1, y1 = rect
    x0, x1 = max(0, x0), min(pixels.width, x1)
    y0, y1 = max(0, y0), min(pixels.height, y1)
    if x1 <= x0 or y1 <= y0:
        return np.empty((0, 3), dtype=np.int16)
    if exhaustive:
        return pixels.rgb_rect(x0, y0, x1, y1)
    xs = rng.integers(x0, x1, size=count)
    ys = rng.integers(y0, y1, size=count)
    return pixels.rgb_at(ys, xs)


def make_rng(seed: int | None, rng: np.random.Generator | None = None) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng(seed)
