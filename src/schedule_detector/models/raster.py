"""Pixel-space structures shared by the detection stages.

Everything here is immutable once built and local to one pipeline run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypeAlias

import numpy as np
from numpy.typing import NDArray

from schedule_detector import config

from .geometry import DayRegion

IntArray: TypeAlias = NDArray[Any]


@dataclass(frozen=True)
class PixelBuffer:
    """Read-only RGBA raster (height x width x 4, uint8)."""

    rgba: NDArray[np.uint8]

    def __post_init__(self) -> None:
        if self.rgba.ndim != 3 or self.rgba.shape[2] != 4:
            raise ValueError(f"PixelBuffer expects HxWx4 RGBA, got shape {self.rgba.shape}")
        if self.rgba.flags.writeable or self.rgba.dtype != np.uint8:
            frozen = np.array(self.rgba, dtype=np.uint8, copy=True)
            frozen.flags.writeable = False
            object.__setattr__(self, "rgba", frozen)

    @classmethod
    def from_array(cls, array: NDArray[Any]) -> PixelBuffer:
        """Wrap an HxWx3 RGB or HxWx4 RGBA array (copied)."""
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise ValueError(f"expected HxWx3 or HxWx4 array, got shape {arr.shape}")
        arr = arr.astype(np.uint8, copy=False)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        return cls(rgba=arr)

    @property
    def width(self) -> int:
        return int(self.rgba.shape[1])

    @property
    def height(self) -> int:
        return int(self.rgba.shape[0])

    def rgb_at(self, ys: IntArray, xs: IntArray) -> NDArray[np.int16]:
        """Gather RGB triples at integer coordinates as signed ints."""
        return self.rgba[ys, xs, :3].astype(np.int16)

    def rgb_rect(self, x0: int, y0: int, x1: int, y1: int) -> NDArray[np.int16]:
        """All RGB triples of a rectangle, flattened to (n, 3)."""
        return self.rgba[y0:y1, x0:x1, :3].reshape(-1, 3).astype(np.int16)


@dataclass(frozen=True)
class Precompute:
    """Near-white / dark masks plus their summed-area tables."""

    width: int
    height: int
    white_mask: NDArray[np.uint8]
    dark_mask: NDArray[np.uint8]
    white_sat: IntArray  # (h+1, w+1)
    dark_sat: IntArray  # (h+1, w+1)

    def clip_rect(self, x0: int, y0: int, x1: int, y1: int) -> tuple[int, int, int, int] | None:
        cx0 = max(0, min(self.width, int(x0)))
        cx1 = max(0, min(self.width, int(x1)))
        cy0 = max(0, min(self.height, int(y0)))
        cy1 = max(0, min(self.height, int(y1)))
        if cx1 <= cx0 or cy1 <= cy0:
            return None
        return cx0, cy0, cx1, cy1

    @staticmethod
    def _sat_sum(sat: IntArray, x0: int, y0: int, x1: int, y1: int) -> int:
        return int(sat[y1, x1]) - int(sat[y0, x1]) - int(sat[y1, x0]) + int(sat[y0, x0])

    def _fraction(self, sat: IntArray, x0: int, y0: int, x1: int, y1: int) -> float:
        rect = self.clip_rect(x0, y0, x1, y1)
        if rect is None:
            return 0.0
        cx0, cy0, cx1, cy1 = rect
        area = (cx1 - cx0) * (cy1 - cy0)
        return self._sat_sum(sat, cx0, cy0, cx1, cy1) / float(area)

    def rect_white_fraction(self, x0: int, y0: int, x1: int, y1: int) -> float:
        return self._fraction(self.white_sat, x0, y0, x1, y1)

    def rect_nonwhite_fraction(self, x0: int, y0: int, x1: int, y1: int) -> float:
        if self.clip_rect(x0, y0, x1, y1) is None:
            return 0.0
        return 1.0 - self.rect_white_fraction(x0, y0, x1, y1)

    def rect_dark_fraction(self, x0: int, y0: int, x1: int, y1: int) -> float:
        return self._fraction(self.dark_sat, x0, y0, x1, y1)

    def stripe_profile(
        self,
        kind: str,
        xs: IntArray,
        y0: int,
        y1: int,
        stripe_width: int,
    ) -> NDArray[np.float64]:
        """Fractions of thin vertical stripes centred on each x in ``xs``.

        ``kind`` is "dark", "white" or "nonwhite".
        """
        xs = np.asarray(xs, dtype=np.int64)
        a = np.clip(xs - stripe_width // 2, 0, self.width)
        b = np.clip(xs - stripe_width // 2 + stripe_width, 0, self.width)
        cy0 = int(np.clip(y0, 0, self.height))
        cy1 = int(np.clip(y1, 0, self.height))
        return self._batch_fraction(kind, a, np.full_like(a, cy0), b, np.full_like(a, cy1))

    def band_profile(
        self,
        kind: str,
        ys: IntArray,
        x0: int,
        x1: int,
        band_height: int,
    ) -> NDArray[np.float64]:
        """Fractions of short horizontal bands centred on each y in ``ys``."""
        ys = np.asarray(ys, dtype=np.int64)
        a = np.clip(ys - band_height // 2, 0, self.height)
        b = np.clip(ys - band_height // 2 + band_height, 0, self.height)
        cx0 = int(np.clip(x0, 0, self.width))
        cx1 = int(np.clip(x1, 0, self.width))
        return self._batch_fraction(kind, np.full_like(a, cx0), a, np.full_like(a, cx1), b)

    def _batch_fraction(
        self,
        kind: str,
        x0: IntArray,
        y0: IntArray,
        x1: IntArray,
        y1: IntArray,
    ) -> NDArray[np.float64]:
        sat = self.dark_sat if kind == "dark" else self.white_sat
        sums = (
            sat[y1, x1].astype(np.int64)
            - sat[y0, x1].astype(np.int64)
            - sat[y1, x0].astype(np.int64)
            + sat[y0, x0].astype(np.int64)
        )
        area = (x1 - x0) * (y1 - y0)
        frac = np.zeros(area.shape, dtype=np.float64)
        valid = area > 0
        frac[valid] = sums[valid] / area[valid]
        if kind == "nonwhite":
            frac[valid] = 1.0 - frac[valid]
        return frac


@dataclass(frozen=True)
class TickLane:
    """Pixel-column interval [x0, x1) believed to carry the printed time marks."""

    x0: int
    x1: int
    index: int
    score: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0


@dataclass(frozen=True)
class LaneScan:
    lane: TickLane
    raw_ticks: tuple[int, ...]
    warning_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class TickLadder:
    """Validated, evenly spaced tick seed."""

    ticks: tuple[int, ...]
    dy: float
    snap: int
    warning_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class LadderExtension:
    ticks: tuple[int, ...]
    stop_reason: str
    added: int
    warning_codes: tuple[str, ...] = ()


@dataclass(frozen=True)
class DividerLayout:
    """The six vertical lines bounding the weekday columns."""

    xs: tuple[int, ...]
    band: tuple[int, int]
    warning_codes: tuple[str, ...] = ()

    def day_regions(self) -> dict[str, DayRegion]:
        return {
            day: DayRegion(x0=int(self.xs[i]), x1=int(self.xs[i + 1]))
            for i, day in enumerate(config.WEEKDAYS)
        }
