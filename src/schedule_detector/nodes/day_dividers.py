"""Day divider detection.

Finds the six vertical lines bounding the Monday-Friday columns from a
representative horizontal band of the grid. Outer anchors come from edge
scans; the four interior dividers are searched around evenly spaced
expected positions between them.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from schedule_detector import config
from schedule_detector.models import (
    DetectorConfig,
    DividerLayout,
    ErrorKind,
    PipelineState,
    Precompute,
    ProcessingError,
    ProcessingStage,
)
from schedule_detector.utils.signal import plateau_center, round_half_up, true_runs

N_DIVIDERS = len(config.WEEKDAYS) + 1


def representative_band(ticks: Sequence[int], height: int, cfg: DetectorConfig) -> tuple[int, int]:
    """A stripe-tall row band in the upper-middle of the ladder, clear of header text."""
    top, bottom = int(ticks[0]), int(ticks[-1])
    span = cfg.divider_stripe_height
    center = top + cfg.divider_band_center_frac * (bottom - top)
    y0 = round_half_up(center) - span // 2
    y0 = min(max(y0, top), max(top, bottom - span))
    y1 = y0 + span
    return max(0, y0), min(height, y1)


class _Profiles:
    """Per-column stripe fractions over one row band."""

    def __init__(self, pre: Precompute, y0: int, y1: int, cfg: DetectorConfig):
        self.cfg = cfg
        self.width = pre.width
        xs = np.arange(pre.width, dtype=np.int64)
        self.nonwhite = pre.stripe_profile("nonwhite", xs, y0, y1, cfg.divider_stripe_width)
        self.dark = pre.stripe_profile("dark", xs, y0, y1, cfg.divider_stripe_width)
        self.score = self.nonwhite + cfg.divider_dark_weight * self.dark

    def refine(self, lo: int, hi: int) -> int:
        lo = max(0, lo)
        hi = min(self.width, hi)
        xs = np.arange(lo, hi, dtype=np.int64)
        return plateau_center(xs, self.score[lo:hi])

    def left_anchor(self) -> int | None:
        hits = np.flatnonzero(self.nonwhite >= self.cfg.divider_anchor_nonwhite_min)
        if hits.size == 0:
            return None
        x = int(hits[0])
        reach = self.cfg.divider_stripe_width + self.cfg.divider_max_line_width
        return self.refine(x, x + reach)

    def right_anchor(self, left: int) -> int | None:
        min_x = left + self.cfg.divider_min_anchor_gap
        hits = np.flatnonzero(self.nonwhite >= self.cfg.divider_anchor_nonwhite_min)
        hits = hits[hits >= min_x]
        if hits.size == 0:
            return None
        x = int(hits[-1])
        reach = self.cfg.divider_stripe_width + self.cfg.divider_max_line_width
        return self.refine(max(min_x, x - reach + 1), x + 1)

    def line_candidates(self) -> list[int]:
        """Thin vertical lines (wide non-white runs are event blocks, not lines)."""
        active = self.nonwhite >= self.cfg.divider_anchor_nonwhite_min
        max_run = self.cfg.divider_max_line_width + self.cfg.divider_stripe_width - 1
        out: list[int] = []
        for start, end in true_runs(active):
            if end - start <= max_run:
                out.append(self.refine(start, end))
        return out

    def search_interior(self, expected: float) -> int | None:
        cfg = self.cfg
        center = round_half_up(expected)
        xs = np.arange(
            center - cfg.divider_search_radius,
            center + cfg.divider_search_radius + 1,
            cfg.divider_search_step,
            dtype=np.int64,
        )
        xs = xs[(xs >= 0) & (xs < self.width)]
        if xs.size == 0:
            return None
        ok = self.nonwhite[xs] >= cfg.divider_nonwhite_min
        if not np.any(ok):
            return None
        cand = xs[ok]
        scores = self.score[cand]
        top = float(np.max(scores))
        tied = cand[np.abs(scores - top) < 1e-9]
        best = int(tied[np.argmin(np.abs(tied - expected))])
        step = max(1, cfg.divider_search_step)
        return self.refine(best - step, best + step + 1)


def _trim_outer_frame(
    left: int,
    right: int,
    candidates: list[int],
    cfg: DetectorConfig,
) -> tuple[int, int, list[str]]:
    """Drop an outer frame line that sits much closer than a day column to its neighbour."""
    warnings: list[str] = []
    inner = [x for x in candidates if left < x < right]
    while len(inner) + 2 > N_DIVIDERS and inner:
        col_w = (right - left) / float(len(config.WEEKDAYS))
        limit = cfg.divider_frame_gap_frac * col_w
        left_gap = inner[0] - left
        right_gap = right - inner[-1]
        if left_gap < limit and left_gap <= right_gap:
            warnings.append(f"W_DIVIDER_FRAME_TRIMMED:left:{left}")
            left = inner.pop(0)
        elif right_gap < limit:
            warnings.append(f"W_DIVIDER_FRAME_TRIMMED:right:{right}")
            right = inner.pop()
        else:
            break
    return left, right, warnings


def detect_dividers(
    pre: Precompute | None,
    ticks: Sequence[int],
    cfg: DetectorConfig | None = None,
) -> DividerLayout | ProcessingError:
    """
    Locate the six day dividers.

    Returns:
        DividerLayout with exactly six sorted x positions, or ProcessingError
        (insufficient evidence when an anchor or interior divider is missing,
        geometry inconsistent when the found positions collapse or cross).
    """
    cfg = cfg or DetectorConfig()
    if pre is None or len(ticks) < 2:
        return ProcessingError(
            stage=ProcessingStage.DIVIDERS,
            error_type=ErrorKind.INPUT_INVALID,
            message="Divider detection needs precompute tables and a validated tick ladder",
        )

    y0, y1 = representative_band(ticks, pre.height, cfg)
    profiles = _Profiles(pre, y0, y1, cfg)

    left = profiles.left_anchor()
    if left is None:
        return ProcessingError(
            stage=ProcessingStage.DIVIDERS,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message="No left table edge found",
            details={"band": [y0, y1]},
        )
    right = profiles.right_anchor(left)
    if right is None:
        return ProcessingError(
            stage=ProcessingStage.DIVIDERS,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message="No right table edge found",
            details={"band": [y0, y1], "left": left},
        )

    left, right, warnings = _trim_outer_frame(left, right, profiles.line_candidates(), cfg)

    n_cols = len(config.WEEKDAYS)
    found: list[int] = [left]
    missing: list[int] = []
    for k in range(1, n_cols):
        expected = left + k * (right - left) / float(n_cols)
        x = profiles.search_interior(expected)
        if x is None:
            missing.append(k)
        else:
            found.append(x)
    found.append(right)

    if missing:
        return ProcessingError(
            stage=ProcessingStage.DIVIDERS,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message=f"Found {N_DIVIDERS - len(missing)} of {N_DIVIDERS} day dividers",
            details={"found": found, "missing_interior": missing, "band": [y0, y1]},
        )

    xs = sorted(found)
    if any(b - a <= cfg.divider_merge_px for a, b in zip(xs, xs[1:])) or xs != found:
        return ProcessingError(
            stage=ProcessingStage.DIVIDERS,
            error_type=ErrorKind.GEOMETRY_INCONSISTENT,
            message="Day dividers overlap or are out of order",
            details={"found": found},
        )

    warnings.append("I_DIVIDERS:" + ",".join(str(x) for x in xs))
    return DividerLayout(xs=tuple(xs), band=(y0, y1), warning_codes=tuple(warnings))


def dividers(state: PipelineState) -> PipelineState:
    ticks = state.tick_ladder.ticks if state.tick_ladder is not None else ()
    layout = detect_dividers(state.precompute, ticks, state.config)
    if isinstance(layout, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [layout]})
    return state.model_copy(
        update={
            "dividers": layout,
            "warnings": state.warnings + list(layout.warning_codes),
        }
    )
