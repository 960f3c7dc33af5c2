"""Fit the evenly spaced tick seed ("ladder seed") from raw lane ticks."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from schedule_detector.models import (
    DetectorConfig,
    ErrorKind,
    PipelineState,
    ProcessingError,
    ProcessingStage,
    TickLadder,
)
from schedule_detector.utils.signal import round_half_up


def snap_window(dy: float, cfg: DetectorConfig) -> int:
    return int(np.clip(round_half_up(dy * cfg.snap_frac), cfg.snap_min, cfg.snap_max))


def _grow_chain(ticks: Sequence[int], start: int, dy: float, snap: int) -> list[int]:
    """Greedy walk: from ``start`` step by dy and take the nearest later tick in the snap window."""
    chain = [ticks[start]]
    last = start
    expected = float(ticks[start])
    while True:
        expected += dy
        best_j = -1
        best_dist = float("inf")
        for j in range(last + 1, len(ticks)):
            dist = abs(ticks[j] - expected)
            if ticks[j] - expected > snap:
                break
            if dist <= snap and dist < best_dist:
                best_j, best_dist = j, dist
        if best_j < 0:
            return chain
        chain.append(ticks[best_j])
        last = best_j
        # Re-anchor on the accepted tick so fractional dy error does not accumulate.
        expected = float(ticks[best_j])


def validate_ticks(
    raw_ticks: Sequence[int],
    cfg: DetectorConfig | None = None,
) -> TickLadder | ProcessingError:
    """
    Keep the longest evenly spaced sub-sequence of raw ticks.

    Fails with insufficient evidence when fewer than two raw ticks exist, the
    median spacing is implausible, or the best chain is shorter than
    ``min_chain_ticks``.
    """
    cfg = cfg or DetectorConfig()
    ticks = [int(t) for t in raw_ticks]
    if len(ticks) < 2:
        return ProcessingError(
            stage=ProcessingStage.TICK_VALIDATE,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message=f"Too few horizontal time lines detected ({len(ticks)})",
            details={"raw_ticks": ticks},
        )
    if any(b <= a for a, b in zip(ticks, ticks[1:])):
        return ProcessingError(
            stage=ProcessingStage.TICK_VALIDATE,
            error_type=ErrorKind.GEOMETRY_INCONSISTENT,
            message="Raw ticks are not strictly increasing",
            details={"raw_ticks": ticks},
        )

    diffs = np.diff(np.asarray(ticks, dtype=np.float64))
    dy = float(np.median(diffs[diffs > 0]))
    if not cfg.dy_min <= dy <= cfg.dy_max:
        return ProcessingError(
            stage=ProcessingStage.TICK_VALIDATE,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message=f"Implausible row spacing {dy:.1f}px (allowed {cfg.dy_min}-{cfg.dy_max})",
            details={"dy": dy, "raw_ticks": ticks},
        )

    snap = snap_window(dy, cfg)
    top_limit = ticks[0] + cfg.chain_start_top_frac * (ticks[-1] - ticks[0])
    starts = [i for i, t in enumerate(ticks) if t <= top_limit][: cfg.chain_start_max]

    best: list[int] = []
    for start in starts:
        chain = _grow_chain(ticks, start, dy, snap)
        if len(chain) > len(best):
            best = chain

    if len(best) < cfg.min_chain_ticks:
        return ProcessingError(
            stage=ProcessingStage.TICK_VALIDATE,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message=(
                f"Longest evenly spaced tick chain has {len(best)} lines "
                f"(need {cfg.min_chain_ticks})"
            ),
            details={"dy": dy, "snap": snap, "chain": best, "raw_ticks": ticks},
        )

    warnings = [f"I_TICK_SEED:{len(best)}:dy={dy:.1f}:snap={snap}"]
    if len(best) < len(ticks):
        warnings.append(f"W_TICK_SEED_DROPPED:{len(ticks) - len(best)}")
    return TickLadder(ticks=tuple(best), dy=dy, snap=snap, warning_codes=tuple(warnings))


def tick_validate(state: PipelineState) -> PipelineState:
    raw = state.lane_scan.raw_ticks if state.lane_scan is not None else ()
    ladder = validate_ticks(raw, state.config)
    if isinstance(ladder, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [ladder]})
    return state.model_copy(
        update={
            "tick_ladder": ladder,
            "warnings": state.warnings + list(ladder.warning_codes),
        }
    )
