"""Tick lane selection and raw tick detection.

The printed time marks sit in a narrow strip near the left edge. Several
candidate strips are scanned; the first one that yields enough evenly
printed row marks wins, otherwise the strip with the most marks.
"""

from __future__ import annotations

import numpy as np

from schedule_detector.models import (
    DetectorConfig,
    ErrorKind,
    LaneScan,
    PipelineState,
    Precompute,
    ProcessingError,
    ProcessingStage,
    TickLane,
)
from schedule_detector.utils.signal import round_half_up, true_runs


def lane_bounds(width: int, start_frac: float, cfg: DetectorConfig) -> tuple[int, int]:
    x0 = round_half_up(width * start_frac)
    x1 = x0 + max(1, round_half_up(width * cfg.lane_width_frac))
    return min(x0, max(0, width - 1)), min(width, x1)


def detect_raw_ticks(pre: Precompute, x0: int, x1: int, cfg: DetectorConfig) -> list[int]:
    """
    Row positions of dark marks inside the lane [x0, x1).

    A row is black when the dark fraction of the 3-row band centred on it
    exceeds ``lane_black_frac``. Runs of at least ``lane_min_run`` black rows
    collapse to their midpoint; a midpoint within ``lane_dedupe_px`` of the
    previous tick is dropped.
    """
    pad = cfg.lane_pad_px
    ys = np.arange(pad, pre.height - pad, dtype=np.int64)
    if ys.size == 0 or x1 <= x0:
        return []

    frac = pre.band_profile("dark", ys, x0, x1, cfg.lane_band_rows)
    black = frac > cfg.lane_black_frac

    ticks: list[int] = []
    for start, end in true_runs(black):
        if end - start < cfg.lane_min_run:
            continue
        y = (int(ys[start]) + int(ys[end - 1])) // 2
        if ticks and y - ticks[-1] <= cfg.lane_dedupe_px:
            continue  # earlier tick wins
        ticks.append(y)
    return ticks


def select_tick_lane(
    pre: Precompute | None,
    cfg: DetectorConfig | None = None,
) -> LaneScan | ProcessingError:
    cfg = cfg or DetectorConfig()
    if pre is None:
        return ProcessingError(
            stage=ProcessingStage.TICK_LANE,
            error_type=ErrorKind.INPUT_INVALID,
            message="Precompute tables missing; cannot scan tick lanes",
        )

    best: LaneScan | None = None
    for index, start_frac in enumerate(cfg.lane_starts):
        x0, x1 = lane_bounds(pre.width, start_frac, cfg)
        ticks = detect_raw_ticks(pre, x0, x1, cfg)
        scan = LaneScan(
            lane=TickLane(x0=x0, x1=x1, index=index, score=len(ticks)),
            raw_ticks=tuple(ticks),
        )
        if len(ticks) >= cfg.lane_win_ticks:
            return LaneScan(
                lane=scan.lane,
                raw_ticks=scan.raw_ticks,
                warning_codes=(f"I_TICK_LANE:{index}:{len(ticks)}",),
            )
        if best is None or len(ticks) > best.lane.score:
            best = scan

    if best is None:
        return ProcessingError(
            stage=ProcessingStage.TICK_LANE,
            error_type=ErrorKind.INPUT_INVALID,
            message="No tick lane candidates configured",
        )
    return LaneScan(
        lane=best.lane,
        raw_ticks=best.raw_ticks,
        warning_codes=(
            f"I_TICK_LANE:{best.lane.index}:{best.lane.score}",
            f"W_TICK_LANE_BELOW_WIN:{best.lane.score}<{cfg.lane_win_ticks}",
        ),
    )


def tick_lane(state: PipelineState) -> PipelineState:
    scan = select_tick_lane(state.precompute, state.config)
    if isinstance(scan, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [scan]})
    return state.model_copy(
        update={
            "lane_scan": scan,
            "warnings": state.warnings + list(scan.warning_codes),
        }
    )
