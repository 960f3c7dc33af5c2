"""Global ladder extension.

Printed row marks in the tick lane often fade before the grid ends. The
ladder is walked downward one dy-step at a time past the last validated
tick. Each step tries an ordered list of strategies:

1. horizontal peak  - a dark grid line across the table body
2. divider structure - the vertical dividers continue at this row, gated
   by a row-plausibility check on the day-column interiors
3. terminal recovery - one last tick from lane ink, then stop

The walk always terminates: at the image bottom, after a fixed step cap,
or when a strategy reports a stop reason.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

from schedule_detector.models import (
    DayRegion,
    DetectorConfig,
    ErrorKind,
    LadderExtension,
    PipelineState,
    Precompute,
    ProcessingError,
    ProcessingStage,
    TickLadder,
    TickLane,
)
from schedule_detector.utils.signal import plateau_center, round_half_up

STOP_IMAGE_BOTTOM = "image_bottom"
STOP_STEP_CAP = "step_cap"
STOP_LEFT_TABLE = "left_table"
STOP_TERMINAL = "terminal_recovery"
STOP_NO_EVIDENCE = "no_evidence"
STOP_NON_MONOTONIC = "non_monotonic"


@dataclass(frozen=True)
class LadderContext:
    """Read-only inputs shared by every step of one walk."""

    pre: Precompute
    cfg: DetectorConfig
    dy: float
    snap: int
    lane: TickLane
    day_regions: dict[str, DayRegion]


@dataclass
class _Walk:
    """Cursor for a single walk; never shared between calls."""

    ticks: list[int]
    divider_xs: list[int]
    vertical_streak: int = 0
    relaxation_used: bool = False
    sources: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StepOutcome:
    y: int | None
    stop_reason: str | None = None
    source: str = ""


Strategy = Callable[[LadderContext, _Walk, int], "StepOutcome | None"]


def _row_window(ctx: LadderContext, center: int, radius: int, floor: int) -> np.ndarray:
    lo = max(floor, center - radius, 0)
    hi = min(ctx.pre.height - 1, center + radius)
    return np.arange(lo, hi + 1, dtype=np.int64)


def horizontal_peak(ctx: LadderContext, walk: _Walk, expected: int) -> StepOutcome | None:
    """Strongest dark row near ``expected`` over three inset spans of the table width."""
    cfg = ctx.cfg
    ys = _row_window(ctx, expected, ctx.snap, floor=walk.ticks[-1] + 1)
    if ys.size == 0:
        return None

    best_score = -1.0
    best_y = None
    best_dist = None
    width = ctx.pre.width
    for inset in cfg.ladder_span_insets:
        x0 = round_half_up(width * inset)
        x1 = width - x0
        if x1 <= x0:
            continue
        frac = ctx.pre.band_profile("dark", ys, x0, x1, cfg.ladder_peak_band)
        for y, score in zip(ys.tolist(), frac.tolist()):
            dist = abs(y - expected)
            if score > best_score + 1e-9 or (
                abs(score - best_score) <= 1e-9 and best_dist is not None and dist < best_dist
            ):
                best_score, best_y, best_dist = score, y, dist

    if best_y is None or best_score < cfg.ladder_peak_dark_min:
        return None
    walk.vertical_streak = 0
    return StepOutcome(y=int(best_y), source="horizontal")


def row_plausible(ctx: LadderContext, expected: int) -> bool:
    """Day-column interiors around ``expected`` look like table cells, not blank page."""
    cfg = ctx.cfg
    y0 = expected - ctx.snap
    y1 = expected + ctx.snap + 1
    plausible = 0
    for region in ctx.day_regions.values():
        x0 = region.x0 + cfg.ladder_gate_trim_px
        x1 = region.x1 - cfg.ladder_gate_trim_px
        if x1 <= x0:
            continue
        nonwhite = ctx.pre.rect_nonwhite_fraction(x0, y0, x1, y1)
        dark = ctx.pre.rect_dark_fraction(x0, y0, x1, y1)
        if nonwhite >= cfg.ladder_gate_nonwhite_min and dark <= cfg.ladder_gate_dark_max:
            plausible += 1
    return plausible >= cfg.ladder_gate_min_days


def divider_structure(ctx: LadderContext, walk: _Walk, expected: int) -> StepOutcome | None:
    """Vertical dividers still present at ``expected``; re-centres each divider for drift."""
    cfg = ctx.cfg
    y0 = expected - cfg.ladder_stripe_height // 2
    y1 = y0 + cfg.ladder_stripe_height
    radius = cfg.ladder_divider_research_px

    cleared = 0
    recentred: list[int] = []
    for x in walk.divider_xs:
        xs = np.arange(max(0, x - radius), min(ctx.pre.width, x + radius + 1), dtype=np.int64)
        if xs.size == 0:
            recentred.append(x)
            continue
        nonwhite = ctx.pre.stripe_profile("nonwhite", xs, y0, y1, cfg.ladder_stripe_width)
        dark = ctx.pre.stripe_profile("dark", xs, y0, y1, cfg.ladder_stripe_width)
        score = nonwhite + cfg.divider_dark_weight * dark
        best = int(np.argmax(score))
        if nonwhite[best] >= cfg.ladder_stripe_nonwhite_min or dark[best] >= cfg.ladder_stripe_dark_min:
            cleared += 1
            recentred.append(plateau_center(xs, score))
        else:
            recentred.append(x)

    relaxed = False
    if cleared < cfg.ladder_min_dividers:
        can_relax = (
            not walk.relaxation_used
            and walk.vertical_streak >= cfg.ladder_relax_after_streak
            and cleared >= cfg.ladder_relaxed_min_dividers
        )
        if not can_relax:
            return None
        relaxed = True

    if not row_plausible(ctx, expected):
        return StepOutcome(y=None, stop_reason=STOP_LEFT_TABLE, source="vertical")

    walk.divider_xs = recentred
    walk.vertical_streak += 1
    if relaxed:
        walk.relaxation_used = True
    return StepOutcome(y=expected, source="vertical_relaxed" if relaxed else "vertical")


def terminal_recovery(ctx: LadderContext, walk: _Walk, expected: int) -> StepOutcome:
    """Last chance: lane ink in a widened window. Always ends the walk."""
    cfg = ctx.cfg
    win = int(np.clip(round_half_up(cfg.ladder_terminal_frac * ctx.dy), cfg.ladder_terminal_min, cfg.ladder_terminal_max))
    ys = _row_window(ctx, expected, win, floor=walk.ticks[-1] + ctx.snap + 1)
    ys = ys[ys < ctx.pre.height - cfg.ladder_bottom_margin]
    if ys.size == 0:
        return StepOutcome(y=None, stop_reason=STOP_NO_EVIDENCE)

    frac = ctx.pre.band_profile("nonwhite", ys, ctx.lane.x0, ctx.lane.x1, cfg.lane_band_rows)
    if float(np.max(frac)) <= cfg.lane_black_frac:
        return StepOutcome(y=None, stop_reason=STOP_NO_EVIDENCE)
    return StepOutcome(y=plateau_center(ys, frac), stop_reason=STOP_TERMINAL, source="terminal")


STRATEGIES: tuple[Strategy, ...] = (horizontal_peak, divider_structure, terminal_recovery)


def extend_ladder(
    pre: Precompute | None,
    seed: TickLadder | None,
    divider_xs: Sequence[int],
    day_regions: dict[str, DayRegion],
    lane: TickLane | None,
    cfg: DetectorConfig | None = None,
) -> LadderExtension | ProcessingError:
    """
    Walk the tick ladder downward past the last validated tick.

    Deterministic for identical inputs; bounded by ``ladder_max_steps``.
    """
    cfg = cfg or DetectorConfig()
    if pre is None or seed is None or lane is None or not seed.ticks:
        return ProcessingError(
            stage=ProcessingStage.LADDER,
            error_type=ErrorKind.INPUT_INVALID,
            message="Ladder extension needs precompute tables, a tick seed and a tick lane",
        )

    ctx = LadderContext(pre=pre, cfg=cfg, dy=seed.dy, snap=seed.snap, lane=lane, day_regions=day_regions)
    walk = _Walk(ticks=list(seed.ticks), divider_xs=[int(x) for x in divider_xs])
    limit = pre.height - cfg.ladder_bottom_margin

    stop_reason = STOP_STEP_CAP
    for _ in range(cfg.ladder_max_steps):
        expected = round_half_up(walk.ticks[-1] + ctx.dy)
        if expected >= limit:
            stop_reason = STOP_IMAGE_BOTTOM
            break

        outcome: StepOutcome | None = None
        for strategy in STRATEGIES:
            outcome = strategy(ctx, walk, expected)
            if outcome is not None:
                break
        if outcome is None:
            stop_reason = STOP_NO_EVIDENCE
            break

        if outcome.y is not None:
            if outcome.y <= walk.ticks[-1]:
                stop_reason = STOP_NON_MONOTONIC
                break
            walk.ticks.append(int(outcome.y))
            walk.sources.append(outcome.source)
        if outcome.stop_reason is not None:
            stop_reason = outcome.stop_reason
            break

    added = len(walk.ticks) - len(seed.ticks)
    warnings = [f"I_LADDER_STOP:{stop_reason}", f"I_LADDER_ADDED:{added}"]
    if walk.relaxation_used:
        warnings.append("W_LADDER_RELAXED_DIVIDER_QUORUM")
    for source in sorted(set(walk.sources)):
        warnings.append(f"I_LADDER_SOURCE:{source}:{walk.sources.count(source)}")
    return LadderExtension(
        ticks=tuple(walk.ticks),
        stop_reason=stop_reason,
        added=added,
        warning_codes=tuple(warnings),
    )


def ladder(state: PipelineState) -> PipelineState:
    layout = state.dividers
    result = extend_ladder(
        state.precompute,
        state.tick_ladder,
        layout.xs if layout is not None else (),
        layout.day_regions() if layout is not None else {},
        state.lane_scan.lane if state.lane_scan is not None else None,
        state.config,
    )
    if isinstance(result, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [result]})
    return state.model_copy(
        update={
            "ladder": result,
            "warnings": state.warnings + list(result.warning_codes),
        }
    )
