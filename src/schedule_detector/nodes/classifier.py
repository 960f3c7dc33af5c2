"""Per-cell free/busy/work classification against a frozen NavSnapshot."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from schedule_detector import config
from schedule_detector.models import (
    AvailabilityGrid,
    BackgroundColor,
    DayRegion,
    DetectorConfig,
    ErrorKind,
    NavSnapshot,
    PipelineState,
    PixelBuffer,
    Precompute,
    ProcessingError,
    ProcessingStage,
    SlotBand,
)
from schedule_detector.utils.cells import Rect, cell_rect, make_rng, sample_pixels
from schedule_detector.utils.signal import round_half_up

from .debug import debug_enabled, write_debug_artifacts


@dataclass(frozen=True)
class CellVerdict:
    free: bool
    work: bool
    reason: str


@dataclass(frozen=True)
class PixelClasses:
    """Per-sample boolean classes for one batch of RGB samples."""

    background: NDArray[np.bool_]
    ink: NDArray[np.bool_]
    purple: NDArray[np.bool_]

    @property
    def occupied(self) -> NDArray[np.bool_]:
        return self.ink & ~self.purple & ~self.background


def within(samples: NDArray[np.int16], ref: tuple[int, int, int], tol: int) -> NDArray[np.bool_]:
    return np.all(np.abs(samples - np.asarray(ref, dtype=np.int16)) <= tol, axis=1)


def classify_pixels(samples: NDArray[np.int16], bg: BackgroundColor, cfg: DetectorConfig) -> PixelClasses:
    return PixelClasses(
        background=within(samples, bg.rgb(), bg.tol),
        ink=~np.all(samples >= cfg.near_white_thresh, axis=1),
        purple=within(samples, cfg.work_color, cfg.work_color_tol),
    )


def _frac(flags: NDArray[np.bool_]) -> float:
    return float(np.count_nonzero(flags)) / flags.size if flags.size else 0.0


def spill_recovered(pre: Precompute, rect: Rect, cfg: DetectorConfig) -> bool:
    """
    A clean centre with heavy ink only along an edge means a grid line bled
    into the sampling rectangle, not an event.
    """
    x0, y0, x1, y1 = rect
    w, h = x1 - x0, y1 - y0
    cw = max(1, round_half_up(w * cfg.spill_center_frac))
    ch = max(1, round_half_up(h * cfg.spill_center_frac))
    cx0 = x0 + (w - cw) // 2
    cy0 = y0 + (h - ch) // 2
    if pre.rect_nonwhite_fraction(cx0, cy0, cx0 + cw, cy0 + ch) > cfg.spill_center_nonwhite_max:
        return False

    e = cfg.spill_edge_px
    side_edges = (
        pre.rect_nonwhite_fraction(x0, y0, x0 + e, y1),
        pre.rect_nonwhite_fraction(x1 - e, y0, x1, y1),
    )
    stripes = (
        pre.rect_nonwhite_fraction(x0, y0, x1, y0 + e),
        pre.rect_nonwhite_fraction(x0, y1 - e, x1, y1),
    )
    return max(side_edges) >= cfg.spill_edge_nonwhite_min or max(stripes) >= cfg.spill_stripe_nonwhite_min


def classify_cell(
    pixels: PixelBuffer,
    pre: Precompute,
    region: DayRegion,
    band: SlotBand,
    bg: BackgroundColor,
    cfg: DetectorConfig,
    rng: np.random.Generator,
) -> CellVerdict:
    """
    Work marker first, then the hybrid occupied/background rule, then
    (soft-free policy only) spill recovery for cells judged busy.
    """
    rect = cell_rect(region, band, cfg.cell_inset_x, cfg.cell_inset_y, trim=cfg.cell_day_trim)
    if rect is None:
        return CellVerdict(free=False, work=False, reason="empty_rect")

    work_samples = sample_pixels(pixels, rect, cfg.work_samples, rng, cfg.exhaustive_sampling)
    if _frac(within(work_samples, cfg.work_color, cfg.work_color_tol)) >= cfg.work_min_frac:
        return CellVerdict(free=True, work=True, reason="work")

    samples = sample_pixels(pixels, rect, cfg.cell_samples, rng, cfg.exhaustive_sampling)
    classes = classify_pixels(samples, bg, cfg)
    if _frac(classes.occupied) >= cfg.occupied_busy_frac:
        return CellVerdict(free=False, work=False, reason="occupied")

    bg_frac = _frac(classes.background)
    ink_frac = _frac(classes.ink)
    if bg_frac >= cfg.bg_free_frac:
        return CellVerdict(free=True, work=False, reason="background")
    if bg_frac >= cfg.bg_soft_free_frac and ink_frac <= cfg.ink_soft_free_max:
        return CellVerdict(free=True, work=False, reason="soft_background")

    if cfg.spill_policy == "soft_free" and spill_recovered(pre, rect, cfg):
        return CellVerdict(free=True, work=False, reason="spill")
    return CellVerdict(free=False, work=False, reason="busy")


def classify_grid(
    pixels: PixelBuffer,
    pre: Precompute,
    nav: NavSnapshot,
    cfg: DetectorConfig | None = None,
    rng: np.random.Generator | None = None,
) -> tuple[AvailabilityGrid, list[str]] | ProcessingError:
    cfg = cfg or DetectorConfig()
    if pre.width != pixels.width or pre.height != pixels.height:
        return ProcessingError(
            stage=ProcessingStage.CLASSIFY,
            error_type=ErrorKind.INPUT_INVALID,
            message="Precompute tables do not match the pixel buffer",
            details={"pixels": [pixels.width, pixels.height], "precompute": [pre.width, pre.height]},
        )
    rng = make_rng(cfg.sample_seed, rng)

    days: dict[str, list[bool]] = {}
    work_days: dict[str, list[bool]] = {}
    counts: dict[str, int] = {}
    for day in config.WEEKDAYS:
        region = nav.dayRegions[day]
        free_flags: list[bool] = []
        work_flags: list[bool] = []
        for band in nav.slotBands:
            verdict = classify_cell(pixels, pre, region, band, nav.bgWhite, cfg, rng)
            free_flags.append(verdict.free)
            work_flags.append(verdict.work)
            counts[verdict.reason] = counts.get(verdict.reason, 0) + 1
        days[day] = free_flags
        work_days[day] = work_flags

    grid = AvailabilityGrid(
        anchorStartTime=nav.anchorStartTime,
        slots=nav.slot_count,
        days=days,
        workDays=work_days,
    )
    warnings = [f"I_CLASSIFY:{reason}:{n}" for reason, n in sorted(counts.items())]
    if counts.get("spill"):
        warnings.append(f"W_SPILL_RECOVERED:{counts['spill']}")
    if counts.get("empty_rect"):
        warnings.append(f"W_CELL_EMPTY_RECT:{counts['empty_rect']}")
    return grid, warnings


def classify(state: PipelineState) -> PipelineState:
    if state.nav is None or state.precompute is None:
        error = ProcessingError(
            stage=ProcessingStage.CLASSIFY,
            error_type=ErrorKind.INPUT_INVALID,
            message="Classification needs a NavSnapshot and precompute tables",
        )
        return state.model_copy(update={"errors": state.errors + [error]})

    result = classify_grid(state.pixels, state.precompute, state.nav, state.config)
    if isinstance(result, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [result]})
    grid, warnings = result
    if debug_enabled():
        warnings.extend(
            write_debug_artifacts(state.pixels, state.nav, state.source_name or "schedule", grid=grid)
        )
    return state.model_copy(
        update={"availability": grid, "warnings": state.warnings + warnings}
    )
