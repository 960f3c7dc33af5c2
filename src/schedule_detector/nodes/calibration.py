"""Background ("empty cell") colour calibration.

Friday's lower rows are usually empty in a weekly schedule, so they are
tried first. If they are too busy, every cell in the grid competes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

import numpy as np

from schedule_detector.models import (
    BackgroundColor,
    DayRegion,
    DetectorConfig,
    ErrorKind,
    PipelineState,
    PixelBuffer,
    Precompute,
    ProcessingError,
    ProcessingStage,
    SlotBand,
)
from schedule_detector.utils.cells import Rect, cell_rect, make_rng, sample_pixels
from schedule_detector.utils.signal import round_half_up


@dataclass(frozen=True)
class CalibrationInputs:
    pixels: PixelBuffer
    pre: Precompute
    day_regions: dict[str, DayRegion]
    bands: Sequence[SlotBand]
    cfg: DetectorConfig
    rng: np.random.Generator


def _whitest_cells(inputs: CalibrationInputs, cells: list[Rect]) -> list[Rect] | None:
    """Top-N cells by white fraction, or None when their mean whiteness is too low."""
    cfg = inputs.cfg
    if not cells:
        return None
    scored = sorted(
        ((inputs.pre.rect_white_fraction(*rect), i) for i, rect in enumerate(cells)),
        key=lambda item: (-item[0], item[1]),
    )
    top = scored[: cfg.bg_top_slots]
    mean_white = sum(score for score, _ in top) / len(top)
    if mean_white < cfg.bg_min_white:
        return None
    return [cells[i] for _, i in top]


def _median_and_mad(inputs: CalibrationInputs, rects: list[Rect]) -> tuple[np.ndarray, np.ndarray]:
    cfg = inputs.cfg
    samples = np.concatenate(
        [
            sample_pixels(inputs.pixels, rect, cfg.bg_samples_per_slot, inputs.rng, cfg.exhaustive_sampling)
            for rect in rects
        ]
    ).astype(np.float64)
    median = np.median(samples, axis=0)
    mad = np.median(np.abs(samples - median), axis=0)
    return median, mad


def _color(median: np.ndarray, tol: float, cfg: DetectorConfig) -> BackgroundColor:
    r, g, b = (round_half_up(float(c)) for c in median)
    return BackgroundColor(r=r, g=g, b=b, tol=int(np.clip(round_half_up(tol), cfg.bg_tol_min, cfg.bg_tol_max)))


def friday_first(inputs: CalibrationInputs) -> BackgroundColor | None:
    """Whitest of Friday's bottom slots; tolerance widens with their spread."""
    cfg = inputs.cfg
    friday = inputs.day_regions.get("Friday")
    if friday is None:
        return None
    cells: list[Rect] = []
    for band in list(inputs.bands)[-cfg.bg_friday_bottom_slots :]:
        rect = cell_rect(friday, band, cfg.bg_inset_x, cfg.bg_inset_y)
        if rect is not None:
            cells.append(rect)
    chosen = _whitest_cells(inputs, cells)
    if chosen is None:
        return None
    median, mad = _median_and_mad(inputs, chosen)
    return _color(median, cfg.bg_tol_base + float(np.max(mad)) * cfg.bg_tol_mad_gain, cfg)


def global_fallback(inputs: CalibrationInputs) -> BackgroundColor | None:
    """Whitest cells anywhere in the grid, with a fixed tolerance bump."""
    cfg = inputs.cfg
    cells: list[Rect] = []
    for region in inputs.day_regions.values():
        for band in inputs.bands:
            rect = cell_rect(region, band, cfg.bg_inset_x, cfg.bg_inset_y)
            if rect is not None:
                cells.append(rect)
    chosen = _whitest_cells(inputs, cells)
    if chosen is None:
        return None
    median, _ = _median_and_mad(inputs, chosen)
    return _color(median, cfg.bg_tol_base + cfg.bg_global_tol_bump, cfg)


CALIBRATORS: tuple[tuple[str, Callable[[CalibrationInputs], BackgroundColor | None]], ...] = (
    ("friday_first", friday_first),
    ("global_fallback", global_fallback),
)


def calibrate_background(
    pixels: PixelBuffer,
    pre: Precompute | None,
    day_regions: dict[str, DayRegion],
    bands: Sequence[SlotBand],
    cfg: DetectorConfig | None = None,
    rng: np.random.Generator | None = None,
) -> tuple[BackgroundColor, list[str]] | ProcessingError:
    cfg = cfg or DetectorConfig()
    if pre is None or not day_regions or not bands:
        return ProcessingError(
            stage=ProcessingStage.BACKGROUND,
            error_type=ErrorKind.INPUT_INVALID,
            message="Background calibration needs precompute tables, day regions and slot bands",
        )

    inputs = CalibrationInputs(
        pixels=pixels,
        pre=pre,
        day_regions=day_regions,
        bands=bands,
        cfg=cfg,
        rng=make_rng(cfg.sample_seed, rng),
    )
    warnings: list[str] = []
    for name, calibrator in CALIBRATORS:
        color = calibrator(inputs)
        if color is not None:
            warnings.append(f"I_BACKGROUND:{name}:{color.r},{color.g},{color.b}:{color.tol}")
            return color, warnings
        if name == "friday_first":
            warnings.append("W_BACKGROUND_GLOBAL_FALLBACK")

    return ProcessingError(
        stage=ProcessingStage.BACKGROUND,
        error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
        message=f"No set of {cfg.bg_top_slots} cells reached {cfg.bg_min_white:.2f} mean whiteness",
        details={"slots": len(bands)},
    )


def background(state: PipelineState) -> PipelineState:
    regions = state.dividers.day_regions() if state.dividers is not None else {}
    result = calibrate_background(
        state.pixels,
        state.precompute,
        regions,
        state.slot_bands or [],
        state.config,
    )
    if isinstance(result, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [result]})
    color, warnings = result
    return state.model_copy(
        update={"background": color, "warnings": state.warnings + warnings}
    )
