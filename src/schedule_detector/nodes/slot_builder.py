"""Turn the extended tick ladder into half-hour slot bands."""

from __future__ import annotations

from collections.abc import Sequence

from schedule_detector.models import (
    DetectorConfig,
    ErrorKind,
    PipelineState,
    Precompute,
    ProcessingError,
    ProcessingStage,
    SlotBand,
    TickLane,
)


def _row_is_line(pre: Precompute, lane: TickLane, y: int, cfg: DetectorConfig) -> bool:
    if y < 0 or y >= pre.height:
        return False
    return pre.rect_dark_fraction(lane.x0, y, lane.x1, y + 1) >= cfg.slot_line_dark_frac


def line_extent(pre: Precompute, lane: TickLane, tick: int, cfg: DetectorConfig) -> tuple[int, int]:
    """Inclusive (top, bottom) rows of the printed line around ``tick``."""
    top = tick
    for _ in range(cfg.slot_line_max_grow):
        if not _row_is_line(pre, lane, top - 1, cfg):
            break
        top -= 1
    bottom = tick
    for _ in range(cfg.slot_line_max_grow):
        if not _row_is_line(pre, lane, bottom + 1, cfg):
            break
        bottom += 1
    return top, bottom


def build_slot_bands(
    pre: Precompute | None,
    ticks: Sequence[int],
    lane: TickLane | None,
    cfg: DetectorConfig | None = None,
) -> tuple[list[SlotBand], list[str]] | ProcessingError:
    """
    One band per adjacent tick pair, from the upper line's bottom edge to
    the lower line's top edge. Bands shorter than ``slot_min_height`` are
    dropped and reported.
    """
    cfg = cfg or DetectorConfig()
    if pre is None or lane is None:
        return ProcessingError(
            stage=ProcessingStage.SLOT_BANDS,
            error_type=ErrorKind.INPUT_INVALID,
            message="Slot bands need precompute tables and a tick lane",
        )
    if len(ticks) < 2:
        return ProcessingError(
            stage=ProcessingStage.SLOT_BANDS,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message=f"Need at least 2 ticks to form a slot band, got {len(ticks)}",
        )

    extents = [line_extent(pre, lane, int(t), cfg) for t in ticks]
    bands: list[SlotBand] = []
    warnings: list[str] = []
    for i, ((_, upper_bottom), (lower_top, _)) in enumerate(zip(extents, extents[1:])):
        y_start = upper_bottom + 1
        y_end = lower_top
        if y_end - y_start < cfg.slot_min_height:
            warnings.append(f"W_SLOT_BAND_DISCARDED:{i}:{max(0, y_end - y_start)}")
            continue
        bands.append(SlotBand(yStart=y_start, yEnd=y_end))

    if not bands:
        return ProcessingError(
            stage=ProcessingStage.SLOT_BANDS,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message="Every slot band was shorter than the minimum height",
            details={"ticks": len(ticks), "min_height": cfg.slot_min_height},
        )
    warnings.append(f"I_SLOT_BANDS:{len(bands)}")
    return bands, warnings


def slot_bands(state: PipelineState) -> PipelineState:
    ticks = state.ladder.ticks if state.ladder is not None else ()
    lane = state.lane_scan.lane if state.lane_scan is not None else None
    result = build_slot_bands(state.precompute, ticks, lane, state.config)
    if isinstance(result, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [result]})
    bands, warnings = result
    return state.model_copy(
        update={"slot_bands": bands, "warnings": state.warnings + warnings}
    )
