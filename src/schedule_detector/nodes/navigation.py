"""Freeze the detected geometry into a NavSnapshot and bind its start time."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import ValidationError

from schedule_detector.models import (
    BackgroundColor,
    DividerLayout,
    ErrorKind,
    NavSnapshot,
    PipelineState,
    ProcessingError,
    ProcessingStage,
    SlotBand,
)
from schedule_detector.utils.timeutil import normalize_clock

from .debug import debug_enabled, write_debug_artifacts


def assemble_snapshot(
    layout: DividerLayout,
    bands: Sequence[SlotBand],
    ticks: Sequence[int],
    background: BackgroundColor,
    anchor_start_time: str,
) -> NavSnapshot | ProcessingError:
    try:
        return NavSnapshot(
            dayRegions=layout.day_regions(),
            slotBands=list(bands),
            ticksForMap=[int(t) for t in ticks],
            dividerXs=[int(x) for x in layout.xs],
            bgWhite=background,
            anchorStartTime=anchor_start_time,
        )
    except ValidationError as e:
        return ProcessingError(
            stage=ProcessingStage.SNAPSHOT,
            error_type=ErrorKind.GEOMETRY_INCONSISTENT,
            message=f"Detected geometry is inconsistent: {e.errors()[0]['msg']}",
            details={"errors": len(e.errors())},
        )


def finalize_nav(nav: NavSnapshot, anchor_start_time: str) -> NavSnapshot | ProcessingError:
    """Copy of ``nav`` bound to ``anchor_start_time``; geometry is untouched."""
    label = normalize_clock(anchor_start_time, ProcessingStage.FINALIZE)
    if isinstance(label, ProcessingError):
        return label
    return nav.model_copy(update={"anchorStartTime": label})


def snapshot(state: PipelineState) -> PipelineState:
    if state.dividers is None or state.slot_bands is None or state.ladder is None or state.background is None:
        error = ProcessingError(
            stage=ProcessingStage.SNAPSHOT,
            error_type=ErrorKind.INPUT_INVALID,
            message="Snapshot needs dividers, slot bands, ladder and background",
        )
        return state.model_copy(update={"errors": state.errors + [error]})

    nav = assemble_snapshot(
        state.dividers,
        state.slot_bands,
        state.ladder.ticks,
        state.background,
        state.config.default_start_time,
    )
    if isinstance(nav, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [nav]})

    warnings = [f"I_SNAPSHOT:{nav.slot_count}"]
    if debug_enabled():
        warnings.extend(write_debug_artifacts(state.pixels, nav, state.source_name or "schedule"))
    return state.model_copy(update={"nav": nav, "warnings": state.warnings + warnings})


def finalize(state: PipelineState) -> PipelineState:
    if state.nav is None:
        error = ProcessingError(
            stage=ProcessingStage.FINALIZE,
            error_type=ErrorKind.INPUT_INVALID,
            message="No NavSnapshot to finalize",
        )
        return state.model_copy(update={"errors": state.errors + [error]})

    anchor = state.anchor_start_time or state.config.default_start_time
    nav = finalize_nav(state.nav, anchor)
    if isinstance(nav, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [nav]})
    return state.model_copy(
        update={"nav": nav, "warnings": state.warnings + [f"I_ANCHOR:{nav.anchorStartTime}"]}
    )
