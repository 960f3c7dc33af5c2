"""LangGraph pipeline: PixelBuffer -> NavSnapshot -> AvailabilityGrid."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from langgraph.graph import END, StateGraph

from schedule_detector.models import (
    AvailabilityGrid,
    DetectorConfig,
    ErrorKind,
    NavSnapshot,
    PipelineState,
    PixelBuffer,
    Precompute,
    ProcessingError,
    ProcessingStage,
)
from schedule_detector.nodes import (
    background,
    classify,
    dividers,
    finalize,
    ladder,
    precompute,
    slot_bands,
    snapshot,
    tick_lane,
    tick_validate,
)
from schedule_detector.nodes.classifier import classify_grid
from schedule_detector.nodes.masks import build_precompute
from schedule_detector.nodes.navigation import finalize_nav
from schedule_detector.utils import load_image


@dataclass(frozen=True)
class GeometryResult:
    """Phase-one output: the frozen snapshot plus tables reusable by classification."""

    nav: NavSnapshot
    precompute: Precompute
    warnings: list[str] = field(default_factory=list)


def _failed(state: PipelineState, stage: ProcessingStage) -> bool:
    return any(err.stage == stage and not err.recoverable for err in state.errors)


def _route_precompute(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.PRECOMPUTE) or state.precompute is None:
        return END
    return "select_lane"


def _route_tick_lane(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.TICK_LANE) or state.lane_scan is None:
        return END
    return "validate_ticks"


def _route_tick_validate(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.TICK_VALIDATE) or state.tick_ladder is None:
        return END
    return "detect_dividers"


def _route_dividers(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.DIVIDERS) or state.dividers is None:
        return END
    return "extend_ladder"


def _route_ladder(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.LADDER) or state.ladder is None:
        return END
    return "build_slot_bands"


def _route_slot_bands(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.SLOT_BANDS) or not state.slot_bands:
        return END
    return "calibrate_background"


def _route_background(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.BACKGROUND) or state.background is None:
        return END
    return "freeze_snapshot"


def _route_snapshot(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.SNAPSHOT) or state.nav is None:
        return END
    return "bind_start_time"


def _route_finalize(state: PipelineState) -> str:
    if _failed(state, ProcessingStage.FINALIZE):
        return END
    return "classify_cells"


def _add_geometry_nodes(graph: StateGraph) -> None:
    graph.add_node("build_masks", precompute)
    graph.add_node("select_lane", tick_lane)
    graph.add_node("validate_ticks", tick_validate)
    graph.add_node("detect_dividers", dividers)
    graph.add_node("extend_ladder", ladder)
    graph.add_node("build_slot_bands", slot_bands)
    graph.add_node("calibrate_background", background)
    graph.add_node("freeze_snapshot", snapshot)

    graph.set_entry_point("build_masks")

    graph.add_conditional_edges(
        "build_masks", _route_precompute, {"select_lane": "select_lane", END: END}
    )
    graph.add_conditional_edges(
        "select_lane", _route_tick_lane, {"validate_ticks": "validate_ticks", END: END}
    )
    graph.add_conditional_edges(
        "validate_ticks", _route_tick_validate, {"detect_dividers": "detect_dividers", END: END}
    )
    # Dividers come first: the ladder extender re-tracks them as it walks down.
    graph.add_conditional_edges(
        "detect_dividers", _route_dividers, {"extend_ladder": "extend_ladder", END: END}
    )
    graph.add_conditional_edges(
        "extend_ladder", _route_ladder, {"build_slot_bands": "build_slot_bands", END: END}
    )
    graph.add_conditional_edges(
        "build_slot_bands", _route_slot_bands, {"calibrate_background": "calibrate_background", END: END}
    )
    graph.add_conditional_edges(
        "calibrate_background", _route_background, {"freeze_snapshot": "freeze_snapshot", END: END}
    )


def create_geometry_pipeline():
    """Phase one only: stops after the NavSnapshot is frozen."""
    graph = StateGraph(PipelineState)
    _add_geometry_nodes(graph)
    graph.add_edge("freeze_snapshot", END)
    return graph.compile()


def create_pipeline():
    graph = StateGraph(PipelineState)
    _add_geometry_nodes(graph)
    graph.add_node("bind_start_time", finalize)
    graph.add_node("classify_cells", classify)

    graph.add_conditional_edges(
        "freeze_snapshot", _route_snapshot, {"bind_start_time": "bind_start_time", END: END}
    )
    graph.add_conditional_edges(
        "bind_start_time", _route_finalize, {"classify_cells": "classify_cells", END: END}
    )
    graph.add_edge("classify_cells", END)
    return graph.compile()


def _coerce(result) -> PipelineState:
    return result if isinstance(result, PipelineState) else PipelineState(**result)


def first_error(state: PipelineState) -> ProcessingError | None:
    for err in state.errors:
        if not err.recoverable:
            return err
    return None


def build_nav_snapshot(
    pixels: PixelBuffer,
    config: DetectorConfig | None = None,
) -> GeometryResult | ProcessingError:
    """
    Phase one: detect ticks, dividers, slot bands and background.

    The returned snapshot carries ``config.default_start_time`` as its anchor;
    bind the real start time with ``finalize_nav``.
    """
    initial = PipelineState(pixels=pixels, config=config or DetectorConfig())
    state = _coerce(geometry_pipeline.invoke(initial))
    err = first_error(state)
    if err is not None:
        return err
    if state.nav is None or state.precompute is None:
        return ProcessingError(
            stage=ProcessingStage.SNAPSHOT,
            error_type=ErrorKind.INSUFFICIENT_EVIDENCE,
            message="Geometry pipeline finished without a NavSnapshot",
        )
    return GeometryResult(nav=state.nav, precompute=state.precompute, warnings=state.warnings)


def compute_availability(
    pixels: PixelBuffer,
    nav: NavSnapshot,
    config: DetectorConfig | None = None,
    rng: np.random.Generator | None = None,
    precompute: Precompute | None = None,
) -> AvailabilityGrid | ProcessingError:
    """Phase two: classify every (day, slot) cell of a frozen snapshot."""
    cfg = config or DetectorConfig()
    pre = precompute
    if pre is None:
        built = build_precompute(pixels, cfg)
        if isinstance(built, ProcessingError):
            return built
        pre = built
    result = classify_grid(pixels, pre, nav, cfg, rng)
    if isinstance(result, ProcessingError):
        return result
    grid, _ = result
    return grid


def run_pipeline(
    pixels: PixelBuffer,
    anchor_start_time: str | None = None,
    config: DetectorConfig | None = None,
    source_name: str | None = None,
) -> PipelineState:
    initial = PipelineState(
        pixels=pixels,
        config=config or DetectorConfig(),
        anchor_start_time=anchor_start_time,
        source_name=source_name,
    )
    return _coerce(pipeline.invoke(initial))


async def run_pipeline_async(
    pixels: PixelBuffer,
    anchor_start_time: str | None = None,
    config: DetectorConfig | None = None,
    source_name: str | None = None,
) -> PipelineState:
    """Async pipeline runner; the synchronous nodes run in LangGraph's executor."""
    initial = PipelineState(
        pixels=pixels,
        config=config or DetectorConfig(),
        anchor_start_time=anchor_start_time,
        source_name=source_name,
    )
    result = await pipeline.ainvoke(initial)
    return _coerce(result)


def analyze_image(
    path: str | Path,
    anchor_start_time: str | None = None,
    config: DetectorConfig | None = None,
) -> PipelineState | ProcessingError:
    pixels = load_image(path)
    if isinstance(pixels, ProcessingError):
        return pixels
    return run_pipeline(pixels, anchor_start_time, config, source_name=Path(path).stem)


async def analyze_image_async(
    path: str | Path,
    anchor_start_time: str | None = None,
    config: DetectorConfig | None = None,
) -> PipelineState | ProcessingError:
    pixels = load_image(path)
    if isinstance(pixels, ProcessingError):
        return pixels
    return await run_pipeline_async(pixels, anchor_start_time, config, source_name=Path(path).stem)


__all__ = [
    "GeometryResult",
    "analyze_image",
    "analyze_image_async",
    "build_nav_snapshot",
    "compute_availability",
    "create_geometry_pipeline",
    "create_pipeline",
    "finalize_nav",
    "first_error",
    "run_pipeline",
    "run_pipeline_async",
]


pipeline = create_pipeline()
geometry_pipeline = create_geometry_pipeline()
