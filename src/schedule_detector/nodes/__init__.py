"""Pipeline nodes for schedule geometry and availability.

Each wrapper imports its stage module on first call. Importing this package
loads only the models; cv2 comes in with the first stage that runs, or with
``schedule_detector.pipeline``, which imports some stages directly.
"""

from __future__ import annotations

from schedule_detector.models import PipelineState


def precompute(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.masks import precompute as _precompute

    return _precompute(state)


def tick_lane(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.lanes import tick_lane as _tick_lane

    return _tick_lane(state)


def tick_validate(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.tick_validator import tick_validate as _tick_validate

    return _tick_validate(state)


def dividers(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.day_dividers import dividers as _dividers

    return _dividers(state)


def ladder(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.ladder_extender import ladder as _ladder

    return _ladder(state)


def slot_bands(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.slot_builder import slot_bands as _slot_bands

    return _slot_bands(state)


def background(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.calibration import background as _background

    return _background(state)


def snapshot(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.navigation import snapshot as _snapshot

    return _snapshot(state)


def finalize(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.navigation import finalize as _finalize

    return _finalize(state)


def classify(state: PipelineState) -> PipelineState:
    from schedule_detector.nodes.classifier import classify as _classify

    return _classify(state)


__all__ = [
    "background",
    "classify",
    "dividers",
    "finalize",
    "ladder",
    "precompute",
    "slot_bands",
    "snapshot",
    "tick_lane",
    "tick_validate",
]
