import numpy as np

from schedule_detector.models import DetectorConfig, ErrorKind, PixelBuffer, ProcessingError, TickLadder
from schedule_detector.nodes.lanes import detect_raw_ticks, lane_bounds, select_tick_lane
from schedule_detector.nodes.masks import build_precompute
from schedule_detector.nodes.tick_validator import snap_window, validate_ticks


def test_first_lane_wins_on_full_width_lines(week_pre):
    scan = select_tick_lane(week_pre)

    assert scan.lane.index == 0
    assert (scan.lane.x0, scan.lane.x1) == (13, 47)
    assert list(scan.raw_ticks) == [40 + 30 * k for k in range(19)]
    assert scan.warning_codes == ("I_TICK_LANE:0:19",)


def test_later_lane_chosen_when_first_is_blank():
    rgb = np.full((400, 1000, 3), 255, dtype=np.uint8)
    _, x1 = lane_bounds(1000, 0.045, DetectorConfig())
    for k in range(10):
        y = 30 + 30 * k
        rgb[y : y + 2, x1 - 20 : x1] = 0  # clear of the overlapping lane 1
    pre = build_precompute(PixelBuffer.from_array(rgb))

    scan = select_tick_lane(pre)
    assert scan.lane.index == 2
    assert len(scan.raw_ticks) == 10


def test_short_runs_and_close_ticks_are_dropped():
    rgb = np.full((200, 100, 3), 255, dtype=np.uint8)
    rgb[50:52, :] = 0
    rgb[58:60, :] = 0  # within the dedupe distance of the line above
    rgb[120, :] = 0  # single dark row still spans two banded rows
    pre = build_precompute(PixelBuffer.from_array(rgb))

    ticks = detect_raw_ticks(pre, 0, 100, DetectorConfig())
    # The first tick of a close pair is kept and the later one dropped.
    assert ticks == [50, 120]


def test_missing_precompute_fails():
    result = select_tick_lane(None)
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INPUT_INVALID


def test_validator_keeps_even_chain():
    raw = [40, 70, 85, 100, 130, 160, 190, 220, 250]
    ladder = validate_ticks(raw)

    assert isinstance(ladder, TickLadder)
    assert ladder.ticks == (40, 70, 100, 130, 160, 190, 220, 250)
    assert ladder.dy == 30.0
    assert ladder.snap == 4
    assert any(w.startswith("W_TICK_SEED_DROPPED") for w in ladder.warning_codes)


def test_single_tick_is_insufficient_evidence():
    result = validate_ticks([120])
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INSUFFICIENT_EVIDENCE


def test_implausible_spacing_fails():
    result = validate_ticks([10, 200, 390, 580, 770, 960])
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INSUFFICIENT_EVIDENCE
    assert "spacing" in result.message


def test_short_chain_fails():
    result = validate_ticks([40, 70, 100, 130, 160])
    assert isinstance(result, ProcessingError)
    assert result.details["chain"] == [40, 70, 100, 130, 160]


def test_non_monotonic_raw_ticks_are_inconsistent():
    result = validate_ticks([40, 70, 70, 100])
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.GEOMETRY_INCONSISTENT


def test_snap_window_is_clamped():
    cfg = DetectorConfig()
    assert snap_window(20, cfg) == 4
    assert snap_window(90, cfg) == 9
    assert snap_window(400, cfg) == 18


def test_snap_window_rounds_halves_up():
    cfg = DetectorConfig()
    assert snap_window(45.0, cfg) == 5
    assert snap_window(65.0, cfg) == 7
    assert snap_window(55.0, cfg) == 6
