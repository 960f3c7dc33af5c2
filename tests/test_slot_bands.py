import numpy as np

from schedule_detector.models import DetectorConfig, ErrorKind, PixelBuffer, ProcessingError, SlotBand, TickLane
from schedule_detector.nodes.masks import build_precompute
from schedule_detector.nodes.slot_builder import build_slot_bands, line_extent

LANE = TickLane(x0=13, x1=47, index=0, score=19)


def test_bands_span_between_line_edges(week_pre):
    ticks = [40 + 30 * k for k in range(19)]
    bands, warnings = build_slot_bands(week_pre, ticks, LANE)

    assert len(bands) == 18
    assert bands[0] == SlotBand(yStart=42, yEnd=70)
    assert bands[3] == SlotBand(yStart=132, yEnd=160)
    assert all(b.height == 28 for b in bands)
    assert warnings == ["I_SLOT_BANDS:18"]


def test_line_thickness_growth_is_capped():
    rgb = np.full((100, 60, 3), 255, dtype=np.uint8)
    rgb[30:50, :] = 0
    pre = build_precompute(PixelBuffer.from_array(rgb))

    top, bottom = line_extent(pre, TickLane(x0=0, x1=60, index=0, score=1), 40, DetectorConfig())
    assert (top, bottom) == (34, 46)


def test_short_bands_are_discarded(week_pre):
    ticks = [40, 70, 76, 100, 130]
    bands, warnings = build_slot_bands(week_pre, ticks, LANE)

    assert SlotBand(yStart=42, yEnd=70) in bands
    assert any(w.startswith("W_SLOT_BAND_DISCARDED:1") for w in warnings)


def test_all_bands_too_short_fails(week_pre):
    result = build_slot_bands(week_pre, [40, 44, 48], LANE)
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INSUFFICIENT_EVIDENCE


def test_needs_two_ticks(week_pre):
    result = build_slot_bands(week_pre, [40], LANE)
    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INSUFFICIENT_EVIDENCE
