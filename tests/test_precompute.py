import numpy as np
import pytest

from schedule_detector.models import ErrorKind, PixelBuffer, ProcessingError
from schedule_detector.nodes.masks import build_precompute


def _pixels(rgb: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_array(rgb.astype(np.uint8))


def test_rect_fractions_match_direct_counts():
    rgb = np.full((20, 30, 3), 255, dtype=np.uint8)
    rgb[5:10, 10:20] = (0, 0, 0)
    rgb[12:14, 0:30] = (230, 230, 230)  # not near-white, not dark
    pre = build_precompute(_pixels(rgb))

    assert pre.rect_dark_fraction(10, 5, 20, 10) == pytest.approx(1.0)
    assert pre.rect_dark_fraction(0, 0, 30, 20) == pytest.approx(50 / 600)
    assert pre.rect_white_fraction(0, 12, 30, 14) == pytest.approx(0.0)
    assert pre.rect_nonwhite_fraction(0, 0, 30, 20) == pytest.approx((50 + 60) / 600)


def test_rect_queries_clip_to_image():
    rgb = np.zeros((10, 10, 3), dtype=np.uint8)
    pre = build_precompute(_pixels(rgb))

    assert pre.rect_dark_fraction(-5, -5, 5, 5) == pytest.approx(1.0)
    assert pre.rect_dark_fraction(20, 20, 30, 30) == 0.0
    assert pre.rect_nonwhite_fraction(3, 3, 3, 8) == 0.0


def test_thresholds_follow_config():
    from schedule_detector.models import DetectorConfig

    rgb = np.full((4, 4, 3), 220, dtype=np.uint8)
    strict = build_precompute(_pixels(rgb), DetectorConfig(dark_luma_thresh=215))
    loose = build_precompute(_pixels(rgb), DetectorConfig(dark_luma_thresh=225, near_white_thresh=200))

    assert strict.rect_dark_fraction(0, 0, 4, 4) == 0.0
    assert loose.rect_dark_fraction(0, 0, 4, 4) == 1.0
    assert loose.rect_white_fraction(0, 0, 4, 4) == 1.0


def test_profiles_agree_with_rect_queries(week_pre):
    xs = np.array([0, 168, 400])
    prof = week_pre.stripe_profile("nonwhite", xs, 100, 260, 5)
    for x, value in zip(xs, prof):
        expected = week_pre.rect_nonwhite_fraction(x - 2, 100, x + 3, 260)
        assert value == pytest.approx(expected)

    ys = np.array([40, 55])
    band = week_pre.band_profile("dark", ys, 13, 47, 3)
    assert band[0] == pytest.approx(week_pre.rect_dark_fraction(13, 39, 47, 42))
    assert band[1] == 0.0


def test_empty_buffer_is_input_invalid():
    empty = PixelBuffer(rgba=np.zeros((0, 5, 4), dtype=np.uint8))
    result = build_precompute(empty)

    assert isinstance(result, ProcessingError)
    assert result.error_type == ErrorKind.INPUT_INVALID


def test_pixel_buffer_is_read_only(week_pixels):
    assert not week_pixels.rgba.flags.writeable
    with pytest.raises(ValueError):
        week_pixels.rgba[0, 0, 0] = 1
