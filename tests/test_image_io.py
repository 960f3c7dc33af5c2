import cv2
import numpy as np

from schedule_detector.models import ErrorKind, PixelBuffer, ProcessingError
from schedule_detector.utils import load_image, save_rgb_image


def test_bgr_png_loads_as_rgba(tmp_path):
    rgb = np.zeros((6, 8, 3), dtype=np.uint8)
    rgb[:, :, 0] = 200  # red channel
    path = save_rgb_image(rgb, tmp_path / "red.png")

    pixels = load_image(path)
    assert isinstance(pixels, PixelBuffer)
    assert (pixels.width, pixels.height) == (8, 6)
    assert tuple(pixels.rgba[0, 0]) == (200, 0, 0, 255)


def test_grayscale_and_alpha_inputs(tmp_path):
    gray = np.full((4, 4), 90, dtype=np.uint8)
    cv2.imwrite(str(tmp_path / "gray.png"), gray)
    bgra = np.zeros((4, 4, 4), dtype=np.uint8)
    bgra[:, :] = (10, 20, 30, 128)
    cv2.imwrite(str(tmp_path / "alpha.png"), bgra)

    assert tuple(load_image(tmp_path / "gray.png").rgba[1, 1]) == (90, 90, 90, 255)
    assert tuple(load_image(tmp_path / "alpha.png").rgba[1, 1]) == (30, 20, 10, 128)


def test_missing_and_corrupt_files(tmp_path):
    missing = load_image(tmp_path / "nope.png")
    assert isinstance(missing, ProcessingError)
    assert missing.error_type == ErrorKind.INPUT_INVALID

    junk = tmp_path / "junk.png"
    junk.write_bytes(b"not an image")
    assert isinstance(load_image(junk), ProcessingError)


def test_from_array_accepts_rgb_and_rgba():
    rgb = np.full((2, 3, 3), 7, dtype=np.uint8)
    rgba = np.full((2, 3, 4), 9, dtype=np.uint8)

    assert PixelBuffer.from_array(rgb).rgba.shape == (2, 3, 4)
    assert PixelBuffer.from_array(rgba).rgba[0, 0, 3] == 9
