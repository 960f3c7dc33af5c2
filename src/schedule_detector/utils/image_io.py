"""
Image I/O for the schedule detector.

Decodes screenshots into the read-only RGBA PixelBuffer the detection stages
consume, and writes debug overlays back to disk.

All functions follow the Result | ProcessingError pattern for error handling.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import cv2
import numpy as np
from numpy.typing import NDArray

from schedule_detector.models import ErrorKind, PixelBuffer, ProcessingError, ProcessingStage


def _to_rgba(img: NDArray[Any]) -> NDArray[np.uint8]:
    """Normalise a cv2-decoded array (gray, BGR or BGRA) to RGBA."""
    if img.dtype != np.uint8:
        # 16-bit PNGs decode as uint16 with IMREAD_UNCHANGED
        img = cv2.convertScaleAbs(img, alpha=255.0 / float(max(1, int(img.max()))))
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    channels = img.shape[2]
    if channels == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2RGBA)
    if channels == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)


def load_image(
    path: str | Path,
    stage: ProcessingStage = ProcessingStage.INPUT,
) -> PixelBuffer | ProcessingError:
    """
    Load a schedule screenshot from disk.

    Handles:
    - Corrupted images (cv2.imread failure)
    - Grayscale / BGR / BGRA inputs (normalised to RGBA)
    - File not found / permission errors

    Args:
        path: Path to image file
        stage: Processing stage for error reporting

    Returns:
        PixelBuffer or ProcessingError
    """
    path = Path(path)

    if not path.exists():
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Image file not found: {path}",
            details={"path": str(path)},
        )

    try:
        img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if img is None:
            return ProcessingError(
                stage=stage,
                error_type=ErrorKind.INPUT_INVALID,
                message=f"Failed to read image (may be corrupted): {path}",
                details={"path": str(path)},
            )
        if img.size == 0:
            return ProcessingError(
                stage=stage,
                error_type=ErrorKind.INPUT_INVALID,
                message=f"Image has no pixels: {path}",
                details={"path": str(path)},
            )
        return PixelBuffer(rgba=_to_rgba(img))

    except PermissionError:
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Permission denied reading: {path}",
            details={"path": str(path)},
        )
    except (cv2.error, ValueError) as e:
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Error reading image: {e}",
            details={"path": str(path), "error": str(e)},
        )


def save_rgb_image(
    image: NDArray[np.uint8],
    path: str | Path,
    stage: ProcessingStage = ProcessingStage.SNAPSHOT,
) -> Path | ProcessingError:
    """
    Save an RGB image to disk (converted to cv2's BGR order).

    Args:
        image: HxWx3 RGB array
        path: Output path
        stage: Processing stage for error reporting

    Returns:
        Path to saved file or ProcessingError
    """
    path = Path(path)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        success = cv2.imwrite(str(path), cv2.cvtColor(image, cv2.COLOR_RGB2BGR))
        if not success:
            return ProcessingError(
                stage=stage,
                error_type=ErrorKind.INPUT_INVALID,
                message=f"Failed to write image: {path}",
                details={"path": str(path)},
            )
        return path

    except PermissionError:
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Permission denied writing: {path}",
            details={"path": str(path)},
        )
    except (cv2.error, OSError) as e:
        return ProcessingError(
            stage=stage,
            error_type=ErrorKind.INPUT_INVALID,
            message=f"Error writing image: {e}",
            details={"path": str(path), "error": str(e)},
        )
