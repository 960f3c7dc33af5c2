"""Near-white / dark masks and their summed-area tables."""

from __future__ import annotations

import cv2
import numpy as np

from schedule_detector.models import (
    DetectorConfig,
    ErrorKind,
    PipelineState,
    PixelBuffer,
    Precompute,
    ProcessingError,
    ProcessingStage,
)

LUMA_WEIGHTS = (0.2126, 0.7152, 0.0722)


def build_precompute(
    pixels: PixelBuffer | None,
    cfg: DetectorConfig | None = None,
) -> Precompute | ProcessingError:
    """
    Build both binary masks and their summed-area tables in one pass.

    A pixel is near-white when every channel is >= ``near_white_thresh``, and
    dark when its Rec.709 luma is <= ``dark_luma_thresh``.
    """
    cfg = cfg or DetectorConfig()
    if pixels is None or pixels.width * pixels.height == 0:
        return ProcessingError(
            stage=ProcessingStage.PRECOMPUTE,
            error_type=ErrorKind.INPUT_INVALID,
            message="Pixel buffer is empty",
            details={
                "width": 0 if pixels is None else pixels.width,
                "height": 0 if pixels is None else pixels.height,
            },
        )

    rgb = pixels.rgba[:, :, :3]
    white = np.all(rgb >= cfg.near_white_thresh, axis=2).astype(np.uint8)

    rgb_f = rgb.astype(np.float32)
    luma = (
        LUMA_WEIGHTS[0] * rgb_f[:, :, 0]
        + LUMA_WEIGHTS[1] * rgb_f[:, :, 1]
        + LUMA_WEIGHTS[2] * rgb_f[:, :, 2]
    )
    dark = (luma <= float(cfg.dark_luma_thresh)).astype(np.uint8)

    # cv2.integral yields the (h+1, w+1) zero-padded prefix sums.
    white_sat = cv2.integral(white, sdepth=cv2.CV_32S)
    dark_sat = cv2.integral(dark, sdepth=cv2.CV_32S)
    for arr in (white, dark, white_sat, dark_sat):
        arr.flags.writeable = False

    return Precompute(
        width=pixels.width,
        height=pixels.height,
        white_mask=white,
        dark_mask=dark,
        white_sat=white_sat,
        dark_sat=dark_sat,
    )


def precompute(state: PipelineState) -> PipelineState:
    """Attach the Precompute tables to the state."""
    pre = build_precompute(state.pixels, state.config)
    if isinstance(pre, ProcessingError):
        return state.model_copy(update={"errors": state.errors + [pre]})
    return state.model_copy(
        update={
            "precompute": pre,
            "warnings": state.warnings + [f"I_PRECOMPUTE:{pre.width}x{pre.height}"],
        }
    )
