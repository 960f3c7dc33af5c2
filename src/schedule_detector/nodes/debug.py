"""Debug overlay writers, enabled with SCHEDULE_DETECTOR_DEBUG=1."""

from __future__ import annotations

import os
from collections.abc import Sequence
from pathlib import Path

import cv2
import numpy as np
from numpy.typing import NDArray

from schedule_detector import config
from schedule_detector.models import AvailabilityGrid, NavSnapshot, PixelBuffer, ProcessingError
from schedule_detector.utils import save_rgb_image

TICK_COLOR = (0, 160, 255)
DIVIDER_COLOR = (255, 140, 0)
FREE_COLOR = (40, 200, 60)
BUSY_COLOR = (230, 40, 40)


def debug_enabled() -> bool:
    return os.getenv(config.DEBUG_ENV, "").lower() in {"1", "true", "yes"}


def debug_dir() -> Path:
    return Path(os.getenv(config.DEBUG_DIR_ENV, config.DEFAULT_DEBUG_DIR))


def _base(pixels: PixelBuffer) -> NDArray[np.uint8]:
    return np.ascontiguousarray(pixels.rgba[:, :, :3]).copy()


def draw_geometry(pixels: PixelBuffer, nav: NavSnapshot, ticks: Sequence[int] = ()) -> NDArray[np.uint8]:
    """Ticks as full-width lines, dividers as columns, slot bands as thin outlines."""
    out = _base(pixels)
    h, w = out.shape[:2]
    for y in ticks or nav.ticksForMap:
        cv2.line(out, (0, int(y)), (w - 1, int(y)), TICK_COLOR, 1)
    for x in nav.dividerXs:
        cv2.line(out, (int(x), 0), (int(x), h - 1), DIVIDER_COLOR, 1)

    x0, x1 = nav.dividerXs[0], nav.dividerXs[-1]
    for i, band in enumerate(nav.slotBands):
        cv2.rectangle(out, (x0 + 2, band.yStart), (x1 - 2, band.yEnd - 1), (120, 120, 255), 1)
        cv2.putText(
            out,
            str(i),
            (x0 + 4, min(h - 2, band.yStart + 12)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.35,
            (80, 80, 200),
            1,
            cv2.LINE_AA,
        )
    return out


def draw_cells(pixels: PixelBuffer, nav: NavSnapshot, grid: AvailabilityGrid) -> NDArray[np.uint8]:
    """Blend each classified cell with green (free), red (busy) or the work colour."""
    out = _base(pixels)
    overlay = out.copy()
    for day in config.WEEKDAYS:
        region = nav.dayRegions[day]
        for i, band in enumerate(nav.slotBands):
            if grid.is_work(day, i):
                color = config.WORK_COLOR
            elif grid.is_free(day, i):
                color = FREE_COLOR
            else:
                color = BUSY_COLOR
            cv2.rectangle(overlay, (region.x0 + 3, band.yStart + 1), (region.x1 - 3, band.yEnd - 2), color, -1)
    return cv2.addWeighted(overlay, 0.35, out, 0.65, 0.0)


def write_debug_artifacts(
    pixels: PixelBuffer,
    nav: NavSnapshot,
    prefix: str,
    grid: AvailabilityGrid | None = None,
    out_dir: Path | None = None,
) -> list[str]:
    """Write overlays; returns warning codes describing what was written."""
    out_dir = out_dir or debug_dir()
    images = {"geometry": draw_geometry(pixels, nav)}
    if grid is not None:
        images["cells"] = draw_cells(pixels, nav, grid)

    warnings: list[str] = []
    for name, image in images.items():
        saved = save_rgb_image(image, out_dir / f"{prefix}_{name}.png")
        if isinstance(saved, ProcessingError):
            warnings.append(f"W_DEBUG_WRITE_FAILED:{name}:{saved.message}")
        else:
            warnings.append(f"I_DEBUG_ARTIFACT:{saved}")
    return warnings
