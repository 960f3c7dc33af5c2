"""Small 1-D signal helpers shared by the line detectors."""

from typing import Any

import numpy as np
from numpy.typing import NDArray


def true_runs(active: NDArray[Any]) -> list[tuple[int, int]]:
    """Half-open [start, end) index runs where ``active`` is true."""
    flags = np.asarray(active, dtype=bool)
    if flags.size == 0:
        return []
    padded = np.concatenate(([False], flags, [False]))
    edges = np.flatnonzero(padded[1:] != padded[:-1])
    return [(int(edges[i]), int(edges[i + 1])) for i in range(0, edges.size, 2)]


def plateau_center(xs: NDArray[Any], scores: NDArray[Any]) -> int:
    """Middle position of the contiguous maximum plateau around the first argmax."""
    best = int(np.argmax(scores))
    top = scores[best]
    lo = best
    while lo > 0 and abs(scores[lo - 1] - top) < 1e-9:
        lo -= 1
    hi = best
    while hi + 1 < scores.size and abs(scores[hi + 1] - top) < 1e-9:
        hi += 1
    return int(xs[lo] + xs[hi]) // 2


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up; ``round`` sends them to the even neighbour."""
    return int(np.floor(value + 0.5))
