"""Canvas statistics — coverage and colour variety, recomputed on demand."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from app.models.responses import CanvasStats

# Any channel below this counts the pixel as drawn
_DRAWN_CHANNEL_MAX = 250
# Colours are bucketed per channel so anti-aliasing does not inflate the count
_COLOR_BUCKET = 50


def drawn_mask(raster: NDArray[np.uint8]) -> NDArray[np.bool_]:
    return np.any(raster[..., :3] < _DRAWN_CHANNEL_MAX, axis=-1)


def compute_canvas_stats(raster: NDArray[np.uint8]) -> CanvasStats:
    height, width = raster.shape[:2]
    total = width * height
    if total == 0:
        return CanvasStats()

    drawn = drawn_mask(raster)
    drawn_count = int(np.count_nonzero(drawn))
    buckets = raster[drawn][:, :3] // _COLOR_BUCKET
    color_count = len(np.unique(buckets, axis=0)) if drawn_count else 0

    return CanvasStats(
        coverage_percent=round(drawn_count / total * 100, 2),
        color_count=color_count,
    )
