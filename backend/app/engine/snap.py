"""Snap AI shapes toward nearby existing artwork, within a bounded shift."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from app.engine.sampler import compute_weighted_content_center

logger = logging.getLogger(__name__)

_DEFAULT_SEARCH_RADIUS = 80.0
_DEFAULT_MIN_SAMPLES = 25
_MIN_MAX_SHIFT = 40.0


@dataclass
class SnapResult:
    x: float
    y: float
    # Distance from the target to the ink centroid (before clamping)
    shifted: float
    samples: int = 0
    clamped: bool = False


def snap_point_to_existing_content(
    raster: NDArray[np.uint8],
    target_x: float,
    target_y: float,
    radius: float | None = None,
    *,
    min_samples: float | None = None,
    max_shift: float | None = None,
    search_radius: float | None = None,
) -> SnapResult | None:
    """Move a target point toward the centroid of nearby ink.

    Returns None when there is not enough evidence (fewer than ``min_samples``
    ink samples); the caller keeps the original position. Shifts longer than
    ``max_shift`` keep their direction but are shortened to exactly
    ``max_shift``.
    """
    search_radius = search_radius or (radius * 1.5 + 20 if radius else _DEFAULT_SEARCH_RADIUS)
    centroid = compute_weighted_content_center(raster, target_x, target_y, search_radius)
    if centroid is None:
        return None

    min_samples = min_samples or _DEFAULT_MIN_SAMPLES
    if centroid.samples < min_samples:
        logger.debug(
            "Snap skipped at (%.0f, %.0f): %d samples < %d",
            target_x, target_y, centroid.samples, min_samples,
        )
        return None

    dx = centroid.x - target_x
    dy = centroid.y - target_y
    distance = math.hypot(dx, dy)
    max_shift = max_shift or max(_MIN_MAX_SHIFT, search_radius * 0.75)

    if distance > max_shift:
        ratio = max_shift / distance
        return SnapResult(
            x=target_x + dx * ratio,
            y=target_y + dy * ratio,
            shifted=distance,
            samples=centroid.samples,
            clamped=True,
        )

    return SnapResult(x=centroid.x, y=centroid.y, shifted=distance, samples=centroid.samples)
