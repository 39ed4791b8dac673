"""Content-density sampling — where is the existing ink near a point?

Operates on an RGBA raster (``uint8`` array of shape ``(height, width, 4)``).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

# Alpha below this counts as transparent (empty)
_ALPHA_EMPTY = 10
# R, G and B all above this counts as paper white (empty)
_NEAR_WHITE = 245

# Search radius bounds: never sample a window smaller than 30px
_MIN_SEARCH_RADIUS = 30
# Roughly 24 samples per radius keeps the scan O(48²) regardless of size
_SAMPLES_PER_RADIUS = 24


@dataclass
class ContentCenter:
    x: float
    y: float
    weight: float
    # Non-background samples seen: evidence the centroid is not noise
    samples: int


def is_background_pixel(pixel: Sequence[int]) -> bool:
    """True for transparent or near-white pixels, i.e. empty canvas."""
    r, g, b, a = pixel[0], pixel[1], pixel[2], pixel[3]
    if a < _ALPHA_EMPTY:
        return True
    return r > _NEAR_WHITE and g > _NEAR_WHITE and b > _NEAR_WHITE


def background_mask(pixels: NDArray[np.uint8]) -> NDArray[np.bool_]:
    """Vectorised :func:`is_background_pixel` over any ``(..., 4)`` array."""
    transparent = pixels[..., 3] < _ALPHA_EMPTY
    white = np.all(pixels[..., :3] > _NEAR_WHITE, axis=-1)
    return transparent | white


def _round_half_up(values: NDArray[np.float64]) -> NDArray[np.int64]:
    return np.floor(values + 0.5).astype(np.int64)


def compute_weighted_content_center(
    raster: NDArray[np.uint8],
    target_x: float,
    target_y: float,
    radius: float,
) -> ContentCenter | None:
    """Inverse-distance weighted centroid of ink within ``radius`` of the target.

    The square around the target is sampled on a stride of
    ``max(1, floor(radius / 24))`` and restricted to the inscribed circle.
    Each ink sample contributes ``1 / (1 + distance)``. Returns None when no
    ink was found.
    """
    height, width = raster.shape[:2]
    search_radius = min(max(radius, _MIN_SEARCH_RADIUS), max(width, height))
    radius_int = int(math.floor(search_radius + 0.5))
    step = max(1, int(math.floor(search_radius / _SAMPLES_PER_RADIUS)))

    offsets = np.arange(-radius_int, radius_int + 1, step, dtype=np.float64)
    dx, dy = np.meshgrid(offsets, offsets)
    dist_sq = dx * dx + dy * dy

    xs = _round_half_up(target_x + dx)
    ys = _round_half_up(target_y + dy)

    valid = (
        (dist_sq <= radius_int * radius_int)
        & (xs >= 0) & (xs < width)
        & (ys >= 0) & (ys < height)
    )
    if not np.any(valid):
        return None

    xs, ys, dist_sq = xs[valid], ys[valid], dist_sq[valid]
    ink = ~background_mask(raster[ys, xs])
    samples = int(np.count_nonzero(ink))
    if samples == 0:
        return None

    weights = 1.0 / (1.0 + np.sqrt(dist_sq[ink]))
    total = float(weights.sum())
    if total == 0:
        return None

    return ContentCenter(
        x=float((xs[ink] * weights).sum() / total),
        y=float((ys[ink] * weights).sum() / total),
        weight=total,
        samples=samples,
    )
