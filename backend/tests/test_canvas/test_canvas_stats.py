"""Tests for canvas coverage / colour statistics."""

from __future__ import annotations

import numpy as np

from app.canvas.stats import compute_canvas_stats, drawn_mask
from tests.conftest import blank_raster, paint_block


def test_blank_canvas():
    stats = compute_canvas_stats(blank_raster(100, 100))
    assert stats.coverage_percent == 0
    assert stats.color_count == 0


def test_coverage_percent_rounded():
    raster = paint_block(blank_raster(100, 100), 0, 0, 10, 10)
    stats = compute_canvas_stats(raster)
    assert stats.coverage_percent == 1.0
    assert stats.color_count == 1


def test_colors_bucketed():
    raster = blank_raster(100, 100)
    paint_block(raster, 0, 0, 10, 10, (0, 0, 0, 255))
    paint_block(raster, 10, 0, 20, 10, (10, 10, 10, 255))  # same bucket as black
    paint_block(raster, 20, 0, 30, 10, (255, 0, 0, 255))
    stats = compute_canvas_stats(raster)
    assert stats.color_count == 2
    assert stats.coverage_percent == 3.0


def test_drawn_threshold():
    raster = np.array([[[250, 250, 250, 255], [249, 255, 255, 255]]], dtype=np.uint8)
    assert drawn_mask(raster).tolist() == [[False, True]]


def test_empty_raster():
    stats = compute_canvas_stats(np.zeros((0, 0, 4), dtype=np.uint8))
    assert stats.coverage_percent == 0
