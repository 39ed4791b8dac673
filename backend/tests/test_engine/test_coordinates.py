"""Tests for coordinate and length resolution."""

from __future__ import annotations

import math

import pytest

from app.engine.coordinates import CoordinateResolver, normalize_length, resolve_coordinate, to_number


# ── resolve_coordinate ──


def test_percentage_of_axis():
    assert resolve_coordinate("50%", 800) == 400


def test_percentage_clamped_to_axis():
    assert resolve_coordinate("150%", 800) == 800
    assert resolve_coordinate("-20%", 800) == 0


def test_percentage_with_whitespace():
    assert resolve_coordinate(" 25% ", 800) == 200


def test_missing_value_is_midpoint():
    assert resolve_coordinate(None, 800) == 400
    assert resolve_coordinate("abc", 600) == 300
    assert resolve_coordinate(float("nan"), 600) == 300
    assert resolve_coordinate(True, 600) == 300


def test_numeric_string_is_parsed():
    assert resolve_coordinate("120", 800) == 120


def test_relative_mode_offsets_from_center():
    assert resolve_coordinate(100, 800, is_relative=True) == 500
    assert resolve_coordinate(-100, 800, is_relative=True) == 300


def test_relative_mode_is_not_clamped():
    assert resolve_coordinate(1000, 800, is_relative=True) == 1400


def test_in_range_value_is_absolute():
    assert resolve_coordinate(0, 800) == 0
    assert resolve_coordinate(800, 800) == 800
    assert resolve_coordinate(300, 800) == 300


def test_small_negative_is_offset_from_center():
    assert resolve_coordinate(-100, 800) == 300


def test_nominal_grid_rescaled():
    # 350 does not fit a 300-wide axis nor its +/-150 offset band
    assert resolve_coordinate(350, 300) == pytest.approx(262.5)


def test_large_negative_floors_at_zero():
    assert resolve_coordinate(-500, 800) == 0


def test_large_value_clamped():
    assert resolve_coordinate(5000, 800) == 800


# ── normalize_length ──


def test_length_percentage():
    assert normalize_length("10%", 600) == 60


def test_length_default_is_tenth_of_axis():
    assert normalize_length(None, 600) == 60
    assert normalize_length("wide", 800) == 80


def test_length_in_range_kept():
    assert normalize_length(40, 600) == 40


def test_length_negative_uses_magnitude():
    assert normalize_length(-40, 600) == 40


def test_length_rescaled_from_nominal_grid():
    assert normalize_length(200, 100) == 50


def test_length_too_large_clamped():
    assert normalize_length(1000, 600) == 600


# ── CoordinateResolver ──


def test_resolver_picks_axis():
    resolver = CoordinateResolver(800, 600)
    assert resolver.resolve("50%", "x") == 400
    assert resolver.resolve("50%", "y") == 300


def test_resolver_clamp():
    resolver = CoordinateResolver(800, 600)
    assert resolver.clamp(-5, "x") == 0
    assert resolver.clamp(900, "y") == 600


def test_resolver_unknown_axis():
    with pytest.raises(ValueError):
        CoordinateResolver(800, 600).resolve(1, "z")


def test_to_number():
    assert to_number(3) == 3.0
    assert to_number(" 2.5 ") == 2.5
    assert math.isnan(to_number([1]))
