"""Tests for scale calibration."""

import math

import pytest
from kagechi.models import Point
from kagechi.geometry import polygon_area
from kagechi.scale import Scale, NO_SCALE, infer_scale

SQUARE = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
PENTAGON = [Point(10, 20), Point(130, 5), Point(160, 90), Point(70, 150), Point(0, 110)]


class TestInferScale:
    """Tests for area-based scale inference."""

    def test_square(self):
        scale = infer_scale(SQUARE, 100)
        assert scale.is_valid
        assert scale.meters_per_unit == pytest.approx(0.1)

    @pytest.mark.parametrize("k", [0.25, 1.0, 2.0, 9.0, 1234.5])
    def test_round_trip(self, k):
        """Declaring k times the drawing area gives a factor of sqrt(k)."""
        drawing_area = polygon_area(PENTAGON)
        scale = infer_scale(PENTAGON, k * drawing_area)
        assert scale.meters_per_unit == pytest.approx(math.sqrt(k))

    def test_declared_area_recovered(self):
        scale = infer_scale(PENTAGON, 321.0)
        assert scale.to_square_meters(polygon_area(PENTAGON)) == pytest.approx(321.0)

    @pytest.mark.parametrize("declared", [None, 0, -5])
    def test_non_positive_declared_area(self, declared):
        scale = infer_scale(SQUARE, declared)
        assert scale == NO_SCALE
        assert not scale.is_valid

    def test_zero_drawing_area(self):
        assert infer_scale([Point(0, 0), Point(5, 5), Point(10, 10)], 100) == NO_SCALE
        assert infer_scale([Point(0, 0), Point(5, 5)], 100) == NO_SCALE


class TestScale:
    """Tests for the Scale value object."""

    def test_conversions(self):
        scale = Scale(0.5)
        assert scale.to_meters(10) == 5
        assert scale.to_square_meters(100) == 25

    def test_isotropic(self):
        """The same factor applies along x and y."""
        scale = infer_scale(SQUARE, 400)
        assert scale.to_meters(100) == pytest.approx(20)
        horizontal = scale.to_meters(SQUARE[1].x - SQUARE[0].x)
        vertical = scale.to_meters(SQUARE[2].y - SQUARE[1].y)
        assert horizontal == vertical

    def test_from_reference(self):
        scale = Scale.from_reference(Point(0, 0), Point(30, 40), 5.0)
        assert scale.meters_per_unit == pytest.approx(0.1)

    def test_from_reference_degenerate(self):
        assert Scale.from_reference(Point(1, 1), Point(1, 1), 5.0) == NO_SCALE
        assert Scale.from_reference(Point(0, 0), Point(10, 0), 0) == NO_SCALE
