"""Tests for the polygon geometry module."""

import pytest
from kagechi.models import Point
from kagechi.scale import Scale
from kagechi.geometry import (
    polygon_area, distance, edge_lengths, edge_infos, centroid,
    project_point_onto_segment, point_to_segment_distance,
    find_edge_near, find_vertex_near,
)

SQUARE = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
L_SHAPE = [Point(0, 0), Point(100, 0), Point(100, 50), Point(50, 50), Point(50, 100), Point(0, 100)]


class TestPolygonArea:
    """Tests for the shoelace area."""

    def test_square(self):
        assert polygon_area(SQUARE) == 10000

    def test_triangle(self):
        assert polygon_area([Point(0, 0), Point(4, 0), Point(0, 3)]) == 6

    def test_concave(self):
        assert polygon_area(L_SHAPE) == 7500

    def test_fewer_than_three_vertices(self):
        assert polygon_area([]) == 0
        assert polygon_area([Point(0, 0), Point(1, 1)]) == 0

    def test_invariant_under_rotation(self):
        for shift in range(len(L_SHAPE)):
            rotated = L_SHAPE[shift:] + L_SHAPE[:shift]
            assert polygon_area(rotated) == pytest.approx(7500)

    def test_invariant_under_reversal(self):
        assert polygon_area(list(reversed(L_SHAPE))) == pytest.approx(polygon_area(L_SHAPE))

    def test_collinear_is_zero(self):
        assert polygon_area([Point(0, 0), Point(5, 5), Point(10, 10)]) == 0


class TestEdges:
    """Tests for edge lengths and edge labels."""

    def test_edge_lengths_scaled(self):
        lengths = edge_lengths(SQUARE, Scale(0.1))
        assert len(lengths) == 4
        assert lengths == pytest.approx([10, 10, 10, 10])

    def test_edge_lengths_ordered_by_edge_index(self):
        lengths = edge_lengths([Point(0, 0), Point(3, 0), Point(3, 4)], Scale(1.0))
        assert lengths == pytest.approx([3, 4, 5])

    def test_edge_infos_wrap_around(self):
        infos = edge_infos(SQUARE, 100)
        assert [(e.start_index, e.end_index) for e in infos] == [(0, 1), (1, 2), (2, 3), (3, 0)]
        assert infos[0].length == pytest.approx(10)

    def test_edge_infos_without_area(self):
        assert edge_infos(SQUARE, None) == []
        assert edge_infos(SQUARE, 0) == []
        assert edge_infos([Point(0, 0), Point(1, 0)], 10) == []


class TestPoints:
    """Tests for centroid, distance and projection helpers."""

    def test_distance(self):
        assert distance(Point(0, 0), Point(3, 4)) == 5

    def test_centroid_is_vertex_mean(self):
        assert centroid(SQUARE) == Point(50, 50)
        # Not the area-weighted centroid
        assert centroid(L_SHAPE) == Point(50, 50)

    def test_centroid_empty(self):
        assert centroid([]) == Point(0, 0)

    def test_projection_clamped_to_segment(self):
        a, b = Point(0, 0), Point(100, 0)
        assert project_point_onto_segment(Point(30, 20), a, b) == Point(30, 0)
        assert project_point_onto_segment(Point(-20, 5), a, b) == Point(0, 0)
        assert project_point_onto_segment(Point(150, 5), a, b) == Point(100, 0)

    def test_point_to_segment_distance(self):
        a, b = Point(0, 0), Point(100, 0)
        assert point_to_segment_distance(Point(50, 10), a, b) == 10
        assert point_to_segment_distance(Point(110, 0), a, b) == 10

    def test_degenerate_segment(self):
        p = Point(3, 4)
        assert point_to_segment_distance(Point(0, 0), p, p) == 5


class TestHitTesting:
    """Tests for edge and vertex hit-testing."""

    def test_edge_hit(self):
        assert find_edge_near(SQUARE, Point(50, 3)) == (0, 1)
        assert find_edge_near(SQUARE, Point(103, 50)) == (1, 2)
        assert find_edge_near(SQUARE, Point(-2, 50)) == (3, 0)

    def test_edge_miss(self):
        assert find_edge_near(SQUARE, Point(50, 50)) is None

    def test_edge_tolerance(self):
        assert find_edge_near(SQUARE, Point(50, 15)) is None
        assert find_edge_near(SQUARE, Point(50, 15), tolerance=20) == (0, 1)

    def test_vertex_hit(self):
        assert find_vertex_near(SQUARE, Point(98, 101)) == 2
        assert find_vertex_near(SQUARE, Point(50, 50)) is None
