"""
Auxiliary construction lines drawn over the survey image.

Each function returns the (start, end) pair of a finished line. Reference
edges are given by their two endpoints in drawing units.
"""

import math
from typing import Tuple

from kagechi.models import Point, LineType

LINE_COLORS = {
    LineType.STRAIGHT: "#333333",
    LineType.PERPENDICULAR: "#9900CC",
    LineType.EXTENSION: "#009900",
    LineType.PARALLEL: "#0066CC",
}


def _unit_vector(edge_start: Point, edge_end: Point) -> Point:
    dx = edge_end.x - edge_start.x
    dy = edge_end.y - edge_start.y
    length = math.hypot(dx, dy)
    if length == 0:
        raise ValueError("Reference edge has zero length")
    return Point(dx / length, dy / length)


def _along(start: Point, direction: Point, target: Point) -> Point:
    """Move from start along direction by target's projection onto it."""
    offset = (target.x - start.x) * direction.x + (target.y - start.y) * direction.y
    return Point(start.x + direction.x * offset, start.y + direction.y * offset)


def straight_line(p1: Point, p2: Point) -> Tuple[Point, Point]:
    """直線 - a free segment between two clicked points."""
    return (p1, p2)


def perpendicular_line(edge_start: Point, edge_end: Point, click: Point) -> Tuple[Point, Point]:
    """
    垂線 - a line from the reference edge's midpoint along its normal.

    The end point is the click projected onto the normal direction.
    """
    direction = _unit_vector(edge_start, edge_end)
    normal = Point(-direction.y, direction.x)
    midpoint = Point((edge_start.x + edge_end.x) / 2, (edge_start.y + edge_end.y) / 2)
    return (midpoint, _along(midpoint, normal, click))


def extension_line(edge_start: Point, edge_end: Point, click: Point) -> Tuple[Point, Point]:
    """延線 - the reference edge continued from its end point toward the click."""
    direction = _unit_vector(edge_start, edge_end)
    return (edge_end, _along(edge_end, direction, click))


def parallel_line(edge_start: Point, edge_end: Point, start: Point, click: Point) -> Tuple[Point, Point]:
    """平行 - a line through a free start point, parallel to the reference edge."""
    direction = _unit_vector(edge_start, edge_end)
    return (start, _along(start, direction, click))
