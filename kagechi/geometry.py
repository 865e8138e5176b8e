"""
Polygon geometry on the drawing surface.

All inputs are in drawing units. Functions that return real-world lengths
take a Scale and multiply by its meters-per-unit factor.
"""

import math
from typing import List, Optional, Sequence, Tuple

from kagechi.models import Point, EdgeInfo


def polygon_area(vertices: Sequence[Point]) -> float:
    """
    Area of a polygon by the shoelace formula, in square drawing units.

    Winding order does not matter. Self-intersecting polygons are not
    rejected; the magnitude of the signed sum is returned as-is.
    """
    n = len(vertices)
    if n < 3:
        return 0.0

    total = 0.0
    for i in range(n):
        j = (i + 1) % n
        total += vertices[i].x * vertices[j].y
        total -= vertices[j].x * vertices[i].y
    return abs(total) / 2


def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def edge_lengths(vertices: Sequence[Point], scale) -> List[float]:
    """Length of every edge in meters; edge i joins vertex i and vertex i+1."""
    n = len(vertices)
    return [
        distance(vertices[i], vertices[(i + 1) % n]) * scale.meters_per_unit
        for i in range(n)
    ]


def edge_infos(vertices: Sequence[Point], declared_area: Optional[float]) -> List[EdgeInfo]:
    """
    Edge labels for display, using the scale inferred from the declared area.

    Returns an empty list when no scale can be inferred.
    """
    from kagechi.scale import infer_scale

    if len(vertices) < 2 or not declared_area or declared_area <= 0:
        return []
    scale = infer_scale(vertices, declared_area)
    if not scale.is_valid:
        return []

    n = len(vertices)
    return [
        EdgeInfo(start_index=i, end_index=(i + 1) % n, length=length)
        for i, length in enumerate(edge_lengths(vertices, scale))
    ]


def centroid(vertices: Sequence[Point]) -> Point:
    """Arithmetic mean of the vertices. Used for label placement only."""
    if not vertices:
        return Point(0.0, 0.0)
    n = len(vertices)
    return Point(
        sum(v.x for v in vertices) / n,
        sum(v.y for v in vertices) / n,
    )


def project_point_onto_segment(point: Point, seg_start: Point, seg_end: Point) -> Point:
    """Nearest point on the segment, with the line parameter clamped to [0, 1]."""
    dx = seg_end.x - seg_start.x
    dy = seg_end.y - seg_start.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return seg_start

    t = ((point.x - seg_start.x) * dx + (point.y - seg_start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return Point(seg_start.x + t * dx, seg_start.y + t * dy)


def point_to_segment_distance(point: Point, seg_start: Point, seg_end: Point) -> float:
    """Distance from a point to the closest point of a segment."""
    return distance(point, project_point_onto_segment(point, seg_start, seg_end))


def find_edge_near(
    vertices: Sequence[Point],
    point: Point,
    tolerance: float = 10.0,
) -> Optional[Tuple[int, int]]:
    """
    Hit-test the polygon edges.

    Args:
        vertices: Polygon vertices (implicitly closed)
        point: Clicked position in drawing units
        tolerance: Maximum distance to count as a hit

    Returns:
        (start_index, end_index) of the first edge within tolerance, or None
    """
    n = len(vertices)
    if n < 2:
        return None
    for i in range(n):
        a = vertices[i]
        b = vertices[(i + 1) % n]
        if a == b:
            continue
        if point_to_segment_distance(point, a, b) <= tolerance:
            return (i, (i + 1) % n)
    return None


def find_vertex_near(
    vertices: Sequence[Point],
    point: Point,
    tolerance: float = 10.0,
) -> Optional[int]:
    """Index of the first vertex within tolerance of the point, or None."""
    for i, vertex in enumerate(vertices):
        if distance(vertex, point) <= tolerance:
            return i
    return None
