"""
Frontage/depth projection.

Every parcel vertex is projected onto the frontage road's direction and onto
its perpendicular. The spans of those projections give frontage (間口) and
depth (奥行), and their min/max combinations give the corners of the assumed
regular plot (想定整形地).
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from kagechi.models import Point, Road, AssumedRegularPlot
from kagechi.geometry import distance
from kagechi.scale import Scale


def road_direction(road: Road) -> Point:
    """Unit vector from p1 to p2. Falls back to (1, 0) for a zero-length road."""
    length = distance(road.p1, road.p2)
    if length == 0:
        return Point(1.0, 0.0)
    return Point((road.p2.x - road.p1.x) / length, (road.p2.y - road.p1.y) / length)


def perpendicular_direction(road: Road) -> Point:
    """The road direction rotated by 90 degrees."""
    direction = road_direction(road)
    return Point(-direction.y, direction.x)


@dataclass(frozen=True)
class Projection:
    """Extents of a vertex set in a road's frame, in drawing units."""
    origin: Point
    axis: Point
    perp: Point
    min_along: float
    max_along: float
    min_perp: float
    max_perp: float

    @property
    def width(self) -> float:
        return self.max_along - self.min_along

    @property
    def height(self) -> float:
        return self.max_perp - self.min_perp

    def to_drawing(self, along: float, perp: float) -> Point:
        """Map frame coordinates back to the drawing surface."""
        return Point(
            self.origin.x + along * self.axis.x + perp * self.perp.x,
            self.origin.y + along * self.axis.y + perp * self.perp.y,
        )


def project_vertices(vertices: Sequence[Point], road: Road) -> Projection:
    """Project vertices onto the road direction and its perpendicular."""
    if not vertices:
        raise ValueError("Cannot project an empty vertex list")

    origin = road.p1
    axis = road_direction(road)
    perp = perpendicular_direction(road)

    along_values = []
    perp_values = []
    for vertex in vertices:
        rel_x = vertex.x - origin.x
        rel_y = vertex.y - origin.y
        along_values.append(rel_x * axis.x + rel_y * axis.y)
        perp_values.append(rel_x * perp.x + rel_y * perp.y)

    return Projection(
        origin=origin,
        axis=axis,
        perp=perp,
        min_along=min(along_values),
        max_along=max(along_values),
        min_perp=min(perp_values),
        max_perp=max(perp_values),
    )


def measure_frontage_and_depth(
    vertices: Sequence[Point], road: Road, scale: Scale
) -> Tuple[float, float]:
    """Frontage and depth spans in meters."""
    projection = project_vertices(vertices, road)
    return scale.to_meters(projection.width), scale.to_meters(projection.height)


def assumed_regular_plot(vertices: Sequence[Point], road: Road, scale: Scale) -> AssumedRegularPlot:
    """
    The smallest rectangle aligned to the road that contains the parcel.

    Corners run (min, min), (max, min), (max, max), (min, max) over
    (along-road, perpendicular). An empty plot is returned for fewer than
    three vertices or an invalid scale.
    """
    if len(vertices) < 3 or not scale.is_valid:
        return AssumedRegularPlot()

    projection = project_vertices(vertices, road)
    corners = (
        projection.to_drawing(projection.min_along, projection.min_perp),
        projection.to_drawing(projection.max_along, projection.min_perp),
        projection.to_drawing(projection.max_along, projection.max_perp),
        projection.to_drawing(projection.min_along, projection.max_perp),
    )
    width = scale.to_meters(projection.width)
    height = scale.to_meters(projection.height)
    return AssumedRegularPlot(corners=corners, width=width, height=height, area=width * height)


def calculated_depth(land_area: float, frontage: float) -> float:
    """計算上の奥行距離 = area / frontage, or 0 without a frontage."""
    if frontage <= 0:
        return 0.0
    return land_area / frontage


def kage_chi_ratio(land_area: float, plot_area: float) -> float:
    """かげ地割合 in percent of the assumed regular plot."""
    if plot_area == 0:
        return 0.0
    return (plot_area - land_area) / plot_area * 100
