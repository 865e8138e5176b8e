"""
Scale calibration.

The area-based flow infers one meters-per-drawing-unit factor from the
declared area (地積) of the traced parcel. The factor is isotropic: the same
value applies along x and y.
"""

import math
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from kagechi.models import Point
from kagechi.geometry import polygon_area, distance

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scale:
    """Real-world meters per drawing unit. A factor of 0 means 'no scale'."""
    meters_per_unit: float

    @property
    def is_valid(self) -> bool:
        return self.meters_per_unit > 0

    def to_meters(self, drawing_distance: float) -> float:
        """Convert a drawing-unit length to meters."""
        return drawing_distance * self.meters_per_unit

    def to_square_meters(self, drawing_area: float) -> float:
        """Convert a drawing-unit area to ㎡."""
        return drawing_area * self.meters_per_unit * self.meters_per_unit

    @classmethod
    def from_reference(cls, p1: Point, p2: Point, real_distance_m: float) -> "Scale":
        """
        Ruler calibration (基準尺): two points a known real distance apart.

        Not used by the area-based assessment; kept for overlays drawn
        before a declared area is known.
        """
        drawing_distance = distance(p1, p2)
        if drawing_distance == 0 or real_distance_m <= 0:
            return NO_SCALE
        return cls(real_distance_m / drawing_distance)


NO_SCALE = Scale(0.0)


def infer_scale(vertices: Sequence[Point], declared_area: Optional[float]) -> Scale:
    """
    Infer the scale from a polygon and its declared true area.

    declared_area = drawing_area * factor ** 2, so
    factor = sqrt(declared_area / drawing_area).

    Returns NO_SCALE when the drawing area is zero or the declared area is
    missing or not positive.
    """
    drawing_area = polygon_area(vertices)
    if drawing_area == 0 or declared_area is None or declared_area <= 0:
        log.debug(f"No scale: drawing area {drawing_area}, declared area {declared_area}")
        return NO_SCALE
    return Scale(math.sqrt(declared_area / drawing_area))
