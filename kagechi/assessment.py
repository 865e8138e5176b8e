"""
Assessment Engine - 路線価 valuation of a single land parcel.

Pipeline: scale -> assumed regular plot / frontage / depth -> correction
rates -> price per ㎡ and total value. Every call recomputes the whole
pipeline from the parcel's current inputs.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from kagechi.models import LandParcel, AssessmentResult, AssumedRegularPlot
from kagechi.geometry import distance, polygon_area, point_to_segment_distance
from kagechi.scale import Scale, infer_scale
from kagechi.frontage import (
    assumed_regular_plot, measure_frontage_and_depth, calculated_depth, kage_chi_ratio,
)
from kagechi.correction_tables import (
    depth_price_rate, irregular_plot_rate, narrow_frontage_rate, excessive_depth_rate,
)

log = logging.getLogger(__name__)

# Road prices are published in thousands of yen per ㎡.
ROAD_PRICE_UNIT = 1000


def combine_irregular_rates(irregular_plot: float, narrow_frontage: float, excessive_depth: float) -> float:
    """The lower of the irregular-plot rate and narrow-frontage x excessive-depth."""
    return min(irregular_plot, narrow_frontage * excessive_depth)


def frontage_override(parcel: LandParcel, scale: Scale) -> float:
    """
    Distance in meters between the user-chosen frontage vertices.

    Returns 0 when no pair is chosen or an index does not exist.
    """
    if not parcel.frontage_indices or not scale.is_valid:
        return 0.0
    start, end = parcel.frontage_indices
    n = len(parcel.vertices)
    if not (0 <= start < n and 0 <= end < n):
        log.debug(f"Frontage indices {parcel.frontage_indices} out of range for {n} vertices")
        return 0.0
    return scale.to_meters(distance(parcel.vertices[start], parcel.vertices[end]))


def frontage_distance(parcel: LandParcel) -> float:
    """Frontage override of a parcel using its own inferred scale."""
    return frontage_override(parcel, infer_scale(parcel.vertices, parcel.declared_area))


@dataclass
class UsageUnitArea:
    """Area of one usage unit (利用単位) in ㎡."""
    unit_id: str
    name: str
    area: float


def usage_unit_areas(parcel: LandParcel) -> List[UsageUnitArea]:
    """Areas of the parcel's usage units, measured with the parcel's scale."""
    scale = infer_scale(parcel.vertices, parcel.declared_area)
    areas = []
    for unit in parcel.usage_units:
        area = scale.to_square_meters(polygon_area(unit.vertices)) if scale.is_valid else 0.0
        areas.append(UsageUnitArea(unit.id, unit.name, area))
    return areas


def remaining_area(parcel: LandParcel) -> float:
    """Declared area not covered by any usage unit."""
    covered = sum(u.area for u in usage_unit_areas(parcel))
    return (parcel.declared_area or 0.0) - covered


def distance_to_front_road(parcel: LandParcel) -> float:
    """
    Shortest real-world distance from a roadless parcel to its front road line.

    Returns 0 without a road line or a usable scale.
    """
    if parcel.front_road_line is None:
        return 0.0
    scale = infer_scale(parcel.vertices, parcel.declared_area)
    if not scale.is_valid:
        return 0.0
    line = parcel.front_road_line
    shortest = min(point_to_segment_distance(v, line.p1, line.p2) for v in parcel.vertices)
    return scale.to_meters(shortest)


def passage_area(passage_width: float, distance_to_road: float) -> float:
    """通路面積 of a roadless parcel: passage width x distance to the road."""
    if passage_width <= 0 or distance_to_road <= 0:
        return 0.0
    return passage_width * distance_to_road


class AssessmentEngine:
    """Engine for valuing land parcels by the road-price method."""

    def assess(self, parcel: LandParcel) -> Optional[AssessmentResult]:
        """
        Value one parcel.

        Returns None while the parcel is incomplete: fewer than three
        vertices, or no positive declared area.
        """
        declared_area = parcel.declared_area
        if len(parcel.vertices) < 3 or not declared_area or declared_area <= 0:
            return None

        scale = infer_scale(parcel.vertices, declared_area)
        if not scale.is_valid:
            return None

        zone = parcel.zone
        road = parcel.front_road
        if road is None:
            log.debug(f"Parcel {parcel.id} has no front road; measuring area only")
            plot = AssumedRegularPlot()
            frontage, depth = 0.0, 0.0
            rosenka = 0.0
        else:
            plot = assumed_regular_plot(parcel.vertices, road, scale)
            frontage, depth = measure_frontage_and_depth(parcel.vertices, road, scale)
            rosenka = road.rosenka

        override = frontage_override(parcel, scale)
        if override > 0:
            frontage = override
        elif parcel.frontage_indices:
            log.debug(f"Parcel {parcel.id}: frontage override unusable, keeping projected frontage")

        calc_depth = calculated_depth(declared_area, frontage)
        ratio = kage_chi_ratio(declared_area, plot.area)

        depth_rate = depth_price_rate(zone, calc_depth)
        irregular_plot = irregular_plot_rate(zone, declared_area, ratio)
        narrow = narrow_frontage_rate(zone, frontage)
        excessive = excessive_depth_rate(zone, calc_depth, frontage)
        irregular = combine_irregular_rates(irregular_plot, narrow, excessive)

        price_per_area = rosenka * ROAD_PRICE_UNIT * depth_rate * irregular

        return AssessmentResult(
            land_area=declared_area,
            frontage=frontage,
            depth=depth,
            calculated_depth=calc_depth,
            assumed_plot_area=plot.area,
            kage_chi_area=plot.area - declared_area if plot.area else 0.0,
            kage_chi_ratio=ratio,
            depth_price_rate=depth_rate,
            irregular_plot_rate=irregular_plot,
            narrow_frontage_rate=narrow,
            excessive_depth_rate=excessive,
            irregular_rate=irregular,
            price_per_area=price_per_area,
            total_value=price_per_area * declared_area,
            assumed_plot=plot,
        )

    def assess_all(self, parcels: List[LandParcel]) -> Dict[str, Optional[AssessmentResult]]:
        """Value every parcel independently, keyed by parcel id."""
        return {parcel.id: self.assess(parcel) for parcel in parcels}


def assess(parcel: LandParcel) -> Optional[AssessmentResult]:
    """Convenience function to value one parcel."""
    return AssessmentEngine().assess(parcel)


def get_assessment_engine() -> AssessmentEngine:
    """Factory function for the assessment engine."""
    return AssessmentEngine()
