"""
kagechi - 路線価 land valuation engine.
Contains data models, geometry, correction tables, the assessment engine
and project management.
"""

from kagechi.models import (
    Point, Road, RoadType, ZoneClassification, AreaClass, AreaType,
    LandParcel, UsageUnit, DrawingLine, LineType,
    AssumedRegularPlot, AssessmentResult, EdgeInfo,
)
from kagechi.geometry import polygon_area, edge_lengths, centroid, point_to_segment_distance
from kagechi.scale import Scale, NO_SCALE, infer_scale
from kagechi.frontage import assumed_regular_plot, measure_frontage_and_depth
from kagechi.correction_tables import (
    depth_price_rate, irregular_plot_rate, narrow_frontage_rate, excessive_depth_rate, area_class,
)
from kagechi.assessment import AssessmentEngine, assess, combine_irregular_rates, get_assessment_engine
from kagechi.project import Project, ProjectManager, ProjectSettings

__all__ = [
    # Models
    "Point",
    "Road",
    "RoadType",
    "ZoneClassification",
    "AreaClass",
    "AreaType",
    "LandParcel",
    "UsageUnit",
    "DrawingLine",
    "LineType",
    "AssumedRegularPlot",
    "AssessmentResult",
    "EdgeInfo",
    # Geometry and scale
    "polygon_area",
    "edge_lengths",
    "centroid",
    "point_to_segment_distance",
    "Scale",
    "NO_SCALE",
    "infer_scale",
    "assumed_regular_plot",
    "measure_frontage_and_depth",
    # Correction tables
    "depth_price_rate",
    "irregular_plot_rate",
    "narrow_frontage_rate",
    "excessive_depth_rate",
    "area_class",
    # Assessment
    "AssessmentEngine",
    "assess",
    "combine_irregular_rates",
    "get_assessment_engine",
    # Projects
    "Project",
    "ProjectManager",
    "ProjectSettings",
]
