"""
Core data models for the kagechi land valuation engine.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ZoneClassification(Enum):
    """地区区分 - statutory land-use category selecting the correction tables."""
    BUILDING_DISTRICT = "ビル街地区"
    HIGH_COMMERCIAL = "高度商業地区"
    BUSY_COMMERCIAL = "繁華街地区"
    ORDINARY_COMMERCIAL = "普通商業・併用住宅地区"
    ORDINARY_RESIDENTIAL = "普通住宅地区"
    SMALL_FACTORY = "中小工場地区"
    LARGE_FACTORY = "大工場地区"


class AreaClass(Enum):
    """地積区分 used by the irregular-plot table."""
    A = "A"
    B = "B"
    C = "C"


class RoadType(Enum):
    """路線種別"""
    FRONT = "正面"
    SIDE_1 = "側方１"
    SIDE_2 = "側方２"
    REAR = "二方"


class AreaType(Enum):
    """土地種類"""
    RESIDENTIAL_LAND = "宅地"
    PADDY = "田"
    FIELD = "畑"
    FOREST = "山林"
    OTHER = "その他"


class LineType(Enum):
    """Construction line kinds drawn over the survey image."""
    STRAIGHT = "直線"
    PERPENDICULAR = "垂線"
    EXTENSION = "延線"
    PARALLEL = "平行"


# 借地権割合
LEASEHOLD_RATIOS = ("A", "B", "C", "D", "E", "F", "G")


@dataclass(frozen=True)
class Point:
    """A drawing-surface coordinate. Has no unit until paired with a Scale."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict) -> "Point":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class Road:
    """
    A frontage road: either an existing polygon edge or a free segment.

    The road's p1 -> p2 direction defines the frontage axis of the parcel.
    """
    p1: Point
    p2: Point
    rosenka: float  # 千円/㎡
    road_type: RoadType = RoadType.FRONT
    vertex_indices: Optional[Tuple[int, int]] = None
    shakuchiken: str = "D"
    is_kadochi: bool = False
    id: str = ""

    @property
    def points(self) -> Tuple[Point, Point]:
        return (self.p1, self.p2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.road_type.value,
            "points": [self.p1.to_dict(), self.p2.to_dict()],
            "vertexIndices": list(self.vertex_indices) if self.vertex_indices else None,
            "rosenka": self.rosenka,
            "shakuchiken": self.shakuchiken,
            "isKadochi": self.is_kadochi,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Road":
        p1, p2 = data["points"]
        indices = data.get("vertexIndices")
        shakuchiken = data.get("shakuchiken", "D")
        if shakuchiken not in LEASEHOLD_RATIOS:
            raise ValueError(f"Unknown leasehold ratio {shakuchiken!r}")
        return cls(
            id=data.get("id", ""),
            road_type=RoadType(data.get("type", RoadType.FRONT.value)),
            p1=Point.from_dict(p1),
            p2=Point.from_dict(p2),
            vertex_indices=tuple(indices) if indices else None,
            rosenka=float(data.get("rosenka", 0.0)),
            shakuchiken=shakuchiken,
            is_kadochi=data.get("isKadochi", False),
        )


@dataclass
class FrontRoadLine:
    """Front road of a roadless parcel (無道路地), drawn as a free segment."""
    p1: Point
    p2: Point
    rosenka: float

    def as_road(self) -> Road:
        return Road(p1=self.p1, p2=self.p2, rosenka=self.rosenka)

    def to_dict(self) -> Dict[str, Any]:
        return {"points": [self.p1.to_dict(), self.p2.to_dict()], "rosenka": self.rosenka}

    @classmethod
    def from_dict(cls, data: Dict) -> "FrontRoadLine":
        p1, p2 = data["points"]
        return cls(Point.from_dict(p1), Point.from_dict(p2), float(data["rosenka"]))


@dataclass
class UsageUnit:
    """利用単位 - a sub-polygon of a parcel used for a distinct purpose."""
    id: str
    name: str
    vertices: List[Point]
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "vertices": [v.to_dict() for v in self.vertices],
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "UsageUnit":
        return cls(
            id=data["id"],
            name=data["name"],
            vertices=[Point.from_dict(v) for v in data["vertices"]],
            color=data.get("color", "#3B82F6"),
        )


@dataclass
class LandParcel:
    """
    An assessed land parcel (評価対象地).

    Holds only authored inputs. Scale, measurements and correction rates are
    derived on demand and never stored here.
    """
    id: str
    name: str
    vertices: List[Point] = field(default_factory=list)
    roads: List[Road] = field(default_factory=list)
    area_type: AreaType = AreaType.RESIDENTIAL_LAND
    zone: ZoneClassification = ZoneClassification.ORDINARY_RESIDENTIAL
    declared_area: Optional[float] = None  # 地積（㎡）
    usage_units: List[UsageUnit] = field(default_factory=list)
    frontage_indices: Optional[Tuple[int, int]] = None
    passage_area: Optional[float] = None  # 通路の面積（㎡）

    # 無道路地
    is_roadless: bool = False
    front_road_line: Optional[FrontRoadLine] = None
    distance_to_front_road: Optional[float] = None
    passage_width: Optional[float] = None

    @property
    def front_road(self) -> Optional[Road]:
        """The road the assessment is measured against, if any."""
        if self.is_roadless and self.front_road_line is not None:
            return self.front_road_line.as_road()
        for road in self.roads:
            if road.road_type == RoadType.FRONT:
                return road
        return None

    def sync_roads(self):
        """
        Re-read vertex-anchored road endpoints from the current vertices.

        Roads whose indices no longer exist keep their last endpoints and
        become free segments. A frontage pair that no longer exists is
        cleared.
        """
        n = len(self.vertices)
        for road in self.roads:
            if not road.vertex_indices:
                continue
            start, end = road.vertex_indices
            if 0 <= start < n and 0 <= end < n:
                road.p1, road.p2 = self.vertices[start], self.vertices[end]
            else:
                road.vertex_indices = None
        if self.frontage_indices and not all(0 <= i < n for i in self.frontage_indices):
            self.frontage_indices = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "vertices": [v.to_dict() for v in self.vertices],
            "roads": [r.to_dict() for r in self.roads],
            "areaType": self.area_type.value,
            "chikaKubun": self.zone.value,
            "actualArea": self.declared_area,
            "usageUnits": [u.to_dict() for u in self.usage_units],
            "frontageIndices": list(self.frontage_indices) if self.frontage_indices else None,
            "passageArea": self.passage_area,
            "isRoadlessLand": self.is_roadless,
            "frontRoadLine": self.front_road_line.to_dict() if self.front_road_line else None,
            "distanceToFrontRoad": self.distance_to_front_road,
            "passageWidth": self.passage_width,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "LandParcel":
        indices = data.get("frontageIndices")
        road_line = data.get("frontRoadLine")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            vertices=[Point.from_dict(v) for v in data.get("vertices", [])],
            roads=[Road.from_dict(r) for r in data.get("roads", [])],
            area_type=AreaType(data.get("areaType", AreaType.RESIDENTIAL_LAND.value)),
            zone=ZoneClassification(data.get("chikaKubun", ZoneClassification.ORDINARY_RESIDENTIAL.value)),
            declared_area=data.get("actualArea"),
            usage_units=[UsageUnit.from_dict(u) for u in data.get("usageUnits") or []],
            frontage_indices=tuple(indices) if indices else None,
            passage_area=data.get("passageArea"),
            is_roadless=data.get("isRoadlessLand", False),
            front_road_line=FrontRoadLine.from_dict(road_line) if road_line else None,
            distance_to_front_road=data.get("distanceToFrontRoad"),
            passage_width=data.get("passageWidth"),
        )


@dataclass
class DrawingLine:
    """An auxiliary construction line (直線/垂線/延線/平行)."""
    id: str
    line_type: LineType
    p1: Point
    p2: Point
    color: str
    reference_edge: Optional[Tuple[str, int, int]] = None  # (land id, start, end)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.line_type.value,
            "points": [self.p1.to_dict(), self.p2.to_dict()],
            "color": self.color,
        }
        if self.reference_edge:
            land_id, start, end = self.reference_edge
            data["referenceEdge"] = {"landId": land_id, "startIndex": start, "endIndex": end}
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "DrawingLine":
        p1, p2 = data["points"]
        ref = data.get("referenceEdge")
        return cls(
            id=data["id"],
            line_type=LineType(data["type"]),
            p1=Point.from_dict(p1),
            p2=Point.from_dict(p2),
            color=data.get("color", "#333"),
            reference_edge=(ref["landId"], ref["startIndex"], ref["endIndex"]) if ref else None,
        )


@dataclass(frozen=True)
class EdgeInfo:
    """A polygon edge: vertex i to vertex (i + 1) mod N, length in meters."""
    start_index: int
    end_index: int
    length: float


@dataclass(frozen=True)
class AssumedRegularPlot:
    """
    想定整形地 - the frontage-aligned bounding rectangle of a parcel.

    Corners are in drawing coordinates; width, height and area in meters / ㎡.
    """
    corners: Tuple[Point, ...] = ()
    width: float = 0.0
    height: float = 0.0
    area: float = 0.0


@dataclass(frozen=True)
class AssessmentResult:
    """
    Immutable snapshot of one parcel's valuation.

    Recomputed from scratch whenever any input changes.
    """
    land_area: float
    frontage: float
    depth: float
    calculated_depth: float
    assumed_plot_area: float
    kage_chi_area: float
    kage_chi_ratio: float
    depth_price_rate: float
    irregular_plot_rate: float
    narrow_frontage_rate: float
    excessive_depth_rate: float
    irregular_rate: float
    price_per_area: float
    total_value: float
    assumed_plot: Optional[AssumedRegularPlot] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("assumed_plot")
        return data
