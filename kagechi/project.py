"""
Project Model and Manager

A Project holds everything the user authored for one survey image: the
traced parcels, their roads, construction lines and display settings.
It is an explicit state container owned by the caller; valuation results
are never stored on it and are recomputed from it on read.
"""

import os
import json
import uuid
from datetime import datetime
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, List, Tuple
from pathlib import Path
import logging

from kagechi.models import (
    Point, Road, RoadType, LandParcel, UsageUnit, DrawingLine, LineType, FrontRoadLine,
    ZoneClassification, AssessmentResult,
)
from kagechi.assessment import get_assessment_engine, distance_to_front_road, passage_area
from kagechi.drawing import LINE_COLORS
from kagechi.geometry import find_edge_near, find_vertex_near
from kagechi.scale import Scale
from kagechi.theme import USAGE_UNIT_COLORS

log = logging.getLogger(__name__)

PROJECTS_DIR_ENV = "KAGECHI_PROJECTS_DIR"


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


def _now() -> str:
    return datetime.now().isoformat()


# ═══════════════════════════════════════════════════════════════════════════
# PROJECT SETTINGS
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class ProjectSettings:
    """Display and interaction settings saved with a project."""

    display_precision: int = 2
    """Decimal places shown for lengths and areas."""

    area_unit: str = "㎡"
    """Unit areas are displayed in: '㎡' or '坪'."""

    edge_hit_tolerance: float = 10.0
    """How close (drawing units) a click must be to select an edge."""

    vertex_hit_tolerance: float = 10.0
    """How close (drawing units) a click must be to select a vertex."""

    def to_dict(self) -> Dict:
        return {_SETTINGS_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict) -> "ProjectSettings":
        known = {k: data[key] for k, key in _SETTINGS_KEYS.items() if key in data}
        return cls(**known)


# Attribute name -> key in the saved project file
_SETTINGS_KEYS = {
    "display_precision": "displayPrecision",
    "area_unit": "areaUnit",
    "edge_hit_tolerance": "edgeHitTolerance",
    "vertex_hit_tolerance": "vertexHitTolerance",
}


# ═══════════════════════════════════════════════════════════════════════════
# IMAGE / REFERENCE SCALE
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class ImageInfo:
    """The survey image the parcels were traced on. Pixels are not stored."""
    file_name: str
    width: int
    height: int

    def to_dict(self) -> Dict:
        return {"fileName": self.file_name, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict) -> "ImageInfo":
        return cls(file_name=data["fileName"], width=data["width"], height=data["height"])


@dataclass
class ReferenceScale:
    """基準尺 - a ruler line of known real length drawn on the image."""
    p1: Point
    p2: Point
    real_distance_m: float

    @property
    def scale(self) -> Scale:
        return Scale.from_reference(self.p1, self.p2, self.real_distance_m)

    def to_dict(self) -> Dict:
        return {
            "points": [self.p1.to_dict(), self.p2.to_dict()],
            "realDistanceMeters": self.real_distance_m,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "ReferenceScale":
        p1, p2 = data["points"]
        return cls(Point.from_dict(p1), Point.from_dict(p2), data["realDistanceMeters"])


# ═══════════════════════════════════════════════════════════════════════════
# PROJECT
# ═══════════════════════════════════════════════════════════════════════════
@dataclass
class Project:
    """
    A valuation project: one survey image and the parcels traced on it.

    Every mutator bumps updated_at. Nothing derived is cached here, so
    results can never drift out of sync with the inputs.
    """

    id: str
    """Unique identifier (short UUID)."""

    name: str
    """Human-readable project name."""

    lands: List[LandParcel] = field(default_factory=list)
    """Parcels under assessment."""

    drawing_lines: List[DrawingLine] = field(default_factory=list)
    """Auxiliary construction lines."""

    settings: ProjectSettings = field(default_factory=ProjectSettings)

    image: Optional[ImageInfo] = None

    reference_scale: Optional[ReferenceScale] = None

    created_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)

    def touch(self):
        self.updated_at = _now()

    # ── Parcels ──────────────────────────────────────────────────────────
    def add_land(
        self,
        name: str,
        vertices: List[Point],
        zone: ZoneClassification = ZoneClassification.ORDINARY_RESIDENTIAL,
        declared_area: Optional[float] = None,
    ) -> LandParcel:
        """Add a traced parcel and return it."""
        land = LandParcel(
            id=_new_id(),
            name=name,
            vertices=list(vertices),
            zone=zone,
            declared_area=declared_area,
        )
        self.lands.append(land)
        self.touch()
        return land

    def get_land(self, land_id: str) -> LandParcel:
        for land in self.lands:
            if land.id == land_id:
                return land
        raise ValueError(f"Land {land_id} not found")

    def remove_land(self, land_id: str):
        land = self.get_land(land_id)
        self.lands.remove(land)
        self.drawing_lines = [
            line for line in self.drawing_lines
            if not line.reference_edge or line.reference_edge[0] != land_id
        ]
        self.touch()

    def set_declared_area(self, land_id: str, area: Optional[float]):
        """Set 地積 in ㎡; None clears it."""
        land = self.get_land(land_id)
        if land.declared_area == area:
            return
        land.declared_area = area
        self._refresh_roadless(land)
        self.touch()

    def set_zone(self, land_id: str, zone: ZoneClassification):
        land = self.get_land(land_id)
        if land.zone == zone:
            return
        land.zone = zone
        self.touch()

    def set_frontage_indices(self, land_id: str, indices: Optional[Tuple[int, int]]):
        """Choose the two vertices whose distance is used as the frontage."""
        land = self.get_land(land_id)
        if indices is not None:
            self._check_indices(land, indices)
        indices = tuple(indices) if indices else None
        if land.frontage_indices == indices:
            return
        land.frontage_indices = indices
        self.touch()

    def move_vertex(self, land_id: str, index: int, point: Point):
        """Drag a vertex. Indices of all other vertices are unchanged."""
        land = self.get_land(land_id)
        self._check_indices(land, (index,))
        land.vertices[index] = point
        land.sync_roads()
        self._refresh_roadless(land)
        self.touch()

    def set_vertices(self, land_id: str, vertices: List[Point]):
        """
        Replace the whole outline, as the vertex table editor does.

        Roads anchored to vertex indices follow the new positions.
        """
        land = self.get_land(land_id)
        if list(vertices) == land.vertices:
            return
        land.vertices = list(vertices)
        land.sync_roads()
        self._refresh_roadless(land)
        self.touch()

    def edge_at(self, land_id: str, point: Point) -> Optional[Tuple[int, int]]:
        """Edge of a parcel under a click, within the configured tolerance."""
        land = self.get_land(land_id)
        return find_edge_near(land.vertices, point, self.settings.edge_hit_tolerance)

    def vertex_at(self, land_id: str, point: Point) -> Optional[int]:
        """Vertex of a parcel under a click, within the configured tolerance."""
        land = self.get_land(land_id)
        return find_vertex_near(land.vertices, point, self.settings.vertex_hit_tolerance)

    def set_front_road_from_vertices(
        self,
        land_id: str,
        start_index: int,
        end_index: int,
        rosenka: float,
        road_type: RoadType = RoadType.FRONT,
    ) -> Road:
        """
        Assign a road along two of the parcel's vertices.

        An existing road of the same type is updated in place; otherwise a
        new road is appended.
        """
        land = self.get_land(land_id)
        self._check_indices(land, (start_index, end_index))
        p1 = land.vertices[start_index]
        p2 = land.vertices[end_index]

        for road in land.roads:
            if road.road_type == road_type:
                if road.vertex_indices == (start_index, end_index) and road.rosenka == rosenka:
                    return road
                road.p1, road.p2 = p1, p2
                road.vertex_indices = (start_index, end_index)
                road.rosenka = rosenka
                self.touch()
                return road

        road = Road(
            id=_new_id(),
            road_type=road_type,
            p1=p1,
            p2=p2,
            vertex_indices=(start_index, end_index),
            rosenka=rosenka,
        )
        land.roads.append(road)
        self.touch()
        return road

    def add_usage_unit(self, land_id: str, name: str, vertices: List[Point]) -> Optional[UsageUnit]:
        """Add a 利用単位. Fewer than three vertices adds nothing."""
        if len(vertices) < 3:
            return None
        land = self.get_land(land_id)
        color = USAGE_UNIT_COLORS[len(land.usage_units) % len(USAGE_UNIT_COLORS)]
        unit = UsageUnit(id=_new_id(), name=name, vertices=list(vertices), color=color)
        land.usage_units.append(unit)
        self.touch()
        return unit

    def delete_usage_unit(self, land_id: str, unit_id: str):
        land = self.get_land(land_id)
        land.usage_units = [u for u in land.usage_units if u.id != unit_id]
        self.touch()

    # ── 無道路地 ──────────────────────────────────────────────────────────
    def set_roadless(self, land_id: str, is_roadless: bool):
        land = self.get_land(land_id)
        if land.is_roadless == is_roadless:
            return
        land.is_roadless = is_roadless
        self.touch()

    def set_front_road_line(self, land_id: str, p1: Point, p2: Point, rosenka: float):
        """Draw the front road of a roadless parcel as a free segment and measure it."""
        land = self.get_land(land_id)
        line = FrontRoadLine(p1, p2, rosenka)
        if land.front_road_line == line:
            return
        land.front_road_line = line
        self._refresh_roadless(land)
        self.touch()

    def update_distance_to_front_road(self, land_id: str) -> float:
        """Measure and store the distance from the parcel to its front road line."""
        land = self.get_land(land_id)
        self._refresh_roadless(land)
        self.touch()
        return land.distance_to_front_road or 0.0

    def set_passage_width(self, land_id: str, width: Optional[float]):
        """
        Set the access passage width in meters.

        With a measured distance to the front road, the passage area is
        recomputed as width x distance.
        """
        land = self.get_land(land_id)
        if land.passage_width == width:
            return
        land.passage_width = width
        self._refresh_roadless(land)
        self.touch()

    def set_passage_area(self, land_id: str, area: Optional[float]):
        land = self.get_land(land_id)
        if land.passage_area == area:
            return
        land.passage_area = area
        self.touch()

    @staticmethod
    def _refresh_roadless(land: LandParcel):
        """Re-measure the front road distance and passage area after an input changes."""
        if land.front_road_line is None:
            return
        land.distance_to_front_road = distance_to_front_road(land) or None
        if land.passage_width and land.distance_to_front_road:
            land.passage_area = passage_area(land.passage_width, land.distance_to_front_road)

    def add_drawing_line(
        self,
        line_type: LineType,
        points: Tuple[Point, Point],
        reference_edge: Optional[Tuple[str, int, int]] = None,
    ) -> DrawingLine:
        line = DrawingLine(
            id=_new_id(),
            line_type=line_type,
            p1=points[0],
            p2=points[1],
            color=LINE_COLORS[line_type],
            reference_edge=reference_edge,
        )
        self.drawing_lines.append(line)
        self.touch()
        return line

    def delete_drawing_line(self, line_id: str):
        self.drawing_lines = [line for line in self.drawing_lines if line.id != line_id]
        self.touch()

    @staticmethod
    def _check_indices(land: LandParcel, indices):
        n = len(land.vertices)
        for index in indices:
            if not 0 <= index < n:
                raise ValueError(f"Vertex index {index} out of range for land {land.id} ({n} vertices)")

    # ── Derived ──────────────────────────────────────────────────────────
    def assessments(self) -> Dict[str, Optional[AssessmentResult]]:
        """Valuation of every parcel, recomputed on each call."""
        return get_assessment_engine().assess_all(self.lands)

    # ── Persistence ──────────────────────────────────────────────────────
    def to_dict(self) -> Dict:
        """Serialize project to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "image": self.image.to_dict() if self.image else None,
            "scale": self.reference_scale.to_dict() if self.reference_scale else None,
            "lands": [land.to_dict() for land in self.lands],
            "drawingLines": [line.to_dict() for line in self.drawing_lines],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Project":
        """Deserialize project from dictionary."""
        image = data.get("image")
        scale = data.get("scale")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            lands=[LandParcel.from_dict(land) for land in data.get("lands", [])],
            drawing_lines=[DrawingLine.from_dict(line) for line in data.get("drawingLines", [])],
            settings=ProjectSettings.from_dict(data.get("settings", {})),
            image=ImageInfo.from_dict(image) if image else None,
            reference_scale=ReferenceScale.from_dict(scale) if scale else None,
            created_at=data.get("createdAt", _now()),
            updated_at=data.get("updatedAt", _now()),
        )

    def save(self, path: Path):
        """Save project to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        log.info(f"Saved project {self.id} to {path}")

    @classmethod
    def load(cls, path: Path) -> Optional["Project"]:
        """Load project from a JSON file, or None if it does not exist."""
        path = Path(path)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            project = cls.from_dict(json.load(f))
        log.info(f"Loaded project {project.id} from {path}")
        return project


# ═══════════════════════════════════════════════════════════════════════════
# PROJECT MANAGER
# ═══════════════════════════════════════════════════════════════════════════
class ProjectManager:
    """
    Manages saved projects - create, list, load, delete.

    Projects live under KAGECHI_PROJECTS_DIR (default 'projects/'), one
    JSON file per project.
    """

    def __init__(self, projects_dir: Optional[Path] = None):
        self.projects_dir = Path(projects_dir or os.environ.get(PROJECTS_DIR_ENV, "projects"))
        self.projects_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, project_id: str) -> Path:
        return self.projects_dir / f"{project_id}.json"

    def create_project(self, name: str) -> Project:
        project = Project(id=_new_id(), name=name)
        self.save_project(project)
        log.info(f"Created project '{name}' with ID {project.id}")
        return project

    def save_project(self, project: Project):
        project.touch()
        project.save(self.path_for(project.id))

    def list_projects(self) -> List[Project]:
        """List all projects, newest first."""
        projects = []
        for path in self.projects_dir.glob("*.json"):
            project = Project.load(path)
            if project:
                projects.append(project)
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    def get_project(self, project_id: str) -> Optional[Project]:
        return Project.load(self.path_for(project_id))

    def delete_project(self, project_id: str) -> bool:
        path = self.path_for(project_id)
        if path.exists():
            path.unlink()
            log.info(f"Deleted project {project_id}")
            return True
        return False
