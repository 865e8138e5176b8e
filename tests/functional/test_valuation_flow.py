import math

import pytest
from kagechi.models import Point, ZoneClassification, LineType
from kagechi.project import ProjectManager
from kagechi.drawing import perpendicular_line
from kagechi.geometry import find_edge_near, edge_infos
from kagechi.assessment import usage_unit_areas, remaining_area

PENTAGON = [Point(10, 20), Point(130, 5), Point(160, 90), Point(70, 150), Point(0, 110)]


def _rotate(p: Point, degrees: float) -> Point:
    rad = math.radians(degrees)
    return Point(p.x * math.cos(rad) - p.y * math.sin(rad), p.x * math.sin(rad) + p.y * math.cos(rad))


@pytest.fixture
def manager(tmp_path):
    return ProjectManager(projects_dir=tmp_path / "projects")


def test_trace_value_save_reload(manager):
    """Trace a parcel, pick its road by clicking, value it, then reload from disk."""
    project = manager.create_project("相続税申告")
    land = project.add_land("宅地", PENTAGON, zone=ZoneClassification.ORDINARY_RESIDENTIAL, declared_area=250.0)

    # Click near the first edge to choose it as the frontage road
    start, end = find_edge_near(land.vertices, Point(70, 14))
    assert (start, end) == (0, 1)
    project.set_front_road_from_vertices(land.id, start, end, rosenka=180)

    labels = edge_infos(land.vertices, land.declared_area)
    assert len(labels) == 5

    line = project.add_drawing_line(
        LineType.PERPENDICULAR,
        perpendicular_line(land.vertices[0], land.vertices[1], Point(70, 80)),
        reference_edge=(land.id, start, end),
    )
    unit = project.add_usage_unit(land.id, "自用地", PENTAGON[:3])

    result = project.assessments()[land.id]
    assert result is not None
    assert result.land_area == 250
    assert result.assumed_plot_area >= result.land_area
    assert 0 < result.kage_chi_ratio < 100
    assert result.irregular_rate <= result.irregular_plot_rate
    assert result.total_value == pytest.approx(result.price_per_area * 250)
    assert result.price_per_area <= 180 * 1000

    manager.save_project(project)
    reloaded = manager.get_project(project.id)
    reloaded_land = reloaded.get_land(land.id)
    assert reloaded.drawing_lines[0].id == line.id
    assert reloaded_land.usage_units[0].id == unit.id
    assert reloaded.assessments()[land.id].to_dict() == pytest.approx(result.to_dict())

    areas = usage_unit_areas(reloaded_land)
    assert areas[0].area + remaining_area(reloaded_land) == pytest.approx(250)


def test_rotation_does_not_change_value(manager):
    """Rotating the whole drawing leaves every measurement unchanged."""
    project = manager.create_project("回転")
    base = project.add_land("元", PENTAGON, declared_area=250.0)
    project.set_front_road_from_vertices(base.id, 0, 1, rosenka=180)

    rotated_vertices = [_rotate(p, 37) for p in PENTAGON]
    rotated = project.add_land("回転後", rotated_vertices, declared_area=250.0)
    project.set_front_road_from_vertices(rotated.id, 0, 1, rosenka=180)

    results = project.assessments()
    a, b = results[base.id], results[rotated.id]
    assert b.frontage == pytest.approx(a.frontage)
    assert b.depth == pytest.approx(a.depth)
    assert b.assumed_plot_area == pytest.approx(a.assumed_plot_area)
    assert b.total_value == pytest.approx(a.total_value)


def test_zone_change_reprices(manager):
    """Changing the zone picks different tables without touching geometry."""
    project = manager.create_project("地区変更")
    land = project.add_land("宅地", [Point(0, 0), Point(40, 0), Point(40, 400), Point(0, 400)], declared_area=160.0)
    project.set_front_road_from_vertices(land.id, 0, 1, rosenka=100)

    residential = project.assessments()[land.id]
    project.set_zone(land.id, ZoneClassification.BUILDING_DISTRICT)
    building = project.assessments()[land.id]

    # 4m x 40m strip: narrow frontage and excessive depth both apply
    assert residential.frontage == pytest.approx(4)
    assert residential.calculated_depth == pytest.approx(40)
    assert residential.excessive_depth_rate < 1.0
    assert building.frontage == residential.frontage
    assert building.depth_price_rate != residential.depth_price_rate
