"""
Tests for the assessment engine.

Scenarios use drawing polygons whose scale works out to exactly 0.1 m per
drawing unit, so measurements come out as round meters.
"""

import dataclasses

import pytest
from kagechi.models import (
    Point, Road, RoadType, LandParcel, UsageUnit, FrontRoadLine, ZoneClassification,
)
from kagechi.assessment import (
    ROAD_PRICE_UNIT, AssessmentEngine, assess, get_assessment_engine,
    combine_irregular_rates, frontage_distance, usage_unit_areas, remaining_area,
    distance_to_front_road, passage_area,
)

SQUARE = [Point(0, 0), Point(100, 0), Point(100, 100), Point(0, 100)]
L_SHAPE = [Point(0, 0), Point(100, 0), Point(100, 50), Point(50, 50), Point(50, 100), Point(0, 100)]


def _parcel(vertices=SQUARE, declared_area=100.0, rosenka=300.0, **kwargs):
    roads = [Road(p1=vertices[0], p2=vertices[1], rosenka=rosenka, vertex_indices=(0, 1))]
    return LandParcel(
        id="land-1",
        name="土地1",
        vertices=list(vertices),
        roads=roads,
        declared_area=declared_area,
        **kwargs,
    )


class TestCombineRates:
    """Tests for the combined irregular rate."""

    def test_product_lower(self):
        assert combine_irregular_rates(0.90, 0.85, 0.92) == pytest.approx(0.782)

    def test_irregular_plot_lower(self):
        assert combine_irregular_rates(0.80, 1.00, 0.98) == 0.80

    def test_no_corrections(self):
        assert combine_irregular_rates(1.00, 1.00, 1.00) == 1.00


class TestSquareParcel:
    """A 10m x 10m parcel on a 300千円/㎡ road."""

    @pytest.fixture
    def result(self):
        return assess(_parcel())

    def test_measurements(self, result):
        assert result.land_area == 100
        assert result.frontage == pytest.approx(10)
        assert result.depth == pytest.approx(10)
        assert result.calculated_depth == pytest.approx(10)
        assert result.assumed_plot_area == pytest.approx(100)

    def test_no_kage_chi(self, result):
        assert result.kage_chi_area == pytest.approx(0)
        assert result.kage_chi_ratio == pytest.approx(0)

    def test_rates(self, result):
        # Depth 10 sits on a breakpoint and takes the next bucket
        assert result.depth_price_rate == 1.00
        assert result.irregular_plot_rate == 1.00
        assert result.narrow_frontage_rate == 1.00
        assert result.excessive_depth_rate == 1.00
        assert result.irregular_rate == 1.00

    def test_price(self, result):
        assert result.price_per_area == pytest.approx(300 * ROAD_PRICE_UNIT)
        assert result.total_value == pytest.approx(30_000_000)

    def test_assumed_plot_attached(self, result):
        assert len(result.assumed_plot.corners) == 4


class TestLShapedParcel:
    """An L-shaped parcel with 25% kage-chi."""

    @pytest.fixture
    def result(self):
        return assess(_parcel(vertices=L_SHAPE, declared_area=75.0, rosenka=200.0))

    def test_kage_chi(self, result):
        assert result.assumed_plot_area == pytest.approx(100)
        assert result.kage_chi_area == pytest.approx(25)
        assert result.kage_chi_ratio == pytest.approx(25)

    def test_rates(self, result):
        assert result.calculated_depth == pytest.approx(7.5)
        assert result.depth_price_rate == 0.95
        assert result.irregular_plot_rate == 0.92
        assert result.irregular_rate == 0.92

    def test_price(self, result):
        assert result.price_per_area == pytest.approx(174_800)
        assert result.total_value == pytest.approx(13_110_000)


class TestFrontageOverride:
    """Tests for user-chosen frontage vertices."""

    def test_override_replaces_projected_frontage(self):
        result = assess(_parcel(frontage_indices=(0, 2)))
        assert result.frontage == pytest.approx(14.1421356)
        assert result.calculated_depth == pytest.approx(100 / 14.1421356)
        assert result.depth_price_rate == 0.95
        # Depth stays the projected span
        assert result.depth == pytest.approx(10)

    def test_invalid_override_ignored(self):
        result = assess(_parcel(frontage_indices=(0, 9)))
        assert result.frontage == pytest.approx(10)

    def test_frontage_distance(self):
        assert frontage_distance(_parcel(frontage_indices=(0, 1))) == pytest.approx(10)
        assert frontage_distance(_parcel()) == 0


class TestIncompleteParcels:
    """Parcels that cannot be valued yet."""

    def test_too_few_vertices(self):
        parcel = _parcel()
        parcel.vertices = SQUARE[:2]
        assert assess(parcel) is None

    @pytest.mark.parametrize("declared", [None, 0, -10])
    def test_no_declared_area(self, declared):
        assert assess(_parcel(declared_area=declared)) is None

    def test_degenerate_polygon(self):
        parcel = _parcel(vertices=[Point(0, 0), Point(50, 0), Point(100, 0)])
        assert assess(parcel) is None

    def test_no_front_road(self):
        parcel = _parcel()
        parcel.roads = [Road(p1=SQUARE[1], p2=SQUARE[2], rosenka=300.0, road_type=RoadType.SIDE_1)]
        result = assess(parcel)
        assert result is not None
        assert result.frontage == 0
        assert result.assumed_plot_area == 0
        assert result.kage_chi_area == 0
        assert result.excessive_depth_rate == 1.00
        assert result.price_per_area == 0
        assert result.total_value == 0


class TestRoadlessParcel:
    """無道路地 with a free front road line."""

    @pytest.fixture
    def parcel(self):
        parcel = _parcel()
        parcel.roads = []
        parcel.is_roadless = True
        parcel.front_road_line = FrontRoadLine(Point(0, -50), Point(100, -50), 250.0)
        return parcel

    def test_distance_to_front_road(self, parcel):
        assert distance_to_front_road(parcel) == pytest.approx(5)

    def test_distance_without_line(self):
        assert distance_to_front_road(_parcel()) == 0

    def test_assessed_against_road_line(self, parcel):
        result = assess(parcel)
        assert result.frontage == pytest.approx(10)
        assert result.price_per_area == pytest.approx(250 * ROAD_PRICE_UNIT)

    def test_passage_area(self):
        assert passage_area(2.0, 5.0) == 10.0
        assert passage_area(0, 5.0) == 0
        assert passage_area(2.0, 0) == 0


class TestUsageUnits:
    """利用単位 areas."""

    def test_half_and_remaining(self):
        parcel = _parcel(usage_units=[
            UsageUnit(id="u1", name="自用地", vertices=[Point(0, 0), Point(50, 0), Point(50, 100), Point(0, 100)],
                      color="#3B82F6"),
        ])
        areas = usage_unit_areas(parcel)
        assert len(areas) == 1
        assert areas[0].unit_id == "u1"
        assert areas[0].area == pytest.approx(50)
        assert remaining_area(parcel) == pytest.approx(50)

    def test_no_scale(self):
        parcel = _parcel(declared_area=None, usage_units=[
            UsageUnit(id="u1", name="貸家", vertices=SQUARE, color="#10B981"),
        ])
        assert usage_unit_areas(parcel)[0].area == 0
        assert remaining_area(parcel) == 0


class TestResult:
    """Tests for the result snapshot and the engine API."""

    def test_frozen(self):
        result = assess(_parcel())
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.total_value = 0

    def test_to_dict(self):
        data = assess(_parcel()).to_dict()
        assert "assumed_plot" not in data
        assert data["total_value"] == pytest.approx(30_000_000)
        assert data["irregular_rate"] == 1.00

    def test_recomputed_after_change(self):
        parcel = _parcel()
        engine = get_assessment_engine()
        before = engine.assess(parcel)
        parcel.zone = ZoneClassification.BUILDING_DISTRICT
        parcel.declared_area = 400.0
        after = engine.assess(parcel)
        assert before.land_area == 100
        assert after.land_area == 400
        assert after.frontage == pytest.approx(20)

    def test_assess_all(self):
        first = _parcel()
        second = _parcel(vertices=L_SHAPE, declared_area=75.0)
        second.id = "land-2"
        incomplete = _parcel(declared_area=None)
        incomplete.id = "land-3"
        results = AssessmentEngine().assess_all([first, second, incomplete])
        assert set(results) == {"land-1", "land-2", "land-3"}
        assert results["land-3"] is None
        assert results["land-2"].kage_chi_ratio == pytest.approx(25)
