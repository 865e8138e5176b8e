"""
Correction Rate Tables

Statutory 路線価 correction schedules (財産評価基準書), keyed by zone
classification. Each table is an ascending tuple of
(upper_bound_exclusive, rate) buckets ending in an unbounded bucket.

Lookup rule, identical for all four tables: scan ascending and return the
rate of the first bucket whose upper bound is strictly greater than the
value. A value sitting exactly on a breakpoint therefore takes the NEXT
bucket's rate.
"""

import math
import logging
from typing import Dict, List, Sequence, Tuple

from kagechi.models import ZoneClassification, AreaClass

log = logging.getLogger(__name__)

INF = math.inf

Bucket = Tuple[float, float]
RateTable = Tuple[Bucket, ...]


# ═══════════════════════════════════════════════════════════════════════════
# 奥行価格補正率 (depth-price correction), keyed by depth in meters
# ═══════════════════════════════════════════════════════════════════════════
DEPTH_PRICE_TABLE: Dict[ZoneClassification, RateTable] = {
    ZoneClassification.BUILDING_DISTRICT: (
        (4, 0.80),
        (6, 0.84),
        (8, 0.88),
        (10, 0.90),
        (12, 0.91),
        (14, 0.92),
        (16, 0.93),
        (20, 0.94),
        (24, 0.95),
        (28, 0.96),
        (32, 0.97),
        (36, 0.98),
        (40, 0.99),
        (92, 1.00),
        (100, 0.99),
        (INF, 0.98),
    ),
    ZoneClassification.HIGH_COMMERCIAL: (
        (4, 0.80),
        (6, 0.84),
        (8, 0.88),
        (10, 0.90),
        (12, 0.91),
        (14, 0.92),
        (16, 0.93),
        (20, 0.94),
        (24, 0.95),
        (28, 0.96),
        (32, 0.97),
        (36, 0.98),
        (40, 0.99),
        (64, 1.00),
        (68, 0.99),
        (76, 0.98),
        (84, 0.97),
        (92, 0.96),
        (100, 0.95),
        (INF, 0.94),
    ),
    ZoneClassification.BUSY_COMMERCIAL: (
        (4, 0.80),
        (6, 0.84),
        (8, 0.88),
        (10, 0.90),
        (12, 0.91),
        (14, 0.92),
        (16, 0.93),
        (20, 0.94),
        (24, 0.95),
        (28, 0.96),
        (32, 0.97),
        (36, 0.98),
        (40, 0.99),
        (56, 1.00),
        (60, 0.99),
        (64, 0.98),
        (68, 0.97),
        (76, 0.96),
        (84, 0.95),
        (92, 0.94),
        (100, 0.93),
        (INF, 0.92),
    ),
    ZoneClassification.ORDINARY_COMMERCIAL: (
        (4, 0.90),
        (6, 0.92),
        (8, 0.94),
        (10, 0.96),
        (12, 0.97),
        (14, 0.98),
        (16, 0.99),
        (32, 1.00),
        (36, 0.99),
        (40, 0.98),
        (44, 0.97),
        (48, 0.96),
        (52, 0.95),
        (60, 0.94),
        (68, 0.93),
        (76, 0.92),
        (84, 0.91),
        (92, 0.90),
        (100, 0.89),
        (INF, 0.88),
    ),
    ZoneClassification.ORDINARY_RESIDENTIAL: (
        (4, 0.90),
        (6, 0.92),
        (8, 0.95),
        (10, 0.97),
        (24, 1.00),
        (28, 0.99),
        (32, 0.98),
        (36, 0.96),
        (40, 0.94),
        (44, 0.92),
        (48, 0.90),
        (52, 0.88),
        (56, 0.87),
        (60, 0.86),
        (64, 0.85),
        (68, 0.84),
        (72, 0.83),
        (76, 0.82),
        (84, 0.81),
        (92, 0.80),
        (INF, 0.80),
    ),
    ZoneClassification.SMALL_FACTORY: (
        (4, 0.85),
        (6, 0.88),
        (8, 0.91),
        (10, 0.94),
        (12, 0.96),
        (14, 0.97),
        (16, 0.98),
        (20, 0.99),
        (60, 1.00),
        (68, 0.99),
        (76, 0.98),
        (84, 0.97),
        (92, 0.96),
        (100, 0.95),
        (INF, 0.94),
    ),
    ZoneClassification.LARGE_FACTORY: (
        (4, 0.85),
        (6, 0.88),
        (8, 0.91),
        (10, 0.94),
        (12, 0.96),
        (14, 0.97),
        (16, 0.98),
        (20, 0.99),
        (INF, 1.00),
    ),
}


# ═══════════════════════════════════════════════════════════════════════════
# 地積区分 (area class thresholds): A below the first, B below the second
# ═══════════════════════════════════════════════════════════════════════════
AREA_CLASS_THRESHOLDS: Dict[ZoneClassification, Tuple[float, float]] = {
    ZoneClassification.BUILDING_DISTRICT: (1000, 1500),
    ZoneClassification.HIGH_COMMERCIAL: (1000, 1500),
    ZoneClassification.BUSY_COMMERCIAL: (650, 1000),
    ZoneClassification.ORDINARY_COMMERCIAL: (650, 1000),
    ZoneClassification.ORDINARY_RESIDENTIAL: (500, 750),
    ZoneClassification.SMALL_FACTORY: (1000, 1500),
    ZoneClassification.LARGE_FACTORY: (3500, 5000),
}


# ═══════════════════════════════════════════════════════════════════════════
# 不整形地補正率 (irregular-plot correction), keyed by かげ地割合 in percent
# ═══════════════════════════════════════════════════════════════════════════
IRREGULAR_PLOT_TABLE: Dict[ZoneClassification, Dict[AreaClass, RateTable]] = {
    ZoneClassification.ORDINARY_RESIDENTIAL: {
        AreaClass.A: (
            (10, 1.00),
            (15, 0.98),
            (20, 0.96),
            (25, 0.94),
            (30, 0.92),
            (35, 0.90),
            (40, 0.88),
            (45, 0.85),
            (50, 0.82),
            (55, 0.79),
            (60, 0.76),
            (65, 0.70),
            (INF, 0.60),
        ),
        AreaClass.B: (
            (10, 0.99),
            (15, 0.97),
            (20, 0.95),
            (25, 0.93),
            (30, 0.91),
            (35, 0.89),
            (40, 0.87),
            (45, 0.84),
            (50, 0.81),
            (55, 0.78),
            (60, 0.75),
            (65, 0.69),
            (INF, 0.60),
        ),
        AreaClass.C: (
            (10, 0.98),
            (15, 0.96),
            (20, 0.94),
            (25, 0.92),
            (30, 0.90),
            (35, 0.88),
            (40, 0.86),
            (45, 0.83),
            (50, 0.80),
            (55, 0.77),
            (60, 0.74),
            (65, 0.68),
            (INF, 0.60),
        ),
    },
    ZoneClassification.ORDINARY_COMMERCIAL: {
        AreaClass.A: (
            (10, 0.99),
            (15, 0.97),
            (20, 0.95),
            (25, 0.93),
            (30, 0.91),
            (35, 0.89),
            (40, 0.87),
            (45, 0.85),
            (50, 0.83),
            (55, 0.80),
            (60, 0.78),
            (65, 0.75),
            (INF, 0.70),
        ),
        AreaClass.B: (
            (10, 0.98),
            (15, 0.96),
            (20, 0.94),
            (25, 0.92),
            (30, 0.90),
            (35, 0.88),
            (40, 0.86),
            (45, 0.84),
            (50, 0.81),
            (55, 0.79),
            (60, 0.77),
            (65, 0.74),
            (INF, 0.70),
        ),
        AreaClass.C: (
            (10, 0.97),
            (15, 0.95),
            (20, 0.93),
            (25, 0.91),
            (30, 0.89),
            (35, 0.87),
            (40, 0.85),
            (45, 0.83),
            (50, 0.80),
            (55, 0.78),
            (60, 0.76),
            (65, 0.73),
            (INF, 0.70),
        ),
    },
    ZoneClassification.BUSY_COMMERCIAL: {
        AreaClass.A: (
            (10, 0.98),
            (15, 0.96),
            (20, 0.94),
            (25, 0.92),
            (30, 0.90),
            (35, 0.88),
            (40, 0.86),
            (45, 0.84),
            (50, 0.82),
            (55, 0.80),
            (60, 0.78),
            (65, 0.75),
            (INF, 0.70),
        ),
        AreaClass.B: (
            (10, 0.97),
            (15, 0.95),
            (20, 0.93),
            (25, 0.91),
            (30, 0.89),
            (35, 0.87),
            (40, 0.85),
            (45, 0.83),
            (50, 0.81),
            (55, 0.79),
            (60, 0.77),
            (65, 0.74),
            (INF, 0.70),
        ),
        AreaClass.C: (
            (10, 0.96),
            (15, 0.94),
            (20, 0.92),
            (25, 0.90),
            (30, 0.88),
            (35, 0.86),
            (40, 0.84),
            (45, 0.82),
            (50, 0.80),
            (55, 0.78),
            (60, 0.76),
            (65, 0.73),
            (INF, 0.70),
        ),
    },
    ZoneClassification.HIGH_COMMERCIAL: {
        AreaClass.A: (
            (10, 0.97),
            (15, 0.95),
            (20, 0.93),
            (25, 0.91),
            (30, 0.89),
            (35, 0.87),
            (40, 0.85),
            (45, 0.83),
            (50, 0.80),
            (55, 0.78),
            (60, 0.76),
            (65, 0.74),
            (INF, 0.70),
        ),
        AreaClass.B: (
            (10, 0.96),
            (15, 0.94),
            (20, 0.92),
            (25, 0.90),
            (30, 0.88),
            (35, 0.86),
            (40, 0.84),
            (45, 0.82),
            (50, 0.79),
            (55, 0.77),
            (60, 0.75),
            (65, 0.73),
            (INF, 0.70),
        ),
        AreaClass.C: (
            (10, 0.95),
            (15, 0.93),
            (20, 0.91),
            (25, 0.89),
            (30, 0.87),
            (35, 0.85),
            (40, 0.83),
            (45, 0.81),
            (50, 0.78),
            (55, 0.76),
            (60, 0.74),
            (65, 0.72),
            (INF, 0.70),
        ),
    },
    ZoneClassification.BUILDING_DISTRICT: {
        AreaClass.A: (
            (10, 0.95),
            (15, 0.93),
            (20, 0.91),
            (25, 0.89),
            (30, 0.87),
            (35, 0.85),
            (40, 0.83),
            (45, 0.81),
            (50, 0.79),
            (55, 0.77),
            (60, 0.75),
            (65, 0.73),
            (INF, 0.70),
        ),
        AreaClass.B: (
            (10, 0.94),
            (15, 0.92),
            (20, 0.90),
            (25, 0.88),
            (30, 0.86),
            (35, 0.84),
            (40, 0.82),
            (45, 0.80),
            (50, 0.78),
            (55, 0.76),
            (60, 0.74),
            (65, 0.72),
            (INF, 0.70),
        ),
        AreaClass.C: (
            (10, 0.93),
            (15, 0.91),
            (20, 0.89),
            (25, 0.87),
            (30, 0.85),
            (35, 0.83),
            (40, 0.81),
            (45, 0.79),
            (50, 0.77),
            (55, 0.75),
            (60, 0.73),
            (65, 0.71),
            (INF, 0.70),
        ),
    },
    ZoneClassification.SMALL_FACTORY: {
        AreaClass.A: (
            (10, 1.00),
            (15, 0.98),
            (20, 0.96),
            (25, 0.94),
            (30, 0.92),
            (35, 0.90),
            (40, 0.88),
            (45, 0.85),
            (50, 0.82),
            (55, 0.79),
            (60, 0.76),
            (65, 0.70),
            (INF, 0.60),
        ),
        AreaClass.B: (
            (10, 0.99),
            (15, 0.97),
            (20, 0.95),
            (25, 0.93),
            (30, 0.91),
            (35, 0.89),
            (40, 0.87),
            (45, 0.84),
            (50, 0.81),
            (55, 0.78),
            (60, 0.75),
            (65, 0.69),
            (INF, 0.60),
        ),
        AreaClass.C: (
            (10, 0.98),
            (15, 0.96),
            (20, 0.94),
            (25, 0.92),
            (30, 0.90),
            (35, 0.88),
            (40, 0.86),
            (45, 0.83),
            (50, 0.80),
            (55, 0.77),
            (60, 0.74),
            (65, 0.68),
            (INF, 0.60),
        ),
    },
    ZoneClassification.LARGE_FACTORY: {
        AreaClass.A: (
            (10, 1.00),
            (15, 0.98),
            (20, 0.96),
            (25, 0.94),
            (30, 0.92),
            (35, 0.90),
            (40, 0.88),
            (45, 0.86),
            (50, 0.83),
            (55, 0.80),
            (60, 0.77),
            (65, 0.71),
            (INF, 0.60),
        ),
        AreaClass.B: (
            (10, 0.99),
            (15, 0.97),
            (20, 0.95),
            (25, 0.93),
            (30, 0.91),
            (35, 0.89),
            (40, 0.87),
            (45, 0.85),
            (50, 0.82),
            (55, 0.79),
            (60, 0.76),
            (65, 0.70),
            (INF, 0.60),
        ),
        AreaClass.C: (
            (10, 0.98),
            (15, 0.96),
            (20, 0.94),
            (25, 0.92),
            (30, 0.90),
            (35, 0.88),
            (40, 0.86),
            (45, 0.84),
            (50, 0.81),
            (55, 0.78),
            (60, 0.75),
            (65, 0.69),
            (INF, 0.60),
        ),
    },
}


# ═══════════════════════════════════════════════════════════════════════════
# 間口狭小補正率 (narrow-frontage correction), keyed by frontage in meters
# ═══════════════════════════════════════════════════════════════════════════
NARROW_FRONTAGE_TABLE: Dict[ZoneClassification, RateTable] = {
    ZoneClassification.BUILDING_DISTRICT: (
        (4, 0.85),
        (6, 0.94),
        (8, 1.00),
        (INF, 1.00),
    ),
    ZoneClassification.HIGH_COMMERCIAL: (
        (4, 0.85),
        (6, 0.94),
        (8, 1.00),
        (INF, 1.00),
    ),
    ZoneClassification.BUSY_COMMERCIAL: (
        (4, 0.90),
        (6, 0.97),
        (8, 1.00),
        (INF, 1.00),
    ),
    ZoneClassification.ORDINARY_COMMERCIAL: (
        (4, 0.90),
        (6, 0.97),
        (8, 1.00),
        (INF, 1.00),
    ),
    ZoneClassification.ORDINARY_RESIDENTIAL: (
        (4, 0.90),
        (6, 0.94),
        (8, 0.97),
        (10, 1.00),
        (INF, 1.00),
    ),
    ZoneClassification.SMALL_FACTORY: (
        (4, 0.90),
        (6, 0.94),
        (8, 0.97),
        (10, 1.00),
        (INF, 1.00),
    ),
    ZoneClassification.LARGE_FACTORY: (
        (8, 0.90),
        (10, 0.95),
        (16, 1.00),
        (INF, 1.00),
    ),
}


# ═══════════════════════════════════════════════════════════════════════════
# 奥行長大補正率 (excessive-depth correction), keyed by depth / frontage
# ═══════════════════════════════════════════════════════════════════════════
EXCESSIVE_DEPTH_TABLE: Dict[ZoneClassification, RateTable] = {
    ZoneClassification.BUILDING_DISTRICT: (
        (2, 1.00),
        (3, 0.98),
        (4, 0.96),
        (5, 0.94),
        (6, 0.92),
        (7, 0.90),
        (8, 0.90),
        (INF, 0.90),
    ),
    ZoneClassification.HIGH_COMMERCIAL: (
        (2, 1.00),
        (3, 0.98),
        (4, 0.96),
        (5, 0.94),
        (6, 0.92),
        (7, 0.90),
        (8, 0.90),
        (INF, 0.90),
    ),
    ZoneClassification.BUSY_COMMERCIAL: (
        (2, 1.00),
        (3, 0.98),
        (4, 0.96),
        (5, 0.94),
        (6, 0.92),
        (7, 0.90),
        (8, 0.90),
        (INF, 0.90),
    ),
    ZoneClassification.ORDINARY_COMMERCIAL: (
        (2, 1.00),
        (3, 0.98),
        (4, 0.96),
        (5, 0.94),
        (6, 0.92),
        (7, 0.90),
        (8, 0.90),
        (INF, 0.90),
    ),
    ZoneClassification.ORDINARY_RESIDENTIAL: (
        (2, 1.00),
        (3, 0.98),
        (4, 0.96),
        (5, 0.94),
        (6, 0.92),
        (7, 0.90),
        (8, 0.90),
        (INF, 0.90),
    ),
    ZoneClassification.SMALL_FACTORY: (
        (2, 1.00),
        (3, 0.98),
        (4, 0.96),
        (5, 0.94),
        (6, 0.92),
        (7, 0.90),
        (8, 0.90),
        (INF, 0.90),
    ),
    ZoneClassification.LARGE_FACTORY: (
        (2, 1.00),
        (3, 0.99),
        (4, 0.98),
        (5, 0.96),
        (6, 0.94),
        (7, 0.92),
        (8, 0.90),
        (INF, 0.90),
    ),
}


def _check_complete() -> None:
    """Every zone must have an entry in every table."""
    for zone in ZoneClassification:
        for name, table in (
            ("depth-price", DEPTH_PRICE_TABLE),
            ("area-class", AREA_CLASS_THRESHOLDS),
            ("irregular-plot", IRREGULAR_PLOT_TABLE),
            ("narrow-frontage", NARROW_FRONTAGE_TABLE),
            ("excessive-depth", EXCESSIVE_DEPTH_TABLE),
        ):
            if zone not in table:
                raise RuntimeError(f"{name} table has no entry for {zone.value}")
        for cls in AreaClass:
            if cls not in IRREGULAR_PLOT_TABLE[zone]:
                raise RuntimeError(
                    f"irregular-plot table has no class {cls.value} for {zone.value}"
                )


_check_complete()


# ═══════════════════════════════════════════════════════════════════════════
# LOOKUPS
# ═══════════════════════════════════════════════════════════════════════════
def lookup_rate(table: Sequence[Bucket], value: float) -> float:
    """First bucket whose exclusive upper bound exceeds the value wins."""
    for upper_bound, rate in table:
        if value < upper_bound:
            return rate
    return table[-1][1]


def depth_price_rate(zone: ZoneClassification, depth: float) -> float:
    """奥行価格補正率 for a (calculated) depth in meters."""
    return lookup_rate(DEPTH_PRICE_TABLE[zone], depth)


def area_class(zone: ZoneClassification, area: float) -> AreaClass:
    """地積区分 of a parcel area in ㎡."""
    threshold_a, threshold_b = AREA_CLASS_THRESHOLDS[zone]
    if area < threshold_a:
        return AreaClass.A
    if area < threshold_b:
        return AreaClass.B
    return AreaClass.C


def irregular_plot_rate(zone: ZoneClassification, area: float, kage_chi_percent: float) -> float:
    """不整形地補正率 from the area class and the かげ地割合."""
    table = IRREGULAR_PLOT_TABLE[zone][area_class(zone, area)]
    return lookup_rate(table, kage_chi_percent)


def narrow_frontage_rate(zone: ZoneClassification, frontage: float) -> float:
    """間口狭小補正率 for a frontage in meters."""
    return lookup_rate(NARROW_FRONTAGE_TABLE[zone], frontage)


def excessive_depth_rate(zone: ZoneClassification, depth: float, frontage: float) -> float:
    """
    奥行長大補正率 keyed by depth / frontage.

    A zero frontage means no correction (1.00) rather than a division error.
    """
    if frontage == 0:
        return 1.00
    return lookup_rate(EXCESSIVE_DEPTH_TABLE[zone], depth / frontage)


def table_rows(table: Sequence[Bucket]) -> List[Dict[str, float]]:
    """
    Buckets as display rows with explicit lower bounds.

    Example: ((4, 0.90), (6, 0.92)) -> [{'from': 0, 'below': 4, 'rate': 0.90}, ...]
    """
    rows = []
    lower = 0.0
    for upper_bound, rate in table:
        rows.append({"from": lower, "below": upper_bound, "rate": rate})
        lower = upper_bound
    return rows
