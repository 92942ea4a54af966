"""
Debris growth forecasts.

Two independent, illustrative models:

- `project`: total object count from a fixed 2000 baseline with growth rates
  that step up at historical marker events, split into large/small debris,
  with expected collision events and a risk level.
- `project_categories`: per-category ten-year forecast seeded from the live
  counts, with fixed annual rates and a density-driven collision risk
  percentage.

Both are pure functions of their arguments.
"""

import math
from dataclasses import asdict, dataclass
from enum import Enum
from functools import total_ordering
from typing import List, Mapping, Optional, Sequence

import pandas as pd

from debris_tracker.simulation.objects import ObjectCategory
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("forecast")

BASE_YEAR = 2000
BASELINE_COUNT = 20
BASE_GROWTH_RATE = 1.05

LARGE_DEBRIS_FRACTION = 0.3
COLLISION_DOUBLING_YEAR = 2009


@total_ordering
class RiskLevel(Enum):
    """Risk classification, ordered by severity."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def severity(self) -> int:
        return _RISK_SEVERITY[self]

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity < other.severity


_RISK_SEVERITY = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}

# Upper bound (inclusive) of total count for each level below CRITICAL
RISK_THRESHOLDS = [
    (500, RiskLevel.LOW),
    (1500, RiskLevel.MEDIUM),
    (3000, RiskLevel.HIGH),
]


@dataclass(frozen=True)
class RegimeBreakpoint:
    """Growth rate that applies from `first_year` onward."""
    first_year: int
    rate: float
    label: str
    marked: bool = True


GROWTH_REGIMES: List[RegimeBreakpoint] = [
    RegimeBreakpoint(2007, 1.08, "Chinese ASAT"),
    RegimeBreakpoint(2009, 1.12, "Cosmos-Iridium"),
    RegimeBreakpoint(2020, 1.15, "Mega-constellations"),
    RegimeBreakpoint(2025, 1.18, "Projected acceleration", marked=False),
]

CATEGORY_GROWTH_RATES = {
    ObjectCategory.SATELLITE: 1.15,
    ObjectCategory.DEBRIS: 1.08,
    ObjectCategory.ROCKET_BODY: 1.12,
}

COLLISION_RISK_CAP = 95.0


@dataclass(frozen=True)
class ProjectionPoint:
    """One year of the growth projection."""
    year: int
    total: int
    large_debris: int
    small_debris: int
    collision_events: int
    risk_level: RiskLevel


@dataclass(frozen=True)
class CategoryForecastPoint:
    """One year of the per-category forecast."""
    year: int
    total_objects: int
    debris: int
    active_satellites: int
    rocket_bodies: int
    collision_risk: float


@dataclass(frozen=True)
class ProjectionSummary:
    """Headline numbers for the predictions panel."""
    final_year: int
    final_total: int
    final_large_debris: int
    final_risk_level: RiskLevel
    growth_percent: Optional[float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return int(math.floor(value + 0.5))


def growth_rate(year: int, regimes: Sequence[RegimeBreakpoint] = GROWTH_REGIMES) -> float:
    """Annual growth factor in effect for `year`."""
    rate = BASE_GROWTH_RATE
    for regime in regimes:
        if year >= regime.first_year:
            rate = regime.rate
    return rate


def classify_risk(total: int) -> RiskLevel:
    """
    Risk level for a total object count.

    Example:
        >>> classify_risk(500)
        <RiskLevel.LOW: 'Low'>
        >>> classify_risk(501)
        <RiskLevel.MEDIUM: 'Medium'>
    """
    for upper_bound, level in RISK_THRESHOLDS:
        if total <= upper_bound:
            return level
    return RiskLevel.CRITICAL


def project_year(
    year: int,
    baseline_count: int = BASELINE_COUNT,
    regimes: Sequence[RegimeBreakpoint] = GROWTH_REGIMES,
) -> ProjectionPoint:
    """Projection for a single year."""
    total = round_half_up(baseline_count * growth_rate(year, regimes) ** (year - BASE_YEAR))
    large = round_half_up(total * LARGE_DEBRIS_FRACTION)
    multiplier = 2 if year >= COLLISION_DOUBLING_YEAR else 1
    collisions = max(0, round_half_up((total / 1000) * multiplier))

    return ProjectionPoint(
        year=year,
        total=total,
        large_debris=large,
        small_debris=total - large,
        collision_events=collisions,
        risk_level=classify_risk(total),
    )


def project(
    start_year: int = 2000,
    end_year: int = 2028,
    baseline_count: int = BASELINE_COUNT,
    regimes: Sequence[RegimeBreakpoint] = GROWTH_REGIMES,
) -> List[ProjectionPoint]:
    """
    Year-by-year growth projection, both ends inclusive.

    Each year's total is `baseline · rate^(year - 2000)` using the rate of
    the regime active in that year, so a regime change re-bases the whole
    curve rather than compounding from the previous year.

    Args:
        start_year: First year
        end_year: Last year (an empty list if before start_year)
        baseline_count: Object count in 2000
        regimes: Growth-rate breakpoints

    Returns:
        One ProjectionPoint per year

    Example:
        >>> points = project(2000, 2001)
        >>> points[-1].total, points[-1].large_debris, points[-1].risk_level.value
        (21, 6, 'Low')
    """
    points = [project_year(year, baseline_count, regimes) for year in range(start_year, end_year + 1)]
    logger.debug(f"Projected {len(points)} years from {start_year} (baseline {baseline_count})")
    return points


def collision_risk_percent(year_offset: int) -> float:
    """Collision risk percentage `year_offset` years into the category forecast."""
    density_factor = 1.1 ** year_offset
    return min(COLLISION_RISK_CAP, 15 + year_offset * 3 + density_factor * 2)


def project_categories(
    counts: Mapping[ObjectCategory, int],
    start_year: int = 2024,
    years: int = 10,
) -> List[CategoryForecastPoint]:
    """
    Per-category forecast from live counts.

    Satellites grow 15 %, debris 8 % and rocket bodies 12 % a year from the
    counts observed now; unknown objects are left out.

    Args:
        counts: Current objects per category (missing categories count as 0)
        start_year: Year of the observed counts
        years: How many years past `start_year` to forecast

    Returns:
        `years + 1` points, starting at `start_year`
    """
    satellites_now = counts.get(ObjectCategory.SATELLITE, 0)
    debris_now = counts.get(ObjectCategory.DEBRIS, 0)
    rockets_now = counts.get(ObjectCategory.ROCKET_BODY, 0)

    points = []
    for offset in range(years + 1):
        satellites = round_half_up(satellites_now * CATEGORY_GROWTH_RATES[ObjectCategory.SATELLITE] ** offset)
        debris = round_half_up(debris_now * CATEGORY_GROWTH_RATES[ObjectCategory.DEBRIS] ** offset)
        rockets = round_half_up(rockets_now * CATEGORY_GROWTH_RATES[ObjectCategory.ROCKET_BODY] ** offset)
        points.append(CategoryForecastPoint(
            year=start_year + offset,
            total_objects=satellites + debris + rockets,
            debris=debris,
            active_satellites=satellites,
            rocket_bodies=rockets,
            collision_risk=collision_risk_percent(offset),
        ))

    return points


def summarize(points: Sequence[ProjectionPoint]) -> Optional[ProjectionSummary]:
    """Final-year figures and growth since the first year; None if empty."""
    if not points:
        return None
    first, last = points[0], points[-1]
    growth = (last.total / first.total - 1) * 100 if first.total else None
    return ProjectionSummary(
        final_year=last.year,
        final_total=last.total,
        final_large_debris=last.large_debris,
        final_risk_level=last.risk_level,
        growth_percent=growth,
    )


def marker_events(start_year: int, end_year: int, regimes: Sequence[RegimeBreakpoint] = GROWTH_REGIMES) -> List[RegimeBreakpoint]:
    """Regime changes worth annotating on a chart covering the given years."""
    return [r for r in regimes if r.marked and start_year <= r.first_year <= end_year]


def to_dataframe(points: Sequence) -> pd.DataFrame:
    """
    Tabulate projection or category-forecast points for a charting sink.

    Enum values are flattened to their display strings and rows are indexed
    by year.
    """
    rows = []
    for point in points:
        row = asdict(point)
        for key, value in row.items():
            if isinstance(value, Enum):
                row[key] = value.value
        rows.append(row)

    df = pd.DataFrame(rows)
    if not df.empty:
        df = df.set_index("year")
    return df
