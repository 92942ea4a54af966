"""
Unit tests for the debris growth forecasts.
"""

import pytest

from debris_tracker.forecast.projection import (
    GROWTH_REGIMES,
    RiskLevel,
    classify_risk,
    collision_risk_percent,
    growth_rate,
    marker_events,
    project,
    project_categories,
    project_year,
    round_half_up,
    summarize,
    to_dataframe,
)
from debris_tracker.simulation.objects import ObjectCategory


class TestGrowthRate:
    """Test regime-dependent growth rates."""

    @pytest.mark.parametrize("year,rate", [
        (2000, 1.05),
        (2006, 1.05),
        (2007, 1.08),
        (2008, 1.08),
        (2009, 1.12),
        (2019, 1.12),
        (2020, 1.15),
        (2024, 1.15),
        (2025, 1.18),
        (2040, 1.18),
    ])
    def test_rate_by_year(self, year, rate):
        assert growth_rate(year) == rate


class TestRiskClassification:
    """Test risk thresholds."""

    @pytest.mark.parametrize("total,level", [
        (0, RiskLevel.LOW),
        (500, RiskLevel.LOW),
        (501, RiskLevel.MEDIUM),
        (1500, RiskLevel.MEDIUM),
        (1501, RiskLevel.HIGH),
        (3000, RiskLevel.HIGH),
        (3001, RiskLevel.CRITICAL),
    ])
    def test_boundaries(self, total, level):
        assert classify_risk(total) is level

    def test_ordering(self):
        assert RiskLevel.LOW < RiskLevel.MEDIUM < RiskLevel.HIGH < RiskLevel.CRITICAL
        assert max([RiskLevel.HIGH, RiskLevel.LOW]) is RiskLevel.HIGH


class TestProjection:
    """Test the year-by-year growth projection."""

    def test_base_year(self):
        point = project_year(2000)
        assert point.total == 20
        assert point.large_debris == 6
        assert point.small_debris == 14

    def test_first_year_scenario(self):
        point = project(2000, 2001)[-1]
        assert point.year == 2001
        assert point.total == 21
        assert point.large_debris == 6
        assert point.small_debris == 15
        assert point.collision_events == 0
        assert point.risk_level is RiskLevel.LOW

    def test_inclusive_range(self):
        points = project(2000, 2028)
        assert len(points) == 29
        assert points[0].year == 2000
        assert points[-1].year == 2028

    def test_empty_when_reversed(self):
        assert project(2010, 2005) == []

    def test_monotonic_over_default_range(self):
        totals = [p.total for p in project(2000, 2028)]
        assert totals == sorted(totals)

    def test_parts_add_up(self):
        for point in project(2000, 2028):
            assert point.large_debris + point.small_debris == point.total
            assert point.collision_events >= 0
            assert point.risk_level is classify_risk(point.total)

    def test_collision_doubling_after_2009(self):
        before = project_year(2008, baseline_count=100_000)
        after = project_year(2009, baseline_count=100_000)
        assert before.collision_events == round_half_up(before.total / 1000)
        assert after.collision_events == round_half_up(after.total / 1000 * 2)

    def test_custom_baseline_scales(self):
        assert project_year(2000, baseline_count=40).total == 40

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


class TestMarkers:
    """Test marker events."""

    def test_marked_regimes_in_range(self):
        markers = marker_events(2000, 2028)
        assert [m.first_year for m in markers] == [2007, 2009, 2020]
        assert markers[0].label == "Chinese ASAT"

    def test_out_of_range(self):
        assert marker_events(2010, 2019) == []

    def test_regimes_sorted(self):
        years = [r.first_year for r in GROWTH_REGIMES]
        assert years == sorted(years)


class TestSummary:
    """Test projection summaries."""

    def test_summarize(self):
        points = project(2000, 2028)
        summary = summarize(points)
        assert summary.final_year == 2028
        assert summary.final_total == points[-1].total
        assert summary.final_risk_level is points[-1].risk_level
        assert summary.growth_percent == pytest.approx((points[-1].total / 20 - 1) * 100)

    def test_summarize_empty(self):
        assert summarize([]) is None

    def test_zero_baseline_has_no_growth_percent(self):
        assert summarize(project(2000, 2005, baseline_count=0)).growth_percent is None


class TestCategoryForecast:
    """Test the per-category forecast."""

    COUNTS = {
        ObjectCategory.SATELLITE: 20,
        ObjectCategory.DEBRIS: 12,
        ObjectCategory.ROCKET_BODY: 6,
        ObjectCategory.UNKNOWN: 50,
    }

    def test_length_and_years(self):
        points = project_categories(self.COUNTS)
        assert len(points) == 11
        assert points[0].year == 2024
        assert points[-1].year == 2034

    def test_first_point_is_observed(self):
        point = project_categories(self.COUNTS)[0]
        assert point.active_satellites == 20
        assert point.debris == 12
        assert point.rocket_bodies == 6
        # Unknown objects are not forecast
        assert point.total_objects == 38
        assert point.collision_risk == pytest.approx(17.0)

    def test_one_year_out(self):
        point = project_categories(self.COUNTS)[1]
        assert point.active_satellites == 23
        assert point.debris == 13
        assert point.rocket_bodies == 7
        assert point.total_objects == 43
        assert point.collision_risk == pytest.approx(20.2)

    def test_missing_categories_count_zero(self):
        points = project_categories({ObjectCategory.DEBRIS: 10}, years=3)
        assert all(p.active_satellites == 0 and p.rocket_bodies == 0 for p in points)

    def test_collision_risk_capped(self):
        assert collision_risk_percent(10) == pytest.approx(15 + 30 + 2 * 1.1 ** 10)
        assert collision_risk_percent(40) == 95.0


class TestDataFrame:
    """Test tabulation for charting."""

    def test_projection_frame(self):
        df = to_dataframe(project(2000, 2002))
        assert list(df.index) == [2000, 2001, 2002]
        assert df.loc[2001, "total"] == 21
        assert df.loc[2001, "risk_level"] == "Low"

    def test_category_frame(self):
        df = to_dataframe(project_categories({ObjectCategory.DEBRIS: 5}, years=2))
        assert "collision_risk" in df.columns
        assert len(df) == 3

    def test_empty(self):
        assert to_dataframe([]).empty
