"""
Tests for DatasetLoader — live fetch, synthetic fallback and refresh ordering.
"""

import asyncio
import time

import pytest
import requests

from debris_tracker.api.dataset_loader import (
    ANALYSIS_GROUP_LIMIT,
    ANALYSIS_SOURCES,
    DatasetLoader,
    combined_counts,
    generate_synthetic,
)
from debris_tracker.forecast.projection import project_categories
from debris_tracker.simulation.classifier import RecordClassifier
from debris_tracker.simulation.controller import SimulationController
from debris_tracker.simulation.objects import ObjectCategory
from debris_tracker.simulation.orbital_mechanics import PositionPropagator
from debris_tracker.simulation.tle_loader import DataSource, get_statistics


def record_text(entries):
    lines = []
    for name, catalog_id in entries:
        lines.append(name)
        lines.append(f"1 {catalog_id:05d}U 98067A   24020.93268519  .00009878  00000-0  18200-3 0  5082")
        lines.append(f"2 {catalog_id:05d}  51.6498 109.4756 0003572  55.9686 274.8005 15.49815350868473")
    return "\n".join(lines)


LIVE_TEXT = record_text([
    ("COSMOS 2251 DEB", 34427),
    ("FALCON 9 R/B", 48275),
    ("STARLINK-2305", 48276),
    ("ISS (ZARYA)", 25544),
])


class FakeTLELoader:
    """Stands in for TLELoader; responses and delays keyed by source."""

    def __init__(self, texts=None, errors=None, delays=None):
        self.texts = texts or {}
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls = []

    def fetch_text(self, source):
        self.calls.append(source)
        time.sleep(self.delays.get(source, 0))
        if source in self.errors:
            raise self.errors[source]
        return self.texts.get(source, "")


def make_loader(tle_loader, **kwargs):
    controller = SimulationController(PositionPropagator(None))
    return DatasetLoader(controller, RecordClassifier(), tle_loader, **kwargs)


class TestSyntheticData:
    """Test the synthetic stand-in datasets."""

    def test_cosmos(self):
        objects = generate_synthetic(DataSource.COSMOS)
        assert len(objects) == 12
        assert all(o.category is ObjectCategory.DEBRIS for o in objects)
        assert objects[0].name == "COSMOS 2251 DEB 1"
        assert objects[0].country == "Russia"

    def test_recent_mixes_categories(self):
        objects = generate_synthetic(DataSource.RECENT)
        assert len(objects) == 18
        assert {o.category for o in objects} == {
            ObjectCategory.SATELLITE, ObjectCategory.DEBRIS, ObjectCategory.ROCKET_BODY
        }
        assert objects[0].name == "SIMULATED DEBRIS 1"

    def test_iridium_is_debris(self):
        objects = generate_synthetic(DataSource.IRIDIUM)
        assert all(o.category is ObjectCategory.DEBRIS for o in objects)

    def test_unique_ids_and_no_elements(self):
        for source in DataSource:
            objects = generate_synthetic(source)
            assert len({o.catalog_id for o in objects}) == len(objects)
            assert not any(o.has_elements for o in objects)

    def test_deterministic(self):
        assert generate_synthetic(DataSource.GEO) == generate_synthetic(DataSource.GEO)

    def test_analysis_groups_have_element_lines(self):
        objects = generate_synthetic(DataSource.GEO)
        assert all(o.tle is not None and o.tle.catalog_number == o.catalog_id for o in objects)
        stats = get_statistics(o.tle for o in objects)
        assert 0 < stats["avg_inclination_deg"] < 180
        assert 300 < stats["avg_altitude_km"] < 1000


@pytest.mark.asyncio
class TestRefresh:
    """Test refresh outcomes."""

    async def test_live_fetch(self):
        loader = make_loader(FakeTLELoader(texts={DataSource.RECENT: LIVE_TEXT}))

        result = await loader.refresh(DataSource.RECENT)

        assert result.committed
        assert not result.synthetic
        assert result.warning is None
        assert result.catalog_size == 4
        # Display order: debris, satellites, rocket bodies; unknown left out
        assert [o.catalog_id for o in result.objects] == [34427, 48276, 48275]
        assert loader.controller.objects == result.objects
        assert loader.last_result is result

    async def test_network_failure_falls_back(self):
        fake = FakeTLELoader(errors={DataSource.COSMOS: requests.ConnectionError("no route to host")})
        loader = make_loader(fake)

        result = await loader.refresh(DataSource.COSMOS)

        assert result.committed
        assert result.synthetic
        assert "COSMOS 2251 Debris" in result.warning
        assert "simulated data" in result.warning
        assert len(loader.controller.objects) == 12

    async def test_http_error_falls_back(self):
        fake = FakeTLELoader(errors={DataSource.WEATHER: requests.HTTPError("503 Server Error")})
        result = await make_loader(fake).refresh(DataSource.WEATHER)
        assert result.synthetic
        assert result.generation == 1

    async def test_timeout_falls_back(self):
        fake = FakeTLELoader(errors={DataSource.ACTIVE: requests.Timeout("read timed out")})
        result = await make_loader(fake).refresh(DataSource.ACTIVE)
        assert result.synthetic
        assert len(result.objects) == 25

    async def test_nothing_displayable_falls_back(self):
        text = record_text([("ISS (ZARYA)", 25544)])
        result = await make_loader(FakeTLELoader(texts={DataSource.RECENT: text})).refresh(DataSource.RECENT)
        assert result.synthetic
        assert result.warning

    async def test_offline_never_fetches(self):
        fake = FakeTLELoader(texts={DataSource.RECENT: LIVE_TEXT})
        loader = make_loader(fake, offline=True)

        result = await loader.refresh(DataSource.RECENT)

        assert fake.calls == []
        assert result.synthetic
        assert "Offline" in result.warning

    async def test_max_objects(self):
        loader = make_loader(FakeTLELoader(), offline=True, max_objects=5)
        result = await loader.refresh(DataSource.GEO)
        assert len(result.objects) == 5

    async def test_newer_refresh_wins(self):
        fake = FakeTLELoader(
            texts={DataSource.RECENT: LIVE_TEXT},
            errors={DataSource.COSMOS: requests.ConnectionError("slow and failed")},
            delays={DataSource.COSMOS: 0.3},
        )
        loader = make_loader(fake)

        slow = asyncio.create_task(loader.refresh(DataSource.COSMOS))
        await asyncio.sleep(0.05)
        fast = await loader.refresh(DataSource.RECENT)
        stale = await slow

        assert fast.committed
        assert not stale.committed
        assert stale.generation is None
        assert loader.controller.generation == 1
        assert loader.controller.objects == fast.objects
        assert loader.last_result is fast

    async def test_counts_cover_every_classified_record(self):
        """The forecast seed is the whole batch, not the capped map set."""
        text = record_text(
            [(f"STARLINK-{i}", 44000 + i) for i in range(100)]
            + [(f"FENGYUN 1C DEB {i}", 30000 + i) for i in range(40)]
        )
        loader = make_loader(FakeTLELoader(texts={DataSource.ACTIVE: text}))

        result = await loader.refresh(DataSource.ACTIVE)

        assert len(result.objects) == 22
        assert result.catalog_size == 140
        assert result.counts[ObjectCategory.SATELLITE] == 100
        assert result.counts[ObjectCategory.DEBRIS] == 40
        assert result.statistics["count"] == 140
        assert result.statistics["avg_inclination_deg"] == pytest.approx(51.6498)

        seed = loader.observed_counts()
        assert seed == result.counts
        assert project_categories(seed)[0].total_objects == 140

    async def test_synthetic_counts_cover_whole_stand_in(self):
        loader = make_loader(FakeTLELoader(), offline=True)
        result = await loader.refresh(DataSource.ACTIVE)
        assert len(result.objects) == 25
        assert result.catalog_size == 35
        assert loader.observed_counts()[ObjectCategory.SATELLITE] == 35

    async def test_observed_counts_before_any_load(self):
        loader = make_loader(FakeTLELoader())
        assert loader.observed_counts() == {category: 0 for category in ObjectCategory}


@pytest.mark.asyncio
class TestGroupAnalysis:
    """Test the per-group analysis path."""

    async def test_offline_uses_stand_ins(self):
        fake = FakeTLELoader()
        loader = make_loader(fake, offline=True)

        groups = await loader.analyze_groups()

        assert fake.calls == []
        assert [g.source for g in groups] == list(ANALYSIS_SOURCES)
        assert [g.count for g in groups] == [35, 18, 15, 22, 28]
        assert all(g.synthetic and g.warning for g in groups)
        assert all(g.avg_altitude_km > 0 for g in groups)
        assert groups[1].counts[ObjectCategory.DEBRIS] == 18

        totals = combined_counts(groups)
        assert totals[ObjectCategory.DEBRIS] == 18
        assert totals[ObjectCategory.SATELLITE] == 100

        # The map is untouched
        assert loader.controller.generation == 0
        assert loader.last_analysis is groups

    async def test_live_group_capped_and_failures_isolated(self):
        text = record_text([(f"STARLINK-{i}", 44000 + i) for i in range(60)])
        fake = FakeTLELoader(
            texts={DataSource.ACTIVE: text},
            errors={DataSource.GEO: requests.ConnectionError("refused")},
        )
        loader = make_loader(fake)

        groups = {g.source: g for g in await loader.analyze_groups()}

        active = groups[DataSource.ACTIVE]
        assert active.count == ANALYSIS_GROUP_LIMIT
        assert not active.synthetic
        assert active.counts[ObjectCategory.SATELLITE] == ANALYSIS_GROUP_LIMIT
        assert active.avg_inclination_deg == pytest.approx(51.6498)

        geo = groups[DataSource.GEO]
        assert geo.synthetic
        assert geo.count == 28
        assert "Communication Sats" in geo.warning

        # An empty feed is summarized as an empty group
        assert groups[DataSource.WEATHER].count == 0
        assert not groups[DataSource.WEATHER].synthetic

    async def test_get_analysis_is_cached(self):
        fake = FakeTLELoader()
        loader = make_loader(fake)

        first = await loader.get_analysis()
        calls = len(fake.calls)
        second = await loader.get_analysis()
        assert second is first
        assert len(fake.calls) == calls

        await loader.get_analysis(refresh=True)
        assert len(fake.calls) == 2 * calls
