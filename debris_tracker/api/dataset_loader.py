"""
DatasetLoader — fetches record batches and commits them to the controller.

Fetching runs in a worker thread so the tick loop keeps going. Any network
failure, bad status or timeout is answered with a synthetic dataset for the
same source plus a warning; it never raises into the caller. Refreshes are
numbered and only the newest one may commit.

The analysis groups are loaded separately and never reach the map: each is
cut to its first ANALYSIS_GROUP_LIMIT records and summarized.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import requests

from debris_tracker.simulation.classifier import (
    DISPLAY_TOTAL_LIMIT,
    RecordClassifier,
    category_counts,
    select_display_set,
)
from debris_tracker.simulation.controller import SimulationController
from debris_tracker.simulation.objects import ObjectCategory, TrackedObject
from debris_tracker.simulation.tle_loader import (
    TLE,
    DataSource,
    TLELoader,
    get_statistics,
    split_records,
)

logger = logging.getLogger(__name__)

_RECENT_CATEGORIES = [ObjectCategory.SATELLITE, ObjectCategory.DEBRIS, ObjectCategory.ROCKET_BODY]
_RECENT_COUNTRIES = ["USA", "China", "Russia", "India", "Japan", "ESA"]

# Object counts for the synthetic stand-ins of the analysis groups
_SAMPLE_COUNTS = {
    DataSource.ACTIVE: 35,
    DataSource.IRIDIUM: 18,
    DataSource.WEATHER: 15,
    DataSource.RESOURCE: 22,
    DataSource.GEO: 28,
}

ANALYSIS_SOURCES: Tuple[DataSource, ...] = tuple(_SAMPLE_COUNTS)
ANALYSIS_GROUP_LIMIT = 40


@dataclass(frozen=True)
class LoadResult:
    """
    Outcome of one refresh request.

    `objects` is the display set; `counts` and `statistics` describe every
    classified record of the batch, before the display caps.
    """
    request_id: int
    source: DataSource
    objects: Tuple[TrackedObject, ...]
    synthetic: bool
    warning: Optional[str]
    catalog_size: int
    committed: bool
    generation: Optional[int] = None
    counts: Dict[ObjectCategory, int] = field(default_factory=dict)
    statistics: Dict = field(default_factory=dict)


@dataclass(frozen=True)
class GroupStats:
    """Summary of one analysis group."""
    source: DataSource
    count: int
    avg_inclination_deg: float
    avg_altitude_km: float
    counts: Dict[ObjectCategory, int]
    synthetic: bool
    warning: Optional[str] = None


def _synthetic_tle(name: str, catalog_id: int, i: int) -> TLE:
    """Deterministic element lines in low Earth orbit."""
    inclination = (i * 37.0) % 180
    raan = (i * 53.0) % 360
    arg_perigee = (i * 71.0) % 360
    mean_anomaly = (i * 97.0) % 360
    mean_motion = 14.0 + (i % 20) / 10.0
    line1 = f"1 {catalog_id:05d}U 24001A   24001.50000000  .00000000  00000-0  00000-0 0  9999"
    line2 = (
        f"2 {catalog_id:05d} {inclination:8.4f} {raan:8.4f} 0001000 "
        f"{arg_perigee:8.4f} {mean_anomaly:8.4f} {mean_motion:11.8f}{i:5d}"
    )
    return TLE.from_lines(name, line1, line2)


def generate_synthetic(source: DataSource) -> List[TrackedObject]:
    """
    Deterministic stand-in objects for a source.

    None carry an element handle, so they move on the analytic fallback
    path. The analysis groups get element lines for their statistics.
    """
    objects = []

    if source is DataSource.COSMOS:
        for i in range(1, 13):
            objects.append(TrackedObject(
                name=f"COSMOS 2251 DEB {i}",
                catalog_id=int(f"4000{i}"),
                category=ObjectCategory.DEBRIS,
                epoch_year=2009,
                country="Russia",
            ))
    elif source is DataSource.RECENT:
        for i in range(1, 19):
            category = _RECENT_CATEGORIES[i % len(_RECENT_CATEGORIES)]
            objects.append(TrackedObject(
                name=f"SIMULATED {category.value.upper()} {i}",
                catalog_id=int(f"5000{i}"),
                category=category,
                epoch_year=2024,
                country=_RECENT_COUNTRIES[i % len(_RECENT_COUNTRIES)],
            ))
    else:
        category = ObjectCategory.DEBRIS if "Debris" in source.label else ObjectCategory.SATELLITE
        for i in range(1, _SAMPLE_COUNTS.get(source, 15) + 1):
            name = f"{source.label.upper()} {i}"
            objects.append(TrackedObject(
                name=name,
                catalog_id=40000 + i,
                category=category,
                epoch_year=2024,
                tle=_synthetic_tle(name, 40000 + i, i),
            ))

    return objects


def summarize_group(
    source: DataSource,
    objects: Sequence[TrackedObject],
    synthetic: bool = False,
    warning: Optional[str] = None,
) -> GroupStats:
    """Count, category breakdown and element averages for one group."""
    stats = get_statistics(obj.tle for obj in objects if obj.tle is not None)
    return GroupStats(
        source=source,
        count=len(objects),
        avg_inclination_deg=stats["avg_inclination_deg"],
        avg_altitude_km=stats["avg_altitude_km"],
        counts=category_counts(objects),
        synthetic=synthetic,
        warning=warning,
    )


def combined_counts(groups: Iterable[GroupStats]) -> Dict[ObjectCategory, int]:
    """Category counts summed over groups."""
    totals = {category: 0 for category in ObjectCategory}
    for group in groups:
        for category, n in group.counts.items():
            totals[category] += n
    return totals


def load_group(
    source: DataSource,
    tle_loader: TLELoader,
    classifier: RecordClassifier,
    offline: bool = False,
    limit: int = ANALYSIS_GROUP_LIMIT,
) -> GroupStats:
    """
    Fetch and summarize one analysis group, blocking.

    A failed fetch falls back to the group's synthetic stand-in.
    """
    if offline:
        return summarize_group(source, generate_synthetic(source)[:limit], synthetic=True,
                               warning=f"Offline mode: using simulated data for {source.label}.")

    try:
        text = tle_loader.fetch_text(source)
    except requests.RequestException as e:
        logger.warning("Failed to load %s: %s", source.label, e)
        return summarize_group(source, generate_synthetic(source)[:limit], synthetic=True,
                               warning=f"Unable to fetch {source.label} ({e}). Using simulated data.")

    objects = classifier.classify_all(split_records(text)[:limit])
    return summarize_group(source, objects)


class DatasetLoader:
    """Loads object sets for the controller, one refresh at a time winning."""

    def __init__(
        self,
        controller: SimulationController,
        classifier: RecordClassifier,
        tle_loader: Optional[TLELoader] = None,
        offline: bool = False,
        max_objects: int = DISPLAY_TOTAL_LIMIT,
    ):
        self.controller = controller
        self.classifier = classifier
        self.tle_loader = tle_loader or TLELoader()
        self.offline = offline
        self.max_objects = max_objects
        self.last_result: Optional[LoadResult] = None
        self.last_analysis: Optional[List[GroupStats]] = None
        self._latest_request = 0

    async def refresh(self, source: DataSource) -> LoadResult:
        """
        Load `source` and commit it unless a newer refresh was requested
        while this one was in flight.
        """
        self._latest_request += 1
        request_id = self._latest_request

        objects, classified, synthetic, warning = await self._load(source)
        counts = category_counts(classified)
        statistics = get_statistics(obj.tle for obj in classified if obj.tle is not None)

        if request_id != self._latest_request:
            logger.info("Refresh %d (%s) superseded by %d, discarding",
                        request_id, source.value, self._latest_request)
            return LoadResult(request_id, source, tuple(objects), synthetic, warning,
                              len(classified), committed=False, counts=counts, statistics=statistics)

        generation = self.controller.replace_dataset(objects)
        result = LoadResult(request_id, source, self.controller.objects, synthetic, warning,
                            len(classified), committed=True, generation=generation,
                            counts=counts, statistics=statistics)
        self.last_result = result

        if warning:
            logger.warning(warning)
        logger.info("Loaded %d objects from %s (generation %d%s)",
                    len(result.objects), source.value, generation,
                    ", synthetic" if synthetic else "")
        return result

    def observed_counts(self) -> Dict[ObjectCategory, int]:
        """Category counts of the whole committed batch, or of the display set before any load."""
        if self.last_result is not None:
            return dict(self.last_result.counts)
        return self.controller.counts()

    async def analyze_groups(self, sources: Sequence[DataSource] = ANALYSIS_SOURCES) -> List[GroupStats]:
        """Load and summarize every analysis group; the map is left alone."""
        groups = []
        for source in sources:
            groups.append(await asyncio.to_thread(
                load_group, source, self.tle_loader, self.classifier, self.offline
            ))
        self.last_analysis = groups
        logger.info("Analyzed %d groups, %d objects",
                    len(groups), sum(group.count for group in groups))
        return groups

    async def get_analysis(self, refresh: bool = False) -> List[GroupStats]:
        if refresh or self.last_analysis is None:
            return await self.analyze_groups()
        return self.last_analysis

    async def _load(
        self, source: DataSource
    ) -> Tuple[List[TrackedObject], List[TrackedObject], bool, Optional[str]]:
        """Returns (display set, every classified object, synthetic, warning)."""
        if self.offline:
            catalog = generate_synthetic(source)
            warning = f"Offline mode: using simulated data for {source.label}."
            return catalog[:self.max_objects], catalog, True, warning

        try:
            text = await asyncio.to_thread(self.tle_loader.fetch_text, source)
        except requests.RequestException as e:
            catalog = generate_synthetic(source)
            warning = (f"Unable to fetch live TLE data from {source.label} ({e}). "
                       "Using simulated data for demonstration.")
            return catalog[:self.max_objects], catalog, True, warning

        classified = await asyncio.to_thread(self.classifier.parse_records, text)
        displayed = select_display_set(classified, self.max_objects)

        if not displayed:
            catalog = generate_synthetic(source)
            warning = (f"No displayable records in {source.label} "
                       f"({len(classified)} classified). Using simulated data for demonstration.")
            return catalog[:self.max_objects], catalog, True, warning

        return displayed, classified, False, None
