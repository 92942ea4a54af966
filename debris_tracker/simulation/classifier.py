"""
Record classification: raw three-line records → TrackedObject.

Category comes from an ordered list of name-substring rules (first match
wins). Records whose fixed-offset fields cannot be read are skipped.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from debris_tracker.simulation.objects import ObjectCategory, TrackedObject
from debris_tracker.simulation.orbital_mechanics import OrbitalBackend
from debris_tracker.simulation.tle_loader import TLE, RawRecord, split_records
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("ingestion")


@dataclass(frozen=True)
class ClassificationRule:
    """Name substring → category, with optional country and mission tag."""
    pattern: str
    category: ObjectCategory
    country: Optional[str] = None
    mission: Optional[str] = None

    def matches(self, name: str) -> bool:
        return self.pattern in name.upper()


DEFAULT_RULES: List[ClassificationRule] = [
    ClassificationRule("DEB", ObjectCategory.DEBRIS),
    ClassificationRule("R/B", ObjectCategory.ROCKET_BODY),
    ClassificationRule("ROCKET", ObjectCategory.ROCKET_BODY),
    ClassificationRule("COSMOS", ObjectCategory.SATELLITE),
    ClassificationRule("SATELLITE", ObjectCategory.SATELLITE),
    ClassificationRule("STARLINK", ObjectCategory.SATELLITE, country="USA", mission="Constellation"),
    ClassificationRule("ONEWEB", ObjectCategory.SATELLITE, country="UK", mission="Constellation"),
    ClassificationRule("WEATHER", ObjectCategory.SATELLITE, mission="Weather"),
    ClassificationRule("NOAA", ObjectCategory.SATELLITE, mission="Weather"),
    ClassificationRule("GOES", ObjectCategory.SATELLITE, mission="Weather"),
    ClassificationRule("LANDSAT", ObjectCategory.SATELLITE, mission="Earth Observation"),
    ClassificationRule("TERRA", ObjectCategory.SATELLITE, mission="Earth Observation"),
    ClassificationRule("AQUA", ObjectCategory.SATELLITE, mission="Earth Observation"),
]

# Per-category caps for the map view, in display order
DISPLAY_LIMITS = [
    (ObjectCategory.DEBRIS, 12),
    (ObjectCategory.SATELLITE, 10),
    (ObjectCategory.ROCKET_BODY, 6),
]
DISPLAY_TOTAL_LIMIT = 25


def match_rule(name: str, rules: Sequence[ClassificationRule] = DEFAULT_RULES) -> Optional[ClassificationRule]:
    """First rule whose pattern appears in the upper-cased name."""
    for rule in rules:
        if rule.matches(name):
            return rule
    return None


class RecordClassifier:
    """
    Classifies raw records into TrackedObjects.

    Example:
        >>> classifier = RecordClassifier(backend=SkyfieldBackend())
        >>> objects = classifier.parse_records(text)
        >>> print(f"{len(objects)} objects, first is {objects[0].category.value}")
    """

    def __init__(
        self,
        rules: Sequence[ClassificationRule] = DEFAULT_RULES,
        backend: Optional[OrbitalBackend] = None,
    ):
        """
        Args:
            rules: Ordered classification rules
            backend: Builds element handles; None leaves every object on
                the analytic fallback path
        """
        self.rules = list(rules)
        self.backend = backend

    def classify(self, record: RawRecord) -> Optional[TrackedObject]:
        """
        Classify one record.

        Returns:
            TrackedObject, or None when the record is malformed
        """
        try:
            tle = TLE.from_lines(record.name, record.line1, record.line2)
        except (ValueError, IndexError) as e:
            logger.warning(f"Skipping unparseable record '{record.name}': {e}")
            return None

        rule = match_rule(tle.name, self.rules)
        category = rule.category if rule else ObjectCategory.UNKNOWN

        elements = None
        if self.backend is not None:
            try:
                elements = self.backend.parse_elements(tle)
            except Exception as e:
                logger.warning(f"Elements for {tle.name} did not parse, using fallback motion: {e}")

        return TrackedObject(
            name=tle.name,
            catalog_id=tle.catalog_number,
            category=category,
            epoch_year=tle.epoch_year,
            country=rule.country if rule else None,
            mission=rule.mission if rule else None,
            tle=tle,
            elements=elements,
        )

    def classify_all(self, records: Iterable[RawRecord]) -> List[TrackedObject]:
        """Classify records in order, dropping the ones that were skipped."""
        objects = []
        skipped = 0
        for record in records:
            obj = self.classify(record)
            if obj is None:
                skipped += 1
                continue
            objects.append(obj)

        if skipped:
            logger.info(f"Classified {len(objects)} records, skipped {skipped}")
        return objects

    def parse_records(self, text: str) -> List[TrackedObject]:
        """Split three-line record text and classify every record."""
        return self.classify_all(split_records(text))


def select_display_set(
    objects: Sequence[TrackedObject], total_limit: int = DISPLAY_TOTAL_LIMIT
) -> List[TrackedObject]:
    """
    Pick the objects shown on the map.

    Takes up to 12 debris, 10 satellites and 6 rocket bodies (in that order,
    keeping input order within each group) and caps the result at
    `total_limit`. Unknown objects are never shown.
    """
    selected: List[TrackedObject] = []
    for category, limit in DISPLAY_LIMITS:
        selected.extend([obj for obj in objects if obj.category is category][:limit])
    return selected[:total_limit]


def category_counts(objects: Iterable[TrackedObject]) -> Dict[ObjectCategory, int]:
    """Number of objects per category, with every category present."""
    counts = Counter(obj.category for obj in objects)
    return {category: counts.get(category, 0) for category in ObjectCategory}
