"""
Core value types shared by the classifier, propagator and tick loop.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional, Tuple

from debris_tracker.simulation.tle_loader import TLE


class ObjectCategory(str, Enum):
    """Closed set of object categories."""
    DEBRIS = "Debris"
    SATELLITE = "Satellite"
    ROCKET_BODY = "Rocket Body"
    UNKNOWN = "Unknown"


# RGB used by the rendering sink for dots and trails
CATEGORY_COLORS: Dict[ObjectCategory, Tuple[int, int, int]] = {
    ObjectCategory.DEBRIS: (255, 80, 80),
    ObjectCategory.SATELLITE: (80, 255, 80),
    ObjectCategory.ROCKET_BODY: (255, 180, 0),
    ObjectCategory.UNKNOWN: (255, 255, 255),
}


@dataclass(frozen=True)
class TrackedObject:
    """
    A classified orbital object for one data-load generation.

    Attributes:
        name: Display name from the record
        catalog_id: NORAD catalog number
        category: Category assigned at classification
        epoch_year: Four-digit year of the element set epoch
        country: Origin country when a classification rule names one
        mission: Mission tag from the matching rule (e.g. "Weather")
        tle: Raw element record, absent for synthetic objects
        elements: Propagator handle, present only when the element lines
            parsed; excluded from equality
    """
    name: str
    catalog_id: int
    category: ObjectCategory
    epoch_year: Optional[int] = None
    country: Optional[str] = None
    mission: Optional[str] = None
    tle: Optional[TLE] = None
    elements: Any = field(default=None, compare=False, repr=False)

    @property
    def has_elements(self) -> bool:
        return self.elements is not None


class GeoPosition(NamedTuple):
    """Latitude/longitude in degrees and the path that produced them."""
    lat: float
    lon: float
    source: str = "fallback"


@dataclass(frozen=True)
class PositionSample:
    """One screen/geodetic position at a timestamp (ms since Unix epoch)."""
    x: float
    y: float
    lat: float
    lon: float
    timestamp: float
