"""
Orbital position propagation using SGP4 via Skyfield, with an analytic fallback.

The numerical library is reached only through an OrbitalBackend handed to the
propagator, so the tick loop can run with a stub backend or none at all.
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import numpy as np
from skyfield.api import EarthSatellite, load

from debris_tracker.simulation.objects import GeoPosition, ObjectCategory, TrackedObject
from debris_tracker.simulation.tle_loader import TLE
from debris_tracker.utils.coordinates import eci_to_geodetic_degrees, gmst_from_datetime
from debris_tracker.utils.logging_config import get_logger

logger = get_logger("simulation")

# (speed multiplier, inclination factor) for the analytic fallback
CATEGORY_MOTION: Dict[ObjectCategory, Tuple[float, float]] = {
    ObjectCategory.DEBRIS: (1.3, 1.8),
    ObjectCategory.SATELLITE: (0.7, 0.6),
    ObjectCategory.ROCKET_BODY: (1.0, 1.0),
    ObjectCategory.UNKNOWN: (1.0, 1.0),
}

FALLBACK_BASE_SPEED = 0.001
FALLBACK_LAT_AMPLITUDE_DEG = 50.0
FALLBACK_LON_RATE = 2.5


def _utc(when: datetime) -> datetime:
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when


class OrbitalBackend(ABC):
    """Numerical propagation capability injected into the propagator."""

    @abstractmethod
    def parse_elements(self, tle: TLE) -> Any:
        """Build a propagation handle from element lines, raising on bad input."""

    @abstractmethod
    def eci_position_km(self, elements: Any, when: datetime) -> np.ndarray:
        """Earth-centred inertial position [x, y, z] in km at `when`."""

    def sidereal_angle(self, when: datetime) -> float:
        """Greenwich sidereal angle (radians) used to rotate ECI into ECEF."""
        return gmst_from_datetime(when)


class SkyfieldBackend(OrbitalBackend):
    """
    SGP4/SDP4 backend built on Skyfield's EarthSatellite.

    Example:
        >>> backend = SkyfieldBackend()
        >>> sat = backend.parse_elements(tle)
        >>> backend.eci_position_km(sat, datetime.now(timezone.utc))
    """

    def __init__(self):
        self.ts = load.timescale()

    def parse_elements(self, tle: TLE) -> EarthSatellite:
        if not tle.has_element_lines:
            raise ValueError(f"element lines for {tle.name} lack '1 '/'2 ' prefixes")
        return EarthSatellite(tle.line1, tle.line2, name=tle.name, ts=self.ts)

    def eci_position_km(self, elements: EarthSatellite, when: datetime) -> np.ndarray:
        t = self.ts.from_datetime(_utc(when))
        return elements.at(t).position.km

    def sidereal_angle(self, when: datetime) -> float:
        t = self.ts.from_datetime(_utc(when))
        # Skyfield reports GMST in hours
        return math.radians(float(t.gmst) * 15.0)


def fallback_position(catalog_id: int, category: ObjectCategory, timestamp_s: float) -> GeoPosition:
    """
    Deterministic analytic motion used when SGP4 is unavailable.

    A pure function of its three inputs: objects sweep eastward across the
    map with a sinusoidal latitude whose amplitude and speed depend on the
    category.

    Args:
        catalog_id: NORAD catalog number (sets the phase)
        category: Object category (sets speed and latitude amplitude)
        timestamp_s: Seconds since the Unix epoch

    Returns:
        GeoPosition with source "fallback"
    """
    speed_multiplier, inclination_factor = CATEGORY_MOTION[category]
    phase = (catalog_id % 360) * (math.pi / 180)
    t = timestamp_s * FALLBACK_BASE_SPEED * speed_multiplier

    lat = math.sin(t + phase) * FALLBACK_LAT_AMPLITUDE_DEG * inclination_factor
    lon = ((t * FALLBACK_LON_RATE + phase) % (2 * math.pi)) * (180 / math.pi) - 180

    return GeoPosition(lat, lon, "fallback")


class PositionPropagator:
    """
    Turns a tracked object and a time into latitude/longitude.

    Objects with element handles go through the backend (ECI position,
    rotated by sidereal time, converted to WGS84 geodetic). Anything that
    raises or comes back non-finite drops to `fallback_position` for that
    object only.
    """

    def __init__(self, backend: Optional[OrbitalBackend] = None):
        """
        Args:
            backend: Numerical propagation capability; None forces the
                analytic fallback for every object
        """
        self.backend = backend

    def propagate(self, obj: TrackedObject, when: datetime) -> GeoPosition:
        """
        Position of `obj` at `when`.

        Example:
            >>> propagator = PositionPropagator(SkyfieldBackend())
            >>> lat, lon, source = propagator.propagate(obj, datetime.now(timezone.utc))
        """
        when = _utc(when)

        if obj.elements is not None and self.backend is not None:
            try:
                position = self._propagate_elements(obj.elements, when)
            except Exception as e:
                logger.debug(f"SGP4 failed for {obj.name} ({obj.catalog_id}): {e}")
            else:
                if position is not None:
                    return position
                logger.debug(f"Non-finite SGP4 position for {obj.name} ({obj.catalog_id})")

        return fallback_position(obj.catalog_id, obj.category, when.timestamp())

    def _propagate_elements(self, elements: Any, when: datetime) -> Optional[GeoPosition]:
        position = np.asarray(self.backend.eci_position_km(elements, when), dtype=float)
        if position.shape != (3,) or not np.all(np.isfinite(position)):
            return None

        gmst = self.backend.sidereal_angle(when)
        lat, lon = eci_to_geodetic_degrees(position, gmst)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return None
        return GeoPosition(lat, lon, "sgp4")
