"""
Coordinate transformation utilities for orbital object display.
Handles ECI → ECEF → geodetic conversion and the flat map projection.
"""

from datetime import datetime, timezone
from typing import Tuple

import numpy as np

# WGS84 ellipsoid parameters
WGS84_A = 6378.137  # Semi-major axis (km)
WGS84_F = 1 / 298.257223563
WGS84_E2 = 2 * WGS84_F - WGS84_F**2

_J2000_JD = 2451545.0
_UNIX_EPOCH_JD = 2440587.5


def gmst_from_datetime(when: datetime) -> float:
    """
    Compute Greenwich Mean Sidereal Time in radians.

    Uses the IAU 1982 approximation based on Julian centuries from J2000.0.
    Naive datetimes are taken to be UTC.
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    jd = when.timestamp() / 86400.0 + _UNIX_EPOCH_JD
    T = (jd - _J2000_JD) / 36525.0
    gmst_deg = 280.46061837 + 360.98564736629 * (jd - _J2000_JD) + \
               0.000387933 * T**2 - T**3 / 38710000.0
    return float(np.radians(gmst_deg % 360.0))


def eci_to_ecef(position_eci: np.ndarray, gmst: float) -> np.ndarray:
    """
    Convert Earth-Centered Inertial (ECI) to Earth-Centered Earth-Fixed (ECEF).

    Args:
        position_eci: Position vector in ECI frame [x, y, z] (km)
        gmst: Greenwich Mean Sidereal Time (radians)

    Returns:
        Position vector in ECEF frame [x, y, z] (km)

    Example:
        >>> pos_eci = np.array([7000.0, 0.0, 0.0])
        >>> pos_ecef = eci_to_ecef(pos_eci, 0.0)
    """
    cos_gmst = np.cos(gmst)
    sin_gmst = np.sin(gmst)

    rotation_matrix = np.array([
        [cos_gmst, sin_gmst, 0],
        [-sin_gmst, cos_gmst, 0],
        [0, 0, 1]
    ])

    return rotation_matrix @ np.asarray(position_eci, dtype=float)


def ecef_to_geodetic(position_ecef: np.ndarray) -> Tuple[float, float, float]:
    """
    Convert ECEF to geodetic coordinates (latitude, longitude, altitude).
    Uses WGS84 ellipsoid model.

    Args:
        position_ecef: Position vector in ECEF frame [x, y, z] (km)

    Returns:
        Tuple of (latitude, longitude, altitude) in (radians, radians, km)
    """
    x, y, z = position_ecef

    lon = np.arctan2(y, x)

    p = np.sqrt(x**2 + y**2)
    lat = np.arctan2(z, p * (1 - WGS84_E2))

    for _ in range(5):
        N = WGS84_A / np.sqrt(1 - WGS84_E2 * np.sin(lat)**2)
        lat = np.arctan2(z + WGS84_E2 * N * np.sin(lat), p)

    N = WGS84_A / np.sqrt(1 - WGS84_E2 * np.sin(lat)**2)
    # Handle polar singularity
    cos_lat = np.cos(lat)
    if abs(cos_lat) > 1e-10:
        alt = p / cos_lat - N
    else:
        alt = abs(z) - N * (1 - WGS84_E2)

    return float(lat), float(lon), float(alt)


def eci_to_geodetic_degrees(position_eci: np.ndarray, gmst: float) -> Tuple[float, float]:
    """Rotate an ECI position by GMST and return (lat_deg, lon_deg)."""
    lat, lon, _ = ecef_to_geodetic(eci_to_ecef(position_eci, gmst))
    return float(np.degrees(lat)), float(np.degrees(lon))


def earth_radius_px(width: float, height: float, fraction: float = 0.35) -> float:
    """Radius of the drawn Earth in pixels for a view of the given size."""
    return min(width, height) * fraction


def geodetic_to_screen(
    lat: float, lon: float, width: float, height: float, fraction: float = 0.35
) -> Tuple[float, float]:
    """
    Project latitude/longitude (degrees) onto the flat map view.

    Longitude spans ±earth radius horizontally around the view centre and
    latitude spans ±earth radius vertically, with screen y growing downward.

    Example:
        >>> geodetic_to_screen(0.0, 0.0, 800, 600)
        (400.0, 300.0)
    """
    radius = earth_radius_px(width, height, fraction)
    x = width / 2 + (lon / 180.0) * radius
    y = height / 2 - (lat / 90.0) * radius
    return x, y
