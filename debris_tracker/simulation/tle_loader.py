"""
TLE (Two-Line Element) record loading and parsing utilities.
Splits three-line record text and fetches record batches from CelesTrak.
"""

import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, NamedTuple

import requests

from debris_tracker.utils.logging_config import get_logger

logger = get_logger("ingestion")

CELESTRAK_BASE_URL = "https://celestrak.org/NORAD/elements/gp.php"


class DataSource(str, Enum):
    """Record groups the tracker knows how to load."""
    RECENT = "recent"
    COSMOS = "cosmos"
    ACTIVE = "active"
    IRIDIUM = "iridium"
    WEATHER = "weather"
    RESOURCE = "resource"
    GEO = "geo"

    @property
    def group(self) -> str:
        return _SOURCE_GROUPS[self][0]

    @property
    def label(self) -> str:
        return _SOURCE_GROUPS[self][1]

    @property
    def url(self) -> str:
        return f"{CELESTRAK_BASE_URL}?GROUP={self.group}&FORMAT=tle"


# (CelesTrak group, display label)
_SOURCE_GROUPS: Dict[DataSource, tuple] = {
    DataSource.RECENT: ("last-30-days", "Recent Launches"),
    DataSource.COSMOS: ("cosmos-2251-debris", "COSMOS 2251 Debris"),
    DataSource.ACTIVE: ("active", "Active Satellites"),
    DataSource.IRIDIUM: ("iridium-33-debris", "Iridium Debris"),
    DataSource.WEATHER: ("weather", "Weather Satellites"),
    DataSource.RESOURCE: ("resource", "Earth Resources"),
    DataSource.GEO: ("geo", "Communication Sats"),
}


class RawRecord(NamedTuple):
    """One unparsed three-line record: display name and two element lines."""
    name: str
    line1: str
    line2: str


@dataclass(frozen=True)
class TLE:
    """Two-Line Element set with the fields read from fixed offsets."""

    name: str
    line1: str
    line2: str
    catalog_number: int
    epoch_year: int

    @classmethod
    def from_lines(cls, name: str, line1: str, line2: str) -> "TLE":
        """
        Create TLE from three lines of text.

        Args:
            name: Object display name
            line1: First line of TLE
            line2: Second line of TLE

        Returns:
            TLE object

        Raises:
            ValueError: If line 1 is too short or its fixed-offset fields
                are not numeric, or line 2 is missing.

        Example:
            >>> name = "ISS (ZARYA)"
            >>> line1 = "1 25544U 98067A   08264.51782528 ..."
            >>> line2 = "2 25544  51.6416 ..."
            >>> tle = TLE.from_lines(name, line1, line2)
            >>> tle.epoch_year
            2008
        """
        line1 = line1.rstrip()
        line2 = line2.rstrip()

        if len(line1) < 20:
            raise ValueError(f"line 1 too short ({len(line1)} chars)")
        if not line2:
            raise ValueError("line 2 missing")

        # Catalog number from line 1 (columns 3-7)
        catalog_number = int(line1[2:7])

        # Two-digit epoch year from line 1 (columns 19-20); 57-99 are 19xx
        yy = int(line1[18:20])
        epoch_year = 2000 + yy if yy < 57 else 1900 + yy

        return cls(
            name=name.strip(),
            line1=line1,
            line2=line2,
            catalog_number=catalog_number,
            epoch_year=epoch_year,
        )

    @property
    def has_element_lines(self) -> bool:
        """Whether both lines carry the standard line-number prefixes."""
        return self.line1.startswith('1 ') and self.line2.startswith('2 ')

    def __repr__(self) -> str:
        return f"TLE(name='{self.name}', catalog={self.catalog_number}, epoch_year={self.epoch_year})"


def split_records(text: str) -> List[RawRecord]:
    """
    Split three-line record text into raw records.

    Blank lines are ignored and a trailing partial record is dropped.
    """
    lines = [line.rstrip('\r') for line in text.strip().split('\n')]
    lines = [line for line in lines if line.strip()]

    records = []
    for i in range(0, len(lines), 3):
        if i + 2 >= len(lines):
            logger.debug(f"Dropping trailing partial record at line {i}")
            break
        records.append(RawRecord(lines[i].strip(), lines[i + 1], lines[i + 2]))

    return records


def mean_motion_altitude_km(line2: str) -> float:
    """
    Approximate altitude from the mean motion field of line 2.

    Returns NaN when the field cannot be read.
    """
    try:
        mean_motion = float(line2[52:63])
    except ValueError:
        return math.nan
    if mean_motion <= 0:
        return math.nan
    n_rad_per_sec = mean_motion * 2 * math.pi / 86400
    semi_major_axis_m = (3.986004418e14 / (n_rad_per_sec ** 2)) ** (1 / 3)
    return (semi_major_axis_m - 6371000.0) / 1000.0


def get_statistics(tles: Iterable[TLE]) -> Dict:
    """
    Summarize a record batch: count, mean inclination and mean altitude.

    Inclination is summed for every record whose inclination and mean motion
    both parse; altitude only when it falls between 0 and 50,000 km. Both
    sums are divided by the number of records with a valid altitude.
    """
    tles = list(tles)
    total_inclination = 0.0
    total_altitude = 0.0
    valid = 0

    for tle in tles:
        try:
            inclination = float(tle.line2[8:16])
            float(tle.line2[52:63])
        except ValueError:
            continue
        total_inclination += inclination

        altitude = mean_motion_altitude_km(tle.line2)
        if math.isnan(altitude) or not 0 < altitude < 50000:
            continue
        total_altitude += altitude
        valid += 1

    return {
        "count": len(tles),
        "avg_inclination_deg": total_inclination / valid if valid else 0.0,
        "avg_altitude_km": total_altitude / valid if valid else 0.0,
    }


class TLELoader:
    """Load raw record text from files or CelesTrak."""

    def __init__(self, timeout: float = 15.0, session: requests.Session = None):
        """
        Initialize TLE loader.

        Args:
            timeout: HTTP timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def load_from_file(self, filepath: Path) -> List[RawRecord]:
        """
        Load records from a file in three-line format.

        Example:
            >>> loader = TLELoader()
            >>> records = loader.load_from_file("data/raw/recent.tle")
        """
        filepath = Path(filepath)

        if not filepath.exists():
            logger.error(f"TLE file not found: {filepath}")
            raise FileNotFoundError(f"TLE file not found: {filepath}")

        records = split_records(filepath.read_text())
        logger.info(f"Loaded {len(records)} records from {filepath}")
        return records

    def fetch_text(self, source: DataSource) -> str:
        """
        Download the record text for a data source.

        Raises:
            requests.RequestException: On connection errors, timeouts and
                non-success status codes.

        Note:
            Requires internet connection
        """
        logger.info(f"Downloading records from CelesTrak: {source.group}")
        response = self.session.get(source.url, timeout=self.timeout)
        response.raise_for_status()
        return response.text
