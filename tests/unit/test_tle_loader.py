"""
Unit tests for record splitting, TLE parsing and data sources.
"""

import math

import pytest
import requests

from debris_tracker.simulation.tle_loader import (
    DataSource,
    TLE,
    TLELoader,
    get_statistics,
    mean_motion_altitude_km,
    split_records,
)

ISS_LINE1 = "1 25544U 98067A   14020.93268519  .00009878  00000-0  18200-3 0  5082"
ISS_LINE2 = "2 25544  51.6498 109.4756 0003572  55.9686 274.8005 15.49815350868473"


class TestTLEParsing:
    """Test fixed-offset field extraction."""

    def test_from_lines(self):
        tle = TLE.from_lines("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)
        assert tle.name == "ISS (ZARYA)"
        assert tle.catalog_number == 25544
        assert tle.epoch_year == 2014
        assert tle.has_element_lines

    def test_epoch_year_pivot(self):
        """Two-digit years 57-99 belong to the 1900s."""
        line1 = "1 00005U 58002B   58020.50000000  .00000000  00000-0  00000-0 0  0001"
        tle = TLE.from_lines("VANGUARD 1", line1, ISS_LINE2)
        assert tle.epoch_year == 1958

        line1 = "1 00005U 58002B   56020.50000000  .00000000  00000-0  00000-0 0  0001"
        assert TLE.from_lines("X", line1, ISS_LINE2).epoch_year == 2056

    def test_short_line1_rejected(self):
        with pytest.raises(ValueError):
            TLE.from_lines("BROKEN", "1 25544U", ISS_LINE2)

    def test_non_numeric_catalog_rejected(self):
        line1 = "1 ABCDEU 98067A   14020.93268519  .00009878  00000-0  18200-3 0  5082"
        with pytest.raises(ValueError):
            TLE.from_lines("BROKEN", line1, ISS_LINE2)

    def test_missing_line2_rejected(self):
        with pytest.raises(ValueError):
            TLE.from_lines("BROKEN", ISS_LINE1, "   ")

    def test_element_lines_without_prefix(self):
        tle = TLE.from_lines("ODD", "X" + ISS_LINE1[1:], ISS_LINE2)
        assert not tle.has_element_lines


class TestSplitRecords:
    """Test three-line record splitting."""

    def test_split_ignores_blank_lines(self):
        text = f"ISS (ZARYA)\n{ISS_LINE1}\n\n{ISS_LINE2}\n\nOTHER\n{ISS_LINE1}\n{ISS_LINE2}\n"
        records = split_records(text)
        assert len(records) == 2
        assert records[0].name == "ISS (ZARYA)"
        assert records[1].line2 == ISS_LINE2

    def test_trailing_partial_record_dropped(self):
        text = f"ISS (ZARYA)\n{ISS_LINE1}\n{ISS_LINE2}\nHALF\n{ISS_LINE1}\n"
        assert len(split_records(text)) == 1

    def test_windows_line_endings(self):
        text = f"ISS (ZARYA)\r\n{ISS_LINE1}\r\n{ISS_LINE2}\r\n"
        records = split_records(text)
        assert records[0].line2 == ISS_LINE2

    def test_empty_text(self):
        assert split_records("") == []


class TestStatistics:
    """Test element statistics."""

    def test_mean_motion_altitude(self):
        altitude = mean_motion_altitude_km(ISS_LINE2)
        assert 350 < altitude < 450

    def test_unreadable_mean_motion(self):
        assert math.isnan(mean_motion_altitude_km("2 25544"))

    def test_get_statistics(self):
        tle = TLE.from_lines("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)
        stats = get_statistics([tle, tle])
        assert stats["count"] == 2
        assert stats["avg_inclination_deg"] == pytest.approx(51.6498)
        assert 350 < stats["avg_altitude_km"] < 450

    def test_zero_mean_motion_still_counts_inclination(self):
        """Inclination is summed, but only valid altitudes set the divisor."""
        iss = TLE.from_lines("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)
        parked = TLE.from_lines(
            "PARKED",
            ISS_LINE1,
            "2 25544  10.0000 109.4756 0003572  55.9686 274.8005  0.00000000868473",
        )
        stats = get_statistics([iss, parked])
        assert stats["count"] == 2
        assert stats["avg_inclination_deg"] == pytest.approx(51.6498 + 10.0)
        assert 350 < stats["avg_altitude_km"] < 450

    def test_unparseable_inclination_skipped(self):
        iss = TLE.from_lines("ISS (ZARYA)", ISS_LINE1, ISS_LINE2)
        broken = TLE.from_lines("BROKEN", ISS_LINE1, "2 25544  xx.xxxx")
        stats = get_statistics([iss, broken])
        assert stats["count"] == 2
        assert stats["avg_inclination_deg"] == pytest.approx(51.6498)

    def test_get_statistics_empty(self):
        stats = get_statistics([])
        assert stats == {"count": 0, "avg_inclination_deg": 0.0, "avg_altitude_km": 0.0}


class TestDataSource:
    """Test data source metadata."""

    def test_groups_and_labels(self):
        assert DataSource.RECENT.group == "last-30-days"
        assert DataSource.COSMOS.group == "cosmos-2251-debris"
        assert DataSource.COSMOS.label == "COSMOS 2251 Debris"

    def test_url(self):
        assert DataSource.ACTIVE.url.endswith("?GROUP=active&FORMAT=tle")

    def test_every_source_has_metadata(self):
        for source in DataSource:
            assert source.group
            assert source.label


class _FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _FakeSession:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        return self.response


class TestTLELoader:
    """Test file and network loading."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "iss.tle"
        path.write_text(f"ISS (ZARYA)\n{ISS_LINE1}\n{ISS_LINE2}\n")
        records = TLELoader().load_from_file(path)
        assert len(records) == 1
        assert records[0].name == "ISS (ZARYA)"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TLELoader().load_from_file(tmp_path / "missing.tle")

    def test_fetch_text(self):
        session = _FakeSession(_FakeResponse("payload"))
        loader = TLELoader(timeout=5, session=session)
        assert loader.fetch_text(DataSource.WEATHER) == "payload"
        assert session.calls == [(DataSource.WEATHER.url, 5)]

    def test_fetch_bad_status_raises(self):
        loader = TLELoader(session=_FakeSession(_FakeResponse("", status_code=503)))
        with pytest.raises(requests.RequestException):
            loader.fetch_text(DataSource.RECENT)
