from datetime import datetime
from pathlib import Path

import pytest

from bomfeeds.common.errors import MalformedFeedError
from bomfeeds.pipeline.bulletin import BULLETIN_COLUMNS, TRACE_RAINFALL, assemble_bulletin, parse_bulletin, rainfall_value
from bomfeeds.pipeline.locations import load_location_table

FIXTURE = Path("tests/fixtures/IDN65176.xml")


def _rows():
    stations = load_location_table(Path("tests/fixtures/stations.csv"))
    return parse_bulletin(FIXTURE.read_bytes(), "IDN65176.xml", stations)


def test_bulletin_columns_are_fixed_and_ordered():
    for row in _rows():
        assert tuple(row) == BULLETIN_COLUMNS


def test_trace_rainfall_is_distinct_from_zero():
    assert rainfall_value("Tce") == TRACE_RAINFALL == 0.01
    assert rainfall_value("0") == 0.0
    assert rainfall_value(None) is None

    rows = _rows()
    assert rows[0]["rainfall"] == 0.01
    assert rows[1]["rainfall"] == 0.0


def test_bulletin_row_is_joined_to_station_metadata():
    row = _rows()[0]
    assert row["product_id"] == "IDN65176"
    assert row["site"] == "066062"
    assert row["station"] == "SYDNEY (OBSERVATORY HILL)"
    assert row["state"] == "NSW"
    assert row["elev"] == 39.0
    assert row["obs_time_local"] == datetime(2018, 6, 20, 9, 0)
    assert row["obs_time_utc"] == datetime(2018, 6, 19, 23, 0)
    assert row["time_zone"] == "EST"
    assert row["soil_temperature_1m"] == 15.0
    assert row["wind_run"] == 120.0


def test_bulletin_missing_and_empty_measurements_are_null():
    rows = _rows()
    assert rows[1]["minimum_temperature"] == -2.5
    assert rows[1]["evaporation"] is None
    assert rows[2]["maximum_temperature"] is None
    assert rows[2]["station"] is None
    assert rows[2]["state"] is None
    assert len(rows) == 3


def test_bulletin_non_numeric_value_is_malformed():
    xml = (
        b'<product><observations><obs site="1" obs-time-local="20180620T0900" '
        b'obs-time-utc="20180619T2300" time-zone="EST"><d t="tx">warm</d></obs>'
        b"</observations></product>"
    )
    with pytest.raises(MalformedFeedError):
        assemble_bulletin(xml, "IDN65176")


def test_bulletin_unknown_element_is_malformed():
    xml = (
        b'<product><observations><obs site="1" obs-time-local="20180620T0900" '
        b'obs-time-utc="20180619T2300" time-zone="EST"><d t="hail">1</d></obs>'
        b"</observations></product>"
    )
    with pytest.raises(MalformedFeedError):
        assemble_bulletin(xml, "IDN65176")
