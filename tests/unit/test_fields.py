from datetime import datetime

import pytest

from bomfeeds.common.errors import MalformedFeedError
from bomfeeds.common.fields import (
    BULLETIN_TIME_FORMAT,
    clean_timestamp,
    normalise_precipitation_range,
    parse_timestamp,
    product_id_for,
    split_range,
    split_utc_offset,
    strip_unit,
    to_float,
    to_percent,
)


def test_strip_unit_removes_suffix_and_whitespace():
    assert strip_unit("80%", "%") == "80"
    assert strip_unit(" 5 mm", "mm") == "5"
    assert strip_unit("12", "mm") == "12"
    assert strip_unit(None, "%") is None
    assert strip_unit("  ", "%") is None


@pytest.mark.parametrize("raw", ["0%", "5%", "45%", "100%"])
def test_percent_strip_reformats_to_integer_string_in_range(raw):
    value = to_percent(raw)
    assert isinstance(value, int)
    assert 0 <= value <= 100
    assert str(value) == raw[:-1]


@pytest.mark.parametrize("raw", ["120%", "-5%", "12.5%"])
def test_to_percent_rejects_out_of_range_or_fractional(raw):
    with pytest.raises(MalformedFeedError):
        to_percent(raw)


def test_mm_strip_yields_non_negative_float():
    assert to_float(strip_unit("5 mm", "mm")) == 5.0
    assert to_float(strip_unit("0.4 mm", "mm")) == 0.4


def test_to_float_rejects_text():
    with pytest.raises(MalformedFeedError):
        to_float("heavy")
    assert to_float("") is None
    assert to_float(None) is None


def test_split_utc_offset_keeps_offset_digits():
    assert split_utc_offset("2018-06-20T17:00:00+10:00") == ("2018-06-20T17:00:00", "10:00")
    assert split_utc_offset("2018-06-20T17:00:00+09:30") == ("2018-06-20T17:00:00", "09:30")
    assert split_utc_offset(None) == (None, None)


def test_split_utc_offset_requires_offset():
    with pytest.raises(MalformedFeedError):
        split_utc_offset("2018-06-20T17:00:00")


def test_precipitation_range_zero_becomes_explicit_range():
    assert normalise_precipitation_range("0 mm") == "0 mm to 0 mm"
    assert split_range(normalise_precipitation_range("0 mm")) == ("0 mm", "0 mm")
    assert split_range("1 mm to 5 mm") == ("1 mm", "5 mm")
    assert split_range("0 to 2 mm") == ("0", "2 mm")


def test_split_range_single_value_fills_upper_bound():
    assert split_range("5 mm") == (None, "5 mm")
    assert split_range(None) == (None, None)


def test_clean_and_parse_timestamps():
    assert clean_timestamp("2018-06-20T07:00:00Z") == "2018-06-20 07:00:00"
    assert clean_timestamp("2018-06-20T17:00:00") == "2018-06-20 17:00:00"
    assert parse_timestamp("2018-06-20 07:00:00") == datetime(2018, 6, 20, 7, 0, 0)
    assert parse_timestamp("20180619T2300", BULLETIN_TIME_FORMAT) == datetime(2018, 6, 19, 23, 0)
    assert parse_timestamp(None) is None


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(MalformedFeedError):
        parse_timestamp("yesterday")


def test_product_id_from_file_name_and_url():
    assert product_id_for("IDN11060.xml") == "IDN11060"
    assert product_id_for("ftp://ftp.bom.gov.au/anon/gen/fwo/IDQ11295.xml") == "IDQ11295"
