"""Précis town forecast assembly."""

from __future__ import annotations

from typing import Iterable

from bomfeeds.common.errors import MalformedFeedError
from bomfeeds.common.fields import (
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
from bomfeeds.common.models import LocationRecord
from bomfeeds.pipeline.flatten import FeedLayout, flatten_document, pivot_records
from bomfeeds.pipeline.locations import join_locations

FORECAST_COLUMNS = (
    "index",
    "product_id",
    "state",
    "town",
    "aac",
    "lat",
    "lon",
    "elev",
    "start_time_local",
    "end_time_local",
    "UTC_offset",
    "start_time_utc",
    "end_time_utc",
    "minimum_temperature",
    "maximum_temperature",
    "lower_precipitation_limit",
    "upper_precipitation_limit",
    "precis",
    "probability_of_precipitation",
)

FORECAST_LAYOUT = FeedLayout(
    name="precis",
    area_path=".//area[@type='location']",
    id_attr="aac",
    period_path="forecast-period",
    time_attrs=("start-time-local", "end-time-local", "start-time-utc", "end-time-utc"),
    descriptor_attrs=("type", "units"),
    descriptors={
        ("air_temperature_maximum", "Celsius"): "maximum_temperature",
        ("air_temperature_minimum", "Celsius"): "minimum_temperature",
        ("precipitation_range", None): "precipitation_range",
        ("precis", None): "precis",
        ("probability_of_precipitation", None): "probability_of_precipitation",
    },
    columns=(
        "minimum_temperature",
        "maximum_temperature",
        "precipitation_range",
        "precis",
        "probability_of_precipitation",
    ),
    discard=frozenset({"forecast_icon_code"}),
)

TOWN_FIELDS = {"town": "name", "lat": "lat", "lon": "lon", "elev": "elev"}


def _period_index(row: dict) -> int | None:
    value = row.get("index")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise MalformedFeedError(f"Period index is not an integer for {row['location_id']}: {value!r}") from exc


def _mm(value: str | None) -> float | None:
    number = to_float(strip_unit(value, "mm"))
    if number is not None and number < 0:
        raise MalformedFeedError(f"Negative precipitation: {value!r}")
    return number


def _tidy_row(row: dict, product_id: str) -> dict:
    aac = row["location_id"]
    end_local, utc_offset = split_utc_offset(row.get("end-time-local"))
    # Both bounds share one offset; the start offset is dropped.
    start_local, _start_offset = split_utc_offset(row.get("start-time-local"))
    lower, upper = split_range(normalise_precipitation_range(row["precipitation_range"]))

    return {
        "index": _period_index(row),
        "product_id": product_id,
        "state": aac.split("_", 1)[0],
        "aac": aac,
        "start_time_local": parse_timestamp(clean_timestamp(start_local)),
        "end_time_local": parse_timestamp(clean_timestamp(end_local)),
        "UTC_offset": utc_offset,
        "start_time_utc": parse_timestamp(clean_timestamp(row.get("start-time-utc"))),
        "end_time_utc": parse_timestamp(clean_timestamp(row.get("end-time-utc"))),
        "minimum_temperature": to_float(row["minimum_temperature"]),
        "maximum_temperature": to_float(row["maximum_temperature"]),
        "lower_precipitation_limit": _mm(lower),
        "upper_precipitation_limit": _mm(upper),
        "precis": row["precis"],
        "probability_of_precipitation": to_percent(row["probability_of_precipitation"]),
    }


def assemble_forecast(xml_bytes: bytes, product_id: str) -> list[dict]:
    records = flatten_document(xml_bytes, FORECAST_LAYOUT)
    rows = pivot_records(records, FORECAST_LAYOUT.columns)
    return [_tidy_row(row, product_id) for row in rows]


def parse_forecast(xml_bytes: bytes, feed: str, locations: Iterable[LocationRecord]) -> list[dict]:
    rows = assemble_forecast(xml_bytes, product_id_for(feed))
    joined = join_locations(rows, locations, key="aac", fields=TOWN_FIELDS)
    return [{column: row.get(column) for column in FORECAST_COLUMNS} for row in joined]
