"""Agricultural bulletin assembly."""

from __future__ import annotations

from typing import Iterable

from bomfeeds.common.fields import BULLETIN_TIME_FORMAT, parse_timestamp, product_id_for, to_float
from bomfeeds.common.models import LocationRecord
from bomfeeds.pipeline.flatten import FeedLayout, flatten_document, pivot_records
from bomfeeds.pipeline.locations import join_locations

TRACE_RAINFALL = 0.01
TRACE_TOKEN = "Tce"

MEASUREMENT_COLUMNS = (
    "rainfall",
    "minimum_temperature",
    "maximum_temperature",
    "wet_bulb_depression",
    "evaporation",
    "terrestrial_minimum",
    "sunshine_hours",
    "soil_temperature_5cm",
    "soil_temperature_10cm",
    "soil_temperature_20cm",
    "soil_temperature_50cm",
    "soil_temperature_1m",
    "wind_run",
)

BULLETIN_COLUMNS = (
    "product_id",
    "state",
    "site",
    "station",
    "lat",
    "lon",
    "elev",
    "obs_time_local",
    "obs_time_utc",
    "time_zone",
    *MEASUREMENT_COLUMNS,
)

BULLETIN_LAYOUT = FeedLayout(
    name="ag-bulletin",
    area_path=".//obs",
    id_attr="site",
    period_path=None,
    time_attrs=("obs-time-local", "obs-time-utc"),
    descriptor_attrs=("t",),
    descriptors={
        ("r",): "rainfall",
        ("tn",): "minimum_temperature",
        ("tx",): "maximum_temperature",
        ("twd",): "wet_bulb_depression",
        ("ev",): "evaporation",
        ("tg",): "terrestrial_minimum",
        ("sn",): "sunshine_hours",
        ("t5",): "soil_temperature_5cm",
        ("t10",): "soil_temperature_10cm",
        ("t20",): "soil_temperature_20cm",
        ("t50",): "soil_temperature_50cm",
        ("t1m",): "soil_temperature_1m",
        ("wr",): "wind_run",
    },
    columns=MEASUREMENT_COLUMNS,
)

STATION_FIELDS = {"station": "name", "state": "state", "lat": "lat", "lon": "lon", "elev": "elev"}


def rainfall_value(value: str | None) -> float | None:
    # Trace rain stays distinguishable from a dry day.
    if value is not None and value.strip() == TRACE_TOKEN:
        return TRACE_RAINFALL
    return to_float(value)


def _tidy_row(row: dict, product_id: str) -> dict:
    out = {
        "product_id": product_id,
        "site": row["location_id"],
        "obs_time_local": parse_timestamp(row.get("obs-time-local"), BULLETIN_TIME_FORMAT),
        "obs_time_utc": parse_timestamp(row.get("obs-time-utc"), BULLETIN_TIME_FORMAT),
        "time_zone": row.get("time-zone"),
    }
    out["rainfall"] = rainfall_value(row["rainfall"])
    for column in MEASUREMENT_COLUMNS[1:]:
        out[column] = to_float(row[column])
    return out


def assemble_bulletin(xml_bytes: bytes, product_id: str) -> list[dict]:
    records = flatten_document(xml_bytes, BULLETIN_LAYOUT)
    rows = pivot_records(records, BULLETIN_LAYOUT.columns)
    return [_tidy_row(row, product_id) for row in rows]


def parse_bulletin(xml_bytes: bytes, feed: str, stations: Iterable[LocationRecord]) -> list[dict]:
    rows = assemble_bulletin(xml_bytes, product_id_for(feed))
    joined = join_locations(rows, stations, key="site", fields=STATION_FIELDS)
    return [{column: row.get(column) for column in BULLETIN_COLUMNS} for row in joined]
