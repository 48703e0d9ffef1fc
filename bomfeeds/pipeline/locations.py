"""Reference location table loading and the left join onto assembled rows."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

from bomfeeds.common.errors import AmbiguousLocationError, ConfigError, MalformedFeedError
from bomfeeds.common.fields import to_float
from bomfeeds.common.fs import read_csv_rows
from bomfeeds.common.models import LocationRecord

REQUIRED_COLUMNS = ("code", "name", "lat", "lon", "elev")


def _text_or_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_location_table(path: Path) -> list[LocationRecord]:
    if not path.exists():
        raise ConfigError(f"Missing location table: {path}")
    header, rows = read_csv_rows(path)
    missing = [column for column in REQUIRED_COLUMNS if column not in header]
    if missing:
        raise ConfigError(f"Location table {path} is missing columns: {', '.join(missing)}")

    table: list[LocationRecord] = []
    for line_no, row in enumerate(rows, start=2):
        code = _text_or_none(row.get("code"))
        if code is None:
            raise ConfigError(f"Location table {path} line {line_no} has no code")
        try:
            table.append(
                LocationRecord(
                    code=code,
                    name=_text_or_none(row.get("name")),
                    lat=to_float(row.get("lat")),
                    lon=to_float(row.get("lon")),
                    elev=to_float(row.get("elev")),
                    state=_text_or_none(row.get("state")),
                )
            )
        except MalformedFeedError as exc:
            raise ConfigError(f"Location table {path} line {line_no}: {exc}") from exc
    return table


def index_locations(table: Iterable[LocationRecord]) -> dict[str, LocationRecord]:
    index: dict[str, LocationRecord] = {}
    dupes: set[str] = set()
    for record in table:
        if record.code in index:
            dupes.add(record.code)
            continue
        index[record.code] = record
    if dupes:
        raise AmbiguousLocationError(f"Duplicate location codes in reference table: {', '.join(sorted(dupes))}")
    return index


def join_locations(
    rows: Iterable[dict],
    table: Iterable[LocationRecord],
    *,
    key: str,
    fields: Mapping[str, str],
) -> list[dict]:
    """Left join ``table`` onto ``rows`` by ``row[key] == record.code``.

    ``fields`` maps output column -> LocationRecord attribute. Unmatched rows
    keep ``None`` in every joined column.
    """
    index = index_locations(table)
    joined: list[dict] = []
    for row in rows:
        record = index.get(row.get(key))
        out = dict(row)
        for column, attribute in fields.items():
            out[column] = getattr(record, attribute) if record is not None else None
        joined.append(out)
    return joined
