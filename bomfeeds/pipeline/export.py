"""Tidy table CSV export."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Sequence

from bomfeeds.common.fs import write_csv


def _serialize_value(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return value


def _serialize_row(row: dict, columns: Sequence[str]) -> dict:
    return {key: _serialize_value(row.get(key)) for key in columns}


def write_table_csv(path: Path, columns: Sequence[str], rows: list[dict]) -> Path:
    serialized_rows = [_serialize_row(row, columns) for row in rows]
    write_csv(path, list(columns), serialized_rows)
    return path
