"""String and number normalisation for feed values."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import urlparse

from bomfeeds.common.errors import MalformedFeedError

FORECAST_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"
BULLETIN_TIME_FORMAT = "%Y%m%dT%H%M"

_UTC_OFFSET_RE = re.compile(r"^(?P<stamp>.+?)\+(?P<offset>\d{2}:?\d{2})$")
_WHITESPACE_RE = re.compile(r"\s+")


def strip_unit(value: str | None, unit: str) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    if cleaned.endswith(unit):
        cleaned = cleaned[: -len(unit)].strip()
    return cleaned or None


def split_utc_offset(timestamp: str | None) -> tuple[str | None, str | None]:
    """Split ``2018-01-01T05:00:00+10:00`` into the stamp and ``10:00``."""
    if timestamp is None:
        return None, None
    match = _UTC_OFFSET_RE.match(timestamp.strip())
    if match is None:
        raise MalformedFeedError(f"Local timestamp has no UTC offset: {timestamp!r}")
    return match.group("stamp"), match.group("offset")


def split_range(value: str | None, sep: str = "to") -> tuple[str | None, str | None]:
    # A value without a separator fills the upper bound only.
    if value is None:
        return None, None
    parts = value.split(sep)
    if len(parts) == 1:
        return None, parts[0].strip() or None
    if len(parts) != 2:
        raise MalformedFeedError(f"Unexpected range value: {value!r}")
    lower, upper = (part.strip() or None for part in parts)
    return lower, upper


def normalise_precipitation_range(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = _WHITESPACE_RE.sub(" ", value.strip())
    if cleaned in ("0 mm", "0"):
        return "0 mm to 0 mm"
    return cleaned


def clean_timestamp(value: str | None) -> str | None:
    if value is None:
        return None
    return value.replace("T", " ").replace("Z", " ").strip()


def parse_timestamp(value: str | None, fmt: str = FORECAST_TIME_FORMAT) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        return datetime.strptime(value, fmt)
    except ValueError:
        pass
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise MalformedFeedError(f"Unparseable timestamp: {value!r}") from exc
    return parsed.replace(tzinfo=None)


def to_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = str(value).strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError as exc:
        raise MalformedFeedError(f"Expected a number, got {value!r}") from exc


def to_percent(value: str | None) -> int | None:
    number = to_float(strip_unit(value, "%"))
    if number is None:
        return None
    if not number.is_integer():
        raise MalformedFeedError(f"Percentage is not a whole number: {value!r}")
    if not 0 <= number <= 100:
        raise MalformedFeedError(f"Percentage out of range: {value!r}")
    return int(number)


def product_id_for(feed: str) -> str:
    """``ftp://host/anon/gen/fwo/IDN11060.xml`` -> ``IDN11060``."""
    name = PurePosixPath(urlparse(feed).path).name
    return name.rsplit(".", 1)[0] if "." in name else name
