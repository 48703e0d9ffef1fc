"""Data models used across the pipeline."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class LongRecord:
    location_id: str
    period: tuple[tuple[str, str], ...]
    attribute: str
    value: str | None

    def period_dict(self) -> dict[str, str]:
        return dict(self.period)


@dataclass(frozen=True)
class LocationRecord:
    code: str
    name: str | None
    lat: float | None
    lon: float | None
    elev: float | None
    state: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class StationMatch:
    station: LocationRecord
    distance_km: float | None = None
    candidates: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload = self.station.to_dict()
        payload["distance_km"] = self.distance_km
        payload["candidates"] = list(self.candidates)
        return payload
