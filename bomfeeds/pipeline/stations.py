"""Nearest-station lookup by coordinate or by approximate name."""

from __future__ import annotations

import logging
from typing import Iterable

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from bomfeeds.common.errors import InputError, NoStationFoundError
from bomfeeds.common.geometry import great_circle_km_many, valid_lat_lon
from bomfeeds.common.logging import get_logger, log_event
from bomfeeds.common.models import LocationRecord, StationMatch

DEFAULT_NAME_CUTOFF = 85.0


class StationIndex:
    """Read-only lookups over a station table, in table order."""

    def __init__(
        self,
        stations: Iterable[LocationRecord],
        *,
        name_cutoff: float = DEFAULT_NAME_CUTOFF,
        logger: logging.Logger | None = None,
    ) -> None:
        self.stations = tuple(stations)
        self.name_cutoff = name_cutoff
        self.logger = logger or get_logger()

    def nearest(self, lat: float, lon: float) -> StationMatch:
        if not valid_lat_lon(lat, lon):
            raise InputError(f"Invalid coordinate: lat={lat}, lon={lon}")

        located = [station for station in self.stations if valid_lat_lon(station.lat, station.lon)]
        if not located:
            raise NoStationFoundError("No station in the table has coordinates")

        distances = great_circle_km_many(
            lat,
            lon,
            [station.lat for station in located],
            [station.lon for station in located],
        )
        best_idx = 0
        for idx, distance in enumerate(distances):
            if distance < distances[best_idx]:
                best_idx = idx

        chosen = located[best_idx]
        log_event(
            self.logger,
            f"using station {chosen.code} ({chosen.name}), {distances[best_idx]:.1f} km away",
            event="STATION_SELECTED",
            status="ok",
        )
        return StationMatch(station=chosen, distance_km=distances[best_idx])

    def match_name(self, name: str) -> StationMatch:
        query = default_process(name or "")
        if not query:
            raise NoStationFoundError("Station name is empty")

        for station in self.stations:
            if station.name and default_process(station.name) == query:
                return StationMatch(station=station, candidates=(station.name,))

        candidates = [
            station
            for station in self.stations
            if station.name
            and fuzz.partial_ratio(query, station.name, processor=default_process) >= self.name_cutoff
        ]
        if not candidates:
            raise NoStationFoundError(f"No station name matches {name!r}")

        chosen = candidates[0]
        names = tuple(station.name for station in candidates)
        if len(candidates) > 1:
            log_event(
                self.logger,
                f"multiple stations match {name!r}; using {chosen.name}. Candidates: {'; '.join(names)}",
                level=logging.WARNING,
                event="STATION_AMBIGUOUS",
                status="warning",
                candidates=names,
            )
        return StationMatch(station=chosen, candidates=names)
