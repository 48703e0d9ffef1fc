"""Geometry helpers."""

from __future__ import annotations

from typing import Sequence

from pyproj import Geod

EARTH_RADIUS_M = 6371008.8
# Sphere of mean earth radius, so inverse distances are great-circle distances.
_SPHERE = Geod(a=EARTH_RADIUS_M, b=EARTH_RADIUS_M)


def valid_lat_lon(lat: float | None, lon: float | None) -> bool:
    if lat is None or lon is None:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def great_circle_km_many(lat: float, lon: float, lats: Sequence[float], lons: Sequence[float]) -> list[float]:
    if not lats:
        return []
    count = len(lats)
    _fwd, _back, metres = _SPHERE.inv([lon] * count, [lat] * count, list(lons), list(lats))
    return [float(value) / 1000.0 for value in metres]
