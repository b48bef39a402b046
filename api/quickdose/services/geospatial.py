from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Hashable, Iterable, Mapping, Optional

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_KM = 50.0


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class LocationRecord:
    """A rankable record: fixed id and coordinates plus an opaque payload."""

    id: Hashable
    latitude: Optional[float]
    longitude: Optional[float]
    payload: Any = None


@dataclass(frozen=True)
class RankedLocation:
    record: LocationRecord
    distance_km: float

    @property
    def id(self) -> Hashable:
        return self.record.id

    @property
    def payload(self) -> Any:
        return self.record.payload


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    lat1_rad, lat2_rad = math.radians(lat1), math.radians(lat2)

    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # Clamp due to floating-point drift so we never take sqrt of a negative.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points in kilometres."""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def has_location(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """Return True if the coordinates are usable for ranking.

    Missing or non-finite values are unusable, and so is (0, 0), the
    placeholder stored for shops that have not shared a location yet.
    """
    if latitude is None or longitude is None:
        return False
    try:
        lat, lon = float(latitude), float(longitude)
    except (TypeError, ValueError):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    if lat == 0 and lon == 0:
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def rank_nearby(
    origin: GeoPoint,
    candidates: Iterable[LocationRecord],
    radius_km: float = DEFAULT_RADIUS_KM,
) -> list[RankedLocation]:
    """Rank candidates by distance from ``origin``.

    Records without a usable location are skipped. Only records within
    ``radius_km`` (inclusive) are returned, nearest first; ties keep their
    input order because ``list.sort`` is stable.
    """
    ranked: list[RankedLocation] = []
    for candidate in candidates:
        if not has_location(candidate.latitude, candidate.longitude):
            continue
        distance = distance_km(origin, GeoPoint(float(candidate.latitude), float(candidate.longitude)))
        if distance <= radius_km:
            ranked.append(RankedLocation(record=candidate, distance_km=distance))

    ranked.sort(key=lambda item: item.distance_km)
    return ranked


def record_from_mapping(row: Mapping[str, Any], *, id_key: str = "id") -> LocationRecord:
    """Wrap a loosely shaped row (e.g. a JSON object) as a LocationRecord."""
    return LocationRecord(
        id=row.get(id_key),
        latitude=row.get("latitude"),
        longitude=row.get("longitude"),
        payload=row,
    )


def format_distance(distance: float) -> str:
    """Display label used on medicine cards, e.g. ``"1.2 km"``."""
    return f"{distance:.1f} km"


__all__ = [
    "DEFAULT_RADIUS_KM",
    "EARTH_RADIUS_KM",
    "GeoPoint",
    "LocationRecord",
    "RankedLocation",
    "distance_km",
    "format_distance",
    "has_location",
    "haversine_distance",
    "rank_nearby",
    "record_from_mapping",
]
