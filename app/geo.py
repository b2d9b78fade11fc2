# Geographic proximity primitives: haversine distance, radius scan/ranking, and a
# conservative bounding box used to narrow candidate fetches.
# Everything here is pure and synchronous; candidate loading lives in search.py.
from __future__ import annotations

import math
from typing import Any, Iterable, List, NamedTuple, Optional

# Mean Earth radius in kilometers; fixed so distances match across call sites
EARTH_RADIUS_KM: float = 6371.0

# Slack added to bounding boxes so float rounding never drops a boundary point
_BBOX_MARGIN_DEG: float = 1e-9


class InvalidGeoQuery(ValueError):
    """Raised when a search center or radius is not a usable finite value."""


class Candidate(NamedTuple):
    """Minimal projection of a listing eligible for distance computation."""
    id: Any
    latitude: Optional[float]
    longitude: Optional[float]


class RankedResult(NamedTuple):
    id: Any
    distance: float  # kilometers


class BoundingBox(NamedTuple):
    """Lat/lng rectangle; min_lng/max_lng are None when longitude is unconstrained."""
    min_lat: float
    max_lat: float
    min_lng: Optional[float]
    max_lng: Optional[float]


def haversine_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """
    Great-circle distance between two points in kilometers.

    Arguments are in degrees and are not validated.
    """
    d_lat = (lat2 - lat1) * math.pi / 180
    d_lng = (lng2 - lng1) * math.pi / 180
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1 * math.pi / 180) * math.cos(lat2 * math.pi / 180) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def validate_search_center(lat: float, lng: float, radius_km: float) -> None:
    """
    Reject centers/radii that would silently produce empty scans.

    NaN compares false against everything, so a NaN center or radius would
    filter out every candidate; we raise instead.
    """
    for name, value in (("latitude", lat), ("longitude", lng), ("radius", radius_km)):
        if value is None or not math.isfinite(value):
            raise InvalidGeoQuery(f"{name} must be a finite number")
    if not -90.0 <= lat <= 90.0:
        raise InvalidGeoQuery("latitude must be between -90 and 90")
    if not -180.0 <= lng <= 180.0:
        raise InvalidGeoQuery("longitude must be between -180 and 180")
    if radius_km < 0:
        raise InvalidGeoQuery("radius must be non-negative")


def find_within_radius(
    center_lat: float,
    center_lng: float,
    radius_km: float,
    candidates: Iterable[Any],
    limit: Optional[int] = None,
) -> List[RankedResult]:
    """
    Rank candidates by distance from the center, keeping those within radius_km.

    Steps (order matters for deterministic ties):
    - Skip candidates missing either coordinate
    - Keep distance <= radius_km (boundary is inclusive)
    - Stable sort ascending by distance; input order breaks ties
    - Truncate to `limit` when given

    Candidates only need `id`, `latitude` and `longitude` attributes, so ORM rows
    and Candidate tuples both work. No matches yields an empty list.
    """
    if limit is not None and limit < 1:
        raise ValueError("limit must be a positive integer")

    matches: List[RankedResult] = []
    for item in candidates:
        if item.latitude is None or item.longitude is None:
            continue
        d = haversine_distance_km(center_lat, center_lng, item.latitude, item.longitude)
        if d <= radius_km:
            matches.append(RankedResult(id=item.id, distance=d))

    # list.sort is stable, so equal distances keep their input order
    matches.sort(key=lambda r: r.distance)
    if limit is not None:
        return matches[:limit]
    return matches


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    """
    Rectangle enclosing every point within radius_km of (lat, lng).

    Used for a cheap range pre-filter before the exact haversine scan. When the
    circle covers a pole or wraps across the antimeridian, longitude is left
    unconstrained instead of splitting the box.
    """
    angular = radius_km / EARTH_RADIUS_KM
    d_lat = math.degrees(angular) + _BBOX_MARGIN_DEG
    min_lat = lat - d_lat
    max_lat = lat + d_lat

    if min_lat <= -90.0 or max_lat >= 90.0 or angular >= math.pi / 2:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0), None, None)

    ratio = math.sin(angular) / math.cos(math.radians(lat))
    if ratio >= 1.0:
        return BoundingBox(min_lat, max_lat, None, None)

    d_lng = math.degrees(math.asin(ratio)) + _BBOX_MARGIN_DEG
    min_lng = lng - d_lng
    max_lng = lng + d_lng
    if min_lng < -180.0 or max_lng > 180.0:
        return BoundingBox(min_lat, max_lat, None, None)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)
