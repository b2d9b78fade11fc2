# Listing search service: loads geotagged candidates from the database and runs them
# through the proximity ranking in geo.py. Both HTTP search paths go through here.
from __future__ import annotations

import logging
import math
import os
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models, schemas
from .geo import (
    BoundingBox,
    Candidate,
    RankedResult,
    bounding_box,
    find_within_radius,
    haversine_distance_km,
    validate_search_center,
)

# Namespaced logger for search diagnostics
logger = logging.getLogger("rentradar.search")

# Columns accepted as the secondary sort key (after is_premium)
_SORT_COLUMNS = {
    "created_at": models.Property.created_at,
    "price": models.Property.price,
    "views": models.Property.views,
    "bedrooms": models.Property.bedrooms,
    "area": models.Property.area,
    "updated_at": models.Property.updated_at,
}

_AMENITIES = (
    "furnished",
    "air_conditioned",
    "parking",
    "security",
    "internet",
    "water",
    "electricity",
)


class GeoSearchError(RuntimeError):
    """The candidate store could not be read; distinct from 'no matches'."""


# Bounding-box pre-filter toggle; GEO_BBOX_PREFILTER=false forces a full scan
def bbox_prefilter_enabled() -> bool:
    val = os.getenv("GEO_BBOX_PREFILTER", "true")
    return val.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _searchable(q):
    return q.filter(
        models.Property.status == "active",
        models.Property.is_available == True,  # noqa: E712
    )


def fetch_candidates(db: Session, bbox: Optional[BoundingBox] = None) -> List[Candidate]:
    """
    Load (id, latitude, longitude) for every searchable geotagged listing.

    Rows are ordered by id so equal distances rank deterministically. With a
    bounding box, only rows inside the rectangle are returned.

    Raises GeoSearchError if the query fails.
    """
    q = _searchable(
        db.query(models.Property.id, models.Property.latitude, models.Property.longitude)
    ).filter(
        models.Property.latitude != None,  # noqa: E711
        models.Property.longitude != None,  # noqa: E711
    )
    if bbox is not None:
        q = q.filter(models.Property.latitude.between(bbox.min_lat, bbox.max_lat))
        if bbox.min_lng is not None and bbox.max_lng is not None:
            q = q.filter(models.Property.longitude.between(bbox.min_lng, bbox.max_lng))

    try:
        rows = q.order_by(models.Property.id.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception("search.candidates_failed")
        raise GeoSearchError("Failed to load search candidates") from exc
    return [Candidate(id=r.id, latitude=r.latitude, longitude=r.longitude) for r in rows]


def properties_within_radius(
    db: Session,
    lat: float,
    lng: float,
    radius_km: float,
    limit: Optional[int] = None,
) -> List[RankedResult]:
    """
    Ranked (id, distance) pairs for searchable listings within radius_km.

    Raises InvalidGeoQuery for unusable input and GeoSearchError when the
    store read fails. An empty list means there genuinely are no matches.
    """
    validate_search_center(lat, lng, radius_km)
    bbox = bounding_box(lat, lng, radius_km) if bbox_prefilter_enabled() else None
    candidates = fetch_candidates(db, bbox)
    results = find_within_radius(lat, lng, radius_km, candidates, limit)
    logger.info(
        "search.radius",
        extra={
            "latitude": lat,
            "longitude": lng,
            "radius_km": radius_km,
            "limit": limit,
            "candidates": len(candidates),
            "matches": len(results),
        },
    )
    return results


def nearby_properties(
    db: Session,
    lat: float,
    lng: float,
    radius_km: float,
    limit: int,
) -> List[Tuple[models.Property, float]]:
    """
    Full listing records near a point, each paired with its distance in km.

    The scan picks the ids; full rows are then loaded again and re-checked, since
    a listing may have been deactivated or moved in between. Distances are
    recomputed from the loaded rows and the list is re-sorted by them.
    """
    ranked = properties_within_radius(db, lat, lng, radius_km, limit)
    if not ranked:
        return []

    rank = {r.id: i for i, r in enumerate(ranked)}
    try:
        rows = _searchable(db.query(models.Property)).filter(models.Property.id.in_(list(rank))).all()
    except SQLAlchemyError as exc:
        logger.exception("search.hydrate_failed")
        raise GeoSearchError("Failed to load nearby properties") from exc

    # Restore scan order first so the stable distance sort keeps its tie-break
    rows.sort(key=lambda p: rank[p.id])
    items: List[Tuple[models.Property, float]] = []
    for prop in rows:
        if prop.latitude is None or prop.longitude is None:
            continue
        items.append((prop, haversine_distance_km(lat, lng, prop.latitude, prop.longitude)))
    items.sort(key=lambda pair: pair[1])
    return items


def _apply_filters(q, filters: schemas.PropertyFilters):
    P = models.Property
    if filters.type:
        q = q.filter(P.type == filters.type)
    if filters.city:
        q = q.filter(P.city == filters.city)
    if filters.neighborhood:
        q = q.filter(P.neighborhood == filters.neighborhood)
    if filters.min_price is not None:
        q = q.filter(P.price >= filters.min_price)
    if filters.max_price is not None:
        q = q.filter(P.price <= filters.max_price)
    if filters.bedrooms is not None:
        q = q.filter(P.bedrooms >= filters.bedrooms)
    if filters.bathrooms is not None:
        q = q.filter(P.bathrooms >= filters.bathrooms)
    if filters.min_area is not None:
        q = q.filter(P.area >= filters.min_area)
    if filters.max_area is not None:
        q = q.filter(P.area <= filters.max_area)
    for name in _AMENITIES:
        value = getattr(filters, name)
        if value is not None:
            q = q.filter(getattr(P, name) == value)
    if filters.search:
        # Literal substring match: % and _ in user text are escaped, not wildcards
        term = filters.search
        q = q.filter(
            or_(
                P.title.icontains(term, autoescape=True),
                P.description.icontains(term, autoescape=True),
                P.address.icontains(term, autoescape=True),
                P.city.icontains(term, autoescape=True),
                P.neighborhood.icontains(term, autoescape=True),
            )
        )
    return q


def search_properties(
    db: Session,
    filters: schemas.PropertyFilters,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[models.Property], int]:
    """
    Filtered, paginated listing search. Returns (page_items, total).

    Behavior:
    - Base filter: is_available == True
    - When latitude, longitude and radius are all given, the radius scan runs
      first; no geo matches short-circuits to ([], 0) before other filters
    - Geo matches are intersected with the relational filters via id IN (...)
    - Ordered by is_premium desc, then sort_by/sort_order; created_at is always newest first
    """
    q = db.query(models.Property).filter(models.Property.is_available == True)  # noqa: E712

    if filters.has_geo:
        ranked = properties_within_radius(db, filters.latitude, filters.longitude, filters.radius)
        if not ranked:
            return [], 0
        q = q.filter(models.Property.id.in_([r.id for r in ranked]))

    q = _apply_filters(q, filters)

    sort_col = _SORT_COLUMNS[filters.sort_by]
    # Default created_at ordering is always newest first; sort_order only applies to explicit fields
    if filters.sort_by == "created_at" or filters.sort_order == "desc":
        secondary = sort_col.desc()
    else:
        secondary = sort_col.asc()
    q = q.order_by(models.Property.is_premium.desc(), secondary, models.Property.id.desc())

    try:
        total = q.order_by(None).count()
        items = q.offset((page - 1) * limit).limit(limit).all()
    except SQLAlchemyError as exc:
        logger.exception("search.listing_failed")
        raise GeoSearchError("Failed to load properties") from exc
    return items, total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
