# Property search endpoints.
# Read-only surface over the listings catalogue: filtered search, proximity ("nearby") search,
# and single-listing lookup for clients hydrating ranked results.
import os
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..db import get_db
from .. import models, schemas
from ..geo import InvalidGeoQuery
from ..rate_limit import rate_limit
from ..search import GeoSearchError, nearby_properties, search_properties, total_pages

# Router namespace for property APIs
router = APIRouter()

# Defaults for the nearby endpoint; override via NEARBY_DEFAULT_RADIUS_KM / NEARBY_DEFAULT_LIMIT
NEARBY_DEFAULT_RADIUS_KM = float(os.getenv("NEARBY_DEFAULT_RADIUS_KM", "5"))
NEARBY_DEFAULT_LIMIT = int(os.getenv("NEARBY_DEFAULT_LIMIT", "20"))


# Map service-level failures onto HTTP errors.
# A store fault is a 503, never an empty result set.
def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, InvalidGeoQuery):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "invalid_coordinates", "message": str(exc)},
        )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error": "search_unavailable", "message": "Property search is temporarily unavailable"},
    )


@router.get(
    "/properties",
    response_model=schemas.PropertyListResponse,
    dependencies=[Depends(rate_limit("search"))],
)
def list_properties(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[schemas.PropertyType] = Query(None),
    city: Optional[str] = Query(None),
    neighborhood: Optional[str] = Query(None),
    min_price: Optional[int] = Query(None, ge=0),
    max_price: Optional[int] = Query(None, ge=0),
    bedrooms: Optional[int] = Query(None, ge=0),
    bathrooms: Optional[int] = Query(None, ge=0),
    min_area: Optional[int] = Query(None, ge=0),
    max_area: Optional[int] = Query(None, ge=0),
    furnished: Optional[bool] = Query(None),
    air_conditioned: Optional[bool] = Query(None),
    parking: Optional[bool] = Query(None),
    security: Optional[bool] = Query(None),
    internet: Optional[bool] = Query(None),
    water: Optional[bool] = Query(None),
    electricity: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=255),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, ge=0),
    sort_by: schemas.SortField = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    db: Session = Depends(get_db),
) -> schemas.PropertyListResponse:
    """
    Search available listings with optional filters and pagination.

    Geo constraint:
    - Applied only when latitude, longitude and radius are all present (no default radius)
    - Narrows the id set before the other filters; zero geo matches returns an empty page
    - No per-item distance is attached on this path (see /properties/nearby)
    """
    filters = schemas.PropertyFilters(
        type=type,
        city=city,
        neighborhood=neighborhood,
        min_price=min_price,
        max_price=max_price,
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        min_area=min_area,
        max_area=max_area,
        furnished=furnished,
        air_conditioned=air_conditioned,
        parking=parking,
        security=security,
        internet=internet,
        water=water,
        electricity=electricity,
        search=search,
        latitude=latitude,
        longitude=longitude,
        radius=radius,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    try:
        items, total = search_properties(db, filters, page=page, limit=limit)
    except (InvalidGeoQuery, GeoSearchError) as exc:
        raise _to_http_error(exc) from exc

    return schemas.PropertyListResponse(
        properties=[schemas.PropertyRead.model_validate(p) for p in items],
        pagination=schemas.Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages(total, limit),
        ),
    )


@router.get(
    "/properties/nearby",
    response_model=schemas.NearbyResponse,
    dependencies=[Depends(rate_limit("search"))],
)
def list_nearby_properties(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    radius: float = Query(NEARBY_DEFAULT_RADIUS_KM, ge=0),
    limit: int = Query(NEARBY_DEFAULT_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
) -> schemas.NearbyResponse:
    """
    Listings within `radius` km of the given point, closest first.

    Each listing carries its `distance` in km; the search center and radius are echoed back.
    An empty list is a normal outcome, not a 404.
    """
    try:
        pairs = nearby_properties(db, latitude, longitude, radius, limit)
    except (InvalidGeoQuery, GeoSearchError) as exc:
        raise _to_http_error(exc) from exc

    properties = [
        schemas.PropertyWithDistance(
            **schemas.PropertyRead.model_validate(prop).model_dump(),
            distance=distance,
        )
        for prop, distance in pairs
    ]
    return schemas.NearbyResponse(
        properties=properties,
        search_center=schemas.SearchCenter(latitude=latitude, longitude=longitude),
        radius=radius,
    )


@router.get(
    "/properties/{property_id}",
    response_model=schemas.PropertyRead,
    dependencies=[Depends(rate_limit("lookup"))],
)
def get_property(property_id: int, db: Session = Depends(get_db)) -> models.Property:
    obj = db.get(models.Property, property_id)
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return obj
