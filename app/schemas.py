# Pydantic models (request/response DTOs) used by the API layer.
# Keep models minimal and serializable; business logic lives in services/DB.
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Literal, Optional
from datetime import datetime


# Listing categories accepted by the type filter
PropertyType = Literal[
    "apartment",
    "house",
    "studio",
    "room",
    "villa",
    "office",
    "land",
    "commercial",
]

# Fields that may replace created_at as the secondary sort key
SortField = Literal["created_at", "price", "views", "bedrooms", "area", "updated_at"]


# Response shape when reading a property from the API
class PropertyRead(BaseModel):
    id: int
    title: str
    description: str
    type: str
    price: int
    deposit: int
    address: str
    city: str
    neighborhood: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: int
    bathrooms: int
    area: int
    furnished: bool
    air_conditioned: bool
    parking: bool
    security: bool
    internet: bool
    water: bool
    electricity: bool
    status: str
    is_available: bool
    is_premium: bool
    views: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Nearby results carry the distance from the search center (kilometers)
class PropertyWithDistance(PropertyRead):
    distance: float


# Filters for the generic listing search; all optional and combined with AND
class PropertyFilters(BaseModel):
    type: Optional[PropertyType] = None
    city: Optional[str] = None
    neighborhood: Optional[str] = None
    min_price: Optional[int] = Field(None, ge=0)
    max_price: Optional[int] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    min_area: Optional[int] = Field(None, ge=0)
    max_area: Optional[int] = Field(None, ge=0)
    furnished: Optional[bool] = None
    air_conditioned: Optional[bool] = None
    parking: Optional[bool] = None
    security: Optional[bool] = None
    internet: Optional[bool] = None
    water: Optional[bool] = None
    electricity: Optional[bool] = None
    search: Optional[str] = None
    # Geo constraint applies only when all three are present
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: Optional[float] = Field(None, ge=0)
    sort_by: SortField = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("search", "city", "neighborhood", mode="before")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        # Trim surrounding whitespace; empty strings disable the filter
        if isinstance(v, str):
            v = v.strip() or None
        return v

    @property
    def has_geo(self) -> bool:
        return self.latitude is not None and self.longitude is not None and self.radius is not None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


# Response for GET /properties
class PropertyListResponse(BaseModel):
    message: str = "Properties retrieved successfully"
    properties: List[PropertyRead]
    pagination: Pagination


class SearchCenter(BaseModel):
    latitude: float
    longitude: float


# Response for GET /properties/nearby
class NearbyResponse(BaseModel):
    message: str = "Nearby properties retrieved successfully"
    properties: List[PropertyWithDistance]
    search_center: SearchCenter
    radius: float
