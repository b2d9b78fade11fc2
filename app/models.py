# SQLAlchemy ORM models for the listings catalogue.
# Keep business logic out of models; search/ranking lives in geo.py and search.py.
from sqlalchemy import Column, Integer, String, Text, Float, DateTime, Index, func, Boolean
from sqlalchemy.orm import declarative_mixin

from .db import Base


@declarative_mixin
class TimestampMixin:
    """Common UTC-aware timestamps automatically managed by the database.

    - created_at: set on insert
    - updated_at: set on insert and updated on each modification
    """
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Property(Base, TimestampMixin):
    """Rental listing.

    Only listings with status == 'active' and is_available == True are searchable.
    latitude/longitude are nullable; a listing missing either one is not geotagged
    and never appears in proximity results.
    """
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    type = Column(String(20), nullable=False, index=True)  # see schemas.PropertyType
    price = Column(Integer, nullable=False)
    deposit = Column(Integer, nullable=False, default=0)
    address = Column(String(255), nullable=False, default="")
    city = Column(String(120), nullable=False, default="", index=True)
    neighborhood = Column(String(120), nullable=False, default="")
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    bedrooms = Column(Integer, nullable=False, default=1)
    bathrooms = Column(Integer, nullable=False, default=1)
    area = Column(Integer, nullable=False, default=0)

    furnished = Column(Boolean, nullable=False, default=False)
    air_conditioned = Column(Boolean, nullable=False, default=False)
    parking = Column(Boolean, nullable=False, default=False)
    security = Column(Boolean, nullable=False, default=False)
    internet = Column(Boolean, nullable=False, default=False)
    water = Column(Boolean, nullable=False, default=False)
    electricity = Column(Boolean, nullable=False, default=False)

    status = Column(String(20), nullable=False, default="active")  # active | pending | inactive | rented
    is_available = Column(Boolean, nullable=False, default=True)
    is_premium = Column(Boolean, nullable=False, default=False)
    views = Column(Integer, nullable=False, default=0)

    # Range scans for the bounding-box pre-filter and the searchable subset
    __table_args__ = (
        Index("ix_properties_lat_lng", "latitude", "longitude"),
        Index("ix_properties_status_available", "status", "is_available"),
    )
