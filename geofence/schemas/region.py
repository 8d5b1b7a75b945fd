"""Pydantic schemas for Region and spatial queries."""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Tuple
from uuid import UUID
from pydantic import BaseModel, Field

Longitude = Annotated[float, Field(ge=-180, le=180, allow_inf_nan=False)]
Latitude = Annotated[float, Field(ge=-90, le=90, allow_inf_nan=False)]

# GeoJSON position order: [longitude, latitude]
Position = Tuple[Longitude, Latitude]


class Point(BaseModel):
    """A WGS84 point."""
    longitude: float
    latitude: float

    def as_position(self) -> Tuple[float, float]:
        return (self.longitude, self.latitude)


# --- Geometry Schemas ---
class PolygonGeometry(BaseModel):
    """GeoJSON Polygon restricted to a single outer ring."""
    type: Literal["Polygon"] = "Polygon"
    coordinates: List[List[Position]]

    @property
    def ring(self) -> List[Position]:
        return self.coordinates[0] if self.coordinates else []


# --- Region Schemas ---
class RegionCreate(BaseModel):
    """Region creation schema.

    ``user`` defaults to the authenticated caller when omitted.
    """
    name: str
    polygon: PolygonGeometry
    user: Optional[UUID] = None


class RegionUpdate(BaseModel):
    """Region partial update schema."""
    name: Optional[str] = None
    polygon: Optional[PolygonGeometry] = None


class RegionOwner(BaseModel):
    """Display projection of a region's owner."""
    id: UUID
    name: str
    email: str

    class Config:
        from_attributes = True


class RegionRead(BaseModel):
    """Region response schema."""
    id: UUID
    name: str
    polygon: PolygonGeometry
    user: RegionOwner
    created_at: datetime
    updated_at: datetime


class RegionEnvelope(BaseModel):
    """Single region wrapped in a status envelope."""
    status: Literal["success"] = "success"
    region: RegionRead


class RegionListEnvelope(BaseModel):
    """Region list wrapped in a status envelope."""
    status: Literal["success"] = "success"
    regions: List[RegionRead] = Field(default_factory=list)
