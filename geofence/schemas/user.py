"""Pydantic schemas for User and Auth."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field, model_validator

from geofence.schemas.region import Position


# --- Auth Schemas ---
class TokenResponse(BaseModel):
    """Token response schema."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token expiration in seconds")


class TokenRefreshRequest(BaseModel):
    """Refresh token request schema."""
    refresh_token: str


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr
    password: str


# --- Address Schemas ---
class Address(BaseModel):
    """Postal address as returned by (or sent to) the geocoder."""
    street: Optional[str] = None
    number: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    formatted_address: Optional[str] = None


class RegisterRequest(BaseModel):
    """User registration request schema.

    Exactly one of ``address`` or ``coordinates`` must be given; the other
    is resolved through the geocoding service.
    """
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8)
    address: Optional[Address] = None
    coordinates: Optional[Position] = None

    @model_validator(mode="after")
    def _one_location_source(self):
        if self.address is None and self.coordinates is None:
            raise ValueError("Please provide coordinates or address.")
        if self.address is not None and self.coordinates is not None:
            raise ValueError("Please provide only coordinates or address, not both.")
        return self


# --- User Schemas ---
class UserResponse(BaseModel):
    """User response schema."""
    id: UUID
    name: str
    email: EmailStr
    address: Address
    coordinates: Optional[List[float]] = None
    region_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class RegisterResponse(BaseModel):
    """Registration response: the created user plus its first token pair."""
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
