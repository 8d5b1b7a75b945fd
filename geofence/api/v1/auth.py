"""Authentication API endpoints."""
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from geofence.api.deps import get_geocoder, get_user_repository
from geofence.models import User
from geofence.schemas.user import (
    Address,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
    TokenRefreshRequest,
    UserResponse,
)
from geofence.auth.jwt import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    get_current_user,
)
from geofence.config import get_settings
from geofence.services.geocoding import GeocodingClient
from geofence.services.user_repository import UserRepository
from geofence.utils.audit import log_audit_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])
settings = get_settings()

ADDRESS_FIELDS = ("street", "number", "city", "state", "country", "zip_code", "formatted_address")


def user_to_response(user: User, region_ids: List[UUID]) -> UserResponse:
    coordinates = None
    if user.longitude is not None and user.latitude is not None:
        coordinates = [user.longitude, user.latitude]

    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        address=Address(**{field: getattr(user, field) for field in ADDRESS_FIELDS}),
        coordinates=coordinates,
        region_ids=region_ids,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def _token_pair(user: User) -> dict:
    return {
        "access_token": create_access_token(str(user.id)),
        "refresh_token": create_refresh_token(str(user.id)),
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_HOURS * 3600,
    }


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    users: UserRepository = Depends(get_user_repository),
    geocoder: GeocodingClient = Depends(get_geocoder),
):
    """Register a new user, resolving whichever of address/coordinates is missing."""
    # Check if email already exists
    if await users.find_by_email(request.email):
        logger.warning(f"Attempted to register duplicate user {request.email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    if request.coordinates is not None:
        longitude, latitude = request.coordinates
        address = await geocoder.get_address_from_coordinates((longitude, latitude))
    else:
        address = request.address
        longitude, latitude = await geocoder.get_coordinates_from_address(address)

    user = User(
        name=request.name,
        email=request.email,
        password_hash=hash_password(request.password),
        longitude=longitude,
        latitude=latitude,
        **address.model_dump(include=set(ADDRESS_FIELDS)),
    )
    user = await users.create(user)

    log_audit_event(
        "user_registered",
        actor=user,
        details={"user_id": str(user.id)},
    )

    return RegisterResponse(user=user_to_response(user, []), **_token_pair(user))


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
):
    """Login with email and password."""
    user = await users.find_by_email(request.email)

    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    return TokenResponse(**_token_pair(user))


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    request: TokenRefreshRequest,
    users: UserRepository = Depends(get_user_repository),
):
    """Refresh access token using refresh token."""
    payload = verify_token(request.refresh_token, "refresh")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    user = await users.find_by_id(user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )

    return TokenResponse(**_token_pair(user))


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """Get current authenticated user info with the ids of the regions they own."""
    return user_to_response(current_user, await users.region_ids(current_user.id))
