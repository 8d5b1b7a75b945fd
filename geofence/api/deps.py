"""Request-scoped service wiring.

Routes never construct services themselves; they depend on these providers
so tests can swap the repositories or geocoder with ``dependency_overrides``.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from geofence.config import get_settings
from geofence.database import get_db
from geofence.services.geocoding import GeocodingClient
from geofence.services.overlap import OverlapChecker
from geofence.services.point_query import PointQueryEngine
from geofence.services.region_repository import RegionRepository
from geofence.services.region_repository_postgis import PostgisRegionRepository
from geofence.services.regions import RegionService
from geofence.services.user_repository import UserRepository
from geofence.services.user_repository_postgis import PostgisUserRepository


def get_region_repository(db: AsyncSession = Depends(get_db)) -> RegionRepository:
    return PostgisRegionRepository(db)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return PostgisUserRepository(db)


def get_region_service(
    repository: RegionRepository = Depends(get_region_repository),
) -> RegionService:
    settings = get_settings()
    return RegionService(
        repository,
        OverlapChecker(repository),
        name_min_length=settings.REGION_NAME_MIN_LENGTH,
        name_max_length=settings.REGION_NAME_MAX_LENGTH,
    )


def get_point_query_engine(
    repository: RegionRepository = Depends(get_region_repository),
) -> PointQueryEngine:
    return PointQueryEngine(repository)


def get_geocoder(request: Request) -> GeocodingClient:
    """Geocoding client created by the application lifespan."""
    return request.app.state.geocoder
