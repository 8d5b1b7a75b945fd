"""Services exports."""
from geofence.services.geocoding import GeocodingClient
from geofence.services.overlap import OverlapChecker
from geofence.services.point_query import PointQueryEngine
from geofence.services.region_repository import RegionRepository
from geofence.services.region_repository_postgis import PostgisRegionRepository
from geofence.services.regions import RegionService
from geofence.services.user_repository import UserRepository
from geofence.services.user_repository_postgis import PostgisUserRepository

__all__ = [
    "GeocodingClient",
    "OverlapChecker",
    "PointQueryEngine",
    "RegionRepository",
    "PostgisRegionRepository",
    "RegionService",
    "UserRepository",
    "PostgisUserRepository",
]
