"""Read-only spatial lookups around a point."""
from typing import List, Optional
from uuid import UUID

from geofence.geometry.validators import validate_distance, validate_point
from geofence.schemas.region import RegionRead
from geofence.services.region_repository import RegionRepository


class PointQueryEngine:
    """Containment and proximity queries over stored regions."""

    def __init__(self, repository: RegionRepository):
        self.repository = repository

    async def find_containing(self, longitude: float, latitude: float) -> List[RegionRead]:
        """Regions whose polygon contains or touches the point."""
        point = validate_point(longitude, latitude)
        return await self.repository.find_containing(point)

    async def find_near(
        self,
        longitude: float,
        latitude: float,
        max_distance: float,
        owner_id: Optional[UUID] = None,
    ) -> List[RegionRead]:
        """Regions within ``max_distance`` metres of the point, nearest first.

        Raises:
            InvalidCoordinatesError: point outside the WGS84 range
            InvalidDistanceError: ``max_distance`` is not strictly positive
        """
        point = validate_point(longitude, latitude)
        distance = validate_distance(max_distance)
        return await self.repository.find_near(point, distance, owner_id)
