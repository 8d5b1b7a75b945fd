"""Overlap detection between a candidate polygon and persisted regions."""
import logging
from typing import Optional
from uuid import UUID

from geofence.schemas.region import PolygonGeometry
from geofence.services.region_repository import RegionRepository

logger = logging.getLogger(__name__)


class OverlapChecker:
    """Answer whether a polygon intersects any stored region.

    Overlap is plain geometric intersection: a shared edge or vertex counts
    the same as shared area.
    """

    def __init__(self, repository: RegionRepository):
        self.repository = repository

    async def has_overlap(
        self,
        polygon: PolygonGeometry,
        exclude_id: Optional[UUID] = None,
    ) -> bool:
        overlapping = await self.repository.find_overlapping(polygon, exclude_id)
        if overlapping:
            ids = [str(region.id) for region in overlapping]
            logger.info(f"Polygon overlaps {len(ids)} region(s): {ids}")
        return len(overlapping) > 0
