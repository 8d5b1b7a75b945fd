"""PostGIS region repository."""
import logging
from contextlib import asynccontextmanager
from typing import Any, List, Mapping, Optional
from uuid import UUID

from geoalchemy2 import Geography
from geoalchemy2.shape import from_shape, to_shape
from shapely.geometry import mapping, shape
from sqlalchemy import cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from geofence.models import Region, User
from geofence.schemas.region import Point, PolygonGeometry, RegionOwner, RegionRead
from geofence.services.region_repository import RegionRepository

logger = logging.getLogger(__name__)

SRID_WGS84 = 4326

# Key for pg_advisory_xact_lock; any constant unique within the database
REGION_WRITE_LOCK_KEY = 0x5245474E


def polygon_to_element(polygon: PolygonGeometry):
    """Convert a GeoJSON polygon into a WKB element bound to SRID 4326."""
    return from_shape(shape(polygon.model_dump()), srid=SRID_WGS84)


def point_to_element(point: Point):
    return func.ST_SetSRID(func.ST_MakePoint(point.longitude, point.latitude), SRID_WGS84)


def region_to_read(region: Region) -> RegionRead:
    return RegionRead(
        id=region.id,
        name=region.name,
        polygon=PolygonGeometry.model_validate(mapping(to_shape(region.polygon))),
        user=RegionOwner.model_validate(region.owner),
        created_at=region.created_at,
        updated_at=region.updated_at,
    )


class PostgisRegionRepository(RegionRepository):
    """Region persistence on PostgreSQL/PostGIS through an AsyncSession.

    Writes are flushed, not committed; the session owner (``get_db``)
    commits at the end of the request.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    def _select(self):
        return select(Region).options(selectinload(Region.owner))

    async def _fetch(self, query) -> List[RegionRead]:
        result = await self.db.execute(query)
        return [region_to_read(region) for region in result.scalars().all()]

    async def _get_model(self, region_id: UUID) -> Optional[Region]:
        result = await self.db.execute(
            self._select()
            .where(Region.id == region_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_all(self) -> List[RegionRead]:
        return await self._fetch(self._select().order_by(Region.created_at))

    async def find_by_id(self, region_id: UUID) -> Optional[RegionRead]:
        region = await self._get_model(region_id)
        return region_to_read(region) if region else None

    async def find_by_owner(self, owner_id: UUID) -> List[RegionRead]:
        return await self._fetch(
            self._select().where(Region.owner_id == owner_id).order_by(Region.created_at)
        )

    async def owner_exists(self, owner_id: UUID) -> bool:
        result = await self.db.execute(select(User.id).where(User.id == owner_id))
        return result.scalar_one_or_none() is not None

    async def find_overlapping(
        self,
        polygon: PolygonGeometry,
        exclude_id: Optional[UUID] = None,
    ) -> List[RegionRead]:
        query = self._select().where(
            func.ST_Intersects(Region.polygon, polygon_to_element(polygon))
        )
        if exclude_id is not None:
            query = query.where(Region.id != exclude_id)
        return await self._fetch(query)

    async def find_containing(self, point: Point) -> List[RegionRead]:
        return await self._fetch(
            self._select().where(func.ST_Intersects(Region.polygon, point_to_element(point)))
        )

    async def find_near(
        self,
        point: Point,
        max_distance: float,
        owner_id: Optional[UUID] = None,
    ) -> List[RegionRead]:
        # geography casts make distances metres on the WGS84 spheroid
        region_geog = cast(Region.polygon, Geography(srid=SRID_WGS84))
        point_geog = cast(point_to_element(point), Geography(srid=SRID_WGS84))

        query = self._select().where(func.ST_DWithin(region_geog, point_geog, max_distance))
        if owner_id is not None:
            query = query.where(Region.owner_id == owner_id)
        query = query.order_by(func.ST_Distance(region_geog, point_geog))
        return await self._fetch(query)

    async def create(
        self,
        name: str,
        polygon: PolygonGeometry,
        owner_id: UUID,
    ) -> RegionRead:
        region = Region(
            name=name,
            polygon=polygon_to_element(polygon),
            owner_id=owner_id,
        )
        self.db.add(region)
        await self.db.flush()
        logger.debug(f"Region {region.id} flushed for owner {owner_id}")
        return region_to_read(await self._get_model(region.id))

    async def update(
        self,
        region_id: UUID,
        fields: Mapping[str, Any],
    ) -> Optional[RegionRead]:
        region = await self._get_model(region_id)
        if region is None:
            return None

        for field, value in fields.items():
            if field == "polygon":
                value = polygon_to_element(value)
            setattr(region, field, value)

        await self.db.flush()
        return region_to_read(await self._get_model(region_id))

    async def delete(self, region_id: UUID) -> Optional[RegionRead]:
        region = await self._get_model(region_id)
        if region is None:
            return None

        snapshot = region_to_read(region)
        await self.db.delete(region)
        await self.db.flush()
        return snapshot

    @asynccontextmanager
    async def write_lock(self):
        # Held until the surrounding transaction commits or rolls back
        await self.db.execute(select(func.pg_advisory_xact_lock(REGION_WRITE_LOCK_KEY)))
        yield
