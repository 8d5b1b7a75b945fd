"""Region lifecycle: validated create, update and delete."""
import logging
from typing import Any, List, Mapping, Optional, Union
from uuid import UUID

from geofence.errors import NotFoundError, OperationFailedError, RegionOverlapError
from geofence.geometry.validators import (
    MAX_REGION_NAME_LENGTH,
    validate_polygon,
    validate_region_name,
)
from geofence.schemas.region import PolygonGeometry, RegionRead
from geofence.services.overlap import OverlapChecker
from geofence.services.region_repository import RegionRepository

logger = logging.getLogger(__name__)

EntityId = Union[str, UUID, None]


def _parse_id(value: EntityId, entity: str, label: str) -> UUID:
    if isinstance(value, UUID):
        return value
    if not value or not str(value).strip():
        raise OperationFailedError(f"{label} ID is required", entity=entity)
    try:
        return UUID(str(value).strip())
    except ValueError:
        raise OperationFailedError(f"Invalid {label} ID", entity=entity)


def parse_region_id(region_id: EntityId) -> UUID:
    """Turn a path/query identifier into a UUID or raise ``OperationFailedError``."""
    return _parse_id(region_id, "region", "Region")


def parse_user_id(user_id: EntityId) -> UUID:
    return _parse_id(user_id, "user", "User")


class RegionService:
    """Gatekeeper for every region write.

    Name and polygon rules run before anything reaches the repository, and
    the overlap check plus the write happen under the repository's write
    lock so concurrent writers are serialised.
    """

    def __init__(
        self,
        repository: RegionRepository,
        overlap_checker: Optional[OverlapChecker] = None,
        name_min_length: int = 3,
        name_max_length: int = MAX_REGION_NAME_LENGTH,
    ):
        self.repository = repository
        self.overlap_checker = overlap_checker or OverlapChecker(repository)
        self.name_min_length = name_min_length
        self.name_max_length = name_max_length

    def _validate_name(self, name: Optional[str]) -> str:
        return validate_region_name(name, self.name_min_length, self.name_max_length)

    async def _ensure_no_overlap(
        self,
        polygon: PolygonGeometry,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        if await self.overlap_checker.has_overlap(polygon, exclude_id):
            raise RegionOverlapError()

    async def create(
        self,
        name: str,
        polygon: PolygonGeometry,
        owner_id: Union[str, UUID],
    ) -> RegionRead:
        name = self._validate_name(name)
        validate_polygon(polygon)
        owner_uuid = parse_user_id(owner_id)

        async with self.repository.write_lock():
            await self._ensure_no_overlap(polygon)

            if not await self.repository.owner_exists(owner_uuid):
                logger.warning(f"Region creation aborted, owner {owner_uuid} not found")
                raise NotFoundError.for_entity("user", owner_uuid)

            region = await self.repository.create(name, polygon, owner_uuid)

        logger.info(f"Region {region.id} created for owner {owner_uuid}")
        return region

    async def find_all(self) -> List[RegionRead]:
        return await self.repository.find_all()

    async def find_by_id(self, region_id: EntityId) -> RegionRead:
        region_uuid = parse_region_id(region_id)
        region = await self.repository.find_by_id(region_uuid)
        if region is None:
            raise NotFoundError.for_entity("region", region_uuid)
        return region

    async def find_by_owner(self, owner_id: Union[str, UUID]) -> List[RegionRead]:
        owner_uuid = parse_user_id(owner_id)
        if not await self.repository.owner_exists(owner_uuid):
            raise NotFoundError.for_entity("user", owner_uuid)
        return await self.repository.find_by_owner(owner_uuid)

    async def update(self, region_id: EntityId, fields: Mapping[str, Any]) -> RegionRead:
        """Apply a partial update; omitted fields are left untouched.

        A supplied polygon is re-checked for overlap even when unchanged,
        relying on the region excluding itself from the candidate set.
        """
        region_uuid = parse_region_id(region_id)

        changes: dict[str, Any] = {}
        if "name" in fields:
            changes["name"] = self._validate_name(fields["name"])
        if "polygon" in fields:
            validate_polygon(fields["polygon"])
            changes["polygon"] = fields["polygon"]

        async with self.repository.write_lock():
            if "polygon" in changes:
                await self._ensure_no_overlap(changes["polygon"], exclude_id=region_uuid)

            region = await self.repository.update(region_uuid, changes)

        if region is None:
            raise NotFoundError.for_entity("region", region_uuid)

        logger.info(f"Region {region_uuid} updated ({', '.join(sorted(changes)) or 'no fields'})")
        return region

    async def delete(self, region_id: EntityId) -> RegionRead:
        region_uuid = parse_region_id(region_id)
        region = await self.repository.delete(region_uuid)
        if region is None:
            logger.error(f"Region not found for deletion: {region_uuid}")
            raise NotFoundError.for_entity("region", region_uuid)

        logger.info(f"Region {region_uuid} deleted")
        return region
