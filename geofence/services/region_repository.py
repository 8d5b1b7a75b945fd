"""Region repository abstract base class.

Defines the persistence interface the region services depend on. The
production implementation is :class:`PostgisRegionRepository`; any backend
that can answer intersection and distance queries over polygons can stand in.
"""
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any, List, Mapping, Optional
from uuid import UUID

from geofence.schemas.region import Point, PolygonGeometry, RegionRead


class RegionRepository(ABC):
    """Abstract base class for region persistence backends."""

    @abstractmethod
    async def find_all(self) -> List[RegionRead]:
        ...

    @abstractmethod
    async def find_by_id(self, region_id: UUID) -> Optional[RegionRead]:
        ...

    @abstractmethod
    async def find_by_owner(self, owner_id: UUID) -> List[RegionRead]:
        ...

    @abstractmethod
    async def owner_exists(self, owner_id: UUID) -> bool:
        ...

    @abstractmethod
    async def find_overlapping(
        self,
        polygon: PolygonGeometry,
        exclude_id: Optional[UUID] = None,
    ) -> List[RegionRead]:
        """Return regions whose polygon intersects ``polygon``.

        Args:
            polygon: Candidate geometry
            exclude_id: Region to leave out of the result (the one being updated)
        """
        ...

    @abstractmethod
    async def find_containing(self, point: Point) -> List[RegionRead]:
        """Return regions whose area or boundary includes ``point``."""
        ...

    @abstractmethod
    async def find_near(
        self,
        point: Point,
        max_distance: float,
        owner_id: Optional[UUID] = None,
    ) -> List[RegionRead]:
        """Return regions within ``max_distance`` metres of ``point``, nearest first."""
        ...

    @abstractmethod
    async def create(
        self,
        name: str,
        polygon: PolygonGeometry,
        owner_id: UUID,
    ) -> RegionRead:
        ...

    @abstractmethod
    async def update(
        self,
        region_id: UUID,
        fields: Mapping[str, Any],
    ) -> Optional[RegionRead]:
        """Apply the supplied fields only. Returns None when the region is missing."""
        ...

    @abstractmethod
    async def delete(self, region_id: UUID) -> Optional[RegionRead]:
        """Delete and return the region, or None when it is missing."""
        ...

    @abstractmethod
    def write_lock(self) -> AbstractAsyncContextManager[None]:
        """Serialise region writes so overlap checks see committed neighbours."""
        ...
