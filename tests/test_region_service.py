"""Tests for the region lifecycle service and overlap checker."""
import asyncio
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from geofence.errors import (
    InvalidStructureError,
    NotClosedError,
    NotFoundError,
    OperationFailedError,
    RegionOverlapError,
    ValidationFailedError,
)
from geofence.schemas.region import PolygonGeometry
from geofence.services.overlap import OverlapChecker
from geofence.services.regions import RegionService, parse_region_id, parse_user_id
from tests.fakes import SAO_PAULO_RING, InMemoryRegionRepository, make_polygon, square


class TestParseRegionId:
    def test_accepts_uuid_string(self):
        region_id = uuid.uuid4()
        assert parse_region_id(str(region_id)) == region_id

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_missing_id(self, value):
        with pytest.raises(OperationFailedError, match="Region ID is required"):
            parse_region_id(value)

    def test_malformed_id(self):
        with pytest.raises(OperationFailedError, match="Invalid Region ID"):
            parse_region_id("not-a-uuid")

    def test_malformed_user_id(self):
        with pytest.raises(OperationFailedError, match="Invalid User ID"):
            parse_user_id("owner-42")


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_region(self, service, owner, repository):
        region = await service.create("Test Region", make_polygon(SAO_PAULO_RING), owner.id)

        assert region.name == "Test Region"
        assert region.user.id == owner.id
        assert [list(p) for p in region.polygon.ring] == SAO_PAULO_RING
        assert repository.regions[region.id] == region

    @pytest.mark.asyncio
    async def test_trims_name(self, service, owner):
        region = await service.create("  Padded  ", square(0, 0), owner.id)
        assert region.name == "Padded"

    @pytest.mark.asyncio
    async def test_short_name_rejected(self, service, owner, repository):
        with pytest.raises(ValidationFailedError, match="at least 3 characters"):
            await service.create("ab", square(0, 0), owner.id)
        assert repository.regions == {}

    @pytest.mark.asyncio
    async def test_name_longer_than_column_rejected(self, service, owner, repository):
        with pytest.raises(ValidationFailedError, match="at most 100 characters"):
            await service.create("R" * 101, square(0, 0), owner.id)
        assert repository.regions == {}

    @pytest.mark.asyncio
    async def test_name_at_column_width_accepted(self, service, owner):
        region = await service.create("R" * 100, square(0, 0), owner.id)
        assert len(region.name) == 100

    @pytest.mark.asyncio
    async def test_malformed_owner_id(self, service, repository):
        with pytest.raises(OperationFailedError, match="Invalid User ID"):
            await service.create("Test Region", square(0, 0), "owner-42")
        assert repository.regions == {}

    @pytest.mark.asyncio
    async def test_open_ring_rejected(self, service, owner):
        ring = [[-46.633308, -23.55052], [-46.633308, -23.54052], [-46.623308, -23.55052]]
        with pytest.raises(InvalidStructureError):
            await service.create("Test Region", make_polygon(ring), owner.id)

    @pytest.mark.asyncio
    async def test_unclosed_ring_rejected(self, service, owner):
        ring = [[0, 0], [0, 1], [1, 1], [1, 0]]
        with pytest.raises(NotClosedError):
            await service.create("Test Region", make_polygon(ring), owner.id)

    @pytest.mark.asyncio
    async def test_identical_polygon_overlaps(self, service, owner, repository):
        await service.create("Test Region", make_polygon(SAO_PAULO_RING), owner.id)
        other = repository.add_user("Other", "other@example.com")

        with pytest.raises(RegionOverlapError, match="Region overlaps with existing regions"):
            await service.create("Copy Region", make_polygon(SAO_PAULO_RING), other.id)
        assert len(repository.regions) == 1

    @pytest.mark.asyncio
    async def test_shared_edge_counts_as_overlap(self, service, owner):
        await service.create("Left", square(0, 0, 1), owner.id)
        with pytest.raises(RegionOverlapError):
            await service.create("Right", square(1, 0, 1), owner.id)

    @pytest.mark.asyncio
    async def test_disjoint_regions_allowed(self, service, owner, repository):
        await service.create("First", square(0, 0), owner.id)
        await service.create("Second", square(10, 10), owner.id)
        assert len(repository.regions) == 2

    @pytest.mark.asyncio
    async def test_unknown_owner_aborts(self, service, repository):
        with pytest.raises(NotFoundError, match="user with id"):
            await service.create("Orphan", square(0, 0), uuid.uuid4())
        assert repository.regions == {}

    @pytest.mark.asyncio
    async def test_persistence_error_propagates(self, service, owner, repository):
        repository.fail_with = OperationalError("SELECT", {}, Exception("boom"))
        with pytest.raises(OperationalError):
            await service.create("Test Region", square(0, 0), owner.id)

    @pytest.mark.asyncio
    async def test_write_takes_lock(self, service, owner, repository):
        await service.create("Test Region", square(0, 0), owner.id)
        assert repository.lock_entries == 1

    @pytest.mark.asyncio
    async def test_concurrent_overlapping_creates_are_serialised(self, service, owner, repository):
        results = await asyncio.gather(
            service.create("Racer One", square(0, 0), owner.id),
            service.create("Racer Two", square(0, 0), owner.id),
            return_exceptions=True,
        )
        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, RegionOverlapError)]
        assert len(created) == 1
        assert len(rejected) == 1
        assert len(repository.regions) == 1


class TestUpdate:
    @pytest.mark.asyncio
    async def test_updates_name_only(self, service, owner):
        region = await service.create("Original", square(0, 0), owner.id)

        updated = await service.update(str(region.id), {"name": "Renamed"})

        assert updated.name == "Renamed"
        assert updated.polygon == region.polygon

    @pytest.mark.asyncio
    async def test_unchanged_polygon_does_not_overlap_itself(self, service, owner):
        region = await service.create("Original", square(0, 0), owner.id)

        updated = await service.update(region.id, {"polygon": region.polygon})

        assert updated.id == region.id

    @pytest.mark.asyncio
    async def test_polygon_overlapping_neighbour_rejected(self, service, owner):
        await service.create("Neighbour", square(0, 0), owner.id)
        region = await service.create("Mover", square(5, 5), owner.id)

        with pytest.raises(RegionOverlapError):
            await service.update(region.id, {"polygon": square(0.005, 0.005)})

    @pytest.mark.asyncio
    async def test_invalid_name_rejected(self, service, owner):
        region = await service.create("Original", square(0, 0), owner.id)
        with pytest.raises(ValidationFailedError):
            await service.update(region.id, {"name": " x "})

    @pytest.mark.asyncio
    async def test_long_name_rejected(self, service, owner):
        region = await service.create("Original", square(0, 0), owner.id)
        with pytest.raises(ValidationFailedError, match="at most 100 characters"):
            await service.update(region.id, {"name": "R" * 101})

    @pytest.mark.asyncio
    async def test_explicit_null_polygon_rejected(self, service, owner):
        region = await service.create("Original", square(0, 0), owner.id)
        with pytest.raises(InvalidStructureError):
            await service.update(region.id, {"polygon": None})

    @pytest.mark.asyncio
    async def test_missing_region(self, service):
        with pytest.raises(NotFoundError, match="region with id"):
            await service.update(uuid.uuid4(), {"name": "Whatever"})

    @pytest.mark.asyncio
    async def test_empty_id(self, service):
        with pytest.raises(OperationFailedError, match="Region ID is required"):
            await service.update("", {"name": "Whatever"})


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_region(self, service, owner, repository):
        region = await service.create("Doomed", square(0, 0), owner.id)

        deleted = await service.delete(str(region.id))

        assert deleted.id == region.id
        assert repository.regions == {}
        assert await service.find_by_owner(owner.id) == []
        with pytest.raises(NotFoundError):
            await service.find_by_id(region.id)

    @pytest.mark.asyncio
    async def test_invalid_id(self, service):
        with pytest.raises(OperationFailedError, match="Invalid Region ID"):
            await service.delete("12345")

    @pytest.mark.asyncio
    async def test_missing_region(self, service):
        with pytest.raises(NotFoundError):
            await service.delete(uuid.uuid4())


class TestReads:
    @pytest.mark.asyncio
    async def test_find_all_and_by_owner(self, service, owner, repository):
        other = repository.add_user("Other", "other@example.com")
        mine = await service.create("Mine Region", square(0, 0), owner.id)
        theirs = await service.create("Their Region", square(5, 5), other.id)

        assert [r.id for r in await service.find_all()] == [mine.id, theirs.id]
        assert [r.id for r in await service.find_by_owner(other.id)] == [theirs.id]

    @pytest.mark.asyncio
    async def test_find_by_owner_malformed_id(self, service):
        with pytest.raises(OperationFailedError, match="Invalid User ID"):
            await service.find_by_owner("not-a-uuid")

    @pytest.mark.asyncio
    async def test_find_by_owner_unknown_user(self, service):
        with pytest.raises(NotFoundError, match="user with id"):
            await service.find_by_owner(uuid.uuid4())


class TestOverlapChecker:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("a", "b"),
        [
            (square(0, 0, 1), square(0.5, 0.5, 1)),
            (square(0, 0, 1), square(1, 1, 1)),
            (square(0, 0, 1), square(0.25, 0.25, 0.5)),
            (square(0, 0, 1), square(3, 3, 1)),
        ],
    )
    async def test_overlap_is_symmetric(self, a: PolygonGeometry, b: PolygonGeometry):
        forward = InMemoryRegionRepository()
        owner = forward.add_user()
        await forward.create("A region", a, owner.id)

        backward = InMemoryRegionRepository()
        owner = backward.add_user()
        await backward.create("B region", b, owner.id)

        assert await OverlapChecker(forward).has_overlap(b) == await OverlapChecker(
            backward
        ).has_overlap(a)

    @pytest.mark.asyncio
    async def test_excluded_region_ignored(self, repository, owner):
        region = await repository.create("Self", square(0, 0), owner.id)
        checker = OverlapChecker(repository)

        assert await checker.has_overlap(square(0, 0)) is True
        assert await checker.has_overlap(square(0, 0), exclude_id=region.id) is False

    @pytest.mark.asyncio
    async def test_service_uses_injected_checker(self, repository, owner):
        class AlwaysOverlaps(OverlapChecker):
            async def has_overlap(self, polygon, exclude_id=None):
                return True

        service = RegionService(repository, AlwaysOverlaps(repository))
        with pytest.raises(RegionOverlapError):
            await service.create("Blocked", square(0, 0), owner.id)
