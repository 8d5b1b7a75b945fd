"""User-scoped region endpoints."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from geofence.api.deps import get_region_service
from geofence.auth.jwt import get_current_user
from geofence.schemas.region import RegionRead
from geofence.services.regions import RegionService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(get_current_user)],
)


@router.get("/{user_id}/regions", response_model=List[RegionRead])
async def list_user_regions(
    user_id: UUID,
    service: RegionService = Depends(get_region_service),
):
    """Regions owned by a user.

    The list is derived from ``regions.owner_id`` on every call, so it can
    never disagree with the regions table.
    """
    return await service.find_by_owner(user_id)
