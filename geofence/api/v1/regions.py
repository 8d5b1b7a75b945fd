"""Regions API endpoints."""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from geofence.api.deps import get_point_query_engine, get_region_service
from geofence.auth.jwt import get_current_user
from geofence.models import User
from geofence.schemas.region import (
    RegionCreate,
    RegionEnvelope,
    RegionListEnvelope,
    RegionRead,
    RegionUpdate,
)
from geofence.services.point_query import PointQueryEngine
from geofence.services.regions import RegionService
from geofence.utils.audit import log_region_event

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/regions",
    tags=["Regions"],
    dependencies=[Depends(get_current_user)],
)


# Point routes are declared before /{region_id} so "point" is not taken as an id
@router.get("/point/contains", response_model=RegionListEnvelope)
async def find_regions_containing_point(
    longitude: float = Query(..., description="WGS84 longitude"),
    latitude: float = Query(..., description="WGS84 latitude"),
    engine: PointQueryEngine = Depends(get_point_query_engine),
):
    """Regions whose polygon contains (or touches) the given point."""
    logger.info(f"Finding regions containing point ({longitude}, {latitude})")
    regions = await engine.find_containing(longitude, latitude)
    return RegionListEnvelope(regions=regions)


@router.get("/point/near", response_model=RegionListEnvelope)
async def find_regions_near_point(
    longitude: float = Query(..., description="WGS84 longitude"),
    latitude: float = Query(..., description="WGS84 latitude"),
    distance: float = Query(..., description="Maximum distance in metres"),
    user_id: Optional[UUID] = Query(None, alias="userId", description="Restrict to this owner"),
    engine: PointQueryEngine = Depends(get_point_query_engine),
):
    """Regions within ``distance`` metres of the point, nearest first."""
    logger.info(
        f"Finding regions near point ({longitude}, {latitude}) within {distance}m"
        + (f" for owner {user_id}" if user_id else "")
    )
    regions = await engine.find_near(longitude, latitude, distance, user_id)
    return RegionListEnvelope(regions=regions)


@router.post("", response_model=RegionEnvelope, status_code=status.HTTP_201_CREATED)
async def create_region(
    region_data: RegionCreate,
    service: RegionService = Depends(get_region_service),
    current_user: User = Depends(get_current_user),
):
    """Create a region after validation and overlap checks."""
    owner_id = region_data.user or current_user.id
    logger.info(f"Creating region '{region_data.name}' for owner {owner_id}")

    region = await service.create(region_data.name, region_data.polygon, owner_id)

    log_region_event("region_created", region, actor=current_user)
    return RegionEnvelope(region=region)


@router.get("", response_model=List[RegionRead])
async def list_regions(
    service: RegionService = Depends(get_region_service),
):
    """List all regions."""
    return await service.find_all()


@router.get("/{region_id}", response_model=RegionRead)
async def get_region(
    region_id: str,
    service: RegionService = Depends(get_region_service),
):
    """Get a specific region."""
    return await service.find_by_id(region_id)


@router.patch("/{region_id}", response_model=RegionEnvelope)
async def update_region(
    region_id: str,
    region_data: RegionUpdate,
    service: RegionService = Depends(get_region_service),
    current_user: User = Depends(get_current_user),
):
    """Partially update a region; only supplied fields change."""
    fields = {
        field: getattr(region_data, field)
        for field in region_data.model_fields_set
    }
    logger.info(f"Updating region {region_id} ({', '.join(sorted(fields)) or 'no fields'})")

    region = await service.update(region_id, fields)

    log_region_event(
        "region_updated",
        region,
        actor=current_user,
        updated_fields=sorted(fields.keys()),
    )
    return RegionEnvelope(region=region)


@router.delete("/{region_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_region(
    region_id: str,
    service: RegionService = Depends(get_region_service),
    current_user: User = Depends(get_current_user),
):
    """Delete a region."""
    logger.info(f"Deleting region {region_id}")
    region = await service.delete(region_id)

    log_region_event("region_deleted", region, actor=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
