"""API v1 router aggregation."""
from fastapi import APIRouter

from geofence.api.v1.auth import router as auth_router
from geofence.api.v1.regions import router as regions_router
from geofence.api.v1.users import router as users_router

router = APIRouter()

router.include_router(auth_router)
router.include_router(regions_router)
router.include_router(users_router)
