"""Geometry validation exports."""
from geofence.geometry.validators import (
    MAX_REGION_NAME_LENGTH,
    MIN_RING_POINTS,
    is_ring_closed,
    is_valid_coordinates,
    validate_distance,
    validate_point,
    validate_polygon,
    validate_region_name,
)

__all__ = [
    "MAX_REGION_NAME_LENGTH",
    "MIN_RING_POINTS",
    "is_ring_closed",
    "is_valid_coordinates",
    "validate_distance",
    "validate_point",
    "validate_polygon",
    "validate_region_name",
]
