"""Pure validation of region geometry and query inputs.

None of these functions touch persistence; they are run explicitly by the
services before any query or write is issued.
"""
import math
from typing import Sequence

from geofence.errors import (
    InvalidCoordinatesError,
    InvalidDistanceError,
    InvalidStructureError,
    NotClosedError,
    ValidationFailedError,
)
from geofence.schemas.region import Point, PolygonGeometry

MIN_RING_POINTS = 4

# Matches the width of regions.name
MAX_REGION_NAME_LENGTH = 100


def is_ring_closed(ring: Sequence[Sequence[float]]) -> bool:
    """Exact equality of the first and last position on both axes."""
    first, last = ring[0], ring[-1]
    return first[0] == last[0] and first[1] == last[1]


def validate_polygon(polygon: PolygonGeometry) -> None:
    """Check that ``polygon`` is a closed single ring of at least 4 points.

    Raises:
        InvalidStructureError: missing ring, extra rings or too few points.
        NotClosedError: first and last positions differ.
    """
    if polygon is None or not polygon.coordinates:
        raise InvalidStructureError("Invalid polygon structure", entity="region")
    if len(polygon.coordinates) > 1:
        raise InvalidStructureError(
            "Polygon must have a single outer ring (holes are not supported)",
            entity="region",
        )

    ring = polygon.coordinates[0]
    if len(ring) < MIN_RING_POINTS:
        raise InvalidStructureError(
            "A polygon must have at least 4 points, the last one being equal to the first one",
            entity="region",
        )
    if not is_ring_closed(ring):
        raise NotClosedError(
            "The polygon must be closed (first and last points must be equal)",
            entity="region",
        )


def is_valid_coordinates(longitude: float, latitude: float) -> bool:
    if math.isnan(longitude) or math.isnan(latitude):
        return False
    return -180 <= longitude <= 180 and -90 <= latitude <= 90


def validate_point(longitude: float, latitude: float) -> Point:
    if not is_valid_coordinates(longitude, latitude):
        raise InvalidCoordinatesError("Invalid coordinates", entity="region")
    return Point(longitude=longitude, latitude=latitude)


def validate_distance(max_distance: float) -> float:
    # also rejects NaN
    if not max_distance > 0:
        raise InvalidDistanceError("Distance must be greater than 0", entity="region")
    return float(max_distance)


def validate_region_name(
    name: str | None,
    min_length: int = 3,
    max_length: int = MAX_REGION_NAME_LENGTH,
) -> str:
    """Return the trimmed name or raise when it is too short or too long."""
    trimmed = (name or "").strip()
    if len(trimmed) < min_length:
        raise ValidationFailedError(
            f"Region name must be at least {min_length} characters", entity="region"
        )
    if len(trimmed) > max_length:
        raise ValidationFailedError(
            f"Region name must be at most {max_length} characters", entity="region"
        )
    return trimmed
