"""Model exports."""
from geofence.models.user import User
from geofence.models.region import Region

__all__ = [
    "User",
    "Region",
]
