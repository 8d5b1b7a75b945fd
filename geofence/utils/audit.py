"""Structured audit logging for region and account changes.

Each event is one JSON line on the ``geofence.audit`` logger, so it can be
shipped separately from the application log.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from geofence.schemas.region import RegionRead

audit_logger = logging.getLogger("geofence.audit")


def _to_serializable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(k): _to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_serializable(v) for v in value]
    return str(value)


def region_audit_details(region: RegionRead) -> dict[str, Any]:
    """Identity, owner and footprint of a region.

    ``bbox`` is ``[min_lng, min_lat, max_lng, max_lat]``; the vertex count
    excludes the closing point.
    """
    ring = region.polygon.ring
    longitudes = [position[0] for position in ring]
    latitudes = [position[1] for position in ring]
    return {
        "region_id": str(region.id),
        "region_name": region.name,
        "owner_id": str(region.user.id),
        "vertex_count": max(len(ring) - 1, 0),
        "bbox": [min(longitudes), min(latitudes), max(longitudes), max(latitudes)]
        if ring
        else None,
    }


def log_audit_event(
    event_type: str,
    *,
    actor: Any = None,
    details: Mapping[str, Any] | None = None,
) -> None:
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "event": event_type,
    }

    if actor is not None:
        actor_id = getattr(actor, "id", None)
        payload.update(
            {
                "actor_id": str(actor_id) if actor_id else None,
                "actor_email": getattr(actor, "email", None),
            }
        )

    if details:
        payload["details"] = _to_serializable(details)

    audit_logger.info(json.dumps(payload, ensure_ascii=True))


def log_region_event(
    event_type: str,
    region: RegionRead,
    *,
    actor: Any = None,
    **extra: Any,
) -> None:
    """Audit a region change; ``extra`` is merged into the region details."""
    details = region_audit_details(region)
    details.update(extra)
    actor_id = getattr(actor, "id", None)
    # actor is not the region owner
    if actor_id is not None and str(actor_id) != details["owner_id"]:
        details["on_behalf_of_owner"] = True
    log_audit_event(event_type, actor=actor, details=details)
