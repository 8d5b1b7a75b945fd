"""Bulk import of GeoJSON features as regions."""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Tuple
from uuid import UUID

from pydantic import ValidationError

from geofence.errors import AppError
from geofence.schemas.region import PolygonGeometry, RegionRead
from geofence.services.regions import RegionService

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    imported: List[RegionRead] = field(default_factory=list)
    rejected: List[Tuple[int, str]] = field(default_factory=list)  # (feature index, reason)


def feature_name(feature: Mapping[str, Any], index: int, name_property: str) -> str:
    props = feature.get("properties") or {}
    return str(props.get(name_property) or f"Region {index + 1}")


async def import_features(
    service: RegionService,
    features: Iterable[Mapping[str, Any]],
    owner_id: UUID,
    name_property: str = "name",
    on_imported=None,
) -> ImportReport:
    """Create one region per feature through the normal validation path.

    A feature that fails validation or overlaps an earlier one is recorded in
    ``rejected`` and the import continues. ``on_imported`` is awaited after
    every successful create (the CLI uses it to commit).
    """
    report = ImportReport()
    for index, feature in enumerate(features):
        try:
            polygon = PolygonGeometry.model_validate(feature.get("geometry") or {})
        except ValidationError as e:
            report.rejected.append((index, f"Invalid polygon structure: {e.error_count()} error(s)"))
            continue

        try:
            region = await service.create(
                feature_name(feature, index, name_property), polygon, owner_id
            )
        except AppError as e:
            logger.warning(f"Feature {index} rejected: {e.message}")
            report.rejected.append((index, e.message))
            continue

        report.imported.append(region)
        if on_imported is not None:
            await on_imported(region)

    logger.info(
        f"Imported {len(report.imported)} region(s), rejected {len(report.rejected)}"
    )
    return report
