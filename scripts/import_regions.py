"""Import a GeoJSON FeatureCollection of polygons as regions for one user.

Usage:
    python scripts/import_regions.py regions.geojson owner@example.com [--name-property NAME]
"""
import argparse
import asyncio
import json
import logging
import os
import sys

from sqlalchemy import select

# Add parent directory to path to import geofence modules
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geofence.config import get_settings
from geofence.database import AsyncSessionLocal, engine
from geofence.models import User
from geofence.services.region_import import import_features
from geofence.services.region_repository_postgis import PostgisRegionRepository
from geofence.services.regions import RegionService

settings = get_settings()
logger = logging.getLogger("geofence.scripts.import_regions")


async def import_regions(file_path: str, owner_email: str, name_property: str) -> int:
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    features = data.get("features", [])
    logger.info(f"Found {len(features)} features in {file_path}")

    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User.id).where(User.email == owner_email))
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            logger.error(f"No user with email {owner_email}")
            return 1

        service = RegionService(
            PostgisRegionRepository(session),
            name_min_length=settings.REGION_NAME_MIN_LENGTH,
            name_max_length=settings.REGION_NAME_MAX_LENGTH,
        )

        async def commit(_region):
            # Release the write lock so the next feature sees this one
            await session.commit()

        report = await import_features(
            service, features, owner_id, name_property=name_property, on_imported=commit
        )
        await session.rollback()

    await engine.dispose()

    for index, reason in report.rejected:
        logger.warning(f"  feature #{index}: {reason}")
    logger.info(
        f"Successfully imported {len(report.imported)} regions "
        f"({len(report.rejected)} rejected)."
    )
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("file_path", help="GeoJSON FeatureCollection of Polygon features")
    parser.add_argument("owner_email", help="Email of the user that will own the regions")
    parser.add_argument(
        "--name-property",
        default="name",
        help="Feature property used as the region name (default: name)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")

    if not os.path.exists(args.file_path):
        logger.error(f"File not found: {args.file_path}")
        return 1

    return asyncio.run(import_regions(args.file_path, args.owner_email, args.name_property))


if __name__ == "__main__":
    sys.exit(main())
