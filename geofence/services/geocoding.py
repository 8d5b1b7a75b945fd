"""Geocoding client (Google Maps Geocoding API).

Resolves coordinates to a postal address and back. Every failure, including
timeouts and non-OK API statuses, surfaces as :class:`GeocodingError`.
"""
import logging
from typing import Optional, Tuple

import httpx

from geofence.errors import GeocodingError
from geofence.schemas.user import Address

logger = logging.getLogger(__name__)

# Google component type -> Address field
COMPONENT_FIELDS = {
    "street_number": "number",
    "route": "street",
    "locality": "city",
    "administrative_area_level_1": "state",
    "country": "country",
    "postal_code": "zip_code",
}


def extract_address_components(components: list[dict]) -> Address:
    fields: dict[str, str] = {}
    for component in components:
        for component_type in component.get("types", []):
            field = COMPONENT_FIELDS.get(component_type)
            if not field:
                continue
            # States are kept abbreviated ("SP"), everything else long form
            if component_type == "administrative_area_level_1":
                fields[field] = component.get("short_name")
            else:
                fields[field] = component.get("long_name")
    return Address(**fields)


def build_address_string(address: Address) -> str:
    if address.number and address.street:
        street = f"{address.number} {address.street}"
    else:
        street = address.street

    parts = [street, address.city, address.state, address.country, address.zip_code]
    parts = [part for part in parts if part]
    if not parts:
        raise GeocodingError("Address has too few components to geocode", "INVALID_ADDRESS")
    return ", ".join(parts)


def validate_coordinates(coordinates: Tuple[float, float]) -> None:
    lng, lat = coordinates
    if lng is None or lat is None:
        raise GeocodingError("Invalid coordinates", "INVALID_COORDINATES")
    if lat < -90 or lat > 90 or lng < -180 or lng > 180:
        raise GeocodingError("Coordinates out of range", "COORDINATES_OUT_OF_RANGE")


class GeocodingClient:
    """Async Google geocoding client.

    The underlying ``httpx.AsyncClient`` is owned by whoever constructs this
    object; the application lifespan closes it via :meth:`aclose`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api/geocode/json",
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, params: dict) -> dict:
        if not self.api_key:
            raise GeocodingError("GOOGLE_MAPS_API_KEY is not configured", "GEOCODING_ERROR")

        try:
            response = await self._client.get(self.base_url, params={**params, "key": self.api_key})
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Geocoding request timed out: {e}")
            raise GeocodingError("Geocoding request timed out", "GEOCODING_ERROR") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Geocoding request failed: {e}")
            raise GeocodingError("Geocoding request failed", "GEOCODING_ERROR") from e

        if data.get("status") != "OK" or not data.get("results"):
            logger.warning(f"Geocoding returned no results (status={data.get('status')})")
            raise GeocodingError("No geocoding results for the given input", "NO_RESULTS")

        return data["results"][0]

    async def get_address_from_coordinates(self, coordinates: Tuple[float, float]) -> Address:
        """Reverse geocode a ``(longitude, latitude)`` pair."""
        validate_coordinates(coordinates)
        lng, lat = coordinates

        logger.info(f"Reverse geocoding lat={lat}, lng={lng}")
        result = await self._request({"latlng": f"{lat},{lng}"})

        address = extract_address_components(result.get("address_components", []))
        address.formatted_address = result.get("formatted_address")
        return address

    async def get_coordinates_from_address(self, address: Address) -> Tuple[float, float]:
        """Geocode an address into a ``(longitude, latitude)`` pair."""
        address_string = build_address_string(address)

        logger.info(f"Geocoding address '{address_string}'")
        result = await self._request({"address": address_string})

        try:
            location = result["geometry"]["location"]
            return float(location["lng"]), float(location["lat"])
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodingError("Malformed geocoding response", "GEOCODING_ERROR") from e
