"""
Google Places proxy - address autocomplete for the survey's address step.

The browser never sees the API key: it calls our /api/places routes, which
call Places with the key and hand back only what the address step needs.
"""
import logging
from typing import Optional

import httpx

from autoquiz.schemas.places import AddressFields, AddressSuggestion

logger = logging.getLogger(__name__)

AUTOCOMPLETE_URL = "https://maps.googleapis.com/maps/api/place/autocomplete/json"
DETAILS_URL = "https://maps.googleapis.com/maps/api/place/details/json"
TIMEOUT = 5.0
COUNTRY_RESTRICTION = "country:ca"


class PlacesError(Exception):
    """The Places API could not be reached or returned an error."""


class PlacesNotConfigured(PlacesError):
    pass


class GooglePlacesClient:
    def __init__(self, api_key: str, timeout: float = TIMEOUT):
        self.api_key = api_key
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def _get(self, url: str, params: dict) -> dict:
        if not self.api_key:
            raise PlacesNotConfigured("Google Places API key not configured")
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params={**params, "key": self.api_key})
                response.raise_for_status()
                return response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise PlacesError(str(e)) from e

    async def autocomplete(self, text: str) -> list[AddressSuggestion]:
        """Address suggestions for partial input, Canadian addresses only."""
        data = await self._get(AUTOCOMPLETE_URL, {
            "input": text,
            "components": COUNTRY_RESTRICTION,
            "types": "address",
        })
        suggestions = []
        for prediction in data.get("predictions") or []:
            formatting = prediction.get("structured_formatting") or {}
            suggestions.append(AddressSuggestion(
                place_id=prediction.get("place_id", ""),
                description=prediction.get("description", ""),
                main_text=formatting.get("main_text") or "",
                secondary_text=formatting.get("secondary_text") or "",
            ))
        return suggestions

    async def details(self, place_id: str) -> Optional[dict]:
        """Place result with address_components, or None if Places has no result."""
        data = await self._get(DETAILS_URL, {"place_id": place_id, "fields": "address_components"})
        return data.get("result") or None


def parse_address_components(components: list[dict]) -> AddressFields:
    """
    Collapse Places address_components into the survey's four address fields.
    Street is "<number> <route>"; province uses the short code (ON, BC, ...).
    """
    street_number = route = city = province = postal_code = ""
    for component in components or []:
        types = component.get("types") or []
        if "street_number" in types:
            street_number = component.get("long_name", "")
        if "route" in types:
            route = component.get("long_name", "")
        if "locality" in types:
            city = component.get("long_name", "")
        if "administrative_area_level_1" in types:
            province = component.get("short_name", "")
        if "postal_code" in types:
            postal_code = component.get("long_name", "")

    return AddressFields(
        street_address=f"{street_number} {route}".strip(),
        city=city,
        province=province,
        postal_code=postal_code,
    )
