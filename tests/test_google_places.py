"""
Tests for autoquiz/integrations/google_places.py - Places proxy client and address parsing.
"""
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from autoquiz.integrations.google_places import (
    AUTOCOMPLETE_URL,
    DETAILS_URL,
    GooglePlacesClient,
    PlacesError,
    PlacesNotConfigured,
    parse_address_components,
)

ADDRESS_COMPONENTS = [
    {"long_name": "123", "short_name": "123", "types": ["street_number"]},
    {"long_name": "King Street West", "short_name": "King St W", "types": ["route"]},
    {"long_name": "Toronto", "short_name": "Toronto", "types": ["locality", "political"]},
    {"long_name": "Ontario", "short_name": "ON", "types": ["administrative_area_level_1", "political"]},
    {"long_name": "Canada", "short_name": "CA", "types": ["country", "political"]},
    {"long_name": "M5H 1A1", "short_name": "M5H 1A1", "types": ["postal_code"]},
]


def _build_mock_client(get_side_effect) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(side_effect=get_side_effect)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def _json_response(status_code: int, body: dict) -> httpx.Response:
    return httpx.Response(status_code, json=body, request=httpx.Request("GET", AUTOCOMPLETE_URL))


class TestParseAddressComponents:
    def test_full_address(self):
        address = parse_address_components(ADDRESS_COMPONENTS)
        assert address.street_address == "123 King Street West"
        assert address.city == "Toronto"
        assert address.province == "ON"
        assert address.postal_code == "M5H 1A1"

    def test_missing_street_number(self):
        address = parse_address_components(ADDRESS_COMPONENTS[1:])
        assert address.street_address == "King Street West"

    def test_empty(self):
        address = parse_address_components([])
        assert address.model_dump() == {"street_address": "", "city": "", "province": "", "postal_code": ""}


class TestGooglePlacesClient:
    async def test_autocomplete(self):
        body = {"predictions": [{
            "place_id": "ChIJ123",
            "description": "123 King St W, Toronto, ON, Canada",
            "structured_formatting": {"main_text": "123 King St W", "secondary_text": "Toronto, ON, Canada"},
        }]}
        mock_client = _build_mock_client([_json_response(200, body)])
        with patch("httpx.AsyncClient", return_value=mock_client):
            suggestions = await GooglePlacesClient("places_key").autocomplete("123 King")

        assert suggestions[0].place_id == "ChIJ123"
        assert suggestions[0].main_text == "123 King St W"
        call = mock_client.get.call_args
        assert call.args[0] == AUTOCOMPLETE_URL
        assert call.kwargs["params"]["components"] == "country:ca"
        assert call.kwargs["params"]["key"] == "places_key"

    async def test_autocomplete_no_predictions(self):
        mock_client = _build_mock_client([_json_response(200, {"status": "ZERO_RESULTS"})])
        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await GooglePlacesClient("places_key").autocomplete("zzz") == []

    async def test_details(self):
        body = {"result": {"address_components": ADDRESS_COMPONENTS}}
        mock_client = _build_mock_client([_json_response(200, body)])
        with patch("httpx.AsyncClient", return_value=mock_client):
            result = await GooglePlacesClient("places_key").details("ChIJ123")

        assert result["address_components"] == ADDRESS_COMPONENTS
        call = mock_client.get.call_args
        assert call.args[0] == DETAILS_URL
        assert call.kwargs["params"]["fields"] == "address_components"

    async def test_details_not_found(self):
        mock_client = _build_mock_client([_json_response(200, {"status": "NOT_FOUND"})])
        with patch("httpx.AsyncClient", return_value=mock_client):
            assert await GooglePlacesClient("places_key").details("nope") is None

    async def test_http_error_wrapped(self):
        mock_client = _build_mock_client([_json_response(500, {})])
        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(PlacesError):
                await GooglePlacesClient("places_key").autocomplete("123 King")

    async def test_network_error_wrapped(self):
        mock_client = _build_mock_client(httpx.ConnectError("dns"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(PlacesError):
                await GooglePlacesClient("places_key").details("ChIJ123")

    async def test_no_key(self):
        client = GooglePlacesClient("")
        assert not client.configured
        with pytest.raises(PlacesNotConfigured):
            await client.autocomplete("123 King")
