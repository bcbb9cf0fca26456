"""
Address lookup proxy endpoints for the survey's address step.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from autoquiz.integrations.google_places import (
    GooglePlacesClient,
    PlacesError,
    PlacesNotConfigured,
    parse_address_components,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/places", tags=["places"])


def get_places_client(request: Request) -> GooglePlacesClient:
    return request.app.state.places_client


@router.get("/autocomplete")
async def places_autocomplete(
    input_text: Optional[str] = Query(default=None, alias="input"),
    client: GooglePlacesClient = Depends(get_places_client),
):
    if not input_text:
        return JSONResponse(status_code=400, content={"error": "Input is required"})

    try:
        suggestions = await client.autocomplete(input_text)
    except PlacesNotConfigured as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    except PlacesError as e:
        logger.error("Error fetching address suggestions: %s", str(e))
        return JSONResponse(status_code=500, content={"error": "Failed to fetch address suggestions"})

    return {"suggestions": [s.model_dump(by_alias=True) for s in suggestions]}


@router.get("/details")
async def places_details(
    place_id: Optional[str] = Query(default=None, alias="placeId"),
    client: GooglePlacesClient = Depends(get_places_client),
):
    if not place_id:
        return JSONResponse(status_code=400, content={"error": "Place ID is required"})

    try:
        result = await client.details(place_id)
    except PlacesNotConfigured as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    except PlacesError as e:
        logger.error("Error fetching place details: %s", str(e))
        return JSONResponse(status_code=500, content={"error": "Failed to fetch place details"})

    if not result:
        return JSONResponse(status_code=404, content={"error": "Place not found"})

    address = parse_address_components(result.get("address_components") or [])
    return {**result, "address": address.model_dump(by_alias=True)}
