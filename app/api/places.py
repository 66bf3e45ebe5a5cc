from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.core.contracts import PlaceSelection, PlacesSuggestRequest, PlacesSuggestResponse
from app.core.errors import PlaceLookupError, not_found, service_unavailable
from app.services.google_places import PlacesAutocomplete

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/places")

_NOT_FOUND_CODES = frozenset({"place_not_found", "place_missing_details"})


def get_places_autocomplete() -> PlacesAutocomplete:
    raise RuntimeError("PlacesAutocomplete must be provided by app dependency override")


def _raise_lookup(e: PlaceLookupError):
    if e.code in _NOT_FOUND_CODES:
        not_found(e.code, e.user_message)
    service_unavailable(e.code, e.user_message)


@router.post("/suggest", response_model=PlacesSuggestResponse)
async def places_suggest(
    req: PlacesSuggestRequest,
    places: PlacesAutocomplete = Depends(get_places_autocomplete),
) -> PlacesSuggestResponse:
    proximity: tuple[float, float] | None = None
    if req.center:
        proximity = (req.center.lat, req.center.lng)

    try:
        items = await places.suggest(req.query, proximity=proximity, limit=req.limit)
    except PlaceLookupError as e:
        logger.error("places_suggest_failed code=%s detail=%s", e.code, e.detail)
        _raise_lookup(e)

    return PlacesSuggestResponse(query=req.query, items=items)


@router.get("/{place_id}", response_model=PlaceSelection)
async def places_resolve(
    place_id: str,
    places: PlacesAutocomplete = Depends(get_places_autocomplete),
) -> PlaceSelection:
    try:
        return await places.resolve(place_id)
    except PlaceLookupError as e:
        logger.error("places_resolve_failed place_id=%s code=%s detail=%s", place_id, e.code, e.detail)
        _raise_lookup(e)
