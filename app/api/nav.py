from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.core.contracts import (
    DecodeRequest,
    DecodeResponse,
    HandoffRequest,
    HandoffResponse,
    MapRegion,
    NavCoord,
    RoutePlan,
    RouteRequest,
    ScreenRequest,
    ScreenState,
)
from app.core.errors import DirectionsUnavailable, PlaceLookupError, bad_request, service_unavailable
from app.core.polyline import MalformedEncoding, decode_polyline, to_lnglat
from app.core.settings import settings
from app.services.directions import Directions
from app.services.geolocation import LocationProvider
from app.services.google_places import PlacesAutocomplete
from app.services.navigation import MapViewState, NavigationController, handoff_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nav")


def get_directions_service() -> Directions:
    return Directions(
        api_key=settings.google_maps_api_key,
        base_url=settings.directions_url,
        timeout_s=settings.directions_timeout_s,
        algo_version=settings.route_algo_version,
        precision=settings.polyline_precision,
    )


def get_location_provider() -> LocationProvider:
    raise RuntimeError("LocationProvider must be provided by app dependency override")


def get_places_autocomplete() -> PlacesAutocomplete:
    raise RuntimeError("PlacesAutocomplete must be provided by app dependency override")


def default_region() -> MapRegion:
    return MapRegion(
        center=NavCoord(lat=settings.map_default_lat, lng=settings.map_default_lng),
        lat_delta=settings.map_default_lat_delta,
        lng_delta=settings.map_default_lng_delta,
    )


@router.post("/decode", response_model=DecodeResponse)
def nav_decode(req: DecodeRequest) -> DecodeResponse:
    try:
        coords = decode_polyline(req.encoded, req.precision)
    except MalformedEncoding as e:
        bad_request("malformed_polyline", str(e))

    return DecodeResponse(
        count=len(coords),
        points=[NavCoord(lat=lat, lng=lng) for lat, lng in coords],
        geojson={"type": "LineString", "coordinates": to_lnglat(coords)},
    )


@router.post("/route", response_model=RoutePlan)
async def nav_route(
    req: RouteRequest,
    svc: Directions = Depends(get_directions_service),
) -> RoutePlan:
    try:
        return await svc.fetch(req.origin, req.destination, mode=req.mode)
    except DirectionsUnavailable as e:
        logger.error("nav_route_failed code=%s detail=%s", e.code, e.detail)
        service_unavailable(e.code, e.user_message)


@router.post("/screen", response_model=ScreenState)
async def nav_screen(
    req: ScreenRequest,
    directions: Directions = Depends(get_directions_service),
    locator: LocationProvider = Depends(get_location_provider),
    places: PlacesAutocomplete = Depends(get_places_autocomplete),
) -> ScreenState:
    ctl = NavigationController(
        directions=directions,
        locator=locator,
        surface=MapViewState(default_region()),
        animate_ms=settings.map_animate_ms,
        mode=req.mode,
    )

    if req.use_current_location:
        await ctl.use_current_location(req.device_signals)

    # Each input resolves independently; origin first, as on the screen.
    for role, coord, place_id in (
        ("origin", req.origin, req.origin_place_id),
        ("destination", req.destination, req.destination_place_id),
    ):
        on_place_selected = ctl.place_selected(role)
        if coord is not None:
            await on_place_selected(coord)
        elif place_id:
            try:
                sel = await places.resolve(place_id)
            except PlaceLookupError as e:
                ctl.report_place_error(e)
                continue
            await on_place_selected(sel.coord)

    state = ctl.state()
    logger.info(
        "nav_screen origin=%s destination=%s path=%d messages=%d",
        bool(state.origin), bool(state.destination), len(state.path), len(state.messages),
    )
    return state


@router.post("/handoff", response_model=HandoffResponse)
def nav_handoff(req: HandoffRequest) -> HandoffResponse:
    return HandoffResponse(
        url=handoff_url(settings.handoff_url, req.origin, req.destination, req.travelmode)
    )
