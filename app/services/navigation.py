from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Literal, Optional

import httpx

from app.core.contracts import (
    DeviceSignals,
    MapAnimation,
    MapMarker,
    MapRegion,
    NavCoord,
    RoutePlan,
    ScreenMessage,
    ScreenState,
)
from app.core.errors import DirectionsUnavailable, LocationUnavailable, PlaceLookupError
from app.services.directions import Directions, latlng_param
from app.services.geolocation import LocationProvider

logger = logging.getLogger(__name__)

PlaceRole = Literal["origin", "destination"]

_MARKER_COLORS = {"origin": "blue", "destination": "red"}


# ──────────────────────────────────────────────────────────────
# Map surface
# ──────────────────────────────────────────────────────────────

class MapSurface(ABC):
    """What the controller drives: a region, point markers, one path, camera moves."""

    @abstractmethod
    def set_region(self, region: MapRegion) -> None: ...

    @abstractmethod
    def set_markers(self, markers: List[MapMarker]) -> None: ...

    @abstractmethod
    def set_path(self, path: List[NavCoord]) -> None: ...

    @abstractmethod
    def animate_to(self, region: MapRegion, duration_ms: int) -> None: ...


class MapViewState(MapSurface):
    """
    In-memory surface. Records the latest region/markers/path plus every
    animation command so the client can replay them.
    """

    def __init__(self, region: MapRegion):
        self.region = region
        self.markers: List[MapMarker] = []
        self.path: List[NavCoord] = []
        self.animations: List[MapAnimation] = []

    def set_region(self, region: MapRegion) -> None:
        self.region = region

    def set_markers(self, markers: List[MapMarker]) -> None:
        self.markers = list(markers)

    def set_path(self, path: List[NavCoord]) -> None:
        self.path = list(path)

    def animate_to(self, region: MapRegion, duration_ms: int) -> None:
        self.animations.append(MapAnimation(region=region, duration_ms=duration_ms))


# ──────────────────────────────────────────────────────────────
# Controller
# ──────────────────────────────────────────────────────────────

class NavigationController:
    """
    Event-driven screen controller.

    Origin/destination are the only inputs; any change to either re-runs the
    reaction: recenter on the destination (animated) and, once both ends are
    known, re-plan the route and push the decoded path to the surface.
    Collaborator failures become ScreenMessages.
    """

    def __init__(
        self,
        *,
        directions: Directions,
        locator: LocationProvider,
        surface: MapViewState,
        animate_ms: int = 1000,
        mode: str = "driving",
    ):
        self.directions = directions
        self.locator = locator
        self.surface = surface
        self.animate_ms = animate_ms
        self.mode = mode

        self.origin: Optional[NavCoord] = None
        self.destination: Optional[NavCoord] = None
        self.route: Optional[RoutePlan] = None
        self.messages: List[ScreenMessage] = []

    # ── inputs ────────────────────────────────────────────────

    async def set_origin(self, coord: NavCoord) -> None:
        self.origin = coord
        await self._endpoints_changed()

    async def set_destination(self, coord: NavCoord) -> None:
        self.destination = coord
        await self._endpoints_changed()

    def place_selected(self, role: PlaceRole) -> Callable[[NavCoord], Awaitable[None]]:
        """Capability handed to an autocomplete input: on_place_selected(coord)."""
        if role == "origin":
            return self.set_origin
        if role == "destination":
            return self.set_destination
        raise ValueError(f"unknown place role: {role}")

    async def use_current_location(self, signals: Optional[DeviceSignals] = None) -> None:
        try:
            fix = await self.locator.current_position(signals=signals)
        except LocationUnavailable as e:
            logger.warning("screen_location_failed kind=%s detail=%s", e.kind, e.detail)
            self.report(e.code, e.user_message)
            return

        self.surface.set_region(self._region_at(fix.coord, like=self.surface.region))
        await self.set_origin(fix.coord)

    def report(self, code: str, text: str) -> None:
        self.messages.append(ScreenMessage(level="error", code=code, text=text))

    def report_place_error(self, err: PlaceLookupError) -> None:
        logger.warning("screen_place_failed code=%s detail=%s", err.code, err.detail)
        self.report(err.code, err.user_message)

    # ── reaction ──────────────────────────────────────────────

    def _region_at(self, coord: NavCoord, *, like: MapRegion) -> MapRegion:
        return MapRegion(center=coord, lat_delta=like.lat_delta, lng_delta=like.lng_delta)

    def _markers(self) -> List[MapMarker]:
        out: List[MapMarker] = []
        if self.destination is not None:
            out.append(MapMarker(id="destination", coord=self.destination, color=_MARKER_COLORS["destination"]))
        if self.origin is not None:
            out.append(MapMarker(id="origin", coord=self.origin, color=_MARKER_COLORS["origin"]))
        return out

    async def _endpoints_changed(self) -> None:
        self.surface.set_markers(self._markers())

        if self.destination is not None:
            region = self._region_at(self.destination, like=self.surface.region)
            self.surface.set_region(region)
            self.surface.animate_to(region, self.animate_ms)

        if self.origin is not None and self.destination is not None:
            await self._plan_route(self.origin, self.destination)

    async def _plan_route(self, origin: NavCoord, destination: NavCoord) -> None:
        try:
            plan = await self.directions.fetch(origin, destination, mode=self.mode)
        except DirectionsUnavailable as e:
            logger.error("screen_route_failed code=%s detail=%s", e.code, e.detail)
            self.route = None
            self.surface.set_path([])
            self.report(e.code, e.user_message)
            return

        self.route = plan
        self.surface.set_path(plan.points)

    # ── output ────────────────────────────────────────────────

    def state(self) -> ScreenState:
        return ScreenState(
            region=self.surface.region,
            origin=self.origin,
            destination=self.destination,
            markers=self.surface.markers,
            path=self.surface.path,
            animations=self.surface.animations,
            route=self.route,
            messages=self.messages,
        )


def handoff_url(
    base_url: str,
    origin: NavCoord,
    destination: NavCoord,
    travelmode: str = "driving",
) -> str:
    """Universal Google Maps directions link for handing the trip to the maps app."""
    url = httpx.URL(
        base_url,
        params={
            "api": "1",
            "origin": latlng_param(origin),
            "destination": latlng_param(destination),
            "travelmode": travelmode,
        },
    )
    return str(url)
