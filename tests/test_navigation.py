from __future__ import annotations

import httpx
import pytest

from app.core.contracts import DeviceSignals, MapRegion, NavCoord
from app.core.errors import (
    LOCATION_FAILED_MESSAGE,
    LOCATION_TIMEOUT_MESSAGE,
    ROUTE_FAILED_MESSAGE,
    LocationUnavailable,
)
from app.services.directions import Directions
from app.services.navigation import MapViewState, NavigationController, handoff_url

from .conftest import AWAY, CANONICAL_PATH, HOME, FixedProvider, directions_payload, json_transport

DEFAULT_REGION = MapRegion(center=NavCoord(lat=37.78825, lng=-122.4324), lat_delta=0.0922, lng_delta=0.0421)


def make_controller(transport=None, locator=None) -> NavigationController:
    directions = Directions(
        api_key="test-key",
        base_url="https://maps.example.test/directions/json",
        timeout_s=5.0,
        algo_version="route.test",
        transport=transport or json_transport(directions_payload()),
    )
    return NavigationController(
        directions=directions,
        locator=locator or FixedProvider(coord=HOME),
        surface=MapViewState(DEFAULT_REGION),
        animate_ms=1000,
    )


@pytest.mark.asyncio
async def test_destination_only_recenters_without_routing():
    transport = json_transport(directions_payload())
    ctl = make_controller(transport)

    await ctl.set_destination(AWAY)
    state = ctl.state()

    assert state.region.center == AWAY
    assert state.region.lat_delta == 0.0922
    assert len(state.animations) == 1
    assert state.animations[0].duration_ms == 1000
    assert [(m.id, m.color) for m in state.markers] == [("destination", "red")]
    assert state.path == []
    assert transport.requests == []


@pytest.mark.asyncio
async def test_both_endpoints_plan_route():
    transport = json_transport(directions_payload())
    ctl = make_controller(transport)

    await ctl.set_destination(AWAY)
    await ctl.set_origin(HOME)
    state = ctl.state()

    assert len(transport.requests) == 1
    assert [(p.lat, p.lng) for p in state.path] == CANONICAL_PATH
    assert state.route is not None
    assert {m.id: m.color for m in state.markers} == {"destination": "red", "origin": "blue"}
    assert state.messages == []


@pytest.mark.asyncio
async def test_each_change_replans():
    transport = json_transport(directions_payload())
    ctl = make_controller(transport)

    await ctl.set_origin(HOME)
    await ctl.set_destination(AWAY)
    await ctl.set_destination(NavCoord(lat=40.0, lng=-121.0))

    assert len(transport.requests) == 2
    assert transport.requests[-1].url.params["destination"] == "40,-121"


@pytest.mark.asyncio
async def test_place_selected_capability():
    ctl = make_controller()
    await ctl.place_selected("origin")(HOME)
    await ctl.place_selected("destination")(AWAY)
    assert ctl.origin == HOME
    assert ctl.destination == AWAY

    with pytest.raises(ValueError):
        ctl.place_selected("waypoint")


@pytest.mark.asyncio
async def test_current_location_sets_origin_and_region():
    ctl = make_controller(locator=FixedProvider(coord=HOME))
    await ctl.use_current_location()
    state = ctl.state()

    assert state.origin == HOME
    assert state.region.center == HOME
    assert state.animations == []


@pytest.mark.asyncio
async def test_current_location_forwards_device_signals():
    locator = FixedProvider(coord=HOME)
    signals = DeviceSignals(wifiAccessPoints=[{"macAddress": "3c:37:86:5d:75:d4"}])
    await make_controller(locator=locator).use_current_location(signals)
    assert locator.signals == [signals]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kind, code, text",
    [
        ("timeout", "location_timeout", LOCATION_TIMEOUT_MESSAGE),
        ("other", "location_unavailable", LOCATION_FAILED_MESSAGE),
    ],
)
async def test_location_failures_are_distinct(kind, code, text):
    ctl = make_controller(locator=FixedProvider(error=LocationUnavailable(kind, "x")))
    await ctl.use_current_location()
    state = ctl.state()

    assert state.origin is None
    assert [(m.code, m.text) for m in state.messages] == [(code, text)]


@pytest.mark.asyncio
async def test_route_failure_clears_path_and_reports():
    responses = iter([
        httpx.Response(200, json=directions_payload()),
        httpx.Response(500, text="upstream down"),
    ])
    ctl = make_controller(httpx.MockTransport(lambda request: next(responses)))

    await ctl.set_origin(HOME)
    await ctl.set_destination(AWAY)
    assert ctl.state().path

    await ctl.set_destination(NavCoord(lat=40.0, lng=-121.0))
    state = ctl.state()

    assert state.path == []
    assert state.route is None
    assert [(m.code, m.text) for m in state.messages] == [("directions_http_error", ROUTE_FAILED_MESSAGE)]


def test_handoff_url():
    url = httpx.URL(handoff_url("https://www.google.com/maps/dir/", HOME, AWAY, "walking"))
    assert url.host == "www.google.com"
    assert url.params["api"] == "1"
    assert url.params["origin"] == "38.5,-120.2"
    assert url.params["destination"] == "43.252,-126.453"
    assert url.params["travelmode"] == "walking"


def test_handoff_url_near_null_island():
    near = NavCoord(lat=1e-05, lng=-1e-05)
    url = httpx.URL(handoff_url("https://www.google.com/maps/dir/", near, AWAY))
    assert url.params["origin"] == "0.00001,-0.00001"
    assert url.params["travelmode"] == "driving"
