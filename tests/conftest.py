"""Shared fixtures: a reference polyline encoder, fake Google responses and a fixed position source."""
from __future__ import annotations

import json
from typing import Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from app.core.contracts import DeviceSignals, LocationFix, NavCoord
from app.core.time import utc_now_iso
from app.services.geolocation import LocationProvider

# Google's published example
CANONICAL_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"
CANONICAL_PATH = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]

HOME = NavCoord(lat=38.5, lng=-120.2)
AWAY = NavCoord(lat=43.252, lng=-126.453)


def _encode_value(v: int) -> str:
    v = ~(v << 1) if v < 0 else (v << 1)
    chunks = []
    while v >= 0x20:
        chunks.append(chr((0x20 | (v & 0x1F)) + 63))
        v >>= 5
    chunks.append(chr(v + 63))
    return "".join(chunks)


def reference_encode(coords: List[Tuple[float, float]], precision: int = 5) -> str:
    factor = 10 ** precision
    last_lat = 0
    last_lng = 0
    out = []
    for lat, lng in coords:
        ilat = int(round(lat * factor))
        ilng = int(round(lng * factor))
        out.append(_encode_value(ilat - last_lat))
        out.append(_encode_value(ilng - last_lng))
        last_lat = ilat
        last_lng = ilng
    return "".join(out)


@pytest.fixture
def encode() -> Callable[..., str]:
    return reference_encode


def directions_payload(points: str = CANONICAL_POLYLINE, **overrides) -> Dict:
    payload = {
        "status": "OK",
        "routes": [
            {
                "summary": "I-5 N",
                "overview_polyline": {"points": points},
                "legs": [
                    {"distance": {"value": 1200.4}, "duration": {"value": 90}},
                    {"distance": {"value": 800}, "duration": {"value": 30.6}},
                ],
            }
        ],
    }
    payload.update(overrides)
    return payload


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def json_transport(body, status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(
        lambda request: httpx.Response(status_code, content=json.dumps(body).encode(),
                                       headers={"content-type": "application/json"})
    )


def timeout_transport() -> RecordingTransport:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    return RecordingTransport(_handler)


PREDICTIONS = {
    "status": "OK",
    "predictions": [
        {
            "place_id": "ChIJ1",
            "description": "Ferry Building, San Francisco, CA, USA",
            "structured_formatting": {"main_text": "Ferry Building", "secondary_text": "San Francisco, CA, USA"},
        },
        {"description": "no id, dropped"},
        {"place_id": "ChIJ2", "description": "Ferry Plaza"},
    ],
}

DETAILS = {
    "status": "OK",
    "result": {
        "place_id": "ChIJ1",
        "name": "Ferry Building",
        "formatted_address": "1 Ferry Building, San Francisco, CA 94111, USA",
        "geometry": {"location": {"lat": 37.7955, "lng": -122.3937}},
    },
}


class FixedProvider(LocationProvider):
    """Position source that always returns one coordinate (or raises one error)."""

    def __init__(self, coord=None, error=None):
        super().__init__(timeout_s=5.0, max_age_s=0.0)
        self.coord = coord
        self.error = error
        self.signals: List[Optional[DeviceSignals]] = []

    async def _locate(self, timeout_s: float, signals: Optional[DeviceSignals]) -> LocationFix:
        self.signals.append(signals)
        if self.error is not None:
            raise self.error
        return LocationFix(coord=self.coord, fetched_at=utc_now_iso())
