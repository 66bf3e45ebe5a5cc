from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field


# ──────────────────────────────────────────────────────────────
# Shared
# ──────────────────────────────────────────────────────────────

class NavCoord(BaseModel):
    lat: float
    lng: float


class BBox4(BaseModel):
    minLng: float
    minLat: float
    maxLng: float
    maxLat: float


# ──────────────────────────────────────────────────────────────
# Polyline decoding
# ──────────────────────────────────────────────────────────────

class DecodeRequest(BaseModel):
    encoded: str
    precision: int = Field(default=5, ge=0, le=10)


class DecodeResponse(BaseModel):
    count: int
    points: List[NavCoord]
    geojson: Dict[str, Any]         # LineString, [lng, lat] order


# ──────────────────────────────────────────────────────────────
# Routing
# ──────────────────────────────────────────────────────────────

class RouteRequest(BaseModel):
    origin: NavCoord
    destination: NavCoord
    mode: str = "driving"


class RoutePlan(BaseModel):
    route_key: str
    origin: NavCoord
    destination: NavCoord
    mode: str
    polyline: str                   # encoded overview polyline as received
    precision: int
    points: List[NavCoord]          # decoded overview, encoding order
    bbox: BBox4
    distance_m: int
    duration_s: int
    summary: str = ""
    provider: str                   # "google_directions"
    created_at: str                 # ISO8601 UTC
    algo_version: str


class HandoffRequest(BaseModel):
    origin: NavCoord
    destination: NavCoord
    travelmode: Literal["driving", "walking", "bicycling", "transit"] = "driving"


class HandoffResponse(BaseModel):
    url: str


# ──────────────────────────────────────────────────────────────
# Places autocomplete
# ──────────────────────────────────────────────────────────────

class PlaceSuggestion(BaseModel):
    place_id: str
    description: str
    main_text: str = ""
    secondary_text: str = ""


class PlacesSuggestRequest(BaseModel):
    query: str
    center: Optional[NavCoord] = None
    limit: int = Field(default=5, ge=1, le=5)


class PlacesSuggestResponse(BaseModel):
    query: str
    items: List[PlaceSuggestion] = Field(default_factory=list)


class PlaceSelection(BaseModel):
    place_id: str
    name: str = ""
    address: str = ""
    coord: NavCoord


# ──────────────────────────────────────────────────────────────
# Geolocation
# ──────────────────────────────────────────────────────────────

class LocationFix(BaseModel):
    coord: NavCoord
    accuracy_m: Optional[float] = None
    fetched_at: str                 # ISO8601 UTC
    cached: bool = False


class DeviceSignals(BaseModel):
    """Radio observations reported by the device (Geolocation API request shape)."""
    wifiAccessPoints: List[Dict[str, Any]] = Field(default_factory=list)
    cellTowers: List[Dict[str, Any]] = Field(default_factory=list)
    radioType: Optional[str] = None
    carrier: Optional[str] = None
    homeMobileCountryCode: Optional[int] = None
    homeMobileNetworkCode: Optional[int] = None

    def has_radio(self) -> bool:
        return bool(self.wifiAccessPoints or self.cellTowers)


class LocationRequest(BaseModel):
    signals: Optional[DeviceSignals] = None
    timeout_s: Optional[float] = Field(default=None, gt=0)
    max_age_s: Optional[float] = Field(default=None, ge=0)


# ──────────────────────────────────────────────────────────────
# Map surface / screen
# ──────────────────────────────────────────────────────────────

class MapRegion(BaseModel):
    center: NavCoord
    lat_delta: float
    lng_delta: float


class MapMarker(BaseModel):
    id: Literal["origin", "destination"]
    coord: NavCoord
    color: str


class MapAnimation(BaseModel):
    region: MapRegion
    duration_ms: int


MessageLevel = Literal["info", "error"]


class ScreenMessage(BaseModel):
    level: MessageLevel = "error"
    code: str
    text: str


class ScreenRequest(BaseModel):
    origin: Optional[NavCoord] = None
    destination: Optional[NavCoord] = None
    origin_place_id: Optional[str] = None
    destination_place_id: Optional[str] = None
    use_current_location: bool = False
    device_signals: Optional[DeviceSignals] = None
    mode: str = "driving"


class ScreenState(BaseModel):
    region: MapRegion
    origin: Optional[NavCoord] = None
    destination: Optional[NavCoord] = None
    markers: List[MapMarker] = Field(default_factory=list)
    path: List[NavCoord] = Field(default_factory=list)
    animations: List[MapAnimation] = Field(default_factory=list)
    route: Optional[RoutePlan] = None
    messages: List[ScreenMessage] = Field(default_factory=list)
