from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=None, extra="ignore")

    # Google Maps Platform (directions, places, geolocation share one key)
    google_maps_api_key: str = Field(default="", alias="GOOGLE_MAPS_API_KEY")

    # ──────────────────────────────────────────────────────────────
    # Directions
    # ──────────────────────────────────────────────────────────────

    directions_url: str = Field(
        default="https://maps.googleapis.com/maps/api/directions/json",
        alias="DIRECTIONS_URL",
    )
    directions_timeout_s: float = Field(default=15.0, alias="DIRECTIONS_TIMEOUT_S")

    # Google returns precision 5; OSRM-compatible upstreams use 6
    polyline_precision: int = Field(default=5, alias="POLYLINE_PRECISION")

    # Versioning
    route_algo_version: str = Field(default="route.v1.google.directions", alias="ROUTE_ALGO_VERSION")

    # External maps app handoff ("Get Directions")
    handoff_url: str = Field(default="https://www.google.com/maps/dir/", alias="HANDOFF_URL")

    # ──────────────────────────────────────────────────────────────
    # Places autocomplete
    # ──────────────────────────────────────────────────────────────

    places_autocomplete_url: str = Field(
        default="https://maps.googleapis.com/maps/api/place/autocomplete/json",
        alias="PLACES_AUTOCOMPLETE_URL",
    )
    places_details_url: str = Field(
        default="https://maps.googleapis.com/maps/api/place/details/json",
        alias="PLACES_DETAILS_URL",
    )
    places_language: str = Field(default="en", alias="PLACES_LANGUAGE")
    places_timeout_s: float = Field(default=10.0, alias="PLACES_TIMEOUT_S")

    # ──────────────────────────────────────────────────────────────
    # Geolocation (single-shot)
    # ──────────────────────────────────────────────────────────────

    geolocation_url: str = Field(
        default="https://www.googleapis.com/geolocation/v1/geolocate",
        alias="GEOLOCATION_URL",
    )
    geolocation_timeout_s: float = Field(default=5.0, alias="GEOLOCATION_TIMEOUT_S")
    geolocation_max_age_s: float = Field(default=1.0, alias="GEOLOCATION_MAX_AGE_S")

    # ──────────────────────────────────────────────────────────────
    # Map surface defaults
    # ──────────────────────────────────────────────────────────────

    map_default_lat: float = Field(default=37.78825, alias="MAP_DEFAULT_LAT")
    map_default_lng: float = Field(default=-122.4324, alias="MAP_DEFAULT_LNG")
    map_default_lat_delta: float = Field(default=0.0922, alias="MAP_DEFAULT_LAT_DELTA")
    map_default_lng_delta: float = Field(default=0.0421, alias="MAP_DEFAULT_LNG_DELTA")
    map_animate_ms: int = Field(default=1000, alias="MAP_ANIMATE_MS")

    # ──────────────────────────────────────────────────────────────
    # App
    # ──────────────────────────────────────────────────────────────

    cors_origins: str = Field(
        default="capacitor://localhost,ionic://localhost,http://localhost:3000,http://localhost:8081",
        alias="CORS_ORIGINS",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()
