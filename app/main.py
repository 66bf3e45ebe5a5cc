# app/main.py
from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

# Load backend/.env (main.py is backend/app/main.py)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

from app.core.settings import settings
from app.api import api_router

from app.services.geolocation import GoogleGeolocation, LocationProvider
from app.services.google_places import PlacesAutocomplete

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Navigation Screen Backend", version="1.0.0")

# ── Compression (must be added before CORS) ──
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ──────────────────────────────────────────────────────────────
# Shared services
# ──────────────────────────────────────────────────────────────

# One provider per process so the last-fix cache (max age) is shared
_locator = GoogleGeolocation(
    api_key=settings.google_maps_api_key,
    url=settings.geolocation_url,
    timeout_s=settings.geolocation_timeout_s,
    max_age_s=settings.geolocation_max_age_s,
)

_places = PlacesAutocomplete(
    api_key=settings.google_maps_api_key,
    autocomplete_url=settings.places_autocomplete_url,
    details_url=settings.places_details_url,
    language=settings.places_language,
    timeout_s=settings.places_timeout_s,
)

if not settings.google_maps_api_key:
    logger.warning("[app] GOOGLE_MAPS_API_KEY is not set; directions, places and geolocation will fail")

# ──────────────────────────────────────────────────────────────
# Dependency providers
# ──────────────────────────────────────────────────────────────

def provide_location_provider() -> LocationProvider:
    return _locator


def provide_places_autocomplete() -> PlacesAutocomplete:
    return _places


# ──────────────────────────────────────────────────────────────
# Dependency overrides
# ──────────────────────────────────────────────────────────────

from app.api import nav as nav_api
from app.api import places as places_api
from app.api import location as location_api

# Geolocation
app.dependency_overrides[nav_api.get_location_provider] = provide_location_provider
app.dependency_overrides[location_api.get_location_provider] = provide_location_provider

# Places
app.dependency_overrides[nav_api.get_places_autocomplete] = provide_places_autocomplete
app.dependency_overrides[places_api.get_places_autocomplete] = provide_places_autocomplete

# Routes
app.include_router(api_router)
