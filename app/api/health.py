from __future__ import annotations

from fastapi import APIRouter

from app.core.settings import settings

router = APIRouter()


@router.get("/health")
def health():
    return {
        "status": "ok",
        "algo_version": settings.route_algo_version,
        "directions_configured": bool(settings.google_maps_api_key),
    }
