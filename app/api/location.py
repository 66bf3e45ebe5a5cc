from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.core.contracts import LocationFix, LocationRequest
from app.core.errors import LocationUnavailable, gateway_timeout, service_unavailable
from app.services.geolocation import LocationProvider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/location")


def get_location_provider() -> LocationProvider:
    raise RuntimeError("LocationProvider must be provided by app dependency override")


@router.post("/current", response_model=LocationFix)
async def location_current(
    req: LocationRequest,
    locator: LocationProvider = Depends(get_location_provider),
) -> LocationFix:
    try:
        return await locator.current_position(
            signals=req.signals,
            timeout_s=req.timeout_s,
            max_age_s=req.max_age_s,
        )
    except LocationUnavailable as e:
        logger.warning("location_current_failed kind=%s detail=%s", e.kind, e.detail)
        if e.kind == "timeout":
            gateway_timeout(e.code, e.user_message)
        service_unavailable(e.code, e.user_message)
