"""
Single-shot position lookup.

The mobile screen asks for the device position once (no watch). Results are
either a LocationFix or a LocationUnavailable classified as "timeout" or
"other"; the two kinds carry different user-facing messages.

GoogleGeolocation resolves a position through the Google Geolocation API
from the wifi access points and cell towers the device reports.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import httpx

from app.core.contracts import DeviceSignals, LocationFix, NavCoord
from app.core.errors import LocationUnavailable
from app.core.keying import signals_key
from app.core.time import utc_now_iso

logger = logging.getLogger(__name__)


class LocationProvider(ABC):
    """
    Single-shot position source with a last-fix cache (`maximumAge`).

    Fixes are cached per set of device signals, so one caller's fix is never
    handed to a caller that reported different observations.
    """

    max_cached_fixes = 256

    def __init__(self, *, timeout_s: float, max_age_s: float):
        self.timeout_s = timeout_s
        self.max_age_s = max_age_s
        self._fixes: Dict[str, Tuple[LocationFix, float]] = {}

    @abstractmethod
    async def _locate(self, timeout_s: float, signals: Optional[DeviceSignals]) -> LocationFix:
        ...

    async def current_position(
        self,
        *,
        signals: DeviceSignals | None = None,
        timeout_s: float | None = None,
        max_age_s: float | None = None,
    ) -> LocationFix:
        timeout = float(timeout_s if timeout_s is not None else self.timeout_s)
        max_age = float(max_age_s if max_age_s is not None else self.max_age_s)
        key = signals_key(signals.model_dump(exclude_none=True) if signals else None)

        hit = self._fixes.get(key)
        if hit is not None and max_age > 0:
            fix, at = hit
            if time.monotonic() - at <= max_age:
                return fix.model_copy(update={"cached": True})

        try:
            fix = await asyncio.wait_for(self._locate(timeout, signals), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.warning("geolocation_timeout timeout_s=%.1f", timeout)
            raise LocationUnavailable("timeout", f"no position within {timeout:.1f}s") from e

        self._fixes.pop(key, None)
        self._fixes[key] = (fix, time.monotonic())
        while len(self._fixes) > self.max_cached_fixes:
            self._fixes.pop(next(iter(self._fixes)))
        return fix


def _request_body(signals: Optional[DeviceSignals]) -> Dict[str, Any]:
    # Without radio observations Google can only use the caller's IP, which
    # from here is the server's.
    if signals is None:
        return {"considerIp": True}
    body = signals.model_dump(exclude_none=True)
    body["considerIp"] = not signals.has_radio()
    return body


def _as_float(v: Any) -> Optional[float]:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    try:
        f = float(v)
    except OverflowError:
        return None
    return f if math.isfinite(f) else None


def _parse_degrees(loc: Dict[str, Any], field: str) -> float:
    v = _as_float(loc.get(field))
    if v is None:
        raise LocationUnavailable("other", f"geolocation location.{field} is not a number")
    return v


class GoogleGeolocation(LocationProvider):
    def __init__(
        self,
        *,
        api_key: str,
        url: str,
        timeout_s: float,
        max_age_s: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout_s=timeout_s, max_age_s=max_age_s)
        self.api_key = api_key
        self.url = url
        self.transport = transport

    async def _locate(self, timeout_s: float, signals: Optional[DeviceSignals]) -> LocationFix:
        if not self.api_key:
            raise LocationUnavailable("other", "GOOGLE_MAPS_API_KEY is not set")

        body = _request_body(signals)
        try:
            async with httpx.AsyncClient(timeout=timeout_s, transport=self.transport) as client:
                resp = await client.post(
                    self.url,
                    params={"key": self.api_key},
                    json=body,
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as exc:
            logger.warning("geolocation_timeout timeout_s=%.1f", timeout_s)
            raise LocationUnavailable("timeout", "geolocation request timed out") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "geolocation_http_error status=%d body=%s",
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise LocationUnavailable("other", f"geolocation failed: HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("geolocation_unreachable error=%s", exc)
            raise LocationUnavailable("other", f"geolocation request failed: {exc}") from exc
        except ValueError as exc:
            raise LocationUnavailable("other", "geolocation returned non-JSON body") from exc

        loc = data.get("location") if isinstance(data, dict) else None
        if not isinstance(loc, dict):
            raise LocationUnavailable("other", "geolocation response has no location")

        coord = NavCoord(lat=_parse_degrees(loc, "lat"), lng=_parse_degrees(loc, "lng"))
        accuracy = _as_float(data.get("accuracy"))
        fix = LocationFix(
            coord=coord,
            accuracy_m=accuracy,
            fetched_at=utc_now_iso(),
        )
        logger.info(
            "geolocation_fix lat=%.5f lng=%.5f accuracy_m=%s considerIp=%s",
            coord.lat, coord.lng, accuracy, body["considerIp"],
        )
        return fix
