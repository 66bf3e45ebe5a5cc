from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.core.contracts import BBox4, NavCoord, RoutePlan
from app.core.errors import DirectionsUnavailable
from app.core.keying import route_key_from_request
from app.core.polyline import MalformedEncoding, decode_polyline
from app.core.time import utc_now_iso

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# Geometry helpers
# ──────────────────────────────────────────────────────────────

def _bbox_from_coords(coords: List[Tuple[float, float]]) -> BBox4:
    """Compute bounding box from [(lat, lng), ...] pairs."""
    if not coords:
        return BBox4(minLng=0, minLat=0, maxLng=0, maxLat=0)
    lats = [c[0] for c in coords]
    lngs = [c[1] for c in coords]
    return BBox4(minLng=min(lngs), minLat=min(lats), maxLng=max(lngs), maxLat=max(lats))


def format_degrees(v: float) -> str:
    """Fixed-point degrees, no exponent (1e-05 -> "0.00001")."""
    s = f"{v:.6f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def latlng_param(c: NavCoord) -> str:
    return f"{format_degrees(c.lat)},{format_degrees(c.lng)}"


def _sum_leg_values(legs: List[Any], field: str) -> int:
    total = 0.0
    for leg in legs:
        if not isinstance(leg, dict):
            raise DirectionsUnavailable("directions_bad_response", "routes[0].legs item is not an object")
        block = leg.get(field) or {}
        if not isinstance(block, dict):
            raise DirectionsUnavailable("directions_bad_response", f"legs[].{field} is not an object")
        v = block.get("value")
        if v is None:
            continue
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise DirectionsUnavailable("directions_bad_response", f"legs[].{field}.value is not a number")
        try:
            total += float(v)
        except OverflowError as e:
            raise DirectionsUnavailable("directions_bad_response", f"legs[].{field}.value out of range") from e
    if not math.isfinite(total):
        raise DirectionsUnavailable("directions_bad_response", f"legs[].{field} total is not finite")
    return int(round(total))


# ──────────────────────────────────────────────────────────────
# Directions service
# ──────────────────────────────────────────────────────────────

class Directions:
    """Google Directions API client: origin/destination -> decoded RoutePlan."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout_s: float,
        algo_version: str,
        precision: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.algo_version = algo_version
        self.precision = precision
        self.transport = transport

    async def _get(self, params: Dict[str, str]) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
            return await client.get(self.base_url, params=params)

    async def fetch(self, origin: NavCoord, destination: NavCoord, *, mode: str = "driving") -> RoutePlan:
        if not self.api_key:
            raise DirectionsUnavailable("directions_not_configured", "GOOGLE_MAPS_API_KEY is not set")

        params = {
            "origin": latlng_param(origin),
            "destination": latlng_param(destination),
            "mode": mode,
            "key": self.api_key,
        }

        logger.info(
            "directions_fetch origin=%s destination=%s mode=%s",
            params["origin"], params["destination"], mode,
        )

        try:
            r = await self._get(params)
        except httpx.TimeoutException as e:
            logger.error("directions_timeout origin=%s destination=%s", params["origin"], params["destination"])
            raise DirectionsUnavailable("directions_timeout", f"directions request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("directions_unreachable error=%s", e)
            raise DirectionsUnavailable("directions_unreachable", f"directions request failed: {e}") from e

        if not r.is_success:
            logger.error("directions_http_error status=%d body=%s", r.status_code, r.text[:500])
            raise DirectionsUnavailable(
                "directions_http_error",
                f"directions returned {r.status_code}: {r.text[:500]}",
            )

        try:
            data = r.json()
        except ValueError as e:
            raise DirectionsUnavailable("directions_bad_response", "directions returned non-JSON body") from e
        if not isinstance(data, dict):
            raise DirectionsUnavailable("directions_bad_response", "directions returned unexpected JSON")

        status = data.get("status", "OK")
        if status != "OK":
            msg = data.get("error_message") or status
            logger.warning("directions_status status=%s message=%s", status, msg)
            raise DirectionsUnavailable("directions_status", f"directions status {status}: {msg}")

        routes = data.get("routes") or []
        if not isinstance(routes, list):
            raise DirectionsUnavailable("directions_bad_response", "routes is not a list")
        if not routes:
            raise DirectionsUnavailable("directions_no_routes", "directions returned no routes")

        best = routes[0]
        if not isinstance(best, dict):
            raise DirectionsUnavailable("directions_bad_response", "routes[0] is not an object")
        overview = best.get("overview_polyline") or {}
        if not isinstance(overview, dict):
            raise DirectionsUnavailable("directions_bad_geometry", "routes[0].overview_polyline is not an object")
        points = overview.get("points") or ""
        if not isinstance(points, str):
            raise DirectionsUnavailable("directions_bad_geometry", "routes[0].overview_polyline.points is not a string")
        if not points:
            raise DirectionsUnavailable("directions_bad_geometry", "routes[0].overview_polyline.points missing")

        try:
            coords = decode_polyline(points, self.precision)
        except MalformedEncoding as e:
            logger.error("directions_bad_geometry offset=%d reason=%s", e.position, e.reason)
            raise DirectionsUnavailable("directions_bad_geometry", str(e)) from e

        legs = best.get("legs") or []
        if not isinstance(legs, list):
            raise DirectionsUnavailable("directions_bad_response", "routes[0].legs is not a list")
        distance_m = _sum_leg_values(legs, "distance")
        duration_s = _sum_leg_values(legs, "duration")
        summary = best.get("summary")

        req_dict: Dict[str, Any] = {
            "origin": origin.model_dump(),
            "destination": destination.model_dump(),
            "mode": mode,
        }
        rkey = route_key_from_request(req_dict, self.algo_version)

        logger.info("directions_ok route_key=%s points=%d legs=%d", rkey, len(coords), len(legs))

        return RoutePlan(
            route_key=rkey,
            origin=origin,
            destination=destination,
            mode=mode,
            polyline=points,
            precision=self.precision,
            points=[NavCoord(lat=lat, lng=lng) for lat, lng in coords],
            bbox=_bbox_from_coords(coords),
            distance_m=distance_m,
            duration_s=duration_s,
            summary=summary if isinstance(summary, str) else "",
            provider="google_directions",
            created_at=utc_now_iso(),
            algo_version=self.algo_version,
        )
