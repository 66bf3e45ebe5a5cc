from __future__ import annotations

import base64
import hashlib
from typing import Any, Dict

import orjson


def _orjson_dumps(obj: Any) -> bytes:
    return orjson.dumps(
        obj,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS,
    )


def sha256_b64(data: bytes) -> str:
    h = hashlib.sha256(data).digest()
    return base64.urlsafe_b64encode(h).decode("ascii").rstrip("=")


def _norm_coord(c: Dict[str, Any], field: str) -> Dict[str, float]:
    if not isinstance(c, dict) or "lat" not in c or "lng" not in c:
        raise ValueError(f"RouteRequest.{field} must have lat and lng")
    return {"lat": round(float(c["lat"]), 6), "lng": round(float(c["lng"]), 6)}


def normalize_route_request(req: Dict[str, Any]) -> Dict[str, Any]:
    """
    Canonicalize a RouteRequest-like dict:
    - numeric lat/lng rounded to 6 decimals
    - strips unknown fields
    - mode defaults to driving
    """
    return {
        "origin": _norm_coord(req.get("origin"), "origin"),
        "destination": _norm_coord(req.get("destination"), "destination"),
        "mode": str(req.get("mode") or "driving"),
    }


def route_key_from_request(req: Dict[str, Any], algo_version: str) -> str:
    norm = normalize_route_request(req)
    payload = {"algo_version": algo_version, "req": norm}
    blob = _orjson_dumps(payload)
    return sha256_b64(blob)


def signals_key(signals: Dict[str, Any] | None) -> str:
    """Cache scope for a geolocation query; identical observations share a key."""
    return sha256_b64(_orjson_dumps(signals or {}))
