"""
Google Places autocomplete + details for the origin/destination inputs.

Docs: https://developers.google.com/maps/documentation/places/web-service/autocomplete

Each input on the screen types into `suggest`, and the picked prediction is
resolved through `resolve` to the coordinate the navigation controller needs.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import httpx

from app.core.contracts import NavCoord, PlaceSelection, PlaceSuggestion
from app.core.errors import PlaceLookupError
from app.services.directions import format_degrees

logger = logging.getLogger(__name__)

# Statuses that mean "no data" rather than failure
_EMPTY_STATUSES = frozenset({"OK", "ZERO_RESULTS"})


def _as_dict(v: Any) -> dict[str, Any]:
    return v if isinstance(v, dict) else {}


def _as_text(v: Any) -> str:
    return v if isinstance(v, str) else ""


def _as_degrees(v: Any) -> float | None:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    try:
        f = float(v)
    except OverflowError:
        return None
    return f if math.isfinite(f) else None


def _prediction_to_item(pred: Any) -> PlaceSuggestion | None:
    if not isinstance(pred, dict):
        return None
    place_id = pred.get("place_id")
    if not place_id or not isinstance(place_id, str):
        return None
    fmt = _as_dict(pred.get("structured_formatting"))
    return PlaceSuggestion(
        place_id=place_id,
        description=_as_text(pred.get("description")),
        main_text=_as_text(fmt.get("main_text")),
        secondary_text=_as_text(fmt.get("secondary_text")),
    )


class PlacesAutocomplete:
    """Thin wrapper around Places Autocomplete and Place Details."""

    def __init__(
        self,
        *,
        api_key: str,
        autocomplete_url: str,
        details_url: str,
        language: str = "en",
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.autocomplete_url = autocomplete_url
        self.details_url = details_url
        self.language = language
        self.timeout_s = timeout_s
        self.transport = transport

    async def _get_json(self, url: str, params: dict[str, str], *, what: str) -> dict[str, Any]:
        if not self.api_key:
            raise PlaceLookupError("places_not_configured", "GOOGLE_MAPS_API_KEY is not set")

        params = {**params, "key": self.api_key, "language": self.language}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "places_%s_http_error status=%d body=%s",
                what,
                exc.response.status_code,
                exc.response.text[:500],
            )
            raise PlaceLookupError("places_http_error", f"places {what} failed: HTTP {exc.response.status_code}") from exc
        except httpx.TimeoutException as exc:
            logger.error("places_%s_timeout", what)
            raise PlaceLookupError("places_timeout", f"places {what} timed out") from exc
        except httpx.HTTPError as exc:
            raise PlaceLookupError("places_unreachable", f"places {what} failed: {exc}") from exc
        except ValueError as exc:
            raise PlaceLookupError("places_bad_response", f"places {what} returned non-JSON body") from exc

        if not isinstance(data, dict):
            raise PlaceLookupError("places_bad_response", f"places {what} returned unexpected JSON")

        status = data.get("status", "OK")
        if status == "NOT_FOUND":
            raise PlaceLookupError("place_not_found", data.get("error_message") or "place not found")
        if status not in _EMPTY_STATUSES:
            msg = data.get("error_message") or status
            logger.warning("places_%s_status status=%s message=%s", what, status, msg)
            raise PlaceLookupError("places_status", f"places {what} status {status}: {msg}")
        return data

    async def suggest(
        self,
        query: str,
        *,
        proximity: tuple[float, float] | None = None,
        limit: int = 5,
    ) -> list[PlaceSuggestion]:
        """
        Autocomplete predictions for free text.

        proximity is (lat, lng) and biases results toward that point.
        Google returns at most 5 predictions.
        """
        query = query.strip()
        if not query:
            return []

        params: dict[str, str] = {"input": query}
        if proximity:
            lat, lng = proximity
            params["location"] = f"{format_degrees(lat)},{format_degrees(lng)}"

        logger.info("places_suggest query=%r proximity=%s", query, proximity)

        data = await self._get_json(self.autocomplete_url, params, what="autocomplete")

        items: list[PlaceSuggestion] = []
        preds = data.get("predictions") or []
        if not isinstance(preds, list):
            raise PlaceLookupError("places_bad_response", "predictions is not a list")
        for pred in preds:
            item = _prediction_to_item(pred)
            if item:
                items.append(item)
        return items[: max(1, limit)]

    async def resolve(self, place_id: str) -> PlaceSelection:
        """Place id -> coordinate (details.geometry.location)."""
        data = await self._get_json(
            self.details_url,
            {"place_id": place_id, "fields": "place_id,name,formatted_address,geometry"},
            what="details",
        )

        result = _as_dict(data.get("result"))
        loc = _as_dict(_as_dict(result.get("geometry")).get("location"))
        lat = _as_degrees(loc.get("lat"))
        lng = _as_degrees(loc.get("lng"))
        if lat is None or lng is None:
            logger.warning("places_details_missing place_id=%s", place_id)
            raise PlaceLookupError("place_missing_details", f"no usable geometry for place {place_id}")

        return PlaceSelection(
            place_id=str(result.get("place_id") or place_id),
            name=_as_text(result.get("name")),
            address=_as_text(result.get("formatted_address")),
            coord=NavCoord(lat=lat, lng=lng),
        )
