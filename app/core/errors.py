from __future__ import annotations

from typing import Literal

from fastapi import HTTPException


def bad_request(code: str, message: str):
    raise HTTPException(status_code=400, detail={"code": code, "message": message})


def not_found(code: str, message: str):
    raise HTTPException(status_code=404, detail={"code": code, "message": message})


def service_unavailable(code: str, message: str):
    raise HTTPException(status_code=503, detail={"code": code, "message": message})


def gateway_timeout(code: str, message: str):
    raise HTTPException(status_code=504, detail={"code": code, "message": message})


# ──────────────────────────────────────────────────────────────
# Collaborator failures (raised by services, mapped by routers)
# ──────────────────────────────────────────────────────────────

ROUTE_FAILED_MESSAGE = "Failed to fetch route. Please try again."

LOCATION_TIMEOUT_MESSAGE = (
    "Failed to get current location. "
    "Please make sure location services are enabled and try again."
)
LOCATION_FAILED_MESSAGE = "Failed to get current location. Please try again."

PLACE_FAILED_MESSAGE = "Failed to look up the selected place. Please try again."


class DirectionsUnavailable(RuntimeError):
    def __init__(self, code: str, detail: str):
        self.code = code
        self.detail = detail
        super().__init__(f"{code}: {detail}")

    @property
    def user_message(self) -> str:
        return ROUTE_FAILED_MESSAGE


LocationErrorKind = Literal["timeout", "other"]


class LocationUnavailable(RuntimeError):
    """Single-shot position query failed; `kind` picks the user-facing message."""

    def __init__(self, kind: LocationErrorKind, detail: str):
        self.kind = kind
        self.detail = detail
        super().__init__(f"location {kind}: {detail}")

    @property
    def code(self) -> str:
        return "location_timeout" if self.kind == "timeout" else "location_unavailable"

    @property
    def user_message(self) -> str:
        return LOCATION_TIMEOUT_MESSAGE if self.kind == "timeout" else LOCATION_FAILED_MESSAGE


class PlaceLookupError(RuntimeError):
    def __init__(self, code: str, detail: str):
        self.code = code
        self.detail = detail
        super().__init__(f"{code}: {detail}")

    @property
    def user_message(self) -> str:
        return PLACE_FAILED_MESSAGE
