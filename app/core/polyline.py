from __future__ import annotations

from typing import List, Tuple

# Encoder alphabet: every character is a 6-bit group offset by 63 ('?'..'~').
_OFFSET = 63
_MAX_CHAR = _OFFSET + 0x3F


class MalformedEncoding(ValueError):
    """Encoded polyline ends inside a chunk or contains a foreign character."""

    def __init__(self, encoded: str, position: int, reason: str) -> None:
        self.encoded = encoded
        self.position = position
        self.reason = reason
        super().__init__(f"malformed polyline at offset {position}: {reason}")


def _decode_value(s: str, idx: int) -> tuple[int, int]:
    result = 0
    shift = 0
    n = len(s)
    while True:
        if idx >= n:
            raise MalformedEncoding(s, idx, "input ends inside a chunk")
        c = ord(s[idx])
        if c < _OFFSET or c > _MAX_CHAR:
            raise MalformedEncoding(s, idx, f"character {s[idx]!r} outside encoder alphabet")
        b = c - _OFFSET
        idx += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    d = ~(result >> 1) if (result & 1) else (result >> 1)
    return d, idx


def decode_polyline(encoded: str, precision: int = 5) -> List[Tuple[float, float]]:
    """
    Decode an encoded polyline into [(lat, lng), ...].

    precision=5 is the Google format (directions `overview_polyline.points`),
    precision=6 is polyline6 as emitted by OSRM.

    Raises MalformedEncoding when the string is truncated mid-chunk, a
    latitude delta has no longitude partner, or a point overflows a float.
    """
    if precision < 0:
        raise ValueError(f"precision must be >= 0, got {precision}")

    factor = 10 ** precision
    idx = 0
    lat = 0
    lng = 0
    coords: List[Tuple[float, float]] = []
    n = len(encoded)
    while idx < n:
        start = idx
        dlat, idx = _decode_value(encoded, idx)
        if idx >= n:
            raise MalformedEncoding(encoded, idx, "latitude delta without longitude delta")
        dlng, idx = _decode_value(encoded, idx)
        lat += dlat
        lng += dlng
        try:
            coords.append((lat / factor, lng / factor))
        except OverflowError as e:
            raise MalformedEncoding(encoded, start, "coordinate too large for a float") from e
    return coords


def to_lnglat(coords: List[Tuple[float, float]]) -> List[List[float]]:
    """[(lat, lng), ...] -> GeoJSON [[lng, lat], ...]."""
    return [[lng, lat] for lat, lng in coords]
