"""Coordinate extraction from Google Maps links pasted into the admin form."""

import re
from typing import NamedTuple

# ?q=lat,lng  |  @lat,lng,17z  |  /maps/place/Name/@lat,lng
_QUERY_PATTERN = re.compile(r"[?&]q=(-?\d+(?:\.\d+)?),\s*(-?\d+(?:\.\d+)?)")
_AT_PATTERN = re.compile(r"@(-?\d+(?:\.\d+)?),(-?\d+(?:\.\d+)?)")


class Coordinates(NamedTuple):
    lat: float
    lng: float


def is_valid_coordinate(lat: float, lng: float) -> bool:
    return -90 <= lat <= 90 and -180 <= lng <= 180


def extract_coordinates(url: str | None) -> Coordinates | None:
    """Pull latitude/longitude out of a Google Maps URL.

    Shortened ``maps.app.goo.gl`` links carry no coordinates and yield ``None``.
    """
    if not url:
        return None

    for pattern in (_QUERY_PATTERN, _AT_PATTERN):
        match = pattern.search(url)
        if match:
            lat, lng = float(match.group(1)), float(match.group(2))
            if is_valid_coordinate(lat, lng):
                return Coordinates(lat, lng)
    return None


def best_coordinates(
    latitude: float | None,
    longitude: float | None,
    google_maps_url: str | None,
) -> Coordinates | None:
    """Prefer coordinates from the maps link, fall back to the stored pair."""
    extracted = extract_coordinates(google_maps_url)
    if extracted is not None:
        return extracted
    if latitude is not None and longitude is not None:
        return Coordinates(latitude, longitude)
    return None
