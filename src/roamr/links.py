"""Ride links carried by vehicle QR codes.

A vehicle's code encodes ``myapp://startRide?vehicleId=<id>``.
"""

from __future__ import annotations

from urllib.parse import parse_qs, urlencode, urlsplit

from roamr._constants import RIDE_LINK_ACTION, RIDE_LINK_SCHEME, RIDE_LINK_VEHICLE_PARAM


def parse_ride_link(raw: str) -> str | None:
    """Return the vehicle id from a ride link, or ``None`` if *raw* is not one.

    The action may sit in the host position (``myapp://startRide``) or the
    path (``myapp:startRide``, ``myapp:///startRide``).  The first
    non-empty ``vehicleId`` parameter wins.
    """
    try:
        parts = urlsplit(raw.strip())
    except ValueError:
        return None
    if parts.scheme.lower() != RIDE_LINK_SCHEME:
        return None
    action = (parts.netloc or parts.path).strip("/")
    if parts.netloc and parts.path.strip("/"):
        return None
    if action != RIDE_LINK_ACTION:
        return None
    for value in parse_qs(parts.query).get(RIDE_LINK_VEHICLE_PARAM, []):
        vehicle_id = value.strip()
        if vehicle_id:
            return vehicle_id
    return None


def build_ride_link(vehicle_id: str) -> str:
    """Inverse of :func:`parse_ride_link`, used to print vehicle codes."""
    return f"{RIDE_LINK_SCHEME}://{RIDE_LINK_ACTION}?{urlencode({RIDE_LINK_VEHICLE_PARAM: vehicle_id})}"
