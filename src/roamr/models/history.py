"""Ride history model."""

from __future__ import annotations

from pydantic import Field

from roamr.models._base import RoamrBaseModel, WireTimestamp


class HistoryEvent(RoamrBaseModel):
    """An append-only record of something that happened to a vehicle.

    ``vehicle_id`` refers to a vehicle but does not own it; the event
    outlives any change to the fleet.
    """

    id: int = Field(ge=1)
    """Monotonic id assigned by the history log."""
    vehicle_id: str
    action: str
    """Free-form label such as ``"start"`` or ``"stop"``."""
    timestamp: WireTimestamp
