"""Pydantic request bodies for the remote backend.

These models provide a consistent "validate -> serialize" flow for
:class:`roamr.sources.remote.RemoteFleetSource`.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field, field_serializer, field_validator

from roamr.models._base import RoamrBaseModel, WireTimestamp, format_wire_timestamp
from roamr.models.vehicle import RideState


class RideStateUpdate(RoamrBaseModel):
    """Body of ``PATCH /vehicles/{id}``."""

    state: RideState


class HistoryEntryRequest(RoamrBaseModel):
    """Body of ``POST /history``."""

    vehicle_id: str
    action: str
    timestamp: WireTimestamp = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("vehicle_id", "action")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must be non-empty")
        return text

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_wire_timestamp(value)
