"""Vehicle model and its value types."""

from __future__ import annotations

import enum

from pydantic import Field, field_validator

from roamr.models._base import RoamrBaseModel


class RideState(enum.StrEnum):
    """Ride state of a vehicle; values are the wire strings."""

    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    STOPPED = "stopped"


class MobilityClass(enum.StrEnum):
    """Idle-time behaviour of a simulated vehicle, fixed at seed time."""

    DYNAMIC = "dynamic"
    STATIC = "static"


def _clamp_latitude(value: float) -> float:
    return max(-90.0, min(90.0, value))


def _wrap_longitude(value: float) -> float:
    if -180.0 <= value <= 180.0:
        return value
    return ((value + 180.0) % 360.0) - 180.0


class Coordinate(RoamrBaseModel):
    """A geographic position in degrees."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    def offset(self, d_latitude: float, d_longitude: float) -> Coordinate:
        """Return a coordinate moved by the given deltas.

        Latitude is clamped to the poles; longitude wraps at the antimeridian.
        """
        return Coordinate(
            latitude=_clamp_latitude(self.latitude + d_latitude),
            longitude=_wrap_longitude(self.longitude + d_longitude),
        )


class Vehicle(RoamrBaseModel):
    """A rideable vehicle as seen by the operator.

    Fields map to the backend's ``GET /vehicles`` items; the ride state
    travels under the ``state`` key.
    """

    id: str
    """Stable vehicle identifier, unique within the fleet."""
    name: str
    """Display name."""
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    ride_state: RideState = Field(alias="state")

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, value: str) -> str:
        vehicle_id = value.strip()
        if not vehicle_id:
            raise ValueError("id must be non-empty")
        return vehicle_id

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)

    def with_state(self, ride_state: RideState) -> Vehicle:
        return self.model_copy(update={"ride_state": ride_state})

    def with_coordinate(self, coordinate: Coordinate) -> Vehicle:
        return self.model_copy(update={"latitude": coordinate.latitude, "longitude": coordinate.longitude})


FleetSnapshot = tuple[Vehicle, ...]
"""Point-in-time, immutable view of the whole fleet in registry order."""


class MapPin(RoamrBaseModel):
    """What the map surface needs to draw one vehicle."""

    id: str
    latitude: float
    longitude: float
    state: RideState

    @classmethod
    def from_vehicle(cls, vehicle: Vehicle) -> MapPin:
        return cls(
            id=vehicle.id,
            latitude=vehicle.latitude,
            longitude=vehicle.longitude,
            state=vehicle.ride_state,
        )
