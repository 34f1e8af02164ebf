"""Authoritative in-memory vehicle registry and history log.

This is the only component allowed to mutate fleet state.  Readers get
tuples of frozen :class:`~roamr.models.Vehicle` values, never live
references.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from roamr.exceptions import RoamrUnknownVehicleError
from roamr.models.history import HistoryEvent
from roamr.models.vehicle import Coordinate, FleetSnapshot, RideState, Vehicle


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VehicleRegistry:
    """Vehicles keyed by id plus an append-only history log.

    Vehicles keep their insertion order, which is the order snapshots are
    emitted in.  The registry is not thread-safe; it expects a single
    writer (the event loop that owns it).
    """

    def __init__(
        self,
        vehicles: Iterable[Vehicle] = (),
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._vehicles: dict[str, Vehicle] = {}
        self._history: list[HistoryEvent] = []
        self.reset(vehicles)

    def __len__(self) -> int:
        return len(self._vehicles)

    def __contains__(self, vehicle_id: object) -> bool:
        return vehicle_id in self._vehicles

    # ------------------------------------------------------------------
    # Vehicles
    # ------------------------------------------------------------------

    def reset(self, vehicles: Iterable[Vehicle]) -> None:
        """Replace the whole fleet.  History is kept."""
        fleet: dict[str, Vehicle] = {}
        for vehicle in vehicles:
            if vehicle.id in fleet:
                raise ValueError(f"duplicate vehicle id {vehicle.id!r}")
            fleet[vehicle.id] = vehicle
        self._vehicles = fleet

    def ids(self) -> list[str]:
        return list(self._vehicles)

    def snapshot(self) -> FleetSnapshot:
        """Return the fleet as an immutable tuple in registry order."""
        return tuple(self._vehicles.values())

    def get(self, vehicle_id: str) -> Vehicle | None:
        return self._vehicles.get(vehicle_id)

    def require(self, vehicle_id: str) -> Vehicle:
        """Like :meth:`get` but raises :class:`RoamrUnknownVehicleError`."""
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            raise RoamrUnknownVehicleError(vehicle_id)
        return vehicle

    def update(
        self,
        vehicle_id: str,
        *,
        ride_state: RideState | None = None,
        coordinate: Coordinate | None = None,
    ) -> Vehicle | None:
        """Replace a vehicle's mutable fields.

        Returns the stored vehicle, or ``None`` when *vehicle_id* is not
        registered (the fleet is left untouched).
        """
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None:
            return None
        if ride_state is not None:
            vehicle = vehicle.with_state(ride_state)
        if coordinate is not None:
            vehicle = vehicle.with_coordinate(coordinate)
        self._vehicles[vehicle_id] = vehicle
        return vehicle

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def append_history(
        self,
        vehicle_id: str,
        action: str,
        timestamp: datetime | None = None,
    ) -> HistoryEvent:
        """Append an event and assign it the next id (starting at 1).

        *vehicle_id* is recorded as given; it does not have to be
        registered.
        """
        event = HistoryEvent(
            id=len(self._history) + 1,
            vehicle_id=vehicle_id,
            action=action,
            timestamp=timestamp if timestamp is not None else self._clock(),
        )
        self._history.append(event)
        return event

    def history(self) -> list[HistoryEvent]:
        return list(self._history)
