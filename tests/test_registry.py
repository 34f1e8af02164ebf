from __future__ import annotations

from datetime import UTC, datetime

import pytest

from roamr.exceptions import RoamrUnknownVehicleError
from roamr.models import Coordinate, RideState, Vehicle
from roamr.state import VehicleRegistry


def _vehicle(vehicle_id: str, state: RideState = RideState.WAITING) -> Vehicle:
    return Vehicle(id=vehicle_id, name=f"Veh{vehicle_id}", latitude=1.0, longitude=2.0, ride_state=state)


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_snapshot_is_a_value_copy() -> None:
    registry = VehicleRegistry([_vehicle("1"), _vehicle("2")])
    before = registry.snapshot()

    registry.update("1", ride_state=RideState.IN_PROGRESS)

    assert isinstance(before, tuple)
    assert before[0].ride_state is RideState.WAITING
    assert registry.snapshot()[0].ride_state is RideState.IN_PROGRESS


def test_snapshot_keeps_insertion_order() -> None:
    registry = VehicleRegistry([_vehicle("3"), _vehicle("1"), _vehicle("2")])
    assert [v.id for v in registry.snapshot()] == ["3", "1", "2"]


def test_update_replaces_mutable_fields() -> None:
    registry = VehicleRegistry([_vehicle("1")])

    updated = registry.update("1", ride_state=RideState.STOPPED, coordinate=Coordinate(latitude=5.0, longitude=6.0))

    assert updated is not None
    assert updated.id == "1"
    assert updated.name == "Veh1"
    assert (updated.latitude, updated.longitude) == (5.0, 6.0)
    assert registry.get("1") == updated


def test_update_unknown_id_is_a_no_op() -> None:
    registry = VehicleRegistry([_vehicle("1")])
    before = registry.snapshot()

    assert registry.update("999", ride_state=RideState.STOPPED) is None
    assert registry.snapshot() == before


def test_require_raises_for_unknown_id() -> None:
    registry = VehicleRegistry([_vehicle("1")])

    with pytest.raises(RoamrUnknownVehicleError) as exc_info:
        registry.require("999")
    assert exc_info.value.vehicle_id == "999"


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(ValueError):
        VehicleRegistry([_vehicle("1"), _vehicle("1")])


def test_history_ids_are_monotonic_from_one() -> None:
    registry = VehicleRegistry([_vehicle("1")], clock=_dt)

    first = registry.append_history("1", "start")
    second = registry.append_history("1", "stop")
    third = registry.append_history("404", "start")

    assert [first.id, second.id, third.id] == [1, 2, 3]
    assert first.timestamp == _dt()
    assert third.vehicle_id == "404"
    assert registry.history() == [first, second, third]


def test_reset_keeps_history() -> None:
    registry = VehicleRegistry([_vehicle("1")], clock=_dt)
    registry.append_history("1", "start")

    registry.reset([_vehicle("a"), _vehicle("b")])

    assert registry.ids() == ["a", "b"]
    assert "1" not in registry
    assert len(registry.history()) == 1
    assert registry.append_history("a", "start").id == 2
