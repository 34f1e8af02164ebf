"""Tests for the pydantic fleet and history models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from roamr.models import (
    Coordinate,
    HistoryEntryRequest,
    HistoryEvent,
    MapPin,
    RideState,
    RideStateUpdate,
    Vehicle,
)


def _wire_vehicle(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "id": "7",
        "name": "Veh7",
        "latitude": 37.77,
        "longitude": -122.41,
        "state": "in_progress",
    }
    payload.update(overrides)
    return payload


class TestVehicle:
    def test_decodes_wire_payload(self) -> None:
        vehicle = Vehicle.model_validate(_wire_vehicle())

        assert vehicle.id == "7"
        assert vehicle.name == "Veh7"
        assert vehicle.ride_state is RideState.IN_PROGRESS
        assert vehicle.coordinate == Coordinate(latitude=37.77, longitude=-122.41)

    def test_to_wire_uses_state_key(self) -> None:
        vehicle = Vehicle.model_validate(_wire_vehicle(state="waiting"))

        assert vehicle.to_wire() == {
            "id": "7",
            "name": "Veh7",
            "latitude": 37.77,
            "longitude": -122.41,
            "state": "waiting",
        }

    def test_unknown_state_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Vehicle.model_validate(_wire_vehicle(state="parked"))

    @pytest.mark.parametrize(("field", "value"), [("latitude", 90.5), ("longitude", -180.5)])
    def test_out_of_range_position_is_rejected(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            Vehicle.model_validate(_wire_vehicle(**{field: value}))

    def test_missing_field_is_rejected(self) -> None:
        payload = _wire_vehicle()
        del payload["name"]
        with pytest.raises(ValidationError):
            Vehicle.model_validate(payload)

    def test_blank_id_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Vehicle.model_validate(_wire_vehicle(id="  "))

    def test_is_frozen(self) -> None:
        vehicle = Vehicle.model_validate(_wire_vehicle())
        with pytest.raises(ValidationError):
            vehicle.ride_state = RideState.STOPPED  # type: ignore[misc]

    def test_with_state_returns_copy(self) -> None:
        vehicle = Vehicle.model_validate(_wire_vehicle())
        stopped = vehicle.with_state(RideState.STOPPED)

        assert stopped.ride_state is RideState.STOPPED
        assert vehicle.ride_state is RideState.IN_PROGRESS
        assert stopped.id == vehicle.id

    def test_map_pin(self) -> None:
        vehicle = Vehicle.model_validate(_wire_vehicle())

        assert MapPin.from_vehicle(vehicle) == MapPin(
            id="7",
            latitude=37.77,
            longitude=-122.41,
            state=RideState.IN_PROGRESS,
        )

    def test_map_pin_is_frozen_model(self) -> None:
        pin = MapPin.from_vehicle(Vehicle.model_validate(_wire_vehicle()))

        with pytest.raises(ValidationError):
            pin.state = RideState.STOPPED  # type: ignore[misc]
        assert pin.to_wire() == {"id": "7", "latitude": 37.77, "longitude": -122.41, "state": "in_progress"}


class TestCoordinate:
    def test_offset_moves(self) -> None:
        moved = Coordinate(latitude=10.0, longitude=20.0).offset(0.5, -0.25)
        assert moved.latitude == pytest.approx(10.5)
        assert moved.longitude == pytest.approx(19.75)

    def test_offset_clamps_latitude_and_wraps_longitude(self) -> None:
        moved = Coordinate(latitude=89.9995, longitude=179.9995).offset(0.001, 0.001)
        assert moved.latitude == 90.0
        assert moved.longitude == pytest.approx(-179.9995)


class TestHistory:
    def test_decodes_wire_payload(self) -> None:
        event = HistoryEvent.model_validate(
            {"id": 3, "vehicleId": "2", "action": "stop", "timestamp": "2026-03-01T08:15:00Z"}
        )

        assert event.id == 3
        assert event.vehicle_id == "2"
        assert event.action == "stop"
        assert event.timestamp == datetime(2026, 3, 1, 8, 15, tzinfo=UTC)

    def test_naive_timestamp_is_utc(self) -> None:
        event = HistoryEvent.model_validate(
            {"id": 1, "vehicleId": "2", "action": "start", "timestamp": "2026-03-01T08:15:00"}
        )
        assert event.timestamp.tzinfo is not None
        assert event.timestamp.utcoffset().total_seconds() == 0  # type: ignore[union-attr]

    def test_bad_timestamp_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HistoryEvent.model_validate({"id": 1, "vehicleId": "2", "action": "start", "timestamp": "yesterday"})


class TestRequests:
    def test_ride_state_update(self) -> None:
        assert RideStateUpdate(state=RideState.STOPPED).to_wire() == {"state": "stopped"}

    def test_history_entry_request(self) -> None:
        request = HistoryEntryRequest(
            vehicle_id="1",
            action="start",
            timestamp=datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=UTC),
        )
        assert request.to_wire() == {
            "vehicleId": "1",
            "action": "start",
            "timestamp": "2026-01-02T03:04:05Z",
        }

    def test_history_entry_request_defaults_to_now(self) -> None:
        before = datetime.now(UTC).replace(microsecond=0)
        request = HistoryEntryRequest(vehicle_id="1", action="start")
        assert request.timestamp >= before
        assert request.to_wire()["timestamp"].endswith("Z")

    def test_history_entry_request_rejects_blank_action(self) -> None:
        with pytest.raises(ValidationError):
            HistoryEntryRequest(vehicle_id="1", action=" ")
