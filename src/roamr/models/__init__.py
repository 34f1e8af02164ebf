"""Data models for the fleet and its history."""

from roamr.models._base import RoamrBaseModel, WireTimestamp, format_wire_timestamp, parse_wire_timestamp
from roamr.models.history import HistoryEvent
from roamr.models.requests import HistoryEntryRequest, RideStateUpdate
from roamr.models.vehicle import Coordinate, FleetSnapshot, MapPin, MobilityClass, RideState, Vehicle

__all__ = [
    "Coordinate",
    "FleetSnapshot",
    "HistoryEntryRequest",
    "HistoryEvent",
    "MapPin",
    "MobilityClass",
    "RideState",
    "RideStateUpdate",
    "RoamrBaseModel",
    "Vehicle",
    "WireTimestamp",
    "format_wire_timestamp",
    "parse_wire_timestamp",
]
