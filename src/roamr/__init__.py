"""roamr - fleet simulation and control core for a ride operator app."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("roamr")
except PackageNotFoundError:
    __version__ = "0+local"
from roamr.config import RoamrConfig, SimulationConfig
from roamr.controller import CommandOutcome, FleetController, ScanResult
from roamr.exceptions import (
    RoamrConfigError,
    RoamrError,
    RoamrMalformedPayloadError,
    RoamrTransportError,
    RoamrUnknownVehicleError,
)
from roamr.links import build_ride_link, parse_ride_link
from roamr.models import (
    Coordinate,
    FleetSnapshot,
    HistoryEvent,
    MapPin,
    MobilityClass,
    RideState,
    Vehicle,
)
from roamr.simulation import FleetSimulation
from roamr.sources import (
    FleetDataSource,
    RemoteFleetSource,
    SimulatedFleetSource,
    SupportsRecenter,
    create_data_source,
)
from roamr.state import VehicleRegistry

__all__ = [
    "__version__",
    "CommandOutcome",
    "Coordinate",
    "FleetController",
    "FleetDataSource",
    "FleetSimulation",
    "FleetSnapshot",
    "HistoryEvent",
    "MapPin",
    "MobilityClass",
    "RemoteFleetSource",
    "RideState",
    "RoamrConfig",
    "RoamrConfigError",
    "RoamrError",
    "RoamrMalformedPayloadError",
    "RoamrTransportError",
    "RoamrUnknownVehicleError",
    "ScanResult",
    "SimulatedFleetSource",
    "SimulationConfig",
    "SupportsRecenter",
    "VehicleRegistry",
    "Vehicle",
    "build_ride_link",
    "create_data_source",
    "parse_ride_link",
]
