"""Fleet data sources: the contract and its two implementations."""

from __future__ import annotations

from roamr.config import BACKEND_REMOTE, RoamrConfig
from roamr.sources.base import FleetDataSource, SupportsRecenter
from roamr.sources.remote import RemoteFleetSource
from roamr.sources.simulated import SimulatedFleetSource


def create_data_source(config: RoamrConfig) -> SimulatedFleetSource | RemoteFleetSource:
    """Build the data source selected by ``config.backend``.

    Both implementations are async context managers; enter the result
    before use.
    """
    if config.backend == BACKEND_REMOTE:
        return RemoteFleetSource(config)
    return SimulatedFleetSource(config.simulation)


__all__ = [
    "FleetDataSource",
    "RemoteFleetSource",
    "SimulatedFleetSource",
    "SupportsRecenter",
    "create_data_source",
]
