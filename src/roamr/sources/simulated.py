"""Data source backed by the in-process fleet simulation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

from roamr.config import SimulationConfig
from roamr.models.history import HistoryEvent
from roamr.models.vehicle import Coordinate, FleetSnapshot
from roamr.simulation.engine import FleetSimulation

_logger = logging.getLogger(__name__)


class SimulatedFleetSource:
    """Serves a :class:`FleetSimulation` through the data source contract.

    Commands take ``command_latency`` seconds to complete, like a network
    round trip would, but never fail.  The simulation is mutated when the
    command is issued; the latency only delays completion.

    Usage::

        async with SimulatedFleetSource(SimulationConfig(rng_seed=7)) as source:
            async for snapshot in source.observe_fleet():
                ...
    """

    def __init__(
        self,
        config: SimulationConfig | None = None,
        *,
        simulation: FleetSimulation | None = None,
    ) -> None:
        self._simulation = simulation if simulation is not None else FleetSimulation(config)
        self._config = self._simulation.config

    async def __aenter__(self) -> SimulatedFleetSource:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    @property
    def simulation(self) -> FleetSimulation:
        return self._simulation

    async def observe_fleet(self) -> AsyncIterator[FleetSnapshot]:
        """Tick the simulation every ``tick_interval`` seconds and yield the result.

        The first snapshot arrives after one interval.
        """
        while True:
            await asyncio.sleep(self._config.tick_interval)
            yield self._simulation.tick()

    async def start_ride(self, vehicle_id: str) -> None:
        self._simulation.start_ride(vehicle_id)
        await asyncio.sleep(self._config.command_latency)

    async def stop_ride(self, vehicle_id: str) -> None:
        self._simulation.stop_ride(vehicle_id)
        await asyncio.sleep(self._config.command_latency)

    async def log_event(self, vehicle_id: str, action: str) -> None:
        event = self._simulation.log_event(vehicle_id, action)
        _logger.debug("Logged history event %d: %s %s", event.id, action, vehicle_id)

    async def fetch_history(self) -> list[HistoryEvent]:
        return self._simulation.history()

    def recenter(self, center: Coordinate) -> FleetSnapshot:
        return self._simulation.recenter(center)
