"""Discrete-time fleet simulation.

Each tick evaluates every vehicle once, in registry order:

* static vehicles that are not riding stay exactly where they are;
* a riding vehicle with waypoints left moves to the next one and stops
  automatically after the last;
* everything else jitters in place, and a waiting vehicle may start a
  ride on its own with ``auto_start_probability``.

The probability is applied independently on every tick, regardless of
the tick interval.
"""

from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Callable
from datetime import UTC, datetime

from roamr.config import SimulationConfig
from roamr.exceptions import RoamrUnknownVehicleError
from roamr.models.history import HistoryEvent
from roamr.models.vehicle import Coordinate, FleetSnapshot, MobilityClass, RideState, Vehicle
from roamr.simulation.seeding import build_lap_route, partition_mobility, seed_vehicles
from roamr.state.registry import VehicleRegistry

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FleetSimulation:
    """Owns a simulated fleet and advances it one tick at a time."""

    def __init__(
        self,
        config: SimulationConfig | None = None,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or SimulationConfig()
        self._rng = rng if rng is not None else random.Random(self._config.rng_seed)
        self._center = Coordinate(
            latitude=self._config.center_latitude,
            longitude=self._config.center_longitude,
        )
        self._registry = VehicleRegistry(
            seed_vehicles(self._center, self._config.fleet_size, spread=self._config.seed_spread, rng=self._rng),
            clock=clock,
        )
        self._mobility = partition_mobility(self._registry.ids(), rng=self._rng)
        self._lap_route = self._build_lap_route()
        self._routes: dict[str, deque[Coordinate]] = {}
        self._tick_count = 0
        _logger.info(
            "Seeded %d vehicles around (%.5f, %.5f), %d static",
            len(self._registry),
            self._center.latitude,
            self._center.longitude,
            sum(1 for m in self._mobility.values() if m is MobilityClass.STATIC),
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def center(self) -> Coordinate:
        return self._center

    @property
    def registry(self) -> VehicleRegistry:
        return self._registry

    @property
    def lap_route(self) -> tuple[Coordinate, ...]:
        return self._lap_route

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def snapshot(self) -> FleetSnapshot:
        return self._registry.snapshot()

    def mobility_of(self, vehicle_id: str) -> MobilityClass | None:
        return self._mobility.get(vehicle_id)

    def remaining_route(self, vehicle_id: str) -> tuple[Coordinate, ...]:
        """Waypoints *vehicle_id* still has to visit (empty when none)."""
        return tuple(self._routes.get(vehicle_id, ()))

    def history(self) -> list[HistoryEvent]:
        return self._registry.history()

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def tick(self) -> FleetSnapshot:
        """Advance every vehicle by one step and return the new snapshot."""
        for vehicle in self._registry.snapshot():
            self._step(vehicle)
        self._tick_count += 1
        _logger.debug("Tick %d: %d vehicles riding", self._tick_count, len(self._routes))
        return self._registry.snapshot()

    def _step(self, vehicle: Vehicle) -> None:
        riding = vehicle.ride_state is RideState.IN_PROGRESS
        if self._mobility.get(vehicle.id) is MobilityClass.STATIC and not riding:
            return

        route = self._routes.get(vehicle.id)
        if riding and route:
            waypoint = route.popleft()
            if route:
                self._registry.update(vehicle.id, coordinate=waypoint)
                return
            # Lap finished.
            self._routes.pop(vehicle.id, None)
            self._registry.update(vehicle.id, coordinate=waypoint, ride_state=RideState.STOPPED)
            _logger.debug("Vehicle %s completed its lap", vehicle.id)
            return

        jitter = self._config.idle_jitter
        moved = vehicle.coordinate.offset(self._rng.uniform(-jitter, jitter), self._rng.uniform(-jitter, jitter))
        if vehicle.ride_state is RideState.WAITING and self._rng.random() < self._config.auto_start_probability:
            self._routes[vehicle.id] = deque(self._lap_route)
            self._registry.update(vehicle.id, coordinate=moved, ride_state=RideState.IN_PROGRESS)
            _logger.debug("Vehicle %s started a ride on its own", vehicle.id)
            return
        self._registry.update(vehicle.id, coordinate=moved)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_ride(self, vehicle_id: str) -> bool:
        """Put *vehicle_id* on a fresh lap, whatever its mobility class.

        Any remaining route is replaced.  Returns ``False`` (and changes
        nothing) when the id is unknown.
        """
        try:
            self._registry.require(vehicle_id)
        except RoamrUnknownVehicleError:
            _logger.debug("start_ride ignored for unknown vehicle %s", vehicle_id)
            return False
        self._routes[vehicle_id] = deque(self._lap_route)
        self._registry.update(vehicle_id, ride_state=RideState.IN_PROGRESS)
        return True

    def stop_ride(self, vehicle_id: str) -> bool:
        """Stop *vehicle_id* and drop its route.

        Idempotent.  Returns ``False`` (and changes nothing) when the id is
        unknown.
        """
        try:
            self._registry.require(vehicle_id)
        except RoamrUnknownVehicleError:
            _logger.debug("stop_ride ignored for unknown vehicle %s", vehicle_id)
            return False
        self._routes.pop(vehicle_id, None)
        self._registry.update(vehicle_id, ride_state=RideState.STOPPED)
        return True

    def log_event(self, vehicle_id: str, action: str) -> HistoryEvent:
        return self._registry.append_history(vehicle_id, action)

    def recenter(self, center: Coordinate) -> FleetSnapshot:
        """Re-seed the whole fleet around *center*.

        Positions, ride states and route assignments are discarded and the
        lap route is rebuilt around the new center.  Ids, mobility classes
        and history are kept.
        """
        self._center = center
        self._registry.reset(
            seed_vehicles(center, self._config.fleet_size, spread=self._config.seed_spread, rng=self._rng)
        )
        self._routes.clear()
        self._lap_route = self._build_lap_route()
        _logger.info("Recentered fleet on (%.5f, %.5f)", center.latitude, center.longitude)
        return self._registry.snapshot()

    def _build_lap_route(self) -> tuple[Coordinate, ...]:
        return build_lap_route(self._center, points=self._config.route_points, radius=self._config.route_radius)
