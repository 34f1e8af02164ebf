"""Fleet controller: the layer a UI binds to.

The controller keeps the last snapshot it received, the selected vehicle
and a busy flag.  Ride commands are applied to the local snapshot before
the data source confirms them and are rolled back wholesale if the data
source fails.  Only one ride command may be in flight; further commands
are rejected, not queued.

All state lives on the event loop that drives the controller, so
polling updates and command completions never interleave mid-update.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from roamr._constants import ACTION_START, ACTION_STOP
from roamr.exceptions import RoamrError
from roamr.links import parse_ride_link
from roamr.models.history import HistoryEvent
from roamr.models.vehicle import Coordinate, FleetSnapshot, MapPin, RideState, Vehicle
from roamr.sources.base import FleetDataSource, SupportsRecenter

_logger = logging.getLogger(__name__)

SnapshotObserver = Callable[[FleetSnapshot], None]


class CommandOutcome(enum.StrEnum):
    """How a ride command ended."""

    REJECTED = "rejected"
    """Not issued: nothing selected, or another command in flight."""
    SUCCEEDED = "succeeded"
    ROLLED_BACK = "rolled_back"
    """The data source failed; the local snapshot was restored."""


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Result of handling a scanned code.

    ``vehicle_id`` is ``None`` when the code is not a ride link;
    ``vehicle`` is ``None`` when no vehicle in the fleet has that id.
    """

    vehicle_id: str | None
    vehicle: Vehicle | None
    outcome: CommandOutcome


class FleetController:
    """Mediates between a UI and a :class:`FleetDataSource`.

    Usage::

        async with create_data_source(config) as source:
            async with FleetController(source) as controller:
                controller.subscribe(render)
                controller.start_polling()
                ...
    """

    def __init__(self, source: FleetDataSource, *, log_ride_events: bool = True) -> None:
        self._source = source
        self._log_ride_events = log_ride_events
        self._snapshot: FleetSnapshot = ()
        self._selected: Vehicle | None = None
        self._busy = False
        self._observers: list[SnapshotObserver] = []
        self._poll_task: asyncio.Task[None] | None = None
        self._background: set[asyncio.Task[None]] = set()
        self._last_error: BaseException | None = None
        self._last_location: Coordinate | None = None
        self._user_panned = False

    async def __aenter__(self) -> FleetController:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> FleetSnapshot:
        return self._snapshot

    @property
    def selected_vehicle(self) -> Vehicle | None:
        return self._selected

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def is_polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    @property
    def last_error(self) -> BaseException | None:
        """The error that ended polling, if any."""
        return self._last_error

    @property
    def last_location(self) -> Coordinate | None:
        return self._last_location

    @property
    def user_panned(self) -> bool:
        return self._user_panned

    def pins(self) -> list[MapPin]:
        return [MapPin.from_vehicle(vehicle) for vehicle in self._snapshot]

    def find_vehicle(self, vehicle_id: str) -> Vehicle | None:
        return next((v for v in self._snapshot if v.id == vehicle_id), None)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: SnapshotObserver) -> Callable[[], None]:
        """Call *observer* with every new snapshot.  Returns an unsubscribe hook."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._observers.remove(observer)

        return _unsubscribe

    def _publish(self, snapshot: FleetSnapshot) -> None:
        self._snapshot = snapshot
        for observer in list(self._observers):
            try:
                observer(snapshot)
            except Exception:
                _logger.warning("Snapshot observer %r failed", observer, exc_info=True)

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def start_polling(self) -> None:
        """Start consuming the data source's fleet stream in the background.

        Calling this while already polling does nothing.
        """
        if self.is_polling:
            return
        self._last_error = None
        self._poll_task = asyncio.get_running_loop().create_task(self._poll())
        _logger.info("Fleet polling started")

    async def stop_polling(self) -> None:
        task = self._poll_task
        self._poll_task = None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        _logger.info("Fleet polling stopped")

    async def _poll(self) -> None:
        try:
            async for snapshot in self._source.observe_fleet():
                self._receive(snapshot)
        except RoamrError as exc:
            self._last_error = exc
            _logger.warning("Fleet stream ended: %s", exc)
        except Exception as exc:
            self._last_error = exc
            _logger.warning("Fleet stream failed unexpectedly", exc_info=True)

    def _receive(self, snapshot: FleetSnapshot) -> None:
        if self._selected is not None:
            # A selected vehicle missing from the new snapshot stays as it was.
            updated = next((v for v in snapshot if v.id == self._selected.id), None)
            if updated is not None:
                self._selected = updated
        self._publish(snapshot)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_vehicle(self, vehicle_id: str) -> Vehicle | None:
        """Select the vehicle with *vehicle_id* from the current snapshot.

        Unknown ids leave the selection unchanged and return ``None``.
        """
        vehicle = self.find_vehicle(vehicle_id)
        if vehicle is not None:
            self._selected = vehicle
        return vehicle

    def clear_selection(self) -> None:
        self._selected = None

    # ------------------------------------------------------------------
    # Ride commands
    # ------------------------------------------------------------------

    async def start_ride(self) -> CommandOutcome:
        """Start a ride on the selected vehicle."""
        return await self._run_ride_command(RideState.IN_PROGRESS)

    async def stop_ride(self) -> CommandOutcome:
        """Stop the ride on the selected vehicle."""
        return await self._run_ride_command(RideState.STOPPED)

    async def _run_ride_command(self, target: RideState) -> CommandOutcome:
        selected = self._selected
        if selected is None or self._busy:
            return CommandOutcome.REJECTED

        vehicle_id = selected.id
        previous_snapshot = self._snapshot
        previous_selection = selected

        self._busy = True
        self._apply_local_state(vehicle_id, target)

        if target is RideState.IN_PROGRESS:
            command, action = self._source.start_ride, ACTION_START
        else:
            command, action = self._source.stop_ride, ACTION_STOP

        succeeded = False
        try:
            await command(vehicle_id)
            succeeded = True
        except Exception:
            _logger.warning("%s for vehicle %s failed; rolling back", action, vehicle_id, exc_info=True)
        finally:
            self._busy = False
            if not succeeded:
                self._rollback(vehicle_id, previous_snapshot, previous_selection)

        if not succeeded:
            return CommandOutcome.ROLLED_BACK
        if self._log_ride_events:
            self._spawn(self._log_event(vehicle_id, action))
        return CommandOutcome.SUCCEEDED

    def _apply_local_state(self, vehicle_id: str, target: RideState) -> None:
        snapshot = tuple(v.with_state(target) if v.id == vehicle_id else v for v in self._snapshot)
        if self._selected is not None and self._selected.id == vehicle_id:
            self._selected = self._selected.with_state(target)
        self._publish(snapshot)

    def _rollback(self, vehicle_id: str, snapshot: FleetSnapshot, selection: Vehicle) -> None:
        if self._selected is not None and self._selected.id == vehicle_id:
            self._selected = selection
        self._publish(snapshot)

    async def start_ride_from_code(self, raw: str) -> ScanResult:
        """Handle a scanned code: select the vehicle it names and start a ride."""
        vehicle_id = parse_ride_link(raw)
        if vehicle_id is None:
            _logger.debug("Ignoring scanned code that is not a ride link: %r", raw)
            return ScanResult(vehicle_id=None, vehicle=None, outcome=CommandOutcome.REJECTED)

        vehicle = self.select_vehicle(vehicle_id)
        if vehicle is None:
            _logger.info("No vehicle found for scanned id %s", vehicle_id)
            return ScanResult(vehicle_id=vehicle_id, vehicle=None, outcome=CommandOutcome.REJECTED)

        outcome = await self.start_ride()
        return ScanResult(vehicle_id=vehicle_id, vehicle=vehicle, outcome=outcome)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def _log_event(self, vehicle_id: str, action: str) -> None:
        try:
            await self._source.log_event(vehicle_id, action)
        except Exception:
            _logger.warning("Could not log %s for vehicle %s", action, vehicle_id, exc_info=True)

    def _spawn(self, coro: Any) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def flush(self) -> None:
        """Wait for pending fire-and-forget work (history logging)."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def fetch_history(self) -> list[HistoryEvent]:
        """Fetch ride history; a failure is logged and yields an empty list."""
        try:
            return await self._source.fetch_history()
        except RoamrError as exc:
            _logger.warning("Could not fetch history: %s", exc)
            return []

    # ------------------------------------------------------------------
    # Location tracking
    # ------------------------------------------------------------------

    def update_location(self, latitude: float, longitude: float) -> bool:
        """Record a device location and recenter the fleet on it.

        Nothing is recentered while the user has panned the map, or when
        the data source cannot recenter.  Returns whether it recentered.
        """
        self._last_location = Coordinate(latitude=latitude, longitude=longitude)
        if self._user_panned:
            return False
        return self._recenter(self._last_location)

    def mark_user_panned(self) -> None:
        self._user_panned = True

    def resume_tracking(self) -> bool:
        """Re-enable auto-tracking and recenter on the last known location."""
        self._user_panned = False
        if self._last_location is None:
            return False
        return self._recenter(self._last_location)

    def _recenter(self, center: Coordinate) -> bool:
        if not isinstance(self._source, SupportsRecenter):
            return False
        self._receive(self._source.recenter(center))
        return True

    async def aclose(self) -> None:
        await self.stop_polling()
        await self.flush()
