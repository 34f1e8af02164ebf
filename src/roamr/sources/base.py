"""The fleet data source contract.

A data source is chosen once, at construction time; the controller only
ever talks to it through :class:`FleetDataSource`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from roamr.models.history import HistoryEvent
from roamr.models.vehicle import Coordinate, FleetSnapshot


class FleetDataSource(Protocol):
    """Capabilities the controller needs from a backend.

    Commands return ``None`` on success and raise a
    :class:`~roamr.exceptions.RoamrError` on failure.  A command naming an
    unknown vehicle succeeds without changing anything.
    """

    def observe_fleet(self) -> AsyncIterator[FleetSnapshot]:
        """Endless stream of snapshots, one per tick or poll.

        The iterator is single-use.  It only ends by raising, on a failure
        the source cannot recover from.
        """
        ...

    async def start_ride(self, vehicle_id: str) -> None:
        ...

    async def stop_ride(self, vehicle_id: str) -> None:
        ...

    async def log_event(self, vehicle_id: str, action: str) -> None:
        ...

    async def fetch_history(self) -> list[HistoryEvent]:
        ...


@runtime_checkable
class SupportsRecenter(Protocol):
    """Optional capability: re-seed the fleet around a new location."""

    def recenter(self, center: Coordinate) -> FleetSnapshot:
        ...
