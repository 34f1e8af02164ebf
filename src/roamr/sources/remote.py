"""Data source backed by a remote JSON backend.

Wire contract::

    GET   /vehicles        -> [{id, name, latitude, longitude, state}, ...]
    PATCH /vehicles/{id}   <- {"state": "in_progress" | "stopped"}
    POST  /history         <- {vehicleId, action, timestamp}
    GET   /history         -> [{id, vehicleId, action, timestamp}, ...]
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, TypeVar
from urllib.parse import quote

import aiohttp
from pydantic import BaseModel, ValidationError

from roamr._constants import HISTORY_ENDPOINT, VEHICLES_ENDPOINT
from roamr._transport import HttpJsonTransport, Transport
from roamr.config import RoamrConfig
from roamr.exceptions import RoamrError, RoamrMalformedPayloadError, RoamrTransportError
from roamr.models.history import HistoryEvent
from roamr.models.requests import HistoryEntryRequest, RideStateUpdate
from roamr.models.vehicle import FleetSnapshot, RideState, Vehicle

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _decode_items(model: type[M], payload: Any, endpoint: str) -> list[M]:
    """Validate every item of a list payload; any bad item fails the lot."""
    if not isinstance(payload, list):
        raise RoamrMalformedPayloadError(
            f"Expected a JSON array from {endpoint}, got {type(payload).__name__}",
            endpoint=endpoint,
        )
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise RoamrMalformedPayloadError(
            f"Malformed {model.__name__} payload from {endpoint}: {exc.error_count()} error(s)",
            endpoint=endpoint,
        ) from exc


class RemoteFleetSource:
    """Async client for the fleet backend.

    Usage::

        async with RemoteFleetSource(config) as source:
            snapshot = await source.fetch_vehicles()

    An aiohttp session can be injected; it is then left open on exit.
    Tests may inject a *transport* directly and skip the session entirely.
    """

    def __init__(
        self,
        config: RoamrConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._owns_transport = transport is None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RemoteFleetSource:
        if self._owns_transport:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpJsonTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if self._owns_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise RoamrError("Source not initialized. Use 'async with RemoteFleetSource(...) as source:'")
        return self._transport

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_vehicles(self) -> FleetSnapshot:
        """One ``GET /vehicles`` round trip."""
        payload = await self._require_transport().request_json("GET", VEHICLES_ENDPOINT)
        return tuple(_decode_items(Vehicle, payload, VEHICLES_ENDPOINT))

    async def observe_fleet(self) -> AsyncIterator[FleetSnapshot]:
        """Poll ``GET /vehicles`` every ``poll_interval`` seconds.

        The first poll happens immediately.  Transport failures are retried
        on the next interval until ``max_poll_failures`` happen in a row,
        at which point the last one is raised.  A malformed payload is
        raised straight away.
        """
        failures = 0
        while True:
            try:
                snapshot = await self.fetch_vehicles()
            except RoamrTransportError:
                failures += 1
                if failures >= self._config.max_poll_failures:
                    _logger.warning("Giving up on fleet polling after %d failed attempts", failures)
                    raise
                _logger.debug("Fleet poll attempt failed (%d in a row)", failures, exc_info=True)
            else:
                failures = 0
                yield snapshot
            await asyncio.sleep(self._config.poll_interval)

    async def fetch_history(self) -> list[HistoryEvent]:
        payload = await self._require_transport().request_json("GET", HISTORY_ENDPOINT)
        return _decode_items(HistoryEvent, payload, HISTORY_ENDPOINT)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def start_ride(self, vehicle_id: str) -> None:
        await self._patch_state(vehicle_id, RideState.IN_PROGRESS)

    async def stop_ride(self, vehicle_id: str) -> None:
        await self._patch_state(vehicle_id, RideState.STOPPED)

    async def _patch_state(self, vehicle_id: str, state: RideState) -> None:
        endpoint = f"{VEHICLES_ENDPOINT}/{quote(vehicle_id, safe='')}"
        body = RideStateUpdate(state=state).to_wire()
        try:
            await self._require_transport().request_json("PATCH", endpoint, body)
        except RoamrTransportError as exc:
            if exc.status_code == 404:
                # Unknown ids are a no-op so that retries stay idempotent.
                _logger.debug("Backend has no vehicle %s; %s ignored", vehicle_id, state)
                return
            raise

    async def log_event(self, vehicle_id: str, action: str) -> None:
        body = HistoryEntryRequest(vehicle_id=vehicle_id, action=action).to_wire()
        await self._require_transport().request_json("POST", HISTORY_ENDPOINT, body)
