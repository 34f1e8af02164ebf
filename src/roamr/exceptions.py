"""Custom exception hierarchy for roamr."""

from __future__ import annotations


class RoamrError(Exception):
    """Base exception for all roamr errors."""


class RoamrConfigError(RoamrError):
    """Invalid or missing configuration."""


class RoamrTransportError(RoamrError):
    """HTTP-level failure (network, timeout, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RoamrMalformedPayloadError(RoamrError):
    """A fleet snapshot or history body could not be decoded.

    One bad record fails the whole fetch; records are never skipped.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class RoamrUnknownVehicleError(RoamrError):
    """A vehicle id has no match in the registry.

    Ride commands swallow this so that retries stay idempotent; only the
    registry's strict lookup raises it.
    """

    def __init__(self, vehicle_id: str) -> None:
        self.vehicle_id = vehicle_id
        super().__init__(f"Unknown vehicle id: {vehicle_id!r}")
