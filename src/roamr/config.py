"""Client configuration for roamr."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from roamr._constants import (
    BASE_URL,
    DEFAULT_AUTO_START_PROBABILITY,
    DEFAULT_CENTER_LATITUDE,
    DEFAULT_CENTER_LONGITUDE,
    DEFAULT_COMMAND_LATENCY,
    DEFAULT_FLEET_SIZE,
    DEFAULT_IDLE_JITTER,
    DEFAULT_MAX_POLL_FAILURES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_ROUTE_POINTS,
    DEFAULT_ROUTE_RADIUS,
    DEFAULT_SEED_SPREAD,
    DEFAULT_TICK_INTERVAL,
)
from roamr.exceptions import RoamrConfigError

BACKEND_SIMULATION = "simulation"
BACKEND_REMOTE = "remote"
_BACKENDS = frozenset({BACKEND_SIMULATION, BACKEND_REMOTE})


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env: Any, key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise RoamrConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class SimulationConfig:
    """Parameters of the in-process fleet simulation.

    Parameters
    ----------
    center_latitude, center_longitude : float
        Point the fleet is seeded around and the lap route circles.
    fleet_size : int
        Number of vehicles created at seed time.  Half of them (rounded
        down) are static.
    seed_spread : float
        Half-width in degrees of the box vehicles are scattered in.
    idle_jitter : float
        Per-axis bound in degrees of the random step idle vehicles take.
    auto_start_probability : float
        Chance per tick that a waiting dynamic vehicle starts a ride.
    route_points : int
        Number of waypoints in the closed lap route.
    route_radius : float
        Radius of the lap route in degrees.
    tick_interval : float
        Seconds between simulation ticks.
    command_latency : float
        Seconds a start/stop command takes to complete.
    rng_seed : int or None
        Seed for the simulation's random generator.  ``None`` seeds from
        system entropy.
    """

    center_latitude: float = DEFAULT_CENTER_LATITUDE
    center_longitude: float = DEFAULT_CENTER_LONGITUDE
    fleet_size: int = DEFAULT_FLEET_SIZE
    seed_spread: float = DEFAULT_SEED_SPREAD
    idle_jitter: float = DEFAULT_IDLE_JITTER
    auto_start_probability: float = DEFAULT_AUTO_START_PROBABILITY
    route_points: int = DEFAULT_ROUTE_POINTS
    route_radius: float = DEFAULT_ROUTE_RADIUS
    tick_interval: float = DEFAULT_TICK_INTERVAL
    command_latency: float = DEFAULT_COMMAND_LATENCY
    rng_seed: int | None = None

    def __post_init__(self) -> None:
        if not -90.0 <= self.center_latitude <= 90.0:
            raise RoamrConfigError(f"center_latitude out of range: {self.center_latitude}")
        if not -180.0 <= self.center_longitude <= 180.0:
            raise RoamrConfigError(f"center_longitude out of range: {self.center_longitude}")
        if self.fleet_size < 1:
            raise RoamrConfigError(f"fleet_size must be positive, got {self.fleet_size}")
        if not 0.0 <= self.auto_start_probability <= 1.0:
            raise RoamrConfigError(
                f"auto_start_probability must be within [0, 1], got {self.auto_start_probability}"
            )
        if self.route_points < 1:
            raise RoamrConfigError(f"route_points must be at least 1, got {self.route_points}")
        for name in ("seed_spread", "idle_jitter", "route_radius", "tick_interval", "command_latency"):
            if getattr(self, name) < 0:
                raise RoamrConfigError(f"{name} must not be negative")


@dataclasses.dataclass(frozen=True)
class RoamrConfig:
    """Top-level configuration.

    Parameters
    ----------
    backend : str
        ``"simulation"`` runs the in-process fleet simulation,
        ``"remote"`` talks to a JSON backend at *base_url*.
    base_url : str
        Root URL of the remote backend.
    request_timeout : float
        Total timeout in seconds for a single HTTP request.
    poll_interval : float
        Seconds between ``GET /vehicles`` polls (remote backend).
    max_poll_failures : int
        Consecutive failed polls tolerated before the fleet stream ends
        with the last error.
    log_ride_events : bool
        Append a history event after every successful start/stop.
    simulation : SimulationConfig
        Simulation parameters (simulation backend only).
    """

    backend: str = BACKEND_SIMULATION
    base_url: str = BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_poll_failures: int = DEFAULT_MAX_POLL_FAILURES
    log_ride_events: bool = True
    simulation: SimulationConfig = dataclasses.field(default_factory=SimulationConfig)

    def __post_init__(self) -> None:
        if self.backend not in _BACKENDS:
            raise RoamrConfigError(f"backend must be one of {sorted(_BACKENDS)}, got {self.backend!r}")
        if self.request_timeout <= 0:
            raise RoamrConfigError("request_timeout must be positive")
        if self.poll_interval < 0:
            raise RoamrConfigError("poll_interval must not be negative")
        if self.max_poll_failures < 1:
            raise RoamrConfigError("max_poll_failures must be at least 1")

    @classmethod
    def from_env(cls, **overrides: Any) -> RoamrConfig:
        """Create configuration from environment variables.

        Reads ``ROAMR_*`` variables for the top-level fields and
        ``ROAMR_SIM_*`` variables for the simulation.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.
            ``simulation`` may be a :class:`SimulationConfig` or a dict of
            its fields.

        Returns
        -------
        RoamrConfig
            Populated configuration.
        """
        env = os.environ

        sim_kwargs: dict[str, Any] = {}
        _ENV_SIM_MAP: dict[str, tuple[str, type]] = {
            "ROAMR_SIM_CENTER_LATITUDE": ("center_latitude", float),
            "ROAMR_SIM_CENTER_LONGITUDE": ("center_longitude", float),
            "ROAMR_SIM_FLEET_SIZE": ("fleet_size", int),
            "ROAMR_SIM_SEED_SPREAD": ("seed_spread", float),
            "ROAMR_SIM_IDLE_JITTER": ("idle_jitter", float),
            "ROAMR_SIM_AUTO_START_PROBABILITY": ("auto_start_probability", float),
            "ROAMR_SIM_ROUTE_POINTS": ("route_points", int),
            "ROAMR_SIM_ROUTE_RADIUS": ("route_radius", float),
            "ROAMR_SIM_TICK_INTERVAL": ("tick_interval", float),
            "ROAMR_SIM_COMMAND_LATENCY": ("command_latency", float),
            "ROAMR_SIM_RNG_SEED": ("rng_seed", int),
        }
        for env_key, (field_name, cast) in _ENV_SIM_MAP.items():
            value = _env_number(env, env_key, cast)
            if value is not None:
                sim_kwargs[field_name] = value

        sim_overrides = overrides.pop("simulation", None)
        if isinstance(sim_overrides, dict):
            sim_kwargs.update(sim_overrides)
        elif isinstance(sim_overrides, SimulationConfig):
            sim_kwargs = dataclasses.asdict(sim_overrides)

        config_kwargs: dict[str, Any] = {"simulation": SimulationConfig(**sim_kwargs)}

        backend = env.get("ROAMR_BACKEND")
        if backend is not None:
            config_kwargs["backend"] = backend.strip().lower()
        base_url = env.get("ROAMR_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url.rstrip("/")

        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "ROAMR_REQUEST_TIMEOUT": ("request_timeout", float),
            "ROAMR_POLL_INTERVAL": ("poll_interval", float),
            "ROAMR_MAX_POLL_FAILURES": ("max_poll_failures", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            if field_name in overrides:
                continue
            value = _env_number(env, env_key, cast)
            if value is not None:
                config_kwargs[field_name] = value

        if "log_ride_events" not in overrides:
            config_kwargs["log_ride_events"] = _env_bool(env.get("ROAMR_LOG_RIDE_EVENTS"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
