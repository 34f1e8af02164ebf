from __future__ import annotations

import os

import pytest

from roamr.config import BACKEND_REMOTE, BACKEND_SIMULATION, RoamrConfig, SimulationConfig
from roamr.exceptions import RoamrConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("ROAMR_"):
            monkeypatch.delenv(key)


def test_defaults() -> None:
    config = RoamrConfig.from_env()

    assert config.backend == BACKEND_SIMULATION
    assert config.base_url == "http://192.168.1.100:3000"
    assert config.log_ride_events is True
    assert config.max_poll_failures == 3
    sim = config.simulation
    assert (sim.center_latitude, sim.center_longitude) == (37.7749, -122.4194)
    assert sim.fleet_size == 20
    assert sim.auto_start_probability == 0.15
    assert sim.route_points == 36
    assert sim.tick_interval == 10.0
    assert sim.command_latency == 1.0
    assert sim.rng_seed is None


def test_env_values_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROAMR_BACKEND", " Remote ")
    monkeypatch.setenv("ROAMR_BASE_URL", "http://localhost:3000/")
    monkeypatch.setenv("ROAMR_POLL_INTERVAL", "2.5")
    monkeypatch.setenv("ROAMR_MAX_POLL_FAILURES", "5")
    monkeypatch.setenv("ROAMR_LOG_RIDE_EVENTS", "off")
    monkeypatch.setenv("ROAMR_SIM_FLEET_SIZE", "8")
    monkeypatch.setenv("ROAMR_SIM_RNG_SEED", "7")

    config = RoamrConfig.from_env()

    assert config.backend == BACKEND_REMOTE
    assert config.base_url == "http://localhost:3000"
    assert config.poll_interval == 2.5
    assert config.max_poll_failures == 5
    assert config.log_ride_events is False
    assert config.simulation.fleet_size == 8
    assert config.simulation.rng_seed == 7


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROAMR_POLL_INTERVAL", "2.5")
    monkeypatch.setenv("ROAMR_LOG_RIDE_EVENTS", "false")
    monkeypatch.setenv("ROAMR_SIM_FLEET_SIZE", "8")
    monkeypatch.setenv("ROAMR_SIM_TICK_INTERVAL", "3")

    config = RoamrConfig.from_env(poll_interval=1.0, log_ride_events=True, simulation={"fleet_size": 4})

    assert config.poll_interval == 1.0
    assert config.log_ride_events is True
    assert config.simulation.fleet_size == 4
    # Dict overrides merge with the environment.
    assert config.simulation.tick_interval == 3.0


def test_simulation_config_override_replaces_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROAMR_SIM_FLEET_SIZE", "8")
    simulation = SimulationConfig(fleet_size=3)

    config = RoamrConfig.from_env(simulation=simulation)

    assert config.simulation == simulation


def test_unrecognised_bool_keeps_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROAMR_LOG_RIDE_EVENTS", "maybe")

    assert RoamrConfig.from_env().log_ride_events is True


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("ROAMR_BACKEND", "carrier-pigeon"),
        ("ROAMR_POLL_INTERVAL", "soon"),
        ("ROAMR_MAX_POLL_FAILURES", "0"),
        ("ROAMR_REQUEST_TIMEOUT", "0"),
        ("ROAMR_SIM_FLEET_SIZE", "2.5"),
        ("ROAMR_SIM_FLEET_SIZE", "0"),
        ("ROAMR_SIM_AUTO_START_PROBABILITY", "1.5"),
        ("ROAMR_SIM_CENTER_LATITUDE", "91"),
        ("ROAMR_SIM_TICK_INTERVAL", "-1"),
    ],
)
def test_invalid_values_raise(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)

    with pytest.raises(RoamrConfigError):
        RoamrConfig.from_env()


def test_config_is_frozen() -> None:
    config = RoamrConfig()

    with pytest.raises(AttributeError):
        config.backend = BACKEND_REMOTE  # type: ignore[misc]
