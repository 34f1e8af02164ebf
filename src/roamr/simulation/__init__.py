"""In-process fleet simulation."""

from roamr.simulation.engine import FleetSimulation
from roamr.simulation.seeding import build_lap_route, partition_mobility, seed_vehicles

__all__ = ["FleetSimulation", "build_lap_route", "partition_mobility", "seed_vehicles"]
