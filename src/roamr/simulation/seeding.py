"""Fleet seeding and lap-route construction."""

from __future__ import annotations

import math
import random

from roamr.models.vehicle import Coordinate, MobilityClass, RideState, Vehicle


def seed_vehicles(
    center: Coordinate,
    count: int,
    *,
    spread: float,
    rng: random.Random,
) -> list[Vehicle]:
    """Scatter *count* vehicles uniformly in a box around *center*.

    Ids run ``"1"`` .. ``str(count)``, names are derived from the id and
    each vehicle gets a uniformly random ride state.
    """
    states = list(RideState)
    vehicles: list[Vehicle] = []
    for index in range(1, count + 1):
        position = center.offset(rng.uniform(-spread, spread), rng.uniform(-spread, spread))
        vehicles.append(
            Vehicle(
                id=str(index),
                name=f"Veh{index}",
                latitude=position.latitude,
                longitude=position.longitude,
                ride_state=rng.choice(states),
            )
        )
    return vehicles


def partition_mobility(vehicle_ids: list[str], *, rng: random.Random) -> dict[str, MobilityClass]:
    """Mark exactly half (rounded down) of *vehicle_ids* static, at random."""
    static_ids = set(rng.sample(vehicle_ids, len(vehicle_ids) // 2))
    return {
        vehicle_id: MobilityClass.STATIC if vehicle_id in static_ids else MobilityClass.DYNAMIC
        for vehicle_id in vehicle_ids
    }


def build_lap_route(center: Coordinate, *, points: int, radius: float) -> tuple[Coordinate, ...]:
    """Evenly spaced waypoints on a circle around *center*.

    The first waypoint is due north of the center and the loop runs
    clockwise (east on the second point).
    """
    route: list[Coordinate] = []
    for index in range(points):
        theta = (index / points) * 2 * math.pi
        route.append(center.offset(radius * math.cos(theta), radius * math.sin(theta)))
    return tuple(route)
