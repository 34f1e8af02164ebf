#!/usr/bin/env python3
"""Watch the fleet from the command line.

Runs a :class:`roamr.FleetController` against the configured backend
(the in-process simulation by default) and prints every snapshot it
receives.  Optionally selects a vehicle and starts or stops its ride,
or feeds a scanned QR payload, once the first snapshot has arrived.

Usage
-----
::

    python scripts/watch_fleet.py --ticks 5 --tick-interval 1
    python scripts/watch_fleet.py --start 3
    python scripts/watch_fleet.py --scan "myapp://startRide?vehicleId=7"
    ROAMR_BACKEND=remote ROAMR_BASE_URL=http://localhost:3000 python scripts/watch_fleet.py

Options::

    --ticks N            Stop after N snapshots (default: run until Ctrl-C)
    --tick-interval S    Override the simulation tick interval
    --seed N             Seed the simulation's random generator
    --start ID           Start a ride on vehicle ID
    --stop ID            Stop the ride on vehicle ID
    --scan PAYLOAD       Handle PAYLOAD as a scanned QR code
    --history            Print ride history before exiting
    --json               Print snapshots as JSON lines
    -v, --verbose        Debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from roamr import FleetController, FleetSnapshot, RoamrConfig, RoamrError, create_data_source  # noqa: E402

# ── output ───────────────────────────────────────────────────

_STATE_MARKS = {"waiting": ".", "in_progress": ">", "stopped": "x"}


def _format_snapshot(index: int, snapshot: FleetSnapshot) -> str:
    lines = [f"── snapshot {index} ({len(snapshot)} vehicles) ──"]
    for vehicle in snapshot:
        mark = _STATE_MARKS.get(vehicle.ride_state.value, "?")
        lines.append(
            f"  {mark} {vehicle.id:>4} {vehicle.name:<10} "
            f"{vehicle.latitude:10.6f} {vehicle.longitude:11.6f} {vehicle.ride_state.value}"
        )
    return "\n".join(lines)


def _snapshot_json(snapshot: FleetSnapshot) -> str:
    return json.dumps([vehicle.to_wire() for vehicle in snapshot], ensure_ascii=False)


# ── main ─────────────────────────────────────────────────────


async def _run_command(controller: FleetController, args: argparse.Namespace) -> None:
    if args.scan:
        result = await controller.start_ride_from_code(args.scan)
        if result.vehicle is None:
            print(f"No vehicle found for code {args.scan!r}", file=sys.stderr)
        else:
            print(f"Scan {result.vehicle.name}: {result.outcome.value}", file=sys.stderr)
        return

    vehicle_id = args.start or args.stop
    if vehicle_id is None:
        return
    if controller.select_vehicle(vehicle_id) is None:
        print(f"No vehicle {vehicle_id!r} in the fleet", file=sys.stderr)
        return
    outcome = await (controller.start_ride() if args.start else controller.stop_ride())
    print(f"{'start' if args.start else 'stop'} {vehicle_id}: {outcome.value}", file=sys.stderr)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Watch and drive the fleet from a terminal.")
    parser.add_argument("--ticks", type=int, default=0, help="Stop after N snapshots")
    parser.add_argument("--tick-interval", type=float, help="Simulation tick interval in seconds")
    parser.add_argument("--seed", type=int, help="Simulation RNG seed")
    command = parser.add_mutually_exclusive_group()
    command.add_argument("--start", metavar="ID", help="Start a ride on this vehicle")
    command.add_argument("--stop", metavar="ID", help="Stop the ride on this vehicle")
    command.add_argument("--scan", metavar="PAYLOAD", help="Handle a scanned QR payload")
    parser.add_argument("--history", action="store_true", help="Print ride history before exiting")
    parser.add_argument("--json", dest="json_mode", action="store_true", help="JSON lines output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    simulation: dict[str, Any] = {}
    if args.tick_interval is not None:
        simulation["tick_interval"] = args.tick_interval
    if args.seed is not None:
        simulation["rng_seed"] = args.seed
    try:
        config = RoamrConfig.from_env(simulation=simulation)
    except RoamrError as exc:
        parser.error(str(exc))

    queue: asyncio.Queue[FleetSnapshot] = asyncio.Queue()

    async with create_data_source(config) as source:
        async with FleetController(source, log_ride_events=config.log_ride_events) as controller:
            controller.subscribe(queue.put_nowait)
            controller.start_polling()

            received = 0
            commanded = False
            while args.ticks <= 0 or received < args.ticks:
                if not controller.is_polling and queue.empty():
                    break
                try:
                    snapshot = await asyncio.wait_for(queue.get(), timeout=1.0)
                except TimeoutError:
                    continue
                received += 1
                print(_snapshot_json(snapshot) if args.json_mode else _format_snapshot(received, snapshot))
                if not commanded:
                    commanded = True
                    await _run_command(controller, args)

            if controller.last_error is not None:
                print(f"Fleet stream ended: {controller.last_error}", file=sys.stderr)

            if args.history:
                await controller.flush()
                for event in await controller.fetch_history():
                    print(f"#{event.id} {event.timestamp.isoformat()} vehicle={event.vehicle_id} {event.action}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
