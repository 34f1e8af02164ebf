"""State layer.

The registry in this package is the single owner of fleet state; every
other component reads immutable snapshots of it.
"""

from roamr.state.registry import VehicleRegistry

__all__ = ["VehicleRegistry"]
