"""Simulation primitives for the elevator fleet engine."""

from .arrivals import PassengerGenerator
from .building import Building
from .config import SimulationConfig
from .elevator import Elevator, StopRecord
from .floor import Floor
from .passenger import Passenger
from .simulation import SimStats, Simulation, StatisticsTracker, parse_direction, resolve_algorithm

__all__ = [
    "Building",
    "Elevator",
    "Floor",
    "Passenger",
    "PassengerGenerator",
    "SimStats",
    "Simulation",
    "SimulationConfig",
    "StatisticsTracker",
    "StopRecord",
    "parse_direction",
    "resolve_algorithm",
]
