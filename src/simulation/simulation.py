from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from dispatch import (
    ALGORITHM_REGISTRY,
    Algorithm,
    CustomAlgorithm,
    ElevatorSnapshot,
    get_algorithm,
)

from .arrivals import PassengerGenerator
from .building import Building
from .config import SimulationConfig
from .elevator import Elevator, StopRecord
from .passenger import Passenger

logger = logging.getLogger(__name__)

UP_ALIASES = ("up", "u", "+1", "1")
DOWN_ALIASES = ("down", "d", "-1")


@dataclass
class SimStats:
    elapsed_sec: float
    completed: int
    throughput_per_min: float
    avg_wait_sec: float
    max_wait_sec: float
    avg_ride_sec: float = 0.0


class StatisticsTracker:
    """Running totals over completed trips."""

    def __init__(self) -> None:
        self.completed: int = 0
        self.total_wait: float = 0.0
        self.max_wait: float = 0.0
        self.total_ride: float = 0.0

    def record_trip(self, passenger: Passenger) -> None:
        wait = passenger.wait_time or 0.0
        self.completed += 1
        self.total_wait += wait
        self.total_ride += passenger.ride_time or 0.0
        if wait > self.max_wait:
            self.max_wait = wait

    def snapshot(self, elapsed_sec: float) -> SimStats:
        throughput = self.completed / elapsed_sec * 60.0 if elapsed_sec > 0 else 0.0
        average = self.total_wait / self.completed if self.completed else 0.0
        return SimStats(
            elapsed_sec=elapsed_sec,
            completed=self.completed,
            throughput_per_min=throughput,
            avg_wait_sec=average,
            max_wait_sec=self.max_wait,
            avg_ride_sec=self.total_ride / self.completed if self.completed else 0.0,
        )


def resolve_algorithm(algorithm: Union[str, Algorithm, Callable]) -> Algorithm:
    """Turn a registry name, algorithm object or bare function into an algorithm.

    Anything that is not a built-in strategy is wrapped in
    :class:`CustomAlgorithm` so its failures cannot stop the simulation.
    """

    if isinstance(algorithm, str):
        return get_algorithm(algorithm)
    if isinstance(algorithm, CustomAlgorithm) or type(algorithm) in ALGORITHM_REGISTRY.values():
        return algorithm
    decide = getattr(algorithm, "decide", None)
    if callable(decide):
        return CustomAlgorithm(
            decide,
            name=getattr(algorithm, "name", "Custom"),
            reset=getattr(algorithm, "reset", None),
        )
    if callable(algorithm):
        return CustomAlgorithm(algorithm, name=getattr(algorithm, "__name__", "Custom"))
    raise TypeError(f"Cannot use {algorithm!r} as a dispatch algorithm")


def parse_direction(direction: Union[int, str]) -> int:
    if isinstance(direction, str):
        value = direction.strip().lower()
        if value in UP_ALIASES:
            return 1
        if value in DOWN_ALIASES:
            return -1
        raise ValueError(f"Unknown direction '{direction}'")
    if direction > 0:
        return 1
    if direction < 0:
        return -1
    return 0


class Simulation:
    """Tick-driven elevator fleet simulation.

    Each :meth:`step` spawns passengers, reconciles claims, runs the dispatch
    algorithm, moves every car and updates statistics, in that order.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        rng: Optional[random.Random] = None,
        metrics_hook_interval: int = 1,
    ) -> None:
        self.config = config or SimulationConfig()
        self.random = rng or random.Random(self.config.random_seed)
        elevators = [
            Elevator(
                elevator_id=i,
                capacity=self.config.capacity,
                speed_floors_per_sec=self.config.speed_floors_per_sec,
                acceleration_floors_per_sec2=self.config.acceleration,
                stop_duration_sec=self.config.stop_duration_sec,
            )
            for i in range(self.config.elevators)
        ]
        self.building = Building(
            num_floors=self.config.floors,
            elevators=elevators,
            algorithm=resolve_algorithm(self.config.algorithm),
        )
        self.generator = PassengerGenerator(
            num_floors=self.config.floors,
            spawn_rate_per_min=self.config.spawn_rate_per_min,
            ground_bias=self.config.ground_bias,
            to_lobby_pct=self.config.to_lobby_pct,
            rng=self.random,
        )
        self.current_time: float = 0.0
        self.tick_count: int = 0
        self.metrics = StatisticsTracker()
        self.event_hooks: Dict[str, List[Callable[[object], None]]] = {}
        self.metrics_hook_interval = max(1, metrics_hook_interval)

    @property
    def elevators(self) -> List[Elevator]:
        return self.building.elevators

    @property
    def algorithm(self) -> Algorithm:
        return self.building.algorithm

    def run(self, duration_sec: float, dt: float = 0.1) -> None:
        for _ in range(int(round(duration_sec / dt))):
            self.step(dt)

    def step(self, dt: float) -> None:
        self.current_time += dt

        arrivals = self.generator.tick(dt, self.current_time)
        for passenger in arrivals:
            self.building.enqueue(passenger)
        if arrivals:
            self._emit("arrival", {"time": self.current_time, "count": len(arrivals)})

        self.building.dispatch(self.current_time)

        for elevator in self.building.elevators:
            stop = elevator.step(dt, self.building, self.current_time, self.metrics)
            if stop is not None:
                self._emit_stop(stop)

        self.tick_count += 1
        if self.tick_count % self.metrics_hook_interval == 0:
            self._emit("metrics", {"metrics": self.stats(), "building": self.building.snapshot()})

    def request(self, origin: int, direction: Union[int, str]) -> Optional[Passenger]:
        """Manual hall call: enqueue a passenger at ``origin`` going ``direction``."""

        passenger = self.generator.directed(origin, parse_direction(direction), self.current_time)
        if passenger is None:
            logger.debug("Ignoring infeasible call at floor %s going %s", origin, direction)
            return None
        self.building.enqueue(passenger)
        self._emit("arrival", {"time": self.current_time, "count": 1})
        return passenger

    def set_algorithm(self, algorithm: Union[str, Algorithm, Callable]) -> None:
        self.building.set_algorithm(resolve_algorithm(algorithm))

    def stats(self) -> SimStats:
        return self.metrics.snapshot(self.current_time)

    def elevator_views(self) -> List[ElevatorSnapshot]:
        return [elevator.snapshot() for elevator in self.building.elevators]

    def queue_lengths(self) -> List[Tuple[int, int]]:
        return self.building.queue_lengths()

    def next_stop_for(self, elevator_id: int) -> Optional[int]:
        elevator = self.building.get_elevator(elevator_id)
        if elevator is None:
            return None
        return elevator.next_stop()

    def snapshot(self) -> dict:
        state = self.building.snapshot()
        state["time"] = self.current_time
        state["algorithm"] = self.algorithm.name
        state["waiting"] = self.building.waiting_count()
        state["stats"] = self.stats()
        return state

    def on_event(self, event: str, callback: Callable[[object], None]) -> None:
        self.event_hooks.setdefault(event, []).append(callback)

    def _emit_stop(self, stop: StopRecord) -> None:
        self._emit(
            "stop",
            {
                "time": stop.time,
                "elevator_id": stop.elevator_id,
                "floor": stop.floor,
                "alighted": len(stop.alighted),
                "boarded": len(stop.boarded),
            },
        )

    def _emit(self, event: str, payload: object) -> None:
        for callback in self.event_hooks.get(event, []):
            callback(payload)
