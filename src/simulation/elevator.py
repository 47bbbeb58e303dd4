from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Set

from dispatch import DOWN, IDLE, UP, ElevatorSnapshot

from .passenger import Passenger

if TYPE_CHECKING:  # pragma: no cover - import cycle safe typing
    from .building import Building
    from .simulation import StatisticsTracker

ARRIVAL_EPSILON = 0.02

logger = logging.getLogger(__name__)


@dataclass
class StopRecord:
    """What happened when a car opened its doors at a floor."""

    elevator_id: int
    floor: int
    time: float
    alighted: List[Passenger]
    boarded: List[Passenger]


@dataclass
class Elevator:
    """A car with trapezoidal motion, a door dwell timer and directional commitment.

    ``direction`` is the committed travel direction (+1, -1 or 0 for idle),
    ``velocity`` is signed in floors per second. ``door_timer`` is set only
    while the doors are open and counts the remaining dwell.
    """

    elevator_id: int
    capacity: int = 8
    speed_floors_per_sec: float = 1.5
    acceleration_floors_per_sec2: float = 1.5
    stop_duration_sec: float = 1.0
    position: float = 0.0
    direction: int = IDLE
    velocity: float = 0.0
    targets: Set[int] = field(default_factory=set)
    passengers: List[Passenger] = field(default_factory=list)
    door_timer: Optional[float] = None

    @property
    def doors_open(self) -> bool:
        return self.door_timer is not None

    @property
    def available_capacity(self) -> int:
        return max(0, self.capacity - len(self.passengers))

    def assign_target(self, floor: int) -> None:
        self.targets.add(floor)

    def carries_passenger_to(self, floor: int) -> bool:
        return any(p.destination == floor for p in self.passengers)

    def has_need_in_direction(self, direction: int) -> bool:
        for target in self.targets:
            if (target - self.position) * direction > ARRIVAL_EPSILON:
                return True
        for passenger in self.passengers:
            if (passenger.destination - self.position) * direction > ARRIVAL_EPSILON:
                return True
        return False

    def next_stop(self) -> Optional[int]:
        if not self.targets:
            return None
        if self.direction != IDLE:
            ahead = [t for t in self.targets if (t - self.position) * self.direction > -ARRIVAL_EPSILON]
            if ahead:
                return min(ahead, key=lambda t: abs(t - self.position))
        return min(self.targets, key=lambda t: (abs(t - self.position), t))

    def snapshot(self) -> ElevatorSnapshot:
        return ElevatorSnapshot(
            elevator_id=self.elevator_id,
            position=self.position,
            direction=self.direction,
            velocity=self.velocity,
            capacity=self.capacity,
            passenger_destinations=tuple(p.destination for p in self.passengers),
            doors_open=self.doors_open,
            targets=frozenset(self.targets),
        )

    def step(
        self,
        dt: float,
        building: "Building",
        current_time: float,
        metrics: "StatisticsTracker",
    ) -> Optional[StopRecord]:
        if self.doors_open:
            self.velocity = 0.0
            self.door_timer -= dt
            if self.door_timer <= 0:
                self.door_timer = None
                self.direction = self._committed_direction()
            return None

        if self.direction == IDLE:
            self.velocity = 0.0
            if not self.targets:
                return None
            here = self._target_at_position()
            if here is not None:
                return self._arrive(here, building, current_time, metrics)
            nearest = min(self.targets, key=lambda t: (abs(t - self.position), t))
            self.direction = UP if nearest > self.position else DOWN

        arrived = self._advance(dt, building.num_floors)
        if arrived is None:
            return None
        return self._arrive(arrived, building, current_time, metrics)

    def _target_at_position(self) -> Optional[int]:
        nearest_floor = int(round(self.position))
        if abs(self.position - nearest_floor) < ARRIVAL_EPSILON and nearest_floor in self.targets:
            return nearest_floor
        return None

    def _advance(self, dt: float, num_floors: int) -> Optional[int]:
        """Move one tick; return the floor reached, if any."""

        if self.velocity * self.direction < 0:
            # Still rolling the other way: stop before reversing.
            self._coast_to_stop(dt, num_floors)
            return None

        target = self._reachable_target_ahead(dt)
        if target is None:
            if self.velocity != 0.0:
                self._coast_to_stop(dt, num_floors)
            else:
                self.direction = self._committed_direction()
            return None

        remaining = abs(target - self.position)
        acceleration = self.acceleration_floors_per_sec2
        braking_speed = math.sqrt(2 * acceleration * remaining)
        speed = min(abs(self.velocity) + acceleration * dt, self.speed_floors_per_sec, braking_speed)
        if speed * dt >= remaining - ARRIVAL_EPSILON:
            return target
        self.position += self.direction * speed * dt
        self.velocity = self.direction * speed
        self._clamp(num_floors)
        return None

    def _reachable_target_ahead(self, dt: float) -> Optional[int]:
        speed = abs(self.velocity)
        stopping_distance = speed * speed / (2 * self.acceleration_floors_per_sec2)
        ahead = sorted(
            (abs(t - self.position), t)
            for t in self.targets
            if (t - self.position) * self.direction > -ARRIVAL_EPSILON
        )
        for distance, floor in ahead:
            # The previous tick braked for distance + speed * dt.
            if stopping_distance <= distance + speed * dt + ARRIVAL_EPSILON:
                return floor
        return None

    def _coast_to_stop(self, dt: float, num_floors: int) -> None:
        sign = 1 if self.velocity > 0 else -1
        speed = max(0.0, abs(self.velocity) - self.acceleration_floors_per_sec2 * dt)
        self.position += sign * speed * dt
        self.velocity = sign * speed
        self._clamp(num_floors)

    def _clamp(self, num_floors: int) -> None:
        top = float(num_floors - 1)
        if self.position < 0.0:
            self.position = 0.0
            self.velocity = 0.0
        elif self.position > top:
            self.position = top
            self.velocity = 0.0

    def _committed_direction(self) -> int:
        if self.direction == IDLE:
            return IDLE
        if self.has_need_in_direction(self.direction):
            return self.direction
        if self.has_need_in_direction(-self.direction):
            return -self.direction
        return IDLE

    def _arrive(
        self,
        floor_number: int,
        building: "Building",
        current_time: float,
        metrics: "StatisticsTracker",
    ) -> StopRecord:
        self.position = float(floor_number)
        self.velocity = 0.0
        self.door_timer = self.stop_duration_sec
        return self._handle_stop(floor_number, building, current_time, metrics)

    def _handle_stop(
        self,
        floor_number: int,
        building: "Building",
        current_time: float,
        metrics: "StatisticsTracker",
    ) -> StopRecord:
        floor = building.get_floor(floor_number)

        # Alight
        alighted: List[Passenger] = []
        remaining_passengers: List[Passenger] = []
        for passenger in self.passengers:
            if passenger.destination == floor_number:
                passenger.record_alighting(current_time)
                metrics.record_trip(passenger)
                alighted.append(passenger)
            else:
                remaining_passengers.append(passenger)
        self.passengers = remaining_passengers
        self.targets.discard(floor_number)

        # Board: arrival direction first, then the opposite queue
        arriving = self.direction
        if arriving != IDLE:
            order = [arriving, -arriving]
        else:
            order = sorted((UP, DOWN), key=lambda d: floor.claim_owner(d) != self.elevator_id)
        boarded: List[Passenger] = []
        boarded_in_direction = 0
        for direction in order:
            free_space = self.available_capacity
            if free_space <= 0:
                break
            batch = floor.board_passengers(direction, free_space)
            for passenger in batch:
                passenger.record_boarding(current_time)
                self.passengers.append(passenger)
                self.targets.add(passenger.destination)
            if direction == arriving:
                boarded_in_direction = len(batch)
            boarded.extend(batch)

        if arriving != IDLE and boarded_in_direction:
            self.direction = arriving
        elif arriving == IDLE:
            self.direction = self._load_direction(floor_number)

        building.release_claims(self, floor_number)
        logger.debug(
            "Elevator %s stopped at floor %s: %d off, %d on",
            self.elevator_id,
            floor_number,
            len(alighted),
            len(boarded),
        )
        return StopRecord(
            elevator_id=self.elevator_id,
            floor=floor_number,
            time=current_time,
            alighted=alighted,
            boarded=boarded,
        )

    def _load_direction(self, floor_number: int) -> int:
        up = sum(1 for p in self.passengers if p.destination > floor_number)
        down = sum(1 for p in self.passengers if p.destination < floor_number)
        if up > down:
            return UP
        if down > up:
            return DOWN
        return self.direction
