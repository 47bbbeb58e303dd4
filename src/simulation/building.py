from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Optional, Tuple

from dispatch import (
    DOWN,
    IDLE,
    UP,
    Algorithm,
    AlgorithmDecision,
    AlgorithmState,
    HallCalls,
    NearestCarAlgorithm,
)

from .elevator import ARRIVAL_EPSILON, Elevator
from .floor import Floor
from .passenger import Passenger

logger = logging.getLogger(__name__)


@dataclass
class Building:
    """Floors, cars and the hall-call claim table.

    Every (floor, direction) hall call is owned by at most one elevator at a
    time. Dispatch proposals are only turned into targets when the requesting
    car owns, or is first to claim, the call at that floor.
    """

    num_floors: int
    elevators: List[Elevator] = field(default_factory=list)
    algorithm: Algorithm = field(default_factory=NearestCarAlgorithm)
    floors: List[Floor] = field(init=False)

    def __post_init__(self) -> None:
        self.floors = [Floor(i) for i in range(self.num_floors)]

    def get_floor(self, floor_number: int) -> Optional[Floor]:
        if 0 <= floor_number < self.num_floors:
            return self.floors[floor_number]
        return None

    def get_elevator(self, elevator_id: int) -> Optional[Elevator]:
        if 0 <= elevator_id < len(self.elevators):
            return self.elevators[elevator_id]
        return None

    def enqueue(self, passenger: Passenger) -> None:
        self.floors[passenger.origin].add_passenger(passenger)

    def set_algorithm(self, algorithm: Algorithm) -> None:
        reset = getattr(algorithm, "reset", None)
        if callable(reset):
            reset()
        self.algorithm = algorithm

    def dispatch(self, current_time: float) -> None:
        self.reconcile_claims()
        state = self.algorithm_state(current_time)
        decisions = self.algorithm.decide(state)
        self.apply_decisions(decisions)

    def reconcile_claims(self) -> None:
        """Bring the claim table back in line with queues and targets.

        Claims whose queue emptied or whose owner stopped targeting the floor
        are dropped. A hall call at a floor that cars were already heading to
        (parked at the lobby, say) is then handed to the closest of them, and
        the rest lose the floor unless they carry a rider there.
        """

        for floor in self.floors:
            for direction in (UP, DOWN):
                owner = floor.claim_owner(direction)
                if owner is None:
                    continue
                elevator = self.get_elevator(owner)
                if not floor.queue(direction) or elevator is None or floor.number not in elevator.targets:
                    floor.set_claim(direction, None)
            if floor.has_waiting():
                self._settle_targeted_calls(floor)

    def algorithm_state(self, current_time: float) -> AlgorithmState:
        up: List[int] = []
        down: List[int] = []
        claims: Dict[Tuple[int, int], int] = {}
        for floor in self.floors:
            for direction, unclaimed in ((UP, up), (DOWN, down)):
                if not floor.queue(direction):
                    continue
                owner = floor.claim_owner(direction)
                if owner is None:
                    unclaimed.append(floor.number)
                else:
                    claims[(floor.number, direction)] = owner
        return AlgorithmState(
            time=current_time,
            elevators=tuple(elevator.snapshot() for elevator in self.elevators),
            floors=self.num_floors,
            calls=HallCalls(up=tuple(up), down=tuple(down)),
            claims=MappingProxyType(claims),
        )

    def apply_decisions(self, decisions: Iterable[AlgorithmDecision]) -> None:
        for decision in decisions:
            elevator = self.get_elevator(decision.elevator)
            if elevator is None:
                logger.debug("Dropping decision for unknown elevator %s", decision.elevator)
                continue
            for floor_number in decision.add_targets:
                if not 0 <= floor_number < self.num_floors:
                    logger.debug("Dropping out-of-range floor %s for elevator %s", floor_number, elevator.elevator_id)
                    continue
                if self.grant(elevator, floor_number):
                    elevator.assign_target(floor_number)

    def grant(self, elevator: Elevator, floor_number: int) -> bool:
        """Decide whether ``elevator`` may target ``floor_number``, claiming the call if free."""

        floor = self.floors[floor_number]
        open_directions = floor.open_directions()
        if not open_directions:
            return True
        if any(floor.claim_owner(d) == elevator.elevator_id for d in open_directions):
            return True
        if elevator.available_capacity <= 0:
            return False
        for direction in self._direction_preference(elevator, floor_number):
            if direction in open_directions and floor.claim_owner(direction) is None:
                floor.set_claim(direction, elevator.elevator_id)
                logger.debug(
                    "Elevator %s claimed %s call at floor %s",
                    elevator.elevator_id,
                    "up" if direction == UP else "down",
                    floor_number,
                )
                return True
        return False

    def release_claims(self, elevator: Elevator, floor_number: int) -> None:
        """Release claims after ``elevator`` served a floor.

        The server's own claims are always released. Claims held by other cars
        are cleared once the matching queue is empty, and the floor is dropped
        from that car's targets unless it still needs to stop there.
        """

        floor = self.floors[floor_number]
        for direction in (UP, DOWN):
            owner = floor.claim_owner(direction)
            if owner is None:
                continue
            if owner == elevator.elevator_id:
                floor.set_claim(direction, None)
            elif not floor.queue(direction):
                floor.set_claim(direction, None)
                other = self.get_elevator(owner)
                if other is not None:
                    self._drop_stale_target(other, floor)

    def pending_calls(self) -> HallCalls:
        return HallCalls(
            up=tuple(f.number for f in self.floors if f.up_queue),
            down=tuple(f.number for f in self.floors if f.down_queue),
        )

    def queue_lengths(self) -> List[Tuple[int, int]]:
        return [(len(floor.up_queue), len(floor.down_queue)) for floor in self.floors]

    def waiting_count(self) -> int:
        return sum(len(floor) for floor in self.floors)

    def snapshot(self) -> dict:
        return {
            "floors": [
                {"up": len(floor.up_queue), "down": len(floor.down_queue)}
                for floor in self.floors
            ],
            "elevators": [
                {
                    "id": elevator.elevator_id,
                    "position": elevator.position,
                    "direction": elevator.direction,
                    "velocity": elevator.velocity,
                    "doors_open": elevator.doors_open,
                    "passenger_count": len(elevator.passengers),
                    "capacity": elevator.capacity,
                    "targets": sorted(elevator.targets),
                    "next_stop": elevator.next_stop(),
                }
                for elevator in self.elevators
            ],
        }

    def _direction_preference(self, elevator: Elevator, floor_number: int) -> List[int]:
        delta = floor_number - elevator.position
        if abs(delta) > ARRIVAL_EPSILON:
            first = UP if delta > 0 else DOWN
        elif elevator.direction != IDLE:
            first = elevator.direction
        else:
            return [UP, DOWN]
        return [first, -first]

    def _settle_targeted_calls(self, floor: Floor) -> None:
        while True:
            owners = (floor.up_claim, floor.down_claim)
            contenders = [
                e for e in self.elevators if floor.number in e.targets and e.elevator_id not in owners
            ]
            if not contenders:
                return
            unclaimed = [d for d in floor.open_directions() if floor.claim_owner(d) is None]
            if not unclaimed:
                for elevator in contenders:
                    self._drop_stale_target(elevator, floor)
                return
            winner = min(
                contenders,
                key=lambda e: (e.available_capacity <= 0, abs(e.position - floor.number), e.elevator_id),
            )
            direction = next(d for d in self._direction_preference(winner, floor.number) if d in unclaimed)
            floor.set_claim(direction, winner.elevator_id)
            logger.debug(
                "Elevator %s took over %s call at already targeted floor %s",
                winner.elevator_id,
                "up" if direction == UP else "down",
                floor.number,
            )

    def _drop_stale_target(self, elevator: Elevator, floor: Floor) -> None:
        if elevator.carries_passenger_to(floor.number):
            return
        if elevator.elevator_id in (floor.up_claim, floor.down_claim):
            return
        elevator.targets.discard(floor.number)
