from __future__ import annotations

from typing import Iterable, Set

from .interface import AlgorithmState, ElevatorSnapshot

REVERSAL_PENALTY = 3.0
IDLE_BONUS = 0.3


def estimate_cost(elevator: ElevatorSnapshot, floor: int) -> float:
    """Score how expensive it is for ``elevator`` to answer a call at ``floor``.

    Distance in floors, plus a penalty when the car is travelling away from
    the floor (it would have to reverse), minus a small bonus for idle cars.
    """

    cost = abs(elevator.position - floor)
    moving_away = (elevator.direction > 0 and floor < elevator.position) or (
        elevator.direction < 0 and floor > elevator.position
    )
    if moving_away:
        cost += REVERSAL_PENALTY
    if elevator.is_idle:
        cost -= IDLE_BONUS
    return cost


class ClaimTracker:
    """Floors already targeted by some car, plus those handed out this tick."""

    def __init__(self, state: AlgorithmState) -> None:
        self._claimed: Set[int] = set()
        for elevator in state.elevators:
            self._claimed.update(elevator.targets)

    def __contains__(self, floor: int) -> bool:
        return floor in self._claimed

    def add(self, floor: int) -> None:
        self._claimed.add(floor)

    def update(self, floors: Iterable[int]) -> None:
        self._claimed.update(floors)


def cheapest_elevator(state: AlgorithmState, floor: int, extra_cost=None) -> int:
    """Index of the elevator with the lowest cost for ``floor`` (first wins ties)."""

    best = 0
    best_cost = float("inf")
    for index, elevator in enumerate(state.elevators):
        cost = estimate_cost(elevator, floor)
        if extra_cost is not None:
            cost += extra_cost[index]
        if cost < best_cost:
            best_cost = cost
            best = index
    return best
