from __future__ import annotations

from typing import List

from .interface import UP, AlgorithmDecision, AlgorithmState
from .utils import ClaimTracker


class CollectiveAlgorithm:
    """Simple collective control.

    Idle cars take the nearest unserved call; moving cars sweep up every
    unclaimed call ahead of them in their direction of travel.
    """

    name = "Collective (Simple)"

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        decisions: List[AlgorithmDecision] = []
        tracker = ClaimTracker(state)
        calls = state.calls.all()
        for index, elevator in enumerate(state.elevators):
            if elevator.is_idle:
                candidates = [floor for floor in calls if floor not in tracker]
                if not candidates:
                    continue
                nearest = min(candidates, key=lambda floor: abs(floor - elevator.position))
                tracker.add(nearest)
                decisions.append(AlgorithmDecision(elevator=index, add_targets=[nearest]))
                continue

            if elevator.direction == UP:
                ahead = [f for f in state.calls.up if f >= elevator.position]
            else:
                ahead = [f for f in state.calls.down if f <= elevator.position]
            ahead = [f for f in ahead if f not in tracker]
            if ahead:
                tracker.update(ahead)
                decisions.append(AlgorithmDecision(elevator=index, add_targets=ahead))
        return decisions
