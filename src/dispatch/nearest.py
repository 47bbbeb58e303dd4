from __future__ import annotations

from typing import List

from .interface import AlgorithmDecision, AlgorithmState
from .utils import ClaimTracker, cheapest_elevator

LOAD_PENALTY = 0.5


class NearestCarAlgorithm:
    """Sends the cheapest car to every unclaimed hall call.

    A single car may collect any number of calls in one tick.
    """

    name = "Nearest Car"

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        decisions: List[AlgorithmDecision] = []
        if not state.elevators:
            return decisions
        tracker = ClaimTracker(state)
        for floor in state.calls.all():
            if floor in tracker:
                continue
            best = cheapest_elevator(state, floor)
            tracker.add(floor)
            decisions.append(AlgorithmDecision(elevator=best, add_targets=[floor]))
        return decisions


class ExclusiveNearestAlgorithm:
    """Nearest car with a per-tick load penalty to spread calls across cars."""

    name = "Exclusive Nearest"

    def __init__(self, load_penalty: float = LOAD_PENALTY) -> None:
        self.load_penalty = load_penalty

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        decisions: List[AlgorithmDecision] = []
        if not state.elevators:
            return decisions
        assigned = [0.0] * len(state.elevators)
        tracker = ClaimTracker(state)
        for floor in state.calls.all():
            if floor in tracker:
                continue
            best = cheapest_elevator(state, floor, extra_cost=assigned)
            assigned[best] += self.load_penalty
            tracker.add(floor)
            decisions.append(AlgorithmDecision(elevator=best, add_targets=[floor]))
        return decisions
