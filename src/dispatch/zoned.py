from __future__ import annotations

import math
from typing import List

from .interface import AlgorithmDecision, AlgorithmState
from .utils import ClaimTracker


class ZonedAlgorithm:
    """Splits the building into contiguous bands, one per car."""

    name = "Zoned"

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        decisions: List[AlgorithmDecision] = []
        count = len(state.elevators)
        if count == 0:
            return decisions
        zone_size = math.ceil(state.floors / count)
        tracker = ClaimTracker(state)
        for floor in state.calls.all():
            if floor in tracker:
                continue
            tracker.add(floor)
            decisions.append(
                AlgorithmDecision(elevator=self.zone_owner(floor, zone_size, count), add_targets=[floor])
            )
        return decisions

    @staticmethod
    def zone_owner(floor: int, zone_size: int, count: int) -> int:
        return min(count - 1, floor // zone_size)
