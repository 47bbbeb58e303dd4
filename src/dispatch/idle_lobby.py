from __future__ import annotations

from typing import List

from .interface import AlgorithmDecision, AlgorithmState
from .nearest import NearestCarAlgorithm

LOBBY = 0


class IdleToLobbyAlgorithm:
    """Parks idle cars at the lobby when the building is quiet.

    While any hall call is pending it behaves exactly like nearest car.
    """

    name = "Idle To Lobby"

    def __init__(self) -> None:
        self._fallback = NearestCarAlgorithm()

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        decisions: List[AlgorithmDecision] = []
        if not state.has_pending_calls:
            for index, elevator in enumerate(state.elevators):
                if elevator.is_idle and elevator.position != LOBBY and LOBBY not in elevator.targets:
                    decisions.append(AlgorithmDecision(elevator=index, add_targets=[LOBBY]))
        decisions.extend(self._fallback.decide(state))
        return decisions
