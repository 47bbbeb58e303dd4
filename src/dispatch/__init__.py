from __future__ import annotations

from typing import Callable, Dict

from .collective import CollectiveAlgorithm
from .custom import CustomAlgorithm, MalformedDecisionError, coerce_decisions
from .idle_lobby import IdleToLobbyAlgorithm
from .interface import (
    DOWN,
    IDLE,
    UP,
    Algorithm,
    AlgorithmDecision,
    AlgorithmState,
    ElevatorSnapshot,
    HallCalls,
)
from .nearest import ExclusiveNearestAlgorithm, NearestCarAlgorithm
from .zoned import ZonedAlgorithm

__all__ = [
    "ALGORITHM_REGISTRY",
    "DOWN",
    "IDLE",
    "UP",
    "Algorithm",
    "AlgorithmDecision",
    "AlgorithmState",
    "CollectiveAlgorithm",
    "CustomAlgorithm",
    "ElevatorSnapshot",
    "ExclusiveNearestAlgorithm",
    "HallCalls",
    "IdleToLobbyAlgorithm",
    "MalformedDecisionError",
    "NearestCarAlgorithm",
    "ZonedAlgorithm",
    "coerce_decisions",
    "get_algorithm",
]


ALGORITHM_REGISTRY: Dict[str, Callable[..., Algorithm]] = {
    "nearest": NearestCarAlgorithm,
    "exclusive_nearest": ExclusiveNearestAlgorithm,
    "collective": CollectiveAlgorithm,
    "zoned": ZonedAlgorithm,
    "idle_lobby": IdleToLobbyAlgorithm,
}


def get_algorithm(name: str, **kwargs) -> Algorithm:
    factory = ALGORITHM_REGISTRY.get(name.lower())
    if factory is None:
        raise ValueError(f"Unknown algorithm '{name}'. Available: {', '.join(ALGORITHM_REGISTRY)}")
    return factory(**kwargs)
