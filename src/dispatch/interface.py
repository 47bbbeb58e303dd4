from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Mapping, Protocol, Tuple

UP = 1
DOWN = -1
IDLE = 0


@dataclass(frozen=True)
class ElevatorSnapshot:
    """Read-only copy of an elevator handed to dispatch algorithms."""

    elevator_id: int
    position: float
    direction: int
    velocity: float
    capacity: int
    passenger_destinations: Tuple[int, ...]
    doors_open: bool
    targets: FrozenSet[int]

    @property
    def load(self) -> int:
        return len(self.passenger_destinations)

    @property
    def available_capacity(self) -> int:
        return max(0, self.capacity - self.load)

    @property
    def is_idle(self) -> bool:
        return self.direction == IDLE


@dataclass(frozen=True)
class HallCalls:
    """Floors with waiting passengers, split by travel direction (ascending)."""

    up: Tuple[int, ...] = ()
    down: Tuple[int, ...] = ()

    def all(self) -> List[int]:
        return [*self.up, *self.down]

    def __bool__(self) -> bool:
        return bool(self.up or self.down)


@dataclass(frozen=True)
class AlgorithmState:
    """World state as seen by a dispatch algorithm for a single tick.

    ``calls`` only lists hall calls nobody owns yet. Calls already claimed by
    a car are kept in ``claims`` as ``(floor, direction) -> elevator_id`` so an
    algorithm reasoning about one car can still see what that car owns via
    :meth:`calls_for`.
    """

    time: float
    elevators: Tuple[ElevatorSnapshot, ...]
    floors: int
    calls: HallCalls
    claims: Mapping[Tuple[int, int], int] = field(default_factory=dict)

    @property
    def has_pending_calls(self) -> bool:
        return bool(self.calls) or bool(self.claims)

    def calls_for(self, elevator_id: int) -> HallCalls:
        up = set(self.calls.up)
        down = set(self.calls.down)
        for (floor, direction), owner in self.claims.items():
            if owner != elevator_id:
                continue
            (up if direction == UP else down).add(floor)
        return HallCalls(up=tuple(sorted(up)), down=tuple(sorted(down)))


@dataclass(frozen=True)
class AlgorithmDecision:
    """Floors an algorithm would like added to one elevator's targets."""

    elevator: int
    add_targets: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "add_targets", tuple(self.add_targets))


class Algorithm(Protocol):
    """Strategy interface for assigning hall calls to elevators."""

    name: str

    def decide(self, state: AlgorithmState) -> List[AlgorithmDecision]:
        """
        Return target-floor proposals per elevator.

        Proposals are advisory: the building only grants a hall-call floor
        to the car that owns (or first claims) that call.
        """
        ...
