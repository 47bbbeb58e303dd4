from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from dispatch import DOWN, UP

from .passenger import Passenger


@dataclass
class Floor:
    """A floor with directional waiting queues and their hall-call claims.

    ``up_claim``/``down_claim`` hold the id of the elevator that owns the
    matching hall call, or ``None``.
    """

    number: int
    up_queue: Deque[Passenger] = field(default_factory=deque)
    down_queue: Deque[Passenger] = field(default_factory=deque)
    up_claim: Optional[int] = None
    down_claim: Optional[int] = None

    def add_passenger(self, passenger: Passenger) -> None:
        self.queue(passenger.direction).append(passenger)

    def queue(self, direction: int) -> Deque[Passenger]:
        return self.up_queue if direction > 0 else self.down_queue

    def has_waiting(self) -> bool:
        return bool(self.up_queue or self.down_queue)

    def open_directions(self) -> List[int]:
        return [d for d in (UP, DOWN) if self.queue(d)]

    def claim_owner(self, direction: int) -> Optional[int]:
        return self.up_claim if direction > 0 else self.down_claim

    def set_claim(self, direction: int, elevator_id: Optional[int]) -> None:
        if direction > 0:
            self.up_claim = elevator_id
        else:
            self.down_claim = elevator_id

    def board_passengers(self, direction: int, capacity: int) -> List[Passenger]:
        queue = self.queue(direction)
        boarded: List[Passenger] = []
        while queue and len(boarded) < capacity:
            boarded.append(queue.popleft())
        return boarded

    def __len__(self) -> int:
        return len(self.up_queue) + len(self.down_queue)
