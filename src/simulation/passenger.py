from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Passenger:
    """Represents a rider making one trip between two floors."""

    passenger_id: int
    origin: int
    destination: int
    spawn_time: float
    board_time: Optional[float] = None
    alight_time: Optional[float] = None

    @property
    def direction(self) -> int:
        """Return +1 for up, -1 for down."""
        return 1 if self.destination > self.origin else -1

    def record_boarding(self, time: float) -> None:
        self.board_time = time

    def record_alighting(self, time: float) -> None:
        self.alight_time = time

    @property
    def wait_time(self) -> Optional[float]:
        if self.board_time is None:
            return None
        return self.board_time - self.spawn_time

    @property
    def ride_time(self) -> Optional[float]:
        if self.board_time is None or self.alight_time is None:
            return None
        return self.alight_time - self.board_time
