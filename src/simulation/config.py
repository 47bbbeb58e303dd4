from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from dispatch import Algorithm


@dataclass
class SimulationConfig:
    """Building layout, car physics and passenger model for one simulation.

    Values are trusted as given; callers validate before construction.
    ``algorithm`` is either a registered algorithm name or an object with a
    ``decide(state)`` method.
    """

    floors: int = 10
    elevators: int = 3
    capacity: int = 8
    speed_floors_per_sec: float = 1.5
    acceleration_floors_per_sec2: Optional[float] = None
    stop_duration_sec: float = 1.0
    spawn_rate_per_min: float = 40.0
    ground_bias: float = 3.0
    to_lobby_pct: float = 70.0
    algorithm: Union[str, Algorithm] = "nearest"
    random_seed: Optional[int] = None

    @property
    def acceleration(self) -> float:
        if self.acceleration_floors_per_sec2 is None:
            return self.speed_floors_per_sec
        return self.acceleration_floors_per_sec2
