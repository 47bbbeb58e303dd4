from __future__ import annotations

import random
from typing import List, Optional

from dispatch import DOWN, UP

from .passenger import Passenger

LOBBY = 0


class PassengerGenerator:
    """Fixed-interval arrival process with a lobby-heavy origin/destination mix.

    One passenger is created every ``60 / spawn_rate_per_min`` seconds. The
    lobby is drawn as origin with weight ``max(1, ground_bias)`` against 1 for
    every other floor; riders starting upstairs head for the lobby with
    probability ``to_lobby_pct`` percent.
    """

    def __init__(
        self,
        num_floors: int,
        spawn_rate_per_min: float,
        ground_bias: float = 3.0,
        to_lobby_pct: float = 70.0,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.num_floors = num_floors
        self.spawn_rate_per_min = spawn_rate_per_min
        self.ground_bias = ground_bias
        self.to_lobby_pct = to_lobby_pct
        self.random = rng or random.Random()
        self.spawned = 0
        self._accumulator = 0.0
        self._next_passenger_id = 1

    @property
    def spawn_interval(self) -> float:
        if self.spawn_rate_per_min <= 0:
            return float("inf")
        return 60.0 / self.spawn_rate_per_min

    def tick(self, dt: float, current_time: float) -> List[Passenger]:
        self._accumulator += dt
        interval = self.spawn_interval
        passengers: List[Passenger] = []
        while self._accumulator >= interval:
            self._accumulator -= interval
            passenger = self.spawn(current_time)
            if passenger is not None:
                passengers.append(passenger)
        return passengers

    def spawn(self, current_time: float) -> Optional[Passenger]:
        if self.num_floors < 2:
            return None
        weights = [1.0] * self.num_floors
        weights[LOBBY] = max(1.0, self.ground_bias)
        origin = self.random.choices(range(self.num_floors), weights=weights)[0]
        return self._new_passenger(origin, self._choose_destination(origin), current_time)

    def directed(self, origin: int, direction: int, current_time: float) -> Optional[Passenger]:
        """Create a passenger at ``origin`` travelling in ``direction``.

        Returns ``None`` when there is no floor in that direction.
        """

        if not 0 <= origin < self.num_floors:
            return None
        if direction == UP:
            if origin >= self.num_floors - 1:
                return None
            destination = self.random.randint(origin + 1, self.num_floors - 1)
        elif direction == DOWN:
            if origin <= 0:
                return None
            destination = self.random.randint(0, origin - 1)
        else:
            return None
        return self._new_passenger(origin, destination, current_time)

    def _choose_destination(self, origin: int) -> int:
        if origin != LOBBY and self.random.random() * 100 < self.to_lobby_pct:
            return LOBBY
        upper_floors = [f for f in range(1, self.num_floors) if f != origin]
        if not upper_floors:
            return LOBBY
        return self.random.choice(upper_floors)

    def _new_passenger(self, origin: int, destination: int, current_time: float) -> Passenger:
        passenger = Passenger(
            passenger_id=self._next_passenger_id,
            origin=origin,
            destination=destination,
            spawn_time=current_time,
        )
        self._next_passenger_id += 1
        self.spawned += 1
        return passenger
