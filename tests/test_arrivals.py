import random
from collections import Counter

import pytest

from dispatch import DOWN, UP
from simulation import PassengerGenerator


def generator(**kwargs):
    options = {"num_floors": 10, "spawn_rate_per_min": 60, "rng": random.Random(0)}
    options.update(kwargs)
    return PassengerGenerator(**options)


def test_fixed_interval_accumulator():
    gen = generator(spawn_rate_per_min=60)
    assert gen.tick(0.5, 0.5) == []
    assert len(gen.tick(0.5, 1.0)) == 1
    assert len(gen.tick(3.0, 4.0)) == 3
    assert gen.spawned == 4


def test_zero_rate_never_spawns():
    gen = generator(spawn_rate_per_min=0)
    assert gen.spawn_interval == float("inf")
    assert gen.tick(1000.0, 1000.0) == []


def test_ids_increase_and_spawn_time_is_recorded():
    gen = generator(spawn_rate_per_min=120)
    passengers = gen.tick(2.0, 7.5)
    assert [p.passenger_id for p in passengers] == [1, 2, 3, 4]
    assert all(p.spawn_time == 7.5 for p in passengers)


def test_ground_bias_favours_lobby_origins():
    gen = generator(num_floors=5, ground_bias=100.0)
    origins = Counter(gen.spawn(0.0).origin for _ in range(500))
    assert origins[0] > 400


def test_bias_below_one_is_treated_as_one():
    gen = generator(num_floors=4, ground_bias=0.0)
    origins = Counter(gen.spawn(0.0).origin for _ in range(800))
    assert set(origins) == {0, 1, 2, 3}
    assert origins[0] < 300


def test_upper_floor_riders_head_for_lobby():
    gen = generator(to_lobby_pct=100.0)
    for _ in range(200):
        passenger = gen.spawn(0.0)
        if passenger.origin == 0:
            assert 1 <= passenger.destination <= 9
        else:
            assert passenger.destination == 0


def test_without_lobby_preference_upper_riders_stay_upstairs():
    gen = generator(to_lobby_pct=0.0)
    for _ in range(300):
        passenger = gen.spawn(0.0)
        assert passenger.destination != passenger.origin
        if passenger.origin != 0:
            assert passenger.destination != 0


def test_two_floor_building_always_has_a_destination():
    gen = generator(num_floors=2, to_lobby_pct=0.0)
    for _ in range(50):
        passenger = gen.spawn(0.0)
        assert {passenger.origin, passenger.destination} == {0, 1}


def test_single_floor_building_spawns_nothing():
    gen = generator(num_floors=1)
    assert gen.tick(10.0, 10.0) == []


@pytest.mark.parametrize(
    "origin, direction, low, high",
    [(3, UP, 4, 9), (3, DOWN, 0, 2), (0, UP, 1, 9), (9, DOWN, 0, 8)],
)
def test_directed_destination_matches_direction(origin, direction, low, high):
    gen = generator()
    for _ in range(30):
        passenger = gen.directed(origin, direction, 0.0)
        assert low <= passenger.destination <= high
        assert passenger.direction == direction


@pytest.mark.parametrize("origin, direction", [(9, UP), (0, DOWN), (12, UP), (-1, DOWN), (4, 0)])
def test_directed_infeasible_is_a_no_op(origin, direction):
    gen = generator()
    assert gen.directed(origin, direction, 0.0) is None
    assert gen.spawned == 0
