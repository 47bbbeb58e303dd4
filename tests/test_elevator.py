import pytest

from dispatch import DOWN, IDLE, UP
from simulation import Building, Elevator, Passenger, StatisticsTracker
from simulation.elevator import ARRIVAL_EPSILON


def setup_car(num_floors=10, **kwargs):
    car = Elevator(elevator_id=0, **kwargs)
    building = Building(num_floors=num_floors, elevators=[car])
    return car, building, StatisticsTracker()


def rider(passenger_id, origin, destination, spawn_time=0.0, board_time=None):
    return Passenger(
        passenger_id=passenger_id,
        origin=origin,
        destination=destination,
        spawn_time=spawn_time,
        board_time=board_time,
    )


def run_until_stop(car, building, stats, dt=0.1, limit=2000):
    for tick in range(limit):
        stop = car.step(dt, building, tick * dt, stats)
        if stop is not None:
            return stop
    raise AssertionError("car never stopped")


def test_idle_car_starts_towards_target_and_accelerates():
    car, building, stats = setup_car(speed_floors_per_sec=1.5, acceleration_floors_per_sec2=0.5)
    car.assign_target(9)
    car.step(0.1, building, 0.1, stats)
    assert car.direction == UP
    assert car.velocity == pytest.approx(0.05)
    assert car.position == pytest.approx(0.005)


def test_trapezoid_profile_respects_top_speed_and_lands_exactly():
    car, building, stats = setup_car(speed_floors_per_sec=1.5, acceleration_floors_per_sec2=1.0)
    car.assign_target(7)
    previous = car.position
    stop = None
    for tick in range(500):
        stop = car.step(0.1, building, tick * 0.1, stats)
        assert abs(car.velocity) <= 1.5 + 1e-9
        assert car.position - previous <= 1.5 * 0.1 + ARRIVAL_EPSILON + 1e-9
        assert car.position <= 7.0
        previous = car.position
        if stop is not None:
            break
    assert stop is not None and stop.floor == 7
    assert car.position == 7.0
    assert car.velocity == 0.0
    assert car.doors_open


def test_reaches_cruise_speed_on_long_trip():
    car, building, stats = setup_car(num_floors=30, speed_floors_per_sec=2.0, acceleration_floors_per_sec2=1.0)
    car.assign_target(29)
    peak = 0.0
    for tick in range(300):
        car.step(0.1, building, tick * 0.1, stats)
        peak = max(peak, car.velocity)
    assert peak == pytest.approx(2.0)


def test_one_floor_hop_takes_under_four_seconds():
    car, building, stats = setup_car(speed_floors_per_sec=1.5, acceleration_floors_per_sec2=1.5)
    car.assign_target(1)
    ticks = 0
    while car.step(0.1, building, ticks * 0.1, stats) is None:
        ticks += 1
        assert ticks < 40


def test_bleeds_speed_before_reversing():
    car, building, stats = setup_car(acceleration_floors_per_sec2=1.5)
    car.position = 4.5
    car.direction = UP
    car.velocity = 1.5
    car.assign_target(2)

    velocities = [car.velocity]
    peak = car.position
    stop = None
    for tick in range(500):
        stop = car.step(0.1, building, tick * 0.1, stats)
        velocities.append(car.velocity)
        peak = max(peak, car.position)
        if stop is not None:
            break

    assert peak > 4.5
    for before, after in zip(velocities, velocities[1:]):
        assert not (before > 0 and after < 0)
    assert stop is not None and stop.floor == 2
    assert car.position == 2.0


def test_unreachable_target_is_passed_then_served_on_return():
    car, building, stats = setup_car(acceleration_floors_per_sec2=0.5)
    car.position = 3.9
    car.direction = UP
    car.velocity = 1.5
    car.assign_target(4)
    stop = run_until_stop(car, building, stats)
    assert stop.floor == 4
    assert car.position == 4.0


def test_position_is_clamped_to_building():
    car, building, stats = setup_car(num_floors=5, acceleration_floors_per_sec2=0.1)
    car.position = 3.95
    car.direction = UP
    car.velocity = 1.5
    car.step(0.1, building, 0.0, stats)
    assert car.position == 4.0
    assert car.velocity == 0.0


def test_doors_stay_open_for_dwell_then_close():
    car, building, stats = setup_car(stop_duration_sec=1.0)
    car.assign_target(0)
    assert car.step(0.1, building, 0.0, stats) is not None
    for _ in range(5):
        car.step(0.1, building, 0.0, stats)
    assert car.doors_open and car.velocity == 0.0
    for _ in range(7):
        car.step(0.1, building, 0.0, stats)
    assert not car.doors_open
    assert car.direction == IDLE


@pytest.mark.parametrize(
    "targets, expected",
    [({8, 2}, UP), ({2}, DOWN), (set(), IDLE)],
)
def test_directional_commitment_when_doors_close(targets, expected):
    car, building, stats = setup_car()
    car.position = 5.0
    car.direction = UP
    car.door_timer = 0.05
    car.targets = set(targets)
    car.step(0.1, building, 0.0, stats)
    assert not car.doors_open
    assert car.direction == expected


def test_in_cab_destination_counts_for_commitment():
    car, building, stats = setup_car()
    car.position = 5.0
    car.direction = DOWN
    car.door_timer = 0.05
    car.passengers.append(rider(1, 7, 1, board_time=0.0))
    car.step(0.1, building, 0.0, stats)
    assert car.direction == DOWN


def test_unloading_records_statistics():
    car, building, stats = setup_car()
    car.position = 4.0
    car.direction = UP
    passenger = rider(1, 1, 5, spawn_time=0.5, board_time=2.0)
    car.passengers.append(passenger)
    car.assign_target(5)
    stop = run_until_stop(car, building, stats)
    assert stop.alighted == [passenger]
    assert passenger.alight_time is not None
    assert stats.completed == 1
    assert stats.total_wait == pytest.approx(1.5)
    assert stats.total_ride == pytest.approx(passenger.ride_time)
    assert passenger.ride_time == pytest.approx(passenger.alight_time - 2.0)
    assert 5 not in car.targets
    assert car.passengers == []


def test_boards_arrival_direction_first_and_keeps_direction():
    car, building, stats = setup_car(capacity=2)
    car.position = 6.0
    car.direction = DOWN
    car.assign_target(5)
    floor = building.floors[5]
    for pid, destination in ((1, 8), (2, 9)):
        floor.add_passenger(rider(pid, 5, destination))
    floor.add_passenger(rider(3, 5, 0))

    stop = run_until_stop(car, building, stats)

    assert [p.passenger_id for p in stop.boarded] == [3, 1]
    assert len(floor.up_queue) == 1
    assert car.direction == DOWN
    assert car.targets == {0, 8}
    assert all(p.board_time is not None for p in stop.boarded)


def test_idle_arrival_picks_majority_direction():
    car, building, stats = setup_car()
    car.position = 5.0
    car.assign_target(5)
    floor = building.floors[5]
    floor.add_passenger(rider(1, 5, 8))
    floor.add_passenger(rider(2, 5, 9))
    floor.add_passenger(rider(3, 5, 1))
    stop = run_until_stop(car, building, stats)
    assert len(stop.boarded) == 3
    assert car.direction == UP


def test_idle_arrival_boards_claimed_direction_first():
    car, building, stats = setup_car(capacity=1)
    car.position = 5.0
    floor = building.floors[5]
    floor.add_passenger(rider(1, 5, 8))
    floor.add_passenger(rider(2, 5, 1))
    floor.down_claim = 0
    car.assign_target(5)
    stop = run_until_stop(car, building, stats)
    assert [p.passenger_id for p in stop.boarded] == [2]
    assert car.direction == DOWN
    assert floor.down_claim is None


def test_next_stop_follows_direction():
    car, _, _ = setup_car()
    car.position = 5.0
    car.direction = DOWN
    car.targets = {7, 3, 1}
    assert car.next_stop() == 3
    car.direction = IDLE
    car.targets = {7, 2}
    assert car.next_stop() == 7
    car.targets = set()
    assert car.next_stop() is None
