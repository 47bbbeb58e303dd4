import pytest

from simulation import Simulation, SimulationConfig


@pytest.fixture
def make_simulation():
    def factory(**overrides) -> Simulation:
        options = {"spawn_rate_per_min": 0, "random_seed": 1}
        options.update(overrides)
        return Simulation(SimulationConfig(**options))

    return factory
