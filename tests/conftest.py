import numpy as np
import pytest

from matfx.core.material import MaterialProperties
from matfx.core.state import make_state
from matfx.transport.engine import MaterialEffects
from matfx.transport.interfaces import HomogeneousMedium


@pytest.fixture
def silicon():
    return MaterialProperties(density=2.33, Z=14.0, A=28.0, radiation_length=9.37,
                              mean_excitation_energy=173.0)


@pytest.fixture
def iron():
    return MaterialProperties(density=7.874, Z=26.0, A=55.845, radiation_length=1.757,
                              mean_excitation_energy=286.0)


@pytest.fixture
def effects_in(silicon):
    """Factory for initialized MaterialEffects in a given oracle."""

    def _make(oracle=None, config=None):
        effects = MaterialEffects(config)
        effects.initialize(oracle if oracle is not None else HomogeneousMedium(silicon))
        return effects

    return _make


@pytest.fixture
def state_along_z():
    return make_state((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 1.0)


@pytest.fixture
def unit_directions():
    """Random unit vectors for checks over arbitrary directions."""
    rng = np.random.default_rng(1)
    v = rng.normal(size=(25, 3))
    return v / np.linalg.norm(v, axis=1)[:, None]
