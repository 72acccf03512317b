import numpy as np
import pytest

from matfx.core.config import EffectsConfig
from matfx.core.material import VACUUM
from matfx.core.state import QOP, StepContext, zero_noise
from matfx.physics.scattering import (MultipleScattering, geane_variance,
                                      highland_variance, msc_covariance)


def _scatter(material, step, direction, model='GEANE', noise=None, **config):
    ms = MultipleScattering(EffectsConfig(msc_model=model, **config))
    noise = zero_noise() if noise is None else noise
    ctx = StepContext(material=material, step_size=step)
    ms.add_noise(noise, ctx, direction, 1.0, 0.5, 1.)
    return noise


@pytest.mark.parametrize("model", ['GEANE', 'Highland'])
@pytest.mark.parametrize("step", [1.E-3, 0.1, 1.0, 10.0])
def test_block_symmetric_positive_semidefinite(silicon, unit_directions, model, step):
    for direction in unit_directions:
        noise = _scatter(silicon, step, direction, model)
        block = noise[:6, :6]

        assert np.allclose(block, block.T)
        eig = np.linalg.eigvalsh(block)
        assert eig.min() >= -1.E-12 * eig.max()
        # q/p row and column untouched
        assert np.all(noise[QOP, :] == 0.)
        assert np.all(noise[:, QOP] == 0.)


def test_no_variance_along_direction(silicon):
    noise = _scatter(silicon, 1.0, np.array([0., 0., 1.]))
    sigma2 = MultipleScattering().variance(1.0, 1., 0.5, 1.0, silicon)

    assert noise[2, 2] == 0.
    assert noise[5, 5] == 0.
    assert noise[3, 3] == pytest.approx(sigma2)
    assert noise[4, 4] == pytest.approx(sigma2)
    assert noise[0, 0] == pytest.approx(sigma2 / 3.)
    assert noise[0, 3] == pytest.approx(sigma2 / 2.)


def test_highland_formula(silicon):
    x = 1.0 / silicon.radiation_length
    theta0 = 0.0136 / np.sqrt(0.5 * 1.0) * np.sqrt(x) * (1. + 0.038 * np.log(x))
    assert highland_variance(1.0, 1., 0.5, 1.0, silicon.radiation_length) == pytest.approx(theta0 ** 2)


def test_geane_linear_in_path(silicon):
    v1 = geane_variance(1.0, 1., 0.5, 1.0, silicon.Z, silicon.radiation_length)
    v2 = geane_variance(2.0, 1., 0.5, 1.0, silicon.Z, silicon.radiation_length)
    assert v1 > 0.
    assert v2 == pytest.approx(2. * v1)


def test_noise_is_accumulated(silicon):
    direction = np.array([0.6, 0., 0.8])
    fresh = _scatter(silicon, 0.5, direction)
    accumulated = _scatter(silicon, 0.5, direction, noise=np.ones((7, 7)))
    assert np.allclose(accumulated - 1., fresh)


def test_vacuum_and_disabled_are_no_ops(silicon):
    direction = np.array([0., 0., 1.])
    assert np.all(_scatter(VACUUM, 1.0, direction) == 0.)
    assert np.all(_scatter(silicon, 1.0, direction, noise_coulomb=False) == 0.)


def test_msc_covariance_shape():
    cov = msc_covariance(1.E-6, 2.0, np.array([1., 0., 0.]))
    assert cov.shape == (6, 6)
    assert cov[1, 4] == pytest.approx(1.E-6)
