import math

import numpy as np
import pytest

from matfx.core.config import EffectsConfig
from matfx.core.particle import ELECTRON_MASS, get_species
from matfx.core.state import QOP, StepContext, zero_noise
from matfx.physics.stopping_power import StoppingPower
from matfx.physics.straggling import (EnergyLossFluctuations,
                                      bremsstrahlung_energy_variance,
                                      ionization_energy_variance)


def _kinematics(mom, pdg):
    mass = get_species(pdg).mass
    energy = np.hypot(mom, mass)
    gamma = energy / mass
    gamma2 = gamma * gamma
    return energy, 1. - 1. / gamma2, gamma, gamma2


def _straggling(material, step, mom=1.0, pdg=2212, **config):
    energy, beta2, gamma, gamma2 = _kinematics(mom, pdg)
    mass = get_species(pdg).mass
    ctx = StepContext(material=material, step_size=step,
                      dedx=StoppingPower().dedx(energy, mass, 1., pdg, material))
    noise = zero_noise()
    EnergyLossFluctuations(EffectsConfig(**config)).add_ionization_straggling(
        noise, ctx, mom, beta2, gamma, gamma2, pdg)
    return noise


def test_straggling_grows_with_step(silicon):
    variances = [_straggling(silicon, step)[QOP, QOP] for step in (0.1, 0.5, 1.0, 2.0)]
    assert variances[0] > 0.
    assert np.all(np.diff(variances) > 0.)


@pytest.mark.parametrize("step", [1.E-3, 1.E-2])
def test_thin_absorber_straggling_finite(silicon, step):
    variance = _straggling(silicon, step)[QOP, QOP]
    assert np.isfinite(variance)
    assert variance > 0.


def test_straggling_only_touches_qop(silicon):
    noise = _straggling(silicon, 1.0)
    noise[QOP, QOP] = 0.
    assert np.all(noise == 0.)


def test_straggling_needs_both_switches(silicon):
    assert _straggling(silicon, 1.0, noise_bethe_bloch=False)[QOP, QOP] == 0.
    assert _straggling(silicon, 1.0, energy_loss_bethe_bloch=False)[QOP, QOP] == 0.


@pytest.mark.parametrize("pdg, expect_noise", [(11, True), (-11, True), (13, False), (2212, False)])
def test_bremsstrahlung_noise_only_for_electrons(silicon, pdg, expect_noise):
    _, beta2, _, _ = _kinematics(1.0, pdg)
    noise = zero_noise()
    ctx = StepContext(material=silicon, step_size=1.0)
    EnergyLossFluctuations().add_bremsstrahlung_fluctuation(noise, ctx, 1.0, beta2, pdg)

    assert (noise[QOP, QOP] > 0.) == expect_noise
    noise[QOP, QOP] = 0.
    assert np.all(noise == 0.)


def test_bremsstrahlung_variance_non_negative():
    for step in (0., 1.E-3, 1.0, 100.0):
        assert bremsstrahlung_energy_variance(step, 9.37, 1.0) >= 0.


# ============================================================================
# Reference values of the three straggling regimes
# ============================================================================

PROTON_DEDX = 5.6E-3  # GeV/cm, 1 GeV/c proton in silicon


def _max_transfer_and_zeta(step, beta2, gamma, gamma2, mass, material):
    """Landau parameter zeta and maximum energy transfer [eV]."""
    r = ELECTRON_MASS / mass
    zeta = 153.4E3 / beta2 * material.Z / material.A * material.density * step
    e_max = 2.E9 * ELECTRON_MASS * beta2 * gamma2 / (1. + 2. * gamma * r + r * r)
    return zeta, e_max


def _urban_reference(step, beta2, gamma2, mass, material, dedx):
    """GEANT3 Urban model: (sigma^2(E) [GeV^2], number of collisions)."""
    gamma = math.sqrt(gamma2)
    zeta, e_max = _max_transfer_and_zeta(step, beta2, gamma, gamma2, mass, material)
    Z = material.Z

    I = 16. * Z ** 0.9
    f2 = 2. / Z
    f1 = 1. - f2
    e2 = 10. * Z ** 2
    e1 = (I / e2 ** f2) ** (1. / f1)

    mbbgg2 = 2.E9 * mass * beta2 * gamma2
    log_I = math.log(mbbgg2 / I) - beta2
    s1 = dedx * 1.E9 * f1 / e1 * (math.log(mbbgg2 / e1) - beta2) / log_I * 0.6
    s2 = dedx * 1.E9 * f2 / e2 * (math.log(mbbgg2 / e2) - beta2) / log_I * 0.6
    s3 = dedx * 1.E9 * e_max / (I * (e_max + I) * math.log((e_max + I) / I)) * 0.4
    n_coll = (s1 + s2 + s3) * step

    if n_coll > 50.:
        lam_med = -0.422784 - beta2 - math.log(zeta / e_max)
        lam_max = (0.60715 + 1.1934 * lam_med
                   + (0.67794 + 0.052382 * lam_med) * math.exp(0.94753 + 0.74442 * lam_med))
        coeffs = [1.975560, 9.898841e-02, -2.828670e-04, 5.345406e-07,
                  -4.942035e-10, 1.729807e-13]
        width = min(sum(c * lam_max ** k for k, c in enumerate(coeffs)), 54.6)
        return width ** 2 * zeta ** 2 * 1.E-18, n_coll

    e_alpha = I / (1. - 0.996 * e_max / (e_max + I))
    mean_e32 = I * (e_max + I) / e_max * (e_alpha - I)
    return step * (s1 * e1 ** 2 + s2 * e2 ** 2 + s3 * mean_e32) * 1.E-18, n_coll


def _variance(step, material, dedx=PROTON_DEDX, mom=1.0, pdg=2212):
    _, beta2, gamma, gamma2 = _kinematics(mom, pdg)
    mass = get_species(pdg).mass
    return ionization_energy_variance(step, dedx, beta2, gamma, gamma2, mass, 1.,
                                      material.Z, material.A, material.density)


def test_thick_absorber_is_gaussian(silicon):
    step = 1.0
    _, beta2, gamma, gamma2 = _kinematics(1.0, 2212)
    zeta, e_max = _max_transfer_and_zeta(step, beta2, gamma, gamma2,
                                         get_species(2212).mass, silicon)

    assert zeta / e_max > 0.01
    expected = zeta * e_max * (1. - beta2 / 2.) * 1.E-18
    assert _variance(step, silicon) == pytest.approx(expected, rel=1.E-9)


def test_few_collisions_use_urban_model(silicon):
    step = 1.E-3
    _, beta2, _, gamma2 = _kinematics(1.0, 2212)
    expected, n_coll = _urban_reference(step, beta2, gamma2, get_species(2212).mass,
                                        silicon, PROTON_DEDX)

    assert n_coll <= 50.
    assert _variance(step, silicon) == pytest.approx(expected, rel=1.E-9)


def test_many_collisions_use_truncated_landau(silicon):
    step = 1.E-2
    _, beta2, _, gamma2 = _kinematics(1.0, 2212)
    expected, n_coll = _urban_reference(step, beta2, gamma2, get_species(2212).mass,
                                        silicon, PROTON_DEDX)

    assert n_coll > 50.
    assert _variance(step, silicon) == pytest.approx(expected, rel=1.E-9)


def test_bremsstrahlung_variance_value(silicon):
    t = 1.0 / silicon.radiation_length / math.log(2.)
    expected = 1.44 * (3. ** -t - 4. ** -t) * 1.0
    assert bremsstrahlung_energy_variance(1.0, silicon.radiation_length, 1.0) == pytest.approx(
        expected, rel=1.E-6)
