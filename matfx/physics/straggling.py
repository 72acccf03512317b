"""
Energy-loss fluctuations: ionization straggling and bremsstrahlung.

Both contributions enter the process noise through the q/p diagonal
element, using linear error propagation from E to q/p:

    σ²(q/p) = q² / (β² p⁴) · σ²(E)

Straggling follows the GEANT3 treatment (erland.F): Vavilov-Gaussian for
thick absorbers, otherwise the Urban model, with a truncated Landau width
when many collisions occur.
"""

from typing import Optional

import numpy as np
import numba

from matfx.core.config import EffectsConfig
from matfx.core.particle import ELECTRON_MASS, get_species
from matfx.core.state import QOP, StepContext, check_noise


@numba.njit(fastmath=True, cache=True)
def ionization_energy_variance(step_cm: float, dedx: float, beta2: float,
                               gamma: float, gamma2: float, mass: float,
                               charge: float, Z: float, A: float,
                               density: float) -> float:
    """
    Variance of the ionization energy loss over a step.

    Parameters:
        step_cm: Step length [cm]
        dedx: Mean energy-loss rate over the step [GeV/cm]
        beta2, gamma, gamma2: Kinematics at the middle of the step
        mass: Particle mass [GeV/c²]
        charge: Particle charge [e]
        Z, A, density: Material atomic number, mass [g/mol] and density [g/cm³]

    Returns:
        σ²(E) [GeV²]
    """
    mass_ratio = ELECTRON_MASS / mass

    zeta = 153.4E3 * charge * charge / beta2 * Z / A * density * step_cm  # eV
    e_max = (2.E9 * ELECTRON_MASS * beta2 * gamma2 /
             (1. + 2. * gamma * mass_ratio + mass_ratio * mass_ratio))  # eV
    kappa = zeta / e_max

    sigma2E = 0.
    if kappa > 0.01:  # Vavilov-Gaussian regime
        sigma2E = zeta * e_max * (1. - beta2 / 2.)  # eV²
    else:  # Urban/Landau approximation
        # number of collisions
        I = 16. * Z ** 0.9  # eV
        f2 = 0.
        if Z > 2.:
            f2 = 2. / Z
        f1 = 1. - f2
        e2 = 10. * Z * Z  # eV
        e1 = (I / e2 ** f2) ** (1. / f1)  # eV

        mbbgg2 = 2.E9 * mass * beta2 * gamma2  # eV
        log_I = np.log(mbbgg2 / I) - beta2
        sigma1 = dedx * 1.0E9 * f1 / e1 * (np.log(mbbgg2 / e1) - beta2) / log_I * 0.6  # 1/cm
        sigma2 = dedx * 1.0E9 * f2 / e2 * (np.log(mbbgg2 / e2) - beta2) / log_I * 0.6  # 1/cm
        sigma3 = dedx * 1.0E9 * e_max / (I * (e_max + I) * np.log((e_max + I) / I)) * 0.4  # 1/cm

        n_coll = (sigma1 + sigma2 + sigma3) * step_cm

        if n_coll > 50.:  # truncated Landau distribution
            # width from lambda max (GEANT3 manual W5013)
            rlamed = -0.422784 - beta2 - np.log(zeta / e_max)
            rlamax = (0.60715 + 1.1934 * rlamed
                      + (0.67794 + 0.052382 * rlamed) * np.exp(0.94753 + 0.74442 * rlamed))
            if rlamax <= 1010.:
                sigma_alpha = (1.975560
                               + 9.898841e-02 * rlamax
                               - 2.828670e-04 * rlamax ** 2
                               + 5.345406e-07 * rlamax ** 3
                               - 4.942035e-10 * rlamax ** 4
                               + 1.729807e-13 * rlamax ** 5)
            else:
                sigma_alpha = 1.871887E+01 + 1.296254E-02 * rlamax
            # alpha = 54.6 corresponds to a 0.9996 maximum cut
            if sigma_alpha > 54.6:
                sigma_alpha = 54.6
            sigma2E = sigma_alpha * sigma_alpha * zeta * zeta  # eV²
        else:  # Urban model
            alpha = 0.996
            e_alpha = I / (1. - (alpha * e_max / (e_max + I)))  # eV
            mean_e32 = I * (e_max + I) / e_max * (e_alpha - I)  # eV²
            sigma2E = step_cm * (sigma1 * e1 * e1 + sigma2 * e2 * e2 + sigma3 * mean_e32)  # eV²

    return sigma2E * 1.E-18  # GeV²


@numba.njit(fastmath=True, cache=True)
def bremsstrahlung_energy_variance(step_cm: float, X0_cm: float, mom2: float) -> float:
    """
    Variance of the bremsstrahlung energy loss (Bethe-Heitler, E ≈ p).

    The factor 1.44 is an empirical correction on top of Bethe-Heitler.

    Returns:
        σ²(E) [GeV²], non-negative
    """
    minus_x_over_ln2 = -1.442695 * step_cm / X0_cm
    sigma2E = 1.44 * (3. ** minus_x_over_ln2 - 4. ** minus_x_over_ln2) * mom2
    if sigma2E < 0.:
        sigma2E = 0.
    return sigma2E


class EnergyLossFluctuations:
    """Straggling and bremsstrahlung contributions to the q/p variance."""

    def __init__(self, config: Optional[EffectsConfig] = None):
        self.config = config if config is not None else EffectsConfig()

    def add_ionization_straggling(self, noise: np.ndarray, ctx: StepContext,
                                  mom: float, beta2: float, gamma: float,
                                  gamma2: float, pdg: int) -> None:
        """
        Add ionization straggling of the step to ``noise[6, 6]``.

        Uses ``ctx.dedx``, so the momentum loss of the step must have been
        computed first.
        """
        if not (self.config.energy_loss_bethe_bloch and self.config.noise_bethe_bloch):
            return

        material = ctx.material
        if material is None or material.is_vacuum:
            return

        check_noise(noise)
        species = get_species(pdg)
        sigma2E = ionization_energy_variance(
            abs(ctx.step_size), ctx.dedx, beta2, gamma, gamma2, species.mass,
            float(species.charge), material.Z, material.A, material.density)

        noise[QOP, QOP] += species.charge ** 2 / beta2 / mom ** 4 * sigma2E

    def add_bremsstrahlung_fluctuation(self, noise: np.ndarray, ctx: StepContext,
                                       mom2: float, beta2: float, pdg: int) -> None:
        """Add bremsstrahlung fluctuations (electrons and positrons only) to ``noise[6, 6]``."""
        if not (self.config.energy_loss_brems and self.config.noise_brems):
            return

        species = get_species(pdg)
        if not species.is_electron:
            return

        material = ctx.material
        if material is None or material.is_vacuum:
            return

        check_noise(noise)
        charge = species.charge
        sigma2E = bremsstrahlung_energy_variance(abs(ctx.step_size),
                                                 material.radiation_length, mom2)

        noise[QOP, QOP] += charge ** 2 / beta2 / mom2 ** 2 * sigma2E
