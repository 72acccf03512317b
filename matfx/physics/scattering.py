"""
Multiple Coulomb scattering noise.

Two models for the variance of the projected scattering angle are
available:
    - 'GEANE': linear in path length (PANDA report PV/01-07, eq. 43)
    - 'Highland': PDG formula, not linear in path length

The angular variance is turned into the position/direction block of the
7×7 process noise matrix.

References:
    - Highland, NIM 129, 497 (1975)
    - PDG Review of Particle Physics, Sec. 27.3 (Passage of particles through matter)
"""

from typing import Optional

import numpy as np
import numba

from matfx.core.config import EffectsConfig
from matfx.core.material import MaterialProperties
from matfx.core.state import StepContext, check_noise


@numba.njit(fastmath=True, cache=True)
def geane_variance(step_cm: float, charge: float, beta2: float, mom2: float,
                   Z: float, X0_cm: float) -> float:
    """
    Variance of the projected scattering angle, linear in path length.

        σ² = 225e-6 z²/(β²p²) · x/X0 · Z/(Z+1) · ln(159 Z^-1/3) / ln(287 Z^-1/2)

    Parameters:
        step_cm: Path length [cm]
        charge: Particle charge [e]
        beta2: β²
        mom2: Momentum squared [(GeV/c)²]
        Z: Atomic number of the material
        X0_cm: Radiation length of material [cm]

    Returns:
        σ² [rad²]
    """
    return (225.E-6 * charge * charge / (beta2 * mom2) * step_cm / X0_cm
            * Z / (Z + 1.) * np.log(159. * Z ** (-1. / 3.)) / np.log(287. * Z ** (-0.5)))


@numba.njit(fastmath=True, cache=True)
def highland_variance(step_cm: float, charge: float, beta2: float, mom2: float,
                      X0_cm: float) -> float:
    """
    Variance of the projected scattering angle from the Highland formula.

        θ0 = (13.6 MeV / βcp) z sqrt(x/X0) [1 + 0.038 ln(x/X0)]

    Parameters:
        step_cm: Path length [cm], must be positive
        charge: Particle charge [e]
        beta2: β²
        mom2: Momentum squared [(GeV/c)²]
        X0_cm: Radiation length of material [cm]

    Returns:
        σ² = θ0² [rad²]
    """
    x_over_X0 = step_cm / X0_cm
    log_cor = 1. + 0.038 * np.log(x_over_X0)
    return 0.0136 * 0.0136 * charge * charge / (beta2 * mom2) * x_over_X0 * log_cor * log_cor


def msc_covariance(sigma2: float, step_cm: float, direction: np.ndarray) -> np.ndarray:
    """
    Position/direction covariance from scattering along a straight step.

    The deflection is isotropic in the plane perpendicular to the direction
    ``a``, whose projector is P = 1 - a aᵀ. For a step of length s:

        Cov(r, r) = σ² s²/3 P,   Cov(r, a) = σ² s/2 P,   Cov(a, a) = σ² P

    Parameters:
        sigma2: Angular variance [rad²]
        step_cm: Step length [cm]
        direction: Unit direction vector [a_x, a_y, a_z]

    Returns:
        Symmetric 6×6 block ordered [x, y, z, a_x, a_y, a_z]
    """
    a = np.asarray(direction, dtype=np.float64)
    transverse = np.eye(3) - np.outer(a, a)
    weights = np.array([[step_cm * step_cm / 3., step_cm * 0.5],
                        [step_cm * 0.5, 1.]])
    return sigma2 * np.kron(weights, transverse)


class MultipleScattering:
    """
    Multiple scattering contribution to the process noise.

    Usage:
        ms = MultipleScattering(EffectsConfig(msc_model='Highland'))
        ms.add_noise(noise, ctx, direction, mom2, beta2, charge)
    """

    def __init__(self, config: Optional[EffectsConfig] = None):
        self.config = config if config is not None else EffectsConfig()

    def variance(self, step_cm: float, charge: float, beta2: float, mom2: float,
                 material: MaterialProperties) -> float:
        """Angular variance [rad²] of the selected model, clamped at zero."""
        if self.config.msc_model == 'GEANE':
            sigma2 = geane_variance(step_cm, float(charge), beta2, mom2,
                                    material.Z, material.radiation_length)
        else:
            sigma2 = highland_variance(step_cm, float(charge), beta2, mom2,
                                       material.radiation_length)

        return sigma2 if sigma2 > 0. else 0.

    def add_noise(self, noise: np.ndarray, ctx: StepContext, direction: np.ndarray,
                  mom2: float, beta2: float, charge: float) -> None:
        """
        Add the scattering noise of the step to ``noise`` (in place).

        Parameters:
            noise: 7×7 process noise matrix
            ctx: Context of the current step (material and step length)
            direction: Unit direction vector at the start of the step
            mom2: Momentum squared [(GeV/c)²]
            beta2: β²
            charge: Particle charge [e]
        """
        if not self.config.noise_coulomb:
            return

        material = ctx.material
        step = abs(ctx.step_size)
        if material is None or material.is_vacuum or step <= 0.:
            return

        check_noise(noise)
        sigma2 = self.variance(step, charge, beta2, mom2, material)
        noise[:6, :6] += msc_covariance(sigma2, step, direction)


# ============================================================================
# Example Usage
# ============================================================================

if __name__ == "__main__":
    from matfx.core.material import MATERIAL_PROPERTIES

    # 1 GeV/c proton
    mom = 1.0
    mass = 0.938272
    beta2 = mom * mom / (mom * mom + mass * mass)
    step = 0.1  # cm

    print(f"\nRMS angles for {step} cm step (1 GeV/c proton):")
    for name in ['water', 'air', 'aluminum', 'silicon']:
        mat = MATERIAL_PROPERTIES[name]
        theta_geane = np.sqrt(geane_variance(step, 1., beta2, mom * mom, mat.Z,
                                             mat.radiation_length))
        theta_highland = np.sqrt(highland_variance(step, 1., beta2, mom * mom,
                                                   mat.radiation_length))
        print(f"  {name:10s}: GEANE {theta_geane * 1000:6.3f} mrad, "
              f"Highland {theta_highland * 1000:6.3f} mrad")
