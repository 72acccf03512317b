"""
Mean energy loss of charged particles in matter.

Ionization loss follows the Bethe-Bloch formula for all species; electrons
and positrons additionally lose energy by bremsstrahlung, using the GEANT3
(gbrele) parameterization with the Migdal correction.

Units: energies and momenta in GeV, lengths in cm, dE/dx in GeV/cm.

References:
    - PDG Review of Particle Physics (Passage of particles through matter)
    - GEANT3 manual, PHYS 340 (bremsstrahlung energy loss)
"""

import logging
from typing import Optional

import numpy as np
import numba

from matfx.core.config import EffectsConfig
from matfx.core.material import MaterialProperties
from matfx.core.particle import ELECTRON_MASS, get_species
from matfx.core.state import StepContext
from matfx.errors import PhysicsError

logger = logging.getLogger(__name__)

# Bethe-Bloch is not valid below this beta*gamma
BETA_GAMMA_MIN = 0.05

# Bremsstrahlung fit coefficients (Migdal corrected). Index 0 is unused so
# that the 1-based indexing of the fit can be kept.
_BREMS_C = np.array([
    0.0, -0.960613E-01, 0.631029E-01, -0.142819E-01, 0.150437E-02, -0.733286E-04,
    0.131404E-05, 0.859343E-01, -0.529023E-01, 0.131899E-01, -0.159201E-02, 0.926958E-04,
    -0.208439E-05, -0.684096E+01, 0.370364E+01, -0.786752E+00, 0.822670E-01, -0.424710E-02,
    0.867980E-04, -0.200856E+01, 0.129573E+01, -0.306533E+00, 0.343682E-01, -0.185931E-02,
    0.392432E-04, 0.127538E+01, -0.515705E+00, 0.820644E-01, -0.641997E-02, 0.245913E-03,
    -0.365789E-05, 0.115792E+00, -0.463143E-01, 0.725442E-02, -0.556266E-03, 0.208049E-04,
    -0.300895E-06, -0.271082E-01, 0.173949E-01, -0.452531E-02, 0.569405E-03, -0.344856E-04,
    0.803964E-06, 0.419855E-02, -0.277188E-02, 0.737658E-03, -0.939463E-04, 0.569748E-05,
    -0.131737E-06, -0.318752E-03, 0.215144E-03, -0.579787E-04, 0.737972E-05, -0.441485E-06,
    0.994726E-08, 0.938233E-05, -0.651642E-05, 0.177303E-05, -0.224680E-06, 0.132080E-07,
    -0.288593E-09, -0.245667E-03, 0.833406E-04, -0.129217E-04, 0.915099E-06, -0.247179E-07,
    0.147696E-03, -0.498793E-04, 0.402375E-05, 0.989281E-07, -0.133378E-07, -0.737702E-02,
    0.333057E-02, -0.553141E-03, 0.402464E-04, -0.107977E-05, -0.641533E-02, 0.290113E-02,
    -0.477641E-03, 0.342008E-04, -0.900582E-06, 0.574303E-05, 0.908521E-04, -0.256900E-04,
    0.239921E-05, -0.741271E-07, -0.341260E-04, 0.971711E-05, -0.172031E-06, -0.119455E-06,
    0.704166E-08, 0.341740E-05, -0.775867E-06, -0.653231E-07, 0.225605E-07, -0.114860E-08,
    -0.119391E-06, 0.194885E-07, 0.588959E-08, -0.127589E-08, 0.608247E-10,
], dtype=np.float64)
_BREMS_XI = 2.51
_BREMS_BETA = 0.99
_BREMS_VL = 0.00004

_BREMS_BCUT = 10000.  # soft bremsstrahlung is integrated up to this energy
_BREMS_THIGH = 100.
_BREMS_CHIGH = 50.


@numba.njit(fastmath=True, cache=True)
def bethe_bloch(beta2: float, gamma: float, gamma2: float, mass: float,
                charge: float, Z: float, A: float, density: float,
                mean_excitation: float) -> float:
    """
    Mean ionization energy loss rate.

    Parameters:
        beta2: β²
        gamma: Lorentz factor γ
        gamma2: γ²
        mass: Particle mass [GeV/c²]
        charge: Particle charge [e]
        Z, A, density: Material atomic number, mass [g/mol] and density [g/cm³]
        mean_excitation: Mean excitation energy [eV]

    Returns:
        dE/dx [GeV/cm], clamped to be non-negative
    """
    result = 0.307075 * Z / A * density / beta2 * charge * charge
    mass_ratio = ELECTRON_MASS / mass
    argument = (gamma2 * beta2 * ELECTRON_MASS * 1.E3 * 2. /
                ((1.E-6 * mean_excitation) *
                 np.sqrt(1. + 2. * gamma * mass_ratio + mass_ratio * mass_ratio)))
    result *= np.log(argument) - beta2  # MeV/cm
    result *= 1.E-3  # GeV/cm

    # The formula dips below zero close to its validity limit
    if result < 0.:
        result = 0.

    return result


@numba.njit(fastmath=True, cache=True)
def bremsstrahlung(mom: float, is_positron: bool, Z: float, A: float,
                   density: float) -> float:
    """
    Mean bremsstrahlung energy loss rate of an electron or positron.

    A bi-quadratic polynomial fit in X = ln(T/m_e) and Y = ln(k_c/(E*v_l)),
    where the coefficient set for Y > 0 differs from the one for Y <= 0.
    Positrons get an additional suppression factor.

    Parameters:
        mom: Momentum [GeV/c]
        is_positron: Apply the positron correction
        Z, A, density: Material atomic number, mass [g/mol] and density [g/cm³]

    Returns:
        dE/dx [GeV/cm], non-negative
    """
    bcut = _BREMS_BCUT
    if bcut > mom:
        bcut = mom

    # kinetic energy and cut confined to the range of the fit
    if mom > _BREMS_THIGH:
        T = _BREMS_THIGH
        if bcut >= _BREMS_THIGH:
            kc = _BREMS_CHIGH
        else:
            kc = bcut
    else:
        T = mom
        kc = bcut

    E = T + ELECTRON_MASS  # total electron energy
    if bcut > T:
        kc = T

    X = np.log(T / ELECTRON_MASS)
    Y = np.log(kc / (E * _BREMS_VL))

    S = 0.
    YY = 1.
    for i in range(1, 7):
        XX = 1.
        for j in range(1, 7):
            k = 6 * i + j - 6
            if i > 2 and Y > 0.:
                k += 24
            S += _BREMS_C[k] * XX * YY
            XX *= X
        YY *= Y

    SS = 0.
    YY = 1.
    for i in range(1, 6):
        XX = 1.
        for j in range(1, 6):
            k = 5 * i + j + 55
            if i > 2 and Y > 0.:
                k += 15
            SS += _BREMS_C[k] * XX * YY
            XX *= X
        YY *= Y

    S += Z * SS

    dedx = 0.
    if S > 0.:
        # Migdal correction
        corr = 1. / (1. + 0.805485E-10 * density * Z * E * E / (A * kc * kc))

        fac = Z * (Z + _BREMS_XI) * E * E / (E + ELECTRON_MASS)
        fac *= np.exp(_BREMS_BETA * np.log(kc * corr / T))
        if fac <= 0.:
            return 0.
        dedx = fac * S  # GeV barn

        if mom >= _BREMS_THIGH:
            if bcut < _BREMS_THIGH:
                rat = bcut / mom
                S = 1. - 0.5 * rat + 2. * rat * rat / 9.
                rat = bcut / T
                S /= 1. - 0.5 * rat + 2. * rat * rat / 9.
            else:
                rat = bcut / mom
                S = bcut * (1. - 0.5 * rat + 2. * rat * rat / 9.)
                rat = kc / T
                S /= kc * (1. - 0.5 * rat + 2. * rat * rat / 9.)
            dedx *= S

        dedx *= 0.60221367 * density / A  # GeV/cm

    if dedx < 0.:
        dedx = 0.

    factor = 1.
    if is_positron:
        # annihilation competes with bremsstrahlung (sigmoid fit in p and Z)
        eta = 0.
        if Z > 0.:
            x = np.log(7522100. * mom / (Z * Z))
            if x > -8.:
                if x >= 9.:
                    eta = 1.
                else:
                    w = 0.415 * x + 0.0021 * x ** 3 + 0.00054 * x ** 5
                    eta = 0.5 + np.arctan(w) / np.pi

        if eta < 0.0001:
            factor = 1.E-10
        elif eta > 0.9999:
            factor = 1.
        else:
            e0 = bcut / mom
            if e0 > 1.:
                e0 = 1.
            if e0 < 1.E-8:
                factor = 1.
            else:
                factor = eta * (1. - (1. - e0) ** (1. / eta)) / e0

    return factor * dedx


class StoppingPower:
    """
    Energy-loss rate and momentum loss over a step.

    Which processes contribute is controlled by ``energy_loss_bethe_bloch``
    and ``energy_loss_brems`` of the config.

    Usage:
        sp = StoppingPower()
        ctx = StepContext(material=from_name('silicon'), step_size=1.0)
        dp = sp.momentum_loss(ctx, 1., 1.0, False, 2212)
    """

    def __init__(self, config: Optional[EffectsConfig] = None):
        """
        Initialize energy-loss calculator.

        Parameters:
            config: Effect switches (defaults if None)
        """
        self.config = config if config is not None else EffectsConfig()

    def dedx(self, energy: float, mass: float, charge: float, pdg: int,
             material: MaterialProperties) -> float:
        """
        Total energy-loss rate.

        Parameters:
            energy: Total energy [GeV]
            mass: Particle mass [GeV/c²]
            charge: Particle charge [e]
            pdg: PDG code of the particle
            material: Material traversed

        Returns:
            dE/dx [GeV/cm]
        """
        if energy <= mass:
            raise PhysicsError(f"Energy <= mass: E = {energy} GeV, m = {mass} GeV")

        if material.is_vacuum:
            return 0.

        gamma = energy / mass
        gamma2 = gamma * gamma
        beta2 = 1. - 1. / gamma2
        mom = energy * np.sqrt(beta2)

        result = 0.
        if self.config.energy_loss_bethe_bloch:
            result += self.dedx_bethe_bloch(beta2, gamma, gamma2, mass, charge, material)
        if self.config.energy_loss_brems:
            result += self.dedx_brems(mom, pdg, material)

        return result

    @staticmethod
    def dedx_bethe_bloch(beta2: float, gamma: float, gamma2: float, mass: float,
                         charge: float, material: MaterialProperties) -> float:
        """Ionization loss [GeV/cm]; raises below βγ = 0.05."""
        if beta2 * gamma2 < BETA_GAMMA_MIN * BETA_GAMMA_MIN:
            raise PhysicsError(
                f"beta*gamma = {np.sqrt(beta2 * gamma2):.4g} < {BETA_GAMMA_MIN}, "
                f"Bethe-Bloch implementation not valid anymore")

        return bethe_bloch(beta2, gamma, gamma2, mass, float(charge),
                           material.Z, material.A, material.density,
                           material.mean_excitation_energy)

    @staticmethod
    def dedx_brems(mom: float, pdg: int, material: MaterialProperties) -> float:
        """Bremsstrahlung loss [GeV/cm]; zero except for electrons and positrons."""
        species = get_species(pdg)
        if not species.is_electron:
            return 0.

        return bremsstrahlung(mom, species.is_positron, material.Z, material.A,
                              material.density)

    def momentum_loss(self, ctx: StepContext, step_sign: float, mom: float,
                      linear: bool, pdg: int) -> float:
        """
        Momentum lost over a step of length ``ctx.step_size`` in ``ctx.material``.

        With ``linear`` the loss rate at the start of the step is used (cheap,
        for step-length estimates). Otherwise dE/dx is integrated over the
        energy with 4th order Runge-Kutta:

            dEdx1 = dEdx(E0)
            dEdx2 = dEdx(E0 - h/2 * dEdx1)
            dEdx3 = dEdx(E0 - h/2 * dEdx2)
            dEdx4 = dEdx(E0 - h   * dEdx3)

        Stores the mean loss rate and the mid-step total energy in ``ctx``;
        the noise calculations for the same step read them.

        Parameters:
            ctx: Context of the current step
            step_sign: +1 forward, -1 backward
            mom: Momentum at the start of the step [GeV/c]
            linear: Use a single evaluation instead of RK4
            pdg: PDG code of the particle

        Returns:
            Momentum loss [GeV/c], positive for forward steps. Equal to
            ``mom`` if the particle stops within the step.
        """
        species = get_species(pdg)
        mass = species.mass
        charge = species.charge
        material = ctx.material

        E0 = float(np.hypot(mom, mass))
        step = ctx.step_size * step_sign  # signed

        if material.is_vacuum:
            ctx.dedx = 0.
            ctx.energy = E0
            return 0.

        dedx1 = self.dedx(E0, mass, charge, pdg, material)

        if linear:
            dedx = dedx1
        else:
            dedx = self._rk4_dedx(E0, dedx1, step, mass, charge, pdg, material)
            if dedx is None:
                # particle stops inside the step
                ctx.dedx = dedx1
                ctx.energy = mass
                return mom

        ctx.dedx = dedx
        ctx.energy = E0 - dedx * step * 0.5

        dE = step * dedx  # positive for positive step_sign

        if E0 - dE <= mass:
            # step would stop the particle (E_kin <= 0)
            return mom

        mom_loss = mom - np.sqrt((E0 - dE) ** 2 - mass * mass)

        if self.config.debug_level > 0:
            logger.debug("momentum_loss: mom = %g; E0 = %g; dEdx = %g; dE = %g; mass = %g",
                         mom, E0, dedx, dE, mass)

        return float(mom_loss)

    def _rk4_dedx(self, E0: float, dedx1: float, step: float, mass: float,
                  charge: float, pdg: int,
                  material: MaterialProperties) -> Optional[float]:
        """
        RK4 mean of dE/dx over the step.

        Returns None if an intermediate energy falls to the point where the
        particle is considered stopped: the rest mass, or the Bethe-Bloch
        validity floor when ionization loss is enabled.
        """
        E_stop = mass
        if self.config.energy_loss_bethe_bloch:
            E_stop = float(np.hypot(BETA_GAMMA_MIN * mass, mass))

        E1 = E0 - dedx1 * step / 2.
        if E1 <= E_stop:
            return None
        dedx2 = self.dedx(E1, mass, charge, pdg, material)

        E2 = E0 - dedx2 * step / 2.
        if E2 <= E_stop:
            return None
        dedx3 = self.dedx(E2, mass, charge, pdg, material)

        E3 = E0 - dedx3 * step
        if E3 <= E_stop:
            return None
        dedx4 = self.dedx(E3, mass, charge, pdg, material)

        return (dedx1 + 2. * dedx2 + 2. * dedx3 + dedx4) / 6.


# ============================================================================
# Example Usage
# ============================================================================

if __name__ == "__main__":
    from matfx.core.material import from_name

    silicon = from_name('silicon')
    sp = StoppingPower()

    print("\nEnergy loss in 1 cm of silicon:")
    for pdg, name in [(2212, 'proton'), (13, 'mu-'), (11, 'e-')]:
        ctx = StepContext(material=silicon, step_size=1.0)
        dp = sp.momentum_loss(ctx, 1., 1.0, False, pdg)
        print(f"  {name:7s} @ 1 GeV/c: dp = {dp * 1000:.3f} MeV/c, "
              f"<dE/dx> = {ctx.dedx * 1000:.3f} MeV/cm")
