"""
Material effects for track propagation.

Integrates:
    - Step-length limitation from material boundaries and momentum loss
    - Mean momentum loss over taken steps (RK4 in energy)
    - Process noise from straggling, multiple scattering and bremsstrahlung

Order of calls within one propagation step:

    ctx = effects.stepper(...)       # limits the step
    <caller advances the track by the tightest limit>
    dp = effects.effects(steps, ...) # momentum loss (and noise) of the taken steps
"""

import dataclasses
import logging
from typing import Optional, Sequence

import numpy as np

from matfx.core.config import EffectsConfig, MSC_MODELS
from matfx.core.particle import Species, get_species
from matfx.core.state import (DIRECTION, POSITION, StepContext, StepRecord,
                              check_noise)
from matfx.errors import ConfigurationError, NumericalError, PhysicsError
from matfx.physics.scattering import MultipleScattering
from matfx.physics.stopping_power import StoppingPower
from matfx.physics.straggling import EnergyLossFluctuations
from matfx.transport.interfaces import (MaterialOracle, StraightLinePropagator,
                                        TrajectoryPropagator)
from matfx.transport.step_limits import StepLimits, StepLimitType

logger = logging.getLogger(__name__)

# Steps shorter than this get no material effects [cm]
MIN_EFFECTS_PATH = 1.E-8


class MaterialEffects:
    """
    Material effects for one propagation context.

    The instance must be given a material oracle exactly once via
    :meth:`initialize`. It is not safe to share an instance between
    concurrently propagated tracks.

    Example:
        effects = MaterialEffects()
        effects.initialize(HomogeneousMedium(from_name('silicon')))
        limits = StepLimits()
        limits.set_limit(StepLimitType.S_MAX, 10.0)
        ctx = effects.stepper(state7, 1.0, 0.0, 2212, limits)
    """

    def __init__(self, config: Optional[EffectsConfig] = None):
        """
        Initialize material effects.

        Parameters:
            config: Effect switches and limits (defaults if None)
        """
        # own copy, the setters below modify it in place
        self.config = dataclasses.replace(config) if config is not None else EffectsConfig()

        # Physics modules share this copy, so later changes apply everywhere
        self.stopping_power = StoppingPower(self.config)
        self.scattering = MultipleScattering(self.config)
        self.fluctuations = EnergyLossFluctuations(self.config)

        self._oracle: Optional[MaterialOracle] = None

    def __enter__(self) -> "MaterialEffects":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        """Release the material oracle."""
        self._oracle = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def initialize(self, oracle: MaterialOracle):
        """Attach the material oracle; may be called only once."""
        if self._oracle is not None:
            raise ConfigurationError("MaterialEffects: already initialized with a material oracle")

        self._oracle = oracle
        if self.config.debug_level > 1:
            oracle.set_debug_level(self.config.debug_level - 1)

    @property
    def oracle(self) -> MaterialOracle:
        return self._require_oracle()

    @property
    def is_initialized(self) -> bool:
        return self._oracle is not None

    def set_no_effects(self, flag: bool = True):
        self.config.no_effects = flag

    def set_msc_model(self, model_name: str):
        """Select the multiple scattering model ('GEANE' or 'Highland')."""
        if model_name not in MSC_MODELS:
            raise ConfigurationError(
                f"There is no MSC model called \"{model_name}\". "
                f"Maybe it is not implemented or you misspelled the model name")
        self.config.msc_model = model_name

    def set_debug_level(self, level: int):
        self.config.debug_level = level
        if self._oracle is not None and level > 1:
            self._oracle.set_debug_level(level - 1)

    def _require_oracle(self) -> MaterialOracle:
        if self._oracle is None:
            raise ConfigurationError(
                "MaterialEffects hasn't been initialized with a material oracle")
        return self._oracle

    # ------------------------------------------------------------------
    # Energy loss
    # ------------------------------------------------------------------

    def dedx(self, energy: float, pdg: int, material) -> float:
        """Energy-loss rate [GeV/cm] of particle ``pdg`` with total energy ``energy``."""
        species = get_species(pdg)
        return self.stopping_power.dedx(energy, species.mass, species.charge, pdg, material)

    def momentum_loss(self, ctx: StepContext, step_sign: float, mom: float,
                      linear: bool, pdg: int) -> float:
        """Momentum loss over ``ctx.step_size`` (see :meth:`StoppingPower.momentum_loss`)."""
        return self.stopping_power.momentum_loss(ctx, step_sign, mom, linear, pdg)

    # ------------------------------------------------------------------
    # Step limitation
    # ------------------------------------------------------------------

    def stepper(self, state7: np.ndarray, mom: float, rel_mom_loss: float,
                pdg: int, limits: StepLimits, var_field: bool = False,
                propagator: Optional[TrajectoryPropagator] = None) -> StepContext:
        """
        Limit the next step by material boundaries and momentum loss.

        Installs the MOMENTUM_LOSS and BOUNDARY limits into ``limits``. The
        caller's state vector is not modified.

        Parameters:
            state7: Current state [x, y, z, a_x, a_y, a_z, q/p]
            mom: Current momentum [GeV/c]
            rel_mom_loss: Relative momentum loss accumulated so far
            pdg: PDG code of the particle
            limits: Step limits, updated in place
            var_field: The magnetic field is not uniform
            propagator: Moves the trial state across merged boundaries
                (straight lines if None)

        Returns:
            StepContext holding only the material at the start of the step
            and the updated relative momentum loss in ``rel_mom_loss``; the
            step length and energy fields are left at their defaults, they
            belong to the step actually taken (see :meth:`effects`)
        """
        cfg = self.config
        ctx = StepContext(rel_mom_loss=rel_mom_loss)

        if mom < cfg.min_momentum:
            raise PhysicsError(f"MaterialEffects::stepper ==> momentum too low: {mom * 1000.} MeV")

        if cfg.no_effects:
            return ctx

        oracle = self._require_oracle()

        if rel_mom_loss > cfg.max_rel_mom_loss:
            limits.set_limit(StepLimitType.MOMENTUM_LOSS, 0.)
            return ctx

        s_max = limits.lowest_limit_signed_value()
        if abs(s_max) < cfg.min_step:
            return ctx

        if propagator is None:
            propagator = StraightLinePropagator()

        sign = limits.step_sign

        # step off the current surface before asking for the material
        state = self._min_step(state7, sign)
        ctx.material = oracle.properties(state[POSITION])

        if cfg.debug_level > 0:
            logger.debug("current material: %s", ctx.material)

        # limit due to momentum loss, from a linear estimate over 1 cm
        rel_mom_loss_per_cm = 0.
        if not ctx.material.is_vacuum:
            per_cm = StepContext(material=ctx.material, step_size=1.)
            rel_mom_loss_per_cm = self.stopping_power.momentum_loss(per_cm, sign, mom, True, pdg) / mom

        if rel_mom_loss_per_cm != 0.:  # negative for backward steps
            max_step_mom_loss = abs((cfg.max_rel_mom_loss - abs(rel_mom_loss)) / rel_mom_loss_per_cm)
            limits.set_limit(StepLimitType.MOMENTUM_LOSS, max_step_mom_loss)

            if cfg.debug_level > 0:
                logger.debug("momentum loss exceeded after a step of %g; relative loss up to now = %g",
                             max_step_mom_loss, rel_mom_loss)

        # now look for boundaries
        s_max = limits.lowest_limit_signed_value()
        distance = sign * cfg.min_step
        boundary_step = s_max

        for _ in range(cfg.max_boundary_iterations):
            step = oracle.find_next_boundary(state, boundary_step, var_field)

            if cfg.debug_level > 0:
                logger.debug("boundary search made a step of %g", step)

            distance += step
            boundary_step -= step

            if not cfg.ignore_boundaries_between_equal_materials:
                break

            if abs(distance) >= abs(s_max):
                break

            # move to the boundary and just across it
            state = propagator.advance(state, step, var_field)
            state = self._min_step(state, sign)
            material_after = oracle.properties(state[POSITION])

            if cfg.debug_level > 0:
                logger.debug("material after step: %s", material_after)

            if material_after != ctx.material:
                break
        else:
            self._boundary_search_exhausted(distance)

        limits.set_limit(StepLimitType.BOUNDARY, distance)

        ctx.rel_mom_loss = rel_mom_loss + rel_mom_loss_per_cm * limits.lowest_limit_value()
        return ctx

    def _min_step(self, state7: np.ndarray, sign: float) -> np.ndarray:
        state = np.array(state7, dtype=np.float64)
        state[POSITION] += sign * self.config.min_step * state[DIRECTION]
        return state

    def _boundary_search_exhausted(self, distance: float):
        msg = (f"boundary search stopped after {self.config.max_boundary_iterations} "
               f"iterations at a distance of {distance} cm")
        if self.config.boundary_search_policy == 'raise':
            raise NumericalError(msg)
        logger.warning(msg)

    # ------------------------------------------------------------------
    # Effects of taken steps
    # ------------------------------------------------------------------

    def effects(self, steps: Sequence[StepRecord], mom: float, pdg: int,
                noise: Optional[np.ndarray] = None, start: int = 0,
                stop: Optional[int] = None) -> float:
        """
        Momentum loss and process noise of steps that have been taken.

        Parameters:
            steps: Sub-steps of the propagation
            mom: Momentum before the first step [GeV/c]
            pdg: PDG code of the particle
            noise: 7×7 process noise matrix to add to; None for no noise
            start, stop: Range of ``steps`` to use

        Returns:
            Total momentum loss [GeV/c]
        """
        cfg = self.config

        if cfg.debug_level > 0:
            logger.debug("MaterialEffects::effects")

        if cfg.no_effects:
            return 0.

        self._require_oracle()

        if noise is not None:
            check_noise(noise)

        species = get_species(pdg)
        mom_loss = 0.

        for record in steps[start:stop]:
            real_path = record.step_size
            if abs(real_path) < MIN_EFFECTS_PATH:
                continue

            if record.material.is_vacuum:
                continue

            if cfg.debug_level > 0:
                logger.debug("calculate material effects%s for step size = %g; %s",
                             " and noise" if noise is not None else "",
                             real_path, record.material)

            step_sign = -1. if real_path < 0 else 1.
            ctx = StepContext(material=record.material, step_size=abs(real_path))

            mom_loss += self.stopping_power.momentum_loss(ctx, step_sign, mom - mom_loss, False, pdg)

            if noise is not None:
                self._add_noise(noise, ctx, record.direction, species)

        if mom_loss >= mom:
            raise PhysicsError("MaterialEffects::effects ==> momLoss >= momentum, aborting extrapolation!")

        return mom_loss

    def _add_noise(self, noise: np.ndarray, ctx: StepContext,
                   direction: np.ndarray, species: Species):
        """Noise of one step, evaluated at the mid-step energy from the momentum loss."""
        if ctx.energy <= species.mass:
            raise PhysicsError("MaterialEffects::effects - Energy <= mass")

        gamma = ctx.energy / species.mass
        gamma2 = gamma * gamma
        beta2 = 1. - 1. / gamma2
        p = ctx.energy * np.sqrt(beta2)
        p2 = p * p

        self.fluctuations.add_ionization_straggling(noise, ctx, p, beta2, gamma, gamma2, species.pdg)
        self.scattering.add_noise(noise, ctx, direction, p2, beta2, species.charge)
        self.fluctuations.add_bremsstrahlung_fluctuation(noise, ctx, p2, beta2, species.pdg)
