"""Physics module: Energy loss, multiple scattering, energy-loss fluctuations."""

from matfx.physics.stopping_power import StoppingPower
from matfx.physics.scattering import MultipleScattering
from matfx.physics.straggling import EnergyLossFluctuations

__all__ = ["StoppingPower", "MultipleScattering", "EnergyLossFluctuations"]
