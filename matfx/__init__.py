"""
matfx: Material effects for charged-particle track propagation

Energy loss, process noise and material-aware step limitation for
particles traversing layered matter, for use inside track fits.

Modules:
    core: Materials, particle species, state vectors, configuration
    physics: Energy loss, multiple scattering, energy-loss fluctuations
    transport: Step limitation and the material effects engine
    io: Diagnostic dE/dx tables
"""

__version__ = "0.1.0"

from matfx.core.config import EffectsConfig
from matfx.core.material import MaterialProperties, VACUUM
from matfx.core.state import StepRecord, StepContext
from matfx.errors import MatFXError, PhysicsError, ConfigurationError, NumericalError
from matfx.transport.engine import MaterialEffects
from matfx.transport.step_limits import StepLimits, StepLimitType

__all__ = [
    "EffectsConfig",
    "MaterialProperties",
    "VACUUM",
    "StepRecord",
    "StepContext",
    "MatFXError",
    "PhysicsError",
    "ConfigurationError",
    "NumericalError",
    "MaterialEffects",
    "StepLimits",
    "StepLimitType",
]
