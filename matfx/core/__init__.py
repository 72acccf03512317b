"""Core module: Materials, particle species, state and configuration."""

from matfx.core.config import EffectsConfig
from matfx.core.material import MaterialProperties, VACUUM, from_name
from matfx.core.particle import Species, get_species
from matfx.core.state import StepRecord, StepContext, make_state, zero_noise

__all__ = [
    "EffectsConfig",
    "MaterialProperties",
    "VACUUM",
    "from_name",
    "Species",
    "get_species",
    "StepRecord",
    "StepContext",
    "make_state",
    "zero_noise",
]
