"""
Configuration of the material effects.

Example YAML file:

    energy_loss_bethe_bloch: true
    noise_bethe_bloch: true
    noise_coulomb: true
    energy_loss_brems: true
    noise_brems: true
    ignore_boundaries_between_equal_materials: true
    msc_model: Highland
    debug_level: 0
"""

from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Union

import yaml

from matfx.errors import ConfigurationError

# Multiple scattering models
MSC_MODELS = ('GEANE', 'Highland')

BOUNDARY_SEARCH_POLICIES = ('truncate', 'raise')


@dataclass
class EffectsConfig:
    """
    Switches and limits for material effects.

    Attributes:
        no_effects: Disable all material effects
        energy_loss_bethe_bloch: Ionization energy loss
        noise_bethe_bloch: Ionization straggling noise (needs ionization loss)
        noise_coulomb: Multiple scattering noise
        energy_loss_brems: Bremsstrahlung energy loss
        noise_brems: Bremsstrahlung noise (needs bremsstrahlung loss)
        ignore_boundaries_between_equal_materials: Merge boundaries between
            identical materials when limiting steps
        msc_model: 'GEANE' or 'Highland'
        debug_level: Verbosity of debug logging
        max_rel_mom_loss: Maximum relative momentum loss per extrapolation
        min_momentum: Minimum momentum for propagation [GeV/c]
        min_step: Smallest resolvable step [cm]
        max_boundary_iterations: Cap on the boundary search loop
        boundary_search_policy: 'truncate' or 'raise' when the cap is hit
    """
    no_effects: bool = False
    energy_loss_bethe_bloch: bool = True
    noise_bethe_bloch: bool = True
    noise_coulomb: bool = True
    energy_loss_brems: bool = True
    noise_brems: bool = True
    ignore_boundaries_between_equal_materials: bool = True
    msc_model: str = 'GEANE'
    debug_level: int = 0
    max_rel_mom_loss: float = 0.01
    min_momentum: float = 4.E-3
    min_step: float = 1.E-4  # 1 µm
    max_boundary_iterations: int = 100
    boundary_search_policy: str = 'truncate'

    def __post_init__(self):
        if self.msc_model not in MSC_MODELS:
            raise ConfigurationError(
                f"There is no MSC model called \"{self.msc_model}\". "
                f"Available: {list(MSC_MODELS)}")
        if self.boundary_search_policy not in BOUNDARY_SEARCH_POLICIES:
            raise ConfigurationError(
                f"Unknown boundary search policy '{self.boundary_search_policy}'. "
                f"Available: {list(BOUNDARY_SEARCH_POLICIES)}")

    @classmethod
    def from_dict(cls, values: dict) -> "EffectsConfig":
        """Build a config, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "EffectsConfig":
        """Load a config from a YAML file (empty file gives defaults)."""
        with open(path, 'r') as f:
            values = yaml.safe_load(f) or {}

        if not isinstance(values, dict):
            raise ConfigurationError(f"{path}: expected a mapping at top level")

        return cls.from_dict(values)

    def to_dict(self) -> dict:
        return asdict(self)
