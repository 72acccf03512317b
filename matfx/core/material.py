"""
Material properties seen by a particle along its path.

Units follow the tracking convention used throughout matfx:
density [g/cm³], A [g/mol], radiation length [cm], mean excitation energy [eV].
"""

from dataclasses import dataclass
from typing import Dict

from matfx.errors import ConfigurationError

# Materials with Z at or below this value are treated as vacuum
VACUUM_Z_THRESHOLD = 1.E-3


@dataclass(frozen=True)
class MaterialProperties:
    """
    Snapshot of the material at a point.

    Compared by value, so two snapshots of the same medium on either side of
    a geometric boundary are equal.

    Attributes:
        density: Density [g/cm³]
        Z: (Effective) atomic number
        A: (Effective) atomic mass [g/mol]
        radiation_length: Radiation length X0 [cm]
        mean_excitation_energy: Mean excitation energy I [eV]
    """
    density: float
    Z: float
    A: float
    radiation_length: float
    mean_excitation_energy: float

    @property
    def is_vacuum(self) -> bool:
        """True if no material effects should be computed."""
        return self.Z <= VACUUM_Z_THRESHOLD

    def __str__(self) -> str:
        return (f"density = {self.density}; Z = {self.Z}; A = {self.A}; "
                f"radiation length = {self.radiation_length}; "
                f"mean excitation energy = {self.mean_excitation_energy}")


VACUUM = MaterialProperties(0.0, 0.0, 0.0, 1.E30, 0.0)


# Material database
MATERIAL_PROPERTIES: Dict[str, MaterialProperties] = {
    'water': MaterialProperties(1.0, 7.42, 13.37, 36.08, 75.0),
    'aluminum': MaterialProperties(2.70, 13.0, 26.98, 8.897, 166.0),
    'polyethylene': MaterialProperties(0.94, 5.45, 11.19, 47.46, 57.4),
    'muscle': MaterialProperties(1.05, 7.46, 13.52, 34.36, 74.7),
    'air': MaterialProperties(0.001205, 7.37, 14.46, 30423.0, 85.7),
    'graphite': MaterialProperties(2.21, 6.0, 12.01, 19.32, 78.0),
    'silicon': MaterialProperties(2.33, 14.0, 28.0855, 9.37, 173.0),
    'iron': MaterialProperties(7.874, 26.0, 55.845, 1.757, 286.0),
}


def from_name(material: str) -> MaterialProperties:
    """
    Look up a material by name.

    Parameters:
        material: Material name (see MATERIAL_PROPERTIES), case-insensitive

    Returns:
        MaterialProperties of the material
    """
    name = material.lower()
    if name == 'vacuum':
        return VACUUM

    if name not in MATERIAL_PROPERTIES:
        raise ConfigurationError(f"Unknown material '{material}'. "
                                 f"Available: {list(MATERIAL_PROPERTIES.keys())}")

    return MATERIAL_PROPERTIES[name]
