"""
Particle species identified by PDG Monte Carlo codes.

Masses in GeV/c², charges in units of the elementary charge.
"""

from dataclasses import dataclass
from typing import Dict

from matfx.errors import ConfigurationError

ELECTRON_MASS = 0.51099895E-3  # GeV/c²


@dataclass(frozen=True)
class Species:
    """A charged particle species."""
    pdg: int
    name: str
    mass: float
    charge: int

    @property
    def is_electron(self) -> bool:
        """True for electrons and positrons (the only radiating species)."""
        return abs(self.pdg) == 11

    @property
    def is_positron(self) -> bool:
        return self.pdg == -11


def _with_antiparticles(*species: Species) -> Dict[int, Species]:
    table = {}
    for s in species:
        table[s.pdg] = s
        table[-s.pdg] = Species(-s.pdg, 'anti-' + s.name, s.mass, -s.charge)
    return table


SPECIES: Dict[int, Species] = _with_antiparticles(
    Species(11, 'e-', ELECTRON_MASS, -1),
    Species(13, 'mu-', 0.1056583755, -1),
    Species(211, 'pi+', 0.13957039, 1),
    Species(321, 'K+', 0.493677, 1),
    Species(2212, 'proton', 0.93827208816, 1),
    Species(1000010020, 'deuteron', 1.87561294257, 1),
    Species(1000010030, 'triton', 2.80892113298, 1),
    Species(1000020030, 'He-3', 2.80839160743, 2),
    Species(1000020040, 'alpha', 3.7273794066, 2),
)
SPECIES[-11] = Species(-11, 'e+', ELECTRON_MASS, 1)
SPECIES[-13] = Species(-13, 'mu+', 0.1056583755, 1)
SPECIES[-211] = Species(-211, 'pi-', 0.13957039, -1)
SPECIES[-321] = Species(-321, 'K-', 0.493677, -1)


def get_species(pdg: int) -> Species:
    """Look up a species by PDG code."""
    try:
        return SPECIES[pdg]
    except KeyError:
        raise ConfigurationError(f"Unknown particle with PDG code {pdg}") from None


def parse_particle_type(particle_type: str) -> int:
    """
    Parse particle string to PDG code.

    Examples:
        'proton' or 'H-1' → 2212
        'e-' or 'electron' → 11
        'alpha' or 'He-4' → 1000020040
    """
    particles = {
        'electron': 11,
        'e-': 11,
        'positron': -11,
        'e+': -11,
        'mu-': 13,
        'muon': 13,
        'mu+': -13,
        'pi+': 211,
        'pion': 211,
        'pi-': -211,
        'K+': 321,
        'kaon': 321,
        'K-': -321,
        'proton': 2212,
        'H-1': 2212,
        'antiproton': -2212,
        'deuteron': 1000010020,
        'H-2': 1000010020,
        'triton': 1000010030,
        'H-3': 1000010030,
        'He-3': 1000020030,
        'He-4': 1000020040,
        'alpha': 1000020040,
    }
    if particle_type not in particles:
        raise ConfigurationError(f"Unknown particle type '{particle_type}'. "
                                 f"Available: {list(particles.keys())}")
    return particles[particle_type]
