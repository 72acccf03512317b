"""
Diagnostic tables of the energy-loss rate versus momentum.

Export is best effort: failures are logged and never reach the caller.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Dict, Optional, Union

import h5py
import numpy as np
from tqdm import tqdm

from matfx.core.material import MaterialProperties
from matfx.core.particle import get_species
from matfx.errors import PhysicsError
from matfx.physics.stopping_power import StoppingPower

logger = logging.getLogger(__name__)


def tabulate_dedx(effects, pdg: int, material: Optional[MaterialProperties] = None,
                  min_mom: float = 1.E-5, max_mom: float = 1.E4,
                  n_steps: int = 10000, progress: bool = False) -> Dict[str, np.ndarray]:
    """
    Tabulate ionization and bremsstrahlung loss on a log-spaced momentum grid.

    Parameters:
        effects: MaterialEffects instance (config and oracle are used)
        pdg: PDG code of the particle
        material: Material to use (queried from the oracle at the origin if None)
        min_mom, max_mom: Momentum range [GeV/c]
        n_steps: Number of grid points
        progress: Show a progress bar

    Returns:
        Dict with 'log10_mom', 'dedx_bethe_bloch' and 'dedx_brems' [GeV/cm];
        points outside the validity range of a model are NaN
    """
    species = get_species(pdg)

    if material is None:
        material = effects.oracle.properties(np.zeros(3))

    # one calculator per process, leaving the caller's switches untouched
    bethe_only = StoppingPower(dataclasses.replace(
        effects.config, energy_loss_bethe_bloch=True, energy_loss_brems=False))
    brems_only = StoppingPower(dataclasses.replace(
        effects.config, energy_loss_bethe_bloch=False, energy_loss_brems=True))

    log10_mom = np.linspace(np.log10(min_mom), np.log10(max_mom), n_steps)
    dedx_bethe = np.full(n_steps, np.nan)
    dedx_brems = np.full(n_steps, np.nan)

    for i, log_p in enumerate(tqdm(log10_mom, desc=f"dE/dx PDG {pdg}", disable=not progress)):
        energy = np.hypot(10. ** log_p, species.mass)

        try:
            dedx_bethe[i] = bethe_only.dedx(energy, species.mass, species.charge, pdg, material)
        except PhysicsError:
            pass  # below the validity range, stays NaN

        try:
            dedx_brems[i] = brems_only.dedx(energy, species.mass, species.charge, pdg, material)
        except PhysicsError:
            pass

    return {
        'log10_mom': log10_mom,
        'dedx_bethe_bloch': dedx_bethe,
        'dedx_brems': dedx_brems,
    }


def export_dedx(effects, pdg: int, path: Optional[Union[str, Path]] = None,
                table: Optional[Dict[str, np.ndarray]] = None,
                **kwargs) -> Optional[Path]:
    """
    Write the dE/dx table of particle ``pdg`` to an HDF5 file.

    Parameters:
        effects: MaterialEffects instance
        pdg: PDG code of the particle
        path: Output file (default: dEdx_<pdg>.h5 in the working directory)
        table: Table from :func:`tabulate_dedx` to write (computed if None)
        **kwargs: Passed to :func:`tabulate_dedx`

    Returns:
        Path of the written file, or None if the export failed
    """
    path = Path(path) if path is not None else Path(f"dEdx_{pdg}.h5")

    try:
        if table is None:
            table = tabulate_dedx(effects, pdg, **kwargs)

        with h5py.File(path, 'w') as f:
            f.attrs['pdg'] = pdg
            for name, values in table.items():
                f.create_dataset(name, data=values)
    except Exception as exc:  # export must never abort the caller
        logger.warning("dE/dx export for PDG %d to %s failed: %s", pdg, path, exc)
        return None

    logger.info("dE/dx table for PDG %d written to %s", pdg, path)
    return path


def plot_dedx(table: Dict[str, np.ndarray], path: Union[str, Path],
              title: str = '') -> Optional[Path]:
    """
    Plot a table from :func:`tabulate_dedx` to an image file.

    Returns:
        Path of the written image, or None if plotting failed
    """
    from matplotlib.figure import Figure

    path = Path(path)

    try:
        fig = Figure(figsize=(10, 6))
        ax = fig.subplots()
        ax.plot(table['log10_mom'], table['dedx_bethe_bloch'] * 1000., 'b-', label='Bethe-Bloch')
        ax.plot(table['log10_mom'], table['dedx_brems'] * 1000., 'r-', label='Bremsstrahlung')
        ax.set_xlabel('log10(p [GeV/c])')
        ax.set_ylabel('dE/dx [MeV/cm]')
        ax.set_yscale('log')
        ax.set_title(title)
        ax.grid(True, alpha=0.3)
        ax.legend()
        fig.savefig(path, dpi=150)
    except Exception as exc:
        logger.warning("dE/dx plot to %s failed: %s", path, exc)
        return None

    return path
