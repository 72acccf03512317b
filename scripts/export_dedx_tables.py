"""
Export dE/dx tables for the common track hypotheses.

Writes one HDF5 file (and a PNG plot) per particle to the output
directory, for checking the energy-loss parameterizations by eye.

Usage:
    python scripts/export_dedx_tables.py [material] [output_dir]
"""

import logging
import sys
from pathlib import Path

from matfx import EffectsConfig, MaterialEffects
from matfx.core.material import from_name
from matfx.io.dedx_table import export_dedx, plot_dedx, tabulate_dedx
from matfx.transport.interfaces import HomogeneousMedium

PARTICLES = [11, -11, 13, 211, 321, 2212]


def export_all(material_name='silicon', output_dir='dedx_tables', n_steps=2000):
    """Export tables for all PARTICLES in one material."""
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)

    material = from_name(material_name)
    print(f"Material: {material_name} ({material})")

    with MaterialEffects(EffectsConfig()) as effects:
        effects.initialize(HomogeneousMedium(material))

        for pdg in PARTICLES:
            table = tabulate_dedx(effects, pdg, n_steps=n_steps, progress=True)

            path = export_dedx(effects, pdg, output / f"dEdx_{pdg}.h5", table=table)
            if path is None:
                print(f"  PDG {pdg:6d}: export failed (see log)")
                continue

            plot_dedx(table, output / f"dEdx_{pdg}.png",
                      title=f"PDG {pdg} in {material_name}")
            print(f"  PDG {pdg:6d}: {path}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    export_all(*sys.argv[1:3])
