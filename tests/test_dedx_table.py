import h5py
import numpy as np

from matfx.io.dedx_table import export_dedx, plot_dedx, tabulate_dedx
from matfx.transport.engine import MaterialEffects


def test_proton_table(effects_in):
    table = tabulate_dedx(effects_in(), 2212, n_steps=50)

    assert table['log10_mom'].shape == (50,)
    bethe = table['dedx_bethe_bloch']
    # below beta*gamma = 0.05 there is no valid value
    assert np.isnan(bethe[0])
    assert np.all(bethe[-10:] > 0.)
    assert np.all(table['dedx_brems'] == 0.)


def test_electron_table_has_bremsstrahlung(effects_in):
    table = tabulate_dedx(effects_in(), 11, min_mom=1., max_mom=1000., n_steps=5)
    assert np.all(np.isfinite(table['dedx_brems']))
    assert np.any(table['dedx_brems'] != 0.)


def test_export_hdf5(effects_in, tmp_path):
    path = export_dedx(effects_in(), 13, tmp_path / "dedx_13.h5", n_steps=20)

    assert path is not None
    with h5py.File(path, 'r') as f:
        assert f.attrs['pdg'] == 13
        assert f['log10_mom'].shape == (20,)
        assert set(f.keys()) == {'log10_mom', 'dedx_bethe_bloch', 'dedx_brems'}


def test_export_failure_is_not_raised(effects_in, tmp_path):
    missing_dir = tmp_path / "missing" / "dedx.h5"
    assert export_dedx(effects_in(), 13, missing_dir, n_steps=5) is None
    assert export_dedx(MaterialEffects(), 13, tmp_path / "x.h5", n_steps=5) is None


def test_plot(effects_in, tmp_path):
    table = tabulate_dedx(effects_in(), 11, min_mom=0.1, max_mom=100., n_steps=20)
    path = plot_dedx(table, tmp_path / "dedx.png", title="electron in silicon")
    assert path.exists()


class BrokenMedium:
    """Oracle whose material lookup fails."""

    def properties(self, position):
        raise RuntimeError("geometry not loaded")

    def find_next_boundary(self, state7, max_distance, var_field=False):
        return max_distance

    def set_debug_level(self, level):
        pass


def test_export_swallows_oracle_failure(tmp_path):
    effects = MaterialEffects()
    effects.initialize(BrokenMedium())
    assert export_dedx(effects, 2212, tmp_path / "dedx.h5", n_steps=5) is None


def test_plot_unsupported_format_returns_none(effects_in, tmp_path):
    table = tabulate_dedx(effects_in(), 11, min_mom=0.1, max_mom=100., n_steps=10)
    assert plot_dedx(table, tmp_path / "dedx.unknownext") is None


def test_export_precomputed_table(effects_in, tmp_path):
    effects = effects_in()
    table = tabulate_dedx(effects, 13, n_steps=7)

    path = export_dedx(effects, 13, tmp_path / "dedx.h5", table=table)

    with h5py.File(path, 'r') as f:
        assert np.array_equal(f['log10_mom'][()], table['log10_mom'])
        assert f['dedx_bethe_bloch'].shape == (7,)
