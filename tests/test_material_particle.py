import pytest

from matfx.core.material import MATERIAL_PROPERTIES, VACUUM, MaterialProperties, from_name
from matfx.core.particle import get_species, parse_particle_type
from matfx.errors import ConfigurationError


def test_vacuum_detection():
    assert VACUUM.is_vacuum
    assert MaterialProperties(1.2E-3, 1.E-4, 1., 3.E4, 85.7).is_vacuum
    assert not from_name('air').is_vacuum


def test_material_lookup():
    assert from_name('Silicon') is MATERIAL_PROPERTIES['silicon']
    assert from_name('vacuum') is VACUUM
    with pytest.raises(ConfigurationError):
        from_name('unobtainium')


def test_materials_compare_by_value():
    copy = MaterialProperties(2.33, 14.0, 28.0855, 9.37, 173.0)
    assert copy == from_name('silicon')
    assert copy != from_name('iron')


def test_antiparticles():
    assert get_species(-11).is_positron
    assert get_species(11).is_electron and not get_species(11).is_positron
    assert get_species(-2212).charge == -1
    assert get_species(-13).mass == get_species(13).mass


def test_particle_names():
    assert parse_particle_type('alpha') == 1000020040
    assert get_species(parse_particle_type('e+')).charge == 1
    with pytest.raises(ConfigurationError):
        parse_particle_type('graviton')


def test_unknown_pdg():
    with pytest.raises(ConfigurationError):
        get_species(999999)
