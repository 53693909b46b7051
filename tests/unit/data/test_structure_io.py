"""Tests for atomgraph.data.io module."""

import numpy as np
import pytest

from atomgraph.data.io import from_ase, from_pymatgen, load_structure, to_ase, to_pymatgen
from atomgraph.data.structure import Structure
from atomgraph.exceptions import InvalidStructureError


@pytest.fixture
def si_structure():
    """Create a simple Si diamond structure for testing."""
    from pymatgen.core import Lattice
    from pymatgen.core import Structure as PymatgenStructure

    return PymatgenStructure(
        lattice=Lattice.cubic(5.43),
        species=["Si", "Si"],
        coords=[[0.0, 0.0, 0.0], [0.25, 0.25, 0.25]],
    )


@pytest.fixture
def water_xyz(tmp_path):
    path = tmp_path / "water.xyz"
    path.write_text(
        "3\nwater\n"
        "O 0.000 0.000 0.117\n"
        "H 0.000 0.757 -0.469\n"
        "H 0.000 -0.757 -0.469\n"
    )
    return path


def test_from_pymatgen_structure(si_structure):
    s = from_pymatgen(si_structure)
    assert s.species == ("Si", "Si")
    assert s.pbc == (True, True, True)
    np.testing.assert_allclose(s.lattice, np.eye(3) * 5.43)
    np.testing.assert_allclose(s.positions[1], [1.3575] * 3)


def test_from_pymatgen_molecule():
    from pymatgen.core import Molecule

    mol = Molecule(["C", "O"], [[0, 0, 0], [0, 0, 1.13]])
    s = from_pymatgen(mol)
    assert s.lattice is None
    assert not s.is_periodic
    assert s.species == ("C", "O")


def test_from_pymatgen_rejects_disorder():
    from pymatgen.core import Lattice
    from pymatgen.core import Structure as PymatgenStructure

    disordered = PymatgenStructure(
        Lattice.cubic(3.0), [{"Fe": 0.5, "Ni": 0.5}], [[0, 0, 0]]
    )
    with pytest.raises(InvalidStructureError, match="Disordered"):
        from_pymatgen(disordered)


def test_from_pymatgen_rejects_other_types():
    with pytest.raises(InvalidStructureError):
        from_pymatgen({"species": ["H"]})


def test_pymatgen_roundtrip(cscl_structure, methane):
    """Round-trip atomgraph → pymatgen → atomgraph should preserve the structure."""
    back = from_pymatgen(to_pymatgen(cscl_structure))
    assert back.species == cscl_structure.species
    np.testing.assert_allclose(back.positions, cscl_structure.positions, atol=1e-8)
    np.testing.assert_allclose(back.lattice, cscl_structure.lattice)

    mol = to_pymatgen(methane)
    assert type(mol).__name__ == "Molecule"
    assert from_pymatgen(mol).species == methane.species


def test_ase_conversion(cscl_structure, methane):
    atoms = to_ase(cscl_structure)
    assert list(atoms.get_chemical_symbols()) == ["Cs", "Cl"]
    assert all(atoms.pbc)
    back = from_ase(atoms)
    np.testing.assert_allclose(back.positions, cscl_structure.positions)

    # Zero cell and no periodicity means a molecule
    mol = from_ase(to_ase(methane))
    assert mol.lattice is None
    assert len(mol) == 5


def test_from_ase_periodic_without_cell():
    from ase import Atoms

    atoms = Atoms("H2", positions=[[0, 0, 0], [0, 0, 0.74]], pbc=True)
    with pytest.raises(InvalidStructureError):
        from_ase(atoms)


def test_load_cif(tmp_path, si_structure):
    path = tmp_path / "Si.cif"
    si_structure.to(filename=str(path))
    s = load_structure(path)
    assert s.num_sites == len(si_structure)
    assert s.is_periodic
    assert set(s.species) == {"Si"}


def test_load_xyz_as_molecule(water_xyz):
    s = load_structure(water_xyz)
    assert s.species == ("O", "H", "H")
    assert s.lattice is None


@pytest.mark.parametrize("suffix", [".mol", ".pdb", ".sdf", ".mol2", ".cml", ".PDB"])
def test_babel_formats_load_as_molecule(tmp_path, monkeypatch, suffix):
    """Molecule formats must not be handed to the crystal reader."""
    from pymatgen.core import Molecule
    from pymatgen.core import Structure as PymatgenStructure

    seen = []

    def fake_molecule(path):
        seen.append(path)
        return Molecule(["C", "O"], [[0, 0, 0], [0, 0, 1.13]])

    def fail_structure(path):
        raise AssertionError(f"{path} read as a crystal")

    monkeypatch.setattr(Molecule, "from_file", staticmethod(fake_molecule))
    monkeypatch.setattr(PymatgenStructure, "from_file", staticmethod(fail_structure))
    path = tmp_path / f"co{suffix}"
    path.write_text("placeholder\n")

    s = load_structure(path)
    assert seen == [str(path)]
    assert s.species == ("C", "O")
    assert s.lattice is None


def test_load_with_ase_reader(water_xyz):
    s = load_structure(water_xyz, reader="ase")
    assert s.species == ("O", "H", "H")
    assert not s.is_periodic


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_structure(tmp_path / "missing.cif")


def test_load_garbage_file(tmp_path):
    path = tmp_path / "broken.cif"
    path.write_text("this is not a structure\n")
    with pytest.raises(InvalidStructureError):
        load_structure(path)


def test_load_unknown_reader(water_xyz):
    with pytest.raises(ValueError, match="Unknown reader"):
        load_structure(water_xyz, reader="openbabel")


def test_loaded_structure_type(water_xyz):
    assert isinstance(load_structure(water_xyz), Structure)
