"""
Structure Conversion Utilities

Load structures from disk and convert between pymatgen, ASE and the
atomgraph Structure model. File parsing itself is delegated to pymatgen
(CIF, POSCAR, XYZ, ...) or ASE (``reader="ase"``).
"""

import logging
from pathlib import Path
from typing import Union

import numpy as np

from atomgraph.data.structure import Structure
from atomgraph.exceptions import InvalidStructureError

logger = logging.getLogger(__name__)

# Suffixes pymatgen reads as Molecule rather than Structure
_MOLECULE_SUFFIXES = {
    ".xyz", ".gjf", ".g03", ".g09", ".com", ".inp", ".nw",
    # Read through OpenBabel
    ".mol", ".mol2", ".pdb", ".sdf", ".cml",
}

# Cells with a smaller |det| are treated as "no cell" when coming from ASE
_MIN_CELL_VOLUME = 1e-8


def from_pymatgen(obj) -> Structure:
    """
    Convert a pymatgen Structure or Molecule → Structure.

    Lattice periodicity flags are taken from ``lattice.pbc``. Disordered
    (partially occupied) sites are rejected.
    """
    from pymatgen.core import Molecule
    from pymatgen.core import Structure as PymatgenStructure

    if not isinstance(obj, (PymatgenStructure, Molecule)):
        raise InvalidStructureError(
            f"Expected pymatgen Structure or Molecule, got {type(obj).__name__}"
        )
    if not obj.is_ordered:
        raise InvalidStructureError("Disordered sites are not supported")

    species = [site.specie.symbol for site in obj]
    positions = np.array(obj.cart_coords, dtype=np.float64).reshape(-1, 3)

    if isinstance(obj, Molecule):
        return Structure(species, positions)

    lattice = obj.lattice
    pbc = tuple(bool(p) for p in getattr(lattice, "pbc", (True, True, True)))
    return Structure(species, positions, lattice.matrix, pbc)


def to_pymatgen(structure: Structure):
    """
    Convert Structure → pymatgen Structure (with lattice) or Molecule.
    """
    from pymatgen.core import Lattice, Molecule
    from pymatgen.core import Structure as PymatgenStructure

    if structure.lattice is None:
        return Molecule(list(structure.species), structure.positions)
    lattice = Lattice(structure.lattice, pbc=structure.pbc)
    return PymatgenStructure(
        lattice,
        list(structure.species),
        structure.positions,
        coords_are_cartesian=True,
    )


def from_ase(atoms) -> Structure:
    """
    Convert ASE Atoms → Structure.

    A zero (or singular) cell on a fully non-periodic Atoms means no lattice.
    """
    species = atoms.get_chemical_symbols()
    positions = np.array(atoms.get_positions(), dtype=np.float64).reshape(-1, 3)
    pbc = tuple(bool(p) for p in atoms.pbc)
    cell = np.array(atoms.cell.array, dtype=np.float64)

    if abs(np.linalg.det(cell)) < _MIN_CELL_VOLUME:
        if any(pbc):
            raise InvalidStructureError("Periodic Atoms has a singular cell")
        return Structure(species, positions)
    return Structure(species, positions, cell, pbc)


def to_ase(structure: Structure):
    """
    Convert Structure → ASE Atoms.
    """
    from ase import Atoms

    cell = structure.lattice if structure.lattice is not None else np.zeros((3, 3))
    return Atoms(
        symbols=list(structure.species),
        positions=structure.positions,
        cell=cell,
        pbc=structure.pbc,
    )


def load_structure(path: Union[str, Path], reader: str = "pymatgen") -> Structure:
    """
    Read a structure file.

    Args:
        path: structure file (CIF, POSCAR, XYZ, ...)
        reader: "pymatgen" (default) or "ase"

    Returns:
        Structure
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Structure file not found: {path}")

    if reader == "pymatgen":
        from pymatgen.core import Molecule
        from pymatgen.core import Structure as PymatgenStructure

        loader = (
            Molecule.from_file
            if path.suffix.lower() in _MOLECULE_SUFFIXES
            else PymatgenStructure.from_file
        )
        try:
            obj = loader(str(path))
        except Exception as exc:
            raise InvalidStructureError(f"Could not parse {path}: {exc}") from exc
        structure = from_pymatgen(obj)
    elif reader == "ase":
        from ase.io import read

        try:
            atoms = read(str(path))
        except Exception as exc:
            raise InvalidStructureError(f"Could not parse {path}: {exc}") from exc
        structure = from_ase(atoms)
    else:
        raise ValueError(f"Unknown reader: {reader}. Supported: pymatgen, ase")

    logger.debug(f"Loaded {structure} from {path}")
    return structure
