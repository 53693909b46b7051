"""
atomgraph.data — Structure model, loading and conversion.
"""

from atomgraph.data.io import (
    from_ase,
    from_pymatgen,
    load_structure,
    to_ase,
    to_pymatgen,
)
from atomgraph.data.structure import Site, Structure

__all__ = [
    "Site",
    "Structure",
    "load_structure",
    "from_pymatgen",
    "to_pymatgen",
    "from_ase",
    "to_ase",
]
