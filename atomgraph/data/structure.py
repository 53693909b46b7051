"""
Immutable atomic structure model consumed by the graph builder.

A Structure is an ordered list of sites (species symbol + Cartesian
position), an optional 3x3 lattice whose rows are the lattice vectors, and
per-axis periodicity flags. Loading from files and converting from
pymatgen / ASE objects lives in ``atomgraph.data.io``.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

import numpy as np

from atomgraph.exceptions import InvalidStructureError

# Lattices with a smaller |det| are treated as singular (Å^3)
_MIN_CELL_VOLUME = 1e-8


@dataclass(frozen=True)
class Site:
    """One atom of a structure."""

    index: int
    species: str
    coords: Tuple[float, float, float]


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class Structure:
    """
    Ordered sites plus optional periodic lattice.

    Args:
        species: element symbol per site
        positions: (N, 3) Cartesian coordinates in Angstroms
        lattice: (3, 3) lattice vectors as rows, or None for molecules
        pbc: periodicity per lattice axis; defaults to all True when a
            lattice is given and all False otherwise
    """

    species: Tuple[str, ...]
    positions: np.ndarray
    lattice: Optional[np.ndarray] = None
    pbc: Optional[Tuple[bool, bool, bool]] = None

    def __post_init__(self):
        species = tuple(self.species)
        for symbol in species:
            if not isinstance(symbol, str) or not symbol.strip():
                raise InvalidStructureError(f"Invalid species label: {symbol!r}")

        positions = np.asarray(self.positions, dtype=np.float64)
        if positions.size == 0:
            positions = positions.reshape(0, 3)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise InvalidStructureError(
                f"positions must have shape (N, 3), got {positions.shape}"
            )
        if positions.shape[0] != len(species):
            raise InvalidStructureError(
                f"{len(species)} species given for {positions.shape[0]} positions"
            )
        if not np.all(np.isfinite(positions)):
            raise InvalidStructureError("positions contain non-finite values")

        lattice = self.lattice
        if lattice is not None:
            lattice = np.asarray(lattice, dtype=np.float64)
            if lattice.shape != (3, 3):
                raise InvalidStructureError(f"lattice must be 3x3, got {lattice.shape}")
            if not np.all(np.isfinite(lattice)):
                raise InvalidStructureError("lattice contains non-finite values")

        if self.pbc is None:
            pbc = (True, True, True) if lattice is not None else (False, False, False)
        else:
            pbc = tuple(bool(p) for p in self.pbc)
            if len(pbc) != 3:
                raise InvalidStructureError(f"pbc needs 3 flags, got {len(pbc)}")

        if any(pbc):
            if lattice is None:
                raise InvalidStructureError("Periodic axes require a lattice")
            if abs(np.linalg.det(lattice)) < _MIN_CELL_VOLUME:
                raise InvalidStructureError("Lattice is singular (zero cell volume)")

        object.__setattr__(self, "species", species)
        object.__setattr__(self, "positions", _readonly(positions))
        object.__setattr__(self, "lattice", None if lattice is None else _readonly(lattice))
        object.__setattr__(self, "pbc", pbc)

    @classmethod
    def from_fractional(
        cls,
        species: Sequence[str],
        frac_coords,
        lattice,
        pbc: Optional[Sequence[bool]] = None,
    ) -> "Structure":
        """Build from fractional coordinates of ``lattice``."""
        lattice = np.asarray(lattice, dtype=np.float64)
        frac = np.asarray(frac_coords, dtype=np.float64).reshape(-1, 3)
        return cls(species, frac @ lattice, lattice, None if pbc is None else tuple(pbc))

    # ──────────────────────────────────────────────────────────
    # Accessors
    # ──────────────────────────────────────────────────────────

    @property
    def num_sites(self) -> int:
        return len(self.species)

    def __len__(self) -> int:
        return self.num_sites

    def __iter__(self) -> Iterator[Site]:
        return iter(self.sites)

    def __getitem__(self, index: int) -> Site:
        return self.sites[index]

    @property
    def sites(self) -> Tuple[Site, ...]:
        return tuple(
            Site(i, s, tuple(float(x) for x in pos))
            for i, (s, pos) in enumerate(zip(self.species, self.positions))
        )

    @property
    def is_periodic(self) -> bool:
        return any(self.pbc)

    @property
    def frac_coords(self) -> np.ndarray:
        if self.lattice is None:
            raise InvalidStructureError("Fractional coordinates need a lattice")
        return self.positions @ np.linalg.inv(self.lattice)

    @property
    def volume(self) -> Optional[float]:
        if self.lattice is None:
            return None
        return float(abs(np.linalg.det(self.lattice)))

    @property
    def composition(self) -> Dict[str, int]:
        return dict(Counter(self.species))

    @property
    def formula(self) -> str:
        return " ".join(f"{el}{n}" for el, n in sorted(self.composition.items()))

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Structure):
            return NotImplemented
        if self.species != other.species or self.pbc != other.pbc:
            return False
        if (self.lattice is None) != (other.lattice is None):
            return False
        if self.lattice is not None and not np.array_equal(self.lattice, other.lattice):
            return False
        return np.array_equal(self.positions, other.positions)

    __hash__ = None

    def __repr__(self) -> str:
        kind = "periodic" if self.is_periodic else "non-periodic"
        return f"Structure({self.formula}, {self.num_sites} sites, {kind})"

    # ──────────────────────────────────────────────────────────
    # Serialization
    # ──────────────────────────────────────────────────────────

    def as_dict(self) -> Dict[str, Any]:
        return {
            "species": list(self.species),
            "positions": self.positions.tolist(),
            "lattice": None if self.lattice is None else self.lattice.tolist(),
            "pbc": list(self.pbc),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Structure":
        try:
            return cls(
                species=d["species"],
                positions=d["positions"],
                lattice=d.get("lattice"),
                pbc=d.get("pbc"),
            )
        except KeyError as exc:
            raise InvalidStructureError(f"Missing structure field: {exc.args[0]}") from None
