"""
Element feature descriptors.

A feature descriptor computes one value per graph node from the node's
element. Every descriptor states up front which elements it can encode, so
unsupported species fail loudly instead of silently producing gaps.

Variants:
- BlockDescriptor: periodic-table block (s, p, d, f)
- OrbitalOccupationDescriptor: electrons in one subshell, e.g. "6p"
- ElementPropertyDescriptor: numeric pymatgen Element attribute
- LookupTableDescriptor: user or packaged lookup table (pandas DataFrame)
"""

import math
import re
import warnings
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple, Union

import pandas as pd

from atomgraph.exceptions import FeaturizationError, UnsupportedElementError

_ORBITAL_RE = re.compile(r"^([1-7])([spdf])$")


def _all_elements():
    from pymatgen.core import Element
    return list(Element)


class FeatureDescriptor(ABC):
    """
    Computes a per-node feature over a graph.

    Subclasses implement ``value`` for a single element symbol and
    ``_encodable`` for the set of supported symbols.
    """

    categorical: bool = False

    def __init__(self, name: str):
        self.name = name
        self._encodable_cache: Optional[FrozenSet[str]] = None

    @abstractmethod
    def value(self, symbol: str) -> Any:
        """Feature value of one element."""

    @abstractmethod
    def _encodable(self) -> FrozenSet[str]:
        """Symbols this feature is defined for."""

    def encodable_elements(self) -> FrozenSet[str]:
        if self._encodable_cache is None:
            self._encodable_cache = frozenset(self._encodable())
        return self._encodable_cache

    def compute(self, graph) -> Dict[int, Any]:
        """
        Feature value for every node.

        Args:
            graph: Graph or AtomGraph

        Returns:
            {node index: value}
        """
        graph = getattr(graph, "graph", graph)
        species = tuple(graph.species)
        missing = set(species) - self.encodable_elements()
        if missing:
            raise UnsupportedElementError(self.name, missing)
        cache = {symbol: self.value(symbol) for symbol in set(species)}
        return {i: cache[symbol] for i, symbol in enumerate(species)}

    def possible_values(self) -> Union[List[Any], Tuple[float, float]]:
        """Sorted categories, or (min, max) over encodable elements."""
        values = [self.value(s) for s in sorted(self.encodable_elements())]
        if self.categorical:
            return sorted(set(values), key=str)
        if not values:
            raise FeaturizationError(f"Feature '{self.name}' has no encodable elements")
        return (float(min(values)), float(max(values)))

    def __repr__(self) -> str:
        kind = "categorical" if self.categorical else "continuous"
        return f"{type(self).__name__}({self.name!r}, {kind})"


class BlockDescriptor(FeatureDescriptor):
    """Periodic-table block of each element."""

    categorical = True

    def __init__(self, name: str = "Block"):
        super().__init__(name)

    def value(self, symbol: str) -> str:
        from pymatgen.core import Element
        return Element(symbol).block

    def _encodable(self) -> FrozenSet[str]:
        out = set()
        for el in _all_elements():
            try:
                if el.block in ("s", "p", "d", "f"):
                    out.add(el.symbol)
            except ValueError:
                continue
        return frozenset(out)


class OrbitalOccupationDescriptor(FeatureDescriptor):
    """
    Ground-state electron count in one subshell (e.g. "6p").

    Only elements that actually occupy the subshell are encodable.
    """

    def __init__(self, orbital: str, name: Optional[str] = None):
        match = _ORBITAL_RE.match(orbital)
        if match is None:
            raise ValueError(f"Invalid orbital '{orbital}'. Expected e.g. '3d' or '6p'")
        super().__init__(name or orbital)
        self.orbital = orbital
        self._n = int(match.group(1))
        self._l = match.group(2)

    def _occupancy(self, element) -> int:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            for n, l, occupancy in element.full_electronic_structure:
                if n == self._n and l == self._l:
                    return int(occupancy)
        return 0

    def value(self, symbol: str) -> int:
        from pymatgen.core import Element
        return self._occupancy(Element(symbol))

    def _encodable(self) -> FrozenSet[str]:
        out = set()
        for el in _all_elements():
            try:
                if self._occupancy(el) > 0:
                    out.add(el.symbol)
            except (ValueError, KeyError, TypeError, AttributeError):
                continue
        return frozenset(out)


class ElementPropertyDescriptor(FeatureDescriptor):
    """
    Numeric attribute of pymatgen's Element (e.g. "Z", "atomic_mass", "X").

    Elements with a missing or NaN value are not encodable.
    """

    def __init__(self, name: str, attribute: str):
        super().__init__(name)
        self.attribute = attribute

    def _raw(self, element) -> Optional[float]:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            raw = getattr(element, self.attribute)
        if raw is None:
            return None
        value = float(raw)
        return None if math.isnan(value) else value

    def value(self, symbol: str) -> float:
        from pymatgen.core import Element

        value = self._raw(Element(symbol))
        if value is None:
            raise UnsupportedElementError(self.name, [symbol])
        return value

    def _encodable(self) -> FrozenSet[str]:
        out = set()
        for el in _all_elements():
            try:
                if self._raw(el) is not None:
                    out.add(el.symbol)
            except (ValueError, KeyError, TypeError, AttributeError):
                continue
        return frozenset(out)


class LookupTableDescriptor(FeatureDescriptor):
    """
    Feature backed by a lookup table with a ``Symbol`` column.

    Args:
        name: feature name
        table: DataFrame with ``Symbol`` and at least one value column
        column: value column; defaults to ``name`` or the only other column
        categorical: force categorical/continuous; inferred from dtype if None
    """

    def __init__(
        self,
        name: str,
        table: pd.DataFrame,
        column: Optional[str] = None,
        categorical: Optional[bool] = None,
    ):
        super().__init__(name)
        if "Symbol" not in table.columns:
            raise FeaturizationError(f"Lookup table for '{name}' needs a 'Symbol' column")
        if column is None:
            others = [c for c in table.columns if c != "Symbol"]
            if name in table.columns:
                column = name
            elif len(others) == 1:
                column = others[0]
            else:
                raise FeaturizationError(
                    f"Cannot pick a value column for '{name}' from {others}; pass column="
                )
        if column not in table.columns:
            raise FeaturizationError(f"Column '{column}' not in lookup table")

        rows = table[["Symbol", column]].dropna()
        if rows["Symbol"].duplicated().any():
            dupes = sorted(rows.loc[rows["Symbol"].duplicated(), "Symbol"].unique())
            raise FeaturizationError(f"Duplicate symbols in lookup table: {', '.join(dupes)}")

        self.column = column
        self.categorical = (
            not pd.api.types.is_numeric_dtype(rows[column]) if categorical is None else categorical
        )
        self._values = dict(zip(rows["Symbol"].astype(str), rows[column].tolist()))

    @classmethod
    def from_csv(
        cls, name: str, path: Union[str, Path], column: Optional[str] = None, **kwargs
    ) -> "LookupTableDescriptor":
        return cls(name, pd.read_csv(path), column=column, **kwargs)

    def value(self, symbol: str) -> Any:
        if symbol not in self._values:
            raise UnsupportedElementError(self.name, [symbol])
        return self._values[symbol]

    def _encodable(self) -> FrozenSet[str]:
        return frozenset(self._values)
