"""
Registry of built-in element features.

The registry is an ordinary object: ``create_default_registry()`` returns a
fresh, fully populated instance that callers own and pass around. Custom
features can be registered on it without affecting any other registry.
"""

from functools import partial
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from atomgraph.config import PathConfig
from atomgraph.featurize.descriptors import (
    BlockDescriptor,
    ElementPropertyDescriptor,
    FeatureDescriptor,
    LookupTableDescriptor,
    OrbitalOccupationDescriptor,
)
from atomgraph.utils.registry import Registry

ORBITALS = [
    "1s", "2s", "2p", "3s", "3p", "3d", "4s", "4p", "4d", "4f",
    "5s", "5p", "5d", "5f", "6s", "6p", "6d", "7s", "7p",
]

# Feature name → pymatgen Element attribute
ELEMENT_PROPERTIES = {
    "Atomic number": "Z",
    "Atomic mass": "atomic_mass",
    "Group": "group",
    "Row": "row",
    "Mendeleev number": "mendeleev_no",
}


class ElementFeatureRegistry(Registry):
    """Name → FeatureDescriptor factory."""

    def __init__(self, name: str = "element_features"):
        super().__init__(name)

    def build(self, name: str, **kwargs) -> FeatureDescriptor:
        descriptor = super().build(name, **kwargs)
        if not isinstance(descriptor, FeatureDescriptor):
            raise TypeError(f"Factory for '{name}' returned {type(descriptor).__name__}")
        return descriptor

    def build_many(self, names: List[str]) -> List[FeatureDescriptor]:
        return [self.build(name) for name in names]


def create_default_registry(
    table_path: Optional[Union[str, Path]] = None,
) -> ElementFeatureRegistry:
    """
    Registry holding every built-in element feature.

    Args:
        table_path: lookup-table CSV; defaults to PathConfig().element_table
            (packaged table unless ATOMGRAPH_ELEMENT_TABLE is set)
    """
    registry = ElementFeatureRegistry()
    registry.register("Block", BlockDescriptor)

    for orbital in ORBITALS:
        registry.register(orbital, partial(OrbitalOccupationDescriptor, orbital))

    for name, attribute in ELEMENT_PROPERTIES.items():
        registry.register(name, partial(ElementPropertyDescriptor, name, attribute))

    table_path = Path(table_path) if table_path else PathConfig().element_table
    table = pd.read_csv(table_path)
    for column in table.columns:
        if column == "Symbol":
            continue
        registry.register(column, partial(LookupTableDescriptor, column, table, column))

    return registry
