"""
atomgraph.featurize — Element feature descriptors, registry and codecs.
"""

from atomgraph.featurize.codecs import GraphFeaturizer, OneHotCodec
from atomgraph.featurize.descriptors import (
    BlockDescriptor,
    ElementPropertyDescriptor,
    FeatureDescriptor,
    LookupTableDescriptor,
    OrbitalOccupationDescriptor,
)
from atomgraph.featurize.registry import ElementFeatureRegistry, create_default_registry

__all__ = [
    "FeatureDescriptor",
    "BlockDescriptor",
    "OrbitalOccupationDescriptor",
    "ElementPropertyDescriptor",
    "LookupTableDescriptor",
    "ElementFeatureRegistry",
    "create_default_registry",
    "OneHotCodec",
    "GraphFeaturizer",
]
