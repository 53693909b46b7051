"""
atomgraph: Neighbor graphs of atomic structures

Turns crystals and molecules into weighted, undirected neighbor graphs
(radius cutoff or Voronoi face sharing) and annotates their nodes with
elemental features for graph-based machine learning.
"""

__version__ = "0.1.0"

from atomgraph.config import Config, GraphConfig
from atomgraph.data.structure import Structure
from atomgraph.exceptions import (
    AtomGraphError,
    DegenerateGeometryError,
    FeaturizationError,
    InvalidConfigError,
    InvalidStructureError,
    UnsupportedElementError,
)
from atomgraph.graphs import AtomGraph, Graph, build_graph, build_graphs

__all__ = [
    "__version__",
    "Config",
    "GraphConfig",
    "Structure",
    "Graph",
    "AtomGraph",
    "build_graph",
    "build_graphs",
    "AtomGraphError",
    "InvalidStructureError",
    "InvalidConfigError",
    "DegenerateGeometryError",
    "FeaturizationError",
    "UnsupportedElementError",
]
