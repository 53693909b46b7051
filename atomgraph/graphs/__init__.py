"""
atomgraph.graphs — Neighbor graph construction and views.
"""

from atomgraph.graphs.atom_graph import AtomGraph
from atomgraph.graphs.builder import build_graph, build_graphs
from atomgraph.graphs.decay import get_decay_function, list_decay_functions
from atomgraph.graphs.graph import Edge, Graph

__all__ = [
    "AtomGraph",
    "Edge",
    "Graph",
    "build_graph",
    "build_graphs",
    "get_decay_function",
    "list_decay_functions",
]
