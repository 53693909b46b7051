"""
AtomGraph: a graph bundled with the structure it was built from.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np

from atomgraph.config import GraphConfig
from atomgraph.data.structure import Structure
from atomgraph.graphs.builder import as_structure, build_graph
from atomgraph.graphs.graph import Graph


@dataclass(frozen=True)
class AtomGraph:
    """
    Neighbor graph plus the full 3D structure behind it.

    Feature descriptors accept an AtomGraph anywhere they accept a Graph.
    """

    graph: Graph
    structure: Structure
    id: str = ""

    @classmethod
    def from_structure(
        cls, structure, config: Optional[GraphConfig] = None, id: Optional[str] = None
    ) -> "AtomGraph":
        structure = as_structure(structure)
        graph = build_graph(structure, config)
        return cls(graph=graph, structure=structure, id=id or structure.formula)

    @classmethod
    def from_file(
        cls,
        path: Union[str, Path],
        config: Optional[GraphConfig] = None,
        reader: str = "pymatgen",
    ) -> "AtomGraph":
        from atomgraph.data.io import load_structure

        path = Path(path)
        structure = load_structure(path, reader=reader)
        return cls(graph=build_graph(structure, config), structure=structure, id=path.stem)

    @property
    def num_nodes(self) -> int:
        return self.graph.num_nodes

    @property
    def species(self) -> Tuple[str, ...]:
        return self.graph.species

    def laplacian(self, normalized: bool = True) -> np.ndarray:
        return self.graph.laplacian(normalized=normalized)

    def __repr__(self) -> str:
        return (
            f"AtomGraph({self.id!r}, {self.graph.num_nodes} nodes, "
            f"{self.graph.num_edges} edges, {self.graph.strategy})"
        )
