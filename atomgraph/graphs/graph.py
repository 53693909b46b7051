"""
Immutable weighted neighbor graph produced by the builder.

Nodes are the structure's sites (same indices, same order). Edges are
undirected and stored once with ``i < j``.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Tuple

import numpy as np


@dataclass(frozen=True)
class Edge:
    """
    Undirected edge between sites ``i < j``.

    ``distance`` is the minimum-image distance (Å) and ``image`` the lattice
    translation of site ``j`` that realises it, relative to site ``i``.
    """

    i: int
    j: int
    weight: float
    distance: float
    image: Tuple[int, int, int] = (0, 0, 0)

    @property
    def pair(self) -> Tuple[int, int]:
        return (self.i, self.j)


@dataclass(frozen=True)
class Graph:
    """
    Weighted undirected graph over atom sites.

    Args:
        species: element symbol per node
        edges: undirected edges, ``i < j``, at most one per pair
        strategy: construction strategy that produced the edges
    """

    species: Tuple[str, ...]
    edges: Tuple[Edge, ...] = ()
    strategy: str = "cutoff"

    def __post_init__(self):
        species = tuple(self.species)
        n = len(species)
        edges = tuple(sorted(self.edges, key=lambda e: (e.i, e.j)))
        seen = set()
        for e in edges:
            if not (0 <= e.i < e.j < n):
                raise ValueError(f"Edge ({e.i}, {e.j}) needs 0 <= i < j < {n}")
            if e.pair in seen:
                raise ValueError(f"Duplicate edge ({e.i}, {e.j})")
            if not (math.isfinite(e.weight) and e.weight > 0):
                raise ValueError(f"Edge ({e.i}, {e.j}) has non-positive weight {e.weight}")
            seen.add(e.pair)
        object.__setattr__(self, "species", species)
        object.__setattr__(self, "edges", edges)

    @property
    def num_nodes(self) -> int:
        return len(self.species)

    @property
    def num_edges(self) -> int:
        return len(self.edges)

    def edge_set(self) -> FrozenSet[Tuple[int, int]]:
        return frozenset(e.pair for e in self.edges)

    def neighbors(self, node: int) -> List[int]:
        """Sorted neighbor indices of ``node``."""
        out = [e.j for e in self.edges if e.i == node]
        out += [e.i for e in self.edges if e.j == node]
        return sorted(out)

    def degree(self) -> np.ndarray:
        deg = np.zeros(self.num_nodes, dtype=np.int64)
        for e in self.edges:
            deg[e.i] += 1
            deg[e.j] += 1
        return deg

    def isolated_nodes(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.degree() == 0)]

    # ──────────────────────────────────────────────────────────
    # Matrix views
    # ──────────────────────────────────────────────────────────

    def adjacency_matrix(self, weighted: bool = True) -> np.ndarray:
        """Dense symmetric (N, N) adjacency matrix."""
        adj = np.zeros((self.num_nodes, self.num_nodes), dtype=np.float64)
        for e in self.edges:
            value = e.weight if weighted else 1.0
            adj[e.i, e.j] = value
            adj[e.j, e.i] = value
        return adj

    def laplacian(self, normalized: bool = True) -> np.ndarray:
        """
        Graph Laplacian of the weighted adjacency matrix.

        normalized: ``I - D^-1/2 A D^-1/2`` (isolated nodes get a zero row),
        otherwise ``D - A``.
        """
        adj = self.adjacency_matrix(weighted=True)
        deg = adj.sum(axis=1)
        if not normalized:
            return np.diag(deg) - adj
        inv_sqrt = np.zeros_like(deg)
        connected = deg > 0
        inv_sqrt[connected] = 1.0 / np.sqrt(deg[connected])
        lap = np.diag(connected.astype(np.float64)) - inv_sqrt[:, None] * adj * inv_sqrt[None, :]
        return lap

    def edge_index(self) -> np.ndarray:
        """(2, 2E) directed edge index, both directions of every edge."""
        src = [e.i for e in self.edges] + [e.j for e in self.edges]
        dst = [e.j for e in self.edges] + [e.i for e in self.edges]
        return np.array([src, dst], dtype=np.int64).reshape(2, -1)

    def edge_weights(self) -> np.ndarray:
        """Weights aligned with ``edge_index()``."""
        w = [e.weight for e in self.edges]
        return np.array(w + w, dtype=np.float64)

    def edge_distances(self) -> np.ndarray:
        """Distances aligned with ``edge_index()``."""
        d = [e.distance for e in self.edges]
        return np.array(d + d, dtype=np.float64)

    # ──────────────────────────────────────────────────────────
    # Serialization
    # ──────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "num_nodes": self.num_nodes,
            "species": list(self.species),
            "edges": [
                {
                    "i": e.i,
                    "j": e.j,
                    "weight": e.weight,
                    "distance": e.distance,
                    "image": list(e.image),
                }
                for e in self.edges
            ],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Graph":
        edges = tuple(
            Edge(
                i=int(e["i"]),
                j=int(e["j"]),
                weight=float(e["weight"]),
                distance=float(e["distance"]),
                image=tuple(int(x) for x in e.get("image", (0, 0, 0))),
            )
            for e in d.get("edges", [])
        )
        return cls(tuple(d["species"]), edges, d.get("strategy", "cutoff"))
