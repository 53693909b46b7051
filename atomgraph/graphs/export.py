"""
PyTorch Geometric export of neighbor graphs.
"""

from typing import Optional

import numpy as np
import torch

from atomgraph.graphs.graph import Graph


def gaussian_expansion(distances: np.ndarray, cutoff: float, n_gaussians: int = 20) -> np.ndarray:
    """
    Expand distances into Gaussian basis functions.

    Centers are evenly spaced on [0, cutoff]; the width is half their spacing.
    """
    if n_gaussians < 2:
        raise ValueError(f"n_gaussians must be at least 2, got {n_gaussians}")
    if not cutoff > 0:
        raise ValueError(f"cutoff must be positive, got {cutoff}")
    distances = np.asarray(distances, dtype=np.float64)
    centers = np.linspace(0, cutoff, n_gaussians)
    width = 0.5 * (centers[1] - centers[0])
    return np.exp(-((distances[:, None] - centers[None, :]) ** 2) / width**2).astype(
        np.float32
    )


def to_pyg(
    graph,
    node_features: Optional[np.ndarray] = None,
    edge_features: str = "weight",
    cutoff: Optional[float] = None,
    n_gaussians: int = 20,
    **properties,
) -> "torch_geometric.data.Data":
    """
    Convert to PyTorch Geometric Data object.

    Args:
        graph: Graph or AtomGraph
        node_features: (N, F) array, e.g. from GraphFeaturizer; None leaves
            ``x`` unset
        edge_features: "weight" (1 column) or "gaussian" (distance expansion)
        cutoff: Gaussian expansion range; defaults to the longest edge
        **properties: target properties (e.g., band_gap=1.5)

    Returns:
        torch_geometric.data.Data
    """
    from torch_geometric.data import Data

    graph = getattr(graph, "graph", graph)
    if not isinstance(graph, Graph):
        raise TypeError(f"Expected Graph or AtomGraph, got {type(graph).__name__}")

    weights = graph.edge_weights()
    if edge_features == "weight":
        edge_attr = weights.astype(np.float32)[:, None]
    elif edge_features == "gaussian":
        distances = graph.edge_distances()
        top = cutoff or (float(distances.max()) if distances.size else 1.0)
        edge_attr = gaussian_expansion(distances, top, n_gaussians)
    else:
        raise ValueError(f"Unknown edge_features: {edge_features}. Supported: weight, gaussian")

    data = Data(
        edge_index=torch.tensor(graph.edge_index(), dtype=torch.long),
        edge_attr=torch.tensor(edge_attr, dtype=torch.float),
        edge_weight=torch.tensor(weights, dtype=torch.float),
        num_nodes=graph.num_nodes,
    )
    if node_features is not None:
        node_features = np.asarray(node_features, dtype=np.float32)
        if node_features.shape[0] != graph.num_nodes:
            raise ValueError(
                f"node_features has {node_features.shape[0]} rows for {graph.num_nodes} nodes"
            )
        data.x = torch.tensor(node_features)

    # Attach property targets
    for key, value in properties.items():
        if value is not None:
            setattr(data, key, torch.tensor([value], dtype=torch.float))

    return data
