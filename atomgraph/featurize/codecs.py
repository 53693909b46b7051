"""
One-hot codecs and the graph featurizer.

A codec turns a feature value into a fixed-width vector and back. Categorical
features get one slot per category; continuous features are binned (linearly
or logarithmically) between their smallest and largest values.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from atomgraph.exceptions import FeaturizationError
from atomgraph.featurize.descriptors import FeatureDescriptor


class OneHotCodec:
    """
    One-hot encoder for categorical or binned continuous values.

    Use ``OneHotCodec(categories)`` for categorical features and
    ``OneHotCodec.binned(low, high, nbins)`` for continuous ones.
    """

    def __init__(self, categories: Optional[Sequence[Any]] = None, edges: Optional[Sequence[float]] = None):
        if (categories is None) == (edges is None):
            raise ValueError("Pass exactly one of categories or edges")
        if categories is not None:
            self.categories = list(categories)
            if not self.categories:
                raise ValueError("categories must not be empty")
            self.edges = None
        else:
            self.categories = None
            self.edges = np.asarray(edges, dtype=np.float64)
            if self.edges.ndim != 1 or len(self.edges) < 2 or np.any(np.diff(self.edges) <= 0):
                raise ValueError("edges must be strictly increasing with at least 2 entries")

    @classmethod
    def binned(cls, low: float, high: float, nbins: int = 10, logspaced: bool = False) -> "OneHotCodec":
        if nbins < 1:
            raise ValueError(f"nbins must be >= 1, got {nbins}")
        if high < low:
            raise ValueError(f"high ({high}) must be >= low ({low})")
        if low == high:
            # Single-valued feature: one bin centred on the value
            return cls(edges=[low - 0.5, high + 0.5])
        if logspaced:
            if low <= 0:
                raise ValueError("Log-spaced bins need low > 0")
            return cls(edges=np.logspace(np.log10(low), np.log10(high), nbins + 1))
        return cls(edges=np.linspace(low, high, nbins + 1))

    @classmethod
    def for_descriptor(cls, descriptor: FeatureDescriptor, nbins: int = 10, logspaced: bool = False) -> "OneHotCodec":
        values = descriptor.possible_values()
        if descriptor.categorical:
            return cls(categories=values)
        low, high = values
        return cls.binned(low, high, nbins=nbins, logspaced=logspaced and low > 0)

    @property
    def categorical(self) -> bool:
        return self.categories is not None

    @property
    def width(self) -> int:
        return len(self.categories) if self.categorical else len(self.edges) - 1

    def encode(self, value: Any) -> np.ndarray:
        vec = np.zeros(self.width, dtype=np.float32)
        if self.categorical:
            try:
                vec[self.categories.index(value)] = 1.0
            except ValueError:
                raise FeaturizationError(f"Unknown category {value!r}") from None
            return vec
        # Out-of-range values are clamped to the end bins
        idx = int(np.searchsorted(self.edges, float(value), side="right")) - 1
        vec[min(max(idx, 0), self.width - 1)] = 1.0
        return vec

    def decode(self, vector: Sequence[float]) -> Any:
        """Category, or (low, high) bin edges for continuous codecs."""
        vector = np.asarray(vector)
        if vector.shape != (self.width,):
            raise FeaturizationError(f"Expected vector of length {self.width}, got {vector.shape}")
        hot = np.flatnonzero(vector == 1)
        if len(hot) != 1 or np.count_nonzero(vector) != 1:
            raise FeaturizationError("Vector is not one-hot")
        k = int(hot[0])
        if self.categorical:
            return self.categories[k]
        return (float(self.edges[k]), float(self.edges[k + 1]))

    def __repr__(self) -> str:
        if self.categorical:
            return f"OneHotCodec(categories={self.categories})"
        return f"OneHotCodec(bins={self.width}, range=({self.edges[0]:.3g}, {self.edges[-1]:.3g}))"


class GraphFeaturizer:
    """
    Encode several feature descriptors into one node feature matrix.

    Args:
        descriptors: feature descriptors, in column order
        codecs: one codec per descriptor; built from possible_values() if None
        nbins: bins for continuous features when codecs are built
        logspaced: log-spaced bins for positive continuous features
    """

    def __init__(
        self,
        descriptors: Sequence[FeatureDescriptor],
        codecs: Optional[Sequence[OneHotCodec]] = None,
        nbins: int = 10,
        logspaced: bool = False,
    ):
        self.descriptors = list(descriptors)
        if codecs is None:
            codecs = [OneHotCodec.for_descriptor(d, nbins, logspaced) for d in self.descriptors]
        if len(codecs) != len(self.descriptors):
            raise ValueError(f"{len(codecs)} codecs for {len(self.descriptors)} descriptors")
        self.codecs = list(codecs)

    @property
    def names(self) -> List[str]:
        return [d.name for d in self.descriptors]

    @property
    def feature_width(self) -> int:
        return sum(c.width for c in self.codecs)

    def column_slices(self) -> Dict[str, Tuple[int, int]]:
        out, start = {}, 0
        for d, c in zip(self.descriptors, self.codecs):
            out[d.name] = (start, start + c.width)
            start += c.width
        return out

    def encodable_elements(self) -> frozenset:
        sets = [d.encodable_elements() for d in self.descriptors]
        return frozenset.intersection(*sets) if sets else frozenset()

    def featurize(self, graph) -> np.ndarray:
        """
        (N, feature_width) float32 matrix in node order.
        """
        graph = getattr(graph, "graph", graph)
        n = graph.num_nodes
        blocks = []
        for descriptor, codec in zip(self.descriptors, self.codecs):
            values = descriptor.compute(graph)
            blocks.append(np.stack([codec.encode(values[i]) for i in range(n)]))
        if not blocks:
            return np.zeros((n, 0), dtype=np.float32)
        return np.hstack(blocks).astype(np.float32)

    def decode(self, features: np.ndarray) -> List[Dict[str, Any]]:
        """Per-node {feature name: decoded value}."""
        features = np.asarray(features)
        if features.ndim != 2 or features.shape[1] != self.feature_width:
            raise FeaturizationError(
                f"Expected (N, {self.feature_width}) features, got {features.shape}"
            )
        slices = self.column_slices()
        return [
            {
                d.name: c.decode(row[slices[d.name][0]:slices[d.name][1]])
                for d, c in zip(self.descriptors, self.codecs)
            }
            for row in features
        ]
