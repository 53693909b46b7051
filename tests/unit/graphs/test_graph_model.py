"""Tests for the Graph / Edge output model."""

import dataclasses

import numpy as np
import pytest

from atomgraph.graphs.graph import Edge, Graph


@pytest.fixture
def path_graph():
    """0 - 1 - 2 with weights 1.0 and 0.5, plus isolated node 3."""
    edges = (
        Edge(1, 2, 0.5, 2.0, (0, 0, 1)),
        Edge(0, 1, 1.0, 1.0),
    )
    return Graph(("C", "O", "H", "He"), edges)


def test_edges_are_sorted(path_graph):
    assert [e.pair for e in path_graph.edges] == [(0, 1), (1, 2)]
    assert path_graph.num_nodes == 4
    assert path_graph.num_edges == 2


def test_neighbors_and_degree(path_graph):
    assert path_graph.neighbors(1) == [0, 2]
    assert path_graph.neighbors(3) == []
    np.testing.assert_array_equal(path_graph.degree(), [1, 2, 1, 0])
    assert path_graph.isolated_nodes() == [3]


@pytest.mark.parametrize(
    "edge",
    [
        Edge(1, 1, 1.0, 1.0),
        Edge(2, 1, 1.0, 1.0),
        Edge(0, 4, 1.0, 1.0),
        Edge(0, 1, 0.0, 1.0),
        Edge(0, 1, -1.0, 1.0),
        Edge(0, 1, float("inf"), 1.0),
    ],
)
def test_invalid_edges_rejected(edge):
    with pytest.raises(ValueError):
        Graph(("H", "H", "H", "H"), (edge,))


def test_duplicate_edges_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        Graph(("H", "H"), (Edge(0, 1, 1.0, 1.0), Edge(0, 1, 0.5, 2.0)))


def test_graph_is_frozen(path_graph):
    with pytest.raises(dataclasses.FrozenInstanceError):
        path_graph.edges = ()


def test_adjacency_matrix(path_graph):
    adj = path_graph.adjacency_matrix()
    np.testing.assert_allclose(adj, adj.T)
    assert adj[0, 1] == 1.0
    assert adj[2, 1] == 0.5
    binary = path_graph.adjacency_matrix(weighted=False)
    assert binary[1, 2] == 1.0
    assert binary.sum() == 4


def test_laplacian_unnormalized(path_graph):
    lap = path_graph.laplacian(normalized=False)
    np.testing.assert_allclose(lap.sum(axis=1), 0.0)
    assert lap[1, 1] == pytest.approx(1.5)


def test_laplacian_normalized(path_graph):
    lap = path_graph.laplacian()
    np.testing.assert_allclose(lap, lap.T)
    np.testing.assert_allclose(np.diag(lap)[:3], 1.0)
    # Isolated node gets a zero row
    np.testing.assert_allclose(lap[3], 0.0)
    assert lap[0, 1] == pytest.approx(-1.0 / np.sqrt(1.0 * 1.5))
    assert np.all(np.linalg.eigvalsh(lap) > -1e-12)


def test_edge_index_both_directions(path_graph):
    index = path_graph.edge_index()
    np.testing.assert_array_equal(index, [[0, 1, 1, 2], [1, 2, 0, 1]])
    np.testing.assert_allclose(path_graph.edge_weights(), [1.0, 0.5, 1.0, 0.5])
    np.testing.assert_allclose(path_graph.edge_distances(), [1.0, 2.0, 1.0, 2.0])


def test_empty_edge_index():
    graph = Graph(("H",))
    assert graph.edge_index().shape == (2, 0)
    assert graph.edge_weights().shape == (0,)


def test_dict_roundtrip(path_graph):
    data = path_graph.to_dict()
    assert data["edges"][1]["image"] == [0, 0, 1]
    assert Graph.from_dict(data) == path_graph
