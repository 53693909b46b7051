"""Tests for element feature descriptors."""

import pandas as pd
import pytest

from atomgraph.config import GraphConfig
from atomgraph.exceptions import FeaturizationError, UnsupportedElementError
from atomgraph.featurize.descriptors import (
    BlockDescriptor,
    ElementPropertyDescriptor,
    LookupTableDescriptor,
    OrbitalOccupationDescriptor,
)
from atomgraph.graphs.atom_graph import AtomGraph
from atomgraph.graphs.graph import Graph


@pytest.fixture
def feo_graph():
    return Graph(("Fe", "O", "O"))


def test_block(feo_graph):
    block = BlockDescriptor()
    assert block.categorical
    assert block.compute(feo_graph) == {0: "d", 1: "p", 2: "p"}
    assert block.possible_values() == ["d", "f", "p", "s"]
    assert {"Fe", "O", "Na"} <= block.encodable_elements()


def test_block_accepts_atom_graph(methane):
    ag = AtomGraph.from_structure(methane, GraphConfig(cutoff_radius=2.0))
    assert BlockDescriptor().compute(ag) == {0: "p", 1: "s", 2: "s", 3: "s", 4: "s"}


def test_orbital_occupation():
    d = OrbitalOccupationDescriptor("3d")
    assert d.name == "3d"
    assert not d.categorical
    assert d.compute(Graph(("Fe", "Cu"))) == {0: 6, 1: 10}
    assert "Fe" in d.encodable_elements()
    assert "Na" not in d.encodable_elements()


def test_orbital_occupation_unsupported(feo_graph):
    with pytest.raises(UnsupportedElementError) as info:
        OrbitalOccupationDescriptor("6p").compute(feo_graph)
    assert info.value.species == ["Fe", "O"]
    assert info.value.feature == "6p"


def test_orbital_occupation_possible_values():
    low, high = OrbitalOccupationDescriptor("6p").possible_values()
    assert low >= 1
    assert high == 6


@pytest.mark.parametrize("orbital", ["3x", "8s", "p3", ""])
def test_invalid_orbital(orbital):
    with pytest.raises(ValueError):
        OrbitalOccupationDescriptor(orbital)


def test_element_property(feo_graph):
    z = ElementPropertyDescriptor("Atomic number", "Z")
    assert z.compute(feo_graph) == {0: 26.0, 1: 8.0, 2: 8.0}
    low, high = z.possible_values()
    assert low == 1.0
    assert high >= 92.0


def test_lookup_table_numeric():
    table = pd.DataFrame({"Symbol": ["Fe", "O"], "Magnetic": [1.0, 0.0]})
    d = LookupTableDescriptor("Magnetic", table)
    assert not d.categorical
    assert d.compute(Graph(("O", "Fe"))) == {0: 0.0, 1: 1.0}
    assert d.encodable_elements() == frozenset({"Fe", "O"})
    assert d.possible_values() == (0.0, 1.0)


def test_lookup_table_categorical_inferred():
    table = pd.DataFrame({"Symbol": ["Fe", "O", "Na"], "Kind": ["metal", "nonmetal", "metal"]})
    d = LookupTableDescriptor("Kind", table)
    assert d.categorical
    assert d.possible_values() == ["metal", "nonmetal"]


def test_lookup_table_missing_values_not_encodable():
    table = pd.DataFrame({"Symbol": ["He", "O"], "Electronegativity": [None, 3.44]})
    d = LookupTableDescriptor("Electronegativity", table)
    assert d.encodable_elements() == frozenset({"O"})
    with pytest.raises(UnsupportedElementError):
        d.compute(Graph(("He",)))


def test_lookup_table_validation():
    with pytest.raises(FeaturizationError, match="Symbol"):
        LookupTableDescriptor("x", pd.DataFrame({"Element": ["H"], "x": [1]}))
    with pytest.raises(FeaturizationError, match="Duplicate"):
        LookupTableDescriptor("x", pd.DataFrame({"Symbol": ["H", "H"], "x": [1, 2]}))
    with pytest.raises(FeaturizationError, match="pass column"):
        LookupTableDescriptor("x", pd.DataFrame({"Symbol": ["H"], "a": [1], "b": [2]}))
    with pytest.raises(FeaturizationError, match="not in lookup table"):
        LookupTableDescriptor("x", pd.DataFrame({"Symbol": ["H"], "a": [1]}), column="b")


def test_lookup_table_from_csv(tmp_path):
    path = tmp_path / "table.csv"
    path.write_text("Symbol,Valence\nC,4\nH,1\n")
    d = LookupTableDescriptor.from_csv("Valence", path)
    assert d.compute(Graph(("C", "H"))) == {0: 4, 1: 1}
