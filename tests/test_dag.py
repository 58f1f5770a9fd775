"""
Tests for graph/dag.py - DAG construction and traversal helpers.
"""

import pytest
from bnrevise.errors import InvalidArgumentError
from bnrevise.graph import DAG


@pytest.fixture
def diamond():
    return DAG(["A", "B", "C", "D"], [("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")])


class TestDAG:
    """Tests for DAG"""

    def test_adjacency(self, diamond):
        assert diamond.children["A"] == {"B", "C"}
        assert diamond.parents["D"] == {"B", "C"}
        assert diamond.parents["A"] == set()

    def test_topological_order(self, diamond):
        position = {n: i for i, n in enumerate(diamond.topo)}
        for parent, child in diamond.edges:
            assert position[parent] < position[child]

    def test_ancestors_and_descendants(self, diamond):
        assert diamond.ancestors["D"] == {"A", "B", "C"}
        assert diamond.descendants["A"] == {"B", "C", "D"}
        assert diamond.descendants["D"] == set()
        assert diamond.is_descendant("D", "A")
        assert not diamond.is_descendant("B", "C")

    def test_cycle_rejected(self):
        with pytest.raises(InvalidArgumentError):
            DAG(["A", "B", "C"], [("A", "B"), ("B", "C"), ("C", "A")])

    def test_unknown_node_rejected(self):
        with pytest.raises(InvalidArgumentError):
            DAG(["A"], [("A", "B")])

    def test_repeated_node_rejected(self):
        with pytest.raises(InvalidArgumentError):
            DAG(["A", "A"], [])

    def test_str(self, diamond):
        text = str(diamond)
        assert "parents" in text and "B, C" in text

    def test_roots(self, diamond):
        assert diamond.roots() == ["A"]

    def test_declaration_order_kept(self):
        dag = DAG(["X", "Y", "Z"], [("X", "Z"), ("Y", "Z")])
        assert dag.topo == ("X", "Y", "Z")
        dag = DAG(["Z", "Y", "X"], [("X", "Z"), ("Y", "Z")])
        assert dag.topo == ("Y", "X", "Z")
