import networkx as nx
import pytest

from Seed_Frontier.errors import GraphAccessError
from Seed_Frontier.graph.expander import GraphExpander, NetworkXExpander
from Seed_Frontier.graph.generators import (
    barbell_graph,
    chain_graph,
    grid_graph,
    grid_node,
    hub_graph,
    star_graph,
)


def test_networkx_expander_lookups():
    exp = NetworkXExpander(chain_graph(3))
    assert exp.neighbors("N1") == ("N0", "N2")
    assert exp.degree("N0") == 1
    assert exp.has_node("N2") and not exp.has_node("N9")
    assert len(exp) == 3


def test_missing_node_raises_lookup_error():
    exp = NetworkXExpander(chain_graph(2))
    with pytest.raises(GraphAccessError) as info:
        exp.neighbors("zz")
    assert isinstance(info.value, LookupError)
    assert info.value.node == "zz"
    with pytest.raises(LookupError):
        exp.degree("zz")


def test_base_expander_has_node_uses_degree():
    class Partial(GraphExpander):
        def degree(self, node):
            if node != "a":
                raise GraphAccessError(node)
            return 0

    assert Partial().has_node("a")
    assert not Partial().has_node("b")
    with pytest.raises(NotImplementedError):
        Partial().neighbors("a")


def test_generators():
    assert sorted(chain_graph(3).edges) == [("N0", "N1"), ("N1", "N2")]

    grid = grid_graph(3, 4)
    assert grid.number_of_nodes() == 12
    assert grid.has_edge(grid_node(0, 0), grid_node(0, 1))
    assert grid.degree(grid_node(1, 1)) == 4

    star = star_graph(10)
    assert star.degree("H") == 10
    assert set(star.neighbors("H")) == {f"S{i}" for i in range(10)}

    hubs = hub_graph(3, 2)
    assert hubs.degree("H0") == 4
    assert hubs.has_edge("H2", "L2_1")

    bell = barbell_graph(4, 2)
    assert bell.number_of_nodes() == 10
    assert nx.shortest_path(bell, "A0", "B0") == ["A0", "P0", "P1", "B0"]
    assert bell.has_edge("A0", "A3") and bell.has_edge("B0", "B3")
