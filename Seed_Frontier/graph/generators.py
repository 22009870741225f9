"""Small deterministic graphs with string node identifiers.

These mirror the fixture topologies used when validating traversal variants:
chains, lattices, stars, multi-hub graphs and barbells.
"""

from __future__ import annotations

from typing import List

import networkx as nx

__all__ = [
    "chain_graph",
    "grid_graph",
    "grid_node",
    "star_graph",
    "hub_graph",
    "barbell_graph",
]


def chain_graph(length: int, prefix: str = "N") -> nx.Graph:
    """Return a path ``N0 - N1 - ... - N{length-1}``."""

    g = nx.path_graph(length)
    return nx.relabel_nodes(g, {i: f"{prefix}{i}" for i in g.nodes})


def grid_node(row: int, col: int) -> str:
    """Identifier used by :func:`grid_graph` for ``(row, col)``."""

    return f"R{row}C{col}"


def grid_graph(rows: int, cols: int) -> nx.Graph:
    """Return a ``rows`` x ``cols`` lattice with 4-neighbour connectivity."""

    g = nx.grid_2d_graph(rows, cols)
    return nx.relabel_nodes(g, {(r, c): grid_node(r, c) for r, c in g.nodes})


def star_graph(leaves: int, hub: str = "H", prefix: str = "S") -> nx.Graph:
    """Return a hub connected to ``leaves`` leaves ``S0 .. S{leaves-1}``."""

    g = nx.Graph()
    g.add_node(hub)
    for i in range(leaves):
        g.add_edge(hub, f"{prefix}{i}")
    return g


def hub_graph(hubs: int, leaves_per_hub: int) -> nx.Graph:
    """Return fully connected hubs ``H0..`` each carrying its own leaves.

    Leaf ``L{h}_{i}`` hangs off hub ``H{h}``.
    """

    g = nx.Graph()
    names: List[str] = [f"H{h}" for h in range(hubs)]
    g.add_nodes_from(names)
    for i, a in enumerate(names):
        for b in names[i + 1 :]:
            g.add_edge(a, b)
    for h, name in enumerate(names):
        for i in range(leaves_per_hub):
            g.add_edge(name, f"L{h}_{i}")
    return g


def barbell_graph(clique: int, bridge: int) -> nx.Graph:
    """Return two ``clique``-sized cliques joined by a ``bridge``-node path.

    Left clique nodes are ``A0..``, right clique nodes ``B0..`` and bridge
    nodes ``P0..``. ``A0`` and ``B0`` are the clique members attached to the
    bridge.
    """

    g = nx.barbell_graph(clique, bridge)
    mapping = {}
    for i in range(clique):
        mapping[i] = f"A{clique - 1 - i}"
    for i in range(bridge):
        mapping[clique + i] = f"P{i}"
    for i in range(clique):
        mapping[clique + bridge + i] = f"B{i}"
    return nx.relabel_nodes(g, mapping)
