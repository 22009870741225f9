"""Graph access used by the expansion engine.

The engine only ever asks two questions of a graph: which nodes neighbour a
node, and what its degree is. :class:`GraphExpander` captures that contract;
:class:`NetworkXExpander` answers it from an in-memory :mod:`networkx` graph.
Expanders signal a missing node by raising :class:`LookupError` (normally
:class:`~Seed_Frontier.errors.GraphAccessError`); the engine treats such
failures as skippable.
"""

from __future__ import annotations

import inspect
from typing import Any, Sequence

import networkx as nx

from ..errors import GraphAccessError

__all__ = ["GraphExpander", "NetworkXExpander", "is_async_expander"]


class GraphExpander:
    """Neighbour and degree lookup for node identifiers.

    Subclasses implement :meth:`neighbors` and :meth:`degree`. ``neighbors``
    may be declared ``async``; such expanders must be driven with
    :meth:`ExpansionEngine.run_async`.
    """

    def neighbors(self, node: str) -> Sequence[str]:
        """Return the neighbours of ``node`` in a stable order."""

        raise NotImplementedError

    def degree(self, node: str) -> int:
        """Return the degree of ``node``."""

        raise NotImplementedError

    def has_node(self, node: str) -> bool:
        """Return ``True`` when ``node`` exists.

        The default asks for the degree and treats a lookup failure as absence.
        """

        try:
            self.degree(node)
        except LookupError:
            return False
        return True


class NetworkXExpander(GraphExpander):
    """Expose a :class:`networkx.Graph` through the expander contract.

    Neighbour order follows the graph's adjacency insertion order, which makes
    runs reproducible for a given graph construction. For directed graphs the
    neighbours are the successors and the degree is the total degree.
    """

    def __init__(self, graph: nx.Graph) -> None:
        self.graph = graph

    def neighbors(self, node: str) -> Sequence[str]:
        if node not in self.graph:
            raise GraphAccessError(node)
        return tuple(self.graph.neighbors(node))

    def degree(self, node: str) -> int:
        if node not in self.graph:
            raise GraphAccessError(node)
        return int(self.graph.degree(node))

    def has_node(self, node: str) -> bool:
        return node in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()


def is_async_expander(expander: Any) -> bool:
    """Return ``True`` when ``expander.neighbors`` is a coroutine function."""

    return inspect.iscoroutinefunction(getattr(expander, "neighbors", None))
