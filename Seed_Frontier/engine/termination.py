"""Stopping rules evaluated at the end of every engine iteration.

Strategies inspect the frontiers and the overlap event log and return
``True`` when the run should stop. With fewer than two frontiers no overlap
can occur, so every strategy reports ``True`` immediately; single-seed runs
that should keep sampling use :class:`CoverageThreshold` instead.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Iterable, Sequence, Set, Tuple

import networkx as nx

from ..errors import InvalidConfigurationError
from .result import OverlapEvent

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import FrontierState

__all__ = [
    "TerminationStrategy",
    "CommonConvergence",
    "FullPairwise",
    "TransitiveConnectivity",
    "Exhaustion",
    "CoverageThreshold",
    "overlap_graph",
]


def overlap_graph(count: int, events: Iterable[OverlapEvent]) -> nx.Graph:
    """Return the graph over frontier indices with an edge per overlapping pair."""

    g = nx.Graph()
    g.add_nodes_from(range(count))
    g.add_edges_from(event.pair for event in events)
    return g


class TerminationStrategy:
    """Base class for stopping rules."""

    name = "termination"

    def should_terminate(
        self,
        frontiers: Sequence["FrontierState"],
        events: Sequence[OverlapEvent],
        iteration: int,
    ) -> bool:
        raise NotImplementedError

    def reset(self) -> None:
        """Drop state carried over from a previous run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class CommonConvergence(TerminationStrategy):
    """Stop once some node is visited by every frontier."""

    name = "converge"

    def should_terminate(self, frontiers, events, iteration):
        if len(frontiers) <= 1:
            return True
        smallest = min(frontiers, key=lambda f: len(f.visited))
        others = [f.visited for f in frontiers if f is not smallest]
        return any(all(node in v for v in others) for node in smallest.visited)


class _PairTracker(TerminationStrategy):
    """Incrementally collect the distinct pairs seen in the event log."""

    def __init__(self) -> None:
        self._pairs: Set[Tuple[int, int]] = set()
        self._seen = 0

    def reset(self) -> None:
        self._pairs.clear()
        self._seen = 0

    def _update(self, events: Sequence[OverlapEvent]) -> Set[Tuple[int, int]]:
        for event in events[self._seen :]:
            self._pairs.add(event.pair)
        self._seen = len(events)
        return self._pairs


class FullPairwise(_PairTracker):
    """Stop once every pair of frontiers has overlapped at least once."""

    name = "fullpair"

    def should_terminate(self, frontiers, events, iteration):
        n = len(frontiers)
        if n <= 1:
            return True
        return len(self._update(events)) >= n * (n - 1) // 2


class TransitiveConnectivity(_PairTracker):
    """Stop once the overlap graph over frontiers is connected."""

    name = "transitive"

    def should_terminate(self, frontiers, events, iteration):
        n = len(frontiers)
        if n <= 1:
            return True
        pairs = self._update(events)
        if len(pairs) < n - 1:
            return False
        g = nx.Graph()
        g.add_nodes_from(range(n))
        g.add_edges_from(pairs)
        return nx.is_connected(g)


class Exhaustion(TerminationStrategy):
    """Never stop on overlap; run until the queues or a budget run out."""

    name = "exhaustion"

    def should_terminate(self, frontiers, events, iteration):
        return len(frontiers) <= 1


class CoverageThreshold:
    """Single-seed stopping rule based on the visited fraction of the graph.

    Parameters
    ----------
    total_nodes:
        Number of nodes in the graph.
    coverage:
        Fraction in ``(0, 1]`` of ``total_nodes`` to visit before stopping.
    """

    name = "coverage"

    def __init__(self, total_nodes: int, coverage: float = 1.0) -> None:
        if total_nodes < 1:
            raise InvalidConfigurationError(
                f"total_nodes must be >= 1, got {total_nodes!r}"
            )
        if not 0.0 < coverage <= 1.0:
            raise InvalidConfigurationError(
                f"coverage must be in (0, 1], got {coverage!r}"
            )
        self.total_nodes = int(total_nodes)
        self.coverage = float(coverage)

    @property
    def required(self) -> int:
        """Visited-node count that satisfies the threshold."""

        # tolerance keeps 0.3 * 10 at 3 despite float rounding
        return max(1, math.ceil(self.coverage * self.total_nodes - 1e-9))

    def achieved(self, frontier: "FrontierState") -> float:
        return len(frontier.visited) / self.total_nodes

    def satisfied(self, frontier: "FrontierState") -> bool:
        return len(frontier.visited) >= self.required

    def __repr__(self) -> str:
        return (
            f"CoverageThreshold(total_nodes={self.total_nodes}, "
            f"coverage={self.coverage})"
        )
