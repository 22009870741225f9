"""Node priority policies for candidate queues.

A policy maps a candidate node to a score; lower scores expand first and ties
fall back to insertion order. Policies read the graph and the other frontiers
through an :class:`ExpansionContext` owned by the engine.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Sequence, Set, Tuple

import numpy as np

from ..errors import InvalidConfigurationError
from .result import ExpansionStats, DiscoveredPath

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import FrontierState

logger = logging.getLogger(__name__)

__all__ = [
    "ExpansionContext",
    "PriorityPolicy",
    "DegreeAscending",
    "Fifo",
    "RandomPriority",
    "PathPotential",
    "RetrospectiveSalience",
]


class ExpansionContext:
    """Cached view of the graph and frontier state shared with policies.

    Degree and neighbour lookups are memoised per run. Every failed lookup is
    counted in ``stats.lookup_failures`` before the :class:`LookupError` is
    re-raised to the caller.

    Parameters
    ----------
    expander:
        Graph expander for the run.
    frontiers:
        Frontier states, indexed like the seeds.
    stats:
        Counters of the owning engine.
    async_lookups:
        ``True`` when ``expander.neighbors`` is a coroutine function. Policies
        then see only neighbourhoods already fetched or traversed.
    """

    def __init__(
        self,
        expander,
        frontiers: Sequence["FrontierState"],
        stats: ExpansionStats,
        *,
        async_lookups: bool = False,
    ) -> None:
        self.expander = expander
        self.frontiers = frontiers
        self.stats = stats
        self.async_lookups = async_lookups
        self._degrees: Dict[str, int] = {}
        self._neighbors: Dict[str, Tuple[str, ...]] = {}
        self._known: Dict[str, Set[str]] = {}

    def degree(self, node: str) -> int:
        cached = self._degrees.get(node)
        if cached is not None:
            return cached
        try:
            value = int(self.expander.degree(node))
        except LookupError:
            self.stats.lookup_failures += 1
            raise
        self._degrees[node] = value
        return value

    def neighbors(self, node: str) -> Tuple[str, ...]:
        """Return the neighbours of ``node``, fetching synchronously if needed."""

        cached = self._neighbors.get(node)
        if cached is not None:
            return cached
        if self.async_lookups:
            return tuple(sorted(self._known.get(node, ())))
        try:
            found = tuple(self.expander.neighbors(node))
        except LookupError:
            self.stats.lookup_failures += 1
            raise
        self._neighbors[node] = found
        return found

    def store_neighbors(self, node: str, found: Sequence[str]) -> Tuple[str, ...]:
        """Cache a neighbour list fetched by the engine."""

        result = tuple(found)
        self._neighbors[node] = result
        return result

    def cached_neighbors(self, node: str) -> Tuple[str, ...] | None:
        return self._neighbors.get(node)

    def note_edge(self, source: str, target: str) -> None:
        """Remember a traversed edge in both directions."""

        self._known.setdefault(source, set()).add(target)
        self._known.setdefault(target, set()).add(source)

    def visited_by_others(self, node: str, index: int) -> bool:
        return any(f.index != index and node in f.visited for f in self.frontiers)


class PriorityPolicy:
    """Base class for queue ordering policies."""

    name = "policy"

    def score(
        self, node: str, frontier: "FrontierState", context: ExpansionContext
    ) -> float:
        """Return the queue key for ``node`` in ``frontier``."""

        raise NotImplementedError

    def on_path(self, path: DiscoveredPath, context: ExpansionContext) -> bool:
        """React to a newly reconstructed path.

        Returns ``True`` when every queued candidate must be rescored.
        """

        return False

    def reset(self) -> None:
        """Drop state carried over from a previous run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class DegreeAscending(PriorityPolicy):
    """Expand low-degree nodes first, deferring hubs."""

    name = "degree"

    def score(self, node, frontier, context):
        return float(context.degree(node))


class Fifo(PriorityPolicy):
    """Plain breadth-first order via the queue's insertion counter."""

    name = "fifo"

    def score(self, node, frontier, context):
        return float(frontier.queue.next_order)


class RandomPriority(PriorityPolicy):
    """Uniform random scores from a seeded generator.

    Draws happen in admission order, so a fixed ``seed`` reproduces a run.
    """

    name = "random"

    def __init__(self, seed: int = 42) -> None:
        if not isinstance(seed, (int, np.integer)) or isinstance(seed, bool):
            raise InvalidConfigurationError(
                f"random seed must be an integer, got {seed!r}"
            )
        self.seed = int(seed)
        self._rng = np.random.default_rng(seed)

    def reset(self) -> None:
        self._rng = np.random.default_rng(self.seed)

    def score(self, node, frontier, context):
        return float(self._rng.random())

    def __repr__(self) -> str:
        return f"RandomPriority(seed={self.seed})"


class PathPotential(PriorityPolicy):
    """Degree weighted by contact with other frontiers.

    ``score(v) = deg(v) / (1 + pp(v))`` where ``pp(v)`` counts the neighbours
    of ``v`` already visited by a frontier other than the one scoring it. With
    no contact the score is the plain degree.
    """

    name = "path-potential"

    def path_potential(self, node: str, frontier: "FrontierState", context) -> int:
        return sum(
            1
            for neighbour in context.neighbors(node)
            if context.visited_by_others(neighbour, frontier.index)
        )

    def score(self, node, frontier, context):
        degree = context.degree(node)
        return degree / (1.0 + self.path_potential(node, frontier, context))


class RetrospectiveSalience(PriorityPolicy):
    """Two-phase policy: degree order until the first path, then salience.

    Phase 1 scores ``deg(v)``. Once the first cross-frontier path is
    reconstructed the policy switches permanently to
    ``deg(v) * (1 - mi(v))`` where ``mi(v)`` is the largest Jaccard similarity
    between the neighbourhood of ``v`` and the node set of any discovered
    path. Nodes resembling discovered paths are pulled forward.
    """

    name = "retrospective-salience"

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.salience_active = False
        self._paths: List[frozenset] = []
        # node -> (paths already folded in, running maximum)
        self._estimates: Dict[str, Tuple[int, float]] = {}

    def estimated_mi(self, node: str, context: ExpansionContext) -> float:
        seen, value = self._estimates.get(node, (0, 0.0))
        if seen == len(self._paths):
            return value
        try:
            neighbourhood = set(context.neighbors(node))
        except LookupError:
            neighbourhood = set()
        for path_nodes in self._paths[seen:]:
            union = len(neighbourhood | path_nodes)
            if union:
                value = max(value, len(neighbourhood & path_nodes) / union)
        self._estimates[node] = (len(self._paths), value)
        return value

    def score(self, node, frontier, context):
        degree = float(context.degree(node))
        if not self.salience_active:
            return degree
        return degree * (1.0 - self.estimated_mi(node, context))

    def on_path(self, path, context):
        self._paths.append(frozenset(path.nodes))
        if self.salience_active:
            return False
        self.salience_active = True
        logger.info(
            "salience phase active after path %s -> %s (%d nodes)",
            path.from_seed,
            path.to_seed,
            len(path.nodes),
        )
        return True

    def __repr__(self) -> str:
        phase = "salience" if self.salience_active else "degree"
        return f"RetrospectiveSalience(phase={phase!r})"

