"""Multi-frontier expansion engine.

One frontier grows from each seed. Every iteration the scheduler picks an
active frontier, which pops its best candidate, visits it, reports overlaps
with the other frontiers and queues the unvisited neighbours. The run ends
when the termination strategy is satisfied, every queue is empty or a
budget is spent; the :class:`ExpansionResult` is then built exactly once.

Example
-------
>>> import networkx as nx
>>> from Seed_Frontier.graph.expander import NetworkXExpander
>>> engine = ExpansionEngine(NetworkXExpander(nx.path_graph(["a", "b", "c"])), ["a", "c"])
>>> engine.run().termination_reason.value
'overlap-satisfied'
"""

from __future__ import annotations

import copy
import logging
import time
from collections import defaultdict
from types import MappingProxyType
from typing import DefaultDict, Iterable, List, Optional, Sequence, Set, Tuple

from ..config import ExpansionConfig
from ..errors import InvalidConfigurationError
from ..graph.expander import is_async_expander
from ..logging.logger import EventLog
from .frontier import FrontierState, OwnershipRegistry, ParentEntry, edge_key
from .paths import PathReconstructor
from .policies import ExpansionContext
from .result import (
    DiscoveredPath,
    ExpansionResult,
    ExpansionStats,
    OverlapEvent,
    OverlapMetadata,
    TerminationReason,
)

logger = logging.getLogger(__name__)

__all__ = ["ExpansionEngine"]


class ExpansionEngine:
    """Grow one search frontier per seed until they meet.

    Parameters
    ----------
    expander:
        Graph access object providing ``neighbors`` and ``degree``. When
        ``neighbors`` is a coroutine function the engine must be driven with
        :meth:`run_async`.
    seeds:
        Ordered, distinct node identifiers; frontier ``i`` grows from
        ``seeds[i]``.
    config:
        Strategies and budgets. Defaults to :class:`ExpansionConfig()`. The
        engine works on a private copy, so one config can drive any number
        of engines and each starts from fresh strategy state.

    Raises
    ------
    InvalidConfigurationError
        If ``seeds`` is empty, holds duplicates or names a node the expander
        does not know.
    """

    def __init__(
        self,
        expander,
        seeds: Iterable[str],
        config: Optional[ExpansionConfig] = None,
    ) -> None:
        self.expander = expander
        self.config = (
            copy.deepcopy(config) if config is not None else ExpansionConfig()
        )
        self.seeds: Tuple[str, ...] = tuple(seeds)
        self._validate_seeds()

        self._async = is_async_expander(expander)
        self._stats = ExpansionStats()
        self._frontiers: List[FrontierState] = [
            FrontierState(index=i, seed=seed) for i, seed in enumerate(self.seeds)
        ]
        self._registry = OwnershipRegistry()
        self._events: List[OverlapEvent] = []
        self._matrix: DefaultDict[Tuple[int, int], Set[str]] = defaultdict(set)
        self._sampled_edges: Set[Tuple[str, str]] = set()
        self._context = ExpansionContext(
            expander, self._frontiers, self._stats, async_lookups=self._async
        )
        self._paths = PathReconstructor(
            self._frontiers, cap=self.config.target_paths_per_pair
        )
        self._event_log = (
            EventLog(self.config.log_path) if self.config.log_path is not None else None
        )

        self._iteration = 0
        self._active: Optional[int] = None
        self._started: Optional[float] = None
        self._reason: Optional[TerminationReason] = None
        self._result: Optional[ExpansionResult] = None

        self.config.priority_policy.reset()
        self.config.scheduler.reset()
        self.config.termination_strategy.reset()
        for frontier in self._frontiers:
            frontier.queue.push(frontier.seed, 0.0)

        logger.debug(
            "engine: %d seeds, policy=%r scheduler=%r overlap=%r termination=%r",
            len(self.seeds),
            self.config.priority_policy,
            self.config.scheduler,
            self.config.overlap_strategy,
            self.config.termination_strategy,
        )

    def _validate_seeds(self) -> None:
        if not self.seeds:
            raise InvalidConfigurationError("at least one seed is required")
        seen: Set[str] = set()
        duplicates: List[str] = []
        for seed in self.seeds:
            if seed in seen and seed not in duplicates:
                duplicates.append(seed)
            seen.add(seed)
        if duplicates:
            raise InvalidConfigurationError(f"duplicate seeds: {duplicates}")
        missing = [s for s in self.seeds if not self.expander.has_node(s)]
        if missing:
            raise InvalidConfigurationError(f"seeds not in graph: {missing}")

    # ------------------------------------------------------------------
    # read-only diagnostics
    @property
    def iteration(self) -> int:
        return self._iteration

    @property
    def termination_reason(self) -> Optional[TerminationReason]:
        return self._reason

    @property
    def is_terminated(self) -> bool:
        return self._reason is not None

    @property
    def frontiers(self) -> Tuple[FrontierState, ...]:
        return tuple(self._frontiers)

    @property
    def overlap_events(self) -> Tuple[OverlapEvent, ...]:
        return tuple(self._events)

    @property
    def paths(self) -> Tuple[DiscoveredPath, ...]:
        return self._paths.paths

    @property
    def result(self) -> ExpansionResult:
        """The terminal snapshot; only available once the run has ended."""

        if self._result is None:
            raise RuntimeError("engine has not terminated yet")
        return self._result

    def snapshot_stats(self) -> ExpansionStats:
        """Return a copy of the in-progress counters."""

        return self._stats.copy()

    # ------------------------------------------------------------------
    # driving
    def run(self) -> ExpansionResult:
        """Expand until termination and return the result."""

        if self.is_terminated:
            raise RuntimeError("engine has already terminated")
        if self._async:
            raise InvalidConfigurationError(
                "expander has asynchronous neighbors(); use run_async()"
            )
        while self.step():
            pass
        return self.result

    async def run_async(self) -> ExpansionResult:
        """Expand until termination, awaiting neighbour lookups one at a time."""

        if self.is_terminated:
            raise RuntimeError("engine has already terminated")
        while True:
            popped = self._begin_iteration()
            if popped is None:
                break
            frontier, node = popped
            neighbours = await self._lookup_async(node)
            if not self._finish_iteration(frontier, node, neighbours):
                break
        return self.result

    def step(self) -> bool:
        """Run one iteration; return ``True`` while the engine keeps running."""

        if self._async:
            raise InvalidConfigurationError(
                "expander has asynchronous neighbors(); use run_async()"
            )
        if self.is_terminated:
            return False
        popped = self._begin_iteration()
        if popped is None:
            return False
        frontier, node = popped
        return self._finish_iteration(frontier, node, self._lookup(node))

    # ------------------------------------------------------------------
    # iteration phases
    def _begin_iteration(self) -> Optional[Tuple[FrontierState, str]]:
        """Select, pop and visit the next node; ``None`` when the run ended."""

        if self._started is None:
            self._started = time.monotonic()
        budget = self.config.max_duration
        if budget is not None and time.monotonic() - self._started >= budget:
            self._terminate(TerminationReason.TIME_BUDGET)
            return None

        while True:
            index = self.config.scheduler.select(self._frontiers)
            for frontier in self._frontiers:
                if not frontier.queue:
                    frontier.exhausted = True
            if index is None:
                self._terminate(TerminationReason.EXHAUSTION)
                return None
            frontier = self._frontiers[index]
            entry = frontier.queue.pop()
            self._stats.queue_pops += 1
            if entry.node in frontier.visited:
                self._stats.discarded += 1
                continue
            break

        if self._active is not None and index != self._active:
            self._stats.frontier_switches += 1
        self._active = index

        iteration = self._iteration + 1
        node = entry.node
        frontier.visit(node, entry.parent, iteration)
        self._registry.claim(node, index)
        overlapping = self.config.overlap_strategy.detect(
            node, frontier, self._frontiers, self._registry
        )
        for other in overlapping:
            self._record_overlap(OverlapEvent(iteration, index, other, node))
        return frontier, node

    def _record_overlap(self, event: OverlapEvent) -> None:
        self._events.append(event)
        self._matrix[event.pair].add(event.meeting_node)
        self._stats.overlap_events += 1
        logger.debug(
            "overlap: frontiers %d/%d at %r (iteration %d)",
            event.frontier_a,
            event.frontier_b,
            event.meeting_node,
            event.iteration,
        )
        if self._event_log is not None:
            self._event_log.record(
                "overlap",
                event.iteration,
                frontier_a=event.frontier_a,
                frontier_b=event.frontier_b,
                meeting_node=event.meeting_node,
            )

        path = self._paths.add(event)
        if path is None:
            return
        self._stats.paths_found += 1
        if self._event_log is not None:
            self._event_log.record(
                "path",
                event.iteration,
                from_seed=path.from_seed,
                to_seed=path.to_seed,
                nodes=list(path.nodes),
            )
        if self.config.priority_policy.on_path(path, self._context):
            self._rescore()

    def _rescore(self) -> None:
        policy = self.config.priority_policy
        for frontier in self._frontiers:

            def score(node: str, frontier: FrontierState = frontier) -> float:
                try:
                    return policy.score(node, frontier, self._context)
                except LookupError:
                    return frontier.queue.score_of(node)

            frontier.queue.rescore(score)

    def _lookup(self, node: str) -> Sequence[str]:
        try:
            return self._context.neighbors(node)
        except LookupError as exc:
            logger.debug("neighbour lookup failed for %r: %s", node, exc)
            return ()

    async def _lookup_async(self, node: str) -> Sequence[str]:
        if not self._async:
            return self._lookup(node)
        cached = self._context.cached_neighbors(node)
        if cached is not None:
            return cached
        try:
            found = await self.expander.neighbors(node)
        except LookupError as exc:
            self._stats.lookup_failures += 1
            logger.debug("neighbour lookup failed for %r: %s", node, exc)
            return ()
        return self._context.store_neighbors(node, found)

    def _finish_iteration(
        self, frontier: FrontierState, node: str, neighbours: Sequence[str]
    ) -> bool:
        """Queue neighbours, update counters and evaluate stopping rules."""

        policy = self.config.priority_policy
        for neighbour in neighbours:
            if neighbour in frontier.visited:
                continue
            try:
                score = policy.score(neighbour, frontier, self._context)
            except LookupError as exc:
                logger.debug("skipping edge %r -> %r: %s", node, neighbour, exc)
                continue
            self._stats.edges_traversed += 1
            self._sampled_edges.add((node, neighbour))
            self._context.note_edge(node, neighbour)
            frontier.queue.push(
                neighbour, score, ParentEntry(node, edge_key(node, neighbour))
            )

        self._iteration += 1
        self._stats.iterations = self._iteration
        self._stats.nodes_expanded += 1
        try:
            degree = self._context.degree(node)
        except LookupError:
            degree = len(neighbours)
        self._stats.record_degree(degree)

        reason = self._check_termination()
        if reason is not None:
            self._terminate(reason)
            return False
        return True

    def _check_termination(self) -> Optional[TerminationReason]:
        cfg = self.config
        if len(self._frontiers) == 1:
            handler = cfg.n1_handling
            if handler is None or handler.satisfied(self._frontiers[0]):
                return TerminationReason.N1_COVERAGE
        elif cfg.target_paths_per_pair is not None:
            if self._paths.all_saturated():
                return TerminationReason.TARGET_PATHS
        elif cfg.termination_strategy.should_terminate(
            self._frontiers, self._events, self._iteration
        ):
            return TerminationReason.OVERLAP_SATISFIED
        if cfg.max_iterations is not None and self._iteration >= cfg.max_iterations:
            return TerminationReason.MAX_ITERATIONS
        return None

    # ------------------------------------------------------------------
    # termination
    def _terminate(self, reason: TerminationReason) -> None:
        self._reason = reason
        for frontier in self._frontiers:
            frontier.freeze()
        self._result = self._build_result()
        logger.info(
            "terminated: %s after %d iterations, %d paths, %d sampled nodes",
            reason.value,
            self._iteration,
            len(self._result.paths),
            len(self._result.sampled_nodes),
        )
        if self._event_log is not None:
            self._event_log.record(
                "terminated", self._iteration, reason=reason.value, **self._stats.to_dict()
            )

    def _build_result(self) -> ExpansionResult:
        paths = self._paths.paths
        nodes = frozenset().union(*(f.visited for f in self._frontiers))
        edges = frozenset(self._sampled_edges)
        nodes, edges = self.config.between_graph.extract(
            self._frontiers, self._events, paths, nodes, edges
        )
        coverage = None
        handler = self.config.n1_handling
        if len(self._frontiers) == 1 and handler is not None:
            coverage = handler.achieved(self._frontiers[0])
        matrix = MappingProxyType(
            {pair: frozenset(found) for pair, found in sorted(self._matrix.items())}
        )
        return ExpansionResult(
            seeds=self.seeds,
            paths=paths,
            sampled_nodes=nodes,
            sampled_edges=edges,
            visited_per_frontier=tuple(frozenset(f.visited) for f in self._frontiers),
            stats=self._stats.frozen(),
            overlap_metadata=OverlapMetadata(
                termination_reason=self._reason,
                overlap_events=tuple(self._events),
                overlap_matrix=matrix,
                iterations=self._iteration,
                coverage=coverage,
            ),
        )

    def __repr__(self) -> str:
        state = self._reason.value if self._reason else "running"
        return (
            f"ExpansionEngine(seeds={list(self.seeds)!r}, "
            f"iteration={self._iteration}, state={state})"
        )
