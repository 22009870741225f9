"""Records produced by :class:`~Seed_Frontier.engine.engine.ExpansionEngine`.

The engine appends :class:`OverlapEvent` objects while it runs and builds a
single :class:`ExpansionResult` once it reaches a terminal state. Results are
frozen dataclasses over frozensets and read-only mappings so downstream
metric code can share them freely.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

__all__ = [
    "TerminationReason",
    "OverlapEvent",
    "DiscoveredPath",
    "ExpansionStats",
    "OverlapMetadata",
    "ExpansionResult",
    "degree_bucket",
    "pair_key",
]

# Upper bounds (inclusive) for the degree histogram.
_DEGREE_BUCKETS: Tuple[Tuple[int, str], ...] = (
    (5, "1-5"),
    (10, "6-10"),
    (50, "11-50"),
    (100, "51-100"),
    (500, "101-500"),
    (1000, "501-1000"),
)


def degree_bucket(degree: int) -> str:
    """Return the histogram label for ``degree``."""

    for bound, label in _DEGREE_BUCKETS:
        if degree <= bound:
            return label
    return "1000+"


def pair_key(a: int, b: int) -> Tuple[int, int]:
    """Return the unordered key for frontiers ``a`` and ``b``."""

    return (a, b) if a < b else (b, a)


class TerminationReason(str, Enum):
    """Why an engine run stopped."""

    OVERLAP_SATISFIED = "overlap-satisfied"
    N1_COVERAGE = "n1-coverage"
    MAX_ITERATIONS = "max-iterations"
    EXHAUSTION = "exhaustion"
    TIME_BUDGET = "time-budget"
    TARGET_PATHS = "target-paths"


@dataclass(frozen=True)
class OverlapEvent:
    """Two frontiers meeting at ``meeting_node`` during ``iteration``.

    ``frontier_a`` is the frontier that was active when the overlap was
    detected and ``frontier_b`` the frontier it overlapped with.
    """

    iteration: int
    frontier_a: int
    frontier_b: int
    meeting_node: str

    @property
    def pair(self) -> Tuple[int, int]:
        return pair_key(self.frontier_a, self.frontier_b)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration": self.iteration,
            "frontier_a": self.frontier_a,
            "frontier_b": self.frontier_b,
            "meeting_node": self.meeting_node,
        }


@dataclass(frozen=True)
class DiscoveredPath:
    """A seed-to-seed path spliced from two parent chains."""

    from_seed: int
    to_seed: int
    nodes: Tuple[str, ...]

    @property
    def pair(self) -> Tuple[int, int]:
        return pair_key(self.from_seed, self.to_seed)

    @property
    def edges(self) -> Tuple[Tuple[str, str], ...]:
        """Consecutive node pairs along the path."""

        return tuple(zip(self.nodes, self.nodes[1:]))

    def __len__(self) -> int:
        return max(0, len(self.nodes) - 1)


@dataclass
class ExpansionStats:
    """Counters updated while the engine runs.

    Counters only ever grow. ``queue_pops`` equals ``nodes_expanded`` plus
    ``discarded`` at every iteration boundary.
    """

    nodes_expanded: int = 0
    edges_traversed: int = 0
    iterations: int = 0
    degree_distribution: Dict[str, int] = field(default_factory=dict)
    queue_pops: int = 0
    discarded: int = 0
    lookup_failures: int = 0
    overlap_events: int = 0
    paths_found: int = 0
    frontier_switches: int = 0

    def record_degree(self, degree: int) -> None:
        """Increment the histogram bucket for ``degree``."""

        label = degree_bucket(degree)
        self.degree_distribution[label] = self.degree_distribution.get(label, 0) + 1

    def copy(self) -> "ExpansionStats":
        return replace(self, degree_distribution=dict(self.degree_distribution))

    def frozen(self) -> "ExpansionStats":
        """Return a copy whose histogram cannot be modified."""

        return replace(
            self, degree_distribution=MappingProxyType(dict(self.degree_distribution))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes_expanded": self.nodes_expanded,
            "edges_traversed": self.edges_traversed,
            "iterations": self.iterations,
            "degree_distribution": dict(self.degree_distribution),
            "queue_pops": self.queue_pops,
            "discarded": self.discarded,
            "lookup_failures": self.lookup_failures,
            "overlap_events": self.overlap_events,
            "paths_found": self.paths_found,
            "frontier_switches": self.frontier_switches,
        }


@dataclass(frozen=True)
class OverlapMetadata:
    """Termination and overlap bookkeeping attached to a result."""

    termination_reason: TerminationReason
    overlap_events: Tuple[OverlapEvent, ...]
    overlap_matrix: Mapping[Tuple[int, int], FrozenSet[str]]
    iterations: int
    coverage: Optional[float] = None


@dataclass(frozen=True)
class ExpansionResult:
    """Terminal snapshot of an engine run.

    Attributes
    ----------
    paths:
        Deduplicated seed-to-seed paths in discovery order.
    sampled_nodes:
        Union of every frontier's visited set.
    sampled_edges:
        Traversed ``(source, target)`` edges.
    visited_per_frontier:
        Visited set of each frontier, indexed like the seeds.
    stats:
        Counters at termination.
    overlap_metadata:
        Termination reason, the overlap event log and the overlap matrix.
    """

    seeds: Tuple[str, ...]
    paths: Tuple[DiscoveredPath, ...]
    sampled_nodes: FrozenSet[str]
    sampled_edges: FrozenSet[Tuple[str, str]]
    visited_per_frontier: Tuple[FrozenSet[str], ...]
    stats: ExpansionStats
    overlap_metadata: OverlapMetadata

    @property
    def termination_reason(self) -> TerminationReason:
        return self.overlap_metadata.termination_reason

    def summary(self) -> Dict[str, Any]:
        """Return a compact JSON-friendly description of the run."""

        meta = self.overlap_metadata
        return {
            "seeds": list(self.seeds),
            "termination_reason": meta.termination_reason.value,
            "iterations": meta.iterations,
            "paths": len(self.paths),
            "sampled_nodes": len(self.sampled_nodes),
            "sampled_edges": len(self.sampled_edges),
            "overlap_events": len(meta.overlap_events),
            "overlapping_pairs": sorted(list(k) for k in meta.overlap_matrix),
            "coverage": meta.coverage,
            "stats": self.stats.to_dict(),
        }
