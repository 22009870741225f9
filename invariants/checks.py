"""Invariant checks over finished expansion runs."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Tuple

from Seed_Frontier.engine.frontier import FrontierState
from Seed_Frontier.engine.result import ExpansionResult, pair_key


def paths_within_sample(result: ExpansionResult) -> bool:
    """Every node on a reconstructed path was sampled."""

    return all(set(p.nodes) <= result.sampled_nodes for p in result.paths)


def paths_follow_edges(result: ExpansionResult) -> bool:
    """Consecutive path nodes are joined by a traversed edge."""

    edges = result.sampled_edges
    return all(
        (u, v) in edges or (v, u) in edges for p in result.paths for u, v in p.edges
    )


def overlap_counts(result: ExpansionResult) -> Dict[Tuple[int, int], int]:
    """Number of overlap events recorded per frontier pair."""

    return dict(Counter(e.pair for e in result.overlap_metadata.overlap_events))


def overlap_matches_intersection(result: ExpansionResult) -> bool:
    """Physical meetings per pair equal the size of the visited-set intersection."""

    counts = overlap_counts(result)
    visited = result.visited_per_frontier
    for a in range(len(visited)):
        for b in range(a + 1, len(visited)):
            if counts.get(pair_key(a, b), 0) != len(visited[a] & visited[b]):
                return False
    return True


def stats_consistent(result: ExpansionResult) -> bool:
    """Every queue pop is either an expansion or a discard."""

    s = result.stats
    return (
        s.queue_pops == s.nodes_expanded + s.discarded
        and s.iterations == s.nodes_expanded
        and s.iterations == result.overlap_metadata.iterations
        and s.overlap_events == len(result.overlap_metadata.overlap_events)
        and sum(s.degree_distribution.values()) == s.nodes_expanded
    )


def parents_acyclic(frontier: FrontierState) -> bool:
    """Every parent chain of ``frontier`` ends at its seed without repeats."""

    for node in frontier.visited:
        chain = frontier.parents.chain(node)
        if chain[-1] != frontier.seed or len(set(chain)) != len(chain):
            return False
    return True


def from_result(result: ExpansionResult) -> Dict[str, bool | int]:
    """Extract invariant fields from a result."""

    return {
        "inv_paths_in_sample": paths_within_sample(result),
        "inv_paths_follow_edges": paths_follow_edges(result),
        "inv_stats_consistent": stats_consistent(result),
        "inv_overlap_pairs": len(overlap_counts(result)),
    }
