"""Refinement of the sampled subgraph when a result is built.

The engine hands the raw sample to the configured strategy once, at
termination. Strategies only ever shrink the sample; counters in the result's
stats keep describing the raw traversal.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, FrozenSet, Sequence, Set, Tuple

from .result import DiscoveredPath, OverlapEvent

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import FrontierState

__all__ = ["BetweenGraphStrategy", "FullSample", "MinimalPaths", "TruncatedComponent"]

Sample = Tuple[FrozenSet[str], FrozenSet[Tuple[str, str]]]


def _path_nodes(paths: Sequence[DiscoveredPath]) -> Set[str]:
    out: Set[str] = set()
    for path in paths:
        out.update(path.nodes)
    return out


def _path_edges(paths: Sequence[DiscoveredPath]) -> Set[Tuple[str, str]]:
    out: Set[Tuple[str, str]] = set()
    for path in paths:
        for u, v in path.edges:
            out.add((u, v))
            out.add((v, u))
    return out


class BetweenGraphStrategy:
    """Base class: select the part of the sample handed to consumers."""

    name = "between-graph"

    def extract(
        self,
        frontiers: Sequence["FrontierState"],
        events: Sequence[OverlapEvent],
        paths: Sequence[DiscoveredPath],
        nodes: FrozenSet[str],
        edges: FrozenSet[Tuple[str, str]],
    ) -> Sample:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class FullSample(BetweenGraphStrategy):
    """Keep every visited node and traversed edge."""

    name = "full"

    def extract(self, frontiers, events, paths, nodes, edges):
        return nodes, edges


class MinimalPaths(BetweenGraphStrategy):
    """Keep the seeds and the nodes and edges on reconstructed paths."""

    name = "minimal"

    def extract(self, frontiers, events, paths, nodes, edges):
        keep = _path_nodes(paths) | {f.seed for f in frontiers}
        on_path = _path_edges(paths)
        return (
            frozenset(keep & nodes),
            frozenset(e for e in edges if e in on_path),
        )


class TruncatedComponent(BetweenGraphStrategy):
    """Cut each frontier back to the depth at which it met another frontier.

    A frontier keeps the visited nodes whose seed distance does not exceed the
    deepest meeting node recorded for it. Frontiers that never met keep all
    their nodes. Path nodes always survive, and an edge survives when both of
    its endpoints do.
    """

    name = "truncated"

    def extract(self, frontiers, events, paths, nodes, edges):
        depth: Dict[int, int] = {}
        for event in events:
            for index in (event.frontier_a, event.frontier_b):
                distance = frontiers[index].distances.get(event.meeting_node)
                if distance is not None and distance > depth.get(index, -1):
                    depth[index] = distance
        keep: Set[str] = set()
        for frontier in frontiers:
            limit = depth.get(frontier.index)
            if limit is None:
                keep.update(frontier.visited)
            else:
                keep.update(
                    n for n, d in frontier.distances.items() if d <= limit
                )
        keep |= _path_nodes(paths)
        keep &= nodes
        return (
            frozenset(keep),
            frozenset(e for e in edges if e[0] in keep and e[1] in keep),
        )
