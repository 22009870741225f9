"""Seed-to-seed path reconstruction from parent pointers."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, DefaultDict, Iterable, List, Optional, Sequence, Set, Tuple

from ..errors import InvalidConfigurationError
from .result import DiscoveredPath, OverlapEvent, pair_key

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import FrontierState

__all__ = ["PathReconstructor", "trace_to_seed", "splice_path"]


def trace_to_seed(frontier: "FrontierState", node: str) -> List[str]:
    """Return ``[node, ..., seed]`` following ``frontier``'s parent pointers.

    Raises
    ------
    KeyError
        If ``frontier`` never visited ``node``.
    """

    if node not in frontier.visited:
        raise KeyError(f"{node!r} not visited by frontier {frontier.index}")
    return frontier.parents.chain(node)


def splice_path(first: Sequence[str], second: Sequence[str]) -> Tuple[str, ...]:
    """Join two chains that start at the same meeting node.

    ``first`` runs meeting node to seed A and ``second`` meeting node to seed
    B; the result runs seed A to seed B with the meeting node once.
    """

    if not first or not second or first[0] != second[0]:
        raise ValueError("chains must start at the same meeting node")
    return tuple(reversed(first)) + tuple(second[1:])


class PathReconstructor:
    """Turn overlap events into deduplicated paths.

    Paths are keyed by frontier pair; a path and its reverse count once. With
    ``cap`` set, reconstruction for a pair stops once it holds ``cap`` paths.

    Parameters
    ----------
    frontiers:
        Frontier states of the run.
    cap:
        Optional maximum number of paths kept per frontier pair.
    """

    def __init__(
        self, frontiers: Sequence["FrontierState"], cap: Optional[int] = None
    ) -> None:
        if cap is not None and cap < 1:
            raise InvalidConfigurationError(f"path cap must be >= 1, got {cap!r}")
        self.frontiers = frontiers
        self.cap = cap
        self._paths: List[DiscoveredPath] = []
        self._by_pair: DefaultDict[Tuple[int, int], int] = defaultdict(int)
        self._seen: Set[Tuple[Tuple[int, int], Tuple[str, ...]]] = set()

    @property
    def paths(self) -> Tuple[DiscoveredPath, ...]:
        return tuple(self._paths)

    def count(self, a: int, b: int) -> int:
        """Number of paths kept for the pair ``(a, b)``."""

        return self._by_pair.get(pair_key(a, b), 0)

    def saturated(self, a: int, b: int) -> bool:
        return self.cap is not None and self.count(a, b) >= self.cap

    def all_saturated(self) -> bool:
        """``True`` when every frontier pair holds ``cap`` paths."""

        if self.cap is None:
            return False
        n = len(self.frontiers)
        return all(
            self.saturated(a, b) for a in range(n) for b in range(a + 1, n)
        )

    def add(self, event: OverlapEvent) -> Optional[DiscoveredPath]:
        """Reconstruct the path for ``event``.

        Returns the new path, or ``None`` when the pair is saturated, the
        meeting node is not visited by both frontiers, the spliced walk
        repeats a node, or the same node sequence was already recorded for
        the pair.
        """

        a, b = event.frontier_a, event.frontier_b
        if a == b or self.saturated(a, b):
            return None
        node = event.meeting_node
        first = self.frontiers[a]
        second = self.frontiers[b]
        if node not in first.visited or node not in second.visited:
            return None
        nodes = splice_path(trace_to_seed(first, node), trace_to_seed(second, node))
        if len(set(nodes)) != len(nodes):
            # the chains share a node besides the meeting node
            return None
        key = pair_key(a, b)
        # orient every path low index -> high index before comparing
        canonical = nodes if a < b else tuple(reversed(nodes))
        if (key, canonical) in self._seen:
            return None
        self._seen.add((key, canonical))
        path = DiscoveredPath(a, b, nodes)
        self._paths.append(path)
        self._by_pair[key] += 1
        return path

    @classmethod
    def reconstruct(
        cls,
        frontiers: Sequence["FrontierState"],
        events: Iterable[OverlapEvent],
        cap: Optional[int] = None,
    ) -> Tuple[DiscoveredPath, ...]:
        """Rebuild paths for a whole event log in order."""

        builder = cls(frontiers, cap)
        for event in events:
            builder.add(event)
        return builder.paths
