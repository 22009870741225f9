"""Overlap detection between frontiers.

Each strategy answers one question for a node the active frontier has just
visited: which other frontiers does the active frontier now overlap with?
The engine appends one :class:`~Seed_Frontier.engine.result.OverlapEvent` per
returned index.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence

from ..errors import InvalidConfigurationError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import FrontierState, OwnershipRegistry

__all__ = [
    "OverlapDetectionStrategy",
    "PhysicalMeeting",
    "ThresholdSharing",
    "SphereIntersection",
    "jaccard",
]


def jaccard(a: set, b: set) -> float:
    """Return ``|a & b| / |a | b|`` (``0.0`` for two empty sets)."""

    union = len(a | b)
    if not union:
        return 0.0
    return len(a & b) / union


class OverlapDetectionStrategy:
    """Base class for overlap detection."""

    name = "overlap"

    def detect(
        self,
        node: str,
        active: "FrontierState",
        frontiers: Sequence["FrontierState"],
        registry: "OwnershipRegistry",
    ) -> List[int]:
        """Return indices of frontiers overlapping ``active`` at ``node``.

        ``node`` is already in ``active.visited`` and claimed in ``registry``
        when this is called.
        """

        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PhysicalMeeting(OverlapDetectionStrategy):
    """Overlap when another frontier has already visited the node.

    Uses the ownership registry, so each check is :math:`O(1)` in the number
    of visited nodes. Because a frontier visits a node at most once, every
    pair of frontiers records exactly one event per shared node.
    """

    name = "physical"

    def detect(self, node, active, frontiers, registry):
        return [i for i in registry.claimants(node) if i != active.index]


class ThresholdSharing(OverlapDetectionStrategy):
    """Overlap when visited sets are similar enough.

    The Jaccard similarity of the active frontier's visited set (which already
    holds ``node``) and each other frontier's visited set is recomputed on
    every call; frontiers at or above ``threshold`` overlap.
    """

    name = "threshold"

    def __init__(self, threshold: float = 0.5) -> None:
        if not 0.0 < threshold <= 1.0:
            raise InvalidConfigurationError(
                f"threshold must be in (0, 1], got {threshold!r}"
            )
        self.threshold = float(threshold)

    def detect(self, node, active, frontiers, registry):
        visited = active.visited | {node}
        return [
            other.index
            for other in frontiers
            if other.index != active.index
            and other.visited
            and jaccard(visited, other.visited) >= self.threshold
        ]

    def __repr__(self) -> str:
        return f"ThresholdSharing(threshold={self.threshold})"


class SphereIntersection(OverlapDetectionStrategy):
    """Overlap when the node lies inside another frontier's search sphere.

    The node's seed distance in the active frontier is compared with each
    other frontier's radius (its largest seed distance so far). Seeds
    themselves (distance ``0``) never overlap, and nodes further than
    ``distance_cap`` from the active seed are ignored.
    """

    name = "sphere"

    def __init__(self, distance_cap: Optional[int] = None) -> None:
        if distance_cap is not None and distance_cap < 0:
            raise InvalidConfigurationError(
                f"distance_cap must be >= 0, got {distance_cap!r}"
            )
        self.distance_cap = distance_cap

    def detect(self, node, active, frontiers, registry):
        distance = active.distances.get(node)
        if not distance:
            return []
        if self.distance_cap is not None and distance > self.distance_cap:
            return []
        return [
            other.index
            for other in frontiers
            if other.index != active.index
            and other.visited
            and distance <= other.radius
        ]

    def __repr__(self) -> str:
        return f"SphereIntersection(distance_cap={self.distance_cap})"
