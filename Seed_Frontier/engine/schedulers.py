"""Frontier selection for each engine iteration.

A scheduler picks the index of the frontier that expands next. Frontiers whose
queue is empty are skipped; the engine marks them exhausted. ``None`` means no
frontier has candidates left.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import FrontierState

__all__ = [
    "FrontierScheduler",
    "RoundRobin",
    "SmallestFrontierFirst",
    "GlobalLowestPriority",
]


class FrontierScheduler:
    """Base class for active-frontier selection."""

    name = "scheduler"

    def select(self, frontiers: Sequence["FrontierState"]) -> Optional[int]:
        raise NotImplementedError

    def reset(self) -> None:
        """Forget any position carried between runs."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class RoundRobin(FrontierScheduler):
    """Cycle through frontiers in seed order, skipping empty queues."""

    name = "round-robin"

    def __init__(self) -> None:
        self._next = 0

    def select(self, frontiers):
        count = len(frontiers)
        for offset in range(count):
            index = (self._next + offset) % count
            if frontiers[index].queue:
                self._next = (index + 1) % count
                return index
        return None

    def reset(self) -> None:
        self._next = 0


class SmallestFrontierFirst(FrontierScheduler):
    """Pick the frontier with the fewest visited nodes.

    Ties go to the lowest index. Combined with FIFO scoring this is the
    frontier-balanced baseline.
    """

    name = "smallest-frontier"

    def select(self, frontiers):
        best: Optional[int] = None
        best_size = 0
        for frontier in frontiers:
            if not frontier.queue:
                continue
            size = len(frontier.visited)
            if best is None or size < best_size:
                best, best_size = frontier.index, size
        return best


class GlobalLowestPriority(FrontierScheduler):
    """Pick the frontier whose best candidate has the lowest score.

    This lets a single priority order span every frontier, so a low-degree
    node in one region expands before a hub in another. Ties go to the lowest
    index.
    """

    name = "global-priority"

    def select(self, frontiers):
        best: Optional[int] = None
        best_score = float("inf")
        for frontier in frontiers:
            if not frontier.queue:
                continue
            score = frontier.queue.peek_score()
            if best is None or score < best_score:
                best, best_score = frontier.index, score
        return best
