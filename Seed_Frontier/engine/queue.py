"""Candidate queue used by every frontier."""

from __future__ import annotations

from dataclasses import dataclass
import heapq
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .frontier import ParentEntry


@dataclass(frozen=True)
class QueueEntry:
    """A candidate waiting for expansion.

    ``order`` is the insertion counter value assigned when the entry was
    admitted and breaks ties between equal scores. ``parent`` is the proposed
    parent pointer committed when the candidate is first visited.
    """

    node: str
    score: float
    order: int
    parent: Optional["ParentEntry"] = None


class CandidateQueue:
    """Min-priority queue keyed by node with deterministic tie-breaking.

    Entries are ordered by ``(score, order)``. Each node holds at most one live
    entry; :meth:`push` replaces it only when the new score is strictly lower.
    Superseded heap records are dropped lazily on :meth:`pop`, so push and pop
    are :math:`O(\\log n)` amortised.
    """

    def __init__(self) -> None:
        self._heap: List[Tuple[float, int, str]] = []
        self._entries: Dict[str, QueueEntry] = {}
        self._seq = 0

    @property
    def next_order(self) -> int:
        """Insertion counter value the next admitted entry will receive."""

        return self._seq

    def push(
        self, node: str, score: float, parent: Optional["ParentEntry"] = None
    ) -> bool:
        """Insert ``node`` or lower its score.

        Returns
        -------
        bool
            ``True`` when a new entry was admitted or an existing one improved.
        """

        current = self._entries.get(node)
        if current is not None and score >= current.score:
            return False
        entry = QueueEntry(node, float(score), self._seq, parent)
        self._seq += 1
        self._entries[node] = entry
        heapq.heappush(self._heap, (entry.score, entry.order, node))
        return True

    def _prune(self) -> None:
        heap = self._heap
        while heap:
            score, order, node = heap[0]
            live = self._entries.get(node)
            if live is not None and live.order == order:
                return
            heapq.heappop(heap)

    def pop(self) -> QueueEntry:
        """Remove and return the best entry."""

        self._prune()
        if not self._heap:
            raise IndexError("pop from empty candidate queue")
        _, _, node = heapq.heappop(self._heap)
        return self._entries.pop(node)

    def peek(self) -> QueueEntry:
        """Return the best entry without removing it."""

        self._prune()
        if not self._heap:
            raise IndexError("peek from empty candidate queue")
        return self._entries[self._heap[0][2]]

    def peek_score(self) -> float:
        """Return the best score, or ``inf`` when empty."""

        self._prune()
        if not self._heap:
            return float("inf")
        return self._heap[0][0]

    def rescore(self, score_fn: Callable[[str], float]) -> None:
        """Recompute every live score with ``score_fn``.

        Insertion order is preserved so ties still resolve the same way.
        """

        rebuilt: Dict[str, QueueEntry] = {}
        heap: List[Tuple[float, int, str]] = []
        for entry in self._entries.values():
            new = QueueEntry(entry.node, float(score_fn(entry.node)), entry.order, entry.parent)
            rebuilt[new.node] = new
            heap.append((new.score, new.order, new.node))
        heapq.heapify(heap)
        self._entries = rebuilt
        self._heap = heap

    def entries(self) -> List[QueueEntry]:
        """Return live entries in pop order."""

        return sorted(self._entries.values(), key=lambda e: (e.score, e.order))

    def score_of(self, node: str) -> Optional[float]:
        entry = self._entries.get(node)
        return None if entry is None else entry.score

    def __contains__(self, node: object) -> bool:
        return node in self._entries

    def __iter__(self) -> Iterator[str]:
        return (entry.node for entry in self.entries())

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def clear(self) -> None:
        """Drop all candidates."""

        self._heap.clear()
        self._entries.clear()
