"""Per-seed frontier state and the shared ownership registry."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .queue import CandidateQueue


@dataclass(frozen=True)
class ParentEntry:
    """Parent pointer for a visited node: the node it was reached from."""

    parent: str
    edge: str


def edge_key(source: str, target: str) -> str:
    """Return the identifier used for the traversed edge ``source -> target``."""

    return f"{source}->{target}"


class ParentTable:
    """Arena of child-to-parent links local to one frontier.

    Nodes are mapped to dense integer slots; each slot stores the slot of its
    parent (``-1`` for the seed) and the edge it was reached through. A node
    receives its entry once, when it is first visited, so every chain ends at
    the seed.
    """

    def __init__(self) -> None:
        self._slot: Dict[str, int] = {}
        self._nodes: List[str] = []
        self._parent: List[int] = []
        self._edge: List[Optional[str]] = []

    def add_root(self, node: str) -> None:
        """Register ``node`` as the chain root (the seed)."""

        self._insert(node, -1, None)

    def add(self, node: str, entry: ParentEntry) -> None:
        """Record ``entry`` as the parent pointer of ``node``."""

        parent_slot = self._slot.get(entry.parent)
        if parent_slot is None:
            raise KeyError(f"parent {entry.parent!r} is not in this frontier")
        self._insert(node, parent_slot, entry.edge)

    def _insert(self, node: str, parent_slot: int, edge: Optional[str]) -> None:
        if node in self._slot:
            raise ValueError(f"parent pointer for {node!r} already recorded")
        self._slot[node] = len(self._nodes)
        self._nodes.append(node)
        self._parent.append(parent_slot)
        self._edge.append(edge)

    def get(self, node: str) -> Optional[ParentEntry]:
        """Return the parent pointer of ``node`` or ``None`` for roots/unknowns."""

        slot = self._slot.get(node)
        if slot is None:
            return None
        parent_slot = self._parent[slot]
        if parent_slot < 0:
            return None
        return ParentEntry(self._nodes[parent_slot], self._edge[slot] or "")

    def chain(self, node: str) -> List[str]:
        """Return ``[node, parent, ..., root]``.

        Raises
        ------
        KeyError
            If ``node`` has no entry.
        """

        slot = self._slot[node]
        out: List[str] = []
        # Slots only ever point to earlier slots, so this walk is bounded.
        while slot >= 0:
            out.append(self._nodes[slot])
            slot = self._parent[slot]
        return out

    def items(self) -> Iterator[Tuple[str, ParentEntry]]:
        """Yield ``(node, entry)`` for every non-root node in visit order."""

        for node in self._nodes:
            entry = self.get(node)
            if entry is not None:
                yield node, entry

    def as_dict(self) -> Dict[str, ParentEntry]:
        return dict(self.items())

    def __contains__(self, node: object) -> bool:
        return node in self._slot

    def __len__(self) -> int:
        return len(self._nodes)


@dataclass
class FrontierState:
    """Search region grown from a single seed.

    Attributes
    ----------
    index:
        Position of the seed in the engine's seed list.
    seed:
        Node identifier the frontier starts from.
    queue:
        Candidates awaiting expansion.
    visited:
        Nodes this frontier has expanded.
    parents:
        Parent pointers for every visited node except the seed.
    distances:
        Graph distance from the seed along the parent chain for each visited
        node. Always populated, so distance-based overlap detection never
        silently sees an empty map.
    discovered_at:
        Iteration in which each node was visited.
    expansion_order:
        Visited nodes in the order they were expanded.
    """

    index: int
    seed: str
    queue: CandidateQueue = field(default_factory=CandidateQueue)
    visited: Set[str] = field(default_factory=set)
    parents: ParentTable = field(default_factory=ParentTable)
    distances: Dict[str, int] = field(default_factory=dict)
    discovered_at: Dict[str, int] = field(default_factory=dict)
    expansion_order: List[str] = field(default_factory=list)
    exhausted: bool = False
    frozen: bool = False
    _radius: int = field(default=0, init=False, repr=False)

    def visit(self, node: str, parent: Optional[ParentEntry], iteration: int) -> None:
        """Mark ``node`` visited and commit its parent pointer.

        The seed is the only node visited without a parent.
        """

        if self.frozen:
            raise RuntimeError(f"frontier {self.index} is frozen")
        if node in self.visited:
            raise ValueError(f"{node!r} already visited by frontier {self.index}")
        if parent is None:
            if node != self.seed:
                raise ValueError(f"non-seed node {node!r} visited without a parent")
            self.parents.add_root(node)
            distance = 0
        else:
            self.parents.add(node, parent)
            distance = self.distances[parent.parent] + 1
        self.visited.add(node)
        self.distances[node] = distance
        self.discovered_at[node] = iteration
        self.expansion_order.append(node)
        if distance > self._radius:
            self._radius = distance

    @property
    def radius(self) -> int:
        """Largest seed distance among visited nodes."""

        return self._radius

    def is_visited(self, node: str) -> bool:
        return node in self.visited

    def freeze(self) -> None:
        """Reject further visits."""

        self.frozen = True
        self.exhausted = self.exhausted or not self.queue


class OwnershipRegistry:
    """Map from node to the frontiers that claimed it, in claim order.

    The first claimant is the node's owner and is never reassigned. Later
    claimants are remembered so a meeting can be reported against every
    frontier that already holds the node.
    """

    def __init__(self) -> None:
        self._claims: Dict[str, List[int]] = {}

    def claim(self, node: str, index: int) -> List[int]:
        """Record that frontier ``index`` visited ``node``.

        Returns
        -------
        list of int
            Frontiers that had claimed ``node`` before this call.
        """

        claims = self._claims.setdefault(node, [])
        earlier = list(claims)
        if index not in claims:
            claims.append(index)
        return earlier

    def owner(self, node: str) -> Optional[int]:
        claims = self._claims.get(node)
        return claims[0] if claims else None

    def claimants(self, node: str) -> Tuple[int, ...]:
        return tuple(self._claims.get(node, ()))

    def __contains__(self, node: object) -> bool:
        return node in self._claims

    def __len__(self) -> int:
        return len(self._claims)
