"""Exception types raised by :mod:`Seed_Frontier`."""

from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """Raised when an engine or strategy is constructed with unusable input.

    Covers empty or duplicate seed lists, seeds missing from the graph and
    out-of-range configuration values. These are the only fatal conditions;
    everything encountered while traversing is recovered locally.
    """


class GraphAccessError(LookupError):
    """Raised by graph expanders when a node cannot be looked up."""

    def __init__(self, node: str, reason: str = "node not found") -> None:
        super().__init__(f"{reason}: {node!r}")
        self.node = node
        self.reason = reason
