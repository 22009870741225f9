"""Seed_Frontier package initialization."""

from __future__ import annotations

from typing import Any

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .config import ExpansionConfig, load_config
    from .engine.engine import ExpansionEngine
    from .engine.result import ExpansionResult, TerminationReason
    from .engine.variants import variant_config
    from .errors import GraphAccessError, InvalidConfigurationError
    from .graph.expander import GraphExpander, NetworkXExpander

__all__ = [
    "ExpansionConfig",
    "ExpansionEngine",
    "ExpansionResult",
    "GraphAccessError",
    "GraphExpander",
    "InvalidConfigurationError",
    "NetworkXExpander",
    "TerminationReason",
    "load_config",
    "variant_config",
]

_LAZY = {
    "ExpansionConfig": ".config",
    "load_config": ".config",
    "ExpansionEngine": ".engine.engine",
    "ExpansionResult": ".engine.result",
    "TerminationReason": ".engine.result",
    "variant_config": ".engine.variants",
    "GraphAccessError": ".errors",
    "InvalidConfigurationError": ".errors",
    "GraphExpander": ".graph.expander",
    "NetworkXExpander": ".graph.expander",
}


def __getattr__(name: str) -> Any:  # pragma: no cover - attribute access
    """Lazily expose the public API without importing networkx eagerly."""

    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(name)
    from importlib import import_module

    return getattr(import_module(module, __name__), name)
