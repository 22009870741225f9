"""Named algorithm presets.

Each preset pairs a priority policy with a scheduler, an overlap strategy and
a termination strategy. The traversal variants run to exhaustion so that the
sampled subgraphs are comparable; the ``overlap-*`` presets exercise every
overlap/termination combination under degree ordering.
"""

from __future__ import annotations

from itertools import product
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Tuple

from ..config import ExpansionConfig
from ..errors import InvalidConfigurationError
from .overlap import PhysicalMeeting, SphereIntersection, ThresholdSharing
from .policies import (
    DegreeAscending,
    Fifo,
    PathPotential,
    RandomPriority,
    RetrospectiveSalience,
)
from .schedulers import GlobalLowestPriority, RoundRobin, SmallestFrontierFirst
from .termination import (
    CommonConvergence,
    Exhaustion,
    FullPairwise,
    TransitiveConnectivity,
)

__all__ = ["VARIANTS", "variant_config", "variant_names"]


def _traversal(policy: Callable[[int], Any], scheduler: type) -> Callable[[int], Dict[str, Any]]:
    def build(rng_seed: int) -> Dict[str, Any]:
        return {
            "priority_policy": policy(rng_seed),
            "scheduler": scheduler(),
            "overlap_strategy": PhysicalMeeting(),
            "termination_strategy": Exhaustion(),
        }

    return build


def _overlap(overlap: type, termination: type) -> Callable[[int], Dict[str, Any]]:
    def build(rng_seed: int) -> Dict[str, Any]:
        return {
            "priority_policy": DegreeAscending(),
            "scheduler": GlobalLowestPriority(),
            "overlap_strategy": overlap(),
            "termination_strategy": termination(),
        }

    return build


_OVERLAP_NAMES: Tuple[Tuple[str, type], ...] = (
    ("physical", PhysicalMeeting),
    ("threshold", ThresholdSharing),
    ("sphere", SphereIntersection),
)
_TERMINATION_NAMES: Tuple[Tuple[str, type], ...] = (
    ("fullpair", FullPairwise),
    ("transitive", TransitiveConnectivity),
    ("converge", CommonConvergence),
)

VARIANTS: Mapping[str, Callable[[int], Dict[str, Any]]] = MappingProxyType(
    {
        "degree-prioritised": _traversal(
            lambda s: DegreeAscending(), GlobalLowestPriority
        ),
        "path-preserving": _traversal(lambda s: PathPotential(), GlobalLowestPriority),
        "retrospective-salience": _traversal(
            lambda s: RetrospectiveSalience(), GlobalLowestPriority
        ),
        "standard-bfs": _traversal(lambda s: Fifo(), RoundRobin),
        "random-priority": _traversal(RandomPriority, RoundRobin),
        "frontier-balanced": _traversal(lambda s: Fifo(), SmallestFrontierFirst),
        **{
            f"overlap-{o_name}-{t_name}": _overlap(o_cls, t_cls)
            for (o_name, o_cls), (t_name, t_cls) in product(
                _OVERLAP_NAMES, _TERMINATION_NAMES
            )
        },
    }
)


def variant_names() -> Tuple[str, ...]:
    return tuple(VARIANTS)


def variant_config(name: str, rng_seed: int = 42, **overrides: Any) -> ExpansionConfig:
    """Return a fresh :class:`ExpansionConfig` for the preset ``name``.

    ``rng_seed`` seeds the random-priority baseline. ``overrides`` replace
    any :class:`ExpansionConfig` field, e.g. ``max_iterations=500``.
    """

    build = VARIANTS.get(name)
    if build is None:
        raise InvalidConfigurationError(
            f"unknown variant {name!r}; expected one of {', '.join(VARIANTS)}"
        )
    kwargs = build(rng_seed)
    allowed = set(ExpansionConfig.__dataclass_fields__)
    unknown = set(overrides) - allowed
    if unknown:
        raise InvalidConfigurationError(
            f"unknown configuration fields: {', '.join(sorted(unknown))}"
        )
    kwargs.update(overrides)
    return ExpansionConfig(**kwargs)
