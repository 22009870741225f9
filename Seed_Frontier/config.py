"""Engine configuration.

:class:`ExpansionConfig` carries strategy instances straight into an engine.
Plain mappings, for example parsed from YAML, are converted with
:meth:`ExpansionConfig.from_mapping`, which looks names up in the tables
below. The tables are read-only lookups; nothing registers itself at import
time.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .errors import InvalidConfigurationError
from .engine.between_graph import (
    BetweenGraphStrategy,
    FullSample,
    MinimalPaths,
    TruncatedComponent,
)
from .engine.overlap import (
    OverlapDetectionStrategy,
    PhysicalMeeting,
    SphereIntersection,
    ThresholdSharing,
)
from .engine.policies import (
    DegreeAscending,
    Fifo,
    PathPotential,
    PriorityPolicy,
    RandomPriority,
    RetrospectiveSalience,
)
from .engine.schedulers import (
    FrontierScheduler,
    GlobalLowestPriority,
    RoundRobin,
    SmallestFrontierFirst,
)
from .engine.termination import (
    CommonConvergence,
    CoverageThreshold,
    Exhaustion,
    FullPairwise,
    TerminationStrategy,
    TransitiveConnectivity,
)

__all__ = [
    "ExpansionConfig",
    "load_config",
    "POLICIES",
    "SCHEDULERS",
    "OVERLAP",
    "TERMINATION",
    "BETWEEN_GRAPH",
    "N1_HANDLING",
]

POLICIES: Mapping[str, type] = {
    "degree": DegreeAscending,
    "fifo": Fifo,
    "random": RandomPriority,
    "path-potential": PathPotential,
    "retrospective-salience": RetrospectiveSalience,
}

SCHEDULERS: Mapping[str, type] = {
    "round-robin": RoundRobin,
    "smallest-frontier": SmallestFrontierFirst,
    "global-priority": GlobalLowestPriority,
}

OVERLAP: Mapping[str, type] = {
    "physical": PhysicalMeeting,
    "threshold": ThresholdSharing,
    "sphere": SphereIntersection,
}

TERMINATION: Mapping[str, type] = {
    "converge": CommonConvergence,
    "fullpair": FullPairwise,
    "transitive": TransitiveConnectivity,
    "exhaustion": Exhaustion,
}

BETWEEN_GRAPH: Mapping[str, type] = {
    "full": FullSample,
    "minimal": MinimalPaths,
    "truncated": TruncatedComponent,
}

N1_HANDLING: Mapping[str, type] = {
    "coverage": CoverageThreshold,
}

# mapping key -> (dataclass field, lookup table)
_STRATEGY_KEYS: Dict[str, tuple] = {
    "priority": ("priority_policy", POLICIES),
    "scheduler": ("scheduler", SCHEDULERS),
    "overlap": ("overlap_strategy", OVERLAP),
    "termination": ("termination_strategy", TERMINATION),
    "between_graph": ("between_graph", BETWEEN_GRAPH),
    "n1_handling": ("n1_handling", N1_HANDLING),
}
_SCALAR_KEYS = ("max_iterations", "max_duration", "target_paths_per_pair", "log_path")


def _build(kind: str, table: Mapping[str, type], value: Any) -> Any:
    """Instantiate ``value`` (a name or ``{"name": ..., **params}``) from ``table``."""

    if isinstance(value, str):
        name, params = value, {}
    elif isinstance(value, Mapping):
        params = dict(value)
        name = params.pop("name", None)
    else:
        raise InvalidConfigurationError(
            f"{kind} must be a name or a mapping with a 'name' key, got {value!r}"
        )
    cls = table.get(name)
    if cls is None:
        raise InvalidConfigurationError(
            f"unknown {kind} {name!r}; expected one of {', '.join(sorted(table))}"
        )
    try:
        return cls(**params)
    except TypeError as exc:
        raise InvalidConfigurationError(f"bad parameters for {kind} {name!r}: {exc}") from exc


@dataclass
class ExpansionConfig:
    """Strategies and budgets for one :class:`ExpansionEngine` run.

    Attributes
    ----------
    priority_policy:
        Orders candidates inside each frontier's queue.
    scheduler:
        Chooses the frontier expanded in each iteration.
    overlap_strategy:
        Decides which frontiers overlap at a freshly visited node.
    termination_strategy:
        Decides when enough overlap has been found.
    between_graph:
        Refines the sample once the run has terminated.
    n1_handling:
        Stopping rule for single-seed runs. ``None`` stops a single-seed run
        after its first iteration.
    max_iterations:
        Optional iteration cap.
    max_duration:
        Optional wall-clock budget in seconds, checked between iterations.
    target_paths_per_pair:
        Optional number of paths wanted for every pair of seeds. When set the
        run continues past the termination strategy until every pair holds
        this many paths.
    log_path:
        Optional JSON lines file receiving overlap, path and termination
        records.
    """

    priority_policy: PriorityPolicy = field(default_factory=DegreeAscending)
    scheduler: FrontierScheduler = field(default_factory=RoundRobin)
    overlap_strategy: OverlapDetectionStrategy = field(default_factory=PhysicalMeeting)
    termination_strategy: TerminationStrategy = field(default_factory=FullPairwise)
    between_graph: BetweenGraphStrategy = field(default_factory=FullSample)
    n1_handling: Optional[CoverageThreshold] = None
    max_iterations: Optional[int] = None
    max_duration: Optional[float] = None
    target_paths_per_pair: Optional[int] = None
    log_path: Optional[Path] = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise :class:`InvalidConfigurationError` for out-of-range budgets."""

        checks = (
            ("priority_policy", PriorityPolicy),
            ("scheduler", FrontierScheduler),
            ("overlap_strategy", OverlapDetectionStrategy),
            ("termination_strategy", TerminationStrategy),
            ("between_graph", BetweenGraphStrategy),
        )
        for name, base in checks:
            if not isinstance(getattr(self, name), base):
                raise InvalidConfigurationError(
                    f"{name} must be a {base.__name__}, got {getattr(self, name)!r}"
                )
        if self.n1_handling is not None and not isinstance(
            self.n1_handling, CoverageThreshold
        ):
            raise InvalidConfigurationError(
                f"n1_handling must be a CoverageThreshold, got {self.n1_handling!r}"
            )
        for name, kinds, label in (
            ("max_iterations", (int,), "an integer"),
            ("max_duration", (int, float), "a number"),
            ("target_paths_per_pair", (int,), "an integer"),
        ):
            value = getattr(self, name)
            if value is not None and (
                isinstance(value, bool) or not isinstance(value, kinds)
            ):
                raise InvalidConfigurationError(
                    f"{name} must be {label}, got {value!r}"
                )
        if self.max_iterations is not None and self.max_iterations < 1:
            raise InvalidConfigurationError(
                f"max_iterations must be >= 1, got {self.max_iterations!r}"
            )
        if self.max_duration is not None and self.max_duration <= 0:
            raise InvalidConfigurationError(
                f"max_duration must be > 0, got {self.max_duration!r}"
            )
        if self.target_paths_per_pair is not None and self.target_paths_per_pair < 1:
            raise InvalidConfigurationError(
                "target_paths_per_pair must be >= 1, "
                f"got {self.target_paths_per_pair!r}"
            )
        if self.log_path is not None:
            self.log_path = Path(self.log_path)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ExpansionConfig":
        """Construct an :class:`ExpansionConfig` from plain names and values.

        Parameters
        ----------
        data:
            Mapping with any of the keys ``priority``, ``scheduler``,
            ``overlap``, ``termination``, ``between_graph``, ``n1_handling``,
            ``max_iterations``, ``max_duration``, ``target_paths_per_pair``
            and ``log_path``. Strategy values are names or mappings holding a
            ``name`` plus constructor parameters.

        Raises
        ------
        InvalidConfigurationError
            For unknown keys, unknown names or bad parameters.
        """

        if not isinstance(data, Mapping):
            raise InvalidConfigurationError(
                f"configuration must be a mapping, got {type(data).__name__}"
            )
        unknown = set(data) - set(_STRATEGY_KEYS) - set(_SCALAR_KEYS)
        if unknown:
            raise InvalidConfigurationError(
                f"unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        kwargs: Dict[str, Any] = {}
        for key, (attr, table) in _STRATEGY_KEYS.items():
            if data.get(key) is not None:
                kwargs[attr] = _build(key, table, data[key])
        for key in _SCALAR_KEYS:
            if data.get(key) is not None:
                kwargs[key] = data[key]
        return cls(**kwargs)

    def to_mapping(self) -> Dict[str, Any]:
        """Return a JSON-friendly description of the configuration."""

        out: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or isinstance(value, (int, float)):
                out[f.name] = value
            elif isinstance(value, Path):
                out[f.name] = str(value)
            else:
                out[f.name] = repr(value)
        return out


def load_config(path: Union[str, Path]) -> ExpansionConfig:
    """Read an :class:`ExpansionConfig` from a YAML or JSON file."""

    path = Path(path)
    text = path.read_text()
    if path.suffix.lower() in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        raise InvalidConfigurationError(
            f"unsupported configuration format {path.suffix!r}; use .yaml, .yml or .json"
        )
    return ExpansionConfig.from_mapping(data)
