"""
atomgraph Configuration Module

Centralizes graph-building options, data paths and runtime settings.

- Graph options are a frozen dataclass passed explicitly to the builder.
- Environment Support: override the element table and log level via env vars.
"""

import logging
import math
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Union

from atomgraph.exceptions import InvalidConfigError

_PACKAGE_ROOT = Path(__file__).resolve().parent

STRATEGIES = ("cutoff", "voronoi")


@dataclass(frozen=True)
class GraphConfig:
    """
    Neighbor graph construction options.

    ``weight_decay`` is also accepted as ``weight_decay_function`` by
    ``from_options`` and ``with_options``.
    """
    strategy: str = "cutoff"
    cutoff_radius: float = 8.0        # Å
    max_num_neighbors: int = 12
    weight_decay: Union[str, Callable[[float], float]] = "inverse_square"
    normalize_weights: bool = True
    voronoi_tolerance: float = 1e-4   # fraction of the cell's largest face
    n_jobs: int = 1                   # threads for the per-node cutoff search

    def validate(self) -> "GraphConfig":
        """Check ranges; raise InvalidConfigError on the first violation."""
        if self.strategy not in STRATEGIES:
            raise InvalidConfigError(
                f"Unknown strategy '{self.strategy}'. Available: {', '.join(STRATEGIES)}"
            )
        if not _is_real(self.cutoff_radius) or self.cutoff_radius <= 0:
            raise InvalidConfigError(f"cutoff_radius must be > 0, got {self.cutoff_radius}")
        if (
            isinstance(self.max_num_neighbors, bool)
            or not isinstance(self.max_num_neighbors, int)
            or self.max_num_neighbors < 1
        ):
            raise InvalidConfigError(
                f"max_num_neighbors must be an integer >= 1, got {self.max_num_neighbors}"
            )
        if not _is_real(self.voronoi_tolerance) or not 0 < self.voronoi_tolerance < 1:
            raise InvalidConfigError(
                f"voronoi_tolerance must be in (0, 1), got {self.voronoi_tolerance}"
            )
        if isinstance(self.n_jobs, bool) or not isinstance(self.n_jobs, int) or self.n_jobs < 1:
            raise InvalidConfigError(f"n_jobs must be an integer >= 1, got {self.n_jobs}")
        self.resolve_decay()
        return self

    def resolve_decay(self) -> Callable[[float], float]:
        """Return the weight decay callable, looking names up in the decay table."""
        from atomgraph.graphs.decay import get_decay_function

        if callable(self.weight_decay):
            return self.weight_decay
        try:
            return get_decay_function(self.weight_decay)
        except KeyError as exc:
            raise InvalidConfigError(str(exc.args[0])) from None

    @classmethod
    def from_options(cls, **options) -> "GraphConfig":
        """Build from keyword options, defaults for the rest."""
        return cls().with_options(**options)

    def with_options(self, **changes) -> "GraphConfig":
        """Copy with some fields replaced."""
        if "weight_decay_function" in changes:
            if "weight_decay" in changes:
                raise InvalidConfigError(
                    "Pass either weight_decay or weight_decay_function, not both"
                )
            changes["weight_decay"] = changes.pop("weight_decay_function")
        return replace(self, **changes)


def _is_real(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(float(value))
    except (TypeError, ValueError):
        return False


@dataclass
class PathConfig:
    """File system paths."""
    package_root: Path = _PACKAGE_ROOT
    element_table: Path = field(default=None)

    def __post_init__(self):
        # Allow env override
        table_env = os.environ.get("ATOMGRAPH_ELEMENT_TABLE")
        if table_env:
            self.element_table = Path(table_env)
        else:
            self.element_table = self.element_table or (
                self.package_root / "featurize" / "data" / "element_table.csv"
            )


@dataclass
class RuntimeConfig:
    """Logging, progress and batch parallelism."""
    log_level: str = field(default=None)
    show_progress: bool = False
    n_workers: int = 1

    def __post_init__(self):
        self.log_level = (
            self.log_level or os.environ.get("ATOMGRAPH_LOG_LEVEL") or "WARNING"
        ).upper()

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level)
        if not isinstance(level, int):
            raise InvalidConfigError(f"Unknown log level '{self.log_level}'")
        return level


@dataclass
class Config:
    """Master configuration."""
    paths: PathConfig = field(default_factory=PathConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)

    @classmethod
    def from_env(cls, **graph_options) -> "Config":
        """Build a config from environment defaults plus graph overrides."""
        graph = GraphConfig.from_options(**graph_options).validate()
        return cls(graph=graph)

    def summary(self) -> str:
        g = self.graph
        decay = g.weight_decay if isinstance(g.weight_decay, str) else getattr(
            g.weight_decay, "__name__", repr(g.weight_decay)
        )
        lines = [
            "=" * 60,
            "atomgraph Configuration",
            "=" * 60,
            f"Strategy      : {g.strategy}",
            f"Cutoff radius : {g.cutoff_radius} Å",
            f"Max neighbors : {g.max_num_neighbors}",
            f"Weight decay  : {decay}",
            f"Normalize     : {g.normalize_weights}",
            f"Voronoi tol   : {g.voronoi_tolerance}",
            f"Threads       : {g.n_jobs}",
            f"Element table : {self.paths.element_table}",
            f"Log level     : {self.runtime.log_level}",
            "=" * 60,
        ]
        return "\n".join(lines)
