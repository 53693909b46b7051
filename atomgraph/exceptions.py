"""
Error taxonomy for atomgraph.

All errors raised on purpose by the package derive from AtomGraphError so
callers can catch one type at batch or CLI boundaries.
"""


class AtomGraphError(Exception):
    """Base class for atomgraph errors."""


class InvalidStructureError(AtomGraphError, ValueError):
    """Structure is empty or malformed (bad shapes, missing lattice, ...)."""


class InvalidConfigError(AtomGraphError, ValueError):
    """Graph-building configuration is out of range."""


class DegenerateGeometryError(AtomGraphError):
    """Geometry is numerically ill-posed (coincident sites, flat point sets)."""


class FeaturizationError(AtomGraphError):
    """A feature could not be computed or encoded."""


class UnsupportedElementError(FeaturizationError):
    """A graph contains species a feature descriptor cannot encode."""

    def __init__(self, feature: str, species):
        self.feature = feature
        self.species = sorted(species)
        super().__init__(
            f"Feature '{feature}' is not defined for: {', '.join(self.species)}"
        )
