"""
Exceptions raised by the staggered-grid operators.

All exceptions derive from ``ValueError`` so callers that already guard
operator calls with ``except ValueError`` keep working.
"""


class StagflowError(ValueError):
    """Base class for invalid operator input."""


class DimensionMismatchError(StagflowError):
    """Field arity or rank does not match the grid dimension."""


class BoundaryConditionError(StagflowError):
    """Unsupported boundary-tag value or combination."""


class ConfigurationError(StagflowError):
    """Invalid configuration value."""
