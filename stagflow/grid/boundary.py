"""
Boundary classification tags.

The operators only *classify* boundaries; filling ghost values is done by a
separate boundary-application step outside this package. Each axis carries
a ``(low, high)`` pair of tags.
"""

from enum import Enum
from typing import Sequence, Tuple

from stagflow.errors import BoundaryConditionError


class BoundaryTag(str, Enum):
    """Boundary type on one side of one axis."""
    
    PERIODIC = "periodic"
    DIRICHLET = "dirichlet"     # Prescribed velocity
    SYMMETRIC = "symmetric"     # Zero normal velocity, zero tangential stress
    PRESSURE = "pressure"       # Prescribed (zero) pressure, free velocity

    @classmethod
    def parse(cls, value) -> "BoundaryTag":
        """Convert a tag or its string name (case-insensitive) to a BoundaryTag."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            # Accept the "PeriodicBC"-style spelling as well
            if key.endswith("bc"):
                key = key[:-2]
            for tag in cls:
                if tag.value == key:
                    return tag
        raise BoundaryConditionError(
            f"Unknown boundary condition {value!r}. "
            f"Use one of {[t.value for t in cls]}"
        )


BoundaryPair = Tuple[BoundaryTag, BoundaryTag]


def parse_boundary_conditions(boundary_conditions: Sequence, dimension: int) -> Tuple[BoundaryPair, ...]:
    """
    Validate per-axis boundary tags.
    
    Parameters
    ----------
    boundary_conditions : sequence of (low, high)
        One pair per axis. Entries may be BoundaryTag values or strings.
    dimension : int
        Grid dimension.
        
    Returns
    -------
    tuple of (BoundaryTag, BoundaryTag)
    
    Raises
    ------
    BoundaryConditionError
        Wrong number of pairs, unknown tag, or a periodic side paired with
        a non-periodic side.
    """
    if len(boundary_conditions) != dimension:
        raise BoundaryConditionError(
            f"Expected {dimension} boundary condition pairs, got {len(boundary_conditions)}"
        )
    
    pairs = []
    for axis, pair in enumerate(boundary_conditions):
        if len(pair) != 2:
            raise BoundaryConditionError(
                f"Axis {axis}: expected a (low, high) pair, got {pair!r}"
            )
        low, high = BoundaryTag.parse(pair[0]), BoundaryTag.parse(pair[1])
        if (low is BoundaryTag.PERIODIC) != (high is BoundaryTag.PERIODIC):
            raise BoundaryConditionError(
                f"Axis {axis}: periodic boundary must be periodic on both sides, "
                f"got ({low.value}, {high.value})"
            )
        pairs.append((low, high))
    return tuple(pairs)
