"""
Staggered Cartesian grid and index model.

This module provides:
- Unit offsets and rectangular index sets used by every stencil
- Boundary classification tags
- The grid collaborator (extended sizes, index sets, metrics, weights)
- 1-D node distributions
"""

from .boundary import (
    BoundaryTag,
    parse_boundary_conditions,
)

from .index import (
    MultiIndex,
    Offset,
    IndexSet,
)

from .cartesian import (
    Grid,
    Weights,
    create_grid,
)

from .stretching import (
    stretched_grid,
    cosine_grid,
)

__all__ = [
    'BoundaryTag',
    'parse_boundary_conditions',
    'MultiIndex',
    'Offset',
    'IndexSet',
    'Grid',
    'Weights',
    'create_grid',
    'stretched_grid',
    'cosine_grid',
]
