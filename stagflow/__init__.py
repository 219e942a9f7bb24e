"""
stagflow: discrete Navier-Stokes operators on staggered Cartesian grids.

Forward operators and their hand-written adjoints for divergence, pressure
gradient, Laplacian, convection, diffusion, momentum, turbulence closures
and flow diagnostics in 2D and 3D.
"""

from loguru import logger as _logger

from .errors import (
    StagflowError,
    DimensionMismatchError,
    BoundaryConditionError,
    ConfigurationError,
)
from .grid import (
    BoundaryTag,
    Offset,
    IndexSet,
    Grid,
    create_grid,
    stretched_grid,
    cosine_grid,
)
from .numerics import ExecutionContext
from .setup import Setup, create_setup, setup_from_config

_logger.disable("stagflow")

__version__ = "0.1.0"

__all__ = [
    'StagflowError',
    'DimensionMismatchError',
    'BoundaryConditionError',
    'ConfigurationError',
    'BoundaryTag',
    'Offset',
    'IndexSet',
    'Grid',
    'create_grid',
    'stretched_grid',
    'cosine_grid',
    'ExecutionContext',
    'Setup',
    'create_setup',
    'setup_from_config',
]
