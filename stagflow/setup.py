"""
Operator setup: grid, physical parameters and execution context.

Every operator takes a ``Setup`` as its last positional argument. It carries
the grid metrics converted to the context's array type, the unit offsets,
and the dimension strategy selected once for the grid dimension.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

import numpy as np
from loguru import logger

from stagflow.config.schema import SimulationConfig
from stagflow.errors import ConfigurationError
from stagflow.grid import Grid, Offset, create_grid, stretched_grid, cosine_grid
from stagflow.grid.cartesian import Weights
from stagflow.numerics.backend import ExecutionContext
from stagflow.numerics.dimension import dimension_strategy
from stagflow.physics.smagorinsky import SmagorinskyClosure
from stagflow.physics.temperature import TemperatureEquation, temperature_equation
from stagflow.utils.logging import setup_logging

DEFAULT_REYNOLDS = 1000.0


@dataclass
class Setup:
    """
    Everything an operator needs besides its input fields.
    
    Attributes
    ----------
    grid : Grid
        Grid with metric arrays in the context's array type.
    host_grid : Grid
        The same grid with NumPy metrics (sparse assembly, coordinates).
    reynolds : float
        Reynolds number; the viscosity is ``1 / reynolds``.
    temperature : TemperatureEquation or None
    bodyforce : callable or None
        ``bodyforce(axis, *x, t)`` evaluated at the velocity points.
    issteadybodyforce : bool
        Whether the body force is sampled once (at t = 0) or on every call.
    context : ExecutionContext
    """
    grid: Grid
    host_grid: Grid
    reynolds: float
    temperature: Optional[TemperatureEquation]
    bodyforce: Optional[Callable]
    issteadybodyforce: bool
    context: ExecutionContext
    offset: Offset = field(init=False)
    dim: Any = field(init=False)
    bodyforce_field: Optional[tuple] = field(init=False, default=None)
    
    def __post_init__(self):
        self.offset = Offset(self.grid.dimension)
        self.dim = dimension_strategy(self.grid.dimension)
    
    @property
    def dimension(self) -> int:
        return self.grid.dimension
    
    @property
    def nu(self) -> float:
        return 1.0 / self.reynolds


def _device_grid(grid: Grid, context: ExecutionContext) -> Grid:
    """Convert the metric arrays of ``grid`` to the context array type."""
    convert = context.asarray
    return replace(
        grid,
        delta=tuple(convert(d) for d in grid.delta),
        delta_u=tuple(convert(d) for d in grid.delta_u),
        volume=convert(grid.volume),
        A=tuple(
            tuple(Weights(left=convert(w.left), right=convert(w.right)) for w in row)
            for row in grid.A
        ),
    )


def create_setup(grid: Grid, reynolds: Optional[float] = None,
                 temperature: Optional[TemperatureEquation] = None,
                 bodyforce: Optional[Callable] = None,
                 issteadybodyforce: bool = True,
                 context: Optional[ExecutionContext] = None) -> Setup:
    """
    Bundle a grid with physical parameters for operator evaluation.
    
    Parameters
    ----------
    grid : Grid
        Grid from ``create_grid``.
    reynolds : float, optional
        Reynolds number. Defaults to ``1/α1`` with a temperature equation and
        to 1000 otherwise.
    temperature : TemperatureEquation, optional
        Enables buoyancy, temperature transport and dissipation.
    bodyforce : callable, optional
        ``bodyforce(axis, *x, t)``; ``x`` are broadcastable coordinate arrays.
    issteadybodyforce : bool
        Sample the body force once at setup instead of on every call.
    context : ExecutionContext, optional
        Defaults to the NumPy backend in float64.
        
    Returns
    -------
    Setup
    """
    if context is None:
        context = ExecutionContext()
    if reynolds is None:
        reynolds = 1.0 / temperature.alpha1 if temperature is not None else DEFAULT_REYNOLDS
    if not reynolds > 0:
        raise ConfigurationError(f"Reynolds number must be positive, got {reynolds}")
    if temperature is not None and not 0 <= temperature.gdir < grid.dimension:
        raise ConfigurationError(
            f"Gravity direction {temperature.gdir} outside a {grid.dimension}D grid"
        )
    
    setup = Setup(
        grid=_device_grid(grid, context),
        host_grid=grid,
        reynolds=float(reynolds),
        temperature=temperature,
        bodyforce=bodyforce,
        issteadybodyforce=issteadybodyforce,
        context=context,
    )
    
    if bodyforce is not None and issteadybodyforce:
        from stagflow.numerics.forcing import evaluate_bodyforce
        setup.bodyforce_field = evaluate_bodyforce(bodyforce, 0.0, setup)
    
    logger.info(
        f"Setup: {grid.dimension}D, N={tuple(grid.N)}, Re={setup.reynolds:g}, "
        f"backend={context.backend}, temperature={'on' if temperature else 'off'}"
    )
    return setup


# =============================================================================
# Construction from configuration
# =============================================================================

def _axis_nodes(grid_config, alpha: int) -> np.ndarray:
    n = int(grid_config.n[alpha])
    a, b = (float(v) for v in grid_config.limits[alpha])
    if grid_config.spacing == "cosine":
        return cosine_grid(a, b, n)
    if grid_config.spacing == "stretched":
        return stretched_grid(a, b, n, float(grid_config.stretch[alpha]))
    return np.linspace(a, b, n + 1)


def setup_from_config(config: SimulationConfig, bodyforce: Optional[Callable] = None,
                      configure_logging: bool = False) -> Setup:
    """
    Build grid, temperature equation, context and setup from a configuration.
    
    Parameters
    ----------
    config : SimulationConfig
        Validated configuration (see ``stagflow.config``).
    bodyforce : callable, optional
        Body force (functions are not part of the YAML schema).
    configure_logging : bool
        Install the console log handler from ``config.logging``.
    """
    config.validate()
    if configure_logging:
        setup_logging(config.logging.level, show_time=config.logging.show_time)
    
    execution = config.execution
    if execution.backend == "jax":
        from stagflow.physics.jax_config import select_device, get_device_info
        select_device(execution.device)
        logger.info(get_device_info())
    context = ExecutionContext(backend=execution.backend, dtype=execution.dtype)
    
    grid_config = config.grid
    x = tuple(_axis_nodes(grid_config, alpha) for alpha in range(grid_config.dimension))
    grid = create_grid(x, grid_config.boundary_conditions)
    
    temperature = None
    reynolds = config.fluid.reynolds
    if config.temperature.enabled:
        tc = config.temperature
        temperature = temperature_equation(
            tc.prandtl, tc.rayleigh, tc.gebhart, gdir=tc.gdir,
            nondim_type=tc.nondim_type, dodissipation=tc.dissipation,
        )
        reynolds = None
    
    return create_setup(grid, reynolds=reynolds, temperature=temperature,
                        bodyforce=bodyforce, context=context)


def closure_from_config(setup: Setup, config: SimulationConfig,
                        apply_bc: Optional[Callable] = None) -> SmagorinskyClosure:
    """Smagorinsky closure with the constant from ``config.closure``."""
    return SmagorinskyClosure(setup, apply_bc=apply_bc, theta=config.closure.theta)
