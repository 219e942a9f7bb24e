"""
Configuration schema for staggered-grid setups.

Dataclass-based configuration that can be loaded from YAML or constructed programmatically.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, List

from stagflow.errors import BoundaryConditionError, ConfigurationError
from stagflow.grid.boundary import parse_boundary_conditions


@dataclass
class GridConfig:
    """Grid generation configuration (one entry per axis)."""
    
    n: List[int] = field(default_factory=lambda: [32, 32])
    limits: List[List[float]] = field(default_factory=lambda: [[0.0, 1.0], [0.0, 1.0]])
    spacing: str = "uniform"   # "uniform", "stretched" or "cosine"
    stretch: List[float] = field(default_factory=lambda: [1.0, 1.0])  # Growth ratio for "stretched"
    boundary_conditions: List[List[str]] = field(
        default_factory=lambda: [["periodic", "periodic"], ["periodic", "periodic"]]
    )
    
    @property
    def dimension(self) -> int:
        return len(self.n)


@dataclass
class FluidConfig:
    """Flow parameters."""
    
    reynolds: float = 1000.0


@dataclass
class TemperatureConfig:
    """Boussinesq temperature equation (disabled by default)."""
    
    enabled: bool = False
    prandtl: float = 0.71
    rayleigh: float = 1.0e6
    gebhart: float = 0.0
    gdir: int = 1              # Gravity axis (0-based)
    nondim_type: int = 1       # 1: free fall, 2: sqrt(c dT), 3: diffusion velocity
    dissipation: bool = True


@dataclass
class ClosureConfig:
    """Smagorinsky closure configuration."""
    
    theta: float = 0.17        # Smagorinsky constant


@dataclass
class ExecutionConfig:
    """Array backend and device."""
    
    backend: str = "numpy"     # "numpy" or "jax"
    dtype: str = "float64"
    # Device selection (jax only): "auto", "cpu", or GPU index ("0", "cuda:1", ...)
    device: Optional[str] = "auto"


@dataclass
class LoggingConfig:
    """Console logging."""
    
    level: str = "INFO"
    show_time: bool = True


@dataclass
class SimulationConfig:
    """Complete setup configuration."""
    
    grid: GridConfig = field(default_factory=GridConfig)
    fluid: FluidConfig = field(default_factory=FluidConfig)
    temperature: TemperatureConfig = field(default_factory=TemperatureConfig)
    closure: ClosureConfig = field(default_factory=ClosureConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    
    def validate(self) -> "SimulationConfig":
        """
        Check value ranges and consistency.
        
        Raises
        ------
        ConfigurationError
            On the first invalid value found.
        """
        grid = self.grid
        D = grid.dimension
        if D not in (2, 3):
            raise ConfigurationError(f"grid.n must have 2 or 3 entries, got {grid.n}")
        for name in ('limits', 'stretch', 'boundary_conditions'):
            if len(getattr(grid, name)) != D:
                raise ConfigurationError(f"grid.{name} must have {D} entries")
        if any(int(n) < 2 for n in grid.n):
            raise ConfigurationError(f"grid.n must be at least 2 per axis, got {grid.n}")
        for lo, hi in grid.limits:
            if not hi > lo:
                raise ConfigurationError(f"grid.limits must be increasing, got {grid.limits}")
        if grid.spacing not in ("uniform", "stretched", "cosine"):
            raise ConfigurationError(f"Unknown grid.spacing {grid.spacing!r}")
        if any(s <= 0 for s in grid.stretch):
            raise ConfigurationError(f"grid.stretch must be positive, got {grid.stretch}")
        try:
            parse_boundary_conditions(grid.boundary_conditions, D)
        except BoundaryConditionError as err:
            raise ConfigurationError(str(err)) from err
        
        if self.fluid.reynolds <= 0:
            raise ConfigurationError(f"fluid.reynolds must be positive, got {self.fluid.reynolds}")
        if self.temperature.enabled and not 0 <= self.temperature.gdir < D:
            raise ConfigurationError(f"temperature.gdir must be an axis index < {D}")
        if self.closure.theta < 0:
            raise ConfigurationError(f"closure.theta must be non-negative, got {self.closure.theta}")
        if self.execution.backend not in ("numpy", "jax"):
            raise ConfigurationError(f"Unknown execution.backend {self.execution.backend!r}")
        return self
    
    def to_dict(self) -> dict:
        """Convert to nested dictionary."""
        return asdict(self)


# Preset configurations
def taylor_green_preset() -> GridConfig:
    """Doubly periodic square of side 2π for Taylor-Green vortices."""
    two_pi = 6.283185307179586
    return GridConfig(
        n=[64, 64],
        limits=[[0.0, two_pi], [0.0, two_pi]],
        spacing="uniform",
        stretch=[1.0, 1.0],
        boundary_conditions=[["periodic", "periodic"], ["periodic", "periodic"]],
    )


def cavity_preset() -> GridConfig:
    """Unit square with no-slip walls, refined towards the walls."""
    return GridConfig(
        n=[64, 64],
        limits=[[0.0, 1.0], [0.0, 1.0]],
        spacing="cosine",
        stretch=[1.0, 1.0],
        boundary_conditions=[["dirichlet", "dirichlet"], ["dirichlet", "dirichlet"]],
    )


PRESETS = {
    'taylor-green': taylor_green_preset,
    'cavity': cavity_preset,
}
