"""
Configuration module for staggered-grid setups.

Provides YAML-based configuration with dataclass schema.
"""

from .schema import (
    SimulationConfig,
    GridConfig,
    FluidConfig,
    TemperatureConfig,
    ClosureConfig,
    ExecutionConfig,
    LoggingConfig,
    taylor_green_preset,
    cavity_preset,
    PRESETS,
)

from .loader import (
    load_yaml,
    from_dict,
    save_yaml,
)

__all__ = [
    # Schema classes
    'SimulationConfig',
    'GridConfig',
    'FluidConfig',
    'TemperatureConfig',
    'ClosureConfig',
    'ExecutionConfig',
    'LoggingConfig',
    # Presets
    'taylor_green_preset',
    'cavity_preset',
    'PRESETS',
    # Loader functions
    'load_yaml',
    'from_dict',
    'save_yaml',
]
