"""
YAML configuration loader with validation.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Union, get_origin
from dataclasses import fields, is_dataclass

from stagflow.errors import ConfigurationError
from .schema import (
    SimulationConfig, GridConfig, FluidConfig, TemperatureConfig,
    ClosureConfig, ExecutionConfig, LoggingConfig, PRESETS,
)

_SECTIONS = {
    'grid': GridConfig,
    'fluid': FluidConfig,
    'temperature': TemperatureConfig,
    'closure': ClosureConfig,
    'execution': ExecutionConfig,
    'logging': LoggingConfig,
}


def _merge_dict(base: dict, override: dict) -> dict:
    """Recursively merge override into base dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def _coerce_type(value, field_type):
    """Coerce value to the expected field type."""
    # Handle string representations of numbers (e.g., "1.0e6")
    if field_type == float and isinstance(value, (str, int)) and not isinstance(value, bool):
        try:
            return float(value)
        except ValueError:
            raise ConfigurationError(f"Expected a number, got {value!r}")
    if field_type == int and isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError(f"Expected an integer, got {value!r}")
    if get_origin(field_type) is list and isinstance(value, tuple):
        return list(value)
    return value


def _dict_to_dataclass(cls, data: dict):
    """Convert a nested dictionary to a dataclass instance."""
    if not is_dataclass(cls):
        return data
    if not isinstance(data, dict):
        raise ConfigurationError(f"Section {cls.__name__} must be a mapping, got {data!r}")
    
    field_types = {f.name: f.type for f in fields(cls)}
    kwargs = {}
    
    for key, value in data.items():
        if key not in field_types:
            continue  # Skip unknown fields
        
        field_type = field_types[key]
        
        # Handle nested dataclasses
        if is_dataclass(field_type) and isinstance(value, dict):
            kwargs[key] = _dict_to_dataclass(field_type, value)
        else:
            # Coerce types for primitive values
            kwargs[key] = _coerce_type(value, field_type)
    
    return cls(**kwargs)


def load_yaml(path: Union[str, Path]) -> SimulationConfig:
    """
    Load a configuration from a YAML file.
    
    Args:
        path: Path to YAML configuration file
        
    Returns:
        Validated SimulationConfig instance
        
    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ConfigurationError: If a value is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    
    with open(path) as f:
        data = yaml.safe_load(f)
    
    if data is None:
        data = {}
    
    return from_dict(data)


def from_dict(data: Dict[str, Any]) -> SimulationConfig:
    """
    Create a validated SimulationConfig from a dictionary.
    
    Handles nested structures and applies defaults for missing values. A
    ``preset`` key selects a named grid whose entries can be overridden
    by an explicit ``grid`` section.
    """
    data = dict(data)
    
    # Check for preset
    preset = data.pop('preset', None)
    if preset:
        if preset not in PRESETS:
            raise ConfigurationError(f"Unknown preset {preset!r}. Use one of {sorted(PRESETS)}")
        grid_preset = PRESETS[preset]()
        preset_dict = {f.name: getattr(grid_preset, f.name) for f in fields(GridConfig)}
        data['grid'] = _merge_dict(preset_dict, data.get('grid') or {})
    
    # Build config section by section
    config_dict = {}
    for name, cls in _SECTIONS.items():
        if data.get(name) is not None:
            config_dict[name] = _dict_to_dataclass(cls, data[name])
    
    return SimulationConfig(**config_dict).validate()


def save_yaml(config: SimulationConfig, path: Union[str, Path]) -> None:
    """Save configuration to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    
    with open(path, 'w') as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
