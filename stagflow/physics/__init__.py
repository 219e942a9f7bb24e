"""Physical models: temperature coefficients and turbulence closures."""

from .temperature import TemperatureEquation, temperature_equation
from .smagorinsky import SmagorinskyClosure, smagorinsky_closure, DEFAULT_SMAGORINSKY_CONSTANT

__all__ = [
    'TemperatureEquation',
    'temperature_equation',
    'SmagorinskyClosure',
    'smagorinsky_closure',
    'DEFAULT_SMAGORINSKY_CONSTANT',
]
