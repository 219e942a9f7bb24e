"""
Dimensionless parameters of the Boussinesq temperature equation.

================================================================================
NONDIMENSIONALIZATION
================================================================================

With Prandtl number Pr, Rayleigh number Ra and Gebhart number Ge:

    ∂u/∂t = -∇·(uu) - ∇p + α1 ∇²u + α2 T e_g
    ∂T/∂t = -∇·(uT) + α4 ∇²T + α3 Φ

Three choices of the reference velocity give the coefficients:

    1. Free-fall velocity          sqrt(g β ΔT H)
    2. Velocity sqrt(c ΔT)
    3. Diffusion velocity          κ / H

The dissipation scale is γ = α1 / α3.

================================================================================
"""

import math
from dataclasses import dataclass

from stagflow.errors import ConfigurationError


@dataclass(frozen=True)
class TemperatureEquation:
    """Coefficients of the temperature equation and the buoyancy direction."""
    alpha1: float
    alpha2: float
    alpha3: float
    alpha4: float
    gamma: float
    gdir: int = 1
    dodissipation: bool = True


def temperature_equation(Pr: float, Ra: float, Ge: float, gdir: int = 1,
                         nondim_type: int = 1,
                         dodissipation: bool = True) -> TemperatureEquation:
    """
    Build temperature equation coefficients.
    
    Parameters
    ----------
    Pr, Ra, Ge : float
        Prandtl, Rayleigh and Gebhart numbers.
    gdir : int
        Axis along which gravity acts (0-based).
    nondim_type : int
        Reference velocity: 1 (free fall), 2 (sqrt(c ΔT)), 3 (diffusion).
    dodissipation : bool
        Whether the viscous dissipation source is included.
        
    Raises
    ------
    ConfigurationError
        For non-positive Pr or Ra, negative Ge or an unknown ``nondim_type``.
    """
    if Pr <= 0 or Ra <= 0:
        raise ConfigurationError(f"Pr and Ra must be positive, got Pr={Pr}, Ra={Ra}")
    if Ge < 0:
        raise ConfigurationError(f"Ge must be non-negative, got {Ge}")
    
    if nondim_type == 1:
        alpha1 = 1 / math.sqrt(Ra / Pr)
        alpha2 = 1.0
        alpha3 = Ge * math.sqrt(Pr / Ra)
        alpha4 = 1 / math.sqrt(Pr * Ra)
    elif nondim_type == 2:
        alpha1 = math.sqrt(Ge / Ra * Pr)
        alpha2 = Ge
        alpha3 = math.sqrt(Ge * Pr / Ra)
        alpha4 = math.sqrt(Ge / (Pr * Ra))
    elif nondim_type == 3:
        alpha1 = Pr
        alpha2 = Ra * Pr
        alpha3 = Ge / Ra
        alpha4 = 1.0
    else:
        raise ConfigurationError(f"nondim_type must be 1, 2 or 3, got {nondim_type}")
    
    gamma = alpha1 / alpha3 if alpha3 != 0 else math.inf
    return TemperatureEquation(alpha1, alpha2, alpha3, alpha4, gamma, gdir, dodissipation)
