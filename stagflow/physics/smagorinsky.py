"""
Smagorinsky subgrid closure.

The closure owns its stress and divergence buffers, allocated once, and
returns the divergence buffer on every call. Callers that keep the result
across calls must copy it.
"""

from typing import Callable, Optional

from loguru import logger

from stagflow.numerics.fields import tensor_zeros, vector_zeros
from stagflow.numerics.tensors import divoftensor, smagtensor

DEFAULT_SMAGORINSKY_CONSTANT = 0.17


class SmagorinskyClosure:
    """
    Eddy-viscosity closure ``m(u) = ∇·(2 νt S)``.
    
    Parameters
    ----------
    setup : Setup
    apply_bc : callable, optional
        ``apply_bc(sigma) -> sigma`` fills the ghost values of the stress
        tensor before its divergence is taken.
    theta : float
        Default Smagorinsky constant.
    """
    
    def __init__(self, setup, apply_bc: Optional[Callable] = None,
                 theta: float = DEFAULT_SMAGORINSKY_CONSTANT):
        self.setup = setup
        self.apply_bc = apply_bc
        self.theta = theta
        self.sigma = tensor_zeros(setup)
        self.s = vector_zeros(setup)
        logger.debug(f"Smagorinsky closure: theta={theta}, N={tuple(setup.grid.N)}")
    
    def __call__(self, u, theta: Optional[float] = None):
        if theta is None:
            theta = self.theta
        self.sigma = smagtensor(u, theta, self.setup, out=self.sigma)
        if self.apply_bc is not None:
            self.sigma = self.apply_bc(self.sigma)
        self.s = divoftensor(self.sigma, self.setup, out=self.s)
        return self.s


def smagorinsky_closure(setup, apply_bc: Optional[Callable] = None,
                        theta: float = DEFAULT_SMAGORINSKY_CONSTANT) -> SmagorinskyClosure:
    """Create a Smagorinsky closure bound to ``setup``."""
    return SmagorinskyClosure(setup, apply_bc=apply_bc, theta=theta)
