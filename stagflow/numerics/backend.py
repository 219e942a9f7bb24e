"""
Execution context: which array library owns the buffers.

Every operator is written once against this small interface. The NumPy
backend updates caller buffers in place; the JAX backend returns updated
copies (``.at[...]``), which keeps the operators traceable by ``jax.jit``
and differentiable by ``jax.vjp``.
"""

from dataclasses import dataclass

import numpy as np

from stagflow.errors import ConfigurationError

BACKENDS = ("numpy", "jax")


@dataclass(frozen=True)
class ExecutionContext:
    """
    Array backend and floating point type for operator evaluation.
    
    Attributes
    ----------
    backend : str
        "numpy" (host arrays, in-place updates) or "jax" (XLA device arrays,
        functional updates).
    dtype : str
        Floating point type of all fields and metrics.
    """
    backend: str = "numpy"
    dtype: str = "float64"
    
    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend {self.backend!r}. Use one of {BACKENDS}"
            )
        if np.dtype(self.dtype).kind != 'f':
            raise ConfigurationError(f"dtype must be a floating point type, got {self.dtype!r}")
    
    @property
    def is_jax(self) -> bool:
        return self.backend == "jax"
    
    @property
    def xp(self):
        """Array namespace (``numpy`` or ``jax.numpy``)."""
        if self.is_jax:
            from stagflow.physics.jax_config import jnp
            return jnp
        return np
    
    @property
    def eps(self) -> float:
        """Machine epsilon of the context dtype."""
        return float(np.finfo(self.dtype).eps)
    
    def asarray(self, a):
        return self.xp.asarray(a, dtype=self.dtype)
    
    def zeros(self, shape):
        return self.xp.zeros(shape, dtype=self.dtype)
    
    def copy(self, a):
        return self.xp.array(a, dtype=self.dtype, copy=True)
    
    def set(self, a, index, value):
        """``a[index] = value``; returns the updated array."""
        if self.is_jax:
            return a.at[index].set(value)
        a[index] = value
        return a
    
    def add(self, a, index, value):
        """``a[index] += value``; returns the updated array."""
        if self.is_jax:
            return a.at[index].add(value)
        a[index] += value
        return a
    
    def fill(self, a, value):
        """Set every entry of ``a`` to ``value``; returns the updated array."""
        if self.is_jax:
            return self.xp.full_like(a, value)
        a[...] = value
        return a
    
    def to_numpy(self, a) -> np.ndarray:
        return np.asarray(a)
