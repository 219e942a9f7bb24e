"""
Operator registry for reverse-mode differentiation.

Each differentiable operator is a pair ``forward(*inputs) -> output`` and
``adjoint(sensitivity, *inputs) -> input sensitivities``. The inputs the
adjoint needs are passed explicitly; nothing is captured from a previous
forward call.

``rrule`` packages a pair as (output, pullback) for reverse-mode drivers,
and ``as_jax_function`` registers the hand-written adjoint with
``jax.custom_vjp`` so ``jax.grad`` uses it instead of tracing the stencil.
"""

from typing import Callable, Dict, NamedTuple

from .fluxes import (
    convection, convection_adjoint,
    diffusion, diffusion_adjoint,
    convectiondiffusion, convectiondiffusion_adjoint,
)
from .forcing import bodyforce, bodyforce_adjoint, gravity, gravity_adjoint
from .momentum import momentum, momentum_adjoint
from .pressure import (
    divergence, divergence_adjoint,
    pressuregradient, pressuregradient_adjoint,
    applypressure, applypressure_adjoint,
)


class DifferentiableOperator(NamedTuple):
    """
    Forward operator paired with its vector-Jacobian product.
    
    Attributes
    ----------
    name : str
    forward : callable
        ``forward(*inputs) -> output``.
    adjoint : callable
        ``adjoint(sensitivity, *inputs)``; returns the sensitivity of the
        single differentiable input, or a tuple when there are several.
    arity : int
        Number of inputs.
    """
    name: str
    forward: Callable
    adjoint: Callable
    arity: int = 1


def differentiable_operators(setup) -> Dict[str, DifferentiableOperator]:
    """Differentiable operators bound to ``setup``, by name."""
    ctx = setup.context
    
    def _applypressure(u, p):
        # Work on a copy so the caller's velocity is not overwritten
        return applypressure(tuple(ctx.copy(f) for f in u), p, setup)
    
    def _bodyforce_adjoint(phi, u, t):
        return bodyforce_adjoint(phi, setup)
    
    def _gravity(temp):
        return gravity(temp, setup)
    
    def _momentum(u, temp, t):
        return momentum(u, temp, t, setup)
    
    def _momentum_adjoint(phi, u, temp, t):
        return momentum_adjoint(phi, u, temp, t, setup)
    
    operators = [
        DifferentiableOperator(
            'divergence',
            lambda u: divergence(u, setup),
            lambda phi, u: divergence_adjoint(phi, setup),
        ),
        DifferentiableOperator(
            'pressuregradient',
            lambda p: pressuregradient(p, setup),
            lambda phi, p: pressuregradient_adjoint(phi, setup),
        ),
        DifferentiableOperator(
            'applypressure',
            _applypressure,
            lambda phi, u, p: applypressure_adjoint(phi, setup),
            arity=2,
        ),
        DifferentiableOperator(
            'convection',
            lambda u: convection(u, setup),
            lambda phi, u: convection_adjoint(phi, u, setup),
        ),
        DifferentiableOperator(
            'diffusion',
            lambda u: diffusion(u, setup),
            lambda phi, u: diffusion_adjoint(phi, setup),
        ),
        DifferentiableOperator(
            'convectiondiffusion',
            lambda u: convectiondiffusion(u, setup),
            lambda phi, u: convectiondiffusion_adjoint(phi, u, setup),
        ),
        DifferentiableOperator(
            'bodyforce',
            lambda u, t: bodyforce(u, t, setup),
            _bodyforce_adjoint,
            arity=2,
        ),
        DifferentiableOperator(
            'gravity',
            _gravity,
            lambda phi, temp: gravity_adjoint(phi, setup),
        ),
        DifferentiableOperator('momentum', _momentum, _momentum_adjoint, arity=3),
    ]
    return {op.name: op for op in operators}


def rrule(op: DifferentiableOperator, *inputs):
    """
    Evaluate ``op`` and return ``(output, pullback)``.
    
    ``pullback(sensitivity)`` applies the adjoint at the saved inputs.
    """
    if len(inputs) != op.arity:
        raise TypeError(f"{op.name} takes {op.arity} inputs, got {len(inputs)}")
    output = op.forward(*inputs)
    
    def pullback(sensitivity):
        return op.adjoint(sensitivity, *inputs)
    
    return output, pullback


def as_jax_function(op: DifferentiableOperator) -> Callable:
    """
    Wrap a single-input operator as a JAX function with a custom VJP.
    
    The setup bound to ``op`` must use the JAX backend.
    """
    if op.arity != 1:
        raise ValueError(f"{op.name}: only single-input operators can be wrapped, "
                         f"got arity {op.arity}")
    from stagflow.physics.jax_config import jax
    
    @jax.custom_vjp
    def f(x):
        return op.forward(x)
    
    def f_fwd(x):
        return op.forward(x), (x,)
    
    def f_bwd(residuals, sensitivity):
        (x,) = residuals
        return (op.adjoint(sensitivity, x),)
    
    f.defvjp(f_fwd, f_bwd)
    return f
