"""
Elementary operators coupling pressure and velocity.

================================================================================
STAGGERED LAYOUT
================================================================================

Pressure ``p[I]`` lives at the centre of volume ``I``, velocity ``u[α][I]`` on
the face to its right along axis ``α``. With unit offsets ``e(α)``:

    divergence        div[I]  = Σα (u[α][I] - u[α][I-eα]) / Δ[α][Iα]     I ∈ Ip
    pressure gradient G[α][I] = (p[I+eα] - p[I]) / Δu[α][Iα]              I ∈ Iu[α]
    Laplacian         L[I]    = Σα Ω[I]/Δ[α][Iα] (fr - fl)                I ∈ Ip

The Laplacian is volume-weighted, i.e. ``L = Ω · div(grad p)`` on the
interior, so that its matrix form is symmetric for stretched grids.

Adjoints start from zero and scatter ``φ`` back to every point the forward
stencil read, with the same coefficient.

================================================================================
"""

from stagflow.grid import BoundaryTag
from .fields import (
    check_scalar_field, check_vector_field, scalar_output, scalar_zeros, vector_zeros,
    vector_output,
)


# =============================================================================
# Divergence
# =============================================================================

def divergence(u, setup, out=None):
    """
    Divergence of a velocity field at the pressure points.
    
    Parameters
    ----------
    u : tuple of ndarray
        Velocity field with ghost values filled.
    setup : Setup
        Grid, context and physical parameters.
    out : ndarray, optional
        Output buffer; only its interior is written.
        
    Returns
    -------
    div : ndarray
        Divergence, zero (or untouched) outside ``Ip``.
    """
    check_vector_field(u, setup)
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    
    div = 0
    for alpha in range(grid.dimension):
        div = div + (u[alpha][P.slices] - u[alpha][P.shifted(-e(alpha))]) / P.metric(grid.delta[alpha], alpha)
    
    return ctx.set(out, P.slices, div)


def divergence_adjoint(phi, setup):
    """Adjoint of ``divergence`` for the sensitivity ``phi`` (a pressure field)."""
    check_scalar_field(phi, setup, "phi")
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    
    ubar = list(vector_zeros(setup))
    for alpha in range(grid.dimension):
        w = phi[P.slices] / P.metric(grid.delta[alpha], alpha)
        ubar[alpha] = ctx.add(ubar[alpha], P.slices, w)
        ubar[alpha] = ctx.add(ubar[alpha], P.shifted(-e(alpha)), -w)
    return tuple(ubar)


# =============================================================================
# Pressure gradient
# =============================================================================

def _gradient_component(p, setup, alpha):
    grid, e = setup.grid, setup.offset
    B = grid.Iu[alpha]
    return (p[B.shifted(e(alpha))] - p[B.slices]) / B.metric(grid.delta_u[alpha], alpha)


def pressuregradient(p, setup, out=None):
    """
    Pressure gradient at the velocity points.
    
    Overwrites the interior ``Iu[α]`` of each output component.
    """
    check_scalar_field(p, setup, "p")
    grid, ctx = setup.grid, setup.context
    G = vector_output(out, setup)
    for alpha in range(grid.dimension):
        G[alpha] = ctx.set(G[alpha], grid.Iu[alpha].slices, _gradient_component(p, setup, alpha))
    return tuple(G)


def pressuregradient_adjoint(phi, setup):
    """Adjoint of ``pressuregradient`` for the sensitivity ``phi`` (a velocity field)."""
    check_vector_field(phi, setup, "phi")
    grid, ctx, e = setup.grid, setup.context, setup.offset
    
    pbar = scalar_zeros(setup)
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        w = phi[alpha][B.slices] / B.metric(grid.delta_u[alpha], alpha)
        pbar = ctx.add(pbar, B.shifted(e(alpha)), w)
        pbar = ctx.add(pbar, B.slices, -w)
    return pbar


def applypressure(u, p, setup):
    """
    Subtract the pressure gradient from ``u`` on ``Iu[α]``.
    
    The gradient is not stored. With the NumPy backend ``u`` is updated in
    place; the (possibly new) components are returned in both cases.
    """
    check_vector_field(u, setup)
    check_scalar_field(p, setup, "p")
    grid, ctx = setup.grid, setup.context
    u = list(u)
    for alpha in range(grid.dimension):
        u[alpha] = ctx.add(u[alpha], grid.Iu[alpha].slices, -_gradient_component(p, setup, alpha))
    return tuple(u)


def applypressure_adjoint(phi, setup):
    """
    Adjoint of ``applypressure``.
    
    Returns
    -------
    ubar : tuple of ndarray
        Sensitivity with respect to the input velocity (``phi`` itself).
    pbar : ndarray
        Sensitivity with respect to the pressure.
    """
    check_vector_field(phi, setup, "phi")
    ctx = setup.context
    ubar = tuple(ctx.copy(f) for f in phi)
    pbar = -pressuregradient_adjoint(phi, setup)
    return ubar, pbar


# =============================================================================
# Laplacian (stencil form)
# =============================================================================

def laplacian(p, setup, out=None):
    """
    Volume-weighted pressure Laplacian at the pressure points.
    
    Boundary handling on the first/last interior line of each axis:
    
    - PRESSURE: the ghost pressure is taken as zero
    - DIRICHLET: the boundary flux is zero (Neumann pressure)
    - PERIODIC, SYMMETRIC: the caller-filled ghost value is used
    
    Parameters
    ----------
    p : ndarray
        Pressure field with ghost values filled.
    setup : Setup
    out : ndarray, optional
        Output buffer; only its interior is written.
    """
    check_scalar_field(p, setup, "p")
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    xp = ctx.xp
    P = grid.Ip
    
    pc = p[P.slices]
    lap = 0
    for alpha in range(grid.dimension):
        low, high = grid.boundary_conditions[alpha]
        first = P.line(alpha, 0)
        last = P.line(alpha, -1)
        
        pl = p[P.shifted(-e(alpha))]
        pr = p[P.shifted(e(alpha))]
        if low is BoundaryTag.PRESSURE:
            pl = xp.where(first, 0.0, pl)
        if high is BoundaryTag.PRESSURE:
            pr = xp.where(last, 0.0, pr)
        
        fl = (pc - pl) / P.metric(grid.delta_u[alpha], alpha, -1)
        fr = (pr - pc) / P.metric(grid.delta_u[alpha], alpha)
        if low is BoundaryTag.DIRICHLET:
            fl = xp.where(first, 0.0, fl)
        if high is BoundaryTag.DIRICHLET:
            fr = xp.where(last, 0.0, fr)
        
        lap = lap + grid.volume[P.slices] / P.metric(grid.delta[alpha], alpha) * (fr - fl)
    
    return ctx.set(out, P.slices, lap)
