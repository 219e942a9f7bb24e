"""
Velocity-gradient tensors at the pressure points.

Tensor fields have shape ``N + (D, D)``; entry ``[..., α, β]`` of the
velocity gradient is ``∂u_α/∂x_β``. Diagonal entries are exact differences
across the pressure volume; off-diagonal entries average the four
differences around the volume centre.
"""

from .fields import check_tensor_field, check_vector_field, scalar_zeros, tensor_output, vector_output


def _partial(u, grid, e, alpha, beta):
    """∂u_α/∂x_β on the interior pressure box."""
    P = grid.Ip
    ua = u[alpha]
    if alpha == beta:
        return (ua[P.slices] - ua[P.shifted(-e(beta))]) / P.metric(grid.delta[beta], beta)
    
    ea, eb = e(alpha), e(beta)
    dr = P.metric(grid.delta_u[beta], beta)
    dl = P.metric(grid.delta_u[beta], beta, -1)
    return (
        (ua[P.shifted(eb)] - ua[P.slices]) / dr
        + (ua[P.shifted(-ea, eb)] - ua[P.shifted(-ea)]) / dr
        + (ua[P.slices] - ua[P.shifted(-eb)]) / dl
        + (ua[P.shifted(-ea)] - ua[P.shifted(-ea, -eb)]) / dl
    ) / 4


def interior_gradient(u, setup):
    """Velocity gradient on ``Ip`` only, shape ``Np + (D, D)``."""
    check_vector_field(u, setup)
    grid, e = setup.grid, setup.offset
    xp = setup.context.xp
    D = grid.dimension
    rows = [xp.stack([_partial(u, grid, e, alpha, beta) for beta in range(D)], axis=-1)
            for alpha in range(D)]
    return xp.stack(rows, axis=-2)


def _embed(values, setup, out=None):
    out = tensor_output(out, setup)
    return setup.context.set(out, setup.grid.Ip.slices, values)


def split_gradient(G, xp):
    """Symmetric and antisymmetric parts of a gradient tensor."""
    Gt = xp.swapaxes(G, -1, -2)
    return (G + Gt) / 2, (G - Gt) / 2


def velocity_gradient(u, setup, out=None):
    """Velocity gradient tensor field ``∇u``."""
    out = tensor_output(out, setup)
    return _embed(interior_gradient(u, setup), setup, out)


def strain_tensor(u, setup, out=None):
    """Strain-rate tensor ``S = (∇u + ∇uᵀ)/2``."""
    out = tensor_output(out, setup)
    S, _ = split_gradient(interior_gradient(u, setup), setup.context.xp)
    return _embed(S, setup, out)


def rotation_tensor(u, setup, out=None):
    """Rotation-rate tensor ``R = (∇u - ∇uᵀ)/2``."""
    out = tensor_output(out, setup)
    _, R = split_gradient(interior_gradient(u, setup), setup.context.xp)
    return _embed(R, setup, out)


# =============================================================================
# Smagorinsky model
# =============================================================================

def smagtensor(u, theta: float, setup, out=None):
    """
    Smagorinsky stress ``σ = 2 νt S`` at the pressure points.
    
    The eddy viscosity is ``νt = θ² d² sqrt(2 S:S)`` with the filter width
    ``d`` the root-mean-square of the volume widths.
    
    Parameters
    ----------
    u : tuple of ndarray
        Velocity field with ghost values filled.
    theta : float
        Smagorinsky constant.
    setup : Setup
    out : ndarray, optional
        Tensor output buffer; only its interior is written.
    """
    out = tensor_output(out, setup)
    grid = setup.grid
    xp = setup.context.xp
    P = grid.Ip
    D = grid.dimension
    
    S, _ = split_gradient(interior_gradient(u, setup), xp)
    d2 = sum(P.metric(grid.delta[alpha], alpha) ** 2 for alpha in range(D)) / D
    nu_t = theta ** 2 * d2 * xp.sqrt(2 * xp.sum(S * S, axis=(-2, -1)))
    return _embed(2 * nu_t[..., None, None] * S, setup, out)


def divoftensor(sigma, setup, out=None):
    """
    Divergence of a pressure-point tensor field at the velocity points.
    
    Diagonal entries are differenced directly across the velocity volume;
    off-diagonal entries are first averaged from the four surrounding
    pressure points to the corners. Overwrites the interior ``Iu[α]``.
    """
    check_tensor_field(sigma, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    s = vector_output(out, setup)
    
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        ea = e(alpha)
        total = 0
        for beta in range(grid.dimension):
            eb = e(beta)
            
            def at(*offsets):
                return sigma[B.shifted(*offsets) + (alpha, beta)]
            
            if alpha == beta:
                h = B.metric(grid.delta_u[beta], beta)
                s2 = at(eb)
                s1 = at()
            else:
                h = B.metric(grid.delta[beta], beta)
                s2 = (at() + at(eb) + at(ea, eb) + at(ea)) / 4
                s1 = (at(-eb) + at() + at(ea, -eb) + at(ea)) / 4
            total = total + (s2 - s1) / h
        s[alpha] = ctx.set(s[alpha], B.slices, total)
    return tuple(s)


# =============================================================================
# Tensor basis
# =============================================================================

def tensorbasis(u, setup):
    """
    Tensor basis and invariants of the velocity gradient (Silvis et al. 2017).
    
    Returns
    -------
    B : tuple of ndarray
        Basis tensor fields (3 in 2D, 11 in 3D), interior only.
    V : tuple of ndarray
        Invariant scalar fields (2 in 2D, 5 in 3D), interior only.
    """
    ctx = setup.context
    S, R = split_gradient(interior_gradient(u, setup), ctx.xp)
    basis, invariants = setup.dim.tensor_basis(S, R, ctx.xp)
    P = setup.grid.Ip
    B = tuple(_embed(b, setup) for b in basis)
    V = tuple(ctx.set(scalar_zeros(setup), P.slices, v) for v in invariants)
    return B, V
