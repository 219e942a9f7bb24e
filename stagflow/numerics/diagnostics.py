"""
Flow diagnostics: vorticity, vortex criteria and kinetic energy.

All quantities except the vorticity are evaluated at the pressure points.
"""

from .eig_kernels import middle_eigenvalues
from .fields import check_scalar_field, check_vector_field, scalar_output, vector_output
from .pressure import pressuregradient
from .tensors import split_gradient, interior_gradient


def vorticity(u, setup, out=None):
    """
    Vorticity at the cell corners (2D: scalar field, 3D: vector field).
    
    Evaluated on every index but the last one along each axis, ghosts
    included.
    """
    check_vector_field(u, setup)
    return setup.dim.vorticity(u, setup, out)


def interpolate_u_p(u, setup, out=None):
    """Velocity interpolated from the faces to the pressure points."""
    check_vector_field(u, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    up = vector_output(out, setup)
    for alpha in range(grid.dimension):
        value = (u[alpha][P.shifted(-e(alpha))] + u[alpha][P.slices]) / 2
        up[alpha] = ctx.set(up[alpha], P.slices, value)
    return tuple(up)


def interpolate_vorticity_p(w, setup, out=None):
    """Vorticity interpolated from the corners (edges in 3D) to the pressure points."""
    return setup.dim.interpolate_vorticity_p(w, setup, out)


def qfield(u, setup, out=None):
    """Q-criterion ``Q = -1/2 Σαβ ∂u_α/∂x_β ∂u_β/∂x_α``."""
    check_vector_field(u, setup)
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    D = grid.dimension
    
    q = 0
    for alpha in range(D):
        for beta in range(D):
            dua = (u[alpha][P.slices] - u[alpha][P.shifted(-e(beta))]) / P.metric(grid.delta[beta], beta)
            dub = (u[beta][P.slices] - u[beta][P.shifted(-e(alpha))]) / P.metric(grid.delta[alpha], alpha)
            q = q - dua * dub / 2
    
    return ctx.set(out, P.slices, q)


def dfield(p, setup, eps=None, out=None, G=None):
    """
    D-criterion from the pressure field, ``D = |∇p| / ∇²p``.
    
    ``∇p`` at the pressure point is the average of the two face gradients
    along each axis. The sign of the Laplacian is kept, so ``D < 0`` where
    ``∇²p < 0``.
    
    Parameters
    ----------
    p : ndarray
        Pressure field with ghost values filled.
    setup : Setup
    eps : float, optional
        The Laplacian is kept at least ``eps`` away from zero, with its sign
        preserved. Defaults to the machine epsilon of the context dtype.
    out : ndarray, optional
    G : tuple of ndarray, optional
        Scratch buffer for the pressure gradient; it is overwritten.
    """
    check_scalar_field(p, setup, "p")
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    xp = ctx.xp
    P = grid.Ip
    if eps is None:
        eps = ctx.eps
    
    G = pressuregradient(p, setup, out=G)
    g = 0
    lap = 0
    for alpha in range(grid.dimension):
        left = G[alpha][P.shifted(-e(alpha))]
        right = G[alpha][P.slices]
        g = g + (left + right) ** 2
        lap = lap + (right - left) / P.metric(grid.delta[alpha], alpha)
    
    lap = xp.where(lap > 0, xp.maximum(lap, eps), xp.minimum(lap, -eps))
    d = xp.sqrt(g) / 2 / lap
    
    return ctx.set(out, P.slices, d)


def eig2field(u, setup, out=None):
    """
    Lambda2-criterion: middle eigenvalue of ``S² + R²`` (3D only).
    
    Raises
    ------
    DimensionMismatchError
        On a 2D grid.
    """
    setup.dim.check_lambda2()
    check_vector_field(u, setup)
    out = scalar_output(out, setup)
    ctx = setup.context
    xp = ctx.xp
    
    S, R = split_gradient(interior_gradient(u, setup), xp)
    M = S @ S + R @ R
    if ctx.is_jax:
        lam2 = xp.linalg.eigvalsh(M)[..., 1]
    else:
        lam2 = middle_eigenvalues(M)
    
    return ctx.set(out, setup.grid.Ip.slices, lam2)


def kinetic_energy(u, setup, interpolate_first: bool = False, out=None):
    """
    Kinetic energy per unit volume at the pressure points.
    
    With ``interpolate_first`` the velocity is averaged to the pressure
    point before squaring, ``k = Σα (u[I] + u[I-eα])² / 8``; otherwise the
    squares are averaged, ``k = Σα (u[I]² + u[I-eα]²) / 4``.
    """
    check_vector_field(u, setup)
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    
    k = 0
    for alpha in range(grid.dimension):
        right = u[alpha][P.slices]
        left = u[alpha][P.shifted(-e(alpha))]
        if interpolate_first:
            k = k + (left + right) ** 2 / 8
        else:
            k = k + (left ** 2 + right ** 2) / 4
    
    return ctx.set(out, P.slices, k)


def total_kinetic_energy(u, setup, interpolate_first: bool = False) -> float:
    """Volume integral ``Σ Ω k`` of the kinetic energy over the interior."""
    P = setup.grid.Ip
    k = kinetic_energy(u, setup, interpolate_first=interpolate_first)
    return float(setup.context.xp.sum(setup.grid.volume[P.slices] * k[P.slices]))
