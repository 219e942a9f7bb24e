"""
Convection and diffusion of momentum on the staggered grid.

================================================================================
FINITE VOLUME FORMULATION
================================================================================

Momentum component ``α`` is balanced over the velocity volume around face
``I`` (``I ∈ Iu[α]``). For each axis ``β`` the two faces of that volume sit
at ``I - eβ/2`` (1) and ``I + eβ/2`` (2), a distance ``h`` apart:

    h = Δu[β][Iβ]   if α == β   (velocity volume straddles two pressure volumes)
      = Δ[β][Iβ]    otherwise

CONVECTION:
    F[α][I] -= (uαβ2 · uβα2 - uαβ1 · uβα1) / h

    uαβ  : advected component, mean of its two neighbours along β
    uβα  : transporting component, interpolated along α with A[β][α]

DIFFUSION:
    F[α][I] += ν [(u[α][I+eβ] - u[α][I]) / wr - (u[α][I] - u[α][I-eβ]) / wl] / h

    wr, wl = Δ[β][Iβ+1], Δ[β][Iβ]        if α == β
           = Δu[β][Iβ], Δu[β][Iβ-1]      otherwise

Both operators accumulate into their output. Adjoints are vector-Jacobian
products: convection is quadratic, so its adjoint depends on the forward
velocity.

================================================================================
"""

from .fields import check_vector_field, vector_zeros, vector_output


def _face_width(grid, B, alpha, beta):
    """Distance ``h`` between the two β-faces of the α-velocity volume."""
    if alpha == beta:
        return B.metric(grid.delta_u[beta], beta)
    return B.metric(grid.delta[beta], beta)


def _gradient_widths(grid, B, alpha, beta):
    """Distances (wl, wr) across which u[α] is differenced along β."""
    if alpha == beta:
        return B.metric(grid.delta[beta], beta), B.metric(grid.delta[beta], beta, 1)
    return B.metric(grid.delta_u[beta], beta, -1), B.metric(grid.delta_u[beta], beta)


def _interpolation(grid, B, alpha, beta):
    """
    Weights of the transporting velocity ``u[β]`` at both β-faces.
    
    Returns (right1, left1, right2, left2): face 1 reads ``u[β]`` at
    ``I - eβ`` and ``I - eβ + eα``, face 2 at ``I`` and ``I + eα``.
    """
    W = grid.A[beta][alpha]
    same = int(alpha == beta)
    return (
        B.metric(W.right, alpha, -same),
        B.metric(W.left, alpha, 1 - same),
        B.metric(W.right, alpha),
        B.metric(W.left, alpha, 1),
    )


def _convective_faces(u, grid, e, B, alpha, beta):
    """Advected (uαβ) and transporting (uβα) velocities at both β-faces."""
    r1, l1, r2, l2 = _interpolation(grid, B, alpha, beta)
    ua = u[alpha]
    ub = u[beta]
    uab1 = (ua[B.shifted(-e(beta))] + ua[B.slices]) / 2
    uab2 = (ua[B.slices] + ua[B.shifted(e(beta))]) / 2
    uba1 = r1 * ub[B.shifted(-e(beta))] + l1 * ub[B.shifted(-e(beta), e(alpha))]
    uba2 = r2 * ub[B.slices] + l2 * ub[B.shifted(e(alpha))]
    return uab1, uab2, uba1, uba2


def _diffusive_difference(u, grid, e, B, alpha, beta):
    wl, wr = _gradient_widths(grid, B, alpha, beta)
    ua = u[alpha]
    d1 = (ua[B.slices] - ua[B.shifted(-e(beta))]) / wl
    d2 = (ua[B.shifted(e(beta))] - ua[B.slices]) / wr
    return d2 - d1


# =============================================================================
# Forward operators
# =============================================================================

def convection(u, setup, out=None):
    """
    Convective momentum flux ``-∇·(u u)``, accumulated into ``out``.
    
    Parameters
    ----------
    u : tuple of ndarray
        Velocity field with ghost values filled.
    setup : Setup
    out : tuple of ndarray, optional
        Accumulator (zeros if omitted).
    """
    check_vector_field(u, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    F = vector_output(out, setup)
    
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        for beta in range(grid.dimension):
            h = _face_width(grid, B, alpha, beta)
            uab1, uab2, uba1, uba2 = _convective_faces(u, grid, e, B, alpha, beta)
            F[alpha] = ctx.add(F[alpha], B.slices, -(uab2 * uba2 - uab1 * uba1) / h)
    return tuple(F)


def diffusion(u, setup, out=None):
    """Viscous momentum flux ``ν ∇²u``, accumulated into ``out``."""
    check_vector_field(u, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    nu = setup.nu
    F = vector_output(out, setup)
    
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        for beta in range(grid.dimension):
            h = _face_width(grid, B, alpha, beta)
            F[alpha] = ctx.add(F[alpha], B.slices, nu * _diffusive_difference(u, grid, e, B, alpha, beta) / h)
    return tuple(F)


def convectiondiffusion(u, setup, out=None):
    """Convection and diffusion in a single pass over the faces."""
    check_vector_field(u, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    nu = setup.nu
    F = vector_output(out, setup)
    
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        for beta in range(grid.dimension):
            h = _face_width(grid, B, alpha, beta)
            uab1, uab2, uba1, uba2 = _convective_faces(u, grid, e, B, alpha, beta)
            diff = _diffusive_difference(u, grid, e, B, alpha, beta)
            F[alpha] = ctx.add(
                F[alpha], B.slices, (nu * diff - (uab2 * uba2 - uab1 * uba1)) / h
            )
    return tuple(F)


# =============================================================================
# Adjoints
# =============================================================================

def convection_adjoint(phi, u, setup):
    """
    Vector-Jacobian product of ``convection`` at the velocity ``u``.
    
    Each flux term ``-(uαβ2 uβα2 - uαβ1 uβα1)/h`` is differentiated with the
    product rule; the sensitivities of the four face velocities are scattered
    back to the eight velocity points they interpolate.
    """
    check_vector_field(phi, setup, "phi")
    check_vector_field(u, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    ubar = list(vector_zeros(setup))
    
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        ea = e(alpha)
        for beta in range(grid.dimension):
            eb = e(beta)
            h = _face_width(grid, B, alpha, beta)
            r1, l1, r2, l2 = _interpolation(grid, B, alpha, beta)
            uab1, uab2, uba1, uba2 = _convective_faces(u, grid, e, B, alpha, beta)
            g = phi[alpha][B.slices] / h
            
            # Advected component, face 2 then face 1
            gab2 = -g * uba2 / 2
            ubar[alpha] = ctx.add(ubar[alpha], B.slices, gab2)
            ubar[alpha] = ctx.add(ubar[alpha], B.shifted(eb), gab2)
            gab1 = g * uba1 / 2
            ubar[alpha] = ctx.add(ubar[alpha], B.shifted(-eb), gab1)
            ubar[alpha] = ctx.add(ubar[alpha], B.slices, gab1)
            
            # Transporting component
            gba2 = -g * uab2
            ubar[beta] = ctx.add(ubar[beta], B.slices, gba2 * r2)
            ubar[beta] = ctx.add(ubar[beta], B.shifted(ea), gba2 * l2)
            gba1 = g * uab1
            ubar[beta] = ctx.add(ubar[beta], B.shifted(-eb), gba1 * r1)
            ubar[beta] = ctx.add(ubar[beta], B.shifted(-eb, ea), gba1 * l1)
    return tuple(ubar)


def diffusion_adjoint(phi, setup):
    """Adjoint of the (linear) ``diffusion`` operator."""
    check_vector_field(phi, setup, "phi")
    grid, ctx, e = setup.grid, setup.context, setup.offset
    nu = setup.nu
    ubar = list(vector_zeros(setup))
    
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        for beta in range(grid.dimension):
            eb = e(beta)
            h = _face_width(grid, B, alpha, beta)
            wl, wr = _gradient_widths(grid, B, alpha, beta)
            c = nu * phi[alpha][B.slices] / h
            ubar[alpha] = ctx.add(ubar[alpha], B.shifted(eb), c / wr)
            ubar[alpha] = ctx.add(ubar[alpha], B.slices, -c / wr - c / wl)
            ubar[alpha] = ctx.add(ubar[alpha], B.shifted(-eb), c / wl)
    return tuple(ubar)


def convectiondiffusion_adjoint(phi, u, setup):
    """Adjoint of ``convectiondiffusion`` at the velocity ``u``."""
    ctx = setup.context
    ubar = list(diffusion_adjoint(phi, setup))
    for alpha, component in enumerate(convection_adjoint(phi, u, setup)):
        ubar[alpha] = ctx.add(ubar[alpha], ..., component)
    return tuple(ubar)
