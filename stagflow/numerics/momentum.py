"""Right-hand side of the momentum equations (without the pressure gradient)."""

from .fields import check_scalar_field, check_vector_field, vector_zeros
from .fluxes import convectiondiffusion, convectiondiffusion_adjoint
from .forcing import bodyforce, gravity, gravity_adjoint, require_temperature


def momentum(u, temp, t, setup, out=None):
    """
    Momentum right-hand side ``F = -∇·(uu) + ν∇²u + f + α2 T e_g``.
    
    Parameters
    ----------
    u : tuple of ndarray
        Velocity field with ghost values filled.
    temp : ndarray or None
        Temperature field; the buoyancy term is skipped when None.
    t : float
        Time, passed to an unsteady body force.
    setup : Setup
    out : tuple of ndarray, optional
        Output buffer; it is zeroed first.
        
    Returns
    -------
    F : tuple of ndarray
    """
    check_vector_field(u, setup)
    if temp is not None:
        check_scalar_field(temp, setup, "temp")
        require_temperature(setup)
    ctx = setup.context
    if out is None:
        F = vector_zeros(setup)
    else:
        check_vector_field(out, setup, "out")
        F = tuple(ctx.fill(f, 0.0) for f in out)
    
    F = convectiondiffusion(u, setup, out=F)
    F = bodyforce(u, t, setup, out=F)
    if temp is not None:
        F = gravity(temp, setup, out=F)
    return F


def momentum_adjoint(phi, u, temp, t, setup):
    """
    Vector-Jacobian product of ``momentum``.
    
    Returns
    -------
    ubar : tuple of ndarray
        Sensitivity with respect to ``u``.
    tbar : ndarray or None
        Sensitivity with respect to ``temp`` (None when ``temp`` is None).
    """
    # The body force does not depend on u or T
    ubar = convectiondiffusion_adjoint(phi, u, setup)
    tbar = gravity_adjoint(phi, setup) if temp is not None else None
    return ubar, tbar
