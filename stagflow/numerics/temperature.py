"""
Temperature transport and viscous dissipation.

The temperature lives at the pressure points. Its equation (Boussinesq
approximation) reads

    ∂T/∂t = -∇·(u T) + α4 ∇²T + (α1/γ) Re Φ

with the dimensionless groups of ``stagflow.physics.temperature``.
"""

from .fields import check_scalar_field, check_vector_field, scalar_output, vector_zeros
from .fluxes import diffusion
from .forcing import require_temperature


def convection_diffusion_temp(u, temp, setup, out=None):
    """
    Convection-diffusion of the temperature on ``Ip``, accumulated into ``out``.
    
    Face temperatures are central averages of the two adjacent pressure
    points; the conductive flux uses the pressure-point spacing.
    """
    check_vector_field(u, setup)
    check_scalar_field(temp, setup, "temp")
    params = require_temperature(setup)
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    
    T = temp[P.slices]
    c = 0
    for beta in range(grid.dimension):
        Tl = temp[P.shifted(-e(beta))]
        Tr = temp[P.shifted(e(beta))]
        d1 = (T - Tl) / P.metric(grid.delta_u[beta], beta, -1)
        d2 = (Tr - T) / P.metric(grid.delta_u[beta], beta)
        uT1 = u[beta][P.shifted(-e(beta))] * (T + Tl) / 2
        uT2 = u[beta][P.slices] * (Tr + T) / 2
        c = c + (-(uT2 - uT1) + params.alpha4 * (d2 - d1)) / P.metric(grid.delta[beta], beta)
    
    return ctx.add(out, P.slices, c)


def dissipation(u, setup, out=None, diff=None):
    """
    Viscous dissipation ``Re α1/γ · u·(ν∇²u)`` at the pressure points.
    
    Parameters
    ----------
    u : tuple of ndarray
        Velocity field with ghost values filled.
    setup : Setup
    out : ndarray, optional
        Accumulator (zeros if omitted).
    diff : tuple of ndarray, optional
        Scratch buffer for the diffusive flux; it is overwritten.
    """
    check_vector_field(u, setup)
    params = require_temperature(setup)
    out = scalar_output(out, setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    P = grid.Ip
    
    if diff is None:
        diff = vector_zeros(setup)
    else:
        check_vector_field(diff, setup, "diff")
        diff = tuple(ctx.fill(d, 0.0) for d in diff)
    diff = diffusion(u, setup, out=diff)
    
    scale = setup.reynolds * params.alpha1 / params.gamma
    d = 0
    for beta in range(grid.dimension):
        eb = e(beta)
        d = d + scale * (u[beta][P.slices] * diff[beta][P.slices]
                         + u[beta][P.shifted(-eb)] * diff[beta][P.shifted(-eb)]) / 2
    
    return ctx.add(out, P.slices, d)
