"""Body force and buoyancy terms of the momentum equations."""

from stagflow.errors import ConfigurationError
from .fields import check_scalar_field, check_vector_field, scalar_zeros, vector_zeros, vector_output


def evaluate_bodyforce(force, t, setup) -> tuple:
    """
    Sample a body force ``force(axis, *x, t)`` at the velocity points.
    
    Returns one field per component, zero outside ``Iu[α]``.
    """
    grid = setup.host_grid
    ctx = setup.context
    F = list(vector_zeros(setup))
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        value = force(alpha, *grid.velocity_coordinates(alpha, B), t)
        value = ctx.xp.broadcast_to(ctx.asarray(value), B.shape)
        F[alpha] = ctx.set(F[alpha], B.slices, value)
    return tuple(F)


def bodyforce(u, t, setup, out=None):
    """
    Add the body force to ``out``.
    
    Without a force this is a no-op. A steady force is sampled once when the
    setup is created; an unsteady one is sampled at time ``t`` on every call.
    """
    check_vector_field(u, setup)
    F = vector_output(out, setup)
    if setup.bodyforce is None:
        return tuple(F)
    
    grid, ctx = setup.grid, setup.context
    if setup.issteadybodyforce:
        field = setup.bodyforce_field
    else:
        field = evaluate_bodyforce(setup.bodyforce, t, setup)
    for alpha in range(grid.dimension):
        B = grid.Iu[alpha]
        F[alpha] = ctx.add(F[alpha], B.slices, field[alpha][B.slices])
    return tuple(F)


def bodyforce_adjoint(phi, setup):
    """The body force does not depend on ``u``: zero sensitivity."""
    check_vector_field(phi, setup, "phi")
    return vector_zeros(setup)


def require_temperature(setup):
    if setup.temperature is None:
        raise ConfigurationError("Setup has no temperature equation")
    return setup.temperature


def gravity(temp, setup, out=None):
    """
    Buoyancy ``α2 T`` acting on the velocity component along ``gdir``.
    
    The temperature is averaged from the two pressure points around each face.
    """
    check_scalar_field(temp, setup, "temp")
    params = require_temperature(setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    g = params.gdir
    B = grid.Iu[g]
    F = vector_output(out, setup)
    F[g] = ctx.add(F[g], B.slices, params.alpha2 * (temp[B.shifted(e(g))] + temp[B.slices]) / 2)
    return tuple(F)


def gravity_adjoint(phi, setup):
    """Adjoint of ``gravity`` with respect to the temperature."""
    check_vector_field(phi, setup, "phi")
    params = require_temperature(setup)
    grid, ctx, e = setup.grid, setup.context, setup.offset
    g = params.gdir
    B = grid.Iu[g]
    w = params.alpha2 * phi[g][B.slices] / 2
    tbar = scalar_zeros(setup)
    tbar = ctx.add(tbar, B.shifted(e(g)), w)
    tbar = ctx.add(tbar, B.slices, w)
    return tbar
