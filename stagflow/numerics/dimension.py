"""
Dimension-specific operators.

Vorticity, its interpolation to pressure points, the tensor basis and the
lambda2 criterion differ between 2D and 3D. The strategy object is picked
once when the setup is created, so the operators never branch on D.
"""

from stagflow.errors import DimensionMismatchError
from stagflow.grid import IndexSet
from .fields import check_scalar_field, check_vector_field, scalar_output, vector_output


def _trace(xp, M):
    return xp.trace(M, axis1=-2, axis2=-1)


def _vorticity_box(grid) -> IndexSet:
    """Everything but the last index along each axis."""
    return IndexSet(tuple(0 for _ in grid.N), tuple(n - 1 for n in grid.N))


class Dim2:
    """Two-dimensional operators: scalar vorticity, 3-term tensor basis."""
    
    dimension = 2
    
    def vorticity(self, u, setup, out=None):
        out = scalar_output(out, setup)
        grid, ctx, e = setup.grid, setup.context, setup.offset
        box = _vorticity_box(grid)
        w = ((u[1][box.shifted(e(0))] - u[1][box.slices]) / box.metric(grid.delta_u[0], 0)
             - (u[0][box.shifted(e(1))] - u[0][box.slices]) / box.metric(grid.delta_u[1], 1))
        return ctx.set(out, box.slices, w)
    
    def interpolate_vorticity_p(self, w, setup, out=None):
        check_scalar_field(w, setup, "w")
        out = scalar_output(out, setup)
        grid, ctx, e = setup.grid, setup.context, setup.offset
        P = grid.Ip
        wp = (w[P.shifted(-e(0), -e(1))] + w[P.slices]) / 2
        return ctx.set(out, P.slices, wp)
    
    def tensor_basis(self, S, R, xp):
        I = xp.broadcast_to(xp.eye(2, dtype=S.dtype), S.shape)
        basis = [I, S, S @ R - R @ S]
        invariants = [_trace(xp, S @ S), _trace(xp, R @ R)]
        return basis, invariants
    
    def check_lambda2(self) -> None:
        raise DimensionMismatchError("lambda2 is only defined in 3D")


class Dim3:
    """Three-dimensional operators: vector vorticity, 11-term tensor basis."""
    
    dimension = 3
    
    # (component, next axis, previous axis)
    _CYCLIC = ((0, 1, 2), (1, 2, 0), (2, 0, 1))
    
    def vorticity(self, u, setup, out=None):
        w = vector_output(out, setup)
        grid, ctx, e = setup.grid, setup.context, setup.offset
        box = _vorticity_box(grid)
        for alpha, ap, am in self._CYCLIC:
            wa = ((u[am][box.shifted(e(ap))] - u[am][box.slices]) / box.metric(grid.delta_u[ap], ap)
                  - (u[ap][box.shifted(e(am))] - u[ap][box.slices]) / box.metric(grid.delta_u[am], am))
            w[alpha] = ctx.set(w[alpha], box.slices, wa)
        return tuple(w)
    
    def interpolate_vorticity_p(self, w, setup, out=None):
        check_vector_field(w, setup, "w")
        wp = vector_output(out, setup)
        grid, ctx, e = setup.grid, setup.context, setup.offset
        P = grid.Ip
        for alpha, ap, am in self._CYCLIC:
            value = (w[alpha][P.shifted(-e(ap), -e(am))] + w[alpha][P.slices]) / 2
            wp[alpha] = ctx.set(wp[alpha], P.slices, value)
        return tuple(wp)
    
    def tensor_basis(self, S, R, xp):
        """Silvis et al. (2017), eqs. (9) and (11)."""
        I = xp.broadcast_to(xp.eye(3, dtype=S.dtype), S.shape)
        S2 = S @ S
        R2 = R @ R
        basis = [
            I,
            S,
            S @ R - R @ S,
            S2,
            R2,
            S2 @ R - R @ S2,
            S @ R2 + R2 @ S,
            R @ S @ R2 - R2 @ S @ R,
            S @ R @ S2 - S2 @ R @ S,
            S2 @ R2 + R2 @ S2,
            R @ S2 @ R2 - R2 @ S2 @ R,
        ]
        invariants = [
            _trace(xp, S2),
            _trace(xp, R2),
            _trace(xp, S2 @ S),
            _trace(xp, S @ R2),
            _trace(xp, S2 @ R2),
        ]
        return basis, invariants
    
    def check_lambda2(self) -> None:
        return None


def dimension_strategy(dimension: int):
    """Operator strategy for a grid dimension."""
    strategies = {2: Dim2, 3: Dim3}
    if dimension not in strategies:
        raise DimensionMismatchError(f"Unsupported dimension {dimension}")
    return strategies[dimension]()
