"""
Shared pytest helpers and fixtures for the operator tests.

Grids are small so every test runs in well under a second; fields are
random everywhere (ghosts included) unless a test fills them analytically.
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from stagflow import ExecutionContext, IndexSet, create_grid, create_setup, stretched_grid
from stagflow.grid import BoundaryTag


# =============================================================================
# Boundary configurations
# =============================================================================

PERIODIC = ("periodic", "periodic")
DIRICHLET = ("dirichlet", "dirichlet")
SYMMETRIC = ("symmetric", "symmetric")

BC_CASES_2D = {
    'periodic': (PERIODIC, PERIODIC),
    'cavity': (DIRICHLET, DIRICHLET),
    'channel': (PERIODIC, DIRICHLET),
    'outflow': (("dirichlet", "pressure"), SYMMETRIC),
    'inflow': (("pressure", "dirichlet"), ("symmetric", "dirichlet")),
}

BC_CASES_3D = {
    'periodic': (PERIODIC, PERIODIC, PERIODIC),
    'duct': (PERIODIC, DIRICHLET, SYMMETRIC),
    'outflow': (("dirichlet", "pressure"), DIRICHLET, PERIODIC),
}


# =============================================================================
# Grid and setup construction
# =============================================================================

def make_nodes(n, stretch=1.0, a=0.0, b=1.0):
    """Node coordinates of one axis (``stretch != 1`` gives a stretched axis)."""
    return stretched_grid(a, b, n, stretch)


def make_setup(n=(6, 5), bcs=None, stretch=1.0, backend="numpy", **kwargs):
    """Setup on ``[0, 1]^D`` with ``n`` volumes per axis."""
    if bcs is None:
        bcs = tuple(PERIODIC for _ in n)
    x = tuple(make_nodes(na, stretch ** (alpha + 1)) for alpha, na in enumerate(n))
    grid = create_grid(x, bcs)
    kwargs.setdefault('reynolds', 50.0)
    return create_setup(grid, context=ExecutionContext(backend=backend), **kwargs)


def full_box(setup) -> IndexSet:
    """The whole extended index range, ghosts included."""
    return IndexSet(tuple(0 for _ in setup.grid.N), tuple(setup.grid.N))


# =============================================================================
# Fields
# =============================================================================

def random_scalar(setup, seed=0):
    rng = np.random.default_rng(seed)
    return rng.standard_normal(setup.grid.N)


def random_vector(setup, seed=0):
    rng = np.random.default_rng(seed)
    return tuple(rng.standard_normal(setup.grid.N) for _ in range(setup.dimension))


def velocity_from_function(setup, f):
    """Sample ``f(alpha, *x)`` at every velocity point, ghosts included."""
    grid = setup.host_grid
    box = full_box(setup)
    return tuple(
        np.broadcast_to(f(alpha, *grid.velocity_coordinates(alpha, box)), grid.N).astype(float)
        for alpha in range(grid.dimension)
    )


def scalar_from_function(setup, f):
    """Sample ``f(*x)`` at every pressure point, ghosts included."""
    grid = setup.host_grid
    box = full_box(setup)
    return np.broadcast_to(f(*grid.pressure_coordinates(box)), grid.N).astype(float)


def fill_pressure_ghosts(p, grid):
    """Fill pressure ghosts consistently with the boundary tags."""
    p = np.array(p, copy=True)
    for alpha, (low, high) in enumerate(grid.boundary_conditions):
        moved = np.moveaxis(p, alpha, 0)
        n = moved.shape[0]
        if low is BoundaryTag.PERIODIC:
            moved[0] = moved[n - 2]
            moved[n - 1] = moved[1]
        else:
            if low is BoundaryTag.SYMMETRIC:
                moved[0] = moved[1]
            if high is BoundaryTag.SYMMETRIC:
                moved[n - 1] = moved[n - 2]
    return p


def fill_tensor_ghosts_periodic(sigma):
    """Periodic ghost filling of a tensor field (works for NumPy and JAX)."""
    D = sigma.shape[-1]
    for alpha in range(D):
        n = sigma.shape[alpha]
        index_lo = [slice(None)] * sigma.ndim
        index_hi = [slice(None)] * sigma.ndim
        index_lo[alpha] = slice(0, 1)
        index_hi[alpha] = slice(n - 1, n)
        src_lo = list(index_lo)
        src_hi = list(index_hi)
        src_lo[alpha] = slice(n - 2, n - 1)
        src_hi[alpha] = slice(1, 2)
        if isinstance(sigma, np.ndarray):
            sigma[tuple(index_lo)] = sigma[tuple(src_lo)]
            sigma[tuple(index_hi)] = sigma[tuple(src_hi)]
        else:
            sigma = sigma.at[tuple(index_lo)].set(sigma[tuple(src_lo)])
            sigma = sigma.at[tuple(index_hi)].set(sigma[tuple(src_hi)])
    return sigma


def inner(a, b) -> float:
    """Euclidean inner product of two scalar or vector fields."""
    if isinstance(a, (tuple, list)):
        return sum(inner(x, y) for x, y in zip(a, b))
    return float(np.sum(np.asarray(a) * np.asarray(b)))


def interior(f, box):
    return np.asarray(f)[box.slices]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(params=sorted(BC_CASES_2D))
def setup_2d(request):
    """Stretched 2D setups, one per boundary configuration."""
    return make_setup((6, 5), BC_CASES_2D[request.param], stretch=1.15)


@pytest.fixture(params=sorted(BC_CASES_3D))
def setup_3d(request):
    """Stretched 3D setups, one per boundary configuration."""
    return make_setup((4, 5, 3), BC_CASES_3D[request.param], stretch=1.1)


ALL_CASES = [(2, name) for name in sorted(BC_CASES_2D)] + [(3, name) for name in sorted(BC_CASES_3D)]


@pytest.fixture(params=ALL_CASES, ids=[f"{D}d-{name}" for D, name in ALL_CASES])
def any_setup(request):
    """Stretched 2D and 3D setups over all boundary configurations."""
    D, name = request.param
    if D == 2:
        return make_setup((6, 5), BC_CASES_2D[name], stretch=1.15)
    return make_setup((4, 5, 3), BC_CASES_3D[name], stretch=1.1)
