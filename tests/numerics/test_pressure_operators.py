"""Tests for divergence, pressure gradient, pressure correction and Laplacian."""

import numpy as np
import pytest

from conftest import (
    BC_CASES_2D, fill_pressure_ghosts, inner, make_setup, random_scalar,
    random_vector, scalar_from_function, velocity_from_function,
)
from stagflow import DimensionMismatchError
from stagflow.numerics import (
    applypressure, applypressure_adjoint, divergence, divergence_adjoint,
    laplacian, pressuregradient, pressuregradient_adjoint,
)


class TestDivergence:
    
    def test_taylor_green_is_divergence_free(self):
        """Discrete Taylor-Green velocity has zero discrete divergence."""
        setup = make_setup((16, 16), bcs=BC_CASES_2D['periodic'])
        # Domain [0, 1]^2, one period per axis
        def tg(alpha, x, y):
            if alpha == 0:
                return -np.sin(2 * np.pi * x) * np.cos(2 * np.pi * y)
            return np.cos(2 * np.pi * x) * np.sin(2 * np.pi * y)
        u = velocity_from_function(setup, tg)
        div = divergence(u, setup)
        np.testing.assert_allclose(div, 0.0, atol=1e-12)
    
    def test_linear_field_stretched(self, any_setup):
        """Divergence of u = (x, 2y, 3z) is exact on stretched grids."""
        u = velocity_from_function(any_setup, lambda alpha, *x: (alpha + 1) * x[alpha])
        div = divergence(u, any_setup)
        D = any_setup.dimension
        P = any_setup.grid.Ip
        np.testing.assert_allclose(div[P.slices], D * (D + 1) / 2, rtol=1e-12)
    
    def test_ghosts_untouched(self, setup_2d):
        u = random_vector(setup_2d)
        out = np.full(setup_2d.grid.N, 7.0)
        div = divergence(u, setup_2d, out=out)
        assert div is out
        assert div[0, 0] == 7.0
        assert div[-1, -1] == 7.0
    
    def test_adjoint_identity(self, any_setup):
        u = random_vector(any_setup, seed=1)
        phi = random_scalar(any_setup, seed=2)
        lhs = inner(divergence(u, any_setup), phi)
        rhs = inner(u, divergence_adjoint(phi, any_setup))
        assert np.isclose(lhs, rhs, rtol=1e-12)
    
    def test_wrong_number_of_components(self, setup_2d):
        u = random_vector(setup_2d)
        with pytest.raises(DimensionMismatchError):
            divergence(u[:1], setup_2d)
    
    def test_wrong_rank(self, setup_2d):
        u = random_vector(setup_2d)
        with pytest.raises(DimensionMismatchError):
            divergence((u[0], u[1][..., None]), setup_2d)


class TestPressureGradient:
    
    def test_linear_pressure(self, any_setup):
        p = scalar_from_function(any_setup, lambda *x: sum((a + 1) * xa for a, xa in enumerate(x)))
        G = pressuregradient(p, any_setup)
        for alpha in range(any_setup.dimension):
            B = any_setup.grid.Iu[alpha]
            np.testing.assert_allclose(G[alpha][B.slices], alpha + 1, rtol=1e-12)
    
    def test_adjoint_identity(self, any_setup):
        p = random_scalar(any_setup, seed=3)
        phi = random_vector(any_setup, seed=4)
        lhs = inner(pressuregradient(p, any_setup), phi)
        rhs = inner(p, pressuregradient_adjoint(phi, any_setup))
        assert np.isclose(lhs, rhs, rtol=1e-12)
    
    def test_applypressure_matches_gradient(self, any_setup):
        u = random_vector(any_setup, seed=5)
        p = random_scalar(any_setup, seed=6)
        expected = tuple(a - b for a, b in zip(u, pressuregradient(p, any_setup)))
        corrected = applypressure(tuple(c.copy() for c in u), p, any_setup)
        for alpha in range(any_setup.dimension):
            B = any_setup.grid.Iu[alpha]
            np.testing.assert_allclose(corrected[alpha][B.slices], expected[alpha][B.slices])
    
    def test_applypressure_in_place(self, setup_2d):
        u = random_vector(setup_2d, seed=7)
        p = random_scalar(setup_2d, seed=8)
        result = applypressure(u, p, setup_2d)
        assert result[0] is u[0]
    
    def test_applypressure_adjoint_identity(self, any_setup):
        u = random_vector(any_setup, seed=9)
        p = random_scalar(any_setup, seed=10)
        phi = random_vector(any_setup, seed=11)
        lhs = inner(applypressure(tuple(c.copy() for c in u), p, any_setup), phi)
        ubar, pbar = applypressure_adjoint(phi, any_setup)
        assert np.isclose(lhs, inner(u, ubar) + inner(p, pbar), rtol=1e-12)


class TestLaplacian:
    
    def test_volume_weighted_composition_periodic(self):
        setup = make_setup((7, 6), bcs=BC_CASES_2D['periodic'], stretch=1.2)
        grid = setup.grid
        P = grid.Ip
        p = fill_pressure_ghosts(random_scalar(setup, seed=12), grid)
        
        G = pressuregradient(p, setup)
        # Fill the velocity ghosts periodically before taking the divergence
        G = tuple(np.array(g) for g in G)
        for alpha in range(2):
            g = np.moveaxis(G[alpha], alpha, 0)
            g[0] = g[-2]
        expected = grid.volume[P.slices] * divergence(G, setup)[P.slices]
        
        np.testing.assert_allclose(laplacian(p, setup)[P.slices], expected, rtol=1e-10, atol=1e-10)
    
    def test_unit_volumes_is_div_grad(self):
        """With unit volumes the Laplacian is exactly div(grad p)."""
        from stagflow import create_grid, create_setup
        x = np.arange(6.0)
        grid = create_grid((x, x), (("periodic",) * 2,) * 2)
        setup = create_setup(grid)
        p = fill_pressure_ghosts(random_scalar(setup, seed=13), grid)
        G = tuple(np.array(g) for g in pressuregradient(p, setup))
        for alpha in range(2):
            g = np.moveaxis(G[alpha], alpha, 0)
            g[0] = g[-2]
        P = grid.Ip
        np.testing.assert_allclose(
            laplacian(p, setup)[P.slices], divergence(G, setup)[P.slices], atol=1e-12
        )
    
    def test_quadratic_pressure_uniform(self):
        setup = make_setup((6, 6), bcs=BC_CASES_2D['cavity'])
        grid = setup.grid
        p = scalar_from_function(setup, lambda x, y: x ** 2 + 3 * y ** 2)
        L = laplacian(p, setup)
        # Interior lines away from the Neumann walls: Ω · ∇²p = Ω · 8
        inner_box = (slice(2, -2), slice(2, -2))
        np.testing.assert_allclose(L[inner_box], grid.volume[inner_box] * 8.0, rtol=1e-10)
    
    def test_pressure_boundary_uses_zero_ghost(self):
        setup = make_setup((5, 4), bcs=(("dirichlet", "pressure"), ("periodic", "periodic")))
        p = fill_pressure_ghosts(random_scalar(setup, seed=14), setup.grid)
        p2 = p.copy()
        p2[-1, :] = 123.0
        np.testing.assert_allclose(laplacian(p, setup), laplacian(p2, setup))
    
    def test_dirichlet_boundary_ignores_ghost(self):
        setup = make_setup((5, 4), bcs=BC_CASES_2D['cavity'])
        p = random_scalar(setup, seed=15)
        p2 = p.copy()
        p2[0, :] = -50.0
        p2[:, -1] = 50.0
        np.testing.assert_allclose(laplacian(p, setup), laplacian(p2, setup))
