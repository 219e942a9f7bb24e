"""Tests for body force, buoyancy, temperature transport and dissipation."""

import numpy as np
import pytest

from conftest import (
    BC_CASES_2D, BC_CASES_3D, inner, make_setup, random_scalar, random_vector,
    scalar_from_function, velocity_from_function,
)
from stagflow import ConfigurationError
from stagflow.numerics import (
    bodyforce, bodyforce_adjoint, convection_diffusion_temp, dissipation,
    divergence, gravity, gravity_adjoint, diffusion,
)
from stagflow.physics import temperature_equation


def _temperature_setup(n=(6, 5), bcs=None, gdir=1, **kwargs):
    bcs = bcs or BC_CASES_2D['channel']
    temperature = temperature_equation(0.71, 1.0e5, 0.1, gdir=gdir)
    return make_setup(n, bcs, stretch=1.1, temperature=temperature, **kwargs)


class TestBodyForce:
    
    def test_no_force_is_noop(self, setup_2d):
        u = random_vector(setup_2d)
        base = random_vector(setup_2d, seed=1)
        F = bodyforce(u, 0.0, setup_2d, out=tuple(b.copy() for b in base))
        for a, b in zip(F, base):
            np.testing.assert_array_equal(a, b)
    
    def test_steady_force_at_velocity_points(self):
        force = lambda alpha, x, y, t: (alpha + 1) * x + y
        setup = make_setup((5, 4), BC_CASES_2D['cavity'], stretch=1.2, bodyforce=force)
        u = random_vector(setup)
        F = bodyforce(u, 3.0, setup)
        grid = setup.grid
        for alpha in range(2):
            B = grid.Iu[alpha]
            x, y = grid.velocity_coordinates(alpha, B)
            np.testing.assert_allclose(F[alpha][B.slices], (alpha + 1) * x + y)
            # Nothing outside the velocity degrees of freedom
            mask = np.ones(grid.N, dtype=bool)
            mask[B.slices] = False
            assert np.all(F[alpha][mask] == 0.0)
    
    def test_unsteady_force_uses_time(self):
        force = lambda alpha, x, y, z, t: t * (alpha + 1)
        setup = make_setup((3, 4, 3), BC_CASES_3D['duct'], bodyforce=force, issteadybodyforce=False)
        u = random_vector(setup)
        F = bodyforce(u, 2.5, setup)
        for alpha in range(3):
            B = setup.grid.Iu[alpha]
            np.testing.assert_allclose(F[alpha][B.slices], 2.5 * (alpha + 1))
    
    def test_adjoint_is_zero(self, setup_2d):
        phi = random_vector(setup_2d)
        for f in bodyforce_adjoint(phi, setup_2d):
            assert np.all(f == 0.0)


class TestGravity:
    
    def test_constant_temperature(self):
        setup = _temperature_setup()
        T = np.ones(setup.grid.N)
        F = gravity(T, setup)
        B = setup.grid.Iu[1]
        np.testing.assert_allclose(F[1][B.slices], setup.temperature.alpha2)
        assert np.all(F[0] == 0.0)
    
    def test_direction(self):
        setup = _temperature_setup(n=(3, 4, 3), bcs=BC_CASES_3D['duct'], gdir=2)
        F = gravity(random_scalar(setup), setup)
        assert np.all(F[0] == 0.0) and np.all(F[1] == 0.0)
        assert np.any(F[2] != 0.0)
    
    def test_adjoint_identity(self):
        setup = _temperature_setup()
        T = random_scalar(setup, seed=2)
        phi = random_vector(setup, seed=3)
        assert np.isclose(inner(gravity(T, setup), phi), inner(T, gravity_adjoint(phi, setup)))
    
    def test_requires_temperature_equation(self, setup_2d):
        with pytest.raises(ConfigurationError):
            gravity(random_scalar(setup_2d), setup_2d)


class TestTemperatureTransport:
    
    def test_constant_temperature_is_minus_divergence(self):
        setup = _temperature_setup()
        u = random_vector(setup, seed=4)
        T = np.ones(setup.grid.N)
        P = setup.grid.Ip
        c = convection_diffusion_temp(u, T, setup)
        np.testing.assert_allclose(c[P.slices], -divergence(u, setup)[P.slices], rtol=1e-10, atol=1e-12)
    
    def test_pure_conduction_uniform(self):
        temperature = temperature_equation(1.0, 1.0, 0.0, nondim_type=3)
        setup = make_setup((6, 6), BC_CASES_2D['cavity'], temperature=temperature)
        u = tuple(np.zeros(setup.grid.N) for _ in range(2))
        T = scalar_from_function(setup, lambda x, y: x ** 2 - 2 * y ** 2)
        c = convection_diffusion_temp(u, T, setup)
        # alpha4 = 1 for the diffusion-velocity scaling: ∇²T = 2 - 4
        np.testing.assert_allclose(c[setup.grid.Ip.slices], -2.0, rtol=1e-8)
    
    def test_accumulates(self):
        setup = _temperature_setup()
        u = random_vector(setup, seed=5)
        T = random_scalar(setup, seed=6)
        out = np.full(setup.grid.N, 1.5)
        c = convection_diffusion_temp(u, T, setup, out=out.copy())
        P = setup.grid.Ip
        np.testing.assert_allclose(c[P.slices], 1.5 + convection_diffusion_temp(u, T, setup)[P.slices])


class TestDissipation:
    
    def test_uniform_flow_has_no_dissipation(self):
        setup = _temperature_setup(bcs=BC_CASES_2D['periodic'])
        u = velocity_from_function(setup, lambda alpha, x, y: 1.0 + 0 * x)
        np.testing.assert_allclose(dissipation(u, setup), 0.0, atol=1e-12)
    
    def test_matches_definition(self):
        setup = _temperature_setup()
        u = random_vector(setup, seed=7)
        D = diffusion(u, setup)
        params = setup.temperature
        P = setup.grid.Ip
        scale = setup.reynolds * params.alpha1 / params.gamma
        expected = scale * (
            (u[0][1:-1, 1:-1] * D[0][1:-1, 1:-1] + u[0][:-2, 1:-1] * D[0][:-2, 1:-1]) / 2
            + (u[1][1:-1, 1:-1] * D[1][1:-1, 1:-1] + u[1][1:-1, :-2] * D[1][1:-1, :-2]) / 2
        )
        np.testing.assert_allclose(dissipation(u, setup)[P.slices], expected, rtol=1e-10)
    
    def test_scratch_buffer_overwritten(self):
        setup = _temperature_setup()
        u = random_vector(setup, seed=8)
        scratch = random_vector(setup, seed=9)
        np.testing.assert_allclose(dissipation(u, setup, diff=scratch), dissipation(u, setup))
