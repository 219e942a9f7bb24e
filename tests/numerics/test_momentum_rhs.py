"""Tests for the momentum right-hand side and its adjoint."""

import numpy as np
import pytest

from conftest import BC_CASES_2D, BC_CASES_3D, inner, make_setup, random_scalar, random_vector
from stagflow.numerics import (
    bodyforce, convectiondiffusion, gravity, momentum, momentum_adjoint,
)
from stagflow import ConfigurationError, DimensionMismatchError
from stagflow.physics import temperature_equation


def _setup(D=2, **kwargs):
    if D == 2:
        return make_setup((6, 5), BC_CASES_2D['channel'], stretch=1.1, **kwargs)
    return make_setup((4, 3, 4), BC_CASES_3D['outflow'], stretch=1.1, **kwargs)


class TestMomentum:
    
    def test_is_sum_of_terms(self):
        force = lambda alpha, x, y, t: np.cos(x) * (alpha - 0.5) + t
        temperature = temperature_equation(0.71, 1.0e4, 0.0)
        setup = _setup(bodyforce=force, temperature=temperature)
        u = random_vector(setup, seed=1)
        T = random_scalar(setup, seed=2)
        
        F = momentum(u, T, 0.0, setup)
        expected = gravity(T, setup, out=bodyforce(u, 0.0, setup, out=convectiondiffusion(u, setup)))
        for a, b in zip(F, expected):
            np.testing.assert_allclose(a, b, rtol=1e-12)
    
    def test_output_is_zeroed_first(self):
        setup = _setup(D=3)
        u = random_vector(setup, seed=3)
        out = random_vector(setup, seed=4)
        F = momentum(u, None, 0.0, setup, out=out)
        for a, b in zip(F, convectiondiffusion(u, setup)):
            np.testing.assert_allclose(a, b, rtol=1e-12)
    
    def test_adjoint_identity_with_temperature(self):
        temperature = temperature_equation(0.71, 1.0e4, 0.0, gdir=1)
        setup = _setup(temperature=temperature, bodyforce=lambda alpha, x, y, t: 1.0 + 0 * x)
        u = random_vector(setup, seed=5)
        T = random_scalar(setup, seed=6)
        du = random_vector(setup, seed=7)
        dT = random_scalar(setup, seed=8)
        phi = random_vector(setup, seed=9)
        
        plus = momentum(tuple(a + b for a, b in zip(u, du)), T + dT, 0.0, setup)
        minus = momentum(tuple(a - b for a, b in zip(u, du)), T - dT, 0.0, setup)
        jvp = tuple((a - b) / 2 for a, b in zip(plus, minus))
        
        ubar, tbar = momentum_adjoint(phi, u, T, 0.0, setup)
        assert np.isclose(inner(jvp, phi), inner(du, ubar) + inner(dT, tbar), rtol=1e-10)
    
    def test_adjoint_without_temperature(self):
        setup = _setup(D=3)
        u = random_vector(setup, seed=10)
        phi = random_vector(setup, seed=11)
        ubar, tbar = momentum_adjoint(phi, u, None, 0.0, setup)
        assert tbar is None
        assert len(ubar) == 3
    
    def test_bad_temperature_leaves_output_untouched(self):
        setup = _setup(temperature=temperature_equation(0.71, 1.0e4, 0.0))
        u = random_vector(setup, seed=12)
        out = random_vector(setup, seed=13)
        before = tuple(o.copy() for o in out)
        with pytest.raises(DimensionMismatchError):
            momentum(u, np.zeros((3, 3)), 0.0, setup, out=out)
        for a, b in zip(out, before):
            np.testing.assert_array_equal(a, b)
    
    def test_temperature_without_equation_leaves_output_untouched(self):
        setup = _setup()
        u = random_vector(setup, seed=14)
        out = random_vector(setup, seed=15)
        before = tuple(o.copy() for o in out)
        with pytest.raises(ConfigurationError):
            momentum(u, random_scalar(setup, seed=16), 0.0, setup, out=out)
        for a, b in zip(out, before):
            np.testing.assert_array_equal(a, b)
