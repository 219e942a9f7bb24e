"""Tests for the sparse Laplacian assembly."""

from dataclasses import replace
from types import SimpleNamespace

import numpy as np
import pytest
import scipy.sparse as sp

from conftest import BC_CASES_2D, BC_CASES_3D, fill_pressure_ghosts, make_setup, random_scalar
from stagflow import BoundaryConditionError, IndexSet, create_grid
from stagflow.numerics import TripletList, laplacian, laplacian_matrix


class TestTripletList:
    
    def test_duplicates_are_summed(self):
        triplets = TripletList()
        triplets.append([0, 1], [0, 1], [1.0, 2.0])
        triplets.append([0], [0], 3.0)
        assert len(triplets) == 3
        A = triplets.tocsr((2, 2))
        assert isinstance(A, sp.csr_matrix)
        np.testing.assert_allclose(A.toarray(), [[4.0, 0.0], [0.0, 2.0]])
    
    def test_empty(self):
        A = TripletList().tocsr((3, 3))
        assert A.nnz == 0


class TestLaplacianMatrix:
    
    @pytest.mark.parametrize("case", sorted(BC_CASES_2D))
    def test_matches_stencil_2d(self, case):
        setup = make_setup((6, 5), BC_CASES_2D[case], stretch=1.15)
        self._check_matches_stencil(setup)
    
    @pytest.mark.parametrize("case", sorted(BC_CASES_3D))
    def test_matches_stencil_3d(self, case):
        setup = make_setup((4, 5, 3), BC_CASES_3D[case], stretch=1.1)
        self._check_matches_stencil(setup)
    
    def _check_matches_stencil(self, setup):
        grid = setup.grid
        P = grid.Ip
        p = fill_pressure_ghosts(random_scalar(setup, seed=21), grid)
        L = laplacian_matrix(setup)
        assert L.shape == (P.size, P.size)
        stencil = laplacian(p, setup)[P.slices].ravel()
        np.testing.assert_allclose(L @ p[P.slices].ravel(), stencil, rtol=1e-10, atol=1e-10)
    
    @pytest.mark.parametrize("case", ["periodic", "cavity", "channel", "outflow"])
    def test_symmetric(self, case):
        setup = make_setup((6, 5), BC_CASES_2D[case], stretch=1.2)
        L = laplacian_matrix(setup).toarray()
        np.testing.assert_allclose(L, L.T, atol=1e-12)
    
    @pytest.mark.parametrize("case", ["periodic", "cavity", "channel"])
    def test_constant_null_space(self, case):
        """Without pressure boundaries constants are in the null space."""
        setup = make_setup((6, 5), BC_CASES_2D[case], stretch=1.2)
        L = laplacian_matrix(setup)
        np.testing.assert_allclose(L @ np.ones(L.shape[0]), 0.0, atol=1e-10)
    
    def test_pressure_boundary_is_definite(self):
        setup = make_setup((6, 5), BC_CASES_2D['outflow'], stretch=1.2)
        L = laplacian_matrix(setup).toarray()
        eigenvalues = np.linalg.eigvalsh(L)
        assert np.all(eigenvalues < 0)
    
    def test_periodic_wraps(self):
        setup = make_setup((4, 3), BC_CASES_2D['periodic'])
        L = laplacian_matrix(setup)
        Ip = setup.grid.Ip
        first = Ip.ravel(np.array([1, 1]))
        last = Ip.ravel(np.array([4, 1]))
        assert L[first, last] > 0
        assert L[last, first] > 0
    
    def test_axis_too_short(self):
        grid = create_grid((np.linspace(0.0, 1.0, 5), np.linspace(0.0, 1.0, 4)), (("periodic",) * 2,) * 2)
        # A grid with a single pressure point along y
        short = SimpleNamespace(host_grid=replace(grid, Ip=IndexSet((1, 1), (5, 2)), Np=(4, 1)))
        with pytest.raises(BoundaryConditionError):
            laplacian_matrix(short)
