"""
Numba kernels for pointwise symmetric 3x3 eigenvalues.

Closed-form (trigonometric) eigenvalues after O. K. Smith, "Eigenvalues of a
symmetric 3x3 matrix", Comm. ACM 4(4), 1961.
"""

import numpy as np
import numpy.typing as npt
from numba import njit, prange

NDArrayFloat = npt.NDArray[np.floating]


@njit(cache=True)
def _sorted3(a: float, b: float, c: float):
    if a > b:
        a, b = b, a
    if b > c:
        b, c = c, b
    if a > b:
        a, b = b, a
    return a, b, c


@njit(cache=True)
def _symmetric_eigenvalues(a11, a22, a33, a12, a13, a23):
    """Ascending eigenvalues of a symmetric 3x3 matrix."""
    p1 = a12 * a12 + a13 * a13 + a23 * a23
    if p1 == 0.0:
        return _sorted3(a11, a22, a33)
    
    q = (a11 + a22 + a33) / 3.0
    p2 = (a11 - q) ** 2 + (a22 - q) ** 2 + (a33 - q) ** 2 + 2.0 * p1
    p = np.sqrt(p2 / 6.0)
    
    b11 = (a11 - q) / p
    b22 = (a22 - q) / p
    b33 = (a33 - q) / p
    b12 = a12 / p
    b13 = a13 / p
    b23 = a23 / p
    r = 0.5 * (b11 * (b22 * b33 - b23 * b23)
               - b12 * (b12 * b33 - b23 * b13)
               + b13 * (b12 * b23 - b22 * b13))
    
    if r <= -1.0:
        phi = np.pi / 3.0
    elif r >= 1.0:
        phi = 0.0
    else:
        phi = np.arccos(r) / 3.0
    
    largest = q + 2.0 * p * np.cos(phi)
    smallest = q + 2.0 * p * np.cos(phi + 2.0 * np.pi / 3.0)
    middle = 3.0 * q - largest - smallest
    return smallest, middle, largest


@njit(parallel=True, cache=True)
def _middle_eigenvalue_kernel(M, out):
    n = M.shape[0]
    for k in prange(n):
        a12 = 0.5 * (M[k, 0, 1] + M[k, 1, 0])
        a13 = 0.5 * (M[k, 0, 2] + M[k, 2, 0])
        a23 = 0.5 * (M[k, 1, 2] + M[k, 2, 1])
        lam = _symmetric_eigenvalues(M[k, 0, 0], M[k, 1, 1], M[k, 2, 2], a12, a13, a23)
        out[k] = lam[1]


def middle_eigenvalues(M: NDArrayFloat) -> NDArrayFloat:
    """
    Middle eigenvalue of each symmetric 3x3 matrix in ``M``.
    
    Parameters
    ----------
    M : ndarray, shape (..., 3, 3)
        Symmetric matrices (the symmetric part is used).
        
    Returns
    -------
    lam2 : ndarray, shape (...)
    """
    M = np.asarray(M)
    batch = M.shape[:-2]
    flat = np.ascontiguousarray(M.reshape(-1, 3, 3), dtype=np.float64)
    out = np.empty(flat.shape[0], dtype=np.float64)
    _middle_eigenvalue_kernel(flat, out)
    return out.reshape(batch).astype(M.dtype, copy=False)
