"""
Sparse matrix assembly of the pressure Laplacian.

Entries are collected per axis and per boundary case in a growable triplet
list and summed into CSR at the end (duplicate entries add up). Rows and
columns follow the C-order numbering of the interior pressure box ``Ip``.
"""

import numpy as np
import scipy.sparse as sp
from loguru import logger

from stagflow.errors import BoundaryConditionError
from stagflow.grid import BoundaryTag


class TripletList:
    """Growable (row, col, value) accumulator."""
    
    def __init__(self):
        self._rows = []
        self._cols = []
        self._vals = []
    
    def append(self, rows, cols, vals) -> None:
        rows = np.asarray(rows, dtype=np.int64).ravel()
        cols = np.asarray(cols, dtype=np.int64).ravel()
        vals = np.broadcast_to(np.asarray(vals, dtype=np.float64), rows.shape).ravel()
        self._rows.append(rows)
        self._cols.append(cols)
        self._vals.append(vals)
    
    def __len__(self) -> int:
        return sum(len(r) for r in self._rows)
    
    def tocsr(self, shape) -> sp.csr_matrix:
        if self._rows:
            rows = np.concatenate(self._rows)
            cols = np.concatenate(self._cols)
            vals = np.concatenate(self._vals)
        else:
            rows = cols = np.zeros(0, dtype=np.int64)
            vals = np.zeros(0)
        return sp.coo_matrix((vals, (rows, cols)), shape=shape).tocsr()


def _add_side(triplets, Ip, J, row, val, tag, alpha, side):
    """
    Couplings of the rows ``J`` to their neighbour on one side of axis ``alpha``.
    
    ``tag`` is None for an interior neighbour, otherwise the boundary tag of
    that side.
    """
    step = np.zeros(J.shape[1], dtype=np.int64)
    step[alpha] = side
    
    if tag is None:
        triplets.append(row, Ip.ravel(J + step), val)
        triplets.append(row, row, -val)
    elif tag is BoundaryTag.PRESSURE:
        # Zero ghost pressure: only the diagonal part remains
        triplets.append(row, row, -val)
    elif tag is BoundaryTag.PERIODIC:
        wrapped = J.copy()
        wrapped[:, alpha] = Ip.start[alpha] if side > 0 else Ip.stop[alpha] - 1
        triplets.append(row, Ip.ravel(wrapped), val)
        triplets.append(row, row, -val)
    elif tag is BoundaryTag.SYMMETRIC:
        # Ghost equals the nearest interior value: zero net flux
        triplets.append(row, row, val)
        triplets.append(row, row, -val)
    elif tag is BoundaryTag.DIRICHLET:
        # Prescribed normal velocity: zero pressure gradient, no entry
        pass
    else:
        raise BoundaryConditionError(f"Unsupported boundary tag {tag!r}")


def laplacian_matrix(setup) -> sp.csr_matrix:
    """
    Assemble the volume-weighted pressure Laplacian as a CSR matrix.
    
    The matrix is consistent with the stencil ``laplacian`` when the ghost
    values follow the boundary tags (periodic wrap, symmetric copy of the
    nearest interior value).
    
    Parameters
    ----------
    setup : Setup
    
    Returns
    -------
    L : scipy.sparse.csr_matrix
        Square matrix of size ``prod(Np)``.
        
    Raises
    ------
    BoundaryConditionError
        If an axis has fewer than two pressure points.
    """
    grid = setup.host_grid
    Ip = grid.Ip
    n = Ip.size
    
    triplets = TripletList()
    for alpha in range(grid.dimension):
        Na = grid.Np[alpha]
        if Na < 2:
            raise BoundaryConditionError(
                f"Axis {alpha}: need at least 2 pressure points for matrix assembly, got {Na}"
            )
        low, high = grid.boundary_conditions[alpha]
        
        groups = (
            (Ip.restrict(alpha, 0, 1), low, None),
            (Ip.restrict(alpha, 1, Na - 1), None, None),
            (Ip.restrict(alpha, Na - 1, Na), None, high),
        )
        for box, low_tag, high_tag in groups:
            if box.size == 0:
                continue
            J = box.indices()
            j = J[:, alpha]
            row = Ip.ravel(J)
            base = grid.volume[tuple(J.T)] / grid.delta[alpha][j]
            _add_side(triplets, Ip, J, row, base / grid.delta_u[alpha][j - 1], low_tag, alpha, -1)
            _add_side(triplets, Ip, J, row, base / grid.delta_u[alpha][j], high_tag, alpha, +1)
    
    L = triplets.tocsr((n, n))
    logger.info(f"Assembled pressure Laplacian: {n} x {n}, nnz={L.nnz}")
    return L
