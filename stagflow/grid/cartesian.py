"""
Staggered Cartesian grid.

This is the grid collaborator consumed by every operator: extended sizes,
interior index sets, 1-D metrics and interpolation weights.

Layout
------
The domain is divided into ``N = n + 2`` volumes per axis, ``n`` interior
volumes plus one ghost volume on each side. All fields have the extended
shape ``N``, so that ``p[I]``, ``u[0][I]``, ``u[1][I]`` ... always refer to
volume ``I``:

* pressure ``p[I]`` lives at the centre of volume ``I``,
* velocity ``u[α][I]`` lives on the face to the *right* of volume ``I``
  along axis ``α``.

Some positions of the extended arrays are boundary values (filled by a
boundary-application step outside the operators) and some are never used.

Metrics (0-based, per axis ``α``)
---------------------------------
* ``x[α]``       : node coordinates including ghost nodes, length ``N[α] + 1``
* ``xp[α]``      : pressure-point (volume centre) coordinates, length ``N[α]``
* ``delta[α]``   : volume widths ``x[i+1] - x[i]``, length ``N[α]``
* ``delta_u[α]`` : pressure-point spacing ``xp[i+1] - xp[i]``, length ``N[α]``
  (last entry is half the last width)
* ``volume``     : ``Π_α delta[α]``, shape ``N``
* ``A[β][α]``    : weights interpolating component ``β`` along axis ``α``
"""

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple

import numpy as np
from loguru import logger

from stagflow.constants import NGHOST, SUPPORTED_DIMENSIONS
from stagflow.errors import BoundaryConditionError, DimensionMismatchError
from .boundary import BoundaryTag, BoundaryPair, parse_boundary_conditions
from .index import IndexSet


class Weights(NamedTuple):
    """
    Linear interpolation weights along one axis.
    
    Interpolating a field ``f`` sampled at points ``i`` to the location
    between ``i`` and ``i + 1`` gives ``right[i] * f[i] + left[i + 1] * f[i + 1]``,
    with ``right[i] + left[i + 1] == 1``.
    """
    left: np.ndarray
    right: np.ndarray


@dataclass(frozen=True)
class Grid:
    """
    Staggered Cartesian grid with one ghost layer per side.
    
    Attributes
    ----------
    dimension : int
        Spatial dimension D (2 or 3).
    boundary_conditions : tuple of (BoundaryTag, BoundaryTag)
        Low/high tags for each axis.
    x : tuple of ndarray
        Node coordinates with ghost nodes, length N[α] + 1.
    xp : tuple of ndarray
        Pressure-point coordinates, length N[α].
    N : tuple of int
        Extended number of volumes per axis.
    Np : tuple of int
        Number of pressure degrees of freedom per axis.
    Nu : tuple of tuple of int
        Number of velocity degrees of freedom per axis, per component.
    Ip : IndexSet
        Interior pressure indices.
    Iu : tuple of IndexSet
        Interior velocity indices, per component.
    delta, delta_u : tuple of ndarray
        Volume widths and pressure-point spacings.
    volume : ndarray
        Volume sizes, shape N.
    A : tuple of tuple of Weights
        ``A[β][α]`` interpolates component ``β`` along axis ``α``.
    """
    dimension: int
    boundary_conditions: Tuple[BoundaryPair, ...]
    x: Tuple[np.ndarray, ...]
    xp: Tuple[np.ndarray, ...]
    N: Tuple[int, ...]
    Np: Tuple[int, ...]
    Nu: Tuple[Tuple[int, ...], ...]
    Ip: IndexSet
    Iu: Tuple[IndexSet, ...]
    delta: Tuple[np.ndarray, ...]
    delta_u: Tuple[np.ndarray, ...]
    volume: np.ndarray
    A: Tuple[Tuple[Weights, ...], ...]
    
    @property
    def xlims(self) -> Tuple[Tuple[float, float], ...]:
        """Physical domain limits (without ghost volumes)."""
        return tuple(
            (float(xa[NGHOST]), float(xa[-1 - NGHOST])) for xa in self.x
        )
    
    def velocity_coordinates(self, alpha: int, box: IndexSet) -> tuple:
        """
        Coordinates of the ``alpha``-velocity points in ``box``.
        
        Along axis ``alpha`` the points sit on the right face of each volume,
        along the other axes at the volume centre. Each returned array is
        1-D data reshaped to broadcast over the box.
        """
        coords = []
        for beta in range(self.dimension):
            if beta == alpha:
                coords.append(box.metric(self.x[beta], beta, 1))
            else:
                coords.append(box.metric(self.xp[beta], beta))
        return tuple(coords)
    
    def pressure_coordinates(self, box: IndexSet) -> tuple:
        """Broadcastable pressure-point coordinates of ``box``."""
        return tuple(box.metric(self.xp[beta], beta) for beta in range(self.dimension))


def _add_ghost_nodes(xa: np.ndarray, pair: BoundaryPair) -> np.ndarray:
    """Extend a 1-D node array by one ghost volume on each side."""
    low, high = pair
    if low is BoundaryTag.PERIODIC:
        # Ghost widths copy the opposite end of the domain
        left = xa[0] - (xa[-1] - xa[-2])
        right = xa[-1] + (xa[1] - xa[0])
    else:
        # Mirror the adjacent width
        left = xa[0] - (xa[1] - xa[0])
        right = xa[-1] + (xa[-1] - xa[-2])
    return np.concatenate(([left], xa, [right]))


def _interpolation_weights(alpha: int, beta: int, xe: np.ndarray, xp: np.ndarray,
                           delta_u: np.ndarray) -> Weights:
    """Weights for interpolating component ``beta`` along axis ``alpha``."""
    n = len(xp)
    if alpha == beta:
        # Face values to the volume centre: exact midpoint
        half = np.full(n, 0.5)
        return Weights(left=half, right=half.copy())
    
    # Pressure-point samples to the face between them
    xf = xe[1:]
    right = np.full(n, 0.5)
    right[:-1] = (xp[1:] - xf[:-1]) / delta_u[:-1]
    left = np.full(n, 0.5)
    left[1:] = 1.0 - right[:-1]
    return Weights(left=left, right=right)


def create_grid(x: Sequence[np.ndarray], boundary_conditions: Sequence) -> Grid:
    """
    Create a staggered Cartesian grid.
    
    Parameters
    ----------
    x : sequence of 1-D arrays
        Node coordinates along each axis (``n[α] + 1`` strictly increasing
        values, without ghost nodes).
    boundary_conditions : sequence of (low, high)
        Boundary tags (BoundaryTag or string) for each axis.
        
    Returns
    -------
    Grid
    
    Raises
    ------
    DimensionMismatchError
        If the dimension is not 2 or 3.
    BoundaryConditionError
        If the boundary tags are invalid.
    ValueError
        If a node array is too short or not strictly increasing.
        
    Example
    -------
    >>> x = np.linspace(0.0, 1.0, 11)
    >>> grid = create_grid((x, x), (("periodic", "periodic"),) * 2)
    >>> grid.N, grid.Np
    ((12, 12), (10, 10))
    """
    D = len(x)
    if D not in SUPPORTED_DIMENSIONS:
        raise DimensionMismatchError(f"Grid dimension must be 2 or 3, got {D}")
    bcs = parse_boundary_conditions(boundary_conditions, D)
    
    nodes = []
    for alpha in range(D):
        xa = np.asarray(x[alpha], dtype=np.float64)
        if xa.ndim != 1 or len(xa) < 3:
            raise ValueError(f"Axis {alpha}: need at least 2 volumes (3 nodes), got {xa.shape}")
        if np.any(np.diff(xa) <= 0):
            raise ValueError(f"Axis {alpha}: node coordinates must be strictly increasing")
        nodes.append(_add_ghost_nodes(xa, bcs[alpha]))
    
    N = tuple(len(xe) - 1 for xe in nodes)
    delta = tuple(np.diff(xe) for xe in nodes)
    xp = tuple((xe[:-1] + xe[1:]) / 2 for xe in nodes)
    delta_u = []
    for alpha in range(D):
        du = np.empty(N[alpha])
        du[:-1] = np.diff(xp[alpha])
        du[-1] = delta[alpha][-1] / 2
        delta_u.append(du)
    delta_u = tuple(delta_u)
    
    volume = np.ones(N)
    for alpha in range(D):
        shape = [1] * D
        shape[alpha] = -1
        volume = volume * delta[alpha].reshape(shape)
    
    # Pressure: every interior volume is a degree of freedom
    Ip = IndexSet(tuple(NGHOST for _ in range(D)), tuple(n - NGHOST for n in N))
    
    # Velocity: the last normal face is a boundary value for prescribed
    # normal velocity (Dirichlet, symmetric)
    Iu = []
    for alpha in range(D):
        stop = list(Ip.stop)
        if bcs[alpha][1] in (BoundaryTag.DIRICHLET, BoundaryTag.SYMMETRIC):
            stop[alpha] -= 1
        Iu.append(IndexSet(Ip.start, tuple(stop)))
    Iu = tuple(Iu)
    
    A = tuple(
        tuple(
            _interpolation_weights(alpha, beta, nodes[alpha], xp[alpha], delta_u[alpha])
            for alpha in range(D)
        )
        for beta in range(D)
    )
    
    grid = Grid(
        dimension=D,
        boundary_conditions=bcs,
        x=tuple(nodes),
        xp=xp,
        N=N,
        Np=Ip.shape,
        Nu=tuple(I.shape for I in Iu),
        Ip=Ip,
        Iu=Iu,
        delta=delta,
        delta_u=delta_u,
        volume=volume,
        A=A,
    )
    
    logger.debug(
        f"Created {D}D grid: N={N}, Np={grid.Np}, "
        f"bc={[(a.value, b.value) for a, b in bcs]}"
    )
    return grid
