"""
Index model of the staggered grid.

Every stencil in this package addresses neighbours with unit offsets only:
``I``, ``I ± e(α)`` and combinations such as ``I + e(α) - e(β)``. Operators
are evaluated on rectangular boxes of multi-indices (``IndexSet``), so a
stencil term becomes a slice of the same shape shifted by the offset.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


class MultiIndex(tuple):
    """D-tuple of ints with elementwise ``+``, ``-`` and negation."""
    
    def __new__(cls, values):
        return super().__new__(cls, tuple(int(v) for v in values))
    
    def __add__(self, other):
        return MultiIndex(a + b for a, b in zip(self, other, strict=True))
    
    def __sub__(self, other):
        return MultiIndex(a - b for a, b in zip(self, other, strict=True))
    
    def __neg__(self):
        return MultiIndex(-a for a in self)


class Offset:
    """
    Cartesian unit offsets in ``D = 2`` or ``D = 3`` dimensions.
    
    Calling ``e(α)`` returns a multi-index with ``1`` along axis ``α`` and
    zeros elsewhere.
    
    Example
    -------
    >>> e = Offset(3)
    >>> e(1)
    (0, 1, 0)
    >>> e(0) - e(2)
    (1, 0, -1)
    """
    
    def __init__(self, dimension: int):
        self.dimension = dimension
        self._units = tuple(
            MultiIndex(1 if b == a else 0 for b in range(dimension))
            for a in range(dimension)
        )
    
    def __call__(self, axis: int) -> MultiIndex:
        return self._units[axis]
    

@dataclass(frozen=True)
class IndexSet:
    """
    Rectangular box of multi-indices ``start <= I < stop`` (per axis).
    
    Attributes
    ----------
    start : tuple of int
        First index along each axis.
    stop : tuple of int
        One past the last index along each axis.
    """
    start: Tuple[int, ...]
    stop: Tuple[int, ...]
    
    @property
    def dimension(self) -> int:
        return len(self.start)
    
    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(b - a for a, b in zip(self.start, self.stop))
    
    @property
    def size(self) -> int:
        return int(np.prod(self.shape))
    
    @property
    def slices(self) -> Tuple[slice, ...]:
        return tuple(slice(a, b) for a, b in zip(self.start, self.stop))
    
    def shifted(self, *offsets) -> Tuple[slice, ...]:
        """Slices of the box translated by the sum of ``offsets``."""
        shift = [0] * self.dimension
        for offset in offsets:
            for d, k in enumerate(offset):
                shift[d] += k
        return tuple(
            slice(a + k, b + k) for a, b, k in zip(self.start, self.stop, shift)
        )
    
    def metric(self, values, axis: int, k: int = 0):
        """
        1-D grid metric along ``axis`` over this box, shifted by ``k``.
        
        The result is reshaped to broadcast against fields sliced with
        ``shifted``: its length is the box extent along ``axis`` and all
        other dimensions are 1.
        """
        seg = values[self.start[axis] + k:self.stop[axis] + k]
        shape = [1] * self.dimension
        shape[axis] = -1
        return seg.reshape(shape)
    
    def line(self, axis: int, k: int = 0) -> np.ndarray:
        """Boolean mask (broadcastable) selecting position ``k`` along ``axis``."""
        shape = [1] * self.dimension
        shape[axis] = -1
        positions = np.arange(self.shape[axis]).reshape(shape)
        return positions == (k % self.shape[axis])
    
    def indices(self) -> np.ndarray:
        """All multi-indices in C order, shape (size, D)."""
        grids = np.meshgrid(
            *[np.arange(a, b) for a, b in zip(self.start, self.stop)],
            indexing='ij'
        )
        return np.stack([g.ravel() for g in grids], axis=-1)
    
    def ravel(self, indices: np.ndarray) -> np.ndarray:
        """Linear (C-order) position of multi-indices relative to this box."""
        indices = np.asarray(indices)
        local = tuple(indices[..., d] - self.start[d] for d in range(self.dimension))
        return np.ravel_multi_index(local, self.shape)
    
    def restrict(self, axis: int, lo: int, hi: int) -> "IndexSet":
        """Sub-box with ``start[axis] + lo <= I[axis] < start[axis] + hi``."""
        start = list(self.start)
        stop = list(self.stop)
        base = self.start[axis]
        start[axis] = base + lo
        stop[axis] = base + hi
        return IndexSet(tuple(start), tuple(stop))
