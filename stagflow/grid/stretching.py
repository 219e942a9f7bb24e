"""1-D node distributions for Cartesian grids."""

import numpy as np


def stretched_grid(a: float, b: float, n: int, s: float = 1.0) -> np.ndarray:
    """
    Nodes of ``n`` volumes on ``[a, b]`` with geometric stretching.
    
    Consecutive widths grow by the factor ``s``; ``s = 1`` gives a uniform
    grid.
    
    Parameters
    ----------
    a, b : float
        Interval limits.
    n : int
        Number of volumes.
    s : float
        Stretch factor (must be positive).
        
    Returns
    -------
    x : ndarray, shape (n + 1,)
    """
    if s <= 0:
        raise ValueError(f"The stretch factor must be positive, got {s}")
    if np.isclose(s, 1.0):
        return np.linspace(a, b, n + 1)
    i = np.arange(n + 1)
    return a + (b - a) * (1 - s**i) / (1 - s**n)


def cosine_grid(a: float, b: float, n: int) -> np.ndarray:
    """Nodes of ``n`` volumes on ``[a, b]`` clustered towards both ends."""
    i = np.arange(n + 1)
    return (a + b) / 2 - (b - a) / 2 * np.cos(np.pi * i / n)
