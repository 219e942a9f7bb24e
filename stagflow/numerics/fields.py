"""
Field allocation and shape checks.

Scalar fields are arrays of the extended shape ``N``; vector fields are
D-tuples of such arrays; tensor fields have shape ``N + (D, D)``.
"""

from stagflow.errors import DimensionMismatchError


def check_scalar_field(f, setup, name: str = "field") -> None:
    """Raise DimensionMismatchError unless ``f`` has the extended grid shape."""
    shape = tuple(getattr(f, 'shape', ()))
    if shape != tuple(setup.grid.N):
        raise DimensionMismatchError(
            f"{name}: expected shape {tuple(setup.grid.N)}, got {shape}"
        )


def check_vector_field(u, setup, name: str = "u") -> None:
    """Raise DimensionMismatchError unless ``u`` has D components of shape N."""
    D = setup.grid.dimension
    try:
        n_components = len(u)
    except TypeError:
        raise DimensionMismatchError(f"{name}: expected a {D}-component vector field")
    if n_components != D:
        raise DimensionMismatchError(
            f"{name}: expected {D} components, got {n_components}"
        )
    for alpha in range(D):
        check_scalar_field(u[alpha], setup, f"{name}[{alpha}]")


def check_tensor_field(sigma, setup, name: str = "sigma") -> None:
    D = setup.grid.dimension
    expected = tuple(setup.grid.N) + (D, D)
    shape = tuple(getattr(sigma, 'shape', ()))
    if shape != expected:
        raise DimensionMismatchError(f"{name}: expected shape {expected}, got {shape}")


def scalar_zeros(setup):
    return setup.context.zeros(setup.grid.N)


def vector_zeros(setup) -> tuple:
    return tuple(setup.context.zeros(setup.grid.N) for _ in range(setup.grid.dimension))


def tensor_zeros(setup):
    D = setup.grid.dimension
    return setup.context.zeros(tuple(setup.grid.N) + (D, D))


def vector_output(out, setup) -> list:
    """Mutable list view of an output vector field (fresh zeros if None)."""
    if out is None:
        return list(vector_zeros(setup))
    check_vector_field(out, setup, "out")
    return list(out)


def scalar_output(out, setup):
    """Output scalar field (fresh zeros if None)."""
    if out is None:
        return scalar_zeros(setup)
    check_scalar_field(out, setup, "out")
    return out


def tensor_output(out, setup):
    """Output tensor field (fresh zeros if None)."""
    if out is None:
        return tensor_zeros(setup)
    check_tensor_field(out, setup, "out")
    return out
