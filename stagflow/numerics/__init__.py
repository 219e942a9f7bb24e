"""Discrete operators on the staggered grid and their adjoints."""

from .backend import ExecutionContext, BACKENDS
from .dimension import Dim2, Dim3, dimension_strategy
from .fields import scalar_zeros, vector_zeros, tensor_zeros
from .pressure import (
    divergence,
    divergence_adjoint,
    pressuregradient,
    pressuregradient_adjoint,
    applypressure,
    applypressure_adjoint,
    laplacian,
)
from .assembly import TripletList, laplacian_matrix
from .fluxes import (
    convection,
    convection_adjoint,
    diffusion,
    diffusion_adjoint,
    convectiondiffusion,
    convectiondiffusion_adjoint,
)
from .forcing import bodyforce, bodyforce_adjoint, gravity, gravity_adjoint
from .temperature import convection_diffusion_temp, dissipation
from .momentum import momentum, momentum_adjoint
from .tensors import (
    velocity_gradient,
    strain_tensor,
    rotation_tensor,
    smagtensor,
    divoftensor,
    tensorbasis,
)
from .diagnostics import (
    vorticity,
    interpolate_u_p,
    interpolate_vorticity_p,
    qfield,
    dfield,
    eig2field,
    kinetic_energy,
    total_kinetic_energy,
)
from .adjoint import DifferentiableOperator, differentiable_operators, rrule, as_jax_function

__all__ = [
    'ExecutionContext', 'BACKENDS', 'Dim2', 'Dim3', 'dimension_strategy',
    'scalar_zeros', 'vector_zeros', 'tensor_zeros',
    'divergence', 'divergence_adjoint', 'pressuregradient', 'pressuregradient_adjoint',
    'applypressure', 'applypressure_adjoint', 'laplacian',
    'TripletList', 'laplacian_matrix',
    'convection', 'convection_adjoint', 'diffusion', 'diffusion_adjoint',
    'convectiondiffusion', 'convectiondiffusion_adjoint',
    'bodyforce', 'bodyforce_adjoint', 'gravity', 'gravity_adjoint',
    'convection_diffusion_temp', 'dissipation',
    'momentum', 'momentum_adjoint',
    'velocity_gradient', 'strain_tensor', 'rotation_tensor',
    'smagtensor', 'divoftensor', 'tensorbasis',
    'vorticity', 'interpolate_u_p', 'interpolate_vorticity_p',
    'qfield', 'dfield', 'eig2field', 'kinetic_energy', 'total_kinetic_energy',
    'DifferentiableOperator', 'differentiable_operators', 'rrule', 'as_jax_function',
]
