"""
Density Registration System

This module provides a registry of named marginal density functions. A
configuration refers to densities by name; the backend resolves the names
into a density binding with resolve_binding().

Example usage:
    from nucmc import register_density
    import jax.numpy as jnp

    def my_density(x):
        return jnp.exp(-0.5 * (x - 1.0) ** 2)

    register_density('shifted_normal', my_density)

    # Homogeneous: one density for every dimension
    resolve_binding('shifted_normal', n_dimensions=3)

    # Heterogeneous: one density per dimension
    resolve_binding(['shifted_normal', 'standard_normal', 'woods_saxon_au197'], n_dimensions=3)
"""

from .mcmc.types import Homogeneous, Heterogeneous, bind_densities

_REGISTRY = {}


def register_density(name, density_fn):
    """
    Register a density function under a name.

    Args:
        name: Unique density identifier string (e.g., 'woods_saxon_au197')
        density_fn: fn(x) -> scalar, unnormalised density at a scalar point.
            Must be traceable by JAX. The same object is reused for every
            lookup, so compiled kernels keyed on it are reused too.

    Raises:
        ValueError: If name is already registered or density_fn is not callable.
    """
    if name in _REGISTRY:
        raise ValueError(f"Density '{name}' is already registered")
    if not callable(density_fn):
        raise ValueError(f"Density '{name}' must be callable, got {type(density_fn).__name__}")
    _REGISTRY[name] = density_fn


def get_density(name):
    """
    Get a registered density function by name.

    Raises:
        KeyError: If the density is not registered
    """
    if name not in _REGISTRY:
        available = list(_REGISTRY.keys())
        raise KeyError(f"Unknown density '{name}'. Available: {available}")
    return _REGISTRY[name]


def list_densities():
    """List all registered density names."""
    return list(_REGISTRY.keys())


def clear_registry():
    """
    Clear all registered densities. Primarily for testing.
    """
    _REGISTRY.clear()


def resolve_binding(density_spec, n_dimensions):
    """
    Turn a density name, or list of names, into a validated binding.

    Args:
        density_spec: Registered name (homogeneous) or list of names, one per
            dimension (heterogeneous)
        n_dimensions: Number of dimensions per chain

    Returns:
        Homogeneous or Heterogeneous binding

    Raises:
        KeyError: If a name is not registered
        DensityBindingError: If a list does not have one entry per dimension
    """
    if isinstance(density_spec, str):
        binding = Homogeneous(get_density(density_spec))
    else:
        binding = Heterogeneous(tuple(get_density(name) for name in density_spec))
    return bind_densities(binding, n_dimensions)
