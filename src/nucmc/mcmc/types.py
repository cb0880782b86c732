"""
Warm-up Data Structures and Type Definitions.

This module contains the core data structures used by the warm-up backend:
- Homogeneous / Heterogeneous: the two density binding variants
- bind_densities: validate a binding against the chain layout
- WarmupParams: immutable run parameters
- WarmupResult: arrays returned by a warm-up run

A density binding is a specialization axis, not runtime data. Both variants
are frozen (hashable) dataclasses so they can be passed to jax.jit as static
arguments: each distinct binding traces and compiles its own kernel, with the
density for every dimension fixed at trace time.
"""

from dataclasses import dataclass
from typing import Callable, NamedTuple, Tuple

import jax.numpy as jnp

from ..error_handling import DensityBindingError


@dataclass(frozen=True)
class Homogeneous:
    """One density function shared by every dimension."""
    density: Callable

    def density_for(self, dim: int) -> Callable:
        return self.density

    def n_bound(self):
        """Homogeneous bindings fit any dimension count."""
        return None


@dataclass(frozen=True)
class Heterogeneous:
    """
    One density function per dimension.

    densities[n] is the density of dimension n. The tuple length must equal
    the dimension count of the chains it is applied to (see bind_densities).
    """
    densities: Tuple[Callable, ...]

    def __post_init__(self):
        # Lists are unhashable; normalise so the binding can be a static arg
        if not isinstance(self.densities, tuple):
            object.__setattr__(self, 'densities', tuple(self.densities))

    def density_for(self, dim: int) -> Callable:
        return self.densities[dim]

    def n_bound(self):
        return len(self.densities)


def bind_densities(binding, n_dimensions: int):
    """
    Validate a density binding against the number of dimensions.

    Called before any kernel is traced, so a mismatch surfaces as a
    configuration error and no lane ever executes.

    Args:
        binding: Homogeneous or Heterogeneous
        n_dimensions: Dimensions per chain

    Returns:
        The same binding, validated

    Raises:
        DensityBindingError: Wrong binding type, non-callable density, or a
            heterogeneous list whose length differs from n_dimensions
    """
    if not isinstance(binding, (Homogeneous, Heterogeneous)):
        raise DensityBindingError(
            f"Density binding must be Homogeneous or Heterogeneous, got {type(binding).__name__}"
        )
    if n_dimensions < 1:
        raise DensityBindingError(f"n_dimensions must be >= 1, got {n_dimensions}")

    if isinstance(binding, Homogeneous):
        if not callable(binding.density):
            raise DensityBindingError("Homogeneous density must be callable")
        return binding

    if binding.n_bound() != n_dimensions:
        raise DensityBindingError(
            f"Heterogeneous binding has {binding.n_bound()} densities "
            f"but chains have {n_dimensions} dimensions"
        )
    not_callable = [i for i, fn in enumerate(binding.densities) if not callable(fn)]
    if not_callable:
        raise DensityBindingError(f"Densities at dimensions {not_callable} are not callable")
    return binding


def evaluate_densities(binding, xs: jnp.ndarray) -> jnp.ndarray:
    """
    Evaluate the bound density of every dimension at xs (n_dimensions,).

    The loop runs at trace time, one density call per dimension.
    """
    return jnp.stack([
        jnp.asarray(binding.density_for(n)(xs[n]), dtype=xs.dtype)
        for n in range(xs.shape[0])
    ])


@dataclass(frozen=True)
class WarmupParams:
    """
    Immutable run parameters for a configured warm-up.

    Everything the host loop needs besides the arrays themselves.
    """
    NUM_LANES: int
    NUM_DIMENSIONS: int
    WARMUP_ITER: int
    STEP_SIZE: float
    CHUNK_SIZE: int
    BENCHMARK_ITER: int = 0


class WarmupResult(NamedTuple):
    """
    Output of a warm-up run.

    samples: flat sample array, dimension n / lane t at n * n_lanes + t
    streams: per-lane PRNG keys (n_lanes, 2), advanced past every draw made
    accept_counts: accepted moves per (dimension, lane), shape (n_dimensions, n_lanes)
    """
    samples: jnp.ndarray
    streams: jnp.ndarray
    accept_counts: jnp.ndarray
