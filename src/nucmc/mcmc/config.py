"""
Warm-up Configuration and Initialization.

This module handles setting up and validating warm-up runs:
- configure_warmup: Main configuration entry point
- initialize_chains: Constant starting point for every chain
- validate_warmup_inputs: Validate arrays before dispatch

Configuration is split into three parts:
- user_config: Serializable config that can be saved/loaded without JAX
- runtime_ctx: JAX-dependent objects (dtype, binding, stream keys)
- params: WarmupParams frozen dataclass for the host loop

All config keys use lowercase with underscores (e.g., 'num_lanes', 'step_size').
"""

import jax
import jax.numpy as jnp
from typing import Dict, Tuple, Any

from ..error_handling import validate_warmup_config
from ..hardware_info import suggest_num_lanes
from ..registry import resolve_binding
from .streams import seed_streams
from .types import WarmupParams, bind_densities
from .utils import clean_config

import logging
logger = logging.getLogger('nucmc')


def initialize_chains(initial_value: float, n_dimensions: int, n_lanes: int,
                      dtype=None) -> jnp.ndarray:
    """
    Set every chain's starting vector to the same constant.

    Args:
        initial_value: Value written to every (dimension, lane) slot
        n_dimensions: Dimensions per chain
        n_lanes: Number of lanes
        dtype: Float dtype (default: JAX default float)

    Returns:
        Flat sample array (n_dimensions * n_lanes,)
    """
    if n_dimensions < 1:
        raise ValueError(f"n_dimensions must be >= 1, got {n_dimensions}")
    if n_lanes < 1:
        raise ValueError(f"n_lanes must be >= 1, got {n_lanes}")
    return jnp.full((n_dimensions * n_lanes,), initial_value, dtype=dtype)


def validate_warmup_inputs(samples, streams, binding) -> Tuple[int, int]:
    """
    Validate warm-up arrays against each other and the binding.

    Runs before any kernel is traced.

    Returns:
        (n_dimensions, n_lanes)

    Raises:
        ValueError: If array shapes are inconsistent
        DensityBindingError: If the binding does not fit n_dimensions
    """
    errors = []

    if streams.ndim != 2 or streams.shape[1] != 2:
        errors.append(f"streams must have shape (n_lanes, 2), got {tuple(streams.shape)}")
    elif streams.dtype != jnp.uint32:
        errors.append(f"streams must be uint32 PRNG keys, got {streams.dtype}")

    if samples.ndim != 1:
        errors.append(f"samples must be a flat array, got shape {tuple(samples.shape)}")
    elif not jnp.issubdtype(samples.dtype, jnp.floating):
        errors.append(f"samples must be floating point, got {samples.dtype}")

    if errors:
        raise ValueError("Warm-up Input Validation Failed:\n  " + "\n  ".join(errors))

    n_lanes = streams.shape[0]
    if samples.shape[0] == 0 or samples.shape[0] % n_lanes != 0:
        raise ValueError(
            f"samples length {samples.shape[0]} is not a positive multiple of n_lanes {n_lanes}"
        )
    n_dimensions = samples.shape[0] // n_lanes

    bind_densities(binding, n_dimensions)
    return n_dimensions, n_lanes


def configure_warmup(
    warmup_config: Dict[str, Any]
) -> Tuple[Dict[str, Any], Dict[str, Any], WarmupParams]:
    """
    Configure a warm-up run from a config dict.

    Args:
        warmup_config: Input configuration dict with keys like 'num_lanes',
            'density', 'step_size', 'warmup_iter', 'rng_seed'

    Returns:
        user_config: Clean config dict with user values + derived ints
        runtime_ctx: Dict with dtype, density binding and seeded streams
        params: WarmupParams for the host loop
    """
    warmup_config = clean_config(dict(warmup_config))

    if warmup_config['num_lanes'] is None:
        warmup_config['num_lanes'] = suggest_num_lanes()
        logger.info(f"Sized lane grid from devices: {warmup_config['num_lanes']} lanes")

    validate_warmup_config(warmup_config)

    num_lanes = int(warmup_config['num_lanes'])
    num_dimensions = int(warmup_config['num_dimensions'])
    use_double = bool(warmup_config['use_double'])

    user_config = {
        'rng_seed': int(warmup_config['rng_seed']),
        'use_double': use_double,
        'num_lanes': num_lanes,
        'num_dimensions': num_dimensions,
        'initial_value': float(warmup_config['initial_value']),
        'step_size': float(warmup_config['step_size']),
        'warmup_iter': int(warmup_config['warmup_iter']),
        'chunk_size': int(warmup_config['chunk_size']),
        'benchmark': int(warmup_config['benchmark']),
        'density': warmup_config['density'],
        # Derived values
        'num_samples': num_lanes * num_dimensions,
        'num_chunks': -(-int(warmup_config['warmup_iter']) // int(warmup_config['chunk_size'])),
    }

    # Configure JAX precision
    if use_double:
        jax.config.update("jax_enable_x64", True)
        jnp_float_dtype = jnp.float64
    else:
        jax.config.update("jax_enable_x64", False)
        jnp_float_dtype = jnp.float32

    # Resolve before any device work so a bad binding never reaches a lane
    binding = resolve_binding(warmup_config['density'], num_dimensions)

    runtime_ctx = {
        'jnp_float_dtype': jnp_float_dtype,
        'binding': binding,
        'streams': seed_streams(user_config['rng_seed'], num_lanes),
    }

    params = WarmupParams(
        NUM_LANES=num_lanes,
        NUM_DIMENSIONS=num_dimensions,
        WARMUP_ITER=user_config['warmup_iter'],
        STEP_SIZE=user_config['step_size'],
        CHUNK_SIZE=user_config['chunk_size'],
        BENCHMARK_ITER=user_config['benchmark'],
    )

    return user_config, runtime_ctx, params
