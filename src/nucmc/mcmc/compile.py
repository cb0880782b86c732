"""
Warm-up Kernel Compilation and Caching.

This module handles JAX compilation of the warm-up kernel:
- _compute_cache_key: In-memory cache key for compiled kernels
- compile_warmup_kernel: AOT compile (or fetch) the kernel for a binding
- benchmark_warmup: Time iterations of a compiled kernel
- _COMPILED_KERNEL_CACHE: In-memory cache for compiled kernels

The density binding is a static argument: each binding gets its own trace
with the per-dimension densities inlined. The iteration count is traced, so
one compiled kernel serves every chunk length.
"""

import jax
import jax.numpy as jnp
import time
from typing import Any, Callable, Dict, Tuple

from .warmup import warmup_kernel
from ..error_handling import accelerator_guard

import logging
logger = logging.getLogger('nucmc')


# --- CONSTANTS ---
DEFAULT_CHUNK_SIZE = 1000

# --- COMPILED FUNCTION CACHE ---
# Compiled kernels by (binding, grid shape, dtype), in-memory within session
_COMPILED_KERNEL_CACHE = {}

_warmup_kernel_jit = jax.jit(warmup_kernel, static_argnames=('binding',))


def _compute_cache_key(binding, n_dimensions: int, n_lanes: int, dtype) -> Tuple:
    """
    Compute a cache key for the compiled warm-up kernel.

    The key captures everything that affects the compiled function:
    - Density binding (function identities, static)
    - Array shapes (dimensions x lanes)
    - Float dtype
    """
    return (binding, n_dimensions, n_lanes, jnp.dtype(dtype).name)


def get_compiled_kernel_cache() -> Dict:
    """Get reference to the compiled kernel cache."""
    return _COMPILED_KERNEL_CACHE


def compile_warmup_kernel(binding, n_dimensions: int, n_lanes: int,
                          dtype=jnp.float32) -> Tuple[Callable, float]:
    """
    Compile the warm-up kernel for one binding and grid, using cache if available.

    Args:
        binding: Validated Homogeneous or Heterogeneous binding
        n_dimensions: Dimensions per chain
        n_lanes: Number of lanes
        dtype: Float dtype of the sample array

    Returns:
        Tuple of (kernel, compile_time). kernel(samples, streams, step_size,
        iterations) -> (samples, streams, accept_counts), with step_size and
        iterations converted to the compiled dtypes.
    """
    cache_key = _compute_cache_key(binding, n_dimensions, n_lanes, dtype)
    cached = _COMPILED_KERNEL_CACHE.get(cache_key)
    if cached is not None:
        logger.info("Using cached warm-up kernel (in-memory)")
        return cached, 0.0

    samples_spec = jax.ShapeDtypeStruct((n_dimensions * n_lanes,), dtype)
    streams_spec = jax.ShapeDtypeStruct((n_lanes, 2), jnp.uint32)
    step_spec = jax.ShapeDtypeStruct((), dtype)
    iter_spec = jax.ShapeDtypeStruct((), jnp.int32)

    logger.info(f"Compiling warm-up kernel ({n_dimensions} dims x {n_lanes} lanes)...")
    compile_start = time.perf_counter()

    with accelerator_guard('compile'):
        compiled_fn = _warmup_kernel_jit.lower(
            samples_spec, streams_spec, step_spec, iter_spec, binding=binding
        ).compile()

    compile_time = time.perf_counter() - compile_start
    logger.info(f"Compiled in {compile_time:.4f}s")

    def kernel(samples, streams, step_size, iterations):
        return compiled_fn(
            samples, streams,
            jnp.asarray(step_size, dtype=dtype),
            jnp.asarray(iterations, dtype=jnp.int32),
        )

    _COMPILED_KERNEL_CACHE[cache_key] = kernel
    return kernel, compile_time


def benchmark_warmup(kernel: Callable, samples, streams, step_size,
                     benchmark_iters: int) -> Dict[str, Any]:
    """
    Time benchmark iterations of a compiled warm-up kernel.

    Runs on copies of the state: JAX arrays are immutable, so the caller's
    samples and streams are left untouched.

    Args:
        kernel: Kernel returned by compile_warmup_kernel
        samples: Flat sample array
        streams: Lane keys
        step_size: Proposal scale
        benchmark_iters: Number of iterations to time

    Returns:
        Dict with 'avg_time' (seconds per iteration) and 'updates_per_s'
    """
    logger.info(f"Running warm-up benchmark ({benchmark_iters} iterations)...")
    n_updates = samples.shape[0] * benchmark_iters

    start_bench = time.perf_counter()
    with accelerator_guard('benchmark'):
        out = kernel(samples, streams, step_size, benchmark_iters)
        jax.block_until_ready(out)
    total_time = time.perf_counter() - start_bench

    avg_time = total_time / max(benchmark_iters, 1)
    updates_per_s = n_updates / total_time if total_time > 0 else float('inf')
    logger.info(f"  Avg: {avg_time:.6f} s/iteration ({updates_per_s:.3e} dimension updates/s)")
    return {'avg_time': avg_time, 'updates_per_s': updates_per_s}
