"""
Warm-up Backend - Main Entry Points.

This module provides the host-side warm-up operations:

- warmup: The core batch operation. Takes the sample and stream arrays,
  returns them warmed up by a fixed number of Gibbs sweeps.
- run_warmup: warmup in chunks of kernel calls, with progress logging and
  per-lane acceptance counts.
- rwarmup: Config-driven run: seeds streams, initializes chains, compiles,
  benchmarks, warms up, and reports diagnostics.

The implementation is split across several modules:

- types: Density bindings, WarmupParams, WarmupResult
- streams: Per-lane PRNG streams
- config: Configuration and chain initialization
- sampling: MH step and Gibbs sweep
- warmup: Per-lane loop and vectorized kernel
- compile: Kernel compilation and caching
- diagnostics: Acceptance and population summaries
"""

import jax
import jax.numpy as jnp
import numpy as np
import time
from typing import Dict, Any, Optional, Tuple

from .types import WarmupResult
from .config import configure_warmup, initialize_chains, validate_warmup_inputs
from .compile import compile_warmup_kernel, benchmark_warmup, DEFAULT_CHUNK_SIZE
from .diagnostics import (
    acceptance_rates,
    print_acceptance_summary,
    summarize_chains,
    print_chain_summary,
)
from ..error_handling import accelerator_guard, diagnose_warmup, print_diagnostics
from ..hardware_info import get_hardware_info, get_nucmc_version

import logging
logger = logging.getLogger('nucmc')

# Public API for this module
__all__ = [
    'warmup',
    'run_warmup',
    'rwarmup',
]


def _check_iterations(iterations) -> int:
    if isinstance(iterations, bool) or not isinstance(iterations, (int, np.integer)):
        raise ValueError(f"iterations must be an integer, got {iterations!r}")
    if iterations < 0:
        raise ValueError(f"iterations must be >= 0, got {iterations}")
    if iterations >= 2**31:
        raise ValueError(f"iterations must be < 2**31, got {iterations}")
    return int(iterations)


def run_warmup(samples, step_size, streams, iterations, binding,
               chunk_size: Optional[int] = DEFAULT_CHUNK_SIZE) -> WarmupResult:
    """
    Warm up all lanes, running the kernel in chunks of iterations.

    Every chunk threads the lane keys and samples into the next, so the
    output does not depend on chunk_size.

    Args:
        samples: Flat sample array (n_dimensions * n_lanes,), from initialize_chains
        step_size: Proposal scale
        streams: Lane keys (n_lanes, 2), from seed_streams
        iterations: Gibbs sweeps per lane (>= 0)
        binding: Homogeneous or Heterogeneous density binding
        chunk_size: Iterations per kernel call (None = one call)

    Returns:
        WarmupResult(samples, streams, accept_counts)

    Raises:
        DensityBindingError: Binding does not fit the sample layout (before dispatch)
        ValueError: Inconsistent arrays or bad iteration count (before dispatch)
        AcceleratorFault: Compilation or kernel execution failed
    """
    input_dtype = getattr(samples, 'dtype', None)
    samples = jnp.asarray(samples)
    if input_dtype is not None and np.dtype(input_dtype) != samples.dtype:
        logger.warning(f"samples converted from {np.dtype(input_dtype)} to {samples.dtype}; "
                       f"set use_double / jax_enable_x64 to keep {np.dtype(input_dtype)}")
    streams = jnp.asarray(streams)
    iterations = _check_iterations(iterations)
    n_dimensions, n_lanes = validate_warmup_inputs(samples, streams, binding)
    if chunk_size is None:
        chunk_size = max(iterations, 1)
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

    accept_counts = jnp.zeros((n_dimensions, n_lanes), dtype=jnp.int32)
    if iterations == 0:
        return WarmupResult(samples, streams, accept_counts)

    kernel, _ = compile_warmup_kernel(binding, n_dimensions, n_lanes, samples.dtype)

    num_chunks = -(-iterations // chunk_size)
    done = 0
    run_start = time.perf_counter()
    for chunk_idx in range(num_chunks):
        n_iter = min(chunk_size, iterations - done)
        with accelerator_guard('warmup'):
            samples, streams, chunk_counts = kernel(samples, streams, step_size, n_iter)
            jax.block_until_ready(samples)
        accept_counts = accept_counts + chunk_counts
        done += n_iter
        if num_chunks > 1:
            logger.info(f"  Chunk {chunk_idx + 1}/{num_chunks}: {done}/{iterations} iterations "
                        f"({time.perf_counter() - run_start:.2f}s)")

    return WarmupResult(samples, streams, accept_counts)


def warmup(samples, step_size, streams, iterations, binding) -> Tuple[Any, Any]:
    """
    Run `iterations` Gibbs sweeps on every lane.

    Args:
        samples: Flat sample array (n_dimensions * n_lanes,)
        step_size: Proposal scale
        streams: Lane keys (n_lanes, 2)
        iterations: Gibbs sweeps per lane
        binding: Homogeneous or Heterogeneous density binding

    Returns:
        (samples, streams): the warmed-up sample array and advanced keys,
        in the same layouts as the inputs.
    """
    result = run_warmup(samples, step_size, streams, iterations, binding, chunk_size=None)
    return result.samples, result.streams


def _dimension_labels(density_spec, n_dimensions):
    if isinstance(density_spec, str):
        return [f"Dim {n} ({density_spec})" for n in range(n_dimensions)]
    return [f"Dim {n} ({name})" for n, name in enumerate(density_spec)]


def rwarmup(warmup_config: Dict[str, Any]) -> Tuple[WarmupResult, Dict[str, Any], Dict[str, Any]]:
    """
    Run a complete warm-up from a configuration dict.

    Args:
        warmup_config: Config dict; see utils.clean_config for keys and defaults

    Returns:
        result: WarmupResult with warmed-up samples, advanced streams, and
            acceptance counts
        user_config: Cleaned config plus timings
        diagnostics: issues / warnings / info lists and summary statistics
    """
    user_config, runtime_ctx, params = configure_warmup(warmup_config)
    binding = runtime_ctx['binding']
    dtype = runtime_ctx['jnp_float_dtype']

    logger.info(f"--- Warm-up: {params.NUM_LANES} lanes x {params.NUM_DIMENSIONS} dimensions, "
                f"{params.WARMUP_ITER} iterations, step {params.STEP_SIZE} ---")

    samples = initialize_chains(user_config['initial_value'], params.NUM_DIMENSIONS,
                                params.NUM_LANES, dtype=dtype)
    streams = runtime_ctx['streams']

    kernel, compile_time = compile_warmup_kernel(binding, params.NUM_DIMENSIONS,
                                                 params.NUM_LANES, dtype)
    user_config['compile_time'] = compile_time

    if params.BENCHMARK_ITER > 0:
        bench = benchmark_warmup(kernel, samples, streams, params.STEP_SIZE, params.BENCHMARK_ITER)
        user_config['benchmark_results'] = {
            **bench,
            'benchmark_iterations': params.BENCHMARK_ITER,
            'compile_time_s': round(compile_time, 4),
            'nucmc_version': get_nucmc_version(),
            'hardware': get_hardware_info(),
        }

    run_start = time.perf_counter()
    result = run_warmup(samples, params.STEP_SIZE, streams, params.WARMUP_ITER, binding,
                        chunk_size=params.CHUNK_SIZE)
    user_config['run_time'] = time.perf_counter() - run_start
    logger.info(f"Warm-up complete in {user_config['run_time']:.4f}s")

    rates = acceptance_rates(result.accept_counts, params.WARMUP_ITER)
    print_acceptance_summary(rates, _dimension_labels(user_config['density'], params.NUM_DIMENSIONS))

    summary = summarize_chains(result.samples, params.NUM_LANES)
    print_chain_summary(summary)

    diagnostics = diagnose_warmup(
        np.asarray(result.samples), np.asarray(result.accept_counts),
        params.NUM_LANES, params.WARMUP_ITER,
        {'acceptance_rates': rates, 'summary': summary},
    )
    print_diagnostics(diagnostics)

    return result, user_config, diagnostics
