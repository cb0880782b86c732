"""
Error Handling and Validation Utilities for the Warm-up Sampler

This module provides:
- The error taxonomy (configuration errors vs. accelerator faults)
- validate_warmup_config: sanity checks on the configuration dict
- accelerator_guard: converts XLA runtime failures into AcceleratorFault
- diagnose_warmup / print_diagnostics: post-run chain state inspection

Numerical degeneracy (zero, negative or NaN densities) is never an error
here. It flows through the chain state and is only reported afterwards.
"""

import traceback
from contextlib import contextmanager
from typing import Any, Dict

import jax
import numpy as np

import logging
logger = logging.getLogger('nucmc')


# Largest seed accepted by the stream seeder (64-bit unsigned)
MAX_SEED = 2**64


class DensityBindingError(ValueError):
    """A density binding does not match the chain layout it is applied to."""


class AcceleratorFault(RuntimeError):
    """
    Fatal failure of the parallel execution substrate.

    Raised for allocation, compilation or launch failures. There is no safe
    partial state to recover from, so callers should abort the run.

    Attributes:
        operation: Name of the operation that failed (e.g. 'compile', 'warmup')
        location: 'file:line' of the call that raised
    """

    def __init__(self, operation: str, location: str, cause: BaseException):
        self.operation = operation
        self.location = location
        super().__init__(f"{operation} failed at {location}: {type(cause).__name__}: {cause}")


_ACCELERATOR_ERRORS = (jax.errors.JaxRuntimeError, MemoryError)


@contextmanager
def accelerator_guard(operation: str):
    """
    Re-raise accelerator-level failures as AcceleratorFault.

    The location reported is the line inside the ``with`` block whose call
    raised, so the diagnostic points at the failing dispatch rather than at
    XLA internals.

    Example:
        with accelerator_guard('warmup'):
            out = kernel(samples, streams, step, iters)
            jax.block_until_ready(out)
    """
    try:
        yield
    except _ACCELERATOR_ERRORS as err:
        # Skip this generator's own frame (the exception is thrown in at yield)
        frames = [f for f in traceback.extract_tb(err.__traceback__) if f.filename != __file__]
        if frames:
            location = f"{frames[0].filename}:{frames[0].lineno}"
        else:
            location = "<unknown>"
        logger.error(f"[FATAL] {operation} failed at {location}: {err}")
        raise AcceleratorFault(operation, location, err) from err


def _is_integer(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def _is_real(value) -> bool:
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, (bool, np.bool_))


def validate_warmup_config(warmup_config: Dict[str, Any]) -> None:
    """
    Validates that a warm-up configuration is sensible.

    Args:
        warmup_config: Configuration dictionary (lowercase keys)

    Raises:
        ValueError: If configuration is invalid
    """
    errors = []

    required_keys = ['num_lanes', 'num_dimensions', 'step_size', 'warmup_iter', 'density']
    for key in required_keys:
        if key not in warmup_config:
            errors.append(f"Missing required config key: '{key}'")

    int_keys = {
        'num_lanes': 1,
        'num_dimensions': 1,
        'warmup_iter': 0,
        'chunk_size': 1,
        'benchmark': 0,
    }
    for key, minimum in int_keys.items():
        if key not in warmup_config:
            continue
        value = warmup_config[key]
        if not _is_integer(value):
            errors.append(f"{key} must be an integer, got {value!r}")
        elif value < minimum:
            errors.append(f"{key} must be >= {minimum}")

    num_lanes = warmup_config.get('num_lanes')
    if _is_integer(num_lanes) and num_lanes > 2**32:
        errors.append("num_lanes must be <= 2**32 (lane index is folded in as uint32)")

    if 'step_size' in warmup_config:
        step_size = warmup_config['step_size']
        if not _is_real(step_size) or not np.isfinite(step_size) or step_size <= 0:
            errors.append(f"step_size must be finite and > 0, got {step_size!r}")

    if 'rng_seed' in warmup_config:
        seed = warmup_config['rng_seed']
        if not _is_integer(seed) or not 0 <= int(seed) < MAX_SEED:
            errors.append(f"rng_seed must be an integer in [0, 2**64), got {seed!r}")

    if 'initial_value' in warmup_config:
        initial_value = warmup_config['initial_value']
        if not _is_real(initial_value) or not np.isfinite(initial_value):
            errors.append(f"initial_value must be a finite number, got {initial_value!r}")

    if 'density' in warmup_config:
        density = warmup_config['density']
        if isinstance(density, str):
            pass
        elif isinstance(density, (list, tuple)):
            if not density:
                errors.append("density list must not be empty")
            elif not all(isinstance(d, str) for d in density):
                errors.append("density list must contain registered density names")
        else:
            errors.append(f"density must be a name or a list of names, got {type(density).__name__}")

    if errors:
        raise ValueError("Invalid warm-up configuration:\n  " + "\n  ".join(errors))


def diagnose_warmup(samples: np.ndarray, accept_counts: np.ndarray, n_lanes: int,
                    iterations: int, diagnostics: Dict[str, Any]) -> Dict[str, Any]:
    """
    Inspects warmed-up chain state for common problems.

    Args:
        samples: Flat sample array (n_dimensions * n_lanes,)
        accept_counts: Acceptance counts (n_dimensions, n_lanes)
        n_lanes: Number of lanes
        iterations: Iterations the acceptance counts were accumulated over
        diagnostics: Existing diagnostics dict to extend

    Returns:
        diagnostics: Dictionary with issues, warnings, and info
    """
    diagnostics = diagnostics | {
        'issues': [],
        'warnings': [],
        'info': []
    }

    lane_view = np.asarray(samples).reshape(-1, n_lanes)
    counts = np.asarray(accept_counts)
    n_dimensions = lane_view.shape[0]

    # Degenerate densities let NaN/Inf into the chains
    bad_lanes = np.sum(~np.all(np.isfinite(lane_view), axis=0))
    if bad_lanes > 0:
        diagnostics['issues'].append(
            f"{bad_lanes} lane(s) hold NaN or Inf samples - check density support"
        )

    if counts.size and iterations > 0:
        stuck = np.sum(np.any(counts == 0, axis=0))
        if stuck > 0:
            diagnostics['warnings'].append(
                f"{stuck} lane(s) never accepted a move in at least one dimension"
            )

    diagnostics['info'].append(f"Number of lanes: {n_lanes}")
    diagnostics['info'].append(f"Number of dimensions: {n_dimensions}")

    return diagnostics


def print_diagnostics(diagnostics: Dict[str, Any]) -> None:
    """Log diagnostics from diagnose_warmup."""
    if diagnostics['issues']:
        logger.error("[ERROR] ISSUES:")
        for issue in diagnostics['issues']:
            logger.error(f"  - {issue}")

    if diagnostics['warnings']:
        logger.warning("[WARN] WARNINGS:")
        for warning in diagnostics['warnings']:
            logger.warning(f"  - {warning}")

    if diagnostics['info']:
        logger.info("[INFO] INFO:")
        for info in diagnostics['info']:
            logger.info(f"  - {info}")

    if not diagnostics['issues'] and not diagnostics['warnings']:
        logger.info("[OK] No issues detected")
