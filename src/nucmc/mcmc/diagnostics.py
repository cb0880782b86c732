"""
Warm-up Diagnostics.

Summary statistics for warmed-up lanes:
- acceptance_rates: Per (dimension, lane) MH acceptance rates
- print_acceptance_summary: Log acceptance rate statistics per dimension
- summarize_chains: Cross-lane mean/variance per dimension
- print_chain_summary: Log the chain summary

No sample history is kept during warm-up, so these describe the population
of lanes at the end of the run, not individual trajectories.
"""

from typing import Dict, List, Optional

import numpy as np

import logging
logger = logging.getLogger('nucmc')


# Below this acceptance rate a dimension's step size is likely too large
LOW_ACCEPTANCE = 0.10


def acceptance_rates(accept_counts, iterations: int) -> np.ndarray:
    """
    Convert acceptance counts into rates.

    Args:
        accept_counts: (n_dimensions, n_lanes) accepted moves
        iterations: Number of sweeps the counts cover

    Returns:
        (n_dimensions, n_lanes) float array; NaN when iterations == 0
    """
    counts = np.asarray(accept_counts, dtype=np.float64)
    if iterations <= 0:
        return np.full(counts.shape, np.nan)
    return counts / iterations


def print_acceptance_summary(rates: np.ndarray, labels: Optional[List[str]] = None) -> None:
    """
    Log summary statistics for MH acceptance rates.

    Args:
        rates: (n_dimensions, n_lanes) acceptance rates
        labels: Optional name per dimension
    """
    rates = np.asarray(rates)
    if rates.size == 0 or np.all(np.isnan(rates)):
        return

    n_dimensions = rates.shape[0]
    if labels is None:
        labels = [f"Dim {n}" for n in range(n_dimensions)]

    per_dim = np.nanmean(rates, axis=1)
    logger.info(f"--- MH Acceptance Rates ({n_dimensions} dimensions, {rates.shape[1]} lanes) ---")
    logger.info(f"  Mean: {np.mean(per_dim):.1%}  Median: {np.median(per_dim):.1%}  "
                f"Min: {np.min(per_dim):.1%}  Max: {np.max(per_dim):.1%}")

    low_mask = per_dim < LOW_ACCEPTANCE
    if np.any(low_mask):
        low_labels = [lbl for lbl, is_low in zip(labels, low_mask) if is_low]
        logger.warning(f"  WARNING: {len(low_labels)} dimension(s) have acceptance rate < 10%")
        if len(low_labels) <= 10:
            logger.warning(f"    Low dimensions: {', '.join(low_labels)}")


def summarize_chains(samples, n_lanes: int) -> Dict[str, np.ndarray]:
    """
    Cross-lane statistics per dimension.

    Args:
        samples: Flat sample array (n_dimensions * n_lanes,)
        n_lanes: Number of lanes

    Returns:
        Dict with 'mean', 'var' (over finite lanes) and 'n_nonfinite',
        each of shape (n_dimensions,)
    """
    lane_view = np.asarray(samples, dtype=np.float64).reshape(-1, n_lanes)
    finite = np.isfinite(lane_view)
    masked = np.where(finite, lane_view, np.nan)
    return {
        'mean': np.nanmean(masked, axis=1),
        'var': np.nanvar(masked, axis=1),
        'n_nonfinite': np.sum(~finite, axis=1),
    }


def print_chain_summary(summary: Dict[str, np.ndarray]) -> None:
    """Log the output of summarize_chains."""
    logger.info(f"--- Lane Population Summary ({len(summary['mean'])} dimensions) ---")
    for n, (mean, var, bad) in enumerate(zip(summary['mean'], summary['var'], summary['n_nonfinite'])):
        line = f"  Dim {n}: mean={mean:.4f} var={var:.4f}"
        if bad:
            line += f" ({bad} non-finite lanes)"
        logger.info(line)
