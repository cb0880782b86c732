"""
Warm-up Kernel.

The parallel warm-up operation. For each lane, independently:
  1. load its key and sample vector from the shared arrays and build the
     inverse-density cache (one fixed-size transfer per lane)
  2. run `iterations` Gibbs sweeps on that local working copy
  3. store the key and sample vector back in the same layout

Sample array layout: flat (n_dimensions * n_lanes,), dimension n of lane t
at index n * n_lanes + t. Viewed as (n_dimensions, n_lanes), a lane is a
column and each dimension's row is contiguous across lanes.

Lanes never read each other's slots, so the result for a lane depends only
on its own stream and samples, not on how lanes are batched or ordered.
"""

from functools import partial

import jax
import jax.numpy as jnp

from .sampling import gibbs_sweep
from .types import evaluate_densities


def warmup_lane(xs, key, step_size, iterations, binding):
    """
    Run the warm-up loop for one lane.

    Args:
        xs: Lane sample vector (n_dimensions,)
        key: Lane PRNG key
        step_size: Proposal scale
        iterations: Number of sweeps (may be traced)
        binding: Density binding (static)

    Returns:
        xs, key, accept_counts (n_dimensions,) int32
    """
    inv_densities = 1.0 / evaluate_densities(binding, xs)
    accept_counts = jnp.zeros(xs.shape, dtype=jnp.int32)

    def sweep_body(i, carry):
        cur_xs, cur_inv, cur_key, counts = carry
        cur_xs, cur_inv, cur_key, accepted = gibbs_sweep(
            cur_xs, cur_inv, step_size, binding, cur_key
        )
        return cur_xs, cur_inv, cur_key, counts + accepted.astype(jnp.int32)

    # Cache exists only inside the loop; it is not written back
    final_xs, _, final_key, final_counts = jax.lax.fori_loop(
        0, iterations, sweep_body, (xs, inv_densities, key, accept_counts)
    )
    return final_xs, final_key, final_counts


def warmup_kernel(samples, streams, step_size, iterations, binding):
    """
    Warm up every lane in parallel.

    Args:
        samples: Flat sample array (n_dimensions * n_lanes,)
        streams: Lane keys (n_lanes, 2)
        step_size: Proposal scale (scalar)
        iterations: Sweeps per lane (scalar int)
        binding: Validated density binding (static under jit)

    Returns:
        samples: Updated flat sample array, same layout
        streams: Advanced lane keys
        accept_counts: (n_dimensions, n_lanes) accepted moves
    """
    n_lanes = streams.shape[0]
    lane_view = samples.reshape(-1, n_lanes)

    run_lane = partial(warmup_lane, binding=binding)
    next_view, next_streams, accept_counts = jax.vmap(
        run_lane, in_axes=(1, 0, None, None), out_axes=(1, 0, 1)
    )(lane_view, streams, step_size, iterations)

    return next_view.reshape(-1), next_streams, accept_counts
