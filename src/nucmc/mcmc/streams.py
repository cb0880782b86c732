"""
Per-Lane Random Streams.

Every lane owns one JAX PRNG key (threefry, uint32[2]). All lanes share a
single master key derived from the seed; lane i's key is the master key with
the lane index folded in. Threefry is counter-based, so folding in distinct
indices gives disjoint streams: a lane can split and draw without bound and
never reproduce another lane's draws.

The stream array is created once and then threaded through every warm-up
call (read, advanced, returned). Later phases can keep drawing from the
returned keys without reseeding.
"""

import jax
import jax.numpy as jnp
import jax.random as random
import numpy as np

from ..error_handling import MAX_SEED


def master_key(seed: int):
    """
    Build the master PRNG key from a 64-bit seed.

    The seed is folded in as two 32-bit words, so the full 64 bits take
    effect even when jax_enable_x64 is off.

    Raises:
        ValueError: If seed is not an integer in [0, 2**64)
    """
    if not isinstance(seed, (int, np.integer)) or not 0 <= int(seed) < MAX_SEED:
        raise ValueError(f"seed must be an integer in [0, 2**64), got {seed!r}")
    seed = int(seed)
    key = random.PRNGKey(0)
    key = random.fold_in(key, np.uint32(seed >> 32))
    return random.fold_in(key, np.uint32(seed & 0xFFFFFFFF))


def seed_streams(seed: int, n_lanes: int) -> jnp.ndarray:
    """
    Give every lane an independent stream.

    Args:
        seed: 64-bit unsigned seed shared by all lanes
        n_lanes: Number of lanes

    Returns:
        keys: (n_lanes, 2) uint32 array, row i is lane i's key
    """
    if n_lanes < 1:
        raise ValueError(f"n_lanes must be >= 1, got {n_lanes}")
    if n_lanes > 2**32:
        raise ValueError(f"n_lanes must be <= 2**32, got {n_lanes}")

    base = master_key(seed)
    lane_ids = jnp.arange(n_lanes, dtype=jnp.uint32)
    return jax.vmap(lambda i: random.fold_in(base, i))(lane_ids)
