"""
Warm-up Sampling Functions.

Core sampling functions for the warm-up backend:
- mh_step: Metropolis-Hastings update of one dimension of one chain
- gibbs_sweep: mh_step applied to every dimension, in index order

Both operate on a single lane; the lane axis is added by jax.vmap in
warmup.py.
"""

import jax.numpy as jnp
import jax.random as random


def mh_step(x, inv_density, step_size, density_fn, key):
    """
    Perform one Metropolis-Hastings step for a single dimension.

    Proposal: x' = x + step_size * z, z ~ N(0, 1). The additive normal kernel
    is symmetric, so the acceptance ratio is p(x') / p(x), computed as
    p(x') * inv_density with inv_density = 1 / p(x) cached by the caller.
    The move is accepted when the ratio is >= u, u ~ U[0, 1).

    The cache is only refreshed on acceptance. No clamping is applied:
    if p(x) == 0 the cache is inf and any proposal with p(x') > 0 is
    accepted, while p(x') == 0 gives inf * 0 = NaN, which rejects.

    Args:
        x: Current value of this dimension (scalar; Python floats accepted)
        inv_density: Cached 1 / density_fn(x) (scalar, cast to x's dtype)
        step_size: Proposal scale
        density_fn: Unnormalised density of this dimension
        key: JAX random key for this lane

    Returns:
        next_x: Proposal if accepted, else x
        next_inv_density: 1 / density_fn(next_x)
        new_key: Advanced random key
        accepted: Boolean acceptance flag
    """
    x = jnp.asarray(x)
    if not jnp.issubdtype(x.dtype, jnp.floating):
        x = x.astype(jnp.result_type(float))
    inv_density = jnp.asarray(inv_density, dtype=x.dtype)

    new_key, proposal_key, accept_key = random.split(key, 3)

    proposal = x + step_size * random.normal(proposal_key, dtype=x.dtype)
    proposal_density = jnp.asarray(density_fn(proposal), dtype=x.dtype)

    ratio = proposal_density * inv_density
    uniform = random.uniform(accept_key, dtype=x.dtype)

    accept = ratio >= uniform
    next_x = jnp.where(accept, proposal, x)
    next_inv_density = jnp.where(accept, 1.0 / proposal_density, inv_density).astype(inv_density.dtype)

    return next_x, next_inv_density, new_key, accept


def gibbs_sweep(xs, inv_densities, step_size, binding, key):
    """
    Run one full sweep: mh_step on dimensions 0, 1, ..., n_dimensions - 1.

    The target factorizes across dimensions, so updating them one at a time
    leaves it invariant. The order is fixed because the dimensions draw from
    one shared stream in sequence; a different order would give a different
    (equally valid) trajectory.

    The Python loop unrolls at trace time. binding.density_for(n) is a plain
    lookup resolved while tracing, so the compiled kernel has each
    dimension's density inlined.

    Args:
        xs: Current sample vector (n_dimensions,)
        inv_densities: Cached inverse densities (n_dimensions,)
        step_size: Proposal scale shared by all dimensions
        binding: Homogeneous or Heterogeneous density binding
        key: JAX random key for this lane

    Returns:
        next_xs, next_inv_densities, new_key, accepted (n_dimensions,) bool
    """
    next_xs = []
    next_invs = []
    accepted = []
    for n in range(xs.shape[0]):
        x_n, inv_n, key, acc_n = mh_step(
            xs[n], inv_densities[n], step_size, binding.density_for(n), key
        )
        next_xs.append(x_n)
        next_invs.append(inv_n)
        accepted.append(acc_n)

    return jnp.stack(next_xs), jnp.stack(next_invs), key, jnp.stack(accepted)
