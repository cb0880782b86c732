"""
nucmc - Parallel Metropolis-Hastings warm-up for nucleon densities

Runs many independent Metropolis-Hastings chains (one per lane) to steady
state on a product-form target: one independent marginal density per
dimension.

Public API:
    Core operations:
        seed_streams - One independent PRNG stream per lane
        initialize_chains - Constant starting sample array
        warmup - Run a fixed number of Gibbs sweeps on every lane

    Density binding:
        Homogeneous - One density for every dimension
        Heterogeneous - One density per dimension
        bind_densities - Validate a binding against the dimension count

    Registration:
        register_density - Register a named density function
        get_density - Retrieve a registered density
        list_densities - List all registered densities
        resolve_binding - Build a binding from density names

    Runs & diagnostics:
        run_warmup - Chunked warmup returning acceptance counts
        rwarmup - Config-driven warm-up with diagnostics
        acceptance_rates - Per-lane acceptance rates
        summarize_chains - Cross-lane mean/variance per dimension

    Errors:
        DensityBindingError - Binding does not fit the chain layout
        AcceleratorFault - Fatal compile/launch/allocation failure

Example:
    from nucmc import seed_streams, initialize_chains, warmup, Homogeneous
    from nucmc.densities import standard_normal

    streams = seed_streams(seed=1234, n_lanes=4096)
    samples = initialize_chains(0.0, n_dimensions=3, n_lanes=4096)
    samples, streams = warmup(samples, 2.4, streams, 1000, Homogeneous(standard_normal))
"""
# CRITICAL: Import jax_config FIRST to set environment variables before JAX loads
from . import jax_config  # noqa: F401

__version__ = "0.1.0"

# Import mcmc subpackage first: registry depends on its binding types
from .mcmc import (
    Homogeneous,
    Heterogeneous,
    bind_densities,
    WarmupParams,
    WarmupResult,
    seed_streams,
    initialize_chains,
    warmup,
    run_warmup,
    rwarmup,
    configure_warmup,
    acceptance_rates,
    summarize_chains,
)
from .registry import (
    register_density,
    get_density,
    list_densities,
    resolve_binding,
)
from .error_handling import (
    DensityBindingError,
    AcceleratorFault,
    validate_warmup_config,
)
from .densities import register_builtin_densities

register_builtin_densities()
