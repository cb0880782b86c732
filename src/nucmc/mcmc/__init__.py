"""
MCMC Subpackage - Core warm-up implementation.

This package contains the core warm-up logic:
- types: Density bindings (Homogeneous, Heterogeneous), WarmupParams, WarmupResult
- streams: Per-lane PRNG streams (seed_streams)
- config: Configuration and chain initialization
- sampling: MH step and Gibbs sweep
- warmup: Per-lane loop and vectorized kernel
- compile: Kernel compilation and caching
- diagnostics: Acceptance and population summaries
- backend: warmup / run_warmup / rwarmup entry points
"""

# Import types first (needed by other modules)
from .types import (
    Homogeneous,
    Heterogeneous,
    bind_densities,
    WarmupParams,
    WarmupResult,
)
from .streams import seed_streams

# Import main entry points
from .backend import warmup, run_warmup, rwarmup

from .config import (
    configure_warmup,
    initialize_chains,
    validate_warmup_inputs,
)
from .sampling import mh_step, gibbs_sweep
from .diagnostics import (
    acceptance_rates,
    print_acceptance_summary,
    summarize_chains,
    print_chain_summary,
)
from .compile import compile_warmup_kernel, benchmark_warmup

__all__ = [
    # Main entry points
    'warmup',
    'run_warmup',
    'rwarmup',
    # Types
    'Homogeneous',
    'Heterogeneous',
    'bind_densities',
    'WarmupParams',
    'WarmupResult',
    # Streams and chains
    'seed_streams',
    'initialize_chains',
    # Config
    'configure_warmup',
    'validate_warmup_inputs',
    # Sampling
    'mh_step',
    'gibbs_sweep',
    # Diagnostics
    'acceptance_rates',
    'print_acceptance_summary',
    'summarize_chains',
    'print_chain_summary',
    # Compile
    'compile_warmup_kernel',
    'benchmark_warmup',
]
