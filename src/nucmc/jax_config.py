"""
JAX Configuration - MUST be imported before any JAX imports.

The warm-up kernel holds one sample array and one key array covering every
lane, compiled once per (density binding, lane grid, dtype). Environment
variables read by JAX at import time:
- TF_GPU_ALLOCATOR: allocator for the large per-lane arrays
- TF_CPP_MIN_LOG_LEVEL: XLA C++ log verbosity
- JAX_COMPILATION_CACHE_DIR / JAX_PERSISTENT_CACHE_MIN_COMPILE_TIME_SECS:
  on-disk cache of compiled warm-up kernels

All values are defaults; anything already set in the environment wins.
"""
import os
from pathlib import Path

# Lane arrays are allocated once per grid and replaced by same-sized outputs
# after every chunk; the async allocator reuses those blocks.
os.environ.setdefault("TF_GPU_ALLOCATOR", "cuda_malloc_async")

# Only XLA errors reach stderr
os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "2")

# Kernels for large lane grids with many heterogeneous densities take seconds
# to compile; keep them on disk between runs.
_KERNEL_CACHE_DIR = Path.home() / ".cache" / "nucmc" / "xla_kernels"
_KERNEL_CACHE_DIR.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("JAX_COMPILATION_CACHE_DIR", str(_KERNEL_CACHE_DIR))
os.environ.setdefault("JAX_PERSISTENT_CACHE_MIN_COMPILE_TIME_SECS", "1.0")
