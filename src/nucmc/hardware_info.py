"""
Hardware Info - Device introspection and lane grid sizing.

The warm-up kernel runs one chain per lane; how many lanes are worth
launching depends on the device. This module reports what JAX sees and
derives a default lane count from it.

Functions:
- get_hardware_info: Collect JAX backend/device fingerprint
- suggest_num_lanes: Default lane count for the available devices
- get_nucmc_version: Installed nucmc package version
"""

import subprocess
from typing import Any, Dict, Optional

import jax


# Lanes per device: accelerators need enough chains to fill their cores
LANES_PER_DEVICE = {
    'gpu': 1 << 20,
    'tpu': 1 << 20,
    'cpu': 1 << 12,
}


def get_hardware_info() -> Dict[str, Any]:
    """
    Collect hardware information for sizing and benchmark context.
    """
    devices = jax.devices()
    info = {
        'jax_backend': str(jax.default_backend()),
        'jax_devices': [str(d) for d in devices],
        'device_kind': devices[0].device_kind if devices else 'unknown',
        'device_count': len(devices),
        'jax_version': jax.__version__,
    }

    # GPU name and memory via nvidia-smi, when present
    try:
        result = subprocess.run(
            ['nvidia-smi', '--query-gpu=name,memory.total,driver_version', '--format=csv,noheader'],
            capture_output=True, text=True, timeout=5
        )
        if result.returncode == 0:
            parts = result.stdout.strip().split('\n')[0].split(', ')
            if len(parts) >= 3:
                info['gpu_name'] = parts[0]
                info['gpu_memory'] = parts[1]
                info['driver_version'] = parts[2]
    except (subprocess.TimeoutExpired, FileNotFoundError):
        pass

    return info


def suggest_num_lanes(lanes_per_device: Optional[int] = None,
                      backend: Optional[str] = None) -> int:
    """
    Default lane count for the default device.

    Args:
        lanes_per_device: Override the per-device lane count
        backend: Override the JAX backend name ('cpu', 'gpu', 'tpu')

    Returns:
        Lane count for the default device (the kernel is not sharded)
    """
    if backend is None:
        backend = jax.default_backend()
    if lanes_per_device is None:
        lanes_per_device = LANES_PER_DEVICE.get(backend, LANES_PER_DEVICE['cpu'])
    return lanes_per_device


def get_nucmc_version() -> str:
    """Get nucmc package version."""
    try:
        from nucmc import __version__
        return __version__
    except (ImportError, AttributeError):
        return "unknown"
