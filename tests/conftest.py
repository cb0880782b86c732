"""
Pytest configuration and shared fixtures for nucmc tests.
"""

import pytest
import jax

from nucmc.registry import register_density, _REGISTRY
from nucmc.densities import gaussian


@pytest.fixture(autouse=True)
def float32_precision():
    """Keep tests in float32 even if a test enabled x64 through a config."""
    yield
    jax.config.update("jax_enable_x64", False)


@pytest.fixture
def rng_seed():
    """Default RNG seed for reproducible tests."""
    return 42


@pytest.fixture
def basic_warmup_config():
    """Small warm-up configuration for tests."""
    return {
        'num_lanes': 64,
        'num_dimensions': 2,
        'initial_value': 0.0,
        'step_size': 2.0,
        'warmup_iter': 50,
        'density': 'standard_normal',
        'rng_seed': 42,
        'chunk_size': 20,
    }


TEST_DENSITIES = {
    'test_shifted_left': gaussian(mu=-5.0, sigma=1.0),
    'test_shifted_right': gaussian(mu=5.0, sigma=1.0),
}


@pytest.fixture
def register_test_densities():
    """
    Register test densities and clean up after the test.

    Usage:
        def test_something(register_test_densities):
            # 'test_shifted_left' / 'test_shifted_right' are now registered
            ...
    """
    original = dict(_REGISTRY)
    for name, fn in TEST_DENSITIES.items():
        if name not in _REGISTRY:
            register_density(name, fn)

    yield TEST_DENSITIES

    _REGISTRY.clear()
    _REGISTRY.update(original)
