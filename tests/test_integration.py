"""
Integration Tests for the Warm-up Backend

End-to-end tests of the batch warm-up operation:
- Convergence to the target (standard normal, Woods-Saxon, uniform box)
- Determinism, chunking and continuation of streams
- Homogeneous vs heterogeneous bindings
- Sample layout and lane independence
- Binding validation before any kernel runs

Run with: pytest tests/test_integration.py -v
"""

import logging

import numpy as np
import jax.numpy as jnp
import pytest
from scipy import integrate, stats

from nucmc import (
    seed_streams, initialize_chains, warmup, run_warmup,
    Homogeneous, Heterogeneous, DensityBindingError, acceptance_rates,
)
from nucmc.densities import standard_normal, gaussian, uniform_box, WOODS_SAXON_PARAMS
from nucmc.registry import get_density
from nucmc.mcmc.compile import get_compiled_kernel_cache


def run(seed, n_dims, n_lanes, iterations, binding, step_size=2.4, initial_value=0.0):
    streams = seed_streams(seed, n_lanes)
    samples = initialize_chains(initial_value, n_dims, n_lanes)
    return run_warmup(samples, step_size, streams, iterations, binding, chunk_size=None)


# ============================================================================
# CONVERGENCE TESTS
# ============================================================================

class TestConvergence:
    """Warm-up reaches the target across the lane population."""

    def test_standard_normal_moments(self):
        n_lanes = 20000
        result = run(1234, 1, n_lanes, 500, Homogeneous(standard_normal))
        x = np.asarray(result.samples)

        assert abs(x.mean()) < 0.05
        assert abs(x.var() - 1.0) < 0.05

    def test_standard_normal_distribution(self):
        result = run(77, 1, 20000, 500, Homogeneous(standard_normal))
        _, p_value = stats.kstest(np.asarray(result.samples, dtype=np.float64), 'norm')
        assert p_value > 1e-3

    def test_single_lane_long_run(self):
        """One lane, 10^5 sweeps, read back every 10 sweeps."""
        binding = Homogeneous(standard_normal)
        streams = seed_streams(4321, 1)
        samples = initialize_chains(0.0, 1, 1)

        trace = []
        for _ in range(10000):
            samples, streams = warmup(samples, 2.4, streams, 10, binding)
            trace.append(float(samples[0]))
        trace = np.asarray(trace)

        assert abs(trace.mean()) < 0.05
        assert abs(trace.var() - 1.0) < 0.05

    def test_every_dimension_converges(self):
        n_dims, n_lanes = 4, 8000
        result = run(5, n_dims, n_lanes, 400, Homogeneous(standard_normal))
        view = np.asarray(result.samples).reshape(n_dims, n_lanes)

        np.testing.assert_allclose(view.mean(axis=1), 0.0, atol=0.06)
        np.testing.assert_allclose(view.var(axis=1), 1.0, atol=0.08)

    def test_woods_saxon_mean_radius(self):
        """Sampled Au-197 radii match the mean radius of r^2 * Woods-Saxon."""
        R, a = WOODS_SAXON_PARAMS['au197']

        def profile(r):
            return r * r / (1.0 + np.exp((r - R) / a))

        norm, _ = integrate.quad(profile, 0.0, 30.0)
        first, _ = integrate.quad(lambda r: r * profile(r), 0.0, 30.0)
        expected_mean = first / norm

        binding = Homogeneous(get_density('woods_saxon_au197'))
        result = run(2718, 1, 20000, 400, binding, step_size=2.0, initial_value=R)
        r = np.asarray(result.samples)

        assert abs(r.mean() - expected_mean) < 0.05
        assert np.mean(r < 0.0) < 1e-3

    def test_chain_started_outside_box_enters(self):
        """Zero density at the start: the first proposal inside the box is accepted."""
        n_lanes = 2000
        result = run(31, 1, n_lanes, 500, Homogeneous(uniform_box(0.0, 1.0)),
                     step_size=5.0, initial_value=5.0)
        x = np.asarray(result.samples)

        inside = (x >= 0.0) & (x <= 1.0)
        assert inside.mean() > 0.999
        # Inside the box the sample is uniform
        assert abs(x[inside].mean() - 0.5) < 0.03


# ============================================================================
# DETERMINISM TESTS
# ============================================================================

class TestDeterminism:
    """Same inputs, same outputs; chunking and continuation do not matter."""

    def test_repeat_runs_bit_identical(self):
        binding = Homogeneous(standard_normal)
        a = run(42, 3, 256, 60, binding)
        b = run(42, 3, 256, 60, binding)

        np.testing.assert_array_equal(np.asarray(a.samples), np.asarray(b.samples))
        np.testing.assert_array_equal(np.asarray(a.streams), np.asarray(b.streams))
        np.testing.assert_array_equal(np.asarray(a.accept_counts), np.asarray(b.accept_counts))

    def test_different_seeds_differ(self):
        binding = Homogeneous(standard_normal)
        a = run(1, 2, 128, 20, binding)
        b = run(2, 2, 128, 20, binding)
        assert not np.array_equal(np.asarray(a.samples), np.asarray(b.samples))

    def test_zero_iterations_returns_inputs(self):
        streams = seed_streams(9, 32)
        samples = initialize_chains(0.7, 2, 32)
        out_samples, out_streams = warmup(samples, 1.0, streams, 0, Homogeneous(standard_normal))

        np.testing.assert_array_equal(np.asarray(out_samples), np.asarray(samples))
        np.testing.assert_array_equal(np.asarray(out_streams), np.asarray(streams))

    @pytest.mark.parametrize("chunk_size", [1, 7, 25])
    def test_chunking_does_not_change_result(self, chunk_size):
        binding = Homogeneous(standard_normal)
        streams = seed_streams(11, 64)
        samples = initialize_chains(0.0, 2, 64)

        whole = run_warmup(samples, 1.5, streams, 25, binding, chunk_size=None)
        chunked = run_warmup(samples, 1.5, streams, 25, binding, chunk_size=chunk_size)

        np.testing.assert_array_equal(np.asarray(whole.samples), np.asarray(chunked.samples))
        np.testing.assert_array_equal(np.asarray(whole.streams), np.asarray(chunked.streams))
        np.testing.assert_array_equal(np.asarray(whole.accept_counts),
                                      np.asarray(chunked.accept_counts))

    def test_returned_streams_continue_the_chain(self):
        """warmup(10) then warmup(10) on the returned state equals warmup(20)."""
        binding = Homogeneous(standard_normal)
        streams = seed_streams(3, 64)
        samples = initialize_chains(0.0, 2, 64)

        s1, k1 = warmup(samples, 1.0, streams, 10, binding)
        s2, k2 = warmup(s1, 1.0, k1, 10, binding)
        s_all, k_all = warmup(samples, 1.0, streams, 20, binding)

        np.testing.assert_array_equal(np.asarray(s2), np.asarray(s_all))
        np.testing.assert_array_equal(np.asarray(k2), np.asarray(k_all))

    def test_streams_advance(self):
        streams = seed_streams(3, 16)
        _, new_streams = warmup(initialize_chains(0.0, 1, 16), 1.0, streams, 5,
                                Homogeneous(standard_normal))
        assert not np.any(np.all(np.asarray(new_streams) == np.asarray(streams), axis=1))


# ============================================================================
# DENSITY BINDING TESTS
# ============================================================================

class TestBindings:
    """Homogeneous and heterogeneous bindings in the full kernel."""

    def test_homogeneous_equals_repeated_heterogeneous(self):
        """Same density in every slot gives the same trajectory as homogeneous."""
        homog = run(8, 3, 128, 30, Homogeneous(standard_normal))
        heterog = run(8, 3, 128, 30, Heterogeneous((standard_normal,) * 3))
        np.testing.assert_array_equal(np.asarray(homog.samples), np.asarray(heterog.samples))

    def test_homogeneous_and_heterogeneous_acceptance_agree(self):
        n_dims, n_lanes, iterations = 3, 4000, 200
        homog = run(100, n_dims, n_lanes, iterations, Homogeneous(standard_normal))
        heterog = run(200, n_dims, n_lanes, iterations, Heterogeneous((standard_normal,) * n_dims))

        homog_rates = np.asarray(acceptance_rates(homog.accept_counts, iterations))
        heterog_rates = np.asarray(acceptance_rates(heterog.accept_counts, iterations))

        np.testing.assert_allclose(homog_rates.mean(axis=1), heterog_rates.mean(axis=1), atol=0.01)
        np.testing.assert_allclose(homog_rates.std(axis=1), heterog_rates.std(axis=1), atol=0.01)

    def test_per_dimension_densities_follow_layout(self):
        """Dimension n of lane t is read from and written to n * n_lanes + t."""
        n_lanes = 4000
        binding = Heterogeneous((gaussian(-5.0, 1.0), gaussian(5.0, 1.0)))
        result = run(13, 2, n_lanes, 300, binding)
        view = np.asarray(result.samples).reshape(2, n_lanes)

        assert abs(view[0].mean() + 5.0) < 0.1
        assert abs(view[1].mean() - 5.0) < 0.1
        assert np.all(view[0] < 0.0)
        assert np.all(view[1] > 0.0)

    def test_registered_names_resolve_in_kernel(self, register_test_densities):
        from nucmc import resolve_binding

        binding = resolve_binding(['test_shifted_left', 'test_shifted_right'], 2)
        result = run(14, 2, 2000, 300, binding)
        view = np.asarray(result.samples).reshape(2, 2000)
        assert view[0].mean() < -4.5
        assert view[1].mean() > 4.5

    def test_mismatched_binding_rejected_before_tracing(self):
        traced = []

        def tracking_density(x):
            traced.append(x)
            return standard_normal(x)

        cache_size = len(get_compiled_kernel_cache())
        streams = seed_streams(1, 16)
        samples = initialize_chains(0.0, 3, 16)

        with pytest.raises(DensityBindingError):
            warmup(samples, 1.0, streams, 10, Heterogeneous((tracking_density, tracking_density)))

        assert traced == []
        assert len(get_compiled_kernel_cache()) == cache_size


# ============================================================================
# LANE INDEPENDENCE TESTS
# ============================================================================

class TestLaneIndependence:
    """Lanes only interact through their own slots and keys."""

    def test_lane_permutation_commutes(self):
        n_dims, n_lanes = 2, 16
        binding = Homogeneous(standard_normal)
        streams = seed_streams(21, n_lanes)
        rng = np.random.default_rng(0)
        samples = jnp.asarray(rng.normal(size=n_dims * n_lanes).astype(np.float32))

        perm = np.arange(n_lanes)[::-1].copy()
        perm_samples = np.asarray(samples).reshape(n_dims, n_lanes)[:, perm].reshape(-1)
        perm_streams = np.asarray(streams)[perm]

        out, out_streams = warmup(samples, 1.0, streams, 40, binding)
        out_p, out_streams_p = warmup(jnp.asarray(perm_samples), 1.0,
                                      jnp.asarray(perm_streams), 40, binding)

        expected = np.asarray(out).reshape(n_dims, n_lanes)[:, perm]
        np.testing.assert_allclose(np.asarray(out_p).reshape(n_dims, n_lanes), expected, rtol=1e-5)
        np.testing.assert_array_equal(np.asarray(out_streams_p), np.asarray(out_streams)[perm])

    def test_single_lane_matches_lane_in_batch(self):
        binding = Homogeneous(standard_normal)
        streams = seed_streams(4, 8)
        samples = initialize_chains(0.0, 2, 8)

        batch, _ = warmup(samples, 1.0, streams, 25, binding)
        single, _ = warmup(initialize_chains(0.0, 2, 1), 1.0, streams[3:4], 25, binding)

        np.testing.assert_allclose(np.asarray(single),
                                   np.asarray(batch).reshape(2, 8)[:, 3], rtol=1e-5)


# ============================================================================
# INPUT VALIDATION TESTS
# ============================================================================

class TestInputValidation:
    """Bad arrays are rejected before dispatch."""

    def test_sample_length_not_multiple_of_lanes(self):
        streams = seed_streams(1, 8)
        with pytest.raises(ValueError):
            warmup(jnp.zeros(12, dtype=jnp.float32), 1.0, streams, 5, Homogeneous(standard_normal))

    def test_negative_iterations(self):
        streams = seed_streams(1, 4)
        with pytest.raises(ValueError):
            warmup(initialize_chains(0.0, 1, 4), 1.0, streams, -1, Homogeneous(standard_normal))

    def test_float64_samples_downcast_with_warning(self, caplog):
        streams = seed_streams(1, 4)
        samples = np.full(8, 0.25, dtype=np.float64)
        with caplog.at_level(logging.WARNING, logger='nucmc'):
            result = run_warmup(samples, 1.0, streams, 0, Homogeneous(standard_normal))

        assert result.samples.dtype == jnp.float32
        assert any("converted from float64 to float32" in r.getMessage() for r in caplog.records)

    def test_matching_dtype_no_warning(self, caplog):
        streams = seed_streams(1, 4)
        with caplog.at_level(logging.WARNING, logger='nucmc'):
            run_warmup(initialize_chains(0.0, 2, 4), 1.0, streams, 0, Homogeneous(standard_normal))
        assert not any("converted from" in r.getMessage() for r in caplog.records)

    def test_bad_stream_shape(self):
        with pytest.raises(ValueError):
            warmup(initialize_chains(0.0, 1, 4), 1.0, jnp.zeros((4, 3), dtype=jnp.uint32), 5,
                   Homogeneous(standard_normal))
