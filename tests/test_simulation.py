"""
Test suite for the Monte Carlo horizon simulation.

Validates:
1. Trial walk: zero horizon, empty sizes, bad interval
2. Reproducibility: seeded generators give identical results
3. Statistics: simulated mean matches the renewal-process expectation
4. Quantile index: floor(p × N) clamped to N - 1
5. Parallel path: worker pool returns every trial

Author: TRR Buffer Planner Team
"""

import numpy as np
import pytest

from trr_buffer.domain.croston import fit_croston_sba
from trr_buffer.simulation import (
    _split_trials,
    make_rng,
    quantile_index,
    simulate_horizon_totals,
    simulate_service_quantile,
)


@pytest.fixture
def intermittent_state():
    return fit_croston_sba([0, 12, 0, 0, 30, 0, 5, 0, 0, 0, 18, 0], alpha=0.15)


class TestMakeRng:
    def test_seeded_is_reproducible(self):
        a = make_rng(42).random(5)
        b = make_rng(42).random(5)
        assert np.array_equal(a, b)

    def test_zero_means_unseeded(self):
        assert isinstance(make_rng(0), np.random.Generator)
        assert isinstance(make_rng(), np.random.Generator)


class TestSimulateHorizonTotals:
    """Compound renewal walk."""

    def test_zero_horizon_gives_zeros(self):
        totals = simulate_horizon_totals([5.0], 1.0, 0.0, 100, make_rng(1))
        assert totals.shape == (100,)
        assert not totals.any()

    def test_empty_sizes_gives_zeros(self):
        totals = simulate_horizon_totals([], 2.0, 5.0, 50, make_rng(1))
        assert not totals.any()

    def test_invalid_interval_raises(self):
        with pytest.raises(ValueError):
            simulate_horizon_totals([5.0], 0.0, 5.0, 10, make_rng(1))

    def test_totals_are_multiples_of_single_size(self):
        totals = simulate_horizon_totals([7.0], 1.0, 3.0, 500, make_rng(3))
        assert np.allclose(totals % 7.0, 0.0)

    def test_mean_matches_renewal_expectation(self):
        """Exponential gaps with mean 1 over H=5 → Poisson(5) arrivals."""
        totals = simulate_horizon_totals([10.0], 1.0, 5.0, 20000, make_rng(7))
        assert totals.mean() == pytest.approx(50.0, rel=0.05)

    def test_longer_horizon_more_demand(self):
        short = simulate_horizon_totals([4.0, 8.0], 2.0, 2.0, 5000, make_rng(11))
        long = simulate_horizon_totals([4.0, 8.0], 2.0, 20.0, 5000, make_rng(11))
        assert long.mean() > short.mean()


class TestQuantileIndex:
    def test_floor(self):
        assert quantile_index(0.95, 100) == 95
        assert quantile_index(0.5, 3) == 1

    def test_clamped_to_last(self):
        assert quantile_index(0.9999, 100) == 99
        assert quantile_index(1.0, 10) == 9

    def test_single_trial(self):
        assert quantile_index(0.5, 1) == 0


class TestSimulateServiceQuantile:
    """Quantile and mean of the simulated totals."""

    def test_same_seed_same_result(self, intermittent_state):
        a = simulate_service_quantile(intermittent_state, 2.0, 0.95, 3000, make_rng(5))
        b = simulate_service_quantile(intermittent_state, 2.0, 0.95, 3000, make_rng(5))
        assert a == b

    def test_quantile_not_below_mean_at_high_service(self, intermittent_state):
        summary = simulate_service_quantile(intermittent_state, 3.0, 0.95, 5000, make_rng(8))
        assert summary.quantile >= summary.mean
        assert summary.n_simulations == 5000

    def test_zero_horizon(self, intermittent_state):
        summary = simulate_service_quantile(intermittent_state, 0.0, 0.9, 100, make_rng(2))
        assert summary.quantile == 0.0
        assert summary.mean == 0.0

    def test_rejects_zero_simulations(self, intermittent_state):
        with pytest.raises(ValueError):
            simulate_service_quantile(intermittent_state, 1.0, 0.9, 0, make_rng(1))

    def test_parallel_workers(self, intermittent_state):
        summary = simulate_service_quantile(
            intermittent_state, 2.0, 0.9, 2000, make_rng(9), n_workers=2,
        )
        assert summary.n_simulations == 2000
        assert summary.mean > 0.0
        assert summary.quantile >= 0.0

    def test_parallel_agrees_with_serial(self, intermittent_state):
        serial = simulate_service_quantile(intermittent_state, 2.0, 0.9, 6000, make_rng(21))
        parallel = simulate_service_quantile(
            intermittent_state, 2.0, 0.9, 6000, make_rng(21), n_workers=2,
        )
        assert parallel.mean == pytest.approx(serial.mean, rel=0.1)


class TestSplitTrials:
    def test_split_covers_all(self):
        counts = _split_trials(10, 3)
        assert counts == [4, 3, 3]
        assert sum(counts) == 10
