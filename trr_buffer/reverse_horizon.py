"""
Reverse calculation: the longest replenishment horizon a buffer can cover.

Predictable demand inverts the normal buffer formula.  With y = √H:

    forecast × y² + z × σ × y - buffer = 0

base stock grows linearly with H while safety stock grows with √H, so the
relation is a quadratic in y.  The positive root gives H = y².

Intermittent demand has no closed form: a binary search over H keeps the
largest horizon whose simulated service-level quantile still fits inside
the buffer.  Every probe reruns the full Monte Carlo simulation.

Results are capped at MAX_HORIZON_DAYS and returned in days.
"""

import logging
import math
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import Optional, Sequence, Tuple

import numpy as np

from trr_buffer.buffer_policy import (
    MONTE_CARLO_EXPLANATION,
    DemandProfile,
    analyze_demand,
    days_to_periods,
    normal_explanation,
    periods_to_days,
)
from trr_buffer.config import (
    DEFAULT_ITERATIONS,
    MAX_HORIZON_DAYS,
    SEARCH_MAX_STEPS,
    SEARCH_MIN_PERIODS,
    SEARCH_TOLERANCE,
)
from trr_buffer.domain.contracts import BufferMethod, ReverseResult
from trr_buffer.domain.normal_approx import DEFAULT_NORMAL, NormalApproximation
from trr_buffer.simulation import make_rng, simulate_service_quantile

logger = logging.getLogger(__name__)

NO_DATA_EXPLANATION = "No demand data - buffer supports maximum TRR."
LOW_FORECAST_EXPLANATION = "Low/zero demand forecast - buffer supports extended TRR."
INFEASIBLE_EXPLANATION = "Demand too high/variable for this buffer."

MIN_FORECAST = 1e-10


def solve_normal_horizon(
    forecast: float,
    z_std: float,
    target_buffer: float,
    max_horizon_periods: float,
) -> Tuple[float, str]:
    """
    Solve forecast·y² + z·σ·y − buffer = 0 for H = y².

    Args:
        forecast: per-period demand rate (quadratic coefficient)
        z_std: z × σ (linear coefficient)
        target_buffer: available buffer
        max_horizon_periods: cap on the answer

    Returns:
        (horizon in periods, explanation); explanation is empty when the
        regular quadratic root was used
    """
    a = forecast
    b = z_std
    c = -target_buffer

    if a < MIN_FORECAST:
        if b > 0 and target_buffer > 0:
            y = target_buffer / b
            horizon = y * y
        else:
            horizon = max_horizon_periods
        return min(horizon, max_horizon_periods), LOW_FORECAST_EXPLANATION

    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return 0.0, INFEASIBLE_EXPLANATION

    root = math.sqrt(discriminant)
    y = (-b + root) / (2 * a)
    if y > 0:
        horizon = y * y
    else:
        y2 = (-b - root) / (2 * a)
        horizon = y2 * y2 if y2 > 0 else 0.0

    return min(horizon, max_horizon_periods), ""


def search_monte_carlo_horizon(
    profile: DemandProfile,
    target_buffer: float,
    max_horizon_periods: float,
    iterations: int,
    rng: np.random.Generator,
    n_workers: int = 1,
) -> float:
    """
    Binary search for the largest horizon whose simulated quantile <= buffer.

    Bounded by SEARCH_MAX_STEPS probes and a SEARCH_TOLERANCE bracket.
    With n_workers > 1 one process pool serves every probe.

    Returns:
        Horizon in periods (0 if even the smallest probe fails)
    """
    if n_workers > 1 and profile.croston.n_nonzero > 0:
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            return _bisect_horizon(
                profile, target_buffer, max_horizon_periods, iterations, rng, n_workers, executor,
            )
    return _bisect_horizon(profile, target_buffer, max_horizon_periods, iterations, rng)


def _bisect_horizon(
    profile: DemandProfile,
    target_buffer: float,
    max_horizon_periods: float,
    iterations: int,
    rng: np.random.Generator,
    n_workers: int = 1,
    executor: Optional[Executor] = None,
) -> float:
    low, high = SEARCH_MIN_PERIODS, max_horizon_periods
    best = 0.0

    for step in range(SEARCH_MAX_STEPS):
        mid = (low + high) / 2
        if profile.croston.n_nonzero == 0:
            covered = True
        else:
            summary = simulate_service_quantile(
                profile.croston,
                mid,
                profile.service_level,
                n_simulations=iterations,
                rng=rng,
                n_workers=n_workers,
                executor=executor,
            )
            covered = summary.quantile <= target_buffer

        if covered:
            best = mid
            low = mid
        else:
            high = mid
        logger.debug("Horizon search step %d: H=%.4f covered=%s", step, mid, covered)

        if high - low < SEARCH_TOLERANCE:
            break

    return best


def calculate_reverse_horizon(
    demands: Sequence[float],
    target_buffer: float,
    service_level_percent: float,
    alpha: float,
    iterations: int = DEFAULT_ITERATIONS,
    *,
    rng: Optional[np.random.Generator] = None,
    n_workers: int = 1,
    normal: NormalApproximation = DEFAULT_NORMAL,
) -> ReverseResult:
    """
    Find the maximum TRR (days) a buffer sustains at a service level.

    Args:
        demands: per-period demand observations, oldest first
        target_buffer: current buffer in units (> 0)
        service_level_percent: target service level (50-99.99)
        alpha: Croston smoothing constant (0.01-1.0)
        iterations: Monte Carlo trials per search probe
        rng: numpy Generator shared by all probes (unseeded when None)
        n_workers: worker processes for each simulation
        normal: normal approximation used for Φ and Φ⁻¹

    Returns:
        ReverseResult with max_horizon in days
    """
    max_horizon_periods = days_to_periods(MAX_HORIZON_DAYS)

    if len(demands) == 0:
        logger.info("Reverse calculation: empty demand series, returning cap")
        return ReverseResult(
            max_horizon=float(MAX_HORIZON_DAYS),
            forecast=0.0,
            std=0.0,
            predictable=True,
            explanation=NO_DATA_EXPLANATION,
            p_value=1.0,
            max_horizon_periods=max_horizon_periods,
        )

    profile = analyze_demand(demands, service_level_percent, alpha, normal)
    forecast = profile.croston.forecast
    std = profile.stats.std

    if profile.verdict.predictable:
        method = BufferMethod.NORMAL
        horizon_periods, explanation = solve_normal_horizon(
            forecast, profile.z_score * std, target_buffer, max_horizon_periods,
        )
        if not explanation:
            explanation = normal_explanation(profile.verdict.p_value)
    else:
        method = BufferMethod.MONTE_CARLO
        if rng is None:
            rng = make_rng()
        horizon_periods = search_monte_carlo_horizon(
            profile, target_buffer, max_horizon_periods, iterations, rng, n_workers,
        )
        explanation = MONTE_CARLO_EXPLANATION

    max_horizon = periods_to_days(horizon_periods)
    logger.info(
        "Reverse: buffer=%.2f method=%s max_horizon=%.2f days",
        target_buffer, method.value, max_horizon,
    )

    return ReverseResult(
        max_horizon=max_horizon,
        forecast=forecast,
        std=std,
        predictable=profile.verdict.predictable,
        explanation=explanation,
        p_value=profile.verdict.p_value,
        mase=profile.mase,
        method=method,
        max_horizon_periods=horizon_periods,
    )
