"""
Service-level based buffer calculation.

This module sizes the stock buffer needed to cover a replenishment horizon
(TRR = lead time + review period) at a target service level.

Policy Formula:
    Buffer = base stock + safety stock
    base stock   = forecast × H
    safety stock = z(p) × σ × √H                      (predictable demand)
                 = max(0, Q_p(D_H) - E[D_H])          (intermittent demand)

Where:
    - H: horizon in forecast periods (days / DAYS_PER_PERIOD)
    - forecast: Croston/SBA per-period rate
    - σ: sample standard deviation of the per-period demand
    - z(p): standard-normal quantile of the clamped service level
    - D_H: simulated demand over H (Monte Carlo), Q_p its p-quantile

The normal formula is used only when the Anderson-Darling test does not
reject normality; otherwise the Monte Carlo engine takes over.

Author: TRR Buffer Planner Team
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from trr_buffer.config import (
    DAYS_PER_PERIOD,
    DEFAULT_ITERATIONS,
    SERVICE_LEVEL_CEILING,
    SERVICE_LEVEL_FLOOR,
)
from trr_buffer.domain.contracts import (
    EMPTY_DEMAND_STATS,
    BufferMethod,
    CalculationResult,
    DemandStats,
)
from trr_buffer.domain.croston import CrostonState, compute_mase, fit_croston_sba
from trr_buffer.domain.normal_approx import DEFAULT_NORMAL, NormalApproximation
from trr_buffer.domain.normality import NormalityVerdict, anderson_darling_test
from trr_buffer.domain.sample_stats import SampleStatistics, describe
from trr_buffer.simulation import simulate_service_quantile

logger = logging.getLogger(__name__)

NO_DATA_EXPLANATION = "No demand data provided."
MONTE_CARLO_EXPLANATION = "Intermittent demand model (Monte Carlo simulation)."
NO_NONZERO_EXPLANATION = "No non-zero demand observed - no safety stock required."


def normal_explanation(p_value: float) -> str:
    return f"Normal distribution model used (p={p_value:.3f})."


def clamp_service_level(service_level_percent: float) -> float:
    """
    Convert a percentage to a fraction clamped to [0.5, 0.9999].

    The clamp keeps z finite and non-negative.
    """
    return min(SERVICE_LEVEL_CEILING, max(SERVICE_LEVEL_FLOOR, service_level_percent / 100))


def days_to_periods(days: float) -> float:
    return days / DAYS_PER_PERIOD


def periods_to_days(periods: float) -> float:
    return periods * DAYS_PER_PERIOD


@dataclass(frozen=True)
class DemandProfile:
    """
    Everything the forward and reverse calculations derive from the series
    before choosing a model.
    """
    stats: SampleStatistics
    croston: CrostonState
    verdict: NormalityVerdict
    mase: float
    service_level: float
    z_score: float

    @property
    def demand_stats(self) -> DemandStats:
        return DemandStats(avg=self.stats.mean, sum=self.stats.total, count=self.stats.count)


def analyze_demand(
    demands: Sequence[float],
    service_level_percent: float,
    alpha: float,
    normal: NormalApproximation = DEFAULT_NORMAL,
) -> DemandProfile:
    """
    Fit forecast, run the normality test and resolve the service level.

    Args:
        demands: non-empty demand series, oldest first
        service_level_percent: target service level in percent
        alpha: Croston smoothing constant
        normal: normal approximation used for Φ and Φ⁻¹

    Returns:
        DemandProfile
    """
    stats = describe(demands)
    croston = fit_croston_sba(demands, alpha)
    mase = compute_mase(demands, croston.forecast)
    verdict = anderson_darling_test(demands, stats.mean, stats.std, normal)
    service_level = clamp_service_level(service_level_percent)
    z_score = normal.ppf(service_level)

    return DemandProfile(
        stats=stats,
        croston=croston,
        verdict=verdict,
        mase=mase,
        service_level=service_level,
        z_score=z_score,
    )


def calculate_buffer(
    demands: Sequence[float],
    service_level_percent: float,
    horizon_days: float,
    alpha: float,
    iterations: int = DEFAULT_ITERATIONS,
    *,
    rng: Optional[np.random.Generator] = None,
    n_workers: int = 1,
    normal: NormalApproximation = DEFAULT_NORMAL,
) -> CalculationResult:
    """
    Compute base stock, safety stock and total buffer for a horizon.

    Args:
        demands: per-period demand observations, oldest first
        service_level_percent: target service level (50-99.99)
        horizon_days: TRR in days (>= 0)
        alpha: Croston smoothing constant (0.01-1.0)
        iterations: Monte Carlo trials, used only for non-normal demand
        rng: numpy Generator for the simulation (unseeded when None)
        n_workers: worker processes for the simulation
        normal: normal approximation used for Φ and Φ⁻¹

    Returns:
        CalculationResult

    Examples:
        >>> result = calculate_buffer([10] * 12, 95, 30, 0.15)
        >>> result.safety_stock
        0.0
    """
    if len(demands) == 0:
        logger.info("Buffer calculation skipped: empty demand series")
        return CalculationResult(
            predictable=True,
            base_stock=0.0,
            safety_stock=0.0,
            mase=0.0,
            forecast=0.0,
            std=0.0,
            p_value=1.0,
            method=BufferMethod.NORMAL,
            explanation=NO_DATA_EXPLANATION,
            demand_stats=EMPTY_DEMAND_STATS,
        )

    profile = analyze_demand(demands, service_level_percent, alpha, normal)
    horizon_periods = days_to_periods(horizon_days)
    forecast = profile.croston.forecast
    std = profile.stats.std

    base_stock = forecast * horizon_periods

    if profile.verdict.predictable:
        method = BufferMethod.NORMAL
        safety_stock = profile.z_score * std * math.sqrt(horizon_periods)
        explanation = normal_explanation(profile.verdict.p_value)
    else:
        method = BufferMethod.MONTE_CARLO
        if profile.croston.n_nonzero == 0:
            safety_stock = 0.0
            explanation = NO_NONZERO_EXPLANATION
        else:
            summary = simulate_service_quantile(
                profile.croston,
                horizon_periods,
                profile.service_level,
                n_simulations=iterations,
                rng=rng,
                n_workers=n_workers,
            )
            safety_stock = max(0.0, summary.quantile - summary.mean)
            explanation = MONTE_CARLO_EXPLANATION

    result = CalculationResult(
        predictable=profile.verdict.predictable,
        base_stock=base_stock,
        safety_stock=safety_stock,
        mase=profile.mase,
        forecast=forecast,
        std=std,
        p_value=profile.verdict.p_value,
        method=method,
        explanation=explanation,
        demand_stats=profile.demand_stats,
        horizon_periods=horizon_periods,
        z_score=profile.z_score,
        service_level=profile.service_level,
    )
    logger.info(
        "Buffer: n=%d H=%.2f periods method=%s base=%.2f safety=%.2f total=%.2f",
        profile.stats.count, horizon_periods, method.value,
        result.base_stock, result.safety_stock, result.total_buffer,
    )
    return result
