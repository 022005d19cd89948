"""
Croston's method with the Syntetos-Boylan bias correction (SBA).

Purpose:
- Forecast a per-period demand rate for smooth AND intermittent series
- Keep the fitted state (smoothed size / interval / observed sizes) so the
  Monte Carlo engine can resample the same demand process
- Report MASE as a forecast-quality diagnostic

Key concepts:
- Croston: separate exponential smoothing of non-zero demand sizes (z_t)
  and of the intervals between them (p_t)
- SBA: forecast = (1 - alpha/2) * z_t / p_t, removing Croston's upward bias
- MASE: forecast MAE scaled by the MAE of the naive one-step forecast

Author: TRR Buffer Planner Team
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CrostonState:
    """
    Fitted Croston/SBA state.

    Attributes:
        smoothed_size: final smoothed size of non-zero demands (z_t)
        smoothed_interval: final smoothed interval between non-zero demands (p_t),
            in periods
        non_zero_values: non-zero observations in chronological order
        forecast: bias-corrected per-period demand rate
        alpha: smoothing constant used for the fit
        n_total: observations in the series
    """
    smoothed_size: float
    smoothed_interval: float
    non_zero_values: Tuple[float, ...]
    forecast: float
    alpha: float
    n_total: int = 0

    @property
    def n_nonzero(self) -> int:
        return len(self.non_zero_values)


# ---------------------------------------------------------------------------
# Fitting
# ---------------------------------------------------------------------------

def fit_croston_sba(series: Sequence[float], alpha: float) -> CrostonState:
    """
    Fit Croston's method and apply the SBA correction.

    The first non-zero demand at index i0 initialises the interval with the
    true gap from the start of the series (i0 + 1), so a late first demand
    does not bias the interval downwards.

    Args:
        series: demand observations, oldest first (zeros allowed)
        alpha: smoothing constant (0 < alpha <= 1)

    Returns:
        CrostonState with the smoothed components and forecast
    """
    n = len(series)
    non_zero = []
    smoothed_size = 0.0
    smoothed_interval = 1.0
    last_idx = -1

    for i, demand in enumerate(series):
        if demand <= 0:
            continue
        non_zero.append(float(demand))

        if last_idx == -1:
            smoothed_size = float(demand)
            smoothed_interval = float(i + 1)
        else:
            interval = i - last_idx
            smoothed_interval = alpha * interval + (1 - alpha) * smoothed_interval
            smoothed_size = alpha * demand + (1 - alpha) * smoothed_size
        last_idx = i

    if not non_zero:
        # No demand at all: one interval spanning the whole series
        smoothed_size = 0.0
        smoothed_interval = float(n) if n > 0 else 1.0
    elif len(non_zero) == 1:
        # A single observed gap is noisy; spread the one demand over the series
        smoothed_interval = float(n)

    if smoothed_interval > 0:
        forecast = (smoothed_size / smoothed_interval) * (1 - alpha / 2)
    else:
        forecast = 0.0

    logger.debug(
        "Croston/SBA fit: n=%d nonzero=%d z_t=%.4f p_t=%.4f forecast=%.4f",
        n, len(non_zero), smoothed_size, smoothed_interval, forecast,
    )

    return CrostonState(
        smoothed_size=smoothed_size,
        smoothed_interval=float(smoothed_interval),
        non_zero_values=tuple(non_zero),
        forecast=forecast,
        alpha=alpha,
        n_total=n,
    )


# ---------------------------------------------------------------------------
# Forecast quality
# ---------------------------------------------------------------------------

def compute_mase(series: Sequence[float], forecast: float) -> float:
    """
    Mean Absolute Scaled Error of a flat forecast.

    forecast_mae = mean(|d_i - forecast|)
    naive_mae    = mean(|d_i - d_{i-1}|)   over consecutive pairs
    MASE         = forecast_mae / naive_mae, or 0 when naive_mae is 0

    Args:
        series: demand observations
        forecast: per-period forecast compared against every observation

    Returns:
        MASE (< 1 means better than the naive forecast)
    """
    n = len(series)
    if n == 0:
        return 0.0

    forecast_mae = sum(abs(x - forecast) for x in series) / n

    diffs = [abs(series[i] - series[i - 1]) for i in range(1, n)]
    naive_mae = sum(diffs) / len(diffs) if diffs else 0.0

    return forecast_mae / naive_mae if naive_mae > 0 else 0.0
