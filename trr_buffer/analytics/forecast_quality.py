"""
Forecast quality rating based on MASE.

MASE compares the Croston/SBA forecast with the naive "same as last period"
forecast:
    < 0.5  Excellent
    < 0.8  Good
    < 1.0  Fair
    >= 1.0 Poor (worse than naive)

A Poor rating on a short history triggers an advisory: more data points
usually stabilise the smoothed size and interval.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from trr_buffer.config import MAX_DEMAND_POINTS


class MaseRating(str, Enum):
    """Qualitative MASE bands."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


# (upper bound exclusive, rating)
MASE_BANDS = (
    (0.5, MaseRating.EXCELLENT),
    (0.8, MaseRating.GOOD),
    (1.0, MaseRating.FAIR),
)

LOW_ACCURACY_TITLE = "Forecast Accuracy Below Baseline"


@dataclass(frozen=True)
class ForecastQuality:
    """
    MASE with its rating and optional advisory.

    Attributes:
        mase: Mean Absolute Scaled Error
        rating: qualitative band
        advisory: message when the forecast does not beat the naive baseline
            on a short history, else None
    """
    mase: float
    rating: MaseRating
    advisory: Optional[str] = None


def rate_mase(mase: float) -> MaseRating:
    for upper, rating in MASE_BANDS:
        if mase < upper:
            return rating
    return MaseRating.POOR


def assess_forecast_quality(mase: float, n_points: int) -> ForecastQuality:
    """
    Rate a MASE value and attach the low-accuracy advisory when relevant.

    Args:
        mase: forecast MASE
        n_points: length of the demand history

    Returns:
        ForecastQuality
    """
    rating = rate_mase(mase)
    advisory = None
    if mase >= 1.0 and n_points < MAX_DEMAND_POINTS:
        advisory = (
            f"{LOW_ACCURACY_TITLE}: MASE {mase:.3f} means the forecast does not beat "
            f"a naive last-period forecast. Consider adding more history "
            f"({n_points} of up to {MAX_DEMAND_POINTS} periods used)."
        )
    return ForecastQuality(mase=mase, rating=rating, advisory=advisory)
