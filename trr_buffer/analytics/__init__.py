"""Analytics package for forecast quality diagnostics."""

from .forecast_quality import (
    ForecastQuality,
    MaseRating,
    MASE_BANDS,
    assess_forecast_quality,
    rate_mase,
)

__all__ = [
    "ForecastQuality",
    "MaseRating",
    "MASE_BANDS",
    "assess_forecast_quality",
    "rate_mase",
]
