"""TRR buffer planner: safety-stock buffers and maximum sustainable TRR."""

from .buffer_policy import calculate_buffer
from .domain.contracts import (
    BufferMethod,
    CalculationResult,
    DemandStats,
    ReverseResult,
)
from .domain.normal_approx import DEFAULT_NORMAL, NormalApproximation, norm_cdf, norm_inv
from .reverse_horizon import calculate_reverse_horizon
from .simulation import make_rng

__version__ = "1.0.0"

__all__ = [
    "calculate_buffer",
    "calculate_reverse_horizon",
    "BufferMethod",
    "CalculationResult",
    "DemandStats",
    "ReverseResult",
    "DEFAULT_NORMAL",
    "NormalApproximation",
    "norm_cdf",
    "norm_inv",
    "make_rng",
]
