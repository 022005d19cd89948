"""
Result contracts: typed, frozen dataclasses returned by the forward buffer
calculation and by the reverse horizon solver.

These records are the single interface between the statistical engine and
whatever renders the numbers (CLI, UI, report).  They are created fresh per
call and never mutated.

Objects
-------
BufferMethod       - which safety-stock model produced the result
DemandStats        - avg / sum / count of the input series
CalculationResult  - base stock, safety stock, total buffer + diagnostics
ReverseResult      - maximum sustainable horizon for a given buffer

total_buffer is derived in __post_init__ so the identity
    total_buffer == base_stock + safety_stock
cannot be broken by a caller.

Author: TRR Buffer Planner Team
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict


class BufferMethod(str, Enum):
    """Safety-stock model."""
    NORMAL = "Normal"
    MONTE_CARLO = "Monte Carlo"


@dataclass(frozen=True)
class DemandStats:
    """Plain descriptive numbers of the demand series."""
    avg: float
    sum: float
    count: int


EMPTY_DEMAND_STATS = DemandStats(avg=0.0, sum=0.0, count=0)


# ---------------------------------------------------------------------------
# CalculationResult
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CalculationResult:
    """
    Buffer for a horizon at a target service level.

    Attributes
    ----------
    predictable : bool
        True when the series passed the normality test.
    base_stock : float
        Expected demand over the horizon (forecast × horizon periods).
    safety_stock : float
        Extra stock for variability at the target service level (>= 0).
    total_buffer : float
        base_stock + safety_stock (derived).
    mase : float
        Forecast quality diagnostic.
    forecast : float
        Croston/SBA per-period demand rate.
    std : float
        Sample standard deviation of the series.
    p_value : float
        Anderson-Darling p-value (1 when the test was skipped).
    method : BufferMethod
    explanation : str
    demand_stats : DemandStats
    horizon_periods : float
        Horizon converted to forecast periods.
    z_score : float
        Standard-normal quantile of the clamped service level.
    service_level : float
        Clamped service level fraction actually used.
    """

    predictable: bool
    base_stock: float
    safety_stock: float
    mase: float
    forecast: float
    std: float
    p_value: float
    method: BufferMethod
    explanation: str = ""
    demand_stats: DemandStats = EMPTY_DEMAND_STATS
    horizon_periods: float = 0.0
    z_score: float = 0.0
    service_level: float = 0.0
    total_buffer: float = field(init=False)

    def __post_init__(self) -> None:
        if self.base_stock < 0:
            raise ValueError(f"base_stock must be >= 0, got {self.base_stock}")
        if self.safety_stock < 0:
            raise ValueError(f"safety_stock must be >= 0, got {self.safety_stock}")
        object.__setattr__(self, "total_buffer", self.base_stock + self.safety_stock)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["method"] = self.method.value
        return data


# ---------------------------------------------------------------------------
# ReverseResult
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReverseResult:
    """
    Longest horizon a fixed buffer can protect.

    Attributes
    ----------
    max_horizon : float
        Maximum sustainable TRR in days, within [0, MAX_HORIZON_DAYS].
    forecast, std, predictable, p_value, mase :
        Same meaning as in CalculationResult.
    explanation : str
        Which model / edge case produced the answer.
    method : BufferMethod
    max_horizon_periods : float
        max_horizon expressed in forecast periods.
    """

    max_horizon: float
    forecast: float
    std: float
    predictable: bool
    explanation: str
    p_value: float
    mase: float = 0.0
    method: BufferMethod = BufferMethod.NORMAL
    max_horizon_periods: float = 0.0

    def __post_init__(self) -> None:
        if self.max_horizon < 0:
            raise ValueError(f"max_horizon must be >= 0, got {self.max_horizon}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["method"] = self.method.value
        return data
