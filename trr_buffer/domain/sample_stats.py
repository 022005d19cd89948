"""
Descriptive statistics of a demand series.
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class SampleStatistics:
    """
    Summary of a demand series.

    Attributes:
        count: number of observations
        total: sum of observations
        mean: arithmetic mean (0 for an empty series)
        std: sample standard deviation, ddof=1 (0 when count < 2)
    """
    count: int
    total: float
    mean: float
    std: float


def describe(series: Sequence[float]) -> SampleStatistics:
    """
    Compute count, sum, mean and sample standard deviation.

    Args:
        series: demand observations

    Returns:
        SampleStatistics
    """
    n = len(series)
    if n == 0:
        return SampleStatistics(count=0, total=0.0, mean=0.0, std=0.0)

    values = np.asarray(series, dtype=float)
    total = float(values.sum())
    mean = total / n
    std = float(np.std(values, ddof=1)) if n > 1 else 0.0

    return SampleStatistics(count=n, total=total, mean=mean, std=std)
