"""
Anderson-Darling normality test used to route a series to the normal
safety-stock formula or to the Monte Carlo engine.

The test statistic is corrected for small samples (Stephens):

    A*² = A² × (1 + 0.75/n + 2.25/n²)

and converted to a p-value with the D'Agostino & Stephens piecewise
approximation. Series shorter than MIN_SAMPLE_SIZE, or with no variance,
are declared predictable: there is not enough evidence to reject normality.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence

from trr_buffer.config import MIN_SAMPLE_SIZE, NORMALITY_ALPHA
from trr_buffer.domain.normal_approx import DEFAULT_NORMAL, NormalApproximation

logger = logging.getLogger(__name__)

LOG_FLOOR = 1e-10
MIN_STD = 1e-10


@dataclass(frozen=True)
class NormalityVerdict:
    """
    Outcome of the normality test.

    Attributes:
        predictable: True if normality is not rejected
        p_value: approximate p-value in [0, 1] (nan only if the statistic was nan)
        a_star: small-sample corrected statistic, None when the guard applied
    """
    predictable: bool
    p_value: float
    a_star: Optional[float] = None


def anderson_darling_statistic(
    series: Sequence[float],
    avg: float,
    std: float,
    normal: NormalApproximation = DEFAULT_NORMAL,
) -> float:
    """
    Small-sample corrected Anderson-Darling statistic A*² against N(avg, std²).

    Log arguments are floored at 1e-10 so extreme points never yield -inf.
    """
    n = len(series)
    x_asc = sorted(series)
    x_desc = sorted(series, reverse=True)

    s = 0.0
    for i in range(1, n + 1):
        f = normal.cdf((x_asc[i - 1] - avg) / std)
        g = normal.cdf((x_desc[i - 1] - avg) / std)
        s += (2 * i - 1) * (math.log(max(f, LOG_FLOOR)) + math.log(max(1 - g, LOG_FLOOR)))

    a2 = -n - s / n
    return a2 * (1 + 0.75 / n + 2.25 / n ** 2)


def _exp(x: float) -> float:
    # IEEE semantics: overflow saturates to +inf instead of raising
    if math.isnan(x) or x < 709.0:
        return math.exp(x)
    return math.inf


def anderson_darling_p_value(a_star: float) -> float:
    """Piecewise p-value approximation for A*², clamped to [0, 1]."""
    a = a_star
    if a < 0.2:
        p = 1 - _exp(-13.436 + 101.14 * a - 223.73 * a ** 2)
    elif a < 0.34:
        p = 1 - _exp(-8.318 + 42.796 * a - 59.938 * a ** 2)
    elif a < 0.6:
        p = _exp(0.9177 - 4.279 * a - 1.38 * a ** 2)
    else:
        p = _exp(1.2937 - 5.709 * a + 0.0186 * a ** 2)

    if math.isnan(p):
        return p
    return max(0.0, min(1.0, p))


def anderson_darling_test(
    series: Sequence[float],
    avg: float,
    std: float,
    normal: NormalApproximation = DEFAULT_NORMAL,
) -> NormalityVerdict:
    """
    Classify a demand series as predictable (near-normal) or not.

    Args:
        series: demand observations
        avg: sample mean of the series
        std: sample standard deviation of the series
        normal: normal approximation used for Φ

    Returns:
        NormalityVerdict; predictable when p > 0.05 or p is nan
    """
    n = len(series)
    if n < MIN_SAMPLE_SIZE or std < MIN_STD:
        logger.debug("Normality guard: n=%d std=%.3g -> predictable", n, std)
        return NormalityVerdict(predictable=True, p_value=1.0)

    a_star = anderson_darling_statistic(series, avg, std, normal)
    p_value = anderson_darling_p_value(a_star)
    predictable = math.isnan(p_value) or p_value > NORMALITY_ALPHA

    logger.debug("Anderson-Darling: n=%d A*=%.4f p=%.4f predictable=%s", n, a_star, p_value, predictable)
    return NormalityVerdict(predictable=predictable, p_value=p_value, a_star=a_star)
