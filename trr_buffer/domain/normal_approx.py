"""
Fast approximations of the standard normal distribution.

Two closed-form approximations are used throughout the buffer engine:

- CDF: Zelen & Severo rational polynomial (Abramowitz & Stegun 26.2.17),
  absolute error below ~1e-5.
- Inverse CDF (quantile): Peter Acklam's piecewise rational approximation,
  relative error below ~1.2e-9 in the central region.

Both are wrapped in a small ``NormalApproximation`` value so callers can be
handed an alternative pair of functions without changing their code.

Author: TRR Buffer Planner Team
"""

import math
from dataclasses import dataclass
from typing import Callable


# Acklam coefficients: central region numerator (a) / denominator (b)
_A = (
    -39.6968302866538,
    220.946098424521,
    -275.928510446969,
    138.357751867269,
    -30.6647980661472,
    2.50662827745924,
)
_B = (
    -54.4760987982241,
    161.585836858041,
    -155.698979859887,
    66.8013118877197,
    -13.2806815528857,
)
# Tail regions numerator (c) / denominator (d)
_C = (
    -7.78489400243029e-03,
    -0.322396458041136,
    -2.40075827716184,
    -2.54973253934373,
    4.37466414146497,
    2.93816398269878,
)
_D = (
    7.78469570904146e-03,
    0.32246712907004,
    2.445134137143,
    3.75440866190742,
)

P_LOW = 0.02425
P_HIGH = 1 - P_LOW


def norm_cdf(z: float) -> float:
    """
    Approximate the standard normal CDF Φ(z).

    Args:
        z: standard score

    Returns:
        P(Z <= z) for Z ~ N(0, 1)
    """
    t = 1.0 / (1.0 + 0.2316419 * abs(z))
    d = 0.3989423 * math.exp(-z * z / 2.0)
    prob = d * t * (0.3193815 + t * (-0.3565638 + t * (1.781478 + t * (-1.821256 + t * 1.330274))))
    if z > 0:
        prob = 1.0 - prob
    return prob


def _tail(q: float) -> float:
    c1, c2, c3, c4, c5, c6 = _C
    d1, d2, d3, d4 = _D
    num = ((((c1 * q + c2) * q + c3) * q + c4) * q + c5) * q + c6
    den = (((d1 * q + d2) * q + d3) * q + d4) * q + 1.0
    return num / den


def norm_inv(p: float) -> float:
    """
    Approximate the standard normal quantile Φ⁻¹(p) (Acklam's algorithm).

    Args:
        p: probability

    Returns:
        z such that Φ(z) ≈ p; -inf at p=0, +inf at p=1, nan outside [0, 1]
    """
    if math.isnan(p) or p < 0.0 or p > 1.0:
        return math.nan
    if p == 0.0:
        return -math.inf
    if p == 1.0:
        return math.inf

    if p < P_LOW:
        q = math.sqrt(-2.0 * math.log(p))
        return _tail(q)

    if p <= P_HIGH:
        a1, a2, a3, a4, a5, a6 = _A
        b1, b2, b3, b4, b5 = _B
        q = p - 0.5
        r = q * q
        num = (((((a1 * r + a2) * r + a3) * r + a4) * r + a5) * r + a6) * q
        den = ((((b1 * r + b2) * r + b3) * r + b4) * r + b5) * r + 1.0
        return num / den

    q = math.sqrt(-2.0 * math.log(1.0 - p))
    return -_tail(q)


@dataclass(frozen=True)
class NormalApproximation:
    """
    Pair of standard-normal functions used by the tester and calculators.

    Attributes:
        cdf: z -> Φ(z)
        ppf: p -> Φ⁻¹(p)
        name: label for logs
    """
    cdf: Callable[[float], float]
    ppf: Callable[[float], float]
    name: str = "custom"


DEFAULT_NORMAL = NormalApproximation(cdf=norm_cdf, ppf=norm_inv, name="zelen-severo/acklam")
