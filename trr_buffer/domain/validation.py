"""
Centralized validation rules for planner inputs.

The statistical engine assumes clean, finite, in-range numbers.  Whoever
collects the inputs (CLI, form, script) runs these checks first and shows
the message of the first failure.

Every validate_* function returns (is_valid, error_message).
"""
import math
import numbers
import re
from typing import List, Optional, Sequence, Tuple

from trr_buffer.config import (
    MAX_ALPHA,
    MAX_DEMAND_POINTS,
    MAX_ITERATIONS,
    MAX_SERVICE_LEVEL_PERCENT,
    MIN_ALPHA,
    MIN_ITERATIONS,
    MIN_SERVICE_LEVEL_PERCENT,
)

_TOKEN_SEPARATOR = re.compile(r"[\s,]+")


class ValidationMessages:
    """User-facing validation messages."""

    EMPTY_DEMANDS = "Please enter valid demand data."
    TOO_MANY_POINTS = f"Too many data points (max {MAX_DEMAND_POINTS} recommended)."
    NEGATIVE_DEMAND = "Demand values must be non-negative."
    SERVICE_LEVEL_RANGE = "Service level must be between 50% and 99.99%."
    ALPHA_RANGE = "Smoothing constant must be between 0.01 and 1.0."
    HORIZON_NEGATIVE = "TRR / Lead Time must be 0 or greater."
    BUFFER_NOT_POSITIVE = "Current buffer must be greater than 0."
    ITERATIONS_RANGE = f"Simulation iterations must be between {MIN_ITERATIONS} and {MAX_ITERATIONS}."
    SEED_NEGATIVE = "Random seed must be a non-negative integer (0 = random)."


class InputValidationError(ValueError):
    """Raised by require_valid() when an input check fails."""


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and not math.isnan(value)


def parse_demand_text(text: str) -> List[float]:
    """
    Parse free-form demand input ("8, 12\\n9 0 ...").

    Tokens are split on whitespace and commas; tokens that are not finite
    numbers are dropped.

    Args:
        text: raw user input

    Returns:
        Demand values in input order
    """
    values = []
    for token in _TOKEN_SEPARATOR.split(text or ""):
        if not token:
            continue
        try:
            value = float(token)
        except ValueError:
            continue
        if math.isfinite(value):
            values.append(value)
    return values


def validate_demands(demands: Sequence[float]) -> Tuple[bool, str]:
    """Demand series must be non-empty, short enough and non-negative."""
    if len(demands) == 0:
        return False, ValidationMessages.EMPTY_DEMANDS
    if len(demands) > MAX_DEMAND_POINTS:
        return False, ValidationMessages.TOO_MANY_POINTS
    if any(not _is_number(d) or not math.isfinite(d) for d in demands):
        return False, ValidationMessages.EMPTY_DEMANDS
    if any(d < 0 for d in demands):
        return False, ValidationMessages.NEGATIVE_DEMAND
    return True, ""


def validate_service_level(service_level_percent: float) -> Tuple[bool, str]:
    if not _is_number(service_level_percent) or not (
        MIN_SERVICE_LEVEL_PERCENT <= service_level_percent <= MAX_SERVICE_LEVEL_PERCENT
    ):
        return False, ValidationMessages.SERVICE_LEVEL_RANGE
    return True, ""


def validate_alpha(alpha: float) -> Tuple[bool, str]:
    if not _is_number(alpha) or not (MIN_ALPHA <= alpha <= MAX_ALPHA):
        return False, ValidationMessages.ALPHA_RANGE
    return True, ""


def validate_horizon_days(horizon_days: float) -> Tuple[bool, str]:
    if not _is_number(horizon_days) or horizon_days < 0 or math.isinf(horizon_days):
        return False, ValidationMessages.HORIZON_NEGATIVE
    return True, ""


def validate_target_buffer(target_buffer: float) -> Tuple[bool, str]:
    if not _is_number(target_buffer) or target_buffer <= 0 or math.isinf(target_buffer):
        return False, ValidationMessages.BUFFER_NOT_POSITIVE
    return True, ""


def validate_iterations(iterations: int) -> Tuple[bool, str]:
    if isinstance(iterations, bool) or not isinstance(iterations, numbers.Integral):
        return False, ValidationMessages.ITERATIONS_RANGE
    if not (MIN_ITERATIONS <= iterations <= MAX_ITERATIONS):
        return False, ValidationMessages.ITERATIONS_RANGE
    return True, ""


def validate_seed(random_seed: int) -> Tuple[bool, str]:
    if isinstance(random_seed, bool) or not isinstance(random_seed, numbers.Integral) or random_seed < 0:
        return False, ValidationMessages.SEED_NEGATIVE
    return True, ""


def _first_failure(checks: List[Tuple[bool, str]]) -> Tuple[bool, str]:
    for is_valid, message in checks:
        if not is_valid:
            return False, message
    return True, ""


def validate_buffer_inputs(
    demands: Sequence[float],
    service_level_percent: float,
    horizon_days: float,
    alpha: float,
    iterations: Optional[int] = None,
    random_seed: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate the forward calculation inputs.

    Returns:
        (is_valid, error_message) of the first failing check
    """
    checks = [
        validate_demands(demands),
        validate_service_level(service_level_percent),
        validate_alpha(alpha),
        validate_horizon_days(horizon_days),
    ]
    if iterations is not None:
        checks.append(validate_iterations(iterations))
    if random_seed is not None:
        checks.append(validate_seed(random_seed))
    return _first_failure(checks)


def validate_reverse_inputs(
    demands: Sequence[float],
    target_buffer: float,
    service_level_percent: float,
    alpha: float,
    iterations: Optional[int] = None,
    random_seed: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate the reverse calculation inputs.

    Returns:
        (is_valid, error_message) of the first failing check
    """
    checks = [
        validate_demands(demands),
        validate_target_buffer(target_buffer),
        validate_service_level(service_level_percent),
        validate_alpha(alpha),
    ]
    if iterations is not None:
        checks.append(validate_iterations(iterations))
    if random_seed is not None:
        checks.append(validate_seed(random_seed))
    return _first_failure(checks)


def require_valid(outcome: Tuple[bool, str]) -> None:
    """Raise InputValidationError if ``outcome`` is a failed check."""
    is_valid, message = outcome
    if not is_valid:
        raise InputValidationError(message)
