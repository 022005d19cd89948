"""
Test suite for input parsing and validation.

Validates:
1. Parsing: separators, junk tokens, non-finite values
2. Field checks: demands, service level, alpha, horizon, buffer, iterations
3. Combined checks: first failure wins, in form order

Author: TRR Buffer Planner Team
"""

import math

import pytest

from trr_buffer.domain.validation import (
    InputValidationError,
    ValidationMessages,
    parse_demand_text,
    require_valid,
    validate_alpha,
    validate_buffer_inputs,
    validate_demands,
    validate_horizon_days,
    validate_iterations,
    validate_reverse_inputs,
    validate_seed,
    validate_service_level,
    validate_target_buffer,
)


class TestParseDemandText:
    def test_mixed_separators(self):
        assert parse_demand_text("8, 12\n9 0\t5,,3") == [8.0, 12.0, 9.0, 0.0, 5.0, 3.0]

    def test_junk_tokens_dropped(self):
        assert parse_demand_text("4 abc 7 inf nan -2") == [4.0, 7.0, -2.0]

    def test_empty_text(self):
        assert parse_demand_text("") == []
        assert parse_demand_text("  , \n ") == []


class TestFieldChecks:
    def test_demands(self):
        assert validate_demands([1, 0, 3]) == (True, "")
        assert validate_demands([]) == (False, ValidationMessages.EMPTY_DEMANDS)
        assert validate_demands([1.0] * 49) == (False, ValidationMessages.TOO_MANY_POINTS)
        assert validate_demands([1.0] * 48)[0] is True
        assert validate_demands([3, -1]) == (False, ValidationMessages.NEGATIVE_DEMAND)
        assert validate_demands([1, math.nan]) == (False, ValidationMessages.EMPTY_DEMANDS)

    def test_service_level(self):
        assert validate_service_level(50)[0] is True
        assert validate_service_level(99.99)[0] is True
        assert validate_service_level(49.9) == (False, ValidationMessages.SERVICE_LEVEL_RANGE)
        assert validate_service_level(100) == (False, ValidationMessages.SERVICE_LEVEL_RANGE)

    def test_alpha(self):
        assert validate_alpha(0.15)[0] is True
        assert validate_alpha(1.0)[0] is True
        assert validate_alpha(0.0) == (False, ValidationMessages.ALPHA_RANGE)
        assert validate_alpha(1.5)[0] is False

    def test_horizon(self):
        assert validate_horizon_days(0)[0] is True
        assert validate_horizon_days(9)[0] is True
        assert validate_horizon_days(-1) == (False, ValidationMessages.HORIZON_NEGATIVE)

    def test_target_buffer(self):
        assert validate_target_buffer(0.1)[0] is True
        assert validate_target_buffer(0) == (False, ValidationMessages.BUFFER_NOT_POSITIVE)

    def test_iterations(self):
        assert validate_iterations(10000)[0] is True
        assert validate_iterations(100000)[0] is True
        assert validate_iterations(5000) == (False, ValidationMessages.ITERATIONS_RANGE)
        assert validate_iterations(20000.0)[0] is False
        assert validate_iterations(True)[0] is False

    def test_seed(self):
        assert validate_seed(0)[0] is True
        assert validate_seed(42)[0] is True
        assert validate_seed(-1) == (False, ValidationMessages.SEED_NEGATIVE)
        assert validate_seed(1.5)[0] is False


class TestCombinedChecks:
    def test_buffer_inputs_first_failure(self):
        ok, msg = validate_buffer_inputs([], 10, -1, 5)
        assert ok is False
        assert msg == ValidationMessages.EMPTY_DEMANDS

        ok, msg = validate_buffer_inputs([1, 2], 95, -1, 5)
        assert msg == ValidationMessages.ALPHA_RANGE

    def test_buffer_inputs_valid(self):
        assert validate_buffer_inputs([1, 2, 3], 95, 9, 0.15, 50000) == (True, "")

    def test_iterations_checked_only_when_given(self):
        assert validate_buffer_inputs([1, 2, 3], 95, 9, 0.15)[0] is True
        ok, msg = validate_buffer_inputs([1, 2, 3], 95, 9, 0.15, 10)
        assert msg == ValidationMessages.ITERATIONS_RANGE

    def test_seed_checked_when_given(self):
        assert validate_buffer_inputs([1, 2, 3], 95, 9, 0.15, 50000, 0) == (True, "")
        ok, msg = validate_buffer_inputs([1, 2, 3], 95, 9, 0.15, 50000, -3)
        assert msg == ValidationMessages.SEED_NEGATIVE
        ok, msg = validate_reverse_inputs([1, 2, 3], 5, 95, 0.15, None, -3)
        assert msg == ValidationMessages.SEED_NEGATIVE

    def test_reverse_inputs_order(self):
        ok, msg = validate_reverse_inputs([1, 2], 0, 10, 0.15)
        assert msg == ValidationMessages.BUFFER_NOT_POSITIVE

        ok, msg = validate_reverse_inputs([1, 2], 10, 10, 0.15)
        assert msg == ValidationMessages.SERVICE_LEVEL_RANGE

    def test_require_valid(self):
        require_valid((True, ""))
        with pytest.raises(InputValidationError, match="Current buffer"):
            require_valid(validate_target_buffer(-3))
        assert issubclass(InputValidationError, ValueError)
