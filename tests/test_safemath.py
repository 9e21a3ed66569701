"""
Test suite for launchdex SafeMath

Covers:
  - checked i128 add / sub / mul / div
  - truncating division and the MIN / -1 corner
  - mul_div without widening
  - basis points, slippage, abs_diff
  - Newton integer square root
"""

import pytest

from launchdex.constants import I128_MAX, I128_MIN
from launchdex.exceptions import EngineError, ErrorKind
from launchdex.exchange.safemath import (
    abs_diff,
    add,
    apply_bps,
    checked,
    div,
    integer_sqrt,
    mul,
    mul_div,
    slippage_bps,
    sqrt,
    sub,
)


# ===========================================================================
# Arithmetic
# ===========================================================================

class TestCheckedArithmetic:
    """Range-checked primitives."""

    def test_add(self):
        assert add(2, 3) == 5
        assert add(-2, 3) == 1

    def test_add_overflow(self):
        with pytest.raises(EngineError) as exc:
            add(I128_MAX, 1)
        assert exc.value.kind == ErrorKind.OVERFLOW
        assert exc.value.kind.is_arithmetic
        assert not exc.value.kind.is_economic
        assert str(exc.value).startswith("OVERFLOW: ")

    def test_add_at_boundary(self):
        assert add(I128_MAX - 1, 1) == I128_MAX

    def test_sub(self):
        assert sub(10, 4) == 6
        assert sub(4, 10) == -6

    def test_sub_underflow(self):
        with pytest.raises(EngineError) as exc:
            sub(I128_MIN, 1)
        assert exc.value.kind == ErrorKind.UNDERFLOW

    def test_add_below_min_is_underflow(self):
        with pytest.raises(EngineError) as exc:
            add(I128_MIN, -1)
        assert exc.value.kind == ErrorKind.UNDERFLOW

    def test_sub_above_max_is_overflow(self):
        with pytest.raises(EngineError) as exc:
            sub(I128_MAX, -1)
        assert exc.value.kind == ErrorKind.OVERFLOW

    def test_mul(self):
        assert mul(7, 6) == 42
        assert mul(-7, 6) == -42

    def test_mul_overflow(self):
        with pytest.raises(EngineError) as exc:
            mul(2**64, 2**64)
        assert exc.value.kind == ErrorKind.OVERFLOW

    def test_div_truncates_toward_zero(self):
        assert div(7, 2) == 3
        assert div(-7, 2) == -3
        assert div(7, -2) == -3
        assert div(-7, -2) == 3

    def test_div_by_zero(self):
        with pytest.raises(EngineError) as exc:
            div(7, 0)
        assert exc.value.kind == ErrorKind.DIVISION_BY_ZERO

    def test_div_min_by_minus_one(self):
        with pytest.raises(EngineError) as exc:
            div(I128_MIN, -1)
        assert exc.value.kind == ErrorKind.OVERFLOW

    def test_checked_passes_in_range(self):
        assert checked(I128_MAX) == I128_MAX
        assert checked(I128_MIN) == I128_MIN

    def test_checked_rejects_out_of_range(self):
        with pytest.raises(EngineError, match="OVERFLOW"):
            checked(I128_MAX + 1)
        with pytest.raises(EngineError, match="UNDERFLOW"):
            checked(I128_MIN - 1)


class TestMulDiv:
    """(a * b) / c with the product computed first."""

    def test_no_pre_division(self):
        # 10 / 3 * 3 would lose precision; the product comes first
        assert mul_div(10, 3, 3) == 10
        assert mul_div(1, 999, 1000) == 0
        assert mul_div(7, 1000, 3) == 2333

    def test_intermediate_overflow_is_surfaced(self):
        with pytest.raises(EngineError) as exc:
            mul_div(10**20, 10**20, 10**10)
        assert exc.value.kind == ErrorKind.OVERFLOW

    def test_zero_divisor(self):
        with pytest.raises(EngineError) as exc:
            mul_div(1, 1, 0)
        assert exc.value.kind == ErrorKind.DIVISION_BY_ZERO


class TestBasisPoints:

    def test_apply_bps(self):
        assert apply_bps(10_000, 30) == 30
        assert apply_bps(1_000_000, 250) == 25_000
        assert apply_bps(99, 100) == 0

    def test_full_and_zero(self):
        assert apply_bps(12_345, 10_000) == 12_345
        assert apply_bps(12_345, 0) == 0

    def test_slippage_signed(self):
        assert slippage_bps(100, 110) == 1_000
        assert slippage_bps(100, 90) == -1_000
        assert slippage_bps(12, 15) == 2_500

    def test_slippage_from_zero_price(self):
        with pytest.raises(EngineError, match="DIVISION_BY_ZERO"):
            slippage_bps(0, 10)

    def test_abs_diff(self):
        assert abs_diff(3, 10) == 7
        assert abs_diff(10, 3) == 7
        assert abs_diff(5, 5) == 0


# ===========================================================================
# Square root
# ===========================================================================

class TestIntegerSqrt:
    """Floor square root via Newton iteration."""

    @pytest.mark.parametrize("y, expected", [
        (0, 0), (1, 1), (4, 2), (9, 3), (16, 4), (100, 10), (10_000, 100),
    ])
    def test_perfect_squares(self, y, expected):
        assert integer_sqrt(y) == expected

    @pytest.mark.parametrize("y, expected", [
        (2, 1), (3, 1), (5, 2), (15, 3), (17, 4), (99, 9), (1_000_001, 1_000),
    ])
    def test_floor(self, y, expected):
        assert integer_sqrt(y) == expected

    def test_large_value(self):
        assert integer_sqrt(2**126) == 2**63
        assert integer_sqrt(I128_MAX) == 13043817825332782212

    def test_result_is_floor_root(self):
        for y in (12_345, 987_654_321, 10**30 + 7):
            r = integer_sqrt(y)
            assert r * r <= y < (r + 1) * (r + 1)

    def test_negative_input(self):
        with pytest.raises(EngineError) as exc:
            integer_sqrt(-1)
        assert exc.value.kind == ErrorKind.INVALID_AMOUNT

    def test_alias(self):
        assert sqrt is integer_sqrt
