"""
Launchdex SafeMath

Checked signed 128-bit integer arithmetic for the pricing engine:
  - add / sub / mul / div with explicit range checks
  - mul_div computing the full intermediate product before dividing
  - basis-point application
  - Newton integer square root (fixed-step, deterministic)

Every helper raises EngineError instead of wrapping or silently widening.
Python ints are unbounded, so each result is range-checked against the
i128 window; division truncates toward zero like two's-complement integers.
"""

from __future__ import annotations

from ..constants import FEE_DENOMINATOR, I128_MAX, I128_MIN
from ..exceptions import EngineError, ErrorKind

BPS_DENOMINATOR = FEE_DENOMINATOR


def _range_kind(value: int) -> ErrorKind:
    return ErrorKind.OVERFLOW if value > I128_MAX else ErrorKind.UNDERFLOW


def checked(value: int) -> int:
    """Range-check a raw integer result against the i128 window."""
    if value > I128_MAX:
        raise EngineError(ErrorKind.OVERFLOW, f"{value} exceeds i128 max")
    if value < I128_MIN:
        raise EngineError(ErrorKind.UNDERFLOW, f"{value} below i128 min")
    return value


def add(a: int, b: int) -> int:
    result = a + b
    if result > I128_MAX or result < I128_MIN:
        raise EngineError(_range_kind(result), f"add({a}, {b})")
    return result


def sub(a: int, b: int) -> int:
    result = a - b
    if result > I128_MAX or result < I128_MIN:
        raise EngineError(_range_kind(result), f"sub({a}, {b})")
    return result


def mul(a: int, b: int) -> int:
    result = a * b
    if result > I128_MAX or result < I128_MIN:
        raise EngineError(ErrorKind.OVERFLOW, f"mul({a}, {b})")
    return result


def div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    if b == 0:
        raise EngineError(ErrorKind.DIVISION_BY_ZERO, f"div({a}, 0)")
    quotient = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        quotient = -quotient
    if quotient > I128_MAX:
        # only reachable as I128_MIN / -1
        raise EngineError(ErrorKind.OVERFLOW, f"div({a}, {b})")
    return quotient


def mul_div(a: int, b: int, c: int) -> int:
    """(a * b) / c with the product range-checked before the division."""
    return div(mul(a, b), c)


def apply_bps(amount: int, bps: int) -> int:
    """Portion of ``amount`` represented by ``bps`` basis points."""
    return mul_div(amount, bps, BPS_DENOMINATOR)


def integer_sqrt(y: int) -> int:
    """
    Floor square root via Newton's method.

    Seeds with ``y / 2 + 1`` and iterates ``x' = (y / x + x) / 2`` until the
    estimate stops decreasing.
    """
    if y < 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, f"sqrt of negative value {y}")
    if y == 0:
        return 0
    if y < 4:
        return 1
    z = y
    x = y // 2 + 1
    while x < z:
        z = x
        x = (y // x + x) // 2
    return z


sqrt = integer_sqrt


def abs_diff(a: int, b: int) -> int:
    return sub(a, b) if a >= b else sub(b, a)


def slippage_bps(price_before: int, price_after: int) -> int:
    """Signed price move from ``price_before`` to ``price_after`` in bps."""
    return mul_div(sub(price_after, price_before), BPS_DENOMINATOR, price_before)
