"""
Launchdex Invariant & Slippage Validator

Pure predicates over reserve / price snapshots. Each check either returns
(sometimes the value it computed) or raises EngineError; none of them
mutates anything, so a failing check aborts the caller before any transfer
or commit happens.

Checks:
  - K invariant (strict growth on swaps, non-decreasing on liquidity events)
  - Minimum-liquidity floor on the first deposit
  - Caller slippage bounds (min output / max input)
  - Price-impact ceiling for AMM trades, price-move ceiling for curve trades
  - Dust thresholds and transaction deadlines
"""

from __future__ import annotations

from ..constants import (
    DEFAULT_FEE_BPS,
    MAX_PRICE_IMPACT_BPS,
    MIN_LIQUIDITY_AMOUNT,
    MIN_SWAP_AMOUNT,
    MINIMUM_LIQUIDITY,
)
from ..exceptions import EngineError, ErrorKind
from .safemath import abs_diff, integer_sqrt, mul, mul_div, sub, BPS_DENOMINATOR


# ---------------------------------------------------------------------------
# K invariant
# ---------------------------------------------------------------------------

def check_k_invariant(
    reserve0_before: int,
    reserve1_before: int,
    reserve0_after: int,
    reserve1_after: int,
) -> int:
    """
    Swap invariant: the reserve product must strictly increase.

    Fee revenue has to show up as pool growth, so equality is rejected too.
    Returns the new K.
    """
    k_before = mul(reserve0_before, reserve1_before)
    k_after = mul(reserve0_after, reserve1_after)
    if k_after <= k_before:
        raise EngineError(
            ErrorKind.K_INVARIANT_VIOLATED,
            f"k {k_before} -> {k_after}",
        )
    return k_after


def check_k_non_decreasing(
    reserve0_before: int,
    reserve1_before: int,
    reserve0_after: int,
    reserve1_after: int,
) -> int:
    """Liquidity-event variant of the K check (equality allowed)."""
    k_before = mul(reserve0_before, reserve1_before)
    k_after = mul(reserve0_after, reserve1_after)
    if k_after < k_before:
        raise EngineError(
            ErrorKind.K_INVARIANT_VIOLATED,
            f"k decreased {k_before} -> {k_after}",
        )
    return k_after


# ---------------------------------------------------------------------------
# Liquidity floor
# ---------------------------------------------------------------------------

def initial_liquidity(
    amount0: int,
    amount1: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> int:
    """
    LP units credited for the first deposit: ``sqrt(a0 * a1) - minimum``.

    The withheld minimum is never assignable to any holder.
    """
    root = integer_sqrt(mul(amount0, amount1))
    if root <= minimum_liquidity:
        raise EngineError(
            ErrorKind.INSUFFICIENT_LIQUIDITY_MINTED,
            f"sqrt(k) {root} does not exceed minimum liquidity {minimum_liquidity}",
        )
    return sub(root, minimum_liquidity)


def check_reserves(reserve0: int, reserve1: int) -> None:
    if reserve0 <= 0 or reserve1 <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY, "pool has no liquidity")


def check_liquidity_amount(amount: int, minimum: int = MIN_LIQUIDITY_AMOUNT) -> None:
    if amount < minimum:
        raise EngineError(
            ErrorKind.INSUFFICIENT_LIQUIDITY,
            f"liquidity amount {amount} below minimum {minimum}",
        )


def check_swap_amount(amount: int, minimum: int = MIN_SWAP_AMOUNT) -> None:
    if amount < minimum:
        raise EngineError(
            ErrorKind.INSUFFICIENT_INPUT_AMOUNT,
            f"swap amount {amount} below minimum {minimum}",
        )


# ---------------------------------------------------------------------------
# Slippage
# ---------------------------------------------------------------------------

def check_min_output(amount_out: int, min_out: int) -> None:
    if amount_out < min_out:
        raise EngineError(
            ErrorKind.SLIPPAGE_EXCEEDED,
            f"output {amount_out} below minimum {min_out}",
        )


def check_max_input(amount_in: int, max_in: int) -> None:
    if amount_in > max_in:
        raise EngineError(
            ErrorKind.SLIPPAGE_EXCEEDED,
            f"input {amount_in} above maximum {max_in}",
        )


def check_price_impact(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    max_bps: int = MAX_PRICE_IMPACT_BPS,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> int:
    """Reject AMM trades that move the spot price more than ``max_bps``."""
    from .amm import price_impact_bps

    impact = price_impact_bps(amount_in, reserve_in, reserve_out, fee_bps)
    if impact > max_bps:
        raise EngineError(
            ErrorKind.PRICE_IMPACT_TOO_HIGH,
            f"impact {impact} bps exceeds {max_bps} bps",
        )
    return impact


def check_price_change(old_price: int, new_price: int, max_bps: int = MAX_PRICE_IMPACT_BPS) -> int:
    """
    Bonding-curve price move ceiling.

    A curve with no prior price (first trade) always passes.
    """
    if old_price == 0:
        return 0
    change = mul_div(abs_diff(new_price, old_price), BPS_DENOMINATOR, old_price)
    if change > max_bps:
        raise EngineError(
            ErrorKind.PRICE_IMPACT_TOO_HIGH,
            f"price moved {change} bps, ceiling {max_bps} bps",
        )
    return change


# ---------------------------------------------------------------------------
# Deadlines
# ---------------------------------------------------------------------------

def check_deadline(now: int, deadline: int) -> None:
    if now > deadline:
        raise EngineError(
            ErrorKind.TRANSACTION_EXPIRED,
            f"deadline {deadline} passed at {now}",
        )
