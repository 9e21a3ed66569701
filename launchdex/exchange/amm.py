"""
Launchdex Constant-Product AMM  (x * y = k)

Pure pricing and reserve transforms for a two-asset pool:
  - quote / get_amount_out / get_amount_in with a basis-point fee
  - pre-trade price impact in basis points
  - Uniswap-V2 style liquidity: optimal deposit amounts, mint, burn
  - exact-in and exact-out swaps returning a new ReservePair snapshot

Security features:
  - Every product and quotient is i128 range-checked (SafeMath)
  - get_amount_in rounds against the trader (+1 unit)
  - K captured before the reserves move and required to grow strictly
  - Minimum liquidity permanently withheld on the first deposit

Nothing here holds state or logs. Callers pass a ReservePair in and persist
the one that comes back.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from ..constants import (
    DEFAULT_FEE_BPS,
    FEE_DENOMINATOR,
    MINIMUM_LIQUIDITY,
    PRICE_PRECISION,
)
from ..exceptions import EngineError, ErrorKind
from .safemath import abs_diff, add, div, integer_sqrt, mul, mul_div, sub
from .validation import check_k_invariant, initial_liquidity


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReservePair:
    """Reserve snapshot of one pool. Created once per pool, never destroyed."""
    reserve0: int = 0
    reserve1: int = 0
    total_lp_supply: int = 0
    k_last: int = 0

    def __post_init__(self):
        if self.reserve0 < 0 or self.reserve1 < 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "reserves must be non-negative")
        if self.total_lp_supply < 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "LP supply must be non-negative")

    @property
    def k(self) -> int:
        return mul(self.reserve0, self.reserve1)

    @property
    def is_initialized(self) -> bool:
        return self.total_lp_supply > 0

    def reserves_for(self, zero_for_one: bool) -> Tuple[int, int]:
        """(reserve_in, reserve_out) for a swap in the given direction."""
        if zero_for_one:
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0


@dataclass(frozen=True)
class SwapResult:
    """Outcome of a validated swap: the new snapshot plus settlement amounts."""
    pair: ReservePair
    amount_in: int
    amount_out: int
    k_before: int
    k_after: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    """Canonical ordering: token0 < token1."""
    if token_a == token_b:
        raise EngineError(ErrorKind.INVALID_TOKEN_PAIR, "identical tokens")
    if token_a > token_b:
        token_a, token_b = token_b, token_a
    return token_a, token_b


def _fee_multiplier(fee_bps: int) -> int:
    if not 0 <= fee_bps < FEE_DENOMINATOR:
        raise EngineError(ErrorKind.FEE_TOO_HIGH, f"fee {fee_bps} bps out of range")
    return FEE_DENOMINATOR - fee_bps


def _require_reserves(reserve_in: int, reserve_out: int) -> None:
    if reserve_in <= 0 or reserve_out <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY)


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------

def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Equivalent amount of B for ``amount_a`` at the current reserve ratio."""
    if amount_a <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_INPUT_AMOUNT)
    _require_reserves(reserve_a, reserve_b)
    return mul_div(amount_a, reserve_b, reserve_a)


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> int:
    """
    Output for an exact input, fee taken from the input side.

        out = in * (10000 - fee) * Ro / (Ri * 10000 + in * (10000 - fee))
    """
    if amount_in <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_INPUT_AMOUNT)
    _require_reserves(reserve_in, reserve_out)

    amount_in_with_fee = mul(amount_in, _fee_multiplier(fee_bps))
    numerator = mul(amount_in_with_fee, reserve_out)
    denominator = add(mul(reserve_in, FEE_DENOMINATOR), amount_in_with_fee)
    return div(numerator, denominator)


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> int:
    """
    Input required for an exact output.

        in = Ri * out * 10000 / ((Ro - out) * (10000 - fee)) + 1

    The extra unit guarantees ``get_amount_out(get_amount_in(y)) >= y``.
    """
    if amount_out <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_OUTPUT_AMOUNT)
    _require_reserves(reserve_in, reserve_out)
    if amount_out >= reserve_out:
        raise EngineError(
            ErrorKind.INSUFFICIENT_RESERVE,
            f"requested {amount_out} of reserve {reserve_out}",
        )

    numerator = mul(mul(reserve_in, amount_out), FEE_DENOMINATOR)
    denominator = mul(sub(reserve_out, amount_out), _fee_multiplier(fee_bps))
    return add(div(numerator, denominator), 1)


def price_impact_bps(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> int:
    """
    Absolute spot-price move caused by the trade, in basis points.

    The prices ``Ro / Ri`` and ``Ro' / Ri'`` are compared by
    cross-multiplication, so a pool with ``Ro < Ri`` never rounds its spot
    price down to zero.
    """
    _require_reserves(reserve_in, reserve_out)
    amount_out = get_amount_out(amount_in, reserve_in, reserve_out, fee_bps)

    new_reserve_in = add(reserve_in, amount_in)
    new_reserve_out = sub(reserve_out, amount_out)

    old_scaled = mul(reserve_out, new_reserve_in)
    new_scaled = mul(new_reserve_out, reserve_in)
    return mul_div(abs_diff(old_scaled, new_scaled), FEE_DENOMINATOR, old_scaled)


def spot_price(reserve_in: int, reserve_out: int, precision: int = PRICE_PRECISION) -> int:
    """Units of the out-asset per unit of the in-asset, scaled by ``precision``."""
    _require_reserves(reserve_in, reserve_out)
    return mul_div(reserve_out, precision, reserve_in)


# ---------------------------------------------------------------------------
# Liquidity
# ---------------------------------------------------------------------------

def optimal_liquidity_amounts(
    pair: ReservePair,
    amount0_desired: int,
    amount1_desired: int,
    amount0_min: int = 0,
    amount1_min: int = 0,
) -> Tuple[int, int]:
    """
    Deposit amounts that keep the pool ratio.

    An empty pool takes the desired amounts as-is. Otherwise one side is
    quoted from the other; the side that fits is used and checked against
    the caller's minimum.
    """
    if amount0_desired <= 0 or amount1_desired <= 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, "desired amounts must be positive")

    if pair.reserve0 == 0 and pair.reserve1 == 0:
        return amount0_desired, amount1_desired

    amount1_optimal = quote(amount0_desired, pair.reserve0, pair.reserve1)
    if amount1_optimal <= amount1_desired:
        if amount1_optimal < amount1_min:
            raise EngineError(
                ErrorKind.INSUFFICIENT_TOKEN1_AMOUNT,
                f"optimal {amount1_optimal} below minimum {amount1_min}",
            )
        return amount0_desired, amount1_optimal

    amount0_optimal = quote(amount1_desired, pair.reserve1, pair.reserve0)
    if amount0_optimal < amount0_min:
        raise EngineError(
            ErrorKind.INSUFFICIENT_TOKEN0_AMOUNT,
            f"optimal {amount0_optimal} below minimum {amount0_min}",
        )
    return amount0_optimal, amount1_desired


def mint_liquidity(
    pair: ReservePair,
    amount0: int,
    amount1: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> Tuple[ReservePair, int]:
    """
    Deposit both assets and mint LP units.

    The first deposit mints ``sqrt(amount0 * amount1)`` of which
    ``minimum_liquidity`` is counted in the total supply but credited to
    nobody, so the supply can never return to zero.

    Returns:
        (new pair, LP units credited to the depositor)
    """
    if amount0 <= 0 or amount1 <= 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, "deposit amounts must be positive")

    total_supply = pair.total_lp_supply
    if total_supply == 0:
        liquidity = initial_liquidity(amount0, amount1, minimum_liquidity)
        new_total = add(liquidity, minimum_liquidity)
    else:
        liquidity = min(
            mul_div(amount0, total_supply, pair.reserve0),
            mul_div(amount1, total_supply, pair.reserve1),
        )
        if liquidity <= 0:
            raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY_MINTED)
        new_total = add(total_supply, liquidity)

    reserve0 = add(pair.reserve0, amount0)
    reserve1 = add(pair.reserve1, amount1)
    new_pair = ReservePair(
        reserve0=reserve0,
        reserve1=reserve1,
        total_lp_supply=new_total,
        k_last=mul(reserve0, reserve1),
    )
    return new_pair, liquidity


def burn_liquidity(
    pair: ReservePair,
    liquidity: int,
    minimum_liquidity: int = MINIMUM_LIQUIDITY,
) -> Tuple[ReservePair, int, int]:
    """
    Burn LP units for a proportional share of both reserves.

    Returns:
        (new pair, amount0, amount1)
    """
    if liquidity <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY_BURNED)
    total_supply = pair.total_lp_supply
    withdrawable = sub(total_supply, minimum_liquidity)
    if liquidity > withdrawable:
        raise EngineError(
            ErrorKind.INSUFFICIENT_LIQUIDITY,
            f"burn {liquidity} exceeds withdrawable {withdrawable}",
        )

    amount0 = mul_div(liquidity, pair.reserve0, total_supply)
    amount1 = mul_div(liquidity, pair.reserve1, total_supply)
    if amount0 <= 0 or amount1 <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY_BURNED)

    reserve0 = sub(pair.reserve0, amount0)
    reserve1 = sub(pair.reserve1, amount1)
    new_pair = ReservePair(
        reserve0=reserve0,
        reserve1=reserve1,
        total_lp_supply=sub(total_supply, liquidity),
        k_last=mul(reserve0, reserve1),
    )
    return new_pair, amount0, amount1


# ---------------------------------------------------------------------------
# Swaps
# ---------------------------------------------------------------------------

def _apply_swap(
    pair: ReservePair,
    zero_for_one: bool,
    amount_in: int,
    amount_out: int,
) -> SwapResult:
    reserve_in, reserve_out = pair.reserves_for(zero_for_one)
    # K is captured before either reserve moves
    k_before = mul(reserve_in, reserve_out)

    new_reserve_in = add(reserve_in, amount_in)
    new_reserve_out = sub(reserve_out, amount_out)
    k_after = check_k_invariant(reserve_in, reserve_out, new_reserve_in, new_reserve_out)

    if zero_for_one:
        new_pair = replace(pair, reserve0=new_reserve_in, reserve1=new_reserve_out)
    else:
        new_pair = replace(pair, reserve0=new_reserve_out, reserve1=new_reserve_in)
    return SwapResult(
        pair=new_pair,
        amount_in=amount_in,
        amount_out=amount_out,
        k_before=k_before,
        k_after=k_after,
    )


def swap_exact_in(
    pair: ReservePair,
    amount_in: int,
    zero_for_one: bool,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> SwapResult:
    """Swap an exact input amount. ``zero_for_one`` sells token0 for token1."""
    reserve_in, reserve_out = pair.reserves_for(zero_for_one)
    amount_out = get_amount_out(amount_in, reserve_in, reserve_out, fee_bps)
    if amount_out <= 0:
        raise EngineError(ErrorKind.INSUFFICIENT_OUTPUT_AMOUNT, "trade rounds to zero")
    return _apply_swap(pair, zero_for_one, amount_in, amount_out)


def swap_exact_out(
    pair: ReservePair,
    amount_out: int,
    zero_for_one: bool,
    fee_bps: int = DEFAULT_FEE_BPS,
) -> SwapResult:
    """Swap for an exact output amount, charging the rounded-up input."""
    reserve_in, reserve_out = pair.reserves_for(zero_for_one)
    amount_in = get_amount_in(amount_out, reserve_in, reserve_out, fee_bps)
    return _apply_swap(pair, zero_for_one, amount_in, amount_out)
