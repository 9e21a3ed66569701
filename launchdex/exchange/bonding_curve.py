"""
Launchdex Bonding Curve Engine

Pre-listing token sale priced by a curve over the tokens sold so far:
  - Constant product (pump.fun model): virtual base reserve x token reserve = k
  - Linear:       P(s) = base + s / k
  - Exponential:  P(s) = base * (1 + x + x^2/2),  x = s / k  (truncated series)
  - Sigmoid:      piecewise blend (half linear, exponential, double linear)

Lifecycle: BONDING -> GRADUATED, one way. Once the real base raised reaches
the graduation threshold the curve is closed and every quote or execution
fails with ALREADY_GRADUATED.

Security features:
  - Asymmetric sell penalty (sells only, paid to the fee recipient)
  - Quotes pin the state they were computed on; executing against any other
    state fails with STALE_QUOTE, so settlement never recomputes
  - Sells can never pay out more than the real (non-virtual) base raised
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

from ..constants import (
    BONDING_CURVE_SUPPLY,
    GRADUATION_THRESHOLD,
    PRICE_PRECISION,
    SHAPE_PRECISION,
    VIRTUAL_BASE_RESERVE,
)
from ..exceptions import EngineError, ErrorKind
from .safemath import BPS_DENOMINATOR, add, apply_bps, div, mul, mul_div, sub


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CurveShape(str, Enum):
    CONSTANT_PRODUCT = "constant_product"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    SIGMOID = "sigmoid"


class CurveStatus(str, Enum):
    BONDING = "bonding"
    GRADUATED = "graduated"


class CurveSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


# Shaped curve presets: (steepness k, sell penalty bps)
SHAPE_PRESETS = {
    CurveShape.LINEAR: (1_000_000_000, 200),
    CurveShape.EXPONENTIAL: (100_000_000, 300),   # steeper, heavier anti-dump penalty
    CurveShape.SIGMOID: (500_000_000, 200),
}
SHAPED_BASE_PRICE = 100


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CurveQuote:
    """
    A priced trade against one exact curve state.

    For buys ``base_amount`` is the base paid in; for sells it is the net
    base paid out to the seller after ``penalty``.
    """
    side: CurveSide
    base_amount: int
    token_amount: int
    penalty: int
    pre_state: "BondingCurveState"

    @property
    def gross_base(self) -> int:
        return add(self.base_amount, self.penalty)


@dataclass(frozen=True)
class BondingCurveState:
    """
    Curve snapshot for one launched token.

    ``base_reserve`` includes the virtual seed for constant-product curves;
    ``base_raised`` only counts real deposits.
    """
    total_supply: int
    tokens_sold: int
    tokens_remaining: int
    base_reserve: int
    k: int
    curve_shape: CurveShape = CurveShape.CONSTANT_PRODUCT
    sell_penalty_bps: int = 0
    base_price: int = 0
    base_raised: int = 0
    graduation_threshold: int = GRADUATION_THRESHOLD
    status: CurveStatus = CurveStatus.BONDING

    def __post_init__(self):
        if add(self.tokens_sold, self.tokens_remaining) != self.total_supply:
            raise EngineError(
                ErrorKind.INVALID_AMOUNT,
                "tokens_sold + tokens_remaining must equal total_supply",
            )
        if not 0 <= self.sell_penalty_bps <= BPS_DENOMINATOR:
            raise EngineError(ErrorKind.FEE_TOO_HIGH, f"sell penalty {self.sell_penalty_bps} bps")

    @property
    def is_graduated(self) -> bool:
        return self.status == CurveStatus.GRADUATED

    def _require_bonding(self) -> None:
        if self.is_graduated:
            raise EngineError(ErrorKind.ALREADY_GRADUATED, "curve has graduated to the AMM")

    # -- Pricing ------------------------------------------------------------

    def _price_linear(self) -> int:
        return add(self.base_price, mul_div(self.tokens_sold, SHAPE_PRECISION, self.k))

    def _price_exponential(self) -> int:
        x = mul_div(self.tokens_sold, SHAPE_PRECISION, self.k)
        x_squared = mul_div(x, x, SHAPE_PRECISION)
        exp_approx = add(add(SHAPE_PRECISION, x), x_squared // 2)
        return mul_div(self.base_price, exp_approx, SHAPE_PRECISION)

    def _price_sigmoid(self) -> int:
        midpoint = self.total_supply // 2
        if self.tokens_sold < midpoint // 2:
            return self._price_linear() // 2
        if self.tokens_sold < midpoint * 3 // 2:
            return self._price_exponential()
        return mul(self._price_linear(), 2)

    def current_price(self) -> int:
        """Spot price of one whole token in base units."""
        if self.curve_shape == CurveShape.CONSTANT_PRODUCT:
            if self.tokens_remaining <= 0:
                raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY, "curve sold out")
            return mul_div(self.base_reserve, PRICE_PRECISION, self.tokens_remaining)
        if self.tokens_sold == 0:
            return self.base_price
        if self.curve_shape == CurveShape.LINEAR:
            return self._price_linear()
        if self.curve_shape == CurveShape.EXPONENTIAL:
            return self._price_exponential()
        return self._price_sigmoid()

    def market_cap(self) -> int:
        if self.curve_shape == CurveShape.CONSTANT_PRODUCT:
            return mul(self.base_reserve, 2)
        return mul_div(self.tokens_sold, self.current_price(), PRICE_PRECISION)

    def graduation_progress_bps(self) -> int:
        if self.base_raised <= 0:
            return 0
        progress = mul_div(self.base_raised, BPS_DENOMINATOR, self.graduation_threshold)
        return min(progress, BPS_DENOMINATOR)

    # -- Quotes -------------------------------------------------------------

    def calculate_buy(self, base_in: int) -> CurveQuote:
        """Tokens received for ``base_in``. Buys are never penalised."""
        self._require_bonding()
        if base_in <= 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "buy amount must be positive")

        if self.curve_shape == CurveShape.CONSTANT_PRODUCT:
            new_base_reserve = add(self.base_reserve, base_in)
            new_token_reserve = div(self.k, new_base_reserve)
            tokens_out = sub(self.tokens_remaining, new_token_reserve)
        else:
            tokens_out = mul_div(base_in, PRICE_PRECISION, self.current_price())
            if tokens_out > self.tokens_remaining:
                raise EngineError(
                    ErrorKind.INSUFFICIENT_LIQUIDITY,
                    f"{tokens_out} tokens requested, {self.tokens_remaining} left on curve",
                )

        if tokens_out <= 0:
            raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY, "buy rounds to zero tokens")
        return CurveQuote(
            side=CurveSide.BUY,
            base_amount=base_in,
            token_amount=tokens_out,
            penalty=0,
            pre_state=self,
        )

    def calculate_sell(self, tokens_in: int) -> CurveQuote:
        """Net base paid for ``tokens_in`` after the sell penalty."""
        self._require_bonding()
        if tokens_in <= 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "sell amount must be positive")
        if tokens_in > self.tokens_sold:
            raise EngineError(
                ErrorKind.INSUFFICIENT_BALANCE,
                f"selling {tokens_in} but only {self.tokens_sold} sold",
            )

        if self.curve_shape == CurveShape.CONSTANT_PRODUCT:
            new_token_reserve = add(self.tokens_remaining, tokens_in)
            new_base_reserve = div(self.k, new_token_reserve)
            gross = sub(self.base_reserve, new_base_reserve)
        else:
            gross = mul_div(tokens_in, self.current_price(), PRICE_PRECISION)

        if gross <= 0:
            raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY, "sell rounds to zero")
        if gross > self.base_raised:
            raise EngineError(
                ErrorKind.INSUFFICIENT_RESERVE,
                f"payout {gross} exceeds real reserve {self.base_raised}",
            )

        penalty = apply_bps(gross, self.sell_penalty_bps)
        return CurveQuote(
            side=CurveSide.SELL,
            base_amount=sub(gross, penalty),
            token_amount=tokens_in,
            penalty=penalty,
            pre_state=self,
        )

    # -- Execution ----------------------------------------------------------

    def execute(self, quote: CurveQuote) -> "BondingCurveState":
        """Apply a quote computed against exactly this state."""
        self._require_bonding()
        if quote.pre_state != self:
            raise EngineError(ErrorKind.STALE_QUOTE, "quote was computed on a different state")

        if quote.side == CurveSide.BUY:
            base_raised = add(self.base_raised, quote.base_amount)
            status = CurveStatus.BONDING
            if base_raised >= self.graduation_threshold:
                status = CurveStatus.GRADUATED
            return replace(
                self,
                base_reserve=add(self.base_reserve, quote.base_amount),
                tokens_remaining=sub(self.tokens_remaining, quote.token_amount),
                tokens_sold=add(self.tokens_sold, quote.token_amount),
                base_raised=base_raised,
                status=status,
            )

        gross = quote.gross_base
        return replace(
            self,
            base_reserve=sub(self.base_reserve, gross),
            tokens_remaining=add(self.tokens_remaining, quote.token_amount),
            tokens_sold=sub(self.tokens_sold, quote.token_amount),
            base_raised=sub(self.base_raised, gross),
        )

    def execute_buy(self, quote: CurveQuote) -> "BondingCurveState":
        if quote.side != CurveSide.BUY:
            raise EngineError(ErrorKind.STALE_QUOTE, "expected a buy quote")
        return self.execute(quote)

    def execute_sell(self, quote: CurveQuote) -> "BondingCurveState":
        if quote.side != CurveSide.SELL:
            raise EngineError(ErrorKind.STALE_QUOTE, "expected a sell quote")
        return self.execute(quote)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def new_constant_product(
    total_supply: int = BONDING_CURVE_SUPPLY,
    virtual_reserve: int = VIRTUAL_BASE_RESERVE,
    graduation_threshold: int = GRADUATION_THRESHOLD,
    sell_penalty_bps: int = 0,
) -> BondingCurveState:
    """Constant-product curve seeded with a virtual base reserve."""
    if total_supply <= 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, "total supply must be positive")
    if virtual_reserve <= 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, "virtual reserve must be positive")
    return BondingCurveState(
        total_supply=total_supply,
        tokens_sold=0,
        tokens_remaining=total_supply,
        base_reserve=virtual_reserve,
        k=mul(virtual_reserve, total_supply),
        curve_shape=CurveShape.CONSTANT_PRODUCT,
        sell_penalty_bps=sell_penalty_bps,
        graduation_threshold=graduation_threshold,
    )


def _new_shaped(
    shape: CurveShape,
    total_supply: int,
    graduation_threshold: int,
) -> BondingCurveState:
    if total_supply <= 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, "total supply must be positive")
    k, penalty_bps = SHAPE_PRESETS[shape]
    return BondingCurveState(
        total_supply=total_supply,
        tokens_sold=0,
        tokens_remaining=total_supply,
        base_reserve=0,
        k=k,
        curve_shape=shape,
        sell_penalty_bps=penalty_bps,
        base_price=SHAPED_BASE_PRICE,
        graduation_threshold=graduation_threshold,
    )


def new_linear(
    total_supply: int = BONDING_CURVE_SUPPLY,
    graduation_threshold: int = GRADUATION_THRESHOLD,
) -> BondingCurveState:
    return _new_shaped(CurveShape.LINEAR, total_supply, graduation_threshold)


def new_exponential(
    total_supply: int = BONDING_CURVE_SUPPLY,
    graduation_threshold: int = GRADUATION_THRESHOLD,
) -> BondingCurveState:
    return _new_shaped(CurveShape.EXPONENTIAL, total_supply, graduation_threshold)


def new_sigmoid(
    total_supply: int = BONDING_CURVE_SUPPLY,
    graduation_threshold: int = GRADUATION_THRESHOLD,
) -> BondingCurveState:
    return _new_shaped(CurveShape.SIGMOID, total_supply, graduation_threshold)


def new_curve(
    shape: CurveShape,
    total_supply: int = BONDING_CURVE_SUPPLY,
    virtual_reserve: int = VIRTUAL_BASE_RESERVE,
    graduation_threshold: int = GRADUATION_THRESHOLD,
) -> BondingCurveState:
    """Build a curve of any shape; ``virtual_reserve`` only applies to constant product."""
    shape = CurveShape(shape)
    if shape == CurveShape.CONSTANT_PRODUCT:
        return new_constant_product(total_supply, virtual_reserve, graduation_threshold)
    return _new_shaped(shape, total_supply, graduation_threshold)


def graduation_liquidity(state: BondingCurveState) -> Tuple[int, int]:
    """(base, tokens) to seed the AMM pool: real base raised and unsold tokens."""
    return state.base_raised, state.tokens_remaining
