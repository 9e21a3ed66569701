"""
Launchdex Pricing Engine

Deterministic integer pricing for pre-listing token sales and the AMM
pools they graduate into.

Components:
  - SafeMath (checked i128 arithmetic, Newton integer sqrt)
  - AMM Engine (constant product, Uniswap V2 model)
  - Bonding Curve Engine (constant product, linear, exponential, sigmoid)
  - Invariant & Slippage Validator
  - TWAP Oracle (8-slot ring buffer of cumulative prices)
  - Fees

Hosts (AMMPair, Launchpad) live in .pair and .launchpad and are imported
from there directly.
"""

from .safemath import (
    add,
    sub,
    mul,
    div,
    mul_div,
    apply_bps,
    integer_sqrt,
    sqrt,
    checked,
    abs_diff,
    slippage_bps,
)
from .amm import (
    ReservePair,
    SwapResult,
    sort_tokens,
    quote,
    get_amount_out,
    get_amount_in,
    price_impact_bps,
    spot_price,
    optimal_liquidity_amounts,
    mint_liquidity,
    burn_liquidity,
    swap_exact_in,
    swap_exact_out,
)
from .bonding_curve import (
    BondingCurveState,
    CurveQuote,
    CurveShape,
    CurveSide,
    CurveStatus,
    new_constant_product,
    new_linear,
    new_exponential,
    new_sigmoid,
    new_curve,
    graduation_liquidity,
)
from .validation import (
    check_k_invariant,
    check_k_non_decreasing,
    check_min_output,
    check_max_input,
    check_price_impact,
    check_price_change,
    check_swap_amount,
    check_liquidity_amount,
    check_reserves,
    check_deadline,
    initial_liquidity,
)
from .oracle import (
    PriceObservation,
    TWAPOracle,
)
from .reentrancy import ReentrancyGuard
from .fees import (
    FeeConfig,
    calculate_trading_fee,
    apply_trading_fee,
)

__all__ = [
    # SafeMath
    "add", "sub", "mul", "div", "mul_div", "apply_bps", "integer_sqrt", "sqrt",
    "checked", "abs_diff", "slippage_bps",
    # AMM
    "ReservePair", "SwapResult", "sort_tokens", "quote", "get_amount_out",
    "get_amount_in", "price_impact_bps", "spot_price", "optimal_liquidity_amounts",
    "mint_liquidity", "burn_liquidity", "swap_exact_in", "swap_exact_out",
    # Bonding curve
    "BondingCurveState", "CurveQuote", "CurveShape", "CurveSide", "CurveStatus",
    "new_constant_product", "new_linear", "new_exponential", "new_sigmoid",
    "new_curve", "graduation_liquidity",
    # Validation
    "check_k_invariant", "check_k_non_decreasing", "check_min_output",
    "check_max_input", "check_price_impact", "check_price_change",
    "check_swap_amount", "check_liquidity_amount", "check_reserves",
    "check_deadline", "initial_liquidity",
    # Oracle
    "PriceObservation", "TWAPOracle",
    # Host helpers
    "ReentrancyGuard", "FeeConfig", "calculate_trading_fee", "apply_trading_fee",
]
