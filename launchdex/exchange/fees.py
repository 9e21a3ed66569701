"""
Launchpad fee configuration.

A FeeConfig is an immutable snapshot injected into every launchpad call:
the trading fee charged on curve buys, the flat creation fee, and the
treasury that collects both (plus any sell penalties).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from ..constants import CREATION_FEE, MAX_ADMIN_TRADING_FEE_BPS, TRADING_FEE_BPS
from ..exceptions import EngineError, ErrorKind
from .safemath import BPS_DENOMINATOR, apply_bps, sub


@dataclass(frozen=True)
class FeeConfig:
    trading_fee_bps: int = TRADING_FEE_BPS
    creation_fee: int = CREATION_FEE
    treasury: str = "treasury"

    def __post_init__(self):
        if self.creation_fee < 0:
            raise EngineError(
                ErrorKind.INVALID_FEE_CONFIGURATION,
                f"creation fee {self.creation_fee} is negative",
            )
        if not 0 <= self.trading_fee_bps <= BPS_DENOMINATOR:
            raise EngineError(
                ErrorKind.FEE_TOO_HIGH,
                f"trading fee {self.trading_fee_bps} bps outside 0..{BPS_DENOMINATOR}",
            )

    def with_trading_fee(self, trading_fee_bps: int) -> "FeeConfig":
        """Admin fee update, capped below the construction bound."""
        if trading_fee_bps > MAX_ADMIN_TRADING_FEE_BPS:
            raise EngineError(
                ErrorKind.FEE_TOO_HIGH,
                f"trading fee {trading_fee_bps} bps above admin ceiling {MAX_ADMIN_TRADING_FEE_BPS}",
            )
        return replace(self, trading_fee_bps=trading_fee_bps)

    def with_creation_fee(self, creation_fee: int) -> "FeeConfig":
        return replace(self, creation_fee=creation_fee)


def calculate_trading_fee(amount: int, fee_bps: int) -> int:
    if amount < 0:
        raise EngineError(ErrorKind.INVALID_AMOUNT, "fee base must be non-negative")
    return apply_bps(amount, fee_bps)


def apply_trading_fee(gross: int, config: FeeConfig) -> Tuple[int, int]:
    """Split ``gross`` into (net, fee) at the configured trading fee."""
    fee = calculate_trading_fee(gross, config.trading_fee_bps)
    return sub(gross, fee), fee
