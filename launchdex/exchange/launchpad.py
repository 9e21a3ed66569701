"""
Launchdex Launchpad

Token launch flow on top of the bonding curve engine:
  - Launch: name/symbol validation, creation fee, curve seeded from config
  - Buy:  curve quote -> trading fee on gross tokens -> min_tokens bound ->
          optional price-move ceiling -> execute -> graduation check
  - Sell: curve quote (sell penalty to treasury) -> min_base bound -> execute
  - Graduation: real base raised + unsold tokens seed an AMMPair; the
    minted LP units are burned so the liquidity is locked forever

Security features:
  - Reentrancy lock around every quote/transfer/commit sequence
  - Quotes are executed against the exact state they were priced on
  - Deterministic token IDs (blake2b over creator, symbol and sequence)
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..config.loader import LaunchpadConfig
from ..constants import MAX_NAME_LENGTH, MAX_SYMBOL_LENGTH
from ..exceptions import EngineError, ErrorKind
from .amm import ReservePair, mint_liquidity, sort_tokens
from .bonding_curve import (
    BondingCurveState,
    CurveSide,
    CurveStatus,
    graduation_liquidity,
    new_curve,
)
from .fees import FeeConfig, apply_trading_fee
from .pair import AMMPair, TransferFn
from .reentrancy import ReentrancyGuard
from .safemath import slippage_bps
from .validation import (
    check_deadline,
    check_liquidity_amount,
    check_min_output,
    check_price_change,
)

logger = logging.getLogger(__name__)

BASE_ASSET = "BASE"


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class TokenLaunch:
    """A launched token and its curve. ``pair`` is set once it graduates."""
    token_id: str
    index: int
    creator: str
    name: str
    symbol: str
    curve: BondingCurveState
    created_at: int = 0
    pair: Optional[AMMPair] = field(default=None, repr=False)

    @property
    def status(self) -> CurveStatus:
        return self.curve.status

    @property
    def base_raised(self) -> int:
        return self.curve.base_raised

    @property
    def market_cap(self) -> int:
        return self.curve.market_cap()


@dataclass(frozen=True)
class TradeReceipt:
    """
    Settlement report for one curve trade.

    ``fee`` is the trading fee in tokens for buys and the sell penalty in
    base units for sells. ``token_amount`` is what the buyer received (net of
    fee) or what the seller gave up.
    """
    token_id: str
    side: CurveSide
    base_amount: int
    token_amount: int
    fee: int
    price_before: int
    price_after: int
    slippage_bps: int
    graduated: bool = False


# ---------------------------------------------------------------------------
# Launchpad
# ---------------------------------------------------------------------------

class Launchpad:
    """Registry of launched tokens and their bonding-curve markets."""

    def __init__(
        self,
        config: Optional[LaunchpadConfig] = None,
        transfer: Optional[TransferFn] = None,
        base_asset: str = BASE_ASSET,
    ):
        self.config = config or LaunchpadConfig()
        self.fees: FeeConfig = self.config.fees
        self.base_asset = base_asset
        self.address = "launchpad"
        self._transfer = transfer
        self._launches: Dict[str, TokenLaunch] = {}
        self._creator_index: Dict[str, List[str]] = {}
        self._sequence: int = 0
        self._guard = ReentrancyGuard(self.address)

    # -- Views --------------------------------------------------------------

    @property
    def token_count(self) -> int:
        return len(self._launches)

    def get_launch(self, token_id: str) -> TokenLaunch:
        launch = self._launches.get(token_id)
        if launch is None:
            raise EngineError(ErrorKind.TOKEN_NOT_FOUND, f"unknown token {token_id}")
        return launch

    def get_price(self, token_id: str) -> int:
        return self.get_launch(token_id).curve.current_price()

    def get_graduation_progress(self, token_id: str) -> int:
        return self.get_launch(token_id).curve.graduation_progress_bps()

    def get_creator_tokens(self, creator: str) -> List[str]:
        return list(self._creator_index.get(creator, []))

    # -- Admin --------------------------------------------------------------

    def update_fees(self, trading_fee_bps: int, creation_fee: Optional[int] = None) -> FeeConfig:
        fees = self.fees.with_trading_fee(trading_fee_bps)
        if creation_fee is not None:
            fees = fees.with_creation_fee(creation_fee)
        self.fees = fees
        logger.info(
            "Fees updated: trading=%d bps creation=%d",
            fees.trading_fee_bps, fees.creation_fee,
        )
        return fees

    # -- Internals ----------------------------------------------------------

    def _pay(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        if self._transfer is not None and amount > 0:
            self._transfer(asset, sender, recipient, amount)

    @staticmethod
    def _deterministic_token_id(creator: str, symbol: str, seq: int) -> str:
        raw = f"{creator}:{symbol}:{seq}".encode()
        return hashlib.blake2b(raw, digest_size=8).hexdigest()

    def _graduation_seed(self, token_id: str, curve: BondingCurveState) -> Tuple[int, int]:
        """
        Pair deposit amounts in (token0, token1) order, checked against the
        same floors the pair applies to a first deposit.
        """
        base_amount, token_amount = graduation_liquidity(curve)
        token0, _ = sort_tokens(self.base_asset, token_id)
        if token0 == self.base_asset:
            amount0, amount1 = base_amount, token_amount
        else:
            amount0, amount1 = token_amount, base_amount
        amm = self.config.amm
        check_liquidity_amount(amount0, amm.min_liquidity_amount)
        check_liquidity_amount(amount1, amm.min_liquidity_amount)
        mint_liquidity(ReservePair(), amount0, amount1, amm.minimum_liquidity)
        return amount0, amount1

    def _graduate(self, launch: TokenLaunch, seed: Tuple[int, int], now: int) -> AMMPair:
        """Seed an AMM pair with the curve's liquidity and burn the LP units."""
        pair = AMMPair(
            self.base_asset,
            launch.token_id,
            config=self.config.amm,
            oracle_config=self.config.oracle,
            transfer=self._transfer,
        )
        amount0, amount1 = seed
        _, _, liquidity = pair.add_liquidity(self.address, amount0, amount1, now=now)
        pair.burn_lp(self.address, liquidity)
        logger.info(
            "Token %s graduated: %d %s + %d %s seeded into %s",
            launch.token_id, amount0, pair.token0, amount1, pair.token1, pair.address,
        )
        return pair

    # -- Launch -------------------------------------------------------------

    def launch_token(self, creator: str, name: str, symbol: str, now: int = 0) -> TokenLaunch:
        """Create a token with a fresh bonding curve, charging the creation fee."""
        if not 0 < len(name) <= MAX_NAME_LENGTH:
            raise EngineError(ErrorKind.INVALID_NAME, f"name must be 1-{MAX_NAME_LENGTH} characters")
        if not 0 < len(symbol) <= MAX_SYMBOL_LENGTH:
            raise EngineError(ErrorKind.INVALID_SYMBOL, f"symbol must be 1-{MAX_SYMBOL_LENGTH} characters")

        with self._guard:
            seq = self._sequence + 1
            token_id = self._deterministic_token_id(creator, symbol, seq)
            curve = new_curve(
                self.config.curve_shape,
                total_supply=self.config.bonding_curve_supply,
                virtual_reserve=self.config.virtual_base_reserve,
                graduation_threshold=self.config.graduation_threshold,
            )
            launch = TokenLaunch(
                token_id=token_id,
                index=seq - 1,
                creator=creator,
                name=name,
                symbol=symbol,
                curve=curve,
                created_at=now,
            )

            self._pay(self.base_asset, creator, self.fees.treasury, self.fees.creation_fee)

            self._sequence = seq
            self._launches[token_id] = launch
            self._creator_index.setdefault(creator, []).append(token_id)

        logger.info(
            "Token %s launched: %s (%s) by %s, curve=%s",
            token_id, name, symbol, creator, curve.curve_shape.value,
        )
        return launch

    # -- Trading ------------------------------------------------------------

    def buy(
        self,
        buyer: str,
        token_id: str,
        base_in: int,
        min_tokens: int = 0,
        now: int = 0,
        deadline: Optional[int] = None,
    ) -> TradeReceipt:
        """Buy tokens from the curve; the trading fee is taken from the gross tokens."""
        if deadline is not None:
            check_deadline(now, deadline)
        launch = self.get_launch(token_id)

        with self._guard:
            curve = launch.curve
            price_before = curve.current_price()
            quote = curve.calculate_buy(base_in)
            tokens_net, fee = apply_trading_fee(quote.token_amount, self.fees)
            check_min_output(tokens_net, min_tokens)

            after = curve.execute(quote)
            price_after = after.current_price()
            if self.config.max_price_change_bps is not None:
                check_price_change(price_before, price_after, self.config.max_price_change_bps)
            slippage = slippage_bps(price_before, price_after)
            seed = self._graduation_seed(token_id, after) if after.is_graduated else None

            self._pay(self.base_asset, buyer, self.address, base_in)
            self._pay(token_id, self.address, buyer, tokens_net)
            self._pay(token_id, self.address, self.fees.treasury, fee)

            pair = None
            if seed is not None:
                pair = self._graduate(launch, seed, now)

            launch.curve = after
            if pair is not None:
                launch.pair = pair

        logger.debug(
            "Buy %s: %d base -> %d tokens (fee %d), price %d -> %d",
            token_id, base_in, tokens_net, fee, price_before, price_after,
        )
        return TradeReceipt(
            token_id=token_id,
            side=CurveSide.BUY,
            base_amount=base_in,
            token_amount=tokens_net,
            fee=fee,
            price_before=price_before,
            price_after=price_after,
            slippage_bps=slippage,
            graduated=pair is not None,
        )

    def sell(
        self,
        seller: str,
        token_id: str,
        tokens_in: int,
        min_base: int = 0,
        now: int = 0,
        deadline: Optional[int] = None,
    ) -> TradeReceipt:
        """Sell tokens back to the curve; the sell penalty goes to the treasury."""
        if deadline is not None:
            check_deadline(now, deadline)
        launch = self.get_launch(token_id)

        with self._guard:
            curve = launch.curve
            price_before = curve.current_price()
            quote = curve.calculate_sell(tokens_in)
            check_min_output(quote.base_amount, min_base)

            after = curve.execute(quote)
            price_after = after.current_price()
            if self.config.max_price_change_bps is not None:
                check_price_change(price_before, price_after, self.config.max_price_change_bps)
            slippage = slippage_bps(price_before, price_after)

            self._pay(token_id, seller, self.address, tokens_in)
            self._pay(self.base_asset, self.address, seller, quote.base_amount)
            self._pay(self.base_asset, self.address, self.fees.treasury, quote.penalty)

            launch.curve = after

        logger.debug(
            "Sell %s: %d tokens -> %d base (penalty %d), price %d -> %d",
            token_id, tokens_in, quote.base_amount, quote.penalty, price_before, price_after,
        )
        return TradeReceipt(
            token_id=token_id,
            side=CurveSide.SELL,
            base_amount=quote.base_amount,
            token_amount=tokens_in,
            fee=quote.penalty,
            price_before=price_before,
            price_after=price_after,
            slippage_bps=slippage,
        )
