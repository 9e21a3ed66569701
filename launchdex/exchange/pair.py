"""
Launchdex AMM Pair Host

In-memory host for one constant-product pool. It plays the part of the
dispatch layer around the pure engine and fixes the order of every
mutating call:

  1. deadline check
  2. acquire the reentrancy guard
  3. read the committed ReservePair (K captured before anything moves)
  4. compute the next snapshot with the pure engine and validate it
  5. run the value transfers
  6. commit the snapshot, LP balances and oracle observation
  7. release the guard (on every exit path)

Any failure, including one raised by the transfer callback, leaves the
committed state exactly as it was.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

from ..config.loader import AMMConfig, OracleConfig
from ..exceptions import EngineError, ErrorKind
from .amm import (
    ReservePair,
    SwapResult,
    burn_liquidity,
    get_amount_in,
    get_amount_out,
    mint_liquidity,
    optimal_liquidity_amounts,
    sort_tokens,
    swap_exact_in,
    swap_exact_out,
)
from .oracle import TWAPOracle
from .reentrancy import ReentrancyGuard
from .safemath import add, sub
from .validation import (
    check_deadline,
    check_k_non_decreasing,
    check_liquidity_amount,
    check_max_input,
    check_min_output,
    check_price_impact,
    check_reserves,
    check_swap_amount,
)

logger = logging.getLogger(__name__)

# transfer(token, sender, recipient, amount)
TransferFn = Callable[[str, str, str, int], None]


class AMMPair:
    """
    Constant-product pool for a canonical (token0, token1) pair.

    Implements:
      - Add / remove liquidity with optimal amounts and LP accounting
      - Exact-in and exact-out swaps with slippage and price-impact bounds
      - TWAP oracle fed with committed reserves
      - Reentrancy protection around engine call + transfers
    """

    def __init__(
        self,
        token_a: str,
        token_b: str,
        config: Optional[AMMConfig] = None,
        oracle_config: Optional[OracleConfig] = None,
        transfer: Optional[TransferFn] = None,
    ):
        self.token0, self.token1 = sort_tokens(token_a, token_b)
        self.address = f"pair:{self.token0}:{self.token1}"
        self.config = config or AMMConfig()
        oracle_config = oracle_config or OracleConfig()

        self.reserves = ReservePair()
        self.oracle = TWAPOracle.create(oracle_config.capacity, oracle_config.precision)
        self.locked_liquidity: int = 0    # LP units burned by holders, never withdrawable
        self._balances: Dict[str, int] = {}
        self._guard = ReentrancyGuard(self.address)
        self._transfer = transfer

        logger.info(
            "Pair %s/%s created: fee=%d bps max_impact=%d bps",
            self.token0, self.token1, self.config.fee_bps, self.config.max_price_impact_bps,
        )

    # -- Views --------------------------------------------------------------

    def get_reserves(self) -> Tuple[int, int]:
        return self.reserves.reserve0, self.reserves.reserve1

    @property
    def total_supply(self) -> int:
        return self.reserves.total_lp_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def is_locked(self) -> bool:
        return self._guard.is_locked

    def _direction(self, token_in: str) -> bool:
        if token_in == self.token0:
            return True
        if token_in == self.token1:
            return False
        raise EngineError(ErrorKind.INVALID_TOKEN_PAIR, f"{token_in} is not in {self.address}")

    def _token_out(self, zero_for_one: bool) -> str:
        return self.token1 if zero_for_one else self.token0

    def get_amount_out(self, amount_in: int, token_in: str) -> int:
        reserve_in, reserve_out = self.reserves.reserves_for(self._direction(token_in))
        return get_amount_out(amount_in, reserve_in, reserve_out, self.config.fee_bps)

    def get_amount_in(self, amount_out: int, token_in: str) -> int:
        reserve_in, reserve_out = self.reserves.reserves_for(self._direction(token_in))
        return get_amount_in(amount_out, reserve_in, reserve_out, self.config.fee_bps)

    def twap(self, seconds_ago: int) -> int:
        return self.oracle.get_twap(seconds_ago)

    # -- Internals ----------------------------------------------------------

    def _pay(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if self._transfer is not None and amount > 0:
            self._transfer(token, sender, recipient, amount)

    def _next_oracle(self, new_pair: ReservePair, now: int) -> TWAPOracle:
        return self.oracle.update(now, new_pair.reserve0, new_pair.reserve1)

    def _commit(self, new_pair: ReservePair, oracle: TWAPOracle) -> None:
        self.reserves = new_pair
        self.oracle = oracle

    # -- Liquidity ----------------------------------------------------------

    def add_liquidity(
        self,
        provider: str,
        amount0_desired: int,
        amount1_desired: int,
        amount0_min: int = 0,
        amount1_min: int = 0,
        now: int = 0,
        deadline: Optional[int] = None,
    ) -> Tuple[int, int, int]:
        """
        Deposit token0/token1 at the pool ratio.

        Returns:
            (amount0, amount1, liquidity minted to ``provider``)
        """
        if deadline is not None:
            check_deadline(now, deadline)

        with self._guard:
            before = self.reserves
            amount0, amount1 = optimal_liquidity_amounts(
                before, amount0_desired, amount1_desired, amount0_min, amount1_min,
            )
            check_liquidity_amount(amount0, self.config.min_liquidity_amount)
            check_liquidity_amount(amount1, self.config.min_liquidity_amount)

            after, liquidity = mint_liquidity(before, amount0, amount1, self.config.minimum_liquidity)
            check_k_non_decreasing(before.reserve0, before.reserve1, after.reserve0, after.reserve1)
            new_balance = add(self.balance_of(provider), liquidity)
            oracle = self._next_oracle(after, now)

            self._pay(self.token0, provider, self.address, amount0)
            self._pay(self.token1, provider, self.address, amount1)

            self._balances[provider] = new_balance
            self._commit(after, oracle)

        if before.total_lp_supply == 0:
            logger.info(
                "Pair %s initialized: %d/%d, %d LP units locked",
                self.address, amount0, amount1, self.config.minimum_liquidity,
            )
        logger.debug("Liquidity added to %s by %s: %d/%d -> %d LP", self.address, provider, amount0, amount1, liquidity)
        return amount0, amount1, liquidity

    def remove_liquidity(
        self,
        provider: str,
        liquidity: int,
        amount0_min: int = 0,
        amount1_min: int = 0,
        now: int = 0,
        deadline: Optional[int] = None,
    ) -> Tuple[int, int]:
        """Burn ``liquidity`` LP units held by ``provider`` for both tokens."""
        if deadline is not None:
            check_deadline(now, deadline)

        with self._guard:
            balance = self.balance_of(provider)
            if liquidity > balance:
                raise EngineError(
                    ErrorKind.INSUFFICIENT_BALANCE,
                    f"{provider} holds {balance} LP, tried to burn {liquidity}",
                )
            after, amount0, amount1 = burn_liquidity(
                self.reserves, liquidity, self.config.minimum_liquidity,
            )
            if amount0 < amount0_min:
                raise EngineError(
                    ErrorKind.INSUFFICIENT_TOKEN0_AMOUNT,
                    f"amount0 {amount0} below minimum {amount0_min}",
                )
            if amount1 < amount1_min:
                raise EngineError(
                    ErrorKind.INSUFFICIENT_TOKEN1_AMOUNT,
                    f"amount1 {amount1} below minimum {amount1_min}",
                )

            oracle = self._next_oracle(after, now)

            self._pay(self.token0, self.address, provider, amount0)
            self._pay(self.token1, self.address, provider, amount1)

            self._balances[provider] = sub(balance, liquidity)
            self._commit(after, oracle)

        logger.debug("Liquidity removed from %s by %s: %d LP -> %d/%d", self.address, provider, liquidity, amount0, amount1)
        return amount0, amount1

    def burn_lp(self, holder: str, liquidity: int) -> None:
        """Destroy a holder's LP units without withdrawing; the reserves stay locked."""
        with self._guard:
            balance = self.balance_of(holder)
            if liquidity <= 0 or liquidity > balance:
                raise EngineError(
                    ErrorKind.INSUFFICIENT_BALANCE,
                    f"{holder} holds {balance} LP, tried to burn {liquidity}",
                )
            self._balances[holder] = sub(balance, liquidity)
            self.locked_liquidity = add(self.locked_liquidity, liquidity)
        logger.info("%d LP units of %s burned by %s", liquidity, self.address, holder)

    # -- Swaps --------------------------------------------------------------

    def _settle_swap(self, trader: str, token_in: str, zero_for_one: bool, result: SwapResult, now: int) -> None:
        oracle = self._next_oracle(result.pair, now)
        self._pay(token_in, trader, self.address, result.amount_in)
        self._pay(self._token_out(zero_for_one), self.address, trader, result.amount_out)
        self._commit(result.pair, oracle)

    def _engine_swap(self, swap_fn, pair: ReservePair, amount: int, zero_for_one: bool) -> SwapResult:
        try:
            return swap_fn(pair, amount, zero_for_one, self.config.fee_bps)
        except EngineError as e:
            if e.kind == ErrorKind.K_INVARIANT_VIOLATED:
                logger.warning("K check rejected swap on %s: %s", self.address, e.message)
            raise

    def swap(
        self,
        trader: str,
        token_in: str,
        amount_in: int,
        amount_out_min: int = 0,
        now: int = 0,
        deadline: Optional[int] = None,
    ) -> SwapResult:
        """Swap an exact ``amount_in`` of ``token_in`` for the other token."""
        if deadline is not None:
            check_deadline(now, deadline)
        zero_for_one = self._direction(token_in)

        with self._guard:
            before = self.reserves
            check_swap_amount(amount_in, self.config.min_swap_amount)
            check_reserves(before.reserve0, before.reserve1)
            reserve_in, reserve_out = before.reserves_for(zero_for_one)
            check_price_impact(
                amount_in, reserve_in, reserve_out,
                self.config.max_price_impact_bps, self.config.fee_bps,
            )
            result = self._engine_swap(swap_exact_in, before, amount_in, zero_for_one)
            check_min_output(result.amount_out, amount_out_min)
            self._settle_swap(trader, token_in, zero_for_one, result, now)

        logger.debug(
            "Swap on %s: %d %s -> %d %s",
            self.address, result.amount_in, token_in, result.amount_out, self._token_out(zero_for_one),
        )
        return result

    def swap_for_exact(
        self,
        trader: str,
        token_in: str,
        amount_out: int,
        amount_in_max: int,
        now: int = 0,
        deadline: Optional[int] = None,
    ) -> SwapResult:
        """Swap as little ``token_in`` as needed to receive exactly ``amount_out``."""
        if deadline is not None:
            check_deadline(now, deadline)
        zero_for_one = self._direction(token_in)

        with self._guard:
            before = self.reserves
            check_reserves(before.reserve0, before.reserve1)
            result = self._engine_swap(swap_exact_out, before, amount_out, zero_for_one)
            check_max_input(result.amount_in, amount_in_max)
            check_swap_amount(result.amount_in, self.config.min_swap_amount)
            reserve_in, reserve_out = before.reserves_for(zero_for_one)
            check_price_impact(
                result.amount_in, reserve_in, reserve_out,
                self.config.max_price_impact_bps, self.config.fee_bps,
            )
            self._settle_swap(trader, token_in, zero_for_one, result, now)

        logger.debug(
            "Exact-out swap on %s: %d %s -> %d %s",
            self.address, result.amount_in, token_in, result.amount_out, self._token_out(zero_for_one),
        )
        return result
