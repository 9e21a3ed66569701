"""
Launchdex TWAP Oracle

Fixed-depth time-weighted average price oracle for a pool:
  - Arithmetic-mean TWAP from cumulative price integrals (Uniswap V2 model)
  - Fixed ring buffer of observations plus a write cursor; no dynamic growth
  - Fixed-point prices scaled by ORACLE_PRECISION (1e9)

Security features:
  - At most one observation per distinct timestamp (same-tick updates are
    no-ops), so repeated trades inside one tick cannot inflate the integral
  - Cumulative prices only advance with elapsed time, bounding the weight of
    any single-instant reserve move
  - Windows older than the buffered history are refused, never extrapolated

The oracle is a frozen value: ``update`` returns the next oracle and the
caller persists it alongside the reserves that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..constants import ORACLE_CAPACITY, ORACLE_PRECISION
from ..exceptions import EngineError, ErrorKind
from .safemath import add, div, mul, mul_div, sub


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PriceObservation:
    """Cumulative price integrals recorded at a timestamp."""
    timestamp: int
    price0_cumulative: int = 0   # Σ(reserve1/reserve0 × dt), scaled
    price1_cumulative: int = 0   # Σ(reserve0/reserve1 × dt), scaled


GENESIS = PriceObservation(timestamp=0)


# ---------------------------------------------------------------------------
# TWAP Oracle
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TWAPOracle:
    """
    Ring buffer of price observations for one pool.

    ``slots`` holds ``capacity`` entries, ``None`` until first written.
    ``index`` is the next slot to write.
    """
    slots: Tuple[Optional[PriceObservation], ...] = (None,) * ORACLE_CAPACITY
    index: int = 0
    last_observation: PriceObservation = GENESIS
    precision: int = ORACLE_PRECISION

    @classmethod
    def create(cls, capacity: int = ORACLE_CAPACITY, precision: int = ORACLE_PRECISION) -> "TWAPOracle":
        if capacity <= 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "oracle capacity must be positive")
        if precision <= 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "oracle precision must be positive")
        return cls(slots=(None,) * capacity, precision=precision)

    @property
    def capacity(self) -> int:
        return len(self.slots)

    @property
    def observation_count(self) -> int:
        return sum(1 for obs in self.slots if obs is not None)

    def observations(self) -> List[PriceObservation]:
        """Buffered observations, oldest first."""
        ordered = self.slots[self.index:] + self.slots[:self.index]
        return [obs for obs in ordered if obs is not None]

    # -- Pricing ------------------------------------------------------------

    def _price(self, numerator_reserve: int, denominator_reserve: int) -> int:
        # an empty side contributes nothing to the integral
        if denominator_reserve <= 0:
            return 0
        return mul_div(numerator_reserve, self.precision, denominator_reserve)

    def get_spot_price(self, reserve0: int, reserve1: int) -> int:
        """Instantaneous price of token0 in token1, scaled by ``precision``."""
        if reserve0 <= 0:
            raise EngineError(ErrorKind.INSUFFICIENT_LIQUIDITY, "reserve0 is empty")
        return mul_div(reserve1, self.precision, reserve0)

    # -- Recording ----------------------------------------------------------

    def update(self, timestamp: int, reserve0: int, reserve1: int) -> "TWAPOracle":
        """
        Accumulate the price held since the last observation.

        Should be called with the post-trade reserves of every committed
        swap or liquidity change. Returns ``self`` unchanged when
        ``timestamp`` does not advance past the last observation.
        """
        last = self.last_observation
        if timestamp <= last.timestamp:
            return self

        elapsed = sub(timestamp, last.timestamp)
        price0 = self._price(reserve1, reserve0)
        price1 = self._price(reserve0, reserve1)

        observation = PriceObservation(
            timestamp=timestamp,
            price0_cumulative=add(last.price0_cumulative, mul(price0, elapsed)),
            price1_cumulative=add(last.price1_cumulative, mul(price1, elapsed)),
        )

        slots = list(self.slots)
        slots[self.index] = observation
        return TWAPOracle(
            slots=tuple(slots),
            index=(self.index + 1) % self.capacity,
            last_observation=observation,
            precision=self.precision,
        )

    # -- Queries ------------------------------------------------------------

    def _find_window_start(self, seconds_ago: int) -> PriceObservation:
        if seconds_ago <= 0:
            raise EngineError(ErrorKind.INVALID_AMOUNT, "seconds_ago must be positive")

        last = self.last_observation
        target = last.timestamp - seconds_ago

        found: Optional[PriceObservation] = None
        for obs in self.slots:
            if obs is None or obs.timestamp > target:
                continue
            if found is None or obs.timestamp > found.timestamp:
                found = obs

        if found is None:
            raise EngineError(
                ErrorKind.ORACLE_WINDOW_UNAVAILABLE,
                f"no observation at or before {target}",
            )
        return found

    def consult(self, seconds_ago: int) -> Tuple[int, int]:
        """
        Average (price0, price1) over the window ending at the last observation.

        The window starts at the newest buffered observation that is at least
        ``seconds_ago`` older than the last one.
        """
        start = self._find_window_start(seconds_ago)
        last = self.last_observation
        elapsed = sub(last.timestamp, start.timestamp)
        price0 = div(sub(last.price0_cumulative, start.price0_cumulative), elapsed)
        price1 = div(sub(last.price1_cumulative, start.price1_cumulative), elapsed)
        return price0, price1

    def get_twap(self, seconds_ago: int) -> int:
        """Time-weighted average of price0 over the last ``seconds_ago`` seconds."""
        return self.consult(seconds_ago)[0]
