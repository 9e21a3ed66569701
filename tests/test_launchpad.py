"""
Test suite for the launchdex launchpad

Covers:
  - token launch validation, creation fee and deterministic IDs
  - curve buys with the trading fee, slippage bound and price-move ceiling
  - curve sells with the sell penalty routed to the treasury
  - graduation into an AMM pair with burned LP units
  - admin fee updates
"""

import pytest

from launchdex.config import AMMConfig, LaunchpadConfig
from launchdex.exceptions import EngineError, ErrorKind
from launchdex.exchange.bonding_curve import CurveShape, CurveSide, CurveStatus
from launchdex.exchange.launchpad import Launchpad


class Ledger:
    """Records transfers and optionally fails on a chosen call."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    def __call__(self, token, sender, recipient, amount):
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise RuntimeError("transfer rejected")
        self.calls.append((token, sender, recipient, amount))


def _launched(config=None, transfer=None):
    pad = Launchpad(config=config, transfer=transfer)
    launch = pad.launch_token("creator", "Moon Token", "MOON")
    return pad, launch.token_id


# ===========================================================================
# Launch
# ===========================================================================

class TestLaunch:

    def test_launch_registers_token(self):
        ledger = Ledger()
        pad = Launchpad(transfer=ledger)
        launch = pad.launch_token("creator", "Moon Token", "MOON", now=5)
        assert launch.index == 0
        assert launch.created_at == 5
        assert launch.status == CurveStatus.BONDING
        assert launch.curve.curve_shape == CurveShape.CONSTANT_PRODUCT
        assert pad.token_count == 1
        assert pad.get_launch(launch.token_id) is launch
        assert pad.get_creator_tokens("creator") == [launch.token_id]
        assert ledger.calls == [("BASE", "creator", "treasury", 100_000)]

    def test_token_ids_deterministic(self):
        first = Launchpad().launch_token("creator", "Moon Token", "MOON").token_id
        second = Launchpad().launch_token("creator", "Moon Token", "MOON").token_id
        assert first == second
        assert len(first) == 16

    def test_same_symbol_relaunch_gets_new_id(self):
        pad = Launchpad()
        a = pad.launch_token("creator", "Moon Token", "MOON")
        b = pad.launch_token("creator", "Moon Token", "MOON")
        assert a.token_id != b.token_id
        assert b.index == 1
        assert pad.get_creator_tokens("creator") == [a.token_id, b.token_id]

    @pytest.mark.parametrize("name", ["", "x" * 33])
    def test_invalid_name(self, name):
        with pytest.raises(EngineError) as exc:
            Launchpad().launch_token("creator", name, "MOON")
        assert exc.value.kind == ErrorKind.INVALID_NAME

    @pytest.mark.parametrize("symbol", ["", "S" * 13])
    def test_invalid_symbol(self, symbol):
        with pytest.raises(EngineError, match="INVALID_SYMBOL"):
            Launchpad().launch_token("creator", "Moon Token", symbol)

    def test_failed_fee_transfer_registers_nothing(self):
        pad = Launchpad(transfer=Ledger(fail_on=0))
        with pytest.raises(RuntimeError):
            pad.launch_token("creator", "Moon Token", "MOON")
        assert pad.token_count == 0
        assert pad.get_creator_tokens("creator") == []

    def test_unknown_token(self):
        with pytest.raises(EngineError, match="TOKEN_NOT_FOUND"):
            Launchpad().get_price("missing")

    def test_shape_from_config(self):
        pad, token_id = _launched(LaunchpadConfig(curve_shape=CurveShape.LINEAR))
        assert pad.get_price(token_id) == 100


# ===========================================================================
# Trading
# ===========================================================================

class TestBuy:

    def test_buy_charges_trading_fee(self):
        ledger = Ledger()
        pad, token_id = _launched(transfer=ledger)
        ledger.calls.clear()

        receipt = pad.buy("bob", token_id, 1_000_000_000)
        assert receipt.side == CurveSide.BUY
        assert receipt.token_amount == 720_000_000_000_001
        assert receipt.fee == 7_272_727_272_727
        assert receipt.price_before == 12
        assert receipt.price_after == 15
        assert receipt.slippage_bps == 2_500
        assert not receipt.graduated
        assert ledger.calls == [
            ("BASE", "bob", "launchpad", 1_000_000_000),
            (token_id, "launchpad", "bob", 720_000_000_000_001),
            (token_id, "launchpad", "treasury", 7_272_727_272_727),
        ]

        launch = pad.get_launch(token_id)
        assert launch.base_raised == 1_000_000_000
        assert launch.market_cap == 22_000_000_000
        assert pad.get_graduation_progress(token_id) == 100

    def test_min_tokens(self):
        pad, token_id = _launched()
        with pytest.raises(EngineError) as exc:
            pad.buy("bob", token_id, 1_000_000_000, min_tokens=720_000_000_000_002)
        assert exc.value.kind == ErrorKind.SLIPPAGE_EXCEEDED
        assert pad.get_launch(token_id).base_raised == 0

    def test_price_move_ceiling(self):
        pad, token_id = _launched(LaunchpadConfig(max_price_change_bps=1_000))
        with pytest.raises(EngineError, match="PRICE_IMPACT_TOO_HIGH"):
            pad.buy("bob", token_id, 1_000_000_000)
        assert pad.get_price(token_id) == 12

    def test_expired(self):
        pad, token_id = _launched()
        with pytest.raises(EngineError, match="TRANSACTION_EXPIRED"):
            pad.buy("bob", token_id, 1_000_000_000, now=11, deadline=10)

    def test_failed_transfer_leaves_curve(self):
        pad, token_id = _launched(transfer=Ledger(fail_on=2))
        with pytest.raises(RuntimeError):
            pad.buy("bob", token_id, 1_000_000_000)
        assert pad.get_launch(token_id).curve.tokens_sold == 0

    def test_linear_curve_buy(self):
        pad, token_id = _launched(LaunchpadConfig(curve_shape=CurveShape.LINEAR))
        receipt = pad.buy("bob", token_id, 1_000_000_000)
        assert receipt.fee == 1_000_000_000_000
        assert receipt.token_amount == 99_000_000_000_000
        assert receipt.price_after == 100_000_000_100


class TestSell:

    def test_sell_back(self):
        pad, token_id = _launched()
        bought = pad.buy("bob", token_id, 1_000_000_000).token_amount
        receipt = pad.sell("bob", token_id, bought)
        assert receipt.side == CurveSide.SELL
        assert receipt.base_amount == 990_900_819
        assert receipt.fee == 0
        assert receipt.price_before == 15
        assert receipt.price_after == 12
        assert receipt.slippage_bps == -2_000

    def test_sell_penalty_to_treasury(self):
        ledger = Ledger()
        pad, token_id = _launched(LaunchpadConfig(curve_shape=CurveShape.LINEAR), transfer=ledger)
        pad.buy("bob", token_id, 1_000_000_000)
        ledger.calls.clear()

        receipt = pad.sell("bob", token_id, 1_000)
        assert receipt.base_amount == 9_800_000
        assert receipt.fee == 200_000
        assert ledger.calls == [
            (token_id, "bob", "launchpad", 1_000),
            ("BASE", "launchpad", "bob", 9_800_000),
            ("BASE", "launchpad", "treasury", 200_000),
        ]

    def test_min_base(self):
        pad, token_id = _launched()
        bought = pad.buy("bob", token_id, 1_000_000_000).token_amount
        with pytest.raises(EngineError, match="SLIPPAGE_EXCEEDED"):
            pad.sell("bob", token_id, bought, min_base=1_000_000_000)

    def test_sell_nothing_bought(self):
        pad, token_id = _launched()
        with pytest.raises(EngineError, match="INSUFFICIENT_BALANCE"):
            pad.sell("bob", token_id, 1_000)


# ===========================================================================
# Graduation
# ===========================================================================

class TestGraduation:

    def _graduate(self, transfer=None):
        pad, token_id = _launched(transfer=transfer)
        receipt = pad.buy("whale", token_id, 100_000_000_000, now=50)
        return pad, token_id, receipt

    def test_buy_crossing_threshold_graduates(self):
        pad, token_id, receipt = self._graduate()
        assert receipt.graduated
        assert receipt.fee == 72_727_272_727_272
        assert receipt.token_amount == 7_200_000_000_000_001

        launch = pad.get_launch(token_id)
        assert launch.status == CurveStatus.GRADUATED
        assert pad.get_graduation_progress(token_id) == 10_000

    def test_pair_seeded_with_curve_liquidity(self):
        pad, token_id, _ = self._graduate()
        pair = pad.get_launch(token_id).pair
        assert {pair.token0, pair.token1} == {"BASE", token_id}
        assert sorted(pair.get_reserves()) == [100_000_000_000, 727_272_727_272_727]
        assert pair.total_supply == 8_528_028_654_224
        assert pair.oracle.last_observation.timestamp == 50

    def test_lp_units_burned(self):
        pad, token_id, _ = self._graduate()
        pair = pad.get_launch(token_id).pair
        assert pair.balance_of("launchpad") == 0
        assert pair.locked_liquidity == 8_528_028_653_224

    def test_graduation_transfers(self):
        ledger = Ledger()
        pad, token_id, _ = self._graduate(transfer=ledger)
        pair = pad.get_launch(token_id).pair
        seeded = [call for call in ledger.calls if call[2] == pair.address]
        assert sorted(seeded) == sorted([
            ("BASE", "launchpad", pair.address, 100_000_000_000),
            (token_id, "launchpad", pair.address, 727_272_727_272_727),
        ])

    @pytest.mark.parametrize("amm, kind", [
        (AMMConfig(min_liquidity_amount=10**18), ErrorKind.INSUFFICIENT_LIQUIDITY),
        (AMMConfig(minimum_liquidity=10**13), ErrorKind.INSUFFICIENT_LIQUIDITY_MINTED),
    ])
    def test_unseedable_pair_moves_nothing(self, amm, kind):
        ledger = Ledger()
        pad, token_id = _launched(LaunchpadConfig(amm=amm), transfer=ledger)
        ledger.calls.clear()

        with pytest.raises(EngineError) as exc:
            pad.buy("whale", token_id, 100_000_000_000, now=50)
        assert exc.value.kind == kind
        assert ledger.calls == []

        launch = pad.get_launch(token_id)
        assert launch.status == CurveStatus.BONDING
        assert launch.curve.tokens_sold == 0
        assert launch.pair is None

    def test_graduated_token_rejects_trades(self):
        pad, token_id, _ = self._graduate()
        with pytest.raises(EngineError) as exc:
            pad.buy("bob", token_id, 1_000_000_000)
        assert exc.value.kind == ErrorKind.ALREADY_GRADUATED
        with pytest.raises(EngineError, match="ALREADY_GRADUATED"):
            pad.sell("whale", token_id, 1_000)

    def test_pair_tradeable_after_graduation(self):
        pad, token_id, _ = self._graduate()
        pair = pad.get_launch(token_id).pair
        result = pair.swap("bob", "BASE", 1_000_000_000, now=60)
        assert result.amount_out > 0


# ===========================================================================
# Admin
# ===========================================================================

class TestFeeAdmin:

    def test_update_trading_fee(self):
        pad, token_id = _launched()
        fees = pad.update_fees(250)
        assert fees.trading_fee_bps == 250
        assert pad.fees is fees
        receipt = pad.buy("bob", token_id, 1_000_000_000)
        assert receipt.fee == 18_181_818_181_818

    def test_update_creation_fee(self):
        pad = Launchpad()
        pad.update_fees(100, creation_fee=5)
        assert pad.fees.creation_fee == 5

    def test_admin_ceiling(self):
        with pytest.raises(EngineError, match="FEE_TOO_HIGH"):
            Launchpad().update_fees(1_001)
