"""
Test suite for the launchdex command-line interface

Covers:
  - AMM quoting commands and the price-impact verdict
  - bonding-curve buy and simulation commands
  - configuration loading, overrides and failures
"""

import json

import pytest
from click.testing import CliRunner

from launchdex.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LAUNCHDEX_CONFIG", "LAUNCHDEX_FEE_BPS", "LAUNCHDEX_CURVE_SHAPE",
                 "LAUNCHDEX_GRADUATION_THRESHOLD", "LAUNCHDEX_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _invoke(runner, tmp_path, *args, toml=""):
    path = tmp_path / "launchdex.toml"
    path.write_text(toml)
    return runner.invoke(cli, ["--config", str(path), "--log-level", "ERROR", *args], obj={})


# ===========================================================================
# AMM commands
# ===========================================================================

class TestAMMCommands:

    def test_amount_out(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "amount-out", "1000000", "10000000", "10000000")
        assert result.exit_code == 0
        assert "906610" in result.output

    def test_amount_out_fee_override(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "amount-out", "10000", "1000000", "1000000", "--fee-bps", "0")
        assert result.exit_code == 0
        assert "9900" in result.output

    def test_fee_from_config(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "amount-out", "10000", "1000000", "1000000", toml="[amm]\nfee_bps = 0\n")
        assert "9900" in result.output

    def test_amount_in(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "amount-in", "9000", "1000000", "1000000")
        assert result.exit_code == 0
        assert "9110" in result.output

    def test_quote(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "quote", "100", "1000000", "2000000")
        assert result.exit_code == 0
        assert "200" in result.output

    def test_engine_error_reported(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "amount-out", "0", "1000", "1000")
        assert result.exit_code == 1
        assert "INSUFFICIENT_INPUT_AMOUNT" in result.output

    def test_impact_accepted(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "impact", "10000", "1000000", "1000000")
        assert result.exit_code == 0
        assert "Price impact: 196 bps (ceiling 500 bps)" in result.output
        assert "OK" in result.output

    def test_impact_rejected(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "impact", "100000", "1000000", "1000000")
        assert result.exit_code == 1
        assert "Price impact: 1733 bps" in result.output
        assert "REJECTED: PRICE_IMPACT_TOO_HIGH" in result.output

    def test_impact_ceiling_override(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "impact", "100000", "1000000", "1000000", "--max-bps", "2000")
        assert result.exit_code == 0
        assert "(ceiling 2000 bps)" in result.output


# ===========================================================================
# Bonding curve commands
# ===========================================================================

class TestCurveCommands:

    def test_curve_buy(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "curve-buy", "1000000000")
        assert result.exit_code == 0
        assert "constant_product" in result.output
        assert "727272727272728" in result.output
        assert "7272727272727" in result.output
        assert "720000000000001" in result.output
        assert "12 -> 15" in result.output
        assert "100 bps" in result.output

    def test_curve_buy_linear(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "curve-buy", "1000000000", "--shape", "linear")
        assert result.exit_code == 0
        assert "100000000000000" in result.output
        assert "100 -> 100000000100" in result.output

    def test_curve_buy_invalid_amount(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "curve-buy", "0")
        assert result.exit_code == 1
        assert "INVALID_AMOUNT" in result.output

    def test_curve_sim(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "curve-sim", "--steps", "2")
        assert result.exit_code == 0
        assert "727272727272728" in result.output
        assert "606060606060606" in result.output
        assert "Graduated" not in result.output

    def test_curve_sim_graduates(self, runner, tmp_path):
        toml = "[launchpad]\ngraduation_threshold = 2000000000\n"
        result = _invoke(runner, tmp_path, "curve-sim", "--steps", "5", toml=toml)
        assert result.exit_code == 0
        assert "Graduated at step 2" in result.output


# ===========================================================================
# Configuration
# ===========================================================================

class TestConfigCommands:

    def test_show_config(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "show-config", toml="[amm]\nfee_bps = 25\n")
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["amm"]["fee_bps"] == 25
        assert data["launchpad"]["curve_shape"] == "constant_product"

    def test_invalid_config(self, runner, tmp_path):
        result = _invoke(runner, tmp_path, "show-config", toml="[amm]\nfee_bps = 20000\n")
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
