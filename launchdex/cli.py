#!/usr/bin/env python3
"""
Launchdex CLI

Command-line interface over the pricing engine.

Usage:
    launchdex quote <amount> <reserve_a> <reserve_b>
    launchdex amount-out <amount_in> <reserve_in> <reserve_out> [--fee-bps BPS]
    launchdex amount-in <amount_out> <reserve_in> <reserve_out> [--fee-bps BPS]
    launchdex impact <amount_in> <reserve_in> <reserve_out> [--max-bps BPS]
    launchdex curve-buy <base_in> [--shape SHAPE]
    launchdex curve-sim [--shape SHAPE] [--steps N] [--amount BASE]
    launchdex show-config
"""

import json
from typing import Optional

import click

from . import __version__
from .config import LaunchdexConfig, load_config
from .exceptions import ConfigurationError, EngineError
from .exchange.amm import get_amount_in, get_amount_out, price_impact_bps, quote
from .exchange.bonding_curve import CurveShape, new_curve
from .exchange.fees import apply_trading_fee
from .logger import LogManager, get_logger

SHAPES = [shape.value for shape in CurveShape]


def _engine_error(e: EngineError) -> click.ClickException:
    return click.ClickException(f"{e.kind.name}: {e.message}")


def _config(ctx: click.Context) -> LaunchdexConfig:
    return ctx.obj["config"]


@click.group()
@click.version_option(version=__version__, prog_name="launchdex")
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to launchdex.toml (default: $LAUNCHDEX_CONFIG or ./launchdex.toml)"
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override the configured log level"
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """Launchdex pricing engine.

    Quote AMM swaps and simulate bonding-curve sales with the same integer
    math the engine settles with.
    """
    try:
        cfg = load_config(config_path)
    except ConfigurationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")

    LogManager().configure(log_level=(log_level or cfg.logging.level).upper())
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["logger"] = get_logger("launchdex.cli")


# ---------------------------------------------------------------------------
# AMM commands
# ---------------------------------------------------------------------------

@cli.command("quote")
@click.argument("amount", type=int)
@click.argument("reserve_a", type=int)
@click.argument("reserve_b", type=int)
def quote_cmd(amount: int, reserve_a: int, reserve_b: int):
    """Equivalent amount of B for AMOUNT of A at the reserve ratio."""
    try:
        result = quote(amount, reserve_a, reserve_b)
    except EngineError as e:
        raise _engine_error(e)
    click.echo(result)


@cli.command("amount-out")
@click.argument("amount_in", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
@click.option("--fee-bps", type=int, default=None, help="Swap fee in basis points (default: [amm] fee_bps)")
@click.pass_context
def amount_out_cmd(ctx: click.Context, amount_in: int, reserve_in: int, reserve_out: int, fee_bps: Optional[int]):
    """Output of an exact-input swap."""
    fee = _config(ctx).amm.fee_bps if fee_bps is None else fee_bps
    try:
        result = get_amount_out(amount_in, reserve_in, reserve_out, fee)
    except EngineError as e:
        raise _engine_error(e)
    click.echo(result)


@cli.command("amount-in")
@click.argument("amount_out", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
@click.option("--fee-bps", type=int, default=None, help="Swap fee in basis points (default: [amm] fee_bps)")
@click.pass_context
def amount_in_cmd(ctx: click.Context, amount_out: int, reserve_in: int, reserve_out: int, fee_bps: Optional[int]):
    """Input required for an exact-output swap."""
    fee = _config(ctx).amm.fee_bps if fee_bps is None else fee_bps
    try:
        result = get_amount_in(amount_out, reserve_in, reserve_out, fee)
    except EngineError as e:
        raise _engine_error(e)
    click.echo(result)


@cli.command("impact")
@click.argument("amount_in", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
@click.option("--max-bps", type=int, default=None, help="Price-impact ceiling (default: [amm] max_price_impact_bps)")
@click.pass_context
def impact_cmd(ctx: click.Context, amount_in: int, reserve_in: int, reserve_out: int, max_bps: Optional[int]):
    """Price impact of a trade and whether the ceiling accepts it."""
    amm = _config(ctx).amm
    ceiling = amm.max_price_impact_bps if max_bps is None else max_bps
    try:
        impact = price_impact_bps(amount_in, reserve_in, reserve_out, amm.fee_bps)
    except EngineError as e:
        raise _engine_error(e)

    click.echo(f"Price impact: {impact} bps (ceiling {ceiling} bps)")
    if impact > ceiling:
        click.echo(click.style("REJECTED: PRICE_IMPACT_TOO_HIGH", fg="red"))
        ctx.exit(1)
    click.echo(click.style("OK", fg="green"))


# ---------------------------------------------------------------------------
# Bonding curve commands
# ---------------------------------------------------------------------------

def _fresh_curve(ctx: click.Context, shape: Optional[str]):
    lp = _config(ctx).launchpad
    return new_curve(
        CurveShape(shape or lp.curve_shape),
        total_supply=lp.bonding_curve_supply,
        virtual_reserve=lp.virtual_base_reserve,
        graduation_threshold=lp.graduation_threshold,
    )


@cli.command("curve-buy")
@click.argument("base_in", type=int)
@click.option("--shape", type=click.Choice(SHAPES), default=None, help="Curve shape (default: [launchpad] curve_shape)")
@click.pass_context
def curve_buy_cmd(ctx: click.Context, base_in: int, shape: Optional[str]):
    """Price a first buy of BASE_IN on a freshly launched curve."""
    fees = _config(ctx).launchpad_config().fees
    try:
        curve = _fresh_curve(ctx, shape)
        price_before = curve.current_price()
        curve_quote = curve.calculate_buy(base_in)
        tokens_net, fee = apply_trading_fee(curve_quote.token_amount, fees)
        after = curve.execute(curve_quote)
    except EngineError as e:
        raise _engine_error(e)

    click.echo(f"Curve:          {curve.curve_shape.value}")
    click.echo(f"Tokens (gross): {curve_quote.token_amount}")
    click.echo(f"Trading fee:    {fee}")
    click.echo(f"Tokens (net):   {tokens_net}")
    click.echo(f"Price:          {price_before} -> {after.current_price()}")
    click.echo(f"Graduation:     {after.graduation_progress_bps()} bps")


@cli.command("curve-sim")
@click.option("--shape", type=click.Choice(SHAPES), default=None, help="Curve shape (default: [launchpad] curve_shape)")
@click.option("--steps", type=click.IntRange(1, 1000), default=10, help="Number of equal buys")
@click.option("--amount", type=int, default=1_000_000_000, help="Base units per buy")
@click.pass_context
def curve_sim_cmd(ctx: click.Context, shape: Optional[str], steps: int, amount: int):
    """Run STEPS equal buys against a fresh curve until it graduates."""
    log = ctx.obj["logger"]
    try:
        curve = _fresh_curve(ctx, shape)
        click.echo(f"{'step':>4}  {'tokens_out':>20}  {'price':>14}  {'progress_bps':>12}")
        for step in range(1, steps + 1):
            curve_quote = curve.calculate_buy(amount)
            curve = curve.execute(curve_quote)
            click.echo(
                f"{step:>4}  {curve_quote.token_amount:>20}  "
                f"{curve.current_price():>14}  {curve.graduation_progress_bps():>12}"
            )
            if curve.is_graduated:
                log.info("Curve graduated after %d buys", step)
                click.echo(click.style(f"Graduated at step {step}", fg="green"))
                break
    except EngineError as e:
        raise _engine_error(e)


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@cli.command("show-config")
@click.pass_context
def show_config_cmd(ctx: click.Context):
    """Print the effective configuration (file + environment)."""
    click.echo(json.dumps(_config(ctx).to_dict(), indent=2))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
