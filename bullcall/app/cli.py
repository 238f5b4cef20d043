"""Typer CLI for bull call spread P&L.

Examples::

    bullcall spread --long 600 --short 800 --price 750 --debit 70
    bullcall spread --symbol TSLA --long 200 --short 220 --price 215 --expiry 2024-09-20
    bullcall spread --long 600 --short 800 --debit 70 --table-range 500:900:50
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bullcall.app.format import format_expiration_date, format_price, format_usd
from bullcall.app.table import PayoffTableOptions, build_payoff_table
from bullcall.core.errors import BullCallError, InputValidationError
from bullcall.core.logging import setup_logging
from bullcall.core.settings import AlpacaDataSettings
from bullcall.integrations.alpaca.options import AlpacaMarketDataClient, FetchSpreadDebitParams
from bullcall.payoff import (
    DEFAULT_CONTRACT_SIZE,
    DEFAULT_PORTFOLIO_SIZE,
    BreakevenArgs,
    BullCallSpreadArgs,
    LongCallBenchmarkArgs,
    MaxLossArgs,
    MaxProfitArgs,
    MaxProfitStrikeArgs,
    UnderlyingBenchmarkArgs,
    bull_call_spread_breakeven,
    bull_call_spread_max_loss_per_contract,
    bull_call_spread_max_profit_per_contract,
    bull_call_spread_max_profit_strike,
    bull_call_spread_profit,
    long_call_profit,
    price_range,
    resolve_contracts,
    underlying_pnl,
)
from bullcall.services.market_data import AlpacaMarketDataProvider, MarketDataProvider

console = Console()
app = typer.Typer(add_completion=False, help="Bull call (vertical call) spread calculator")
LOGGER = logging.getLogger(__name__)


def _load_env() -> None:
    """Load environment variables from the default `.env` file."""

    load_dotenv(override=False)


def build_provider() -> MarketDataProvider:
    settings = AlpacaDataSettings.from_env()
    return AlpacaMarketDataProvider(AlpacaMarketDataClient.from_settings(settings))


def _parse_price_list(raw: str) -> List[float]:
    prices: List[float] = []
    for token in raw.split(","):
        try:
            value = float(token.strip())
        except ValueError:
            continue
        if math.isfinite(value):
            prices.append(value)
    if not prices:
        raise InputValidationError("--table must contain numbers")
    return prices


def _parse_price_range(raw: str) -> List[float]:
    parts = raw.split(":")
    try:
        start, end, step = (float(part.strip()) for part in parts)
    except ValueError:
        raise InputValidationError('--table-range must be "start:end:step" with numeric values') from None
    return price_range(start, end, step)


def _usage_error(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    console.print("Run [bold]bullcall spread --help[/bold] for usage.")
    raise typer.Exit(code=2)


def _print_summary(
    *,
    long_strike: float,
    short_strike: float,
    debit: float,
    contract_size: int,
    contracts: int,
    portfolio: float,
    pnl: Optional[float] = None,
) -> None:
    breakeven = bull_call_spread_breakeven(BreakevenArgs(long_strike, debit))
    max_profit_strike = bull_call_spread_max_profit_strike(MaxProfitStrikeArgs(long_strike, short_strike))
    max_profit = bull_call_spread_max_profit_per_contract(
        MaxProfitArgs(long_strike, short_strike, debit, contract_size)
    )
    max_loss = bull_call_spread_max_loss_per_contract(MaxLossArgs(debit, contract_size))

    summary = Table.grid(padding=(0, 2))
    summary.add_row("Breakeven", format_price(breakeven))
    summary.add_row("Max profit strike", format_price(max_profit_strike))
    summary.add_row("Max profit per contract", format_usd(max_profit))
    summary.add_row("Max profit total", format_usd(max_profit * contracts))
    if pnl is not None:
        summary.add_row("Portfolio value at expiry", format_usd(portfolio + pnl))
    summary.add_row("Portfolio value at max profit", format_usd(portfolio + max_profit * contracts))
    summary.add_row("Max loss per contract", format_usd(max_loss))
    summary.add_row("Max loss total", format_usd(max_loss * contracts))
    console.print(Panel.fit(summary, title="Spread summary", border_style="cyan"))


@app.command()
def check() -> None:
    """Report whether Alpaca credentials are configured."""

    _load_env()
    settings = AlpacaDataSettings.from_env()
    if not settings.is_configured():
        console.print("[red]NOT READY:[/red] missing ALPACA_API_KEY_ID / ALPACA_API_SECRET_KEY")
        raise typer.Exit(code=1)
    console.print(f"[green]READY[/green] data API {settings.base_url} (key …{settings.key_tail()})")


@app.command()
def spread(
    long_strike: float = typer.Option(..., "--long", help="Lower strike (buy)"),
    short_strike: float = typer.Option(..., "--short", help="Upper strike (sell)"),
    price: Optional[float] = typer.Option(None, "--price", help="Underlying price at expiry"),
    debit: Optional[float] = typer.Option(None, "--debit", help="Net debit per share, e.g. 7.5"),
    symbol: Optional[str] = typer.Option(None, "--symbol", help="Fetch the mid debit from Alpaca for this ticker"),
    expiry: Optional[str] = typer.Option(None, "--expiry", help="Expiration (YYYY-MM-DD); nearest if omitted"),
    contracts: Optional[int] = typer.Option(None, "--contracts", min=1, help="Override portfolio-based sizing"),
    contract_size: int = typer.Option(DEFAULT_CONTRACT_SIZE, "--contract-size", min=1, help="Shares per contract"),
    portfolio: float = typer.Option(DEFAULT_PORTFOLIO_SIZE, "--portfolio", help="Portfolio size used for sizing"),
    table: Optional[str] = typer.Option(None, "--table", help='Comma-separated prices, e.g. "500,600,700"'),
    table_range: Optional[str] = typer.Option(None, "--table-range", help='"start:end:step", e.g. "500:900:50"'),
    long_call_benchmark: bool = typer.Option(
        False,
        "--long-call-benchmark/--no-long-call-benchmark",
        help="Compare against buying long calls at the long strike (needs --symbol)",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default LOG_LEVEL or WARNING)"),
) -> None:
    """Compute bull call spread P&L at expiry, optionally fetching the debit from Alpaca."""

    _load_env()
    setup_logging(log_level)
    symbol = symbol.strip() if symbol and symbol.strip() else None
    expiry = expiry.strip() if expiry and expiry.strip() else None

    if debit is None and symbol is None:
        _usage_error("Provide --debit or specify --symbol to auto-fetch the debit.")
    if price is None and table is None and table_range is None:
        _usage_error("Provide --price, --table or --table-range.")

    try:
        provider: Optional[MarketDataProvider] = None
        long_call_premium: Optional[float] = None
        if debit is None:
            provider = build_provider()
            quote = asyncio.run(
                provider.get_spread_mid_debit(
                    FetchSpreadDebitParams(symbol, long_strike, short_strike, expiry)
                )
            )
            debit = quote.net_debit_per_share
            long_call_premium = quote.long_mid
            console.print(
                f"Fetched Alpaca mid debit for {symbol.upper()} {format_expiration_date(quote.expiration)}: "
                f"{format_usd(quote.long_mid)} (long) - {format_usd(quote.short_mid)} (short) = "
                f"{format_usd(debit)} per share"
            )

        sized_contracts = resolve_contracts(
            net_debit_per_share=debit,
            contract_size=contract_size,
            contracts=contracts,
            portfolio_size=portfolio,
        )
        contract_note = " (derived from portfolio)" if contracts is None else ""

        spot_price: Optional[float] = None
        if symbol is not None:
            try:
                if provider is None:
                    provider = build_provider()
                spot_price = asyncio.run(provider.get_spot(symbol))
            except BullCallError as exc:
                LOGGER.warning("cli.spot_unavailable", extra={"symbol": symbol, "error": str(exc)})
                console.print(
                    f"[yellow]Warning: unable to fetch latest stock price for {symbol}. "
                    "Skipping underlying benchmark.[/yellow]"
                )
        shares = math.floor(portfolio / spot_price) if spot_price and spot_price > 0 else 0

        long_call_contracts: Optional[int] = None
        if long_call_benchmark:
            if long_call_premium is None:
                console.print("[yellow]Long call benchmark needs --symbol without --debit; skipping.[/yellow]")
            else:
                long_call_contracts = resolve_contracts(
                    net_debit_per_share=long_call_premium,
                    contract_size=contract_size,
                    portfolio_size=portfolio,
                )

        if table is not None or table_range is not None:
            prices = _parse_price_list(table) if table is not None else _parse_price_range(table_range)
            payoff = build_payoff_table(
                PayoffTableOptions(
                    prices=prices,
                    long_strike=long_strike,
                    short_strike=short_strike,
                    debit=debit,
                    contract_size=contract_size,
                    spread_contracts=sized_contracts,
                    portfolio=portfolio,
                    spot_price=spot_price if shares > 0 else None,
                    stock_benchmark_shares=shares or None,
                    long_call_premium=long_call_premium if long_call_contracts else None,
                    long_call_contracts=long_call_contracts,
                )
            )
            console.print(
                f"Payoff table - Bull Call Spread {format_price(long_strike)}/{format_price(short_strike)}, "
                f"debit {format_usd(debit)} per share"
            )
            console.print(
                f"(contract_size={contract_size}, contracts={sized_contracts}{contract_note}, "
                f"portfolio={format_usd(portfolio)})"
            )
            grid = Table(show_header=True, header_style="bold magenta")
            for index, header in enumerate(payoff.headers):
                grid.add_column(header, justify="right" if index else "left")
            for row in payoff.rows:
                grid.add_row(*row)
            console.print(grid)
            _print_summary(
                long_strike=long_strike,
                short_strike=short_strike,
                debit=debit,
                contract_size=contract_size,
                contracts=sized_contracts,
                portfolio=portfolio,
            )
            return

        pnl = bull_call_spread_profit(
            BullCallSpreadArgs(
                long_strike=long_strike,
                short_strike=short_strike,
                price_at_expiry=price,
                net_debit_per_share=debit,
                contract_size=contract_size,
                contracts=sized_contracts,
                portfolio_size=portfolio,
            )
        )
        console.print(
            f"P&L for {format_price(long_strike)}/{format_price(short_strike)} @ ${format_price(price)} "
            f"(debit ${format_price(debit)} per share, contract_size={contract_size}, "
            f"contracts={sized_contracts}{contract_note}): {format_usd(pnl)}"
        )
        if shares > 0:
            bench = underlying_pnl(UnderlyingBenchmarkArgs(spot_price, price, shares))
            console.print(
                f"Underlying benchmark P&L (shares={shares} @ ${format_price(spot_price)}): {format_usd(bench)}"
            )
        if long_call_contracts:
            call_pnl = long_call_profit(
                LongCallBenchmarkArgs(long_strike, price, long_call_premium, contract_size, long_call_contracts)
            )
            console.print(
                f"Long call benchmark P&L (contracts={long_call_contracts}): {format_usd(call_pnl)}"
            )
        _print_summary(
            long_strike=long_strike,
            short_strike=short_strike,
            debit=debit,
            contract_size=contract_size,
            contracts=sized_contracts,
            portfolio=portfolio,
            pnl=pnl,
        )
    except BullCallError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


if __name__ == "__main__":  # pragma: no cover - manual execution only
    app()
