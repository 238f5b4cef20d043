"""Payoff table assembly for console rendering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from bullcall.app.format import format_price, format_usd
from bullcall.payoff import (
    LongCallBenchmarkArgs,
    UnderlyingBenchmarkArgs,
    compute_payoff_points,
    long_call_profit,
    underlying_pnl,
)


@dataclass(frozen=True)
class PayoffTableOptions:
    prices: Sequence[float]
    long_strike: float
    short_strike: float
    debit: float
    contract_size: int
    spread_contracts: int
    portfolio: float
    spot_price: Optional[float] = None
    stock_benchmark_shares: Optional[int] = None
    long_call_premium: Optional[float] = None
    long_call_contracts: Optional[int] = None

    @property
    def include_stock(self) -> bool:
        return self.spot_price is not None and bool(self.stock_benchmark_shares)

    @property
    def include_long_call(self) -> bool:
        return self.long_call_premium is not None and bool(self.long_call_contracts)


@dataclass(frozen=True)
class PayoffTable:
    headers: List[str]
    rows: List[List[str]]


def build_payoff_table(options: PayoffTableOptions) -> PayoffTable:
    """Spread profit/value per price, plus optional benchmark columns.

    Values are total portfolio values, i.e. ``portfolio + profit``.
    """

    points = compute_payoff_points(
        options.prices,
        long_strike=options.long_strike,
        short_strike=options.short_strike,
        net_debit_per_share=options.debit,
        contract_size=options.contract_size,
        contracts=options.spread_contracts,
        portfolio_size=options.portfolio,
    )

    headers = ["Price", "Spread profit", "Spread value"]
    if options.include_stock:
        headers += ["Stock value", "Stock profit"]
    if options.include_long_call:
        headers += ["Long call value", "Long call profit"]

    rows: List[List[str]] = []
    for point in points:
        row = [format_price(point.price), format_usd(point.profit), format_usd(options.portfolio + point.profit)]
        if options.include_stock:
            stock_profit = underlying_pnl(
                UnderlyingBenchmarkArgs(
                    spot=options.spot_price,
                    price_at_expiry=point.price,
                    shares=options.stock_benchmark_shares,
                )
            )
            row += [format_usd(options.portfolio + stock_profit), format_usd(stock_profit)]
        if options.include_long_call:
            call_profit = long_call_profit(
                LongCallBenchmarkArgs(
                    strike=options.long_strike,
                    price_at_expiry=point.price,
                    premium_per_share=options.long_call_premium,
                    contract_size=options.contract_size,
                    contracts=options.long_call_contracts,
                )
            )
            row += [format_usd(options.portfolio + call_profit), format_usd(call_profit)]
        rows.append(row)
    return PayoffTable(headers=headers, rows=rows)


__all__ = ["PayoffTable", "PayoffTableOptions", "build_payoff_table"]
