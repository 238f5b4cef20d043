"""Closed-form payoff formulas for bull call spreads and benchmarks."""

from bullcall.payoff.benchmarks import (
    LongCallBenchmarkArgs,
    UnderlyingBenchmarkArgs,
    long_call_profit,
    underlying_pnl,
)
from bullcall.payoff.numbers import price_range
from bullcall.payoff.sizing import DEFAULT_PORTFOLIO_SIZE, resolve_contracts
from bullcall.payoff.spreads import (
    DEFAULT_CONTRACT_SIZE,
    BreakevenArgs,
    BullCallSpreadArgs,
    MaxLossArgs,
    MaxProfitArgs,
    MaxProfitStrikeArgs,
    bull_call_spread_breakeven,
    bull_call_spread_max_loss_per_contract,
    bull_call_spread_max_profit_per_contract,
    bull_call_spread_max_profit_strike,
    bull_call_spread_profit,
)
from bullcall.payoff.table import PayoffPoint, compute_payoff_points

__all__ = [
    "BreakevenArgs",
    "BullCallSpreadArgs",
    "DEFAULT_CONTRACT_SIZE",
    "DEFAULT_PORTFOLIO_SIZE",
    "LongCallBenchmarkArgs",
    "MaxLossArgs",
    "MaxProfitArgs",
    "MaxProfitStrikeArgs",
    "PayoffPoint",
    "UnderlyingBenchmarkArgs",
    "bull_call_spread_breakeven",
    "bull_call_spread_max_loss_per_contract",
    "bull_call_spread_max_profit_per_contract",
    "bull_call_spread_max_profit_strike",
    "bull_call_spread_profit",
    "compute_payoff_points",
    "long_call_profit",
    "price_range",
    "resolve_contracts",
    "underlying_pnl",
]
