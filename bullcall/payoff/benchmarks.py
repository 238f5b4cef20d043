"""Benchmark strategies compared against the spread."""

from __future__ import annotations

from dataclasses import dataclass

from bullcall.core.errors import InputValidationError
from bullcall.payoff.numbers import require_finite, require_positive_int


@dataclass(frozen=True)
class UnderlyingBenchmarkArgs:
    spot: float
    price_at_expiry: float
    shares: float


@dataclass(frozen=True)
class LongCallBenchmarkArgs:
    strike: float
    price_at_expiry: float
    premium_per_share: float
    contract_size: int = 100
    contracts: int = 1


def underlying_pnl(args: UnderlyingBenchmarkArgs) -> float:
    """P&L of buying ``shares`` of the underlying at ``spot``."""

    require_finite("underlying_pnl inputs must be finite numbers.", args.spot, args.price_at_expiry, args.shares)
    return (args.price_at_expiry - args.spot) * args.shares


def long_call_profit(args: LongCallBenchmarkArgs) -> float:
    require_finite(
        "long_call_profit inputs must be finite numbers.",
        args.strike,
        args.price_at_expiry,
        args.premium_per_share,
    )
    if args.premium_per_share < 0:
        raise InputValidationError("premium_per_share cannot be negative.")
    contract_size = require_positive_int("contract_size", args.contract_size)
    contracts = require_positive_int("contracts", args.contracts)
    intrinsic = max(0.0, args.price_at_expiry - args.strike)
    return (intrinsic - args.premium_per_share) * contract_size * contracts


__all__ = ["LongCallBenchmarkArgs", "UnderlyingBenchmarkArgs", "long_call_profit", "underlying_pnl"]
