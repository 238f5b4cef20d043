"""Bull call (vertical long call) spread payoff at expiry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bullcall.core.errors import InputValidationError
from bullcall.payoff.numbers import require_finite, require_positive_int
from bullcall.payoff.sizing import resolve_contracts

DEFAULT_CONTRACT_SIZE = 100


@dataclass(frozen=True)
class BullCallSpreadArgs:
    long_strike: float
    short_strike: float
    price_at_expiry: float
    net_debit_per_share: float
    contract_size: int = DEFAULT_CONTRACT_SIZE
    contracts: Optional[int] = None
    portfolio_size: Optional[float] = None


@dataclass(frozen=True)
class MaxProfitArgs:
    long_strike: float
    short_strike: float
    net_debit_per_share: float
    contract_size: int = DEFAULT_CONTRACT_SIZE


@dataclass(frozen=True)
class MaxProfitStrikeArgs:
    long_strike: float
    short_strike: float


@dataclass(frozen=True)
class MaxLossArgs:
    net_debit_per_share: float
    contract_size: int = DEFAULT_CONTRACT_SIZE


@dataclass(frozen=True)
class BreakevenArgs:
    long_strike: float
    net_debit_per_share: float


def _require_ordered(long_strike: float, short_strike: float) -> None:
    if long_strike >= short_strike:
        raise InputValidationError("long_strike must be LESS than short_strike for a bull call spread.")


def _require_debit(net_debit_per_share: float) -> None:
    if net_debit_per_share < 0:
        raise InputValidationError("net_debit_per_share (debit) cannot be negative.")


def bull_call_spread_profit(args: BullCallSpreadArgs) -> float:
    """Total profit at expiry across all contracts."""

    require_finite(
        "All numeric inputs must be finite numbers.",
        args.long_strike,
        args.short_strike,
        args.price_at_expiry,
        args.net_debit_per_share,
    )
    _require_ordered(args.long_strike, args.short_strike)
    _require_debit(args.net_debit_per_share)
    contract_size = require_positive_int("contract_size", args.contract_size)

    contracts = resolve_contracts(
        net_debit_per_share=args.net_debit_per_share,
        contract_size=contract_size,
        contracts=args.contracts,
        portfolio_size=args.portfolio_size,
    )

    width = args.short_strike - args.long_strike
    intrinsic_per_share = max(0.0, min(args.price_at_expiry - args.long_strike, width))
    profit_per_share = intrinsic_per_share - args.net_debit_per_share
    return profit_per_share * contract_size * contracts


def bull_call_spread_max_profit_per_contract(args: MaxProfitArgs) -> float:
    require_finite(
        "All numeric inputs must be finite numbers.",
        args.long_strike,
        args.short_strike,
        args.net_debit_per_share,
    )
    _require_ordered(args.long_strike, args.short_strike)
    _require_debit(args.net_debit_per_share)
    contract_size = require_positive_int("contract_size", args.contract_size)
    return (args.short_strike - args.long_strike - args.net_debit_per_share) * contract_size


def bull_call_spread_max_profit_strike(args: MaxProfitStrikeArgs) -> float:
    require_finite("All numeric inputs must be finite numbers.", args.long_strike, args.short_strike)
    _require_ordered(args.long_strike, args.short_strike)
    return args.short_strike


def bull_call_spread_max_loss_per_contract(args: MaxLossArgs) -> float:
    """Max loss as a negative number: the debit paid per contract."""

    require_finite("net_debit_per_share must be a non-negative finite number.", args.net_debit_per_share)
    _require_debit(args.net_debit_per_share)
    contract_size = require_positive_int("contract_size", args.contract_size)
    return -args.net_debit_per_share * contract_size


def bull_call_spread_breakeven(args: BreakevenArgs) -> float:
    require_finite("All numeric inputs must be finite numbers.", args.long_strike, args.net_debit_per_share)
    _require_debit(args.net_debit_per_share)
    return args.long_strike + args.net_debit_per_share


__all__ = [
    "BreakevenArgs",
    "BullCallSpreadArgs",
    "DEFAULT_CONTRACT_SIZE",
    "MaxLossArgs",
    "MaxProfitArgs",
    "MaxProfitStrikeArgs",
    "bull_call_spread_breakeven",
    "bull_call_spread_max_loss_per_contract",
    "bull_call_spread_max_profit_per_contract",
    "bull_call_spread_max_profit_strike",
    "bull_call_spread_profit",
]
