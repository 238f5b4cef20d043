"""Spread payoff evaluated over a grid of expiry prices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from bullcall.payoff.spreads import DEFAULT_CONTRACT_SIZE, BullCallSpreadArgs, bull_call_spread_profit


@dataclass(frozen=True)
class PayoffPoint:
    price: float
    profit: float


def compute_payoff_points(
    prices: Iterable[float],
    *,
    long_strike: float,
    short_strike: float,
    net_debit_per_share: float,
    contract_size: int = DEFAULT_CONTRACT_SIZE,
    contracts: Optional[int] = None,
    portfolio_size: Optional[float] = None,
) -> List[PayoffPoint]:
    return [
        PayoffPoint(
            price=price,
            profit=bull_call_spread_profit(
                BullCallSpreadArgs(
                    long_strike=long_strike,
                    short_strike=short_strike,
                    price_at_expiry=price,
                    net_debit_per_share=net_debit_per_share,
                    contract_size=contract_size,
                    contracts=contracts,
                    portfolio_size=portfolio_size,
                )
            ),
        )
        for price in prices
    ]


__all__ = ["PayoffPoint", "compute_payoff_points"]
