"""Contract sizing against a target portfolio value."""

from __future__ import annotations

import math
from typing import Optional

from bullcall.core.errors import InputValidationError
from bullcall.payoff.numbers import is_finite, require_positive_int

DEFAULT_PORTFOLIO_SIZE = 100_000


def resolve_contracts(
    *,
    net_debit_per_share: float,
    contract_size: int,
    contracts: Optional[int] = None,
    portfolio_size: Optional[float] = None,
) -> int:
    """Return the number of spreads to hold.

    An explicit ``contracts`` value always wins. Otherwise the portfolio is
    spent on as many spreads as it can fund; with no portfolio, one spread.
    """

    contract_size = require_positive_int("contract_size", contract_size)
    if not is_finite(net_debit_per_share):
        raise InputValidationError("net_debit_per_share must be a finite number.")
    if net_debit_per_share < 0:
        raise InputValidationError("net_debit_per_share (debit) cannot be negative.")

    if contracts is not None:
        return require_positive_int("contracts", contracts)

    if portfolio_size is None:
        return 1
    if not is_finite(portfolio_size) or portfolio_size <= 0:
        raise InputValidationError("portfolio_size must be a positive finite number.")

    per_contract_cost = net_debit_per_share * contract_size
    if per_contract_cost <= 0:
        return 1

    max_contracts = math.floor(portfolio_size / per_contract_cost)
    if max_contracts <= 0:
        raise InputValidationError("Portfolio size too small to fund a single contract at this debit.")
    return max_contracts


__all__ = ["DEFAULT_PORTFOLIO_SIZE", "resolve_contracts"]
