"""Quote normalisation for Alpaca payloads.

Alpaca's option and equity endpoints spell the same price under different
keys depending on the endpoint and schema version (``ask_price`` vs ``ap`` vs
``askPrice``). The alias tables below are tried in order for each logical
field, so adding a new spelling only means extending a tuple.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Tuple

from bullcall.core.errors import MissingQuoteError

STRIKE_EPSILON = 1e-6

QUOTE_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "ask": ("ask_price", "ask", "ap", "askPrice", "ask_value"),
    "bid": ("bid_price", "bid", "bp", "bidPrice", "bid_value"),
    "last": ("last_price", "last", "lp", "lastPrice", "trade_price"),
    "mid": ("mid_price", "mid", "mark_price", "mark", "theoretical"),
}

QUOTE_CONTAINER_KEYS = ("quote", "quotes", "last_quote", "latestQuote", "latest_quote")


@dataclass(frozen=True)
class NormalizedQuote:
    """Canonical quote shape; every field is a finite float or ``None``."""

    ask: Optional[float] = None
    bid: Optional[float] = None
    last: Optional[float] = None
    mid: Optional[float] = None

    def is_empty(self) -> bool:
        return self.ask is None and self.bid is None and self.last is None and self.mid is None


@dataclass(frozen=True)
class NormalizedContract:
    """An option contract keyed by (symbol, expiration, strike).

    ``quote`` is optional because chain payloads sometimes carry the contract
    identity without pricing; callers attach quotes later with
    :meth:`with_quote`.
    """

    symbol: str
    strike: float
    expiration: str
    quote: Optional[NormalizedQuote] = None

    @property
    def key(self) -> Tuple[str, str, float]:
        return (self.symbol, self.expiration, self.strike)

    def with_quote(self, quote: Optional[NormalizedQuote]) -> "NormalizedContract":
        return replace(self, quote=quote)


def to_finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it is not one."""

    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float, Decimal)):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return None
    return number if math.isfinite(number) else None


def approx_equal(a: float, b: float, epsilon: float = STRIKE_EPSILON) -> bool:
    return abs(a - b) <= epsilon


def first_finite(record: Mapping[str, Any], aliases: Tuple[str, ...]) -> Optional[float]:
    """Return the first alias in *record* holding a finite number."""

    for alias in aliases:
        if alias in record:
            number = to_finite_number(record[alias])
            if number is not None:
                return number
    return None


def extract_quote_fields(raw: Optional[Mapping[str, Any]]) -> Optional[NormalizedQuote]:
    if not isinstance(raw, Mapping):
        return None
    quote = NormalizedQuote(
        **{field: first_finite(raw, aliases) for field, aliases in QUOTE_FIELD_ALIASES.items()}
    )
    return None if quote.is_empty() else quote


def normalize_quote(raw: Any) -> Optional[NormalizedQuote]:
    """Normalise *raw* directly, or one level down under a known quote container."""

    if not isinstance(raw, Mapping):
        return None
    direct = extract_quote_fields(raw)
    if direct is not None:
        return direct
    for key in QUOTE_CONTAINER_KEYS:
        nested = raw.get(key)
        if nested is not None:
            # Only the first present container is consulted.
            return extract_quote_fields(nested) if isinstance(nested, Mapping) else None
    return None


def compute_mid_from_quote(quote: NormalizedQuote, description: str) -> float:
    """Pick a single price for *quote*.

    Priority: bid/ask midpoint, then ``mid``, ``last``, ``ask`` and ``bid``.
    Raises :class:`MissingQuoteError` when nothing is usable.
    """

    if quote.bid is not None and quote.ask is not None:
        mean = (quote.bid + quote.ask) / 2
        if math.isfinite(mean):
            return mean
    for value in (quote.mid, quote.last, quote.ask, quote.bid):
        if value is not None and math.isfinite(value):
            return value
    raise MissingQuoteError(f"No usable quote data available for {description}.", leg=description)


__all__ = [
    "NormalizedContract",
    "NormalizedQuote",
    "QUOTE_CONTAINER_KEYS",
    "QUOTE_FIELD_ALIASES",
    "STRIKE_EPSILON",
    "approx_equal",
    "compute_mid_from_quote",
    "extract_quote_fields",
    "first_finite",
    "normalize_quote",
    "to_finite_number",
]
