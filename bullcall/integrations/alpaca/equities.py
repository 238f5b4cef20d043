"""Latest underlying equity price via Alpaca trade and quote endpoints."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from bullcall.core.errors import PriceUnavailableError
from bullcall.integrations.alpaca.client import STOCK_QUOTE_PATHS, STOCK_TRADE_PATHS, AlpacaDataClient
from bullcall.integrations.alpaca.normalize import (
    NormalizedQuote,
    compute_mid_from_quote,
    first_finite,
    normalize_quote,
)
from bullcall.integrations.alpaca.symbols import sanitize_option_symbol

log = logging.getLogger(__name__)

TRADE_PRICE_ALIASES = ("price", "p", "last", "last_price", "close")
NESTED_TRADE_PRICE_ALIASES = ("price", "p", "last", "last_price")
TRADE_CONTAINER_KEYS = ("trade", "last_trade", "latest_trade", "t")
TRADE_ROOT_KEYS = ("trades", "data", "results")
QUOTE_ROOT_KEYS = ("quotes", "data", "results")


def _root(payload: Mapping[str, Any], keys: tuple) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return payload


def extract_trade_price(raw: Any) -> Optional[float]:
    """Read a trade price from a flat record or one nested under a trade key."""

    if not isinstance(raw, Mapping):
        return None
    direct = first_finite(raw, TRADE_PRICE_ALIASES)
    if direct is not None:
        return direct
    for key in TRADE_CONTAINER_KEYS:
        nested = raw.get(key)
        if nested is not None:
            return first_finite(nested, NESTED_TRADE_PRICE_ALIASES) if isinstance(nested, Mapping) else None
    return None


def _price_from_trade_payload(payload: Any, symbol: str) -> Optional[float]:
    if not isinstance(payload, Mapping):
        return None
    root = _root(payload, TRADE_ROOT_KEYS)
    if isinstance(root, list):
        for item in root:
            price = extract_trade_price(item)
            if price is not None:
                return price
        return None
    if isinstance(root, Mapping):
        entry = root.get(symbol)
        return extract_trade_price(root if entry is None else entry)
    return None


def fetch_latest_equity_quote(client: AlpacaDataClient, symbol: str) -> Optional[NormalizedQuote]:
    normalized = sanitize_option_symbol(symbol)
    for path in STOCK_QUOTE_PATHS:
        outcome = client.try_get_json(path, {"symbols": normalized})
        if not outcome.ok or not isinstance(outcome.payload, Mapping):
            continue
        root = _root(outcome.payload, QUOTE_ROOT_KEYS)
        if isinstance(root, Mapping):
            entry = root.get(normalized)
            quote = normalize_quote(root if entry is None else entry)
            if quote is not None:
                return quote
    return None


def fetch_latest_stock_price(client: AlpacaDataClient, symbol: str) -> float:
    """Return the latest trade price, falling back to the quote midpoint."""

    normalized = sanitize_option_symbol(symbol)
    for path in STOCK_TRADE_PATHS:
        outcome = client.try_get_json(path, {"symbols": normalized})
        if not outcome.ok:
            continue
        price = _price_from_trade_payload(outcome.payload, normalized)
        if price is not None:
            return price

    log.info("alpaca.equity.trade_miss", extra={"symbol": normalized})
    quote = fetch_latest_equity_quote(client, normalized)
    if quote is not None:
        return compute_mid_from_quote(quote, f"{normalized} equity quote")
    raise PriceUnavailableError(normalized)


__all__ = ["extract_trade_price", "fetch_latest_equity_quote", "fetch_latest_stock_price"]
