"""Spread mid-price debit lookup against Alpaca's options data API."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests

from bullcall.core.errors import ContractResolutionError, InputValidationError, MissingQuoteError
from bullcall.core.settings import AlpacaDataSettings, get_settings
from bullcall.integrations.alpaca.chain import ChainResolver
from bullcall.integrations.alpaca.client import OPTION_QUOTE_PATHS, AlpacaDataClient
from bullcall.integrations.alpaca.equities import fetch_latest_stock_price
from bullcall.integrations.alpaca.normalize import (
    NormalizedContract,
    NormalizedQuote,
    compute_mid_from_quote,
    normalize_quote,
)
from bullcall.integrations.alpaca.symbols import (
    build_occ_option_symbol,
    expiration_to_unix_seconds,
    normalize_expiration_input,
    sanitize_option_symbol,
)

log = logging.getLogger(__name__)

ExpirationInput = Union[str, date, int, float]

QUOTE_ROOT_KEYS = ("quotes", "data", "results")
QUOTE_SYMBOL_ALIASES = ("symbol", "option_symbol", "occ_symbol", "contract_symbol")


@dataclass(frozen=True)
class FetchSpreadDebitParams:
    symbol: str
    long_strike: float
    short_strike: float
    expiration: Optional[ExpirationInput] = None


@dataclass(frozen=True)
class FetchSpreadDebitResult:
    """Mid-price debit of a call spread.

    ``net_debit_per_share`` is ``long_mid - short_mid`` and is negative when
    the market is inverted; it is reported as-is. ``expiration`` is midnight
    UTC of the matched expiry in Unix seconds.
    """

    net_debit_per_share: float
    long_mid: float
    short_mid: float
    expiration: int


def _quotes_from_payload(payload: Any) -> Dict[str, NormalizedQuote]:
    quotes: Dict[str, NormalizedQuote] = {}
    if not isinstance(payload, Mapping):
        return quotes
    node = None
    for key in QUOTE_ROOT_KEYS:
        node = payload.get(key)
        if node is not None:
            break
    if isinstance(node, list):
        for entry in node:
            if not isinstance(entry, Mapping):
                continue
            raw_symbol = next(
                (entry[alias] for alias in QUOTE_SYMBOL_ALIASES if isinstance(entry.get(alias), str)),
                None,
            )
            if not raw_symbol:
                continue
            quote = normalize_quote(entry)
            if quote is not None:
                quotes[sanitize_option_symbol(raw_symbol)] = quote
    elif isinstance(node, Mapping):
        for key, value in node.items():
            if not key:
                continue
            quote = normalize_quote(value)
            if quote is not None:
                quotes[sanitize_option_symbol(str(key))] = quote
    return quotes


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class AlpacaMarketDataClient:
    """Resolve spread debits and spot prices from Alpaca market data."""

    def __init__(self, client: AlpacaDataClient, *, chain_resolver: Optional[ChainResolver] = None) -> None:
        self._client = client
        self._chain = chain_resolver or ChainResolver(client)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[AlpacaDataSettings] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> "AlpacaMarketDataClient":
        return cls(AlpacaDataClient(settings or get_settings(), session=session))

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------
    def fetch_latest_option_quotes(self, symbols: Iterable[str]) -> Dict[str, NormalizedQuote]:
        """Batch-fetch latest quotes keyed by sanitized symbol.

        Missing symbols are simply absent from the result.
        """

        unique: List[str] = list(dict.fromkeys(sanitize_option_symbol(s) for s in symbols if s))
        accumulated: Dict[str, NormalizedQuote] = {}
        if not unique:
            return accumulated
        for path in OPTION_QUOTE_PATHS:
            outcome = self._client.try_get_json(path, {"symbols": ",".join(unique)})
            if not outcome.ok:
                continue
            accumulated.update(_quotes_from_payload(outcome.payload))
            if all(symbol in accumulated for symbol in unique):
                break
        return accumulated

    # ------------------------------------------------------------------
    # Spread debit
    # ------------------------------------------------------------------
    def _fast_path(
        self,
        symbol: str,
        expiration: str,
        long_strike: float,
        short_strike: float,
    ) -> Optional[tuple[NormalizedContract, NormalizedContract]]:
        long_symbol = build_occ_option_symbol(symbol, expiration, long_strike, "C")
        short_symbol = build_occ_option_symbol(symbol, expiration, short_strike, "C")
        quotes = self.fetch_latest_option_quotes([long_symbol, short_symbol])
        long_quote = quotes.get(long_symbol)
        short_quote = quotes.get(short_symbol)
        if long_quote is None or short_quote is None:
            log.info(
                "alpaca.quotes.fast_path_miss",
                extra={"long_symbol": long_symbol, "short_symbol": short_symbol},
            )
            return None
        return (
            NormalizedContract(long_symbol, long_strike, expiration, long_quote),
            NormalizedContract(short_symbol, short_strike, expiration, short_quote),
        )

    def fetch_spread_mid_debit(
        self,
        symbol: str,
        long_strike: float,
        short_strike: float,
        expiration: Optional[ExpirationInput] = None,
    ) -> FetchSpreadDebitResult:
        """Return the mid-price net debit for a long/short call pair.

        With an expiration, the two OCC symbols are quoted directly and the
        chain is only walked if either quote is missing. Without one, the
        chain resolver picks the nearest expiration listing both strikes.
        """

        if not symbol or not str(symbol).strip():
            raise InputValidationError("Symbol is required for Alpaca lookup.")
        if not (_is_finite_number(long_strike) and _is_finite_number(short_strike)):
            raise InputValidationError("Both long_strike and short_strike must be finite numbers.")
        long_strike, short_strike = float(long_strike), float(short_strike)
        underlying = str(symbol).strip().upper()
        normalized_expiration = (
            normalize_expiration_input(expiration) if expiration not in (None, "") else None
        )

        pair = None
        if normalized_expiration:
            pair = self._fast_path(underlying, normalized_expiration, long_strike, short_strike)
        if pair is not None:
            long_contract, short_contract = pair
            resolved_expiration = normalized_expiration
        else:
            match = self._chain.fetch_contracts_from_chain(
                underlying, long_strike, short_strike, normalized_expiration
            )
            if match is None:
                raise ContractResolutionError(underlying, long_strike, short_strike, normalized_expiration)
            long_contract, short_contract = match.long, match.short
            resolved_expiration = match.expiration

        missing = [c.symbol for c in (long_contract, short_contract) if c.quote is None]
        if missing:
            fetched = self.fetch_latest_option_quotes(missing)
            if long_contract.quote is None:
                long_contract = long_contract.with_quote(fetched.get(long_contract.symbol))
            if short_contract.quote is None:
                short_contract = short_contract.with_quote(fetched.get(short_contract.symbol))
        if long_contract.quote is None:
            raise MissingQuoteError(
                f"Missing quote data for long strike {long_strike:g} ({long_contract.symbol}).",
                leg="long",
                symbol=long_contract.symbol,
            )
        if short_contract.quote is None:
            raise MissingQuoteError(
                f"Missing quote data for short strike {short_strike:g} ({short_contract.symbol}).",
                leg="short",
                symbol=short_contract.symbol,
            )

        long_mid = compute_mid_from_quote(long_contract.quote, f"{underlying} {long_contract.symbol}")
        short_mid = compute_mid_from_quote(short_contract.quote, f"{underlying} {short_contract.symbol}")
        result = FetchSpreadDebitResult(
            net_debit_per_share=long_mid - short_mid,
            long_mid=long_mid,
            short_mid=short_mid,
            expiration=expiration_to_unix_seconds(resolved_expiration),
        )
        if result.net_debit_per_share < 0:
            log.warning(
                "alpaca.spread.inverted",
                extra={"symbol": underlying, "long_mid": long_mid, "short_mid": short_mid},
            )
        return result

    # ------------------------------------------------------------------
    # Underlying
    # ------------------------------------------------------------------
    def fetch_latest_stock_price(self, symbol: str) -> float:
        if not symbol or not str(symbol).strip():
            raise InputValidationError("Symbol is required for Alpaca lookup.")
        return fetch_latest_stock_price(self._client, symbol)


__all__ = [
    "AlpacaMarketDataClient",
    "FetchSpreadDebitParams",
    "FetchSpreadDebitResult",
]
