"""Market data provider abstraction consumed by the CLI."""

from __future__ import annotations

import asyncio
from typing import Protocol

from bullcall.integrations.alpaca.options import (
    AlpacaMarketDataClient,
    FetchSpreadDebitParams,
    FetchSpreadDebitResult,
)


class MarketDataProvider(Protocol):
    """Interface for resolving spread debits and underlying spot prices."""

    async def get_spread_mid_debit(self, params: FetchSpreadDebitParams) -> FetchSpreadDebitResult:
        """Return the mid-price debit for the requested call spread."""

    async def get_spot(self, symbol: str) -> float:
        """Return the latest price of the underlying equity."""


class AlpacaMarketDataProvider(MarketDataProvider):
    """Run the blocking Alpaca client in a worker thread."""

    def __init__(self, client: AlpacaMarketDataClient) -> None:
        self._client = client

    async def get_spread_mid_debit(self, params: FetchSpreadDebitParams) -> FetchSpreadDebitResult:
        return await asyncio.to_thread(
            self._client.fetch_spread_mid_debit,
            params.symbol,
            params.long_strike,
            params.short_strike,
            params.expiration,
        )

    async def get_spot(self, symbol: str) -> float:
        return await asyncio.to_thread(self._client.fetch_latest_stock_price, symbol)


__all__ = [
    "AlpacaMarketDataProvider",
    "FetchSpreadDebitParams",
    "FetchSpreadDebitResult",
    "MarketDataProvider",
]
