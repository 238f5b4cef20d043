"""Alpaca market data integration: quote normalisation, chain resolution and pricing."""

from bullcall.integrations.alpaca.client import AlpacaDataClient
from bullcall.integrations.alpaca.options import (
    AlpacaMarketDataClient,
    FetchSpreadDebitParams,
    FetchSpreadDebitResult,
)

__all__ = [
    "AlpacaDataClient",
    "AlpacaMarketDataClient",
    "FetchSpreadDebitParams",
    "FetchSpreadDebitResult",
]
