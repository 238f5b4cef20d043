from __future__ import annotations

import asyncio

from bullcall.integrations.alpaca.options import FetchSpreadDebitParams
from bullcall.services.market_data import AlpacaMarketDataProvider


def test_provider_runs_client_lookups(make_market_client) -> None:
    client, session = make_market_client(
        {
            "/v2/options/quotes/latest": {
                "quotes": {
                    "SPY250117C00500000": {"ap": 12.5, "bp": 11.5},
                    "SPY250117C00510000": {"ap": 7.5, "bp": 6.5},
                }
            },
            "/v2/stocks/trades/latest": {"trades": {"SPY": {"p": 505.25}}},
        }
    )
    provider = AlpacaMarketDataProvider(client)

    quote = asyncio.run(provider.get_spread_mid_debit(FetchSpreadDebitParams("SPY", 500, 510, "2025-01-17")))
    spot = asyncio.run(provider.get_spot("spy"))

    assert quote.net_debit_per_share == 5.0
    assert spot == 505.25
    assert session.paths() == ["/v2/options/quotes/latest", "/v2/stocks/trades/latest"]
