"""End-to-end spread debit lookups against a faked Alpaca data API."""

from __future__ import annotations

import math

import pytest

from conftest import FakeResponse

from bullcall.core.errors import ContractResolutionError, InputValidationError, MissingQuoteError
from bullcall.integrations.alpaca.normalize import NormalizedQuote
from bullcall.payoff import BullCallSpreadArgs, bull_call_spread_profit

QUOTES_V2 = "/v2/options/quotes/latest"
QUOTES_V1 = "/v1beta1/options/quotes/latest"
CHAIN_V2 = "/v2/options/chain/TSLA"
CHAIN_V1 = "/v1beta1/options/chain/TSLA"

LONG_SEP = "TSLA240920C00250000"
SHORT_SEP = "TSLA240920C00260000"
LONG_OCT = "TSLA241018C00250000"
SHORT_OCT = "TSLA241018C00260000"

SEP_20_2024 = 1726790400


def _chain_record(symbol: str, strike: float, expiration: str, ask: float, bid: float) -> dict:
    return {
        "symbol": symbol,
        "strike_price": strike,
        "expiration_date": expiration,
        "type": "call",
        "ask_price": ask,
        "bid_price": bid,
    }


def test_fast_path_skips_chain(make_market_client) -> None:
    client, session = make_market_client(
        {
            QUOTES_V2: {
                "quotes": {
                    LONG_SEP: {"ap": 5.5, "bp": 4.5},
                    SHORT_SEP: {"ap": 2.5, "bp": 1.5},
                }
            }
        }
    )

    result = client.fetch_spread_mid_debit("tsla", 250, 260, "2024-09-20")

    assert result.long_mid == 5.0
    assert result.short_mid == 2.0
    assert result.net_debit_per_share == 3.0
    assert result.expiration == SEP_20_2024
    assert session.calls == [(QUOTES_V2, {"symbols": f"{LONG_SEP},{SHORT_SEP}"})]


def test_fast_path_miss_falls_back_to_chain(make_market_client) -> None:
    client, session = make_market_client(
        {
            QUOTES_V2: {"quotes": {LONG_SEP: {"ap": 5.5, "bp": 4.5}}},
            CHAIN_V2: {
                "option_contracts": [
                    _chain_record(LONG_OCT, 250, "2024-10-18", 9.0, 8.0),
                    _chain_record(SHORT_OCT, 260, "2024-10-18", 4.0, 3.0),
                    _chain_record(LONG_SEP, 250, "2024-09-20", 6.0, 5.0),
                    _chain_record(SHORT_SEP, 260, "2024-09-20", 3.0, 2.0),
                ]
            },
        }
    )

    result = client.fetch_spread_mid_debit("TSLA", 250, 260, "2024-09-20")

    assert result.net_debit_per_share == 3.0
    assert result.long_mid == 5.5
    assert session.paths() == [QUOTES_V2, QUOTES_V1, CHAIN_V2]


def test_explicit_expiration_filters_chain_results(make_market_client) -> None:
    client, _ = make_market_client(
        {
            CHAIN_V2: {
                "option_contracts": [
                    _chain_record(LONG_SEP, 250, "2024-09-20", 6.0, 5.0),
                    _chain_record(SHORT_SEP, 260, "2024-09-20", 3.0, 2.0),
                    _chain_record(LONG_OCT, 250, "2024-10-18", 9.0, 8.0),
                    _chain_record(SHORT_OCT, 260, "2024-10-18", 4.0, 3.0),
                ]
            },
        }
    )

    result = client.fetch_spread_mid_debit("TSLA", 250, 260, "2024-10-18")

    assert result.net_debit_per_share == 5.0
    assert result.expiration == SEP_20_2024 + 28 * 86400


def test_no_expiration_picks_nearest_from_chain(make_market_client) -> None:
    client, session = make_market_client(
        {
            CHAIN_V2: {
                "option_contracts": [
                    _chain_record(LONG_OCT, 250, "2024-10-18", 9.0, 8.0),
                    _chain_record(SHORT_OCT, 260, "2024-10-18", 4.0, 3.0),
                    _chain_record(LONG_SEP, 250, "2024-09-20", 6.0, 5.0),
                    _chain_record(SHORT_SEP, 260, "2024-09-20", 3.0, 2.0),
                ]
            }
        }
    )

    result = client.fetch_spread_mid_debit("TSLA", 250, 260)

    assert result.expiration == SEP_20_2024
    assert result.net_debit_per_share == 3.0
    assert session.paths() == [CHAIN_V2]


def test_missing_quotes_are_completed_in_one_call(make_market_client) -> None:
    client, session = make_market_client(
        {
            CHAIN_V2: FakeResponse({"message": "internal"}, status_code=500),
            CHAIN_V1: {"snapshots": {LONG_SEP: {"latestTrade": {"p": 5}}, SHORT_SEP: {}}},
            QUOTES_V2: {
                "quotes": [
                    {"symbol": LONG_SEP, "ask_price": 5.5, "bid_price": 4.5},
                    {"symbol": SHORT_SEP, "ask_price": 2.5, "bid_price": 1.5},
                ]
            },
        }
    )

    result = client.fetch_spread_mid_debit("TSLA", 250, 260)

    assert result.net_debit_per_share == 3.0
    assert session.calls[-1] == (QUOTES_V2, {"symbols": f"{LONG_SEP},{SHORT_SEP}"})
    assert session.paths() == [CHAIN_V2, CHAIN_V1, QUOTES_V2]


@pytest.mark.parametrize(
    "snapshots, leg, symbol",
    [
        ({LONG_SEP: {}, SHORT_SEP: {}}, "long", LONG_SEP),
        ({LONG_SEP: {"latestQuote": {"ap": 5.5, "bp": 4.5}}, SHORT_SEP: {}}, "short", SHORT_SEP),
    ],
)
def test_missing_quote_after_completion_names_leg(make_market_client, snapshots, leg, symbol) -> None:
    client, _ = make_market_client({CHAIN_V2: {"snapshots": snapshots}})

    with pytest.raises(MissingQuoteError) as excinfo:
        client.fetch_spread_mid_debit("TSLA", 250, 260)

    assert excinfo.value.leg == leg
    assert excinfo.value.symbol == symbol
    assert symbol in str(excinfo.value)


def test_no_match_reports_context(make_market_client) -> None:
    client, _ = make_market_client({CHAIN_V2: {"option_contracts": []}})

    with pytest.raises(ContractResolutionError, match="--expiry") as excinfo:
        client.fetch_spread_mid_debit("TSLA", 250, 260)

    assert excinfo.value.symbol == "TSLA"
    assert (excinfo.value.long_strike, excinfo.value.short_strike) == (250, 260)

    with pytest.raises(ContractResolutionError, match="at expiration 2024-09-20"):
        client.fetch_spread_mid_debit("TSLA", 250, 260, "2024-09-20")


@pytest.mark.parametrize(
    "symbol, long_strike, short_strike, message",
    [
        ("   ", 250, 260, "Symbol is required"),
        ("", 250, 260, "Symbol is required"),
        ("TSLA", math.nan, 260, "finite numbers"),
        ("TSLA", 250, math.inf, "finite numbers"),
        ("TSLA", "250", 260, "finite numbers"),
    ],
)
def test_input_validation_happens_before_io(make_market_client, symbol, long_strike, short_strike, message) -> None:
    client, session = make_market_client()

    with pytest.raises(InputValidationError, match=message):
        client.fetch_spread_mid_debit(symbol, long_strike, short_strike)

    assert session.calls == []


def test_inverted_market_is_reported_not_rejected(make_market_client) -> None:
    client, _ = make_market_client(
        {
            QUOTES_V2: {
                "quotes": {
                    LONG_SEP: {"ap": 1.5, "bp": 0.5},
                    SHORT_SEP: {"ap": 2.5, "bp": 1.5},
                }
            }
        }
    )

    result = client.fetch_spread_mid_debit("TSLA", 250, 260, "2024-09-20")

    assert result.net_debit_per_share == -1.0
    with pytest.raises(InputValidationError, match="cannot be negative"):
        bull_call_spread_profit(
            BullCallSpreadArgs(
                long_strike=250,
                short_strike=260,
                price_at_expiry=255,
                net_debit_per_share=result.net_debit_per_share,
                contracts=1,
            )
        )


def test_fetch_latest_option_quotes_dedupes_and_stops_when_complete(make_market_client) -> None:
    client, session = make_market_client({QUOTES_V2: {"quotes": {LONG_SEP: {"mark": 5.0}}}})

    quotes = client.fetch_latest_option_quotes(["tsla240920c00250000", LONG_SEP, ""])

    assert quotes == {LONG_SEP: NormalizedQuote(mid=5.0)}
    assert session.calls == [(QUOTES_V2, {"symbols": LONG_SEP})]


def test_fetch_latest_option_quotes_merges_variants(make_market_client) -> None:
    client, session = make_market_client(
        {
            QUOTES_V2: {"quotes": {LONG_SEP: {"ap": 1.0}}},
            QUOTES_V1: {"data": [{"option_symbol": SHORT_SEP, "bp": 0.5}, {"bp": 9.0}]},
        }
    )

    quotes = client.fetch_latest_option_quotes([LONG_SEP, SHORT_SEP])

    assert quotes == {LONG_SEP: NormalizedQuote(ask=1.0), SHORT_SEP: NormalizedQuote(bid=0.5)}
    assert session.paths() == [QUOTES_V2, QUOTES_V1]


def test_fetch_latest_option_quotes_empty_input_makes_no_request(make_market_client) -> None:
    client, session = make_market_client()

    assert client.fetch_latest_option_quotes([]) == {}
    assert session.calls == []


def test_fetch_latest_stock_price_requires_symbol(make_market_client) -> None:
    client, session = make_market_client()

    with pytest.raises(InputValidationError):
        client.fetch_latest_stock_price(" ")
    assert session.calls == []
