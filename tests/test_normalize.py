"""Quote normalisation and mid-price selection."""

from __future__ import annotations

from decimal import Decimal

import pytest

from bullcall.core.errors import MissingQuoteError
from bullcall.integrations.alpaca.normalize import (
    NormalizedContract,
    NormalizedQuote,
    approx_equal,
    compute_mid_from_quote,
    extract_quote_fields,
    normalize_quote,
    to_finite_number,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (3, 3.0),
        (2.5, 2.5),
        (" 4.25 ", 4.25),
        (Decimal("1.5"), 1.5),
        ("abc", None),
        ("", None),
        ("nan", None),
        ("inf", None),
        (float("nan"), None),
        (True, None),
        (None, None),
        ([1], None),
        (10**400, None),
        (Decimal("sNaN"), None),
        (Decimal("1e400"), None),
    ],
)
def test_to_finite_number(raw, expected) -> None:
    assert to_finite_number(raw) == expected


def test_extract_quote_fields_uses_alias_priority() -> None:
    quote = extract_quote_fields({"ap": 1.2, "ask_price": 1.1, "bp": "0.9", "lastPrice": 1.0})

    assert quote == NormalizedQuote(ask=1.1, bid=0.9, last=1.0, mid=None)


def test_extract_quote_fields_skips_unusable_alias_values() -> None:
    quote = extract_quote_fields({"ask_price": None, "ask": "n/a", "ap": 2.0})

    assert quote is not None
    assert quote.ask == 2.0


def test_extract_quote_fields_returns_none_without_prices() -> None:
    assert extract_quote_fields({"symbol": "TSLA", "volume": 10}) is None
    assert extract_quote_fields(None) is None


def test_normalize_quote_reads_nested_container() -> None:
    quote = normalize_quote({"symbol": "X", "latestQuote": {"ap": 2.1, "bp": 1.9}})

    assert quote == NormalizedQuote(ask=2.1, bid=1.9)


def test_normalize_quote_prefers_direct_fields() -> None:
    quote = normalize_quote({"mark": 5.0, "quote": {"ask": 9.0, "bid": 8.0}})

    assert quote == NormalizedQuote(mid=5.0)


def test_normalize_quote_only_consults_first_container() -> None:
    raw = {"quote": {"volume": 1}, "latest_quote": {"ask": 3.0}}

    assert normalize_quote(raw) is None


def test_normalize_quote_rejects_non_mappings() -> None:
    assert normalize_quote([{"ask": 1}]) is None
    assert normalize_quote("1.0") is None


def test_compute_mid_uses_bid_ask_midpoint() -> None:
    assert compute_mid_from_quote(NormalizedQuote(bid=10, ask=12), "leg") == 11


def test_compute_mid_falls_back_in_priority_order() -> None:
    assert compute_mid_from_quote(NormalizedQuote(last=9), "leg") == 9
    assert compute_mid_from_quote(NormalizedQuote(mid=4, last=9), "leg") == 4
    assert compute_mid_from_quote(NormalizedQuote(ask=3, last=9), "leg") == 9
    assert compute_mid_from_quote(NormalizedQuote(ask=3), "leg") == 3
    assert compute_mid_from_quote(NormalizedQuote(bid=2), "leg") == 2


def test_compute_mid_fails_on_empty_quote() -> None:
    with pytest.raises(MissingQuoteError, match="TSLA long"):
        compute_mid_from_quote(NormalizedQuote(), "TSLA long")


def test_approx_equal_tolerates_representation_error() -> None:
    assert approx_equal(0.1 + 0.2, 0.3)
    assert not approx_equal(250.0, 250.5)
    assert approx_equal(250.0, 250.4, epsilon=0.5)


def test_contract_key_and_with_quote() -> None:
    contract = NormalizedContract(symbol="TSLA240920C00250000", strike=250.0, expiration="2024-09-20")
    quoted = contract.with_quote(NormalizedQuote(ask=1.0))

    assert contract.key == ("TSLA240920C00250000", "2024-09-20", 250.0)
    assert contract.quote is None
    assert quoted.quote == NormalizedQuote(ask=1.0)
    assert quoted.key == contract.key
