"""Option chain resolution against Alpaca's chain endpoints.

The chain payload shape differs between schema versions and is largely
undocumented, so contracts are located by walking the whole JSON tree and
testing each object against a "looks like a contract" heuristic rather than
by reading a fixed path.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Sequence, Set, Tuple

from bullcall.core.errors import AlpacaRequestError, InputValidationError
from bullcall.integrations.alpaca.client import OPTION_CHAIN_PATHS, AlpacaDataClient, endpoint_path
from bullcall.integrations.alpaca.normalize import (
    NormalizedContract,
    approx_equal,
    first_finite,
    normalize_quote,
)
from bullcall.integrations.alpaca.symbols import (
    normalize_expiration_input,
    option_type_from_symbol_or_field,
    parse_occ_option_symbol,
    sanitize_option_symbol,
)

log = logging.getLogger(__name__)

SYMBOL_ALIASES = ("symbol", "option_symbol", "occ_symbol", "OCCSymbol", "contract_symbol")
STRIKE_ALIASES = ("strike_price", "strike", "strikePrice", "strike_price_value")
EXPIRATION_ALIASES = (
    "expiration_date",
    "expiration",
    "expiry",
    "expirationDate",
    "exp_date",
    "option_expiration",
)
TYPE_ALIASES = ("type", "option_type", "class")
PAGE_TOKEN_ALIASES = ("next_page_token", "nextPageToken", "page_token")

# Keys used by the contract heuristic; deliberately narrower than the alias
# tables so quote records are not mistaken for contracts.
_SYMBOL_MARKERS = frozenset({"symbol", "occ_symbol", "option_symbol"})
_STRIKE_MARKERS = frozenset({"strike", "strike_price", "strikePrice"})
_PRICE_MARKERS = frozenset({"ask", "bid", "ask_price", "bid_price"})

_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})[T ]")

MAX_TRAVERSAL_NODES = 50_000
DEFAULT_PAGE_LIMIT = 4

AttemptStatus = Literal["matched", "no_match", "transport_error"]


@dataclass(frozen=True)
class ChainMatch:
    expiration: str
    long: NormalizedContract
    short: NormalizedContract


@dataclass(frozen=True)
class EndpointAttempt:
    """Outcome of paging through one chain endpoint variant."""

    endpoint: str
    status: AttemptStatus
    pages: int
    contracts: int
    match: Optional[ChainMatch] = None
    error: Optional[AlpacaRequestError] = None


def _first_present(record: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    for alias in aliases:
        value = record.get(alias)
        if value is not None:
            return value
    return None


def _looks_like_contract(record: Mapping[str, Any]) -> bool:
    keys = record.keys()
    return (
        not _SYMBOL_MARKERS.isdisjoint(keys)
        and not _STRIKE_MARKERS.isdisjoint(keys)
        and not _PRICE_MARKERS.isdisjoint(keys)
    )


def _expiration_from_raw(raw: Any, symbol: str) -> Optional[str]:
    if isinstance(raw, str) and raw.strip():
        text = raw.strip()
        prefix = _DATE_PREFIX.match(text)
        if prefix:
            return prefix.group(1)
        try:
            return normalize_expiration_input(text)
        except InputValidationError:
            pass
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw:
        try:
            return normalize_expiration_input(raw)
        except InputValidationError:
            pass
    occ = parse_occ_option_symbol(symbol)
    return occ.expiration if occ else None


@dataclass
class _ContractCollector:
    """Accumulates call contracts for a single traversal, deduplicated by key."""

    results: List[NormalizedContract] = field(default_factory=list)
    seen: Set[Tuple[str, str, float]] = field(default_factory=set)

    def consider(self, record: Mapping[str, Any], symbol_hint: Optional[str] = None) -> None:
        raw_symbol = _first_present(record, SYMBOL_ALIASES)
        if not isinstance(raw_symbol, str) or not raw_symbol.strip():
            raw_symbol = symbol_hint
        if not raw_symbol:
            return

        option_type = option_type_from_symbol_or_field(raw_symbol, _first_present(record, TYPE_ALIASES))
        if option_type != "call":
            return

        strike = first_finite(record, STRIKE_ALIASES)
        if strike is None:
            occ = parse_occ_option_symbol(raw_symbol)
            strike = occ.strike if occ and symbol_hint else None
        if strike is None:
            return

        expiration = _expiration_from_raw(_first_present(record, EXPIRATION_ALIASES), raw_symbol)
        if expiration is None:
            return

        contract = NormalizedContract(
            symbol=sanitize_option_symbol(raw_symbol),
            strike=strike,
            expiration=expiration,
            quote=normalize_quote(record),
        )
        if contract.key in self.seen:
            return
        self.seen.add(contract.key)
        self.results.append(contract)


def _children(value: Any) -> Iterator[Tuple[Optional[str], Any]]:
    if isinstance(value, Mapping):
        for key, child in value.items():
            if isinstance(child, (Mapping, list, tuple)):
                yield (key if isinstance(key, str) else None), child
    elif isinstance(value, (list, tuple)):
        for child in value:
            if isinstance(child, (Mapping, list, tuple)):
                yield None, child


def gather_contracts_from_response(payload: Any, *, max_nodes: int = MAX_TRAVERSAL_NODES) -> List[NormalizedContract]:
    """Collect every call contract found anywhere in *payload*.

    Two shapes are recognised: records that carry symbol, strike and price
    keys themselves, and snapshot maps keyed by OCC symbol whose values only
    hold quote/trade data. Traversal is depth-first in document order and
    stops after ``max_nodes`` containers.
    """

    collector = _ContractCollector()
    stack: List[Tuple[Optional[str], Any]] = [(None, payload)]
    visited = 0
    while stack:
        parent_key, node = stack.pop()
        visited += 1
        if visited > max_nodes:
            log.warning("alpaca.chain.traversal_truncated", extra={"max_nodes": max_nodes})
            break
        if isinstance(node, Mapping):
            if _looks_like_contract(node):
                collector.consider(node)
            elif (
                parent_key
                and _SYMBOL_MARKERS.isdisjoint(node.keys())
                and parse_occ_option_symbol(parent_key) is not None
            ):
                collector.consider(node, symbol_hint=parent_key)
        stack.extend(reversed(list(_children(node))))
    return collector.results


def pick_best_match(
    contracts: Sequence[NormalizedContract],
    long_strike: float,
    short_strike: float,
    explicit_expiration: Optional[str] = None,
) -> Optional[ChainMatch]:
    """Return the earliest expiration at which both strikes are present."""

    wanted = normalize_expiration_input(explicit_expiration) if explicit_expiration else None
    buckets: Dict[str, Dict[str, NormalizedContract]] = {}
    for contract in contracts:
        if wanted and contract.expiration != wanted:
            continue
        if approx_equal(contract.strike, long_strike):
            buckets.setdefault(contract.expiration, {})["long"] = contract
        elif approx_equal(contract.strike, short_strike):
            buckets.setdefault(contract.expiration, {})["short"] = contract

    # ISO dates sort chronologically.
    for expiration in sorted(buckets):
        pair = buckets[expiration]
        if "long" in pair and "short" in pair:
            return ChainMatch(expiration=expiration, long=pair["long"], short=pair["short"])
    return None


def _page_token(payload: Any) -> Optional[str]:
    if not isinstance(payload, Mapping):
        return None
    token = _first_present(payload, PAGE_TOKEN_ALIASES)
    if isinstance(token, str) and token.strip():
        return token
    return None


class ChainResolver:
    """Find a long/short call pair by paging through chain endpoint variants."""

    def __init__(
        self,
        client: AlpacaDataClient,
        *,
        page_limit: Optional[int] = None,
        endpoints: Sequence[str] = OPTION_CHAIN_PATHS,
    ) -> None:
        self._client = client
        self._page_limit = max(1, int(page_limit or client.settings.page_limit or DEFAULT_PAGE_LIMIT))
        self._endpoints = tuple(endpoints)

    def attempt_endpoint(
        self,
        template: str,
        symbol: str,
        long_strike: float,
        short_strike: float,
        expiration: Optional[str] = None,
    ) -> EndpointAttempt:
        path = endpoint_path(template, symbol)
        collected: List[NormalizedContract] = []
        token: Optional[str] = None
        error: Optional[AlpacaRequestError] = None
        pages = 0
        for _ in range(self._page_limit):
            outcome = self._client.try_get_json(path, {"page_token": token} if token else None)
            if not outcome.ok:
                error = outcome.error
                break
            pages += 1
            collected.extend(gather_contracts_from_response(outcome.payload))
            token = _page_token(outcome.payload)
            if token is None:
                break

        # Pages fetched before a failure still count towards a match.
        match = pick_best_match(collected, long_strike, short_strike, expiration)
        if match is not None:
            status: AttemptStatus = "matched"
        elif error is not None:
            status = "transport_error"
        else:
            status = "no_match"
        return EndpointAttempt(
            endpoint=path,
            status=status,
            pages=pages,
            contracts=len(collected),
            match=match,
            error=error,
        )

    def fetch_contracts_from_chain(
        self,
        symbol: str,
        long_strike: float,
        short_strike: float,
        expiration: Optional[str] = None,
    ) -> Optional[ChainMatch]:
        normalized_expiration = normalize_expiration_input(expiration) if expiration else None
        for template in self._endpoints:
            attempt = self.attempt_endpoint(template, symbol, long_strike, short_strike, normalized_expiration)
            log.info(
                "alpaca.chain.attempt",
                extra={
                    "endpoint": attempt.endpoint,
                    "status": attempt.status,
                    "pages": attempt.pages,
                    "contracts": attempt.contracts,
                },
            )
            if attempt.match is not None:
                return attempt.match
        return None


__all__ = [
    "ChainMatch",
    "ChainResolver",
    "EndpointAttempt",
    "MAX_TRAVERSAL_NODES",
    "gather_contracts_from_response",
    "pick_best_match",
]
