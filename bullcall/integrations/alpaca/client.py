"""HTTP client for Alpaca's market data REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional
from urllib.parse import quote

import requests

from bullcall.core.errors import AlpacaRequestError, AlpacaUnauthorized
from bullcall.core.settings import AlpacaDataSettings

log = logging.getLogger(__name__)

# Schema-version variants per endpoint family, tried in order.
OPTION_CHAIN_PATHS = ("/v2/options/chain/{symbol}", "/v1beta1/options/chain/{symbol}")
OPTION_QUOTE_PATHS = ("/v2/options/quotes/latest", "/v1beta1/options/quotes/latest")
STOCK_TRADE_PATHS = ("/v2/stocks/trades/latest", "/v1beta1/stocks/trades/latest")
STOCK_QUOTE_PATHS = ("/v2/stocks/quotes/latest", "/v1beta1/stocks/quotes/latest")


def endpoint_path(template: str, symbol: str | None = None) -> str:
    """Fill a path template, quoting the symbol as a single path segment."""

    if "{symbol}" not in template:
        return template
    return template.format(symbol=quote(symbol or "", safe=""))


@dataclass(frozen=True)
class FetchOutcome:
    """Result of a GET that never raises for upstream failures."""

    payload: Any = None
    error: Optional[AlpacaRequestError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AlpacaDataClient:
    """Minimal authenticated GET client used by the market data resolvers."""

    def __init__(
        self,
        settings: AlpacaDataSettings,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        key_id, secret_key = settings.require_credentials()
        self.settings = settings
        self.base = settings.base_url.rstrip("/")
        self.timeout = settings.timeout
        self.sess = session or requests.Session()
        self.sess.headers.update(
            {
                "APCA-API-KEY-ID": key_id,
                "APCA-API-SECRET-KEY": secret_key,
                "Accept": "application/json",
            }
        )
        self._key_id_tail = settings.key_tail()

    def get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` and decode JSON, raising :class:`AlpacaRequestError` on failure."""

        url = f"{self.base}{path}"
        try:
            response = self.sess.get(url, params=dict(params) if params else None, timeout=self.timeout)
        except requests.RequestException as exc:
            raise AlpacaRequestError(
                f"Alpaca API request failed for {path}: {exc}", path=path
            ) from exc

        log.debug(
            "alpaca.request",
            extra={
                "path": path,
                "status": response.status_code,
                "key_tail": self._key_id_tail,
            },
        )
        if not response.ok:
            raise _map_http_error(response, path)
        try:
            return response.json()
        except ValueError as exc:
            raise AlpacaRequestError(
                f"Alpaca API returned invalid JSON for {path}",
                status_code=response.status_code,
                path=path,
            ) from exc

    def try_get_json(self, path: str, params: Optional[Mapping[str, Any]] = None) -> FetchOutcome:
        """Like :meth:`get_json` but reports failures as a :class:`FetchOutcome`."""

        try:
            return FetchOutcome(payload=self.get_json(path, params))
        except AlpacaRequestError as exc:
            log.warning(
                "alpaca.request.failed",
                extra={"path": path, "status": exc.status_code, "error": str(exc)},
            )
            return FetchOutcome(error=exc)


def _map_http_error(response: requests.Response, path: str) -> AlpacaRequestError:
    payload: Any | None
    try:
        payload = response.json()
    except ValueError:
        payload = {"error": response.text}
    detail = None
    if isinstance(payload, Mapping):
        detail = payload.get("message") or payload.get("error")
    reason = getattr(response, "reason", None) or ""
    message = f"Alpaca API request failed ({response.status_code} {reason}".rstrip() + f") for {path}"
    if detail:
        message = f"{message}: {detail}"
    status_code = response.status_code
    if status_code in {401, 403}:
        return AlpacaUnauthorized(message, status_code=status_code, path=path, payload=payload)
    return AlpacaRequestError(message, status_code=status_code, path=path, payload=payload)


__all__ = [
    "AlpacaDataClient",
    "FetchOutcome",
    "OPTION_CHAIN_PATHS",
    "OPTION_QUOTE_PATHS",
    "STOCK_QUOTE_PATHS",
    "STOCK_TRADE_PATHS",
    "endpoint_path",
]
