from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import urlsplit

import pytest

from bullcall.core.settings import KEY_ID_ENV, SECRET_KEY_ENV, AlpacaDataSettings, get_settings
from bullcall.integrations.alpaca.client import AlpacaDataClient
from bullcall.integrations.alpaca.options import AlpacaMarketDataClient

_ENV_NAMES = (
    *KEY_ID_ENV,
    *SECRET_KEY_ENV,
    "ALPACA_DATA_BASE_URL",
    "ALPACA_DATA_TIMEOUT",
    "ALPACA_CHAIN_PAGE_LIMIT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def alpaca_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALPACA_API_KEY_ID", "test-key-1234")
    monkeypatch.setenv("ALPACA_API_SECRET_KEY", "test-secret")


class FakeResponse:
    def __init__(self, json_data: Any = None, status_code: int = 200, *, invalid_json: bool = False) -> None:
        self._json = json_data
        self._invalid_json = invalid_json
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.reason = "OK" if self.ok else "Error"
        self.text = "<html>not json</html>" if invalid_json else ""
        self.headers = {"content-type": "application/json"}

    def json(self) -> Any:
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._json


class FakeSession:
    """Routes GETs by URL path.

    A route value may be a payload, a ``FakeResponse``, an exception to
    raise, a callable receiving the query params, or a list consumed one
    entry per request (the last entry repeats).
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None) -> None:
        self.routes: Dict[str, Any] = dict(routes or {})
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.timeouts: List[Any] = []

    def get(self, url: str, params: Any = None, timeout: Any = None, **kwargs: Any) -> FakeResponse:
        path = urlsplit(url).path
        query = dict(params or {})
        self.calls.append((path, query))
        self.timeouts.append(timeout)
        route = self.routes.get(path)
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
        if callable(route) and not isinstance(route, FakeResponse):
            route = route(query)
        if isinstance(route, Exception):
            raise route
        if route is None:
            return FakeResponse({"message": "not found"}, status_code=404)
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(route)

    def paths(self) -> List[str]:
        return [path for path, _ in self.calls]


@pytest.fixture
def settings() -> AlpacaDataSettings:
    return AlpacaDataSettings(key_id="test-key-1234", secret_key="test-secret")


@pytest.fixture
def make_data_client(settings: AlpacaDataSettings) -> Callable[..., Tuple[AlpacaDataClient, FakeSession]]:
    def _factory(routes: Optional[Dict[str, Any]] = None) -> Tuple[AlpacaDataClient, FakeSession]:
        session = FakeSession(routes)
        return AlpacaDataClient(settings, session=session), session

    return _factory


@pytest.fixture
def make_market_client(settings: AlpacaDataSettings) -> Callable[..., Tuple[AlpacaMarketDataClient, FakeSession]]:
    def _factory(routes: Optional[Dict[str, Any]] = None) -> Tuple[AlpacaMarketDataClient, FakeSession]:
        session = FakeSession(routes)
        return AlpacaMarketDataClient.from_settings(settings, session=session), session

    return _factory
