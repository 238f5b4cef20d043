"""Runtime settings describing how to reach the Alpaca market data API."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional, Tuple, TypeVar

from pydantic import BaseModel, Field, field_validator

from bullcall.core.errors import ConfigurationError

DEFAULT_DATA_BASE_URL = "https://data.alpaca.markets"

KEY_ID_ENV = ("ALPACA_API_KEY_ID", "ALPACA_API_KEY", "APCA_API_KEY_ID", "ALPACA_KEY_ID")
SECRET_KEY_ENV = (
    "ALPACA_API_SECRET_KEY",
    "ALPACA_API_SECRET",
    "APCA_API_SECRET_KEY",
    "ALPACA_SECRET_KEY",
)

_T = TypeVar("_T", int, float)


def _env_pick(*names: str, default: str | None = None) -> str | None:
    """Return the first non-blank environment variable in *names*."""

    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return default


def _env_cast(name: str, default: _T) -> _T:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return type(default)(value.strip())
    except (TypeError, ValueError):
        return default


class AlpacaDataSettings(BaseModel):
    """Settings for the Alpaca market data REST API."""

    base_url: str = Field(default=DEFAULT_DATA_BASE_URL)
    key_id: Optional[str] = Field(default=None)
    secret_key: Optional[str] = Field(default=None)
    timeout: float = Field(default=10.0, gt=0)
    page_limit: int = Field(default=4, ge=1)

    @field_validator("base_url", mode="before")
    @classmethod
    def _strip_base_url(cls, value: object) -> str:
        text = str(value or "").strip().rstrip("/")
        return text or DEFAULT_DATA_BASE_URL

    @classmethod
    def from_env(cls) -> "AlpacaDataSettings":
        timeout = _env_cast("ALPACA_DATA_TIMEOUT", 10.0)
        page_limit = _env_cast("ALPACA_CHAIN_PAGE_LIMIT", 4)
        return cls(
            base_url=_env_pick("ALPACA_DATA_BASE_URL", default=DEFAULT_DATA_BASE_URL),
            key_id=_env_pick(*KEY_ID_ENV),
            secret_key=_env_pick(*SECRET_KEY_ENV),
            timeout=timeout if timeout > 0 else 10.0,
            page_limit=page_limit if page_limit >= 1 else 4,
        )

    def is_configured(self) -> bool:
        return bool(self.key_id and self.secret_key)

    def require_credentials(self) -> Tuple[str, str]:
        """Return ``(key_id, secret_key)`` or raise when either is missing."""

        if not self.key_id:
            raise ConfigurationError(
                f"Missing required environment variable {KEY_ID_ENV[0]}. Add it to your .env file."
            )
        if not self.secret_key:
            raise ConfigurationError(
                f"Missing required environment variable {SECRET_KEY_ENV[0]}. Add it to your .env file."
            )
        return self.key_id, self.secret_key

    def key_tail(self) -> str | None:
        return self.key_id[-4:] if self.key_id else None


@lru_cache(maxsize=1)
def get_settings() -> AlpacaDataSettings:
    """Return cached settings loaded from environment variables."""

    return AlpacaDataSettings.from_env()


__all__ = ["AlpacaDataSettings", "DEFAULT_DATA_BASE_URL", "get_settings"]
