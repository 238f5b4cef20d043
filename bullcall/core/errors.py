"""Exception hierarchy shared by the market data client and payoff engine."""

from __future__ import annotations

from typing import Any


class BullCallError(Exception):
    """Base class for all errors raised by this package."""


class InputValidationError(BullCallError, ValueError):
    """Raised before any I/O when a caller supplies an invalid argument."""


class ConfigurationError(BullCallError):
    """Raised when required configuration (credentials) is missing."""


class AlpacaRequestError(BullCallError):
    """Raised when an Alpaca data request fails or returns a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        path: str | None = None,
        payload: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.path = path
        self.payload = payload


class AlpacaUnauthorized(AlpacaRequestError):
    """Raised when Alpaca rejects the configured credentials."""


class ContractResolutionError(BullCallError, LookupError):
    """Raised when no option contract pair matches the requested strikes."""

    def __init__(
        self,
        symbol: str,
        long_strike: float,
        short_strike: float,
        expiration: str | None = None,
    ) -> None:
        self.symbol = symbol
        self.long_strike = long_strike
        self.short_strike = short_strike
        self.expiration = expiration
        if expiration:
            message = (
                f"Unable to locate both strikes {long_strike:g}/{short_strike:g} for {symbol} "
                f"at expiration {expiration} via Alpaca."
            )
        else:
            message = (
                f"Unable to locate both strikes {long_strike:g}/{short_strike:g} for {symbol} "
                "via Alpaca. Try providing --expiry (YYYY-MM-DD)."
            )
        super().__init__(message)


class MissingQuoteError(BullCallError, LookupError):
    """Raised when a contract was found but carries no usable pricing."""

    def __init__(self, message: str, *, leg: str | None = None, symbol: str | None = None) -> None:
        super().__init__(message)
        self.leg = leg
        self.symbol = symbol


class PriceUnavailableError(BullCallError, LookupError):
    """Raised when no trade or quote price resolves for an equity symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Unable to fetch latest stock price for {symbol} via Alpaca.")
        self.symbol = symbol


__all__ = [
    "AlpacaRequestError",
    "AlpacaUnauthorized",
    "BullCallError",
    "ConfigurationError",
    "ContractResolutionError",
    "InputValidationError",
    "MissingQuoteError",
    "PriceUnavailableError",
]
