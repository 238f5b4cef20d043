"""OCC option symbol construction/parsing and expiration normalisation."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Literal, Optional

from dateutil import parser as date_parser

from bullcall.core.errors import InputValidationError

OptionType = Literal["call", "put"]

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_WHITESPACE = re.compile(r"\s+")

# Timestamps above this are milliseconds, at or below are seconds.
_MILLISECOND_THRESHOLD = 10_000_000_000

_CALL_TOKENS = frozenset({"call", "c", "buy_call"})
_PUT_TOKENS = frozenset({"put", "p", "buy_put"})

# Trailing OCC layout: YYMMDD + C/P + 8-digit strike.
_OCC_TAIL_LENGTH = 15


@dataclass(frozen=True)
class OccSymbol:
    root: str
    expiration: str
    option_type: OptionType
    strike: float


def sanitize_option_symbol(symbol: str) -> str:
    return _WHITESPACE.sub("", symbol).upper()


def _parse_iso_date(text: str) -> date:
    return datetime.strptime(text, "%Y-%m-%d").date()


def _date_from_timestamp(value: float) -> date:
    seconds = value / 1000 if value > _MILLISECOND_THRESHOLD else value
    return datetime.fromtimestamp(seconds, tz=timezone.utc).date()


def _parse_generic_date(text: str) -> Optional[date]:
    try:
        parsed = date_parser.parse(text)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def normalize_expiration_input(value: Any) -> str:
    """Normalise an expiration to ``YYYY-MM-DD``.

    Accepts ISO dates, ``date``/``datetime`` objects, Unix timestamps
    (seconds or milliseconds, numeric or numeric strings) and any other
    free-form date string :func:`dateutil.parser.parse` understands.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value) or value <= 0:
            raise InputValidationError(f'Unable to interpret expiration "{value}".')
        return _timestamp_to_iso(value, value)

    text = str(value or "").strip()
    if not text:
        raise InputValidationError("Expiration value cannot be empty.")
    if _ISO_DATE.match(text):
        try:
            _parse_iso_date(text)
        except ValueError as exc:
            raise InputValidationError(f'Invalid expiration date "{text}".') from exc
        return text
    try:
        numeric = float(text)
    except ValueError:
        numeric = None
    if numeric is not None and math.isfinite(numeric) and numeric > 0:
        return _timestamp_to_iso(numeric, value)

    parsed = _parse_generic_date(text)
    if parsed is None:
        raise InputValidationError(f'Unable to interpret expiration "{value}". Use YYYY-MM-DD.')
    return parsed.isoformat()


def _timestamp_to_iso(numeric: float, original: Any) -> str:
    try:
        return _date_from_timestamp(numeric).isoformat()
    except (OverflowError, OSError, ValueError) as exc:
        raise InputValidationError(f'Unable to interpret expiration "{original}".') from exc


def expiration_to_unix_seconds(expiration: str) -> int:
    """Return midnight UTC of *expiration* as Unix seconds."""

    try:
        parsed = _parse_iso_date(normalize_expiration_input(expiration))
    except InputValidationError as exc:
        raise InputValidationError(f'Unable to parse expiration date "{expiration}".') from exc
    return int(datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc).timestamp())


def build_occ_option_symbol(underlying: str, expiration: str, strike: float, option_type: str) -> str:
    """Build e.g. ``TSLA240920C00250500`` for TSLA 2024-09-20 250.5 call."""

    root = (underlying or "").strip().upper()
    if not root:
        raise InputValidationError("Underlying symbol cannot be empty.")
    try:
        expiry = _parse_iso_date(str(expiration).strip())
    except ValueError as exc:
        raise InputValidationError(f'Invalid expiration date "{expiration}".') from exc
    if isinstance(strike, bool) or not isinstance(strike, (int, float)) or not math.isfinite(strike):
        raise InputValidationError(f'Invalid strike price "{strike}".')
    if strike < 0:
        raise InputValidationError(f'Invalid strike price "{strike}".')
    type_char = str(option_type).strip().upper()[:1]
    if type_char not in {"C", "P"}:
        raise InputValidationError(f'Invalid option type "{option_type}"; expected "C" or "P".')
    strike_int = int(round(strike * 1000))
    return f"{root}{expiry:%y%m%d}{type_char}{strike_int:08d}"


def parse_occ_option_symbol(symbol: str) -> Optional[OccSymbol]:
    """Split a canonical OCC symbol into its parts; ``None`` if it is not one."""

    sanitized = sanitize_option_symbol(symbol or "")
    if len(sanitized) < _OCC_TAIL_LENGTH:
        return None
    tail = sanitized[-_OCC_TAIL_LENGTH:]
    yy, mm, dd, type_char, strike_digits = tail[0:2], tail[2:4], tail[4:6], tail[6], tail[7:]
    if not (yy + mm + dd).isdigit() or not strike_digits.isdigit() or type_char not in {"C", "P"}:
        return None
    month, day = int(mm), int(dd)
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    try:
        expiry = date(2000 + int(yy), month, day)
    except ValueError:
        return None
    return OccSymbol(
        root=sanitized[:-_OCC_TAIL_LENGTH],
        expiration=expiry.isoformat(),
        option_type="call" if type_char == "C" else "put",
        strike=int(strike_digits) / 1000,
    )


def option_type_from_symbol_or_field(symbol: Optional[str], type_field: Any = None) -> Optional[OptionType]:
    """Prefer an explicit type field; otherwise read the OCC type character."""

    if isinstance(type_field, str):
        token = type_field.strip().lower()
        if token in _CALL_TOKENS:
            return "call"
        if token in _PUT_TOKENS:
            return "put"
    if symbol:
        sanitized = sanitize_option_symbol(symbol)
        type_char = sanitized[-9:-8]
        if type_char == "C":
            return "call"
        if type_char == "P":
            return "put"
    return None


__all__ = [
    "OccSymbol",
    "OptionType",
    "build_occ_option_symbol",
    "expiration_to_unix_seconds",
    "normalize_expiration_input",
    "option_type_from_symbol_or_field",
    "parse_occ_option_symbol",
    "sanitize_option_symbol",
]
