"""Console formatting helpers."""

from __future__ import annotations

import math
from datetime import datetime, timezone


def format_usd(value: float) -> str:
    """``1234.5`` -> ``$1,234.5``; ``-300`` -> ``-$300`` (at most two decimals)."""

    rounded = round(value, 2)
    sign = "-$" if rounded < 0 else "$"
    digits = f"{abs(rounded):,.2f}".rstrip("0").rstrip(".")
    return sign + digits


def format_price(value: float) -> str:
    """Render a price without float noise or a trailing ``.0``."""

    return f"{value:.10f}".rstrip("0").rstrip(".")


def format_expiration_date(timestamp_seconds: float) -> str:
    if not isinstance(timestamp_seconds, (int, float)) or not math.isfinite(timestamp_seconds):
        return "unknown expiry"
    return datetime.fromtimestamp(timestamp_seconds, tz=timezone.utc).date().isoformat()


__all__ = ["format_expiration_date", "format_price", "format_usd"]
