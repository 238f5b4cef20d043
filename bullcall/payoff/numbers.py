"""Numeric validation helpers and price grids."""

from __future__ import annotations

import math
from typing import Any, List

from bullcall.core.errors import InputValidationError

_RANGE_DECIMALS = 10


def is_finite(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def require_finite(message: str, *values: Any) -> None:
    if not all(is_finite(value) for value in values):
        raise InputValidationError(message)


def require_positive_int(name: str, value: Any) -> int:
    """Return *value* as an ``int`` if it is a positive whole number."""

    if is_finite(value) and float(value).is_integer() and value > 0:
        return int(value)
    raise InputValidationError(f"{name} must be a positive integer.")


def price_range(start: float, end: float, step: float) -> List[float]:
    """Inclusive arithmetic sequence from *start* towards *end*.

    Each value is computed as ``start + i * step`` and rounded to ten
    decimals, so ``price_range(0, 1, 0.1)`` ends at ``1.0`` rather than
    ``0.9999999999999999``. A step pointing away from *end* yields ``[]``.
    """

    require_finite("range args must be finite numbers.", start, end, step)
    if step == 0:
        raise InputValidationError("range step cannot be 0.")
    out: List[float] = []
    index = 0
    while True:
        value = round(start + index * step, _RANGE_DECIMALS)
        if (step > 0 and value > end) or (step < 0 and value < end):
            break
        out.append(value)
        index += 1
    return out


__all__ = ["is_finite", "price_range", "require_finite", "require_positive_int"]
