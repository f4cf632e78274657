"""Money helpers - rounding and clamping for USD amounts."""

import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any


MONEY_QUANTUM = Decimal("0.000001")  # 6 decimal places


def clamp(value: float, lower: float, upper: float) -> float:
    """Constrain value to [lower, upper]."""
    return max(lower, min(upper, value))


def round_money(value: Any) -> float:
    """
    Round a USD amount to 6 decimal places.

    Rounding is done in decimal arithmetic (half-up) so the result does not
    depend on binary float representation. None and non-numeric values
    round to 0.0.
    """
    if value is None:
        return 0.0
    try:
        quantized = Decimal(str(value)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return 0.0
    return float(quantized)


def sanitize_amount(value: Any, fallback: float = 0.0) -> float:
    """Parse value as a finite number, else use fallback. Always rounded."""
    if value is None:
        return round_money(0)
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return round_money(fallback)
    if not math.isfinite(parsed):
        return round_money(fallback)
    return round_money(parsed)


def ensure_within_range(value: Any, lower: float, upper: float) -> float:
    """Sanitize value then clamp it to [lower, upper]."""
    return clamp(sanitize_amount(value), lower, upper)
