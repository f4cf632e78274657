"""Amount encoding - decimal amounts to 0x-prefixed fixed-point hex.

Scaling is exact integer arithmetic on the decimal digits of the amount,
never a float multiply, so 18-decimal amounts do not lose precision.
Fractional digits beyond `decimals` are truncated.
"""

from decimal import Decimal, InvalidOperation
from typing import Any


def to_hex(amount: Any, decimals: int = 18) -> str:
    """
    Encode an amount as a 0x-prefixed lower-case hex integer.

    Args:
        amount: Amount as str, int, float or Decimal
        decimals: Number of decimal places to scale by

    Returns:
        Hex string; "0x0" for zero, negative, non-numeric or non-finite input
    """
    if isinstance(amount, bool):
        return "0x0"
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        return "0x0"
    if not value.is_finite() or value <= 0:
        return "0x0"

    decimals = max(0, int(decimals))
    int_part, _, frac_part = format(value, "f").partition(".")
    frac_part = frac_part.ljust(decimals, "0")[:decimals]

    digits = (int_part + frac_part).lstrip("0") or "0"
    return hex(int(digits))
