"""Display helpers for addresses, amounts and routes."""

import re
from typing import Any, Iterable, Optional


EVM_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


def short_address(address: Optional[str] = "") -> str:
    """Shorten an address to 0x1234...abcd."""
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def money(amount: Any) -> str:
    """Format a USD amount with 2 to 6 fractional digits."""
    try:
        value = float(amount or 0)
    except (TypeError, ValueError):
        value = 0.0
    text = f"{abs(value):,.6f}".rstrip("0")
    whole, _, fraction = text.partition(".")
    fraction = fraction.ljust(2, "0")
    sign = "-" if value < 0 else ""
    return f"{sign}${whole}.{fraction}"


def token_amount(amount: Any, symbol: str) -> str:
    """Format a token amount with 4 decimal places."""
    return f"{float(amount):.4f} {symbol}"


def route_priority_hint(route: Any) -> str:
    """Describe how much a route can be trusted from its failure rate."""
    failure_rate = getattr(route, "failure_rate", None)
    if failure_rate is None:
        failure_rate = 0.25
    if failure_rate <= 0.11:
        return "Very high confidence"
    if failure_rate <= 0.21:
        return "Good"
    return "Fallback route"


def normalize_address(address: Optional[str]) -> str:
    """Lower-case an address; None becomes an empty string."""
    return str(address or "").lower()


def is_likely_evm_address(address: Optional[str] = "") -> bool:
    """Check the 0x-prefixed 20-byte hex address format."""
    return bool(EVM_ADDRESS_PATTERN.match(address or ""))


def normalize_token_list(values: Iterable[Any] = ()) -> list[str]:
    """Upper-case and de-duplicate token symbols, keeping first-seen order."""
    seen: list[str] = []
    for item in values:
        symbol = str(item or "").strip().upper()
        if symbol and symbol not in seen:
            seen.append(symbol)
    return seen
