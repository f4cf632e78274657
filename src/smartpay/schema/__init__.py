"""Schema module - checkout definition and facade input validation."""

from smartpay.schema.checkout import Checkout, PriceMode
from smartpay.schema.validator import InputValidator, SmartPayInputError

__all__ = [
    "Checkout",
    "PriceMode",
    "InputValidator",
    "SmartPayInputError",
]
