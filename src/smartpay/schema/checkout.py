"""
Checkout Schema Definition

A merchant-defined payment request: fixed or variable price, the settlement
asset the merchant is paid in, and the payment methods the payer may use.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class PriceMode(str, Enum):
    """How the invoice amount is determined."""

    FIXED = "fixed"
    VARIABLE = "variable"


class Checkout(BaseModel):
    """
    Checkout Schema

    Caller-owned value object, constructed fresh per request. A fixed-price
    checkout is quoted at `fixed_amount`; a variable-price checkout at the
    amount the payer enters, or `variable_min` when none is given.
    """

    id: Optional[str] = Field(default=None, description="Checkout reference")
    name: Optional[str] = Field(default=None, description="Product or invoice name")

    price_mode: PriceMode = Field(default=PriceMode.FIXED)
    fixed_amount: Optional[float] = Field(default=None, ge=0, description="Fixed invoice amount (USD)")
    variable_min: Optional[float] = Field(default=None, ge=0, description="Minimum variable amount (USD)")
    variable_max: Optional[float] = Field(default=None, ge=0, description="Maximum variable amount (USD)")

    settlement_asset: str = Field(default="USDC", description="Symbol the merchant settles in")
    settlement_chain: Optional[str] = Field(default=None, description="Chain the merchant settles on")

    # None means every supported method is accepted
    accepted_payment_methods: Optional[List[str]] = Field(default=None)

    @field_validator("settlement_asset")
    @classmethod
    def normalize_settlement_asset(cls, v: str) -> str:
        """Settlement symbols are upper-case."""
        v = (v or "").strip().upper()
        if not v:
            raise ValueError("settlement_asset cannot be empty")
        return v

    @field_validator("accepted_payment_methods")
    @classmethod
    def normalize_methods(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        """Accepted methods are upper-case symbols."""
        if v is None:
            return v
        return [str(item or "").strip().upper() for item in v if str(item or "").strip()]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "checkout-001",
                    "name": "Starter Pack",
                    "price_mode": "fixed",
                    "fixed_amount": 79.5,
                    "settlement_asset": "USDC",
                    "accepted_payment_methods": ["ETH", "USDC", "USDT"],
                }
            ]
        }
    }
