"""Validation Gate payload and outcome models."""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ValidationPayload(BaseModel):
    """Pre-execution payload checked by a validation gate."""

    id: str = Field(default="", description="Checkout reference")
    amount_usd: float = Field(default=0.0, description="Amount to be paid (USD)")
    settlement_token: str = Field(default="USDC", description="Settlement asset symbol")
    accepted_payment_methods: List[str] = Field(default_factory=list)
    wallet_address: str = Field(default="", description="Payer address")

    @field_validator("id", "wallet_address", mode="before")
    @classmethod
    def strip_text(cls, v):
        return str(v or "").strip()

    @field_validator("settlement_token", mode="before")
    @classmethod
    def upper_symbol(cls, v):
        return str(v or "USDC").strip().upper()

    @field_validator("accepted_payment_methods", mode="before")
    @classmethod
    def upper_methods(cls, v):
        return [str(item or "").strip().upper() for item in (v or [])]


class ValidationOutcome(BaseModel):
    """Gate verdict. `ok=False` outcomes are results, not exceptions."""

    ok: bool
    status: str = Field(description="validated, simulated_ok, invalid_request, invalid_amount, invalid_wallet, ...")
    message: Optional[str] = Field(default=None)
    payload: Optional[ValidationPayload] = Field(default=None, description="Normalized payload on success")
