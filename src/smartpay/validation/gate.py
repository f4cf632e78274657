"""
Validation Gate

Pre-execution check the SDK facade runs before handing a route to the
Execution Engine. Checks, in order:

1. A checkout reference or a wallet address is present
2. The amount is a finite positive number
3. The wallet address is a 0x-prefixed 20-byte hex address
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from smartpay.formatting import is_likely_evm_address
from smartpay.validation.models import ValidationOutcome, ValidationPayload


logger = logging.getLogger(__name__)


def _as_amount(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def normalize_payload(payload: Any) -> ValidationPayload:
    """
    Build a ValidationPayload from a model or a loose mapping.

    Mappings may use `checkout_id` for `id`, `amount` for `amount_usd` and
    `settlement_symbol` for `settlement_token`. Non-numeric amounts become
    NaN so the amount check rejects them.
    """
    if isinstance(payload, ValidationPayload):
        return payload
    if not isinstance(payload, Mapping):
        payload = {}

    return ValidationPayload(
        id=payload.get("id") or payload.get("checkout_id") or "",
        amount_usd=_as_amount(payload.get("amount_usd") or payload.get("amount") or 0),
        settlement_token=payload.get("settlement_token") or payload.get("settlement_symbol") or "USDC",
        accepted_payment_methods=payload.get("accepted_payment_methods") or [],
        wallet_address=payload.get("wallet_address") or "",
    )


class ValidationGate(ABC):
    """Contract consumed by the SDK facade."""

    @abstractmethod
    async def validate_checkout_payload(self, payload: Any) -> ValidationOutcome:
        """Check a payload; failures are `ok=False` outcomes."""

    @abstractmethod
    async def validate_wallet_can_pay(self, wallet_address: str, settlement_token: str) -> ValidationOutcome:
        """Check that a wallet may pay in the settlement token."""


class LocalValidationGate(ValidationGate):
    """
    In-process validation gate.

    Runs the structural payload checks only; wallet solvency is not
    verified in local mode.
    """

    def __init__(self):
        self.logger = logger

    async def validate_checkout_payload(self, payload: Any) -> ValidationOutcome:
        normalized = normalize_payload(payload)

        if not normalized.id and not normalized.wallet_address:
            return self._reject("invalid_request", "Missing checkout reference or wallet address.")

        if not math.isfinite(normalized.amount_usd) or normalized.amount_usd <= 0:
            return self._reject("invalid_amount", "Amount must be a positive number.")

        if not is_likely_evm_address(normalized.wallet_address):
            return self._reject("invalid_wallet", "Wallet address is not a valid EVM address.")

        self.logger.info(f"Payload validated locally: {normalized.id or normalized.wallet_address}")
        return ValidationOutcome(
            ok=True,
            status="validated",
            message="Payload validated locally.",
            payload=normalized,
        )

    async def validate_wallet_can_pay(self, wallet_address: str, settlement_token: str) -> ValidationOutcome:
        return ValidationOutcome(
            ok=True,
            status="simulated_ok",
            message="Wallet validation passed in local mode.",
        )

    def _reject(self, status: str, message: str) -> ValidationOutcome:
        self.logger.warning(f"Validation rejected ({status}): {message}")
        return ValidationOutcome(ok=False, status=status, message=message)


async def validate_with_local_gate(payload: Any, gate: Optional[ValidationGate] = None) -> ValidationOutcome:
    """One-shot validation with a fresh local gate."""
    return await (gate or LocalValidationGate()).validate_checkout_payload(payload)
