"""
HTTP Validation Gate

Delegates payload and wallet checks to a remote validation service.
An unreachable service is reported as an `ok=False` outcome with status
`validation_unavailable`, so execution is refused rather than crashing.
"""

import logging
from typing import Any, Optional

import httpx

from smartpay.config import settings
from smartpay.validation.gate import ValidationGate, normalize_payload
from smartpay.validation.models import ValidationOutcome


logger = logging.getLogger(__name__)


class HttpValidationGate(ValidationGate):
    """
    Client for a remote validation service.

    Endpoints:
    - POST {endpoint}/validate: body is the normalized payload
    - POST {endpoint}/wallet: body is {wallet_address, settlement_token}

    Both answer with {ok, status, message}.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the gate.

        Args:
            endpoint: Service base URL (default: from config)
            timeout: Request timeout in seconds
            client: Shared httpx.AsyncClient; a short-lived client per call otherwise
        """
        self.endpoint = (endpoint or settings.validation_endpoint or "").rstrip("/")
        self.timeout = timeout
        self._client = client
        self.logger = logger

        if not self.endpoint:
            raise ValueError("HttpValidationGate requires an endpoint")

    async def validate_checkout_payload(self, payload: Any) -> ValidationOutcome:
        normalized = normalize_payload(payload)
        return await self._post("/validate", normalized.model_dump(mode="json"))

    async def validate_wallet_can_pay(self, wallet_address: str, settlement_token: str) -> ValidationOutcome:
        return await self._post("/wallet", {
            "wallet_address": wallet_address,
            "settlement_token": str(settlement_token or "").upper(),
        })

    async def _post(self, path: str, body: dict) -> ValidationOutcome:
        url = f"{self.endpoint}{path}"
        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Validation service unavailable: {e}")
            return ValidationOutcome(
                ok=False,
                status="validation_unavailable",
                message=f"Validation service error: {e}",
            )

        if not isinstance(data, dict) or "ok" not in data:
            self.logger.error(f"Validation service returned malformed outcome: {data!r}")
            return ValidationOutcome(
                ok=False,
                status="validation_unavailable",
                message="Validation service returned a malformed outcome.",
            )

        outcome = ValidationOutcome(
            ok=bool(data["ok"]),
            status=str(data.get("status") or ("validated" if data["ok"] else "invalid_request")),
            message=data.get("message"),
        )
        self.logger.info(f"Remote validation {path}: {outcome.status}")
        return outcome
