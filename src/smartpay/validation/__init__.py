"""Validation module - pre-execution payload gates."""

from smartpay.validation.models import ValidationPayload, ValidationOutcome
from smartpay.validation.gate import (
    ValidationGate,
    LocalValidationGate,
    normalize_payload,
    validate_with_local_gate,
)
from smartpay.validation.client import HttpValidationGate

__all__ = [
    "ValidationPayload",
    "ValidationOutcome",
    "ValidationGate",
    "LocalValidationGate",
    "normalize_payload",
    "validate_with_local_gate",
    "HttpValidationGate",
]
