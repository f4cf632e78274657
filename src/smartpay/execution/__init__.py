"""Execution module for SmartPay - transport dispatch and simulation."""

from smartpay.execution.models import (
    ExecutionStatus,
    ExecutionResult,
    ExecutionOptions,
)
from smartpay.execution.encoding import to_hex
from smartpay.execution.transports import (
    TransportCapability,
    TransportError,
    JsonRpcTransport,
    detect_capabilities,
    extract_tx_hash,
)
from smartpay.execution.engine import ExecutionEngine

__all__ = [
    "ExecutionStatus",
    "ExecutionResult",
    "ExecutionOptions",
    "to_hex",
    "TransportCapability",
    "TransportError",
    "JsonRpcTransport",
    "detect_capabilities",
    "extract_tx_hash",
    "ExecutionEngine",
]
