"""Execution models for route dispatch."""

from enum import Enum
from typing import Any, Callable, Dict, Optional
from pydantic import BaseModel, Field


class ExecutionStatus(str, Enum):
    """Terminal outcomes of one execution call."""

    SUBMITTED = "submitted"                    # Transport returned a transaction hash
    SIMULATED = "simulated"                    # Simulation finalized
    SIMULATION_FAILED = "simulation_failed"    # Simulation drew a failure
    NO_ROUTE = "no_route"                      # Nothing to execute
    INVALID_RECIPIENT = "invalid_recipient"    # Recipient is not a hex address
    INVALID_RESPONSE = "invalid_response"      # Transport answered without a hash
    UNSUPPORTED_TRANSPORT = "unsupported_transport"  # No known capability
    TRANSPORT_ERROR = "transport_error"        # Transport raised
    VALIDATION_FAILED = "validation_failed"    # Rejected by the validation gate
    INVALID_OPTIONS = "invalid_options"        # Execution options failed validation


class ExecutionResult(BaseModel):
    """Result of executing a route. Failures are results, never exceptions."""

    ok: bool = Field(description="Whether execution succeeded")
    status: ExecutionStatus = Field(description="Terminal status")
    tx_hash: Optional[str] = Field(default=None, description="Transaction hash on success")
    failure_reason: Optional[str] = Field(default=None, description="Human-readable failure")

    # Caller correlation
    route_id: Optional[str] = Field(default=None)
    source_symbol: Optional[str] = Field(default=None)
    settlement_symbol: Optional[str] = Field(default=None)
    strategy: Optional[str] = Field(default=None)

    explorer_hint: Optional[str] = Field(default=None, description="Explorer deep link")
    used_network: Optional[str] = Field(default=None, description="source→settlement chains")
    simulated: bool = Field(default=False)


class ExecutionOptions(BaseModel):
    """
    Per-call execution options.

    Transport resolution order: `transport_resolver(route, wallet)`, then
    `transports[chain_key]`, then the wallet's own transports, then
    `provider` or the wallet's provider.
    """

    wallet: Any = Field(default=None, description="Payer Wallet")
    transport_resolver: Optional[Callable[..., Any]] = Field(default=None)
    transports: Dict[str, Any] = Field(default_factory=dict)
    provider: Any = Field(default=None)

    to_address: Optional[str] = Field(default=None, description="Recipient override")
    force_execution: bool = Field(default=False, description="Dispatch through a resolved transport")

    # None means the engine default
    simulation_failure_rate: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    delay_ms: Optional[int] = Field(default=None, ge=0)
