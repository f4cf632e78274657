"""
SmartPay SDK

Caller-constructed facade over the engines:

    Checkout + Wallet → QuotingEngine → Quote
    route + wallet → ValidationGate → ExecutionEngine → ExecutionResult

Collaborators are injected; nothing here is a process-wide singleton.
"""

import logging
from typing import Any, Callable, List, Mapping, Optional

from smartpay.catalog import Network
from smartpay.config import settings
from smartpay.execution import ExecutionEngine, ExecutionResult, ExecutionStatus
from smartpay.routing import QuotingEngine, Quote, RankedRoute, RouteCandidate, Strategy
from smartpay.schema import InputValidator
from smartpay.validation import HttpValidationGate, LocalValidationGate, ValidationGate, ValidationPayload


logger = logging.getLogger(__name__)


def build_validation_payload(route: RouteCandidate, wallet: Any) -> ValidationPayload:
    """Payload the gate checks before a route is executed."""
    amount_usd = getattr(route, "final_payable_usd", None) or route.settlement_amount_usd
    return ValidationPayload(
        id=route.id,
        amount_usd=amount_usd,
        settlement_token=route.settlement_symbol,
        accepted_payment_methods=[route.source_symbol],
        wallet_address=getattr(wallet, "address", None) or "",
    )


class SmartPaySDK:
    """
    SmartPay facade.

    Only malformed checkout, wallet or route input raises
    (`SmartPayInputError`). Quoting gaps come back as empty results and
    every validation or execution failure as an `ok=False` ExecutionResult.
    """

    def __init__(
        self,
        validation_gate: Optional[ValidationGate] = None,
        quoting_engine: Optional[QuotingEngine] = None,
        execution_engine: Optional[ExecutionEngine] = None,
        transport_resolver: Optional[Callable[..., Any]] = None,
        input_validator: Optional[InputValidator] = None,
    ):
        """
        Initialize the SDK.

        Args:
            validation_gate: Pre-execution gate (default: HTTP gate when
                `validation_endpoint` is configured, else the local gate)
            quoting_engine: Quoting engine (default: built-in networks)
            execution_engine: Execution engine (default: configured tunables)
            transport_resolver: Default `resolver(route=, wallet=)` used when a
                call does not pass its own
            input_validator: Facade input validator
        """
        if validation_gate is None:
            if settings.validation_endpoint:
                validation_gate = HttpValidationGate(settings.validation_endpoint)
            else:
                validation_gate = LocalValidationGate()

        self.validation_gate = validation_gate
        self.quoting_engine = quoting_engine or QuotingEngine()
        self.execution_engine = execution_engine or ExecutionEngine()
        self.transport_resolver = transport_resolver
        self.input_validator = input_validator or InputValidator()

        logger.info(f"SmartPay SDK initialized (gate={type(self.validation_gate).__name__})")

    async def quote(
        self,
        checkout: Any,
        wallet: Any,
        amount_input: Any = None,
        strategy: Strategy | str = settings.default_strategy,
        networks: Optional[Mapping[str, Network]] = None,
    ) -> Quote:
        """
        Quote a checkout for a wallet under every strategy.

        Raises:
            SmartPayInputError: If checkout or wallet is malformed
        """
        checkout, wallet = self.input_validator.validate_quote_input(checkout, wallet)
        return self.quoting_engine.quote(
            checkout,
            wallet,
            amount_input=amount_input,
            strategy=strategy,
            networks=networks,
        )

    async def quote_by_strategy(
        self,
        checkout: Any,
        wallet: Any,
        strategy: Strategy | str = settings.default_strategy,
        amount_input: Any = None,
        networks: Optional[Mapping[str, Network]] = None,
    ) -> List[RankedRoute]:
        """Ranked routes for one strategy (empty when nothing is routable)."""
        quote = await self.quote(checkout, wallet, amount_input=amount_input, strategy=strategy, networks=networks)
        return quote.routes_for(strategy)

    async def execute(self, route: Any, wallet: Any = None, **options: Any) -> ExecutionResult:
        """
        Validate then execute a route.

        Args:
            route: Route to execute (RankedRoute, RouteCandidate or mapping)
            wallet: Payer wallet
            **options: ExecutionOptions fields (transports, provider,
                to_address, force_execution, simulation_failure_rate, ...)

        Returns:
            ExecutionResult; `validation_failed` when the gate rejects

        Raises:
            SmartPayInputError: If route, wallet or an option is malformed
        """
        route = self.input_validator.validate_route(route)
        wallet = self.input_validator.validate_execution_wallet(wallet)

        if self.transport_resolver is not None:
            options.setdefault("transport_resolver", self.transport_resolver)
        execution_options = self.input_validator.validate_execution_options(wallet, options)

        if route is not None:
            payload = build_validation_payload(route, wallet)
            outcome = await self.validation_gate.validate_checkout_payload(payload)
            if not outcome.ok:
                logger.warning(f"Validation failed for route {route.id}: {outcome.status}")
                return ExecutionResult(
                    ok=False,
                    status=ExecutionStatus.VALIDATION_FAILED,
                    failure_reason=outcome.message or "Validation did not pass.",
                    route_id=route.id,
                    source_symbol=route.source_symbol,
                    settlement_symbol=route.settlement_symbol,
                    strategy=route.strategy,
                )

        return await self.execution_engine.execute(route, execution_options)
