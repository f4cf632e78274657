"""Execution Engine - dispatches a selected route through a transport or a simulation."""

import asyncio
import logging
import random
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from smartpay.catalog import NETWORKS
from smartpay.config import settings
from smartpay.execution.encoding import to_hex
from smartpay.execution.models import ExecutionOptions, ExecutionResult, ExecutionStatus
from smartpay.execution.transports import (
    TransportCapability,
    detect_capabilities,
    extract_tx_hash,
    invoke,
    primary_capability,
)
from smartpay.formatting import normalize_address
from smartpay.routing.models import RouteCandidate


logger = logging.getLogger(__name__)


DEFAULT_CHAIN_EXPLORERS = {
    **{network.key: network.explorer for network in NETWORKS.values()},
    **{str(network.id): network.explorer for network in NETWORKS.values()},
}

SIMULATION_FAILURE_REASON = "Route simulation failed to finalize."
DEFAULT_TRANSPORT_FAILURE = "Wallet provider denied transaction."


def chain_key(route: RouteCandidate) -> str:
    """Transport map key: lower-case source chain, else the stringified chain id."""
    chain = str(route.source_chain or "").lower()
    if chain:
        return chain
    if route.source_chain_id is None:
        return ""
    return str(route.source_chain_id)


def used_network(route: RouteCandidate) -> str:
    """Human-readable source→settlement chain pair."""
    return f"{route.source_chain}→{route.settlement_chain or route.source_chain}"


class ExecutionEngine:
    """
    Route Execution Engine.

    Per call:
    - No route → failure
    - Resolve a transport (resolver, chain map, wallet map, bare provider)
    - Simulate unless the route is executable, the caller forced
      execution, and a transport was resolved
    - Await the artificial round trip, then simulate or dispatch

    `execute` never raises. Every failure is an `ok=False` result carrying
    the route id, symbols and strategy. There are no retries and no
    deduplication: concurrent calls for one route dispatch independently.
    """

    def __init__(
        self,
        simulation_failure_rate: Optional[float] = None,
        delay_ms: Optional[int] = None,
        latency_ms: Optional[tuple[int, int]] = None,
        default_recipient: Optional[str] = None,
        default_explorer: Optional[str] = None,
        rng: Optional[random.Random] = None,
        sleep=None,
    ):
        """
        Initialize the execution engine.

        Args:
            simulation_failure_rate: Probability a simulation fails (0.0-1.0)
            delay_ms: Simulation delay after the round trip
            latency_ms: (min, max) artificial round trip awaited on every call
            default_recipient: Recipient when neither caller nor route names one
            default_explorer: Explorer template of last resort
            rng: Random source for latency, simulation outcome and hashes
            sleep: Coroutine function used for every wait (default: asyncio.sleep)
        """
        self.simulation_failure_rate = (
            simulation_failure_rate if simulation_failure_rate is not None
            else settings.simulation_failure_rate
        )
        self.delay_ms = delay_ms if delay_ms is not None else settings.simulation_delay_ms
        self.latency_ms = latency_ms or (settings.latency_min_ms, settings.latency_max_ms)
        self.default_recipient = default_recipient or settings.default_recipient
        self.default_explorer = default_explorer or settings.default_explorer
        self._rng = rng or random.Random()
        self._sleep = sleep or asyncio.sleep

        logger.info(
            f"Execution Engine initialized (simulation_failure_rate={self.simulation_failure_rate}, "
            f"latency={self.latency_ms[0]}-{self.latency_ms[1]}ms)"
        )

    async def execute(
        self,
        route: Optional[RouteCandidate],
        options: Optional[ExecutionOptions] = None,
        **overrides: Any,
    ) -> ExecutionResult:
        """
        Execute a route.

        Args:
            route: Selected route (a RouteCandidate or RankedRoute)
            options: Execution options
            **overrides: ExecutionOptions fields, applied on top of `options`

        Returns:
            ExecutionResult; never raises
        """
        try:
            options = self.build_options(options, overrides)
        except PydanticValidationError as e:
            fields = ", ".join(".".join(str(loc) for loc in error["loc"]) for error in e.errors())
            logger.warning(f"Invalid execution options: {fields}")
            reason = f"Invalid execution options: {fields}."
            if route is None:
                return ExecutionResult(ok=False, status=ExecutionStatus.INVALID_OPTIONS, failure_reason=reason)
            return self._failure(route, ExecutionStatus.INVALID_OPTIONS, reason)

        if route is None:
            return ExecutionResult(
                ok=False,
                status=ExecutionStatus.NO_ROUTE,
                failure_reason="No route selected.",
            )

        wallet = options.wallet
        delay_ms = options.delay_ms if options.delay_ms is not None else self.delay_ms
        failure_rate = (
            options.simulation_failure_rate if options.simulation_failure_rate is not None
            else self.simulation_failure_rate
        )

        try:
            transport = await self.resolve_transport(route, options)
        except Exception as e:
            logger.warning(f"Transport resolution failed for {route.id}: {e}")
            return self._failure(route, ExecutionStatus.TRANSPORT_ERROR, str(e) or DEFAULT_TRANSPORT_FAILURE)

        should_simulate = not route.executable or not (options.force_execution and transport is not None)
        explorer = self.resolve_explorer(route, transport, wallet)

        await self._sleep(self._rng.uniform(*self.latency_ms) / 1000)

        if should_simulate:
            result = await self._simulate(route, delay_ms, failure_rate)
            if result.ok:
                result = result.model_copy(update={"explorer_hint": f"{explorer}{result.tx_hash}"})
            return result

        try:
            result = await self._dispatch(route, wallet, transport, options.to_address, delay_ms)
        except Exception as e:
            logger.warning(f"Transport rejected route {route.id}: {e}")
            return self._failure(route, ExecutionStatus.TRANSPORT_ERROR, str(e) or DEFAULT_TRANSPORT_FAILURE)

        if not result.ok:
            logger.warning(f"Route {route.id} failed: {result.status.value} ({result.failure_reason})")
            return result

        update = {"used_network": used_network(route)}
        if result.tx_hash:
            update["explorer_hint"] = f"{explorer}{result.tx_hash}"
        result = result.model_copy(update=update)

        logger.info(
            f"Route executed: {route.id} {route.source_amount} {route.source_symbol} → "
            f"{route.settlement_symbol} [tx: {result.tx_hash}]"
        )
        return result

    @staticmethod
    def build_options(options: Optional[ExecutionOptions], overrides: Mapping[str, Any]) -> ExecutionOptions:
        """Validate keyword overrides on top of `options`."""
        if options is None:
            return ExecutionOptions(**overrides)
        if not overrides:
            return options
        return ExecutionOptions(**{**dict(options), **overrides})

    async def resolve_transport(self, route: RouteCandidate, options: ExecutionOptions) -> Any:
        """First non-None transport: resolver, chain map, wallet map, bare provider."""
        wallet = options.wallet

        if callable(options.transport_resolver):
            resolved = await invoke(options.transport_resolver, route=route, wallet=wallet)
            if resolved is not None:
                return resolved

        key = chain_key(route)
        if key and options.transports.get(key) is not None:
            return options.transports[key]

        wallet_transports = getattr(wallet, "transports", None)
        if isinstance(wallet_transports, Mapping):
            if key and wallet_transports.get(key) is not None:
                return wallet_transports[key]
            by_id = wallet_transports.get(str(route.source_chain_id))
            if by_id is not None:
                return by_id

        if options.provider is not None:
            return options.provider
        return getattr(wallet, "provider", None)

    def resolve_explorer(self, route: RouteCandidate, transport: Any, wallet: Any) -> str:
        """First explorer template from transport, known chains, wallet network, route chain, default."""
        explorer = getattr(transport, "explorer", None)
        if explorer:
            return explorer

        transport_chain_id = getattr(transport, "chain_id", None)
        if transport_chain_id is not None and str(transport_chain_id) in DEFAULT_CHAIN_EXPLORERS:
            return DEFAULT_CHAIN_EXPLORERS[str(transport_chain_id)]

        network = getattr(wallet, "network", None)
        if getattr(network, "explorer", None):
            return network.explorer

        if route.source_chain and route.source_chain.lower() in DEFAULT_CHAIN_EXPLORERS:
            return DEFAULT_CHAIN_EXPLORERS[route.source_chain.lower()]

        if route.source_chain_id is not None and str(route.source_chain_id) in DEFAULT_CHAIN_EXPLORERS:
            return DEFAULT_CHAIN_EXPLORERS[str(route.source_chain_id)]

        return self.default_explorer

    async def _simulate(self, route: RouteCandidate, delay_ms: int, failure_rate: float) -> ExecutionResult:
        """Manufacture a plausible outcome without side effects."""
        await self._sleep(delay_ms / 1000)

        if self._rng.random() < failure_rate:
            logger.warning(f"Simulated failure for route {route.id}")
            return self._failure(
                route,
                ExecutionStatus.SIMULATION_FAILED,
                SIMULATION_FAILURE_REASON,
                simulated=True,
                used_network=used_network(route),
            )

        tx_hash = f"0x{self._rng.getrandbits(256):064x}"
        logger.info(f"Simulated route {route.id} [tx: {tx_hash}]")
        return self._result(
            route,
            ok=True,
            status=ExecutionStatus.SIMULATED,
            tx_hash=tx_hash,
            simulated=True,
            used_network=used_network(route),
        )

    async def _dispatch(
        self,
        route: RouteCandidate,
        wallet: Any,
        transport: Any,
        to: Optional[str],
        delay_ms: int,
    ) -> ExecutionResult:
        """Submit through the transport's highest-precedence capability."""
        recipient = normalize_address(to or route.to_address or self.default_recipient)
        if not recipient.startswith("0x"):
            return self._failure(
                route,
                ExecutionStatus.INVALID_RECIPIENT,
                "Execution recipient address is required.",
            )

        capability = primary_capability(transport)
        if capability is None:
            return self._failure(
                route,
                ExecutionStatus.UNSUPPORTED_TRANSPORT,
                "Transport does not expose a compatible execution method.",
            )

        tx = {
            "from": getattr(wallet, "address", None),
            "to": recipient,
            "value": to_hex(route.source_amount, route.source_decimals),
        }

        if capability == TransportCapability.EXECUTE_ROUTE:
            response = await invoke(transport.execute_route, route=route, wallet=wallet, to=recipient)
            if isinstance(response, ExecutionResult):
                correlation = self._result(route, ok=response.ok, status=response.status)
                missing = {
                    field: getattr(correlation, field)
                    for field in ("route_id", "source_symbol", "settlement_symbol", "strategy")
                    if getattr(response, field) is None
                }
                return response.model_copy(update=missing)
            if isinstance(response, Mapping) and "ok" in response:
                return self._adopt(route, response)
            return self._submitted(route, response, "Custom transport returned invalid execution payload.")

        if capability == TransportCapability.EXECUTE:
            response = await invoke(transport.execute, route=route, wallet=wallet, to=recipient)
            return self._submitted(route, response, "Custom transport execute() did not return a transaction hash.")

        if capability == TransportCapability.SEND_TRANSACTION:
            response = await invoke(transport.send_transaction, tx)
            result = self._submitted(route, response, "Transport send_transaction() did not return a transaction hash.")
            if result.ok:
                await self._sleep(delay_ms * 0.6 / 1000)
                return result
            # No hash: fall through to request() when the transport has one
            if TransportCapability.REQUEST not in detect_capabilities(transport):
                return result
            logger.debug(f"send_transaction() gave no hash for {route.id}, trying request()")

        response = await invoke(transport.request, {"method": "eth_sendTransaction", "params": [tx]})
        return self._submitted(route, response, "Transport request() did not return a transaction hash.")

    def _submitted(self, route: RouteCandidate, response: Any, missing_hash_reason: str) -> ExecutionResult:
        tx_hash = extract_tx_hash(response)
        if tx_hash:
            return self._result(route, ok=True, status=ExecutionStatus.SUBMITTED, tx_hash=tx_hash)
        return self._failure(route, ExecutionStatus.INVALID_RESPONSE, missing_hash_reason)

    def _adopt(self, route: RouteCandidate, response: Mapping) -> ExecutionResult:
        """Adopt a full result mapping returned by a route-aware transport."""
        ok = bool(response.get("ok"))
        status = response.get("status")
        if status not in {item.value for item in ExecutionStatus}:
            status = ExecutionStatus.SUBMITTED if ok else ExecutionStatus.TRANSPORT_ERROR

        tx_hash = response.get("tx_hash") or response.get("txHash") or extract_tx_hash(response)
        failure_reason = response.get("failure_reason") or response.get("failureReason")
        if not ok and not failure_reason:
            failure_reason = DEFAULT_TRANSPORT_FAILURE

        return self._result(
            route,
            ok=ok,
            status=status,
            tx_hash=tx_hash if ok else None,
            failure_reason=None if ok else failure_reason,
        )

    def _failure(self, route: RouteCandidate, status: ExecutionStatus, reason: str, **fields: Any) -> ExecutionResult:
        return self._result(route, ok=False, status=status, failure_reason=reason, **fields)

    def _result(self, route: RouteCandidate, **fields: Any) -> ExecutionResult:
        return ExecutionResult(
            route_id=route.id,
            source_symbol=route.source_symbol,
            settlement_symbol=route.settlement_symbol,
            strategy=route.strategy,
            **fields,
        )
