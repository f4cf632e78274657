"""Tests for the Execution Engine."""

import random
import re

import pytest

from smartpay.catalog import NETWORKS
from smartpay.execution import ExecutionEngine, ExecutionOptions, ExecutionResult, ExecutionStatus, to_hex
from smartpay.execution.engine import DEFAULT_CHAIN_EXPLORERS
from smartpay.routing import RouteCandidate
from smartpay.wallet import create_demo_wallet


HASH_PATTERN = re.compile(r"^0x[0-9a-f]{64}$")
TX_HASH = "0x" + "cd" * 32
RECIPIENT = "0x" + "b" * 40


def make_route(**overrides) -> RouteCandidate:
    fields = dict(
        id="route:ethereum:ETH:test",
        source_symbol="ETH",
        source_chain="ethereum",
        source_chain_id=1,
        source_decimals=18,
        source_amount=0.025,
        settlement_symbol="USDC",
        settlement_chain="ethereum",
        settlement_chain_id=1,
        settlement_amount=79.5,
        settlement_amount_usd=79.30125,
        fees_total_usd=1.2,
        eta_minutes=0.4,
        reliability=0.985,
        failure_rate=0.027,
        executable=True,
        strategy="balanced",
    )
    fields.update(overrides)
    return RouteCandidate(**fields)


class RecordingTransport:
    """send_transaction transport that records what it was sent."""

    def __init__(self, response=TX_HASH):
        self.response = response
        self.sent = []

    def send_transaction(self, tx):
        self.sent.append(tx)
        return self.response


class RequestTransport:
    """Async request-style provider."""

    def __init__(self):
        self.payloads = []

    async def request(self, payload):
        self.payloads.append(payload)
        return {"jsonrpc": "2.0", "id": 1, "result": TX_HASH}


class FailingTransport:
    def __init__(self, error):
        self.error = error

    def send_transaction(self, tx):
        raise self.error


class TestExecutionEngine:
    """Test route execution outcomes."""

    def setup_method(self):
        """Set up test fixtures."""
        self.sleeps = []

        async def fake_sleep(seconds):
            self.sleeps.append(seconds)

        self.engine = ExecutionEngine(
            simulation_failure_rate=0.0,
            delay_ms=100,
            latency_ms=(650, 1000),
            rng=random.Random(7),
            sleep=fake_sleep,
        )
        self.wallet = create_demo_wallet()
        self.route = make_route()

    @pytest.mark.asyncio
    async def test_no_route(self):
        """Executing nothing fails without raising."""
        result = await self.engine.execute(None)

        assert not result.ok
        assert result.status == ExecutionStatus.NO_ROUTE
        assert result.failure_reason == "No route selected."

    @pytest.mark.asyncio
    async def test_simulation_without_transport(self):
        """No transport and zero failure rate always simulates successfully."""
        result = await self.engine.execute(self.route, wallet=self.wallet)

        assert result.ok
        assert result.status == ExecutionStatus.SIMULATED
        assert result.simulated
        assert HASH_PATTERN.match(result.tx_hash)
        assert result.explorer_hint == f"https://etherscan.io/tx/{result.tx_hash}"
        assert result.used_network == "ethereum→ethereum"

    @pytest.mark.asyncio
    async def test_non_executable_route_simulates_even_when_forced(self):
        """Simulation-only routes never reach the transport."""
        transport = RecordingTransport()
        route = make_route(executable=False, source_symbol="USDT")

        result = await self.engine.execute(route, wallet=self.wallet, provider=transport, force_execution=True)

        assert result.ok
        assert result.status == ExecutionStatus.SIMULATED
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_unforced_execution_simulates(self):
        """Without force_execution a resolved transport is not used."""
        transport = RecordingTransport()
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport)

        assert result.status == ExecutionStatus.SIMULATED
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_simulation_failure(self):
        """A failure rate of 1 always fails the simulation."""
        result = await self.engine.execute(self.route, wallet=self.wallet, simulation_failure_rate=1.0)

        assert not result.ok
        assert result.status == ExecutionStatus.SIMULATION_FAILED
        assert result.failure_reason == "Route simulation failed to finalize."
        assert result.tx_hash is None

    @pytest.mark.asyncio
    async def test_simulation_failure_has_no_explorer_hint(self):
        """Failed simulations carry no transaction link."""
        result = await self.engine.execute(self.route, wallet=self.wallet, simulation_failure_rate=1.0)
        assert result.explorer_hint is None

    @pytest.mark.asyncio
    async def test_invalid_option_is_a_result(self):
        """Out-of-range keyword options are reported, not raised."""
        result = await self.engine.execute(self.route, wallet=self.wallet, simulation_failure_rate=1.5)

        assert not result.ok
        assert result.status == ExecutionStatus.INVALID_OPTIONS
        assert "simulation_failure_rate" in result.failure_reason
        assert result.route_id == self.route.id
        assert self.sleeps == []

    @pytest.mark.asyncio
    async def test_invalid_override_on_options_is_a_result(self):
        """Overrides on top of an options object are validated too."""
        options = ExecutionOptions(wallet=self.wallet)
        result = await self.engine.execute(self.route, options, delay_ms=-5)

        assert result.status == ExecutionStatus.INVALID_OPTIONS
        assert "delay_ms" in result.failure_reason

    @pytest.mark.asyncio
    async def test_invalid_option_without_route(self):
        """Option errors are reported even when there is no route."""
        result = await self.engine.execute(None, force_execution="sometimes")

        assert result.status == ExecutionStatus.INVALID_OPTIONS
        assert result.route_id is None

    @pytest.mark.asyncio
    async def test_overrides_keep_options_fields(self):
        """Keyword overrides leave the other option fields in place."""
        transport = RecordingTransport()
        options = ExecutionOptions(wallet=self.wallet, provider=transport)
        result = await self.engine.execute(self.route, options, force_execution=True)

        assert result.status == ExecutionStatus.SUBMITTED
        assert transport.sent[0]["from"] == self.wallet.address

    @pytest.mark.asyncio
    async def test_correlation_fields(self):
        """Every result carries the route id, symbols and strategy."""
        for rate in (0.0, 1.0):
            result = await self.engine.execute(self.route, wallet=self.wallet, simulation_failure_rate=rate)
            assert result.route_id == self.route.id
            assert result.source_symbol == "ETH"
            assert result.settlement_symbol == "USDC"
            assert result.strategy == "balanced"

    @pytest.mark.asyncio
    async def test_latency_and_delay_awaited(self):
        """The round trip and the simulation delay are both awaited."""
        await self.engine.execute(self.route, wallet=self.wallet)

        assert len(self.sleeps) == 2
        assert 0.65 <= self.sleeps[0] <= 1.0
        assert self.sleeps[1] == pytest.approx(0.1)

    @pytest.mark.asyncio
    async def test_send_transaction_dispatch(self):
        """Forced executable routes submit through send_transaction."""
        transport = RecordingTransport()
        result = await self.engine.execute(
            self.route,
            wallet=self.wallet,
            provider=transport,
            to_address=RECIPIENT,
            force_execution=True,
        )

        assert result.ok
        assert result.status == ExecutionStatus.SUBMITTED
        assert not result.simulated
        assert result.tx_hash == TX_HASH
        assert result.explorer_hint == f"https://etherscan.io/tx/{TX_HASH}"
        assert transport.sent == [{
            "from": self.wallet.address,
            "to": RECIPIENT,
            "value": to_hex(0.025, 18),
        }]
        # Round trip, then the post-submit confirmation delay
        assert self.sleeps[1] == pytest.approx(0.06)

    @pytest.mark.asyncio
    async def test_request_dispatch(self):
        """Request-style providers receive eth_sendTransaction."""
        transport = RequestTransport()
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert result.status == ExecutionStatus.SUBMITTED
        assert result.tx_hash == TX_HASH
        payload = transport.payloads[0]
        assert payload["method"] == "eth_sendTransaction"
        assert payload["params"][0]["value"] == to_hex(0.025, 18)

    @pytest.mark.asyncio
    async def test_default_recipient(self):
        """Without a recipient the configured default is used, lower-cased."""
        transport = RecordingTransport()
        engine = ExecutionEngine(
            simulation_failure_rate=0.0,
            delay_ms=0,
            latency_ms=(0, 0),
            default_recipient="0x" + "AB" * 20,
        )
        await engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)
        assert transport.sent[0]["to"] == "0x" + "ab" * 20

    @pytest.mark.asyncio
    async def test_route_recipient(self):
        """A route-level recipient is used when the caller names none."""
        transport = RecordingTransport()
        route = make_route(to_address=RECIPIENT)
        await self.engine.execute(route, wallet=self.wallet, provider=transport, force_execution=True)
        assert transport.sent[0]["to"] == RECIPIENT

    @pytest.mark.asyncio
    async def test_invalid_recipient(self):
        """A recipient without 0x fails before the transport is invoked."""
        transport = RecordingTransport()
        result = await self.engine.execute(
            self.route,
            wallet=self.wallet,
            provider=transport,
            to_address="bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb",
            force_execution=True,
        )

        assert not result.ok
        assert result.status == ExecutionStatus.INVALID_RECIPIENT
        assert transport.sent == []

    @pytest.mark.asyncio
    async def test_unsupported_transport(self):
        """Transports without a known capability are rejected."""
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=object(), force_execution=True)

        assert not result.ok
        assert result.status == ExecutionStatus.UNSUPPORTED_TRANSPORT
        assert result.failure_reason == "Transport does not expose a compatible execution method."

    @pytest.mark.asyncio
    async def test_transport_exception(self):
        """Transport exceptions become transport_error results."""
        transport = FailingTransport(RuntimeError("User rejected the request."))
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert not result.ok
        assert result.status == ExecutionStatus.TRANSPORT_ERROR
        assert result.failure_reason == "User rejected the request."
        assert result.route_id == self.route.id

    @pytest.mark.asyncio
    async def test_transport_exception_without_message(self):
        """Blank exceptions get the default denial message."""
        transport = FailingTransport(RuntimeError())
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)
        assert result.failure_reason == "Wallet provider denied transaction."

    @pytest.mark.asyncio
    async def test_missing_hash(self):
        """A transport answer without a hash is an invalid response."""
        transport = RecordingTransport(response={"status": "queued"})
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert not result.ok
        assert result.status == ExecutionStatus.INVALID_RESPONSE


class TestCapabilityPrecedence:
    """Test the transport probe order."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = ExecutionEngine(simulation_failure_rate=0.0, delay_ms=0, latency_ms=(0, 0))
        self.wallet = create_demo_wallet()
        self.route = make_route()
        self.calls = []

    def make_transport(self, *capabilities, response=TX_HASH):
        calls = self.calls

        class Transport:
            pass

        for name in capabilities:
            def method(*args, _name=name, **kwargs):
                calls.append(_name)
                return response
            setattr(Transport, name, staticmethod(method))
        return Transport()

    @pytest.mark.asyncio
    async def test_execute_route_wins(self):
        """execute_route is preferred over every other capability."""
        transport = self.make_transport("execute_route", "execute", "send_transaction", "request")
        await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)
        assert self.calls == ["execute_route"]

    @pytest.mark.asyncio
    async def test_execute_before_send_transaction(self):
        """execute is preferred over send_transaction and request."""
        transport = self.make_transport("execute", "send_transaction", "request")
        await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)
        assert self.calls == ["execute"]

    @pytest.mark.asyncio
    async def test_send_transaction_before_request(self):
        """send_transaction is preferred over request."""
        transport = self.make_transport("send_transaction", "request")
        await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)
        assert self.calls == ["send_transaction"]

    @pytest.mark.asyncio
    async def test_send_transaction_without_hash_falls_through_to_request(self):
        """A hashless send_transaction answer is retried through request."""
        calls = self.calls

        class Transport:
            def send_transaction(self, tx):
                calls.append("send_transaction")
                return None

            def request(self, payload):
                calls.append("request")
                return TX_HASH

        result = await self.engine.execute(self.route, wallet=self.wallet, provider=Transport(), force_execution=True)

        assert self.calls == ["send_transaction", "request"]
        assert result.ok
        assert result.status == ExecutionStatus.SUBMITTED
        assert result.tx_hash == TX_HASH

    @pytest.mark.asyncio
    async def test_fall_through_reports_request_failure(self):
        """When both send_transaction and request give no hash, request's failure is reported."""
        transport = self.make_transport("send_transaction", "request", response=None)
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert self.calls == ["send_transaction", "request"]
        assert result.status == ExecutionStatus.INVALID_RESPONSE
        assert result.failure_reason == "Transport request() did not return a transaction hash."

    @pytest.mark.asyncio
    async def test_send_transaction_only_missing_hash(self):
        """Without request there is nothing to fall through to."""
        transport = self.make_transport("send_transaction", response=None)
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert self.calls == ["send_transaction"]
        assert result.failure_reason == "Transport send_transaction() did not return a transaction hash."

    @pytest.mark.asyncio
    async def test_execute_does_not_fall_through(self):
        """A hashless execute answer is final."""
        transport = self.make_transport("execute", "send_transaction", "request", response=None)
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert self.calls == ["execute"]
        assert result.status == ExecutionStatus.INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_execute_route_result_mapping_adopted(self):
        """A result mapping from execute_route becomes the outcome."""
        transport = self.make_transport(
            "execute_route",
            response={"ok": False, "failure_reason": "Bridge quote expired."},
        )
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert not result.ok
        assert result.status == ExecutionStatus.TRANSPORT_ERROR
        assert result.failure_reason == "Bridge quote expired."
        assert result.route_id == self.route.id

    @pytest.mark.asyncio
    async def test_execute_route_result_model_adopted(self):
        """An ExecutionResult from execute_route is adopted with correlation filled in."""
        transport = self.make_transport(
            "execute_route",
            response=ExecutionResult(ok=True, status=ExecutionStatus.SUBMITTED, tx_hash=TX_HASH),
        )
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert result.ok
        assert result.tx_hash == TX_HASH
        assert result.route_id == self.route.id
        assert result.explorer_hint.endswith(TX_HASH)

    @pytest.mark.asyncio
    async def test_execute_route_invalid_payload(self):
        """execute_route answers without a hash are invalid."""
        transport = self.make_transport("execute_route", response=123)
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)

        assert result.status == ExecutionStatus.INVALID_RESPONSE
        assert result.failure_reason == "Custom transport returned invalid execution payload."

    @pytest.mark.asyncio
    async def test_execute_missing_hash(self):
        """execute answers without a hash are invalid."""
        transport = self.make_transport("execute", response={})
        result = await self.engine.execute(self.route, wallet=self.wallet, provider=transport, force_execution=True)
        assert result.failure_reason == "Custom transport execute() did not return a transaction hash."


class TestTransportResolution:
    """Test transport and explorer resolution order."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = ExecutionEngine(simulation_failure_rate=0.0, delay_ms=0, latency_ms=(0, 0))
        self.route = make_route()

    @pytest.mark.asyncio
    async def test_resolver_first(self):
        """The resolver beats every other source."""
        chosen = RecordingTransport()
        other = RecordingTransport()
        wallet = create_demo_wallet(provider=other, transports={"ethereum": other})

        options = ExecutionOptions(
            wallet=wallet,
            transport_resolver=lambda route, wallet: chosen,
            transports={"ethereum": other},
            provider=other,
            force_execution=True,
        )
        await self.engine.execute(self.route, options)

        assert len(chosen.sent) == 1
        assert other.sent == []

    @pytest.mark.asyncio
    async def test_chain_map_before_wallet(self):
        """Per-chain option transports beat the wallet's own."""
        chosen = RecordingTransport()
        other = RecordingTransport()
        wallet = create_demo_wallet(transports={"ethereum": other})

        await self.engine.execute(
            self.route, wallet=wallet, transports={"ethereum": chosen}, force_execution=True
        )
        assert len(chosen.sent) == 1

    @pytest.mark.asyncio
    async def test_wallet_transport_by_chain_id(self):
        """Wallet transports may be keyed by chain id."""
        chosen = RecordingTransport()
        wallet = create_demo_wallet(transports={"1": chosen})
        await self.engine.execute(self.route, wallet=wallet, force_execution=True)
        assert len(chosen.sent) == 1

    @pytest.mark.asyncio
    async def test_wallet_provider_last(self):
        """The wallet's provider is the last resort."""
        chosen = RecordingTransport()
        wallet = create_demo_wallet(provider=chosen)
        await self.engine.execute(self.route, wallet=wallet, force_execution=True)
        assert len(chosen.sent) == 1

    @pytest.mark.asyncio
    async def test_resolver_error_is_a_result(self):
        """A failing resolver is reported, not raised."""

        def resolver(route, wallet):
            raise LookupError("no signer for chain")

        result = await self.engine.execute(
            self.route, wallet=create_demo_wallet(), transport_resolver=resolver, force_execution=True
        )
        assert result.status == ExecutionStatus.TRANSPORT_ERROR
        assert result.failure_reason == "no signer for chain"

    @pytest.mark.asyncio
    async def test_transport_explorer_wins(self):
        """A transport's own explorer template is used first."""
        transport = RecordingTransport()
        transport.explorer = "https://explorer.test/tx/"
        result = await self.engine.execute(
            self.route, wallet=create_demo_wallet(), provider=transport, force_execution=True
        )
        assert result.explorer_hint == f"https://explorer.test/tx/{TX_HASH}"

    @pytest.mark.asyncio
    async def test_transport_chain_id_explorer(self):
        """A known transport chain id selects that chain's explorer."""
        transport = RecordingTransport()
        transport.chain_id = 8453
        result = await self.engine.execute(
            self.route, wallet=create_demo_wallet(), provider=transport, force_execution=True
        )
        assert result.explorer_hint == f"https://basescan.org/tx/{TX_HASH}"

    @pytest.mark.asyncio
    async def test_route_chain_explorer(self):
        """Without wallet metadata the route's chain picks the explorer."""
        route = make_route(source_chain="base", source_chain_id=8453)
        result = await self.engine.execute(route)
        assert result.explorer_hint.startswith("https://basescan.org/tx/")

    @pytest.mark.asyncio
    async def test_default_explorer(self):
        """Unknown chains use the default explorer."""
        route = make_route(source_chain="zora", source_chain_id=7777777)
        result = await self.engine.execute(route)
        assert result.explorer_hint.startswith("https://etherscan.io/tx/")

    def test_explorers_follow_catalog(self):
        """Every catalog network is reachable by key and by chain id."""
        for network in NETWORKS.values():
            assert DEFAULT_CHAIN_EXPLORERS[network.key] == network.explorer
            assert DEFAULT_CHAIN_EXPLORERS[str(network.id)] == network.explorer
