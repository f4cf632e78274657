"""Tests for transport capability probing and the JSON-RPC transport."""

import json

import httpx
import pytest

from smartpay.execution import (
    JsonRpcTransport,
    TransportCapability,
    TransportError,
    detect_capabilities,
    extract_tx_hash,
)
from smartpay.execution.transports import invoke, primary_capability


TX_HASH = "0x" + "ab" * 32


class FullTransport:
    def execute_route(self, **kwargs):
        return TX_HASH

    def execute(self, **kwargs):
        return TX_HASH

    def send_transaction(self, tx):
        return TX_HASH

    def request(self, payload):
        return TX_HASH


class RequestOnly:
    async def request(self, payload):
        return TX_HASH


class TestCapabilities:
    """Test capability detection."""

    def test_precedence_order(self):
        """Capabilities are reported in precedence order."""
        assert detect_capabilities(FullTransport()) == [
            TransportCapability.EXECUTE_ROUTE,
            TransportCapability.EXECUTE,
            TransportCapability.SEND_TRANSACTION,
            TransportCapability.REQUEST,
        ]

    def test_primary_capability(self):
        """The first exposed capability wins."""
        assert primary_capability(FullTransport()) == TransportCapability.EXECUTE_ROUTE
        assert primary_capability(RequestOnly()) == TransportCapability.REQUEST

    def test_unsupported(self):
        """Objects without capabilities have none."""
        assert detect_capabilities(object()) == []
        assert detect_capabilities(None) == []
        assert primary_capability(object()) is None

    def test_non_callable_attribute_ignored(self):
        """Attributes that are not callable do not count."""

        class Fake:
            request = "not callable"

        assert detect_capabilities(Fake()) == []


class TestExtractTxHash:
    """Test transaction hash extraction."""

    def test_string(self):
        """A bare string is the hash."""
        assert extract_tx_hash(TX_HASH) == TX_HASH
        assert extract_tx_hash("") is None

    def test_mapping_fields(self):
        """hash and transactionHash fields are recognized."""
        assert extract_tx_hash({"hash": TX_HASH}) == TX_HASH
        assert extract_tx_hash({"transactionHash": TX_HASH}) == TX_HASH

    def test_jsonrpc_envelope(self):
        """A JSON-RPC result holding a hash is unwrapped."""
        assert extract_tx_hash({"jsonrpc": "2.0", "id": 1, "result": TX_HASH}) == TX_HASH

    def test_object_attribute(self):
        """Objects with a hash attribute are recognized."""

        class Receipt:
            hash = TX_HASH

        assert extract_tx_hash(Receipt()) == TX_HASH

    def test_missing(self):
        """No hash anywhere gives None."""
        assert extract_tx_hash(None) is None
        assert extract_tx_hash({"status": "ok"}) is None
        assert extract_tx_hash(42) is None


class TestInvoke:
    """Test sync and async method invocation."""

    @pytest.mark.asyncio
    async def test_sync_method(self):
        """Plain callables return their value."""
        assert await invoke(lambda x: x * 2, 21) == 42

    @pytest.mark.asyncio
    async def test_async_method(self):
        """Coroutine functions are awaited."""
        assert await invoke(RequestOnly().request, {}) == TX_HASH


def rpc_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestJsonRpcTransport:
    """Test the JSON-RPC transport against a mocked node."""

    @pytest.mark.asyncio
    async def test_request_returns_result(self):
        """The result member is returned."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": TX_HASH})

        async with rpc_client(handler) as client:
            transport = JsonRpcTransport("http://node.test", chain_id=31337, client=client)
            tx = {"from": "0x" + "a" * 40, "to": "0x" + "b" * 40, "value": "0x1"}
            result = await transport.request({"method": "eth_sendTransaction", "params": [tx]})

        assert result == TX_HASH
        assert seen["body"]["jsonrpc"] == "2.0"
        assert seen["body"]["method"] == "eth_sendTransaction"
        assert seen["body"]["params"] == [tx]

    @pytest.mark.asyncio
    async def test_ids_increment(self):
        """Each call uses a fresh request id."""
        ids = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            ids.append(body["id"])
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": "0x7a69"})

        async with rpc_client(handler) as client:
            transport = JsonRpcTransport("http://node.test", client=client)
            await transport.request({"method": "eth_chainId"})
            await transport.request({"method": "eth_chainId"})

        assert ids == [1, 2]

    @pytest.mark.asyncio
    async def test_rpc_error_raises(self):
        """An error member raises TransportError with its code."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "insufficient funds"}})

        async with rpc_client(handler) as client:
            transport = JsonRpcTransport("http://node.test", client=client)
            with pytest.raises(TransportError) as exc_info:
                await transport.request({"method": "eth_sendTransaction", "params": []})

        assert exc_info.value.message == "insufficient funds"
        assert exc_info.value.code == -32000

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        """HTTP failures raise TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="bad gateway")

        async with rpc_client(handler) as client:
            transport = JsonRpcTransport("http://node.test", client=client)
            with pytest.raises(TransportError):
                await transport.request({"method": "eth_chainId"})

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        """Non-JSON responses raise TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        async with rpc_client(handler) as client:
            transport = JsonRpcTransport("http://node.test", client=client)
            with pytest.raises(TransportError):
                await transport.request({"method": "eth_chainId"})

    def test_exposes_request_capability(self):
        """The transport is probed as a request-capable provider."""
        transport = JsonRpcTransport("http://node.test", chain_id=31337, explorer="https://explorer.test/tx/")
        assert primary_capability(transport) == TransportCapability.REQUEST
        assert transport.chain_id == 31337
        assert transport.explorer == "https://explorer.test/tx/"
