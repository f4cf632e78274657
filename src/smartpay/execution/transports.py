"""
Execution Transports

A transport is any caller-supplied object exposing one or more dispatch
capabilities. The engine probes them in a fixed precedence:

1. `execute_route(route=, wallet=, to=)` - route-aware custom adapter
2. `execute(route=, wallet=, to=)` - generic custom adapter
3. `send_transaction(tx)` - wallet-style raw transaction
4. `request({"method": ..., "params": [...]})` - JSON-RPC style provider

Capabilities may be plain or async callables. A transport may also expose
`explorer` (URL template) and `chain_id` attributes.
"""

import inspect
import itertools
import logging
from enum import Enum
from typing import Any, List, Mapping, Optional

import httpx

from smartpay.config import settings


logger = logging.getLogger(__name__)


class TransportError(Exception):
    """A transport failed to submit a transaction."""

    def __init__(self, message: str, code: Optional[int] = None):
        self.message = message
        self.code = code
        super().__init__(self.message)


class TransportCapability(str, Enum):
    """Dispatch capabilities, named after the transport method they call."""

    EXECUTE_ROUTE = "execute_route"
    EXECUTE = "execute"
    SEND_TRANSACTION = "send_transaction"
    REQUEST = "request"


CAPABILITY_PRECEDENCE: tuple[TransportCapability, ...] = (
    TransportCapability.EXECUTE_ROUTE,
    TransportCapability.EXECUTE,
    TransportCapability.SEND_TRANSACTION,
    TransportCapability.REQUEST,
)

HASH_FIELDS = ("hash", "transactionHash", "transaction_hash")


def detect_capabilities(transport: Any) -> List[TransportCapability]:
    """Capabilities the transport exposes, in precedence order."""
    if transport is None:
        return []
    return [
        capability
        for capability in CAPABILITY_PRECEDENCE
        if callable(getattr(transport, capability.value, None))
    ]


def primary_capability(transport: Any) -> Optional[TransportCapability]:
    """Highest-precedence capability, or None for an unsupported transport."""
    capabilities = detect_capabilities(transport)
    return capabilities[0] if capabilities else None


async def invoke(method, *args, **kwargs) -> Any:
    """Call a sync or async transport method and return its result."""
    result = method(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def extract_tx_hash(response: Any, _depth: int = 0) -> Optional[str]:
    """
    Pull a transaction hash out of a transport response.

    Recognized shapes: a bare string, a mapping or object with a hash /
    transactionHash field, or a JSON-RPC envelope whose `result` holds one
    of those.
    """
    if response is None or _depth > 3:
        return None

    if isinstance(response, str):
        return response or None

    if isinstance(response, Mapping):
        for field in HASH_FIELDS:
            value = response.get(field)
            if isinstance(value, str) and value:
                return value
        if "result" in response:
            return extract_tx_hash(response["result"], _depth + 1)
        return None

    for field in HASH_FIELDS:
        value = getattr(response, field, None)
        if isinstance(value, str) and value:
            return value
    return None


class JsonRpcTransport:
    """
    JSON-RPC transport over HTTP.

    Exposes the `request` capability, e.g. against a local dev node that
    signs `eth_sendTransaction` for unlocked accounts.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        chain_id: Optional[int] = None,
        explorer: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.

        Args:
            rpc_url: Node URL (default: from config)
            chain_id: Chain id the node serves (default: from config)
            explorer: Explorer URL template for deep links
            timeout: Request timeout in seconds (default: from config)
            client: Shared httpx.AsyncClient; a short-lived client per call otherwise
        """
        self.rpc_url = rpc_url or settings.rpc_url
        self.chain_id = chain_id if chain_id is not None else settings.rpc_chain_id
        self.explorer = explorer
        self.timeout = timeout if timeout is not None else settings.rpc_timeout
        self._client = client
        self._ids = itertools.count(1)
        self.logger = logger

    async def request(self, payload: Mapping[str, Any]) -> Any:
        """
        Send one JSON-RPC call.

        Args:
            payload: {"method": str, "params": list}

        Returns:
            The `result` member of the response

        Raises:
            TransportError: On HTTP failure or an RPC error member
        """
        body = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": payload["method"],
            "params": list(payload.get("params") or []),
        }

        try:
            if self._client is not None:
                response = await self._client.post(self.rpc_url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(self.rpc_url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"RPC call {body['method']} failed: {e}")
            raise TransportError(f"RPC transport error: {e}")

        error = data.get("error") if isinstance(data, dict) else None
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            code = error.get("code") if isinstance(error, dict) else None
            raise TransportError(message or "RPC error", code=code)

        self.logger.info(f"RPC call {body['method']} → {self.rpc_url}")
        return data.get("result") if isinstance(data, dict) else None
