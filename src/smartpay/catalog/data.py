"""
Catalog Data

Process-wide token and network reference data. Initialized once at import
and never mutated.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple

from smartpay.catalog.models import Network, Token


NETWORKS: Mapping[str, Network] = MappingProxyType({
    "ethereum": Network(
        id=1,
        key="ethereum",
        label="Ethereum",
        native_symbol="ETH",
        gas_base_usd=5.8,
        latency_minutes=3.8,
        reliability=0.985,
        explorer="https://etherscan.io/tx/",
        rpc_chain_id=1,
    ),
    "base": Network(
        id=8453,
        key="base",
        label="Base",
        native_symbol="ETH",
        gas_base_usd=0.45,
        latency_minutes=0.6,
        reliability=0.98,
        explorer="https://basescan.org/tx/",
        rpc_chain_id=8453,
    ),
})

DEFAULT_NETWORK = NETWORKS["ethereum"]


TOKENS: Mapping[str, Token] = MappingProxyType({
    "eth": Token(
        key="eth",
        symbol="ETH",
        name="Ethereum",
        chain="ethereum",
        chain_id=1,
        usd=3200.0,
        decimals=18,
    ),
    "usdc": Token(
        key="usdc",
        symbol="USDC",
        name="USD Coin",
        chain="ethereum",
        chain_id=1,
        usd=1.0,
        decimals=6,
        contract="0xA0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",
    ),
    "usdt": Token(
        key="usdt",
        symbol="USDT",
        name="Tether",
        chain="ethereum",
        chain_id=1,
        usd=1.0,
        decimals=6,
        contract="0xdAC17F958D2ee523a2206206994597C13D831ec7",
    ),
    "eth_base": Token(
        key="eth_base",
        symbol="ETH",
        name="Ethereum (Base)",
        chain="base",
        chain_id=8453,
        usd=3200.0,
        decimals=18,
    ),
    "usdc_base": Token(
        key="usdc_base",
        symbol="USDC",
        name="USD Coin (Base)",
        chain="base",
        chain_id=8453,
        usd=1.0,
        decimals=6,
        contract="0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    ),
})

SUPPORTED_METHODS: tuple[str, ...] = ("ETH", "USDC", "USDT")
SUPPORTED_CHAINS: tuple[str, ...] = tuple(NETWORKS)

# Stablecoins settle 1:1 against the invoice amount
USD_STABLECOINS: frozenset[str] = frozenset({"USDC", "USDT"})


class TokenCatalog(NamedTuple):
    """Snapshot of the catalog used by one routing request."""

    tokens: list[Token]
    by_symbol: dict[str, Token]
    networks: Mapping[str, Network]


def resolve_token_catalog() -> TokenCatalog:
    """Return catalog tokens, a first-wins symbol index, and the networks."""
    tokens = list(TOKENS.values())
    by_symbol: dict[str, Token] = {}
    for token in tokens:
        by_symbol.setdefault(token.symbol, token)
    return TokenCatalog(tokens=tokens, by_symbol=by_symbol, networks=NETWORKS)


def resolve_network(networks: Mapping[str, Network], chain: str = "", chain_id=None) -> Network:
    """Look up a network by chain name, then by stringified chain id, else the default."""
    if chain and chain in networks:
        return networks[chain]
    if chain_id is not None and str(chain_id) in networks:
        return networks[str(chain_id)]
    for network in networks.values():
        if chain_id is not None and network.id == chain_id:
            return network
    return DEFAULT_NETWORK
