"""Catalog module - static token and network reference data."""

from smartpay.catalog.models import Token, Network
from smartpay.catalog.data import (
    TOKENS,
    NETWORKS,
    DEFAULT_NETWORK,
    SUPPORTED_METHODS,
    SUPPORTED_CHAINS,
    USD_STABLECOINS,
    TokenCatalog,
    resolve_token_catalog,
    resolve_network,
)

__all__ = [
    "Token",
    "Network",
    "TOKENS",
    "NETWORKS",
    "DEFAULT_NETWORK",
    "SUPPORTED_METHODS",
    "SUPPORTED_CHAINS",
    "USD_STABLECOINS",
    "TokenCatalog",
    "resolve_token_catalog",
    "resolve_network",
]
