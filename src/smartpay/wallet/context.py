"""
Wallet Context

Joins a payer's held balances against the token catalog, and builds the
demo wallet used by examples and tests.
"""

import logging
from typing import Any, Iterable, Optional

from smartpay.catalog import NETWORKS, TOKENS, Token, resolve_token_catalog
from smartpay.wallet.models import Holding, Wallet, WalletBalance, WalletContext


logger = logging.getLogger(__name__)


DEMO_WALLET_ADDRESS = "0xa11ce000000000000000000000000000000000de"

DEFAULT_DEMO_BALANCES = (
    WalletBalance(
        key="eth",
        symbol=TOKENS["eth"].symbol,
        chain=TOKENS["eth"].chain,
        decimals=TOKENS["eth"].decimals,
        chain_id=TOKENS["eth"].chain_id,
        amount=4.7,
    ),
    WalletBalance(
        key="usdc",
        symbol=TOKENS["usdc"].symbol,
        chain=TOKENS["usdc"].chain,
        decimals=TOKENS["usdc"].decimals,
        chain_id=TOKENS["usdc"].chain_id,
        amount=12400,
    ),
    WalletBalance(
        key="usdt",
        symbol=TOKENS["usdt"].symbol,
        chain=TOKENS["usdt"].chain,
        decimals=TOKENS["usdt"].decimals,
        chain_id=TOKENS["usdt"].chain_id,
        amount=7800,
    ),
)


def find_token(tokens: Iterable[Token], symbol: str, chain_id: int) -> Optional[Token]:
    """Find the catalog token with this symbol on this chain."""
    wanted = symbol.upper()
    for token in tokens:
        if token.symbol.upper() == wanted and token.chain_id == chain_id:
            return token
    return None


def build_wallet_context(wallet: Wallet, tokens: Optional[Iterable[Token]] = None) -> WalletContext:
    """
    Join wallet balances with catalog tokens.

    Args:
        wallet: Caller-supplied wallet (not mutated)
        tokens: Token catalog (default: the built-in catalog)

    Returns:
        WalletContext with one holding per balance that has a catalog token
    """
    catalog = list(tokens) if tokens is not None else resolve_token_catalog().tokens
    holdings = []

    for balance in wallet.balances:
        token = find_token(catalog, balance.symbol, balance.chain_id)
        if token is None:
            logger.debug(f"No catalog token for {balance.symbol} on chain {balance.chain_id}, skipping")
            continue
        holdings.append(Holding(balance=balance, token=token))

    return WalletContext(wallet=wallet, holdings=holdings, token_catalog=catalog)


def create_demo_wallet(**overrides: Any) -> Wallet:
    """
    Build the demo wallet (ETH, USDC and USDT on Ethereum).

    Any Wallet field can be overridden, e.g. `address`, `provider`, or
    `transports`.
    """
    network = NETWORKS["ethereum"]
    fields = {
        "id": "demo",
        "connector_label": "Demo Wallet",
        "chain": network.label.lower(),
        "chain_id": network.rpc_chain_id,
        "address": DEMO_WALLET_ADDRESS,
        "balances": list(DEFAULT_DEMO_BALANCES),
        "network": network,
        "provider": None,
        "is_demo": True,
    }
    fields.update(overrides)
    return Wallet(**fields)
