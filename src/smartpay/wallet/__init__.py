"""Wallet module - payer wallets and their catalog-resolved context."""

from smartpay.wallet.models import WalletBalance, Wallet, Holding, WalletContext
from smartpay.wallet.context import (
    DEFAULT_DEMO_BALANCES,
    build_wallet_context,
    create_demo_wallet,
    find_token,
)

__all__ = [
    "WalletBalance",
    "Wallet",
    "Holding",
    "WalletContext",
    "DEFAULT_DEMO_BALANCES",
    "build_wallet_context",
    "create_demo_wallet",
    "find_token",
]
