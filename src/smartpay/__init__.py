"""SmartPay - cross-asset, cross-chain checkout routing and execution."""

__version__ = "0.1.0"

from smartpay.sdk import SmartPaySDK
from smartpay.execution import ExecutionEngine, ExecutionResult, ExecutionStatus, to_hex
from smartpay.routing import QuotingEngine, Quote, RankedRoute, RouteCandidate, Strategy
from smartpay.schema import Checkout, PriceMode, SmartPayInputError
from smartpay.wallet import Wallet, WalletBalance, create_demo_wallet

__all__ = [
    "__version__",
    "SmartPaySDK",
    "ExecutionEngine",
    "ExecutionResult",
    "ExecutionStatus",
    "to_hex",
    "QuotingEngine",
    "Quote",
    "RankedRoute",
    "RouteCandidate",
    "Strategy",
    "Checkout",
    "PriceMode",
    "SmartPayInputError",
    "Wallet",
    "WalletBalance",
    "create_demo_wallet",
]
