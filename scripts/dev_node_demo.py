"""
Dev Node Demo

Quotes a checkout from the demo wallet and executes the chosen route
against a local JSON-RPC dev node (anvil, hardhat) that signs
eth_sendTransaction for its unlocked accounts.

Usage:
    python3 scripts/dev_node_demo.py [fastest|cheapest|balanced] [--all]
"""

import asyncio
import sys

from dotenv import load_dotenv

from smartpay.catalog import NETWORKS
from smartpay.config import settings
from smartpay.execution import JsonRpcTransport, TransportError
from smartpay.formatting import money
from smartpay.routing import ALL_STRATEGIES, resolve_strategy
from smartpay.schema import Checkout
from smartpay.sdk import SmartPaySDK
from smartpay.wallet import create_demo_wallet


# First unlocked dev account
DEV_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
BURN_ADDRESS = "0x0000000000000000000000000000000000000000"


async def run(strategy_name: str, show_all: bool):
    transport = JsonRpcTransport(settings.rpc_url, chain_id=settings.rpc_chain_id)

    chain_id = await transport.request({"method": "eth_chainId", "params": []})
    print(f"🔗 Connected to {settings.rpc_url} (chain id {int(chain_id, 16)})\n")

    wallet = create_demo_wallet(
        address=DEV_ACCOUNT,
        chain_id=settings.rpc_chain_id,
        provider=transport,
    )
    checkout = Checkout(
        id="dev-node-demo",
        name="Demo Product",
        fixed_amount=12.5,
        settlement_asset="USDC",
        accepted_payment_methods=["ETH", "USDC"],
    )
    networks = {
        "ethereum": NETWORKS["ethereum"].model_copy(update={
            "gas_base_usd": 4.8,
            "rpc_chain_id": settings.rpc_chain_id,
        }),
    }

    sdk = SmartPaySDK(transport_resolver=lambda route, wallet: transport)
    quote = await sdk.quote(checkout, wallet, networks=networks)

    if show_all:
        for strategy in ALL_STRATEGIES:
            routes = quote.routes_for(strategy)
            if not routes:
                print(f"[{strategy.value}] no route")
                continue
            best = routes[0]
            print(f"[{strategy.value}] {best.source_symbol} on {best.source_chain}, total {money(best.display_total_usd)}")
        return

    strategy = resolve_strategy(strategy_name)
    routes = quote.routes_for(strategy)
    route = routes[0] if routes else quote.selected
    if route is None:
        print(f"❌ No route found for strategy: {strategy.value}")
        sys.exit(1)

    print(f"Chosen strategy: {strategy.value}")
    print(f"Best route: {route.source_symbol} on {route.source_chain}, total {money(route.display_total_usd)}\n")

    result = await sdk.execute(route, wallet, to_address=BURN_ADDRESS, force_execution=True)
    print("Execution result:")
    for field, value in result.model_dump(mode="json").items():
        print(f"    {field}: {value}")


def main():
    """Run the dev node demo."""
    load_dotenv()

    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    strategy_name = args[0] if args else settings.default_strategy
    show_all = "--all" in sys.argv

    print("=" * 60)
    print("  SmartPay - Dev Node Demo")
    print("=" * 60 + "\n")

    try:
        asyncio.run(run(strategy_name, show_all))
    except TransportError as e:
        print(f"❌ Dev node demo failed: {e.message}")
        print(f"   Is a node running at {settings.rpc_url}?")
        sys.exit(1)


if __name__ == "__main__":
    main()
