"""
SmartPay Main Entry Point

Simple CLI demo of the checkout flow:
1. Enter an invoice amount (USD)
2. Quoting engine ranks routes from the demo wallet under every strategy
3. The globally best route is selected
4. Validation gate checks the payload
5. Execution engine settles the route (simulation without a transport)
"""

import asyncio
import logging

from dotenv import load_dotenv

from smartpay.formatting import money, route_priority_hint, short_address, token_amount
from smartpay.routing import ALL_STRATEGIES
from smartpay.schema import Checkout, PriceMode, SmartPayInputError
from smartpay.sdk import SmartPaySDK
from smartpay.wallet import create_demo_wallet


# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_banner():
    """Print SmartPay banner."""
    print("\n" + "=" * 60)
    print("  SmartPay: Cross-Asset, Cross-Chain Checkout")
    print("  Demo - Quoting Engine + Execution Engine")
    print("=" * 60 + "\n")


def print_wallet(wallet):
    print(f"👛 Wallet: {wallet.connector_label} ({short_address(wallet.address)})")
    for balance in wallet.balances:
        print(f"    {token_amount(balance.amount, balance.symbol)} on {balance.chain}")
    print()


async def run_checkout(sdk: SmartPaySDK, wallet, amount: float):
    checkout = Checkout(
        id="checkout-cli",
        name="CLI Invoice",
        price_mode=PriceMode.VARIABLE,
        variable_min=0.5,
        settlement_asset="USDC",
    )

    # Step 1: Quote
    print("📊 [Quoting] Ranking routes...")
    quote = await sdk.quote(checkout, wallet, amount_input=amount)
    print(f"    Invoice: {money(quote.invoice_usd)}")

    for strategy in ALL_STRATEGIES:
        print(f"\n    {strategy.value.title()}:")
        for route in quote.routes_for(strategy):
            marker = "⭐" if route.is_best else "  "
            print(
                f"    {marker} #{route.rank} {route.source_symbol} on {route.source_chain}: "
                f"fee {money(route.display_fee_usd)}, ETA {route.display_eta_minutes} min, "
                f"confidence {route.display_confidence}% ({route_priority_hint(route)})"
            )

    if not quote.has_routes:
        print("\n    ❌ No routable balance for this invoice.")
        return

    selected = quote.selected
    print(f"\n✅ Selected: {selected.source_symbol} → {selected.settlement_symbol} [{selected.strategy}]")
    print(f"    Pay {token_amount(selected.source_amount, selected.source_symbol)}")
    print(f"    Total payable: {money(selected.final_payable_usd)}")

    # Step 2: Validate + execute
    print("\n🚀 [Execution] Submitting route...")
    result = await sdk.execute(selected, wallet)

    if result.ok:
        mode = "simulated" if result.simulated else "submitted"
        print(f"    ✅ {mode.title()}: {result.tx_hash}")
        if result.explorer_hint:
            print(f"    🔗 {result.explorer_hint}")
        print(f"    Network: {result.used_network}")
    else:
        print(f"    ❌ {result.status.value}: {result.failure_reason}")


def main():
    """Main CLI application."""
    # Load environment variables
    load_dotenv()

    print_banner()

    sdk = SmartPaySDK()
    wallet = create_demo_wallet()
    print_wallet(wallet)

    # Interactive loop
    print("Enter invoice amounts in USD (or 'quit' to exit):\n")

    while True:
        try:
            user_input = input("💰 Invoice: ").strip()

            if not user_input:
                continue

            if user_input.lower() in ["quit", "exit", "q"]:
                print("\n👋 Goodbye!")
                break

            try:
                amount = float(user_input.lstrip("$").replace(",", ""))
            except ValueError:
                print(f"    ❌ Not an amount: {user_input}\n")
                continue

            print()
            asyncio.run(run_checkout(sdk, wallet, amount))
            print("\n" + "-" * 60 + "\n")

        except KeyboardInterrupt:
            print("\n\n👋 Goodbye!")
            break
        except SmartPayInputError as e:
            print(f"\n❌ Invalid input: {e.message}")
        except Exception as e:
            print(f"\n❌ Error: {e}")
            logger.exception("Unexpected error in main loop")
            print()


if __name__ == "__main__":
    main()
