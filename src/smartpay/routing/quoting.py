"""
Quoting Engine

Runs the Candidate Builder and Ranker for every strategy on one checkout,
annotates routes for display, and picks a single globally best route.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from smartpay.catalog import NETWORKS, SUPPORTED_METHODS, Network, Token, resolve_token_catalog
from smartpay.formatting import normalize_token_list
from smartpay.money import clamp, ensure_within_range, round_money, sanitize_amount
from smartpay.routing.candidates import build_candidates
from smartpay.routing.models import ALL_STRATEGIES, Quote, RankedRoute, Strategy, resolve_strategy
from smartpay.routing.ranker import rank
from smartpay.schema.checkout import Checkout, PriceMode
from smartpay.wallet.context import build_wallet_context
from smartpay.wallet.models import Wallet, WalletContext


logger = logging.getLogger(__name__)


MIN_INVOICE_USD = 0.5
DEFAULT_MAX_INVOICE_USD = 999_999.0

# Display discount as a share of the invoice, never below MIN_DISPLAY_DISCOUNT_USD
STRATEGY_DISCOUNTS = {
    Strategy.FASTEST: 0.0,
    Strategy.BALANCED: 0.012,
    Strategy.CHEAPEST: 0.028,
}
MIN_DISPLAY_DISCOUNT_USD = 0.12
MIN_DISPLAY_FEE_USD = 0.35
MIN_DISPLAY_ETA_MINUTES = 0.5
FASTEST_ETA_COMPRESSION = 0.86
CHEAPEST_CONFIDENCE_BONUS = 2
CONFIDENCE_RANGE = (84, 99)

STRATEGY_LABELS = {
    Strategy.FASTEST: "Fastest",
    Strategy.CHEAPEST: "Cheapest",
    Strategy.BALANCED: "Balanced",
}

# USD cost assigned to each minute of settlement time when picking the best route
TIME_VALUE_USD_PER_MINUTE = 0.12


class RouteContext(BaseModel):
    """Routing inputs shared by every strategy of one quote."""

    model_config = ConfigDict(frozen=True)

    invoice_usd: float
    settlement_token: Optional[Token] = None
    wallet_context: WalletContext
    accepted_methods: List[str] = Field(default_factory=list)
    networks: Dict[str, Network] = Field(default_factory=dict)


def resolve_invoice_amount(checkout: Checkout, amount_input: Any = None) -> float:
    """
    Resolve the amount to quote.

    Fixed-price checkouts use `fixed_amount`; variable-price checkouts use
    the caller's amount or `variable_min`. Floor-clamped at 0.5 USD.
    """
    if checkout.price_mode == PriceMode.VARIABLE:
        base = amount_input or checkout.variable_min or 0
    else:
        base = checkout.fixed_amount or 0

    upper = max(DEFAULT_MAX_INVOICE_USD, sanitize_amount(base) or 1_000_000)
    return ensure_within_range(base, MIN_INVOICE_USD, upper)


def resolve_settlement_token(checkout: Checkout, tokens: List[Token]) -> Optional[Token]:
    """Catalog token for the checkout's settlement asset, else the first catalog token."""
    symbol = checkout.settlement_asset.upper()
    for token in tokens:
        if token.symbol.upper() != symbol:
            continue
        if checkout.settlement_chain and token.chain != checkout.settlement_chain:
            continue
        return token
    return tokens[0] if tokens else None


def build_route_context(
    checkout: Checkout,
    wallet: Wallet,
    invoice_usd: float,
    networks: Optional[Mapping[str, Network]] = None,
) -> RouteContext:
    """Resolve settlement token, accepted methods and wallet holdings once per quote."""
    catalog = resolve_token_catalog()
    if checkout.accepted_payment_methods is None:
        accepted = list(SUPPORTED_METHODS)
    else:
        accepted = normalize_token_list(checkout.accepted_payment_methods)

    return RouteContext(
        invoice_usd=invoice_usd,
        settlement_token=resolve_settlement_token(checkout, catalog.tokens),
        wallet_context=build_wallet_context(wallet, catalog.tokens),
        accepted_methods=accepted,
        networks=dict(networks if networks is not None else catalog.networks),
    )


def annotate_route(route: RankedRoute, strategy: Strategy, invoice_usd: float) -> RankedRoute:
    """Add display fee, total, ETA and confidence for one strategy bucket."""
    discount_usd = max(MIN_DISPLAY_DISCOUNT_USD, invoice_usd * STRATEGY_DISCOUNTS[strategy])
    display_fee = max(MIN_DISPLAY_FEE_USD, route.fees_total_usd - discount_usd)

    compression = FASTEST_ETA_COMPRESSION if strategy == Strategy.FASTEST else 1.0
    display_eta = max(MIN_DISPLAY_ETA_MINUTES, route.eta_minutes * compression)

    bonus = CHEAPEST_CONFIDENCE_BONUS if strategy == Strategy.CHEAPEST else 0
    low, high = CONFIDENCE_RANGE
    confidence = int(clamp(round(route.reliability * 100) + bonus, low, high))

    return route.model_copy(update={
        "strategy": strategy.value,
        "display_fee_usd": round_money(display_fee),
        "display_total_usd": round_money(invoice_usd + display_fee),
        "display_eta_minutes": round(display_eta, 2),
        "display_confidence": confidence,
        "recommendation_hint": STRATEGY_LABELS[strategy],
        "route_meta": {**route.route_meta, "strategy": strategy.value},
    })


def route_cost(route: RankedRoute) -> float:
    """Final payable plus the time value of the settlement delay."""
    return route.final_payable_usd + route.eta_minutes * TIME_VALUE_USD_PER_MINUTE


def select_best_route(routes: List[RankedRoute]) -> Optional[RankedRoute]:
    """Cheapest route by route_cost; the first one wins ties."""
    if not routes:
        return None
    return min(routes, key=route_cost)


class QuotingEngine:
    """
    Quoting Engine.

    Pure function of its inputs: no caches or counters, so concurrent
    quotes never interfere. The wallet and checkout are not mutated.
    """

    def __init__(self, networks: Optional[Mapping[str, Network]] = None):
        """
        Initialize the quoting engine.

        Args:
            networks: Network registry (default: built-in networks)
        """
        self.networks = networks if networks is not None else NETWORKS
        logger.info(f"Quoting Engine initialized ({len(self.networks)} networks)")

    def quote(
        self,
        checkout: Checkout,
        wallet: Wallet,
        amount_input: Any = None,
        strategy: Strategy | str = Strategy.BALANCED,
        networks: Optional[Mapping[str, Network]] = None,
    ) -> Quote:
        """
        Quote a checkout under all strategies.

        Args:
            checkout: Merchant checkout
            wallet: Payer wallet
            amount_input: Payer-entered amount for variable-price checkouts
            strategy: Requested strategy (recorded on the quote; all
                strategies are always computed)
            networks: Per-call network registry override

        Returns:
            Quote with per-strategy ranked routes and the globally best
            route, or `selected=None` when no balance is routable
        """
        requested = resolve_strategy(strategy)
        invoice_usd = resolve_invoice_amount(checkout, amount_input)
        context = build_route_context(
            checkout,
            wallet,
            invoice_usd,
            networks if networks is not None else self.networks,
        )

        by_strategy: Dict[str, List[RankedRoute]] = {}
        for current in ALL_STRATEGIES:
            candidates = build_candidates(
                invoice_usd=context.invoice_usd,
                settlement_token=context.settlement_token,
                wallet_context=context.wallet_context,
                accepted_methods=context.accepted_methods,
                strategy=current,
                networks=context.networks,
            )
            by_strategy[current.value] = [
                annotate_route(route, current, invoice_usd)
                for route in rank(candidates, current)
            ]

        union = [route for current in ALL_STRATEGIES for route in by_strategy[current.value]]
        selected = select_best_route(union)

        if selected is None:
            logger.warning(f"No routable balance for checkout {checkout.id} (${invoice_usd})")
        else:
            logger.info(
                f"Quoted checkout {checkout.id}: ${invoice_usd} → "
                f"{selected.source_symbol} on {selected.source_chain} "
                f"[{selected.strategy}, payable ${selected.final_payable_usd}]"
            )

        return Quote(
            invoice_usd=invoice_usd,
            strategy=requested,
            selected=selected,
            by_strategy=by_strategy,
        )

    def quote_by_strategy(
        self,
        checkout: Checkout,
        wallet: Wallet,
        strategy: Strategy | str = Strategy.BALANCED,
        amount_input: Any = None,
    ) -> List[RankedRoute]:
        """Ranked routes for a single strategy."""
        return self.quote(checkout, wallet, amount_input=amount_input, strategy=strategy).routes_for(strategy)
