"""
Candidate Builder

Produces one routing candidate per eligible wallet holding, with estimated
fee, settlement time and reliability.

Estimates are illustrative heuristics, not market-data pricing. They are
reproducible: every pseudo-random factor is seeded from the token, strategy
and invoice amount (see smartpay.routing.jitter).
"""

import logging
import time
import uuid
from typing import Iterable, List, Mapping, Optional

from smartpay.catalog import NETWORKS, TOKENS, USD_STABLECOINS, Network, Token, resolve_network
from smartpay.money import clamp
from smartpay.routing.jitter import seeded_jitter
from smartpay.routing.models import RouteCandidate, Strategy, resolve_strategy
from smartpay.wallet.models import Holding, WalletContext


logger = logging.getLogger(__name__)


# Base settlement delay in minutes
SAME_CHAIN_DELAY_MINUTES = 0.4
BRIDGE_DELAY_MINUTES = 2.4

FEE_STRATEGY_BIAS = {
    Strategy.FASTEST: 1.12,
    Strategy.BALANCED: 0.98,
    Strategy.CHEAPEST: 0.78,
}
FEE_STRATEGY_DISCOUNT = {
    Strategy.FASTEST: 0.0,
    Strategy.BALANCED: 0.01,
    Strategy.CHEAPEST: 0.06,
}
ETA_STRATEGY_BIAS = {
    Strategy.FASTEST: 0.52,
    Strategy.BALANCED: 0.82,
    Strategy.CHEAPEST: 1.18,
}

CROSS_CHAIN_GAS_SURCHARGE_USD = 3.8
SAME_CHAIN_SPREAD_USD = 0.35
CROSS_CHAIN_SPREAD_USD = 0.85
MIN_NETWORK_FEE_USD = 0.3
LARGE_INVOICE_USD = 500.0

SAME_CHAIN_RELIABILITY = 0.985
CROSS_CHAIN_RELIABILITY = 0.96
MIN_RELIABILITY = 0.9
MAX_RELIABILITY = 0.999

BRIDGE_PENALTY_RANGE = (0.25, 0.95)
BRIDGE_BASE_FEE_USD = 0.3
SETTLEMENT_HAIRCUT = 0.9975


def estimate_base_fee(network: Network, same_chain: bool) -> float:
    """Gas baseline plus spread, with a surcharge for cross-chain routes."""
    if same_chain:
        return network.gas_base_usd + SAME_CHAIN_SPREAD_USD
    return network.gas_base_usd + CROSS_CHAIN_GAS_SURCHARGE_USD + CROSS_CHAIN_SPREAD_USD


def estimate_network_fee(
    strategy: Strategy,
    token: Token,
    network: Network,
    invoice_usd: float,
    same_chain: bool,
) -> float:
    """
    Estimate the network fee in USD.

    The base fee is scaled by the strategy bias, an invoice-size market
    adjustment, the strategy discount, and a jitter seeded from
    (symbol, strategy, invoice amount). Never below MIN_NETWORK_FEE_USD.
    """
    base = estimate_base_fee(network, same_chain)
    market_adj = 1 + (0.007 if invoice_usd > LARGE_INVOICE_USD else 0.012)
    discount = FEE_STRATEGY_DISCOUNT[strategy]
    jitter = seeded_jitter(f"{token.symbol}-{strategy.value}-{invoice_usd:.6f}", 0.7, 1.12)
    fee = base * market_adj * FEE_STRATEGY_BIAS[strategy] * (1 - discount) * jitter / 4
    return max(MIN_NETWORK_FEE_USD, fee)


def estimate_bridge_penalty(token: Token, settlement: Token, same_chain: bool) -> float:
    """Zero on the same chain, else a seeded value in BRIDGE_PENALTY_RANGE."""
    if same_chain:
        return 0.0
    low, high = BRIDGE_PENALTY_RANGE
    return seeded_jitter(f"{token.symbol}-{token.chain}-{settlement.chain}", low, high)


def estimate_eta(strategy: Strategy, token: Token, same_chain: bool) -> float:
    """Settlement time in minutes."""
    base = SAME_CHAIN_DELAY_MINUTES if same_chain else BRIDGE_DELAY_MINUTES
    jitter = seeded_jitter(f"{strategy.value}-{token.symbol}-{token.chain}-{base}", 0.85, 1.18)
    return round(base * ETA_STRATEGY_BIAS[strategy] * jitter, 2)


def calculate_reliability(chain_base: float, bridge_risk: float = 0.0, size_risk: float = 0.0) -> float:
    """Reliability clamped to [0.9, 0.999]."""
    return clamp(chain_base - bridge_risk - size_risk, MIN_RELIABILITY, MAX_RELIABILITY)


def is_executable(token: Token, settlement: Token, source_network: Network, same_chain: bool) -> bool:
    """Native-asset paths and same-asset same-chain paths are wired to real dispatch."""
    if token.symbol.upper() == source_network.native_symbol.upper():
        return True
    return same_chain and token.symbol.upper() == settlement.symbol.upper()


def new_route_id(token: Token) -> str:
    """Unique route identifier (time and randomness derived)."""
    return f"route:{token.chain}:{token.symbol}:{int(time.time() * 1000):x}:{uuid.uuid4().hex[:8]}"


def eligible_holdings(
    wallet_context: WalletContext,
    accepted_methods: Optional[Iterable[str]] = None,
) -> List[Holding]:
    """
    Filter holdings to routable ones.

    A holding is eligible if its symbol is in accepted_methods (case
    insensitive; an empty set accepts everything) and its amount is
    strictly positive.
    """
    accepted = {str(item).upper() for item in (accepted_methods or [])}
    eligible = []

    for holding in wallet_context.holdings:
        symbol = holding.token.symbol.upper()
        if accepted and symbol not in accepted:
            continue
        if not holding.balance.amount or holding.balance.amount <= 0:
            continue
        eligible.append(holding)

    return eligible


def build_candidates(
    invoice_usd: float,
    settlement_token: Optional[Token],
    wallet_context: WalletContext,
    accepted_methods: Optional[Iterable[str]] = None,
    strategy: Strategy | str = Strategy.BALANCED,
    networks: Optional[Mapping[str, Network]] = None,
) -> List[RouteCandidate]:
    """
    Build one route candidate per eligible holding.

    Args:
        invoice_usd: Invoice amount in USD
        settlement_token: Token the merchant settles in (default: USDC on Ethereum)
        wallet_context: Wallet balances joined with catalog tokens
        accepted_methods: Accepted payment symbols; empty accepts all
        strategy: Strategy name used for the fee and ETA biases
        networks: Network registry (default: built-in networks)

    Returns:
        List of RouteCandidate in holding order. Inputs are not mutated.
    """
    strategy = resolve_strategy(strategy)
    networks = networks if networks is not None else NETWORKS
    settlement = settlement_token or TOKENS["usdc"]
    settlement_network = resolve_network(networks, settlement.chain, settlement.chain_id)

    candidates = []
    for holding in eligible_holdings(wallet_context, accepted_methods):
        token = holding.token
        balance = holding.balance
        same_chain = balance.chain == settlement.chain
        source_network = resolve_network(networks, balance.chain, balance.chain_id)

        fee_usd = estimate_network_fee(strategy, token, source_network, invoice_usd, same_chain)
        bridge_penalty = estimate_bridge_penalty(token, settlement, same_chain)

        # Source units needed, inflated by the bridge penalty
        source_units = invoice_usd / token.usd
        required_source = source_units * (1 + bridge_penalty * 0.008)
        spread_units = source_units * (1 + bridge_penalty * 0.006)
        spread_usd = spread_units * token.usd - invoice_usd

        reliability = calculate_reliability(
            SAME_CHAIN_RELIABILITY if same_chain else CROSS_CHAIN_RELIABILITY,
            bridge_penalty * 0.02,
            invoice_usd * 0.000001,
        )
        failure_rate = max(0.0, round(1 - reliability + 0.012 + bridge_penalty * 0.03, 4))

        if settlement.symbol.upper() in USD_STABLECOINS:
            settlement_amount = invoice_usd
        else:
            settlement_amount = invoice_usd / settlement.usd

        candidate = RouteCandidate(
            id=new_route_id(token),
            source_symbol=token.symbol,
            source_chain=token.chain,
            source_chain_id=token.chain_id or source_network.id,
            source_key=token.key,
            source_decimals=token.decimals,
            source_amount=round(required_source + spread_units * 0.0006, 6),
            settlement_symbol=settlement.symbol,
            settlement_chain=settlement.chain,
            settlement_chain_id=settlement.chain_id or settlement_network.id,
            settlement_amount=round(settlement_amount, 6),
            settlement_amount_usd=round(invoice_usd * SETTLEMENT_HAIRCUT, 6),
            fees_total_usd=round(fee_usd + bridge_penalty, 6),
            gas_usd=round(source_network.gas_base_usd, 6),
            bridge_fee_usd=0.0 if same_chain else round(bridge_penalty + BRIDGE_BASE_FEE_USD, 6),
            spread_usd=round(max(0.0, spread_usd), 6),
            eta_minutes=estimate_eta(strategy, token, same_chain),
            reliability=reliability,
            failure_rate=failure_rate,
            executable=is_executable(token, settlement, source_network, same_chain),
            explanation=(
                f"Direct on {token.chain}"
                if same_chain
                else f"Bridge and settle to {settlement.chain} using swap path"
            ),
            strategy=strategy.value,
            route_meta={"method": strategy.value, "selected_by_engine": True},
        )
        logger.debug(
            f"Candidate {candidate.id}: fee=${candidate.fees_total_usd} "
            f"eta={candidate.eta_minutes}m reliability={candidate.reliability:.4f}"
        )
        candidates.append(candidate)

    return candidates
