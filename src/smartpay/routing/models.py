"""Routing models - strategies, route candidates, ranked routes and quotes."""

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Strategy(str, Enum):
    """Named optimization preferences."""

    FASTEST = "fastest"
    BALANCED = "balanced"
    CHEAPEST = "cheapest"


# Order in which a quote builds and scans strategy buckets
ALL_STRATEGIES: tuple[Strategy, ...] = (Strategy.FASTEST, Strategy.CHEAPEST, Strategy.BALANCED)


def resolve_strategy(name: Any) -> Strategy:
    """Map a strategy name to a Strategy. Unknown names fall back to balanced."""
    if isinstance(name, Strategy):
        return name
    try:
        return Strategy(str(name or "").strip().lower())
    except ValueError:
        return Strategy.BALANCED


class StrategyWeights(BaseModel):
    """Cost-function weights for one strategy. A higher weight discounts that term more."""

    model_config = ConfigDict(frozen=True)

    fee: float
    eta: float
    reliability: float


STRATEGY_WEIGHTS: Dict[Strategy, StrategyWeights] = {
    Strategy.FASTEST: StrategyWeights(fee=0.10, eta=0.82, reliability=0.08),
    Strategy.BALANCED: StrategyWeights(fee=0.40, eta=0.35, reliability=0.25),
    Strategy.CHEAPEST: StrategyWeights(fee=0.82, eta=0.10, reliability=0.08),
}


class RouteCandidate(BaseModel):
    """One proposed way to pay an invoice from one held balance."""

    id: str = Field(description="Unique route identifier")

    # Source side
    source_symbol: str
    source_chain: str
    source_chain_id: int = Field(default=1)
    source_key: Optional[str] = Field(default=None)
    source_decimals: int = Field(default=18, ge=0)
    source_amount: float = Field(ge=0, description="Source units required")

    # Settlement side
    settlement_symbol: str
    settlement_chain: str
    settlement_chain_id: int = Field(default=1)
    settlement_amount: float = Field(ge=0, description="Settlement token units")
    settlement_amount_usd: float = Field(ge=0)

    # Cost breakdown (USD)
    fees_total_usd: float = Field(ge=0)
    gas_usd: float = Field(default=0.0, ge=0)
    bridge_fee_usd: float = Field(default=0.0, ge=0)
    spread_usd: float = Field(default=0.0, ge=0)

    # Estimates
    eta_minutes: float = Field(ge=0)
    reliability: float = Field(ge=0.9, le=0.999)
    failure_rate: float = Field(ge=0)

    executable: bool = Field(default=False, description="Wired to real transport dispatch")
    explanation: str = Field(default="")
    to_address: Optional[str] = Field(default=None, description="Recipient override for dispatch")
    strategy: Optional[str] = Field(default=None)
    route_meta: Dict[str, Any] = Field(default_factory=dict)


class RankedRoute(RouteCandidate):
    """A candidate ranked under one strategy, with display annotations."""

    rank: int = Field(ge=1)
    is_best: bool
    score: float = Field(description="Strategy cost, lower is better")
    final_payable_usd: float = Field(ge=0)

    # Display annotations set by the quoting engine
    display_fee_usd: Optional[float] = Field(default=None)
    display_total_usd: Optional[float] = Field(default=None)
    display_eta_minutes: Optional[float] = Field(default=None)
    display_confidence: Optional[int] = Field(default=None, ge=84, le=99)
    recommendation_hint: Optional[str] = Field(default=None)


class Quote(BaseModel):
    """Result of quoting one checkout across all strategies."""

    invoice_usd: float
    strategy: Strategy = Field(default=Strategy.BALANCED, description="Requested strategy")
    selected: Optional[RankedRoute] = Field(default=None, description="Globally best route")
    by_strategy: Dict[str, List[RankedRoute]] = Field(default_factory=dict)

    @property
    def has_routes(self) -> bool:
        """Check whether any balance produced a route."""
        return self.selected is not None

    def routes_for(self, strategy: Any) -> List[RankedRoute]:
        """Ranked routes for one strategy (unknown names map to balanced)."""
        return self.by_strategy.get(resolve_strategy(strategy).value, [])
