"""Routing module for SmartPay - candidate building, ranking and quoting."""

from smartpay.routing.models import (
    Strategy,
    StrategyWeights,
    STRATEGY_WEIGHTS,
    ALL_STRATEGIES,
    RouteCandidate,
    RankedRoute,
    Quote,
    resolve_strategy,
)
from smartpay.routing.candidates import build_candidates
from smartpay.routing.ranker import rank
from smartpay.routing.quoting import QuotingEngine, select_best_route

__all__ = [
    "Strategy",
    "StrategyWeights",
    "STRATEGY_WEIGHTS",
    "ALL_STRATEGIES",
    "RouteCandidate",
    "RankedRoute",
    "Quote",
    "resolve_strategy",
    "build_candidates",
    "rank",
    "QuotingEngine",
    "select_best_route",
]
