"""
Ranker - orders route candidates under a strategy.

score = fee * (1 - w.fee) + eta * (1 - w.eta) + (1 - reliability) * 100 * (1 - w.reliability)

Lower is better. Sorting is stable, so equal scores keep input order.
"""

import logging
from typing import Iterable, List

from smartpay.money import round_money
from smartpay.routing.models import (
    STRATEGY_WEIGHTS,
    RankedRoute,
    RouteCandidate,
    Strategy,
    StrategyWeights,
    resolve_strategy,
)


logger = logging.getLogger(__name__)

# Re-ranking a RankedRoute drops its previous rank annotations
CANDIDATE_FIELDS = set(RouteCandidate.model_fields)


def score_candidate(candidate: RouteCandidate, weights: StrategyWeights) -> float:
    """Strategy-weighted cost of one candidate."""
    fee_score = candidate.fees_total_usd * (1 - weights.fee)
    eta_score = candidate.eta_minutes * (1 - weights.eta)
    reliability_score = (1 - candidate.reliability) * 100 * (1 - weights.reliability)
    return fee_score + eta_score + reliability_score


def rank(candidates: Iterable[RouteCandidate], strategy: Strategy | str = Strategy.BALANCED) -> List[RankedRoute]:
    """
    Rank candidates under a strategy.

    Args:
        candidates: Route candidates (not modified)
        strategy: Strategy name; unknown names fall back to balanced

    Returns:
        New RankedRoute objects with contiguous 1-based ranks, exactly one
        `is_best`, and `final_payable_usd` = fee + settlement USD (6 dp)
    """
    strategy = resolve_strategy(strategy)
    weights = STRATEGY_WEIGHTS[strategy]

    scored = [(score_candidate(candidate, weights), candidate) for candidate in candidates]
    scored.sort(key=lambda item: item[0])

    ranked = []
    for index, (score, candidate) in enumerate(scored):
        ranked.append(RankedRoute(
            **candidate.model_dump(include=CANDIDATE_FIELDS),
            rank=index + 1,
            is_best=index == 0,
            score=score,
            final_payable_usd=round_money(candidate.fees_total_usd + candidate.settlement_amount_usd),
        ))

    if ranked:
        logger.debug(f"Ranked {len(ranked)} routes under {strategy.value}, best: {ranked[0].id}")
    return ranked
