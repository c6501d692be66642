"""Candidate filtering, plan selection and match scoring"""

import math
from typing import List, Tuple
from plan_advisor.domain.models import Plan, CustomerUsage, ScoredPlan
from plan_advisor.domain.exceptions import NoCandidatesError
from plan_advisor.domain.tiers import find_closest_tier

# Scoring weights
DATA_SHORTFALL_WEIGHT = 1000
VOICE_SHORTFALL_WEIGHT = 10
VOICE_SURPLUS_DIVISOR = 100  # one GB of data is worth ~100 voice minutes
RESOURCE_POINTS = 50
PRICE_POINTS = 50


def candidates_at_tier(plans: List[Plan], target_price: int, tiers: List[int]) -> List[Plan]:
    """On-sale plans at the target price, or at the closest tier if none are"""
    candidates = [p for p in plans if p.on_sale and p.price == target_price]
    if candidates:
        return candidates

    closest_price = find_closest_tier(target_price, tiers)
    return [p for p in plans if p.on_sale and p.price == closest_price]


def filter_candidates(candidates: List[Plan], customer: CustomerUsage) -> List[Plan]:
    """
    Narrow candidates by connectivity and order them by category preference.

    Broadband customers only get broadband plans, unless none of the
    candidates include broadband. Everyone else keeps all candidates,
    ordered personal > family > fiber-home (stable within a category).
    """
    if customer.has_broadband:
        broadband_plans = [p for p in candidates if p.includes_broadband]
        return broadband_plans if broadband_plans else list(candidates)

    return sorted(candidates, key=lambda p: p.category.rank)


def is_resource_sufficient(plan: Plan, customer: CustomerUsage) -> bool:
    return plan.data_gb >= customer.data_gb and plan.voice_min >= customer.voice_min


def calculate_surplus_score(plan: Plan, customer: CustomerUsage) -> float:
    """Over-provisioning of a plan; lower means a tighter fit"""
    data_surplus = max(0, plan.data_gb - customer.data_gb)
    voice_surplus = max(0, plan.voice_min - customer.voice_min)
    return data_surplus + voice_surplus / VOICE_SURPLUS_DIVISOR


def calculate_fit_gap_score(plan: Plan, customer: CustomerUsage) -> float:
    """Shortfall-dominated fit score for plans that do not cover usage"""
    data_gap = max(0, customer.data_gb - plan.data_gb)
    voice_gap = max(0, customer.voice_min - plan.voice_min)
    return (
        data_gap * DATA_SHORTFALL_WEIGHT
        + voice_gap * VOICE_SHORTFALL_WEIGHT
        + calculate_surplus_score(plan, customer)
    )


def _coverage(allowance: float, usage: float) -> float:
    # Zero usage is fully covered by any allowance
    if usage <= 0:
        return 1.0
    return min(1.0, allowance / usage)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_match_score(plan: Plan, customer: CustomerUsage, target_price: int) -> int:
    """
    Score a plan from 0 to 100.

    - 50 points: average data/voice coverage, capped at exactly meeting usage
    - 50 points: price proximity to the target tier, minus 1 point per 2 units
    """
    coverage = (_coverage(plan.data_gb, customer.data_gb) + _coverage(plan.voice_min, customer.voice_min)) / 2
    resource_score = coverage * RESOURCE_POINTS
    price_score = max(0.0, PRICE_POINTS - abs(plan.price - target_price) / 2)

    score = _round_half_up(resource_score + price_score)
    return min(100, max(0, score))


def select_best_plan(candidates: List[Plan], customer: CustomerUsage) -> Tuple[Plan, bool]:
    """
    Pick the single best plan.

    Resource-sufficient plans win, least surplus first. Without one, the
    plan with the smallest fit gap is chosen and flagged as a resource risk.

    Returns: (plan, resource_risk)
    """
    if not candidates:
        raise NoCandidatesError("No candidate plans available")

    sufficient = [p for p in candidates if is_resource_sufficient(p, customer)]
    if sufficient:
        # min() keeps the first of equal scores
        best = min(sufficient, key=lambda p: calculate_surplus_score(p, customer))
        return best, False

    best = min(candidates, key=lambda p: calculate_fit_gap_score(p, customer))
    return best, True


def rank_plans(
    candidates: List[Plan],
    customer: CustomerUsage,
    target_price: int,
    count: int,
) -> List[ScoredPlan]:
    """
    Rank candidates by match score, best first, and keep the top count.

    Equal scores fall back to resource sufficiency, then least surplus,
    then candidate order.
    """
    if not candidates:
        raise NoCandidatesError("No candidate plans available")

    scored = [
        ScoredPlan(
            plan=plan,
            match_score=calculate_match_score(plan, customer, target_price),
            resource_risk=not is_resource_sufficient(plan, customer),
        )
        for plan in candidates
    ]
    scored.sort(
        key=lambda s: (
            -s.match_score,
            s.resource_risk,
            calculate_surplus_score(s.plan, customer),
        )
    )
    return scored[:count]
