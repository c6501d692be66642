"""Recommendation engine - core business logic for plan recommendations"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Protocol
from plan_advisor.domain.models import Plan, CustomerUsage, RecommendationResult
from plan_advisor.domain.exceptions import NoOnSalePlansError
from plan_advisor.domain.tiers import generate_price_tiers, select_target_price
from plan_advisor.domain.matching import (
    candidates_at_tier,
    filter_candidates,
    select_best_plan,
    rank_plans,
    calculate_match_score,
)
from plan_advisor.domain.reasons import compose_reason

NONE_AVAILABLE = "none available"
RECOMMENDATION_FAILED = "recommendation failed"


class DecisionLog(Protocol):
    """Sink for structured decision traces"""

    def log(self, event: str, fields: Dict[str, Any]) -> None: ...


class NullDecisionLog:
    """Discards all events"""

    def log(self, event: str, fields: Dict[str, Any]) -> None:
        pass


_NULL_LOG = NullDecisionLog()


def _build_result(
    customer: CustomerUsage,
    plan: Plan,
    target_price: int,
    diff: float,
    match_score: int,
    resource_risk: bool,
    reason: str,
) -> RecommendationResult:
    return RecommendationResult(
        customer=customer,
        recommended_plan_id=plan.id,
        recommended_plan_name=plan.name,
        recommended_price=plan.price,
        recommended_data_gb=plan.data_gb,
        recommended_voice_min=plan.voice_min,
        recommended_broadband=plan.broadband or "",
        recommended_benefits=plan.benefits or "",
        target_price=target_price,
        diff=diff,
        match_score=match_score,
        resource_risk=resource_risk,
        reason=reason,
    )


def _resolve_candidates(customer: CustomerUsage, plans: List[Plan], decision_log: DecisionLog):
    """Shared path: tiers -> target price -> filtered candidates"""
    tiers = generate_price_tiers(plans)
    if not tiers:
        raise NoOnSalePlansError("No on-sale plans available")

    diff = customer.arpu - customer.current_price
    decision_log.log(
        "customer_evaluated",
        {
            "phone": customer.phone,
            "current_price": customer.current_price,
            "arpu": customer.arpu,
            "diff": diff,
            "data_gb": customer.data_gb,
            "voice_min": customer.voice_min,
            "has_broadband": customer.has_broadband,
            "price_tiers": tiers,
        },
    )

    target_price, policy = select_target_price(diff, customer.current_price, customer.arpu, tiers)
    decision_log.log(
        "target_price_selected",
        {"phone": customer.phone, "target_price": target_price, "policy": policy.value},
    )

    candidates = filter_candidates(candidates_at_tier(plans, target_price, tiers), customer)
    decision_log.log(
        "candidates_filtered",
        {
            "phone": customer.phone,
            "candidate_count": len(candidates),
            "candidates": [f"{p.name} ({p.price})" for p in candidates],
        },
    )
    return diff, target_price, policy, candidates


def recommend(
    customer: CustomerUsage,
    plans: List[Plan],
    decision_log: Optional[DecisionLog] = None,
) -> RecommendationResult:
    """
    Main entry point: recommend the single best plan for one customer.

    Raises:
        NoOnSalePlansError: Catalog has nothing on sale
        NoCandidatesError: Filtering left no plan to choose from
    """
    decision_log = decision_log or _NULL_LOG
    diff, target_price, policy, candidates = _resolve_candidates(customer, plans, decision_log)

    plan, resource_risk = select_best_plan(candidates, customer)
    decision_log.log(
        "plan_selected",
        {
            "phone": customer.phone,
            "plan_id": plan.id,
            "plan_name": plan.name,
            "price": plan.price,
            "resource_risk": resource_risk,
        },
    )

    return _build_result(
        customer,
        plan,
        target_price=target_price,
        diff=diff,
        match_score=calculate_match_score(plan, customer, target_price),
        resource_risk=resource_risk,
        reason=compose_reason(policy, target_price, resource_risk),
    )


def recommend_multiple(
    customer: CustomerUsage,
    plans: List[Plan],
    count: int = 3,
    decision_log: Optional[DecisionLog] = None,
) -> List[RecommendationResult]:
    """
    Rank up to count plans for one customer, best match first.

    Failures propagate to the caller.
    """
    if count < 1:
        raise ValueError("count must be at least 1")

    decision_log = decision_log or _NULL_LOG
    diff, target_price, policy, candidates = _resolve_candidates(customer, plans, decision_log)

    return [
        _build_result(
            customer,
            scored.plan,
            target_price=target_price,
            diff=diff,
            match_score=scored.match_score,
            resource_risk=scored.resource_risk,
            reason=compose_reason(policy, target_price, scored.resource_risk),
        )
        for scored in rank_plans(candidates, customer, target_price, count)
    ]


def failed_recommendation(customer: CustomerUsage) -> RecommendationResult:
    """Placeholder result for a customer whose recommendation failed"""
    return RecommendationResult(
        customer=customer,
        recommended_plan_id=0,
        recommended_plan_name=NONE_AVAILABLE,
        recommended_price=0,
        recommended_data_gb=0,
        recommended_voice_min=0,
        recommended_broadband="",
        recommended_benefits="",
        target_price=0,
        diff=0,
        match_score=0,
        resource_risk=False,
        reason=RECOMMENDATION_FAILED,
    )


def recommend_batch(
    customers: List[CustomerUsage],
    plans: List[Plan],
    decision_log: Optional[DecisionLog] = None,
    max_workers: Optional[int] = None,
) -> List[RecommendationResult]:
    """
    Recommend a plan for every customer, preserving input order.

    A failure for one customer is logged and replaced with a placeholder
    result instead of aborting the batch.
    """
    decision_log = decision_log or _NULL_LOG

    def recommend_one(customer: CustomerUsage) -> RecommendationResult:
        try:
            return recommend(customer, plans, decision_log)
        except Exception as e:
            decision_log.log(
                "recommendation_failed",
                {"phone": customer.phone, "error": str(e), "error_type": type(e).__name__},
            )
            return failed_recommendation(customer)

    if max_workers and max_workers > 1 and len(customers) > 1:
        # executor.map yields results in submission order
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(recommend_one, customers))

    return [recommend_one(customer) for customer in customers]
