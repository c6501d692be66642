"""Unit tests for the recommendation engine entry points"""

import pytest
from plan_advisor.domain.models import Plan, PlanCategory, RecommendationResult
from plan_advisor.domain.recommender import (
    recommend,
    recommend_multiple,
    recommend_batch,
    NONE_AVAILABLE,
    RECOMMENDATION_FAILED,
)
from plan_advisor.domain.reasons import compose_reason
from plan_advisor.domain.models import TargetPolicy
from plan_advisor.domain.exceptions import NoOnSalePlansError


class RecordingLog:
    """DecisionLog that keeps every event"""

    def __init__(self):
        self.events = []

    def log(self, event, fields):
        self.events.append((event, fields))


class FailingLog(RecordingLog):
    """DecisionLog that blows up while evaluating one phone number"""

    def __init__(self, bad_phone):
        super().__init__()
        self.bad_phone = bad_phone

    def log(self, event, fields):
        super().log(event, fields)
        if event == "customer_evaluated" and fields["phone"] == self.bad_phone:
            raise RuntimeError("usage record corrupted")


def test_recommend_near_tier(catalog, make_customer):
    """Test currentPrice=79, arpu=85 -> diff=6 -> stay at 79"""
    result = recommend(make_customer(current_price=79, arpu=85), catalog)

    assert result.diff == 6
    assert result.target_price == 79
    assert result.recommended_plan_id == 2
    assert "near tier" in result.reason
    assert result.resource_risk is False
    assert result.match_score == 100


def test_recommend_one_tier_up(catalog, make_customer):
    """Test currentPrice=79, arpu=120 -> diff=41 -> 129"""
    result = recommend(make_customer(current_price=79, arpu=120), catalog)

    assert result.diff == 41
    assert result.target_price == 129
    assert result.recommended_plan_name == "Premium"
    assert "one tier up" in result.reason


def test_recommend_three_tiers_below_arpu(catalog, make_customer):
    """Test currentPrice=39, arpu=128 -> diff=89 -> clamped to lowest tier"""
    result = recommend(make_customer(current_price=39, arpu=128, data_gb=3, voice_min=50), catalog)

    assert result.diff == 89
    assert result.target_price == 39
    assert "three tiers below ARPU" in result.reason
    assert result.reason == "three tiers below ARPU (target price = 39) + resources match"


def test_recommend_boundary_diffs_stay_in_lower_band(catalog, make_customer):
    at_ten = recommend(make_customer(current_price=79, arpu=89), catalog)
    assert at_ten.target_price == 79
    assert at_ten.reason.startswith("near tier")

    at_fifty = recommend(make_customer(current_price=79, arpu=129), catalog)
    assert at_fifty.target_price == 129
    assert at_fifty.reason.startswith("one tier up")


def test_recommend_flags_insufficient_resources(catalog, make_customer):
    result = recommend(make_customer(current_price=79, arpu=85, data_gb=40, voice_min=200), catalog)

    assert result.recommended_plan_id == 2
    assert result.resource_risk is True
    assert result.reason == "near tier + resources may be insufficient"
    assert result.match_score < 100


def test_recommend_prefers_broadband_plan_for_broadband_customer(make_customer):
    plans = [
        Plan(1, "Mobile 79", 79, 15, 300),
        Plan(2, "Home 79", 79, 15, 300, broadband="300M", category=PlanCategory.FIBER_HOME, includes_broadband=True),
    ]
    result = recommend(make_customer(has_broadband=True), plans)

    assert result.recommended_plan_id == 2
    assert result.recommended_broadband == "300M"


def test_recommend_prefers_personal_plan_on_equal_fit(make_customer):
    plans = [
        Plan(1, "Family 79", 79, 15, 300, category=PlanCategory.FAMILY),
        Plan(2, "Personal 79", 79, 15, 300, category=PlanCategory.PERSONAL),
    ]
    result = recommend(make_customer(has_broadband=False), plans)

    assert result.recommended_plan_id == 2


def test_recommend_empty_catalog(make_customer):
    with pytest.raises(NoOnSalePlansError):
        recommend(make_customer(), [])

    with pytest.raises(NoOnSalePlansError):
        recommend(make_customer(), [Plan(1, "Old", 79, 15, 300, on_sale=False)])


def test_recommend_never_picks_plan_off_sale(make_customer):
    plans = [
        Plan(1, "Old 79", 79, 12, 220, on_sale=False),
        Plan(2, "New 79", 79, 20, 500),
    ]
    result = recommend(make_customer(), plans)
    assert result.recommended_plan_id == 2


def test_recommend_writes_decision_trace(catalog, make_customer):
    decision_log = RecordingLog()
    recommend(make_customer(), catalog, decision_log=decision_log)

    events = [event for event, _ in decision_log.events]
    assert events == ["customer_evaluated", "target_price_selected", "candidates_filtered", "plan_selected"]
    assert decision_log.events[1][1]["target_price"] == 79


def test_result_to_dict_flattens_customer(catalog, make_customer):
    data = recommend(make_customer(), catalog).to_dict()

    assert data["phone"] == "13800000001"
    assert data["current_price"] == 79
    assert data["recommended_plan_name"] == "Standard"
    assert "customer" not in data


def test_recommend_multiple_ranked(catalog, make_customer):
    plans = catalog + [
        Plan(5, "Standard Plus", 79, 30, 600),
        Plan(6, "Standard Lite", 79, 8, 150),
    ]
    results = recommend_multiple(make_customer(), plans, count=3)

    assert len(results) == 3
    scores = [r.match_score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert all(0 <= s <= 100 for s in scores)
    assert [r.recommended_plan_id for r in results] == [2, 5, 6]
    assert results[2].resource_risk is True
    assert results[2].reason == "near tier + resources may be insufficient"


def test_recommend_multiple_returns_fewer_when_short(catalog, make_customer):
    results = recommend_multiple(make_customer(), catalog, count=3)
    assert len(results) == 1


def test_recommend_multiple_single_matches_recommend(make_customer):
    """Test the top-ranked plan equals the single best sufficient plan"""
    plans = [
        Plan(1, "Generous", 79, 40, 800),
        Plan(2, "Snug", 79, 11, 220),
        Plan(3, "Short", 79, 9, 250),
    ]
    customer = make_customer()

    single = recommend(customer, plans)
    ranked = recommend_multiple(customer, plans, count=1)

    assert single.resource_risk is False
    assert [r.recommended_plan_id for r in ranked] == [single.recommended_plan_id]


def test_recommend_multiple_validates_count(catalog, make_customer):
    with pytest.raises(ValueError):
        recommend_multiple(make_customer(), catalog, count=0)


def test_recommend_multiple_propagates_failures(make_customer):
    with pytest.raises(NoOnSalePlansError):
        recommend_multiple(make_customer(), [], count=3)


def test_recommend_batch_preserves_order(catalog, make_customer):
    customers = [
        make_customer(phone="13800000001", current_price=79, arpu=85),
        make_customer(phone="13800000002", current_price=79, arpu=120),
        make_customer(phone="13800000003", current_price=39, arpu=128, data_gb=3, voice_min=50),
    ]
    results = recommend_batch(customers, catalog)

    assert [r.customer.phone for r in results] == ["13800000001", "13800000002", "13800000003"]
    assert [r.target_price for r in results] == [79, 129, 39]


def test_recommend_batch_empty_catalog_returns_placeholders(make_customer):
    customers = [make_customer(phone=f"1380000000{i}") for i in range(3)]
    decision_log = RecordingLog()

    results = recommend_batch(customers, [], decision_log=decision_log)

    assert len(results) == 3
    for customer, result in zip(customers, results):
        assert result.customer == customer
        assert result.recommended_plan_name == NONE_AVAILABLE
        assert result.recommended_plan_id == 0
        assert result.match_score == 0
        assert result.reason == RECOMMENDATION_FAILED

    failures = [fields for event, fields in decision_log.events if event == "recommendation_failed"]
    assert [f["phone"] for f in failures] == [c.phone for c in customers]
    assert failures[0]["error_type"] == "NoOnSalePlansError"


def test_recommend_batch_isolates_bad_customer(catalog, make_customer):
    """Test one failing customer doesn't abort the rest of the batch"""
    customers = [
        make_customer(phone="13800000001"),
        make_customer(phone="13800000002"),
        make_customer(phone="13800000003"),
    ]
    results = recommend_batch(customers, catalog, decision_log=FailingLog("13800000002"))

    assert [r.recommended_plan_name for r in results] == ["Standard", NONE_AVAILABLE, "Standard"]


def test_recommend_batch_malformed_usage(catalog, make_customer):
    results = recommend_batch([make_customer(arpu=None), make_customer()], catalog)

    assert results[0].reason == RECOMMENDATION_FAILED
    assert results[1].recommended_plan_id == 2


def test_recommend_batch_thread_pool_keeps_order(catalog, make_customer):
    customers = [
        make_customer(phone=f"138000000{i:02d}", current_price=79, arpu=85 if i % 2 else 120)
        for i in range(20)
    ]

    sequential = recommend_batch(customers, catalog)
    parallel = recommend_batch(customers, catalog, max_workers=4)

    assert parallel == sequential
    assert all(isinstance(r, RecommendationResult) for r in parallel)


def test_compose_reason():
    assert compose_reason(TargetPolicy.NEAR_TIER, 79, False) == "near tier + resources match"
    assert compose_reason(TargetPolicy.ONE_TIER_UP, 129, True) == "one tier up + resources may be insufficient"
    assert compose_reason(TargetPolicy.BELOW_ARPU, 59, False) == (
        "three tiers below ARPU (target price = 59) + resources match"
    )
