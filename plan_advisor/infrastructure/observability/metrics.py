"""Prometheus metrics for monitoring recommendation outcomes and pitch generation"""

from prometheus_client import Counter, Histogram

# Recommendation metrics
recommendation_counter = Counter(
    "plan_advisor_recommendation_total",
    "Total plan recommendations made",
    ["outcome"],  # recommended | failed
)

resource_risk_counter = Counter(
    "plan_advisor_resource_risk_total",
    "Recommendations whose plan may not cover measured usage",
)

match_score_histogram = Histogram(
    "plan_advisor_match_score",
    "Match score of recommended plans",
    buckets=[20, 40, 60, 70, 80, 90, 95, 100],
)

# Pitch generation metrics
pitch_counter = Counter(
    "plan_advisor_pitch_total",
    "Sales pitches generated",
    ["provider", "outcome"],  # outcome: success | failure
)

llm_latency_histogram = Histogram(
    "llm_latency_seconds",
    "Language model API response time",
    buckets=[0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_recommendation(plan_id: int, match_score: int, resource_risk: bool) -> None:
    """Record one recommendation; plan id 0 marks a failed customer"""
    if plan_id == 0:
        recommendation_counter.labels(outcome="failed").inc()
        return

    recommendation_counter.labels(outcome="recommended").inc()
    match_score_histogram.observe(match_score)
    if resource_risk:
        resource_risk_counter.inc()
