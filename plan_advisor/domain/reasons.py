"""Human-readable recommendation reasons"""

from plan_advisor.domain.models import TargetPolicy

RESOURCES_MATCH = "+ resources match"
RESOURCES_INSUFFICIENT = "+ resources may be insufficient"


def compose_reason(policy: TargetPolicy, target_price: int, resource_risk: bool) -> str:
    """Describe the pricing band taken and whether the plan covers usage"""
    if policy is TargetPolicy.NEAR_TIER:
        reason = "near tier"
    elif policy is TargetPolicy.ONE_TIER_UP:
        reason = "one tier up"
    else:
        reason = f"three tiers below ARPU (target price = {target_price})"

    resource_clause = RESOURCES_INSUFFICIENT if resource_risk else RESOURCES_MATCH
    return f"{reason} {resource_clause}"
