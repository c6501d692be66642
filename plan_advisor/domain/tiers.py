"""Price tier generation and target price selection"""

from typing import Iterable, List, Tuple
from plan_advisor.domain.models import Plan, TargetPolicy
from plan_advisor.domain.exceptions import NoOnSalePlansError

# Gap thresholds (ARPU minus current price), both inclusive on the lower band
NEAR_TIER_MAX_DIFF = 10
ONE_TIER_UP_MAX_DIFF = 50
TIERS_BELOW_ARPU = 3


def generate_price_tiers(plans: Iterable[Plan]) -> List[int]:
    """Distinct prices of on-sale plans, ascending"""
    return sorted({p.price for p in plans if p.on_sale})


def find_closest_tier(price: float, tiers: List[int]) -> int:
    """
    Return the tier nearest to price.

    Tiers are scanned in ascending order and only a strictly smaller
    distance replaces the current best, so the lower of two equidistant
    tiers wins.
    """
    if not tiers:
        raise NoOnSalePlansError("No price tiers available")

    closest = tiers[0]
    min_distance = abs(price - closest)
    for tier in tiers:
        distance = abs(price - tier)
        if distance < min_distance:
            min_distance = distance
            closest = tier
    return closest


def select_target_price(
    diff: float,
    current_price: float,
    arpu: float,
    tiers: List[int],
) -> Tuple[int, TargetPolicy]:
    """
    Map the ARPU gap to a target price tier.

    Bands:
    - diff <= 10:       stay near the current price
    - 10 < diff <= 50:  one tier above the current price, capped at the top tier
    - diff > 50:        three tiers below the highest tier affordable at ARPU,
                        floored at the lowest tier

    Returns: (target_price, policy)
    """
    if not tiers:
        raise NoOnSalePlansError("No price tiers available")

    if diff <= NEAR_TIER_MAX_DIFF:
        if current_price in tiers:
            return int(current_price), TargetPolicy.NEAR_TIER
        return find_closest_tier(current_price, tiers), TargetPolicy.NEAR_TIER

    if diff <= ONE_TIER_UP_MAX_DIFF:
        current_idx = next((i for i, tier in enumerate(tiers) if tier >= current_price), None)
        if current_idx is None or current_idx == len(tiers) - 1:
            return tiers[-1], TargetPolicy.ONE_TIER_UP
        return tiers[current_idx + 1], TargetPolicy.ONE_TIER_UP

    affordable_idx = None
    for i in range(len(tiers) - 1, -1, -1):
        if tiers[i] <= arpu:
            affordable_idx = i
            break

    # Every tier is above ARPU
    if affordable_idx is None:
        return tiers[0], TargetPolicy.BELOW_ARPU

    target_idx = max(0, affordable_idx - TIERS_BELOW_ARPU)
    return tiers[target_idx], TargetPolicy.BELOW_ARPU
