"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional

from plan_advisor.domain.exceptions import InvalidPlanError


class PlanCategory(str, Enum):
    """Plan category with an explicit preference rank (lower is preferred)"""

    PERSONAL = "personal"
    FAMILY = "family"
    FIBER_HOME = "fiber-home"

    @property
    def rank(self) -> int:
        return _CATEGORY_RANK[self]


_CATEGORY_RANK = {
    PlanCategory.PERSONAL: 0,
    PlanCategory.FAMILY: 1,
    PlanCategory.FIBER_HOME: 2,
}


class TargetPolicy(str, Enum):
    """Pricing band taken when resolving the target tier"""

    NEAR_TIER = "near_tier"
    ONE_TIER_UP = "one_tier_up"
    BELOW_ARPU = "below_arpu"


@dataclass(frozen=True)
class Plan:
    """Sellable catalog entry"""

    id: int
    name: str
    price: int
    data_gb: int
    voice_min: int
    broadband: Optional[str] = None
    benefits: Optional[str] = None
    category: PlanCategory = PlanCategory.PERSONAL
    includes_broadband: bool = False
    on_sale: bool = True

    def __post_init__(self) -> None:
        for field_name in ("price", "data_gb", "voice_min"):
            value = getattr(self, field_name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise InvalidPlanError(f"Plan {self.name!r}: {field_name} must be a non-negative integer")
        if not isinstance(self.category, PlanCategory):
            try:
                object.__setattr__(self, "category", PlanCategory(self.category))
            except ValueError as e:
                raise InvalidPlanError(f"Plan {self.name!r}: unknown category {self.category!r}") from e


@dataclass(frozen=True)
class CustomerUsage:
    """Billing and usage snapshot for one customer"""

    phone: str
    location: str
    current_plan: str
    current_price: float
    arpu: float
    data_gb: float  # measured usage
    voice_min: float  # measured usage
    has_broadband: bool = False
    overage: float = 0
    overage_ratio: float = 0
    remarks: str = ""


@dataclass(frozen=True)
class RecommendationResult:
    """Output of a recommendation for one customer"""

    customer: CustomerUsage
    recommended_plan_id: int
    recommended_plan_name: str
    recommended_price: int
    recommended_data_gb: int
    recommended_voice_min: int
    recommended_broadband: str
    recommended_benefits: str
    target_price: int
    diff: float
    match_score: int
    resource_risk: bool
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        """Flatten customer and recommendation fields into one mapping"""
        data = asdict(self)
        customer = data.pop("customer")
        return {**customer, **data}


@dataclass(frozen=True)
class ScoredPlan:
    """Candidate plan with its match score, as produced by ranking"""

    plan: Plan
    match_score: int
    resource_risk: bool
