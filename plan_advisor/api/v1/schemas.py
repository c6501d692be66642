"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from plan_advisor.domain.models import CustomerUsage, PlanCategory, RecommendationResult
from plan_advisor.domain.pitch import PitchProvider


class PlanCreate(BaseModel):
    """Request body for POST /v1/plans"""

    name: str = Field(..., min_length=1, description="Plan display name")
    price: int = Field(..., gt=0, description="Monthly price")
    data_gb: int = Field(..., ge=0, description="Included data (GB)")
    voice_min: int = Field(..., ge=0, description="Included voice minutes")
    broadband: Optional[str] = Field(None, max_length=100, description="Broadband speed, e.g. 300M")
    benefits: Optional[str] = None
    category: PlanCategory = PlanCategory.PERSONAL
    includes_broadband: bool = False
    on_sale: bool = True


class PlanUpdate(BaseModel):
    """Request body for PATCH /v1/plans/{plan_id}; omitted fields are left unchanged"""

    name: Optional[str] = Field(None, min_length=1)
    price: Optional[int] = Field(None, gt=0)
    data_gb: Optional[int] = Field(None, ge=0)
    voice_min: Optional[int] = Field(None, ge=0)
    broadband: Optional[str] = Field(None, max_length=100)
    benefits: Optional[str] = None
    category: Optional[PlanCategory] = None
    includes_broadband: Optional[bool] = None
    on_sale: Optional[bool] = None


class PlanResponse(BaseModel):
    """Catalog plan"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: int
    data_gb: int
    voice_min: int
    broadband: Optional[str] = None
    benefits: Optional[str] = None
    category: PlanCategory
    includes_broadband: bool
    on_sale: bool


class CustomerUsageSchema(BaseModel):
    """One customer's billing and usage snapshot"""

    phone: str = Field(..., min_length=1)
    location: str = ""
    current_plan: str = ""
    current_price: float = Field(..., ge=0)
    arpu: float = Field(..., ge=0)
    data_gb: float = Field(..., ge=0, description="Measured data usage (GB)")
    voice_min: float = Field(..., ge=0, description="Measured voice usage (minutes)")
    has_broadband: bool = False
    overage: float = 0
    overage_ratio: float = 0
    remarks: str = ""

    def to_domain(self) -> CustomerUsage:
        return CustomerUsage(**self.model_dump())


class BatchRequest(BaseModel):
    """Request body for POST /v1/recommendations/batch"""

    customers: List[CustomerUsageSchema] = Field(..., min_length=1)


class RecommendationItem(CustomerUsageSchema):
    """Customer fields plus the recommended plan"""

    recommended_plan_id: int
    recommended_plan_name: str
    recommended_price: int
    recommended_data_gb: int
    recommended_voice_min: int
    recommended_broadband: str
    recommended_benefits: str
    target_price: int
    diff: float
    match_score: int = Field(..., ge=0, le=100)
    resource_risk: bool
    reason: str

    @classmethod
    def from_result(cls, result: RecommendationResult) -> "RecommendationItem":
        return cls(**result.to_dict())


class BatchResponse(BaseModel):
    """Response for batch and upload recommendations"""

    session_id: str
    count: int
    failed_count: int
    items: List[RecommendationItem]


class QueryResponse(BaseModel):
    """Response for GET /v1/recommendations/query"""

    user_info: CustomerUsageSchema
    recommendations: List[RecommendationItem]


class StoredRecommendation(BaseModel):
    """Recommendation persisted by an earlier batch"""

    model_config = ConfigDict(from_attributes=True)

    phone: str
    location: Optional[str] = None
    current_plan: Optional[str] = None
    current_price: float
    arpu: float
    recommended_plan_id: int
    recommended_plan_name: str
    recommended_price: int
    target_price: int
    match_score: int
    resource_risk: bool
    reason: str


class SessionHistoryResponse(BaseModel):
    """Response for GET /v1/recommendations/{session_id}"""

    session_id: str
    recommendations: List[StoredRecommendation]


class PitchRequestSchema(BaseModel):
    """Request body for POST /v1/pitch"""

    phone: str
    current_plan: str
    recommended_plan: str
    recommended_price: int
    recommended_data_gb: int
    recommended_voice_min: int
    reason: str
    provider: PitchProvider = PitchProvider.LOCAL
    api_key: Optional[str] = None
    api_endpoint: Optional[str] = None


class PitchResponse(BaseModel):
    """Response for POST /v1/pitch"""

    success: bool
    speech: str
    provider: PitchProvider
