"""Data access layer for plans, customer sessions and recommendations"""

from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from plan_advisor.infrastructure.database.models import PlanRecord, CustomerSession, RecommendationRecord
from plan_advisor.domain.models import Plan, CustomerUsage, RecommendationResult


def to_domain_plan(record: PlanRecord) -> Plan:
    """Convert a stored plan into the engine's immutable Plan"""
    return Plan(
        id=record.id,
        name=record.name,
        price=record.price,
        data_gb=record.data_gb,
        voice_min=record.voice_min,
        broadband=record.broadband,
        benefits=record.benefits,
        category=record.category,
        includes_broadband=bool(record.includes_broadband),
        on_sale=bool(record.on_sale),
    )


class PlanRepository:
    """Repository for catalog plans"""

    def __init__(self, db: Session):
        self.db = db

    def list_plans(self) -> List[PlanRecord]:
        return self.db.query(PlanRecord).order_by(PlanRecord.id).all()

    def catalog(self) -> List[Plan]:
        """Full catalog as domain plans, on sale or not"""
        return [to_domain_plan(r) for r in self.list_plans()]

    def get_plan_by_id(self, plan_id: int) -> Optional[PlanRecord]:
        return self.db.query(PlanRecord).filter(PlanRecord.id == plan_id).first()

    def create_plan(self, **fields: Any) -> PlanRecord:
        db_plan = PlanRecord(**fields)
        self.db.add(db_plan)
        self.db.flush()  # Get ID without committing
        return db_plan

    def update_plan(self, db_plan: PlanRecord, fields: Dict[str, Any]) -> PlanRecord:
        for key, value in fields.items():
            setattr(db_plan, key, value)
        self.db.flush()
        return db_plan

    def delete_plan(self, db_plan: PlanRecord) -> None:
        self.db.delete(db_plan)
        self.db.flush()


class CustomerSessionRepository:
    """Repository for uploaded customer usage rows"""

    def __init__(self, db: Session):
        self.db = db

    def create_customer(self, session_id: str, position: int, customer: CustomerUsage) -> CustomerSession:
        db_customer = CustomerSession(
            session_id=session_id,
            position=position,
            phone=customer.phone,
            location=customer.location,
            current_plan=customer.current_plan,
            current_price=customer.current_price,
            arpu=customer.arpu,
            data_gb=customer.data_gb,
            voice_min=customer.voice_min,
            has_broadband=customer.has_broadband,
            overage=customer.overage,
            overage_ratio=customer.overage_ratio,
            remarks=customer.remarks,
        )
        self.db.add(db_customer)
        return db_customer

    def get_customer(self, session_id: str, phone: str) -> Optional[CustomerUsage]:
        """Usage row for a phone within a session; the last row wins when a phone repeats"""
        row = (
            self.db.query(CustomerSession)
            .filter(CustomerSession.session_id == session_id, CustomerSession.phone == phone)
            .order_by(CustomerSession.position.desc())
            .first()
        )
        if not row:
            return None

        return CustomerUsage(
            phone=row.phone,
            location=row.location or "",
            current_plan=row.current_plan or "",
            current_price=row.current_price or 0,
            arpu=row.arpu or 0,
            data_gb=row.data_gb or 0,
            voice_min=row.voice_min or 0,
            has_broadband=bool(row.has_broadband),
            overage=row.overage or 0,
            overage_ratio=row.overage_ratio or 0,
            remarks=row.remarks or "",
        )


class RecommendationRepository:
    """Repository for batch recommendation results"""

    def __init__(self, db: Session):
        self.db = db

    def create_recommendation(self, session_id: str, position: int, result: RecommendationResult) -> RecommendationRecord:
        customer = result.customer
        db_recommendation = RecommendationRecord(
            session_id=session_id,
            position=position,
            phone=customer.phone,
            location=customer.location,
            current_plan=customer.current_plan,
            current_price=customer.current_price,
            arpu=customer.arpu,
            user_data_gb=customer.data_gb,
            user_voice_min=customer.voice_min,
            user_has_broadband=customer.has_broadband,
            recommended_plan_id=result.recommended_plan_id,
            recommended_plan_name=result.recommended_plan_name,
            recommended_price=result.recommended_price,
            recommended_data_gb=result.recommended_data_gb,
            recommended_voice_min=result.recommended_voice_min,
            recommended_broadband=result.recommended_broadband,
            recommended_benefits=result.recommended_benefits,
            target_price=result.target_price,
            diff=result.diff,
            match_score=result.match_score,
            reason=result.reason,
            resource_risk=result.resource_risk,
        )
        self.db.add(db_recommendation)
        return db_recommendation

    def get_recommendations_by_session(self, session_id: str, limit: int = 1000) -> List[RecommendationRecord]:
        return (
            self.db.query(RecommendationRecord)
            .filter(RecommendationRecord.session_id == session_id)
            .order_by(RecommendationRecord.position)
            .limit(limit)
            .all()
        )
