"""SQLAlchemy ORM models for the plan catalog, customer sessions and recommendations"""

import uuid
from sqlalchemy import Column, String, Boolean, Float, DateTime, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class PlanRecord(Base):
    """Catalog plan"""

    __tablename__ = "plan"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False)
    data_gb = Column(Integer, nullable=False)
    voice_min = Column(Integer, nullable=False)
    broadband = Column(String(100), nullable=True)
    benefits = Column(Text, nullable=True)
    category = Column(String(20), nullable=False, default="personal")
    includes_broadband = Column(Boolean, nullable=False, default=False)
    on_sale = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class CustomerSession(Base):
    """Customer usage row uploaded as part of a batch session"""

    __tablename__ = "customer_session"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(String(36), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # row index within the batch
    phone = Column(String(20), nullable=False, index=True)
    location = Column(String(100), nullable=True)
    current_plan = Column(String(255), nullable=True)
    current_price = Column(Float, nullable=False, default=0)
    arpu = Column(Float, nullable=False, default=0)
    data_gb = Column(Float, nullable=False, default=0)
    voice_min = Column(Float, nullable=False, default=0)
    has_broadband = Column(Boolean, nullable=False, default=False)
    overage = Column(Float, nullable=False, default=0)
    overage_ratio = Column(Float, nullable=False, default=0)
    remarks = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class RecommendationRecord(Base):
    """Stored batch recommendation"""

    __tablename__ = "recommendation"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(String(36), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # index within the batch
    phone = Column(String(20), nullable=False, index=True)
    location = Column(String(100), nullable=True)
    current_plan = Column(String(255), nullable=True)
    current_price = Column(Float, nullable=False)
    arpu = Column(Float, nullable=False)
    user_data_gb = Column(Float, nullable=False)
    user_voice_min = Column(Float, nullable=False)
    user_has_broadband = Column(Boolean, nullable=False, default=False)
    recommended_plan_id = Column(Integer, nullable=False)
    recommended_plan_name = Column(String(255), nullable=False)
    recommended_price = Column(Integer, nullable=False)
    recommended_data_gb = Column(Integer, nullable=False)
    recommended_voice_min = Column(Integer, nullable=False)
    recommended_broadband = Column(String(100), nullable=True)
    recommended_benefits = Column(Text, nullable=True)
    target_price = Column(Integer, nullable=False)
    diff = Column(Float, nullable=False)
    match_score = Column(Integer, nullable=False)
    reason = Column(Text, nullable=False)
    resource_risk = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
