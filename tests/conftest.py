"""Pytest fixtures for testing"""

import pytest
from typing import Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from plan_advisor.api.main import create_app
from plan_advisor.infrastructure.database.models import Base, PlanRecord
from plan_advisor.infrastructure.database.session import get_db
from plan_advisor.domain.models import Plan, PlanCategory, CustomerUsage


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def catalog() -> List[Plan]:
    """Four on-sale tiers: 39, 79, 129, 199"""
    return [
        Plan(1, "Basic", 39, 5, 100, broadband="10M"),
        Plan(2, "Standard", 79, 15, 300, broadband="100M", benefits="Video membership"),
        Plan(3, "Premium", 129, 30, 500, broadband="300M", benefits="Video + music membership"),
        Plan(4, "Elite", 199, 100, 1000, broadband="500M", benefits="All memberships"),
    ]


@pytest.fixture
def make_customer():
    """Build a CustomerUsage with sensible defaults"""

    def _make(**overrides) -> CustomerUsage:
        fields = dict(
            phone="13800000001",
            location="Downtown",
            current_plan="Standard",
            current_price=79,
            arpu=85,
            data_gb=10,
            voice_min=200,
        )
        fields.update(overrides)
        return CustomerUsage(**fields)

    return _make


@pytest.fixture
def stored_catalog(db: Session) -> List[PlanRecord]:
    """Catalog persisted in the test database, including one plan off sale"""
    records = [
        PlanRecord(name="Basic", price=39, data_gb=5, voice_min=100, category=PlanCategory.PERSONAL.value),
        PlanRecord(name="Standard", price=79, data_gb=15, voice_min=300, category=PlanCategory.PERSONAL.value),
        PlanRecord(
            name="Family 79",
            price=79,
            data_gb=20,
            voice_min=500,
            category=PlanCategory.FAMILY.value,
            includes_broadband=True,
            broadband="300M",
        ),
        PlanRecord(name="Premium", price=129, data_gb=30, voice_min=500, category=PlanCategory.PERSONAL.value),
        PlanRecord(name="Elite", price=199, data_gb=100, voice_min=1000, category=PlanCategory.PERSONAL.value),
        PlanRecord(name="Legacy 59", price=59, data_gb=8, voice_min=200, on_sale=False),
    ]
    db.add_all(records)
    db.commit()
    return records
