"""/v1/recommendations - batch recommendations and per-customer plan ranking"""

import time
import uuid
import logging
from dataclasses import asdict
from typing import List
from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from sqlalchemy.orm import Session

from plan_advisor.api.v1.schemas import (
    BatchRequest,
    BatchResponse,
    CustomerUsageSchema,
    QueryResponse,
    RecommendationItem,
    SessionHistoryResponse,
    StoredRecommendation,
)
from plan_advisor.api.dependencies import get_decision_log, get_request_id
from plan_advisor.config import settings
from plan_advisor.domain.models import CustomerUsage, Plan
from plan_advisor.domain.recommender import recommend_batch, recommend_multiple
from plan_advisor.domain.exceptions import NoCandidatesError, NoOnSalePlansError, InvalidUsageDataError
from plan_advisor.infrastructure.database.session import get_db
from plan_advisor.infrastructure.database.repositories import (
    PlanRepository,
    CustomerSessionRepository,
    RecommendationRepository,
)
from plan_advisor.infrastructure.files.usage_sheet import read_usage_sheet
from plan_advisor.infrastructure.observability.logging import StructuredDecisionLog, log_batch_completed
from plan_advisor.infrastructure.observability.metrics import record_recommendation

router = APIRouter()

NO_PLANS_ON_SALE = "No plans on sale; add and publish plans first"


def _load_catalog(db: Session) -> List[Plan]:
    """Catalog for the engine; refuses to run against an empty shelf"""
    catalog = PlanRepository(db).catalog()
    if not any(p.on_sale for p in catalog):
        raise HTTPException(status_code=400, detail=NO_PLANS_ON_SALE)
    return catalog


def _run_batch(
    customers: List[CustomerUsage],
    db: Session,
    decision_log: StructuredDecisionLog,
    request_id: str,
) -> BatchResponse:
    """
    Recommend plans for a batch of customers and store the session.

    Flow:
    1. Load the catalog (400 if nothing is on sale)
    2. Store every customer's usage under a new session id
    3. Run the engine; failed customers come back as placeholders
    4. Store results, record metrics, commit
    """
    start_time = time.time()
    catalog = _load_catalog(db)
    session_id = str(uuid.uuid4())

    try:
        customer_repo = CustomerSessionRepository(db)
        for position, customer in enumerate(customers):
            customer_repo.create_customer(session_id, position, customer)

        results = recommend_batch(
            customers,
            catalog,
            decision_log=decision_log,
            max_workers=settings.batch_max_workers,
        )

        recommendation_repo = RecommendationRepository(db)
        for position, result in enumerate(results):
            recommendation_repo.create_recommendation(session_id, position, result)

        db.commit()

    except Exception as e:
        db.rollback()
        logging.error(f"Batch recommendation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Recommendation failed")

    failed_count = 0
    for result in results:
        record_recommendation(result.recommended_plan_id, result.match_score, result.resource_risk)
        if result.recommended_plan_id == 0:
            failed_count += 1

    duration_ms = (time.time() - start_time) * 1000
    log_batch_completed(request_id, session_id, len(results), failed_count, duration_ms)

    return BatchResponse(
        session_id=session_id,
        count=len(results),
        failed_count=failed_count,
        items=[RecommendationItem.from_result(r) for r in results],
    )


@router.post("/recommendations/batch", response_model=BatchResponse)
def create_batch(
    request_body: BatchRequest,
    request: Request,
    db: Session = Depends(get_db),
    decision_log: StructuredDecisionLog = Depends(get_decision_log),
):
    """Recommend one plan per customer in the request body"""
    customers = [c.to_domain() for c in request_body.customers]
    return _run_batch(customers, db, decision_log, get_request_id(request))


@router.post("/recommendations/upload", response_model=BatchResponse)
def upload_batch(
    request: Request,
    file: UploadFile = File(..., description="Usage sheet (.xlsx, .xls or .csv)"),
    db: Session = Depends(get_db),
    decision_log: StructuredDecisionLog = Depends(get_decision_log),
):
    """Recommend one plan per customer row of an uploaded usage sheet"""
    request_id = get_request_id(request)
    try:
        customers = read_usage_sheet(file.file, file.filename)
    except InvalidUsageDataError as e:
        logging.warning(f"Rejected usage sheet: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    if not customers:
        raise HTTPException(status_code=422, detail="No customer rows found in usage sheet")

    return _run_batch(customers, db, decision_log, request_id)


@router.get("/recommendations/query", response_model=QueryResponse)
def query_by_phone(
    request: Request,
    session_id: str = Query(..., min_length=1, description="Batch session identifier"),
    phone: str = Query(..., pattern=r"^\d{11}$", description="11-digit phone number"),
    count: int = Query(settings.default_recommendation_count, ge=1, le=settings.max_recommendation_count),
    db: Session = Depends(get_db),
    decision_log: StructuredDecisionLog = Depends(get_decision_log),
):
    """
    Rank the best-matching plans for one customer of a stored session.

    Returns:
        The customer's usage and up to `count` plans, best match first
    """
    request_id = get_request_id(request)
    catalog = _load_catalog(db)

    customer = CustomerSessionRepository(db).get_customer(session_id, phone)
    if not customer:
        raise HTTPException(status_code=404, detail="No usage data for this phone in the session")

    try:
        results = recommend_multiple(customer, catalog, count=count, decision_log=decision_log)

    except NoOnSalePlansError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except NoCandidatesError as e:
        logging.warning(f"No candidates: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Query failed, please retry later")

    return QueryResponse(
        user_info=CustomerUsageSchema(**asdict(customer)),
        recommendations=[RecommendationItem.from_result(r) for r in results],
    )


@router.get("/recommendations/{session_id}", response_model=SessionHistoryResponse)
def get_session_recommendations(session_id: str, db: Session = Depends(get_db)):
    """Stored recommendations of a batch session, in upload order"""
    records = RecommendationRepository(db).get_recommendations_by_session(session_id)
    if not records:
        raise HTTPException(status_code=404, detail="Session not found")

    return SessionHistoryResponse(
        session_id=session_id,
        recommendations=[StoredRecommendation.model_validate(r) for r in records],
    )
