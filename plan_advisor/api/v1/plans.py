"""/v1/plans - plan catalog management"""

import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from plan_advisor.api.v1.schemas import PlanCreate, PlanUpdate, PlanResponse
from plan_advisor.infrastructure.database.session import get_db
from plan_advisor.infrastructure.database.repositories import PlanRepository

router = APIRouter()

NULLABLE_FIELDS = {"broadband", "benefits"}


@router.get("/plans", response_model=List[PlanResponse])
def list_plans(db: Session = Depends(get_db)):
    """List every catalog plan, on sale or not"""
    return PlanRepository(db).list_plans()


@router.get("/plans/{plan_id}", response_model=PlanResponse)
def get_plan(plan_id: int, db: Session = Depends(get_db)):
    plan = PlanRepository(db).get_plan_by_id(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return plan


@router.post("/plans", response_model=PlanResponse, status_code=201)
def create_plan(request_body: PlanCreate, db: Session = Depends(get_db)):
    try:
        plan = PlanRepository(db).create_plan(**request_body.model_dump(mode="json"))
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to create plan: {e}")
        raise HTTPException(status_code=500, detail="Failed to create plan")
    return plan


@router.patch("/plans/{plan_id}", response_model=PlanResponse)
def update_plan(plan_id: int, request_body: PlanUpdate, db: Session = Depends(get_db)):
    """Update the supplied fields of a plan"""
    repo = PlanRepository(db)
    plan = repo.get_plan_by_id(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")

    # Only broadband and benefits may be cleared with an explicit null
    fields = {
        key: value
        for key, value in request_body.model_dump(mode="json", exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }

    try:
        repo.update_plan(plan, fields)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to update plan {plan_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update plan")
    return plan


@router.delete("/plans/{plan_id}", status_code=204)
def delete_plan(plan_id: int, db: Session = Depends(get_db)):
    repo = PlanRepository(db)
    plan = repo.get_plan_by_id(plan_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")

    try:
        repo.delete_plan(plan)
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Failed to delete plan {plan_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete plan")
    return Response(status_code=204)
