"""Per-user practice plan endpoints."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from practice_log.api.schemas.plan import PlanPayload, PlanRow
from practice_log.db.deps import get_db
from practice_log.observability.metrics import log_metric
from practice_log.observability.tracing import trace
from practice_log.services.plan_service import PlanExistsError, get_plan, insert_plan, upsert_plan

router = APIRouter()


@router.get("/plan", response_model=PlanRow, tags=["plan"])
def read_plan(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    db: Session = Depends(get_db),
) -> PlanRow:
    request_id = getattr(request.state, "request_id", None)
    with trace("plan.get", user_id=str(user_id), request_id=request_id):
        plan = get_plan(db, user_id)
        if not plan:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not set")
    return PlanRow.model_validate(plan)


@router.post("/plan", response_model=PlanRow, status_code=status.HTTP_201_CREATED, tags=["plan"])
def create_plan(
    request: Request,
    payload: PlanPayload,
    db: Session = Depends(get_db),
) -> PlanRow:
    request_id = getattr(request.state, "request_id", None)
    with trace("plan.insert", user_id=str(payload.user_id), request_id=request_id):
        try:
            plan = insert_plan(db, payload)
        except PlanExistsError:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Plan already exists")
    log_metric("plan.insert.success", 1, metadata={"user_id": str(payload.user_id)})
    return PlanRow.model_validate(plan)


@router.put("/plan", response_model=PlanRow, tags=["plan"])
def save_plan(
    request: Request,
    payload: PlanPayload,
    db: Session = Depends(get_db),
) -> PlanRow:
    request_id = getattr(request.state, "request_id", None)
    metadata = {"daily_goal": payload.daily_goal}
    with trace("plan.upsert", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
        plan = upsert_plan(db, payload)
    log_metric("plan.upsert.success", 1, metadata={"user_id": str(payload.user_id)})
    return PlanRow.model_validate(plan)
