"""Practice session row endpoints."""
from __future__ import annotations

from datetime import date
from time import perf_counter
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from practice_log.api.schemas.sessions import (
    SessionInsertRequest,
    SessionInsertResponse,
    SessionRow,
    SessionUpdateRequest,
)
from practice_log.db.deps import get_db
from practice_log.observability.metrics import log_metric
from practice_log.observability.tracing import trace
from practice_log.services.session_service import (
    SessionConflictError,
    SessionNotFoundError,
    SessionOwnershipError,
    delete_session,
    insert_sessions,
    list_sessions,
    update_session,
)

router = APIRouter()


@router.get("/sessions", response_model=List[SessionRow], tags=["sessions"])
def get_sessions(
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
) -> List[SessionRow]:
    request_id = getattr(request.state, "request_id", None)
    metadata = {
        "user_id": str(user_id),
        "start": start.isoformat() if start else None,
        "end": end.isoformat() if end else None,
    }
    with trace("sessions.list", metadata=metadata, user_id=str(user_id), request_id=request_id):
        rows = list_sessions(db, user_id, start=start, end=end)

    log_metric("sessions.list.count", len(rows), metadata={"user_id": str(user_id)})
    return [SessionRow.model_validate(row) for row in rows]


@router.post(
    "/sessions",
    response_model=SessionInsertResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["sessions"],
)
def create_sessions(
    request: Request,
    payload: SessionInsertRequest,
    db: Session = Depends(get_db),
) -> SessionInsertResponse:
    request_id = getattr(request.state, "request_id", None)
    start = perf_counter()
    with trace("sessions.insert", metadata={"rows": len(payload.rows)}, request_id=request_id):
        result = insert_sessions(db, payload.rows)

    latency_ms = (perf_counter() - start) * 1000
    log_metric("sessions.insert.created", len(result.created))
    log_metric("sessions.insert.skipped", result.skipped)
    log_metric("sessions.insert.latency_ms", latency_ms)
    return SessionInsertResponse(
        created=[SessionRow.model_validate(row) for row in result.created],
        skipped=result.skipped,
        request_id=request_id or "",
    )


@router.patch("/sessions/{session_id}", response_model=SessionRow, tags=["sessions"])
def patch_session(
    session_id: int,
    payload: SessionUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> SessionRow:
    request_id = getattr(request.state, "request_id", None)
    metadata = {
        "session_id": session_id,
        "category": payload.category,
        "minutes": payload.minutes,
    }
    with trace("sessions.update", metadata=metadata, user_id=str(payload.user_id), request_id=request_id):
        try:
            row = update_session(
                db,
                session_id,
                user_id=payload.user_id,
                category=payload.category,
                minutes=payload.minutes,
            )
        except SessionNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
        except SessionOwnershipError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Session does not belong to user")
        except SessionConflictError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    log_metric("sessions.update.success", 1, metadata={"user_id": str(payload.user_id)})
    return SessionRow.model_validate(row)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["sessions"])
def remove_session(
    session_id: int,
    request: Request,
    user_id: UUID = Query(..., description="User ID"),
    db: Session = Depends(get_db),
) -> Response:
    request_id = getattr(request.state, "request_id", None)
    with trace("sessions.delete", metadata={"session_id": session_id}, user_id=str(user_id), request_id=request_id):
        try:
            delete_session(db, session_id, user_id=user_id)
        except SessionNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
        except SessionOwnershipError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Session does not belong to user")

    log_metric("sessions.delete.success", 1, metadata={"user_id": str(user_id)})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
