"""Push subscription registration endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.orm import Session

from practice_log.api.schemas.push import PushSubscriptionRequest, PushSubscriptionResponse
from practice_log.db.deps import get_db
from practice_log.observability.tracing import trace
from practice_log.services.push_subscription_service import register_subscription, remove_subscription

router = APIRouter()


@router.post("/push-subscriptions", response_model=PushSubscriptionResponse, tags=["notifications"])
def subscribe(
    request: Request,
    payload: PushSubscriptionRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> PushSubscriptionResponse:
    request_id = getattr(request.state, "request_id", None)
    with trace("push_subscriptions.register", user_id=str(payload.user_id), request_id=request_id):
        subscription, created = register_subscription(db, payload)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return PushSubscriptionResponse(
        id=subscription.id,
        user_id=subscription.user_id,
        endpoint=subscription.endpoint,
        created=created,
    )


@router.delete("/push-subscriptions", status_code=status.HTTP_204_NO_CONTENT, tags=["notifications"])
def unsubscribe(
    request: Request,
    endpoint: str = Query(...),
    db: Session = Depends(get_db),
) -> Response:
    request_id = getattr(request.state, "request_id", None)
    with trace("push_subscriptions.remove", request_id=request_id):
        removed = remove_subscription(db, endpoint)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
