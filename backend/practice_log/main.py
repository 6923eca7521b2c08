"""Main FastAPI application for the Practice Log backend."""
from fastapi import FastAPI, Request

from practice_log.api.routes.jobs import router as jobs_router
from practice_log.api.routes.notifications import router as notifications_router
from practice_log.api.routes.plan import router as plan_router
from practice_log.api.routes.push_subscriptions import router as push_subscriptions_router
from practice_log.api.routes.sessions import router as sessions_router
from practice_log.core.config import settings
from practice_log.core.logging import configure_logging
from practice_log.core.middleware import RequestIDMiddleware
from practice_log.observability.client import init_opik
from practice_log.observability.tracing import trace

configure_logging(log_level=settings.log_level, access_log=settings.access_log)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.include_router(sessions_router)
app.include_router(plan_router)
app.include_router(push_subscriptions_router)
app.include_router(notifications_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
