"""HTTP middleware for request correlation and access logging."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from practice_log.core.context import bound_request_id, new_request_id

REQUEST_ID_HEADER = "X-Request-Id"

access_logger = logging.getLogger("practice_log.access")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse or mint a request id, expose it on ``request.state`` and the response."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:  # type: ignore[override]
        request_id = request.headers.get(REQUEST_ID_HEADER) or new_request_id()
        request.state.request_id = request_id

        start = perf_counter()
        with bound_request_id(request_id):
            response = await call_next(request)
            access_logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (perf_counter() - start) * 1000,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
