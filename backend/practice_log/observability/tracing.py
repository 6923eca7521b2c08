"""Opik trace scopes for routes, the reminder dispatcher and the sync client."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from practice_log.core.context import get_request_id
from practice_log.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace

logger = logging.getLogger(__name__)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """Wrap a block in an Opik trace named ``name``.

    The request id falls back to the one bound in the current context, so code
    below the middleware or inside a scheduler job is correlated without
    threading it through. Yields None when Opik is disabled.
    """
    client = get_opik_client()
    if client is None:
        yield None
        return

    trace_metadata = dict(metadata or {})
    if user_id:
        trace_metadata.setdefault("user_id", str(user_id))
    request_id = request_id or get_request_id()
    if request_id:
        trace_metadata.setdefault("request_id", request_id)

    try:
        opik_trace = client.trace(name=name, metadata=trace_metadata or None)
    except Exception as exc:  # pragma: no cover - tracing must never break callers
        logger.debug("Unable to start Opik trace %s: %s", name, exc)
        yield None
        return

    start = perf_counter()
    try:
        yield opik_trace
    except Exception as exc:
        _safe(opik_trace.update, name, error_info={"exception_type": type(exc).__name__, "message": str(exc)})
        raise
    finally:
        duration_ms = round((perf_counter() - start) * 1000, 2)
        _safe(opik_trace.update, name, metadata={**trace_metadata, "duration_ms": duration_ms})
        _safe(opik_trace.end, name)


def _safe(call, name: str, **kwargs: Any) -> None:
    try:
        call(**kwargs)
    except Exception:  # pragma: no cover
        logger.debug("Opik call %s failed for trace %s", getattr(call, "__name__", call), name, exc_info=True)
