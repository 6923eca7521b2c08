"""Correlation ids carried through log records and traces.

HTTP requests take theirs from ``X-Request-Id``; scheduler runs mint a ``job-``
prefixed one so the reminder dispatch can be followed in the worker logs.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    return request_id_ctx_var.get()


def new_request_id(prefix: str = "") -> str:
    return f"{prefix}{uuid4().hex}"


@contextmanager
def bound_request_id(request_id: str) -> Iterator[str]:
    token = request_id_ctx_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_ctx_var.reset(token)
