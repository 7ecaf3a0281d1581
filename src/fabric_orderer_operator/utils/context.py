"""Per-pass context carried into every log line."""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


@contextmanager
def with_correlation_id(corr_id: str | None = None) -> Iterator[str]:
    """Tag everything logged inside the block with one correlation ID.

    A fresh ID is generated unless one is given, so each reconciliation pass
    can be followed through the logs on its own.
    """
    corr_id = corr_id or uuid.uuid4().hex[:16]
    token = _correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        _correlation_id.reset(token)


def get_context_dict() -> dict[str, Any]:
    """Return the correlation and trace IDs active in the current context."""
    ctx: dict[str, Any] = {}

    corr_id = _correlation_id.get()
    if corr_id:
        ctx["correlation_id"] = corr_id

    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        ctx["trace_id"] = format(span_context.trace_id, "032x")

    return ctx
