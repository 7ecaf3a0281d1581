"""Shared plumbing for kopf handlers: structured logging and pass metrics."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from .. import metrics
from ..constants import CONTROLLER_NAME
from ..logging import log_resource_event
from ..models import ReconcileRequest
from ..utils.errors import sanitize_exception

_T = TypeVar("_T")


class BaseHandler:
    """Wraps reconciliation passes for one resource kind."""

    def __init__(self, kind: str):
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def request_for(meta: dict[str, Any]) -> ReconcileRequest:
        """Identify the object described by kopf's ``meta``."""
        return ReconcileRequest(namespace=meta.get("namespace", "default"), name=meta["name"])

    def log(
        self,
        meta: dict[str, Any],
        message: str,
        reason: str,
        level: int = logging.INFO,
        error: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        """Emit a structured log line about the object in ``meta``.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            reason: Machine readable reason
            level: Log level
            error: Exception to include, logged in sanitized form with its type
            **kwargs: Additional fields to include in the log
        """
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__

        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=meta.get("name", "unknown"),
            namespace=meta.get("namespace", "default"),
            uid=meta.get("uid", "unknown"),
            event=logging.getLevelName(level).lower(),
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def reconcile_with_metrics(self, meta: dict[str, Any], pass_fn: Callable[[], _T]) -> _T:
        """Run ``pass_fn`` counting its outcome and timing it.

        Failures are logged and counted by exception type, then re-raised.
        """
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        with metrics.reconcile_duration_seconds.labels(kind=self.kind).time():
            try:
                result = pass_fn()
            except Exception as e:
                metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
                metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
                self.log(meta, "Reconciliation failed", reason="ReconciliationFailed", level=logging.ERROR, error=e)
                raise

        metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        return result

    def record_resource_status(self, ready: bool) -> None:
        """Count the state a resource was left in by a pass."""
        metrics.resource_status_total.labels(kind=self.kind, status="ready" if ready else "not_ready").inc()
