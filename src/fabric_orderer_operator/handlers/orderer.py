"""Handler for Orderer CRD."""

from __future__ import annotations

import os
import threading
from typing import Any

import kopf

from ..cluster import ClusterClient
from ..constants import API_GROUP, API_VERSION, KIND_ORDERER, PLURAL_ORDERER
from ..models import ReconcileRequest
from ..reconciler import OrdererReconciler
from ..utils.errors import sanitize_exception
from .base import BaseHandler

RETRY_DELAY_SECONDS = float(os.getenv("RETRY_DELAY_SECONDS", "10"))
RESYNC_INTERVAL_SECONDS = float(os.getenv("RESYNC_INTERVAL_SECONDS", "300"))


class OrdererHandler(BaseHandler):
    """Bridges kopf invocations to the Orderer reconciler.

    kopf runs the resync timer independently of the create/update/resume
    handlers, so both may fire for the same Orderer at once. Passes are
    serialized per Orderer here.
    """

    def __init__(self, reconciler: OrdererReconciler | None = None):
        """Initialize orderer handler.

        Args:
            reconciler: Reconciler to use; built from the environment on first use when omitted
        """
        super().__init__(KIND_ORDERER)
        self._reconciler = reconciler
        self._locks: dict[ReconcileRequest, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def reconciler(self) -> OrdererReconciler:
        if self._reconciler is None:
            self._reconciler = OrdererReconciler(ClusterClient())
        return self._reconciler

    def _lock_for(self, request: ReconcileRequest) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(request, threading.Lock())

    def reconcile(self, meta: dict[str, Any]) -> None:
        """Run one pass for the Orderer described by ``meta``.

        Raises:
            kopf.TemporaryError: When the pass asks to be retried or fails
        """
        request = self.request_for(meta)

        try:
            with self._lock_for(request):
                result = self.reconcile_with_metrics(meta, lambda: self.reconciler.reconcile(request))
        except Exception as e:
            self.record_resource_status(ready=False)
            raise kopf.TemporaryError(
                f"Reconciliation failed: {sanitize_exception(e)}", delay=RETRY_DELAY_SECONDS
            ) from e

        self.record_resource_status(ready=not result.requeue)
        if result.requeue:
            self.log(meta, "Orderer not converged yet, retrying", reason=result.reason or "Requeue")
            raise kopf.TemporaryError(f"Waiting for {result.reason}", delay=RETRY_DELAY_SECONDS)


# Global handler instance
_handler = OrdererHandler()


@kopf.on.create(API_GROUP, API_VERSION, PLURAL_ORDERER)
@kopf.on.update(API_GROUP, API_VERSION, PLURAL_ORDERER)
@kopf.on.resume(API_GROUP, API_VERSION, PLURAL_ORDERER)
@kopf.timer(API_GROUP, API_VERSION, PLURAL_ORDERER, interval=RESYNC_INTERVAL_SECONDS, initial_delay=RESYNC_INTERVAL_SECONDS)
def handle_orderer(
    meta: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle Orderer resource reconciliation."""
    _handler.reconcile(meta)
