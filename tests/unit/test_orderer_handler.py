"""Tests for the Orderer kopf handler."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

import kopf
import pytest
from kubernetes.client.exceptions import ApiException

from fabric_orderer_operator.handlers.orderer import RETRY_DELAY_SECONDS, OrdererHandler
from fabric_orderer_operator.models import DONE, ReconcileRequest, ReconcileResult
from fabric_orderer_operator.reconciler import OrdererReconciler
from fabric_orderer_operator.templates import TemplateStore

META = {"name": "orderer0", "namespace": "fabric", "uid": "uid-fabric-orderer0"}


class TestOrdererHandler:
    """Test cases for OrdererHandler."""

    def test_converged(self):
        reconciler = MagicMock()
        reconciler.reconcile.return_value = DONE

        OrdererHandler(reconciler).reconcile(META)

        reconciler.reconcile.assert_called_once_with(ReconcileRequest("fabric", "orderer0"))

    def test_requeue_becomes_temporary_error(self):
        reconciler = MagicMock()
        reconciler.reconcile.return_value = ReconcileResult(requeue=True, reason="NodePortPending")

        with pytest.raises(kopf.TemporaryError, match="NodePortPending") as exc_info:
            OrdererHandler(reconciler).reconcile(META)

        assert exc_info.value.delay == RETRY_DELAY_SECONDS

    def test_failure_becomes_temporary_error(self):
        reconciler = MagicMock()
        error = ApiException(status=500, reason="Internal Server Error")
        reconciler.reconcile.side_effect = error

        with pytest.raises(kopf.TemporaryError, match="Reconciliation failed") as exc_info:
            OrdererHandler(reconciler).reconcile(META)

        assert exc_info.value.__cause__ is error
        assert exc_info.value.delay == RETRY_DELAY_SECONDS

    def test_against_cluster(self, fake_cluster, make_orderer_body):
        """Test a handler invocation converging an Orderer end to end."""
        fake_cluster.add_orderer(make_orderer_body(hosts=["10.0.0.5"]))
        handler = OrdererHandler(OrdererReconciler(fake_cluster, TemplateStore(), emit_events=False))

        handler.reconcile(META)

        assert fake_cluster.orderers[("fabric", "orderer0")]["status"]["accessPoint"] == "https://10.0.0.5:31000"
        assert ("fabric", "orderer0") in fake_cluster.stateful_sets


class TestOrdererHandlerConcurrency:
    """Test that timer and change handlers never overlap for one Orderer."""

    @staticmethod
    def _tracking_reconciler(active: dict, lock: threading.Lock) -> MagicMock:
        def reconcile(request):
            with lock:
                active[request] = active.get(request, 0) + 1
                active["max"] = max(active.get("max", 0), active[request])
            time.sleep(0.05)
            with lock:
                active[request] -= 1
            return DONE

        reconciler = MagicMock()
        reconciler.reconcile.side_effect = reconcile
        return reconciler

    def test_same_orderer_serialized(self):
        active: dict = {}
        reconciler = self._tracking_reconciler(active, threading.Lock())
        handler = OrdererHandler(reconciler)

        threads = [threading.Thread(target=handler.reconcile, args=(META,)) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert reconciler.reconcile.call_count == 3
        assert active["max"] == 1

    def test_different_orderers_run_concurrently(self):
        started = threading.Barrier(2, timeout=5)

        def reconcile(request):
            # Times out unless both passes are in flight together
            started.wait()
            return DONE

        reconciler = MagicMock()
        reconciler.reconcile.side_effect = reconcile
        handler = OrdererHandler(reconciler)
        metas = [META, {**META, "name": "orderer1", "uid": "uid-fabric-orderer1"}]

        threads = [threading.Thread(target=handler.reconcile, args=(meta,)) for meta in metas]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert reconciler.reconcile.call_count == 2
        assert not started.broken
