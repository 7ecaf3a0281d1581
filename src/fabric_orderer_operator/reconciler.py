"""Reconciliation of Orderer resources.

Each pass rederives where an Orderer stands from what exists in the cluster:

    no secret -> no service -> no node port -> no access point -> no statefulset -> converged

Every step is an existence check followed by an idempotent create, so a pass
can be repeated, duplicated or interrupted at any point. Children carry an
owner reference to the Orderer and are garbage collected by Kubernetes when it
is deleted; the reconciler never deletes anything.
"""

from __future__ import annotations

import logging
from typing import Any, Union

from kubernetes.client.exceptions import ApiException

from . import metrics
from .access_point import assigned_node_port, compute_access_point
from .builders import build_credential_bundle, build_network_endpoint, build_workload_set, secret_name
from .cluster import ClusterClient
from .constants import CONTROLLER_NAME, KIND_ORDERER, KIND_SECRET, KIND_SERVICE, KIND_STATEFUL_SET
from .logging import log_resource_event
from .models import DONE, Orderer, ReconcileRequest, ReconcileResult
from .templates import TemplateStore
from .tracing import add_span_attribute, trace_span
from .utils.context import with_correlation_id
from .utils.errors import CredentialValidationError, is_already_exists, is_not_found, sanitize_exception
from .utils.events import (
    emit_access_point_assigned,
    emit_secret_created,
    emit_service_created,
    emit_stateful_set_created,
)

logger = logging.getLogger(__name__)

_Target = Union[ReconcileRequest, Orderer]


class OrdererReconciler:
    """Drives one Orderer toward its declared state, one pass at a time."""

    def __init__(
        self,
        cluster: ClusterClient,
        templates: TemplateStore | None = None,
        emit_events: bool = True,
    ):
        self.cluster = cluster
        self.templates = templates or TemplateStore()
        self.emit_events = emit_events

    def _log(
        self,
        target: _Target,
        message: str,
        reason: str,
        level: int = logging.INFO,
        error: Exception | None = None,
        **kwargs: Any,
    ) -> None:
        if error is not None:
            kwargs["error"] = sanitize_exception(error)
            kwargs["error_type"] = type(error).__name__
        log_resource_event(
            logger,
            controller=CONTROLLER_NAME,
            resource_kind=KIND_ORDERER,
            resource_name=target.name,
            namespace=target.namespace,
            uid=getattr(target, "uid", None) or "unknown",
            event=logging.getLevelName(level).lower(),
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def _created(self, orderer: Orderer, kind: str, name: str) -> None:
        metrics.subresource_created_total.labels(resource=kind).inc()
        if not self.emit_events:
            return
        if kind == KIND_SECRET:
            emit_secret_created(orderer.body, name)
        elif kind == KIND_SERVICE:
            emit_service_created(orderer.body, name)
        else:
            emit_stateful_set_created(orderer.body, name)

    def reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        """Run one reconciliation pass.

        Args:
            request: The Orderer to reconcile

        Returns:
            ``DONE`` when converged or deleted, a requeue result while waiting
            for the platform to assign a node port

        Raises:
            ConfigurationMissingError: If the shared Fabric configuration is unavailable
            ApiException: On any API failure other than the benign NotFound/AlreadyExists
        """
        with with_correlation_id(), trace_span(
            "reconcile_orderer",
            kind=KIND_ORDERER,
            attributes={"orderer.namespace": request.namespace, "orderer.name": request.name},
        ):
            return self._reconcile(request)

    def _reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        self._log(request, "Reconciling Orderer", reason="ReconcileStarted")

        try:
            self.cluster.ensure_configuration_present(request.namespace)
        except Exception as e:
            self._log(
                request,
                "Failed to find Fabric configuration, can not continue",
                reason="ConfigurationMissing",
                level=logging.ERROR,
                error=e,
            )
            raise

        try:
            orderer = Orderer.from_body(self.cluster.get_orderer(request.namespace, request.name))
        except ApiException as e:
            if is_not_found(e):
                # Children are garbage collected through their owner references
                self._log(request, "Orderer resource not found, it must have been deleted", reason="NotFound")
                return DONE
            self._log(request, "Failed to get Orderer", reason="GetFailed", level=logging.ERROR, error=e)
            raise

        with trace_span("ensure_secret", kind=KIND_ORDERER):
            self._ensure_credentials(orderer)

        with trace_span("ensure_service", kind=KIND_ORDERER):
            service = self._ensure_service(orderer)

        if not (service.get("spec") or {}).get("ports"):
            self._log(orderer, "Service has no ports yet, waiting", reason="PortPending")
            return ReconcileResult(requeue=True, reason="ServicePortsPending")

        access_point = orderer.access_point
        if not access_point:
            with trace_span("assign_access_point", kind=KIND_ORDERER):
                access_point = self._assign_access_point(orderer, service)
            if not access_point:
                self._log(orderer, "Node port not assigned yet, waiting", reason="PortPending")
                return ReconcileResult(requeue=True, reason="NodePortPending")

        with trace_span("ensure_stateful_set", kind=KIND_ORDERER):
            self._ensure_stateful_set(orderer)

        self._log(orderer, "Orderer reconciled", reason="Converged", access_point=access_point)
        return DONE

    def _ensure_credentials(self, orderer: Orderer) -> None:
        name = secret_name(orderer.name)
        try:
            self.cluster.get_secret(orderer.namespace, name)
            return
        except ApiException as e:
            if not is_not_found(e):
                self._log(orderer, "Failed to get Orderer secret", reason="GetFailed", level=logging.ERROR, error=e)
                raise

        try:
            secret = build_credential_bundle(orderer, self.templates)
        except CredentialValidationError as e:
            # The pass goes on without credentials; the workload waits for them
            self._log(
                orderer,
                "Provide all certs under msp and tls in the request",
                reason="ValidationFailed",
                level=logging.ERROR,
                error=e,
            )
            return

        try:
            self.cluster.create_secret(secret)
        except ApiException as e:
            if is_already_exists(e):
                return
            self._log(orderer, "Failed to create Orderer secret", reason="CreateFailed", level=logging.ERROR, error=e)
            raise

        self._log(orderer, "Created a new secret", reason="SecretCreated", secret=name)
        self._created(orderer, KIND_SECRET, name)

    def _ensure_service(self, orderer: Orderer) -> dict[str, Any]:
        try:
            return self.cluster.get_service(orderer.namespace, orderer.name)
        except ApiException as e:
            if not is_not_found(e):
                self._log(orderer, "Failed to get Orderer service", reason="GetFailed", level=logging.ERROR, error=e)
                raise

        service = build_network_endpoint(orderer, self.templates)
        self._log(orderer, "Creating a new service", reason="CreatingService", service=orderer.name)
        try:
            created = self.cluster.create_service(service)
        except ApiException as e:
            if is_already_exists(e):
                return self.cluster.get_service(orderer.namespace, orderer.name)
            self._log(
                orderer,
                "Failed to create new service for Orderer",
                reason="CreateFailed",
                level=logging.ERROR,
                error=e,
            )
            raise

        self._created(orderer, KIND_SERVICE, orderer.name)
        return created

    def _assign_access_point(self, orderer: Orderer, service: dict[str, Any]) -> str:
        node_port = assigned_node_port(service)
        if node_port is None:
            return ""

        self._log(orderer, "The service port has been found", reason="PortAssigned", node_port=node_port)
        host_ips = self.cluster.list_node_addresses()
        access_point = compute_access_point(node_port, orderer.spec.hosts, host_ips)

        try:
            self.cluster.update_orderer_status(
                orderer.namespace,
                orderer.name,
                {"accessPoint": access_point},
                resource_version=orderer.resource_version,
            )
        except ApiException as e:
            self._log(orderer, "Failed to update Orderer status", reason="StatusUpdateFailed", level=logging.ERROR, error=e)
            raise

        orderer.access_point = access_point
        add_span_attribute("orderer.access_point", access_point)
        self._log(orderer, "Access point assigned", reason="AccessPointAssigned", access_point=access_point)
        if self.emit_events:
            emit_access_point_assigned(orderer.body, access_point)
        return access_point

    def _ensure_stateful_set(self, orderer: Orderer) -> None:
        try:
            self.cluster.get_stateful_set(orderer.namespace, orderer.name)
            return
        except ApiException as e:
            if not is_not_found(e):
                self._log(
                    orderer, "Failed to get Orderer StatefulSet", reason="GetFailed", level=logging.ERROR, error=e
                )
                raise

        sts = build_workload_set(orderer, self.templates)
        self._log(orderer, "Creating a new set", reason="CreatingStatefulSet", stateful_set=orderer.name)
        try:
            self.cluster.create_stateful_set(sts)
        except ApiException as e:
            if is_already_exists(e):
                # Another pass won the race
                return
            self._log(
                orderer,
                "Failed creating new statefulset for Orderer",
                reason="CreateFailed",
                level=logging.ERROR,
                error=e,
            )
            raise

        self._created(orderer, KIND_STATEFUL_SET, orderer.name)
