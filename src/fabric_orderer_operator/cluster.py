"""Kubernetes API access used by the reconciler."""

from __future__ import annotations

import logging
import os
import time
from typing import Any, Callable

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from . import metrics
from .constants import (
    API_GROUP,
    API_VERSION,
    DEFAULT_FABRIC_CONFIGMAP,
    DEFAULT_OPERATOR_NAMESPACE,
    FIELD_MANAGER,
    PLURAL_ORDERER,
)
from .utils.errors import ConfigurationMissingError, is_already_exists, is_not_found
from .utils.rate_limit import rate_limit_k8s

logger = logging.getLogger(__name__)


def load_kubernetes_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class ClusterClient:
    """Thin wrapper over the Kubernetes APIs an orderer pass touches.

    Every read returns a plain dict in API (camelCase) form and every error is
    the client's ``ApiException``; callers classify it with ``is_not_found``
    and ``is_already_exists``.
    """

    def __init__(
        self,
        core: client.CoreV1Api | None = None,
        apps: client.AppsV1Api | None = None,
        custom: client.CustomObjectsApi | None = None,
    ):
        self.core = core or client.CoreV1Api()
        self.apps = apps or client.AppsV1Api()
        self.custom = custom or client.CustomObjectsApi()
        self._serializer = client.ApiClient()

    @classmethod
    def from_environment(cls) -> ClusterClient:
        load_kubernetes_config()
        return cls()

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        if isinstance(obj, dict):
            return obj
        return self._serializer.sanitize_for_serialization(obj)

    def _call(self, operation: str, fn: Callable[..., Any], **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            result = rate_limit_k8s(fn)(**kwargs)
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
            return result
        except ApiException as e:
            result = "not_found" if is_not_found(e) else "conflict" if is_already_exists(e) else "error"
            metrics.api_call_total.labels(api_type="k8s", operation=operation, result=result).inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    # Orderer

    def get_orderer(self, namespace: str, name: str) -> dict[str, Any]:
        return self._call(
            "get_orderer",
            self.custom.get_namespaced_custom_object,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_ORDERER,
            name=name,
        )

    def update_orderer_status(
        self,
        namespace: str,
        name: str,
        status: dict[str, Any],
        resource_version: str | None = None,
    ) -> dict[str, Any]:
        """Patch the status subresource of an Orderer.

        When ``resource_version`` is given the patch only applies to that
        version; a concurrent writer makes it fail with a 409.
        """
        body: dict[str, Any] = {"status": status}
        if resource_version:
            body["metadata"] = {"resourceVersion": resource_version}
        return self._call(
            "update_orderer_status",
            self.custom.patch_namespaced_custom_object_status,
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURAL_ORDERER,
            name=name,
            body=body,
        )

    # Secrets

    def get_secret(self, namespace: str, name: str) -> dict[str, Any]:
        return self._to_dict(
            self._call("get_secret", self.core.read_namespaced_secret, namespace=namespace, name=name)
        )

    def create_secret(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._to_dict(self._call(
            "create_secret",
            self.core.create_namespaced_secret,
            namespace=body["metadata"]["namespace"],
            body=body,
            field_manager=FIELD_MANAGER,
        ))

    # Services

    def get_service(self, namespace: str, name: str) -> dict[str, Any]:
        return self._to_dict(
            self._call("get_service", self.core.read_namespaced_service, namespace=namespace, name=name)
        )

    def create_service(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._to_dict(self._call(
            "create_service",
            self.core.create_namespaced_service,
            namespace=body["metadata"]["namespace"],
            body=body,
            field_manager=FIELD_MANAGER,
        ))

    # StatefulSets

    def get_stateful_set(self, namespace: str, name: str) -> dict[str, Any]:
        return self._to_dict(
            self._call("get_stateful_set", self.apps.read_namespaced_stateful_set, namespace=namespace, name=name)
        )

    def create_stateful_set(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._to_dict(self._call(
            "create_stateful_set",
            self.apps.create_namespaced_stateful_set,
            namespace=body["metadata"]["namespace"],
            body=body,
            field_manager=FIELD_MANAGER,
        ))

    # Nodes

    def list_node_addresses(self) -> list[str]:
        """Return the external addresses of all nodes.

        Internal addresses are used when no node reports an external one.
        """
        nodes = self._call("list_nodes", self.core.list_node)
        external: list[str] = []
        internal: list[str] = []
        for node in nodes.items:
            for address in (node.status.addresses if node.status else None) or []:
                if address.type == "ExternalIP":
                    external.append(address.address)
                elif address.type == "InternalIP":
                    internal.append(address.address)
        return external or internal

    # Configuration

    def ensure_configuration_present(self, namespace: str) -> None:
        """Make sure the shared Fabric ConfigMap exists in a namespace.

        A missing ConfigMap is copied from the operator namespace.

        Raises:
            ConfigurationMissingError: If neither namespace has the ConfigMap
            ApiException: On any other API failure
        """
        name = os.getenv("FABRIC_CONFIGMAP_NAME", DEFAULT_FABRIC_CONFIGMAP)
        try:
            self._call("get_configmap", self.core.read_namespaced_config_map, namespace=namespace, name=name)
            return
        except ApiException as e:
            if not is_not_found(e):
                raise

        source_namespace = os.getenv("OPERATOR_NAMESPACE", DEFAULT_OPERATOR_NAMESPACE)
        if source_namespace == namespace:
            raise ConfigurationMissingError(f"ConfigMap {name} not found in namespace {namespace}")

        try:
            source = self._call(
                "get_configmap", self.core.read_namespaced_config_map, namespace=source_namespace, name=name
            )
        except ApiException as e:
            if is_not_found(e):
                raise ConfigurationMissingError(
                    f"ConfigMap {name} not found in namespace {namespace} or {source_namespace}"
                ) from e
            raise

        body = client.V1ConfigMap(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=source.metadata.labels),
            data=source.data,
            binary_data=source.binary_data,
        )
        try:
            self._call(
                "create_configmap",
                self.core.create_namespaced_config_map,
                namespace=namespace,
                body=body,
                field_manager=FIELD_MANAGER,
            )
            logger.info(f"Copied ConfigMap {name} from {source_namespace} to {namespace}")
        except ApiException as e:
            if not is_already_exists(e):
                raise
