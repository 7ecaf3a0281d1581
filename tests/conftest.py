"""Shared fixtures for the operator tests."""

from __future__ import annotations

import base64
import copy
import datetime
import threading
from typing import Any, Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID
from kubernetes.client.exceptions import ApiException

from fabric_orderer_operator.utils.errors import ConfigurationMissingError


def _name(common_name: str, organization: str | None) -> x509.Name:
    attributes = [x509.NameAttribute(NameOID.COMMON_NAME, common_name)]
    if organization is not None:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    return x509.Name(attributes)


def make_cert_pem(subject_org: str | None = None, issuer_org: str | None = None) -> bytes:
    """Create a self-contained PEM certificate with the given organizations."""
    key = ec.generate_private_key(ec.SECP256R1())
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(_name("orderer0.example.com", subject_org))
        .issuer_name(_name("ca.example.com", issuer_org))
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + datetime.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM)


def b64(data: bytes | str) -> str:
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("ascii")


@pytest.fixture
def cert_pem() -> Callable[..., bytes]:
    return make_cert_pem


@pytest.fixture(scope="session")
def sign_cert() -> bytes:
    return make_cert_pem(subject_org="OrgA", issuer_org="OrgCA")


@pytest.fixture
def orderer_spec(sign_cert: bytes) -> dict[str, Any]:
    return {
        "msp": {
            "adminCerts": [b64("admin-cert-0"), b64("admin-cert-1")],
            "caCerts": [b64("ca-cert-0")],
            "keyStore": b64("private-key"),
            "signCerts": b64(sign_cert),
            "tlsCacerts": [b64("tls-ca-cert-0")],
        },
        "tls": {
            "tlsCert": b64("tls-cert"),
            "tlsKey": b64("tls-key"),
        },
    }


@pytest.fixture
def make_orderer_body(orderer_spec: dict[str, Any]) -> Callable[..., dict[str, Any]]:
    def factory(
        name: str = "orderer0",
        namespace: str = "fabric",
        spec: dict[str, Any] | None = None,
        access_point: str = "",
        **spec_overrides: Any,
    ) -> dict[str, Any]:
        body_spec = copy.deepcopy(spec if spec is not None else orderer_spec)
        body_spec.update(spec_overrides)
        body: dict[str, Any] = {
            "apiVersion": "fabric.hyperledger.org/v1alpha1",
            "kind": "Orderer",
            "metadata": {
                "name": name,
                "namespace": namespace,
                "uid": f"uid-{namespace}-{name}",
                "resourceVersion": "1",
            },
            "spec": body_spec,
        }
        if access_point:
            body["status"] = {"accessPoint": access_point}
        return body

    return factory


class FakeCluster:
    """In-memory stand-in for the Kubernetes API used by the reconciler.

    Reads and creates behave like the API server: missing objects raise a 404
    ``ApiException``, duplicate creates a 409, and status patches carrying a
    stale resourceVersion a 409.
    """

    def __init__(
        self,
        node_port: int | None = 31000,
        service_ports: bool = True,
        node_addresses: list[str] | None = None,
        config_present: bool = True,
    ):
        self.node_port = node_port
        self.service_ports = service_ports
        self.node_addresses = node_addresses or []
        self.config_present = config_present
        self.orderers: dict[tuple[str, str], dict[str, Any]] = {}
        self.secrets: dict[tuple[str, str], dict[str, Any]] = {}
        self.services: dict[tuple[str, str], dict[str, Any]] = {}
        self.stateful_sets: dict[tuple[str, str], dict[str, Any]] = {}
        self.creates: list[tuple[str, str]] = []
        self.status_updates: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_status_update: ApiException | None = None
        self.stateful_set_barrier: threading.Barrier | None = None
        self._lock = threading.Lock()

    @staticmethod
    def _key(body: dict[str, Any]) -> tuple[str, str]:
        return body["metadata"]["namespace"], body["metadata"]["name"]

    def _get(self, store: dict, namespace: str, name: str) -> dict[str, Any]:
        with self._lock:
            if (namespace, name) not in store:
                raise ApiException(status=404, reason="Not Found")
            return copy.deepcopy(store[(namespace, name)])

    def _create(self, store: dict, kind: str, body: dict[str, Any]) -> dict[str, Any]:
        key = self._key(body)
        with self._lock:
            if key in store:
                raise ApiException(status=409, reason="AlreadyExists")
            store[key] = copy.deepcopy(body)
            self.creates.append((kind, body["metadata"]["name"]))
            return copy.deepcopy(store[key])

    def add_orderer(self, body: dict[str, Any]) -> None:
        self.orderers[self._key(body)] = copy.deepcopy(body)

    def ensure_configuration_present(self, namespace: str) -> None:
        if not self.config_present:
            raise ConfigurationMissingError(f"ConfigMap fabric-configs not found in namespace {namespace}")

    def get_orderer(self, namespace: str, name: str) -> dict[str, Any]:
        return self._get(self.orderers, namespace, name)

    def update_orderer_status(
        self,
        namespace: str,
        name: str,
        status: dict[str, Any],
        resource_version: str | None = None,
    ) -> dict[str, Any]:
        if self.fail_status_update is not None:
            raise self.fail_status_update
        with self._lock:
            if (namespace, name) not in self.orderers:
                raise ApiException(status=404, reason="Not Found")
            body = self.orderers[(namespace, name)]
            if resource_version and body["metadata"]["resourceVersion"] != resource_version:
                raise ApiException(status=409, reason="Conflict")
            body.setdefault("status", {}).update(status)
            body["metadata"]["resourceVersion"] = str(int(body["metadata"]["resourceVersion"]) + 1)
            self.status_updates.append((namespace, name, dict(status)))
            return copy.deepcopy(body)

    def get_secret(self, namespace: str, name: str) -> dict[str, Any]:
        return self._get(self.secrets, namespace, name)

    def create_secret(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._create(self.secrets, "Secret", body)

    def get_service(self, namespace: str, name: str) -> dict[str, Any]:
        return self._get(self.services, namespace, name)

    def create_service(self, body: dict[str, Any]) -> dict[str, Any]:
        body = copy.deepcopy(body)
        if not self.service_ports:
            body["spec"]["ports"] = []
        elif self.node_port is not None:
            for port in body["spec"]["ports"]:
                port["nodePort"] = self.node_port
        return self._create(self.services, "Service", body)

    def get_stateful_set(self, namespace: str, name: str) -> dict[str, Any]:
        if self.stateful_set_barrier is not None:
            # Let concurrent passes all observe the statefulset as missing
            self.stateful_set_barrier.wait(timeout=5)
        return self._get(self.stateful_sets, namespace, name)

    def create_stateful_set(self, body: dict[str, Any]) -> dict[str, Any]:
        return self._create(self.stateful_sets, "StatefulSet", body)

    def list_node_addresses(self) -> list[str]:
        return list(self.node_addresses)


@pytest.fixture
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def cluster_factory() -> Callable[..., FakeCluster]:
    return FakeCluster
