"""Typed views over the Orderer custom resource and reconciliation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ReconcileRequest:
    """Identifies one Orderer; passes are serialized per request."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, identifier: str) -> ReconcileRequest:
        """Build a request from a ``namespace/name`` string."""
        namespace, _, name = identifier.partition("/")
        if not name:
            raise ValueError(f"Invalid request identifier {identifier!r}, expected namespace/name")
        return cls(namespace=namespace, name=name)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a pass that did not fail."""

    requeue: bool = False
    reason: str | None = None


DONE = ReconcileResult()


@dataclass(frozen=True)
class ConfigParam:
    name: str
    value: str


@dataclass(frozen=True)
class OrdererSpec:
    """Desired state declared on an Orderer."""

    admin_certs: list[str] = field(default_factory=list)
    ca_certs: list[str] = field(default_factory=list)
    key_store: str = ""
    sign_certs: str = ""
    tls_ca_certs: list[str] = field(default_factory=list)
    tls_cert: str = ""
    tls_key: str = ""
    storage_class: str = ""
    storage_size: str = ""
    image: str = ""
    resources: dict[str, Any] = field(default_factory=dict)
    config_params: list[ConfigParam] = field(default_factory=list)
    hosts: list[str] = field(default_factory=list)

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> OrdererSpec:
        """Create the desired state from a CR spec mapping.

        Args:
            spec: The ``spec`` field of an Orderer object

        Returns:
            OrdererSpec with absent fields left empty
        """
        msp = spec.get("msp") or {}
        tls = spec.get("tls") or {}
        params = [
            ConfigParam(name=str(p.get("name", "")), value=str(p.get("value", "")))
            for p in spec.get("configParams") or []
        ]
        return cls(
            admin_certs=list(msp.get("adminCerts") or []),
            ca_certs=list(msp.get("caCerts") or []),
            key_store=msp.get("keyStore") or "",
            sign_certs=msp.get("signCerts") or "",
            tls_ca_certs=list(msp.get("tlsCacerts") or []),
            tls_cert=tls.get("tlsCert") or "",
            tls_key=tls.get("tlsKey") or "",
            storage_class=spec.get("storageClass") or "",
            storage_size=spec.get("storageSize") or "",
            image=spec.get("image") or "",
            resources=dict(spec.get("resources") or {}),
            config_params=params,
            hosts=list(spec.get("hosts") or []),
        )

    def missing_credentials(self) -> list[str]:
        """Return the names of required MSP/TLS entries that are empty."""
        required = {
            "msp.adminCerts": self.admin_certs,
            "msp.caCerts": self.ca_certs,
            "msp.keyStore": self.key_store,
            "msp.signCerts": self.sign_certs,
            "msp.tlsCacerts": self.tls_ca_certs,
            "tls.tlsCert": self.tls_cert,
            "tls.tlsKey": self.tls_key,
        }
        return [name for name, value in required.items() if not value]


@dataclass
class Orderer:
    """An Orderer object as read from the cluster."""

    namespace: str
    name: str
    uid: str
    spec: OrdererSpec
    access_point: str = ""
    resource_version: str | None = None
    body: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def meta(self) -> dict[str, Any]:
        return self.body.get("metadata", {})

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> Orderer:
        metadata = body.get("metadata") or {}
        status = body.get("status") or {}
        return cls(
            namespace=metadata.get("namespace", "default"),
            name=metadata.get("name", ""),
            uid=metadata.get("uid", ""),
            spec=OrdererSpec.from_spec(body.get("spec") or {}),
            access_point=status.get("accessPoint") or "",
            resource_version=metadata.get("resourceVersion"),
            body=body,
        )
