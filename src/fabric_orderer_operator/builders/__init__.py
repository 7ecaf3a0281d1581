"""Builders for orderer child resources."""

from .secret import build_credential_bundle, credential_data, secret_name
from .service import build_network_endpoint
from .statefulset import build_workload_set

__all__ = [
    "build_credential_bundle",
    "build_network_endpoint",
    "build_workload_set",
    "credential_data",
    "secret_name",
]
