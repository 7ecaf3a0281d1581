"""Builder for the orderer credential bundle secret."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import KIND_SECRET, SECRET_SUFFIX, TEMPLATE_SECRET
from ..identity import extract_identity
from ..models import Orderer, OrdererSpec
from ..templates import TemplateStore
from ..utils.errors import CredentialValidationError
from ..utils.secrets import decode_field, encode_secret_data


def secret_name(orderer_name: str) -> str:
    """Name of the credential secret owned by an orderer."""
    return orderer_name + SECRET_SUFFIX


def credential_data(spec: OrdererSpec) -> dict[str, bytes]:
    """Decode the MSP and TLS material of an orderer into secret entries.

    Args:
        spec: Desired state of the orderer

    Returns:
        Mapping of secret keys to raw bytes, including the derived ``mspid``
    """
    data: dict[str, bytes] = {}
    for i, cert in enumerate(spec.admin_certs):
        data[f"admincert{i}"] = decode_field(cert)
    for i, cert in enumerate(spec.ca_certs):
        data[f"cacert{i}"] = decode_field(cert)
    data["keystore"] = decode_field(spec.key_store)
    data["signcert"] = decode_field(spec.sign_certs)
    data["mspid"] = extract_identity(data["signcert"]).encode("utf-8")
    for i, cert in enumerate(spec.tls_ca_certs):
        data[f"tlscacert{i}"] = decode_field(cert)
    data["tlscert"] = decode_field(spec.tls_cert)
    data["tlskey"] = decode_field(spec.tls_key)
    return data


def build_credential_bundle(orderer: Orderer, templates: TemplateStore) -> dict[str, Any]:
    """Create the credential Secret body for an orderer.

    Args:
        orderer: The owning Orderer
        templates: Template store providing the secret template

    Returns:
        Secret body ready to be created

    Raises:
        CredentialValidationError: If any MSP or TLS entry is empty
    """
    secret = templates.load(TEMPLATE_SECRET, kind=KIND_SECRET)

    missing = orderer.spec.missing_credentials()
    if missing:
        raise CredentialValidationError(
            f"All entries under MSP and TLS in the request are required, missing: {', '.join(missing)}"
        )

    metadata = secret.setdefault("metadata", {})
    metadata["name"] = secret_name(orderer.name)
    metadata["namespace"] = orderer.namespace
    secret["data"] = encode_secret_data(credential_data(orderer.spec))

    kopf.append_owner_reference(secret, owner=orderer.body)
    return secret
