"""MSP identity extraction from signing certificates."""

from __future__ import annotations

import logging
import re

from cryptography import x509
from cryptography.x509.oid import NameOID

from .constants import DEFAULT_MSP_ID

logger = logging.getLogger(__name__)

_PEM_BLOCK = re.compile(rb"-----BEGIN ([A-Z0-9 ]+)-----.*?-----END \1-----", re.DOTALL)


def _first_organization(name: x509.Name) -> str | None:
    for attribute in name.get_attributes_for_oid(NameOID.ORGANIZATION_NAME):
        value = attribute.value
        if isinstance(value, bytes):
            value = value.decode("utf-8", errors="replace")
        if value:
            return value
    return None


def extract_identity(sign_cert_pem: bytes) -> str:
    """Derive the MSP identity label from a PEM signing certificate.

    Only the first PEM block is considered. The subject organization wins over
    the issuer organization. The placeholder ``DEFAULT_MSP_ID`` is returned when
    there is no PEM block, when the first block is not a certificate or does
    not parse, and when neither name carries an organization.

    Args:
        sign_cert_pem: PEM-encoded certificate bytes

    Returns:
        The organization name to use as MSP ID
    """
    block = _PEM_BLOCK.search(sign_cert_pem or b"")
    if block is None or block.group(1) != b"CERTIFICATE":
        return DEFAULT_MSP_ID

    try:
        cert = x509.load_pem_x509_certificate(block.group(0))
        organization = _first_organization(cert.subject) or _first_organization(cert.issuer)
    except ValueError as e:
        logger.error(f"Failed to parse certificate: {e}")
        return DEFAULT_MSP_ID

    return organization or DEFAULT_MSP_ID
