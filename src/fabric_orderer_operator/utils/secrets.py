"""Utilities for Kubernetes secret payloads."""

from __future__ import annotations

import base64
import binascii


def decode_field(value: str) -> bytes:
    """Decode a base64 spec field.

    Malformed input decodes to an empty value rather than failing, so partial
    specs still produce a secret.

    Args:
        value: Base64 encoded string

    Returns:
        Decoded bytes, or ``b""`` if the value is not valid base64
    """
    # Line breaks are allowed, any other non-alphabet character is not
    cleaned = value.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError):
        return b""


def encode_secret_data(data: dict[str, bytes]) -> dict[str, str]:
    """Encode raw secret values for the ``data`` field of a Secret body."""
    return {key: base64.b64encode(value).decode("ascii") for key, value in data.items()}
