"""Operator exceptions and error sanitization utilities."""

import re

from kubernetes.client.exceptions import ApiException


class OperatorError(Exception):
    """Base class for errors raised by the operator itself."""


class CredentialValidationError(OperatorError):
    """Raised when the MSP or TLS material of an Orderer is incomplete."""


class TemplateError(OperatorError):
    """Raised when a manifest template is missing, unparsable or of the wrong kind."""


class ConfigurationMissingError(OperatorError):
    """Raised when the shared Fabric configuration cannot be provided to a namespace."""


def is_not_found(error: Exception) -> bool:
    """Return True if the error is a Kubernetes 404."""
    return isinstance(error, ApiException) and error.status == 404


def is_already_exists(error: Exception) -> bool:
    """Return True if the error is a Kubernetes 409 on create."""
    return isinstance(error, ApiException) and error.status == 409


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"-----BEGIN [A-Z ]+-----[A-Za-z0-9+/=\s]+-----END [A-Z ]+-----",
    r"(?:keystore|tlskey|private[_\s]?key)[\"']?[:=\s]+[\"']?([A-Za-z0-9+/=]{16,})",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "keystore",
    "keyStore",
    "tlskey",
    "tlsKey",
    "password",
    "token",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove key material.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    if isinstance(error, ApiException):
        # The response body echoes the submitted object, which may be a Secret
        return sanitize_error_message(f"({error.status}) Reason: {error.reason}")
    return sanitize_error_message(str(error))
