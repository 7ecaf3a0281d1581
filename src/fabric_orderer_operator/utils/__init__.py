"""Utility functions for the Fabric Orderer Operator."""

from .context import get_context_dict, get_correlation_id, with_correlation_id
from .errors import (
    ConfigurationMissingError,
    CredentialValidationError,
    OperatorError,
    TemplateError,
    is_already_exists,
    is_not_found,
    sanitize_exception,
)
from .events import emit_event
from .rate_limit import rate_limit_k8s
from .secrets import decode_field, encode_secret_data

__all__ = [
    "ConfigurationMissingError",
    "CredentialValidationError",
    "OperatorError",
    "TemplateError",
    "is_already_exists",
    "is_not_found",
    "sanitize_exception",
    "emit_event",
    "decode_field",
    "encode_secret_data",
    "rate_limit_k8s",
    "get_correlation_id",
    "with_correlation_id",
    "get_context_dict",
]
