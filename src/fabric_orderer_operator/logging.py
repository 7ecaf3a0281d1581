"""Structured logging configuration for the Fabric Orderer Operator."""

import json
import logging
import os
import sys
from typing import Any

from .utils.context import get_context_dict
from .utils.errors import SENSITIVE_FIELDS


def setup_structured_logging(level: str | None = None) -> None:
    """Configure one JSON document per line on stdout.

    The level defaults to ``LOG_LEVEL`` from the environment, else INFO.
    """
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(get_context_dict())
    log_data.update(sanitize_secrets(kwargs))
    logger.log(level, json.dumps(log_data, default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Remove key material from log data."""
    secret_fields = {field.lower() for field in SENSITIVE_FIELDS} | {"key_store", "tls_key", "data"}
    sanitized = log_data.copy()
    for key in sanitized:
        if key.lower() in secret_fields:
            sanitized[key] = "***REDACTED***"
    return sanitized
