"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_ACCESS_POINT_ASSIGNED,
    EVENT_REASON_SECRET_CREATED,
    EVENT_REASON_SERVICE_CREATED,
    EVENT_REASON_STATEFUL_SET_CREATED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Object the event refers to (needs apiVersion, kind and metadata)
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_secret_created(body: dict[str, Any], name: str) -> None:
    """Emit credential secret created event."""
    emit_event(body, EVENT_REASON_SECRET_CREATED, f"Secret {name} created")


def emit_service_created(body: dict[str, Any], name: str) -> None:
    """Emit service created event."""
    emit_event(body, EVENT_REASON_SERVICE_CREATED, f"Service {name} created")


def emit_stateful_set_created(body: dict[str, Any], name: str) -> None:
    """Emit statefulset created event."""
    emit_event(body, EVENT_REASON_STATEFUL_SET_CREATED, f"StatefulSet {name} created")


def emit_access_point_assigned(body: dict[str, Any], access_point: str) -> None:
    """Emit access point assigned event."""
    emit_event(body, EVENT_REASON_ACCESS_POINT_ASSIGNED, f"Access point set to {access_point}")
