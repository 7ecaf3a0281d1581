"""Main entry point for the Fabric Orderer Operator.

Run with ``kopf run -m fabric_orderer_operator.main``.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .cluster import load_kubernetes_config
from .tracing import initialize_tracing

logger = logging.getLogger(__name__)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    load_kubernetes_config()
    initialize_tracing()

    # Keep kopf's bookkeeping out of status, which belongs to the reconciler
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()

    settings.posting.level = logging.INFO
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    # Metrics and health checks on one port
    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_metrics_server(metrics_port)
    logger.info(f"Metrics and health endpoints listening on port {metrics_port}")
