"""Prometheus metrics for the Fabric Orderer Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "fabric_orderer_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "fabric_orderer_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "fabric_orderer_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "fabric_orderer_operator_resource_status_total",
    "Resource status observations at the end of a pass",
    ["kind", "status"],
)

# Child resource metrics
subresource_created_total = Counter(
    "fabric_orderer_operator_subresource_created_total",
    "Total number of child resources created",
    ["resource"],
)

# API call metrics
api_call_total = Counter(
    "fabric_orderer_operator_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "fabric_orderer_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)
