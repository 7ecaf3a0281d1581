"""Builder for the orderer network endpoint."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import KIND_SERVICE, LABEL_APP, TEMPLATE_SERVICE
from ..models import Orderer
from ..templates import TemplateStore


def build_network_endpoint(orderer: Orderer, templates: TemplateStore) -> dict[str, Any]:
    """Create the Service body exposing an orderer.

    The service shares the orderer's name and selects its pods by the
    ``k8s-app`` label.
    """
    service = templates.load(TEMPLATE_SERVICE, kind=KIND_SERVICE)

    metadata = service.setdefault("metadata", {})
    metadata["name"] = orderer.name
    metadata["namespace"] = orderer.namespace
    metadata.setdefault("labels", {})[LABEL_APP] = orderer.name

    spec = service.setdefault("spec", {})
    spec.setdefault("selector", {})[LABEL_APP] = orderer.name

    kopf.append_owner_reference(service, owner=orderer.body)
    return service
