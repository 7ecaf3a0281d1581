"""Builder for the orderer workload set."""

from __future__ import annotations

import os
from typing import Any

import kopf
from kubernetes.utils import parse_quantity

from ..constants import (
    DEFAULT_FABRIC_CONFIGMAP,
    DEFAULT_IMAGE,
    DEFAULT_STORAGE_CLASS,
    DEFAULT_STORAGE_SIZE,
    KIND_STATEFUL_SET,
    LABEL_APP,
    TEMPLATE_STATEFUL_SET,
)
from ..models import Orderer
from ..templates import TemplateStore
from ..utils.errors import TemplateError
from .secret import secret_name


def get_default(value: str, default: str) -> str:
    """Return value unless it is empty."""
    return value if value else default


def _first_env_secret_ref(container: dict[str, Any]) -> dict[str, Any]:
    return container["env"][0]["valueFrom"]["secretKeyRef"]


def build_workload_set(orderer: Orderer, templates: TemplateStore) -> dict[str, Any]:
    """Create the StatefulSet body running an orderer.

    Args:
        orderer: The owning Orderer
        templates: Template store providing the statefulset template

    Returns:
        StatefulSet body ready to be created

    Raises:
        TemplateError: If the template lacks the containers, volumes or claims it must have
        ValueError: If ``storageSize`` is not a valid Kubernetes quantity
    """
    sts = templates.load(TEMPLATE_STATEFUL_SET, kind=KIND_STATEFUL_SET)
    name = orderer.name
    spec = orderer.spec
    credentials = secret_name(name)

    storage_size = get_default(spec.storage_size, DEFAULT_STORAGE_SIZE)
    parse_quantity(storage_size)

    metadata = sts.setdefault("metadata", {})
    metadata["name"] = name
    metadata["namespace"] = orderer.namespace

    try:
        sts_spec = sts["spec"]
        sts_spec["serviceName"] = name
        sts_spec["selector"]["matchLabels"][LABEL_APP] = name

        claim = sts_spec["volumeClaimTemplates"][0]["spec"]
        claim["storageClassName"] = get_default(spec.storage_class, DEFAULT_STORAGE_CLASS)
        claim["resources"]["requests"]["storage"] = storage_size

        pod = sts_spec["template"]
        pod.setdefault("metadata", {}).setdefault("labels", {})[LABEL_APP] = name
        pod_spec = pod["spec"]

        container = pod_spec["containers"][0]
        container["image"] = get_default(spec.image, DEFAULT_IMAGE)

        pod_spec["volumes"][0]["secret"]["secretName"] = credentials
        _first_env_secret_ref(pod_spec["initContainers"][0])["name"] = credentials
        _first_env_secret_ref(container)["name"] = credentials
    except (KeyError, IndexError, TypeError) as e:
        raise TemplateError(f"Template {TEMPLATE_STATEFUL_SET!r} is missing {e}") from e

    configmap = os.getenv("FABRIC_CONFIGMAP_NAME", DEFAULT_FABRIC_CONFIGMAP)
    for volume in pod_spec["volumes"]:
        if "configMap" in volume:
            volume["configMap"]["name"] = configmap

    container["env"] = container["env"] + [
        {"name": param.name, "value": param.value} for param in spec.config_params
    ]
    if spec.resources:
        container["resources"] = spec.resources

    kopf.append_owner_reference(sts, owner=orderer.body)
    return sts
