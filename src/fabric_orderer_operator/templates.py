"""Named manifest templates for child resources."""

from __future__ import annotations

import copy
from importlib import resources
from pathlib import Path
from typing import Any

import yaml

from .utils.errors import TemplateError


class TemplateStore:
    """Loads YAML manifests by name.

    Templates are looked up relative to ``root``; by default the manifests
    shipped inside this package. Parsed templates are cached and every call to
    ``load`` returns a fresh copy that callers may mutate.
    """

    def __init__(self, root: Path | None = None):
        self.root = root
        self._cache: dict[str, dict[str, Any]] = {}

    def _read(self, name: str) -> str:
        if self.root is not None:
            path = self.root / name
            if not path.is_file():
                raise TemplateError(f"Template {name!r} not found in {self.root}")
            return path.read_text(encoding="utf-8")

        resource = resources.files(__package__) / "manifests"
        for part in name.split("/"):
            resource = resource / part
        if not resource.is_file():
            raise TemplateError(f"Template {name!r} not found")
        return resource.read_text(encoding="utf-8")

    def load(self, name: str, kind: str | None = None) -> dict[str, Any]:
        """Load a template as a generic object.

        Args:
            name: Template path, e.g. ``orderer/orderer_service.yaml``
            kind: Expected ``kind`` of the object, checked when given

        Returns:
            The parsed manifest

        Raises:
            TemplateError: If the template is missing, unparsable or of another kind
        """
        if name not in self._cache:
            try:
                obj = yaml.safe_load(self._read(name))
            except yaml.YAMLError as e:
                raise TemplateError(f"Template {name!r} is not valid YAML: {e}") from e
            if not isinstance(obj, dict):
                raise TemplateError(f"Template {name!r} does not describe an object")
            self._cache[name] = obj

        obj = copy.deepcopy(self._cache[name])
        if kind is not None and obj.get("kind") != kind:
            raise TemplateError(f"Template {name!r} has kind {obj.get('kind')!r}, expected {kind!r}")
        return obj
