from __future__ import annotations

from pathlib import Path

import yaml

from domain.catalog import TemplateCatalog
from domain.ports.catalog import TemplateCatalogSource


class YamlTemplateCatalogSource(TemplateCatalogSource):
    """Reads block templates from a YAML file with a top-level ``templates`` list."""

    def load(self, path: Path) -> TemplateCatalog:
        if not path.exists():
            msg = f"Template catalog not found: {path}"
            raise FileNotFoundError(msg)
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        if isinstance(raw, list):
            raw = {"templates": raw}
        return TemplateCatalog.model_validate(raw)
