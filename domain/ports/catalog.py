from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.catalog import TemplateCatalog


class TemplateCatalogSource(Protocol):
    def load(self, path: Path) -> TemplateCatalog: ...
