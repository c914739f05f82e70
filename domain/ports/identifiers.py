from __future__ import annotations

from typing import Protocol


class IdentifierGenerator(Protocol):
    def next(self) -> str: ...
