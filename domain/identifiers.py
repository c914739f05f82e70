from __future__ import annotations

import itertools
import uuid

from domain.models import PORT_ID_SEPARATOR
from domain.ports.identifiers import IdentifierGenerator


class Uuid4IdentifierGenerator(IdentifierGenerator):
    def next(self) -> str:
        return str(uuid.uuid4())


class SequentialIdentifierGenerator(IdentifierGenerator):
    """Deterministic ids for tests and scripted sessions."""

    def __init__(self, prefix: str = "id") -> None:
        if PORT_ID_SEPARATOR in prefix:
            msg = f"Identifier prefix must not contain {PORT_ID_SEPARATOR!r}: {prefix}"
            raise ValueError(msg)
        self.prefix = prefix
        self._counter = itertools.count(1)

    def next(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
