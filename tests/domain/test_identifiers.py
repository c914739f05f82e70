from __future__ import annotations

import pytest

from domain.identifiers import SequentialIdentifierGenerator, Uuid4IdentifierGenerator
from domain.models import PORT_ID_SEPARATOR


def test_uuid4_identifiers_are_unique_and_joinable() -> None:
    generator = Uuid4IdentifierGenerator()
    values = [generator.next() for _ in range(1000)]

    assert len(set(values)) == len(values)
    assert all(PORT_ID_SEPARATOR not in value for value in values)
    assert all(len(value) == 36 for value in values)


def test_sequential_identifiers_never_repeat() -> None:
    generator = SequentialIdentifierGenerator("blk")

    assert [generator.next() for _ in range(3)] == ["blk-1", "blk-2", "blk-3"]


def test_sequential_prefix_must_not_contain_separator() -> None:
    with pytest.raises(ValueError):
        SequentialIdentifierGenerator(f"a{PORT_ID_SEPARATOR}b")
