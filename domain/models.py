from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Literal, Optional, Tuple

PortRole = Literal["input", "output"]
DragPhase = Literal["start", "move", "end"]

PENDING = "pending"
PORT_ID_SEPARATOR = ":"
PORT_ELEMENT_PREFIX = "block-port-"


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def offset(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


@dataclass(frozen=True)
class Port:
    id: str
    role: PortRole
    label: str
    owner_block_id: Optional[str] = None


@dataclass(frozen=True)
class Block:
    """A drawer template (``is_template``) or a block placed on the canvas.

    Templates carry no id and their ports carry template-local ids. Instances
    own ports namespaced by the block id, see ``port_instance_id``.
    """

    id: Optional[str]
    type_name: str
    position: Optional[Point] = None
    inputs: Tuple[Port, ...] = ()
    outputs: Tuple[Port, ...] = ()
    is_template: bool = False

    def ports(self) -> Iterator[Port]:
        yield from self.inputs
        yield from self.outputs

    def port_ids(self) -> set[str]:
        return {port.id for port in self.ports()}


@dataclass(frozen=True)
class Link:
    source_port_id: str
    target_port_id: str = PENDING
    start: Optional[Point] = None
    end: Optional[Point] = None

    @property
    def is_pending(self) -> bool:
        return self.target_port_id == PENDING

    def touches(self, port_ids: set[str]) -> bool:
        return self.source_port_id in port_ids or self.target_port_id in port_ids


@dataclass(frozen=True)
class DragEvent:
    phase: DragPhase
    pointer: Point
    delta: Point = Point(0.0, 0.0)
    element_id: Optional[str] = None


@dataclass(frozen=True)
class Graph:
    blocks: Tuple[Block, ...] = field(default_factory=tuple)
    links: Tuple[Link, ...] = field(default_factory=tuple)


def port_instance_id(block_id: str, template_port_id: str) -> str:
    return f"{block_id}{PORT_ID_SEPARATOR}{template_port_id}"


def port_element_id(port_id: str) -> str:
    return f"{PORT_ELEMENT_PREFIX}{port_id}"


def parse_port_element_id(element_id: Optional[str]) -> Optional[str]:
    if not element_id or not element_id.startswith(PORT_ELEMENT_PREFIX):
        return None
    port_id = element_id[len(PORT_ELEMENT_PREFIX) :]
    return port_id or None
