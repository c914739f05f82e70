from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from domain.catalog import BlockTemplate, TemplateCatalog
from domain.models import Block, Graph, Link, Point, Port, PortRole, port_instance_id
from domain.ports.identifiers import IdentifierGenerator

logger = logging.getLogger(__name__)

ChangeListener = Callable[[str], None]


class UnknownBlockTypeError(ValueError):
    def __init__(self, type_name: str) -> None:
        super().__init__(f"Unknown block type: {type_name}")
        self.type_name = type_name


class GraphStore:
    """Authoritative blocks and links of one editor session.

    Records are immutable; every operation swaps whole records so readers never
    observe a half-applied change. Listeners are notified after model mutations
    only. Transient link geometry written by ``set_link_endpoints`` is silent.
    """

    def __init__(
        self,
        catalog: TemplateCatalog,
        generator: IdentifierGenerator,
        *,
        drawer_origin: Point = Point(0.0, 0.0),
        drawer_spacing: float = 120.0,
        prune_dangling_links: bool = False,
    ) -> None:
        self.catalog = catalog.assign_port_ids(generator)
        self.generator = generator
        self.prune_dangling_links = prune_dangling_links
        self._templates: Dict[str, Block] = {}
        self._home_positions: Dict[str, Point] = {
            type_name: drawer_origin.offset(0.0, idx * drawer_spacing)
            for idx, type_name in enumerate(self.catalog.type_names())
        }
        self._instances: List[Block] = []
        self._links: List[Link] = []
        self._listeners: List[ChangeListener] = []
        self.ensure_templates()

    # Read side

    @property
    def templates(self) -> Tuple[Block, ...]:
        return tuple(
            self._templates[name] for name in self.catalog.type_names() if name in self._templates
        )

    @property
    def instances(self) -> Tuple[Block, ...]:
        return tuple(self._instances)

    @property
    def blocks(self) -> Tuple[Block, ...]:
        return self.templates + self.instances

    @property
    def links(self) -> Tuple[Link, ...]:
        return tuple(self._links)

    def snapshot(self) -> Graph:
        return Graph(blocks=self.blocks, links=self.links)

    def get_template(self, type_name: str) -> Optional[Block]:
        return self._templates.get(type_name)

    def get_block(self, block_id: str) -> Optional[Block]:
        for block in self._instances:
            if block.id == block_id:
                return block
        return None

    def find_port(self, port_id: str) -> Optional[Tuple[Block, Port]]:
        for block in self._instances:
            for port in block.ports():
                if port.id == port_id:
                    return block, port
        return None

    def get_link(self, source_port_id: str) -> Optional[Link]:
        for link in self._links:
            if link.source_port_id == source_port_id:
                return link
        return None

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    # Drawer

    def ensure_templates(self) -> None:
        for template in self.catalog.templates:
            if template.type_name in self._templates:
                continue
            self._templates[template.type_name] = Block(
                id=None,
                type_name=template.type_name,
                position=self._home_positions.get(template.type_name),
                inputs=_template_ports(template, "input"),
                outputs=_template_ports(template, "output"),
                is_template=True,
            )

    # Mutations

    def place_instance(self, type_name: str, position: Optional[Point]) -> Block:
        template = self.catalog.get(type_name)
        if template is None:
            raise UnknownBlockTypeError(type_name)

        block_id = self.generator.next()
        block = Block(
            id=block_id,
            type_name=type_name,
            position=position,
            inputs=_instance_ports(template, "input", block_id),
            outputs=_instance_ports(template, "output", block_id),
            is_template=False,
        )
        self._instances.append(block)
        self.ensure_templates()
        logger.debug("Placed %s as %s at %s", type_name, block_id, position)
        self._notify("place")
        return block

    def move_block(self, block_id: str, position: Point) -> None:
        for idx, block in enumerate(self._instances):
            if block.id == block_id:
                self._instances[idx] = replace(block, position=position)
                self._notify("move")
                return
        logger.debug("Ignoring move of unknown block %s", block_id)

    def delete_block(self, block_id: str) -> None:
        block = self.get_block(block_id)
        if block is None:
            logger.debug("Ignoring delete of unknown block %s", block_id)
            return
        self._instances = [item for item in self._instances if item.id != block_id]
        if self.prune_dangling_links:
            port_ids = block.port_ids()
            self._links = [link for link in self._links if not link.touches(port_ids)]
        self._notify("delete")

    def upsert_link(self, link: Link) -> None:
        for idx, existing in enumerate(self._links):
            if existing.source_port_id == link.source_port_id:
                self._links[idx] = link
                break
        else:
            self._links.append(link)
        self._notify("link")

    def discard_link(self, source_port_id: str) -> None:
        remaining = [link for link in self._links if link.source_port_id != source_port_id]
        if len(remaining) == len(self._links):
            return
        self._links = remaining
        self._notify("link")

    def set_link_endpoints(
        self, source_port_id: str, start: Optional[Point], end: Optional[Point]
    ) -> None:
        for idx, link in enumerate(self._links):
            if link.source_port_id == source_port_id:
                self._links[idx] = replace(link, start=start, end=end)
                return

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event)


def _template_ports(template: BlockTemplate, role: PortRole) -> Tuple[Port, ...]:
    sources = template.inputs if role == "input" else template.outputs
    return tuple(Port(id=str(port.id), role=role, label=port.label) for port in sources)


def _instance_ports(template: BlockTemplate, role: PortRole, block_id: str) -> Tuple[Port, ...]:
    sources = template.inputs if role == "input" else template.outputs
    return tuple(
        Port(
            id=port_instance_id(block_id, str(port.id)),
            role=role,
            label=port.label,
            owner_block_id=block_id,
        )
        for port in sources
    )
