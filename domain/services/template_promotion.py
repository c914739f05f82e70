from __future__ import annotations

import logging
from typing import Optional

from domain.models import Block, Point
from domain.services.graph_store import GraphStore

logger = logging.getLogger(__name__)


class TemplatePromotion:
    """Turns a drag on a drawer template into a drag on a fresh instance.

    The template itself never moves: the first event of the gesture places an
    instance under the pointer and the rest of the gesture is redirected to it.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store
        self.dragging_block_id: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.dragging_block_id is not None

    def begin(self, type_name: str, pointer: Point) -> Block:
        block = self.store.place_instance(type_name, pointer)
        self.dragging_block_id = block.id
        return block

    def move(self, pointer: Point) -> None:
        if self.dragging_block_id is None:
            logger.debug("Ignoring drawer move without an active promotion")
            return
        self.store.move_block(self.dragging_block_id, pointer)

    def end(self) -> Optional[Block]:
        block_id = self.dragging_block_id
        self.dragging_block_id = None
        if block_id is None:
            return None
        self.store.ensure_templates()
        return self.store.get_block(block_id)
