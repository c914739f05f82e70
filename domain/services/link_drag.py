from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal, Optional, Union

from domain.models import PENDING, Link, Point, parse_port_element_id
from domain.ports.layout import RenderedLayout
from domain.services.graph_store import GraphStore
from domain.services.port_anchor import port_anchor

logger = logging.getLogger(__name__)

AbandonedLinkPolicy = Literal["keep", "discard"]


@dataclass(frozen=True)
class IdleState:
    pass


@dataclass(frozen=True)
class DraggingState:
    source_port_id: str
    current_point: Point


LinkDragState = Union[IdleState, DraggingState]


class LinkDragStateMachine:
    """Builds links from drags that start on output ports.

    A drag keeps one pending link keyed by its source port. Releasing over an
    input port completes it; releasing anywhere else is an abandoned drag,
    handled per ``abandoned_policy``: ``keep`` leaves the pending link frozen
    where the pointer was released, ``discard`` removes it.
    """

    def __init__(
        self,
        store: GraphStore,
        layout: RenderedLayout,
        abandoned_policy: AbandonedLinkPolicy = "keep",
    ) -> None:
        self.store = store
        self.layout = layout
        self.abandoned_policy = abandoned_policy
        self.state: LinkDragState = IdleState()

    def start(self, port_id: str, pointer: Point) -> Optional[Link]:
        found = self.store.find_port(port_id)
        if found is None or found[1].role != "output":
            logger.debug("Ignoring link drag from %s: not an output of a placed block", port_id)
            return None
        anchor = port_anchor(self.store, self.layout, port_id) or pointer
        link = Link(source_port_id=port_id, target_port_id=PENDING, start=anchor, end=anchor)
        self.store.upsert_link(link)
        self.state = DraggingState(source_port_id=port_id, current_point=anchor)
        return link

    def move(self, port_id: str, pointer: Point) -> None:
        if not self._is_dragging(port_id):
            logger.debug("Ignoring link move from %s outside of its drag", port_id)
            return
        link = self.store.get_link(port_id)
        if link is None:
            self.state = IdleState()
            return
        self.store.upsert_link(replace(link, end=pointer))
        self.state = DraggingState(source_port_id=port_id, current_point=pointer)

    def end(self, port_id: str, element_id: Optional[str]) -> Optional[Link]:
        if not self._is_dragging(port_id):
            logger.debug("Ignoring link release from %s outside of its drag", port_id)
            return None
        self.state = IdleState()
        link = self.store.get_link(port_id)
        if link is None:
            return None

        target_port_id = self._resolve_input_port(element_id)
        if target_port_id is None:
            logger.debug("Abandoned link drag from %s over %r", port_id, element_id)
            if self.abandoned_policy == "discard":
                self.store.discard_link(port_id)
                return None
            return link

        completed = replace(link, target_port_id=target_port_id)
        self.store.upsert_link(completed)
        return completed

    def _is_dragging(self, port_id: str) -> bool:
        return isinstance(self.state, DraggingState) and self.state.source_port_id == port_id

    def _resolve_input_port(self, element_id: Optional[str]) -> Optional[str]:
        port_id = parse_port_element_id(element_id)
        if port_id is None:
            return None
        found = self.store.find_port(port_id)
        if found is None or found[1].role != "input":
            return None
        return port_id
