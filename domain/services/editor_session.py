from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from domain.models import Block, DragEvent, Link, Point
from domain.ports.animation import PositionAnimator
from domain.ports.layout import RenderedLayout
from domain.services.graph_store import GraphStore
from domain.services.link_drag import AbandonedLinkPolicy, LinkDragStateMachine
from domain.services.reconcile import (
    DEFAULT_EPSILON,
    LayoutReconciler,
    LinkGeometry,
    ReconcileResult,
)
from domain.services.template_promotion import TemplatePromotion

logger = logging.getLogger(__name__)

GeometryListener = Callable[[ReconcileResult], None]


@dataclass(frozen=True)
class EditorView:
    drawer: Tuple[Block, ...]
    placed: Tuple[Block, ...]
    links: List[LinkGeometry] = field(default_factory=list)
    dangling: List[str] = field(default_factory=list)


class EditorSession:
    """Presentation-facing entry point of the editor.

    Gesture callbacks land here, are applied to the graph store, forwarded to
    the animator as new targets and followed by a reconciliation pass. The
    animator's settle notifications trigger another pass, which is what keeps
    links attached while blocks are still moving.
    """

    def __init__(
        self,
        store: GraphStore,
        layout: RenderedLayout,
        animator: PositionAnimator,
        *,
        abandoned_policy: AbandonedLinkPolicy = "keep",
        epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        self.store = store
        self.layout = layout
        self.animator = animator
        self.promotion = TemplatePromotion(store)
        self.link_drag = LinkDragStateMachine(store, layout, abandoned_policy)
        self.reconciler = LayoutReconciler(store, layout, epsilon)
        self.last_result = ReconcileResult()
        self._listeners: List[GeometryListener] = []
        for block in store.instances:
            self._animate(block)
        animator.on_settle(self.on_block_settled)

    def subscribe_geometry(self, listener: GeometryListener) -> None:
        self._listeners.append(listener)

    # Drawer drags

    def on_move_start(self, type_name: str, pointer: Point) -> Block:
        block = self.promotion.begin(type_name, pointer)
        self._animate(block)
        self.refresh()
        return block

    def on_move_end(self) -> Optional[Block]:
        block = self.promotion.end()
        self.refresh()
        return block

    # Block drags

    def on_move(self, block_id: Optional[str], point: Point) -> None:
        """Move a block.

        For a placed block ``point`` is a pointer delta. ``block_id=None``
        addresses the instance being promoted out of the drawer, and there
        ``point`` is the absolute pointer position.
        """
        if block_id is None:
            self.promotion.move(point)
            if self.promotion.dragging_block_id is not None:
                self._animate_by_id(self.promotion.dragging_block_id)
            self.refresh()
            return

        block = self.store.get_block(block_id)
        if block is None:
            logger.debug("Ignoring move of unknown block %s", block_id)
            return
        base = block.position or self._rendered_origin(block_id)
        self.store.move_block(block_id, base.offset(point.x, point.y))
        self._animate_by_id(block_id)
        self.refresh()

    def on_delete(self, block_id: str) -> None:
        self.store.delete_block(block_id)
        self.animator.forget(block_id)
        self.refresh()

    # Link drags

    def on_drag_io_start(self, port_id: str, pointer: Point) -> Optional[Link]:
        link = self.link_drag.start(port_id, pointer)
        self.refresh()
        return link

    def on_drag_io_move(self, port_id: str, pointer: Point) -> None:
        self.link_drag.move(port_id, pointer)
        self.refresh()

    def on_drag_io_end(self, port_id: str, element_id: Optional[str]) -> Optional[Link]:
        link = self.link_drag.end(port_id, element_id)
        self.refresh()
        return link

    # Gesture dispatch

    def drawer_gesture(self, type_name: str, event: DragEvent) -> None:
        if event.phase == "start":
            self.on_move_start(type_name, event.pointer)
        elif event.phase == "move":
            self.on_move(None, event.pointer)
        else:
            self.on_move(None, event.pointer)
            self.on_move_end()

    def block_gesture(self, block_id: str, event: DragEvent) -> None:
        if event.phase == "start":
            return
        self.on_move(block_id, event.delta)

    def port_gesture(self, port_id: str, event: DragEvent) -> None:
        if event.phase == "start":
            self.on_drag_io_start(port_id, event.pointer)
        self.on_drag_io_move(port_id, event.pointer)
        if event.phase == "end":
            self.on_drag_io_end(port_id, event.element_id)

    # Reconciliation

    def on_block_settled(self, block_id: str) -> None:
        logger.debug("Reconciling after %s settled", block_id)
        self.refresh()

    def refresh(self) -> ReconcileResult:
        result = self.reconciler.reconcile()
        self.last_result = result
        if result.changed:
            for listener in list(self._listeners):
                listener(result)
        return result

    def view(self) -> EditorView:
        return EditorView(
            drawer=self.store.templates,
            placed=self.store.instances,
            links=list(self.last_result.geometry),
            dangling=list(self.last_result.dangling),
        )

    def _animate(self, block: Block) -> None:
        if block.id is not None and block.position is not None:
            self.animator.animate(block.id, block.position)

    def _animate_by_id(self, block_id: str) -> None:
        block = self.store.get_block(block_id)
        if block is not None:
            self._animate(block)

    def _rendered_origin(self, block_id: str) -> Point:
        rect = self.layout.block_rect(block_id)
        if rect is None:
            return Point(0.0, 0.0)
        return Point(rect.x, rect.y)
