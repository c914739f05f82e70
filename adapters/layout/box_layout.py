from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from domain.models import Block, Point, Rect
from domain.ports.animation import PositionAnimator
from domain.ports.layout import RenderedLayout
from domain.services.graph_store import GraphStore


@dataclass(frozen=True)
class BoxMetrics:
    block_width: float = 160.0
    title_bar_height: float = 28.0
    port_row_height: float = 24.0
    unplaced_origin: Point = Point(0.0, 0.0)


class BoxLayout(RenderedLayout):
    """Headless stand-in for the rendered canvas.

    A block box sits at the animator's live position (top-left corner) with a
    title bar followed by one row per port, inputs first then outputs.
    """

    def __init__(
        self,
        store: GraphStore,
        animator: PositionAnimator,
        metrics: BoxMetrics | None = None,
    ) -> None:
        self.store = store
        self.animator = animator
        self.metrics = metrics or BoxMetrics()

    def block_rect(self, block_id: str) -> Optional[Rect]:
        block = self.store.get_block(block_id)
        if block is None:
            return None
        origin = self._origin(block)
        rows = len(block.inputs) + len(block.outputs)
        return Rect(
            origin.x,
            origin.y,
            self.metrics.block_width,
            self.metrics.title_bar_height + rows * self.metrics.port_row_height,
        )

    def port_rect(self, port_id: str) -> Optional[Rect]:
        found = self.store.find_port(port_id)
        if found is None:
            return None
        block, _ = found
        origin = self._origin(block)
        for row, port in enumerate(block.ports()):
            if port.id == port_id:
                return Rect(
                    origin.x,
                    origin.y + self.metrics.title_bar_height + row * self.metrics.port_row_height,
                    self.metrics.block_width,
                    self.metrics.port_row_height,
                )
        return None

    def _origin(self, block: Block) -> Point:
        rendered = self.animator.rendered_position(str(block.id))
        if rendered is not None:
            return rendered
        return block.position or self.metrics.unplaced_origin
