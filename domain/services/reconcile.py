from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from domain.models import Link, Point
from domain.ports.layout import RenderedLayout
from domain.services.graph_store import GraphStore
from domain.services.port_anchor import port_anchor

logger = logging.getLogger(__name__)

GeometryStatus = Literal["resolved", "pending", "stale"]

DEFAULT_EPSILON = 0.01


@dataclass(frozen=True)
class LinkGeometry:
    source_port_id: str
    target_port_id: str
    start: Optional[Point]
    end: Optional[Point]
    status: GeometryStatus


@dataclass(frozen=True)
class ReconcileResult:
    geometry: List[LinkGeometry] = field(default_factory=list)
    dangling: List[str] = field(default_factory=list)
    changed: bool = False


class LayoutReconciler:
    """Keeps link endpoints glued to ports whose position is only known on screen.

    Block movement is animated outside of the graph model, so link geometry is
    recomputed from the rendered layout on every settle notification and after
    every mutation, then diffed against the last rendered set.
    """

    def __init__(
        self,
        store: GraphStore,
        layout: RenderedLayout,
        epsilon: float = DEFAULT_EPSILON,
    ) -> None:
        self.store = store
        self.layout = layout
        self.epsilon = epsilon
        self._rendered: Dict[str, Tuple[Optional[Point], Optional[Point]]] = {}

    def compute(self) -> Tuple[List[LinkGeometry], List[str]]:
        geometry: List[LinkGeometry] = []
        dangling: List[str] = []
        for link in self.store.links:
            if self._is_dangling(link):
                dangling.append(link.source_port_id)
                continue
            geometry.append(self._resolve(link))
        return geometry, dangling

    def reconcile(self) -> ReconcileResult:
        geometry, dangling = self.compute()
        for item in geometry:
            self.store.set_link_endpoints(item.source_port_id, item.start, item.end)
        if dangling:
            logger.debug("Skipping %d dangling link(s): %s", len(dangling), dangling)

        rendered = {item.source_port_id: (item.start, item.end) for item in geometry}
        changed = self._differs(rendered)
        self._rendered = rendered
        return ReconcileResult(geometry=geometry, dangling=dangling, changed=changed)

    def _is_dangling(self, link: Link) -> bool:
        if self.store.find_port(link.source_port_id) is None:
            return True
        return not link.is_pending and self.store.find_port(link.target_port_id) is None

    def _resolve(self, link: Link) -> LinkGeometry:
        start = port_anchor(self.store, self.layout, link.source_port_id)
        if link.is_pending:
            return LinkGeometry(
                source_port_id=link.source_port_id,
                target_port_id=link.target_port_id,
                start=start or link.start,
                end=link.end,
                status="pending",
            )

        end = port_anchor(self.store, self.layout, link.target_port_id)
        if start is None or end is None:
            return LinkGeometry(
                source_port_id=link.source_port_id,
                target_port_id=link.target_port_id,
                start=link.start,
                end=link.end,
                status="stale",
            )
        return LinkGeometry(
            source_port_id=link.source_port_id,
            target_port_id=link.target_port_id,
            start=start,
            end=end,
            status="resolved",
        )

    def _differs(self, rendered: Dict[str, Tuple[Optional[Point], Optional[Point]]]) -> bool:
        if rendered.keys() != self._rendered.keys():
            return True
        for key, (start, end) in rendered.items():
            previous_start, previous_end = self._rendered[key]
            if not _close(start, previous_start, self.epsilon):
                return True
            if not _close(end, previous_end, self.epsilon):
                return True
        return False


def _close(a: Optional[Point], b: Optional[Point], epsilon: float) -> bool:
    if a is None or b is None:
        return a is b
    return abs(a.x - b.x) <= epsilon and abs(a.y - b.y) <= epsilon
