from __future__ import annotations

from typing import Optional

from domain.models import Point, Rect
from domain.ports.layout import RenderedLayout
from domain.services.graph_store import GraphStore


def anchor_from_rect(rect: Rect, role: str) -> Point:
    # Outputs attach on the right edge, inputs on the left.
    x = rect.right if role == "output" else rect.x
    return Point(x, rect.center_y)


def port_anchor(store: GraphStore, layout: RenderedLayout, port_id: str) -> Optional[Point]:
    found = store.find_port(port_id)
    if found is None:
        return None
    rect = layout.port_rect(port_id)
    if rect is None:
        return None
    return anchor_from_rect(rect, found[1].role)
