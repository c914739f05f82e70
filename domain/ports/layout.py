from __future__ import annotations

from typing import Optional, Protocol

from domain.models import Rect


class RenderedLayout(Protocol):
    """Live on-screen geometry of mounted blocks and ports.

    Both lookups return ``None`` when the element is not mounted. Nothing here
    is derived from the graph model alone: block boxes move with animation.
    """

    def block_rect(self, block_id: str) -> Optional[Rect]: ...

    def port_rect(self, port_id: str) -> Optional[Rect]: ...
