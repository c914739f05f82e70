from __future__ import annotations

from collections.abc import Callable
from typing import Optional, Protocol

from domain.models import Point

SettleCallback = Callable[[str], None]


class PositionAnimator(Protocol):
    def animate(self, block_id: str, target: Point) -> None: ...

    def rendered_position(self, block_id: str) -> Optional[Point]: ...

    def on_settle(self, callback: SettleCallback) -> None: ...

    def forget(self, block_id: str) -> None: ...
