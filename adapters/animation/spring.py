from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from domain.models import Point
from domain.ports.animation import PositionAnimator, SettleCallback

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpringConfig:
    tension: float = 210.0
    friction: float = 20.0
    mass: float = 1.0
    precision: float = 0.01
    step_seconds: float = 0.001


@dataclass
class _SpringState:
    position: Point
    target: Point
    vx: float = 0.0
    vy: float = 0.0
    resting: bool = True


class SpringAnimator(PositionAnimator):
    """Damped spring per block, advanced explicitly with ``step``.

    A block seen for the first time appears at its target without animating.
    Later targets animate there and fire the settle callbacks once on arrival.
    """

    def __init__(self, config: SpringConfig | None = None) -> None:
        self.config = config or SpringConfig()
        self._springs: Dict[str, _SpringState] = {}
        self._callbacks: List[SettleCallback] = []

    def animate(self, block_id: str, target: Point) -> None:
        spring = self._springs.get(block_id)
        if spring is None:
            self._springs[block_id] = _SpringState(position=target, target=target)
            return
        spring.target = target
        spring.resting = _near(spring.position, target, self.config.precision) and _still(
            spring, self.config.precision
        )
        if spring.resting:
            spring.position = target

    def rendered_position(self, block_id: str) -> Optional[Point]:
        spring = self._springs.get(block_id)
        return spring.position if spring else None

    def on_settle(self, callback: SettleCallback) -> None:
        self._callbacks.append(callback)

    def forget(self, block_id: str) -> None:
        self._springs.pop(block_id, None)

    def is_animating(self, block_id: Optional[str] = None) -> bool:
        if block_id is not None:
            spring = self._springs.get(block_id)
            return spring is not None and not spring.resting
        return any(not spring.resting for spring in self._springs.values())

    def step(self, dt: float) -> List[str]:
        """Advance every moving spring by ``dt`` seconds; return the ids that settled."""
        settled: List[str] = []
        substeps = max(1, math.ceil(dt / self.config.step_seconds))
        h = dt / substeps
        for block_id, spring in list(self._springs.items()):
            if spring.resting:
                continue
            for _ in range(substeps):
                self._integrate(spring, h)
                if _near(spring.position, spring.target, self.config.precision) and _still(
                    spring, self.config.precision
                ):
                    spring.position = spring.target
                    spring.vx = spring.vy = 0.0
                    spring.resting = True
                    settled.append(block_id)
                    break
        for block_id in settled:
            self._emit(block_id)
        return settled

    def settle_all(self) -> List[str]:
        settled: List[str] = []
        for block_id, spring in list(self._springs.items()):
            if spring.resting:
                continue
            spring.position = spring.target
            spring.vx = spring.vy = 0.0
            spring.resting = True
            settled.append(block_id)
        for block_id in settled:
            self._emit(block_id)
        return settled

    def _integrate(self, spring: _SpringState, h: float) -> None:
        cfg = self.config
        dx = spring.position.x - spring.target.x
        dy = spring.position.y - spring.target.y
        spring.vx += (-cfg.tension * dx - cfg.friction * spring.vx) / cfg.mass * h
        spring.vy += (-cfg.tension * dy - cfg.friction * spring.vy) / cfg.mass * h
        spring.position = spring.position.offset(spring.vx * h, spring.vy * h)

    def _emit(self, block_id: str) -> None:
        logger.debug("Block %s settled", block_id)
        for callback in list(self._callbacks):
            callback(block_id)


def _near(a: Point, b: Point, precision: float) -> bool:
    return abs(a.x - b.x) < precision and abs(a.y - b.y) < precision


def _still(spring: _SpringState, precision: float) -> bool:
    return abs(spring.vx) < precision and abs(spring.vy) < precision
