from __future__ import annotations

from adapters.animation.spring import SpringAnimator, SpringConfig
from domain.models import Point


def test_first_target_appears_without_animation() -> None:
    animator = SpringAnimator()
    settled: list[str] = []
    animator.on_settle(settled.append)

    animator.animate("a", Point(10.0, 20.0))

    assert animator.rendered_position("a") == Point(10.0, 20.0)
    assert not animator.is_animating()
    assert animator.step(0.1) == []
    assert settled == []


def test_spring_converges_and_settles_once() -> None:
    animator = SpringAnimator()
    settled: list[str] = []
    animator.on_settle(settled.append)
    animator.animate("a", Point(0.0, 0.0))

    animator.animate("a", Point(100.0, -40.0))
    positions = []
    for _ in range(10):
        animator.step(1 / 60)
        positions.append(animator.rendered_position("a"))

    assert animator.is_animating("a")
    assert positions[0] != positions[-1]
    assert settled == []

    animator.step(5.0)
    animator.step(5.0)

    assert animator.rendered_position("a") == Point(100.0, -40.0)
    assert settled == ["a"]
    assert not animator.is_animating()


def test_settle_all_jumps_to_targets() -> None:
    animator = SpringAnimator(SpringConfig(tension=50.0, friction=5.0))
    settled: list[str] = []
    animator.on_settle(settled.append)
    for key in ("a", "b"):
        animator.animate(key, Point(0.0, 0.0))
        animator.animate(key, Point(10.0, 10.0))

    assert animator.settle_all() == ["a", "b"]
    assert animator.rendered_position("b") == Point(10.0, 10.0)
    assert settled == ["a", "b"]
    assert animator.settle_all() == []


def test_retarget_to_current_position_stays_at_rest() -> None:
    animator = SpringAnimator()
    animator.animate("a", Point(5.0, 5.0))

    animator.animate("a", Point(5.0, 5.0))

    assert not animator.is_animating("a")


def test_forget_drops_the_spring() -> None:
    animator = SpringAnimator()
    animator.animate("a", Point(0.0, 0.0))
    animator.animate("a", Point(50.0, 0.0))

    animator.forget("a")

    assert animator.rendered_position("a") is None
    assert animator.step(5.0) == []
