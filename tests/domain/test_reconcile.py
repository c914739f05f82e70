from __future__ import annotations

from typing import Dict, Optional

from domain.models import PENDING, Link, Point, Rect
from domain.services.reconcile import LayoutReconciler
from tests.helpers.editor_fixtures import EditorHarness


def _linked(harness: EditorHarness) -> tuple[str, str, str]:
    camera = harness.drag_out("Camera Input", Point(100.0, 100.0))
    display = harness.drag_out("Display Frame", Point(400.0, 160.0))
    source, target = camera.outputs[0].id, display.inputs[0].id
    harness.drag_link(source, Point(400.0, 200.0), target)
    return str(camera.id), source, target


class _MutableLayout:
    def __init__(self) -> None:
        self.ports: Dict[str, Rect] = {}

    def block_rect(self, block_id: str) -> Optional[Rect]:
        return None

    def port_rect(self, port_id: str) -> Optional[Rect]:
        return self.ports.get(port_id)


def test_start_point_is_the_rendered_port_not_the_block_anchor(harness: EditorHarness) -> None:
    _, source, target = _linked(harness)

    result = harness.session.refresh()

    geometry = result.geometry[0]
    assert geometry.status == "resolved"
    assert geometry.start == Point(260.0, 140.0)
    assert geometry.start != Point(100.0, 100.0)
    assert geometry.end == Point(400.0, 200.0)
    assert (geometry.source_port_id, geometry.target_port_id) == (source, target)


def test_moving_source_block_shifts_start_point_after_settle(harness: EditorHarness) -> None:
    camera_id, source, target = _linked(harness)
    before = harness.session.refresh().geometry[0]
    changes: list[bool] = []
    harness.session.subscribe_geometry(lambda result: changes.append(result.changed))

    harness.session.on_move(camera_id, Point(50.0, 0.0))
    assert harness.session.last_result.geometry[0].start == before.start

    settled = harness.animator.step(5.0)

    after = harness.session.view().links[0]
    assert settled == [camera_id]
    assert after.start == Point(before.start.x + 50.0, before.start.y)  # type: ignore[union-attr]
    assert after.end == before.end
    link = harness.store.get_link(source)
    assert link is not None
    assert (link.source_port_id, link.target_port_id) == (source, target)
    assert link.start == after.start
    assert changes == [True]


def test_intermediate_animation_frames_are_picked_up(harness: EditorHarness) -> None:
    camera_id, _, _ = _linked(harness)
    start_x = harness.session.refresh().geometry[0].start.x  # type: ignore[union-attr]

    harness.session.on_move(camera_id, Point(80.0, 0.0))
    harness.animator.step(0.05)
    result = harness.session.refresh()

    moved_x = result.geometry[0].start.x  # type: ignore[union-attr]
    assert result.changed is True
    assert start_x < moved_x < start_x + 80.0


def test_reconcile_twice_is_idempotent(harness: EditorHarness) -> None:
    _linked(harness)

    first = harness.session.refresh()
    second = harness.session.refresh()

    assert second.geometry == first.geometry
    assert second.changed is False


def test_deleted_block_makes_links_dangling_without_errors(harness: EditorHarness) -> None:
    camera_id, source, _ = _linked(harness)

    harness.session.on_delete(camera_id)
    result = harness.session.refresh()

    assert result.geometry == []
    assert result.dangling == [source]
    assert harness.session.view().dangling == [source]
    assert len(harness.store.links) == 1


def test_deleted_target_block_is_dangling_too(harness: EditorHarness) -> None:
    _, source, target = _linked(harness)
    target_block_id = target.split(":")[0]

    harness.session.on_delete(target_block_id)

    assert harness.session.last_result.dangling == [source]


def test_pending_link_keeps_pointer_end_and_tracks_source(harness: EditorHarness) -> None:
    camera = harness.drag_out("Camera Input", Point(100.0, 100.0))
    source = camera.outputs[0].id
    harness.drag_link(source, Point(600.0, 50.0), None)

    harness.session.on_move(str(camera.id), Point(0.0, 20.0))
    harness.animator.settle_all()

    geometry = harness.session.view().links[0]
    assert geometry.status == "pending"
    assert geometry.target_port_id == PENDING
    assert geometry.start == Point(260.0, 160.0)
    assert geometry.end == Point(600.0, 50.0)


def test_unrendered_port_keeps_previous_geometry(harness: EditorHarness) -> None:
    _, source, target = _linked(harness)
    layout = _MutableLayout()
    layout.ports = {source: Rect(0.0, 0.0, 10.0, 10.0), target: Rect(100.0, 0.0, 10.0, 10.0)}
    reconciler = LayoutReconciler(harness.store, layout)

    resolved = reconciler.reconcile()
    assert resolved.geometry[0].start == Point(10.0, 5.0)
    assert resolved.geometry[0].end == Point(100.0, 5.0)

    del layout.ports[target]
    stale = reconciler.reconcile()

    assert stale.geometry[0].status == "stale"
    assert stale.geometry[0].start == Point(10.0, 5.0)
    assert stale.geometry[0].end == Point(100.0, 5.0)
    assert stale.changed is False


def test_compute_does_not_write_geometry(harness: EditorHarness) -> None:
    camera = harness.drag_out("Camera Input", Point(100.0, 100.0))
    source = camera.outputs[0].id
    harness.store.upsert_link(Link(source, PENDING, Point(1.0, 1.0), Point(2.0, 2.0)))
    reconciler = LayoutReconciler(harness.store, harness.layout)

    geometry, dangling = reconciler.compute()

    assert geometry[0].start == Point(260.0, 140.0)
    assert dangling == []
    assert harness.store.get_link(source) == Link(source, PENDING, Point(1.0, 1.0), Point(2.0, 2.0))


def test_changes_within_epsilon_are_not_reported(harness: EditorHarness) -> None:
    _, source, target = _linked(harness)
    layout = _MutableLayout()
    layout.ports = {source: Rect(0.0, 0.0, 10.0, 10.0), target: Rect(100.0, 0.0, 10.0, 10.0)}
    reconciler = LayoutReconciler(harness.store, layout, epsilon=0.5)
    reconciler.reconcile()

    layout.ports[source] = Rect(0.2, 0.1, 10.0, 10.0)
    assert reconciler.reconcile().changed is False

    layout.ports[source] = Rect(3.0, 0.1, 10.0, 10.0)
    assert reconciler.reconcile().changed is True
