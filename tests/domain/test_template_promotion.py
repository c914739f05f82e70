from __future__ import annotations

from domain.catalog import DEFAULT_TEMPLATE_CATALOG
from domain.identifiers import SequentialIdentifierGenerator
from domain.models import Point
from domain.services.graph_store import GraphStore
from domain.services.template_promotion import TemplatePromotion


def _promotion() -> TemplatePromotion:
    store = GraphStore(DEFAULT_TEMPLATE_CATALOG, SequentialIdentifierGenerator("blk"))
    return TemplatePromotion(store)


def test_drag_from_drawer_moves_a_new_instance_not_the_template() -> None:
    promotion = _promotion()
    store = promotion.store
    template_before = store.get_template("Hough Transf")

    block = promotion.begin("Hough Transf", Point(40.0, 50.0))
    promotion.move(Point(140.0, 150.0))
    promotion.move(Point(240.0, 250.0))
    placed = promotion.end()

    assert placed is not None
    assert placed.id == block.id
    assert placed.position == Point(240.0, 250.0)
    assert placed.is_template is False
    assert store.get_template("Hough Transf") == template_before
    assert promotion.dragging_block_id is None


def test_drawer_is_never_exhausted() -> None:
    promotion = _promotion()
    store = promotion.store

    for idx in range(5):
        for type_name in ("Camera Input", "Display Frame"):
            promotion.begin(type_name, Point(float(idx), 0.0))
            promotion.end()

    for type_name in DEFAULT_TEMPLATE_CATALOG.type_names():
        matching = [
            block for block in store.blocks if block.is_template and block.type_name == type_name
        ]
        assert len(matching) == 1
    assert len(store.instances) == 10


def test_moves_without_active_promotion_are_ignored() -> None:
    promotion = _promotion()
    block = promotion.begin("RANSAC", Point(1.0, 1.0))
    promotion.end()

    promotion.move(Point(500.0, 500.0))

    assert promotion.end() is None
    assert promotion.store.get_block(str(block.id)).position == Point(1.0, 1.0)  # type: ignore[union-attr]
