from __future__ import annotations

from adapters.animation.spring import SpringAnimator
from adapters.filesystem.template_catalog import YamlTemplateCatalogSource
from adapters.layout.box_layout import BoxLayout
from app.config import EditorSettings
from domain.catalog import DEFAULT_TEMPLATE_CATALOG, TemplateCatalog
from domain.identifiers import SequentialIdentifierGenerator, Uuid4IdentifierGenerator
from domain.ports.identifiers import IdentifierGenerator
from domain.services.editor_session import EditorSession
from domain.services.graph_store import GraphStore


def build_template_catalog(settings: EditorSettings) -> TemplateCatalog:
    if settings.catalog_path is None:
        return DEFAULT_TEMPLATE_CATALOG
    return YamlTemplateCatalogSource().load(settings.catalog_path)


def build_identifier_generator(settings: EditorSettings) -> IdentifierGenerator:
    if settings.identifier_mode == "sequential":
        return SequentialIdentifierGenerator("blk")
    return Uuid4IdentifierGenerator()


def build_editor_session(
    settings: EditorSettings,
    *,
    catalog: TemplateCatalog | None = None,
    generator: IdentifierGenerator | None = None,
) -> tuple[EditorSession, SpringAnimator]:
    store = GraphStore(
        catalog or build_template_catalog(settings),
        generator or build_identifier_generator(settings),
        drawer_origin=settings.drawer_origin,
        drawer_spacing=settings.drawer_spacing,
        prune_dangling_links=settings.prune_dangling_links,
    )
    animator = SpringAnimator(settings.spring.to_config())
    layout = BoxLayout(store, animator, settings.box.to_metrics())
    session = EditorSession(
        store,
        layout,
        animator,
        abandoned_policy=settings.abandoned_link_policy,
        epsilon=settings.reconcile_epsilon,
    )
    return session, animator
