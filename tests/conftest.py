from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from app.config import AppSettings, EditorSettings
from tests.helpers.editor_fixtures import EditorHarness, build_harness


def _clear_bfe_env() -> None:
    for key in list(os.environ):
        if key.startswith("BFE_"):
            os.environ.pop(key, None)


_clear_bfe_env()


@pytest.fixture(autouse=True)
def clear_bfe_env() -> Generator[None, None, None]:
    _clear_bfe_env()
    yield
    _clear_bfe_env()


@pytest.fixture
def editor_settings() -> EditorSettings:
    return EditorSettings(
        title="Test Editor",
        catalog_path=None,
        abandoned_link_policy="keep",
        prune_dangling_links=False,
        reconcile_epsilon=0.01,
        drawer_origin_x=20.0,
        drawer_origin_y=20.0,
        drawer_spacing=120.0,
        identifier_mode="sequential",
    )


@pytest.fixture
def editor_settings_factory(editor_settings: EditorSettings) -> Callable[..., EditorSettings]:
    def _factory(**overrides: object) -> EditorSettings:
        return editor_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(editor_settings: EditorSettings) -> AppSettings:
    return AppSettings(editor=editor_settings)


@pytest.fixture
def app_settings_factory(
    editor_settings_factory: Callable[..., EditorSettings],
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(editor=editor_settings_factory(**overrides))

    return _factory


@pytest.fixture
def harness() -> EditorHarness:
    return build_harness()
