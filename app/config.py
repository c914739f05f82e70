from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.animation.spring import SpringConfig
from adapters.layout.box_layout import BoxMetrics
from domain.models import Point

DEFAULT_CONFIG_PATH = Path("config/editor.yaml")

IdentifierMode = Literal["uuid4", "sequential"]


class BoxSettings(BaseModel):
    block_width: float = Field(default=160.0, gt=0)
    title_bar_height: float = Field(default=28.0, ge=0)
    port_row_height: float = Field(default=24.0, gt=0)

    def to_metrics(self) -> BoxMetrics:
        return BoxMetrics(
            block_width=self.block_width,
            title_bar_height=self.title_bar_height,
            port_row_height=self.port_row_height,
        )


class SpringSettings(BaseModel):
    tension: float = Field(default=210.0, gt=0)
    friction: float = Field(default=20.0, ge=0)
    mass: float = Field(default=1.0, gt=0)
    precision: float = Field(default=0.01, gt=0)

    def to_config(self) -> SpringConfig:
        return SpringConfig(
            tension=self.tension,
            friction=self.friction,
            mass=self.mass,
            precision=self.precision,
        )


class EditorSettings(BaseModel):
    title: str = "Blockflow Editor"
    catalog_path: Path | None = None
    abandoned_link_policy: Literal["keep", "discard"] = "keep"
    prune_dangling_links: bool = False
    reconcile_epsilon: float = Field(default=0.01, ge=0)
    drawer_origin_x: float = 20.0
    drawer_origin_y: float = 20.0
    drawer_spacing: float = Field(default=120.0, gt=0)
    identifier_mode: IdentifierMode = "uuid4"
    box: BoxSettings = BoxSettings()
    spring: SpringSettings = SpringSettings()

    @field_validator("abandoned_link_policy", "identifier_mode", mode="before")
    @classmethod
    def normalize_choice(cls, value: object) -> object:
        return str(value).strip().lower() if isinstance(value, str) else value

    @field_validator("catalog_path", mode="before")
    @classmethod
    def normalize_catalog_path(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def drawer_origin(self) -> Point:
        return Point(self.drawer_origin_x, self.drawer_origin_y)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BFE_", env_nested_delimiter="__")

    editor: EditorSettings = EditorSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Explicit values and BFE_ variables win over the YAML file.
        yaml_sources: tuple[PydanticBaseSettingsSource, ...] = ()
        if cls._yaml_path is not None:
            yaml_sources = (YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path),)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings, *yaml_sources)


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    """Pick the editor YAML file: argument, then ``BFE_CONFIG_PATH``, then the default.

    The default file is optional; an explicitly named file must exist.
    """
    if config_path is None:
        env_path = os.getenv("BFE_CONFIG_PATH")
        if not env_path:
            return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None
        config_path = Path(env_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Editor config file not found: {config_path}")
    return config_path


def load_settings(config_path: Path | None = None) -> AppSettings:
    yaml_path = resolve_config_path(config_path)
    saved = AppSettings._yaml_path
    AppSettings._yaml_path = yaml_path
    try:
        return AppSettings()
    finally:
        AppSettings._yaml_path = saved
