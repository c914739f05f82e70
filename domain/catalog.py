from __future__ import annotations

from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from domain.models import PORT_ID_SEPARATOR
from domain.ports.identifiers import IdentifierGenerator


class PortTemplate(BaseModel):
    label: str = Field(..., min_length=1)
    id: Optional[str] = None

    @field_validator("id", mode="after")
    @classmethod
    def ensure_joinable_id(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and (not value or PORT_ID_SEPARATOR in value):
            msg = f"Port template id must be non-empty and free of {PORT_ID_SEPARATOR!r}: {value!r}"
            raise ValueError(msg)
        return value


class BlockTemplate(BaseModel):
    type_name: str = Field(..., min_length=1)
    inputs: List[PortTemplate] = Field(default_factory=list)
    outputs: List[PortTemplate] = Field(default_factory=list)

    @field_validator("inputs", "outputs", mode="before")
    @classmethod
    def accept_bare_labels(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [{"label": item} if isinstance(item, str) else item for item in value]
        return value

    def port_templates(self) -> List[PortTemplate]:
        return [*self.inputs, *self.outputs]


class TemplateCatalog(BaseModel):
    templates: List[BlockTemplate] = Field(default_factory=list)

    @field_validator("templates", mode="after")
    @classmethod
    def ensure_unique_types(cls, templates: List[BlockTemplate]) -> List[BlockTemplate]:
        seen: Set[str] = set()
        for template in templates:
            if template.type_name in seen:
                msg = f"Duplicate block type found: {template.type_name}"
                raise ValueError(msg)
            seen.add(template.type_name)
        return templates

    def type_names(self) -> List[str]:
        return [template.type_name for template in self.templates]

    def get(self, type_name: str) -> Optional[BlockTemplate]:
        for template in self.templates:
            if template.type_name == type_name:
                return template
        return None

    def assign_port_ids(self, generator: IdentifierGenerator) -> TemplateCatalog:
        """Return a copy where every port template carries a template-local id.

        Ids pinned by the catalog are kept; the rest are drawn from ``generator``
        once, so every instance of a type shares the same port suffixes.
        """
        templates: List[BlockTemplate] = []
        for template in self.templates:
            templates.append(
                template.model_copy(
                    update={
                        "inputs": [_with_id(port, generator) for port in template.inputs],
                        "outputs": [_with_id(port, generator) for port in template.outputs],
                    }
                )
            )
        return TemplateCatalog(templates=templates)

    def to_dict(self) -> Dict[str, object]:
        return self.model_dump(mode="json")


def _with_id(port: PortTemplate, generator: IdentifierGenerator) -> PortTemplate:
    if port.id:
        return port
    return port.model_copy(update={"id": generator.next()})


def _ports(*labels: str) -> List[PortTemplate]:
    return [PortTemplate(label=label) for label in labels]


DEFAULT_TEMPLATE_CATALOG = TemplateCatalog(
    templates=[
        BlockTemplate(type_name="Camera Input", inputs=[], outputs=_ports("Frame")),
        BlockTemplate(
            type_name="Chroma Key",
            inputs=_ports("Color", "Radius", "Frame"),
            outputs=_ports("Mask"),
        ),
        BlockTemplate(
            type_name="Hough Transf", inputs=_ports("Mask"), outputs=_ports("Angle", "Distance")
        ),
        BlockTemplate(
            type_name="RANSAC", inputs=_ports("Mask"), outputs=_ports("Angle", "Distance")
        ),
        BlockTemplate(type_name="Display Frame", inputs=_ports("Frame"), outputs=[]),
        BlockTemplate(
            type_name="Draw Line",
            inputs=_ports("Frame", "Angle", "Distance"),
            outputs=_ports("Frame"),
        ),
        BlockTemplate(type_name="RGB to YUV", inputs=_ports("Frame"), outputs=_ports("Frame")),
    ]
)
