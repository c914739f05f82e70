from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field

from adapters.animation.spring import SpringAnimator
from app.config import AppSettings, load_settings
from app.editor_wiring import build_editor_session
from domain.catalog import TemplateCatalog
from domain.models import Block, DragEvent, Point, Port, port_element_id
from domain.services.editor_session import EditorSession, EditorView
from domain.services.graph_store import UnknownBlockTypeError
from domain.services.reconcile import LinkGeometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorContext:
    settings: AppSettings
    session: EditorSession
    animator: SpringAnimator


class GesturePayload(BaseModel):
    phase: Literal["start", "move", "end"]
    x: float = 0.0
    y: float = 0.0
    dx: float = 0.0
    dy: float = 0.0
    element_id: Optional[str] = None

    def to_event(self) -> DragEvent:
        return DragEvent(
            phase=self.phase,
            pointer=Point(self.x, self.y),
            delta=Point(self.dx, self.dy),
            element_id=self.element_id,
        )


class FramePayload(BaseModel):
    dt: float = Field(default=1 / 60, gt=0, le=5.0)
    settle: bool = False


def create_app(settings: AppSettings, catalog: TemplateCatalog | None = None) -> FastAPI:
    # Endpoints are coroutines so gesture events apply one at a time, in order.
    app = FastAPI(title=settings.editor.title)
    session, animator = build_editor_session(settings.editor, catalog=catalog)
    app.state.editor_context = EditorContext(
        settings=settings, session=session, animator=animator
    )

    @app.get("/api/templates")
    async def api_templates(context: EditorContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse(context.session.store.catalog.to_dict())

    @app.get("/api/view")
    async def api_view(context: EditorContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse(view_to_dict(context.session.view()))

    @app.post("/api/drawer/{type_name}/gesture")
    async def api_drawer_gesture(
        type_name: str,
        payload: GesturePayload,
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        try:
            context.session.drawer_gesture(type_name, payload.to_event())
        except UnknownBlockTypeError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return ORJSONResponse(
            {
                "dragging_block_id": context.session.promotion.dragging_block_id,
                "view": view_to_dict(context.session.view()),
            }
        )

    @app.post("/api/blocks/{block_id}/gesture")
    async def api_block_gesture(
        block_id: str,
        payload: GesturePayload,
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        context.session.block_gesture(block_id, payload.to_event())
        return ORJSONResponse(view_to_dict(context.session.view()))

    @app.delete("/api/blocks/{block_id}")
    async def api_delete_block(
        block_id: str, context: EditorContext = Depends(get_context)
    ) -> ORJSONResponse:
        context.session.on_delete(block_id)
        return ORJSONResponse(view_to_dict(context.session.view()))

    @app.post("/api/ports/{port_id}/gesture")
    async def api_port_gesture(
        port_id: str,
        payload: GesturePayload,
        context: EditorContext = Depends(get_context),
    ) -> ORJSONResponse:
        context.session.port_gesture(port_id, payload.to_event())
        return ORJSONResponse(view_to_dict(context.session.view()))

    @app.post("/api/frames")
    async def api_frames(
        payload: FramePayload, context: EditorContext = Depends(get_context)
    ) -> ORJSONResponse:
        if payload.settle:
            settled = context.animator.settle_all()
        else:
            settled = context.animator.step(payload.dt)
        return ORJSONResponse(
            {
                "settled": settled,
                "animating": context.animator.is_animating(),
                "view": view_to_dict(context.session.view()),
            }
        )

    @app.post("/api/reconcile")
    async def api_reconcile(context: EditorContext = Depends(get_context)) -> ORJSONResponse:
        result = context.session.refresh()
        return ORJSONResponse(
            {"changed": result.changed, "view": view_to_dict(context.session.view())}
        )

    return app


def get_context(request: Request) -> EditorContext:
    return request.app.state.editor_context


def view_to_dict(view: EditorView) -> dict[str, Any]:
    return {
        "drawer": [block_to_dict(block) for block in view.drawer],
        "placed": [block_to_dict(block) for block in view.placed],
        "links": [geometry_to_dict(item) for item in view.links],
        "dangling": list(view.dangling),
    }


def block_to_dict(block: Block) -> dict[str, Any]:
    return {
        "id": block.id,
        "type_name": block.type_name,
        "position": point_to_dict(block.position),
        "is_template": block.is_template,
        "inputs": [port_to_dict(port) for port in block.inputs],
        "outputs": [port_to_dict(port) for port in block.outputs],
    }


def port_to_dict(port: Port) -> dict[str, Any]:
    return {
        "id": port.id,
        "element_id": port_element_id(port.id),
        "role": port.role,
        "label": port.label,
        "owner_block_id": port.owner_block_id,
    }


def geometry_to_dict(item: LinkGeometry) -> dict[str, Any]:
    return {
        "source_port_id": item.source_port_id,
        "target_port_id": item.target_port_id,
        "start": point_to_dict(item.start),
        "end": point_to_dict(item.end),
        "status": item.status,
    }


def point_to_dict(point: Point | None) -> dict[str, float] | None:
    if point is None:
        return None
    return {"x": point.x, "y": point.y}


def build_app() -> FastAPI:
    try:
        settings = load_settings()
    except FileNotFoundError:
        logger.exception("Editor configuration could not be loaded.")
        raise
    return create_app(settings)
