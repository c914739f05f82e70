from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.filesystem.template_catalog import YamlTemplateCatalogSource
from app.config import load_settings
from app.editor_wiring import build_editor_session, build_template_catalog
from domain.identifiers import SequentialIdentifierGenerator
from domain.models import DragEvent, Point, port_element_id
from domain.services.reconcile import LinkGeometry

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.command("templates")
def list_templates(
    config: Path | None = typer.Option(None, help="Editor settings YAML file."),
) -> None:
    settings = load_settings(config)
    catalog = build_template_catalog(settings.editor)
    for template in catalog.templates:
        inputs = ", ".join(port.label for port in template.inputs) or "-"
        outputs = ", ".join(port.label for port in template.outputs) or "-"
        console.print(f"[bold]{template.type_name}[/]  in: {inputs}  out: {outputs}")


@app.command("validate-catalog")
def validate_catalog(
    input_path: Path = typer.Argument(..., help="Template catalog YAML file to validate."),
) -> None:
    try:
        catalog = YamlTemplateCatalogSource().load(input_path)
    except FileNotFoundError as exc:
        console.print(f"[red]File not found:[/] {input_path}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc
    count = len(catalog.templates)
    console.print(f"[green]Valid template catalog:[/] {input_path} ({count} types)")


@app.command("demo")
def demo(
    config: Path | None = typer.Option(None, help="Editor settings YAML file."),
    shift: float = typer.Option(50.0, help="Horizontal distance to move the source block."),
) -> None:
    """Drag two blocks out of the drawer, link them and move the source."""
    settings = load_settings(config)
    session, animator = build_editor_session(
        settings.editor, generator=SequentialIdentifierGenerator("blk")
    )

    camera = session.on_move_start("Camera Input", Point(100.0, 100.0))
    session.on_move_end()
    display = session.on_move_start("Display Frame", Point(400.0, 160.0))
    session.on_move_end()

    source = camera.outputs[0].id
    target = display.inputs[0].id
    session.port_gesture(source, DragEvent("start", Point(260.0, 140.0)))
    session.port_gesture(source, DragEvent("move", Point(380.0, 200.0)))
    session.port_gesture(
        source,
        DragEvent("end", Point(400.0, 200.0), element_id=port_element_id(target)),
    )
    _print_links(session.view().links, "linked")

    session.block_gesture(
        str(camera.id), DragEvent("move", Point(0.0, 0.0), delta=Point(shift, 0.0))
    )
    animator.settle_all()
    _print_links(session.view().links, "after move")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8080, help="Bind port."),
    config: Path | None = typer.Option(None, help="Editor settings YAML file."),
) -> None:
    import uvicorn

    from app.web_main import create_app

    settings = load_settings(config)
    uvicorn.run(create_app(settings), host=host, port=port)


def _print_links(links: Sequence[LinkGeometry], label: str) -> None:
    for item in links:
        start = f"({item.start.x:.1f}, {item.start.y:.1f})" if item.start else "-"
        end = f"({item.end.x:.1f}, {item.end.y:.1f})" if item.end else "-"
        console.print(
            f"[cyan]{label}[/] {item.source_port_id} -> {item.target_port_id} "
            f"{start} -> {end} ({item.status})",
            soft_wrap=True,
        )


if __name__ == "__main__":
    app()
