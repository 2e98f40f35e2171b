from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from photostamp.config import (
    load_config,
    resolve_database_path,
    resolve_template_images_dir,
    write_default_config,
)
from photostamp.errors import PhotoStampError
from photostamp.models import Geometry
from photostamp.pipeline import BatchOrchestrator, PipelineSettings
from photostamp.staging import stage_template_image
from photostamp.store import TemplateStore
from photostamp.template_loader import geometry_to_text, load_template_definition

app = typer.Typer(add_completion=False, no_args_is_help=True, help="PhotoStamp template batch compositor.")
templates_app = typer.Typer(no_args_is_help=True, help="Manage photo templates.")
app.add_typer(templates_app, name="templates")
LOGGER = logging.getLogger("photostamp")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _fail(message: str) -> typer.Exit:
    typer.secho(message, err=True, fg=typer.colors.RED)
    return typer.Exit(1)


def _parse_box(value: str | None, option: str) -> Geometry | None:
    """Parse ``x,y,width,height`` from the command line."""
    if value is None or not value.strip():
        return None
    parts = [item.strip() for item in value.split(",")]
    if len(parts) != 4:
        raise typer.BadParameter("expected x,y,width,height", param_hint=option)
    try:
        x, y, width, height = (float(part) for part in parts)
    except ValueError as exc:
        raise typer.BadParameter(f"not a number in {value!r}", param_hint=option) from exc
    geometry = Geometry(x, y, width, height)
    if not geometry.is_valid():
        raise typer.BadParameter("width and height must be positive", param_hint=option)
    return geometry


def _open_store(config_path: Path | None) -> TemplateStore:
    cfg = load_config(config_path)
    try:
        return TemplateStore.connect(resolve_database_path(cfg))
    except PhotoStampError as exc:
        raise _fail(str(exc))


@app.command()
def generate(
    template_id: int = typer.Argument(..., help="Template id in the template store."),
    folder: Path = typer.Argument(..., exists=True, file_okay=False, resolve_path=True),
    config: Path | None = typer.Option(None, "--config", help="Config YAML path."),
    out: Path | None = typer.Option(None, "--out", help="Output directory (default: <data_root>/generated_images)."),
    jobs: int | None = typer.Option(None, "--jobs", min=1, help="Worker threads for per-image work."),
    quality: int | None = typer.Option(None, "--quality", min=1, max=100),
    font: Path | None = typer.Option(None, "--font", exists=True, dir_okay=False, help="Caption font file."),
    summary: bool = typer.Option(False, "--summary", help="Print the run summary as JSON."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Compose every image in FOLDER onto a template and zip the results."""
    cfg = load_config(config)
    _setup_logging(log_level or str(cfg.get("log_level") or "info"))

    settings = PipelineSettings.from_config(cfg)
    if out is not None:
        settings.output_dir = out.resolve(strict=False)
    if jobs is not None:
        settings.jobs = jobs
    if quality is not None:
        settings.jpeg_quality = quality
    if font is not None:
        settings.font_path = font

    last_percent = -1

    def _progress(fraction: float) -> None:
        nonlocal last_percent
        percent = int(fraction * 100)
        if percent != last_percent:
            last_percent = percent
            LOGGER.info("progress %3d%%", percent)

    try:
        store = TemplateStore.connect(resolve_database_path(cfg))
    except PhotoStampError as exc:
        raise _fail(str(exc))
    with store:
        orchestrator = BatchOrchestrator(store, settings, progress=_progress)
        try:
            run = orchestrator.run(template_id, folder)
        except PhotoStampError as exc:
            raise _fail(f"Generation failed: {exc}")

    if summary:
        typer.echo(json.dumps(run.to_dict(), ensure_ascii=False, indent=2))
    else:
        typer.echo(f"Done. success={run.succeeded} failed={run.failed}")
        typer.echo(f"Archive: {run.archive_path}")
    if run.failures:
        typer.secho("Failures:", fg=typer.colors.YELLOW)
        for failure in run.failures:
            typer.secho(f"  {failure.source}: {failure.reason}", fg=typer.colors.YELLOW)


@templates_app.command("list")
def list_templates(
    config: Path | None = typer.Option(None, "--config", help="Config YAML path."),
) -> None:
    with _open_store(config) as store:
        records = store.list_all()
    if not records:
        typer.echo("No templates.")
        return
    for record in records:
        typer.echo(f"{record.id}\t{record.name}\t{record.template_img}")


@templates_app.command("show")
def show_template(
    template_id: int = typer.Argument(...),
    config: Path | None = typer.Option(None, "--config", help="Config YAML path."),
) -> None:
    with _open_store(config) as store:
        try:
            record = store.get(template_id)
        except PhotoStampError as exc:
            raise _fail(str(exc))
    payload = record.to_dict()
    try:
        definition = load_template_definition(record)
        payload["valid"] = True
        payload["photo_region"] = definition.photo_region.box_size()
    except PhotoStampError as exc:
        payload["valid"] = False
        payload["error"] = str(exc)
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))


@templates_app.command("add")
def add_template(
    name: str = typer.Argument(...),
    image: Path = typer.Argument(..., exists=True, dir_okay=False, resolve_path=True),
    photo: str = typer.Option(..., "--photo", help="Photo region x,y,width,height."),
    caption: str | None = typer.Option(None, "--caption", help="Caption region x,y,width,height."),
    config: Path | None = typer.Option(None, "--config", help="Config YAML path."),
) -> None:
    """Add a template; IMAGE is copied into the application's template_images folder."""
    photo_region = _parse_box(photo, "--photo")
    caption_region = _parse_box(caption, "--caption")
    images_dir = resolve_template_images_dir(load_config(config))
    with _open_store(config) as store:
        try:
            staged = stage_template_image(image, images_dir)
            record = store.insert(name, geometry_to_text(photo_region), geometry_to_text(caption_region), str(staged))
        except PhotoStampError as exc:
            raise _fail(str(exc))
    typer.echo(f"Template added: {record.id}")


@templates_app.command("update")
def update_template(
    template_id: int = typer.Argument(...),
    name: str | None = typer.Option(None, "--name"),
    image: Path | None = typer.Option(None, "--image", exists=True, dir_okay=False, resolve_path=True),
    photo: str | None = typer.Option(None, "--photo", help="Photo region x,y,width,height."),
    caption: str | None = typer.Option(None, "--caption", help='Caption region x,y,width,height ("" to remove).'),
    config: Path | None = typer.Option(None, "--config", help="Config YAML path."),
) -> None:
    photo_text = geometry_to_text(_parse_box(photo, "--photo")) if photo is not None else None
    caption_text = geometry_to_text(_parse_box(caption, "--caption")) if caption is not None else None
    images_dir = resolve_template_images_dir(load_config(config))
    with _open_store(config) as store:
        try:
            current = store.get(template_id)
            image_text = str(stage_template_image(image, images_dir)) if image is not None else current.template_img
            record = store.update(
                template_id,
                name if name is not None else current.name,
                photo_text if photo_text is not None else current.crop_photo,
                caption_text if caption_text is not None else current.crop_number,
                image_text,
            )
        except PhotoStampError as exc:
            raise _fail(str(exc))
    typer.echo(f"Template updated: {record.id}")


@templates_app.command("delete")
def delete_template(
    template_id: int = typer.Argument(...),
    config: Path | None = typer.Option(None, "--config", help="Config YAML path."),
) -> None:
    with _open_store(config) as store:
        try:
            store.delete(template_id)
        except PhotoStampError as exc:
            raise _fail(str(exc))
    typer.echo(f"Photo template with ID {template_id} deleted successfully")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
