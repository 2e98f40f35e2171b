from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

from PIL import Image

from photostamp.archive import build_archive
from photostamp.config import resolve_output_dir
from photostamp.constants import DEFAULT_CAPTION_COLOR, DEFAULT_JPEG_QUALITY
from photostamp.decoders.image_decoder import decode_image
from photostamp.discover import discover_inputs
from photostamp.errors import (
    AllItemsFailedError,
    ArchiveError,
    CompositeError,
    ConfigurationError,
    DecodeError,
    EncodeWriteError,
    NoInputError,
    PhotoStampError,
)
from photostamp.models import (
    BatchRun,
    ItemFailure,
    ItemWarning,
    RunState,
    SourceImageEntry,
    TemplateDefinition,
    TemplateRecord,
)
from photostamp.naming import build_output_name, extract_number
from photostamp.render.compositor import compose_with_caption
from photostamp.render.resize import resize_to_fit
from photostamp.template_loader import load_template_definition

LOGGER = logging.getLogger(__name__)

ProgressSink = Callable[[float], None]


class TemplateSource(Protocol):
    def get(self, template_id: int) -> TemplateRecord: ...


@dataclass(slots=True)
class PipelineSettings:
    output_dir: Path
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    font_path: Path | None = None
    caption_color: str = DEFAULT_CAPTION_COLOR
    jobs: int = 1

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "PipelineSettings":
        font_path = cfg.get("font_path")
        return cls(
            output_dir=resolve_output_dir(cfg),
            jpeg_quality=int(cfg.get("jpeg_quality") or DEFAULT_JPEG_QUALITY),
            font_path=Path(str(font_path)).expanduser() if font_path else None,
            caption_color=str(cfg.get("caption_color") or DEFAULT_CAPTION_COLOR),
            jobs=max(1, int(cfg.get("jobs") or 1)),
        )


@dataclass(slots=True)
class _ItemResult:
    entry: SourceImageEntry
    output: Path | None = None
    warning: str | None = None
    error: str | None = None
    elapsed: float = 0.0


def save_jpeg(image: Image.Image, path: Path, quality: int) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        image.convert("RGB").save(
            path,
            format="JPEG",
            quality=max(1, min(100, int(quality))),
            optimize=True,
            progressive=True,
        )
    except (OSError, ValueError) as exc:
        raise EncodeWriteError(path, str(exc)) from exc


class BatchOrchestrator:
    """Run one template over every image of a folder and zip the results.

    Per-image failures are recorded on the returned ``BatchRun`` and never
    abort the batch; template, input and archive failures are raised.
    """

    def __init__(
        self,
        store: TemplateSource,
        settings: PipelineSettings,
        progress: ProgressSink | None = None,
    ) -> None:
        self.store = store
        self.settings = settings
        self.progress = progress
        self.last_run: BatchRun | None = None

    def generate(self, template_id: int, folder: Path) -> Path:
        run = self.run(template_id, folder)
        if run.archive_path is None:
            raise ArchiveError(f"run for template {template_id} finished without an archive")
        return run.archive_path

    def submit(self, template_id: int, folder: Path) -> Future[Path]:
        """Run ``generate`` on a background worker thread."""
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="photostamp")
        try:
            return executor.submit(self.generate, template_id, folder)
        finally:
            executor.shutdown(wait=False)

    def run(self, template_id: int, folder: Path) -> BatchRun:
        run = BatchRun(template_id=template_id, folder=Path(folder))
        self.last_run = run
        try:
            self._run(run)
        except PhotoStampError as exc:
            self._set_state(run, RunState.FAILED)
            run.error = str(exc)
            LOGGER.error("Run failed: %s", exc)
            raise
        return run

    def _set_state(self, run: BatchRun, state: RunState) -> None:
        LOGGER.debug("run template=%s %s -> %s", run.template_id, run.state.value, state.value)
        run.state = state

    def _run(self, run: BatchRun) -> None:
        self._set_state(run, RunState.LOADING)
        definition = load_template_definition(self.store.get(run.template_id))
        LOGGER.info("Template: %s (id=%s)", definition.name, definition.id)
        template_image = self._decode_template(definition)

        self._set_state(run, RunState.ENUMERATING)
        entries = discover_inputs(run.folder)
        if not entries:
            raise NoInputError(f"no image files found in {run.folder}")
        run.total = len(entries)
        LOGGER.info("Found %d images in %s", run.total, run.folder)

        output_dir = self.settings.output_dir
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EncodeWriteError(output_dir, f"cannot create output directory: {exc}") from exc

        self._set_state(run, RunState.PROCESSING)
        used: set[str] = set()
        targets = [output_dir / build_output_name(entry.stem, entry.index, used) for entry in entries]
        for result in self._process_all(definition, template_image, entries, targets):
            self._record(run, result)

        if not run.outputs:
            raise AllItemsFailedError(run.total)

        self._set_state(run, RunState.ARCHIVING)
        run.archive_path = build_archive(run.outputs, output_dir)
        self._set_state(run, RunState.DONE)
        LOGGER.info(
            "Done. success=%d failed=%d archive=%s",
            run.succeeded,
            run.failed,
            run.archive_path,
        )

    def _decode_template(self, definition: TemplateDefinition) -> Image.Image:
        try:
            return decode_image(definition.template_image_path)
        except DecodeError as exc:
            raise ConfigurationError(f"template {definition.id} image unusable: {exc}") from exc

    def _process_all(
        self,
        definition: TemplateDefinition,
        template_image: Image.Image,
        entries: list[SourceImageEntry],
        targets: list[Path],
    ):
        jobs = max(1, int(self.settings.jobs))
        if jobs == 1 or len(entries) == 1:
            for entry, target in zip(entries, targets):
                yield self._process_one(definition, template_image, entry, target)
            return
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="photostamp-item") as pool:
            futures = [
                pool.submit(self._process_one, definition, template_image, entry, target)
                for entry, target in zip(entries, targets)
            ]
            # consumed in submission order to keep progress and naming ordered
            for future in futures:
                yield future.result()

    def _process_one(
        self,
        definition: TemplateDefinition,
        template_image: Image.Image,
        entry: SourceImageEntry,
        target: Path,
    ) -> _ItemResult:
        t0 = time.perf_counter()
        result = _ItemResult(entry=entry)
        try:
            source = decode_image(entry.path)
            number = extract_number(entry.stem, entry.index)
            try:
                box_width, box_height = definition.photo_region.box_size()
                fitted = resize_to_fit(source, box_width, box_height)
                composite, result.warning = compose_with_caption(
                    template_image,
                    fitted,
                    definition.photo_region,
                    definition.caption_region,
                    number,
                    font_path=self.settings.font_path,
                    color=self.settings.caption_color,
                )
            except PhotoStampError:
                raise
            except Exception as exc:
                raise CompositeError(f"cannot compose {entry.path}: {exc}") from exc
            save_jpeg(composite, target, self.settings.jpeg_quality)
            result.output = target
        except (DecodeError, CompositeError, EncodeWriteError) as exc:
            result.error = str(exc)
        result.elapsed = time.perf_counter() - t0
        return result

    def _record(self, run: BatchRun, result: _ItemResult) -> None:
        source = result.entry.path
        if result.output is not None:
            run.outputs.append(result.output)
            LOGGER.info("OK   %s -> %s  (%.2fs)", source.name, result.output.name, result.elapsed)
        else:
            run.failures.append(ItemFailure(source=source, reason=result.error or "unknown error"))
            LOGGER.error("FAIL %s  %s", source.name, result.error)
        if result.warning:
            run.warnings.append(ItemWarning(source=source, message=result.warning))
        run.completed += 1
        self._notify(run.progress)

    def _notify(self, fraction: float) -> None:
        if self.progress is None:
            return
        try:
            self.progress(fraction)
        except Exception as exc:
            LOGGER.warning("progress notification failed: %s", exc)
