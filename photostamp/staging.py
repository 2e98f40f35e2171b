from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path

from photostamp.errors import TemplateImageError
from photostamp.naming import sanitize_filename

LOGGER = logging.getLogger(__name__)


def staged_name(source: Path, timestamp: int) -> str:
    """``{timestamp}_{name with dots replaced}.{ext}``, e.g. ``1760000000_frame_png.png``."""
    ext = source.suffix.lstrip(".").lower() or "jpg"
    stem = sanitize_filename(source.name.replace(".", "_"), fallback="template")
    return f"{timestamp}_{stem}.{ext}"


def stage_template_image(source: Path, images_dir: Path, timestamp: int | None = None) -> Path:
    """Copy a template image into the application's image folder.

    Templates keep pointing at the copy, so moving or deleting the original
    file does not break them. Existing copies are never overwritten.
    """
    if timestamp is None:
        timestamp = int(time.time())
    name = staged_name(source, timestamp)
    target = images_dir / name
    counter = 1
    while target.exists():
        counter += 1
        base, _, ext = name.rpartition(".")
        target = images_dir / f"{base}_{counter}.{ext}"
    try:
        images_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    except OSError as exc:
        raise TemplateImageError(f"error saving template image {source} to {target}: {exc}") from exc
    LOGGER.info("Template image staged: %s -> %s", source, target)
    return target.resolve(strict=False)
