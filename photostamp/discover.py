from __future__ import annotations

from pathlib import Path
from typing import Iterable

from photostamp.constants import SUPPORTED_EXTENSIONS
from photostamp.models import SourceImageEntry


def _normalize_extensions(extensions: Iterable[str] | None) -> set[str]:
    if not extensions:
        return set(SUPPORTED_EXTENSIONS)
    normalized: set[str] = set()
    for ext in extensions:
        if not ext:
            continue
        ext = ext.lower()
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return normalized


def discover_inputs(
    folder: Path,
    extensions: Iterable[str] | None = None,
) -> list[SourceImageEntry]:
    """List supported images directly inside ``folder``, sorted by full path."""
    exts = _normalize_extensions(extensions)
    if not folder.is_dir():
        return []
    files = [p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in exts]
    files.sort(key=str)
    return [SourceImageEntry(path=p, stem=p.stem, index=i) for i, p in enumerate(files, start=1)]
