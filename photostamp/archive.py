from __future__ import annotations

import logging
import os
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable

from photostamp.constants import ARCHIVE_NAME
from photostamp.errors import ArchiveError

LOGGER = logging.getLogger(__name__)


def build_archive(files: Iterable[Path], dest_dir: Path, name: str = ARCHIVE_NAME) -> Path:
    """Deflate ``files`` into ``dest_dir/name`` as flat members named by base name.

    The archive is assembled in a temporary sibling and moved into place, so the
    well-known path never holds a partially written container.
    """
    archive_path = dest_dir / name
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".archive-", suffix=".zip.tmp", dir=dest_dir)
        os.close(fd)
    except OSError as exc:
        raise ArchiveError(f"error creating archive file {archive_path}: {exc}") from exc

    temp_path = Path(temp_name)
    members = 0
    try:
        with zipfile.ZipFile(temp_path, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            for path in files:
                # ZipFile.write streams the file in chunks
                zf.write(path, arcname=path.name)
                members += 1
        os.replace(temp_path, archive_path)
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile) as exc:
        temp_path.unlink(missing_ok=True)
        raise ArchiveError(f"error writing archive {archive_path}: {exc}") from exc

    LOGGER.info("Archive %s (%d files)", archive_path, members)
    return archive_path
