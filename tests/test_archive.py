import zipfile
from pathlib import Path

import pytest

from photostamp.archive import build_archive
from photostamp.constants import ARCHIVE_NAME
from photostamp.errors import ArchiveError


def test_build_archive_stores_flat_deflated_members(tmp_path: Path) -> None:
    nested = tmp_path / "outputs" / "deep"
    nested.mkdir(parents=True)
    first = nested / "a_processed.jpg"
    second = tmp_path / "outputs" / "b_processed.jpg"
    first.write_bytes(b"a" * 4096)
    second.write_bytes(b"b" * 4096)

    archive = build_archive([first, second], tmp_path / "dest")

    assert archive == tmp_path / "dest" / ARCHIVE_NAME
    with zipfile.ZipFile(archive) as zf:
        assert zf.namelist() == ["a_processed.jpg", "b_processed.jpg"]
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())
        assert zf.read("b_processed.jpg") == b"b" * 4096


def test_build_archive_overwrites_previous_archive(tmp_path: Path) -> None:
    source = tmp_path / "x_processed.jpg"
    source.write_bytes(b"x")
    build_archive([source], tmp_path)
    source.write_bytes(b"y")

    archive = build_archive([source], tmp_path)

    with zipfile.ZipFile(archive) as zf:
        assert zf.read("x_processed.jpg") == b"y"


def test_build_archive_failure_keeps_no_partial_archive(tmp_path: Path) -> None:
    good = tmp_path / "good_processed.jpg"
    good.write_bytes(b"ok")
    missing = tmp_path / "missing_processed.jpg"

    with pytest.raises(ArchiveError) as exc_info:
        build_archive([good, missing], tmp_path / "dest")

    assert isinstance(exc_info.value, OSError)
    assert not (tmp_path / "dest" / ARCHIVE_NAME).exists()
    assert list((tmp_path / "dest").iterdir()) == []
