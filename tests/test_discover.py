from pathlib import Path

from photostamp.discover import discover_inputs


def test_discover_inputs_filters_and_sorts_by_path(tmp_path: Path) -> None:
    for name in ("b.png", "A.JPG", "c.txt", "a.bmp"):
        (tmp_path / name).write_bytes(b"x")

    entries = discover_inputs(tmp_path)

    assert [entry.path.name for entry in entries] == ["A.JPG", "a.bmp", "b.png"]
    assert [entry.index for entry in entries] == [1, 2, 3]
    assert entries[0].stem == "A"


def test_discover_inputs_is_not_recursive(tmp_path: Path) -> None:
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "inner.jpg").write_bytes(b"x")
    (tmp_path / "folder.jpg").mkdir()
    (tmp_path / "top.tiff").write_bytes(b"x")

    entries = discover_inputs(tmp_path)

    assert [entry.path.name for entry in entries] == ["top.tiff"]


def test_discover_inputs_returns_empty_list_without_matches(tmp_path: Path) -> None:
    (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")

    assert discover_inputs(tmp_path) == []
    assert discover_inputs(tmp_path / "missing") == []
