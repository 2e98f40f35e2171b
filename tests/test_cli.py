from pathlib import Path

import yaml
from typer.testing import CliRunner

from conftest import write_image
from photostamp.cli import app
from photostamp.constants import ARCHIVE_NAME
from photostamp.store import TemplateStore

runner = CliRunner()


def _config(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"data_root": str(tmp_path / "data")}), encoding="utf-8")
    return path


def test_cli_template_crud_and_generate(tmp_path: Path) -> None:
    config = _config(tmp_path)
    frame = write_image(tmp_path / "frame.png", (160, 200), color="#FFFFFF", fmt="PNG")
    photos = tmp_path / "photos"
    write_image(photos / "card_07.jpg", (90, 60), fmt="JPEG")

    added = runner.invoke(
        app,
        ["templates", "add", "card", str(frame), "--photo", "20,30,120,80", "--caption", "20,130,120,40", "--config", str(config)],
    )
    assert added.exit_code == 0, added.output
    assert "Template added: 1" in added.output

    listed = runner.invoke(app, ["templates", "list", "--config", str(config)])
    assert "card" in listed.output

    generated = runner.invoke(app, ["generate", "1", str(photos), "--config", str(config)])
    assert generated.exit_code == 0, generated.output
    assert "success=1 failed=0" in generated.output
    assert (tmp_path / "data" / "generated_images" / ARCHIVE_NAME).exists()

    deleted = runner.invoke(app, ["templates", "delete", "1", "--config", str(config)])
    assert deleted.exit_code == 0
    assert "deleted successfully" in deleted.output


def test_cli_generate_reports_fatal_error(tmp_path: Path) -> None:
    config = _config(tmp_path)
    photos = tmp_path / "photos"
    photos.mkdir()

    result = runner.invoke(app, ["generate", "5", str(photos), "--config", str(config)])

    assert result.exit_code == 1


def test_cli_rejects_malformed_region(tmp_path: Path) -> None:
    config = _config(tmp_path)
    frame = write_image(tmp_path / "frame.png", (10, 10), fmt="PNG")

    result = runner.invoke(app, ["templates", "add", "bad", str(frame), "--photo", "1,2,3", "--config", str(config)])

    assert result.exit_code != 0


def test_cli_add_stores_a_copy_of_the_template_image(tmp_path: Path) -> None:
    config = _config(tmp_path)
    frame = write_image(tmp_path / "upload" / "frame.png", (160, 200), color="#FFFFFF", fmt="PNG")
    photos = tmp_path / "photos"
    write_image(photos / "shot_1.jpg", (90, 60), fmt="JPEG")

    added = runner.invoke(app, ["templates", "add", "card", str(frame), "--photo", "20,30,120,80", "--config", str(config)])
    assert added.exit_code == 0, added.output

    with TemplateStore.connect(tmp_path / "data" / "photo_template.db") as store:
        stored = Path(store.get(1).template_img)
    images_dir = (tmp_path / "data" / "template_images").resolve()
    assert stored.parent == images_dir
    assert stored.name.endswith("_frame_png.png")

    frame.unlink()
    generated = runner.invoke(app, ["generate", "1", str(photos), "--config", str(config)])
    assert generated.exit_code == 0, generated.output


def test_cli_update_image_stages_new_copy(tmp_path: Path) -> None:
    config = _config(tmp_path)
    frame = write_image(tmp_path / "frame.png", (160, 200), color="#FFFFFF", fmt="PNG")
    replacement = write_image(tmp_path / "frame_v2.jpg", (160, 200), color="#EEEEEE", fmt="JPEG")
    runner.invoke(app, ["templates", "add", "card", str(frame), "--photo", "20,30,120,80", "--config", str(config)])

    updated = runner.invoke(app, ["templates", "update", "1", "--image", str(replacement), "--config", str(config)])

    assert updated.exit_code == 0, updated.output
    with TemplateStore.connect(tmp_path / "data" / "photo_template.db") as store:
        stored = Path(store.get(1).template_img)
    assert stored.parent == (tmp_path / "data" / "template_images").resolve()
    assert stored.name.endswith("_frame_v2_jpg.jpg")
