from pathlib import Path

import yaml

from photostamp import config

from photostamp.config import (
    DEFAULT_CONFIG,
    load_config,
    resolve_database_path,
    resolve_output_dir,
    write_default_config,
)
from photostamp.pipeline import PipelineSettings


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "config.yaml")

    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG


def test_load_config_merges_user_values(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"data_root": str(tmp_path / "root"), "jobs": 4}), encoding="utf-8")

    cfg = load_config(path)

    assert cfg["jobs"] == 4
    assert cfg["jpeg_quality"] == DEFAULT_CONFIG["jpeg_quality"]
    assert resolve_output_dir(cfg) == (tmp_path / "root").resolve() / "generated_images"
    assert resolve_database_path(cfg) == (tmp_path / "root").resolve() / "photo_template.db"


def test_absolute_database_path_is_kept(tmp_path: Path) -> None:
    db_path = tmp_path / "elsewhere.db"

    assert resolve_database_path({"database": str(db_path)}) == db_path


def test_write_default_config_does_not_overwrite(tmp_path: Path) -> None:
    path = tmp_path / "Config" / "config.yaml"
    write_default_config(path)
    path.write_text("jobs: 3\n", encoding="utf-8")

    write_default_config(path)

    assert load_config(path)["jobs"] == 3


def test_pipeline_settings_from_config(tmp_path: Path) -> None:
    cfg = dict(DEFAULT_CONFIG, data_root=str(tmp_path), jpeg_quality=80, jobs=0, font_path="~/font.ttf")

    settings = PipelineSettings.from_config(cfg)

    assert settings.output_dir == tmp_path.resolve() / "generated_images"
    assert settings.jpeg_quality == 80
    assert settings.jobs == 1
    assert settings.font_path == Path("~/font.ttf").expanduser()


def test_user_data_dir_is_project_root_in_a_checkout(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text("[project]\n", encoding="utf-8")
    monkeypatch.setattr(config, "get_app_dir", lambda: tmp_path)

    assert config.get_user_data_dir() == tmp_path


def test_user_data_dir_avoids_install_location(tmp_path: Path, monkeypatch) -> None:
    site_packages = tmp_path / "site-packages"
    site_packages.mkdir()
    monkeypatch.setattr(config, "get_app_dir", lambda: site_packages)
    monkeypatch.setattr(config.platform, "system", lambda: "Linux")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))

    data_dir = config.get_user_data_dir()

    assert data_dir == tmp_path / "xdg" / "PhotoStamp"
    assert config.resolve_output_dir({}) == data_dir / "generated_images"
    assert config.resolve_template_images_dir({}) == data_dir / "template_images"
