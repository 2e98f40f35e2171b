from __future__ import annotations

import copy
import os
import platform
import sys
from pathlib import Path
from typing import Any

import yaml

from photostamp.constants import (
    APP_NAME,
    DATABASE_FILE_NAME,
    DEFAULT_CAPTION_COLOR,
    DEFAULT_JPEG_QUALITY,
    OUTPUT_DIR_NAME,
    TEMPLATE_IMAGES_DIR_NAME,
)

DEFAULT_CONFIG: dict[str, Any] = {
    "data_root": None,
    "database": DATABASE_FILE_NAME,
    "output_dir_name": OUTPUT_DIR_NAME,
    "jpeg_quality": DEFAULT_JPEG_QUALITY,
    "font_path": None,
    "caption_color": DEFAULT_CAPTION_COLOR,
    "jobs": 1,
    "log_level": "info",
}


def get_app_dir() -> Path:
    """Return the application root directory.

    - Frozen (PyInstaller): directory containing the executable.
    - Development: project root (two levels up from this file).
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    # photostamp/config.py → photostamp/ → project_root/
    return Path(__file__).resolve().parent.parent


def is_source_checkout() -> bool:
    """True when running unfrozen from a project checkout rather than an install."""
    if getattr(sys, "frozen", False):
        return False
    return (get_app_dir() / "pyproject.toml").is_file()


def _platform_data_dir() -> Path:
    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / APP_NAME
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def get_user_data_dir() -> Path:
    """User-writable data directory.

    The project root for a source checkout, otherwise the platform's per-user
    application data folder, so installed copies never write into site-packages.
    """
    if is_source_checkout():
        return get_app_dir()
    return _platform_data_dir()


def get_config_path() -> Path:
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path


def resolve_data_root(cfg: dict[str, Any]) -> Path:
    root = cfg.get("data_root")
    if root:
        return Path(str(root)).expanduser().resolve(strict=False)
    return get_user_data_dir()


def resolve_database_path(cfg: dict[str, Any]) -> Path:
    database = Path(str(cfg.get("database") or DATABASE_FILE_NAME)).expanduser()
    if database.is_absolute():
        return database
    return resolve_data_root(cfg) / database


def resolve_output_dir(cfg: dict[str, Any]) -> Path:
    return resolve_data_root(cfg) / str(cfg.get("output_dir_name") or OUTPUT_DIR_NAME)


def resolve_template_images_dir(cfg: dict[str, Any]) -> Path:
    return resolve_data_root(cfg) / TEMPLATE_IMAGES_DIR_NAME
