from pathlib import Path

import pytest
from PIL import Image

from photostamp.models import Geometry
from photostamp.pipeline import PipelineSettings
from photostamp.store import TemplateStore
from photostamp.template_loader import geometry_to_text

PHOTO_REGION = Geometry(20, 30, 120, 80)
CAPTION_REGION = Geometry(20, 130, 120, 40)


def write_image(path: Path, size: tuple[int, int], color: str = "#3366CC", fmt: str | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color=color).save(path, format=fmt)
    return path


@pytest.fixture
def template_image(tmp_path: Path) -> Path:
    return write_image(tmp_path / "template" / "frame.png", (160, 200), color="#FFFFFF", fmt="PNG")


@pytest.fixture
def store(tmp_path: Path):
    with TemplateStore.connect(tmp_path / "data" / "photo_template.db") as opened:
        yield opened


@pytest.fixture
def template_id(store: TemplateStore, template_image: Path) -> int:
    record = store.insert(
        "frame",
        geometry_to_text(PHOTO_REGION),
        geometry_to_text(CAPTION_REGION),
        str(template_image),
    )
    return record.id


@pytest.fixture
def settings(tmp_path: Path) -> PipelineSettings:
    return PipelineSettings(output_dir=tmp_path / "data" / "generated_images")
