from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any

from photostamp.errors import ConfigurationError
from photostamp.models import Geometry, TemplateDefinition, TemplateRecord

GEOMETRY_KEYS = ("x", "y", "width", "height")


def _to_number(value: Any, field: str, key: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field}.{key} must be a number, got: {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{field}.{key} must be a number, got: {value!r}") from exc
    if not math.isfinite(number):
        raise ConfigurationError(f"{field}.{key} must be finite, got: {value!r}")
    return number


def geometry_from_dict(data: dict[str, Any], field: str = "geometry") -> Geometry:
    missing = [key for key in GEOMETRY_KEYS if key not in data]
    if missing:
        raise ConfigurationError(f"{field} is missing keys: {', '.join(missing)}")
    return Geometry(*(_to_number(data[key], field, key) for key in GEOMETRY_KEYS))


def parse_geometry(text: str | None, field: str = "geometry") -> Geometry | None:
    """Parse a stored ``{"x", "y", "width", "height"}`` JSON object.

    An empty or blank string means the region is not configured and yields None.
    """
    if text is None or not str(text).strip():
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"error parsing {field}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{field} is not an object: {text!r}")
    return geometry_from_dict(data, field=field)


def geometry_to_text(geometry: Geometry | None) -> str:
    if geometry is None:
        return ""
    return json.dumps(
        {
            "x": geometry.x,
            "y": geometry.y,
            "width": geometry.width,
            "height": geometry.height,
        }
    )


def load_template_definition(record: TemplateRecord) -> TemplateDefinition:
    photo_region = parse_geometry(record.crop_photo, field="crop_photo")
    if photo_region is None:
        raise ConfigurationError(f"template {record.id} has no photo region")
    if not photo_region.is_valid():
        raise ConfigurationError(
            f"template {record.id} photo region must be at least 1x1 pixels, "
            f"got {photo_region.width}x{photo_region.height}"
        )
    caption_region = parse_geometry(record.crop_number, field="crop_number")
    if caption_region is not None and not caption_region.is_valid():
        raise ConfigurationError(
            f"template {record.id} caption region must be at least 1x1 pixels, "
            f"got {caption_region.width}x{caption_region.height}"
        )
    image_text = (record.template_img or "").strip()
    if not image_text:
        raise ConfigurationError(f"template {record.id} has no template image")
    return TemplateDefinition(
        id=record.id,
        name=record.name,
        photo_region=photo_region,
        caption_region=caption_region,
        template_image_path=Path(image_text),
    )
