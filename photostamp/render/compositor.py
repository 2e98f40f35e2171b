from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageDraw

from photostamp.constants import CAPTION_PREFIX, DEFAULT_CAPTION_COLOR
from photostamp.errors import InvalidRegionError
from photostamp.models import Geometry
from photostamp.render.typography import fit_font, text_bbox

LOGGER = logging.getLogger(__name__)

CAPTION_HEIGHT_RATIO = 0.6


def caption_text(number: str) -> str:
    return f"{CAPTION_PREFIX} {number}"


def centering_offset(region_size: int, source_size: int) -> int:
    return max(0, (region_size - source_size) // 2)


def placement_point(region: Geometry, source_size: tuple[int, int]) -> tuple[int, int]:
    region_width, region_height = region.box_size()
    origin_x, origin_y = region.origin()
    return (
        origin_x + centering_offset(region_width, source_size[0]),
        origin_y + centering_offset(region_height, source_size[1]),
    )


def compose(template: Image.Image, source: Image.Image, photo_region: Geometry) -> Image.Image:
    """Paste ``source`` centered in ``photo_region`` on a copy of ``template``."""
    if not photo_region.is_valid():
        raise InvalidRegionError(
            f"photo region must be at least 1x1 pixels, got {photo_region.width}x{photo_region.height}"
        )
    canvas = template.copy()
    position = placement_point(photo_region, source.size)
    if source.mode == "RGBA":
        canvas.paste(source, position, source)
    else:
        canvas.paste(source, position)
    return canvas


def _draw_caption(
    image: Image.Image,
    region: Geometry,
    text: str,
    font_path: Path | None,
    color: str,
) -> Image.Image:
    scratch = image.copy()
    draw = ImageDraw.Draw(scratch)
    region_width, region_height = region.box_size()
    font = fit_font(
        draw,
        text,
        font_path,
        max_width=region_width,
        max_height=region_height,
        start_size=int(region.height * CAPTION_HEIGHT_RATIO),
    )
    left, top, right, bottom = text_bbox(draw, text, font)
    center_x, center_y = region.center()
    x = center_x - (right - left) / 2.0 - left
    y = center_y - (bottom - top) / 2.0 - top
    draw.text((round(x), round(y)), text, font=font, fill=color)
    return scratch


def render_caption(
    image: Image.Image,
    region: Geometry,
    number: str,
    *,
    font_path: Path | None = None,
    color: str = DEFAULT_CAPTION_COLOR,
) -> tuple[Image.Image, str | None]:
    """Draw ``N° {number}`` centered in ``region``.

    Never raises: on failure the input image is returned untouched together
    with a warning message.
    """
    text = caption_text(number)
    try:
        if not region.is_valid():
            raise InvalidRegionError(f"caption region must be at least 1x1 pixels, got {region.width}x{region.height}")
        return _draw_caption(image, region, text, font_path, color), None
    except Exception as exc:
        message = f"caption {text!r} not rendered: {exc}"
        LOGGER.warning(message)
        return image, message


def compose_with_caption(
    template: Image.Image,
    source: Image.Image,
    photo_region: Geometry,
    caption_region: Geometry | None,
    number: str,
    *,
    font_path: Path | None = None,
    color: str = DEFAULT_CAPTION_COLOR,
) -> tuple[Image.Image, str | None]:
    composite = compose(template, source, photo_region)
    if caption_region is None:
        return composite, None
    return render_caption(composite, caption_region, number, font_path=font_path, color=color)
