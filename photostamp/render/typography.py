from __future__ import annotations

import platform
import threading
from functools import lru_cache
from pathlib import Path

from PIL import ImageDraw, ImageFont

MIN_FONT_SIZE = 6


def _system_font_candidates() -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        return [
            Path(r"C:\Windows\Fonts\arialbd.ttf"),
            Path(r"C:\Windows\Fonts\arial.ttf"),
            Path(r"C:\Windows\Fonts\segoeui.ttf"),
        ]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Helvetica.ttc"),
            Path("/Library/Fonts/Arial.ttf"),
            Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
        ]
    return [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf"),
        Path("/usr/share/fonts/opentype/noto/NotoSans-Bold.ttf"),
    ]


@lru_cache(maxsize=64)
def _load_font_cached(font_path: str | None, size: int, _thread_id: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(Path(font_path))
    candidates.extend(_system_font_candidates())
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    # Pillow's bundled font; scalable when FreeType is available
    return ImageFont.load_default(size=size)


def load_font(font_path: Path | None, size: int) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    # font objects are not shared between worker threads
    return _load_font_cached(str(font_path) if font_path else None, max(1, int(size)), threading.get_ident())


def text_bbox(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont) -> tuple[int, int, int, int]:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    return int(left), int(top), int(right), int(bottom)


def text_size(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont) -> tuple[int, int]:
    left, top, right, bottom = text_bbox(draw, text, font)
    return right - left, bottom - top


def fit_font(
    draw: ImageDraw.ImageDraw,
    text: str,
    font_path: Path | None,
    max_width: int,
    max_height: int,
    start_size: int,
) -> ImageFont.ImageFont | ImageFont.FreeTypeFont:
    """Largest font, not above ``start_size``, whose ``text`` fits the box."""
    size = max(MIN_FONT_SIZE, int(start_size))
    font = load_font(font_path, size)
    while size > MIN_FONT_SIZE:
        width, height = text_size(draw, text, font)
        if width <= max_width and height <= max_height:
            break
        size = max(MIN_FONT_SIZE, int(size * 0.9) if size > 20 else size - 1)
        font = load_font(font_path, size)
    return font
