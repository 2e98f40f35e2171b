from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageOps

from photostamp.errors import DecodeError

_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in _ALPHA_MODES or "transparency" in image.info


def _decode(path: Path) -> Image.Image:
    with Image.open(path) as image:
        image.load()
        target_mode = "RGBA" if _has_alpha(image) else "RGB"
        return ImageOps.exif_transpose(image).convert(target_mode).copy()


def decode_image(path: Path) -> Image.Image:
    """Decode ``path`` into a detached RGB or RGBA raster."""
    try:
        return _decode(path)
    except FileNotFoundError as exc:
        raise DecodeError(path, "file not found") from exc
    except Image.DecompressionBombError as exc:
        raise DecodeError(path, str(exc)) from exc
    except (OSError, ValueError, SyntaxError) as exc:
        raise DecodeError(path, str(exc) or type(exc).__name__) from exc
