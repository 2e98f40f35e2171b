from __future__ import annotations

from PIL import Image

from photostamp.errors import CompositeError


def _check_box(target_width: int, target_height: int) -> None:
    if target_width <= 0 or target_height <= 0:
        raise CompositeError(f"target box must be positive, got {target_width}x{target_height}")


def fit_size(size: tuple[int, int], target_width: int, target_height: int) -> tuple[int, int]:
    """Largest size with the aspect ratio of ``size`` that fits the target box."""
    _check_box(target_width, target_height)
    width, height = size
    if width <= 0 or height <= 0:
        raise CompositeError(f"source image has empty size {width}x{height}")
    scale = min(target_width / float(width), target_height / float(height))
    new_width = min(target_width, max(1, int(round(width * scale))))
    new_height = min(target_height, max(1, int(round(height * scale))))
    return new_width, new_height


def resize_to_fit(image: Image.Image, target_width: int, target_height: int) -> Image.Image:
    new_size = fit_size(image.size, target_width, target_height)
    if new_size == image.size:
        return image.copy()
    return image.resize(new_size, Image.Resampling.LANCZOS)


def resize_exact(image: Image.Image, target_width: int, target_height: int) -> Image.Image:
    _check_box(target_width, target_height)
    if image.size == (target_width, target_height):
        return image.copy()
    return image.resize((target_width, target_height), Image.Resampling.LANCZOS)
