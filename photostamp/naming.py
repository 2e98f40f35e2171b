from __future__ import annotations

import os
import re

from photostamp.constants import OUTPUT_EXTENSION, OUTPUT_SUFFIX

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1F]')
INVALID_POSIX_FILENAME_CHARS = re.compile(r"[/\x00]")
DIGIT_RUN = re.compile(r"[0-9]+")


def extract_number(base_name: str, fallback_index: int) -> str:
    """Return the first run of ASCII digits in ``base_name``, or the fallback index."""
    match = DIGIT_RUN.search(base_name or "")
    if match:
        return match.group(0)
    return str(fallback_index)


def sanitize_filename(value: str, fallback: str = "output", windows: bool | None = None) -> str:
    """Make ``value`` usable as a file name on the current platform.

    POSIX names are kept as-is apart from ``/`` and NUL; Windows additionally
    loses reserved characters and trailing dots and spaces.
    """
    if windows is None:
        windows = os.name == "nt"
    if not windows:
        text = INVALID_POSIX_FILENAME_CHARS.sub("_", value)
        return text if text.strip() else fallback
    text = INVALID_FILENAME_CHARS.sub("_", value).strip()
    text = text.strip(" .")
    return text or fallback


def build_output_name(stem: str, index: int, used: set[str] | None = None) -> str:
    """Output file name for a source stem, e.g. ``IMG_001_processed.jpg``.

    ``used`` holds the lowercased names already handed out in the current run;
    a taken name gets a ``_2``, ``_3``... counter until it is free.
    """
    base = sanitize_filename(stem, fallback=f"image_{index}")
    name = f"{base}{OUTPUT_SUFFIX}{OUTPUT_EXTENSION}"
    if used is None:
        return name
    count = 1
    while name.lower() in used:
        count += 1
        name = f"{base}_{count}{OUTPUT_SUFFIX}{OUTPUT_EXTENSION}"
    used.add(name.lower())
    return name
