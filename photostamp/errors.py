from __future__ import annotations

from pathlib import Path


class PhotoStampError(Exception):
    """Base class for every error raised by the compositing pipeline."""


class ConfigurationError(PhotoStampError):
    """Template geometry or template raster is missing or malformed."""


class NoInputError(PhotoStampError):
    """The source folder holds no supported image files."""


class DecodeError(PhotoStampError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot decode image {self.path}: {reason}")


class CompositeError(PhotoStampError):
    """Region arithmetic or pixel composition failed."""


class InvalidRegionError(CompositeError, ConfigurationError):
    """A region has non-positive width or height."""


class EncodeWriteError(PhotoStampError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"cannot write output {self.path}: {reason}")


class AllItemsFailedError(PhotoStampError):
    def __init__(self, total: int) -> None:
        self.total = total
        super().__init__(f"all {total} images failed to process")


class ArchiveError(PhotoStampError, OSError):
    """The output archive could not be created or written."""


class StoreUnavailableError(PhotoStampError):
    """The template store could not be opened or queried."""


class TemplateNotFoundError(PhotoStampError):
    def __init__(self, template_id: int) -> None:
        self.template_id = template_id
        super().__init__(f"photo template not found: {template_id}")


class TemplateImageError(ConfigurationError):
    """A template image could not be copied into the application data folder."""
