from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Geometry:
    """Axis-aligned rectangle in the template's native pixel space."""

    x: float
    y: float
    width: float
    height: float

    def is_valid(self) -> bool:
        """True when the region covers at least one whole pixel on each axis."""
        width, height = self.box_size()
        return width >= 1 and height >= 1

    def box_size(self) -> tuple[int, int]:
        return int(self.width), int(self.height)

    def origin(self) -> tuple[int, int]:
        return int(self.x), int(self.y)

    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0


@dataclass(slots=True)
class TemplateRecord:
    """Row of the template store, geometry still in its stored text form."""

    id: int
    name: str
    crop_photo: str
    crop_number: str
    template_img: str

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "crop_photo": self.crop_photo,
            "crop_number": self.crop_number,
            "template_img": self.template_img,
        }


@dataclass(frozen=True, slots=True)
class TemplateDefinition:
    id: int
    name: str
    photo_region: Geometry
    caption_region: Geometry | None
    template_image_path: Path


@dataclass(frozen=True, slots=True)
class SourceImageEntry:
    path: Path
    stem: str
    index: int


class RunState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    ENUMERATING = "enumerating"
    PROCESSING = "processing"
    ARCHIVING = "archiving"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class ItemFailure:
    source: Path
    reason: str


@dataclass(slots=True)
class ItemWarning:
    source: Path
    message: str


@dataclass(slots=True)
class BatchRun:
    template_id: int
    folder: Path
    state: RunState = RunState.IDLE
    total: int = 0
    completed: int = 0
    outputs: list[Path] = field(default_factory=list)
    failures: list[ItemFailure] = field(default_factory=list)
    warnings: list[ItemWarning] = field(default_factory=list)
    archive_path: Path | None = None
    error: str | None = None

    @property
    def progress(self) -> float:
        if self.total <= 0:
            return 0.0
        return min(1.0, self.completed / float(self.total))

    @property
    def succeeded(self) -> int:
        return len(self.outputs)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def to_dict(self) -> dict[str, object]:
        return {
            "template_id": self.template_id,
            "folder": str(self.folder),
            "state": self.state.value,
            "total": self.total,
            "completed": self.completed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "outputs": [str(p) for p in self.outputs],
            "failures": [{"source": str(f.source), "reason": f.reason} for f in self.failures],
            "warnings": [{"source": str(w.source), "message": w.message} for w in self.warnings],
            "archive_path": str(self.archive_path) if self.archive_path else None,
            "error": self.error,
        }
