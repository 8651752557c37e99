"""Value types passed between acquisition, the OCR backend, and the extractor."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Dict, Tuple, Union

ParsedValue = Union[str, Decimal]
# Amounts leave the engine as cent-rounded floats so records go straight to json.dumps.
ExtractedRecord = Dict[str, Union[str, float]]


@dataclass(frozen=True)
class UploadedFile:
    """Raw upload as handed over by the upload layer."""

    content: bytes
    media_type: str
    filename: str = ""

    @classmethod
    def from_path(cls, path: str | Path, media_type: str | None = None) -> "UploadedFile":
        p = Path(path)
        guessed = media_type or mimetypes.guess_type(p.name)[0] or ""
        return cls(content=p.read_bytes(), media_type=guessed, filename=p.name)


@dataclass(frozen=True)
class Region:
    """Rectangle (in pixels) to restrict OCR to part of an image."""

    left: int
    top: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.left < 0 or self.top < 0:
            raise ValueError("Region origin must be non-negative")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("Region width and height must be positive")

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.left, self.top, self.left + self.width, self.top + self.height)

    @classmethod
    def parse(cls, raw: str) -> "Region":
        """Build a region from ``"left,top,width,height"``."""
        parts = [p.strip() for p in raw.split(",")]
        if len(parts) != 4:
            raise ValueError(f"Region must have four comma-separated integers: {raw!r}")
        try:
            left, top, width, height = (int(p) for p in parts)
        except ValueError as exc:
            raise ValueError(f"Region must have four comma-separated integers: {raw!r}") from exc
        return cls(left=left, top=top, width=width, height=height)


@dataclass(frozen=True)
class AcquiredText:
    """Recognized text plus the backend's 0-100 confidence score."""

    text: str
    confidence: float
