"""Text acquisition: validate the upload, run OCR, classify what goes wrong.

The adapter never retries and never rejects low-confidence text; both are left
to the caller. Backend failures are reclassified through ``BACKEND_ERROR_PATTERNS``,
matched against the backend error message. Revisit the table if the backend
changes its wording or starts reporting structured error codes.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import FrozenSet, Iterable, Optional, Pattern, Tuple

from .backends import OCRBackend
from .config import PDF_MEDIA_TYPES, get_settings
from .errors import ErrorKind, OCRExtractionError
from .models import AcquiredText, Region, UploadedFile

logger = logging.getLogger(__name__)

GENERIC_MEDIA_TYPES = {"", "application/octet-stream", "binary/octet-stream"}

MAGIC_BYTES: Tuple[Tuple[bytes, str], ...] = (
    (b"%PDF", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"II*\x00", "image/tiff"),
    (b"MM\x00*", "image/tiff"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)

BACKEND_ERROR_PATTERNS: Tuple[Tuple[Pattern[str], ErrorKind], ...] = (
    (re.compile(r"traineddata", re.IGNORECASE), ErrorKind.BACKEND_ASSET_LOAD_FAILED),
    (re.compile(r"tessdata", re.IGNORECASE), ErrorKind.BACKEND_ASSET_LOAD_FAILED),
    (
        re.compile(
            r"failed\s+(?:to\s+)?(?:fetch|load|retriev|download)\w*\s+.*?(?:language|lang\b|model)",
            re.IGNORECASE,
        ),
        ErrorKind.BACKEND_ASSET_LOAD_FAILED,
    ),
    (re.compile(r"error\s+opening\s+data\s+file", re.IGNORECASE), ErrorKind.BACKEND_ASSET_LOAD_FAILED),
    (re.compile(r"couldn'?t\s+load\s+any\s+languages", re.IGNORECASE), ErrorKind.BACKEND_ASSET_LOAD_FAILED),
    (re.compile(r"tesseract\s+is\s+not\s+installed", re.IGNORECASE), ErrorKind.BACKEND_ASSET_LOAD_FAILED),
)


def sniff_media_type(content: bytes) -> Optional[str]:
    """Guess a media type from the leading magic bytes."""
    header = content[:16]
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"
    for signature, media_type in MAGIC_BYTES:
        if header.startswith(signature):
            return media_type
    return None


def resolve_media_type(file: UploadedFile) -> str:
    """Normalize the declared media type, sniffing the bytes only when it says nothing."""
    declared = (file.media_type or "").split(";", 1)[0].strip().lower()
    if declared not in GENERIC_MEDIA_TYPES:
        return declared
    return sniff_media_type(file.content) or declared


def classify_backend_message(
    message: str,
    patterns: Iterable[Tuple[Pattern[str], ErrorKind]] = BACKEND_ERROR_PATTERNS,
) -> ErrorKind:
    for pattern, kind in patterns:
        if pattern.search(message):
            return kind
    return ErrorKind.BACKEND_FAILED


def classify_backend_error(exc: BaseException) -> OCRExtractionError:
    """Map a raw backend exception onto the error taxonomy."""
    detail = str(exc).strip() or type(exc).__name__
    kind = classify_backend_message(detail)
    if kind is ErrorKind.BACKEND_ASSET_LOAD_FAILED:
        return OCRExtractionError(kind)
    return OCRExtractionError(kind, f"Failed to extract text from image: {detail}")


class TextAcquisitionAdapter:
    """Validates an upload and returns the OCR backend's text and confidence."""

    def __init__(
        self,
        backend: OCRBackend,
        *,
        supported_media_types: Iterable[str] | None = None,
    ) -> None:
        self.backend = backend
        if supported_media_types is None:
            self.supported_media_types: FrozenSet[str] = get_settings()["supported_media_types"]
        else:
            self.supported_media_types = frozenset(t.lower() for t in supported_media_types)

    def check_media_type(self, file: UploadedFile) -> str:
        media_type = resolve_media_type(file)
        if media_type in PDF_MEDIA_TYPES:
            logger.info("Rejected PDF upload %r before OCR", file.filename)
            raise OCRExtractionError(ErrorKind.PDF_NOT_SUPPORTED)
        if media_type not in self.supported_media_types:
            logger.info("Rejected upload %r with media type %r", file.filename, media_type or "<none>")
            raise OCRExtractionError(
                ErrorKind.UNSUPPORTED_FILE_TYPE,
                f"Unsupported file type {media_type or 'unknown'}. Please upload a JPG or PNG image.",
            )
        return media_type

    async def acquire_text(self, file: UploadedFile, *, region: Optional[Region] = None) -> AcquiredText:
        self.check_media_type(file)
        try:
            acquired = await self.backend.recognize(file.content, region=region)
        except OCRExtractionError:
            raise
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            logger.warning("OCR backend cancelled recognition of %r", file.filename)
            raise OCRExtractionError(
                ErrorKind.BACKEND_FAILED,
                "Failed to extract text from image: OCR request was cancelled",
            ) from exc
        except Exception as exc:
            error = classify_backend_error(exc)
            logger.warning("OCR failed for %r (%s): %s", file.filename, error.kind.code, exc)
            raise error from exc

        logger.info(
            "OCR finished for %r: %d characters, confidence %.1f",
            file.filename,
            len(acquired.text),
            acquired.confidence,
        )
        return acquired


async def acquire_text(
    file: UploadedFile,
    backend: OCRBackend,
    *,
    region: Optional[Region] = None,
) -> AcquiredText:
    """Convenience wrapper building a fresh adapter for one call."""
    return await TextAcquisitionAdapter(backend).acquire_text(file, region=region)
