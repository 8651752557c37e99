"""Environment-driven settings for OCR acquisition and field extraction."""

from __future__ import annotations

import os
from typing import Any, Dict, FrozenSet

DEFAULT_IMAGE_MEDIA_TYPES = frozenset(
    {
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/pjpeg",
        "image/gif",
        "image/bmp",
        "image/tiff",
        "image/webp",
    }
)
PDF_MEDIA_TYPES = frozenset({"application/pdf", "application/x-pdf"})


def _parse_media_types(raw: str | None) -> FrozenSet[str]:
    if not raw:
        return DEFAULT_IMAGE_MEDIA_TYPES
    types = {item.strip().lower() for item in raw.split(",") if item.strip()}
    return frozenset(types) or DEFAULT_IMAGE_MEDIA_TYPES


def get_settings() -> Dict[str, Any]:
    """Read settings fresh from the environment on every call."""
    timeout = float(os.getenv("OCR_TIMEOUT_SECONDS", "0") or 0)
    return {
        "ocr_language": os.getenv("OCR_LANGUAGE", "eng"),
        "tesseract_cmd": os.getenv("TESSERACT_CMD") or None,
        "tesseract_config": os.getenv("OCR_TESSERACT_CONFIG", ""),
        "ocr_timeout_seconds": timeout if timeout > 0 else None,
        "low_confidence_threshold": float(os.getenv("OCR_LOW_CONFIDENCE_THRESHOLD", "60")),
        "supported_media_types": _parse_media_types(os.getenv("OCR_SUPPORTED_MEDIA_TYPES")),
        "spec_dir": os.getenv("DOC_SPEC_DIR") or None,
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }
