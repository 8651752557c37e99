"""OCR backends: the protocol the adapter depends on and a Tesseract implementation."""

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from typing import Any, Dict, List, Mapping, Optional, Protocol, Tuple

import pytesseract
from PIL import Image

from .models import AcquiredText, Region

logger = logging.getLogger(__name__)


class OCRBackend(Protocol):
    """Anything that turns image bytes into text plus a confidence score."""

    async def recognize(self, image: bytes, *, region: Optional[Region] = None) -> AcquiredText: ...


def assemble_words(data: Mapping[str, List[Any]]) -> Tuple[str, float]:
    """Rebuild line-broken text and mean word confidence from an ``image_to_data`` table."""
    lines: Dict[Tuple[Any, ...], List[str]] = {}
    confidences: List[float] = []
    words = data.get("text") or []
    for idx, raw_word in enumerate(words):
        word = (raw_word or "").strip()
        if not word:
            continue
        conf = float(data["conf"][idx])
        if conf < 0:
            continue
        key = (
            data["page_num"][idx],
            data["block_num"][idx],
            data["par_num"][idx],
            data["line_num"][idx],
        )
        lines.setdefault(key, []).append(word)
        confidences.append(conf)

    text = "\n".join(" ".join(line) for line in lines.values())
    confidence = round(sum(confidences) / len(confidences), 2) if confidences else 0.0
    return text, confidence


def configure_tesseract(settings: Mapping[str, Any]) -> None:
    """Point pytesseract at ``settings["tesseract_cmd"]`` when one is configured.

    pytesseract keeps the binary path in module state, so this applies to the
    whole process. Call it once at startup.
    """
    cmd = settings.get("tesseract_cmd")
    if cmd:
        pytesseract.pytesseract.tesseract_cmd = cmd


class TesseractBackend:
    """Runs Tesseract through pytesseract in a worker thread."""

    def __init__(
        self,
        language: str = "eng",
        *,
        config: str = "",
        timeout: float | None = None,
    ) -> None:
        self.language = language
        self.config = config
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "TesseractBackend":
        return cls(
            settings.get("ocr_language") or "eng",
            config=settings.get("tesseract_config") or "",
            timeout=settings.get("ocr_timeout_seconds"),
        )

    async def recognize(self, image: bytes, *, region: Optional[Region] = None) -> AcquiredText:
        text, confidence = await asyncio.to_thread(self._recognize_sync, image, region)
        return AcquiredText(text=text, confidence=confidence)

    def _recognize_sync(self, image: bytes, region: Optional[Region]) -> Tuple[str, float]:
        with Image.open(BytesIO(image)) as img:
            target = img.crop(region.box) if region else img
            logger.debug("Running tesseract (lang=%s) on %sx%s image", self.language, *target.size)
            data = pytesseract.image_to_data(
                target,
                lang=self.language,
                config=self.config,
                output_type=pytesseract.Output.DICT,
                timeout=self.timeout or 0,
            )
        return assemble_words(data)
