"""Shared fixtures: a scripted OCR backend, sample uploads and OCR transcripts."""

import pytest

from doc_extraction.loader import reload_caches
from doc_extraction.models import AcquiredText, UploadedFile

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF_BYTES = b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n"

W2_TEXT = """Employer's name ACME CORPORATION Employer identification number 12-3456789
      1 Wages, tips, other compensation 56,123.45
      2 Federal income tax withheld 6,789.10
      3 Social security wages 56,123.45
      4 Social security tax withheld 3,479.65
      5 Medicare wages and tips 56,123.45
      6 Medicare tax withheld 813.79"""

INT_1099_TEXT = """1099-INT PAYER'S name FIRST NATIONAL BANK
      1 Interest income 245.18"""

ENV_VARS = (
    "OCR_LANGUAGE",
    "TESSERACT_CMD",
    "OCR_TESSERACT_CONFIG",
    "OCR_TIMEOUT_SECONDS",
    "OCR_LOW_CONFIDENCE_THRESHOLD",
    "OCR_SUPPORTED_MEDIA_TYPES",
    "DOC_SPEC_DIR",
    "LOG_LEVEL",
)


class FakeBackend:
    """Returns a canned transcript (or raises) and records every call."""

    def __init__(self, text="", confidence=90.0, error=None):
        self.text = text
        self.confidence = confidence
        self.error = error
        self.calls = []

    async def recognize(self, image, *, region=None):
        self.calls.append({"image": image, "region": region})
        if self.error is not None:
            raise self.error
        return AcquiredText(text=self.text, confidence=self.confidence)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reload_caches()
    yield
    reload_caches()


@pytest.fixture
def png_upload():
    return UploadedFile(content=PNG_BYTES, media_type="image/png", filename="scan.png")


@pytest.fixture
def pdf_upload():
    return UploadedFile(content=PDF_BYTES, media_type="application/pdf", filename="w2.pdf")
