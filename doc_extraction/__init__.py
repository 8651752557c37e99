"""OCR field extraction for scanned tax documents."""

from .acquisition import TextAcquisitionAdapter, acquire_text
from .backends import OCRBackend, TesseractBackend, configure_tesseract
from .errors import ErrorKind, OCRExtractionError
from .extractor import (
    DocumentFieldExtractor,
    apply_spec,
    extract_1099_div_data,
    extract_1099_int_data,
    extract_document,
    extract_w2_data,
)
from .field_rules import DocumentTypeSpec, FieldRule
from .models import AcquiredText, ExtractedRecord, Region, UploadedFile
from .parsing import parse_amount, to_json_ready
from .patterns import DIV_1099_SPEC, INT_1099_SPEC, W2_SPEC
from .registry import DocumentTypeRegistry, build_default_registry

__all__ = [
    "AcquiredText",
    "DIV_1099_SPEC",
    "DocumentFieldExtractor",
    "DocumentTypeRegistry",
    "DocumentTypeSpec",
    "ErrorKind",
    "ExtractedRecord",
    "FieldRule",
    "INT_1099_SPEC",
    "OCRBackend",
    "OCRExtractionError",
    "Region",
    "TesseractBackend",
    "TextAcquisitionAdapter",
    "UploadedFile",
    "W2_SPEC",
    "acquire_text",
    "apply_spec",
    "build_default_registry",
    "configure_tesseract",
    "extract_1099_div_data",
    "extract_1099_int_data",
    "extract_document",
    "extract_w2_data",
    "parse_amount",
    "to_json_ready",
]
