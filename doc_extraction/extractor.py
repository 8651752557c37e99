"""Generic field extraction engine and the per-form extractors built on it."""

from __future__ import annotations

import logging
from typing import List, Optional

from .acquisition import TextAcquisitionAdapter
from .backends import OCRBackend
from .config import get_settings
from .errors import ErrorKind, OCRExtractionError
from .field_rules import DocumentTypeSpec, FieldRule
from .models import ExtractedRecord, ParsedValue, Region, UploadedFile
from .parsing import normalize_ocr_text, to_json_ready
from .patterns import DIV_1099_SPEC, INT_1099_SPEC, W2_SPEC
from .registry import DocumentTypeRegistry, build_default_registry

logger = logging.getLogger(__name__)


def match_rule(rule: FieldRule, text: str) -> Optional[ParsedValue]:
    """Return the first parsable value for ``rule`` in ``text``, or None.

    Patterns are tried in order; within a pattern the first match in document
    order is used. A match whose value does not parse falls through to the next
    pattern.
    """
    for pattern in rule.label_patterns:
        match = pattern.search(text)
        if not match:
            continue
        raw = match.group("value")
        try:
            return rule.parser(raw)
        except ValueError as exc:
            logger.debug("Field %s: rejected value %r (%s)", rule.field_name, raw, exc)
    return None


def apply_spec(spec: DocumentTypeSpec, text: str) -> ExtractedRecord:
    """Run every rule of ``spec`` over ``text``; fields that are not found are left out.

    Amounts are parsed as cent-precision Decimals and handed back as floats, so the
    record is plain JSON.
    """
    normalized = normalize_ocr_text(text)
    parsed = {}
    for rule in spec.rules:
        value = match_rule(rule, normalized)
        if value is not None:
            parsed[rule.field_name] = value
    return to_json_ready(parsed)


def missing_required_fields(spec: DocumentTypeSpec, record: ExtractedRecord) -> List[str]:
    return [name for name in spec.required_fields if record.get(name) in (None, "")]


def fields_not_found_error(spec: DocumentTypeSpec, missing: List[str]) -> OCRExtractionError:
    return OCRExtractionError(
        ErrorKind.FIELDS_NOT_FOUND,
        f"Could not find {spec.display_name} fields ({', '.join(missing)}). "
        "Try a clearer scan or enter the values manually.",
        document_type=spec.document_type,
        missing_fields=missing,
    )


class DocumentFieldExtractor:
    """Acquires OCR text for an upload and extracts the fields of one document type."""

    def __init__(
        self,
        adapter: TextAcquisitionAdapter,
        registry: DocumentTypeRegistry | None = None,
        *,
        low_confidence_threshold: float | None = None,
    ) -> None:
        self.adapter = adapter
        self._registry = registry
        if low_confidence_threshold is None:
            low_confidence_threshold = get_settings()["low_confidence_threshold"]
        self.low_confidence_threshold = low_confidence_threshold

    @property
    def registry(self) -> DocumentTypeRegistry:
        """Default registry, built on first name lookup."""
        if self._registry is None:
            self._registry = build_default_registry()
        return self._registry

    def resolve(self, document_type: str | DocumentTypeSpec) -> DocumentTypeSpec:
        if isinstance(document_type, DocumentTypeSpec):
            return document_type
        return self.registry.get(document_type)

    async def extract(
        self,
        document_type: str | DocumentTypeSpec,
        file: UploadedFile,
        *,
        region: Optional[Region] = None,
    ) -> ExtractedRecord:
        spec = self.resolve(document_type)
        acquired = await self.adapter.acquire_text(file, region=region)
        if acquired.confidence < self.low_confidence_threshold:
            logger.warning(
                "Low OCR confidence %.1f for %s upload %r",
                acquired.confidence,
                spec.display_name,
                file.filename,
            )

        record = apply_spec(spec, acquired.text)
        for name in spec.field_names:
            if name not in record:
                logger.warning("Missing field: %s.%s", spec.document_type, name)

        missing = missing_required_fields(spec, record)
        if missing:
            raise fields_not_found_error(spec, missing)
        logger.info(
            "Extracted %d/%d %s fields from %r",
            len(record),
            len(spec.rules),
            spec.display_name,
            file.filename,
        )
        return record


async def extract_document(
    document_type: str | DocumentTypeSpec,
    file: UploadedFile,
    *,
    backend: OCRBackend,
    region: Optional[Region] = None,
) -> ExtractedRecord:
    """Run one extraction with a fresh adapter around ``backend``."""
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(backend))
    return await extractor.extract(document_type, file, region=region)


async def extract_w2_data(file: UploadedFile, *, backend: OCRBackend) -> ExtractedRecord:
    return await extract_document(W2_SPEC, file, backend=backend)


async def extract_1099_int_data(file: UploadedFile, *, backend: OCRBackend) -> ExtractedRecord:
    return await extract_document(INT_1099_SPEC, file, backend=backend)


async def extract_1099_div_data(file: UploadedFile, *, backend: OCRBackend) -> ExtractedRecord:
    return await extract_document(DIV_1099_SPEC, file, backend=backend)
