import asyncio
import json
import logging
import re

import pytest

from conftest import INT_1099_TEXT, W2_TEXT, FakeBackend
from doc_extraction.acquisition import TextAcquisitionAdapter
from doc_extraction.errors import ErrorKind, OCRExtractionError
from doc_extraction.extractor import (
    DocumentFieldExtractor,
    extract_1099_div_data,
    extract_1099_int_data,
    extract_document,
    extract_w2_data,
)
from doc_extraction import extractor as extractor_module
from doc_extraction.models import Region
from doc_extraction.patterns import BUILTIN_SPECS, INT_1099_SPEC
from doc_extraction.registry import DocumentTypeRegistry


@pytest.mark.asyncio
async def test_extract_w2_data(png_upload):
    backend = FakeBackend(text=W2_TEXT, confidence=91)

    result = await extract_w2_data(png_upload, backend=backend)

    assert "ACME CORPORATION" in result["employer"]
    assert result["ein"] == "12-3456789"
    assert result["wages"] == 56123.45
    assert result["federal_tax_withheld"] == 6789.10
    assert result["medicare_tax_withheld"] == 813.79


@pytest.mark.asyncio
async def test_w2_fields_not_found_is_actionable(png_upload):
    backend = FakeBackend(text="random unrelated text", confidence=40)

    with pytest.raises(OCRExtractionError) as exc_info:
        await extract_w2_data(png_upload, backend=backend)

    err = exc_info.value
    assert err.kind is ErrorKind.FIELDS_NOT_FOUND
    assert re.search(r"could not find W-2 fields", err.message, re.IGNORECASE)
    assert err.document_type == "W2"
    assert err.missing_fields == ["employer", "ein", "wages", "federal_tax_withheld"]


@pytest.mark.asyncio
async def test_partial_w2_names_only_the_missing_fields(png_upload):
    text = "Employer's name ACME CORPORATION EIN 12-3456789 Wages, tips, other compensation 1,000.00"
    backend = FakeBackend(text=text)

    with pytest.raises(OCRExtractionError) as exc_info:
        await extract_w2_data(png_upload, backend=backend)

    assert exc_info.value.missing_fields == ["federal_tax_withheld"]
    assert "federal_tax_withheld" in exc_info.value.message


@pytest.mark.asyncio
async def test_extract_1099_int_data(png_upload):
    backend = FakeBackend(text=INT_1099_TEXT, confidence=88)

    result = await extract_1099_int_data(png_upload, backend=backend)

    assert result == {"payer": "FIRST NATIONAL BANK", "amount": 245.18}


@pytest.mark.asyncio
async def test_1099_int_missing_amount(png_upload):
    backend = FakeBackend(text="PAYER'S name FIRST NATIONAL BANK")

    with pytest.raises(OCRExtractionError) as exc_info:
        await extract_1099_int_data(png_upload, backend=backend)

    assert exc_info.value.missing_fields == ["amount"]
    assert "1099-INT" in exc_info.value.message


@pytest.mark.asyncio
async def test_extract_1099_div_data(png_upload):
    text = "PAYER'S name ACME FUNDS INC 1a Total ordinary dividends 1,500.25 1b Qualified dividends 1,200.00"
    backend = FakeBackend(text=text)

    result = await extract_1099_div_data(png_upload, backend=backend)

    assert result == {
        "payer": "ACME FUNDS INC",
        "ordinary_dividends": 1500.25,
        "qualified_dividends": 1200.00,
    }


@pytest.mark.asyncio
async def test_acquisition_errors_propagate_unchanged(pdf_upload):
    backend = FakeBackend(text=W2_TEXT)

    with pytest.raises(OCRExtractionError) as exc_info:
        await extract_w2_data(pdf_upload, backend=backend)

    assert exc_info.value.kind is ErrorKind.PDF_NOT_SUPPORTED
    assert backend.calls == []


@pytest.mark.asyncio
async def test_unknown_document_type_fails_before_ocr(png_upload):
    backend = FakeBackend(text=W2_TEXT)

    with pytest.raises(ValueError, match="Unsupported document type"):
        await extract_document("1099-MISC", png_upload, backend=backend)

    assert backend.calls == []


@pytest.mark.asyncio
async def test_document_type_aliases_resolve(png_upload):
    backend = FakeBackend(text=INT_1099_TEXT)

    result = await extract_document("form 1099 int", png_upload, backend=backend)

    assert result["amount"] == 245.18


@pytest.mark.asyncio
async def test_region_reaches_the_backend(png_upload):
    backend = FakeBackend(text=INT_1099_TEXT)
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(backend))
    region = Region.parse("0, 100, 800, 200")

    await extractor.extract("1099-INT", png_upload, region=region)

    assert backend.calls[0]["region"] == Region(left=0, top=100, width=800, height=200)


@pytest.mark.asyncio
async def test_same_text_gives_same_record(png_upload):
    backend = FakeBackend(text=W2_TEXT)
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(backend))

    first, second = await asyncio.gather(
        extractor.extract("W-2", png_upload),
        extractor.extract("W-2", png_upload),
    )

    assert first == second
    assert len(backend.calls) == 2


@pytest.mark.asyncio
async def test_low_confidence_is_logged_not_rejected(png_upload, caplog):
    backend = FakeBackend(text=INT_1099_TEXT, confidence=22.0)
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(backend), low_confidence_threshold=50)

    with caplog.at_level(logging.WARNING, logger="doc_extraction.extractor"):
        result = await extractor.extract("1099-INT", png_upload)

    assert result["payer"] == "FIRST NATIONAL BANK"
    assert "Low OCR confidence 22.0" in caplog.text


@pytest.mark.asyncio
async def test_missing_optional_fields_are_logged(png_upload, caplog):
    backend = FakeBackend(text=INT_1099_TEXT)

    with caplog.at_level(logging.WARNING, logger="doc_extraction.extractor"):
        await extract_1099_int_data(png_upload, backend=backend)

    assert "Missing field: 1099-INT.payer_tin" in caplog.text
    assert "Missing field: 1099-INT.tax_exempt_interest" in caplog.text


def test_low_confidence_threshold_from_environment(monkeypatch):
    monkeypatch.setenv("OCR_LOW_CONFIDENCE_THRESHOLD", "75")
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(FakeBackend()))
    assert extractor.low_confidence_threshold == 75.0


@pytest.mark.asyncio
async def test_extracted_record_is_json_serializable(png_upload):
    backend = FakeBackend(text=W2_TEXT)

    record = await extract_w2_data(png_upload, backend=backend)

    assert json.loads(json.dumps(record)) == record
    assert record["wages"] == 56123.45


@pytest.mark.asyncio
async def test_collapsed_columns_fail_instead_of_shifting_amounts(png_upload):
    text = """Employer's name ACME CORPORATION Employer identification number 12-3456789
    1 Wages, tips, other compensation 2 Federal income tax withheld
    56,123.45 6,789.10"""
    backend = FakeBackend(text=text)

    with pytest.raises(OCRExtractionError) as exc_info:
        await extract_w2_data(png_upload, backend=backend)

    assert exc_info.value.kind is ErrorKind.FIELDS_NOT_FOUND
    assert exc_info.value.missing_fields == ["wages"]


@pytest.mark.asyncio
async def test_builtin_extractors_ignore_spec_dir_setting(png_upload, monkeypatch):
    monkeypatch.setenv("DOC_SPEC_DIR", "/nonexistent/specs")
    backend = FakeBackend(text=W2_TEXT)

    record = await extract_w2_data(png_upload, backend=backend)

    assert record["ein"] == "12-3456789"
    with pytest.raises(FileNotFoundError):
        await extract_document("W-2", png_upload, backend=backend)


@pytest.mark.asyncio
async def test_registry_is_built_only_for_name_lookups(png_upload, monkeypatch):
    built = []

    def counting_registry():
        built.append(True)
        return DocumentTypeRegistry(BUILTIN_SPECS)

    monkeypatch.setattr(extractor_module, "build_default_registry", counting_registry)
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(FakeBackend(text=INT_1099_TEXT)))

    await extractor.extract(INT_1099_SPEC, png_upload)
    assert built == []

    await extractor.extract("1099-INT", png_upload)
    await extractor.extract("INT", png_upload)
    assert built == [True]
