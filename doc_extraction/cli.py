"""CLI for extracting tax document fields from a scanned image."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from doc_extraction.acquisition import TextAcquisitionAdapter
from doc_extraction.backends import TesseractBackend, configure_tesseract
from doc_extraction.config import get_settings
from doc_extraction.errors import OCRExtractionError
from doc_extraction.extractor import DocumentFieldExtractor
from doc_extraction.models import Region, UploadedFile
from doc_extraction.registry import build_default_registry
from schemas import model_for

EXIT_USAGE = 1
EXIT_EXTRACTION_FAILED = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract structured fields from a scanned tax document image.")
    parser.add_argument("--doc-type", required=True, help="Document type, e.g. W-2, 1099-INT, 1099-DIV.")
    parser.add_argument("--input", required=True, help="Path to the image to OCR.")
    parser.add_argument("--media-type", default=None, help="Override the media type guessed from the file name.")
    parser.add_argument("--lang", default=None, help="Tesseract language (defaults to OCR_LANGUAGE or 'eng').")
    parser.add_argument("--region", default=None, help="Only OCR this rectangle: left,top,width,height.")
    parser.add_argument("--typed", action="store_true", help="Emit the typed camelCase record where one exists.")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, settings: Dict[str, Any]) -> Dict[str, Any]:
    backend = TesseractBackend.from_settings({**settings, "ocr_language": args.lang or settings["ocr_language"]})
    registry = build_default_registry()
    spec = registry.get(args.doc_type)
    extractor = DocumentFieldExtractor(TextAcquisitionAdapter(backend), registry)
    upload = UploadedFile.from_path(args.input, media_type=args.media_type)
    region = Region.parse(args.region) if args.region else None

    record = await extractor.extract(spec, upload, region=region)
    model = model_for(spec.document_type) if args.typed else None
    if model is not None:
        return model.from_record(record).to_document_dict()
    return record


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings["log_level"])
    configure_tesseract(settings)

    if not Path(args.input).exists():
        print(f"Input file not found: {args.input}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    try:
        result = asyncio.run(run(args, settings))
    except OCRExtractionError as exc:
        print(json.dumps({"kind": exc.kind.code, "message": exc.message}), file=sys.stderr)
        sys.exit(EXIT_EXTRACTION_FAILED)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(EXIT_USAGE)

    print(json.dumps(result, indent=2))


if __name__ == "__main__":
    main()
