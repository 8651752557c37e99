"""Lightweight schema for 1099-NEC documents extracted from OCR."""

from __future__ import annotations

from typing import ClassVar, Optional

from .base import TaxRecord


class Nonemployee1099NEC(TaxRecord):
    doc_type: ClassVar[str] = "1099-NEC"

    payer: str
    nonemployee_compensation: float
    payer_tin: Optional[str] = None
    federal_tax_withheld: Optional[float] = None
