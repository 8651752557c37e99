"""Lightweight schema for 1099-DIV documents extracted from OCR."""

from __future__ import annotations

from typing import ClassVar, Optional

from .base import TaxRecord


class Dividend1099DIV(TaxRecord):
    doc_type: ClassVar[str] = "1099-DIV"

    payer: str
    ordinary_dividends: float
    payer_tin: Optional[str] = None
    qualified_dividends: Optional[float] = None
    total_capital_gain: Optional[float] = None
    federal_tax_withheld: Optional[float] = None
