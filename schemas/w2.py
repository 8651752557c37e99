"""Lightweight schema for W-2 wage statements extracted from OCR."""

from __future__ import annotations

from typing import ClassVar, Optional

from .base import TaxRecord


class W2Income(TaxRecord):
    doc_type: ClassVar[str] = "W2"

    employer: str
    ein: str
    wages: float
    federal_tax_withheld: float
    social_security_wages: Optional[float] = None
    social_security_tax_withheld: Optional[float] = None
    medicare_wages: Optional[float] = None
    medicare_tax_withheld: Optional[float] = None
