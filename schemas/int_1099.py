"""Lightweight schema for 1099-INT documents extracted from OCR."""

from __future__ import annotations

from typing import ClassVar, Optional

from .base import TaxRecord


class Interest1099INT(TaxRecord):
    doc_type: ClassVar[str] = "1099-INT"

    payer: str
    amount: float
    payer_tin: Optional[str] = None
    early_withdrawal_penalty: Optional[float] = None
    us_savings_bond_interest: Optional[float] = None
    federal_tax_withheld: Optional[float] = None
    tax_exempt_interest: Optional[float] = None
