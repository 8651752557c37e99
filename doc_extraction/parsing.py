"""Value parsers and text normalization for OCR output."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Mapping

CENTS = Decimal("0.01")

# Sub-patterns shared by every label rule. Each is wrapped in a named "value" group
# by the rule definitions.
# A bare one or two digit integer followed by a word is the next box number
# ("2 Federal income tax withheld", "1a Total ordinary dividends"), not an amount.
_NUMBER = (
    r"\d{1,3}(?:\s?,\s?\d{3})+(?:\.\d+)?"
    r"|\d+\.\d+"
    r"|\d{3,}"
    r"|\d{1,2}(?!\d|[a-z]?\s+[A-Za-z])"
)
AMOUNT = rf"\(\$?\s?(?:{_NUMBER})\)|\$?\s?(?:{_NUMBER})"
TEXT = (
    r"[A-Za-z0-9][A-Za-z0-9 ,.&'/()-]*?"
    r"(?=\s+(?:PAYER|RECIPIENT|Employer|Employee|EIN\b|Street\s+address|City\s+or\s+town|Control\s+number|OMB|Box\b|\d{1,2}[a-z]?\s+[A-Za-z])|\s*$)"
)
EIN = r"\d{2}\s?-?\s?\d{7}(?!\d)"
TIN = r"(?:\d{3}\s?-\s?\d{2}\s?-\s?\d{4}|\d{2}\s?-?\s?\d{7})(?!\d)"

_AMOUNT_SHAPE = re.compile(r"^-?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?$")
_QUOTES = str.maketrans({"‘": "'", "’": "'", "ʼ": "'", "`": "'", "´": "'"})
_WHITESPACE = re.compile(r"\s+")


def normalize_ocr_text(text: str) -> str:
    """Collapse line breaks and whitespace runs, straighten apostrophes."""
    return _WHITESPACE.sub(" ", (text or "").translate(_QUOTES)).strip()


def parse_amount(raw: str) -> Decimal:
    """Parse a currency amount into a cent-precision Decimal.

    Accepts ``$``, thousands separators, stray whitespace and accounting
    parentheses for negatives. Anything containing letters or other garbage
    raises ``ValueError``.
    """
    if raw is None:
        raise ValueError("Amount is missing")
    cleaned = _WHITESPACE.sub("", str(raw)).replace("$", "")
    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1]
    if not _AMOUNT_SHAPE.match(cleaned):
        raise ValueError(f"Not a currency amount: {raw!r}")
    try:
        value = Decimal(cleaned.replace(",", ""))
    except InvalidOperation as exc:
        raise ValueError(f"Not a currency amount: {raw!r}") from exc
    if negative:
        value = -value
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_text(raw: str) -> str:
    value = (raw or "").strip()
    if not value:
        raise ValueError("Empty text value")
    return value


def parse_ein(raw: str) -> str:
    """Normalize an employer identification number to ``XX-XXXXXXX``."""
    digits = re.sub(r"[\s-]", "", raw or "")
    if not re.fullmatch(r"\d{9}", digits):
        raise ValueError(f"Not an EIN: {raw!r}")
    return f"{digits[:2]}-{digits[2:]}"


def parse_tin(raw: str) -> str:
    """Normalize an EIN- or SSN-shaped taxpayer identification number."""
    compact = re.sub(r"\s", "", raw or "")
    digits = compact.replace("-", "")
    if not re.fullmatch(r"\d{9}", digits):
        raise ValueError(f"Not a TIN: {raw!r}")
    if re.fullmatch(r"\d{3}-\d{2}-\d{4}", compact):
        return f"{digits[:3]}-{digits[3:5]}-{digits[5:]}"
    return f"{digits[:2]}-{digits[2:]}"


PARSERS = {
    "amount": parse_amount,
    "text": parse_text,
    "ein": parse_ein,
    "tin": parse_tin,
}

VALUE_PATTERNS = {
    "AMOUNT": AMOUNT,
    "TEXT": TEXT,
    "EIN": EIN,
    "TIN": TIN,
}


def to_json_ready(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert Decimal amounts to floats so the record can go through ``json.dumps``."""
    return {key: float(value) if isinstance(value, Decimal) else value for key, value in record.items()}
