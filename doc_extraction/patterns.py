"""Built-in field pattern library for W-2, 1099-INT and 1099-DIV.

Rules are applied to whitespace-collapsed OCR text, so labels only need to
tolerate ``\\s+`` between words; values may sit anywhere after the label.
Within a rule, patterns run most specific first and the ``Box N`` variants act
as fallbacks for forms whose label text did not survive OCR.
"""

from __future__ import annotations

import re

from .field_rules import DocumentTypeSpec, FieldRule, label_pattern, rule
from .parsing import EIN, TEXT, TIN, parse_amount, parse_ein, parse_text, parse_tin

EMPLOYER_NAME = r"Employer'?s?\s+name(?:,?\s*address,?\s*and\s+ZIP\s+code)?"
PAYER_NAME = (
    r"PAYER'?S?\s+name"
    r"(?:,\s*street\s+address,\s*city\s+or\s+town,\s*state\s+or\s+province,\s*country,"
    r"\s*(?:and\s+)?ZIP\s+or\s+foreign\s+postal\s+code(?:,\s*and\s+telephone\s+(?:no\.|number))?)?"
)
PAYER_TIN = r"PAYER'?S?\s+(?:TIN|federal\s+identification\s+number)"
FEDERAL_WITHHELD = r"Federal\s+income\s+tax\s+withheld"

BARE_EIN = re.compile(r"(?<![\d-])(?P<value>\d{2}-\d{7})(?![\d-])")


def box(number: str) -> str:
    return rf"\bBox\s*{number}\b"


W2_SPEC = DocumentTypeSpec(
    document_type="W2",
    display_name="W-2",
    aliases=("Form W-2", "W2 Wage and Tax Statement"),
    rules=(
        rule("employer", [EMPLOYER_NAME, box("c")], parse_text, value=TEXT, required=True),
        FieldRule(
            field_name="ein",
            label_patterns=(
                label_pattern(r"Employer\s+identification\s+number(?:\s*\(EIN\))?", EIN),
                label_pattern(r"\bEIN", EIN),
                BARE_EIN,
            ),
            parser=parse_ein,
            required=True,
        ),
        rule(
            "wages",
            [r"Wages,?\s*tips,?\s*(?:and\s+)?other\s+comp(?:ensation)?", box("1")],
            parse_amount,
            required=True,
        ),
        rule("federal_tax_withheld", [FEDERAL_WITHHELD, box("2")], parse_amount, required=True),
        rule("social_security_wages", [r"Social\s+security\s+wages", box("3")], parse_amount),
        rule("social_security_tax_withheld", [r"Social\s+security\s+tax\s+withheld", box("4")], parse_amount),
        rule("medicare_wages", [r"Medicare\s+wages\s+and\s+tips", box("5")], parse_amount),
        rule("medicare_tax_withheld", [r"Medicare\s+tax\s+withheld", box("6")], parse_amount),
    ),
)

INT_1099_SPEC = DocumentTypeSpec(
    document_type="1099-INT",
    display_name="1099-INT",
    aliases=("Form 1099-INT", "INT"),
    rules=(
        rule("payer", [PAYER_NAME], parse_text, value=TEXT, required=True),
        rule("payer_tin", [PAYER_TIN], parse_tin, value=TIN),
        rule("amount", [r"Interest\s+income", box("1")], parse_amount, required=True),
        rule("early_withdrawal_penalty", [r"Early\s+withdrawal\s+penalty", box("2")], parse_amount),
        rule(
            "us_savings_bond_interest",
            [r"Interest\s+on\s+U\.?\s?S\.?\s+Savings\s+Bonds\s+and\s+Treas(?:ury|\.)?\s+obligations", box("3")],
            parse_amount,
        ),
        rule("federal_tax_withheld", [FEDERAL_WITHHELD, box("4")], parse_amount),
        rule("tax_exempt_interest", [r"Tax-?\s?exempt\s+interest", box("8")], parse_amount),
    ),
)

DIV_1099_SPEC = DocumentTypeSpec(
    document_type="1099-DIV",
    display_name="1099-DIV",
    aliases=("Form 1099-DIV", "DIV"),
    rules=(
        rule("payer", [PAYER_NAME], parse_text, value=TEXT, required=True),
        rule("payer_tin", [PAYER_TIN], parse_tin, value=TIN),
        rule(
            "ordinary_dividends",
            [r"(?:Total\s+)?ordinary\s+dividends", box("1a")],
            parse_amount,
            required=True,
        ),
        rule("qualified_dividends", [r"Qualified\s+dividends", box("1b")], parse_amount),
        rule(
            "total_capital_gain",
            [r"Total\s+capital\s+gain\s+distr(?:ibutions|\.)?", box("2a")],
            parse_amount,
        ),
        rule("federal_tax_withheld", [FEDERAL_WITHHELD, box("4")], parse_amount),
    ),
)

BUILTIN_SPECS = (W2_SPEC, INT_1099_SPEC, DIV_1099_SPEC)
