"""Field rules and document type specs: the data the extraction engine runs on."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Pattern, Sequence, Tuple

from .models import ParsedValue
from .parsing import AMOUNT

ValueParser = Callable[[str], ParsedValue]

LABEL_FLAGS = re.IGNORECASE


def label_pattern(label: str, value: str = AMOUNT) -> Pattern[str]:
    """Compile ``label`` followed by a value span captured as the ``value`` group.

    Separators between label and value may be any mix of spaces, colons, dots
    (leader dots on printed forms) and a dollar sign.
    """
    return re.compile(rf"{label}[\s:.]*\$?\s*(?P<value>{value})", LABEL_FLAGS)


@dataclass(frozen=True)
class FieldRule:
    """How to find one field: ordered label patterns, a value parser, and whether it is required."""

    field_name: str
    label_patterns: Tuple[Pattern[str], ...]
    parser: ValueParser
    required: bool = False

    def __post_init__(self) -> None:
        if not self.label_patterns:
            raise ValueError(f"Field rule {self.field_name!r} needs at least one label pattern")
        for pattern in self.label_patterns:
            if "value" not in pattern.groupindex:
                raise ValueError(
                    f"Pattern {pattern.pattern!r} for field {self.field_name!r} has no 'value' group"
                )


def rule(
    field_name: str,
    labels: Sequence[str],
    parser: ValueParser,
    *,
    value: str = AMOUNT,
    required: bool = False,
) -> FieldRule:
    return FieldRule(
        field_name=field_name,
        label_patterns=tuple(label_pattern(label, value) for label in labels),
        parser=parser,
        required=required,
    )


@dataclass(frozen=True)
class DocumentTypeSpec:
    """Ordered field rules for one document type."""

    document_type: str
    display_name: str
    rules: Tuple[FieldRule, ...]
    aliases: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        names = [r.field_name for r in self.rules]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"{self.display_name} spec defines duplicate fields: {', '.join(duplicates)}")

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(r.field_name for r in self.rules)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(r.field_name for r in self.rules if r.required)

    def names(self) -> Iterable[str]:
        """Canonical name, display name, then aliases."""
        yield self.document_type
        yield self.display_name
        yield from self.aliases
