"""Loader for document type specs declared in YAML files."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .field_rules import LABEL_FLAGS, DocumentTypeSpec, FieldRule
from .parsing import PARSERS, VALUE_PATTERNS

PACKAGE_ROOT = Path(__file__).resolve().parent
SPECS_DIR = PACKAGE_ROOT / "specs"

_PLACEHOLDER_RE = re.compile(r"\{(" + "|".join(VALUE_PATTERNS) + r")\}")


def _load_yaml_file(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _expand_placeholders(raw: str) -> str:
    return _PLACEHOLDER_RE.sub(lambda m: f"(?P<value>{VALUE_PATTERNS[m.group(1)]})", raw)


def _compile_field(source: Path, raw: Any) -> FieldRule:
    if not isinstance(raw, dict):
        raise ValueError(f"Field entries must be mappings in {source.name}")
    name = raw.get("name")
    if not name:
        raise ValueError(f"Field without a name in {source.name}")
    parser_name = raw.get("parser", "amount")
    if parser_name not in PARSERS:
        raise ValueError(f"Unknown parser {parser_name!r} for field {name!r} in {source.name}")
    patterns = raw.get("patterns") or []
    if not isinstance(patterns, list) or not patterns:
        raise ValueError(f"Field {name!r} in {source.name} needs a non-empty 'patterns' list")

    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(_expand_placeholders(str(pattern)), LABEL_FLAGS))
        except re.error as exc:
            raise ValueError(f"Invalid pattern for field {name!r} in {source.name}: {exc}") from exc
    try:
        return FieldRule(
            field_name=str(name),
            label_patterns=tuple(compiled),
            parser=PARSERS[parser_name],
            required=bool(raw.get("required", False)),
        )
    except ValueError as exc:
        raise ValueError(f"{source.name}: {exc}") from exc


def parse_spec(source: Path, raw: Any) -> DocumentTypeSpec:
    """Turn one YAML payload into a DocumentTypeSpec."""
    if not isinstance(raw, dict):
        raise ValueError(f"Spec file must be a mapping: {source}")
    document_type = raw.get("document_type")
    if not document_type:
        raise ValueError(f"Spec file is missing 'document_type': {source}")
    fields = raw.get("fields") or []
    if not isinstance(fields, list) or not fields:
        raise ValueError(f"Spec file {source.name} must declare at least one field")
    aliases = raw.get("aliases") or []
    if not isinstance(aliases, list):
        raise ValueError(f"'aliases' must be a list in {source.name}")
    try:
        return DocumentTypeSpec(
            document_type=str(document_type),
            display_name=str(raw.get("display_name") or document_type),
            rules=tuple(_compile_field(source, f) for f in fields),
            aliases=tuple(str(a) for a in aliases),
        )
    except ValueError as exc:
        if source.name in str(exc):
            raise
        raise ValueError(f"{source.name}: {exc}") from exc


@lru_cache(maxsize=8)
def load_document_specs(spec_dir: Path | str | None = None) -> Tuple[DocumentTypeSpec, ...]:
    """Load every ``*.yaml`` spec from ``spec_dir`` (defaults to the packaged specs)."""
    directory = Path(spec_dir) if spec_dir else SPECS_DIR
    if not directory.exists():
        raise FileNotFoundError(f"Spec directory not found: {directory}")

    specs: List[DocumentTypeSpec] = []
    seen: Dict[str, Path] = {}
    for path in sorted(directory.glob("*.yaml")):
        spec = parse_spec(path, _load_yaml_file(path))
        if spec.document_type in seen:
            raise ValueError(
                f"Document type {spec.document_type!r} declared in both {seen[spec.document_type].name} and {path.name}"
            )
        seen[spec.document_type] = path
        specs.append(spec)
    return tuple(specs)


def reload_caches() -> None:
    """Clear cached loaders (useful for tests)."""
    load_document_specs.cache_clear()
