"""In-memory registry of document type specs."""

from __future__ import annotations

import re
from typing import Dict, Iterable, Sequence

from .config import get_settings
from .field_rules import DocumentTypeSpec
from .loader import load_document_specs
from .patterns import BUILTIN_SPECS


def normalize_type_name(name: str) -> str:
    """``"w-2"``, ``"W 2"`` and ``"W2"`` all normalize to ``"W2"``."""
    return re.sub(r"[^0-9A-Z]", "", (name or "").upper())


class DocumentTypeRegistry:
    """Indexes specs by canonical name and aliases."""

    def __init__(self, specs: Iterable[DocumentTypeSpec]) -> None:
        self._specs: Dict[str, DocumentTypeSpec] = {}
        self._index: Dict[str, DocumentTypeSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: DocumentTypeSpec) -> None:
        if spec.document_type in self._specs:
            raise ValueError(f"Document type already registered: {spec.document_type}")
        keys = {normalize_type_name(n) for n in spec.names()}
        for key in keys:
            existing = self._index.get(key)
            if existing is not None:
                raise ValueError(
                    f"Name {key!r} for {spec.document_type} already used by {existing.document_type}"
                )
        self._specs[spec.document_type] = spec
        for key in keys:
            self._index[key] = spec

    @property
    def document_types(self) -> Sequence[str]:
        return tuple(self._specs)

    def get(self, document_type: str | DocumentTypeSpec) -> DocumentTypeSpec:
        if isinstance(document_type, DocumentTypeSpec):
            return document_type
        spec = self._index.get(normalize_type_name(document_type))
        if spec is None:
            supported = ", ".join(self._specs)
            raise ValueError(f"Unsupported document type {document_type!r}; expected one of: {supported}")
        return spec

    def __contains__(self, document_type: object) -> bool:
        if not isinstance(document_type, str):
            return False
        return normalize_type_name(document_type) in self._index


def build_default_registry(extra_spec_dir: str | None = None) -> DocumentTypeRegistry:
    """Built-in specs plus the packaged YAML specs and any configured extra directory."""
    specs = list(BUILTIN_SPECS)
    specs.extend(load_document_specs())
    spec_dir = extra_spec_dir or get_settings()["spec_dir"]
    if spec_dir:
        specs.extend(load_document_specs(spec_dir))
    return DocumentTypeRegistry(specs)
