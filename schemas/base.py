"""Shared base for typed views over extracted records."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, Mapping

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from doc_extraction.parsing import to_json_ready


class TaxRecord(BaseModel):
    """Typed record for one document type; serializes with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    doc_type: ClassVar[str] = ""

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TaxRecord":
        return cls.model_validate(to_json_ready(record))

    def to_document_dict(self) -> Dict[str, Any]:
        """Map into the camelCase layout consumed by the tax return forms."""
        return self.model_dump(by_alias=True, exclude_none=True)
