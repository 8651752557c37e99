"""Classified failures shared by every stage of document extraction."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ErrorSpec:
    """Static description of one error kind."""

    code: str
    category: str  # "client_error" or "server_error"
    retryable: bool
    default_message: str


class ErrorKind(Enum):
    """Closed set of extraction failures. Callers branch on the kind, not the message."""

    PDF_NOT_SUPPORTED = ErrorSpec(
        "PDF_NOT_SUPPORTED",
        "client_error",
        False,
        "PDF files are not supported. Please upload a JPG or PNG image of the document.",
    )
    UNSUPPORTED_FILE_TYPE = ErrorSpec(
        "UNSUPPORTED_FILE_TYPE",
        "client_error",
        False,
        "Unsupported file type. Please upload a JPG or PNG image.",
    )
    BACKEND_ASSET_LOAD_FAILED = ErrorSpec(
        "OCR_ASSET_LOAD_FAILED",
        "server_error",
        True,
        "The OCR engine could not load its language data. Please try again later.",
    )
    BACKEND_FAILED = ErrorSpec(
        "OCR_FAILED",
        "server_error",
        True,
        "Failed to extract text from image.",
    )
    FIELDS_NOT_FOUND = ErrorSpec(
        "FIELDS_NOT_FOUND",
        "client_error",
        False,
        "Could not find the expected fields in the document.",
    )

    @property
    def code(self) -> str:
        return self.value.code

    @property
    def category(self) -> str:
        return self.value.category

    @property
    def retryable(self) -> bool:
        return self.value.retryable

    @classmethod
    def from_code(cls, code: str) -> "ErrorKind":
        for kind in cls:
            if kind.code == code:
                return kind
        raise ValueError(f"Unknown error code: {code}")


class OCRExtractionError(Exception):
    """Raised when a file cannot be turned into an extracted record."""

    def __init__(
        self,
        kind: ErrorKind,
        message: Optional[str] = None,
        *,
        document_type: Optional[str] = None,
        missing_fields: Optional[List[str]] = None,
    ) -> None:
        self.kind = kind
        self.message = message or kind.value.default_message
        self.document_type = document_type
        self.missing_fields = list(missing_fields or [])
        super().__init__(self.message)

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "kind": self.kind.code,
            "message": self.message,
            "category": self.kind.category,
            "retryable": self.kind.retryable,
        }
        if self.document_type:
            payload["document_type"] = self.document_type
        if self.missing_fields:
            payload["missing_fields"] = list(self.missing_fields)
        return payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OCRExtractionError):
            return NotImplemented
        return (
            self.kind is other.kind
            and self.message == other.message
            and self.document_type == other.document_type
            and self.missing_fields == other.missing_fields
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.message, self.document_type, tuple(self.missing_fields)))

    def __repr__(self) -> str:
        return f"OCRExtractionError(kind={self.kind.name}, message={self.message!r})"
