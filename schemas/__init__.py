"""Typed views over extracted tax document records."""

from typing import Dict, Optional, Type

from doc_extraction.registry import normalize_type_name

from .base import TaxRecord
from .div_1099 import Dividend1099DIV
from .int_1099 import Interest1099INT
from .nec_1099 import Nonemployee1099NEC
from .w2 import W2Income

RECORD_MODELS: Dict[str, Type[TaxRecord]] = {
    normalize_type_name(model.doc_type): model
    for model in (W2Income, Interest1099INT, Dividend1099DIV, Nonemployee1099NEC)
}


def model_for(document_type: str) -> Optional[Type[TaxRecord]]:
    """Typed model for ``document_type``, or None for types without one."""
    return RECORD_MODELS.get(normalize_type_name(document_type))


__all__ = [
    "Dividend1099DIV",
    "Interest1099INT",
    "Nonemployee1099NEC",
    "RECORD_MODELS",
    "TaxRecord",
    "W2Income",
    "model_for",
]
