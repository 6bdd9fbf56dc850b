"""Document and metadata filter models."""

from vectorscope.documents.filters import (
    And,
    Condition,
    FilterExpression,
    FilterOperator,
    Not,
    Or,
    from_mapping,
)
from vectorscope.documents.models import Document, MetadataValue, document_id_for

__all__ = [
    "And",
    "Condition",
    "Document",
    "FilterExpression",
    "FilterOperator",
    "MetadataValue",
    "Not",
    "Or",
    "document_id_for",
    "from_mapping",
]
