"""Document data models."""

from typing import Any
from uuid import NAMESPACE_URL, uuid5

from pydantic import BaseModel, ConfigDict, Field, model_validator

MetadataValue = str | int | float | bool

_DOCUMENT_NAMESPACE = uuid5(NAMESPACE_URL, "vectorscope:document")


def document_id_for(content: str) -> str:
    """Derive a stable document id from its content."""
    return str(uuid5(_DOCUMENT_NAMESPACE, content))


class Document(BaseModel):
    """A piece of content stored as a vector embedding.

    Attributes:
        id: Unique identifier; derived from the content when omitted.
        content: The text content of the document.
        metadata: Caller-defined scalar metadata, passed through unmodified.
        embedding: Precomputed embedding, or None to have the store embed it.
        score: Similarity to the query, set only on search results.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default="", description="Unique document identifier")
    content: str = Field(description="Text content of the document")
    metadata: dict[str, MetadataValue] = Field(
        default_factory=dict,
        description="Caller-defined metadata",
    )
    embedding: list[float] | None = Field(
        default=None,
        description="Embedding vector, if already computed",
    )
    score: float | None = Field(
        default=None,
        description="Similarity score of a search result",
    )

    @model_validator(mode="before")
    @classmethod
    def _assign_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            content = data.get("content")
            if isinstance(content, str):
                data = {**data, "id": document_id_for(content)}
        return data

    def with_score(self, score: float) -> "Document":
        """Copy of this document carrying a search score."""
        return self.model_copy(update={"score": score})

    def with_embedding(self, embedding: list[float]) -> "Document":
        """Copy of this document carrying its embedding."""
        return self.model_copy(update={"embedding": list(embedding)})
