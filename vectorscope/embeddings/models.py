"""Embedding data models."""

from pydantic import BaseModel, Field

from vectorscope.usage.models import Usage


class EmbeddingResult(BaseModel):
    """Result of an embedding operation.

    Attributes:
        text: The original text that was embedded.
        embedding: The embedding vector.
        model: The model used to generate the embedding.
        dimensions: Number of dimensions in the embedding.
    """

    text: str = Field(description="Original text")
    embedding: list[float] = Field(description="Embedding vector")
    model: str = Field(description="Model used for embedding")
    dimensions: int = Field(description="Vector dimensions")

    def model_post_init(self, __context: object) -> None:
        """Validate dimensions match embedding length."""
        if self.dimensions != len(self.embedding):
            raise ValueError(
                f"dimensions ({self.dimensions}) does not match "
                f"embedding length ({len(self.embedding)})"
            )


class EmbeddingBatch(BaseModel):
    """Embeddings for several texts plus the provider's token usage."""

    results: list[EmbeddingResult] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    @property
    def embeddings(self) -> list[list[float]]:
        return [result.embedding for result in self.results]

    def __len__(self) -> int:
        return len(self.results)
