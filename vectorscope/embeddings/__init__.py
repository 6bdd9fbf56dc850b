"""Embedding provider module."""

from vectorscope.embeddings.models import EmbeddingBatch, EmbeddingResult
from vectorscope.embeddings.service import EmbeddingService, HTTPEmbeddingService

__all__ = [
    "EmbeddingBatch",
    "EmbeddingResult",
    "EmbeddingService",
    "HTTPEmbeddingService",
]
