"""Pytest configuration and shared fixtures."""

import hashlib
import re

import pytest

from vectorscope.embeddings.models import EmbeddingBatch, EmbeddingResult
from vectorscope.embeddings.service import EmbeddingService
from vectorscope.observability.handlers import RecordingObservationHandler
from vectorscope.observability.observation import ObservationRegistry
from vectorscope.usage import Usage
from vectorscope.vectorstore.memory import InMemoryVectorStore
from vectorscope.vectorstore.observed import ObservedVectorStore

FAKE_DIMENSIONS = 64


class HashingEmbeddingService(EmbeddingService):
    """Deterministic bag-of-words embeddings.

    Each lowercase word increments one md5-selected bucket, so texts sharing
    words have positive cosine similarity and identical texts score 1.0.
    """

    def __init__(self, dimensions: int = FAKE_DIMENSIONS) -> None:
        self._dimensions = dimensions
        self.calls: list[list[str]] = []

    @property
    def model_name(self) -> str:
        return "hashing-embedding"

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self._dimensions
        for word in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(word.encode()).hexdigest(), 16) % self._dimensions
            vector[bucket] += 1.0
        return vector

    async def embed(self, text: str) -> EmbeddingResult:
        batch = await self.embed_batch([text])
        return batch.results[0]

    async def embed_batch(self, texts: list[str]) -> EmbeddingBatch:
        self.calls.append(list(texts))
        results = [
            EmbeddingResult(
                text=text,
                embedding=self._vector(text),
                model=self.model_name,
                dimensions=self._dimensions,
            )
            for text in texts
        ]
        tokens = sum(len(text.split()) for text in texts)
        return EmbeddingBatch(
            results=results,
            usage=Usage(prompt_tokens=tokens, total_tokens=tokens),
        )


@pytest.fixture
def embedding_service() -> HashingEmbeddingService:
    """Deterministic embedding provider."""
    return HashingEmbeddingService()


@pytest.fixture
def recorder() -> RecordingObservationHandler:
    """Handler capturing observation events."""
    return RecordingObservationHandler()


@pytest.fixture
def registry(recorder: RecordingObservationHandler) -> ObservationRegistry:
    """Registry dispatching to the recorder."""
    return ObservationRegistry([recorder])


@pytest.fixture
def memory_store(embedding_service: HashingEmbeddingService) -> InMemoryVectorStore:
    """Empty in-memory backend."""
    return InMemoryVectorStore(embedding_service)


@pytest.fixture
def observed_store(
    memory_store: InMemoryVectorStore,
    registry: ObservationRegistry,
) -> ObservedVectorStore:
    """In-memory backend wrapped with observations."""
    return ObservedVectorStore(memory_store, registry=registry)
