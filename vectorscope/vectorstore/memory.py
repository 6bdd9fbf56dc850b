"""In-process vector store using cosine similarity."""

import math
from collections.abc import Sequence

from vectorscope.config import Distance
from vectorscope.documents.models import Document
from vectorscope.embeddings.service import EmbeddingService
from vectorscope.exceptions import EmbeddingError, ErrorCode
from vectorscope.logging_config import get_logger
from vectorscope.observability.context import VectorStoreProvider
from vectorscope.vectorstore.models import SearchRequest, VectorStoreDescriptor
from vectorscope.vectorstore.service import VectorStore, embed_documents

logger = get_logger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 if either is zero."""
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (norm_a * norm_b)


class InMemoryVectorStore(VectorStore):
    """Vector store kept in a dict, searched by brute force.

    Suited to tests and small corpora. It has no collection, namespace or
    field concepts, so those are reported as absent.
    """

    def __init__(self, embedding_service: EmbeddingService) -> None:
        """Initialize the store.

        Args:
            embedding_service: Provider used for documents and queries.
        """
        self._embedding_service = embedding_service
        self._documents: dict[str, Document] = {}
        self._dimensions: int | None = None

    @property
    def descriptor(self) -> VectorStoreDescriptor:
        return VectorStoreDescriptor(
            database_system=VectorStoreProvider.SIMPLE.value,
            similarity_metric=Distance.COSINE.value,
            dimensions=self._dimensions or self._embedding_service.dimensions,
        )

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    async def add(self, documents: Sequence[Document]) -> None:
        if not documents:
            return

        embedded, _ = await embed_documents(self._embedding_service, documents)

        # Validate the whole batch before storing any of it
        dimensions = self._dimensions
        for doc in embedded:
            size = len(doc.embedding or [])
            if dimensions is None:
                dimensions = size
            elif size != dimensions:
                raise EmbeddingError(
                    f"Embedding for {doc.id} has {size} dimensions, "
                    f"store holds {dimensions}",
                    code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                    details={"id": doc.id, "expected": dimensions, "actual": size},
                )

        self._dimensions = dimensions
        for doc in embedded:
            self._documents[doc.id] = doc

        logger.debug(f"Added {len(embedded)} documents", extra={"total": len(self)})

    async def delete(self, ids: Sequence[str]) -> None:
        removed = sum(
            1 for doc_id in ids if self._documents.pop(doc_id, None) is not None
        )
        logger.debug(f"Deleted {removed} of {len(ids)} documents")

    async def similarity_search(self, request: SearchRequest) -> list[Document]:
        result = await self._embedding_service.embed(request.query)
        query_vector = result.embedding

        if self._dimensions is not None and len(query_vector) != self._dimensions:
            raise EmbeddingError(
                f"Query embedding has {len(query_vector)} dimensions, "
                f"store holds {self._dimensions}",
                code=ErrorCode.EMBEDDING_DIMENSION_MISMATCH,
                details={"expected": self._dimensions, "actual": len(query_vector)},
            )

        scored: list[tuple[float, Document]] = []
        for doc in list(self._documents.values()):
            if request.filter is not None and not request.filter.matches(doc.metadata):
                continue
            score = cosine_similarity(query_vector, doc.embedding or [])
            if score >= request.similarity_threshold:
                scored.append((score, doc))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [doc.with_score(score) for score, doc in scored[: request.top_k]]
