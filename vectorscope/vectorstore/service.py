"""Vector store interface."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from vectorscope.documents.models import Document
from vectorscope.embeddings.service import EmbeddingService
from vectorscope.exceptions import EmbeddingError
from vectorscope.logging_config import get_logger
from vectorscope.usage import Usage
from vectorscope.vectorstore.models import SearchRequest, VectorStoreDescriptor

logger = get_logger(__name__)


async def embed_documents(
    embedding_service: EmbeddingService,
    documents: Sequence[Document],
) -> tuple[list[Document], Usage]:
    """Fill in missing embeddings with one batched provider call.

    Returns:
        Documents in input order, all carrying an embedding, and the usage
        reported for the texts that had to be embedded.
    """
    pending = [i for i, doc in enumerate(documents) if doc.embedding is None]
    if not pending:
        return list(documents), Usage()

    batch = await embedding_service.embed_batch(
        [documents[i].content for i in pending]
    )
    if len(batch.results) != len(pending):
        raise EmbeddingError(
            f"Expected {len(pending)} embeddings, got {len(batch.results)}",
            details={"model": embedding_service.model_name},
        )

    embedded = list(documents)
    for i, result in zip(pending, batch.results):
        embedded[i] = documents[i].with_embedding(result.embedding)

    logger.debug(
        f"Embedded {len(pending)} documents",
        extra={
            "model": embedding_service.model_name,
            "total_tokens": batch.usage.total_tokens,
        },
    )
    return embedded, batch.usage


class VectorStore(ABC):
    """Abstract base class for vector stores.

    One implementation per storage engine. Implementations only store and
    search; observation is added by wrapping a store in ObservedVectorStore.
    """

    @property
    @abstractmethod
    def descriptor(self) -> VectorStoreDescriptor:
        """Backend identity and vector settings, as currently known."""
        ...

    @abstractmethod
    async def add(self, documents: Sequence[Document]) -> None:
        """Embed and upsert documents by id.

        Documents without an embedding are embedded first. Adding a document
        with an existing id overwrites it.

        Args:
            documents: Documents to store.

        Raises:
            EmbeddingError: If the embedding step fails.
            BackendUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    async def delete(self, ids: Sequence[str]) -> None:
        """Delete documents by id. Unknown ids are ignored.

        Args:
            ids: Document ids to remove.

        Raises:
            BackendUnavailableError: If the backend cannot be reached.
        """
        ...

    @abstractmethod
    async def similarity_search(self, request: SearchRequest) -> list[Document]:
        """Find the documents most similar to the request query.

        Args:
            request: Query text, result limit, threshold and filter.

        Returns:
            At most ``request.top_k`` documents, most similar first, each with
            ``score >= request.similarity_threshold``. Empty if nothing
            qualifies.

        Raises:
            EmbeddingError: If the query cannot be embedded.
            BackendUnavailableError: If the backend cannot be reached.
        """
        ...
