"""Observation wrapper around any vector store."""

from collections.abc import Sequence
from typing import Any

from vectorscope.documents.models import Document
from vectorscope.exceptions import InvalidArgumentError
from vectorscope.observability.context import (
    OperationName,
    VectorStoreOperationContext,
)
from vectorscope.observability.convention import (
    DefaultVectorStoreObservationConvention,
    VectorStoreObservationConvention,
)
from vectorscope.observability.observation import ObservationRegistry
from vectorscope.vectorstore.models import SearchRequest, VectorStoreDescriptor
from vectorscope.vectorstore.service import VectorStore


def _require_sequence(value: Any, name: str) -> None:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise InvalidArgumentError(
            f"{name} must be a sequence, got {type(value).__name__}",
            details={"field": name},
        )


def _validate_documents(documents: Any) -> Sequence[Document]:
    _require_sequence(documents, "documents")
    for position, doc in enumerate(documents):
        if not isinstance(doc, Document):
            raise InvalidArgumentError(
                f"documents[{position}] is not a Document",
                details={"field": "documents", "index": position},
            )
    return documents


def _validate_ids(ids: Any) -> Sequence[str]:
    _require_sequence(ids, "ids")
    for position, doc_id in enumerate(ids):
        if not isinstance(doc_id, str) or not doc_id:
            raise InvalidArgumentError(
                f"ids[{position}] must be a non-empty string",
                details={"field": "ids", "index": position},
            )
    return ids


class ObservedVectorStore(VectorStore):
    """Runs every operation of a backend store under an observation.

    Arguments are validated before anything starts, so an
    InvalidArgumentError never leaves an observation behind. Backend errors,
    including cancellation, propagate unchanged after the observation has
    been stopped and marked failed.
    """

    def __init__(
        self,
        delegate: VectorStore,
        registry: ObservationRegistry | None = None,
        convention: VectorStoreObservationConvention | None = None,
    ) -> None:
        """Wrap a backend.

        Args:
            delegate: Backend that performs the operations.
            registry: Registry whose handlers receive the observations.
            convention: Naming/attribute convention; the default when omitted.
        """
        self._delegate = delegate
        self._registry = registry or ObservationRegistry()
        self._convention = convention or DefaultVectorStoreObservationConvention()

    @property
    def delegate(self) -> VectorStore:
        return self._delegate

    @property
    def registry(self) -> ObservationRegistry:
        return self._registry

    @property
    def descriptor(self) -> VectorStoreDescriptor:
        return self._delegate.descriptor

    def _context(
        self,
        operation: OperationName,
        request: SearchRequest | None = None,
    ) -> VectorStoreOperationContext:
        descriptor = self._delegate.descriptor
        return VectorStoreOperationContext(
            operation_name=operation,
            database_system=descriptor.database_system,
            collection_name=descriptor.collection_name,
            namespace=descriptor.namespace,
            field_name=descriptor.field_name,
            similarity_metric=descriptor.similarity_metric,
            dimensions=descriptor.dimensions,
            query=request.query if request else None,
            top_k=request.top_k if request else None,
            similarity_threshold=request.similarity_threshold if request else None,
        )

    def _record_result(
        self, context: VectorStoreOperationContext, document_count: int
    ) -> None:
        # Dimensions may only be known once the backend has embedded something
        context.dimensions = self._delegate.descriptor.dimensions
        context.document_count = document_count

    async def add(self, documents: Sequence[Document]) -> None:
        documents = _validate_documents(documents)
        context = self._context(OperationName.ADD)

        with self._registry.observe(context, self._convention):
            await self._delegate.add(documents)
            self._record_result(context, len(documents))

    async def delete(self, ids: Sequence[str]) -> None:
        ids = _validate_ids(ids)
        context = self._context(OperationName.DELETE)

        with self._registry.observe(context, self._convention):
            await self._delegate.delete(ids)
            self._record_result(context, len(ids))

    async def similarity_search(
        self, request: SearchRequest | str
    ) -> list[Document]:
        """Search the backend; a plain string searches with default parameters."""
        if isinstance(request, str):
            request = SearchRequest(query=request)
        elif not isinstance(request, SearchRequest):
            raise InvalidArgumentError(
                f"request must be a SearchRequest, got {type(request).__name__}",
                details={"field": "request"},
            )
        context = self._context(OperationName.QUERY, request)

        with self._registry.observe(context, self._convention):
            results = await self._delegate.similarity_search(request)
            self._record_result(context, len(results))

        return results
