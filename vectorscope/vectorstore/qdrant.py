"""Qdrant vector store implementation."""

import asyncio
from collections.abc import Iterable, Sequence
from typing import Any
from uuid import NAMESPACE_URL, UUID, uuid5

from pydantic import ValidationError
from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import UnexpectedResponse
from qdrant_client.models import Distance as QdrantDistance
from qdrant_client.models import (
    FieldCondition,
    Filter,
    MatchAny,
    MatchValue,
    PointIdsList,
    PointStruct,
    Range,
    VectorParams,
)

from vectorscope.config import Distance, QdrantSettings, get_settings
from vectorscope.documents.filters import (
    And,
    Condition,
    FilterExpression,
    FilterOperator,
    Not,
    Or,
)
from vectorscope.documents.models import Document
from vectorscope.embeddings.service import EmbeddingService
from vectorscope.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    ErrorCode,
    MalformedResponseError,
    VectorStoreError,
)
from vectorscope.logging_config import get_logger
from vectorscope.observability.context import VectorStoreProvider
from vectorscope.vectorstore.models import SearchRequest, VectorStoreDescriptor
from vectorscope.vectorstore.service import VectorStore, embed_documents

logger = get_logger(__name__)

DOCUMENT_ID_KEY = "document_id"
CONTENT_KEY = "content"
METADATA_KEY = "metadata"

_POINT_NAMESPACE = uuid5(NAMESPACE_URL, "vectorscope:qdrant-point")

_DISTANCES = {
    Distance.COSINE: QdrantDistance.COSINE,
    Distance.DOT: QdrantDistance.DOT,
}

_RANGE_BOUNDS = {
    FilterOperator.GT: "gt",
    FilterOperator.GTE: "gte",
    FilterOperator.LT: "lt",
    FilterOperator.LTE: "lte",
}


def point_id_for(document_id: str) -> str:
    """Qdrant point id for a document id.

    Qdrant only accepts UUIDs or integers; other ids map to a stable UUIDv5.
    """
    try:
        return str(UUID(document_id))
    except ValueError:
        return str(uuid5(_POINT_NAMESPACE, document_id))


def _match(key: str, value: Any) -> FieldCondition:
    if isinstance(value, float):
        return FieldCondition(key=key, range=Range(gte=value, lte=value))
    return FieldCondition(key=key, match=MatchValue(value=value))


def _field_condition(condition: Condition) -> FieldCondition | Filter:
    key = f"{METADATA_KEY}.{condition.key}"
    op = condition.operator
    values = condition.value if isinstance(condition.value, list) else [condition.value]

    if op == FilterOperator.EQ:
        return _match(key, condition.value)
    if op == FilterOperator.NE:
        return Filter(must_not=[_match(key, condition.value)])
    if op == FilterOperator.IN:
        return _match_any(key, values)
    if op == FilterOperator.NIN:
        return Filter(must_not=[_match_any(key, values)])
    return FieldCondition(
        key=key,
        range=Range(**{_RANGE_BOUNDS[op]: condition.value}),
    )


def _match_any(key: str, values: list[Any]) -> FieldCondition:
    return FieldCondition(key=key, match=MatchAny(any=values))


def _conditions(expressions: Iterable[FilterExpression]) -> list[Any]:
    return [
        _field_condition(e) if isinstance(e, Condition) else to_qdrant_filter(e)
        for e in expressions
    ]


def to_qdrant_filter(expression: FilterExpression) -> Filter:
    """Translate a metadata filter expression into a Qdrant Filter."""
    if isinstance(expression, And):
        return Filter(must=_conditions(expression.operands))
    if isinstance(expression, Or):
        return Filter(should=_conditions(expression.operands))
    if isinstance(expression, Not):
        return Filter(must_not=_conditions([expression.operand]))
    return Filter(must=_conditions([expression]))


class QdrantVectorStore(VectorStore):
    """Qdrant vector store implementation.

    Documents live in one collection. Each point's payload holds the original
    document id, the content and the metadata.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService,
        settings: QdrantSettings | None = None,
        client: AsyncQdrantClient | None = None,
    ) -> None:
        """Initialize Qdrant vector store.

        Args:
            embedding_service: Provider used for documents and queries.
            settings: Qdrant configuration.
            client: Existing client (for testing).
        """
        self._embedding_service = embedding_service
        self._settings = settings or get_settings().qdrant
        self._client = client
        self._owns_client = client is None
        self._schema_ready = not self._settings.initialize_schema
        self._schema_lock = asyncio.Lock()

    @property
    def collection_name(self) -> str:
        return self._settings.collection_name

    @property
    def descriptor(self) -> VectorStoreDescriptor:
        return VectorStoreDescriptor(
            database_system=VectorStoreProvider.QDRANT.value,
            similarity_metric=self._settings.distance.value,
            collection_name=self.collection_name,
            dimensions=self._embedding_service.dimensions,
        )

    async def _get_client(self) -> AsyncQdrantClient:
        if self._client is None:
            api_key = None
            if self._settings.api_key:
                api_key = self._settings.api_key.get_secret_value()

            self._client = AsyncQdrantClient(
                url=self._settings.url,
                api_key=api_key,
            )
        return self._client

    async def close(self) -> None:
        """Close the Qdrant client."""
        if self._owns_client and self._client is not None:
            await self._client.close()
            self._client = None

    def _backend_error(self, action: str, error: Exception) -> VectorStoreError:
        details = {"collection": self.collection_name, "error": str(error)}
        if isinstance(error, UnexpectedResponse):
            code = (
                ErrorCode.COLLECTION_NOT_FOUND
                if error.status_code == 404
                else ErrorCode.VECTOR_STORE_ERROR
            )
            return VectorStoreError(
                f"Qdrant rejected {action}: {error.status_code}",
                code=code,
                details={**details, "status_code": error.status_code},
            )
        return BackendUnavailableError(f"Failed to {action}: {error}", details=details)

    async def collection_exists(self) -> bool:
        client = await self._get_client()
        try:
            return await client.collection_exists(self.collection_name)
        except Exception as e:
            raise self._backend_error("check collection", e) from e

    async def ensure_collection(self) -> None:
        """Create the collection if it does not exist yet.

        Raises:
            ConfigurationError: If the embedding dimensions are unknown.
            VectorStoreError: If Qdrant cannot create the collection.
        """
        async with self._schema_lock:
            if await self.collection_exists():
                self._schema_ready = True
                return

            dimensions = self._embedding_service.dimensions
            if dimensions is None:
                raise ConfigurationError(
                    "Cannot create collection: embedding dimensions unknown",
                    details={"collection": self.collection_name},
                )

            client = await self._get_client()
            try:
                await client.create_collection(
                    collection_name=self.collection_name,
                    vectors_config=VectorParams(
                        size=dimensions,
                        distance=_DISTANCES[self._settings.distance],
                    ),
                )
            except Exception as e:
                raise self._backend_error("create collection", e) from e

            self._schema_ready = True
            logger.info(
                f"Created collection: {self.collection_name}",
                extra={"dimensions": dimensions},
            )

    async def add(self, documents: Sequence[Document]) -> None:
        if not documents:
            return

        embedded, _ = await embed_documents(self._embedding_service, documents)

        if not self._schema_ready:
            await self.ensure_collection()

        points = [
            PointStruct(
                id=point_id_for(doc.id),
                vector=doc.embedding or [],
                payload={
                    DOCUMENT_ID_KEY: doc.id,
                    CONTENT_KEY: doc.content,
                    METADATA_KEY: dict(doc.metadata),
                },
            )
            for doc in embedded
        ]

        client = await self._get_client()
        try:
            await client.upsert(collection_name=self.collection_name, points=points)
        except Exception as e:
            raise self._backend_error("upsert documents", e) from e

        logger.debug(
            f"Upserted {len(points)} documents",
            extra={"collection": self.collection_name},
        )

    async def delete(self, ids: Sequence[str]) -> None:
        if not ids:
            return

        client = await self._get_client()
        try:
            await client.delete(
                collection_name=self.collection_name,
                points_selector=PointIdsList(
                    points=[point_id_for(doc_id) for doc_id in ids]  # type: ignore[misc]
                ),
            )
        except Exception as e:
            raise self._backend_error("delete documents", e) from e

        logger.debug(
            f"Deleted {len(ids)} documents",
            extra={"collection": self.collection_name},
        )

    async def similarity_search(self, request: SearchRequest) -> list[Document]:
        result = await self._embedding_service.embed(request.query)

        client = await self._get_client()
        try:
            response = await client.query_points(
                collection_name=self.collection_name,
                query=result.embedding,
                limit=request.top_k,
                score_threshold=request.similarity_threshold,
                query_filter=(
                    to_qdrant_filter(request.filter) if request.filter else None
                ),
                with_payload=True,
            )
        except Exception as e:
            raise self._backend_error("search", e) from e

        return [self._to_document(point) for point in response.points]

    def _to_document(self, point: Any) -> Document:
        payload = dict(point.payload or {})
        content = payload.get(CONTENT_KEY)
        metadata = payload.get(METADATA_KEY, {})

        if not isinstance(content, str) or not isinstance(metadata, dict):
            raise MalformedResponseError(
                f"Point {point.id} is missing document content or metadata",
                details={"collection": self.collection_name, "point_id": str(point.id)},
            )

        try:
            return Document(
                id=str(payload.get(DOCUMENT_ID_KEY, point.id)),
                content=content,
                metadata=metadata,
                score=point.score if point.score is not None else 0.0,
            )
        except ValidationError as e:
            raise MalformedResponseError(
                f"Point {point.id} has unsupported metadata values",
                details={"collection": self.collection_name, "point_id": str(point.id)},
            ) from e
