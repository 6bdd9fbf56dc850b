"""Tests for the Qdrant vector store."""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import httpx
import pytest
from qdrant_client.http.exceptions import UnexpectedResponse
from qdrant_client.models import (
    FieldCondition,
    Filter,
    MatchAny,
    MatchValue,
    PointIdsList,
    Range,
)
from qdrant_client.models import Distance as QdrantDistance

from vectorscope.config import Distance, QdrantSettings
from vectorscope.documents import And, Condition, Document, FilterOperator, Not, Or
from vectorscope.embeddings.models import EmbeddingBatch, EmbeddingResult
from vectorscope.exceptions import (
    BackendUnavailableError,
    ConfigurationError,
    ErrorCode,
    MalformedResponseError,
    VectorStoreError,
)
from vectorscope.vectorstore.models import SearchRequest
from vectorscope.vectorstore.qdrant import (
    CONTENT_KEY,
    DOCUMENT_ID_KEY,
    METADATA_KEY,
    QdrantVectorStore,
    point_id_for,
    to_qdrant_filter,
)


def _result(text: str, embedding: list[float]) -> EmbeddingResult:
    return EmbeddingResult(
        text=text, embedding=embedding, model="test", dimensions=len(embedding)
    )


def _embedding_service(dimensions: int | None = 3) -> MagicMock:
    service = MagicMock()
    service.model_name = "test"
    service.dimensions = dimensions

    async def embed_batch(texts: list[str]) -> EmbeddingBatch:
        return EmbeddingBatch(results=[_result(t, [0.1, 0.2, 0.3]) for t in texts])

    service.embed_batch = AsyncMock(side_effect=embed_batch)
    service.embed = AsyncMock(return_value=_result("query", [0.1, 0.2, 0.3]))
    return service


def _point(
    point_id: str,
    score: float,
    payload: dict[str, object] | None,
) -> MagicMock:
    point = MagicMock()
    point.id = point_id
    point.score = score
    point.payload = payload
    return point


def _create_mock_client(points: list[MagicMock] | None = None) -> AsyncMock:
    """Create a mock Qdrant client."""
    client = AsyncMock()
    client.collection_exists = AsyncMock(return_value=False)
    client.create_collection = AsyncMock()
    client.upsert = AsyncMock()
    mock_response = MagicMock()
    mock_response.points = points or []
    client.query_points = AsyncMock(return_value=mock_response)
    client.delete = AsyncMock()
    client.close = AsyncMock()
    return client


def _unexpected(status_code: int) -> UnexpectedResponse:
    return UnexpectedResponse(
        status_code=status_code,
        reason_phrase="error",
        content=b"",
        headers=httpx.Headers(),
    )


class TestPointId:
    """Tests for document id to point id mapping."""

    def test_uuid_kept(self) -> None:
        """UUID document ids are used directly."""
        doc_id = "6f1b1b9e-6a43-4a51-9f0e-0a4c2b8a3f11"
        assert point_id_for(doc_id) == doc_id

    def test_other_ids_mapped_stably(self) -> None:
        """Non-UUID ids map to the same UUID every time."""
        point_id = point_id_for("doc-1")
        assert point_id == point_id_for("doc-1")
        assert point_id != point_id_for("doc-2")
        UUID(point_id)


class TestFilterTranslation:
    """Tests for metadata filter translation."""

    def test_equality(self) -> None:
        result = to_qdrant_filter(Condition(key="country", value="UK"))
        assert result == Filter(
            must=[FieldCondition(key="metadata.country", match=MatchValue(value="UK"))]
        )

    def test_float_equality_uses_range(self) -> None:
        result = to_qdrant_filter(Condition(key="rating", value=4.5))
        assert result == Filter(
            must=[FieldCondition(key="metadata.rating", range=Range(gte=4.5, lte=4.5))]
        )

    def test_not_equal(self) -> None:
        result = to_qdrant_filter(
            Condition(key="country", operator=FilterOperator.NE, value="UK")
        )
        assert result == Filter(
            must=[
                Filter(
                    must_not=[
                        FieldCondition(
                            key="metadata.country", match=MatchValue(value="UK")
                        )
                    ]
                )
            ]
        )

    def test_in(self) -> None:
        result = to_qdrant_filter(
            Condition(key="year", operator=FilterOperator.IN, value=[2020, 2021])
        )
        assert result == Filter(
            must=[FieldCondition(key="metadata.year", match=MatchAny(any=[2020, 2021]))]
        )

    def test_range(self) -> None:
        result = to_qdrant_filter(
            Condition(key="year", operator=FilterOperator.GTE, value=2020)
        )
        assert result == Filter(
            must=[FieldCondition(key="metadata.year", range=Range(gte=2020))]
        )

    def test_composites(self) -> None:
        uk = FieldCondition(key="metadata.country", match=MatchValue(value="UK"))
        nl = FieldCondition(key="metadata.country", match=MatchValue(value="NL"))

        assert to_qdrant_filter(
            And(
                operands=(
                    Condition(key="country", value="UK"),
                    Condition(key="country", value="NL"),
                )
            )
        ) == Filter(must=[uk, nl])
        assert to_qdrant_filter(
            Or(
                operands=(
                    Condition(key="country", value="UK"),
                    Condition(key="country", value="NL"),
                )
            )
        ) == Filter(should=[uk, nl])
        assert to_qdrant_filter(
            Not(operand=Condition(key="country", value="UK"))
        ) == Filter(must_not=[uk])


class TestQdrantVectorStore:
    """Tests for QdrantVectorStore."""

    def test_descriptor(self) -> None:
        """Descriptor reports collection and distance."""
        settings = QdrantSettings(collection_name="docs", distance=Distance.DOT)
        store = QdrantVectorStore(
            _embedding_service(), settings=settings, client=_create_mock_client()
        )

        descriptor = store.descriptor

        assert descriptor.database_system == "qdrant"
        assert descriptor.collection_name == "docs"
        assert descriptor.similarity_metric == "dot"
        assert descriptor.dimensions == 3
        assert descriptor.namespace is None

    @pytest.mark.asyncio
    async def test_add_upserts_points(self) -> None:
        """Documents are embedded and upserted with their payload."""
        mock_client = _create_mock_client()
        settings = QdrantSettings(collection_name="docs")
        store = QdrantVectorStore(
            _embedding_service(), settings=settings, client=mock_client
        )

        await store.add(
            [Document(id="doc-1", content="hello", metadata={"source": "a.txt"})]
        )

        mock_client.upsert.assert_called_once()
        call_kwargs = mock_client.upsert.call_args.kwargs
        assert call_kwargs["collection_name"] == "docs"
        [point] = call_kwargs["points"]
        assert point.id == point_id_for("doc-1")
        assert point.vector == [0.1, 0.2, 0.3]
        assert point.payload == {
            DOCUMENT_ID_KEY: "doc-1",
            CONTENT_KEY: "hello",
            METADATA_KEY: {"source": "a.txt"},
        }
        mock_client.create_collection.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_empty(self) -> None:
        """Adding nothing makes no calls."""
        mock_client = _create_mock_client()
        service = _embedding_service()
        store = QdrantVectorStore(service, client=mock_client)

        await store.add([])

        service.embed_batch.assert_not_called()
        mock_client.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_initializes_schema(self) -> None:
        """Collection is created on first add when enabled."""
        mock_client = _create_mock_client()
        settings = QdrantSettings(collection_name="docs", initialize_schema=True)
        store = QdrantVectorStore(
            _embedding_service(), settings=settings, client=mock_client
        )

        await store.add([Document(content="a")])
        await store.add([Document(content="b")])

        mock_client.create_collection.assert_called_once()
        call_kwargs = mock_client.create_collection.call_args.kwargs
        assert call_kwargs["collection_name"] == "docs"
        assert call_kwargs["vectors_config"].size == 3
        assert call_kwargs["vectors_config"].distance == QdrantDistance.COSINE
        assert mock_client.upsert.call_count == 2

    @pytest.mark.asyncio
    async def test_ensure_collection_existing(self) -> None:
        """Existing collection is left alone."""
        mock_client = _create_mock_client()
        mock_client.collection_exists.return_value = True
        store = QdrantVectorStore(_embedding_service(), client=mock_client)

        await store.ensure_collection()

        mock_client.create_collection.assert_not_called()

    @pytest.mark.asyncio
    async def test_ensure_collection_unknown_dimensions(self) -> None:
        """Unknown dimensions cannot create a collection."""
        store = QdrantVectorStore(
            _embedding_service(dimensions=None), client=_create_mock_client()
        )

        with pytest.raises(ConfigurationError):
            await store.ensure_collection()

    @pytest.mark.asyncio
    async def test_delete_maps_ids(self) -> None:
        """Deletion uses the mapped point ids."""
        mock_client = _create_mock_client()
        store = QdrantVectorStore(_embedding_service(), client=mock_client)

        await store.delete(["doc-1", "doc-2"])

        mock_client.delete.assert_called_once()
        selector = mock_client.delete.call_args.kwargs["points_selector"]
        assert isinstance(selector, PointIdsList)
        assert selector.points == [point_id_for("doc-1"), point_id_for("doc-2")]

    @pytest.mark.asyncio
    async def test_similarity_search(self) -> None:
        """Search passes limits and maps points back to documents."""
        mock_client = _create_mock_client(
            [
                _point(
                    point_id_for("doc-1"),
                    0.9,
                    {
                        DOCUMENT_ID_KEY: "doc-1",
                        CONTENT_KEY: "hello",
                        METADATA_KEY: {"country": "UK"},
                    },
                )
            ]
        )
        settings = QdrantSettings(collection_name="docs")
        store = QdrantVectorStore(
            _embedding_service(), settings=settings, client=mock_client
        )

        results = await store.similarity_search(
            SearchRequest(
                query="hi", top_k=2, similarity_threshold=0.5, filter={"country": "UK"}
            )
        )

        call_kwargs = mock_client.query_points.call_args.kwargs
        assert call_kwargs["collection_name"] == "docs"
        assert call_kwargs["query"] == [0.1, 0.2, 0.3]
        assert call_kwargs["limit"] == 2
        assert call_kwargs["score_threshold"] == 0.5
        assert call_kwargs["query_filter"] == Filter(
            must=[FieldCondition(key="metadata.country", match=MatchValue(value="UK"))]
        )

        [doc] = results
        assert doc.id == "doc-1"
        assert doc.content == "hello"
        assert doc.metadata == {"country": "UK"}
        assert doc.score == 0.9

    @pytest.mark.asyncio
    async def test_search_without_filter(self) -> None:
        """No filter is sent when the request has none."""
        mock_client = _create_mock_client()
        store = QdrantVectorStore(_embedding_service(), client=mock_client)

        assert await store.similarity_search(SearchRequest(query="hi")) == []
        assert mock_client.query_points.call_args.kwargs["query_filter"] is None

    @pytest.mark.asyncio
    async def test_malformed_point(self) -> None:
        """Points without content raise MalformedResponseError."""
        mock_client = _create_mock_client([_point("p", 0.5, {"metadata": {}})])
        store = QdrantVectorStore(_embedding_service(), client=mock_client)

        with pytest.raises(MalformedResponseError):
            await store.similarity_search(SearchRequest(query="hi"))

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        """Transport failures raise BackendUnavailableError."""
        mock_client = _create_mock_client()
        mock_client.upsert.side_effect = ConnectionError("refused")
        store = QdrantVectorStore(_embedding_service(), client=mock_client)

        with pytest.raises(BackendUnavailableError) as exc_info:
            await store.add([Document(content="a")])
        assert exc_info.value.code == ErrorCode.BACKEND_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_missing_collection(self) -> None:
        """A 404 from Qdrant is reported as a missing collection."""
        mock_client = _create_mock_client()
        mock_client.query_points.side_effect = _unexpected(404)
        store = QdrantVectorStore(_embedding_service(), client=mock_client)

        with pytest.raises(VectorStoreError) as exc_info:
            await store.similarity_search(SearchRequest(query="hi"))
        assert exc_info.value.code == ErrorCode.COLLECTION_NOT_FOUND
        assert exc_info.value.details["status_code"] == 404

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        """Owned client is closed."""
        mock_client = _create_mock_client()
        store = QdrantVectorStore(_embedding_service(), client=mock_client)
        store._owns_client = True

        await store.close()
        mock_client.close.assert_called_once()
