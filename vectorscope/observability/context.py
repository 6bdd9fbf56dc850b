"""Per-call context describing one vector store operation."""

from enum import Enum

from pydantic import BaseModel, Field


class OperationName(str, Enum):
    """Kind of vector store operation being observed."""

    ADD = "add"
    DELETE = "delete"
    QUERY = "query"


class VectorStoreProvider(str, Enum):
    """Database system identifiers reported by the shipped backends."""

    SIMPLE = "simple"
    QDRANT = "qdrant"


class VectorStoreOperationContext(BaseModel):
    """Everything the observation convention needs to describe one call.

    Created right before the backend is called and updated once with
    result-derived fields after it returns. Never shared between calls.

    Attributes:
        operation_name: add, delete or query.
        database_system: Backend identifier, e.g. ``qdrant``.
        collection_name: Collection/table the backend writes to, if any.
        namespace: Backend namespace or database, if any.
        field_name: Name of the vector field, if the backend has one.
        similarity_metric: Distance function, e.g. ``cosine``.
        dimensions: Embedding dimensionality, once known.
        query: Query text (query operations only).
        top_k: Requested result limit (query operations only).
        similarity_threshold: Minimum score (query operations only).
        document_count: Documents added, ids deleted or results returned.
    """

    operation_name: OperationName = Field(description="Operation kind")
    database_system: str = Field(description="Backend identifier")
    collection_name: str | None = None
    namespace: str | None = None
    field_name: str | None = None
    similarity_metric: str | None = None
    dimensions: int | None = None
    query: str | None = None
    top_k: int | None = None
    similarity_threshold: float | None = None
    document_count: int | None = None
