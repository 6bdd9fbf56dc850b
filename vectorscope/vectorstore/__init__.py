"""Vector store module."""

from vectorscope.vectorstore.memory import InMemoryVectorStore
from vectorscope.vectorstore.models import (
    DEFAULT_TOP_K,
    SIMILARITY_THRESHOLD_ACCEPT_ALL,
    SearchRequest,
    VectorStoreDescriptor,
)
from vectorscope.vectorstore.observed import ObservedVectorStore
from vectorscope.vectorstore.qdrant import QdrantVectorStore
from vectorscope.vectorstore.service import VectorStore

__all__ = [
    "DEFAULT_TOP_K",
    "SIMILARITY_THRESHOLD_ACCEPT_ALL",
    "InMemoryVectorStore",
    "ObservedVectorStore",
    "QdrantVectorStore",
    "SearchRequest",
    "VectorStore",
    "VectorStoreDescriptor",
]
