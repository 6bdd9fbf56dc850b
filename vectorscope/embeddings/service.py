"""Embedding service interface and HTTP implementation."""

import time
from abc import ABC, abstractmethod
from typing import Any

import httpx

from vectorscope.config import EmbeddingSettings, get_settings
from vectorscope.embeddings.models import EmbeddingBatch, EmbeddingResult
from vectorscope.exceptions import EmbeddingError, MalformedResponseError
from vectorscope.logging_config import get_logger
from vectorscope.observability.metrics import track_embedding_request
from vectorscope.usage import Usage, normalize_usage

logger = get_logger(__name__)


class EmbeddingService(ABC):
    """Abstract base class for embedding providers.

    Vector stores call this to embed documents on ``add`` and queries on
    ``similarity_search``.
    """

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> EmbeddingBatch:
        """Generate embeddings for multiple texts.

        Args:
            texts: Texts to embed, in order.

        Returns:
            EmbeddingBatch with one result per text and the summed usage.

        Raises:
            EmbeddingError: If embedding fails.
        """
        ...

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the model name used for embeddings."""
        ...

    @property
    @abstractmethod
    def dimensions(self) -> int | None:
        """Embedding dimensionality, or None until known."""
        ...


class HTTPEmbeddingService(EmbeddingService):
    """Embedding service for OpenAI-compatible ``/embeddings`` APIs."""

    MODEL_DIMENSIONS = {
        "text-embedding-ada-002": 1536,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "BAAI/bge-large-en-v1.5": 1024,
        "BAAI/bge-base-en-v1.5": 768,
        "BAAI/bge-small-en-v1.5": 384,
    }

    def __init__(
        self,
        settings: EmbeddingSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the HTTP embedding service.

        Args:
            settings: Embedding configuration. Uses defaults if not provided.
            client: HTTP client. Creates new one if not provided.
        """
        self._settings = settings or get_settings().embedding
        self._client = client
        self._owns_client = client is None
        self._dimensions: int | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def model_name(self) -> str:
        return self._settings.model

    @property
    def dimensions(self) -> int | None:
        """Learned dimensions, else the known size of the configured model."""
        if self._dimensions is not None:
            return self._dimensions
        return self.MODEL_DIMENSIONS.get(self._settings.model)

    async def embed(self, text: str) -> EmbeddingResult:
        batch = await self.embed_batch([text])
        return batch.results[0]

    async def embed_batch(self, texts: list[str]) -> EmbeddingBatch:
        if not texts:
            return EmbeddingBatch()

        client = await self._get_client()
        url = f"{self._settings.base_url.rstrip('/')}/embeddings"

        results: list[EmbeddingResult] = []
        usage = Usage()
        batch_size = self._settings.batch_size

        for i in range(0, len(texts), batch_size):
            chunk = texts[i : i + batch_size]
            batch = await self._embed_batch_request(client, url, chunk)
            results.extend(batch.results)
            usage = usage + batch.usage

        return EmbeddingBatch(results=results, usage=usage)

    def _headers(self) -> dict[str, str]:
        if self._settings.api_key is None:
            return {}
        return {"Authorization": f"Bearer {self._settings.api_key.get_secret_value()}"}

    def _track(
        self,
        start: float,
        texts: list[str],
        success: bool,
        total_tokens: int = 0,
    ) -> None:
        track_embedding_request(
            self.model_name,
            time.perf_counter() - start,
            len(texts),
            success=success,
            total_tokens=total_tokens,
        )

    async def _embed_batch_request(
        self,
        client: httpx.AsyncClient,
        url: str,
        texts: list[str],
    ) -> EmbeddingBatch:
        """Make one embedding request.

        Raises:
            EmbeddingError: If the request fails or the response is unusable.
            MalformedResponseError: If the usage payload has the wrong shape.
        """
        start = time.perf_counter()
        try:
            response = await client.post(
                url,
                json={"input": texts, "model": self._settings.model},
                headers=self._headers(),
            )
            response.raise_for_status()
            batch = self._parse_response(response.json(), texts)
        except httpx.HTTPStatusError as e:
            self._track(start, texts, success=False)
            status = e.response.status_code
            logger.error(
                f"Embedding request failed: {status}",
                extra={"url": url, "status": status},
            )
            raise EmbeddingError(
                f"Embedding service returned {status}",
                details={"status_code": status},
            ) from e
        except httpx.RequestError as e:
            self._track(start, texts, success=False)
            logger.error(f"Embedding request error: {e}", extra={"url": url})
            raise EmbeddingError(
                f"Failed to connect to embedding service: {e}",
                details={"url": url},
            ) from e
        except MalformedResponseError:
            self._track(start, texts, success=False)
            raise
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            self._track(start, texts, success=False)
            raise EmbeddingError(
                f"Invalid response from embedding service: {e}",
                details={"error": str(e)},
            ) from e

        self._track(start, texts, success=True, total_tokens=batch.usage.total_tokens)
        return batch

    def _parse_response(self, data: Any, texts: list[str]) -> EmbeddingBatch:
        entries = data["data"]
        usage = normalize_usage(data.get("usage"))

        if len(entries) != len(texts):
            raise ValueError(f"expected {len(texts)} embeddings, got {len(entries)}")

        # Entries carry an index in OpenAI responses; fall back to order.
        ordered = sorted(
            enumerate(entries),
            key=lambda item: item[1].get("index", item[0]),
        )

        results: list[EmbeddingResult] = []
        for text, (_, entry) in zip(texts, ordered):
            embedding = entry["embedding"]
            if self._dimensions is None and embedding:
                self._dimensions = len(embedding)
            results.append(
                EmbeddingResult(
                    text=text,
                    embedding=embedding,
                    model=self._settings.model,
                    dimensions=len(embedding),
                )
            )

        return EmbeddingBatch(results=results, usage=usage)
