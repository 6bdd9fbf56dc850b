"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Distance(str, Enum):
    """Similarity metric used to compare embeddings.

    Only metrics where a higher score means more similar are offered, so a
    similarity threshold is always a lower bound.
    """

    COSINE = "cosine"
    DOT = "dot"


class EmbeddingSettings(BaseSettings):
    """Embedding provider configuration.

    Targets any OpenAI-compatible /embeddings endpoint.
    """

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="http://localhost:8080",
        description="Embedding service base URL",
    )
    model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Bearer token for the embedding API",
    )
    batch_size: int = Field(
        default=32,
        description="Maximum texts per embedding request",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class QdrantSettings(BaseSettings):
    """Qdrant vector database configuration."""

    model_config = SettingsConfigDict(env_prefix="QDRANT_")

    url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Qdrant API key (optional for local)",
    )
    collection_name: str = Field(
        default="vector_store",
        description="Collection holding the documents",
    )
    distance: Distance = Field(
        default=Distance.COSINE,
        description="Distance function of the collection",
    )
    initialize_schema: bool = Field(
        default=False,
        description="Create the collection on first use if missing",
    )


class ObservabilitySettings(BaseSettings):
    """Which observation handlers are registered."""

    model_config = SettingsConfigDict(env_prefix="OBSERVABILITY_")

    enabled: bool = Field(
        default=True,
        description="Emit observations for vector store operations",
    )
    log_observations: bool = Field(
        default=False,
        description="Log every finished observation",
    )
    metrics_enabled: bool = Field(
        default=True,
        description="Record Prometheus metrics from observations",
    )
    tracing_enabled: bool = Field(
        default=False,
        description="Export observations as OpenTelemetry spans",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    # Nested settings
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    qdrant: QdrantSettings = Field(default_factory=QdrantSettings)
    observability: ObservabilitySettings = Field(
        default_factory=ObservabilitySettings
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
