"""Prometheus metrics for vectorscope.

Provides metrics instrumentation for:
- Vector store operation latency, counts and document volume
- Embedding request latency, batch size and token usage
"""

from prometheus_client import Counter, Histogram, generate_latest

from vectorscope.observability.convention import LowCardinalityKeyNames
from vectorscope.observability.observation import Observation, ObservationHandler


# Vector Store Metrics
VECTORSTORE_OPERATION_DURATION = Histogram(
    "vectorstore_operation_duration_seconds",
    "Vector store operation duration",
    ["operation", "db_system", "status"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

VECTORSTORE_OPERATION_TOTAL = Counter(
    "vectorstore_operations_total",
    "Total vector store operations",
    ["operation", "db_system", "status"],
)

VECTORSTORE_DOCUMENTS = Histogram(
    "vectorstore_documents",
    "Documents added, deleted or returned per operation",
    ["operation", "db_system"],
    buckets=[0, 1, 2, 5, 10, 25, 50, 100, 250, 1000],
)

# Embedding Metrics
EMBEDDING_REQUEST_DURATION = Histogram(
    "embedding_request_duration_seconds",
    "Embedding request duration in seconds",
    ["model", "status"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0],
)

EMBEDDING_REQUEST_TOTAL = Counter(
    "embedding_requests_total",
    "Total embedding requests",
    ["model", "status"],
)

EMBEDDING_BATCH_SIZE = Histogram(
    "embedding_batch_size",
    "Embedding batch size",
    ["model"],
    buckets=[1, 5, 10, 25, 50, 100, 250, 500],
)

EMBEDDING_TOKENS_TOTAL = Counter(
    "embedding_tokens_total",
    "Total tokens consumed by embedding requests",
    ["model"],
)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def track_vectorstore_operation(
    operation: str,
    db_system: str,
    duration: float,
    success: bool = True,
    document_count: int | None = None,
) -> None:
    """Track one vector store operation.

    Args:
        operation: Operation name (add, delete, query).
        db_system: Backend identifier.
        duration: Operation duration in seconds.
        success: Whether the operation succeeded.
        document_count: Documents involved, when known.
    """
    status = "success" if success else "error"

    VECTORSTORE_OPERATION_DURATION.labels(
        operation=operation, db_system=db_system, status=status
    ).observe(duration)
    VECTORSTORE_OPERATION_TOTAL.labels(
        operation=operation, db_system=db_system, status=status
    ).inc()

    if success and document_count is not None:
        VECTORSTORE_DOCUMENTS.labels(
            operation=operation, db_system=db_system
        ).observe(document_count)


def track_embedding_request(
    model: str,
    duration: float,
    batch_size: int,
    success: bool = True,
    total_tokens: int = 0,
) -> None:
    """Track embedding request metrics.

    Args:
        model: Embedding model name.
        duration: Request duration in seconds.
        batch_size: Number of texts in the batch.
        success: Whether the request succeeded.
        total_tokens: Tokens reported by the provider.
    """
    status = "success" if success else "error"

    EMBEDDING_REQUEST_DURATION.labels(model=model, status=status).observe(duration)
    EMBEDDING_REQUEST_TOTAL.labels(model=model, status=status).inc()
    EMBEDDING_BATCH_SIZE.labels(model=model).observe(batch_size)

    if success and total_tokens:
        EMBEDDING_TOKENS_TOTAL.labels(model=model).inc(total_tokens)


class PrometheusObservationHandler(ObservationHandler):
    """Records vector store observations as Prometheus metrics.

    Only low-cardinality attributes become labels.
    """

    def on_stop(self, observation: Observation) -> None:
        if observation.attributes is None:
            return

        labels = observation.attributes.low_cardinality
        context = observation.context
        track_vectorstore_operation(
            operation=labels.get(
                LowCardinalityKeyNames.DB_OPERATION_NAME.value,
                context.operation_name.value,
            ),
            db_system=labels.get(
                LowCardinalityKeyNames.DB_SYSTEM.value, context.database_system
            ),
            duration=observation.duration or 0.0,
            success=not observation.failed,
            document_count=context.document_count,
        )
