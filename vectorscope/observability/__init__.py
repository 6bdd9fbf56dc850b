"""Observability for vector store operations: convention, lifecycle, sinks."""

from vectorscope.observability.context import (
    OperationName,
    VectorStoreOperationContext,
    VectorStoreProvider,
)
from vectorscope.observability.convention import (
    NONE_VALUE,
    DefaultVectorStoreObservationConvention,
    HighCardinalityKeyNames,
    LowCardinalityKeyNames,
    ObservationAttributes,
    VectorStoreObservationConvention,
)
from vectorscope.observability.handlers import (
    LoggingObservationHandler,
    ObservationEvent,
    RecordingObservationHandler,
)
from vectorscope.observability.metrics import (
    PrometheusObservationHandler,
    get_metrics,
    track_embedding_request,
    track_vectorstore_operation,
)
from vectorscope.observability.observation import (
    Observation,
    ObservationHandler,
    ObservationRegistry,
    ObservationState,
    current_observation,
)
from vectorscope.observability.setup import setup_observability
from vectorscope.observability.tracing import OpenTelemetryObservationHandler

__all__ = [
    "NONE_VALUE",
    "DefaultVectorStoreObservationConvention",
    "HighCardinalityKeyNames",
    "LoggingObservationHandler",
    "LowCardinalityKeyNames",
    "Observation",
    "ObservationAttributes",
    "ObservationEvent",
    "ObservationHandler",
    "ObservationRegistry",
    "ObservationState",
    "OpenTelemetryObservationHandler",
    "OperationName",
    "PrometheusObservationHandler",
    "RecordingObservationHandler",
    "VectorStoreObservationConvention",
    "VectorStoreOperationContext",
    "VectorStoreProvider",
    "current_observation",
    "get_metrics",
    "setup_observability",
    "track_embedding_request",
    "track_vectorstore_operation",
]
