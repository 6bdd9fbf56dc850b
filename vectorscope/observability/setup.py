"""Build an ObservationRegistry from configuration."""

from opentelemetry.trace import Tracer

from vectorscope.config import ObservabilitySettings, get_settings
from vectorscope.logging_config import get_logger
from vectorscope.observability.handlers import LoggingObservationHandler
from vectorscope.observability.metrics import PrometheusObservationHandler
from vectorscope.observability.observation import ObservationRegistry
from vectorscope.observability.tracing import OpenTelemetryObservationHandler

logger = get_logger(__name__)


def setup_observability(
    settings: ObservabilitySettings | None = None,
    tracer: Tracer | None = None,
) -> ObservationRegistry:
    """Create a registry with the handlers enabled in settings.

    Args:
        settings: Observability configuration (default from environment).
        tracer: Tracer for span export; the global tracer when omitted.

    Returns:
        Registry to pass to ObservedVectorStore. It has no handlers when
        observability is disabled.
    """
    settings = settings or get_settings().observability
    registry = ObservationRegistry()

    if not settings.enabled:
        logger.info("Vector store observability disabled")
        return registry

    if settings.log_observations:
        registry.add_handler(LoggingObservationHandler())
    if settings.metrics_enabled:
        registry.add_handler(PrometheusObservationHandler())
    if settings.tracing_enabled:
        registry.add_handler(OpenTelemetryObservationHandler(tracer))

    logger.info(
        "Vector store observability configured",
        extra={"handlers": [type(h).__name__ for h in registry.handlers]},
    )
    return registry
