"""OpenTelemetry export of vector store observations.

Each observation becomes a CLIENT span named by its contextual name. The span
is opened on start with the low-cardinality attributes and receives the full
attribute set when the observation stops.
"""

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer

from vectorscope.observability.observation import Observation, ObservationHandler

_SPAN_KEY = "otel.span"


class OpenTelemetryObservationHandler(ObservationHandler):
    """Turns observations into OpenTelemetry spans."""

    def __init__(self, tracer: Tracer | None = None) -> None:
        self._tracer = tracer or trace.get_tracer("vectorscope")

    def on_start(self, observation: Observation) -> None:
        parent_context = otel_context.get_current()
        parent_span = self._span_of(observation.parent)
        if parent_span is not None:
            parent_context = trace.set_span_in_context(parent_span)

        attributes = observation.attributes
        span = self._tracer.start_span(
            attributes.contextual_name if attributes else observation.name,
            context=parent_context,
            kind=SpanKind.CLIENT,
            attributes=attributes.low_cardinality if attributes else None,
        )
        observation.handler_data[_SPAN_KEY] = span

    def on_error(self, observation: Observation) -> None:
        span = self._span_of(observation)
        if span is None or observation.error is None:
            return
        error = observation.error
        if isinstance(error, Exception):
            span.record_exception(error)
        span.set_status(Status(StatusCode.ERROR, f"{type(error).__name__}: {error}"))

    def on_stop(self, observation: Observation) -> None:
        span = observation.handler_data.pop(_SPAN_KEY, None)
        if span is None:
            return
        if observation.attributes is not None:
            span.set_attributes(observation.attributes.all)
        span.end()

    @staticmethod
    def _span_of(observation: Observation | None) -> Span | None:
        if observation is None:
            return None
        return observation.handler_data.get(_SPAN_KEY)
