"""Observation lifecycle and registry.

An Observation brackets one vector store call: it is started before the
backend runs, stopped exactly once on every exit path, and is the "current"
observation for the task or thread that started it while it runs. The current
observation lives in a ContextVar, so concurrent tasks never see each other's.
"""

import time
from abc import ABC
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from contextvars import ContextVar, Token
from enum import Enum
from typing import Any

from vectorscope.exceptions import ObservationError
from vectorscope.logging_config import get_logger
from vectorscope.observability.context import VectorStoreOperationContext
from vectorscope.observability.convention import (
    DefaultVectorStoreObservationConvention,
    ObservationAttributes,
    VectorStoreObservationConvention,
)

logger = get_logger(__name__)

_current_observation: ContextVar["Observation | None"] = ContextVar(
    "vectorscope_current_observation", default=None
)


def current_observation() -> "Observation | None":
    """Observation currently open in this task or thread, if any."""
    return _current_observation.get()


class ObservationState(str, Enum):
    """Lifecycle state of an observation."""

    NOT_STARTED = "not_started"
    STARTED = "started"
    STOPPED = "stopped"


class ObservationHandler(ABC):
    """Receives observation lifecycle events.

    Handlers are the telemetry sink: they turn observations into logs,
    metrics or spans. A failing handler is logged and skipped.
    """

    def supports(self, observation: "Observation") -> bool:
        return True

    def on_start(self, observation: "Observation") -> None:
        pass

    def on_error(self, observation: "Observation") -> None:
        pass

    def on_stop(self, observation: "Observation") -> None:
        pass


class Observation:
    """One instrumented vector store operation."""

    def __init__(
        self,
        context: VectorStoreOperationContext,
        convention: VectorStoreObservationConvention,
        handlers: Sequence[ObservationHandler] = (),
    ) -> None:
        self.context = context
        self.convention = convention
        self.state = ObservationState.NOT_STARTED
        self.error: BaseException | None = None
        self.parent: Observation | None = None
        self.attributes: ObservationAttributes | None = None
        self.start_time: float | None = None
        self.stop_time: float | None = None
        # Per-handler scratch space, e.g. the span a tracing handler opened
        self.handler_data: dict[str, Any] = {}
        self._handlers = [h for h in handlers if h.supports(self)]
        self._token: Token["Observation | None"] | None = None

    @property
    def name(self) -> str:
        return self.convention.get_name()

    @property
    def contextual_name(self) -> str | None:
        return self.attributes.contextual_name if self.attributes else None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def duration(self) -> float | None:
        """Seconds between start and stop, once stopped."""
        if self.start_time is None or self.stop_time is None:
            return None
        return self.stop_time - self.start_time

    def start(self) -> "Observation":
        """Start the observation and make it current.

        Raises:
            ObservationError: If the observation was already started.
        """
        if self.state is not ObservationState.NOT_STARTED:
            raise ObservationError(
                f"Cannot start observation in state {self.state.value}",
                details={"state": self.state.value},
            )

        self.attributes = self.convention(self.context)
        self.parent = _current_observation.get()
        self._token = _current_observation.set(self)
        self.start_time = time.perf_counter()
        self.state = ObservationState.STARTED

        self._notify("on_start", self._handlers)
        return self

    def record_error(self, error: BaseException) -> None:
        """Mark the observation as failed."""
        self.error = error
        self._notify("on_error", self._handlers)

    def stop(self) -> None:
        """Finalize attributes, notify handlers and restore the previous current.

        Raises:
            ObservationError: If the observation is not started.
        """
        if self.state is not ObservationState.STARTED:
            raise ObservationError(
                f"Cannot stop observation in state {self.state.value}",
                details={"state": self.state.value},
            )

        self.stop_time = time.perf_counter()
        self.state = ObservationState.STOPPED

        try:
            self._refresh_attributes()
            self._notify("on_stop", reversed(self._handlers))
        finally:
            self._restore_parent()

    def _refresh_attributes(self) -> None:
        # A failing convention keeps the start-time attributes
        try:
            self.attributes = self.convention(self.context)
        except Exception:
            logger.exception(
                f"Observation convention {type(self.convention).__name__} failed",
                extra={"observation_name": self.contextual_name},
            )

    def _restore_parent(self) -> None:
        token, self._token = self._token, None
        if token is None:
            return
        try:
            _current_observation.reset(token)
        except ValueError:
            # Stopped from a different context than it was started in
            _current_observation.set(self.parent)

    def _notify(self, event: str, handlers: Iterable[ObservationHandler]) -> None:
        for handler in handlers:
            try:
                getattr(handler, event)(self)
            except Exception:
                logger.exception(
                    f"Observation handler {type(handler).__name__}.{event} failed",
                    extra={"observation_name": self.name},
                )

    def __repr__(self) -> str:
        return (
            f"Observation(name={self.name!r}, "
            f"contextual_name={self.contextual_name!r}, state={self.state.value})"
        )


class ObservationRegistry:
    """Creates observations and dispatches them to registered handlers."""

    def __init__(self, handlers: Iterable[ObservationHandler] = ()) -> None:
        self._handlers: list[ObservationHandler] = list(handlers)

    @property
    def handlers(self) -> tuple[ObservationHandler, ...]:
        return tuple(self._handlers)

    def add_handler(self, handler: ObservationHandler) -> None:
        self._handlers.append(handler)

    @property
    def current_observation(self) -> Observation | None:
        return current_observation()

    def create(
        self,
        context: VectorStoreOperationContext,
        convention: VectorStoreObservationConvention | None = None,
    ) -> Observation:
        """Create an observation without starting it."""
        return Observation(
            context,
            convention or DefaultVectorStoreObservationConvention(),
            self._handlers,
        )

    @contextmanager
    def observe(
        self,
        context: VectorStoreOperationContext,
        convention: VectorStoreObservationConvention | None = None,
    ) -> Iterator[Observation]:
        """Run the enclosed block under a started observation.

        The observation is stopped however the block exits. Exceptions,
        including cancellation, are recorded on the observation and re-raised
        unchanged.
        """
        observation = self.create(context, convention).start()
        try:
            yield observation
        except BaseException as e:
            observation.record_error(e)
            raise
        finally:
            observation.stop()
