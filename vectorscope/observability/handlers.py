"""Observation handlers that log or record observations."""

import logging
from enum import Enum

from vectorscope.logging_config import get_logger
from vectorscope.observability.observation import Observation, ObservationHandler

logger = get_logger(__name__)


class LoggingObservationHandler(ObservationHandler):
    """Logs each finished observation with its attributes."""

    def __init__(
        self,
        log: logging.Logger | None = None,
        level: int = logging.INFO,
    ) -> None:
        self._logger = log or logger
        self._level = level

    def on_start(self, observation: Observation) -> None:
        self._logger.debug(f"Observation started: {observation.contextual_name}")

    def on_stop(self, observation: Observation) -> None:
        attributes = observation.attributes.all if observation.attributes else {}
        extra = {
            "observation_name": observation.name,
            "duration_ms": round((observation.duration or 0.0) * 1000, 3),
            "attributes": attributes,
        }

        if observation.failed:
            self._logger.warning(
                f"Observation failed: {observation.contextual_name} "
                f"({type(observation.error).__name__})",
                extra=extra,
            )
            return

        self._logger.log(
            self._level,
            f"Observation stopped: {observation.contextual_name}",
            extra=extra,
        )


class ObservationEvent(str, Enum):
    """Lifecycle events captured by RecordingObservationHandler."""

    START = "start"
    ERROR = "error"
    STOP = "stop"


class RecordingObservationHandler(ObservationHandler):
    """Keeps every lifecycle event in memory.

    Lets tests and harnesses assert on what a vector store emitted without a
    tracing backend.
    """

    def __init__(self) -> None:
        self.events: list[tuple[ObservationEvent, Observation]] = []

    def on_start(self, observation: Observation) -> None:
        self.events.append((ObservationEvent.START, observation))

    def on_error(self, observation: Observation) -> None:
        self.events.append((ObservationEvent.ERROR, observation))

    def on_stop(self, observation: Observation) -> None:
        self.events.append((ObservationEvent.STOP, observation))

    def count(self, event: ObservationEvent) -> int:
        return sum(1 for recorded, _ in self.events if recorded is event)

    @property
    def observations(self) -> list[Observation]:
        """Distinct observations in the order they started."""
        return [obs for event, obs in self.events if event is ObservationEvent.START]

    @property
    def stopped(self) -> list[Observation]:
        return [obs for event, obs in self.events if event is ObservationEvent.STOP]

    def with_contextual_name(self, contextual_name: str) -> list[Observation]:
        return [
            obs for obs in self.observations if obs.contextual_name == contextual_name
        ]

    def clear(self) -> None:
        self.events.clear()
