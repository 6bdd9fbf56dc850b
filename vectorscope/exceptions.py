"""Exception hierarchy for vectorscope.

All custom exceptions inherit from VectorScopeError and carry a structured
error code. InvalidArgumentError means nothing was attempted; every other
error was raised by an operation that ran under an observation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "VSC-1000"
    CONFIGURATION_ERROR = "VSC-1001"
    INVALID_ARGUMENT = "VSC-1002"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "VSC-3000"
    EMBEDDING_DIMENSION_MISMATCH = "VSC-3001"

    # Vector store errors (4xxx)
    VECTOR_STORE_ERROR = "VSC-4000"
    BACKEND_UNAVAILABLE = "VSC-4001"
    COLLECTION_NOT_FOUND = "VSC-4002"

    # Provider payload errors (5xxx)
    MALFORMED_RESPONSE = "VSC-5000"

    # Observation errors (6xxx)
    OBSERVATION_STATE_ERROR = "VSC-6000"


class VectorScopeError(Exception):
    """Base exception for all vectorscope errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable dictionary."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(VectorScopeError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class InvalidArgumentError(VectorScopeError):
    """Malformed request, rejected before any backend call."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_ARGUMENT, details)


class EmbeddingError(VectorScopeError):
    """Embedding provider error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class VectorStoreError(VectorScopeError):
    """Vector store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class BackendUnavailableError(VectorStoreError):
    """Storage backend could not be reached."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.BACKEND_UNAVAILABLE, details)


class MalformedResponseError(VectorScopeError):
    """Backend or provider returned a payload of unexpected shape."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.MALFORMED_RESPONSE, details)


class ObservationError(VectorScopeError):
    """Observation lifecycle used out of order."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.OBSERVATION_STATE_ERROR, details)
