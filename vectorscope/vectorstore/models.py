"""Vector store request models."""

from collections.abc import Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ModelWrapValidatorHandler,
    StrictFloat,
    StrictInt,
    ValidationError,
    field_validator,
    model_validator,
)

from vectorscope.documents.filters import FilterExpression, from_mapping
from vectorscope.exceptions import InvalidArgumentError

DEFAULT_TOP_K = 4
SIMILARITY_THRESHOLD_ACCEPT_ALL = 0.0


class SearchRequest(BaseModel):
    """Parameters of a similarity search.

    Attributes:
        query: Text to embed and compare against stored documents.
        top_k: Maximum number of results, at least 1.
        similarity_threshold: Minimum similarity in [0.0, 1.0]; 0.0 accepts all.
        filter: Optional metadata filter; a mapping is read as equality on
            every key.

    Raises:
        InvalidArgumentError: On construction with top_k < 1, a threshold
            outside [0.0, 1.0] or a value of the wrong type.
    """

    model_config = ConfigDict(frozen=True)

    query: str = Field(description="Query text")
    top_k: StrictInt = Field(default=DEFAULT_TOP_K, description="Maximum results")
    similarity_threshold: StrictFloat = Field(
        default=SIMILARITY_THRESHOLD_ACCEPT_ALL,
        description="Minimum similarity score",
    )
    filter: FilterExpression | None = Field(
        default=None,
        description="Metadata filter expression",
    )

    @model_validator(mode="wrap")
    @classmethod
    def _reject_invalid_types(
        cls, data: Any, handler: ModelWrapValidatorHandler["SearchRequest"]
    ) -> "SearchRequest":
        try:
            return handler(data)
        except ValidationError as e:
            errors = e.errors(include_url=False, include_input=False)
            raise InvalidArgumentError(
                f"Invalid search request: {e.error_count()} error(s)",
                details={
                    "field": ".".join(str(part) for part in errors[0]["loc"]),
                    "errors": errors,
                },
            ) from e

    @field_validator("top_k")
    @classmethod
    def _check_top_k(cls, value: int) -> int:
        if value < 1:
            raise InvalidArgumentError(
                f"top_k must be at least 1, got {value}",
                details={"field": "top_k", "value": value},
            )
        return value

    @field_validator("similarity_threshold")
    @classmethod
    def _check_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise InvalidArgumentError(
                f"similarity_threshold must be within [0.0, 1.0], got {value}",
                details={"field": "similarity_threshold", "value": value},
            )
        return value

    @field_validator("filter", mode="before")
    @classmethod
    def _coerce_filter(cls, value: Any) -> Any:
        if isinstance(value, Mapping) and value:
            return from_mapping(value)
        if isinstance(value, Mapping):
            return None
        return value

    def with_top_k(self, top_k: int) -> "SearchRequest":
        return self._copy(top_k=top_k)

    def with_similarity_threshold(self, threshold: float) -> "SearchRequest":
        return self._copy(similarity_threshold=threshold)

    def with_filter(
        self, filter: FilterExpression | Mapping[str, Any] | None
    ) -> "SearchRequest":
        return self._copy(filter=filter)

    def _copy(self, **changes: Any) -> "SearchRequest":
        # model_copy skips validation
        return SearchRequest(**{**dict(self), **changes})


class VectorStoreDescriptor(BaseModel):
    """What a backend reports about itself for telemetry.

    Attributes that do not apply to a backend are None.
    """

    model_config = ConfigDict(frozen=True)

    database_system: str = Field(description="Backend identifier")
    similarity_metric: str = Field(description="Distance function")
    collection_name: str | None = None
    namespace: str | None = None
    field_name: str | None = None
    dimensions: int | None = None
