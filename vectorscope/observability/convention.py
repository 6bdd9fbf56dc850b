"""Naming and attribute convention for vector store observations.

Every vector store operation is reported under one observation name so that
all of them can be found together regardless of backend. Attributes are split
by cardinality: low-cardinality values are bounded and safe as metric labels,
high-cardinality values belong on traces only. An attribute that does not
apply to a backend or operation is still emitted, with the value ``none``.
"""

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from vectorscope.observability.context import VectorStoreOperationContext

NONE_VALUE = "none"
VECTOR_STORE_KIND = "vector_store"


class LowCardinalityKeyNames(str, Enum):
    """Attribute keys with a bounded value set."""

    DB_OPERATION_NAME = "db.operation.name"
    DB_SYSTEM = "db.system"
    AI_KIND = "ai.kind"


class HighCardinalityKeyNames(str, Enum):
    """Attribute keys with unbounded values."""

    QUERY = "db.vector.query.content"
    DIMENSIONS = "db.vector.dimension_count"
    COLLECTION_NAME = "db.collection.name"
    NAMESPACE = "db.namespace"
    FIELD_NAME = "db.vector.field_name"
    SIMILARITY_METRIC = "db.vector.similarity_metric"
    TOP_K = "db.vector.query.top_k"
    SIMILARITY_THRESHOLD = "db.vector.query.similarity_threshold"


class ObservationAttributes(BaseModel):
    """Name and attributes the convention assigns to one observation."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Observation name shared by all operations")
    contextual_name: str = Field(description="Per-call human-readable name")
    low_cardinality: dict[str, str] = Field(default_factory=dict)
    high_cardinality: dict[str, str] = Field(default_factory=dict)

    @property
    def all(self) -> dict[str, str]:
        return {**self.low_cardinality, **self.high_cardinality}


def _or_none(value: object) -> str:
    return NONE_VALUE if value is None else str(value)


class VectorStoreObservationConvention(ABC):
    """Maps an operation context to an observation name and attributes.

    Implementations must be pure: the same context always yields the same
    attributes.
    """

    @abstractmethod
    def get_name(self) -> str:
        ...

    @abstractmethod
    def get_contextual_name(self, context: VectorStoreOperationContext) -> str:
        ...

    @abstractmethod
    def get_low_cardinality_key_values(
        self, context: VectorStoreOperationContext
    ) -> dict[str, str]:
        ...

    @abstractmethod
    def get_high_cardinality_key_values(
        self, context: VectorStoreOperationContext
    ) -> dict[str, str]:
        ...

    def __call__(self, context: VectorStoreOperationContext) -> ObservationAttributes:
        return ObservationAttributes(
            name=self.get_name(),
            contextual_name=self.get_contextual_name(context),
            low_cardinality=self.get_low_cardinality_key_values(context),
            high_cardinality=self.get_high_cardinality_key_values(context),
        )


class DefaultVectorStoreObservationConvention(VectorStoreObservationConvention):
    """Default naming: ``vector_store <db.system> <operation>``."""

    DEFAULT_NAME = "db.vector.client.operation"

    def __init__(self, name: str = DEFAULT_NAME) -> None:
        self._name = name

    def get_name(self) -> str:
        return self._name

    def get_contextual_name(self, context: VectorStoreOperationContext) -> str:
        return (
            f"{VECTOR_STORE_KIND} {context.database_system} "
            f"{context.operation_name.value}"
        )

    def get_low_cardinality_key_values(
        self, context: VectorStoreOperationContext
    ) -> dict[str, str]:
        return {
            LowCardinalityKeyNames.DB_OPERATION_NAME.value: context.operation_name.value,
            LowCardinalityKeyNames.DB_SYSTEM.value: context.database_system,
            LowCardinalityKeyNames.AI_KIND.value: VECTOR_STORE_KIND,
        }

    def get_high_cardinality_key_values(
        self, context: VectorStoreOperationContext
    ) -> dict[str, str]:
        keys = HighCardinalityKeyNames
        return {
            keys.QUERY.value: _or_none(context.query),
            keys.DIMENSIONS.value: _or_none(context.dimensions),
            keys.COLLECTION_NAME.value: _or_none(context.collection_name),
            keys.NAMESPACE.value: _or_none(context.namespace),
            keys.FIELD_NAME.value: _or_none(context.field_name),
            keys.SIMILARITY_METRIC.value: _or_none(context.similarity_metric),
            keys.TOP_K.value: _or_none(context.top_k),
            keys.SIMILARITY_THRESHOLD.value: _or_none(context.similarity_threshold),
        }
