"""Boolean filter expressions over document metadata.

Expressions are backend-neutral: the in-memory store evaluates them with
``matches`` and other backends translate them into their own filter types.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from vectorscope.documents.models import MetadataValue


class FilterOperator(str, Enum):
    """Comparison applied by a Condition."""

    EQ = "=="
    NE = "!="
    GT = ">"
    GTE = ">="
    LT = "<"
    LTE = "<="
    IN = "in"
    NIN = "nin"


class Condition(BaseModel):
    """Compare one metadata key against a value.

    A missing key fails every operator except NE and NIN.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Metadata key")
    operator: FilterOperator = Field(default=FilterOperator.EQ)
    value: MetadataValue | list[MetadataValue] = Field(description="Operand")

    def matches(self, metadata: Mapping[str, Any]) -> bool:
        if self.key not in metadata:
            return self.operator in (FilterOperator.NE, FilterOperator.NIN)

        actual = metadata[self.key]
        op = self.operator

        if op in (FilterOperator.IN, FilterOperator.NIN):
            values = self.value if isinstance(self.value, list) else [self.value]
            return (actual in values) == (op == FilterOperator.IN)
        if op == FilterOperator.EQ:
            return actual == self.value
        if op == FilterOperator.NE:
            return actual != self.value

        try:
            if op == FilterOperator.GT:
                return actual > self.value
            if op == FilterOperator.GTE:
                return actual >= self.value
            if op == FilterOperator.LT:
                return actual < self.value
            return actual <= self.value
        except TypeError:
            return False


class And(BaseModel):
    """All operands must match."""

    model_config = ConfigDict(frozen=True)

    operands: tuple["FilterExpression", ...]

    def matches(self, metadata: Mapping[str, Any]) -> bool:
        return all(operand.matches(metadata) for operand in self.operands)


class Or(BaseModel):
    """At least one operand must match."""

    model_config = ConfigDict(frozen=True)

    operands: tuple["FilterExpression", ...]

    def matches(self, metadata: Mapping[str, Any]) -> bool:
        return any(operand.matches(metadata) for operand in self.operands)


class Not(BaseModel):
    """The operand must not match."""

    model_config = ConfigDict(frozen=True)

    operand: "FilterExpression"

    def matches(self, metadata: Mapping[str, Any]) -> bool:
        return not self.operand.matches(metadata)


FilterExpression = Union[Condition, And, Or, Not]

And.model_rebuild()
Or.model_rebuild()
Not.model_rebuild()


def from_mapping(filters: Mapping[str, Any]) -> FilterExpression:
    """Build an equality filter from a ``{key: value}`` mapping.

    List values become IN conditions.
    """
    conditions = tuple(
        Condition(
            key=key,
            operator=FilterOperator.IN if isinstance(value, list) else FilterOperator.EQ,
            value=value,
        )
        for key, value in filters.items()
    )
    if len(conditions) == 1:
        return conditions[0]
    return And(operands=conditions)
