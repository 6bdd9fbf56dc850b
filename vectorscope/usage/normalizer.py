"""Normalize provider token usage into a complete Usage record."""

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from vectorscope.exceptions import MalformedResponseError
from vectorscope.usage.models import (
    CompletionTokenDetails,
    PromptTokensDetails,
    RawUsage,
    Usage,
)


def _or_zero(value: int | None) -> int:
    return value if value is not None else 0


def normalize_usage(raw: Mapping[str, Any] | RawUsage | Usage | None) -> Usage:
    """Resolve a partially populated usage payload into a Usage record.

    Missing counts become 0 and missing detail payloads become all-zero
    records. A provider-supplied total is trusted verbatim; otherwise the
    total is prompt + generation tokens.

    Args:
        raw: Provider usage mapping, parsed RawUsage, an already normalized
            Usage (returned unchanged) or None.

    Returns:
        Fully populated Usage.

    Raises:
        MalformedResponseError: If the payload is not a usage mapping.
    """
    if isinstance(raw, Usage):
        return raw
    if raw is None:
        return Usage()

    if isinstance(raw, RawUsage):
        parsed = raw
    elif isinstance(raw, Mapping):
        try:
            parsed = RawUsage.model_validate(dict(raw))
        except ValidationError as e:
            raise MalformedResponseError(
                f"Invalid usage payload: {e.error_count()} error(s)",
                details={"errors": e.errors(include_url=False, include_input=False)},
            ) from e
    else:
        raise MalformedResponseError(
            f"Usage payload must be a mapping, got {type(raw).__name__}",
            details={"type": type(raw).__name__},
        )

    prompt_tokens = _or_zero(parsed.prompt_tokens)
    generation_tokens = _or_zero(parsed.completion_tokens)
    total_tokens = (
        parsed.total_tokens
        if parsed.total_tokens is not None
        else prompt_tokens + generation_tokens
    )

    prompt_details = PromptTokensDetails()
    if parsed.prompt_tokens_details is not None:
        prompt_details = PromptTokensDetails(
            audio_tokens=_or_zero(parsed.prompt_tokens_details.audio_tokens),
            cached_tokens=_or_zero(parsed.prompt_tokens_details.cached_tokens),
        )

    completion_details = CompletionTokenDetails()
    if parsed.completion_tokens_details is not None:
        details = parsed.completion_tokens_details
        completion_details = CompletionTokenDetails(
            reasoning_tokens=_or_zero(details.reasoning_tokens),
            accepted_prediction_tokens=_or_zero(details.accepted_prediction_tokens),
            audio_tokens=_or_zero(details.audio_tokens),
            rejected_prediction_tokens=_or_zero(details.rejected_prediction_tokens),
        )

    return Usage(
        prompt_tokens=prompt_tokens,
        generation_tokens=generation_tokens,
        total_tokens=total_tokens,
        prompt_tokens_details=prompt_details,
        completion_tokens_details=completion_details,
    )
