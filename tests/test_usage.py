"""Tests for usage normalization."""

from typing import Any

import pytest

from vectorscope.exceptions import MalformedResponseError
from vectorscope.usage import (
    CompletionTokenDetails,
    PromptTokensDetails,
    RawUsage,
    Usage,
    normalize_usage,
)


class TestNormalizeUsage:
    """Tests for normalize_usage."""

    def test_total_computed_when_missing(self) -> None:
        """Null total is prompt + generation."""
        usage = normalize_usage(
            {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": None}
        )
        assert usage.prompt_tokens == 10
        assert usage.generation_tokens == 5
        assert usage.total_tokens == 15

    def test_provider_total_trusted(self) -> None:
        """Provider total is kept even when it disagrees."""
        usage = normalize_usage(
            {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 20}
        )
        assert usage.total_tokens == 20

    def test_missing_counts_are_zero(self) -> None:
        """Absent counts default to zero."""
        usage = normalize_usage({"completion_tokens": 7})
        assert usage.prompt_tokens == 0
        assert usage.generation_tokens == 7
        assert usage.total_tokens == 7

    def test_missing_details_are_zero_records(self) -> None:
        """Absent detail payloads become all-zero records."""
        usage = normalize_usage({"prompt_tokens": 3})
        assert usage.prompt_tokens_details == PromptTokensDetails()
        assert usage.completion_tokens_details == CompletionTokenDetails()

    def test_partial_details(self) -> None:
        """Null detail fields become zero."""
        usage = normalize_usage(
            {
                "prompt_tokens": 3,
                "prompt_tokens_details": {"cached_tokens": 2, "audio_tokens": None},
                "completion_tokens_details": {"reasoning_tokens": 4},
            }
        )
        assert usage.prompt_tokens_details.cached_tokens == 2
        assert usage.prompt_tokens_details.audio_tokens == 0
        assert usage.completion_tokens_details.reasoning_tokens == 4
        assert usage.completion_tokens_details.rejected_prediction_tokens == 0

    def test_none_is_empty_usage(self) -> None:
        """No usage payload means zero usage."""
        assert normalize_usage(None) == Usage()

    def test_empty_mapping(self) -> None:
        """Empty mapping means zero usage."""
        assert normalize_usage({}) == Usage()

    def test_unknown_keys_ignored(self) -> None:
        """Extra provider fields are ignored."""
        usage = normalize_usage({"prompt_tokens": 1, "vendor_field": "x"})
        assert usage.total_tokens == 1

    def test_raw_usage_accepted(self) -> None:
        """Parsed RawUsage is normalized the same way."""
        usage = normalize_usage(RawUsage(prompt_tokens=4, completion_tokens=1))
        assert usage.total_tokens == 5

    def test_usage_returned_unchanged(self) -> None:
        """Already normalized usage passes through."""
        usage = Usage(prompt_tokens=1, total_tokens=1)
        assert normalize_usage(usage) is usage

    def test_idempotent_through_raw_form(self) -> None:
        """Normalizing the raw rendering yields the same record."""
        usage = normalize_usage(
            {
                "prompt_tokens": 10,
                "completion_tokens": 5,
                "prompt_tokens_details": {"cached_tokens": 1},
            }
        )
        assert normalize_usage(usage.to_raw()) == usage

    def test_non_mapping_rejected(self) -> None:
        """Non-mapping payload raises MalformedResponseError."""
        with pytest.raises(MalformedResponseError):
            normalize_usage([10, 5])  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "raw",
        [
            {"prompt_tokens": "many"},
            {"prompt_tokens": "10"},
            {"completion_tokens": True},
            {"total_tokens": 12.5},
            {"prompt_tokens_details": {"cached_tokens": "3"}},
            {"completion_tokens_details": {"reasoning_tokens": False}},
        ],
    )
    def test_wrong_field_type_rejected(self, raw: dict[str, Any]) -> None:
        """Counts that are not integers raise MalformedResponseError."""
        with pytest.raises(MalformedResponseError) as exc_info:
            normalize_usage(raw)
        assert exc_info.value.details["errors"]

    def test_negative_count_rejected(self) -> None:
        """Negative counts raise MalformedResponseError."""
        with pytest.raises(MalformedResponseError):
            normalize_usage({"prompt_tokens": -1})


class TestUsage:
    """Tests for the Usage record."""

    def test_to_raw_uses_provider_names(self) -> None:
        """Raw form uses completion_tokens for generation."""
        raw = Usage(prompt_tokens=2, generation_tokens=3, total_tokens=5).to_raw()
        assert raw["prompt_tokens"] == 2
        assert raw["completion_tokens"] == 3
        assert raw["total_tokens"] == 5
        assert raw["prompt_tokens_details"] == {"audio_tokens": 0, "cached_tokens": 0}

    def test_addition(self) -> None:
        """Usages sum field by field."""
        first = Usage(
            prompt_tokens=1,
            total_tokens=1,
            prompt_tokens_details=PromptTokensDetails(cached_tokens=1),
        )
        second = Usage(
            prompt_tokens=2,
            generation_tokens=3,
            total_tokens=5,
            completion_tokens_details=CompletionTokenDetails(reasoning_tokens=2),
        )

        combined = first + second

        assert combined.prompt_tokens == 3
        assert combined.generation_tokens == 3
        assert combined.total_tokens == 6
        assert combined.prompt_tokens_details.cached_tokens == 1
        assert combined.completion_tokens_details.reasoning_tokens == 2
