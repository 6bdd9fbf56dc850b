"""Token usage data models."""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, Strict


class PromptTokensDetails(BaseModel):
    """Breakdown of prompt tokens."""

    model_config = ConfigDict(frozen=True)

    audio_tokens: int = Field(default=0, ge=0)
    cached_tokens: int = Field(default=0, ge=0)


class CompletionTokenDetails(BaseModel):
    """Breakdown of generated tokens."""

    model_config = ConfigDict(frozen=True)

    reasoning_tokens: int = Field(default=0, ge=0)
    accepted_prediction_tokens: int = Field(default=0, ge=0)
    audio_tokens: int = Field(default=0, ge=0)
    rejected_prediction_tokens: int = Field(default=0, ge=0)


class Usage(BaseModel):
    """Fully populated token accounting for one provider call.

    Attributes:
        prompt_tokens: Tokens consumed by the input.
        generation_tokens: Tokens produced by the model.
        total_tokens: Provider total, or prompt + generation.
        prompt_tokens_details: Prompt breakdown, zeros when unreported.
        completion_tokens_details: Completion breakdown, zeros when unreported.
    """

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = Field(default=0, ge=0)
    generation_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)
    prompt_tokens_details: PromptTokensDetails = Field(
        default_factory=PromptTokensDetails
    )
    completion_tokens_details: CompletionTokenDetails = Field(
        default_factory=CompletionTokenDetails
    )

    def to_raw(self) -> dict[str, Any]:
        """Render in the provider's wire shape (OpenAI field names)."""
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.generation_tokens,
            "total_tokens": self.total_tokens,
            "prompt_tokens_details": self.prompt_tokens_details.model_dump(),
            "completion_tokens_details": self.completion_tokens_details.model_dump(),
        }

    def __add__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        prompt = self.prompt_tokens_details
        completion = self.completion_tokens_details
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            generation_tokens=self.generation_tokens + other.generation_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
            prompt_tokens_details=PromptTokensDetails(
                audio_tokens=prompt.audio_tokens
                + other.prompt_tokens_details.audio_tokens,
                cached_tokens=prompt.cached_tokens
                + other.prompt_tokens_details.cached_tokens,
            ),
            completion_tokens_details=CompletionTokenDetails(
                reasoning_tokens=completion.reasoning_tokens
                + other.completion_tokens_details.reasoning_tokens,
                accepted_prediction_tokens=completion.accepted_prediction_tokens
                + other.completion_tokens_details.accepted_prediction_tokens,
                audio_tokens=completion.audio_tokens
                + other.completion_tokens_details.audio_tokens,
                rejected_prediction_tokens=completion.rejected_prediction_tokens
                + other.completion_tokens_details.rejected_prediction_tokens,
            ),
        )


# Providers send JSON integers; strings and booleans are malformed, not coerced
TokenCount = Annotated[NonNegativeInt, Strict()]


class RawPromptTokensDetails(BaseModel):
    """Prompt details as reported by the provider; any field may be null."""

    audio_tokens: TokenCount | None = None
    cached_tokens: TokenCount | None = None


class RawCompletionTokenDetails(BaseModel):
    """Completion details as reported by the provider; any field may be null."""

    reasoning_tokens: TokenCount | None = None
    accepted_prediction_tokens: TokenCount | None = None
    audio_tokens: TokenCount | None = None
    rejected_prediction_tokens: TokenCount | None = None


class RawUsage(BaseModel):
    """Usage payload exactly as the provider sent it."""

    model_config = ConfigDict(extra="ignore")

    prompt_tokens: TokenCount | None = None
    completion_tokens: TokenCount | None = None
    total_tokens: TokenCount | None = None
    prompt_tokens_details: RawPromptTokensDetails | None = None
    completion_tokens_details: RawCompletionTokenDetails | None = None
