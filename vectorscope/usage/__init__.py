"""Token usage accounting."""

from vectorscope.usage.models import (
    CompletionTokenDetails,
    PromptTokensDetails,
    RawUsage,
    Usage,
)
from vectorscope.usage.normalizer import normalize_usage

__all__ = [
    "CompletionTokenDetails",
    "PromptTokensDetails",
    "RawUsage",
    "Usage",
    "normalize_usage",
]
