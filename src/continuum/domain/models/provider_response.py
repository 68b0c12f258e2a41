from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from continuum.domain.models.usage import TokenUsage


@dataclass(slots=True, frozen=True)
class ProviderResponse:
    """
    Raw provider response, normalized to the fields the engine reads.

    `finish_reason` is kept as the provider's own string (or None when the
    provider omitted it); classification happens in the termination service.
    `continuation_handle` is the provider-issued token (for example a Responses
    API `id`) that lets the next request resume after this output.
    """

    content: str = ""
    finish_reason: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)
    continuation_handle: str | None = None
    model: str | None = None
    cost: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "finish_reason": self.finish_reason,
            "usage": self.usage.to_dict(),
            "continuation_handle": self.continuation_handle,
            "model": self.model,
            "cost": self.cost,
        }
