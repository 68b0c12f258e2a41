from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class TokenUsage:
    """Token accounting for a single provider response."""

    input_tokens: int = 0
    output_tokens: int = 0

    def __post_init__(self) -> None:
        if self.input_tokens < 0 or self.output_tokens < 0:
            raise ValueError("TokenUsage counts must be >= 0")

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> dict[str, int]:
        return {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenUsage:
        def _int_field(key: str) -> int:
            value = data.get(key, 0)
            if value is None:
                value = 0
            return int(value)

        return cls(input_tokens=_int_field("input_tokens"), output_tokens=_int_field("output_tokens"))

