from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from continuum.domain.models.usage import TokenUsage
from continuum.domain.types import TerminationKind


@dataclass(slots=True, frozen=True)
class Chunk:
    """
    One attempt's result inside a continuation session.

    `sequence_index` is the merge order. `continuation_handle` is what the
    provider returned with this response (used to resume after it);
    `resumed_from` is the handle the request for this chunk carried, so it is
    always None on the first chunk.
    """

    sequence_index: int
    raw_content: str
    termination: TerminationKind
    usage: TokenUsage = field(default_factory=TokenUsage)
    continuation_handle: str | None = None
    resumed_from: str | None = None

    def __post_init__(self) -> None:
        if self.sequence_index < 0:
            raise ValueError("Chunk.sequence_index must be >= 0")

    @property
    def is_blank(self) -> bool:
        return not self.raw_content.strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "sequence_index": self.sequence_index,
            "raw_content": self.raw_content,
            "termination": self.termination.value,
            "usage": self.usage.to_dict(),
            "continuation_handle": self.continuation_handle,
            "resumed_from": self.resumed_from,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chunk:
        return cls(
            sequence_index=int(data.get("sequence_index", 0)),
            raw_content=str(data.get("raw_content", "") or ""),
            termination=TerminationKind(data.get("termination", TerminationKind.UNSPECIFIED)),
            usage=TokenUsage.from_dict(data.get("usage", {}) or {}),
            continuation_handle=data.get("continuation_handle"),
            resumed_from=data.get("resumed_from"),
        )
