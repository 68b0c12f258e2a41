from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from continuum.domain.errors import MergeError
from continuum.domain.models.chunk import Chunk
from continuum.domain.types import MergeStrategy, OutputFormat


class BaseMerger(ABC):
    """
    Shared shape for format mergers.

    Subclasses implement `merge()` over chunks in insertion order. They may
    raise `MergeError` on structural corruption but must never reorder or skip
    a chunk's content.
    """

    __slots__ = ()

    format: OutputFormat | None = None
    strategy: MergeStrategy = MergeStrategy.GENERIC

    @property
    def name(self) -> str:
        return self.strategy.value

    @abstractmethod
    def merge(self, chunks: Sequence[Chunk], /) -> str: ...

    def boundary_marker(self, merged_so_far: str, /) -> str:
        """Human-readable position of a continuation boundary, e.g. `char:1024`."""
        return f"char:{len(merged_so_far)}"


def ordered_contents(chunks: Sequence[Chunk], /) -> list[str]:
    """Chunk contents in merge order, validating that the order is intact."""
    contents: list[str] = []
    for position, chunk in enumerate(chunks):
        if chunk.sequence_index < position:
            raise MergeError(
                f"Chunks out of order: position {position} holds sequence_index "
                f"{chunk.sequence_index}",
                chunk_count=len(chunks),
            )
        contents.append(chunk.raw_content or "")
    return contents
