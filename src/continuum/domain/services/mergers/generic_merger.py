from __future__ import annotations

from collections.abc import Sequence

from continuum.domain.models.chunk import Chunk
from continuum.domain.services.mergers.base import BaseMerger
from continuum.domain.types import MergeStrategy


class GenericMerger(BaseMerger):
    """Plain concatenation. Used when no structure can be assumed; never raises."""

    __slots__ = ()

    strategy = MergeStrategy.GENERIC

    def merge(self, chunks: Sequence[Chunk], /) -> str:
        return "".join(chunk.raw_content or "" for chunk in chunks)
