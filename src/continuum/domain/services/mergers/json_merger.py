from __future__ import annotations

import json
from collections.abc import Callable, Sequence

from continuum.domain.errors import MergeError
from continuum.domain.models.chunk import Chunk
from continuum.domain.services.format_detection import strip_code_fence
from continuum.domain.services.mergers.base import BaseMerger, ordered_contents
from continuum.domain.services.mergers.json_repair import repair_json
from continuum.domain.types import MergeStrategy, OutputFormat

# Receives the parsed document; raises to reject it.
JsonValidator = Callable[[object], object]


class JsonMerger(BaseMerger):
    """
    Merge JSON continuations.

    The concatenation is parsed as-is first, which is enough whenever the
    continuation resumed exactly at the cut. Otherwise the text goes through
    `repair_json` and is parsed again; if that still fails, `MergeError` is
    raised with the unrepaired text attached.
    """

    __slots__ = ("_validator",)

    format = OutputFormat.JSON
    strategy = MergeStrategy.JSON

    def __init__(self, *, validator: JsonValidator | None = None) -> None:
        self._validator = validator

    def merge(self, chunks: Sequence[Chunk], /) -> str:
        contents = ordered_contents(chunks)
        candidate = strip_code_fence("".join(contents).strip()).strip()
        if not candidate:
            raise MergeError(
                "No JSON content to merge",
                format=OutputFormat.JSON.value,
                chunk_count=len(contents),
                payload="",
            )

        try:
            value = json.loads(candidate)
            merged = candidate
        except ValueError:
            merged = repair_json(candidate)
            try:
                value = json.loads(merged)
            except ValueError as exc:
                raise MergeError(
                    f"JSON still invalid after repair: {exc}",
                    format=OutputFormat.JSON.value,
                    chunk_count=len(contents),
                    payload=candidate,
                    original=exc,
                ) from exc

        if self._validator is not None:
            try:
                self._validator(value)
            except Exception as exc:  # noqa: BLE001 - any validator rejection is a merge failure
                raise MergeError(
                    f"JSON failed schema validation: {exc}",
                    format=OutputFormat.JSON.value,
                    chunk_count=len(contents),
                    payload=merged,
                    original=exc,
                ) from exc
        return merged
