from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from continuum.domain.models.chunk import Chunk
from continuum.domain.services.format_detection import FormatDetection, detect_format
from continuum.domain.services.mergers import (
    BaseMerger,
    CsvMerger,
    GenericMerger,
    JsonMerger,
    JsonValidator,
    MarkdownMerger,
)
from continuum.domain.types import OutputFormat


def merger_for(fmt: OutputFormat | None, /, *, json_validator: JsonValidator | None = None) -> BaseMerger:
    match fmt:
        case OutputFormat.CSV:
            return CsvMerger()
        case OutputFormat.MARKDOWN:
            return MarkdownMerger()
        case OutputFormat.JSON:
            return JsonMerger(validator=json_validator)
        case OutputFormat.AUTO | None:
            return GenericMerger()


@dataclass(slots=True)
class MergerSelector:
    """
    Picks the merger for one session.

    An explicit format maps straight to its merger. `AUTO` sniffs the first
    non-empty chunk once; the decision is cached and never revisited, even if
    later chunks look different.
    """

    format: OutputFormat
    json_validator: JsonValidator | None = None
    _detection: FormatDetection | None = field(default=None, init=False)
    _merger: BaseMerger | None = field(default=None, init=False)

    @property
    def detection(self) -> FormatDetection | None:
        return self._detection

    @property
    def resolved(self) -> bool:
        return self._merger is not None

    def select(self, chunks: Sequence[Chunk], /) -> BaseMerger:
        if self._merger is not None:
            return self._merger

        if self.format is not OutputFormat.AUTO:
            self._detection = FormatDetection(format=self.format, confidence=1.0)
            self._merger = merger_for(self.format, json_validator=self.json_validator)
            return self._merger

        first = next((chunk for chunk in chunks if not chunk.is_blank), None)
        if first is None:
            # Nothing to sniff yet; do not cache so a later call can decide.
            return GenericMerger()

        self._detection = detect_format(first.raw_content)
        self._merger = merger_for(self._detection.format, json_validator=self.json_validator)
        return self._merger
