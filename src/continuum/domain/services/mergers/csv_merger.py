"""
CSV continuation merging.

Models resume exactly where they were cut off, so the default join is plain
concatenation. Two boundary repairs sit on top of that:

1. A chunk that ends inside a quoted field is spliced onto the next chunk with
   no separator (the continuation resumes mid-field).
2. A continuation that restarts with the header line of the first chunk has
   that line dropped, so the header appears once.

The merged text is then re-parsed with the stdlib `csv` reader. Data rows with
different column counts, or a quoted field left open at the very end, raise
`MergeError` with the merged text attached as best-effort payload.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

from continuum.domain.errors import MergeError
from continuum.domain.models.chunk import Chunk
from continuum.domain.services.mergers.base import BaseMerger, ordered_contents
from continuum.domain.types import MergeStrategy, OutputFormat

_FALLBACK_DELIMITERS = (";", "\t")


def count_unescaped_quotes(text: str, /) -> int:
    # RFC 4180 escapes a quote by doubling it, which leaves parity unchanged.
    return text.count('"')


def ends_inside_quotes(text: str, /) -> bool:
    return count_unescaped_quotes(text) % 2 == 1


def has_incomplete_row(text: str, /) -> bool:
    """True when the text stops inside a quoted field or without a final newline."""
    if not text:
        return False
    return ends_inside_quotes(text) or not text.endswith(("\n", "\r"))


def _first_line(text: str) -> tuple[str, str]:
    line, sep, rest = text.partition("\n")
    return line.rstrip("\r"), rest if sep else ""


def _delimiter_for(header: str) -> str:
    if "," in header:
        return ","
    for candidate in _FALLBACK_DELIMITERS:
        if candidate in header:
            return candidate
    return ","


class CsvMerger(BaseMerger):
    __slots__ = ()

    format = OutputFormat.CSV
    strategy = MergeStrategy.CSV

    def merge(self, chunks: Sequence[Chunk], /) -> str:
        contents = ordered_contents(chunks)
        merged = self.join(contents)
        self.validate(merged, chunk_count=len(contents))
        return merged

    def join(self, contents: Sequence[str], /) -> str:
        header: str | None = None
        merged = ""
        in_quotes = False

        for text in contents:
            if not text:
                continue
            if header is None:
                if not text.strip():
                    merged += text
                    continue
                header, _ = _first_line(text.lstrip("\r\n"))
                merged += text
                in_quotes = ends_inside_quotes(merged)
                continue

            if in_quotes:
                merged += text
                in_quotes = ends_inside_quotes(merged)
                continue

            first, rest = _first_line(text.lstrip("\r\n"))
            if header and first == header:
                if merged and not merged.endswith("\n"):
                    merged += "\n"
                text = rest
            elif merged.endswith("\n"):
                text = text.lstrip("\r\n")

            merged += text
            in_quotes = ends_inside_quotes(merged)

        return merged

    def validate(self, merged: str, /, *, chunk_count: int | None = None) -> None:
        if ends_inside_quotes(merged):
            raise MergeError(
                "CSV ends inside an unterminated quoted field",
                format=OutputFormat.CSV.value,
                chunk_count=chunk_count,
                payload=merged,
            )

        rows = self.parse(merged)
        if len(rows) < 2:
            return
        expected = len(rows[1])
        for line_number, row in enumerate(rows[2:], start=3):
            if len(row) != expected:
                raise MergeError(
                    f"Inconsistent CSV column count: row {line_number} has {len(row)} "
                    f"columns, expected {expected}",
                    format=OutputFormat.CSV.value,
                    chunk_count=chunk_count,
                    payload=merged,
                )

    def parse(self, merged: str, /) -> list[list[str]]:
        header, _ = _first_line(merged.lstrip("\r\n"))
        reader = csv.reader(io.StringIO(merged), delimiter=_delimiter_for(header))
        try:
            return [row for row in reader if row]
        except csv.Error as exc:
            raise MergeError(
                f"CSV parse failed: {exc}",
                format=OutputFormat.CSV.value,
                payload=merged,
                original=exc,
            ) from exc

    def boundary_marker(self, merged_so_far: str, /) -> str:
        lines = [line for line in merged_so_far.splitlines() if line.strip()]
        return f"row:{max(len(lines) - 1, 0)}"
