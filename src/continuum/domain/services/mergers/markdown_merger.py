"""
Markdown continuation merging.

Continuations are concatenated as-is; repairs only remove duplication the
model introduced when it resumed:

- an open fenced code block is concatenated through untouched,
- an open table does not get its header/separator pair a second time,
- an ordered list split at the boundary and restarted at 1 is renumbered,
- a heading the continuation repeats verbatim is dropped.

A document that still ends inside a code fence raises `MergeError`.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from continuum.domain.errors import MergeError
from continuum.domain.models.chunk import Chunk
from continuum.domain.services.mergers.base import BaseMerger, ordered_contents
from continuum.domain.types import MergeStrategy, OutputFormat

_FENCE = re.compile(r"^\s{0,3}```")
_TABLE_LINE = re.compile(r"^\s*\|")
_TABLE_SEPARATOR = re.compile(r"^\s*\|?\s*:?-{3,}:?\s*(\|\s*:?-{3,}:?\s*)*\|?\s*$")
_ORDERED_ITEM = re.compile(r"^(?P<indent>\s*)(?P<number>\d+)(?P<marker>[.)])(?P<rest>\s.*|)$")
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+\S")


def fence_is_open(text: str, /) -> bool:
    fences = sum(1 for line in text.splitlines() if _FENCE.match(line))
    return fences % 2 == 1


def _normalize_row(line: str) -> str:
    return re.sub(r"\s+", "", line)


def _last_nonblank_line(text: str) -> str | None:
    for line in reversed(text.splitlines()):
        if line.strip():
            return line
    return None


def _open_table_header(merged: str) -> tuple[str, str] | None:
    """Header/separator pair of the table the text currently ends inside, if any."""
    if merged.endswith("\n\n"):
        return None
    lines = merged.rstrip("\n").split("\n")
    if not lines or not _TABLE_LINE.match(lines[-1]):
        return None
    start = len(lines) - 1
    while start > 0 and _TABLE_LINE.match(lines[start - 1]):
        start -= 1
    block = lines[start:]
    if len(block) >= 2 and _TABLE_SEPARATOR.match(block[1]):
        return block[0], block[1]
    return None


def _drop_leading_lines(lines: list[str], count: int) -> list[str]:
    """Drop the first `count` non-blank lines along with any blank lines before them."""
    out = list(lines)
    dropped = 0
    while out and dropped < count:
        if out[0].strip():
            dropped += 1
        out.pop(0)
    return out


def _leading_newline(text: str) -> str | None:
    for newline in ("\r\n", "\n"):
        if text.startswith(newline):
            return newline
    return None


def _first_nonblank(lines: list[str]) -> int | None:
    for idx, line in enumerate(lines):
        if line.strip():
            return idx
    return None


class MarkdownMerger(BaseMerger):
    __slots__ = ()

    format = OutputFormat.MARKDOWN
    strategy = MergeStrategy.MARKDOWN

    def merge(self, chunks: Sequence[Chunk], /) -> str:
        contents = ordered_contents(chunks)
        merged = ""
        for text in contents:
            if not text:
                continue
            merged = self._append(merged, text)

        if fence_is_open(merged):
            raise MergeError(
                "Markdown ends inside an unclosed code fence",
                format=OutputFormat.MARKDOWN.value,
                chunk_count=len(contents),
                payload=merged,
            )
        return merged

    def _append(self, merged: str, text: str) -> str:
        if not merged.strip():
            return merged + text
        if fence_is_open(merged):
            return merged + text
        if not merged.endswith("\n"):
            # A continuation that opens with a line break resumes at a line
            # boundary; anything else split a line and is resumed verbatim.
            newline = _leading_newline(text)
            if newline is None:
                return merged + text
            merged += newline
            text = text[len(newline) :]

        lines = text.split("\n")

        table_header = _open_table_header(merged)
        if table_header is not None:
            lines = self._dedupe_table_header(lines, table_header)
        else:
            lines = self._renumber_list(merged, lines)

        lines = self._dedupe_heading(merged, lines)
        return merged + "\n".join(lines)

    def _dedupe_table_header(self, lines: list[str], header: tuple[str, str]) -> list[str]:
        nonblank = [line for line in lines if line.strip()][:2]
        if len(nonblank) < 2:
            return lines
        if _normalize_row(nonblank[0]) == _normalize_row(header[0]) and _TABLE_SEPARATOR.match(
            nonblank[1]
        ):
            return _drop_leading_lines(lines, 2)
        return lines

    def _renumber_list(self, merged: str, lines: list[str]) -> list[str]:
        last = _last_nonblank_line(merged)
        if last is None:
            return lines
        prev = _ORDERED_ITEM.match(last)
        first_idx = _first_nonblank(lines)
        if prev is None or first_idx is None:
            return lines
        head = _ORDERED_ITEM.match(lines[first_idx])
        if head is None or head.group("indent") != prev.group("indent"):
            return lines
        if int(head.group("number")) != 1:
            return lines

        offset = int(prev.group("number"))
        indent = prev.group("indent")
        out = list(lines)
        for idx in range(first_idx, len(out)):
            line = out[idx]
            if not line.strip():
                continue
            item = _ORDERED_ITEM.match(line)
            if item is not None and item.group("indent") == indent:
                number = int(item.group("number")) + offset
                out[idx] = f"{indent}{number}{item.group('marker')}{item.group('rest')}"
                continue
            # Nested content stays with the list; anything at or left of the
            # list's indentation ends it.
            line_indent = len(line) - len(line.lstrip())
            if line_indent <= len(indent):
                break
        return out

    def _dedupe_heading(self, merged: str, lines: list[str]) -> list[str]:
        first_idx = _first_nonblank(lines)
        if first_idx is None or not _HEADING.match(lines[first_idx]):
            return lines
        heading = lines[first_idx].strip()
        existing = {line.strip() for line in merged.splitlines() if _HEADING.match(line)}
        if heading not in existing:
            return lines
        return _drop_leading_lines(lines, 1)

    def boundary_marker(self, merged_so_far: str, /) -> str:
        return f"line:{len(merged_so_far.splitlines())}"
