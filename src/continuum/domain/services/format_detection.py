"""
Cheap structural sniffing of model output.

Checks run in a fixed priority order (JSON, CSV, Markdown) and stop at the
first match; anything else is reported as unknown and merged generically.
Confidence is a rough score in [0, 1] for diagnostics, not a threshold.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from continuum.domain.types import OutputFormat

_FENCE_OPEN = re.compile(r"^\s*```[A-Za-z0-9_-]*[ \t]*\n")
_HEADING = re.compile(r"^\s{0,3}#{1,6}\s+\S")
_TABLE_ROW = re.compile(r"^\s*\|.*\|?\s*$")
_MARKDOWN_EXTRAS = (
    re.compile(r"^\s*```"),
    re.compile(r"^\s*(?:[-*+]|\d+\.)\s+\S"),
    re.compile(r"\*\*[^*]+\*\*|__[^_]+__"),
    re.compile(r"^\s*>\s?"),
)


@dataclass(slots=True, frozen=True)
class FormatDetection:
    format: OutputFormat | None
    confidence: float

    @property
    def is_unknown(self) -> bool:
        return self.format is None


def strip_code_fence(text: str, /) -> str:
    """Remove one wrapping ```lang ... ``` fence if the text starts with one."""
    match = _FENCE_OPEN.match(text)
    if match is None:
        return text
    body = text[match.end() :]
    stripped = body.rstrip()
    if stripped.endswith("```"):
        stripped = stripped[:-3]
        return stripped.rstrip("\n")
    return body


def detect_format(text: str | None, /) -> FormatDetection:
    if text is None or not text.strip():
        return FormatDetection(format=None, confidence=0.0)

    candidate = strip_code_fence(text.strip()).strip()

    if candidate[:1] in {"{", "["}:
        try:
            json.loads(candidate)
        except ValueError:
            return FormatDetection(format=OutputFormat.JSON, confidence=0.6)
        return FormatDetection(format=OutputFormat.JSON, confidence=0.95)

    lines = [line for line in candidate.splitlines() if line.strip()]
    first = lines[0]

    if "," in first and "|" not in first:
        return FormatDetection(format=OutputFormat.CSV, confidence=_csv_confidence(lines))

    if any(_TABLE_ROW.match(line) or _HEADING.match(line) for line in lines):
        extras = sum(1 for pattern in _MARKDOWN_EXTRAS if any(pattern.search(ln) for ln in lines))
        return FormatDetection(
            format=OutputFormat.MARKDOWN, confidence=min(0.5 + 0.1 * extras, 0.9)
        )

    return FormatDetection(format=None, confidence=0.2)


def _csv_confidence(lines: list[str]) -> float:
    expected = lines[0].count(",")
    matching = sum(1 for line in lines if line.count(",") == expected)
    return round(0.55 + 0.4 * (matching / len(lines)), 3)
