from __future__ import annotations

from continuum.domain.services.mergers.base import BaseMerger
from continuum.domain.services.mergers.csv_merger import CsvMerger
from continuum.domain.services.mergers.generic_merger import GenericMerger
from continuum.domain.services.mergers.json_merger import JsonMerger, JsonValidator
from continuum.domain.services.mergers.json_repair import repair_json
from continuum.domain.services.mergers.markdown_merger import MarkdownMerger

__all__ = [
    "BaseMerger",
    "CsvMerger",
    "GenericMerger",
    "JsonMerger",
    "JsonValidator",
    "MarkdownMerger",
    "repair_json",
]
