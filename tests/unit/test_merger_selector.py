from __future__ import annotations

import pytest

from continuum.domain.services.mergers import CsvMerger, GenericMerger, JsonMerger, MarkdownMerger
from continuum.domain.services.selector import MergerSelector, merger_for
from continuum.domain.types import OutputFormat
from tests.fakes_ports import chunks_of


@pytest.mark.unit
@pytest.mark.parametrize(
    ("fmt", "merger_type"),
    [
        (OutputFormat.CSV, CsvMerger),
        (OutputFormat.MARKDOWN, MarkdownMerger),
        (OutputFormat.JSON, JsonMerger),
        (OutputFormat.AUTO, GenericMerger),
        (None, GenericMerger),
    ],
)
def test_merger_for_maps_each_format(fmt: OutputFormat | None, merger_type: type) -> None:
    assert isinstance(merger_for(fmt), merger_type)


@pytest.mark.unit
def test_explicit_format_skips_sniffing() -> None:
    selector = MergerSelector(format=OutputFormat.CSV)
    merger = selector.select(chunks_of('{"looks": "like json"}'))
    assert isinstance(merger, CsvMerger)
    assert selector.detection is not None
    assert selector.detection.confidence == 1.0


@pytest.mark.unit
def test_auto_sniffs_first_non_empty_chunk_once() -> None:
    selector = MergerSelector(format=OutputFormat.AUTO)
    chunks = chunks_of("", "a,b\n1,2\n", "# heading\n")
    first = selector.select(chunks)
    assert isinstance(first, CsvMerger)
    assert selector.resolved

    # Later chunks never change the decision.
    again = selector.select(chunks_of("# heading only\n"))
    assert again is first


@pytest.mark.unit
def test_auto_with_only_blank_chunks_falls_back_to_generic_without_caching() -> None:
    selector = MergerSelector(format=OutputFormat.AUTO)
    assert isinstance(selector.select(chunks_of("  ", "")), GenericMerger)
    assert not selector.resolved
    assert isinstance(selector.select(chunks_of("[1, 2]")), JsonMerger)


@pytest.mark.unit
def test_auto_unknown_content_uses_generic_merger() -> None:
    selector = MergerSelector(format=OutputFormat.AUTO)
    assert isinstance(selector.select(chunks_of("just some words")), GenericMerger)
    assert selector.detection is not None
    assert selector.detection.is_unknown
