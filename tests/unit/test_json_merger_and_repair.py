from __future__ import annotations

import json

import pytest

from continuum.domain.errors import MergeError
from continuum.domain.services.mergers import JsonMerger, repair_json
from tests.fakes_ports import chunks_of

DOCUMENT = {
    "items": [
        {"name": "Acme", "city": "Boston", "revenue": 100, "active": True},
        {"name": "Globex", "city": "Reno", "revenue": 50.5, "active": False},
    ],
    "next": None,
}


@pytest.mark.unit
def test_json_merger_parses_concatenation_when_cut_on_a_boundary() -> None:
    text = json.dumps(DOCUMENT)
    a, b = len(text) // 3, 2 * len(text) // 3
    merged = JsonMerger().merge(chunks_of(text[:a], text[a:b], text[b:]))
    assert json.loads(merged) == DOCUMENT


_SMALL_DOCUMENT = {"rows": [{"id": 1, "tag": "a, \"b\""}, {"ok": True, "v": None, "n": -2.5}]}


@pytest.mark.unit
def test_json_merger_reassembles_every_three_chunk_split() -> None:
    text = json.dumps(_SMALL_DOCUMENT)
    merger = JsonMerger()
    for a in range(1, len(text) - 1):
        for b in range(a + 1, len(text)):
            merged = merger.merge(chunks_of(text[:a], text[a:b], text[b:]))
            assert merged == text, (a, b)
            assert json.loads(merged) == _SMALL_DOCUMENT


@pytest.mark.unit
@pytest.mark.parametrize(
    ("broken", "expected"),
    [
        ('{"a": [1, 2', {"a": [1, 2]}),
        ('{"name": "Ac', {"name": "Ac"}),
        ('{"a": tr', {"a": True}),
        ('{"a": nu', {"a": None}),
        ('{"a": 1,', {"a": 1}),
        ('{"a": 1.', {"a": 1}),
        ('{"a"', {"a": None}),
        ('{"a":', {"a": None}),
        ('{"a": -', {"a": None}),
        ("[1, 2,]", [1, 2]),
        ('{"a": 1,}', {"a": 1}),
        ('[{"k": "v"}, {"k": "w', [{"k": "v"}, {"k": "w"}]),
        ('{"s": "line\nbreak"}', {"s": "line\nbreak"}),
        ('{"s": "tab\\', {"s": "tab"}),
        ('{"s": "\\u00', {"s": ""}),
    ],
)
def test_repair_json_closes_truncated_documents(broken: str, expected: object) -> None:
    assert json.loads(repair_json(broken)) == expected


@pytest.mark.unit
def test_repair_json_leaves_valid_prefix_untouched() -> None:
    broken = '{"a": {"b": [1, {"c": "x"'
    repaired = repair_json(broken)
    assert repaired.startswith(broken)
    assert json.loads(repaired) == {"a": {"b": [1, {"c": "x"}]}}


@pytest.mark.unit
def test_json_merger_repairs_truncated_document_split_across_chunks() -> None:
    text = json.dumps(DOCUMENT)
    cut = text.index("Reno") + 2
    merged = JsonMerger().merge(chunks_of(text[:10], text[10:cut]))
    value = json.loads(merged)
    assert value["items"][0] == DOCUMENT["items"][0]
    assert value["items"][1]["city"] == "Re"


@pytest.mark.unit
def test_json_merger_strips_markdown_fence() -> None:
    merged = JsonMerger().merge(chunks_of('```json\n{"ok": ', "true}\n```"))
    assert json.loads(merged) == {"ok": True}


@pytest.mark.unit
def test_json_merger_raises_with_payload_when_repair_fails() -> None:
    with pytest.raises(MergeError, match="invalid after repair") as exc_info:
        JsonMerger().merge(chunks_of('{"a": 1} trailing garbage'))
    assert exc_info.value.payload == '{"a": 1} trailing garbage'


@pytest.mark.unit
def test_json_merger_raises_on_empty_content() -> None:
    with pytest.raises(MergeError, match="No JSON content"):
        JsonMerger().merge(chunks_of("", "  "))


@pytest.mark.unit
def test_json_merger_runs_validator_and_wraps_its_rejection() -> None:
    seen: list[object] = []

    def require_items(value: object) -> object:
        seen.append(value)
        if not isinstance(value, dict) or "items" not in value:
            raise ValueError("missing items")
        return value

    merger = JsonMerger(validator=require_items)
    assert json.loads(merger.merge(chunks_of('{"items": []}'))) == {"items": []}

    with pytest.raises(MergeError, match="schema validation.*missing items") as exc_info:
        merger.merge(chunks_of('{"other": 1}'))
    assert isinstance(exc_info.value.original, ValueError)
    assert len(seen) == 2
