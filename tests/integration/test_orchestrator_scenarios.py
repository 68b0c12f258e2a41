from __future__ import annotations

import json

import pytest

from continuum.adapters.cost.static import StaticCostTable
from continuum.domain.errors import ConfigurationError, MergeError
from continuum.domain.models.metadata import (
    WARNING_FALLBACK_USED,
    WARNING_MAX_ATTEMPTS_EXCEEDED,
    WARNING_MISSING_CONTINUATION_HANDLE,
)
from continuum.domain.services.orchestrator import ContinuationOrchestrator
from continuum.domain.services.progress import ProgressCallbackRegistry
from continuum.domain.types import (
    MergeStrategy,
    OutputFormat,
    SessionStatus,
    Severity,
    TerminationKind,
)
from tests.fakes_ports import (
    CollectingLogger,
    CollectingProgress,
    ScriptedProvider,
    SequenceIdGenerator,
    response,
)


def _orchestrator(
    provider: ScriptedProvider, **kwargs: object
) -> tuple[ContinuationOrchestrator, CollectingLogger, CollectingProgress]:
    logger = CollectingLogger()
    progress = CollectingProgress()
    orch = ContinuationOrchestrator(
        request_callback=provider,
        logger=logger,
        progress=ProgressCallbackRegistry([progress]),
        id_generator=SequenceIdGenerator(),
        **kwargs,  # type: ignore[arg-type]
    )
    return orch, logger, progress


@pytest.mark.integration
def test_csv_happy_path_splices_split_row_and_passes_handles() -> None:
    provider = ScriptedProvider(
        [
            response("name,city\nAcme,Boston", "length", handle="h1", input_tokens=10, output_tokens=8),
            response(",100\nGlobex,Reno,50", "stop", handle="h2", input_tokens=12, output_tokens=6),
        ]
    )
    orch, logger, progress = _orchestrator(provider)

    result = orch.run("make csv", format="csv", max_attempts=5)

    assert result.succeeded
    assert result.error is None
    lines = result.payload.splitlines()
    assert lines == ["name,city", "Acme,Boston,100", "Globex,Reno,50"]
    assert provider.calls == [("make csv", None), ("make csv", "h1")]

    md = result.metadata
    assert md.session_id == "sess-1"
    assert md.status is SessionStatus.COMPLETED
    assert md.attempts == 2
    assert md.total_tokens == 36
    assert md.termination_history == (TerminationKind.LENGTH, TerminationKind.STOP)
    assert md.merge_strategy_used is MergeStrategy.CSV
    assert md.truncation_points == ("row:1",)
    assert md.continuation_handles == ("h1", "h2")
    assert md.format_detected is OutputFormat.CSV
    assert md.format_confidence == 1.0

    assert progress.phases == ["start", "attempt", "attempt", "merge", "end"]
    assert [e.attempt_number for e in progress.events] == [0, 1, 2, 2, 2]
    assert [a.attempt_number for a in logger.attempts] == [1, 2]
    assert logger.metadata == [md]


@pytest.mark.integration
def test_max_attempts_reached_still_merges_with_warning() -> None:
    provider = ScriptedProvider(
        [
            response("alpha ", "length", handle="h1"),
            response("beta", "length", handle="h2"),
        ]
    )
    orch, logger, _ = _orchestrator(provider)

    result = orch.run("go", format="auto", max_attempts=2)

    assert result.succeeded
    assert result.payload == "alpha beta"
    assert result.status is SessionStatus.MAX_ATTEMPTS_EXCEEDED
    assert result.metadata.attempts == 2
    assert result.metadata.max_attempts_exceeded
    assert WARNING_MAX_ATTEMPTS_EXCEEDED in result.metadata.warnings
    assert provider.remaining == 0
    assert any("max_attempts=2" in n.message for n in logger.notices_at(Severity.WARNING))


@pytest.mark.integration
def test_single_attempt_that_stops_never_continues() -> None:
    provider = ScriptedProvider([response('{"a": 1}', "stop")])
    orch, _, _ = _orchestrator(provider)

    result = orch.run("q", max_attempts=1)

    assert result.succeeded
    assert result.status is SessionStatus.COMPLETED
    assert result.metadata.format_detected is OutputFormat.JSON
    assert result.metadata.merge_strategy_used is MergeStrategy.JSON
    assert len(provider.calls) == 1


@pytest.mark.integration
@pytest.mark.parametrize("reason", ["content_filter", "incomplete"])
def test_filter_and_incomplete_stop_keep_handle_and_log_warning(reason: str) -> None:
    provider = ScriptedProvider([response("partial text", reason, handle="resp_9")])
    orch, logger, _ = _orchestrator(provider)

    result = orch.run("q", max_attempts=5)

    assert result.succeeded
    assert result.status is SessionStatus.COMPLETED
    assert result.metadata.continuation_handles == ("resp_9",)
    assert len(provider.calls) == 1
    assert len(logger.notices_at(Severity.WARNING)) == 1


@pytest.mark.integration
def test_error_finish_reason_aborts_without_merge() -> None:
    provider = ScriptedProvider(
        [response("a,b\n1,", "length", handle="h1"), response("", "error")]
    )
    orch, logger, progress = _orchestrator(provider)

    result = orch.run("q", format="csv", max_attempts=5)

    assert not result.succeeded
    assert result.payload == ""
    assert result.status is SessionStatus.FAILED
    assert result.error is not None
    assert result.error.kind == "provider_error"
    assert result.metadata.attempts == 2
    assert result.metadata.merge_strategy_used is MergeStrategy.NONE
    assert "merge" not in progress.phases
    assert logger.notices_at(Severity.ERROR)


@pytest.mark.integration
def test_merge_failure_under_return_partial_uses_first_fallback_tier() -> None:
    provider = ScriptedProvider(
        [
            response("a,b\n1,2\n", "length", handle="h1"),
            response("3,4,5\n", "stop"),
        ]
    )
    orch, logger, _ = _orchestrator(provider)

    result = orch.run("q", format="csv", max_attempts=3)

    assert not result.succeeded
    assert result.payload == "a,b\n1,2\n"
    assert result.status is SessionStatus.PARTIAL_FAILURE
    assert result.metadata.merge_strategy_used is MergeStrategy.FALLBACK_FIRST_CHUNK
    assert WARNING_FALLBACK_USED in result.metadata.warnings
    assert result.error is not None
    assert result.error.kind == "merge_error"
    assert "format=csv" in result.error.message
    assert "chunks=2" in result.error.message
    assert "column count" in result.error.message
    assert logger.notices_at(Severity.WARNING)


@pytest.mark.integration
def test_fallback_payload_is_non_empty_when_any_chunk_has_content() -> None:
    provider = ScriptedProvider(
        [
            response("", "length", handle="h1"),
            response("```\nunclosed", "stop"),
        ]
    )
    orch, _, _ = _orchestrator(provider)

    result = orch.run("q", format="markdown", max_attempts=3)

    assert not result.succeeded
    assert result.payload.strip()
    assert result.metadata.merge_strategy_used is MergeStrategy.FALLBACK_GENERIC_ALL


@pytest.mark.integration
def test_merge_failure_under_raise_error_propagates_with_context() -> None:
    provider = ScriptedProvider(
        [
            response("[1, 2] [3]", "stop"),
        ]
    )
    orch, logger, progress = _orchestrator(provider)

    with pytest.raises(MergeError, match=r"format=json chunks=1: JSON still invalid") as exc_info:
        orch.run("q", format="json", max_attempts=2, on_failure_policy="raise_error")

    assert exc_info.value.payload == "[1, 2] [3]"
    assert exc_info.value.format == "json"
    assert exc_info.value.chunk_count == 1
    assert logger.metadata[-1].status is SessionStatus.FAILED
    assert progress.phases[-1] == "end"


@pytest.mark.integration
def test_invalid_configuration_fails_before_any_request() -> None:
    provider = ScriptedProvider([response("x")])
    orch, _, progress = _orchestrator(provider)

    with pytest.raises(ConfigurationError, match="Invalid output_format: xml"):
        orch.run("q", format="xml")
    with pytest.raises(ConfigurationError, match="cannot exceed 50"):
        orch.run("q", max_attempts=51)

    assert provider.calls == []
    assert progress.events == []


@pytest.mark.integration
def test_missing_handle_on_continuation_is_warned_and_request_proceeds() -> None:
    provider = ScriptedProvider([response("one ", "length"), response("two", "stop")])
    orch, logger, _ = _orchestrator(provider)

    result = orch.run("q", max_attempts=3)

    assert result.payload == "one two"
    assert provider.calls[1] == ("q", None)
    assert WARNING_MISSING_CONTINUATION_HANDLE in result.metadata.warnings
    assert any("continuation handle" in n.message for n in logger.notices)


@pytest.mark.integration
def test_cost_comes_from_response_or_cost_table() -> None:
    provider = ScriptedProvider(
        [
            response("a", "length", handle="h", model="m", input_tokens=1000, output_tokens=1000),
            response("b", "stop", model="m", input_tokens=0, output_tokens=0, cost=0.5),
        ]
    )
    orch, _, _ = _orchestrator(provider, cost_table=StaticCostTable({"m": (0.01, 0.02)}))

    result = orch.run("q", max_attempts=3)

    assert result.metadata.estimated_cost == pytest.approx(0.03 + 0.5)


@pytest.mark.integration
def test_json_split_across_three_chunks_roundtrips() -> None:
    doc = {"rows": [{"id": i, "label": f"item {i}"} for i in range(10)]}
    text = json.dumps(doc)
    cuts = (len(text) // 3, 2 * len(text) // 3)
    provider = ScriptedProvider(
        [
            response(text[: cuts[0]], "length", handle="h1"),
            response(text[cuts[0] : cuts[1]], "length", handle="h2"),
            response(text[cuts[1] :], "stop"),
        ]
    )
    orch, _, _ = _orchestrator(provider)

    result = orch.run("q", format="json", max_attempts=3)

    assert result.succeeded
    assert json.loads(result.payload) == doc
    assert result.metadata.truncation_points == (f"char:{cuts[0]}", f"char:{cuts[1]}")
