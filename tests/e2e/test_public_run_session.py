from __future__ import annotations

import json

import pytest

import continuum
from continuum import (
    ConfigurationError,
    MergeError,
    ProviderResponse,
    SessionStatus,
    TerminationKind,
    TokenUsage,
)
from continuum.domain.services.progress import ProgressCallbackRegistry
from tests.fakes_ports import (
    CollectingLogger,
    CollectingProgress,
    ScriptedProvider,
    SequenceIdGenerator,
    response,
)


@pytest.mark.e2e
def test_markdown_report_split_mid_table_is_stitched() -> None:
    provider = ScriptedProvider(
        [
            response(
                "# Report\n\n| name | qty |\n|------|-----|\n| bolts | 4 |\n",
                "length",
                handle="c1",
            ),
            response(
                "| name | qty |\n|------|-----|\n| nuts | 9 |\n\n## Notes\n\n1. first\n",
                "length",
                handle="c2",
            ),
            response("1. second\n", "stop"),
        ]
    )
    events: list[str] = []

    result = continuum.run_session(
        "write a report",
        format="markdown",
        max_attempts=5,
        request_callback=provider,
        progress_callback=lambda event: events.append(event.phase.value),
        id_generator=SequenceIdGenerator(prefix="md"),
    )

    assert result.succeeded
    assert result.payload == (
        "# Report\n\n| name | qty |\n|------|-----|\n| bolts | 4 |\n"
        "| nuts | 9 |\n\n## Notes\n\n1. first\n2. second\n"
    )
    assert result.metadata.session_id == "md-1"
    assert result.metadata.termination_history == (
        TerminationKind.LENGTH,
        TerminationKind.LENGTH,
        TerminationKind.STOP,
    )
    assert events[0] == "start"
    assert events[-1] == "end"
    assert events.count("attempt") == 3


@pytest.mark.e2e
def test_auto_detects_json_and_repairs_a_truncated_tail() -> None:
    provider = ScriptedProvider(
        [
            response('{"items": [1, 2', "length", handle="j1"),
            response(", 3", "stop"),
        ]
    )

    result = continuum.run_session("q", request_callback=provider)

    assert result.succeeded
    assert json.loads(result.payload) == {"items": [1, 2, 3]}
    assert result.metadata.format_detected is continuum.OutputFormat.JSON


@pytest.mark.e2e
def test_plain_callback_returning_responses_directly() -> None:
    def callback(request: object, handle: str | None) -> ProviderResponse:
        if handle is None:
            return ProviderResponse(
                content="Hello, ",
                finish_reason="length",
                usage=TokenUsage(input_tokens=3, output_tokens=2),
                continuation_handle="t1",
            )
        return ProviderResponse(content="world.", finish_reason="stop")

    result = continuum.run_session("greet", request_callback=callback, retry_policy=None)

    assert result.payload == "Hello, world."
    assert result.metadata.total_tokens == 5
    assert result.metadata.to_dict()["status"] == "completed"


@pytest.mark.e2e
def test_configuration_errors_surface_before_any_request() -> None:
    provider = ScriptedProvider([response("x")])

    with pytest.raises(ConfigurationError):
        continuum.run_session("q", format="yaml", request_callback=provider)
    with pytest.raises(ConfigurationError):
        continuum.run_session("q", max_attempts=0, request_callback=provider)
    with pytest.raises(ConfigurationError):
        continuum.run_session("q", on_failure_policy="explode", request_callback=provider)
    with pytest.raises(ConfigurationError, match="request_callback"):
        continuum.run_session("q")

    assert provider.calls == []


@pytest.mark.e2e
def test_raise_error_policy_surfaces_merge_error_to_caller() -> None:
    logger = CollectingLogger()
    provider = ScriptedProvider([response('"a","b"\n"1","2', "stop")])

    with pytest.raises(MergeError) as exc_info:
        continuum.run_session(
            "q",
            format="csv",
            on_failure_policy="raise_error",
            request_callback=provider,
            logger=logger,
        )

    assert exc_info.value.format == "csv"
    assert "unterminated quoted field" in str(exc_info.value)
    assert logger.metadata[-1].status is SessionStatus.FAILED


@pytest.mark.e2e
def test_callbacks_registered_on_shared_registry_mid_session_still_fire() -> None:
    registry = ProgressCallbackRegistry()
    late = CollectingProgress()
    own: list[str] = []
    provider = ScriptedProvider([response("a ", "length", handle="h1"), response("b", "stop")])

    def callback(request: object, handle: str | None) -> ProviderResponse:
        if handle is None:
            registry.register(late)
        return provider(request, handle)

    result = continuum.run_session(
        "q",
        request_callback=callback,
        progress_callback=lambda event: own.append(event.phase.value),
        progress_registry=registry,
    )

    assert result.payload == "a b"
    assert late.phases == ["attempt", "attempt", "merge", "end"]
    assert own == ["start", "attempt", "attempt", "merge", "end"]
    assert registry.snapshot() == (late,)
