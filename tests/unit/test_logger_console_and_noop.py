from __future__ import annotations

import pytest

from continuum.adapters.logger.console import ConsoleLoggerAdapter
from continuum.adapters.logger.noop import NoopLoggerAdapter
from continuum.domain.models import AttemptRecord, Notice, SessionMetadata, TokenUsage
from continuum.domain.types import SessionStatus, Severity, TerminationKind, Verdict


def _record() -> AttemptRecord:
    return AttemptRecord(
        session_id="sid-1",
        attempt_number=1,
        termination=TerminationKind.LENGTH,
        verdict=Verdict.CONTINUE,
        usage=TokenUsage(3, 7),
        content_length=42,
        continuation_handle="resp_1",
        finish_reason="length",
    )


def _metadata() -> SessionMetadata:
    return SessionMetadata(
        session_id="sid-1",
        status=SessionStatus.MAX_ATTEMPTS_EXCEEDED,
        attempts=2,
        total_input_tokens=3,
        total_output_tokens=7,
        warnings=("max_attempts_exceeded",),
    )


@pytest.mark.unit
def test_console_logger_disabled_is_noop(capsys: pytest.CaptureFixture[str]) -> None:
    logger = ConsoleLoggerAdapter(enabled=False)
    logger.log_attempt(_record())
    logger.log_notice(Notice(Severity.ERROR, "boom", "sid-1"))
    logger.log_metadata(_metadata())
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


@pytest.mark.unit
def test_console_logger_enabled_prints_attempt_and_metadata(
    capsys: pytest.CaptureFixture[str],
) -> None:
    logger = ConsoleLoggerAdapter(enabled=True)
    logger.log_attempt(_record())
    logger.log_metadata(_metadata())
    out = capsys.readouterr().out
    assert "sid=sid-1" in out
    assert "termination=length" in out
    assert "status=max_attempts_exceeded" in out
    assert "warnings=max_attempts_exceeded" in out


@pytest.mark.unit
def test_console_logger_routes_warnings_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    logger = ConsoleLoggerAdapter()
    logger.log_notice(Notice(Severity.INFO, "retrying"))
    logger.log_notice(Notice(Severity.WARNING, "content filtered", "sid-1"))
    captured = capsys.readouterr()
    assert "INFO retrying" in captured.out
    assert "WARNING sid=sid-1 content filtered" in captured.err


@pytest.mark.unit
def test_noop_logger_accepts_calls() -> None:
    logger = NoopLoggerAdapter()
    logger.log_attempt(_record())
    logger.log_notice(Notice(Severity.INFO, "x"))
    logger.log_metadata(_metadata())


@pytest.mark.unit
def test_console_logger_validates_enabled_flag_type() -> None:
    with pytest.raises(ValueError, match="enabled"):
        ConsoleLoggerAdapter(enabled="yes")  # type: ignore[arg-type]
