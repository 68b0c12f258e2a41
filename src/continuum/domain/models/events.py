from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from continuum.domain.models.usage import TokenUsage
from continuum.domain.types import ProgressPhase, Severity, TerminationKind, Verdict


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    """Structured event handed to progress callbacks after each state transition."""

    phase: ProgressPhase
    session_id: str
    attempt_number: int
    termination_kind: TerminationKind | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "session_id": self.session_id,
            "attempt_number": self.attempt_number,
            "termination_kind": self.termination_kind.value if self.termination_kind else None,
        }


@dataclass(slots=True, frozen=True)
class AttemptRecord:
    """One classified provider response, as seen by the logger."""

    session_id: str
    attempt_number: int
    termination: TerminationKind
    verdict: Verdict
    usage: TokenUsage
    content_length: int
    continuation_handle: str | None = None
    finish_reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "attempt_number": self.attempt_number,
            "termination": self.termination.value,
            "verdict": self.verdict.value,
            "usage": self.usage.to_dict(),
            "content_length": self.content_length,
            "continuation_handle": self.continuation_handle,
            "finish_reason": self.finish_reason,
        }


@dataclass(slots=True, frozen=True)
class Notice:
    """Severity-tagged message about something notable inside a session."""

    severity: Severity
    message: str
    session_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "session_id": self.session_id,
        }
