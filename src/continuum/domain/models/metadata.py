from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from continuum.domain.models.chunk import Chunk
from continuum.domain.types import MergeStrategy, OutputFormat, SessionStatus, TerminationKind

WARNING_MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"
WARNING_FALLBACK_USED = "fallback_used"
WARNING_MISSING_CONTINUATION_HANDLE = "missing_continuation_handle"


@dataclass(slots=True, frozen=True)
class SessionMetadata:
    """Snapshot of a session's running totals, attached to every MergeResult."""

    session_id: str
    status: SessionStatus = SessionStatus.RUNNING
    attempts: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost: float = 0.0
    termination_history: tuple[TerminationKind, ...] = ()
    merge_strategy_used: MergeStrategy = MergeStrategy.NONE
    truncation_points: tuple[str, ...] = ()
    continuation_handles: tuple[str | None, ...] = ()
    format_detected: OutputFormat | None = None
    format_confidence: float | None = None
    warnings: tuple[str, ...] = ()
    retries: int = 0

    @property
    def total_tokens(self) -> int:
        return self.total_input_tokens + self.total_output_tokens

    @property
    def max_attempts_exceeded(self) -> bool:
        return WARNING_MAX_ATTEMPTS_EXCEEDED in self.warnings

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "status": self.status.value,
            "attempts": self.attempts,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "estimated_cost": self.estimated_cost,
            "termination_history": [kind.value for kind in self.termination_history],
            "merge_strategy_used": self.merge_strategy_used.value,
            "truncation_points": list(self.truncation_points),
            "continuation_handles": list(self.continuation_handles),
            "format_detected": self.format_detected.value if self.format_detected else None,
            "format_confidence": self.format_confidence,
            "warnings": list(self.warnings),
            "retries": self.retries,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SessionMetadata:
        fmt = data.get("format_detected")
        confidence = data.get("format_confidence")
        return cls(
            session_id=str(data.get("session_id", "")),
            status=SessionStatus(data.get("status", SessionStatus.RUNNING)),
            attempts=int(data.get("attempts", 0)),
            total_input_tokens=int(data.get("total_input_tokens", 0)),
            total_output_tokens=int(data.get("total_output_tokens", 0)),
            estimated_cost=float(data.get("estimated_cost", 0.0)),
            termination_history=tuple(
                TerminationKind(k) for k in data.get("termination_history", []) or []
            ),
            merge_strategy_used=MergeStrategy(data.get("merge_strategy_used", MergeStrategy.NONE)),
            truncation_points=tuple(str(p) for p in data.get("truncation_points", []) or []),
            continuation_handles=tuple(data.get("continuation_handles", []) or []),
            format_detected=OutputFormat(fmt) if fmt else None,
            format_confidence=float(confidence) if confidence is not None else None,
            warnings=tuple(str(w) for w in data.get("warnings", []) or []),
            retries=int(data.get("retries", 0)),
        )


@dataclass(slots=True)
class SessionMetadataAccumulator:
    """
    Append-only running totals for one session.

    The orchestrator feeds it as chunks arrive; `snapshot()` clones the current
    state into an immutable `SessionMetadata`.
    """

    session_id: str
    attempts: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    estimated_cost: float = 0.0
    retries: int = 0
    termination_history: list[TerminationKind] = field(default_factory=list)
    truncation_points: list[str] = field(default_factory=list)
    continuation_handles: list[str | None] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    merge_strategy_used: MergeStrategy = MergeStrategy.NONE
    format_detected: OutputFormat | None = None
    format_confidence: float | None = None

    def add_chunk(self, chunk: Chunk, *, cost: float = 0.0) -> None:
        self.attempts += 1
        self.total_input_tokens += chunk.usage.input_tokens
        self.total_output_tokens += chunk.usage.output_tokens
        self.estimated_cost += cost
        self.termination_history.append(chunk.termination)
        self.continuation_handles.append(chunk.continuation_handle)

    def add_truncation_point(self, marker: str, /) -> None:
        self.truncation_points.append(marker)

    def add_retry(self) -> None:
        self.retries += 1

    def warn(self, warning: str, /) -> None:
        if warning not in self.warnings:
            self.warnings.append(warning)

    def snapshot(self, status: SessionStatus) -> SessionMetadata:
        return SessionMetadata(
            session_id=self.session_id,
            status=status,
            attempts=self.attempts,
            total_input_tokens=self.total_input_tokens,
            total_output_tokens=self.total_output_tokens,
            estimated_cost=self.estimated_cost,
            termination_history=tuple(self.termination_history),
            merge_strategy_used=self.merge_strategy_used,
            truncation_points=tuple(self.truncation_points),
            continuation_handles=tuple(self.continuation_handles),
            format_detected=self.format_detected,
            format_confidence=self.format_confidence,
            warnings=tuple(self.warnings),
            retries=self.retries,
        )
