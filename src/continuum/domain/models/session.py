from __future__ import annotations

from dataclasses import dataclass, field

from continuum.domain.errors import ConfigurationError
from continuum.domain.models.chunk import Chunk
from continuum.domain.types import FailurePolicy, OutputFormat, SessionStatus

MAX_ATTEMPTS_CEILING = 50


def validate_max_attempts(value: object, /) -> int:
    # bool is an int subclass; `True` is not a meaningful attempt count.
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(f"max_attempts must be a positive integer (got {value!r})")
    if value > MAX_ATTEMPTS_CEILING:
        raise ConfigurationError(
            f"max_attempts cannot exceed {MAX_ATTEMPTS_CEILING} (got {value})"
        )
    return value


def coerce_output_format(value: object, /) -> OutputFormat:
    if isinstance(value, OutputFormat):
        return value
    try:
        return OutputFormat(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Invalid output_format: {value}. Expected one of "
            f"{', '.join(f.value for f in OutputFormat)}"
        ) from None


def coerce_failure_policy(value: object, /) -> FailurePolicy:
    if isinstance(value, FailurePolicy):
        return value
    try:
        return FailurePolicy(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Invalid on_failure mode: {value}. Expected one of "
            f"{', '.join(p.value for p in FailurePolicy)}"
        ) from None


@dataclass(slots=True)
class ContinuationSession:
    """
    Mutable state for one logical multi-request exchange.

    Owned by a single orchestrator run and discarded when the run returns.
    `chunks` is append-only and `status` can leave RUNNING exactly once.
    """

    session_id: str
    format: OutputFormat
    max_attempts: int
    on_failure_policy: FailurePolicy
    attempts_made: int = 0
    chunks: list[Chunk] = field(default_factory=list)
    status: SessionStatus = SessionStatus.RUNNING

    def __post_init__(self) -> None:
        self.max_attempts = validate_max_attempts(self.max_attempts)
        self.format = coerce_output_format(self.format)
        self.on_failure_policy = coerce_failure_policy(self.on_failure_policy)

    @property
    def at_ceiling(self) -> bool:
        return self.attempts_made >= self.max_attempts

    @property
    def last_chunk(self) -> Chunk | None:
        return self.chunks[-1] if self.chunks else None

    def record_chunk(self, chunk: Chunk, /) -> None:
        if self.status.is_terminal:
            raise RuntimeError(f"Session {self.session_id} is already {self.status}")
        if self.attempts_made >= self.max_attempts:
            raise RuntimeError("attempts_made would exceed max_attempts")
        if chunk.sequence_index != len(self.chunks):
            raise ValueError(
                f"Chunk sequence_index {chunk.sequence_index} does not match position "
                f"{len(self.chunks)}"
            )
        self.attempts_made += 1
        self.chunks.append(chunk)

    def finish(self, status: SessionStatus, /) -> None:
        if not status.is_terminal:
            raise ValueError("finish() requires a terminal status")
        if self.status.is_terminal:
            raise RuntimeError(
                f"Session {self.session_id} already finished as {self.status}; "
                f"cannot transition to {status}"
            )
        self.status = status
