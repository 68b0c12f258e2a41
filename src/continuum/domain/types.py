"""
Closed vocabularies shared across the domain layer.

Every enum is a `StrEnum` so values serialize as plain strings in structured
records and JSONL logs without a custom encoder.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class OutputFormat(StrEnum):
    CSV = "csv"
    MARKDOWN = "markdown"
    JSON = "json"
    AUTO = "auto"


class FailurePolicy(StrEnum):
    RETURN_PARTIAL = "return_partial"
    RAISE_ERROR = "raise_error"


class SessionStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL_FAILURE = "partial_failure"
    MAX_ATTEMPTS_EXCEEDED = "max_attempts_exceeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.RUNNING


class TerminationKind(StrEnum):
    LENGTH = "length"
    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    INCOMPLETE = "incomplete"
    API_ERROR = "api_error"
    UNSPECIFIED = "unspecified"


class Verdict(StrEnum):
    CONTINUE = "continue"
    STOP = "stop"
    ABORT = "abort"


class MergeStrategy(StrEnum):
    """Which merger (or fallback tier) produced the final payload."""

    NONE = "none"
    CSV = "csv"
    MARKDOWN = "markdown"
    JSON = "json"
    GENERIC = "generic"
    FALLBACK_FIRST_CHUNK = "fallback_first_chunk"
    FALLBACK_GENERIC_ALL = "fallback_generic_all"
    FALLBACK_GENERIC_FIRST = "fallback_generic_first"


class ProgressPhase(StrEnum):
    START = "start"
    ATTEMPT = "attempt"
    MERGE = "merge"
    END = "end"


class Severity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# The request object is owned by the caller; the engine only hands it back to
# the request callback on the first attempt.
InitialRequest = Any
