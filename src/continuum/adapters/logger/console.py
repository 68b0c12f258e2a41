from __future__ import annotations

import sys

from continuum.adapters.base import BaseLoggerAdapter
from continuum.domain.models import AttemptRecord, Notice, SessionMetadata
from continuum.domain.types import Severity


class ConsoleLoggerAdapter(BaseLoggerAdapter):
    """
    Minimal print-based logger.

    Attempts and metadata go to stdout; warning and error notices go to stderr
    so they stay visible when stdout is piped.
    """

    __slots__ = ("_enabled",)

    def __init__(self, *, enabled: bool = True) -> None:
        if not isinstance(enabled, bool):
            raise ValueError("ConsoleLoggerAdapter requires 'enabled' to be a bool")
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log_attempt(self, record: AttemptRecord, /) -> None:
        if not self._enabled:
            return
        print(
            "[continuum] "
            f"sid={record.session_id} "
            f"attempt={record.attempt_number} "
            f"termination={record.termination.value} "
            f"verdict={record.verdict.value} "
            f"tokens={record.usage.total_tokens} "
            f"chars={record.content_length}"
        )

    def log_notice(self, notice: Notice, /) -> None:
        if not self._enabled:
            return
        stream = sys.stdout if notice.severity is Severity.INFO else sys.stderr
        prefix = f"sid={notice.session_id} " if notice.session_id else ""
        print(
            f"[continuum] {notice.severity.value.upper()} {prefix}{notice.message}",
            file=stream,
        )

    def log_metadata(self, metadata: SessionMetadata, /) -> None:
        if not self._enabled:
            return
        print(
            "[continuum] done "
            f"sid={metadata.session_id} "
            f"status={metadata.status.value} "
            f"attempts={metadata.attempts} "
            f"tokens={metadata.total_tokens} "
            f"cost={metadata.estimated_cost:.6f} "
            f"strategy={metadata.merge_strategy_used.value}"
        )
        if metadata.warnings:
            print(f"[continuum] warnings={','.join(metadata.warnings)}")
