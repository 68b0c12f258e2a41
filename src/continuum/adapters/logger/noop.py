from __future__ import annotations

from continuum.adapters.base import BaseLoggerAdapter
from continuum.domain.models import AttemptRecord, Notice, SessionMetadata


class NoopLoggerAdapter(BaseLoggerAdapter):
    """Logger that discards everything."""

    __slots__ = ()

    def log_attempt(self, record: AttemptRecord, /) -> None:
        return None

    def log_notice(self, notice: Notice, /) -> None:
        return None

    def log_metadata(self, metadata: SessionMetadata, /) -> None:
        return None
