from __future__ import annotations

from abc import ABC, abstractmethod

from continuum.domain.models import AttemptRecord, Notice, SessionMetadata
from continuum.domain.ports import LoggerPort


class BaseLoggerAdapter(LoggerPort, ABC):
    """Nominal base for logger adapters (structural typing still applies)."""

    __slots__ = ()

    @abstractmethod
    def log_attempt(self, record: AttemptRecord, /) -> None: ...

    @abstractmethod
    def log_notice(self, notice: Notice, /) -> None: ...

    @abstractmethod
    def log_metadata(self, metadata: SessionMetadata, /) -> None: ...
