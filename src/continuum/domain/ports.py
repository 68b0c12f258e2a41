from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from continuum.domain.models import (
        AttemptRecord,
        Chunk,
        Notice,
        ProgressEvent,
        ProviderResponse,
        SessionMetadata,
    )
    from continuum.domain.types import InitialRequest


class RequestCallbackPort(Protocol):
    """
    Port for issuing one model request.

    Called with the caller's initial request on the first attempt and with the
    prior response's continuation handle afterwards. Must be safe to call again
    with the same arguments after a transient failure.
    """

    def __call__(
        self, request: InitialRequest, continuation_handle: str | None, /
    ) -> ProviderResponse: ...


class ProgressCallbackPort(Protocol):
    """Port for observing session state transitions."""

    def __call__(self, event: ProgressEvent, /) -> None: ...


@runtime_checkable
class MergerPort(Protocol):
    """Port for combining ordered chunks into one payload."""

    @property
    def name(self) -> str: ...

    def merge(self, chunks: list[Chunk], /) -> str: ...


class LoggerPort(Protocol):
    """Port for capturing attempts, notices and final session metadata."""

    def log_attempt(self, record: AttemptRecord, /) -> None: ...

    def log_notice(self, notice: Notice, /) -> None: ...

    def log_metadata(self, metadata: SessionMetadata, /) -> None: ...


class CostTablePort(Protocol):
    """Port for pricing token counts for a model."""

    def estimate_cost(self, model: str | None, input_tokens: int, output_tokens: int, /) -> float: ...


class RetryPolicyPort(Protocol):
    """Port deciding whether (and when) a failed request is retried."""

    @property
    def max_retries(self) -> int: ...

    def is_retryable(self, exc: BaseException, /) -> bool: ...

    def delay_for(self, retry_number: int, /) -> float: ...


class SleeperPort(Protocol):
    """Port for blocking waits (injectable so tests never sleep)."""

    def sleep(self, seconds: float, /) -> None: ...


class IdGeneratorPort(Protocol):
    """Port for generating session IDs (injectable for deterministic tests)."""

    def new_id(self) -> str: ...
