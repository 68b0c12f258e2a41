from __future__ import annotations


class ContinuumError(Exception):
    """Base error for the continuation engine."""


class ConfigurationError(ContinuumError, ValueError):
    """Invalid session configuration. Raised before any request is issued."""


class ValidationError(ContinuumError):
    """A merged payload failed schema validation."""


class ProviderError(ContinuumError):
    """
    Provider-side failure surfaced by a request callback.

    `transient=True` marks rate limits, timeouts and similar conditions that the
    orchestrator retries with backoff before giving up.
    """

    def __init__(
        self, message: str, *, transient: bool = False, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.transient = transient
        self.status_code = status_code


class MergeError(ContinuumError):
    """
    A merger could not produce a structurally valid payload.

    `payload` holds the best-effort merge output when the merger got far enough
    to build one (CSV with inconsistent rows, JSON that stayed invalid after
    repair, and so on).
    """

    def __init__(
        self,
        message: str,
        *,
        format: str | None = None,  # noqa: A002 - mirrors the session field name
        chunk_count: int | None = None,
        payload: str | None = None,
        original: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.format = format
        self.chunk_count = chunk_count
        self.payload = payload
        self.original = original

    @classmethod
    def for_session(cls, error: MergeError, *, format: str, chunk_count: int) -> MergeError:  # noqa: A002
        """Wrap a merger failure with the session context callers need."""
        return cls(
            f"Merge failed for format={format} chunks={chunk_count}: {error}",
            format=format,
            chunk_count=chunk_count,
            payload=error.payload,
            original=error,
        )
