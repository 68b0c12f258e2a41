from __future__ import annotations

import secrets
from dataclasses import dataclass, field

from continuum.domain.errors import ProviderError

# Matched by type name so provider SDKs stay optional imports.
_RETRYABLE_PROVIDER_ERROR_NAMES: frozenset[str] = frozenset(
    {
        "APIConnectionError",
        "APITimeoutError",
        "InternalServerError",
        "RateLimitError",
        "ServiceUnavailableError",
        "OverloadedError",
    }
)

_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """
    Backoff settings for transient request-callback failures.

    `max_attempts` counts retries after the first call, so the default of 3
    means at most four calls for one session attempt.
    """

    max_attempts: int = 3
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 4.0
    jitter_seconds: float = 0.25

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ValueError("RetryConfig.max_attempts must be an int")
        if self.max_attempts < 0:
            raise ValueError("RetryConfig.max_attempts must be >= 0")
        if self.base_delay_seconds < 0:
            raise ValueError("RetryConfig.base_delay_seconds must be >= 0")
        if self.max_delay_seconds < 0:
            raise ValueError("RetryConfig.max_delay_seconds must be >= 0")
        if self.jitter_seconds < 0:
            raise ValueError("RetryConfig.jitter_seconds must be >= 0")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> RetryConfig:
        defaults = cls()
        return cls(
            max_attempts=data.get("max_attempts", defaults.max_attempts),  # type: ignore[arg-type]
            base_delay_seconds=float(data.get("base_delay_seconds", defaults.base_delay_seconds)),  # type: ignore[arg-type]
            max_delay_seconds=float(data.get("max_delay_seconds", defaults.max_delay_seconds)),  # type: ignore[arg-type]
            jitter_seconds=float(data.get("jitter_seconds", defaults.jitter_seconds)),  # type: ignore[arg-type]
        )


def is_retryable_error(exc: BaseException, /) -> bool:
    if isinstance(exc, ProviderError):
        # The caller classified it; status codes only inform foreign exceptions.
        return exc.transient
    if isinstance(exc, (TimeoutError, ConnectionError)):
        return True
    if type(exc).__name__ in _RETRYABLE_PROVIDER_ERROR_NAMES:
        return True
    status = getattr(exc, "status_code", None)
    return isinstance(status, int) and status in _RETRYABLE_STATUS_CODES


def compute_retry_delay(config: RetryConfig, attempt: int, /) -> float:
    backoff = config.base_delay_seconds * (2 ** max(attempt - 1, 0))
    delay = min(config.max_delay_seconds, backoff)
    if config.jitter_seconds:
        jitter = secrets.randbits(53) / (1 << 53)
        delay += jitter * config.jitter_seconds
    return delay


@dataclass(frozen=True, slots=True)
class ExponentialBackoffRetryPolicy:
    """`RetryPolicyPort` backed by a `RetryConfig`."""

    config: RetryConfig = field(default_factory=RetryConfig)

    @property
    def max_retries(self) -> int:
        return self.config.max_attempts

    def is_retryable(self, exc: BaseException, /) -> bool:
        return is_retryable_error(exc)

    def delay_for(self, retry_number: int, /) -> float:
        return compute_retry_delay(self.config, retry_number)
