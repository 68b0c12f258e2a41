from __future__ import annotations

from typing import Any

from continuum.adapters.llm.retry import ExponentialBackoffRetryPolicy
from continuum.adapters.system import TimeSleeper, UuidIdGenerator
from continuum.api.registries import json_validator_from_schema
from continuum.application.use_cases import (
    RunSessionDeps,
    RunSessionRequest,
    run_continuation_session,
)
from continuum.domain.errors import ConfigurationError
from continuum.domain.models import MergeResult
from continuum.domain.ports import (
    CostTablePort,
    IdGeneratorPort,
    LoggerPort,
    ProgressCallbackPort,
    RequestCallbackPort,
    RetryPolicyPort,
    SleeperPort,
)
from continuum.domain.services.progress import ProgressCallbackRegistry
from continuum.domain.types import FailurePolicy, InitialRequest, OutputFormat

_UNSET: Any = object()


def run_session(
    initial_request: InitialRequest,
    format: OutputFormat | str = OutputFormat.AUTO,  # noqa: A002 - public vocabulary
    max_attempts: int = 10,
    on_failure_policy: FailurePolicy | str = FailurePolicy.RETURN_PARTIAL,
    request_callback: RequestCallbackPort | None = None,
    progress_callback: ProgressCallbackPort | None = None,
    *,
    logger: LoggerPort | None = None,
    progress_registry: ProgressCallbackRegistry | None = None,
    cost_table: CostTablePort | None = None,
    retry_policy: RetryPolicyPort | None = _UNSET,
    sleeper: SleeperPort | None = None,
    id_generator: IdGeneratorPort | None = None,
    json_schema: Any = None,
) -> MergeResult:
    """
    Run one continuation session and return the merged result.

    `request_callback(request, continuation_handle)` is called with the initial
    request and `None` first, then with the previous chunk's handle while the
    provider keeps truncating on length.

    `progress_callback` is added on top of `progress_registry` for this session
    only. The registry is read at every event, so callbacks registered on it
    while the session runs still fire. Transient request failures are retried with
    exponential backoff unless `retry_policy=None` is passed explicitly.

    Raises:
        ConfigurationError: invalid `format`, `max_attempts`, `on_failure_policy`
            or a missing callback; raised before any request is issued.
        MergeError: only with `on_failure_policy="raise_error"`.
    """
    if request_callback is None:
        raise ConfigurationError("run_session requires a request_callback")

    registry = progress_registry if progress_registry is not None else ProgressCallbackRegistry()
    if progress_callback is not None:
        registry = registry.combined_with(progress_callback)

    deps = RunSessionDeps(
        request_callback=request_callback,
        logger=logger,
        progress=registry,
        cost_table=cost_table,
        retry_policy=ExponentialBackoffRetryPolicy() if retry_policy is _UNSET else retry_policy,
        sleeper=sleeper or TimeSleeper(),
        id_generator=id_generator or UuidIdGenerator(),
        json_validator=json_validator_from_schema(json_schema),
    )
    req = RunSessionRequest(
        initial_request=initial_request,
        format=format,
        max_attempts=max_attempts,
        on_failure_policy=on_failure_policy,
    )
    return run_continuation_session(req, deps=deps)
