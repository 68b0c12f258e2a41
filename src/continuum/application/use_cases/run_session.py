from __future__ import annotations

from dataclasses import dataclass

from continuum.domain.errors import ConfigurationError
from continuum.domain.models import MergeResult
from continuum.domain.ports import (
    CostTablePort,
    IdGeneratorPort,
    LoggerPort,
    RequestCallbackPort,
    RetryPolicyPort,
    SleeperPort,
)
from continuum.domain.services.mergers import JsonValidator
from continuum.domain.services.orchestrator import ContinuationOrchestrator
from continuum.domain.services.progress import ProgressCallbackRegistry
from continuum.domain.types import FailurePolicy, InitialRequest, OutputFormat


@dataclass(frozen=True, slots=True)
class RunSessionDeps:
    """
    Collaborators for one continuation session.

    Everything except `request_callback` is optional; the API layer fills in
    production defaults (backoff policy, real sleeper, UUID session IDs).
    """

    request_callback: RequestCallbackPort
    logger: LoggerPort | None = None
    progress: ProgressCallbackRegistry | None = None
    cost_table: CostTablePort | None = None
    retry_policy: RetryPolicyPort | None = None
    sleeper: SleeperPort | None = None
    id_generator: IdGeneratorPort | None = None
    json_validator: JsonValidator | None = None


@dataclass(frozen=True, slots=True)
class RunSessionRequest:
    initial_request: InitialRequest
    format: OutputFormat | str = OutputFormat.AUTO
    max_attempts: int = 10
    on_failure_policy: FailurePolicy | str = FailurePolicy.RETURN_PARTIAL


def run_continuation_session(request: RunSessionRequest, *, deps: RunSessionDeps) -> MergeResult:
    """
    Use case: drive one session through the domain orchestrator.

    Raises `ConfigurationError` for invalid parameters (before any request) and
    `MergeError` only under the `raise_error` policy; every other outcome is
    reported on the returned `MergeResult`.
    """
    if not callable(deps.request_callback):
        raise ConfigurationError("request_callback must be callable")

    orch = ContinuationOrchestrator(
        request_callback=deps.request_callback,
        logger=deps.logger,
        cost_table=deps.cost_table,
        retry_policy=deps.retry_policy,
        sleeper=deps.sleeper,
        id_generator=deps.id_generator,
        progress=deps.progress,
        json_validator=deps.json_validator,
    )
    return orch.run(
        request.initial_request,
        format=request.format,
        max_attempts=request.max_attempts,
        on_failure_policy=request.on_failure_policy,
    )
